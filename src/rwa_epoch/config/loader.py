"""Загрузка конфигурации: глобальные defaults + per-pool overrides из pools.yaml."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from rwa_epoch.config.defaults import DefaultConfig, get_default_config
from rwa_epoch.core.domain.epoch import EpochTiming, SolutionConstraints
from rwa_epoch.core.errors import InvalidConstraints


@dataclass(frozen=True)
class ConfigLoader:
    """
    Конфигурация с 3-уровневым приоритетом.

    Priority order:
    1. Явные overrides вызывающей стороны (highest)
    2. Секция пула в pools.yaml
    3. Глобальные defaults (lowest)
    """

    config_dir: Path
    defaults: DefaultConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """
        Args:
            config_dir: каталог с pools.yaml (по умолчанию: pools.yaml,
                поставляемый вместе с пакетом rwa_epoch.config)
        """
        if config_dir is None:
            config_dir = Path(__file__).parent

        return cls(
            config_dir=config_dir,
            defaults=get_default_config(),
        )

    def load_pool_config(self, pool_id: str) -> dict[str, Any]:
        """
        Overrides пула из pools.yaml (пустой dict если файла или секции нет).

        Ключи пулов в YAML могут быть числами (`1:`), поэтому сравниваются строкой.
        """
        pools_file = self.config_dir / "pools.yaml"

        if not pools_file.exists():
            return {}

        with open(pools_file, encoding="utf-8") as f:
            pools_config = yaml.safe_load(f) or {}

        pools = pools_config.get("pools") or {}
        for key, value in pools.items():
            if str(key) == str(pool_id):
                return value or {}
        return {}

    def merge_config(
        self,
        pool_id: str,
        overrides: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        config = self._dataclass_to_dict(self.defaults)
        config = self._deep_merge(config, self.load_pool_config(pool_id))

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def epoch_timing(
        self,
        pool_id: str,
        overrides: Optional[dict[str, Any]] = None,
    ) -> EpochTiming:
        epoch = self.merge_config(pool_id, overrides)["epoch"]
        return EpochTiming(
            min_epoch_duration=epoch["min_epoch_duration"],
            challenge_period=epoch["challenge_period"],
        )

    def solution_constraints(
        self,
        pool_id: str,
        overrides: Optional[dict[str, Any]] = None,
    ) -> SolutionConstraints:
        """
        Raises:
            InvalidConstraints: max_reserve не задан ни в pools.yaml, ни в overrides
        """
        constraints = self.merge_config(pool_id, overrides)["constraints"]
        if constraints.get("max_reserve") is None:
            raise InvalidConstraints(f"max_reserve is not configured for pool {pool_id}")

        return SolutionConstraints(
            max_reserve=constraints["max_reserve"],
            min_subordination_ratio=constraints["min_subordination_ratio"],
            max_nav_decrease=constraints.get("max_nav_decrease"),
        )

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, "__dataclass_fields__"):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, "__dataclass_fields__"):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
