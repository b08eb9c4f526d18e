"""
JSON Schema Contract Validators

Валидация payload'ов на границе с внешними коллабораторами (Draft 2020-12)
до построения Pydantic моделей.

Схемы (rwa_epoch/core/contracts/schema/):
- pool_snapshot.json
- order_batch.json
- solution_constraints.json
- epoch_solution.json

Суммы в контрактах: base-10 строки целых (или integer), никогда float.
"""

import json
from pathlib import Path
from typing import Any, Dict

import jsonschema
from jsonschema import Draft202012Validator, ValidationError

from rwa_epoch.core.domain.epoch import EpochSolution, SolutionConstraints
from rwa_epoch.core.domain.order import Order
from rwa_epoch.core.domain.pool import Pool


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов.

    Схемы поставляются внутри пакета (contracts/schema/).
    """

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = schema_dir or Path(__file__).parent / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных схем
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'pool_snapshot')

        Raises:
            FileNotFoundError: Если файл схемы не найден
            ValueError: Если схема не проходит meta-validation
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}") from e

        self._schemas[schema_name] = schema
        return schema


# Глобальный экземпляр загрузчика
_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """
    Базовый класс для валидаторов контрактов.

    Инкапсулирует логику валидации данных против JSON Schema.
    """

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        self.schema = _SCHEMA_LOADER.load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            ValidationError: Если данные не соответствуют схеме
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]):
        """Итератор по всем ошибкам валидации."""
        return self.validator.iter_errors(data)


class PoolSnapshotValidator(ContractValidator):
    def __init__(self):
        super().__init__("pool_snapshot")


class OrderBatchValidator(ContractValidator):
    def __init__(self):
        super().__init__("order_batch")


class SolutionConstraintsValidator(ContractValidator):
    def __init__(self):
        super().__init__("solution_constraints")


class EpochSolutionValidator(ContractValidator):
    def __init__(self):
        super().__init__("epoch_solution")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_pool_snapshot(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    PoolSnapshotValidator().validate(data)


def validate_order_batch(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    OrderBatchValidator().validate(data)


def validate_solution_constraints(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    SolutionConstraintsValidator().validate(data)


def validate_epoch_solution(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    EpochSolutionValidator().validate(data)


# =============================================================================
# PAYLOAD → MODEL
# =============================================================================


def load_pool_snapshot(data: Dict[str, Any]) -> Pool:
    """Проверка контракта pool_snapshot и построение Pool."""
    validate_pool_snapshot(data)
    return Pool.model_validate(data)


def load_order_batch(data: Dict[str, Any]) -> list[Order]:
    """Проверка контракта order_batch и построение ордеров."""
    validate_order_batch(data)
    return [Order.model_validate(order) for order in data["orders"]]


def load_solution_constraints(data: Dict[str, Any]) -> SolutionConstraints:
    """Проверка контракта solution_constraints и построение SolutionConstraints."""
    validate_solution_constraints(data)
    return SolutionConstraints.model_validate(data)


def load_epoch_solution(data: Dict[str, Any]) -> EpochSolution:
    validate_epoch_solution(data)
    return EpochSolution.model_validate(data)


__all__ = [
    "ValidationError",
    "SchemaLoader",
    "ContractValidator",
    "PoolSnapshotValidator",
    "OrderBatchValidator",
    "SolutionConstraintsValidator",
    "EpochSolutionValidator",
    "validate_pool_snapshot",
    "validate_order_batch",
    "validate_solution_constraints",
    "validate_epoch_solution",
    "load_pool_snapshot",
    "load_order_batch",
    "load_solution_constraints",
    "load_epoch_solution",
]
