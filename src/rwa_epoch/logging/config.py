"""
Logging — конфигурация structlog для движка клиринга

Все модули получают логгер через get_logger / get_*_logger, чтобы события
(epoch_solution_computed, epoch_transition, ...) имели единый формат.
Движок не конфигурирует логирование сам: configure_logging вызывает
приложение-хост.

Суммы в base units и Ratio в событиях приводятся к строкам процессором
stringify_amounts: JSON-потребители теряют точность на целых больше 2^53.
"""

import logging
import sys
from typing import Any, MutableMapping, Optional

import structlog
from structlog.types import FilteringBoundLogger

from rwa_epoch.core.math.decimal_units import MAX_SAFE_INTEGER
from rwa_epoch.core.math.ratio import Ratio


def stringify_amounts(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """
    structlog processor: Ratio и целые вне ±MAX_SAFE_INTEGER → str.

    Пример: total_invest=10**24 → "1000000000000000000000000",
    score=Ratio(4000) → "0.4".
    """
    for key, value in list(event_dict.items()):
        if isinstance(value, Ratio):
            event_dict[key] = str(value)
        elif isinstance(value, int) and not isinstance(value, bool):
            if abs(value) > MAX_SAFE_INTEGER:
                event_dict[key] = str(value)
    return event_dict


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    extra_processors: Optional[list] = None,
) -> None:
    """
    Конфигурация structlog поверх stdlib logging.

    Args:
        level: уровень (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: JSON вывод вместо console renderer
        include_timestamp: ISO timestamp в каждом событии
        extra_processors: дополнительные processors (перед renderer)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        stream=sys.stdout,
        format="%(message)s",
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        stringify_amounts,
        structlog.processors.format_exc_info,
    ]
    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    processors.extend(extra_processors or [])

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """Логгер structlog по имени модуля."""
    return structlog.get_logger(name)


def get_clearing_logger(name: str) -> FilteringBoundLogger:
    """Логгер вычисления и валидации решения эпохи."""
    return get_logger(name).bind(subsystem="clearing")


def get_epoch_logger(name: str) -> FilteringBoundLogger:
    """Логгер жизненного цикла эпохи (state machine)."""
    return get_logger(name).bind(subsystem="epoch_lifecycle", audit_trail=True)


def log_epoch_transition(
    logger: FilteringBoundLogger,
    pool_id: str,
    epoch_id: int,
    from_state: str,
    to_state: str,
    reason: str,
    context: Optional[dict[str, Any]] = None,
) -> None:
    """
    Событие epoch_transition в стандартном формате.

    Отказ в переходе (from_state == to_state) логируется как debug.
    """
    bound = logger.bind(
        pool_id=pool_id,
        epoch_id=epoch_id,
        from_state=from_state,
        to_state=to_state,
        reason=reason,
    )
    if context:
        bound = bound.bind(context=context)

    if from_state == to_state:
        bound.debug("epoch_transition_refused")
    else:
        bound.info("epoch_transition")
