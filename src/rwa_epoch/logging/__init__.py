"""
Logging configuration для RWA Epoch (structlog).
"""

from rwa_epoch.logging.config import (
    configure_logging,
    get_clearing_logger,
    get_epoch_logger,
    get_logger,
    log_epoch_transition,
    stringify_amounts,
)

__all__ = [
    "configure_logging",
    "get_clearing_logger",
    "get_epoch_logger",
    "get_logger",
    "log_epoch_transition",
    "stringify_amounts",
]
