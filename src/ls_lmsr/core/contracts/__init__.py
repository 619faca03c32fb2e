"""
Contract Validation Module

Модуль для валидации JSON контрактов сохраняемого состояния рынка.
"""

from .validators import (
    SCHEMA_DIR,
    SchemaLoader,
    validate_market_event,
    validate_market_snapshot,
)

__all__ = [
    "SCHEMA_DIR",
    "SchemaLoader",
    "validate_market_snapshot",
    "validate_market_event",
]
