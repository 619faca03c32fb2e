"""
Контракты сохраняемого состояния рынка (JSON Schema Draft 2020-12)

Схемы поставляются вместе с пакетом (каталог schema/):
- market_snapshot.json — снапшот рынка (параметры, векторы, балансы, скаляры)
- market_event.json — запись события рынка

Схема проверяется meta-схемой при первой загрузке, скомпилированный
валидатор кэшируется. При нарушении поднимается самая релевантная ошибка
(jsonschema.exceptions.best_match), а не первая попавшаяся.
"""

import json
from pathlib import Path
from typing import Any, Dict

import jsonschema
from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match

SCHEMA_DIR = Path(__file__).parent / "schema"


class SchemaLoader:
    """Загрузчик схем из каталога с кэшем схем и валидаторов по имени."""

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = schema_dir or SCHEMA_DIR
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        self._schemas: Dict[str, Dict[str, Any]] = {}
        self._validators: Dict[str, Draft202012Validator] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка схемы по имени без расширения (например, 'market_snapshot').

        Raises:
            FileNotFoundError: Если файл схемы не найден
            ValueError: Если файл не является валидной JSON Schema
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        schema = json.loads(schema_path.read_text(encoding="utf-8"))
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}") from e

        self._schemas[schema_name] = schema
        return schema

    def validator_for(self, schema_name: str) -> Draft202012Validator:
        """Скомпилированный валидатор схемы (создаётся один раз)."""
        validator = self._validators.get(schema_name)
        if validator is None:
            validator = Draft202012Validator(self.load_schema(schema_name))
            self._validators[schema_name] = validator
        return validator

    def check(self, schema_name: str, data: Dict[str, Any]) -> None:
        """
        Raises:
            jsonschema.ValidationError: самая релевантная ошибка валидации
        """
        error = best_match(self.validator_for(schema_name).iter_errors(data))
        if error is not None:
            raise error


_SCHEMA_LOADER = SchemaLoader()


def validate_market_snapshot(data: Dict[str, Any]) -> None:
    """Валидация снапшота рынка (market_snapshot.json)."""
    _SCHEMA_LOADER.check("market_snapshot", data)


def validate_market_event(data: Dict[str, Any]) -> None:
    """Валидация записи события рынка (market_event.json)."""
    _SCHEMA_LOADER.check("market_event", data)
