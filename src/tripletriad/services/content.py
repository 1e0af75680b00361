from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from tripletriad.engine.types import (
    ELEMENTS,
    CardDatabase,
    CardDefinition,
    RuleConfig,
    Stats,
    validate_rules,
)

MAX_REPORTED_ERRORS = 10


class ContentError(RuntimeError):
    pass


def _read(path: Path) -> object:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ContentError(f"Content file not found: {path}") from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ContentError(f"{path} is not valid JSON: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    """Raise ContentError listing the first schema violations in ``instance``."""
    problems = sorted(
        Draft202012Validator(schema).iter_errors(instance),
        key=lambda err: [str(p) for p in err.absolute_path],
    )
    if not problems:
        return
    report = [f"{context} does not match its schema:"]
    for err in problems[:MAX_REPORTED_ERRORS]:
        where = "/".join(str(p) for p in err.absolute_path) or "<root>"
        report.append(f"- {where}: {err.message}")
    raise ContentError("\n".join(report))


def _field(item: Mapping[str, object], key: str, kind: type) -> object:
    value = item.get(key)
    # bool is an int subclass; a level of ``true`` is still wrong
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ContentError(f"Card field {key!r} must be {kind.__name__}, got {value!r}")
    return value


def _parse_stats(raw: object) -> Stats:
    if not isinstance(raw, list) or len(raw) != 4 or not all(isinstance(s, int) for s in raw):
        raise ContentError(f"Card stats must be [up, left, right, down] ints, got {raw!r}")
    up, left, right, down = raw
    return (up, left, right, down)


def parse_card(item: Mapping[str, object]) -> CardDefinition:
    element = item.get("attr")
    if element is not None and element not in ELEMENTS:
        raise ContentError(f"Unknown element: {element!r}")
    return CardDefinition(
        id=_field(item, "id", int),  # type: ignore[arg-type]
        level=_field(item, "level", int),  # type: ignore[arg-type]
        name=_field(item, "name", str),  # type: ignore[arg-type]
        stats=_parse_stats(item.get("stats")),
        element=element,  # type: ignore[arg-type]
        img=_field(item, "img", str),  # type: ignore[arg-type]
    )


def rules_from_mapping(raw: Mapping[str, object], schema: object) -> RuleConfig:
    """Build a RuleConfig from menu/preset data; unknown keys are schema errors."""
    validate_json(dict(raw), schema, context="rule config")
    rules = RuleConfig(**raw)  # type: ignore[arg-type]
    try:
        validate_rules(rules)
    except ValueError as e:
        raise ContentError(str(e)) from e
    return rules


class ContentService:
    """Loads the card catalog and rule presets shipped with the package."""

    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def _schema(self, name: str) -> object:
        return _read(self._schema_dir / f"{name}.schema.json")

    def rules_schema(self) -> object:
        return self._schema("rules")

    def load_cards_db(self) -> CardDatabase:
        catalog_path = self._data_dir / "cards.json"
        doc = _read(catalog_path)
        validate_json(doc, self._schema("cards"), context=str(catalog_path))
        assert isinstance(doc, dict)

        by_id: dict[int, CardDefinition] = {}
        for entry in doc["cards"]:
            card = parse_card(entry)
            if card.id in by_id:
                raise ContentError(f"Duplicate card id {card.id} in {catalog_path}")
            by_id[card.id] = card
        return CardDatabase(cards=by_id)

    def load_rules(self, path: Path | None = None) -> RuleConfig:
        """Load a rule preset; defaults to the shipped ``rules.json``."""
        preset_path = path or self._data_dir / "rules.json"
        doc = _read(preset_path)
        if not isinstance(doc, dict):
            raise ContentError(f"{preset_path} must contain a JSON object")
        return rules_from_mapping(doc, self.rules_schema())

    def validate_all(self) -> None:
        self.load_cards_db()
        self.load_rules()
