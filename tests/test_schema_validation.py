from __future__ import annotations

import json

import pytest

from tripletriad.engine.types import RuleConfig
from tripletriad.paths import get_paths
from tripletriad.services.content import ContentError, ContentService, rules_from_mapping


def _content() -> ContentService:
    paths = get_paths()
    return ContentService(paths.data_dir, paths.schema_dir)


def test_content_schemas_validate() -> None:
    _content().validate_all()


def test_catalog_covers_every_level() -> None:
    cards = _content().load_cards_db()
    for level in range(1, 11):
        assert len(cards.by_level(level)) >= 5
    for card in cards.cards.values():
        assert len(card.stats) == 4
        assert all(1 <= s <= 10 for s in card.stats)


def test_default_rules_preset() -> None:
    rules = _content().load_rules()
    assert rules == RuleConfig()


def test_rules_from_mapping_rejects_unknown_difficulty() -> None:
    schema = _content().rules_schema()
    with pytest.raises(ContentError):
        rules_from_mapping({"cpu_difficulty": "NIGHTMARE"}, schema)


def test_rules_from_mapping_rejects_unknown_key() -> None:
    schema = _content().rules_schema()
    with pytest.raises(ContentError):
        rules_from_mapping({"sudden_death": True}, schema)


def test_rules_from_mapping_partial() -> None:
    schema = _content().rules_schema()
    rules = rules_from_mapping({"same_enabled": True, "cpu_difficulty": "EXPERT"}, schema)
    assert rules.same_enabled
    assert rules.cpu_difficulty == "EXPERT"
    assert rules.elemental_enabled


def test_invalid_card_file_reports_path(tmp_path) -> None:
    paths = get_paths()
    (tmp_path / "cards.json").write_text(
        json.dumps({"cards": [{"id": 1, "level": 11, "name": "x", "stats": [1, 1, 1], "attr": None, "img": ""}]}),
        encoding="utf-8",
    )
    content = ContentService(tmp_path, paths.schema_dir)
    with pytest.raises(ContentError) as exc:
        content.load_cards_db()
    assert "cards.json" in str(exc.value)


def test_missing_rules_file(tmp_path) -> None:
    with pytest.raises(ContentError):
        _content().load_rules(tmp_path / "nope.json")


def test_catalog_must_cover_two_hands(tmp_path) -> None:
    paths = get_paths()
    small = [
        {"id": i, "level": 1, "name": f"c{i}", "stats": [1, 1, 1, 1], "attr": None, "img": ""}
        for i in range(1, 10)
    ]
    (tmp_path / "cards.json").write_text(json.dumps({"cards": small}), encoding="utf-8")
    with pytest.raises(ContentError):
        ContentService(tmp_path, paths.schema_dir).load_cards_db()
