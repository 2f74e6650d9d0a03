import pytest

import loading
from loading import (
    apply_import, categorize_cards, decode_share_code, encode_share_code, get_card_type_category,
    import_decklist, load_state_dict, normalize_card_name, parse_decklist_text,
)

DECKLIST = """Creatures
4 Llanowar Elves
2x Tarmogoyf
// a comment
Lands
20 Forest
Fire // Ice

Sideboard
3 Naturalize
Pithing Needle
"""


class FakeResponse:
    def __init__(self, payload):
        self.payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self.payload


def test_parse_decklist():
    cards, has_sideboard, sideboard_count = parse_decklist_text(DECKLIST)
    assert cards == [(4, "Llanowar Elves"), (2, "Tarmogoyf"), (20, "Forest"), (1, "Fire // Ice")]
    assert has_sideboard
    assert sideboard_count == 4


def test_parse_decklist_skips_bad_counts():
    cards, has_sideboard, _ = parse_decklist_text("0 Forest\n150 Island\n4 Swamp")
    assert cards == [(4, "Swamp")]
    assert not has_sideboard


@pytest.mark.parametrize("text", ["", None, "x\n" * 1001])
def test_parse_decklist_rejects_invalid(text):
    with pytest.raises(ValueError):
        parse_decklist_text(text)


def test_card_type_category():
    assert get_card_type_category("Artifact Creature - Golem") == "creatures"
    assert get_card_type_category("Basic Land - Forest") == "lands"
    assert get_card_type_category("Instant") == "instants"
    assert get_card_type_category("Kindred Sorcery") == "sorceries"
    assert get_card_type_category("Conspiracy") == "artifacts"


def test_normalize_card_name():
    assert normalize_card_name("Fire // Ice ") == "fire"
    assert normalize_card_name("Forest") == "forest"


def test_import_decklist(monkeypatch):
    calls = []

    def fake_post(url, json, timeout):
        calls.append(json)
        return FakeResponse({
            "data": [
                {"name": "Llanowar Elves", "type_line": "Creature - Elf Druid"},
                {"name": "Forest", "type_line": "Basic Land - Forest"},
                {"name": "Fire // Ice", "card_faces": [{"type_line": "Instant"}, {"type_line": "Instant"}]},
            ],
            "not_found": [{"name": "Tarmogoyf"}],
        })

    monkeypatch.setattr(loading, "post", fake_post)
    type_counts, total, not_found = import_decklist(DECKLIST)

    assert len(calls) == 1
    assert {"name": "Fire"} in calls[0]["identifiers"]
    assert type_counts["creatures"] == 4
    assert type_counts["lands"] == 20
    assert type_counts["instants"] == 1
    assert total == 27
    assert not_found == ["Tarmogoyf"]


def test_import_batches_requests(monkeypatch):
    calls = []

    def fake_post(url, json, timeout):
        calls.append(len(json["identifiers"]))
        return FakeResponse({"data": [], "not_found": []})

    monkeypatch.setattr(loading, "post", fake_post)
    import_decklist("\n".join(f"1 Card {i}" for i in range(160)))
    assert calls == [75, 75, 10]


def test_apply_import_inserts_lands(state_dict):
    state_dict["card_types"] = [t for t in state_dict["card_types"] if t["name"] != "Lands"]
    apply_import({"lands": 37}, 100, state_dict)
    assert state_dict["deck_size"] == 100
    assert state_dict["card_types"][0]["name"] == "Lands"
    assert state_dict["card_types"][0]["count"] == 37


def test_apply_import_updates_lands(state_dict):
    apply_import({"lands": 22}, 60, state_dict)
    assert state_dict["card_types"][0]["count"] == 22
    assert len(state_dict["card_types"]) == 2


def test_share_code_round_trip(state_dict):
    decoded = decode_share_code(encode_share_code(state_dict))
    for key in ("deck_size", "penalty", "free_mulligan", "confidence_threshold", "sample_count"):
        assert decoded[key] == state_dict[key]
    assert [(t["name"], t["count"], t["required"], t["by_turn"]) for t in decoded["card_types"]] == [
        ("Lands", 24, 3, 3),
        ("Removal", 8, 1, 4),
    ]


@pytest.mark.parametrize("code", ["not a code!", "e30", ""])
def test_share_code_rejects_garbage(code):
    with pytest.raises(ValueError):
        decode_share_code(code)


def test_share_code_rejects_out_of_bounds(state_dict):
    state_dict["penalty"] = 1.5
    with pytest.raises(ValueError):
        decode_share_code(encode_share_code(state_dict))


def test_load_state_dict(state_dict):
    del state_dict["sample_count"]
    del state_dict["card_types"][0]["color"]
    loaded = load_state_dict(state_dict)
    assert loaded["sample_count"] == 10
    assert loaded["card_types"][0]["color"]


def test_load_state_dict_missing_fields():
    with pytest.raises(ValueError):
        load_state_dict({"deck_size": 60})
    with pytest.raises(ValueError):
        load_state_dict({"deck_size": 60, "card_types": [{"count": 1}]})


def test_load_state_dict_rejects_empty_card_types():
    with pytest.raises(ValueError):
        load_state_dict({"deck_size": 60, "card_types": []})


def test_categorize_parsed_cards(monkeypatch):
    monkeypatch.setattr(loading, "post", lambda url, json, timeout: FakeResponse({
        "data": [{"name": "Forest", "type_line": "Basic Land - Forest"}],
        "not_found": [],
    }))
    type_counts, total, not_found = categorize_cards([(24, "Forest"), (36, "Unknown Card")])
    assert type_counts["lands"] == 24
    assert total == 60
    assert not_found == []
    with pytest.raises(ValueError):
        categorize_cards([])


def test_import_page_parses_once(monkeypatch):
    parses = []
    original_parse = loading.parse_decklist_text

    def counting_parse(text):
        parses.append(text)
        return original_parse(text)

    replies = iter(["20 Forest", "4 Llanowar Elves", "", ""])
    monkeypatch.setattr(loading.console, "input", lambda *args, **kwargs: next(replies))
    monkeypatch.setattr(loading, "parse_decklist_text", counting_parse)
    monkeypatch.setattr(loading, "post", lambda url, json, timeout: FakeResponse({
        "data": [
            {"name": "Forest", "type_line": "Basic Land - Forest"},
            {"name": "Llanowar Elves", "type_line": "Creature - Elf Druid"},
        ],
        "not_found": [],
    }))
    monkeypatch.setitem(loading.state, "deck_size", 99)
    monkeypatch.setitem(loading.state, "card_types", [{"id": 1, "name": "Lands", "count": 39, "required": 3, "by_turn": 3}])

    loading.page_import_decklist()

    assert len(parses) == 1
    assert loading.state["deck_size"] == 24
    assert loading.state["card_types"][0]["count"] == 20
