import pytest

from models import CardTypeRequirement, DeckContext


@pytest.fixture
def two_type_context():
    return DeckContext(
        deck_size=40,
        types=(
            CardTypeRequirement(count=17, required=2, by_turn=2, name="Lands"),
            CardTypeRequirement(count=8, required=1, by_turn=3, name="Ramp"),
        ),
        penalty=0.2,
        free_mulligan=False,
        confidence_threshold=0.75,
    )


@pytest.fixture
def state_dict():
    return {
        "deck_size": 60,
        "penalty": 0.2,
        "free_mulligan": True,
        "confidence_threshold": 0.8,
        "sample_count": 25,
        "card_types": [
            {"id": 1, "name": "Lands", "count": 24, "required": 3, "by_turn": 3, "color": "#22c55e"},
            {"id": 2, "name": "Removal", "count": 8, "required": 1, "by_turn": 4, "color": "#3b82f6"},
        ],
    }
