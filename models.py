from dataclasses import dataclass, field, asdict
from typing import List, Optional, Tuple

HAND_SIZE = 7
MULLIGAN_STEPS = 7


@dataclass(frozen=True)
class CardTypeRequirement:
    """One tracked card category: how many are in the deck and how many are needed by when."""
    count: int
    required: int
    by_turn: int
    name: str = ""
    color: Optional[str] = None
    id: Optional[int] = None

    @classmethod
    def from_dict(cls, data):
        try:
            return cls(
                count=int(data["count"]),
                required=int(data["required"]),
                by_turn=int(data.get("by_turn", data.get("byTurn"))),
                name=str(data.get("name", "")),
                color=data.get("color"),
                id=data.get("id"),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Invalid card type definition {data!r}: {e}") from e

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class DeckContext:
    deck_size: int
    types: Tuple[CardTypeRequirement, ...]
    penalty: float = 0.20
    free_mulligan: bool = False
    confidence_threshold: float = 0.75

    def __post_init__(self):
        # Accept any sequence of types but keep the context hashable.
        object.__setattr__(self, "types", tuple(self.types))

    @classmethod
    def from_state(cls, state):
        try:
            return cls(
                deck_size=int(state["deck_size"] or 0),
                types=tuple(CardTypeRequirement.from_dict(t) for t in state["card_types"]),
                penalty=float(state.get("penalty", 0.20)),
                free_mulligan=bool(state.get("free_mulligan", False)),
                confidence_threshold=float(state.get("confidence_threshold", 0.75)),
            )
        except KeyError as e:
            raise ValueError(f"Deck configuration is missing {e}") from e

    def with_type_count(self, index, count):
        types = tuple(
            CardTypeRequirement(count, t.required, t.by_turn, t.name, t.color, t.id) if i == index else t
            for i, t in enumerate(self.types)
        )
        return DeckContext(self.deck_size, types, self.penalty, self.free_mulligan, self.confidence_threshold)

    def with_penalty(self, penalty):
        return DeckContext(self.deck_size, self.types, penalty, self.free_mulligan, self.confidence_threshold)

    def with_threshold(self, confidence_threshold):
        return DeckContext(self.deck_size, self.types, self.penalty, self.free_mulligan, confidence_threshold)

    @property
    def type_counts(self):
        return [t.count for t in self.types]

    @property
    def overcommitted(self):
        return sum(self.type_counts) > self.deck_size


@dataclass(frozen=True)
class StrategyEntry:
    counts: Tuple[int, ...]
    hand_prob: float
    success_prob: float
    keep: bool = False


@dataclass(frozen=True)
class StepStatistics:
    keep_prob: float
    success_if_kept: float
    ev: float


@dataclass(frozen=True)
class MarginalBenefit:
    overall: float
    baseline: float


@dataclass
class StrategyResult:
    strategy: List[StrategyEntry]
    expected_success: float
    threshold: float
    best_keep_prob: float
    keep_prob: float
    expected_success_on_keep: float
    step_stats: List[StepStatistics]
    avg_mulligans: float = 0.0
    expected_cards: float = 0.0
    baseline_success: float = 0.0
    unpenalized_success: float = 0.0
    marginal_benefits: List[MarginalBenefit] = field(default_factory=list)

    def find_entry(self, counts):
        counts = tuple(counts)
        for entry in self.strategy:
            if entry.counts == counts:
                return entry
        return None


@dataclass(frozen=True)
class BreakdownRow:
    label: str
    marginal_keep: float
    success_if_kept: float
    conditional_keep_prob: float
    cumulative_keep: float
    cumulative_success: float
    has_penalty: bool


@dataclass(frozen=True)
class TurnProbability:
    turn: int
    type_probabilities: Tuple[float, ...]
    combined_prob: float
