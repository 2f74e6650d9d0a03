import pytest

from cache import ResultCache
from models import CardTypeRequirement, DeckContext, MarginalBenefit, StrategyResult
from strategy import (
    average_mulligans, calculate, calculate_no_mulligan_success, enumerate_hands,
    expected_kept_cards, mull_strat_multi_type, mulligan_breakdown, optimize_strategy,
    penalty_factor, tuning_advice,
)


def test_hand_probabilities_sum_to_one(two_type_context):
    entries = enumerate_hands(two_type_context.deck_size, two_type_context.types)
    assert sum(e.hand_prob for e in entries) == pytest.approx(1.0, abs=1e-6)
    assert all(sum(e.counts) <= 7 for e in entries)


def test_empty_inputs_give_degenerate_result():
    assert enumerate_hands(0, (CardTypeRequirement(10, 1, 2),)) == []
    assert enumerate_hands(40, ()) == []
    result = mull_strat_multi_type(DeckContext(40, ()))
    assert result.expected_success == 0
    assert result.step_stats == []
    assert result.strategy == []


def test_penalty_factor():
    assert penalty_factor(0, False) == 0
    assert penalty_factor(0, True) == 0
    assert penalty_factor(1, True) == 0
    assert penalty_factor(3, False) == 3
    assert penalty_factor(3, True) == 2


def test_raising_threshold_never_increases_keep(two_type_context):
    base = mull_strat_multi_type(two_type_context)
    keep_probs = [
        optimize_strategy(two_type_context.with_threshold(t), base.strategy).keep_prob
        for t in (0.0, 0.25, 0.5, 0.75, 0.9, 1.0)
    ]
    assert keep_probs == sorted(keep_probs, reverse=True)


def test_penalty_never_helps(two_type_context):
    result = calculate(two_type_context)
    assert result.unpenalized_success >= result.expected_success


def test_keep_everything_matches_baseline(two_type_context):
    context = two_type_context.with_threshold(0.0)
    result = mull_strat_multi_type(context)
    assert all(e.keep for e in result.strategy)
    assert result.expected_success == pytest.approx(calculate_no_mulligan_success(result.strategy))


def test_mulligan_improves_on_baseline():
    context = DeckContext(40, (CardTypeRequirement(17, 2, 2, "Lands"),), penalty=0.1, confidence_threshold=0.5)
    result = calculate(context)
    assert result.expected_success >= result.baseline_success


def test_deterministic(two_type_context):
    assert calculate(two_type_context) == calculate(two_type_context)


def test_step_statistics(two_type_context):
    result = mull_strat_multi_type(two_type_context)
    assert len(result.step_stats) == 7
    assert result.keep_prob == result.step_stats[0].keep_prob
    assert result.best_keep_prob <= 1.0
    for stats in result.step_stats:
        assert 0.0 <= stats.keep_prob <= 1.0 + 1e-9
        assert stats.success_if_kept >= 0.0


def test_unreachable_threshold_keeps_nothing(two_type_context):
    context = two_type_context.with_threshold(1.01)
    result = mull_strat_multi_type(context)
    assert result.keep_prob == 0
    assert result.expected_success_on_keep == 0
    assert result.expected_success == 0


def test_average_mulligans():
    assert average_mulligans(0.8) == pytest.approx(0.25)
    assert average_mulligans(1.0) == 0
    assert average_mulligans(0.0) == 0


def test_expected_kept_cards():
    assert expected_kept_cards(1.0, False) == 7
    assert expected_kept_cards(0.5, True) > expected_kept_cards(0.5, False)
    assert expected_kept_cards(0.0, False) == 0


def test_calculate_fills_statistics(two_type_context):
    result = calculate(two_type_context)
    assert len(result.marginal_benefits) == 2
    assert result.baseline_success == pytest.approx(calculate_no_mulligan_success(result.strategy))
    assert result.avg_mulligans >= 0
    assert 0 < result.expected_cards <= 7


def test_calculate_uses_cache(two_type_context):
    cache = ResultCache(4)
    first = calculate(two_type_context, cache)
    assert calculate(two_type_context, cache) is first
    assert cache.hits == 1
    assert calculate(two_type_context.with_penalty(0.3), cache) is not first
    assert len(cache) == 2


def test_breakdown_labels(two_type_context):
    context = DeckContext(
        two_type_context.deck_size, two_type_context.types, penalty=0.2,
        free_mulligan=True, confidence_threshold=0.75,
    )
    result = mull_strat_multi_type(context)
    rows = mulligan_breakdown(result, True, 0.2)
    assert rows[0].label == "Opening hand (7 cards)"
    assert rows[1].label == "Mulligan 1 - Free (see 7, keep 7)"
    assert not rows[1].has_penalty
    if len(rows) > 2:
        assert rows[2].label == "Mulligan 2 (see 7, keep 6)"
        assert rows[2].has_penalty
    assert rows[-1].cumulative_keep <= 1.0 + 1e-9


def test_breakdown_without_free_mulligan(two_type_context):
    result = mull_strat_multi_type(two_type_context)
    rows = mulligan_breakdown(result, False, 0.2)
    assert rows[1].label == "Mulligan 1 (see 7, keep 6)"
    assert rows[0].marginal_keep == pytest.approx(result.keep_prob)


def make_result(expected_success):
    return StrategyResult([], expected_success, 0.75, 0.0, 0.0, 0.0, [])


@pytest.mark.parametrize("expected, overall, label", [
    (0.8, -0.01, "Cut"),
    (0.95, 0.003, "Cut"),
    (0.8, 0.02, "High Impact"),
    (0.8, 0.01, "Medium Impact"),
    (0.8, 0.002, "Low Impact"),
])
def test_tuning_advice(expected, overall, label):
    assert tuning_advice(make_result(expected), MarginalBenefit(overall, 0.0))[0] == label


def test_marginal_benefits_match_recompute(two_type_context):
    base = mull_strat_multi_type(two_type_context)
    result = calculate(two_type_context)
    for index, card_type in enumerate(two_type_context.types):
        modified = mull_strat_multi_type(two_type_context.with_type_count(index, card_type.count + 1))
        benefit = result.marginal_benefits[index]
        assert benefit.overall == pytest.approx(modified.expected_success - base.expected_success)
        assert benefit.baseline == pytest.approx(
            calculate_no_mulligan_success(modified.strategy) - calculate_no_mulligan_success(base.strategy)
        )


def test_overcommitted_deck_is_degenerate():
    context = DeckContext(20, (CardTypeRequirement(15, 1, 2), CardTypeRequirement(10, 1, 3)))
    assert context.overcommitted
    assert enumerate_hands(context.deck_size, context.types) == []
    result = calculate(context)
    assert result.strategy == []
    assert result.expected_success == 0
    assert result.step_stats == []
    assert result.avg_mulligans == 0
    assert [b.overall for b in result.marginal_benefits] == [0, 0]


def hand_computed_expected_success(context, strategy):
    next_ev = 0.0
    for step in range(6, -1, -1):
        factor = 0 if step == 0 else step - (1 if context.free_mulligan else 0)
        k = (1 - context.penalty) ** factor
        step_ev = 0.0
        for entry in strategy:
            if entry.success_prob * k >= context.confidence_threshold * k:
                step_ev += entry.hand_prob * entry.success_prob * k
            else:
                step_ev += entry.hand_prob * next_ev
        next_ev = step_ev
    return next_ev


@pytest.mark.parametrize("free_mulligan", [False, True])
def test_backward_induction_by_hand(two_type_context, free_mulligan):
    context = DeckContext(
        two_type_context.deck_size, two_type_context.types, penalty=0.2,
        free_mulligan=free_mulligan, confidence_threshold=0.75,
    )
    result = mull_strat_multi_type(context)
    assert result.expected_success == pytest.approx(hand_computed_expected_success(context, result.strategy))
    assert result.step_stats[0].ev == pytest.approx(result.expected_success)
    assert [e.keep for e in result.strategy] == [e.success_prob >= 0.75 for e in result.strategy]


def test_free_mulligan_never_hurts(two_type_context):
    free = DeckContext(
        two_type_context.deck_size, two_type_context.types, penalty=0.2,
        free_mulligan=True, confidence_threshold=0.75,
    )
    paid = mull_strat_multi_type(two_type_context)
    free_result = mull_strat_multi_type(free)
    assert free_result.expected_success >= paid.expected_success
    # First mulligan keeps all seven cards, so its step value is unscaled
    assert free_result.step_stats[1].ev > paid.step_stats[1].ev
