import logging
from dataclasses import replace

from rich.table import Table

from models import (
    HAND_SIZE, MULLIGAN_STEPS, BreakdownRow, DeckContext, MarginalBenefit,
    StepStatistics, StrategyEntry, StrategyResult,
)
from probabilities import calc_multi_type_success, multi_type_prob
from utility import *

logger = logging.getLogger(__name__)


def enumerate_hands(deck_size, types):
    """Every reachable opening-hand type profile with its draw and success probabilities."""
    if deck_size <= 0 or not types:
        return []

    type_counts = [t.count for t in types]
    num_types = len(types)
    current = [0] * num_types
    entries = []

    def generate(index, remaining_cards):
        if index == num_types:
            if sum(current) > HAND_SIZE:
                return
            hand_prob = multi_type_prob(deck_size, type_counts, HAND_SIZE, current)
            if hand_prob > 0:
                success_prob = calc_multi_type_success(deck_size, types, current)
                entries.append(StrategyEntry(tuple(current), hand_prob, success_prob))
            return
        for count in range(min(type_counts[index], remaining_cards) + 1):
            current[index] = count
            generate(index + 1, remaining_cards - count)
        current[index] = 0

    generate(0, HAND_SIZE)
    logger.debug("Enumerated %d opening hands for %d types", len(entries), num_types)
    return entries


def penalty_factor(step, free_mulligan):
    if step == 0:
        return 0
    return step - 1 if free_mulligan else step


def optimize_strategy(context, entries):
    """Backward induction over the seven London mulligan attempts.

    At attempt ``i`` every hand's success is scaled by ``(1 - penalty) ** penalty_factor(i)``
    and kept when it clears the equally scaled confidence threshold; otherwise the
    hand is worth whatever attempt ``i + 1`` is worth. The returned entries carry the
    opening-hand decision only.
    """
    if not entries:
        return StrategyResult(
            strategy=[],
            expected_success=0.0,
            threshold=context.confidence_threshold,
            best_keep_prob=0.0,
            keep_prob=0.0,
            expected_success_on_keep=0.0,
            step_stats=[],
        )

    evs = [0.0] * (MULLIGAN_STEPS + 1)
    step_stats = [None] * MULLIGAN_STEPS
    strategy = list(entries)

    for i in range(MULLIGAN_STEPS - 1, -1, -1):
        k = (1 - context.penalty) ** penalty_factor(i, context.free_mulligan)
        decision_threshold = context.confidence_threshold * k
        next_ev = evs[i + 1]

        step_ev = 0.0
        keep_prob = 0.0
        kept_success = 0.0
        for entry in entries:
            hand_success = entry.success_prob * k
            if hand_success >= decision_threshold:
                step_ev += entry.hand_prob * hand_success
                keep_prob += entry.hand_prob
                kept_success += entry.hand_prob * hand_success
            else:
                step_ev += entry.hand_prob * next_ev

        evs[i] = step_ev
        step_stats[i] = StepStatistics(
            keep_prob=keep_prob,
            success_if_kept=kept_success / keep_prob if keep_prob > 0 else 0.0,
            ev=step_ev,
        )

        if i == 0:
            strategy = [replace(e, keep=e.success_prob * k >= decision_threshold) for e in entries]

    return StrategyResult(
        strategy=strategy,
        expected_success=evs[0],
        threshold=context.confidence_threshold,
        best_keep_prob=max(e.success_prob for e in entries),
        keep_prob=step_stats[0].keep_prob,
        expected_success_on_keep=step_stats[0].success_if_kept,
        step_stats=step_stats,
    )


def mull_strat_multi_type(context):
    entries = enumerate_hands(context.deck_size, context.types)
    return optimize_strategy(context, entries)


def average_mulligans(keep_prob):
    # Mulligans until the first keep are geometric in the keep probability.
    return (1 - keep_prob) / keep_prob if keep_prob > 0 else 0.0


def expected_kept_cards(keep_prob, free_mulligan, max_layers=10, tolerance=1e-4):
    expected_cards = 0.0
    accumulated_prob = 0.0
    remaining_prob = 1.0
    for mulligans in range(max_layers):
        keep_here = remaining_prob * keep_prob
        cards = max(0, HAND_SIZE - penalty_factor(mulligans, free_mulligan))
        expected_cards += keep_here * cards
        accumulated_prob += keep_here
        remaining_prob *= 1 - keep_prob
        if remaining_prob < tolerance:
            break
    if accumulated_prob > 0:
        expected_cards /= accumulated_prob
    return expected_cards


def calculate_avg_mulligans(strategy, free_mulligan):
    keep_prob = sum(e.hand_prob for e in strategy if e.keep)
    return average_mulligans(keep_prob), expected_kept_cards(keep_prob, free_mulligan)


def calculate_no_mulligan_success(strategy):
    return sum(e.hand_prob * e.success_prob for e in strategy)


def calculate_marginal_benefits(context, base_result=None):
    """Effect of swapping one "other" card for one more copy of each tracked type."""
    if base_result is None:
        base_result = mull_strat_multi_type(context)
    base_baseline = calculate_no_mulligan_success(base_result.strategy)

    benefits = []
    for index, card_type in enumerate(context.types):
        modified = context.with_type_count(index, card_type.count + 1)
        modified_result = mull_strat_multi_type(modified)
        benefits.append(MarginalBenefit(
            overall=modified_result.expected_success - base_result.expected_success,
            baseline=calculate_no_mulligan_success(modified_result.strategy) - base_baseline,
        ))
        logger.debug("Marginal benefit of +1 %s: %s", card_type.name or index, benefits[-1])
    return benefits


def calculate(context, cache=None):
    if cache is not None:
        cached = cache.get(context)
        if cached is not None:
            logger.debug("Strategy cache hit")
            return cached

    result = mull_strat_multi_type(context)
    result.unpenalized_success = optimize_strategy(context.with_penalty(0), result.strategy).expected_success
    result.avg_mulligans, result.expected_cards = calculate_avg_mulligans(result.strategy, context.free_mulligan)
    result.baseline_success = calculate_no_mulligan_success(result.strategy)
    result.marginal_benefits = calculate_marginal_benefits(context, result)

    if cache is not None:
        cache.set(context, result)
    return result


def mulligan_breakdown(result, free_mulligan, penalty, tolerance=1e-4):
    breakdown = []
    reach_prob = 1.0
    cumulative_keep = 0.0
    cumulative_success = 0.0

    for i, stats in enumerate(result.step_stats):
        factor = penalty_factor(i, free_mulligan)
        cards = max(0, HAND_SIZE - factor)
        marginal_keep = reach_prob * stats.keep_prob
        cumulative_keep += marginal_keep
        cumulative_success += marginal_keep * stats.success_if_kept

        if i == 0:
            label = f"Opening hand ({HAND_SIZE} cards)"
        elif i == 1 and free_mulligan:
            label = f"Mulligan {i} - Free (see {HAND_SIZE}, keep {HAND_SIZE})"
        else:
            label = f"Mulligan {i} (see {HAND_SIZE}, keep {cards})"

        breakdown.append(BreakdownRow(
            label=label,
            marginal_keep=marginal_keep,
            success_if_kept=stats.success_if_kept,
            conditional_keep_prob=stats.keep_prob,
            cumulative_keep=cumulative_keep,
            cumulative_success=cumulative_success,
            has_penalty=factor > 0 and penalty > 0,
        ))

        reach_prob *= 1 - stats.keep_prob
        if reach_prob < tolerance:
            break

    return breakdown


def tuning_advice(result, benefit):
    """Label and explanation for adding one more card of a type."""
    benefit_pct = benefit.overall * 100
    if benefit_pct < 0:
        return "Cut", "Adding more reduces consistency. You likely have too many."
    if result.expected_success > 0.90 and benefit_pct < 0.5:
        return "Cut", f"Diminishing returns. Adding more gives minimal gain (+{format_percentage(benefit.overall, 2)})."
    if benefit_pct > 1.5:
        return "High Impact", f"Improves success rate by {format_percentage(benefit.overall, 2)}"
    if benefit_pct > 0.5:
        return "Medium Impact", f"Improves success rate by {format_percentage(benefit.overall, 2)}"
    return "Low Impact", f"Improves success rate by {format_percentage(benefit.overall, 2)}"


def current_context():
    return DeckContext.from_state(state)


def page_calculate_strategy():
    clear_screen()
    console.print("[header][4] Mulligan Strategy[/header]\n")

    try:
        context = current_context()
    except ValueError as e:
        console.print(f"[error]{e}[/error]")
        pause()
        return

    if context.deck_size <= 0 or not context.types:
        console.print("[error]Set a deck size and at least one card type first.[/error]")
        pause()
        return
    if context.overcommitted:
        console.print(f"[warning]Tracked types hold {sum(context.type_counts)} cards but the deck only has {context.deck_size}. Results will be inaccurate.[/warning]")

    with console.status("[info]Computing optimal strategy...[/info]"):
        result = calculate(context, session["cache"])

    summary = Table(title="Summary", show_header=True, header_style="bold blue")
    summary.add_column("Statistic", style="bold")
    summary.add_column("Value", justify="right", style="cyan")
    summary.add_row("Strategy success rate", format_percentage(result.expected_success))
    summary.add_row("Unpenalized success rate", format_percentage(result.unpenalized_success))
    summary.add_row("Never mulligan success rate", format_percentage(result.baseline_success))
    summary.add_row("Keep opening hand", format_percentage(result.keep_prob))
    summary.add_row("Success when keeping 7", format_percentage(result.expected_success_on_keep))
    summary.add_row("Average mulligans", f"{result.avg_mulligans:.2f}")
    summary.add_row("Average cards kept", f"~{result.expected_cards:.1f}")
    console.print(summary)

    hands = Table(title="Opening Hands (most likely first)", show_header=True, header_style="bold blue")
    for t in context.types:
        hands.add_column(t.name or "Type", justify="right")
    hands.add_column("Frequency", justify="right", style="cyan")
    hands.add_column("Success", justify="right", style="cyan")
    hands.add_column("Decision", justify="center")
    for entry in sorted(result.strategy, key=lambda e: e.hand_prob, reverse=True)[:25]:
        decision = "[keep]KEEP[/keep]" if entry.keep else "[mull]MULL[/mull]"
        hands.add_row(*(str(c) for c in entry.counts), format_percentage(entry.hand_prob, 2), format_percentage(entry.success_prob), decision)
    console.print(hands)

    steps = Table(title="Strategy Breakdown", show_header=True, header_style="bold magenta")
    steps.add_column("Mulligan Step", style="bold")
    steps.add_column("Keep Chance", justify="right", style="cyan")
    steps.add_column("Win Rate", justify="right", style="cyan")
    for row in mulligan_breakdown(result, context.free_mulligan, context.penalty):
        win_rate = row.cumulative_success / row.cumulative_keep if row.cumulative_keep > 0 else 0
        steps.add_row(row.label, format_percentage(row.cumulative_keep), format_percentage(win_rate))
    console.print(steps)

    tips = Table(title="Deck Tuning Tips", show_header=True, header_style="bold green")
    tips.add_column("Change", style="bold")
    tips.add_column("Impact", style="text")
    tips.add_column("Detail")
    tips.add_column("Never mulligan", justify="right", style="cyan")
    for card_type, benefit in zip(context.types, result.marginal_benefits):
        label, reason = tuning_advice(result, benefit)
        change = f"-1 {card_type.name}" if label == "Cut" else f"+1 {card_type.name}"
        tips.add_row(change, label, reason, f"+{format_percentage(max(0.0, benefit.baseline), 2)}")
    console.print(tips)

    pause()
