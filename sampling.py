from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
from rich.progress import Progress, SpinnerColumn, BarColumn, TextColumn
from rich.table import Table

from models import HAND_SIZE
from strategy import calculate, current_context
from utility import *

OTHER = -1


@dataclass
class Scenario:
    label: str
    kind: str
    type_index: Optional[int] = None
    sample_count: int = 0
    theoretical_prob: float = 0.0
    avg_success: float = 0.0
    keep_share: float = 0.0

    @property
    def is_keep(self):
        return self.keep_share > 0.5


@dataclass
class SampleReport:
    num_samples: int
    instant_success: int = 0
    draw_success: int = 0
    failures: int = 0
    correct_keep: int = 0
    bad_beat: int = 0
    missed_opportunity: int = 0
    good_mulligan: int = 0
    scenarios: List[Scenario] = field(default_factory=list)

    def rate(self, count):
        return count / self.num_samples if self.num_samples else 0.0


def create_virtual_deck(deck_size, types):
    deck = []
    for index, card_type in enumerate(types):
        for _ in range(card_type.count):
            if len(deck) >= deck_size:
                break
            deck.append(index)
    deck.extend([OTHER] * (deck_size - len(deck)))
    return np.array(deck, dtype=int)


def generate_stable_samples(deck, count, rng=None):
    rng = rng if rng is not None else np.random.default_rng()
    return [rng.permutation(deck) for _ in range(max(count, SAMPLE_COUNT_DEFAULT))]


def count_types(cards, num_types):
    counts = [0] * num_types
    for card in cards:
        if card != OTHER:
            counts[card] += 1
    return counts


def meets_all(counts, types):
    return all(c >= t.required for c, t in zip(counts, types))


def missing_exactly_one(counts, types, index):
    if counts[index] != types[index].required - 1:
        return False
    return all(c >= t.required for j, (c, t) in enumerate(zip(counts, types)) if j != index)


def build_scenarios(types):
    scenarios = [Scenario("Meets or exceeds", "success")]
    for index, card_type in enumerate(types):
        scenarios.append(Scenario(f"Missing 1: {card_type.name or index}", "fail-1", index))
    scenarios.append(Scenario("Missing >1 cards", "fail-many"))
    return scenarios


def scenario_matches(scenario, counts, types):
    match scenario.kind:
        case "success":
            return meets_all(counts, types)
        case "fail-1":
            return missing_exactly_one(counts, types, scenario.type_index)
        case "fail-many":
            if meets_all(counts, types):
                return False
            return not any(missing_exactly_one(counts, types, i) for i in range(len(types)))
        case _:
            raise ValueError(f"Unknown scenario kind: {scenario.kind}")


def run_sample_reveals(context, result, samples, progress=None, task=None):
    """Replay shuffled decks against the opening-hand decisions of ``result``.

    Purely illustrative: the replay only checks whether every requirement is met
    within ``max(by_turn)`` draws and compares that with the keep/mulligan call.
    """
    types = context.types
    num_types = len(types)
    report = SampleReport(num_samples=len(samples), scenarios=build_scenarios(types))
    draw_count = max((t.by_turn for t in types), default=0)
    decisions = {entry.counts: entry.keep for entry in result.strategy}

    for shuffled in samples:
        hand_counts = count_types(shuffled[:HAND_SIZE], num_types)
        for scenario in report.scenarios:
            if scenario_matches(scenario, hand_counts, types):
                scenario.sample_count += 1

        keep = decisions.get(tuple(hand_counts), False)
        success = meets_all(hand_counts, types)
        if success:
            report.instant_success += 1
        else:
            running = list(hand_counts)
            for card in shuffled[HAND_SIZE:HAND_SIZE + draw_count]:
                if card != OTHER:
                    running[card] += 1
                if meets_all(running, types):
                    success = True
                    break
            if success:
                report.draw_success += 1
            else:
                report.failures += 1

        if keep:
            if success:
                report.correct_keep += 1
            else:
                report.bad_beat += 1
        elif success:
            report.missed_opportunity += 1
        else:
            report.good_mulligan += 1

        if progress is not None:
            progress.update(task, advance=1)

    for scenario in report.scenarios:
        matching = [e for e in result.strategy if scenario_matches(scenario, e.counts, types)]
        scenario.theoretical_prob = sum(e.hand_prob for e in matching)
        if scenario.theoretical_prob > 0:
            scenario.avg_success = sum(e.success_prob * e.hand_prob for e in matching) / scenario.theoretical_prob
            scenario.keep_share = sum(e.hand_prob for e in matching if e.keep) / scenario.theoretical_prob
    report.scenarios = [s for s in report.scenarios if s.theoretical_prob > 0 or s.sample_count > 0]
    return report


def ensure_samples(context, count, refresh=False):
    deck_key = (context.deck_size, tuple(t.count for t in context.types))
    if refresh or session["sample_deck_key"] != deck_key or len(session["samples"]) < count:
        deck = create_virtual_deck(context.deck_size, context.types)
        session["samples"] = generate_stable_samples(deck, count)
        session["sample_deck_key"] = deck_key
    return session["samples"][:count]


def page_sample_reveals():
    clear_screen()
    console.print("[header][5] Sample Opening Hands[/header]\n")

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

    count = get_int_input("Number of samples", minimum=1, maximum=MAX_SAMPLE_COUNT, default=state.get("sample_count", SAMPLE_COUNT_DEFAULT))
    state["sample_count"] = count
    refresh = get_yes_no("Reshuffle samples?")

    with console.status("[info]Computing optimal strategy...[/info]"):
        result = calculate(context, session["cache"])
    samples = ensure_samples(context, count, refresh)

    with Progress(SpinnerColumn(), TextColumn("[progress.description]{task.description}"), BarColumn(), transient=True, console=console) as progress:
        task = progress.add_task("Replaying samples...", total=len(samples))
        report = run_sample_reveals(context, result, samples, progress, task)

    console.print(f"[highlight] Natural \"god hands\": {format_percentage(report.rate(report.instant_success))} [/highlight]\n")

    outcomes = Table(title="Simulation vs Strategy", show_header=True, header_style="bold blue")
    outcomes.add_column("Outcome", style="bold")
    outcomes.add_column("Meaning")
    outcomes.add_column("Share", justify="right", style="cyan")
    outcomes.add_row("[success]Correct Keep[/success]", "Strategy said keep, and the hand got there.", format_percentage(report.rate(report.correct_keep)))
    outcomes.add_row("[error]Bad Beat[/error]", "Strategy said keep, but the draws failed. Raise the confidence threshold to reduce risk.", format_percentage(report.rate(report.bad_beat)))
    outcomes.add_row("[warning]Missed Opportunity[/warning]", "Strategy said mulligan, but the hand would have hit. Lower the threshold to be greedier.", format_percentage(report.rate(report.missed_opportunity)))
    outcomes.add_row("[info]Good Mulligan[/info]", "Strategy said mulligan, and the hand would have bricked.", format_percentage(report.rate(report.good_mulligan)))
    console.print(outcomes)

    sheet = Table(title="Decision Guidelines", show_header=True, header_style="bold magenta")
    sheet.add_column("Scenario", style="bold")
    for t in context.types:
        sheet.add_column(t.name or "Type", justify="right")
    sheet.add_column("Win Chance", justify="right")
    sheet.add_column("Frequency", justify="right", style="cyan")
    sheet.add_column("Sample %", justify="right", style="cyan")
    sheet.add_column("Strategy", justify="center")
    for scenario in report.scenarios:
        match scenario.kind:
            case "success":
                cells = [f"{t.required}+" for t in context.types]
            case "fail-1":
                cells = [f"{t.required - 1}" if i == scenario.type_index else f"{t.required}+" for i, t in enumerate(context.types)]
            case _:
                cells = ["Var."] * len(context.types)
        style = "success" if scenario.avg_success >= 0.75 else "warning" if scenario.avg_success >= 0.5 else "error"
        sheet.add_row(
            scenario.label,
            *cells,
            f"[{style}]{format_percentage(scenario.avg_success)}[/{style}]",
            format_percentage(scenario.theoretical_prob),
            format_percentage(report.rate(scenario.sample_count)),
            "[keep]KEEP[/keep]" if scenario.is_keep else "[mull]MULL[/mull]",
        )
    console.print(sheet)
    pause()
