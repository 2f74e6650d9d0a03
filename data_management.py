from rich.table import Table

from config import *
from utility import *


def describe_penalty(penalty_pct):
    if penalty_pct <= 5:
        return "Aggressive. You dig deep for combo pieces."
    if penalty_pct <= 25:
        return "Standard. A balanced approach to risk."
    if penalty_pct <= 40:
        return "Conservative. You prefer keeping 7 cards."
    return "Very Conservative. You almost never mulligan."


def describe_threshold(threshold_pct):
    if threshold_pct >= 90:
        return "Perfectionist. You only keep amazing hands."
    if threshold_pct >= 75:
        return "Disciplined. You want consistent strong starts."
    if threshold_pct >= 60:
        return "Loose. You trust your topdecks."
    return "Gambler. You keep risky hands often."


def apply_preset(preset, target=None):
    target = state if target is None else target
    penalty, threshold = PRESETS.get(preset, PRESETS["balanced"])
    target["penalty"] = penalty
    target["confidence_threshold"] = threshold
    return penalty, threshold


def next_type_id(card_types):
    return max((t.get("id") or 0 for t in card_types), default=0) + 1


def add_card_type(card_types, name=None):
    card_type = {
        "id": next_type_id(card_types),
        "name": name or f"Type {len(card_types) + 1}",
        "count": 0,
        "required": 1,
        "by_turn": 3,
        "color": DEFAULT_COLORS[len(card_types) % len(DEFAULT_COLORS)],
    }
    card_types.append(card_type)
    return card_type


def remove_card_type(card_types, index):
    if len(card_types) <= 1:
        raise ValueError("At least one card type must remain.")
    if not 0 <= index < len(card_types):
        raise ValueError(f"No card type at index {index}.")
    return card_types.pop(index)


def page_deck_size():
    clear_screen()
    console.print("[header][1] Deck Size[/header]\n")
    console.print(f"[info]Current deck size: {state['deck_size']}[/info]")
    tracked = sum(t["count"] for t in state["card_types"])
    console.print(f"[info]Tracked cards: {tracked}, other cards: {state['deck_size'] - tracked}[/info]\n")
    state["deck_size"] = get_int_input("Enter new deck size", minimum=HAND_SIZE, default=state["deck_size"])
    if sum(t["count"] for t in state["card_types"]) > state["deck_size"]:
        console.print("[warning]Tracked card types now exceed the deck size.[/warning]")
        pause()


def print_card_types():
    table = Table(show_header=True, header_style="bold blue")
    table.add_column("#", justify="right")
    table.add_column("Name", style="bold")
    table.add_column("Cards in Deck", justify="right")
    table.add_column("Need in Hand", justify="right")
    table.add_column("By Turn", justify="right")
    for i, t in enumerate(state["card_types"]):
        table.add_row(str(i), f"[{t.get('color') or 'white'}]{t['name']}[/]", str(t["count"]), str(t["required"]), str(t["by_turn"]))
    console.print(table)


def edit_card_type(card_type):
    console.print(f"[info]Editing {card_type['name']} (press Enter to keep a value)[/info]")
    name = console.input(f"[prompt]Name ({card_type['name']}): [/prompt]").strip()
    if name:
        card_type["name"] = name
    card_type["count"] = get_int_input("Cards in deck", minimum=0, default=card_type["count"])
    card_type["required"] = get_int_input("Need in hand", minimum=0, maximum=HAND_SIZE, default=card_type["required"])
    card_type["by_turn"] = get_int_input("By turn", minimum=0, maximum=10, default=card_type["by_turn"])


def page_card_types():
    while True:
        clear_screen()
        console.print("[header][2] Card Types[/header]\n")
        print_card_types()
        tracked = sum(t["count"] for t in state["card_types"])
        if tracked > state["deck_size"]:
            console.print(f"[warning]Tracked cards ({tracked}) exceed the deck size ({state['deck_size']}).[/warning]")
        console.print("\n[info]1. Add Card Type[/info]")
        console.print("[info]2. Edit Card Type[/info]")
        console.print("[info]3. Remove Card Type[/info]")
        console.print("[info]4. Back[/info]")
        choice = console.input("[prompt]> [/prompt]")
        match choice:
            case "1":
                name = console.input("[prompt]Card Type name: [/prompt]").strip()
                edit_card_type(add_card_type(state["card_types"], name))
            case "2" | "3" if not state["card_types"]:
                console.print("[error]No card types yet. Add one first.[/error]")
                pause()
            case "2":
                index = get_int_input("Enter index of Card Type to edit", minimum=0, maximum=len(state["card_types"]) - 1)
                edit_card_type(state["card_types"][index])
            case "3":
                index = get_int_input("Enter index of Card Type to remove", minimum=0, maximum=len(state["card_types"]) - 1)
                try:
                    removed = remove_card_type(state["card_types"], index)
                    console.print(f"[success]Removed {removed['name']}.[/success]")
                except ValueError as e:
                    console.print(f"[error]{e}[/error]")
                pause()
            case "4" | "":
                return
            case _:
                console.print("[error]Invalid option.[/error]")
                pause()


def page_tuning():
    while True:
        clear_screen()
        console.print("[header][3] Mulligan Settings[/header]\n")
        penalty_pct = round(state["penalty"] * 100)
        threshold_pct = round(state["confidence_threshold"] * 100)
        console.print(f"[info]Mulligan penalty: {penalty_pct}%[/info] [text]{describe_penalty(penalty_pct)}[/text]")
        console.print(f"[info]Confidence threshold: {threshold_pct}%[/info] [text]{describe_threshold(threshold_pct)}[/text]")
        console.print(f"[info]Free first mulligan: {'Yes' if state['free_mulligan'] else 'No'}[/info]\n")
        console.print("[info]1. Set Penalty[/info]")
        console.print("[info]2. Set Confidence Threshold[/info]")
        console.print("[info]3. Toggle Free Mulligan[/info]")
        console.print("[info]4. Apply Preset (Casual / Balanced / Competitive)[/info]")
        console.print("[info]5. Back[/info]")
        choice = console.input("[prompt]> [/prompt]")
        match choice:
            case "1":
                state["penalty"] = get_percent_input("Penalty per mulligan (%)", default=state["penalty"])
            case "2":
                state["confidence_threshold"] = get_percent_input("Confidence threshold (%)", default=state["confidence_threshold"])
            case "3":
                state["free_mulligan"] = not state["free_mulligan"]
            case "4":
                for i, (name, (penalty, threshold)) in enumerate(PRESETS.items()):
                    console.print(f"[info]{i + 1}. {name.title()} ({penalty * 100:.0f}% penalty, {threshold * 100:.0f}% threshold)[/info]")
                selected = console.input("[prompt]> [/prompt]").strip()
                names = list(PRESETS)
                preset = names[int(selected) - 1] if selected.isdigit() and 1 <= int(selected) <= len(names) else "balanced"
                apply_preset(preset)
            case "5" | "":
                return
            case _:
                console.print("[error]Invalid option.[/error]")
                pause()


def page_list():
    clear_screen()
    console.print("[header][9] State Summary[/header]\n")
    console.print(f"[info]Deck size: {state['deck_size']}[/info]")
    console.print(f"[info]Penalty: {format_percentage(state['penalty'], 0)}[/info]")
    console.print(f"[info]Confidence threshold: {format_percentage(state['confidence_threshold'], 0)}[/info]")
    console.print(f"[info]Free first mulligan: {state['free_mulligan']}[/info]")
    console.print(f"[info]Sample count: {state.get('sample_count', SAMPLE_COUNT_DEFAULT)}[/info]\n")
    print_card_types()
    cache = session["cache"]
    console.print(f"\n[info]Cached results: {len(cache)} (hits {cache.hits}, misses {cache.misses})[/info]")
    pause()
