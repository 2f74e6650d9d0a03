import logging
import re
from base64 import urlsafe_b64decode, urlsafe_b64encode
from binascii import Error as BinasciiError
from json import JSONDecodeError, dump, dumps, load, loads
from os import listdir
from os.path import isfile, join

from requests import RequestException, post
from rich.progress import Progress, SpinnerColumn, BarColumn, TextColumn

from config import *
from utility import *

logger = logging.getLogger(__name__)

SCRYFALL_COLLECTION_URL = "https://api.scryfall.com/cards/collection"
SCRYFALL_BATCH_SIZE = 75
MAX_DECKLIST_LENGTH = 50000
MAX_DECKLIST_LINES = 1000
MIN_CARD_COUNT = 1
MAX_CARD_COUNT = 100
MAX_CARD_NAME_LENGTH = 200

SIDEBOARD_REGEX = re.compile(r"^SIDEBOARD:?$", re.IGNORECASE | re.MULTILINE)
SECTION_HEADER_REGEX = re.compile(r"^(creatures?|lands?|spells?|artifacts?|enchantments?|planeswalkers?|battles?|commander|sideboard):?$", re.IGNORECASE)
CARD_COUNT_REGEX = re.compile(r"^(\d+)x?\s+(.+)$")
CARD_COUNT_ONLY_REGEX = re.compile(r"^(\d+)x?\s+")

TYPE_CATEGORIES = ["creatures", "planeswalkers", "battles", "lands", "instants", "sorceries", "artifacts", "enchantments"]


def normalize_card_name(name):
    return name.split("//")[0].strip().lower()


def parse_decklist_text(decklist_text):
    """Split a plain-text decklist into ``(count, name)`` pairs.

    Returns ``(cards, has_sideboard, sideboard_count)``; sideboard cards are
    counted but not returned.
    """
    if not isinstance(decklist_text, str) or not decklist_text:
        raise ValueError("Invalid decklist: must be a non-empty string")
    if len(decklist_text) > MAX_DECKLIST_LENGTH:
        raise ValueError(f"Decklist too large. Maximum {MAX_DECKLIST_LENGTH} characters.")
    if len(decklist_text.split("\n")) > MAX_DECKLIST_LINES:
        raise ValueError(f"Decklist has too many lines. Maximum {MAX_DECKLIST_LINES} lines.")

    marker = SIDEBOARD_REGEX.search(decklist_text)
    main_text = decklist_text[:marker.start()] if marker else decklist_text
    sideboard_count = 0
    if marker:
        for line in decklist_text[marker.start():].split("\n"):
            line = line.strip()
            count_match = CARD_COUNT_ONLY_REGEX.match(line)
            if count_match:
                sideboard_count += int(count_match.group(1))
            elif line and not SIDEBOARD_REGEX.match(line):
                sideboard_count += 1

    cards = []
    for line in (l.strip() for l in main_text.split("\n")):
        if not line or SECTION_HEADER_REGEX.match(line) or line.startswith(("//", "#")):
            continue
        card_match = CARD_COUNT_REGEX.match(line)
        if card_match:
            count, name = int(card_match.group(1)), card_match.group(2).strip()
            if not MIN_CARD_COUNT <= count <= MAX_CARD_COUNT:
                logger.warning("Invalid card count %d for %s (skipping)", count, name)
                continue
            if len(name) > MAX_CARD_NAME_LENGTH:
                logger.warning("Card name too long: %s... (skipping)", name[:50])
                continue
            cards.append((count, name))
        elif len(line) <= MAX_CARD_NAME_LENGTH:
            cards.append((1, line))
        else:
            logger.warning("Card name too long: %s... (skipping)", line[:50])
    return cards, marker is not None, sideboard_count


def get_card_type_category(type_line):
    types = type_line.lower()
    for keyword, category in (
        ("creature", "creatures"),
        ("planeswalker", "planeswalkers"),
        ("battle", "battles"),
        ("land", "lands"),
        ("instant", "instants"),
        ("sorcery", "sorceries"),
        ("artifact", "artifacts"),
        ("enchantment", "enchantments"),
    ):
        if keyword in types:
            return category
    return "artifacts"


def fetch_card_data(names, progress=None, task=None, timeout=10):
    """Look names up on Scryfall; returns ``(found by normalized name, not found names)``."""
    unique = list(dict.fromkeys(n.split("//")[0].strip() for n in names))
    found = {}
    not_found = []
    for start in range(0, len(unique), SCRYFALL_BATCH_SIZE):
        batch = unique[start:start + SCRYFALL_BATCH_SIZE]
        response = post(SCRYFALL_COLLECTION_URL, json={"identifiers": [{"name": n} for n in batch]}, timeout=timeout)
        response.raise_for_status()
        data = response.json()
        for card in data.get("data", []):
            found[normalize_card_name(card["name"])] = card
        not_found += [entry.get("name", "") for entry in data.get("not_found", [])]
        if progress is not None:
            progress.update(task, advance=len(batch))
    return found, not_found


def import_decklist(decklist_text, progress=None, task=None):
    cards, _, _ = parse_decklist_text(decklist_text)
    return categorize_cards(cards, progress, task)


def categorize_cards(cards, progress=None, task=None):
    """Count parsed ``(count, name)`` pairs by card type; returns ``(type_counts, total, not_found)``."""
    if not cards:
        raise ValueError("No cards found in decklist")

    found, not_found = fetch_card_data([name for _, name in cards], progress, task)
    type_counts = {category: 0 for category in TYPE_CATEGORIES}
    for count, name in cards:
        card = found.get(normalize_card_name(name))
        if card is None:
            logger.warning("Could not fetch %s, skipping", name)
            continue
        type_line = card.get("type_line") or card.get("card_faces", [{}])[0].get("type_line", "")
        type_counts[get_card_type_category(type_line)] += count
    total = sum(count for count, _ in cards)
    return type_counts, total, not_found


def apply_import(type_counts, total, target=None):
    target = state if target is None else target
    target["deck_size"] = total
    for card_type in target["card_types"]:
        if card_type["name"].lower() == "lands":
            card_type["count"] = type_counts["lands"]
            break
    else:
        target["card_types"].insert(0, {
            "id": max((t.get("id") or 0 for t in target["card_types"]), default=0) + 1,
            "name": "Lands",
            "count": type_counts["lands"],
            "required": 3,
            "by_turn": 3,
            "color": DEFAULT_COLORS[0],
        })


def encode_share_code(source=None):
    source = state if source is None else source
    payload = {
        "d": source["deck_size"],
        "p": source["penalty"],
        "f": source["free_mulligan"],
        "t": source["confidence_threshold"],
        "s": source.get("sample_count", SAMPLE_COUNT_DEFAULT),
        "types": [[t["name"], t["count"], t["required"], t["by_turn"]] for t in source["card_types"]],
    }
    return urlsafe_b64encode(dumps(payload, separators=(",", ":")).encode()).decode().rstrip("=")


def decode_share_code(code):
    try:
        payload = loads(urlsafe_b64decode(code.strip() + "=" * (-len(code.strip()) % 4)))
        deck_size = int(payload["d"])
        penalty = float(payload["p"])
        threshold = float(payload["t"])
        sample_count = int(payload.get("s", SAMPLE_COUNT_DEFAULT))
        raw_types = payload["types"]
    except (BinasciiError, UnicodeDecodeError, JSONDecodeError, KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid share code: {e}") from e

    if deck_size < 0:
        raise ValueError("Invalid share code: deck size must not be negative")
    if not 0 <= penalty <= 1 or not 0 <= threshold <= 1:
        raise ValueError("Invalid share code: penalty and threshold must be between 0 and 1")
    if not 1 <= sample_count <= MAX_SAMPLE_COUNT:
        raise ValueError(f"Invalid share code: sample count must be between 1 and {MAX_SAMPLE_COUNT}")
    if not isinstance(raw_types, list) or not raw_types:
        raise ValueError("Invalid share code: no card types")

    card_types = []
    for i, entry in enumerate(raw_types):
        if not isinstance(entry, list) or len(entry) != 4:
            raise ValueError(f"Invalid share code: malformed card type {entry!r}")
        name, count, required, by_turn = entry
        if not (isinstance(name, str) and all(isinstance(v, int) for v in (count, required, by_turn))):
            raise ValueError(f"Invalid share code: malformed card type {entry!r}")
        if not (0 <= count <= 100 and 0 <= required <= 100 and 0 <= by_turn <= 20):
            raise ValueError(f"Invalid share code: card type {name!r} out of bounds")
        card_types.append({
            "id": i + 1,
            "name": name,
            "count": count,
            "required": required,
            "by_turn": by_turn,
            "color": DEFAULT_COLORS[i % len(DEFAULT_COLORS)],
        })

    return {
        "deck_size": deck_size,
        "penalty": penalty,
        "free_mulligan": bool(payload.get("f", False)),
        "confidence_threshold": threshold,
        "sample_count": sample_count,
        "card_types": card_types,
    }


def load_state_dict(loaded):
    required = {"deck_size", "card_types"}
    if not required.issubset(loaded.keys()):
        raise ValueError(f"File missing required fields: {', '.join(sorted(required - loaded.keys()))}")
    if not isinstance(loaded["card_types"], list) or not loaded["card_types"]:
        raise ValueError("File must contain at least one card type")
    new_state = {key: loaded.get(key, value) for key, value in DEFAULT_STATE.items()}
    new_state["card_types"] = [dict(t) for t in loaded["card_types"]]
    for i, card_type in enumerate(new_state["card_types"]):
        for key in ("count", "required", "by_turn"):
            if key not in card_type:
                raise ValueError(f"Card type {i} is missing {key}")
        card_type.setdefault("id", i + 1)
        card_type.setdefault("name", f"Type {i + 1}")
        card_type.setdefault("color", DEFAULT_COLORS[i % len(DEFAULT_COLORS)])
    return new_state


def page_import_decklist():
    clear_screen()
    console.print("[header]Decklist Import[/header]")
    console.print("[info]Paste a decklist (\"4 Forest\" per line). Finish with an empty line.[/info]")
    lines = []
    while True:
        line = console.input()
        if not line.strip():
            break
        lines.append(line)
    try:
        cards, has_sideboard, sideboard_count = parse_decklist_text("\n".join(lines))
        with Progress(SpinnerColumn(), TextColumn("[progress.description]{task.description}"), BarColumn(), transient=True, console=console) as progress:
            task = progress.add_task("Fetching cards...", total=len({n.split("//")[0].strip() for _, n in cards}))
            type_counts, total, not_found = categorize_cards(cards, progress, task)
    except (ValueError, RequestException) as e:
        console.print(f"[error]Import failed: {e}[/error]")
        pause()
        return

    apply_import(type_counts, total)
    for category, count in type_counts.items():
        if count:
            console.print(f"[info]{category.title()}: {count}[/info]")
    if has_sideboard:
        console.print(f"[info]Ignored {sideboard_count} sideboard cards.[/info]")
    if not_found:
        console.print(f"[warning]Not found: {', '.join(not_found)}[/warning]")
    console.print(f"[success]Deck size set to {total}, Lands set to {type_counts['lands']}.[/success]")
    pause()


def page_share():
    clear_screen()
    console.print("[header]Share Code[/header]\n")
    console.print(f"[info]Current configuration:[/info] [text]{encode_share_code()}[/text]\n")
    code = console.input("[prompt]Paste a share code to load it (or press Enter to go back): [/prompt]").strip()
    if not code:
        return
    try:
        state.update(decode_share_code(code))
        console.print("[success]Configuration loaded from share code.[/success]")
    except ValueError as e:
        console.print(f"[error]{e}[/error]")
    pause()


def import_deck_prompt():
    clear_screen()
    console.print("[header]Deck Setup[/header]")
    console.print("[info]1. Import decklist[/info]")
    console.print("[info]2. Load .json file[/info]")
    console.print("[info]3. Load share code[/info]")
    console.print("[info]4. Continue with default deck[/info]")
    choice = console.input("[prompt]> [/prompt]")
    match choice:
        case "1":
            page_import_decklist()
        case "2":
            page_load()
        case "3":
            page_share()
        case "4" | "":
            return
        case _:
            console.print("[error]Invalid option.[/error]")
            pause()
            import_deck_prompt()


def page_load():
    clear_screen()
    console.print("[header][7] Load Deck State[/header]")
    files = [f for f in listdir() if f.endswith(".json") and isfile(f)]
    for subdir in (d for d in listdir() if not isfile(d) and not d.startswith(".")):
        try:
            files += [join(subdir, f) for f in listdir(subdir) if f.endswith(".json") and isfile(join(subdir, f))]
        except OSError:
            continue

    if files:
        console.print("[info]Available .json files:[/info]")
        for i, fname in enumerate(files):
            console.print(f"[info]{i + 1}[/info]: {fname}")
    else:
        console.print("[info]No .json files found in current directory or subfolders.[/info]")

    console.print("[prompt]Enter the number of the file to load, or enter a path to a json:[/prompt]")
    while True:
        user_input = console.input("[prompt]> [/prompt]").strip()
        if user_input == "":
            return
        if user_input.isdigit():
            idx = int(user_input) - 1
            if 0 <= idx < len(files):
                path = files[idx]
                break
            console.print("[error]Invalid selection number.[/error]")
        elif isfile(user_input) and user_input.endswith(".json"):
            path = user_input
            break
        else:
            console.print("[error]File not found or not a .json file. Try again.[/error]")

    try:
        with open(path, "r") as f:
            loaded = load(f)
        new_state = load_state_dict(loaded)
        state.clear()
        state.update(new_state)
        console.print(f"[success]State loaded from {path} successfully.[/success]")
    except (OSError, JSONDecodeError, ValueError, AttributeError) as e:
        logger.warning("Could not load %s: %s", path, e)
        console.print(f"[error]Error loading file: {e}[/error]")
    pause()


def page_save():
    clear_screen()
    console.print("[header][8] Save Deck State[/header]")
    path = console.input("[prompt]Enter filename to save (e.g., deck.json): [/prompt]").strip()
    if not path:
        return
    try:
        with open(path, "w") as f:
            dump(state, f, indent=4)
        console.print(f"[success]State saved to {path}.[/success]")
    except OSError as e:
        logger.warning("Could not save %s: %s", path, e)
        console.print(f"[error]Error saving file: {e}[/error]")
    pause()
