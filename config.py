from rich.theme import Theme
from rich.console import Console

from cache import ResultCache
from models import HAND_SIZE, MULLIGAN_STEPS

custom_theme = Theme({
    "info": "cyan",
    "success": "green",
    "warning": "yellow",
    "error": "bold red",
    "header": "bold magenta",
    "prompt": "bold blue",
    "keep": "bold green",
    "mull": "bold red",
    "highlight": "bold white on dark_green",
    "text": "bold yellow"
})

console = Console(theme=custom_theme)

ASCII_ART = """[highlight]
 ███╗   ███╗██╗   ██╗██╗     ██╗     ██╗ ██████╗  █████╗ ███╗   ██╗    ███████╗████████╗██████╗  █████╗ ████████╗███████╗ ██████╗██╗   ██╗
 ████╗ ████║██║   ██║██║     ██║     ██║██╔════╝ ██╔══██╗████╗  ██║    ██╔════╝╚══██╔══╝██╔══██╗██╔══██╗╚══██╔══╝██╔════╝██╔════╝╚██╗ ██╔╝
 ██╔████╔██║██║   ██║██║     ██║     ██║██║  ███╗███████║██╔██╗ ██║    ███████╗   ██║   ██████╔╝███████║   ██║   █████╗  ██║  ███╗╚████╔╝
 ██║╚██╔╝██║██║   ██║██║     ██║     ██║██║   ██║██╔══██║██║╚██╗██║    ╚════██║   ██║   ██╔══██╗██╔══██║   ██║   ██╔══╝  ██║   ██║ ╚██╔╝
 ██║ ╚═╝ ██║╚██████╔╝███████╗███████╗██║╚██████╔╝██║  ██║██║ ╚████║    ███████║   ██║   ██║  ██║██║  ██║   ██║   ███████╗╚██████╔╝  ██║
 ╚═╝     ╚═╝ ╚═════╝ ╚══════╝╚══════╝╚═╝ ╚═════╝ ╚═╝  ╚═╝╚═╝  ╚═══╝    ╚══════╝   ╚═╝   ╚═╝  ╚═╝╚═╝  ╚═╝   ╚═╝   ╚══════╝ ╚═════╝   ╚═╝
[/highlight]"""

ASCII_ART_SMALL = """[highlight]
 +-+-+-+-+-+-+-+-+ +-+-+-+-+-+-+-+-+
 |M|u|l|l|i|g|a|n| |S|t|r|a|t|e|g|y|
 +-+-+-+-+-+-+-+-+ +-+-+-+-+-+-+-+-+
[/highlight]"""

CACHE_SIZE = 100
SAMPLE_COUNT_DEFAULT = 10
MAX_SAMPLE_COUNT = 10000

DEFAULT_COLORS = ["#22c55e", "#3b82f6", "#ef4444", "#eab308", "#a855f7", "#ec4899", "#06b6d4", "#f97316"]

DEFAULT_CARD_TYPES = [
    {"id": 1, "name": "Lands", "count": 39, "required": 3, "by_turn": 3, "color": DEFAULT_COLORS[0]},
    {"id": 2, "name": "Ramp", "count": 14, "required": 1, "by_turn": 3, "color": DEFAULT_COLORS[1]},
]

DEFAULT_STATE = {
    "deck_size": 99,
    "penalty": 0.20,
    "free_mulligan": False,
    "confidence_threshold": 0.75,
    "sample_count": SAMPLE_COUNT_DEFAULT,
    "card_types": DEFAULT_CARD_TYPES,
}

# penalty, confidence threshold
PRESETS = {
    "casual": (0.50, 0.60),
    "balanced": (0.20, 0.75),
    "competitive": (0.05, 0.92),
}

state = {
    "deck_size": DEFAULT_STATE["deck_size"],
    "penalty": DEFAULT_STATE["penalty"],
    "free_mulligan": DEFAULT_STATE["free_mulligan"],
    "confidence_threshold": DEFAULT_STATE["confidence_threshold"],
    "sample_count": DEFAULT_STATE["sample_count"],
    "card_types": [dict(t) for t in DEFAULT_CARD_TYPES],
}

# Not saved with the deck: recomputable results and replay decks.
session = {
    "cache": ResultCache(CACHE_SIZE),
    "samples": [],
    "sample_deck_key": None,
}
