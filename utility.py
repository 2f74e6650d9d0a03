import logging
from os import environ
from shutil import get_terminal_size

from rich.logging import RichHandler

from config import *


def setup_logging(level=None):
    level = level or environ.get("LOG_LEVEL", "WARNING")
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(level).upper(), logging.WARNING))
    if any(isinstance(h, RichHandler) for h in root_logger.handlers):
        return
    handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s", datefmt="%H:%M:%S"))
    root_logger.addHandler(handler)


def clear_screen():
    console.clear()
    columns, _ = get_terminal_size(fallback=(80, 24))
    if columns >= 140:
        console.print(ASCII_ART, justify="center")
    else:
        console.print(ASCII_ART_SMALL, justify="center")


def pause():
    console.print("[prompt]Press Enter to continue...[/prompt]", end="")
    console.input()


def format_percentage(value, digits=1):
    return f"{value * 100:.{digits}f}%"


def get_int_input(prompt, minimum=0, maximum=None, default=None):
    while True:
        val = console.input(f"[prompt]{prompt} > [/prompt]").strip()
        if val == "" and default is not None:
            return default
        try:
            num = int(val)
        except ValueError:
            console.print("[error]Please enter a valid integer.[/error]")
            continue
        if num < minimum:
            console.print(f"[error]Value must be at least {minimum}.[/error]")
        elif maximum is not None and num > maximum:
            console.print(f"[error]Value must be at most {maximum}.[/error]")
        else:
            return num


def get_percent_input(prompt, default=None):
    """Read a 0-100 percentage and return it as a 0-1 fraction."""
    while True:
        val = console.input(f"[prompt]{prompt} > [/prompt]").strip().rstrip("%")
        if val == "" and default is not None:
            return default
        try:
            num = float(val)
        except ValueError:
            console.print("[error]Please enter a number between 0 and 100.[/error]")
            continue
        if 0 <= num <= 100:
            return num / 100
        console.print("[error]Value must be between 0 and 100.[/error]")


def get_yes_no(prompt, default=False):
    hint = "Y/n" if default else "y/N"
    val = console.input(f"[prompt]{prompt} ({hint}): [/prompt]").strip().lower()
    if val == "":
        return default
    return val in ("y", "yes")
