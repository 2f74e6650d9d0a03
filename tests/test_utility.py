import pytest

import utility
from utility import format_percentage, get_int_input, get_percent_input, get_yes_no


def feed(monkeypatch, *answers):
    replies = iter(answers)
    monkeypatch.setattr(utility.console, "input", lambda *args, **kwargs: next(replies))


def test_format_percentage():
    assert format_percentage(0.25) == "25.0%"
    assert format_percentage(0.12345, 2) == "12.35%"


def test_int_input_retries_until_valid(monkeypatch):
    feed(monkeypatch, "abc", "3", "12", "7")
    assert get_int_input("Size", minimum=5, maximum=10) == 7


def test_int_input_default(monkeypatch):
    feed(monkeypatch, "")
    assert get_int_input("Size", default=99) == 99


def test_percent_input(monkeypatch):
    feed(monkeypatch, "150", "20%")
    assert get_percent_input("Penalty") == pytest.approx(0.2)


def test_yes_no(monkeypatch):
    feed(monkeypatch, "Y")
    assert get_yes_no("Export?")
    feed(monkeypatch, "")
    assert get_yes_no("Export?", default=True)
