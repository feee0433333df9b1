import logging

import pytest

from core.models.poll import DEFAULT_OPTIONS, DEFAULT_QUESTION, PollContent
from core.poll_parser import PollContentParser, parse, strip_line


def test_parse_labelled_answer():
    """Test that labels, numbering and dashes are stripped from every line."""
    raw = (
        "Poll Question: Will the merger pass review?\n"
        "Option 1: Yes, quickly\n"
        "2) After concessions\n"
        "- No, it will be blocked\n"
    )
    poll = parse(raw)

    assert poll.question == "Will the merger pass review?"
    assert poll.options == ("Yes, quickly", "After concessions", "No, it will be blocked")


def test_parse_plain_lines_and_ignores_extras():
    """Test that only the first four usable lines are used."""
    raw = "\n\nIs remote work here to stay?\n\nYes\nHybrid wins\nNo\nMaybe\nExtra line"
    poll = parse(raw)

    assert poll.question == "Is remote work here to stay?"
    assert poll.options == ("Yes", "Hybrid wins", "No")


@pytest.mark.parametrize("raw", [
    "",
    "Only a question?",
    "Question?\nYes\nNo",
    "Q:\n1.\n-\nA:\nB",
])
def test_parse_too_few_lines_degrades_to_default(raw):
    """Test that fewer than four usable lines yield the default poll."""
    poll = parse(raw)

    assert poll == PollContent.default()
    assert poll.question == DEFAULT_QUESTION
    assert poll.options == DEFAULT_OPTIONS


@pytest.mark.parametrize("raw", [None, 42, {"question": "x"}, ["a", "b", "c", "d"]])
def test_parse_non_text_degrades_to_default(raw):
    """Test that non-string input never raises."""
    assert parse(raw) == PollContent.default()


def test_label_strip_keeps_words_starting_with_label():
    """Test that 'Agree' or 'Answerable' are not mistaken for labels."""
    assert strip_line("Agree with the ruling") == "Agree with the ruling"
    assert strip_line("Answerable later") == "Answerable later"
    assert strip_line("A: Agree") == "Agree"
    assert strip_line("q. Why now?") == "Why now?"


def test_strip_line_applies_rules_in_order():
    """Test label, then enumeration, then dash removal."""
    assert strip_line("Option 3) - Wait and see") == "Wait and see"
    assert strip_line("1. Yes") == "Yes"
    assert strip_line("- No") == "No"


def test_degrade_is_logged(caplog):
    """Test that degrading to the default poll is logged, not raised."""
    caplog.set_level(logging.INFO, logger="core.poll_parser")

    PollContentParser().parse("too short")

    assert "degraded to default" in caplog.text


def test_poll_content_requires_three_options():
    """Test poll model validation."""
    with pytest.raises(ValueError):
        PollContent(question="Q?", options=("a", "b"))
    with pytest.raises(ValueError):
        PollContent(question="", options=("a", "b", "c"))


@pytest.mark.parametrize("raw, question, options", [
    ("Q: Should X?\n- Yes\n2) No\nMaybe", "Should X?", ("Yes", "No", "Maybe")),
    ("1) Should X?\n- Yes\n- No\n3. Maybe", "Should X?", ("Yes", "No", "Maybe")),
    ("Question: Should X?\nA: Yes\nOption 2: No\nChoice: Maybe", "Should X?", ("Yes", "No", "Maybe")),
])
def test_parse_mixed_prefixes(raw, question, options):
    """Test answers mixing label, numbering and dash prefixes."""
    poll = parse(raw)

    assert poll.question == question
    assert poll.options == options
