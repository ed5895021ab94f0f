"""
Words Verification Tests
------------------------
Tests for the oracle scanning around a trigger word.

Tests cover:
- Search intervals and offsets
- Each behavior flag
- "No match" signalling
"""

from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from commands.catalog import CommandSpec, ConditionAlternative
from commands.verification import words_verification


def make_spec(roles, triggers=("on", "off"), **overrides):
    """roles: list of (words, left, right) or (words, left, right, offset)."""
    roles = [tuple(r) + (0,) if len(r) == 3 else tuple(r) for r in roles]
    fields = dict(
        id=1,
        name="test",
        triggers=frozenset(triggers),
        vocabulary=tuple(tuple(r[0]) for r in roles),
        left_intervals=tuple(r[1] for r in roles),
        right_intervals=tuple(r[2] for r in roles),
        start_offsets=tuple(r[3] for r in roles),
        returns=(ConditionAlternative(conditions=(), code=1),),
    )
    fields.update(overrides)
    return CommandSpec(**fields)


def tokens(text):
    return text.split(" ")


class TestWindows:

    def test_match_to_the_right(self):
        spec = make_spec([(["wifi"], 3, 3)])

        assert words_verification(tokens("turn on wifi"), 1, spec) == [["wifi"]]

    def test_match_to_the_left(self):
        spec = make_spec([(["wifi"], 3, 3)])

        assert words_verification(tokens("turn wifi on"), 2, spec) == [["wifi"]]

    def test_outside_interval_is_no_match(self):
        spec = make_spec([(["wifi"], 1, 1)])

        assert words_verification(tokens("on the big wifi"), 0, spec) is None

    def test_unmatched_role_is_empty(self):
        spec = make_spec([(["wifi"], 3, 3), (["now"], 3, 3)])

        assert words_verification(tokens("turn on wifi"), 1, spec) == [["wifi"], []]

    def test_all_matches_in_read_order(self):
        spec = make_spec([(["wifi", "bluetooth"], 3, 3)])

        result = words_verification(tokens("wifi on bluetooth"), 1, spec)

        assert result == [["wifi", "bluetooth"]]

    def test_start_offset_moves_window(self):
        spec = make_spec([(["wifi"], 0, 1, 2)])

        assert words_verification(tokens("on a b wifi"), 0, spec) == [["wifi"]]
        assert words_verification(tokens("on wifi a b"), 0, spec) is None

    def test_trigger_out_of_range(self):
        spec = make_spec([(["wifi"], 3, 3)])

        assert words_verification(tokens("wifi"), 5, spec) is None


class TestFlags:

    def test_exclude_trigger(self):
        spec = make_spec([(["on"], 1, 1)], exclude_trigger=True)

        assert words_verification(tokens("turn on"), 1, spec) is None

        spec = make_spec([(["on"], 1, 1)], exclude_trigger=False)

        assert words_verification(tokens("turn on"), 1, spec) == [["on"]]

    def test_exclude_trigger_words(self):
        spec = make_spec([(["on", "up"], 2, 2)], exclude_trigger_words=True)

        assert words_verification(tokens("on on up"), 0, spec) == [["up"]]

    def test_return_last_match(self):
        spec = make_spec([(["a", "b"], 3, 3)], return_last_match=True)

        assert words_verification(tokens("a on b"), 1, spec) == [["b"]]

    def test_ordered_roles(self):
        spec = make_spec([(["x"], 3, 3), (["y"], 3, 3)], ordered=True)

        assert words_verification(tokens("on x y"), 0, spec) == [["x"], ["y"]]
        assert words_verification(tokens("on y x"), 0, spec) == [["x"], []]

    def test_stop_at_first_unmatched(self):
        spec = make_spec(
            [(["x"], 3, 3), (["y"], 3, 3)], stop_at_first_unmatched=True
        )

        assert words_verification(tokens("on y"), 0, spec) is None

    def test_ignore_repeated_triggers(self):
        spec = make_spec([(["wifi"], 5, 5)], ignore_repeated_triggers=True)

        assert words_verification(tokens("on lights off wifi"), 0, spec) is None
        assert words_verification(tokens("on wifi off"), 0, spec) == [["wifi"]]

    def test_ignore_repeated_commands(self):
        spec = make_spec([(["wifi"], 3, 3)], ignore_repeated_commands=True)

        # "wifi" belongs to the first "on"
        assert words_verification(tokens("on wifi on"), 2, spec) is None
        # too far from the first "on" to be its match
        assert words_verification(tokens("on a b c wifi on"), 5, spec) == [["wifi"]]

    def test_ignore_repeated_commands_earlier_trigger_has_closer_word(self):
        spec = make_spec([(["wifi"], 3, 3)], ignore_repeated_commands=True)
        words = tokens("turn wifi on turn wifi off")

        # the first "on" takes the "wifi" next to it, so the second one is free
        assert words_verification(words, 5, spec) == [["wifi"]]
        assert words_verification(words, 2, spec) == [["wifi", "wifi"]]

    def test_continue_with_role(self):
        spec = make_spec(
            [(["phone"], 0, 3), (["safe"], 0, 2)],
            triggers=("reboot",),
            continue_with_role=0,
        )

        result = words_verification(tokens("reboot the old phone in safe"), 0, spec)

        assert result == [["phone"], ["safe"]]

    def test_continue_with_role_unmatched_uses_trigger(self):
        spec = make_spec(
            [(["phone"], 0, 3), (["safe"], 0, 2)],
            triggers=("reboot",),
            continue_with_role=0,
        )

        assert words_verification(tokens("reboot safe"), 0, spec) == [[], ["safe"]]
