"""
Task Filter Tests
-----------------
Tests for negation resolution and repeated-command removal.

Tests cover:
- "don't" cancelling the previous command
- "don't" cancelling a restated command and all its earlier copies
- Sentinel codes never removed as a negation target
- Idempotence of both passes
"""

import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from commands.catalog import DONT, WARN_WHATS_IT
from commands.task_filter import resolve_negations, remove_repeated


class TestResolveNegations:
    """Tests for the "don't" handling."""

    def test_no_negation_unchanged(self):
        assert resolve_negations([1, 2, 3]) == [1, 2, 3]

    def test_empty_sequence(self):
        assert resolve_negations([]) == []

    def test_trailing_dont_removes_previous(self):
        """"do 1. no, never mind, don't do it" """
        assert resolve_negations([2, 1, DONT]) == [2]

    def test_restated_command_removed_entirely(self):
        """"do 1 and do 2. no, don't do 1" """
        assert resolve_negations([1, 2, DONT, 1]) == [2]

    def test_all_earlier_copies_removed(self):
        assert resolve_negations([24, 25, 24, DONT, 24]) == [25]

    def test_mixed_sequence(self):
        """"do 24, no don't. do 26 and 25. no don't do 25. do 24." """
        codes = [24, DONT, 26, 25, DONT, 25, 24]

        assert resolve_negations(codes) == [26, 24]

    def test_new_command_after_dont_removes_previous(self):
        """The command after "don't" was never stated, so the one before goes."""
        assert resolve_negations([1, DONT, 2]) == [2]

    def test_leading_dont_removed_alone(self):
        assert resolve_negations([DONT, 5]) == [5]

    def test_sentinel_before_dont_kept(self):
        """Only normal commands are removed as the target of a negation."""
        assert resolve_negations([WARN_WHATS_IT, DONT]) == [WARN_WHATS_IT]

    def test_sentinel_after_dont_falls_back_to_previous(self):
        assert resolve_negations([3, DONT, WARN_WHATS_IT]) == [WARN_WHATS_IT]

    def test_consecutive_donts(self):
        assert resolve_negations([3, DONT, DONT]) == []

    def test_input_not_mutated(self):
        codes = [1, DONT]
        resolve_negations(codes)

        assert codes == [1, DONT]

    @pytest.mark.parametrize("codes", [
        [1, DONT, 2, DONT, 2, 1],
        [DONT, DONT, 4],
        [3, 3, DONT, 3, WARN_WHATS_IT, DONT],
    ])
    def test_idempotent(self, codes):
        once = resolve_negations(codes)

        assert DONT not in once
        assert resolve_negations(once) == once

    @pytest.mark.xfail(reason="negation heuristic is imprecise with many repeats", strict=True)
    def test_known_imperfect_repeat_handling(self):
        """
        "do 1. do 2. do 1. no, don't do 1" only means to drop the last 1,
        but every earlier 1 is dropped too.
        """
        assert resolve_negations([1, 2, 1, DONT, 1]) == [1, 2]


class TestRemoveRepeated:
    """Tests for the optional repeated-command pass."""

    def test_documented_example(self):
        assert remove_repeated([1, 3, 3, 4, 3, 4]) == [1, 3, 4, 3, 4]

    def test_runs_collapse_in_one_pass(self):
        assert remove_repeated([7, 7, 7, 8]) == [7, 8]

    def test_empty_and_single(self):
        assert remove_repeated([]) == []
        assert remove_repeated([5]) == [5]

    @pytest.mark.parametrize("codes", [
        [1, 1, 2, 2, 1],
        [3.01, 3.01, 3.02],
        [DONT, DONT, 1],
    ])
    def test_idempotent(self, codes):
        once = remove_repeated(codes)

        assert remove_repeated(once) == once
