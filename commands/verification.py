"""
Words Verification
------------------
Sub-verification oracle: looks around a trigger word for the words each role
of a command expects.

Pure function of its inputs. The engine only relies on the shape of the
result: one sub-slice per role, in role order, or None when nothing matched.
"""

from typing import List, Optional, Sequence, Tuple

from .catalog import CommandSpec
from infra.logging import get_logger

MatchResult = List[List[str]]

logger = get_logger("commands.verification")


def _trigger_bounds(
    tokens: Sequence[str],
    position: int,
    spec: CommandSpec,
) -> Tuple[int, int]:
    """
    Closest other occurrences of the command's trigger words around `position`.

    Returns exclusive bounds: the window may not reach either index.
    """
    lower = -1
    for i in range(position - 1, -1, -1):
        if tokens[i] in spec.triggers:
            lower = i
            break

    upper = len(tokens)
    for i in range(position + 1, len(tokens)):
        if tokens[i] in spec.triggers:
            upper = i
            break

    return lower, upper


def _nearest_match(
    tokens: Sequence[str],
    trigger_index: int,
    role_index: int,
    spec: CommandSpec,
) -> Optional[int]:
    """Closest word of the role to a trigger occurrence, leftmost on ties."""
    anchor = trigger_index + spec.start_offsets[role_index]
    start = max(anchor - spec.left_intervals[role_index], 0)
    end = min(anchor + spec.right_intervals[role_index], len(tokens) - 1)
    words = spec.vocabulary[role_index]

    matches = [i for i in range(start, end + 1) if i != trigger_index and tokens[i] in words]
    if not matches:
        return None
    return min(matches, key=lambda i: abs(i - trigger_index))


def _claimed_by_earlier_trigger(
    tokens: Sequence[str],
    index: int,
    position: int,
    role_index: int,
    spec: CommandSpec,
) -> bool:
    """
    True if an earlier trigger occurrence reaching `index` would pick it.

    An earlier trigger with a closer word of its own leaves `index` free.
    """
    for i in range(index):
        if i == position or tokens[i] not in spec.triggers:
            continue
        if _nearest_match(tokens, i, role_index, spec) == index:
            return True
    return False


def words_verification(
    tokens: Sequence[str],
    position: int,
    spec: CommandSpec,
) -> Optional[MatchResult]:
    """
    Find the words of each role of `spec` near the trigger at `position`.

    Args:
        tokens: The prepared sentence
        position: Index of the trigger word in `tokens`
        spec: Command whose roles and behavior flags drive the scan

    Returns:
        A list with one sub-slice per role (empty when the role matched
        nothing), or None if no role matched at all.
    """
    result: MatchResult = [[] for _ in range(spec.role_count)]
    if not tokens or not 0 <= position < len(tokens):
        return None

    if spec.ignore_repeated_triggers:
        lower_bound, upper_bound = _trigger_bounds(tokens, position, spec)
    else:
        lower_bound, upper_bound = -1, len(tokens)

    previous_match: Optional[int] = None
    continue_anchor: Optional[int] = None
    any_match = False

    for role_index, words in enumerate(spec.vocabulary):
        anchor = position
        if continue_anchor is not None and role_index > spec.continue_with_role:
            anchor = continue_anchor
        anchor += spec.start_offsets[role_index]

        start = max(lower_bound + 1, anchor - spec.left_intervals[role_index], 0)
        end = min(upper_bound - 1, anchor + spec.right_intervals[role_index], len(tokens) - 1)

        candidates: List[int] = []
        for i in range(start, end + 1):
            token = tokens[i]
            if token not in words:
                continue
            if spec.exclude_trigger and i == position:
                continue
            if spec.exclude_trigger_words and token in spec.triggers:
                continue
            if spec.ordered and previous_match is not None and i <= previous_match:
                continue
            if spec.ignore_repeated_commands and i < position and _claimed_by_earlier_trigger(
                    tokens, i, position, role_index, spec):
                continue
            candidates.append(i)

        if spec.return_last_match:
            candidates = candidates[-1:]

        if not candidates:
            if spec.stop_at_first_unmatched:
                break
            continue

        result[role_index] = [tokens[i] for i in candidates]
        previous_match = candidates[-1] if spec.ordered else candidates[0]
        if role_index == spec.continue_with_role:
            continue_anchor = candidates[0]
        any_match = True

    logger.debug(f"'{tokens[position]}'@{position} cmd {spec.id} -> {result}")

    return result if any_match else None
