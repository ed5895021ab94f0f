"""
Condition Evaluator
-------------------
Turns the oracle's matched sub-slices into a result code.

Alternatives are tried in catalog order and the first one whose
sub-conditions all hold wins. Gates use the same sub-condition test.
"""

from typing import List, Optional, Sequence

from .catalog import ConditionAlternative, Gate, RoleRef, SubCondition, TriggerRef

MatchResult = List[List[str]]


def role_value(match_result: Optional[MatchResult], index: int) -> str:
    """First token of a role's sub-slice, or "" when it matched nothing."""
    if not match_result or index >= len(match_result):
        return ""
    sub_slice = match_result[index]
    return sub_slice[0] if sub_slice else ""


def sub_condition_holds(
    sub_condition: SubCondition,
    match_result: Optional[MatchResult],
    trigger: str,
) -> bool:
    ref = sub_condition.ref
    if isinstance(ref, TriggerRef):
        value = trigger
    elif isinstance(ref, RoleRef):
        value = role_value(match_result, ref.index)
    else:
        raise TypeError(f"Unknown condition reference: {ref!r}")
    return value in sub_condition.accepted


def all_hold(
    sub_conditions: Sequence[SubCondition],
    match_result: Optional[MatchResult],
    trigger: str,
) -> bool:
    return all(sub_condition_holds(c, match_result, trigger) for c in sub_conditions)


def evaluate(
    match_result: Optional[MatchResult],
    trigger: str,
    tree: Sequence[ConditionAlternative],
) -> Optional[float]:
    """
    Evaluate a condition tree.

    Returns the code of the first alternative that holds, or None if no
    alternative does.
    """
    for alternative in tree:
        if alternative.is_literal:
            return alternative.code
        if all_hold(alternative.conditions, match_result, trigger):
            return alternative.code
    return None


def _any_alternative_holds(
    gate: Gate,
    match_result: Optional[MatchResult],
    trigger: str,
) -> bool:
    return any(all_hold(alt, match_result, trigger) for alt in gate)


def gate_allows(
    continue_if: Gate,
    stop_if: Gate,
    match_result: Optional[MatchResult],
    trigger: str,
) -> bool:
    """
    Pre-filter applied before the condition tree.

    An empty continue gate always passes; an empty stop gate never blocks.
    """
    if continue_if and not _any_alternative_holds(continue_if, match_result, trigger):
        return False
    if stop_if and _any_alternative_holds(stop_if, match_result, trigger):
        return False
    return True
