"""
Task Filter
-----------
Post-processing of a detected code sequence.

- resolve_negations(): applies "don't" to the commands around it
- remove_repeated(): collapses immediately repeated codes (opt-in)

Both work on a copy: elements are first marked, then dropped in one pass,
so no index shifts while scanning.
"""

from typing import List, Sequence, Set

from .catalog import DONT
from infra.logging import get_logger

logger = get_logger("commands.task_filter")


def _compact(codes: Sequence[float], marked: Set[int]) -> List[float]:
    return [code for i, code in enumerate(codes) if i not in marked]


def resolve_negations(codes: Sequence[float]) -> List[float]:
    """
    Remove negated commands and every DONT sentinel.

    For each DONT at position p:
    - the DONT itself is removed;
    - if the next element is a normal command that already appeared up to p,
      every earlier copy and the next element are removed
      ("do 1 and do 2. no, don't do 1");
    - otherwise the element before the DONT is removed, if it is a normal
      command ("do 1, no, don't").

    This is a heuristic; sentences repeating the same command many times
    can be resolved wrongly.
    """
    marked: Set[int] = set()

    def is_normal(index: int) -> bool:
        return 0 <= index < len(codes) and index not in marked and codes[index] > 0

    for p, code in enumerate(codes):
        if code != DONT:
            continue

        marked.add(p)
        delete_previous = True

        if is_normal(p + 1):
            next_code = codes[p + 1]
            earlier = [
                i for i in range(p + 1)
                if i not in marked and codes[i] == next_code
            ]
            if earlier:
                marked.add(p + 1)
                marked.update(earlier)
                delete_previous = False

        if delete_previous and is_normal(p - 1):
            marked.add(p - 1)

    filtered = _compact(codes, marked)
    logger.debug(f"Negations resolved: {list(codes)} -> {filtered}")
    return filtered


def remove_repeated(codes: Sequence[float]) -> List[float]:
    """
    Drop every code equal to the one right after it.

    [1, 3, 3, 4, 3, 4] -> [1, 3, 4, 3, 4]; runs collapse in one pass.
    """
    marked = {i for i in range(len(codes) - 1) if codes[i] == codes[i + 1]}
    return _compact(codes, marked)
