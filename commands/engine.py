"""
Command Matching Engine
-----------------------
Scans a prepared sentence once, left to right, and collects the result codes
of every allowed command it finds.

No execution, no state kept between calls.
"""

from typing import Callable, Iterable, List, Optional, Sequence

from .catalog import (
    CommandCatalog, CommandSpec, DONT, NEGATION_MARKER, WARN_WHATS_IT, WHATS_IT,
)
from .conditions import MatchResult, evaluate, gate_allows
from .verification import words_verification
from core.errors import FaultyCatalogUsage
from infra.logging import get_logger

Verifier = Callable[[Sequence[str], int, CommandSpec], Optional[MatchResult]]


class CommandMatcher:
    """
    Detects catalog commands in a tokenized sentence.

    A trigger word may match several allowed commands; each of them may
    contribute a code for that position, in the order the ids were given.
    """

    def __init__(self, catalog: CommandCatalog, verifier: Optional[Verifier] = None):
        self._catalog = catalog
        self._verifier = verifier or words_verification
        self._logger = get_logger("commands.engine")

    @property
    def catalog(self) -> CommandCatalog:
        return self._catalog

    def validate_ids(self, allowed_ids: Iterable[int]) -> List[int]:
        """Raise FaultyCatalogUsage for any id outside 1..highest_id."""
        ids = list(allowed_ids)
        highest = self._catalog.highest_id
        for command_id in ids:
            if command_id <= 0:
                raise FaultyCatalogUsage(
                    "Non-positive command identifier sent for detection",
                    command_id=command_id,
                )
            if command_id > highest:
                raise FaultyCatalogUsage(
                    "Command identifier above highest value sent for detection",
                    command_id=command_id,
                )
        return ids

    def detect(self, tokens: Sequence[str], allowed_ids: Iterable[int]) -> List[float]:
        """
        Return the result codes found in `tokens`, in scan order.

        Negation markers become DONT and unresolved "it" markers become
        WARN_WHATS_IT; both are left for the task filter to handle.
        """
        ids = self.validate_ids(allowed_ids)
        # Ids below highest_id with no catalog entry can never trigger.
        specs = [self._catalog.get(i) for i in ids]
        specs = [spec for spec in specs if spec is not None]

        detected: List[float] = []

        for position, token in enumerate(tokens):
            if token == NEGATION_MARKER:
                detected.append(DONT)
                continue
            if token == WHATS_IT:
                detected.append(WARN_WHATS_IT)
                continue

            for spec in specs:
                if token not in spec.triggers:
                    continue

                match_result = self._verifier(tokens, position, spec)
                self._logger.debug(
                    f"Trigger '{token}'@{position} for command {spec.id}: {match_result}"
                )

                if not gate_allows(spec.continue_if, spec.stop_if, match_result, token):
                    continue

                code = evaluate(match_result, token, spec.returns)
                if code is not None:
                    detected.append(code)

        self._logger.debug(f"Detected before filtering: {detected}")
        return detected
