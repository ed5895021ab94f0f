# Commands module - Catalog, matching engine and task filter
# This module does NOT execute commands, only detects them
# No I/O beyond loading the catalog

from .catalog import (
    CommandCatalog, CommandSpec, ConditionAlternative, SubCondition,
    RoleRef, TriggerRef, DONT, WARN_WHATS_IT,
)
from .engine import CommandMatcher
from .task_filter import resolve_negations, remove_repeated

__all__ = [
    "CommandCatalog", "CommandSpec", "ConditionAlternative", "SubCondition",
    "RoleRef", "TriggerRef", "DONT", "WARN_WHATS_IT",
    "CommandMatcher", "resolve_negations", "remove_repeated",
]
