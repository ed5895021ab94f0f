"""
Command Catalog
---------------
Immutable command definitions loaded once from YAML.

Each command id maps to a single CommandSpec record holding its trigger
words, the oracle's search parameters and its condition tree.
The catalog is never mutated after loading.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Literal, Optional, Tuple, Union
import yaml

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from core.errors import CatalogError
from infra.logging import get_logger


# Sentinel codes. Never catalog-assigned, so every catalog code must be > 0.
DONT = -1.0
WARN_WHATS_IT = -10.0

# Marker tokens produced by the normalizer.
NEGATION_MARKER = "don't"
WHATS_IT = "3234_WHATS_IT"

DEFAULT_CATALOG_PATH = Path(__file__).parent / "command_map.yaml"

logger = get_logger("commands.catalog")


@dataclass(frozen=True)
class RoleRef:
    """Reference to one role (sub-slice) of a MatchResult."""
    index: int


@dataclass(frozen=True)
class TriggerRef:
    """Reference to the token that triggered the evaluation."""


Reference = Union[RoleRef, TriggerRef]


@dataclass(frozen=True)
class SubCondition:
    """Holds if the referenced value equals any accepted token."""
    ref: Reference
    accepted: FrozenSet[str]


@dataclass(frozen=True)
class ConditionAlternative:
    """
    One alternative of a condition tree.

    With no conditions it is a literal alternative and always yields `code`.
    """
    conditions: Tuple[SubCondition, ...]
    code: float

    @property
    def is_literal(self) -> bool:
        return not self.conditions


# A gate is a condition tree without codes.
Gate = Tuple[Tuple[SubCondition, ...], ...]


@dataclass(frozen=True)
class CommandSpec:
    """Definition of one detectable command."""
    id: int
    name: str
    triggers: FrozenSet[str]
    vocabulary: Tuple[Tuple[str, ...], ...]
    left_intervals: Tuple[int, ...]
    right_intervals: Tuple[int, ...]
    start_offsets: Tuple[int, ...]
    returns: Tuple[ConditionAlternative, ...]
    continue_if: Gate = ()
    stop_if: Gate = ()
    exclude_trigger: bool = True
    return_last_match: bool = False
    ignore_repeated_triggers: bool = False
    ignore_repeated_commands: bool = False
    ordered: bool = False
    stop_at_first_unmatched: bool = False
    exclude_trigger_words: bool = False
    continue_with_role: int = -1

    @property
    def role_count(self) -> int:
        return len(self.vocabulary)

    def __repr__(self) -> str:
        return f"CommandSpec(id={self.id}, name={self.name})"


# Raw YAML models, validated before being frozen into the records above.

class _SubConditionModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    role: Union[int, Literal["trigger"]]
    any_of: List[str] = Field(..., min_length=1)


class _AlternativeModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    when: List[_SubConditionModel] = Field(default_factory=list)
    code: float = Field(..., gt=0)


class _RoleModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    words: List[str] = Field(..., min_length=1)
    left: int = Field(3, ge=0)
    right: int = Field(3, ge=0)
    offset: int = 0


class _CommandModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: int = Field(..., gt=0)
    name: str
    triggers: List[str] = Field(..., min_length=1)
    roles: List[_RoleModel] = Field(default_factory=list)
    returns: List[_AlternativeModel] = Field(..., min_length=1)
    continue_if: List[List[_SubConditionModel]] = Field(default_factory=list)
    stop_if: List[List[_SubConditionModel]] = Field(default_factory=list)
    exclude_trigger: bool = True
    return_last_match: bool = False
    ignore_repeated_triggers: bool = False
    ignore_repeated_commands: bool = False
    ordered: bool = False
    stop_at_first_unmatched: bool = False
    exclude_trigger_words: bool = False
    continue_with_role: int = -1

    @model_validator(mode="after")
    def _check_role_indices(self) -> "_CommandModel":
        role_count = len(self.roles)
        sub_conditions = [c for alt in self.returns for c in alt.when]
        sub_conditions += [c for alt in self.continue_if + self.stop_if for c in alt]
        for sub_cond in sub_conditions:
            if sub_cond.role != "trigger" and not 0 <= sub_cond.role < role_count:
                raise ValueError(
                    f"command {self.id} references role {sub_cond.role} "
                    f"but only has {role_count} roles"
                )
        if self.continue_with_role >= role_count:
            raise ValueError(
                f"command {self.id}: continue_with_role {self.continue_with_role} "
                f"out of range"
            )
        return self


class _CatalogModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    commands: List[_CommandModel] = Field(..., min_length=1)
    referents: List[str] = Field(default_factory=list)
    compound_words: List[str] = Field(default_factory=list)


def _to_sub_condition(model: _SubConditionModel) -> SubCondition:
    ref = TriggerRef() if model.role == "trigger" else RoleRef(model.role)
    return SubCondition(ref=ref, accepted=frozenset(model.any_of))


def _to_gate(alternatives: List[List[_SubConditionModel]]) -> Gate:
    return tuple(
        tuple(_to_sub_condition(c) for c in alternative)
        for alternative in alternatives
    )


def _to_spec(model: _CommandModel) -> CommandSpec:
    return CommandSpec(
        id=model.id,
        name=model.name,
        triggers=frozenset(model.triggers),
        vocabulary=tuple(tuple(role.words) for role in model.roles),
        left_intervals=tuple(role.left for role in model.roles),
        right_intervals=tuple(role.right for role in model.roles),
        start_offsets=tuple(role.offset for role in model.roles),
        returns=tuple(
            ConditionAlternative(
                conditions=tuple(_to_sub_condition(c) for c in alt.when),
                code=alt.code,
            )
            for alt in model.returns
        ),
        continue_if=_to_gate(model.continue_if),
        stop_if=_to_gate(model.stop_if),
        exclude_trigger=model.exclude_trigger,
        return_last_match=model.return_last_match,
        ignore_repeated_triggers=model.ignore_repeated_triggers,
        ignore_repeated_commands=model.ignore_repeated_commands,
        ordered=model.ordered,
        stop_at_first_unmatched=model.stop_at_first_unmatched,
        exclude_trigger_words=model.exclude_trigger_words,
        continue_with_role=model.continue_with_role,
    )


class CommandCatalog:
    """
    Read-only mapping from command id to CommandSpec.

    Responsibilities:
    - Load and validate command definitions from YAML
    - Report the highest known id
    - Provide referents and compound words for sentence preparation
    """

    def __init__(
        self,
        specs: Iterable[CommandSpec],
        referents: Iterable[str] = (),
        compound_words: Iterable[str] = (),
    ):
        self._specs: Dict[int, CommandSpec] = {}
        for spec in specs:
            if spec.id in self._specs:
                raise CatalogError(f"Duplicate command id: {spec.id}")
            self._specs[spec.id] = spec
        self._referents = frozenset(referents)
        self._compound_words = tuple(compound_words)

    @classmethod
    def from_dict(cls, data: Dict) -> "CommandCatalog":
        """Build a catalog from already-parsed YAML data."""
        try:
            model = _CatalogModel.model_validate(data or {})
        except ValidationError as e:
            raise CatalogError(f"Invalid command catalog: {e}") from e

        return cls(
            specs=[_to_spec(cmd) for cmd in model.commands],
            referents=model.referents,
            compound_words=model.compound_words,
        )

    @classmethod
    def load(cls, catalog_path: Optional[Union[str, Path]] = None) -> "CommandCatalog":
        """Load a catalog from a YAML file."""
        path = Path(catalog_path) if catalog_path else DEFAULT_CATALOG_PATH

        if not path.exists():
            raise CatalogError(f"Command catalog not found: {path}")

        with open(path, 'r', encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise CatalogError(f"Unreadable command catalog {path}: {e}") from e

        catalog = cls.from_dict(data)
        logger.info(f"Command catalog loaded from {path}: {len(catalog)} commands")
        return catalog

    @property
    def highest_id(self) -> int:
        return max(self._specs) if self._specs else 0

    @property
    def referents(self) -> FrozenSet[str]:
        return self._referents

    @property
    def compound_words(self) -> Tuple[str, ...]:
        return self._compound_words

    def get(self, command_id: int) -> Optional[CommandSpec]:
        """Get a command definition by id."""
        return self._specs.get(command_id)

    def __getitem__(self, command_id: int) -> CommandSpec:
        return self._specs[command_id]

    def list_commands(self) -> List[CommandSpec]:
        """List all commands ordered by id."""
        return [self._specs[i] for i in sorted(self._specs)]

    def all_ids(self, separator: str = ", ") -> str:
        """All command ids, ready to be passed as the allowed-commands list."""
        return separator.join(str(i) for i in sorted(self._specs))

    def __len__(self) -> int:
        return len(self._specs)

    def __contains__(self, command_id: int) -> bool:
        return command_id in self._specs
