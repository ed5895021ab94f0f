"""
Command Detector
----------------
Public entry point for detecting commands in a sentence.

Pipeline:
    sentence -> tokens -> engine -> negation filter -> (optional dedup)

Every fault raised inside a call is caught here and returned as a
DetectionError; callers never see an exception.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union
import time
import yaml

from commands.catalog import CommandCatalog
from commands.engine import CommandMatcher
from commands.normalizer import to_tokens
from commands.task_filter import remove_repeated, resolve_negations
from infra.logging import DetectionContext, get_logger

from .errors import DetectionError, log_detection_error

CMDS_SEPARATOR = ", "

logger = get_logger("core.detector")


@dataclass
class DetectorConfig:
    """Configuration for the detector."""
    catalog_path: Optional[str] = None  # None = bundled command_map.yaml
    remove_repeated: bool = False
    log_level: str = "INFO"
    log_dir: Optional[str] = None

    @classmethod
    def from_yaml(cls, config_path: Union[str, Path] = "config.yaml") -> "DetectorConfig":
        """Load configuration from YAML, falling back to defaults."""
        path = Path(config_path)

        if not path.exists():
            logger.warning(f"Config file not found: {path}")
            return cls()

        try:
            with open(path, 'r', encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.warning(f"Unreadable config file {path}: {e}")
            return cls()

        if not isinstance(data, dict):
            logger.warning(f"Config file {path} is not a mapping, using defaults")
            return cls()

        detection = data.get('detection') or {}
        logging_config = data.get('logging') or {}
        if not isinstance(detection, dict):
            logger.warning(f"Ignoring malformed 'detection' section in {path}")
            detection = {}
        if not isinstance(logging_config, dict):
            logger.warning(f"Ignoring malformed 'logging' section in {path}")
            logging_config = {}

        return cls(
            catalog_path=detection.get('catalog_path'),
            remove_repeated=bool(detection.get('remove_repeated', False)),
            log_level=str(logging_config.get('level', 'INFO')).upper(),
            log_dir=logging_config.get('log_dir'),
        )


def format_code(code: float) -> str:
    """Render a code without a trailing '.0' for integral values."""
    if float(code).is_integer():
        return str(int(code))
    return repr(float(code))


@dataclass
class DetectionResult:
    """Result of a detection call: codes on success, an error otherwise."""
    codes: List[float] = field(default_factory=list)
    error: Optional[DetectionError] = None
    tokens: List[str] = field(default_factory=list)
    elapsed_ms: float = 0.0

    @property
    def success(self) -> bool:
        return self.error is None

    def to_wire(self) -> str:
        """Codes joined by CMDS_SEPARATOR, or the prefixed error string."""
        if self.error is not None:
            return self.error.to_wire()
        return CMDS_SEPARATOR.join(format_code(code) for code in self.codes)

    def __repr__(self) -> str:
        status = "✓" if self.success else "✗"
        return f"DetectionResult({status} codes={self.codes}, error={self.error})"


def parse_allowed_ids(allowed: Union[str, Iterable[int]]) -> List[int]:
    """
    Parse the allowed-commands list.

    Items that are not integers are skipped with a warning; range checks
    are left to the engine.
    """
    ids: List[int] = []
    if not isinstance(allowed, str):
        for item in allowed:
            try:
                ids.append(int(item))
            except (TypeError, ValueError):
                logger.warning(f"Ignoring malformed command id: {item!r}")
        return ids

    for item in allowed.split(CMDS_SEPARATOR):
        try:
            ids.append(int(item.strip()))
        except ValueError:
            if item.strip():
                logger.warning(f"Ignoring malformed command id: {item!r}")
    return ids


class CommandDetector:
    """
    Detects catalog commands in natural-language sentences.

    Holds the read-only catalog; keeps no per-call state.
    """

    def __init__(
        self,
        config: Optional[DetectorConfig] = None,
        catalog: Optional[CommandCatalog] = None,
        matcher: Optional[CommandMatcher] = None,
    ):
        self.config = config or DetectorConfig()
        if matcher is not None:
            self._catalog = matcher.catalog
            self._matcher = matcher
        else:
            self._catalog = catalog or CommandCatalog.load(self.config.catalog_path)
            self._matcher = CommandMatcher(self._catalog)

    @property
    def catalog(self) -> CommandCatalog:
        return self._catalog

    def all_ids(self) -> str:
        """Every catalog id, ready to pass as `allowed`."""
        return self._catalog.all_ids(CMDS_SEPARATOR)

    def detect(
        self,
        sentence: str,
        allowed: Union[str, Iterable[int]],
        remove_repeated_cmds: Optional[bool] = None,
    ) -> DetectionResult:
        """
        Detect the allowed commands present in `sentence`.

        Args:
            sentence: Raw sentence, e.g. straight from speech recognition
            allowed: Command ids allowed in the result, as "1, 2, 3" or ints
            remove_repeated_cmds: Collapse immediate repeats; defaults to config
        """
        if remove_repeated_cmds is None:
            remove_repeated_cmds = self.config.remove_repeated

        start = time.perf_counter()
        tokens: List[str] = []

        with DetectionContext():
            try:
                allowed_ids = parse_allowed_ids(allowed)
                tokens = to_tokens(sentence, self._catalog)
                logger.debug(f"Tokens: {tokens}")

                codes = self._matcher.detect(tokens, allowed_ids)
                codes = resolve_negations(codes)
                if remove_repeated_cmds:
                    codes = remove_repeated(codes)
            except Exception as e:
                error = DetectionError.from_exception(
                    e, details={"sentence": sentence, "allowed": str(allowed)}
                )
                log_detection_error(logger, error)
                return DetectionResult(
                    error=error,
                    tokens=tokens,
                    elapsed_ms=(time.perf_counter() - start) * 1000,
                )

            result = DetectionResult(
                codes=codes,
                tokens=tokens,
                elapsed_ms=(time.perf_counter() - start) * 1000,
            )
            logger.info(f"Detected: [{result.to_wire()}]")
            return result


_default_detector: Optional[CommandDetector] = None


def get_detector() -> CommandDetector:
    """Get the process-wide detector, creating it on first use."""
    global _default_detector
    if _default_detector is None:
        _default_detector = CommandDetector()
    return _default_detector


def detect_commands(sentence: str, allowed_cmds: str) -> str:
    """
    String interface to the detector.

    Returns the detected codes separated by CMDS_SEPARATOR, an empty string
    if none were detected, or a string starting with ERR_CMD_DETECT if
    anything went wrong.
    """
    try:
        detector = get_detector()
    except Exception as e:
        error = DetectionError.from_exception(e)
        log_detection_error(logger, error)
        return error.to_wire()
    return detector.detect(sentence, allowed_cmds).to_wire()
