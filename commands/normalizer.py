"""
Sentence Preparation
--------------------
Turns a raw transcript into tokens the engine can compare literally.

1. correct_sentence(): casing, punctuation and negation spelling
2. prepare_tokens(): joins catalog compound words ("airplane mode")
3. resolve_anaphora(): replaces "it" with the last referent seen
"""

from typing import List, Sequence
import re

from .catalog import CommandCatalog, NEGATION_MARKER, WHATS_IT
from infra.logging import get_logger

logger = get_logger("commands.normalizer")

# Anything that is not a word character, an apostrophe or whitespace.
_PUNCTUATION_RE = re.compile(r"[^\w'\s]")
# Apostrophes used as quotes rather than inside a word.
_STRAY_APOSTROPHE_RE = re.compile(r"(?<!\w)'|'(?!\w)")
_WHITESPACE_RE = re.compile(r"\s+")

_NEGATION_RE = re.compile(r"\b(?:do not|does not|dont|doesn't|doesnt)\b")

ANAPHORA_WORDS = frozenset({"it"})


def correct_sentence(sentence: str) -> str:
    """Lower-case, strip punctuation and fold negation spellings into "don't"."""
    sentence = sentence.lower().replace("’", "'")
    sentence = _PUNCTUATION_RE.sub(" ", sentence)
    sentence = _STRAY_APOSTROPHE_RE.sub(" ", sentence)
    sentence = _WHITESPACE_RE.sub(" ", sentence).strip()
    return _NEGATION_RE.sub(NEGATION_MARKER, sentence)


def prepare_tokens(tokens: Sequence[str], catalog: CommandCatalog) -> List[str]:
    """Join multi-word catalog terms into single underscore tokens."""
    sentence = " ".join(tokens)
    # Longest phrases first so "airplane mode on" wins over "airplane mode".
    for phrase in sorted(catalog.compound_words, key=len, reverse=True):
        parts = phrase.split()
        if len(parts) < 2:
            continue
        pattern = r"\b" + r"\s+".join(re.escape(p) for p in parts) + r"\b"
        sentence = re.sub(pattern, "_".join(parts), sentence)
    return sentence.split(" ") if sentence else []


def resolve_anaphora(tokens: Sequence[str], catalog: CommandCatalog) -> List[str]:
    """
    Replace each "it" with the most recent referent before it.

    An "it" with nothing to refer to becomes the WHATS_IT marker.
    """
    resolved: List[str] = []
    last_referent = None

    for token in tokens:
        if token in ANAPHORA_WORDS:
            if last_referent is None:
                logger.debug("Unresolved 'it' in sentence")
                resolved.append(WHATS_IT)
            else:
                resolved.append(last_referent)
            continue

        if token in catalog.referents:
            last_referent = token
        resolved.append(token)

    return resolved


def to_tokens(sentence: str, catalog: CommandCatalog) -> List[str]:
    """Full preparation pipeline: raw sentence to engine tokens."""
    corrected = correct_sentence(sentence)
    tokens = corrected.split(" ") if corrected else []
    tokens = prepare_tokens(tokens, catalog)
    return resolve_anaphora(tokens, catalog)
