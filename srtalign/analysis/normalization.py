"""Subtitle cue text cleaning and tokenization.

Cue-based streams (SRT/VTT/ASS read directly, without a sentence-split XML
version) need their text stripped of markup before the tokens can be used for
lexical matching. Unlike similarity-oriented normalization, case is kept:
capitalisation is what identifies names for the upper-case filter.
"""

import re
import unicodedata
from dataclasses import dataclass
from typing import List

import regex


@dataclass(frozen=True)
class NormalizationConfig:
    """Configuration for cue text cleaning."""
    remove_hearing_impaired: bool = True
    strip_speaker_labels: bool = True
    canonicalize_quotes: bool = True


# words with inner apostrophes/hyphens stay together; punctuation is split off
_TOKEN_RE = regex.compile(r"[\p{L}\p{N}_]+(?:['’\-][\p{L}\p{N}_]+)*|[^\p{L}\p{N}_\s]")


def _apply_basic_cleaning(text: str) -> str:
    """Apply basic text cleaning: newlines, unicode normalization, tag removal."""
    if not text:
        return ""

    s = text.replace("\n", " ").replace("\\N", " ")
    s = unicodedata.normalize("NFKC", s)

    # Remove HTML-like tags
    # Example: "<i>Hello</i>" → " Hello "
    s = re.sub(r"<[^>]+>", " ", s)

    # Remove ASS/SSA style tags like {\an8} or {italic}
    s = re.sub(r"\{\\[^}]*\}", " ", s)
    s = re.sub(r"\{[^}]*\}", " ", s)

    s = s.replace("♪", " ").replace("♫", " ")

    # Examples: "Hello!!!" → "Hello!", "What???" → "What?"
    s = re.sub(r"([!?.,])\1{1,}", r"\1", s)
    return s


def _remove_hearing_impaired_annotations(text: str) -> str:
    """Remove hearing-impaired annotations like [music], (laughs)."""
    s = text
    prev = None
    while prev != s:
        prev = s
        s = re.sub(r"\[[^\[\]]*\]", " ", s)
        s = re.sub(r"\([^()]*\)", " ", s)
    return s


def _strip_speaker_labels(text: str) -> str:
    """Remove leading dialogue dashes and upper-case speaker labels."""
    s = text.strip()
    # Examples: "- Hello there" → "Hello there"
    s = re.sub(r"^(?:[-–—]\s*)+", "", s)
    # Examples: "JOHN: Hello" → "Hello"; "Note: this" is kept (not all caps)
    s = regex.sub(r"^[\p{Lu}\s'\-]+:\s+", "", s)
    return s


def _canonicalize_quotes_and_dashes(text: str) -> str:
    """Standardize various quote and dash characters."""
    replacements = {
        "“": '"', "”": '"', "„": '"', "«": '"', "»": '"',
        "‘": "'", "’": "'",
        "—": "-", "–": "-",
    }
    s = text
    for k, v in replacements.items():
        s = s.replace(k, v)
    return s


def normalize_cue_text(text: str, config: NormalizationConfig = NormalizationConfig()) -> str:
    """Clean one cue's text for tokenization (case preserving)."""
    s = _apply_basic_cleaning(text)
    if config.remove_hearing_impaired:
        s = _remove_hearing_impaired_annotations(s)
    if config.strip_speaker_labels:
        s = _strip_speaker_labels(s)
    if config.canonicalize_quotes:
        s = _canonicalize_quotes_and_dashes(s)
    return re.sub(r"\s+", " ", s).strip()


def tokenize_text(text: str) -> List[str]:
    """Split cleaned text into word and punctuation tokens.

    Examples:
        "Don't go, Anna!" → ["Don't", "go", ",", "Anna", "!"]
    """
    return _TOKEN_RE.findall(text)
