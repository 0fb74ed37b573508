"""Lexical matching between two token lists.

Three strategies detect that two sentences probably express the same thing:

- dictionary: a word pair listed in a bilingual dictionary
- identical: a run of identical tokens (names, numbers, loan words)
- cognate: two words with a high longest-common-subsequence ratio (LCSR)

The strategies are tried in that fixed order and the first positive score
wins. Which strategies run is decided once, from an immutable ``MatchConfig``
and the presence of a dictionary.

Example:

    config = MatchConfig(identical_min_length=3, cognate_threshold=0.8)
    matcher = LexicalMatcher(config, source_freq=src.word_freq, target_freq=trg.word_freq)
    matcher.score(("Hello", "Paris"), ("Bonjour", "Paris"))  # -> 5.0
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import regex

from srtalign.util.types import Dictionary


logger = logging.getLogger(__name__)

_UPPER_INITIAL_RE = regex.compile(r"^\p{Lu}")


class MatchStrategy(str, Enum):
    DICTIONARY = "dictionary"
    IDENTICAL = "identical"
    COGNATE = "cognate"


@dataclass(frozen=True)
class MatchConfig:
    """Configuration for lexical anchor matching."""
    # identical-token matching; the run must be longer than this many characters
    identical_min_length: Optional[int] = None
    token_min_length: Optional[int] = None
    char_set: Optional[str] = None  # character class, e.g. r"\p{L}"
    upper_case: bool = False        # only tokens starting with an upper-case letter
    use_word_freq: bool = False     # prefer rare identical tokens

    # cognate matching with LCSR >= threshold
    cognate_threshold: Optional[float] = None
    cognate_min_length: int = 5


# =============================================================================
# String similarity
# =============================================================================

def lcs_length(a: str, b: str) -> int:
    """Length of the longest common subsequence of two strings."""
    m, n = len(a), len(b)
    if m == 0 or n == 0:
        return 0
    table = np.zeros((m + 1, n + 1), dtype=np.int32)
    for i in range(1, m + 1):
        ca = a[i - 1]
        for j in range(1, n + 1):
            if ca == b[j - 1]:
                table[i, j] = table[i - 1, j - 1] + 1
            elif table[i, j - 1] > table[i - 1, j]:
                table[i, j] = table[i, j - 1]
            else:
                table[i, j] = table[i - 1, j]
    return int(table[m, n])


def lcsr(a: str, b: str) -> float:
    """Longest common subsequence ratio: LCS / length of the longer string."""
    longer = max(len(a), len(b))
    if longer == 0:
        return 0.0
    return lcs_length(a, b) / longer


# =============================================================================
# Strategies
# =============================================================================

def _fold_first(tokens: Sequence[str], upper_case: bool) -> List[str]:
    """Copy tokens, lower-casing the first one when only capitalised words count.

    A sentence-initial capital says nothing about the word being a name.
    """
    folded = list(tokens)
    if upper_case and folded:
        folded[0] = folded[0].lower()
    return folded


def _unique(tokens: Sequence[str]) -> List[str]:
    return list(dict.fromkeys(tokens))


def dictionary_score(src: Sequence[str], trg: Sequence[str], dictionary: Dictionary) -> float:
    """1.0 if any source/target word pair is a dictionary entry."""
    trg_words = _unique(trg)
    for s in _unique(src):
        translations = dictionary.get(s)
        if not translations:
            continue
        for t in trg_words:
            if t in translations:
                logger.debug("found in dictionary '%s' - '%s'", s, t)
                return 1.0
    return 0.0


def identical_score(
    src: Sequence[str],
    trg: Sequence[str],
    config: MatchConfig,
    source_freq: Optional[Dict[str, int]] = None,
    target_freq: Optional[Dict[str, int]] = None,
) -> float:
    """Score the longest run of identical tokens shared by two sentences.

    Every token present in both lists seeds a run that is extended forward as
    long as the following tokens are equal and pass the filters. The score is
    the character length of the longest run (tokens joined by spaces); with
    ``use_word_freq`` it is divided by the summed corpus frequencies so rare
    matches rank above common ones.
    """
    source_freq = source_freq or {}
    target_freq = target_freq or {}
    min_length = config.identical_min_length or 0
    char_set_re = regex.compile(f"^(?:{config.char_set})+$") if config.char_set else None

    def accepted(word: str) -> bool:
        if char_set_re is not None and not char_set_re.match(word):
            return False
        if config.upper_case and not _UPPER_INITIAL_RE.match(word):
            return False
        if config.token_min_length and len(word) < config.token_min_length:
            return False
        return True

    src = _fold_first(src, config.upper_case)
    trg = _fold_first(trg, config.upper_case)

    src_positions: Dict[str, List[int]] = defaultdict(list)
    trg_positions: Dict[str, List[int]] = defaultdict(list)
    for i, w in enumerate(src):
        src_positions[w].append(i)
    for j, w in enumerate(trg):
        trg_positions[w].append(j)

    best_match = ""
    best_freqs = (0, 0)
    for word, positions in src_positions.items():
        if word not in trg_positions or not accepted(word):
            continue
        for i in positions:
            for j in trg_positions[word]:
                run = [word]
                src_freq = source_freq.get(word, 0)
                trg_freq = target_freq.get(word, 0)
                spos, tpos = i + 1, j + 1
                while spos < len(src) and tpos < len(trg):
                    token = src[spos]
                    if token != trg[tpos] or not accepted(token):
                        break
                    run.append(token)
                    src_freq = max(src_freq, source_freq.get(token, 0))
                    trg_freq = max(trg_freq, target_freq.get(trg[tpos], 0))
                    spos += 1
                    tpos += 1
                match = " ".join(run)
                if len(match) > len(best_match):
                    best_match = match
                    best_freqs = (src_freq, trg_freq)

    length = len(best_match)
    if length <= min_length:
        return 0.0
    logger.debug("found identical string '%s'", best_match)
    score = float(length)
    if config.use_word_freq and sum(best_freqs):
        score /= sum(best_freqs)
    return score


def cognate_score(src: Sequence[str], trg: Sequence[str], config: MatchConfig) -> float:
    """Return the LCSR of the first word pair reaching the cognate threshold."""
    threshold = config.cognate_threshold
    if threshold is None:
        return 0.0
    min_length = config.cognate_min_length

    def accepted(word: str) -> bool:
        if len(word) < min_length:
            return False
        if config.upper_case and not _UPPER_INITIAL_RE.match(word):
            return False
        return True

    src_words = [w for w in _unique(_fold_first(src, config.upper_case)) if accepted(w)]
    trg_words = [w for w in _unique(_fold_first(trg, config.upper_case)) if accepted(w)]

    for s in src_words:
        for t in trg_words:
            if s == t:
                logger.debug("found cognate '%s' - '%s'", s, t)
                return 1.0
            longer = max(len(s), len(t))
            if min(len(s), len(t)) / longer < threshold:
                continue
            score = lcs_length(s, t) / longer
            if score >= threshold:
                logger.debug("found cognate '%s' - '%s' (%.3f)", s, t, score)
                return score
    return 0.0


# =============================================================================
# Matcher
# =============================================================================

class LexicalMatcher:
    """Scores token lists with the enabled strategies in precedence order."""

    def __init__(
        self,
        config: MatchConfig,
        dictionary: Optional[Dictionary] = None,
        source_freq: Optional[Counter] = None,
        target_freq: Optional[Counter] = None,
    ):
        self.config = config
        self.dictionary = dictionary
        self.source_freq = source_freq or Counter()
        self.target_freq = target_freq or Counter()

        strategies: List[MatchStrategy] = []
        if dictionary:
            strategies.append(MatchStrategy.DICTIONARY)
        if config.identical_min_length is not None:
            strategies.append(MatchStrategy.IDENTICAL)
        if config.cognate_threshold is not None:
            strategies.append(MatchStrategy.COGNATE)
        self.strategies: Tuple[MatchStrategy, ...] = tuple(strategies)

    def match(self, src: Sequence[str], trg: Sequence[str]) -> Tuple[Optional[MatchStrategy], float]:
        """Return the winning strategy and its score, or (None, 0.0)."""
        if not src or not trg:
            return None, 0.0
        for strategy in self.strategies:
            if strategy is MatchStrategy.DICTIONARY:
                score = dictionary_score(src, trg, self.dictionary)
            elif strategy is MatchStrategy.IDENTICAL:
                score = identical_score(src, trg, self.config, self.source_freq, self.target_freq)
            else:
                score = cognate_score(src, trg, self.config)
            if score > 0:
                return strategy, score
        return None, 0.0

    def score(self, src: Sequence[str], trg: Sequence[str]) -> float:
        return self.match(src, trg)[1]
