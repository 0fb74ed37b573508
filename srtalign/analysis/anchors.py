"""Anchor candidate detection at the beginning and end of two streams.

Two streams of the same movie usually start and end with the same lines, so
lexical matches found there are good reference points for fitting a time
correction. Candidates are ranked by how close they lie to the stream
boundary; the lexical score only decides whether a pair is a candidate.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from srtalign.analysis.matching import LexicalMatcher
from srtalign.util.types import AnchorCandidates, Sentence, SentenceStream


logger = logging.getLogger(__name__)

WINDOW_TOKEN_MODES = ("last", "all")


def window_tokens(sentence: Sentence, mode: str = "last") -> Tuple[str, ...]:
    """Tokens representing a sentence inside a matching window.

    ``last`` keeps only the final token, a cheap stand-in for the sentence
    content; ``all`` uses the full token list.
    """
    if mode not in WINDOW_TOKEN_MODES:
        raise ValueError(f"Unknown window token mode: {mode}")
    if not sentence.tokens:
        return ()
    if mode == "last":
        return (sentence.tokens[-1],)
    return tuple(sentence.tokens)


def _windows(
    sentences: Sequence[Sentence], window: int, mode: str
) -> Tuple[List[Tuple[str, ...]], List[Tuple[str, ...]]]:
    leading = [window_tokens(s, mode) for s in sentences[:window]]
    trailing = [window_tokens(s, mode) for s in sentences[-window:]] if window > 0 else []
    return leading, trailing


def find_anchor_candidates(
    source: SentenceStream,
    target: SentenceStream,
    matcher: LexicalMatcher,
    *,
    window: int = 25,
    window_mode: str = "last",
    max_matches: Optional[int] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> AnchorCandidates:
    """Match every sentence pair of the leading and of the trailing windows.

    Leading pairs ``(s, t)`` score ``1 / (s + t + 2)``. Trailing pairs are
    keyed by absolute sentence index and score ``1 / (ds + dt + 2)`` where
    ``ds``/``dt`` count sentences to the end of each stream, which equals
    ``1 / (2W - s - t)`` for full windows.

    Args:
        source: Source language stream
        target: Target language stream
        matcher: Lexical matcher deciding which pairs match
        window: Number of sentences per window
        window_mode: "last" (final token only) or "all" (whole sentence)
        max_matches: Keep only this many best candidates per window
        metadata: Optional metadata dict to populate

    Returns:
        AnchorCandidates with the leading and trailing candidate pairs
    """
    if metadata is None:
        metadata = {}

    src_lead, src_trail = _windows(source.sentences, window, window_mode)
    trg_lead, trg_trail = _windows(target.sentences, window, window_mode)

    first: Dict[Tuple[int, int], float] = {}
    for s, src_tokens in enumerate(src_lead):
        for t, trg_tokens in enumerate(trg_lead):
            strategy, score = matcher.match(src_tokens, trg_tokens)
            if score > 0:
                logger.debug("leading match %d:%d via %s (%.3f)", s, t, strategy.value, score)
                first[(s, t)] = 1.0 / (s + t + 2)

    src_offset = len(source) - len(src_trail)
    trg_offset = len(target) - len(trg_trail)
    last: Dict[Tuple[int, int], float] = {}
    for s, src_tokens in enumerate(src_trail):
        ds = len(src_trail) - 1 - s
        for t, trg_tokens in enumerate(trg_trail):
            strategy, score = matcher.match(src_tokens, trg_tokens)
            if score > 0:
                dt = len(trg_trail) - 1 - t
                pair = (src_offset + s, trg_offset + t)
                logger.debug("trailing match %d:%d via %s (%.3f)", pair[0], pair[1], strategy.value, score)
                last[pair] = 1.0 / (ds + dt + 2)

    candidates = AnchorCandidates(first=first, last=last)
    if max_matches:
        candidates = candidates.truncated(max_matches)

    metadata.setdefault("anchors", {}).update({
        "window": window,
        "window_mode": window_mode,
        "strategies": [s.value for s in matcher.strategies],
        "first_candidates": len(candidates.first),
        "last_candidates": len(candidates.last),
    })
    return candidates
