"""Time-axis synchronisation between two sentence streams.

Two subtitle files of the same movie often disagree by a constant offset
(different cut, intro) and a scale factor (different frame rate). Given
anchor pairs of sentences that should coincide, an affine map
``target_time = slope * source_time + offset`` is fitted on the sentences' end
times and applied to the source stream.
"""

from __future__ import annotations

import itertools
import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from srtalign.util.types import AnchorCandidates, AnchorPair, Sentence, SentenceStream


logger = logging.getLogger(__name__)

IDENTITY: Tuple[float, float] = (1.0, 0.0)


def fit_line(x1: float, y1: float, x2: float, y2: float) -> Tuple[float, float]:
    """Slope and offset of the line through two points; identity if x1 == x2."""
    if x1 - x2 != 0:
        slope = (y1 - y2) / (x1 - x2)
        return slope, y2 - x2 * slope
    return IDENTITY


def compute_offset(
    anchors: Sequence[AnchorPair],
    source: Sequence[Sentence],
    target: Sequence[Sentence],
) -> Tuple[float, float]:
    """Average the line fits over all pairs of anchors.

    Pairs referring to sentences outside either stream are skipped. Without
    any usable pair the identity mapping is returned.
    """
    params: List[Tuple[float, float]] = []
    for (s1, t1), (s2, t2) in itertools.combinations(anchors, 2):
        if not (0 <= s1 < len(source) and 0 <= s2 < len(source)):
            continue
        if not (0 <= t1 < len(target) and 0 <= t2 < len(target)):
            continue
        params.append(fit_line(source[s1].end, target[t1].end, source[s2].end, target[t2].end))
    if not params:
        return IDENTITY
    slope, offset = np.mean(np.asarray(params, dtype=np.float64), axis=0)
    return float(slope), float(offset)


def synchronize(sentences: Sequence[Sentence], slope: float, offset: float) -> None:
    """Rescale the times of all sentences in place."""
    for sent in sentences:
        sent.start = slope * sent.start + offset
        sent.end = slope * sent.end + offset


def snapshot_times(sentences: Sequence[Sentence]) -> np.ndarray:
    """Copy the current (start, end) of every sentence into an (n, 2) array."""
    return np.array([(s.start, s.end) for s in sentences], dtype=np.float64).reshape(-1, 2)


def restore_times(sentences: Sequence[Sentence], times: np.ndarray) -> None:
    """Write times captured by :func:`snapshot_times` back to the sentences."""
    for sent, (start, end) in zip(sentences, times):
        sent.start = float(start)
        sent.end = float(end)


def use_anchor_points(
    source: SentenceStream,
    target: SentenceStream,
    candidates: AnchorCandidates,
) -> Optional[Tuple[float, float]]:
    """Synchronise the source with the best leading and trailing anchor.

    When the fit gives a non-positive slope the trailing anchor is dropped and
    the next one is tried, until none is left.

    Returns:
        (slope, offset) that was applied, or None if the stream was left as is
    """
    firsts = candidates.ranked("first")
    if not firsts:
        return None
    for last in candidates.ranked("last"):
        anchors = [firsts[0], last]
        slope, offset = compute_offset(anchors, source.sentences, target.sentences)
        logger.info("use %s and %s as reference: time factor %.6f, offset %.3f",
                    anchors[0], anchors[1], slope, offset)
        if slope <= 0:
            logger.warning("strange scaling factor %.6f for %s -> ignore", slope, last)
            continue
        synchronize(source.sentences, slope, offset)
        return slope, offset
    return None


def parse_hard_boundaries(boundaries: str) -> List[Tuple[str, str]]:
    """Split ``"src1:trg1+src2:trg2"`` into id pairs."""
    pairs: List[Tuple[str, str]] = []
    for item in boundaries.split("+"):
        item = item.strip()
        if not item:
            continue
        src_id, sep, trg_id = item.partition(":")
        if not sep or not src_id or not trg_id:
            raise ValueError(f"Invalid hard boundary {item!r}, expected 'srcid:trgid'")
        pairs.append((src_id, trg_id))
    return pairs


def fit_hard_boundaries(
    boundaries: str,
    source: SentenceStream,
    target: SentenceStream,
) -> Optional[Tuple[float, float]]:
    """Synchronise the source stream with user-given sentence correspondences.

    Only the first and the last pair are used. While the fitted slope is not
    positive, the last remaining pair is dropped.

    Raises:
        ValueError: If a pair refers to an unknown sentence id
    """
    src_index = source.index_of()
    trg_index = target.index_of()

    matches: List[AnchorPair] = []
    for src_id, trg_id in parse_hard_boundaries(boundaries):
        if src_id not in src_index:
            raise ValueError(f"Unknown source sentence id in hard boundaries: {src_id}")
        if trg_id not in trg_index:
            raise ValueError(f"Unknown target sentence id in hard boundaries: {trg_id}")
        matches.append((src_index[src_id], trg_index[trg_id]))

    if len(matches) < 2:
        return None

    matches = [matches[0], matches[-1]]
    slope, offset = compute_offset(matches, source.sentences, target.sentences)
    while slope <= 0 and len(matches) > 1:
        logger.warning("strange scaling factor %.6f -> ignore %s", slope, matches[-1])
        matches.pop()
        slope, offset = compute_offset(matches, source.sentences, target.sentences)
    logger.info("hard boundaries: time factor %.6f, offset %.3f", slope, offset)
    synchronize(source.sentences, slope, offset)
    return slope, offset
