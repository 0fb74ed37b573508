"""Monotonic sentence alignment by time overlap.

The aligner walks both streams left to right. A sentence that ends before
the other stream's current sentence starts is left unaligned; otherwise a
small table of block shapes (1:1, 1:2, 2:1, 1:3, 3:1) is tried and the shape
whose merged spans overlap best (least non-shared time) is emitted.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

from srtalign.analysis.intervals import overlap
from srtalign.util.types import Sentence, SentenceAlignment


logger = logging.getLogger(__name__)

# (extra source sentences, extra target sentences); order breaks cost ties
BLOCK_SHAPES: Tuple[Tuple[int, int], ...] = (
    (0, 0),
    (0, 1),
    (1, 0),
    (0, 2),
    (2, 0),
)


def _best_block(
    source: Sequence[Sentence],
    target: Sequence[Sentence],
    s: int,
    t: int,
    shapes: Sequence[Tuple[int, int]],
) -> Optional[Tuple[int, int]]:
    """Pick the feasible block shape with the lowest non-overlapping time."""
    best: Optional[Tuple[int, int]] = None
    best_cost = 0.0
    for ds, dt in shapes:
        if s + ds >= len(source) or t + dt >= len(target):
            continue
        if source[s].start >= target[t + dt].end:
            continue
        if target[t].start >= source[s + ds].end:
            continue
        cost = overlap(source[s].start, source[s + ds].end, target[t].start, target[t + dt].end).non_common
        if best is None or cost < best_cost:
            best = (ds, dt)
            best_cost = cost
    return best


def align_sentences(
    source: Sequence[Sentence],
    target: Sequence[Sentence],
    shapes: Sequence[Tuple[int, int]] = BLOCK_SHAPES,
) -> SentenceAlignment:
    """Align two sentence sequences using their current start/end times.

    Args:
        source: Source sentences with derived times
        target: Target sentences with derived times
        shapes: Allowed block shapes as (extra source, extra target) offsets

    Returns:
        SentenceAlignment covering every sentence of both sides exactly once
    """
    alignment = SentenceAlignment()
    s = t = 0

    while s < len(source) and t < len(target):
        ov = overlap(source[s].start, source[s].end, target[t].start, target[t].end)

        if ov.common <= 0 and ov.src_before > 0:
            alignment.add([source[s].id], [])
            s += 1
            continue

        if ov.common <= 0 and ov.trg_before > 0:
            alignment.add([], [target[t].id])
            t += 1
            continue

        block = _best_block(source, target, s, t, shapes)
        if block is None:
            # both sentences start together and one has no duration
            logger.debug("no feasible block at %s/%s", source[s].id, target[t].id)
            alignment.add([source[s].id], [])
            s += 1
            continue

        ds, dt = block
        alignment.add(
            [sent.id for sent in source[s:s + ds + 1]],
            [sent.id for sent in target[t:t + dt + 1]],
        )
        s += ds + 1
        t += dt + 1

    for sent in source[s:]:
        alignment.add([sent.id], [])
    for sent in target[t:]:
        alignment.add([], [sent.id])

    return alignment
