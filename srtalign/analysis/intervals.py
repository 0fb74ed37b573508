"""Overlap arithmetic between two time intervals."""

from __future__ import annotations

from typing import NamedTuple


class Overlap(NamedTuple):
    """Decomposition of two intervals into shared and non-shared parts.

    ``common`` is negative when the intervals are disjoint; callers treat
    ``common <= 0`` as "no overlap". ``non_common`` is the sum of the four
    before/after parts.
    """
    src_before: float
    trg_before: float
    src_after: float
    trg_after: float
    common: float
    non_common: float


def overlap(src_start: float, src_end: float, trg_start: float, trg_end: float) -> Overlap:
    """Compare a source interval with a target interval.

    Examples:
        overlap(0, 4, 2, 6) -> src_before=2, trg_after=2, common=2, non_common=4
        overlap(0, 1, 3, 5) -> src_before=3, trg_after=4, common=-2
    """
    src_before = trg_before = src_after = trg_after = 0.0

    if src_start < trg_start:
        src_before = trg_start - src_start
        common_start = trg_start
    else:
        trg_before = src_start - trg_start
        common_start = src_start

    if src_end < trg_end:
        trg_after = trg_end - src_end
        common_end = src_end
    else:
        src_after = src_end - trg_end
        common_end = trg_end

    common = common_end - common_start
    non_common = src_before + trg_before + src_after + trg_after
    return Overlap(src_before, trg_before, src_after, trg_after, common, non_common)
