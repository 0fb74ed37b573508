"""Time synthesis: derive a start/end time for every sentence.

Sentence streams only carry sparse time markers: a subtitle frame boundary
may fall in the middle of a sentence, a sentence may span several frames, and
many sentences contain no marker at all. This module turns those markers into
one interval per sentence:

- a marker found at the very end of a sentence is its end time, not its start
- a missing start is carried forward from the previous sentence's end
- a missing end is taken from the next marker further down the stream
- markers that do not sit on the sentence boundaries are projected onto them
  by linear interpolation over character positions
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence, Tuple

from srtalign.util.types import Sentence


logger = logging.getLogger(__name__)

# nudge used instead of dividing by a zero character span
POSITION_EPSILON = 1e-10
# minimal duration forced onto empty or inverted intervals
DURATION_EPSILON = 1e-8

_TIME_SPLIT_RE = re.compile(r"[^0-9\-]")

_Marker = Tuple[Optional[float], Optional[int], Optional[float], Optional[int]]


def time_to_seconds(value: Optional[str]) -> Optional[float]:
    """Convert an ``HH:MM:SS,mmm`` marker value to seconds.

    Any non-digit character separates the fields, so ``00:01:02.500`` works as
    well. Missing trailing fields count as zero. Returns None for empty values.

    Examples:
        "00:01:02,500" -> 62.5
        "01:00:00" -> 3600.0
    """
    if value is None or not value.strip():
        return None
    fields = [int(f) if f not in ("", "-") else 0 for f in _TIME_SPLIT_RE.split(value.strip())]
    fields += [0] * (4 - len(fields))
    hours, minutes, seconds, millis = fields[:4]
    return 3600 * hours + 60 * minutes + seconds + millis / 1000.0


def _reclassified_markers(sentences: Sequence[Sentence]) -> List[_Marker]:
    """Return (first, first_pos, last, last_pos) with end-of-sentence starts moved."""
    markers: List[_Marker] = []
    for sent in sentences:
        first, first_pos = sent.first, sent.first_pos
        last, last_pos = sent.last, sent.last_pos
        if first is not None and first_pos == sent.end_pos:
            if last is None:
                last, last_pos = first, first_pos
            first, first_pos = None, None
        markers.append((first, first_pos, last, last_pos))
    return markers


def _next_marker(markers: Sequence[_Marker], idx: int) -> Tuple[Optional[float], Optional[int]]:
    """Find the closest marker after sentence ``idx`` (a start before an end)."""
    for first, first_pos, last, last_pos in markers[idx + 1:]:
        if first is not None:
            return first, first_pos
        if last is not None:
            return last, last_pos
    return None, None


def set_sentence_times(
    sentences: Sequence[Sentence],
    scale: float = 1.0,
    offset: float = 0.0,
) -> None:
    """Derive ``start``/``end`` for each sentence in place.

    Args:
        sentences: Sentences of one stream in document order
        scale: Factor applied to every derived time
        offset: Shift (seconds) added after scaling
    """
    markers = _reclassified_markers(sentences)
    prev_last = 0.0

    for idx, sent in enumerate(sentences):
        first, first_pos, last, last_pos = markers[idx]

        if first is None:
            first = prev_last if idx > 0 else 0.0
            first_pos = sent.start_pos

        if last is None:
            last, last_pos = _next_marker(markers, idx)
            if last is None:
                # nothing left in the stream to interpolate towards
                last, last_pos = first, sent.end_pos

        char_span = last_pos - first_pos
        time_span = last - first
        if char_span == 0 and (first_pos != sent.start_pos or last_pos != sent.end_pos):
            logger.debug("sentence %s: markers share one position, using epsilon", sent.id)

        if first_pos != sent.start_pos:
            diff = first_pos - sent.start_pos
            if char_span * diff:
                first = first - time_span / char_span * diff
            else:
                first = first - POSITION_EPSILON

        if last_pos != sent.end_pos:
            diff = sent.end_pos - last_pos
            if char_span * diff:
                last = last + time_span / char_span * diff
            else:
                last = last + POSITION_EPSILON

        sent.start = scale * first + offset
        sent.end = scale * last + offset
        prev_last = last

    for sent in sentences:
        if sent.start >= sent.end:
            sent.start = sent.end - DURATION_EPSILON
