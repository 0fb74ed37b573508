"""Core data types for the srtalign sentence alignment engine.

This module defines the fundamental data structures shared by the readers,
the alignment engine and the renderers.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


# source token -> {target token -> count}; counts only matter as membership
Dictionary = Dict[str, Counter]

AnchorPair = Tuple[int, int]


@dataclass
class Sentence:
    """A sentence with its character span and time information.

    Raw time markers (``first``/``last`` and their character positions) come
    from the reader and are never modified. ``start``/``end`` are derived by
    time synthesis and rewritten in place by synchronisation passes.

    Attributes:
        id: Identifier, unique within its stream
        index: Position in the stream
        start_pos: Character offset where the sentence starts
        end_pos: Character offset where the sentence ends
        tokens: Word tokens of the sentence
        first: First time marker seen inside the sentence (seconds)
        first_pos: Character offset of ``first``
        last: Last time marker seen inside the sentence (seconds)
        last_pos: Character offset of ``last``
        start: Derived start time (seconds)
        end: Derived end time (seconds)
    """
    id: str
    index: int
    start_pos: int = 0
    end_pos: int = 0
    tokens: Tuple[str, ...] = ()
    first: Optional[float] = None
    first_pos: Optional[int] = None
    last: Optional[float] = None
    last_pos: Optional[int] = None
    start: float = 0.0
    end: float = 0.0


@dataclass
class SentenceStream:
    """All sentences of one language side plus its token frequencies.

    Attributes:
        source_file: Path or identifier of the file the stream was read from
        sentences: Sentences in document order
        word_freq: Corpus-wide token counts for this stream
        language: Optional language code
    """
    source_file: str
    sentences: List[Sentence]
    word_freq: Counter = field(default_factory=Counter)
    language: Optional[str] = None

    def __len__(self) -> int:
        return len(self.sentences)

    @property
    def ids(self) -> List[str]:
        return [s.id for s in self.sentences]

    def index_of(self) -> Dict[str, int]:
        """Map sentence ids to their positions."""
        return {s.id: i for i, s in enumerate(self.sentences)}


@dataclass
class AlignmentLink:
    """One link of a sentence alignment (either side may be empty)."""
    source_ids: List[str]
    target_ids: List[str]

    @property
    def shape(self) -> str:
        return f"{len(self.source_ids)}:{len(self.target_ids)}"

    @property
    def is_empty(self) -> bool:
        return not self.source_ids or not self.target_ids


@dataclass
class SentenceAlignment:
    """Complete alignment between two sentence streams.

    Attributes:
        links: Links in stream order
        empty: Number of 1:0 / 0:1 links
        nonempty: Number of links with sentences on both sides
        link_types: Count per link shape, e.g. ``{"1:1": 40, "2:1": 3}``
        fallback_output: Output of an external aligner when the search
            delegated the pair to it; ``links`` is empty in that case

    Invariant: concatenating ``source_ids`` over ``links`` yields the source
    stream's ids in order (likewise for the target).
    """
    links: List[AlignmentLink] = field(default_factory=list)
    empty: int = 0
    nonempty: int = 0
    link_types: Counter = field(default_factory=Counter)
    fallback_output: Optional[str] = None

    @property
    def ratio(self) -> float:
        """Quality score: (nonempty + 1) / (empty + 1)."""
        return (self.nonempty + 1) / (self.empty + 1)

    @property
    def delegated(self) -> bool:
        return self.fallback_output is not None

    def add(self, source_ids: List[str], target_ids: List[str]) -> None:
        """Append a link and update the counters."""
        link = AlignmentLink(list(source_ids), list(target_ids))
        self.links.append(link)
        self.link_types[link.shape] += 1
        if link.is_empty:
            self.empty += 1
        else:
            self.nonempty += 1


@dataclass
class AnchorCandidates:
    """Lexical anchor candidates found at the start and end of two streams.

    Both mappings go from ``(source_index, target_index)`` to a score that
    only reflects the distance from the respective stream boundary.
    """
    first: Dict[AnchorPair, float] = field(default_factory=dict)
    last: Dict[AnchorPair, float] = field(default_factory=dict)

    def ranked(self, which: str, limit: Optional[int] = None) -> List[AnchorPair]:
        """Return the pairs of ``which`` ("first" or "last") best first."""
        if which not in ("first", "last"):
            raise ValueError(f"Unknown anchor window: {which}")
        scores = self.first if which == "first" else self.last
        pairs = sorted(scores, key=lambda pair: (-scores[pair], pair))
        if limit:
            pairs = pairs[:limit]
        return pairs

    def truncated(self, limit: int) -> AnchorCandidates:
        """Keep only the ``limit`` best pairs of each window."""
        return AnchorCandidates(
            first={p: self.first[p] for p in self.ranked("first", limit)},
            last={p: self.last[p] for p in self.ranked("last", limit)},
        )

    def has_both(self) -> bool:
        """True when both windows produced at least one candidate."""
        return bool(self.first) and bool(self.last)
