"""Alignment search: pick the synchronisation that aligns best.

This module drives the engine for one file pair:

- ``standard_align``: align once and, if too many sentences stay unaligned,
  resynchronise with the best leading/trailing anchor pair and align again
- ``best_align``: try every leading x trailing anchor combination and keep
  the alignment with the highest (nonempty + 1) / (empty + 1) ratio
- ``cognate_align``: repeat ``best_align`` over decreasing cognate thresholds
- ``align_bitext``: time synthesis, hard boundaries and the dispatch above

All of them follow the metadata convention used across the package: an
optional dict that is filled with run statistics and returned.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from srtalign.analysis.alignment import align_sentences
from srtalign.analysis.anchors import find_anchor_candidates
from srtalign.analysis.fallback import FallbackAligner
from srtalign.analysis.matching import LexicalMatcher, MatchConfig
from srtalign.analysis.sync import (
    compute_offset,
    fit_hard_boundaries,
    restore_times,
    snapshot_times,
    synchronize,
    use_anchor_points,
)
from srtalign.analysis.timing import set_sentence_times
from srtalign.util.types import AnchorCandidates, Dictionary, SentenceAlignment, SentenceStream


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlignmentConfig:
    """Configuration for one bitext alignment run."""
    window: int = 25
    max_matches: Optional[int] = None
    best_align: bool = False
    # search cognate thresholds from 1.0 down to (excluding) this value
    cognate_range: Optional[float] = None
    cognate_step: float = 0.05
    window_tokens: str = "last"       # "last" | "all"
    fallback_ratio: float = 2.0
    hard_boundaries: Optional[str] = None  # "srcid:trgid+srcid:trgid"
    match: MatchConfig = field(default_factory=MatchConfig)


def cognate_thresholds(cognate_range: float, step: float = 0.05) -> List[float]:
    """Thresholds 1.0, 1.0 - step, ... strictly above ``cognate_range``."""
    if step <= 0:
        raise ValueError("Cognate step must be positive")
    thresholds: List[float] = []
    k = 0
    while True:
        c = round(1.0 - k * step, 6)
        if c <= cognate_range + 1e-9:
            break
        thresholds.append(c)
        k += 1
    return thresholds


def _maybe_fallback(
    best: SentenceAlignment,
    source: SentenceStream,
    target: SentenceStream,
    config: AlignmentConfig,
    fallback: Optional[FallbackAligner],
) -> SentenceAlignment:
    if best.ratio >= config.fallback_ratio or fallback is None:
        return best
    logger.warning("best ratio %.3f < %.1f -> fall back to external aligner", best.ratio, config.fallback_ratio)
    output = fallback(source.source_file, target.source_file)
    return SentenceAlignment(
        empty=best.empty,
        nonempty=best.nonempty,
        link_types=best.link_types,
        fallback_output=output,
    )


def best_align(
    source: SentenceStream,
    target: SentenceStream,
    candidates: AnchorCandidates,
    config: AlignmentConfig,
    fallback: Optional[FallbackAligner] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Tuple[SentenceAlignment, Dict[str, Any]]:
    """Search all anchor combinations for the best-scoring synchronisation.

    Every candidate is synchronised from the times the source had on entry,
    so results do not depend on the order candidates are tried in. On return
    the source stream holds the times of the winning candidate.

    Args:
        source: Source stream (times are rewritten)
        target: Target stream
        candidates: Leading and trailing anchor candidates
        config: Alignment configuration (max_matches, fallback_ratio)
        fallback: Optional external aligner for hopeless pairs
        metadata: Optional metadata dict to update

    Returns:
        (best_alignment, metadata); never worse than the unsynchronised
        baseline alignment
    """
    if metadata is None:
        metadata = {}

    start_time = time.time()
    baseline = align_sentences(source.sentences, target.sentences)
    logger.info("baseline ratio = %.4f", baseline.ratio)

    base_times = snapshot_times(source.sentences)
    best = baseline
    best_times = base_times
    best_params: Optional[Tuple[float, float]] = None

    firsts = candidates.ranked("first", config.max_matches)
    lasts = candidates.ranked("last", config.max_matches)
    tried = rejected = 0

    for first in firsts:
        for last in lasts:
            slope, offset = compute_offset([first, last], source.sentences, target.sentences)
            logger.debug("use %s and %s as reference: time factor %.6f, offset %.3f", first, last, slope, offset)
            if slope <= 0:
                logger.info("strange scaling factor %.6f -> ignore", slope)
                rejected += 1
                continue
            synchronize(source.sentences, slope, offset)
            candidate = align_sentences(source.sentences, target.sentences)
            tried += 1
            if candidate.ratio > best.ratio:
                logger.debug("ratio = %.4f ---> best!", candidate.ratio)
                best = candidate
                best_times = snapshot_times(source.sentences)
                best_params = (slope, offset)
            else:
                logger.debug("ratio = %.4f", candidate.ratio)
            # every fit starts from the entry times
            restore_times(source.sentences, base_times)

    restore_times(source.sentences, best_times)

    metadata.setdefault("best_align", {}).update({
        "baseline_ratio": round(baseline.ratio, 4),
        "best_ratio": round(best.ratio, 4),
        "first_candidates": len(firsts),
        "last_candidates": len(lasts),
        "combinations_tried": tried,
        "rejected_slopes": rejected,
        "slope": best_params[0] if best_params else 1.0,
        "offset": best_params[1] if best_params else 0.0,
        "computation_time": round(time.time() - start_time, 3),
    })

    result = _maybe_fallback(best, source, target, config, fallback)
    metadata["best_align"]["fallback_used"] = result.delegated
    return result, metadata


def cognate_align(
    source: SentenceStream,
    target: SentenceStream,
    config: AlignmentConfig,
    dictionary: Optional[Dictionary] = None,
    fallback: Optional[FallbackAligner] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Tuple[SentenceAlignment, Dict[str, Any]]:
    """Run best-align for each cognate threshold and keep the global best.

    Anchors are re-detected for every threshold since the set of cognate
    matches changes with it. The fallback is only considered for the overall
    winner.
    """
    if metadata is None:
        metadata = {}
    if config.cognate_range is None:
        raise ValueError("cognate_align needs config.cognate_range")

    base_times = snapshot_times(source.sentences)
    best: Optional[SentenceAlignment] = None
    best_times = base_times
    best_threshold: Optional[float] = None
    per_threshold: Dict[str, float] = {}

    for threshold in cognate_thresholds(config.cognate_range, config.cognate_step):
        restore_times(source.sentences, base_times)
        match_config = replace(config.match, cognate_threshold=threshold)
        matcher = LexicalMatcher(match_config, dictionary, source.word_freq, target.word_freq)
        candidates = find_anchor_candidates(
            source, target, matcher,
            window=config.window,
            window_mode=config.window_tokens,
        )
        result, _ = best_align(source, target, candidates, config)
        per_threshold[f"{threshold:.2f}"] = round(result.ratio, 4)
        logger.info("use c=%.2f: ratio = %.4f", threshold, result.ratio)
        if best is None or result.ratio > best.ratio:
            logger.info("--> best (%.4f)", result.ratio)
            best = result
            best_times = snapshot_times(source.sentences)
            best_threshold = threshold

    restore_times(source.sentences, best_times)
    if best is None:
        best, metadata = best_align(
            source, target, AnchorCandidates(), config, metadata=metadata
        )

    metadata.setdefault("cognate_align", {}).update({
        "cognate_range": config.cognate_range,
        "best_threshold": best_threshold,
        "ratios": per_threshold,
    })
    result = _maybe_fallback(best, source, target, config, fallback)
    metadata["cognate_align"]["fallback_used"] = result.delegated
    return result, metadata


def standard_align(
    source: SentenceStream,
    target: SentenceStream,
    candidates: AnchorCandidates,
    metadata: Optional[Dict[str, Any]] = None,
) -> Tuple[SentenceAlignment, Dict[str, Any]]:
    """Align once; resynchronise with the top anchors if too many links are empty."""
    if metadata is None:
        metadata = {}

    initial = align_sentences(source.sentences, target.sentences)
    result = initial
    params = None
    if initial.empty * 2 > initial.nonempty and candidates.has_both():
        params = use_anchor_points(source, target, candidates)
        if params is not None:
            result = align_sentences(source.sentences, target.sentences)

    metadata.setdefault("standard_align", {}).update({
        "initial_ratio": round(initial.ratio, 4),
        "final_ratio": round(result.ratio, 4),
        "resynchronized": params is not None,
        "slope": params[0] if params else 1.0,
        "offset": params[1] if params else 0.0,
    })
    return result, metadata


def align_bitext(
    source: SentenceStream,
    target: SentenceStream,
    config: AlignmentConfig,
    dictionary: Optional[Dictionary] = None,
    fallback: Optional[FallbackAligner] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Tuple[SentenceAlignment, Dict[str, Any]]:
    """MAIN: align the sentences of two streams.

    Args:
        source: Source language stream (its times are synchronised in place)
        target: Target language stream
        config: Alignment configuration
        dictionary: Optional bilingual dictionary for anchor matching
        fallback: Optional external aligner used when the best ratio is low
        metadata: Optional metadata dict to update

    Returns:
        (alignment, metadata)
    """
    if metadata is None:
        metadata = {}

    start_time = time.time()
    set_sentence_times(source.sentences)
    set_sentence_times(target.sentences)

    if config.hard_boundaries:
        fit_hard_boundaries(config.hard_boundaries, source, target)

    if config.cognate_range is not None:
        mode = "cognate_align"
        result, metadata = cognate_align(source, target, config, dictionary, fallback, metadata)
    else:
        matcher = LexicalMatcher(config.match, dictionary, source.word_freq, target.word_freq)
        candidates = find_anchor_candidates(
            source, target, matcher,
            window=config.window,
            window_mode=config.window_tokens,
            metadata=metadata,
        )
        if config.best_align:
            mode = "best_align"
            result, metadata = best_align(source, target, candidates, config, fallback, metadata)
        else:
            mode = "standard_align"
            result, metadata = standard_align(source, target, candidates, metadata)

    logger.info("ratio = %.4f", result.ratio)
    metadata.setdefault("alignment", {}).update({
        "source_file": source.source_file,
        "target_file": target.source_file,
        "mode": mode,
        "source_sentences": len(source),
        "target_sentences": len(target),
        "links": len(result.links),
        "empty": result.empty,
        "nonempty": result.nonempty,
        "ratio": round(result.ratio, 4),
        "link_types": dict(result.link_types),
        "delegated": result.delegated,
        "computation_time": round(time.time() - start_time, 3),
    })
    return result, metadata
