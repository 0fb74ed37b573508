import pytest

from srtalign.analysis.alignment import align_sentences
from srtalign.analysis.anchors import find_anchor_candidates
from srtalign.analysis.matching import LexicalMatcher, MatchConfig
from srtalign.analysis.search import (
    AlignmentConfig,
    align_bitext,
    best_align,
    cognate_align,
    cognate_thresholds,
    standard_align,
)
from srtalign.analysis.timing import set_sentence_times
from srtalign.util.types import AnchorCandidates

from helpers import SOURCE_CUES, TARGET_CUES, cue_stream


IDENTICAL = MatchConfig(identical_min_length=2)


class StubFallback:
    def __init__(self, output="stub alignment\n"):
        self.output = output
        self.calls = []

    def __call__(self, source_file, target_file):
        self.calls.append((source_file, target_file))
        return self.output


def _pair():
    source = cue_stream(SOURCE_CUES, "src.srt")
    target = cue_stream(TARGET_CUES, "trg.srt")
    set_sentence_times(source.sentences)
    set_sentence_times(target.sentences)
    return source, target


def _candidates(source, target, match=IDENTICAL):
    matcher = LexicalMatcher(match, None, source.word_freq, target.word_freq)
    return find_anchor_candidates(source, target, matcher, window=2)


def test_cognate_thresholds():
    assert cognate_thresholds(0.8) == pytest.approx([1.0, 0.95, 0.9, 0.85])
    assert cognate_thresholds(0.5, 0.25) == pytest.approx([1.0, 0.75])
    assert cognate_thresholds(1.0) == []
    with pytest.raises(ValueError):
        cognate_thresholds(0.5, 0.0)


class TestBestAlign:
    def test_finds_offset(self):
        source, target = _pair()
        baseline = align_sentences(source.sentences, target.sentences)

        result, metadata = best_align(source, target, _candidates(source, target), AlignmentConfig())

        assert baseline.ratio < 1
        assert [link.shape for link in result.links] == ["1:1"] * 4
        assert result.ratio == 5.0
        assert metadata["best_align"]["offset"] == pytest.approx(-10.0)
        # the source keeps the winning synchronisation
        assert source.sentences[0].start == pytest.approx(0.0)

    def test_never_worse_than_baseline(self):
        source, target = _pair()
        baseline = align_sentences(source.sentences, target.sentences)
        # a pair of misleading anchors only
        candidates = AnchorCandidates(first={(0, 3): 0.2}, last={(3, 0): 0.2})

        result, _ = best_align(source, target, candidates, AlignmentConfig())

        assert result.ratio >= baseline.ratio
        assert [s.start for s in source.sentences] == pytest.approx([10.0, 13.0, 16.0, 19.0])

    def test_low_ratio_delegates_to_fallback(self):
        source, target = _pair()
        fallback = StubFallback()

        result, metadata = best_align(source, target, AnchorCandidates(), AlignmentConfig(), fallback=fallback)

        assert fallback.calls == [("src.srt", "trg.srt")]
        assert result.delegated
        assert result.fallback_output == "stub alignment\n"
        assert result.links == []
        assert metadata["best_align"]["fallback_used"] is True

    def test_good_ratio_skips_fallback(self):
        source, target = _pair()
        fallback = StubFallback()

        result, _ = best_align(source, target, _candidates(source, target), AlignmentConfig(), fallback=fallback)

        assert fallback.calls == []
        assert not result.delegated


def test_standard_align_resynchronizes():
    source, target = _pair()

    result, metadata = standard_align(source, target, _candidates(source, target))

    assert result.ratio == 5.0
    assert metadata["standard_align"]["resynchronized"] is True
    assert metadata["standard_align"]["initial_ratio"] < 1


def test_standard_align_without_anchors_keeps_times():
    source, target = _pair()

    result, metadata = standard_align(source, target, AnchorCandidates())

    assert metadata["standard_align"]["resynchronized"] is False
    assert result.ratio < 1
    assert source.sentences[0].start == pytest.approx(10.0)


def test_cognate_align_keeps_global_best():
    source, target = _pair()
    config = AlignmentConfig(window=2, cognate_range=0.8)

    result, metadata = cognate_align(source, target, config)

    assert result.ratio == 5.0
    assert metadata["cognate_align"]["best_threshold"] == 1.0
    assert len(metadata["cognate_align"]["ratios"]) == 4


class TestAlignBitext:
    def test_best_align_mode(self):
        source = cue_stream(SOURCE_CUES, "src.srt")
        target = cue_stream(TARGET_CUES, "trg.srt")
        config = AlignmentConfig(window=2, best_align=True, match=IDENTICAL)

        result, metadata = align_bitext(source, target, config)

        assert result.ratio == 5.0
        assert metadata["alignment"]["mode"] == "best_align"
        assert metadata["alignment"]["link_types"] == {"1:1": 4}

    def test_standard_mode(self):
        source = cue_stream(SOURCE_CUES, "src.srt")
        target = cue_stream(TARGET_CUES, "trg.srt")

        result, metadata = align_bitext(source, target, AlignmentConfig(window=2, match=IDENTICAL))

        assert metadata["alignment"]["mode"] == "standard_align"
        assert result.ratio == 5.0

    def test_cognate_mode(self):
        source = cue_stream(SOURCE_CUES, "src.srt")
        target = cue_stream(TARGET_CUES, "trg.srt")

        _, metadata = align_bitext(source, target, AlignmentConfig(window=2, cognate_range=0.9))

        assert metadata["alignment"]["mode"] == "cognate_align"

    def test_hard_boundaries(self):
        source = cue_stream(SOURCE_CUES, "src.srt")
        target = cue_stream(TARGET_CUES, "trg.srt")
        config = AlignmentConfig(hard_boundaries="s1:s1+s4:s4")

        result, metadata = align_bitext(source, target, config)

        assert [link.shape for link in result.links] == ["1:1"] * 4
        assert metadata["standard_align"]["resynchronized"] is False

    def test_unknown_hard_boundary(self):
        source = cue_stream(SOURCE_CUES, "src.srt")
        target = cue_stream(TARGET_CUES, "trg.srt")

        with pytest.raises(ValueError):
            align_bitext(source, target, AlignmentConfig(hard_boundaries="s1:s1+s9:s4"))

    def test_fallback_is_passed_through(self):
        source = cue_stream(SOURCE_CUES, "src.srt")
        target = cue_stream(TARGET_CUES, "trg.srt")
        fallback = StubFallback()

        result, metadata = align_bitext(source, target, AlignmentConfig(best_align=True), fallback=fallback)

        assert result.delegated
        assert metadata["alignment"]["delegated"] is True
