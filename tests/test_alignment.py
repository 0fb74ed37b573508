import random

from srtalign.analysis.alignment import align_sentences

from helpers import timed_sentences


def _shapes(alignment):
    return [link.shape for link in alignment.links]


def _assert_partition(alignment, source, target):
    src_ids = [i for link in alignment.links for i in link.source_ids]
    trg_ids = [i for link in alignment.links for i in link.target_ids]
    assert src_ids == [s.id for s in source]
    assert trg_ids == [t.id for t in target]


def test_identical_times_give_one_to_one_links():
    spans = [(0, 2), (3, 5), (6, 8)]
    source, target = timed_sentences(spans), timed_sentences(spans)

    alignment = align_sentences(source, target)

    assert _shapes(alignment) == ["1:1", "1:1", "1:1"]
    assert alignment.empty == 0
    assert alignment.ratio == 4.0


def test_leading_source_sentence_is_left_unaligned():
    source = timed_sentences([(0, 1), (5, 7), (8, 10)])
    target = timed_sentences([(5, 7), (8, 10)])

    alignment = align_sentences(source, target)

    assert _shapes(alignment) == ["1:0", "1:1", "1:1"]
    assert alignment.ratio == 1.5
    _assert_partition(alignment, source, target)


def test_two_source_sentences_merge_into_one_target():
    source = timed_sentences([(0, 2), (2, 4)])
    target = timed_sentences([(0, 4)])

    alignment = align_sentences(source, target)

    assert [(link.source_ids, link.target_ids) for link in alignment.links] == [(["s1", "s2"], ["s1"])]
    assert alignment.link_types["2:1"] == 1


def test_one_source_sentence_spans_three_targets():
    source = timed_sentences([(0, 9)])
    target = timed_sentences([(0, 3), (3, 6), (6, 9)])

    assert _shapes(align_sentences(source, target)) == ["1:3"]


def test_trailing_target_sentences_are_zero_to_one():
    source = timed_sentences([(0, 2)])
    target = timed_sentences([(0, 2), (3, 4)])

    alignment = align_sentences(source, target)

    assert _shapes(alignment) == ["1:1", "0:1"]
    assert alignment.empty == 1


def test_zero_length_sentences_terminate():
    source = timed_sentences([(0, 0)])
    target = timed_sentences([(0, 0)])

    alignment = align_sentences(source, target)

    assert _shapes(alignment) == ["1:0", "0:1"]


def test_empty_source():
    target = timed_sentences([(0, 1), (1, 2)])

    alignment = align_sentences([], target)

    assert _shapes(alignment) == ["0:1", "0:1"]
    assert alignment.ratio == 1 / 3


def test_random_streams_are_partitioned_monotonically():
    rng = random.Random(7)
    for _ in range(50):
        spans = []
        for side in range(2):
            t = rng.uniform(0, 5)
            side_spans = []
            for _ in range(rng.randint(0, 30)):
                start = t + rng.uniform(0, 3)
                end = start + rng.choice([0.0, rng.uniform(0.1, 6)])
                side_spans.append((start, end))
                t = end
            spans.append(side_spans)
        source, target = timed_sentences(spans[0]), timed_sentences(spans[1])

        alignment = align_sentences(source, target)

        _assert_partition(alignment, source, target)
        assert alignment.empty + alignment.nonempty == len(alignment.links)
        assert all(link.source_ids or link.target_ids for link in alignment.links)


def test_adjacent_identical_streams():
    spans = [(0, 2), (2, 4), (4, 6)]

    alignment = align_sentences(timed_sentences(spans), timed_sentences(spans))

    assert _shapes(alignment) == ["1:1", "1:1", "1:1"]
    assert alignment.empty == 0


def test_extra_leading_source_sentence():
    source = timed_sentences([(0, 1), (1, 3), (3, 5)])
    target = timed_sentences([(1, 3), (3, 5)])

    assert _shapes(align_sentences(source, target)) == ["1:0", "1:1", "1:1"]
