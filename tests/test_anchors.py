import pytest

from srtalign.analysis.anchors import find_anchor_candidates, window_tokens
from srtalign.analysis.matching import LexicalMatcher, MatchConfig
from srtalign.util.types import AnchorCandidates, Sentence, SentenceStream


def _stream(name, token_lists):
    sentences = [Sentence(id=f"s{i + 1}", index=i, tokens=tuple(tokens)) for i, tokens in enumerate(token_lists)]
    return SentenceStream(name, sentences)


SOURCE = _stream("src", [("Hello", "Anna"), ("go",), ("x",), ("Bye", "Bob")])
TARGET = _stream("trg", [("Hej", "Anna"), ("gå",), ("y",), ("Hej", "Bob")])
MATCHER = LexicalMatcher(MatchConfig(identical_min_length=2))


def test_window_tokens():
    sent = Sentence(id="1", index=0, tokens=("Hello", "Anna"))

    assert window_tokens(sent) == ("Anna",)
    assert window_tokens(sent, "all") == ("Hello", "Anna")
    assert window_tokens(Sentence(id="2", index=1)) == ()
    with pytest.raises(ValueError):
        window_tokens(sent, "first")


def test_leading_and_trailing_windows():
    metadata = {}

    candidates = find_anchor_candidates(SOURCE, TARGET, MATCHER, window=2, metadata=metadata)

    assert candidates.first == {(0, 0): 0.5}
    assert candidates.last == {(3, 3): 0.5}
    assert metadata["anchors"]["first_candidates"] == 1
    assert metadata["anchors"]["strategies"] == ["identical"]


def test_window_larger_than_streams_uses_absolute_indices():
    candidates = find_anchor_candidates(SOURCE, TARGET, MATCHER, window=25)

    assert candidates.first == {(0, 0): 0.5, (3, 3): pytest.approx(1 / 8)}
    assert candidates.last == {(0, 0): pytest.approx(1 / 8), (3, 3): 0.5}
    assert candidates.ranked("last") == [(3, 3), (0, 0)]


def test_all_tokens_window():
    source = _stream("src", [("Anna", "said", "hello")])
    target = _stream("trg", [("sa", "Anna", "hej")])

    assert find_anchor_candidates(source, target, MATCHER, window=1).first == {}
    assert find_anchor_candidates(source, target, MATCHER, window=1, window_mode="all").first == {(0, 0): 0.5}


def test_max_matches_keeps_best_candidates():
    candidates = find_anchor_candidates(SOURCE, TARGET, MATCHER, window=25, max_matches=1)

    assert list(candidates.first) == [(0, 0)]
    assert list(candidates.last) == [(3, 3)]


def test_ranked_ties_by_index_pair():
    candidates = AnchorCandidates(first={(1, 0): 0.25, (0, 1): 0.25, (0, 0): 0.5})

    assert candidates.ranked("first") == [(0, 0), (0, 1), (1, 0)]
    assert candidates.ranked("first", 2) == [(0, 0), (0, 1)]
    assert not candidates.has_both()
    with pytest.raises(ValueError):
        candidates.ranked("middle")
