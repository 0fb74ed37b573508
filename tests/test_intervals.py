import pytest

from srtalign.analysis.intervals import overlap


def test_overlap_partial():
    ov = overlap(0, 4, 2, 6)

    assert ov.src_before == 2
    assert ov.trg_before == 0
    assert ov.src_after == 0
    assert ov.trg_after == 2
    assert ov.common == 2
    assert ov.non_common == 4


def test_overlap_disjoint_has_negative_common():
    ov = overlap(0, 1, 3, 5)

    assert ov.src_before == 3
    assert ov.trg_after == 4
    assert ov.common == -2


def test_overlap_identical_intervals():
    ov = overlap(1.5, 3.0, 1.5, 3.0)

    assert ov.common == pytest.approx(1.5)
    assert ov.non_common == 0


@pytest.mark.parametrize(
    "src,trg",
    [
        ((0.0, 4.0), (2.0, 6.0)),
        ((2.0, 6.0), (0.0, 4.0)),
        ((0.0, 10.0), (3.0, 4.0)),
        ((3.0, 4.0), (0.0, 10.0)),
        ((1.0, 2.0), (1.0, 2.0)),
    ],
)
def test_overlapping_parts_add_up_to_each_interval(src, trg):
    ov = overlap(src[0], src[1], trg[0], trg[1])

    assert ov.common > 0
    assert ov.src_before + ov.common + ov.src_after == pytest.approx(src[1] - src[0])
    assert ov.trg_before + ov.common + ov.trg_after == pytest.approx(trg[1] - trg[0])
    assert ov.non_common == pytest.approx(ov.src_before + ov.trg_before + ov.src_after + ov.trg_after)


@pytest.mark.parametrize("a,b,c,d", [(0, 4, 2, 6), (0, 10, 3, 4), (1, 5, 0, 2), (2, 3, 2, 3)])
def test_common_length_and_total(a, b, c, d):
    ov = overlap(a, b, c, d)

    assert ov.common == min(b, d) - max(a, c)
    assert ov.non_common + ov.common == pytest.approx((b - a) + (d - c) - ov.common)
