import pytest

from supershape.geometry import HIDDEN_SHAPE
from supershape.map_elites import MapElitesArchive
from supershape.objective import CartesianTarget
from supershape.validate import print_fit_summary, shape_overlap, validate_candidate


def test_valid_candidate():
    assert validate_candidate(HIDDEN_SHAPE) == (True, "OK")


@pytest.mark.parametrize("candidate, fragment", [
    (HIDDEN_SHAPE[:11], "Expected 12"),
    (HIDDEN_SHAPE[:3] + (float("nan"),) + HIDDEN_SHAPE[4:], "n1"),
    (HIDDEN_SHAPE[:8] + (float("inf"),) + HIDDEN_SHAPE[9:], "scale_x"),
    (HIDDEN_SHAPE[:3] + (0.0,) + HIDDEN_SHAPE[4:], "degenerate"),
])
def test_invalid_candidates(candidate, fragment):
    valid, msg = validate_candidate(candidate)
    assert not valid
    assert fragment in msg


def test_overlap_with_itself_is_full():
    target = CartesianTarget.from_candidate(HIDDEN_SHAPE, 400)
    assert shape_overlap(HIDDEN_SHAPE, target) == pytest.approx(1.0, abs=1e-6)


def test_overlap_with_distant_shape_is_zero():
    target = CartesianTarget.from_candidate(HIDDEN_SHAPE, 400)
    far = HIDDEN_SHAPE[:10] + (5000.0, 5000.0)
    assert shape_overlap(far, target) == 0.0


def test_print_fit_summary(capsys):
    archive = MapElitesArchive(6)
    archive.try_insert(HIDDEN_SHAPE, -0.25, (5, 5))
    print_fit_summary(sa_score=-0.5, archive=archive, overlaps={"SA": 0.75})

    out = capsys.readouterr().out
    assert "FIT SUMMARY" in out
    assert "SA score: -0.500000" in out
    assert "ME elites: 1" in out
    assert "SA overlap (IoU): 0.7500" in out
