import numpy as np
import pytest

from supershape.fitting import AnnealingResult
from supershape.geometry import Candidate, HIDDEN_SHAPE, INITIAL_SHAPE
from supershape.io_utils import HEADER, create_results_csv, load_mask, validate_results_format
from supershape.map_elites import MapElitesArchive


def test_load_mask_npy(tmp_path):
    path = tmp_path / "mask.npy"
    mask = np.zeros((4, 5), dtype=np.uint8)
    mask[1:3, 1:4] = 255
    np.save(path, mask)

    loaded = load_mask(str(path))
    assert loaded.dtype == bool
    assert loaded.shape == (4, 5)
    assert loaded.sum() == 6


def test_load_mask_text(tmp_path):
    path = tmp_path / "mask.txt"
    path.write_text("0 0 0\n0 1 0\n0 0 0\n")
    loaded = load_mask(str(path))
    assert loaded.shape == (3, 3)
    assert loaded[1, 1] and loaded.sum() == 1


def test_load_mask_missing_file(tmp_path):
    with pytest.raises(ValueError):
        load_mask(str(tmp_path / "nope.npy"))


def test_results_csv_round_trip(tmp_path):
    sa = AnnealingResult(
        candidate=Candidate(*HIDDEN_SHAPE), score=-0.01,
        best_candidate=Candidate(*HIDDEN_SHAPE), best_score=-0.01,
    )
    archive = MapElitesArchive(6)
    archive.try_insert(Candidate(*INITIAL_SHAPE), -2.0, (4, 4))
    archive.try_insert(Candidate(*HIDDEN_SHAPE), -0.5, (5, 5))

    path = create_results_csv(str(tmp_path / "results.csv"), sa_result=sa, archive=archive)
    valid, error = validate_results_format(path)
    assert valid, error

    lines = open(path).read().splitlines()
    assert lines[0] == ",".join(HEADER)
    assert len(lines) == 4
    assert lines[1].startswith("sa,,,")
    assert lines[2].startswith("me,4,4,")
    assert float(lines[3].split(",")[6]) == pytest.approx(3.0)


def test_results_csv_needs_something_to_write(tmp_path):
    with pytest.raises(ValueError):
        create_results_csv(str(tmp_path / "results.csv"))


def test_validate_results_format_errors(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("id,x,y\n")
    valid, error = validate_results_format(str(path))
    assert not valid
    assert "header" in error

    valid, error = validate_results_format(str(tmp_path / "missing.csv"))
    assert not valid
