import math

import numpy as np
import pytest

from supershape.geometry import (
    Candidate,
    HIDDEN_SHAPE,
    border_polygon,
    candidate_polygon,
    render_points,
    render_radii,
    sample_angles,
    superformula,
    superformula_batch,
    to_cartesian,
)

# m=4, n1=n2=n3=2 gives r = 1 everywhere
CIRCLE = (1, 1, 4, 2, 2, 2, 0, 0, 1, 1, 0, 0)


def test_reference_radius():
    r = superformula(1, a=1, b=1, m=1, n1=1, n2=1, n3=1)
    assert r == pytest.approx(0.8221545114820233, abs=1e-9)
    assert isinstance(r, float)


def test_reference_radii_batch():
    r = superformula_batch([0, 0.1, 0.2, 0.3, 0.4], a=1, b=1, m=7, n1=3, n2=4, n3=17)
    assert isinstance(r, np.ndarray)
    assert np.round(r, 3).tolist() == pytest.approx([1.0, 1.021, 1.087, 1.213, 1.429])


def test_scalar_matches_batch():
    phi = np.linspace(0, 2 * np.pi, 17)
    batch = superformula_batch(phi, m=5, n1=2, n2=7, n3=7)
    for p, r in zip(phi, batch):
        assert superformula(p, m=5, n1=2, n2=7, n3=7) == pytest.approx(r)


@pytest.mark.parametrize("params", [
    (1, 1, 7, 3, 4, 17),
    (1, 1, 3, 5, 8, 8),
    (1, 1, 40, 13, -4, 17),
    (3, 3, 6, -14, 29, 6),
    (1, 1, 16, 12.8734, -3.58012, 16.599),
    (0.8, 1, 4, 1.5, 3, 10),
])
def test_radius_non_negative(params):
    a, b, m, n1, n2, n3 = params
    r = superformula_batch(sample_angles(500), a, b, m, n1, n2, n3)
    finite = r[np.isfinite(r)]
    assert np.all(finite >= 0)


def test_degenerate_n1_propagates_instead_of_raising():
    r = superformula(0.5, m=7, n1=0, n2=4, n3=17)
    assert not math.isfinite(r)


def test_to_cartesian_pose():
    x, y = to_cartesian([2.0], [0.0], rot_x=math.pi / 2, rot_y=math.pi / 2,
                        scale_x=3.0, scale_y=5.0, shift_x=10.0, shift_y=-1.0)
    assert x[0] == pytest.approx(2.0 * math.cos(math.pi / 2) * 3.0 + 10.0)
    assert y[0] == pytest.approx(2.0 * math.sin(math.pi / 2) * 5.0 - 1.0)


def test_sample_angles_include_both_ends():
    phi = sample_angles(5)
    assert phi[0] == 0.0
    assert phi[-1] == pytest.approx(2 * math.pi)
    assert len(phi) == 5


def test_render_radii_are_rounded():
    radii = render_radii(HIDDEN_SHAPE, 100)
    assert np.array_equal(radii, np.round(radii, 8))


def test_render_points_circle():
    x, y = render_points(CIRCLE, 64)
    assert np.allclose(np.hypot(x, y), 1.0)


def test_candidate_from_sequence():
    c = Candidate.from_sequence(HIDDEN_SHAPE)
    assert c.m == 3.0
    assert c.shape == (1.0, 1.0, 3.0, 5.0, 8.0, 8.0)
    assert c.pose == (0.5, 0.5, 120.0, 120.0, 220.0, 155.0)

    with pytest.raises(ValueError):
        Candidate.from_sequence(HIDDEN_SHAPE[:6])


def test_candidate_polygon_area():
    poly = candidate_polygon(CIRCLE, 2000)
    assert poly.area == pytest.approx(math.pi, rel=1e-3)


def test_candidate_polygon_degenerate_is_empty():
    degenerate = (1, 1, 7, 0, 4, 17, 0, 0, 1, 1, 0, 0)
    assert candidate_polygon(degenerate, 100).is_empty


def test_border_polygon():
    square = np.array([(0, 0), (0, 2), (2, 2), (2, 0)])
    assert border_polygon(square).area == pytest.approx(4.0)
    assert border_polygon(square[:2]).is_empty
