"""
geometry.py - Superformula geometry

Radius evaluation, polar -> Cartesian pose mapping and shapely polygons
for rendered candidates and extracted borders.
"""
import math
import numpy as np
from shapely.geometry import Polygon
from typing import NamedTuple, Sequence, Tuple

# Rendered radii are rounded like the reference fits
RADIUS_DECIMALS = 8

# Shapes used throughout the examples
HIDDEN_SHAPE = (1.0, 1.0, 3.0, 5.0, 8.0, 8.0, 0.5, 0.5, 120.0, 120.0, 220.0, 155.0)
INITIAL_SHAPE = (1.0, 1.0, 2.0, 2.0, 2.0, 2.0, 1.0, 1.0, 10.0, 10.0, 10.0, 10.0)


class Candidate(NamedTuple):
    """Superformula genes followed by the pose placing the curve in pixel space."""
    a: float
    b: float
    m: float
    n1: float
    n2: float
    n3: float
    rot_x: float
    rot_y: float
    scale_x: float
    scale_y: float
    shift_x: float
    shift_y: float

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> "Candidate":
        values = list(values)
        if len(values) != len(cls._fields):
            raise ValueError(f"Expected {len(cls._fields)} values, got {len(values)}")
        return cls(*(float(v) for v in values))

    @property
    def shape(self) -> Tuple[float, float, float, float, float, float]:
        return self[:6]

    @property
    def pose(self) -> Tuple[float, float, float, float, float, float]:
        return self[6:]


def _radius(phi, a, b, m, n1, n2, n3):
    phi = np.asarray(phi, dtype=np.float64)
    a, b, m, n1, n2, n3 = (np.float64(v) for v in (a, b, m, n1, n2, n3))
    # abs() before every power keeps negative bases real
    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        raux = (np.abs(1 / a * np.abs(np.cos(m * phi / 4))) ** n2
                + np.abs(1 / b * np.abs(np.sin(m * phi / 4))) ** n3)
        return np.abs(raux) ** (-1 / n1)


def superformula(phi: float, a: float = 1, b: float = 1, m: float = 7,
                 n1: float = 3, n2: float = 4, n3: float = 17) -> float:
    """Radius of the Supershape at a single polar angle (Gielis, 2003)."""
    return float(_radius(phi, a, b, m, n1, n2, n3))


def superformula_batch(phi: Sequence[float], a: float = 1, b: float = 1, m: float = 7,
                       n1: float = 3, n2: float = 4, n3: float = 17) -> np.ndarray:
    """Radius of the Supershape at every angle in `phi`."""
    return np.atleast_1d(_radius(phi, a, b, m, n1, n2, n3))


def to_cartesian(r, phi, rot_x: float = 0.0, rot_y: float = 0.0,
                 scale_x: float = 1.0, scale_y: float = 1.0,
                 shift_x: float = 0.0, shift_y: float = 0.0) -> Tuple[np.ndarray, np.ndarray]:
    """Map polar (r, phi) to image coordinates with independent per-axis pose."""
    r = np.asarray(r, dtype=np.float64)
    phi = np.asarray(phi, dtype=np.float64)
    with np.errstate(invalid='ignore', over='ignore'):
        x = r * np.cos(phi + rot_x) * scale_x + shift_x
        y = r * np.sin(phi + rot_y) * scale_y + shift_y
    return x, y


def sample_angles(n_points: int) -> np.ndarray:
    """Uniform angles over [0, 2*pi], both ends included."""
    return np.linspace(0.0, 2 * math.pi, n_points)


def render_radii(candidate: Sequence[float], n_points: int) -> np.ndarray:
    """Radii of a candidate's shape at `n_points` uniform angles."""
    a, b, m, n1, n2, n3 = candidate[:6]
    radii = superformula_batch(sample_angles(n_points), a, b, m, n1, n2, n3)
    return np.round(radii, RADIUS_DECIMALS)


def render_points(candidate: Sequence[float], n_points: int) -> Tuple[np.ndarray, np.ndarray]:
    """Render a candidate, pose included, to `n_points` (x, y) points."""
    phi = sample_angles(n_points)
    radii = render_radii(candidate, n_points)
    return to_cartesian(radii, phi, *candidate[6:12])


def _as_polygon(coords) -> Polygon:
    poly = Polygon(coords)
    if not poly.is_valid:
        # Self-intersecting outlines (star shapes, pixel stairs)
        poly = poly.buffer(0)
    return poly


def candidate_polygon(candidate: Sequence[float], n_points: int = 1000) -> Polygon:
    """Create the polygon outlined by a rendered candidate."""
    x, y = render_points(candidate, n_points)
    if not (np.all(np.isfinite(x)) and np.all(np.isfinite(y))):
        return Polygon()
    return _as_polygon(np.column_stack([x, y]))


def border_polygon(border: np.ndarray) -> Polygon:
    """Create the polygon outlined by an extracted pixel border."""
    border = np.asarray(border, dtype=np.float64)
    if len(border) < 3:
        return Polygon()
    return _as_polygon(border)
