"""
objective.py - Fitness of a candidate against a target contour

Both objectives return the negative mean squared error, so larger is better.
"""
import numpy as np
from dataclasses import dataclass
from typing import Callable, Sequence, Union

from .contours import Border, border_to_xy
from .geometry import render_points, render_radii


def _frozen(values) -> np.ndarray:
    arr = np.array(values, dtype=np.float64).ravel()
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class PolarTarget:
    """Radii sampled at uniform angles over [0, 2*pi]."""
    radii: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "radii", _frozen(self.radii))

    def __len__(self) -> int:
        return len(self.radii)

    @classmethod
    def from_candidate(cls, candidate: Sequence[float], n_points: int) -> "PolarTarget":
        return cls(render_radii(candidate, n_points))


@dataclass(frozen=True, eq=False)
class CartesianTarget:
    """Parallel x / y pixel coordinates of a contour."""
    x: np.ndarray
    y: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "x", _frozen(self.x))
        object.__setattr__(self, "y", _frozen(self.y))
        if len(self.x) != len(self.y):
            raise ValueError(f"x and y differ in length: {len(self.x)} != {len(self.y)}")

    def __len__(self) -> int:
        return len(self.x)

    @classmethod
    def from_candidate(cls, candidate: Sequence[float], n_points: int) -> "CartesianTarget":
        return cls(*render_points(candidate, n_points))

    @classmethod
    def from_border(cls, border: Border) -> "CartesianTarget":
        return cls(*border_to_xy(border))


Target = Union[PolarTarget, CartesianTarget]
Objective = Callable[[Sequence[float], Target], float]


def polar_objective(candidate: Sequence[float], target: PolarTarget) -> float:
    """Negative MSE between target radii and the candidate's radii."""
    radii = render_radii(candidate, len(target))
    with np.errstate(invalid='ignore', over='ignore'):
        mse = np.sum((target.radii - radii) ** 2) / len(radii)
    return float(-mse)


def cartesian_objective(candidate: Sequence[float], target: CartesianTarget) -> float:
    """
    Negative MSE between independently sorted x and y coordinates.

    Sorting each axis on its own is an order-invariant stand-in for point
    matching: it ignores where the contour starts and which way it runs.
    """
    x, y = render_points(candidate, len(target))
    x_target = np.sort(target.x)
    y_target = np.sort(target.y)
    with np.errstate(invalid='ignore', over='ignore'):
        mse = np.sum((x_target - np.sort(x)) ** 2 + (y_target - np.sort(y)) ** 2) / len(x_target)
    return float(-mse)


OBJECTIVES = {
    "polar": polar_objective,
    "cartesian": cartesian_objective,
}


def get_objective(name: str) -> Objective:
    if name not in OBJECTIVES:
        raise ValueError(f"Unknown objective: {name} (choose from {', '.join(OBJECTIVES)})")
    return OBJECTIVES[name]
