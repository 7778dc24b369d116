"""
validate.py - Candidate validation and fit diagnostics
"""
import math
import numpy as np
from typing import Optional, Sequence, Tuple

from .geometry import Candidate, border_polygon, candidate_polygon
from .map_elites import MapElitesArchive
from .objective import CartesianTarget


def validate_candidate(candidate: Sequence[float]) -> Tuple[bool, str]:
    """Check a candidate has 12 finite values and a renderable shape."""
    if len(candidate) != len(Candidate._fields):
        return False, f"Expected {len(Candidate._fields)} values, got {len(candidate)}"

    bad = [name for name, v in zip(Candidate._fields, candidate) if not math.isfinite(v)]
    if bad:
        return False, f"Non-finite value(s): {', '.join(bad)}"

    if candidate[3] == 0:
        return False, "n1 = 0 makes the radius degenerate"

    return True, "OK"


def shape_overlap(candidate: Sequence[float], target: CartesianTarget) -> float:
    """
    Intersection over union between the rendered candidate and the target.

    Independent of the objectives; only used to report how well a fit
    covers the target outline. 0.0 when either outline is degenerate.
    """
    poly = candidate_polygon(candidate, max(len(target), 3))
    target_poly = border_polygon(np.column_stack([target.x, target.y]))
    if poly.is_empty or target_poly.is_empty:
        return 0.0

    union = poly.union(target_poly).area
    if union == 0:
        return 0.0
    return poly.intersection(target_poly).area / union


def print_fit_summary(
    sa_score: Optional[float] = None,
    archive: Optional[MapElitesArchive] = None,
    overlaps: Optional[dict] = None,
):
    """Print detailed fit summary."""

    print("=" * 60)
    print("FIT SUMMARY")
    print("=" * 60)

    if sa_score is not None:
        print(f"SA score: {sa_score:.6f}")

    if archive is not None:
        _, best_score = archive.best()
        print(f"ME best score: {best_score:.6f}")
        print(f"ME elites: {len(archive)} ({archive.coverage() * 100:.1f}% of grid)")
        print()
        print("Fitness map (rows = niche i, '.' = empty):")
        for i in range(archive.grid_size):
            cells = []
            for j in range(archive.grid_size):
                if archive.is_empty((i, j)):
                    cells.append(f"{'.':>11}")
                else:
                    cells.append(f"{archive.fitness[i, j]:11.4g}")
            print("  " + " ".join(cells))

    if overlaps:
        print()
        for method, iou in overlaps.items():
            print(f"{method} overlap (IoU): {iou:.4f}")

    print("=" * 60)
