"""
io_utils.py - I/O utilities for Supershape fitting

Binary masks come in as .npy arrays or whitespace-separated text grids;
results go out as CSV with one row per fitted candidate:
- method: "sa" or "me"
- niche_i, niche_j: archive cell for ME rows, empty for SA
- score, then the 12 candidate parameters with 10 decimals
"""
import os
import numpy as np
from typing import List, Optional, Tuple

from .fitting import AnnealingResult
from .geometry import Candidate
from .map_elites import MapElitesArchive

HEADER = ["method", "niche_i", "niche_j", "score"] + list(Candidate._fields)


def load_mask(path: str) -> np.ndarray:
    """Load a binary raster; any non-zero cell is foreground."""
    if not os.path.isfile(path):
        raise ValueError(f"Mask file not found: {path}")

    if path.endswith(".npy"):
        mask = np.load(path)
    else:
        mask = np.loadtxt(path, ndmin=2)

    mask = np.atleast_2d(mask)
    if mask.ndim != 2:
        raise ValueError(f"Mask must be 2-D, got shape {mask.shape}")
    return mask != 0


def get_output_path(filename: str = "results.csv") -> str:
    """Get output path."""
    out_dir = os.environ.get("SUPERSHAPE_OUTPUT_DIR")
    if out_dir and os.path.isdir(out_dir):
        return os.path.join(out_dir, filename)
    return filename


def _row(method: str, niche: Tuple[str, str], score: float,
         candidate: Candidate, decimals: int) -> str:
    values = [f"{score:.{decimals}f}"] + [f"{v:.{decimals}f}" for v in candidate]
    return ",".join([method, niche[0], niche[1]] + values)


def create_results_csv(
    output_path: Optional[str] = None,
    sa_result: Optional[AnnealingResult] = None,
    archive: Optional[MapElitesArchive] = None,
    decimals: int = 10,
) -> str:
    """Write the SA result and every ME elite to CSV."""
    if sa_result is None and archive is None:
        raise ValueError("Nothing to write: no SA result and no archive")

    if output_path is None:
        output_path = get_output_path()

    lines: List[str] = [",".join(HEADER)]
    if sa_result is not None:
        lines.append(_row("sa", ("", ""), sa_result.score, sa_result.candidate, decimals))
    if archive is not None:
        for i, j in archive.occupied():
            lines.append(_row("me", (str(i), str(j)), float(archive.fitness[i, j]),
                              archive[(i, j)], decimals))

    with open(output_path, "w") as f:
        f.write("\n".join(lines) + "\n")

    return output_path


def validate_results_format(path: str) -> Tuple[bool, Optional[str]]:
    """Validate results CSV format."""
    try:
        with open(path, 'r') as f:
            lines = f.read().splitlines()
    except OSError as e:
        return False, f"Cannot read: {e}"

    if not lines:
        return False, "Empty file"

    if lines[0].strip() != ",".join(HEADER):
        return False, f"Wrong header: {lines[0].strip()}"

    if len(lines) < 2:
        return False, "No result rows"

    for n, line in enumerate(lines[1:], start=2):
        fields = line.split(",")
        if len(fields) != len(HEADER):
            return False, f"Line {n}: expected {len(HEADER)} fields, got {len(fields)}"
        if fields[0] not in ("sa", "me"):
            return False, f"Line {n}: unknown method {fields[0]}"

    return True, None
