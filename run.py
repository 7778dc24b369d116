#!/usr/bin/env python3
"""
run.py - Supershape fitting v1

Usage:
    python run.py [--mode quick|standard|thorough] [--method sa|me|both] [--seed 42]
    python run.py --mask flower.npy --border largest

Modes:
    quick:      seconds, coarse fit
    standard:   about a minute (settings of the reference notebook)
    thorough:   several minutes, slower cooling and 50k ME iterations

Without --mask the target is a hidden Supershape rendered at the mode's
resolution; with --mask the target is a border extracted from the raster
and the Cartesian objective is used.
"""
import sys
import os
import time
import signal
import argparse

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from supershape.contours import find_contours, pick_border
from supershape.fitting import FitConfig, ShapeFitter
from supershape.geometry import HIDDEN_SHAPE, INITIAL_SHAPE
from supershape.io_utils import create_results_csv, get_output_path, load_mask, validate_results_format
from supershape.objective import CartesianTarget, PolarTarget, get_objective
from supershape.validate import print_fit_summary, shape_overlap, validate_candidate


def get_config(mode: str) -> FitConfig:
    if mode == "quick":
        return FitConfig.quick_mode()
    elif mode == "standard":
        return FitConfig.standard_mode()
    elif mode == "thorough":
        return FitConfig.thorough_mode()
    return FitConfig.standard_mode()


def build_target(objective_name: str, config: FitConfig, mask_path=None, border_strategy="first"):
    if mask_path is not None:
        borders = find_contours(load_mask(mask_path))
        print(f"Borders found: {len(borders)}")
        border = pick_border(borders, border_strategy)
        print(f"Target border: {len(border)} pixels ({border_strategy})")
        return CartesianTarget.from_border(border)

    if objective_name == "polar":
        return PolarTarget.from_candidate(HIDDEN_SHAPE, config.n_points)
    return CartesianTarget.from_candidate(HIDDEN_SHAPE, config.n_points)


def main(mode: str = "standard", method: str = "both", objective: str = "polar",
         seed: int = 42, mask=None, border: str = "first", output=None):
    print("=" * 70)
    print("SUPERSHAPE FITTING v1.0")
    print("=" * 70)

    if mask is not None:
        objective = "cartesian"

    print(f"Mode: {mode}")
    print(f"Method: {method}")
    print(f"Objective: {objective}")
    print(f"Seed: {seed}")
    print(f"Target: {mask if mask is not None else 'hidden shape'}")
    print()

    config = get_config(mode)
    config.seed = seed

    print("Configuration:")
    print(f"  Points: {config.n_points}")
    print(f"  SA: r={config.sa_cooling_rate}, k={config.sa_repetitions}, "
          f"T={config.sa_temp_max:g}..{config.sa_temp_min:g}")
    print(f"  ME: {config.me_grid_size}x{config.me_grid_size} grid, {config.me_max_iterations} iterations")
    print()

    try:
        target = build_target(objective, config, mask, border)
    except ValueError as e:
        print(f"✗ Error: {e}")
        return None

    fitter = ShapeFitter(get_objective(objective), target, config=config, seed=seed)

    def _signal_handler(signum, frame):
        print("\n\nReceived stop signal. Finishing current search...")
        fitter.stop()

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    start_time = time.time()

    sa_result = None
    archive = None
    if method in ("sa", "both"):
        sa_result = fitter.fit_sa(INITIAL_SHAPE, verbose=True)
    if method in ("me", "both"):
        archive = fitter.fit_me(INITIAL_SHAPE, verbose=True)

    fit_time = time.time() - start_time
    print(f"\nFitting time: {fit_time:.1f}s ({fit_time/60:.1f} min)")

    # Validate
    print("\nValidating...")
    overlaps = {}
    fits = []
    if sa_result is not None:
        fits.append(("SA", sa_result.candidate))
    if archive is not None:
        best, _ = archive.best()
        if best is not None:
            fits.append(("ME", best))

    for label, candidate in fits:
        valid, msg = validate_candidate(candidate)
        print(f"  {label}: {msg}" if valid else f"  ⚠ {label}: {msg}")
        if valid and isinstance(target, CartesianTarget):
            overlaps[label] = shape_overlap(candidate, target)

    print()
    print_fit_summary(
        sa_score=sa_result.score if sa_result is not None else None,
        archive=archive,
        overlaps=overlaps,
    )

    # Save results
    print("\nSaving results...")
    output_path = output or get_output_path("results.csv")

    try:
        created = create_results_csv(output_path, sa_result=sa_result, archive=archive)
        print(f"✓ Saved: {created}")

        valid, error = validate_results_format(created)
        if valid:
            print("✓ Format OK")
        else:
            print(f"⚠ Format issue: {error}")
    except (OSError, ValueError) as e:
        print(f"✗ Error: {e}")

    total_time = time.time() - start_time
    print()
    print("=" * 70)
    print("COMPLETE")
    print("=" * 70)
    print(f"Time: {total_time:.1f}s ({total_time/60:.1f} min)")
    for label, candidate in fits:
        print(f"{label}: " + ", ".join(f"{v:.3f}" for v in candidate))
    print(f"Output: {output_path}")

    return sa_result, archive


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Supershape fitting v1")
    parser.add_argument("--mode", choices=["quick", "standard", "thorough"], default="standard")
    parser.add_argument("--method", choices=["sa", "me", "both"], default="both")
    parser.add_argument("--objective", choices=["polar", "cartesian"], default="polar")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--mask", default=None, help="Binary raster (.npy or text grid)")
    parser.add_argument("--border", choices=["first", "longest", "largest"], default="first")
    parser.add_argument("--output", default=None)
    args = parser.parse_args()

    result = main(mode=args.mode, method=args.method, objective=args.objective, seed=args.seed,
                  mask=args.mask, border=args.border, output=args.output)
    if result is None:
        sys.exit(1)
