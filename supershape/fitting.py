"""
fitting.py - Supershape fitting with Simulated Annealing and MAP-Elites

Combines:
1. Gaussian neighbour generation with per-field step sizes
2. Metropolis Simulated Annealing with geometric cooling
3. MAP-Elites archive search (see map_elites.py)
"""
import math
import random
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from tqdm import tqdm

from .geometry import Candidate, INITIAL_SHAPE
from .map_elites import MapElites, MapElitesArchive, MIN_GRID_SIZE
from .objective import Objective, Target


@dataclass
class FitConfig:
    """Configuration for the fitter."""
    # Rendering resolution for hidden-shape targets
    n_points: int = 1000

    # Neighbour step sizes (standard deviations)
    shape_sigma: float = 0.05             # m, n1, n2, n3
    angle_sigma: float = 0.005            # rot_x, rot_y
    pose_sigma: float = 5.0               # scale_x, scale_y, shift_x, shift_y

    # Simulated Annealing settings
    sa_cooling_rate: float = 0.85
    sa_repetitions: int = 100             # Proposals per temperature
    sa_temp_max: float = 1e4
    sa_temp_min: float = 1e-2

    # MAP-Elites settings
    me_grid_size: int = 6
    me_max_iterations: int = 10000

    seed: int = 42

    @classmethod
    def quick_mode(cls):
        return cls(
            n_points=400,
            sa_repetitions=40,
            sa_temp_max=1e3,
            me_max_iterations=3000,
        )

    @classmethod
    def standard_mode(cls):
        return cls()

    @classmethod
    def thorough_mode(cls):
        return cls(
            n_points=2000,
            sa_cooling_rate=0.95,
            sa_repetitions=200,
            sa_temp_min=1e-4,
            me_max_iterations=50000,
        )

    def validate(self):
        """Fail fast on settings no search can run with."""
        if self.n_points < 2:
            raise ValueError(f"n_points must be at least 2, got {self.n_points}")
        for name in ("shape_sigma", "angle_sigma", "pose_sigma"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")
        _check_annealing(self.sa_cooling_rate, self.sa_repetitions,
                         self.sa_temp_max, self.sa_temp_min)
        if self.me_grid_size < MIN_GRID_SIZE:
            raise ValueError(f"me_grid_size must be at least {MIN_GRID_SIZE}, got {self.me_grid_size}")
        if self.me_max_iterations < 1:
            raise ValueError(f"me_max_iterations must be at least 1, got {self.me_max_iterations}")


def _check_annealing(cooling_rate: float, repetitions: int, t_max: float, t_min: float):
    if not 0 < t_min < t_max:
        raise ValueError(f"Temperatures must satisfy 0 < Tmin < Tmax, got Tmin={t_min}, Tmax={t_max}")
    if not 0 < cooling_rate < 1:
        raise ValueError(f"Cooling rate must be between 0 and 1, got {cooling_rate}")
    if repetitions < 1:
        raise ValueError(f"Repetitions per temperature must be at least 1, got {repetitions}")


class NeighborGenerator:
    """
    Random neighbour of a candidate.

    Shape exponents and pose angles move in small steps, pixel-space scale
    and shift in large ones. a and b are kept as they are.
    """

    def __init__(self, rng: random.Random, shape_sigma: float = 0.05,
                 angle_sigma: float = 0.005, pose_sigma: float = 5.0):
        for name, sigma in (("shape_sigma", shape_sigma), ("angle_sigma", angle_sigma),
                            ("pose_sigma", pose_sigma)):
            if sigma < 0:
                raise ValueError(f"{name} must be non-negative, got {sigma}")
        self.rng = rng
        self.shape_sigma = shape_sigma
        self.angle_sigma = angle_sigma
        self.pose_sigma = pose_sigma

    @classmethod
    def from_config(cls, config: FitConfig, rng: random.Random) -> "NeighborGenerator":
        return cls(rng, config.shape_sigma, config.angle_sigma, config.pose_sigma)

    def __call__(self, candidate: Sequence[float]) -> Candidate:
        a, b, m, n1, n2, n3, rot_x, rot_y, scale_x, scale_y, shift_x, shift_y = candidate
        gauss = self.rng.gauss
        return Candidate(
            float(a), float(b),
            m + gauss(0.0, self.shape_sigma),
            n1 + gauss(0.0, self.shape_sigma),
            n2 + gauss(0.0, self.shape_sigma),
            n3 + gauss(0.0, self.shape_sigma),
            rot_x + gauss(0.0, self.angle_sigma),
            rot_y + gauss(0.0, self.angle_sigma),
            scale_x + gauss(0.0, self.pose_sigma),
            scale_y + gauss(0.0, self.pose_sigma),
            shift_x + gauss(0.0, self.pose_sigma),
            shift_y + gauss(0.0, self.pose_sigma),
        )


@dataclass
class TemperatureStep:
    """Acceptance statistics for one temperature level."""
    temperature: float
    proposals: int = 0
    accepted: int = 0
    worse_proposals: int = 0
    accepted_worse: int = 0
    score: float = -math.inf

    @property
    def worse_acceptance_rate(self) -> float:
        if self.worse_proposals == 0:
            return 0.0
        return self.accepted_worse / self.worse_proposals


@dataclass
class AnnealingResult:
    candidate: Candidate
    score: float
    best_candidate: Candidate
    best_score: float
    history: List[TemperatureStep] = field(default_factory=list)


def simulated_annealing(
    objective: Objective,
    initial: Sequence[float],
    target: Target,
    neighbor: Callable[[Candidate], Candidate],
    rng: random.Random,
    cooling_rate: float = 0.85,
    repetitions: int = 100,
    t_max: float = 1e4,
    t_min: float = 1e-2,
    should_stop: Optional[Callable[[], bool]] = None,
    verbose: bool = False,
) -> AnnealingResult:
    """
    Maximise `objective` with Metropolis acceptance and geometric cooling.

    A proposal replaces the current state when it scores higher, or with
    probability exp(-(current - proposal) / T) otherwise. NaN scores fail
    both tests and are never accepted.
    """
    _check_annealing(cooling_rate, repetitions, t_max, t_min)

    current = Candidate.from_sequence(initial)
    current_score = objective(current, target)
    best, best_score = current, current_score
    history: List[TemperatureStep] = []

    n_levels = max(1, math.ceil(math.log(t_min / t_max) / math.log(cooling_rate)))
    pbar = tqdm(total=n_levels, desc="Annealing", disable=not verbose)

    T = t_max
    while T > t_min:
        if should_stop is not None and should_stop():
            break

        level = TemperatureStep(temperature=T)
        for _ in range(repetitions):
            proposal = neighbor(current)
            proposal_score = objective(proposal, target)
            level.proposals += 1

            worse = proposal_score < current_score
            if worse:
                level.worse_proposals += 1

            if proposal_score > current_score or rng.random() < math.exp(-(current_score - proposal_score) / T):
                if worse:
                    level.accepted_worse += 1
                current, current_score = proposal, proposal_score
                level.accepted += 1

                if current_score > best_score:
                    best, best_score = current, current_score

        level.score = current_score
        history.append(level)
        pbar.update(1)
        pbar.set_postfix({'T': f'{T:.3g}', 'score': f'{current_score:.4f}'})

        T *= cooling_rate

    pbar.close()
    return AnnealingResult(
        candidate=current,
        score=objective(current, target),
        best_candidate=best,
        best_score=best_score,
        history=history,
    )


class ShapeFitter:
    """
    Fits Supershapes to a target with SA and MAP-Elites.

    One seeded random source per fitter drives neighbours, selection and
    acceptance, so runs with the same seed repeat exactly.
    """

    def __init__(self, objective: Objective, target: Target,
                 config: Optional[FitConfig] = None, seed: Optional[int] = None):
        self.config = config or FitConfig.standard_mode()
        self.config.validate()
        self.objective = objective
        self.target = target
        self.seed = self.config.seed if seed is None else seed
        self.rng = random.Random(self.seed)
        self.neighbor = NeighborGenerator.from_config(self.config, self.rng)
        self.running = True

    def stop(self):
        """Ask the current search to finish at its next outer-loop boundary.

        Each fit_sa / fit_me call starts with the flag cleared, so a stop only
        ends the search that is running when it arrives.
        """
        self.running = False

    def _should_stop(self) -> bool:
        return not self.running

    def fit_sa(self, initial: Sequence[float] = INITIAL_SHAPE,
               verbose: bool = False) -> AnnealingResult:
        cfg = self.config
        self.running = True
        if verbose:
            print(f"Simulated Annealing: Tmax={cfg.sa_temp_max:g}, Tmin={cfg.sa_temp_min:g}, "
                  f"r={cfg.sa_cooling_rate}, k={cfg.sa_repetitions}")

        result = simulated_annealing(
            self.objective, initial, self.target, self.neighbor, self.rng,
            cooling_rate=cfg.sa_cooling_rate,
            repetitions=cfg.sa_repetitions,
            t_max=cfg.sa_temp_max,
            t_min=cfg.sa_temp_min,
            should_stop=self._should_stop,
            verbose=verbose,
        )

        if verbose:
            print(f"  SA final score: {result.score:.6f} (best seen {result.best_score:.6f})")
        return result

    def fit_me(self, initial: Sequence[float] = INITIAL_SHAPE,
               verbose: bool = False) -> MapElitesArchive:
        cfg = self.config
        self.running = True
        if verbose:
            print(f"MAP-Elites: {cfg.me_grid_size}x{cfg.me_grid_size} grid, "
                  f"{cfg.me_max_iterations} iterations")

        search = MapElites(
            self.objective, self.target, self.neighbor, self.rng,
            grid_size=cfg.me_grid_size,
            max_iterations=cfg.me_max_iterations,
        )
        archive = search.run(initial, should_stop=self._should_stop, verbose=verbose)

        if verbose:
            _, best_score = archive.best()
            print(f"  ME elites: {len(archive)}, best score: {best_score:.6f}")
        return archive
