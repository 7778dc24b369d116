"""
map_elites.py - MAP-Elites archive for Supershape fitting

Keeps the best candidate per niche instead of a single global best, so
shapes from different regions of gene space survive side by side.
"""
import math
import random
import numpy as np
from typing import Callable, List, Optional, Sequence, Tuple

from tqdm import tqdm

from .geometry import Candidate
from .objective import Objective, Target

Niche = Tuple[int, int]

# The niche function addresses indices 0..5 on both axes
MIN_GRID_SIZE = 6


def _bucket(value: float) -> Optional[int]:
    if value <= 0:
        return 0
    elif 0 < value <= 2:
        return 1
    elif value > 2:
        return 2
    return None  # NaN


def niche_supershapes(candidate: Sequence[float]) -> Niche:
    """
    Niche of a candidate from its m, n1, n2 and n3 genes.

    m and n1 bucket into rows / columns 0-2; n2 and n3 then overwrite them
    with buckets 3-5. Every real n2 / n3 lands in a bucket, so only the
    lower-right 3x3 block of the grid is reachable for finite genes.
    """
    _, _, m, n1, n2, n3 = candidate[:6]
    i = j = 0

    b = _bucket(m)
    if b is not None:
        i = b
    b = _bucket(n1)
    if b is not None:
        j = b
    b = _bucket(n2)
    if b is not None:
        i = b + 3
    b = _bucket(n3)
    if b is not None:
        j = b + 3

    return i, j


class MapElitesArchive:
    """N x N grid of elites stored as a flat arena plus a fitness map."""

    def __init__(self, grid_size: int = MIN_GRID_SIZE):
        if grid_size < 1:
            raise ValueError(f"grid_size must be positive, got {grid_size}")
        self.grid_size = grid_size
        self.solutions: List[Optional[Candidate]] = [None] * (grid_size * grid_size)
        self.fitness = np.full((grid_size, grid_size), -np.inf)

    def _index(self, niche: Niche) -> int:
        i, j = niche
        if not (0 <= i < self.grid_size and 0 <= j < self.grid_size):
            raise IndexError(f"Niche {niche} outside {self.grid_size}x{self.grid_size} grid")
        return i * self.grid_size + j

    def __getitem__(self, niche: Niche) -> Optional[Candidate]:
        return self.solutions[self._index(niche)]

    def __len__(self) -> int:
        return sum(1 for s in self.solutions if s is not None)

    def is_empty(self, niche: Niche) -> bool:
        return self[niche] is None

    def try_insert(self, candidate: Candidate, score: float, niche: Niche) -> bool:
        """Store `candidate` if its niche is empty or it beats the resident elite."""
        idx = self._index(niche)
        if math.isnan(score):
            return False
        if self.solutions[idx] is None or score > self.fitness[niche]:
            self.solutions[idx] = candidate
            self.fitness[niche] = score
            return True
        return False

    def occupied(self) -> List[Niche]:
        n = self.grid_size
        return [divmod(idx, n) for idx, s in enumerate(self.solutions) if s is not None]

    def best(self) -> Tuple[Optional[Candidate], float]:
        """Global best elite and its fitness, (None, -inf) when empty."""
        occupied = self.occupied()
        if not occupied:
            return None, -math.inf
        niche = max(occupied, key=lambda n: self.fitness[n])
        return self[niche], float(self.fitness[niche])

    def solution_grid(self) -> List[List[Optional[Candidate]]]:
        n = self.grid_size
        return [self.solutions[row * n:(row + 1) * n] for row in range(n)]

    def coverage(self) -> float:
        return len(self) / len(self.solutions)


def random_selection(archive: MapElitesArchive, rng: random.Random) -> Candidate:
    """Uniformly random elite among the occupied niches."""
    return archive[rng.choice(archive.occupied())]


class MapElites:
    """
    MAP-Elites search over the 12 Supershape parameters.

    Iteration 0 evaluates the initial candidate; every later iteration
    mutates a randomly selected elite and offers the child to its niche.
    """

    def __init__(
        self,
        objective: Objective,
        target: Target,
        variation: Callable[[Candidate], Candidate],
        rng: random.Random,
        grid_size: int = MIN_GRID_SIZE,
        max_iterations: int = 10000,
        niche: Callable[[Sequence[float]], Niche] = niche_supershapes,
        selection: Callable[[MapElitesArchive, random.Random], Candidate] = random_selection,
    ):
        if grid_size < MIN_GRID_SIZE:
            raise ValueError(f"grid_size must be at least {MIN_GRID_SIZE}, got {grid_size}")
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {max_iterations}")

        self.objective = objective
        self.target = target
        self.variation = variation
        self.rng = rng
        self.max_iterations = max_iterations
        self.niche = niche
        self.selection = selection

        self.archive = MapElitesArchive(grid_size)
        self.iteration = 0

    def step(self, initial: Candidate) -> bool:
        """Run one iteration; returns whether the archive changed."""
        if self.iteration == 0:
            child = Candidate.from_sequence(initial)
        elif len(self.archive) == 0:
            # Nothing survived the bootstrap (e.g. a NaN-scored start)
            child = self.variation(initial)
        else:
            child = self.variation(self.selection(self.archive, self.rng))

        niche = self.niche(child)
        score = self.objective(child, self.target)
        self.iteration += 1
        return self.archive.try_insert(child, score, niche)

    def run(
        self,
        initial: Candidate,
        should_stop: Optional[Callable[[], bool]] = None,
        verbose: bool = False,
    ) -> MapElitesArchive:
        """Iterate until `max_iterations`; returns the archive."""
        initial = Candidate.from_sequence(initial)
        pbar = tqdm(total=self.max_iterations, desc="MAP-Elites", disable=not verbose)

        while self.iteration < self.max_iterations:
            if should_stop is not None and should_stop():
                break
            self.step(initial)
            pbar.update(1)
            if verbose and self.iteration % 1000 == 0:
                _, best_score = self.archive.best()
                pbar.set_postfix({'elites': len(self.archive), 'best': f'{best_score:.4f}'})

        pbar.close()
        return self.archive
