"""
evolution.py - Evolving Supershapes by hand

A parent shape produces a brood of mutants; whoever drives the loop picks
one to become the next parent. State is explicit and `step` is pure: it
returns a new state and never touches the old one.
"""
import random
from dataclasses import dataclass, replace
from typing import Optional, Tuple

Shape = Tuple[float, float, float, float, float, float]

DEFAULT_PARENT: Shape = (1.0, 1.0, 7.0, 3.0, 4.0, 17.0)
BROOD_SIZE = 8

# Example Supershapes to restart from
PRESET_SHAPES: Tuple[Shape, ...] = (
    (1.0, 1.0, 5.0, 2.0, 7.0, 7.0),
    (3.0, 3.0, 6.0, -14.0, 29.0, 6.0),
    (1.0, 1.0, 16.0, 12.8734, -3.58012, 16.599),
    (0.8, 1.0, 4.0, 1.5, 3.0, 10.0),
)


def mutant(parent: Shape, variation: float, rng: random.Random) -> Shape:
    """Add N(0, variation) noise to m, n1, n2 and n3; a and b are reset to 1."""
    _, _, m, n1, n2, n3 = parent
    return (
        1.0, 1.0,
        m + rng.gauss(0.0, variation),
        n1 + rng.gauss(0.0, variation),
        n2 + rng.gauss(0.0, variation),
        n3 + rng.gauss(0.0, variation),
    )


@dataclass(frozen=True)
class EvolutionState:
    parent: Shape
    mutants: Tuple[Shape, ...]
    lineage: Tuple[Shape, ...]
    variation: float = 0.7


def _brood(parent: Shape, variation: float, rng: random.Random) -> Tuple[Shape, ...]:
    return tuple(mutant(parent, variation, rng) for _ in range(BROOD_SIZE))


def start(rng: random.Random, parent: Shape = DEFAULT_PARENT,
          variation: float = 0.7) -> EvolutionState:
    """Fresh state: `parent` with a new brood and a one-entry lineage."""
    if variation < 0:
        raise ValueError(f"variation must be non-negative, got {variation}")
    parent = tuple(float(v) for v in parent)
    return EvolutionState(parent, _brood(parent, variation, rng), (parent,), variation)


def step(state: EvolutionState, selected: int, rng: random.Random) -> EvolutionState:
    """Promote mutant `selected` to parent and breed the next generation."""
    if not 0 <= selected < len(state.mutants):
        raise IndexError(f"No mutant {selected}; choose 0..{len(state.mutants) - 1}")
    parent = state.mutants[selected]
    return replace(
        state,
        parent=parent,
        mutants=_brood(parent, state.variation, rng),
        lineage=state.lineage + (parent,),
    )


def restart(rng: random.Random, preset: Optional[int] = None,
            variation: float = 0.7) -> EvolutionState:
    """Start over from the default parent or one of the preset shapes."""
    parent = DEFAULT_PARENT if preset is None else PRESET_SHAPES[preset]
    return start(rng, parent, variation)
