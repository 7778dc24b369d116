"""
Supershape fitting v1

Combines:
- Superformula radius evaluation with per-axis pose
- Suzuki-Abe style border following on binary rasters
- Simulated Annealing and MAP-Elites fitting
- Hand-driven evolution of Supershapes
"""

from .geometry import (
    Candidate,
    superformula,
    superformula_batch,
    to_cartesian,
    sample_angles,
    render_radii,
    render_points,
    candidate_polygon,
    HIDDEN_SHAPE,
    INITIAL_SHAPE,
)

from .contours import (
    find_contours,
    pick_border,
    border_to_xy,
)

from .objective import (
    PolarTarget,
    CartesianTarget,
    polar_objective,
    cartesian_objective,
    get_objective,
)

from .map_elites import (
    MapElites,
    MapElitesArchive,
    niche_supershapes,
    random_selection,
)

from .fitting import (
    FitConfig,
    NeighborGenerator,
    AnnealingResult,
    simulated_annealing,
    ShapeFitter,
)

from .validate import (
    validate_candidate,
    shape_overlap,
    print_fit_summary,
)

from .evolution import (
    EvolutionState,
    mutant,
    start,
    step,
    restart,
    PRESET_SHAPES,
)

from .io_utils import (
    load_mask,
    create_results_csv,
    get_output_path,
)

__version__ = "1.0.0"
