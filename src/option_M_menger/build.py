"""
Option M: Menger Grid

3x3x3 grid subtraction. Of the 27 cells around a node, the volume center and
the six face centers are dropped; the remaining 20 each get a cube.

Algorithm:
1. depth == 0 -> nothing
2. For (i, j, k) in {0,1,2}^3, row-major:
   - skip if at least two of i, j, k equal 1
   - child = position + (index - 1) * scale
   - emit child at the same scale
   - if depth > 1, recurse into the child with depth - 1

The scale is not reduced between levels: deeper recursion extends the
structure outward with same-size cubes instead of refining it.

Acceptance criteria:
- exactly 20 placements per non-terminal call
- N(depth) = 20 + 20 * N(depth - 1), N(0) = 0
"""

import numpy as np
from itertools import product
from pathlib import Path
from typing import List, Tuple
import logging

logger = logging.getLogger(__name__)

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from common.config import Config
from common.fractal import FractalGenerator
from common.mesh_ops import build_cube
from common.scene import FractalScene, build_fractal_scene
from common.transform import Transform


MENGER_SCALE_FACTOR = 1.0
MENGER_MAX_DEPTH = 4


def is_removed_cell(i: int, j: int, k: int) -> bool:
    """Volume center or face center: at least two indices are 1."""
    return (i == 1 and j == 1) or (i == 1 and k == 1) or (j == 1 and k == 1)


def menger_survivor_cells() -> List[Tuple[int, int, int]]:
    """The 20 surviving (i, j, k) cells in row-major order."""
    return [cell for cell in product(range(3), repeat=3) if not is_removed_cell(*cell)]


MENGER_CELLS = menger_survivor_cells()
MENGER_OFFSETS = np.array(MENGER_CELLS, dtype=float) - 1.0


def menger_node_count(depth: int) -> int:
    """Total placements for a depth: 20 * (20**depth - 1) / 19."""
    return 20 * (20 ** depth - 1) // 19


class MengerGenerator(FractalGenerator):
    """Menger grid placements (scale kept across levels)."""

    name = "menger"
    scale_factor = MENGER_SCALE_FACTOR

    def __init__(self, max_depth: int = MENGER_MAX_DEPTH):
        super().__init__(max_depth)

    def _expand(self, position: np.ndarray, scale: float, depth: int, out: List[Transform]) -> None:
        if depth == 0:
            return

        child_scale = scale * self.scale_factor

        for offset in MENGER_OFFSETS:
            child = position + offset * scale
            out.append(Transform(translation=child, scale=child_scale))
            if depth > 1:
                self._expand(child, child_scale, depth - 1, out)

    @staticmethod
    def node_count(depth: int) -> int:
        return menger_node_count(depth)


def build_menger(config: Config) -> FractalScene:
    """
    Build a Menger scene: unit cube base mesh, one driver tick.

    Args:
        config: Configuration (depth, scale, origin, placeholders)

    Returns:
        FractalScene with registry, sink and metadata
    """
    generator = MengerGenerator(max_depth=config.menger_max_depth)
    scene = build_fractal_scene(generator, build_cube(), config)

    expected = generator.node_count(config.depth) * scene.metadata.n_placeholders
    if scene.metadata.n_instances != expected:
        logger.warning(f"Expected {expected} instances, got {scene.metadata.n_instances}")

    return scene
