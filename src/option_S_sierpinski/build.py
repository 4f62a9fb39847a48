"""
Option S: Sierpinski Tetrahedron

Recursive corner subdivision. Every node spawns four half-size children
toward the corners of a tetrahedron.

Algorithm:
1. depth == 0 -> nothing
2. new_scale = scale / 2
3. For each corner offset, in fixed order (front-right, front-left,
   back-middle, top):
   - child = position + offset * new_scale * 2
   - emit child, then recurse into it with depth - 1

Acceptance criteria:
- N(depth) = 4 + 4 * N(depth - 1), N(0) = 0
- scale at relative depth d equals initial_scale / 2**d
- pre-order output, siblings in offset order
"""

import numpy as np
from pathlib import Path
from typing import List
import logging

logger = logging.getLogger(__name__)

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from common.config import Config
from common.fractal import FractalGenerator
from common.mesh_ops import build_tetrahedron
from common.scene import FractalScene, build_fractal_scene
from common.transform import Transform


SIERPINSKI_SCALE_FACTOR = 0.5
SIERPINSKI_MAX_DEPTH = 7

INV_SQRT2 = 1.0 / np.sqrt(2.0)

SIERPINSKI_OFFSETS = np.array([
    [1.0, 0.0, -INV_SQRT2],    # front right
    [-1.0, 0.0, -INV_SQRT2],   # front left
    [0.0, 0.0, INV_SQRT2],     # back middle
    [0.0, np.sqrt(2.0), 0.0],  # top
])


def sierpinski_node_count(depth: int) -> int:
    """Total placements for a depth: 4 * (4**depth - 1) / 3."""
    return 4 * (4 ** depth - 1) // 3


class SierpinskiGenerator(FractalGenerator):
    """Sierpinski tetrahedron placements (scale halves per level)."""

    name = "sierpinski"
    scale_factor = SIERPINSKI_SCALE_FACTOR

    def __init__(self, max_depth: int = SIERPINSKI_MAX_DEPTH):
        super().__init__(max_depth)

    def _expand(self, position: np.ndarray, scale: float, depth: int, out: List[Transform]) -> None:
        if depth == 0:
            return

        new_scale = scale * self.scale_factor

        for offset in SIERPINSKI_OFFSETS:
            child = position + offset * new_scale * 2.0
            out.append(Transform(translation=child, scale=new_scale))
            self._expand(child, new_scale, depth - 1, out)

    @staticmethod
    def node_count(depth: int) -> int:
        return sierpinski_node_count(depth)


def build_sierpinski(config: Config) -> FractalScene:
    """
    Build a Sierpinski scene: tetrahedron base mesh, one driver tick.

    Args:
        config: Configuration (depth, scale, origin, placeholders)

    Returns:
        FractalScene with registry, sink and metadata
    """
    generator = SierpinskiGenerator(max_depth=config.sierpinski_max_depth)
    scene = build_fractal_scene(generator, build_tetrahedron(), config)

    expected = generator.node_count(config.depth) * scene.metadata.n_placeholders
    if scene.metadata.n_instances != expected:
        logger.warning(f"Expected {expected} instances, got {scene.metadata.n_instances}")

    return scene
