"""
Shared pieces of the recursive placement generators.

A generator maps (position, scale, depth) to a pre-order list of Transforms.
Arguments are checked once at the public boundary; the recursion itself
assumes valid input.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from numbers import Integral
from typing import List, Sequence, Union
import logging

import numpy as np

from .transform import Transform
from .registry import MeshHandle, MaterialHandle

logger = logging.getLogger(__name__)


class FractalParameterError(ValueError):
    """Generation arguments outside the generator's domain."""


@dataclass(frozen=True)
class GenerationRequest:
    """One generator invocation, created per placeholder per trigger."""
    origin: np.ndarray
    initial_scale: float
    max_depth: int
    mesh: MeshHandle
    material: MaterialHandle

    __hash__ = None


def validate_generation_args(
    position: Union[Sequence[float], np.ndarray],
    scale: float,
    depth: int,
    max_depth: int
) -> np.ndarray:
    """
    Check generator arguments and return the position as a float array.

    Rejects (never clamps) non-integer or negative depth, depth above
    max_depth, non-finite or non-positive scale and non-finite positions.

    Raises:
        FractalParameterError: on any violation (logged before raising)
    """
    def reject(message: str):
        logger.error(f"Rejected generation request: {message}")
        raise FractalParameterError(message)

    if isinstance(depth, bool) or not isinstance(depth, Integral):
        reject(f"depth must be an integer, got {depth!r}")
    if depth < 0:
        reject(f"depth must be >= 0, got {depth}")
    if depth > max_depth:
        reject(f"depth {depth} exceeds max_depth {max_depth}")

    try:
        scale = float(scale)
    except (TypeError, ValueError):
        reject(f"scale must be a number, got {scale!r}")
    if not np.isfinite(scale) or scale <= 0:
        reject(f"scale must be finite and > 0, got {scale}")

    try:
        pos = np.asarray(position, dtype=float).reshape(-1)
    except (TypeError, ValueError):
        reject(f"position must be a 3-vector, got {position!r}")
    if pos.shape != (3,):
        reject(f"position must be a 3-vector, got shape {pos.shape}")
    if not np.all(np.isfinite(pos)):
        reject(f"position must be finite, got {pos.tolist()}")

    return pos


class FractalGenerator(ABC):
    """
    Base class for recursive placement generators.

    Subclasses implement _expand, which appends the pre-order placements for
    one node into an output list.
    """

    name: str = "fractal"
    scale_factor: float = 1.0

    def __init__(self, max_depth: int):
        if isinstance(max_depth, bool) or not isinstance(max_depth, Integral) or max_depth < 0:
            raise ValueError(f"max_depth must be a non-negative integer, got {max_depth!r}")
        self.max_depth = int(max_depth)

    def generate(
        self,
        position: Union[Sequence[float], np.ndarray],
        scale: float,
        depth: int
    ) -> List[Transform]:
        """
        Generate every placement below a node.

        Args:
            position: Node position (3-vector)
            scale: Node scale (> 0)
            depth: Remaining recursion levels (0 yields an empty list)

        Returns:
            Transforms in pre-order (node before its subtree)
        """
        pos = validate_generation_args(position, scale, depth, self.max_depth)
        out: List[Transform] = []
        self._expand(pos, float(scale), int(depth), out)
        logger.info(f"{self.name}: depth={depth} scale={float(scale):g} -> {len(out)} placements")
        return out

    def generate_request(self, request: GenerationRequest) -> List[Transform]:
        return self.generate(request.origin, request.initial_scale, request.max_depth)

    @abstractmethod
    def _expand(self, position: np.ndarray, scale: float, depth: int, out: List[Transform]) -> None:
        ...

    @staticmethod
    @abstractmethod
    def node_count(depth: int) -> int:
        """Exact number of placements for a given depth."""
