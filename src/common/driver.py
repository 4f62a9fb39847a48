"""
One-shot fractal expansion driver.

Placeholders are the marker instances present in a scene before generation.
On the first update tick after a reset, the driver expands each placeholder
into its fractal and emits the placements through a SceneSink. Afterwards it
stays idle until reset() is called.
"""

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Sequence, Union

import numpy as np
from scipy.spatial.transform import Rotation

from .fractal import FractalGenerator, GenerationRequest
from .io import SceneSink
from .registry import MeshHandle, MaterialHandle
from .transform import Transform

logger = logging.getLogger(__name__)


DEFAULT_DEPTH = 4


class DriverState(Enum):
    PENDING = "pending"
    DONE = "done"


@dataclass(frozen=True)
class Placeholder:
    """Marker instance that gets expanded into a fractal."""
    mesh: MeshHandle
    material: MaterialHandle
    base_transform: Transform = field(default_factory=Transform.identity)

    __hash__ = None


def create_placeholder(
    position: Union[Sequence[float], np.ndarray],
    scale: float,
    mesh: MeshHandle,
    material: MaterialHandle
) -> Placeholder:
    """
    Create a placeholder flipped half a turn about X.

    Args:
        position: World position
        scale: Uniform scale
        mesh: Mesh each generated instance will use
        material: Material each generated instance will use
    """
    # scipy gives [x, y, z, w]
    x, y, z, w = Rotation.from_euler("x", -np.pi).as_quat()
    transform = Transform.from_translation_scale(position, scale, rotation=[w, x, y, z])
    return Placeholder(mesh=mesh, material=material, base_transform=transform)


class FractalDriver:
    """
    Two-state machine (PENDING -> DONE) around a generator and a sink.

    Every placeholder is seeded at (origin, initial_scale, depth) unless
    anchor_to_placeholder is set, in which case the placeholder's own
    translation and uniform scale are used as the seed.
    """

    def __init__(
        self,
        generator: FractalGenerator,
        sink: SceneSink,
        depth: int = DEFAULT_DEPTH,
        initial_scale: float = 1.0,
        origin: Union[Sequence[float], np.ndarray] = (0.0, 0.0, 0.0),
        anchor_to_placeholder: bool = False
    ):
        self.generator = generator
        self.sink = sink
        self.depth = depth
        self.initial_scale = initial_scale
        self.origin = np.asarray(origin, dtype=float)
        self.anchor_to_placeholder = anchor_to_placeholder

        self._state = DriverState.PENDING
        self._lock = threading.Lock()

    @property
    def state(self) -> DriverState:
        return self._state

    @property
    def needs_update(self) -> bool:
        return self._state is DriverState.PENDING

    def reset(self) -> None:
        """Request a regeneration on the next update tick."""
        with self._lock:
            self._state = DriverState.PENDING
        logger.debug("Driver reset to PENDING")

    def _request_for(self, placeholder: Placeholder) -> GenerationRequest:
        origin, scale = self.origin, self.initial_scale
        if self.anchor_to_placeholder:
            origin = placeholder.base_transform.translation
            uniform = placeholder.base_transform.uniform_scale
            if uniform is None:
                logger.warning("Placeholder has non-uniform scale, using its X component")
                uniform = float(placeholder.base_transform.scale[0])
            scale = uniform
        return GenerationRequest(
            origin=np.array(origin, dtype=float),
            initial_scale=scale,
            max_depth=self.depth,
            mesh=placeholder.mesh,
            material=placeholder.material
        )

    def run(self, placeholders: Iterable[Placeholder]) -> int:
        """
        Expand every placeholder and emit the generated instances.

        All placeholders are generated before anything is emitted, so a
        rejected placeholder leaves the sink untouched. Does not touch the
        PENDING/DONE state.

        Returns:
            Number of emitted instances
        """
        batches = []
        for placeholder in placeholders:
            request = self._request_for(placeholder)
            batches.append((request, self.generator.generate_request(request)))

        emitted = 0
        for request, transforms in batches:
            for transform in transforms:
                self.sink.emit(request.mesh, request.material, transform)
            emitted += len(transforms)

        logger.info(f"Expanded {len(batches)} placeholders into {emitted} instances ({self.generator.name})")
        return emitted

    def update(self, placeholders: Iterable[Placeholder]) -> int:
        """
        External tick: generate once if a regeneration is pending.

        The pending flag is checked and cleared under a lock, so concurrent
        ticks cannot both run. If generation raises, nothing is emitted, the
        driver goes back to PENDING and the exception propagates.

        Returns:
            Number of emitted instances (0 when nothing was pending)
        """
        with self._lock:
            if self._state is not DriverState.PENDING:
                return 0
            self._state = DriverState.DONE

        try:
            emitted = self.run(placeholders)
        except Exception:
            with self._lock:
                self._state = DriverState.PENDING
            raise

        logger.info("Driver state: PENDING -> DONE")
        return emitted
