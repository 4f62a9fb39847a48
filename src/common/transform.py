"""
Instance placement (translation, scale, rotation).

Quaternions are stored as [w, x, y, z], the convention used by
trimesh.transformations.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional, Sequence, Union
import numpy as np
import trimesh.transformations as tf


IDENTITY_QUATERNION = np.array([1.0, 0.0, 0.0, 0.0])


def _frozen(values, size: int, name: str) -> np.ndarray:
    arr = np.array(values, dtype=float).reshape(-1)
    if arr.shape != (size,):
        raise ValueError(f"{name} must have {size} components, got shape {arr.shape}")
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class Transform:
    """
    Placement of one copy of a base mesh.

    Arrays are read-only once constructed; a Transform never changes after
    a generator emits it.
    """
    translation: np.ndarray
    scale: np.ndarray
    rotation: np.ndarray = field(default_factory=lambda: IDENTITY_QUATERNION.copy())

    def __post_init__(self):
        scale = np.asarray(self.scale, dtype=float)
        if scale.ndim == 0:
            scale = np.full(3, float(scale))
        object.__setattr__(self, "translation", _frozen(self.translation, 3, "translation"))
        object.__setattr__(self, "scale", _frozen(scale, 3, "scale"))
        object.__setattr__(self, "rotation", _frozen(self.rotation, 4, "rotation"))

    @classmethod
    def identity(cls) -> "Transform":
        return cls(translation=np.zeros(3), scale=1.0)

    @classmethod
    def from_translation_scale(
        cls,
        translation: Sequence[float],
        scale: Union[float, Sequence[float]],
        rotation: Optional[Sequence[float]] = None
    ) -> "Transform":
        if rotation is None:
            rotation = IDENTITY_QUATERNION
        return cls(translation=translation, scale=scale, rotation=rotation)

    @property
    def uniform_scale(self) -> Optional[float]:
        """Scalar scale if all three components match, else None."""
        if np.all(self.scale == self.scale[0]):
            return float(self.scale[0])
        return None

    def to_matrix(self) -> np.ndarray:
        """4x4 homogeneous matrix: translate @ rotate @ scale."""
        translate = tf.translation_matrix(self.translation)
        rotate = tf.quaternion_matrix(self.rotation)
        scale = np.diag(np.append(self.scale, 1.0))
        return translate @ rotate @ scale

    def to_dict(self) -> Dict[str, Any]:
        return {
            "translation": self.translation.tolist(),
            "scale": self.scale.tolist(),
            "rotation": self.rotation.tolist()
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, Transform):
            return NotImplemented
        return (
            np.array_equal(self.translation, other.translation)
            and np.array_equal(self.scale, other.scale)
            and np.array_equal(self.rotation, other.rotation)
        )
