"""
Material descriptions and the UV debug texture.
"""

from dataclasses import dataclass
from typing import Optional, Tuple
import numpy as np

from PIL import Image
from trimesh.visual.material import PBRMaterial


# 8 RGBA pixels
DEBUG_PALETTE = np.array([
    255, 102, 159, 255, 255, 159, 102, 255, 236, 255, 102, 255, 121, 255, 102, 255, 102, 255,
    198, 255, 102, 198, 255, 255, 121, 102, 255, 255, 236, 102, 255, 255,
], dtype=np.uint8)


def uv_debug_texture(size: int = 8) -> np.ndarray:
    """
    Colorful test pattern for checking UV layout.

    Each row is the palette shifted one pixel to the right relative to the
    row above it.

    Args:
        size: Texture width and height in pixels (palette repeats if larger than 8)

    Returns:
        (size, size, 4) uint8 RGBA array
    """
    if size <= 0:
        raise ValueError(f"Texture size must be positive, got {size}")

    pixels = DEBUG_PALETTE.reshape(-1, 4)
    row = np.resize(pixels, (size, 4))
    texture = np.empty((size, size, 4), dtype=np.uint8)
    for y in range(size):
        texture[y] = row
        row = np.roll(row, 1, axis=0)
    return texture


@dataclass
class Material:
    """
    Surface description registered once and shared by instances.

    base_color: RGBA in 0-1 range
    texture: optional (H, W, 4) uint8 base color texture
    """
    name: str
    base_color: Tuple[float, float, float, float] = (0.8, 0.7, 0.6, 1.0)
    texture: Optional[np.ndarray] = None
    metallic: float = 0.1
    roughness: float = 0.8

    def __post_init__(self):
        if len(self.base_color) != 4:
            raise ValueError(f"base_color must be RGBA, got {self.base_color}")
        if self.texture is not None:
            self.texture = np.asarray(self.texture, dtype=np.uint8)
            if self.texture.ndim != 3 or self.texture.shape[2] != 4:
                raise ValueError(f"Texture must be HxWx4, got {self.texture.shape}")

    @classmethod
    def debug(cls, size: int = 8) -> "Material":
        """White material carrying the UV debug texture."""
        return cls(name="uv_debug", base_color=(1.0, 1.0, 1.0, 1.0), texture=uv_debug_texture(size))

    def to_trimesh(self) -> PBRMaterial:
        base_texture = Image.fromarray(self.texture) if self.texture is not None else None
        return PBRMaterial(
            name=self.name,
            baseColorFactor=[float(c) for c in self.base_color],
            baseColorTexture=base_texture,
            metallicFactor=self.metallic,
            roughnessFactor=self.roughness,
            alphaMode="BLEND" if self.base_color[3] < 1.0 else "OPAQUE",
            doubleSided=True
        )
