"""
Base mesh construction and mesh statistics.

Every fractal instance references one shared base mesh. The builders here are
pure: repeated calls return identical arrays.
"""

import numpy as np
from dataclasses import dataclass
from typing import Dict, Any, Optional
import logging

import trimesh

logger = logging.getLogger(__name__)


SQRT3 = np.sqrt(3.0)
SQRT6 = np.sqrt(6.0)

# Regular tetrahedron, edge length 1, base on the XZ plane, apex along +Y
TETRAHEDRON_VERTICES = np.array([
    [0.0, 0.0, 0.0],
    [1.0, 0.0, 0.0],
    [0.5, 0.0, SQRT3 / 2.0],
    [0.5, SQRT6 / 3.0, SQRT3 / 6.0],
])

# Counter-clockwise seen from outside
TETRAHEDRON_FACES = np.array([
    [0, 1, 2],
    [0, 2, 3],
    [0, 3, 1],
    [1, 3, 2],
])


@dataclass
class BaseMesh:
    """
    Triangle mesh shared by all instances of a fractal.

    vertices: (N, 3) float positions
    faces: (M, 3) vertex indices, every index < N
    uvs: optional (N, 2) texture coordinates
    """
    name: str
    vertices: np.ndarray
    faces: np.ndarray
    uvs: Optional[np.ndarray] = None

    def __post_init__(self):
        self.vertices = np.asarray(self.vertices, dtype=np.float64)
        self.faces = np.asarray(self.faces, dtype=np.uint32)
        self._validate()

    def _validate(self):
        """Ensure that the vertex/index arrays have correct shapes and bounds."""
        if self.vertices.ndim != 2 or self.vertices.shape[1] != 3:
            raise ValueError(f"Vertices must be a Nx3 array, got {self.vertices.shape}")
        if self.faces.ndim != 2 or self.faces.shape[1] != 3:
            raise ValueError(f"Faces must be a Mx3 array, got {self.faces.shape}")
        if self.faces.size and int(self.faces.max()) >= len(self.vertices):
            raise ValueError(
                f"Face index {int(self.faces.max())} out of range for {len(self.vertices)} vertices"
            )
        if self.uvs is not None:
            self.uvs = np.asarray(self.uvs, dtype=np.float64)
            if self.uvs.shape != (len(self.vertices), 2):
                raise ValueError(f"UVs must be a Nx2 array, got {self.uvs.shape}")

    @property
    def n_vertices(self) -> int:
        return len(self.vertices)

    @property
    def n_triangles(self) -> int:
        return len(self.faces)

    @property
    def indices(self) -> np.ndarray:
        """Flat triangle index list (3 entries per triangle)."""
        return self.faces.reshape(-1)

    def to_trimesh(self) -> trimesh.Trimesh:
        """
        Convert to trimesh without merging or reordering vertices.
        """
        return trimesh.Trimesh(
            vertices=self.vertices.copy(),
            faces=self.faces.astype(np.int64),
            process=False
        )


def planar_uvs(vertices: np.ndarray) -> np.ndarray:
    """
    Project vertices onto the XZ plane and normalize to [0, 1].

    Args:
        vertices: Nx3 vertex positions

    Returns:
        Nx2 texture coordinates
    """
    xz = np.asarray(vertices, dtype=np.float64)[:, [0, 2]]
    mins = xz.min(axis=0)
    extent = xz.max(axis=0) - mins
    extent[extent < 1e-12] = 1.0
    return (xz - mins) / extent


def build_tetrahedron() -> BaseMesh:
    """
    Build the regular tetrahedron used by the Sierpinski fractal.

    All four vertices are kept (4 vertices, 4 triangles, 12 indices) with
    outward-facing winding.

    Returns:
        BaseMesh named "tetrahedron"
    """
    vertices = TETRAHEDRON_VERTICES.copy()
    mesh = BaseMesh(
        name="tetrahedron",
        vertices=vertices,
        faces=TETRAHEDRON_FACES.copy(),
        uvs=planar_uvs(vertices)
    )
    logger.debug(f"Built tetrahedron: {mesh.n_vertices} vertices, {mesh.n_triangles} triangles")
    return mesh


def build_cube(size: float = 1.0) -> BaseMesh:
    """
    Build an axis-aligned cube centered at the origin.

    Args:
        size: Edge length

    Returns:
        BaseMesh named "cube"
    """
    box = trimesh.creation.box(extents=(size, size, size))
    vertices = np.asarray(box.vertices, dtype=np.float64)
    mesh = BaseMesh(
        name="cube",
        vertices=vertices,
        faces=np.asarray(box.faces),
        uvs=planar_uvs(vertices)
    )
    logger.debug(f"Built cube: {mesh.n_vertices} vertices, {mesh.n_triangles} triangles")
    return mesh


def compute_mesh_stats(mesh: BaseMesh) -> Dict[str, Any]:
    """
    Compute mesh statistics.

    Args:
        mesh: Base mesh

    Returns:
        Dictionary of mesh statistics
    """
    tm = mesh.to_trimesh()
    bounds = tm.bounds
    extents = tm.extents

    return {
        "name": mesh.name,
        "n_vertices": mesh.n_vertices,
        "n_faces": mesh.n_triangles,
        "bounds": {
            "min": bounds[0].tolist(),
            "max": bounds[1].tolist()
        },
        "extents": extents.tolist(),
        "max_extent": float(max(extents)),
        "volume": float(tm.volume) if tm.is_watertight else None,
        "surface_area": float(tm.area),
        "is_watertight": tm.is_watertight,
        "is_winding_consistent": tm.is_winding_consistent,
        "euler_number": tm.euler_number
    }
