"""
Mesh and material registry.

Registering an asset returns an opaque handle. Generators and the driver only
pass handles around; the registry and the scene sink are the only places that
look up what a handle refers to.
"""

from dataclasses import dataclass
from typing import Dict
import logging

from .mesh_ops import BaseMesh
from .materials import Material

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MeshHandle:
    id: int
    name: str


@dataclass(frozen=True)
class MaterialHandle:
    id: int
    name: str


class AssetRegistry:
    """
    Owns registered meshes and materials for the lifetime of a scene.

    Meshes are shared read-only once registered.
    """

    def __init__(self):
        self._meshes: Dict[MeshHandle, BaseMesh] = {}
        self._materials: Dict[MaterialHandle, Material] = {}
        self._next_id = 0

    def _allocate_id(self) -> int:
        handle_id = self._next_id
        self._next_id += 1
        return handle_id

    def add_mesh(self, mesh: BaseMesh) -> MeshHandle:
        mesh.vertices.setflags(write=False)
        mesh.faces.setflags(write=False)
        handle = MeshHandle(self._allocate_id(), mesh.name)
        self._meshes[handle] = mesh
        logger.debug(f"Registered mesh {handle.name} ({mesh.n_vertices} verts, {mesh.n_triangles} tris)")
        return handle

    def add_material(self, material: Material) -> MaterialHandle:
        handle = MaterialHandle(self._allocate_id(), material.name)
        self._materials[handle] = material
        logger.debug(f"Registered material {handle.name}")
        return handle

    def mesh(self, handle: MeshHandle) -> BaseMesh:
        try:
            return self._meshes[handle]
        except KeyError:
            raise KeyError(f"Unknown mesh handle: {handle}") from None

    def material(self, handle: MaterialHandle) -> Material:
        try:
            return self._materials[handle]
        except KeyError:
            raise KeyError(f"Unknown material handle: {handle}") from None

