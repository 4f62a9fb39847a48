"""
Instance emission and scene I/O.

SceneSink collects (mesh, material, transform) triples emitted by the driver.
It can turn them into a trimesh.Scene, where every instance is a graph node
that references one shared geometry per mesh/material pair. Scenes are saved
as GLB with a JSON metadata sidecar.
"""

import json
import logging
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional

import numpy as np
import pandas as pd
import trimesh
from trimesh.visual import TextureVisuals

from .config import SceneMetadata
from .registry import AssetRegistry, MeshHandle, MaterialHandle
from .transform import Transform

logger = logging.getLogger(__name__)


INSTANCE_COLUMNS = [
    "mesh", "material",
    "tx", "ty", "tz",
    "sx", "sy", "sz",
    "qw", "qx", "qy", "qz",
]


@dataclass(frozen=True)
class Instance:
    """One renderable copy of a registered mesh."""
    mesh: MeshHandle
    material: MaterialHandle
    transform: Transform

    __hash__ = None


class SceneSink:
    """
    Accepts emitted instances in order.

    The sink never reads back into the generators; it only accumulates.
    """

    def __init__(self):
        self._instances: List[Instance] = []

    def emit(self, mesh: MeshHandle, material: MaterialHandle, transform: Transform) -> None:
        self._instances.append(Instance(mesh, material, transform))

    def __len__(self) -> int:
        return len(self._instances)

    def __iter__(self) -> Iterator[Instance]:
        return iter(self._instances)

    def __getitem__(self, index: int) -> Instance:
        return self._instances[index]

    def clear(self) -> None:
        self._instances.clear()

    def counts_by_mesh(self) -> Dict[MeshHandle, int]:
        """Number of instances per mesh handle, in first-emitted order."""
        return dict(Counter(inst.mesh for inst in self._instances))

    def to_trimesh_scene(self, registry: AssetRegistry) -> trimesh.Scene:
        """
        Build a scene graph with one node per instance.

        Args:
            registry: Registry that issued the handles in this sink

        Returns:
            trimesh.Scene sharing one geometry per (mesh, material) pair
        """
        scene = trimesh.Scene()
        geometry_names: Dict[tuple, str] = {}

        for i, inst in enumerate(self._instances):
            node_name = f"instance_{i}"
            matrix = inst.transform.to_matrix()
            key = (inst.mesh, inst.material)

            if key not in geometry_names:
                base = registry.mesh(inst.mesh)
                material = registry.material(inst.material)
                geometry = base.to_trimesh()
                geometry.visual = TextureVisuals(uv=base.uvs, material=material.to_trimesh())
                scene.add_geometry(
                    geometry,
                    node_name=node_name,
                    geom_name=f"{base.name}_{material.name}",
                    transform=matrix
                )
                geometry_names[key] = scene.graph[node_name][1]
            else:
                scene.graph.update(
                    frame_to=node_name,
                    frame_from=scene.graph.base_frame,
                    matrix=matrix,
                    geometry=geometry_names[key]
                )

        logger.info(f"Built scene: {len(self._instances)} instances, {len(scene.geometry)} geometries")
        return scene


def instances_to_frame(sink: SceneSink) -> pd.DataFrame:
    """
    Tabulate emitted instances.

    Returns:
        DataFrame with one row per instance and INSTANCE_COLUMNS columns
    """
    if len(sink) == 0:
        return pd.DataFrame(columns=INSTANCE_COLUMNS)

    numeric = np.array([
        np.concatenate([inst.transform.translation, inst.transform.scale, inst.transform.rotation])
        for inst in sink
    ])
    df = pd.DataFrame(numeric, columns=INSTANCE_COLUMNS[2:])
    df.insert(0, "material", [inst.material.name for inst in sink])
    df.insert(0, "mesh", [inst.mesh.name for inst in sink])
    return df


def save_scene(
    scene: trimesh.Scene,
    path: Path,
    metadata: SceneMetadata
) -> None:
    """
    Save scene to GLB file with metadata sidecar.

    Args:
        scene: Scene from SceneSink.to_trimesh_scene
        path: Output path (should end in .glb)
        metadata: SceneMetadata object (will be saved as .json sidecar)
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    scene.export(str(path))
    logger.info(f"Saved scene: {path} ({metadata.n_instances} instances)")

    meta_path = path.with_suffix('.json')
    metadata.save(meta_path)
    logger.info(f"Saved metadata: {meta_path}")


def save_instances_csv(sink: SceneSink, path: Path) -> None:
    """Write the instance table as CSV."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    instances_to_frame(sink).to_csv(path, index=False)
    logger.info(f"Saved instance table: {path}")


def load_scene_metadata(path: Path) -> Optional[SceneMetadata]:
    """
    Load the metadata sidecar of a saved scene.

    Args:
        path: Path to the scene file (or directly to the .json sidecar)

    Returns:
        SceneMetadata, or None if no sidecar exists
    """
    meta_path = Path(path).with_suffix('.json')
    if not meta_path.exists():
        return None
    with open(meta_path) as f:
        return SceneMetadata.from_dict(json.load(f))
