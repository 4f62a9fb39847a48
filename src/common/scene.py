"""
Scene assembly shared by the fractal options.

Startup: register the base mesh and material, place the placeholders.
First update tick: let the driver expand them into the sink.
"""

from dataclasses import dataclass
from typing import List
import logging

import numpy as np

from .config import Config, SceneMetadata
from .driver import FractalDriver, Placeholder, create_placeholder
from .fractal import FractalGenerator
from .io import SceneSink
from .materials import Material
from .mesh_ops import BaseMesh
from .registry import AssetRegistry

logger = logging.getLogger(__name__)

# Distance between neighbouring placeholders along X
PLACEHOLDER_SPACING = 4.0


@dataclass
class FractalScene:
    """Everything produced by one generation pass."""
    registry: AssetRegistry
    sink: SceneSink
    placeholders: List[Placeholder]
    metadata: SceneMetadata


def make_material(config: Config) -> Material:
    if config.use_debug_texture:
        return Material.debug()
    return Material(name="fractal", base_color=tuple(config.base_color))


def build_fractal_scene(
    generator: FractalGenerator,
    base_mesh: BaseMesh,
    config: Config
) -> FractalScene:
    """
    Run startup plus one driver tick for a generator.

    Args:
        generator: Sierpinski or Menger generator
        base_mesh: Unit mesh instanced at every placement
        config: Generation settings

    Returns:
        FractalScene with all emitted instances
    """
    registry = AssetRegistry()
    mesh_handle = registry.add_mesh(base_mesh)
    material_handle = registry.add_material(make_material(config))

    placeholders = [
        create_placeholder(
            position=np.array([i * PLACEHOLDER_SPACING, 0.0, 0.0]),
            scale=config.initial_scale,
            mesh=mesh_handle,
            material=material_handle
        )
        for i in range(config.n_placeholders)
    ]

    sink = SceneSink()
    driver = FractalDriver(
        generator=generator,
        sink=sink,
        depth=config.depth,
        initial_scale=config.initial_scale,
        origin=config.origin,
        anchor_to_placeholder=config.anchor_to_placeholder
    )
    if driver.needs_update:
        driver.update(placeholders)

    metadata = SceneMetadata(
        fractal=generator.name,
        depth=config.depth,
        initial_scale=config.initial_scale,
        n_instances=len(sink),
        n_placeholders=len(placeholders),
        base_mesh_vertices=base_mesh.n_vertices,
        base_mesh_triangles=base_mesh.n_triangles,
        origin=tuple(float(v) for v in config.origin),
        generation_params={
            "max_depth": generator.max_depth,
            "scale_factor": generator.scale_factor,
            "anchor_to_placeholder": config.anchor_to_placeholder,
            "material": material_handle.name
        }
    )
    logger.info(f"{generator.name}: {metadata.n_instances} instances from {metadata.n_placeholders} placeholders")

    return FractalScene(registry=registry, sink=sink, placeholders=placeholders, metadata=metadata)
