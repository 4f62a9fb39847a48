"""
Common modules for all fractal generation options.

Depth Model:
- depth 0 emits nothing
- each generator enforces an explicit max_depth (reject, never clamp)
- one base mesh is registered per scene and shared by every instance
"""

from .config import Config, FractalKind, SceneMetadata
from .transform import Transform
from .mesh_ops import BaseMesh, build_tetrahedron, build_cube, compute_mesh_stats
from .materials import Material, uv_debug_texture
from .registry import AssetRegistry, MeshHandle, MaterialHandle
from .fractal import FractalGenerator, FractalParameterError, GenerationRequest
from .io import SceneSink, Instance, save_scene, load_scene_metadata, instances_to_frame
from .driver import FractalDriver, DriverState, Placeholder, create_placeholder
from .scene import FractalScene, build_fractal_scene

__all__ = [
    'Config', 'FractalKind', 'SceneMetadata',
    'Transform',
    'BaseMesh', 'build_tetrahedron', 'build_cube', 'compute_mesh_stats',
    'Material', 'uv_debug_texture',
    'AssetRegistry', 'MeshHandle', 'MaterialHandle',
    'FractalGenerator', 'FractalParameterError', 'GenerationRequest',
    'SceneSink', 'Instance', 'save_scene', 'load_scene_metadata', 'instances_to_frame',
    'FractalDriver', 'DriverState', 'Placeholder', 'create_placeholder',
    'FractalScene', 'build_fractal_scene',
]
