"""
Configuration and constants for fractal generation.

Depth Model:
- depth 0 is the terminal case and emits nothing
- every generator carries an explicit max_depth; deeper requests are rejected
- Sierpinski halves its scale per level, Menger keeps it
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Tuple
import json
from pathlib import Path


class FractalKind(Enum):
    """
    Fractal families that can be generated.

    SIERPINSKI: recursive corner subdivision of a tetrahedron
        - 4 children per node, scale halves each level
        - uses the built-in tetrahedron as its unit mesh

    MENGER (default): 3x3x3 grid subtraction
        - 20 survivors per node, scale unchanged each level
        - uses a unit cube as its unit mesh
    """
    SIERPINSKI = "sierpinski"
    MENGER = "menger"

    @property
    def letter(self) -> str:
        return "S" if self is FractalKind.SIERPINSKI else "M"


@dataclass
class SceneMetadata:
    """
    Metadata written next to every exported fractal scene.
    """
    fractal: str
    depth: int
    initial_scale: float
    n_instances: int
    n_placeholders: int
    base_mesh_vertices: int
    base_mesh_triangles: int
    origin: Optional[Tuple[float, float, float]] = None
    generation_params: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fractal": self.fractal,
            "depth": self.depth,
            "initial_scale": self.initial_scale,
            "n_instances": self.n_instances,
            "n_placeholders": self.n_placeholders,
            "base_mesh_vertices": self.base_mesh_vertices,
            "base_mesh_triangles": self.base_mesh_triangles,
            "origin": list(self.origin) if self.origin is not None else None,
            "generation_params": self.generation_params
        }

    def save(self, path: Path) -> None:
        """Save metadata to JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SceneMetadata":
        data = dict(data)
        if data.get("origin") is not None:
            data["origin"] = tuple(data["origin"])
        return cls(**data)


@dataclass
class Config:
    """
    Global configuration for fractal generation.

    The driver seeds every placeholder at (origin, initial_scale, depth).
    Depth limits are enforced by the generators, never clamped.
    """

    fractal: FractalKind = FractalKind.MENGER

    # Seed for every placeholder
    depth: int = 4
    initial_scale: float = 1.0
    origin: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    # Hard ceilings (Menger does not shrink, so its output grows 20x per level)
    sierpinski_max_depth: int = 7
    menger_max_depth: int = 4

    # Scene setup
    n_placeholders: int = 1
    anchor_to_placeholder: bool = False
    base_color: Tuple[float, float, float, float] = (0.8, 0.7, 0.6, 1.0)
    use_debug_texture: bool = False

    # Export
    export_csv: bool = True
    output_dir: Path = field(default_factory=lambda: Path("outputs"))

    def max_depth_for(self, kind: FractalKind) -> int:
        """Depth ceiling for a fractal family."""
        if kind is FractalKind.SIERPINSKI:
            return self.sierpinski_max_depth
        return self.menger_max_depth

    def get_output_path(self, kind: FractalKind) -> Path:
        """Get scene output path for a fractal family."""
        return self.output_dir / f"option_{kind.letter}_{kind.value}" / "scenes"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fractal": self.fractal.value,
            "depth": self.depth,
            "initial_scale": self.initial_scale,
            "origin": list(self.origin),
            "sierpinski_max_depth": self.sierpinski_max_depth,
            "menger_max_depth": self.menger_max_depth,
            "n_placeholders": self.n_placeholders,
            "anchor_to_placeholder": self.anchor_to_placeholder,
            "base_color": list(self.base_color),
            "use_debug_texture": self.use_debug_texture,
            "export_csv": self.export_csv,
            "output_dir": str(self.output_dir)
        }

    @classmethod
    def from_json(cls, path: Path) -> "Config":
        """Load config from JSON file."""
        with open(path) as f:
            data = json.load(f)
        data["fractal"] = FractalKind(data.get("fractal", "menger"))
        data["output_dir"] = Path(data.get("output_dir", "outputs"))
        if "origin" in data:
            data["origin"] = tuple(data["origin"])
        if "base_color" in data:
            data["base_color"] = tuple(data["base_color"])
        return cls(**data)

    def save(self, path: Path) -> None:
        """Save config to JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


# Global default config
DEFAULT_CONFIG = Config()
