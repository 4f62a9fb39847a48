"""Option S: Sierpinski Tetrahedron - recursive corner subdivision at half scale per level."""

from .build import SierpinskiGenerator, build_sierpinski, sierpinski_node_count, SIERPINSKI_OFFSETS

__all__ = ["SierpinskiGenerator", "build_sierpinski", "sierpinski_node_count", "SIERPINSKI_OFFSETS"]
