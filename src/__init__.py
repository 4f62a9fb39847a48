"""
Fractal Sculptures - Instance placement for self-similar fractals.

Two generation options:
- Option S: Sierpinski Tetrahedron (recursive corner subdivision)
- Option M: Menger Grid (recursive 3x3x3 grid subtraction)

Usage:
    python -m src.run_all --modules S M --depth 3
"""

__version__ = "0.1.0"
