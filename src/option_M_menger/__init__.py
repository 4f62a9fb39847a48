"""Option M: Menger Grid - 20 of 27 cells per level, same-size cubes."""

from .build import MengerGenerator, build_menger, menger_node_count, menger_survivor_cells

__all__ = ["MengerGenerator", "build_menger", "menger_node_count", "menger_survivor_cells"]
