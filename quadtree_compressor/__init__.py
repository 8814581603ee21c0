from .avl import AVL
from .converter import Anchor, convert_to_pgm, image_to_grid
from .pgm import PGMImage, read_pgm, write_pgm
from .quadtree import QuadTree
from .twigs import TwigList, compress_rho

__all__ = [
    "AVL",
    "Anchor",
    "PGMImage",
    "QuadTree",
    "TwigList",
    "compress_rho",
    "convert_to_pgm",
    "image_to_grid",
    "read_pgm",
    "write_pgm",
]
