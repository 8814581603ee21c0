"""Plain PGM (``P2``) images backed by a quadtree.

The format is described at https://en.wikipedia.org/wiki/Netpbm: a magic
number, the width and the height, the maximal intensity, then the
intensities in row-major order. Lines starting with ``#`` are comments.
"""

from pathlib import Path

import numpy as np

from .quadtree import QuadTree, check_grid, is_power_of_two

MAGIC = "P2"


def _tokens(text):
    for line in text.splitlines():
        if line.lstrip().startswith("#"):
            continue
        yield from line.split()


def parse_pgm(text):
    """Parse the content of a plain PGM file.

    Parameters
    ----------
    text : str
        Content of the file.

    Returns
    -------
    grid : np.array
        Square matrix of intensities.

    max_value : int
        Maximal intensity declared in the header.

    """

    tokens = list(_tokens(text))

    if len(tokens) < 4:
        raise ValueError("Truncated PGM header.")

    magic, width, height, max_value = tokens[:4]
    if magic != MAGIC:
        raise ValueError(f"PGM magic number must be {MAGIC}, but {magic} given.")

    try:
        width, height, max_value = int(width), int(height), int(max_value)
        values = np.array([int(token) for token in tokens[4:]], dtype=np.int64)
    except ValueError:
        raise ValueError("PGM header and intensities must be integers.") from None

    if width != height or not is_power_of_two(width):
        raise ValueError(
            f"PGM image must be a square with a power of two side, but {width}x{height} given."
        )

    if max_value < 0:
        raise ValueError(f"Maximal intensity must be non-negative, but {max_value} given.")

    if values.size != width * height:
        raise ValueError(
            f"PGM image {width}x{height} needs {width * height} intensities, but {values.size} given."
        )

    grid = check_grid(values.reshape(height, width), max_value=max_value)
    return grid, max_value


def read_pgm(path):
    """Read a plain PGM file. See `parse_pgm`."""

    return parse_pgm(Path(path).read_text())


def format_pgm(grid, max_value):
    grid = np.asarray(grid)
    lines = [MAGIC, f"{grid.shape[1]} {grid.shape[0]}", str(max_value)]
    lines.extend(" ".join(str(v) for v in row) for row in grid)
    return "\n".join(lines) + "\n"


def write_pgm(path, grid, max_value, overwrite=False):
    """Write a grid as a plain PGM file.

    Parameters
    ----------
    path : str or Path
        Destination file.

    grid : array_like
        Square matrix of intensities.

    max_value : int
        Maximal intensity written in the header.

    overwrite : bool, optional (default=False)
        Replace the file if it exists.

    Returns
    -------
    path : Path
        Written file.

    """

    path = Path(path)
    if path.exists() and not overwrite:
        raise FileExistsError(f"File {path} already exists.")

    path.write_text(format_pgm(grid, max_value))
    return path


class PGMImage:
    """Grayscale image stored as a quadtree.

    Parameters
    ----------
    grid : array_like
        Square matrix of intensities, side must be a power of two.

    max_value : int, optional (default=None)
        Maximal intensity, the maximum of the grid if None.

    Attributes
    ----------
    max_value : int
        Maximal intensity of the image.

    side : int
        Width and height of the image.

    tree : QuadTree
        Intensities of the image.

    n_nodes : int
        Current number of nodes in the tree.

    n_nodes_initial : int
        Number of nodes right after construction.

    """

    def __init__(self, grid, max_value=None):
        grid = check_grid(grid, max_value=max_value)

        if max_value is None:
            max_value = int(grid.max()) if grid.size else 0

        self.max_value = max_value
        self.side = grid.shape[0]
        self.tree, self.n_nodes = QuadTree.build(grid)
        self.n_nodes_initial = self.n_nodes

    @classmethod
    def from_file(cls, path):
        grid, max_value = read_pgm(path)
        return cls(grid, max_value=max_value)

    def compress_lambda(self):
        """Compress one level of the tree.

        Returns
        -------
        n_nodes : int
            Number of nodes after compression.

        """

        self.n_nodes += self.tree.compress_lambda()
        return self.n_nodes

    def compress_rho(self, rho):
        """Compress the tree until rho percent of its nodes remain.

        Parameters
        ----------
        rho : int
            Percentage of nodes to keep, in 0..100.

        Returns
        -------
        n_nodes : int
            Number of nodes after compression.

        """

        self.n_nodes += self.tree.compress_rho(rho, self.n_nodes)
        return self.n_nodes

    def to_grid(self):
        return self.tree.to_grid(self.side)

    def dump(self):
        return str(self.tree)

    def save(self, path, overwrite=False):
        return write_pgm(path, self.to_grid(), self.max_value, overwrite=overwrite)

    def __str__(self):
        return f"max_value: {self.max_value}\nside: {self.side}\ntree: {self.tree}"
