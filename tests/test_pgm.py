import numpy as np
import pytest

from quadtree_compressor.pgm import PGMImage, format_pgm, parse_pgm, read_pgm, write_pgm

IMAGE_4X4 = """\
P2
# 4x4 test image
4 4
255
1 2 3 3
4 5 3 3
6 6 7 7
6 6 7 8
"""


def test_parse_pgm():
    grid, max_value = parse_pgm(IMAGE_4X4)

    assert max_value == 255
    assert grid.tolist() == [[1, 2, 3, 3], [4, 5, 3, 3], [6, 6, 7, 7], [6, 6, 7, 8]]


def test_parse_pgm_free_layout():
    text = "P2 2 2\n# comment\n10\n0 1\n2\n3"
    grid, max_value = parse_pgm(text)

    assert max_value == 10
    assert grid.tolist() == [[0, 1], [2, 3]]


def test_parse_pgm_malformed():
    tests = (
        "",
        "P2 2 2",
        "P5 2 2 255 0 0 0 0",
        "P2 2 4 255 0 0 0 0 0 0 0 0",
        "P2 3 3 255 0 0 0 0 0 0 0 0 0",
        "P2 2 2 255 0 0 0",
        "P2 2 2 255 0 0 0 0 0",
        "P2 2 2 255 0 0 0 256",
        "P2 2 2 255 0 0 0 -1",
        "P2 2 2 255 0 0 0 x",
        "P2 two 2 255 0 0 0 0",
    )

    for text in tests:
        with pytest.raises(ValueError):
            parse_pgm(text)


def test_write_and_read(tmp_path):
    grid = np.array([[0, 10], [10, 10]])
    path = write_pgm(tmp_path / "image.pgm", grid, 15)

    assert path.read_text() == "P2\n2 2\n15\n0 10\n10 10\n"

    read_grid, max_value = read_pgm(path)
    assert np.array_equal(read_grid, grid)
    assert max_value == 15

    with pytest.raises(FileExistsError):
        write_pgm(path, grid, 15)

    write_pgm(path, grid * 0, 15, overwrite=True)
    assert read_pgm(path)[0].sum() == 0


def test_format_pgm_round_trip():
    grid, max_value = parse_pgm(IMAGE_4X4)
    read_grid, read_max_value = parse_pgm(format_pgm(grid, max_value))

    assert np.array_equal(read_grid, grid)
    assert read_max_value == max_value


def test_pgm_image_operations():
    image = PGMImage(parse_pgm(IMAGE_4X4)[0], max_value=255)

    assert image.side == 4
    assert image.max_value == 255
    assert image.n_nodes == image.n_nodes_initial == 13
    assert image.dump() == "((1 2 5 4) 3 (7 7 8 7) 6)"

    assert image.compress_lambda() == 5
    assert image.dump() == "(3 3 7 6)"
    assert image.to_grid().tolist() == [[3, 3, 3, 3], [3, 3, 3, 3], [6, 6, 7, 7], [6, 6, 7, 7]]

    assert image.compress_rho(0) == 1
    assert image.n_nodes_initial == 13
    assert "tree: " in str(image)


def test_pgm_image_examples():
    tests = (
        (np.full((4, 4), 7), 1, 1, 1),
        ([[1, 1], [1, 1]], 1, 1, 1),
        ([[0, 10], [10, 10]], 5, 1, 1),
    )

    for grid, n_nodes, n_lambda, n_rho in tests:
        image = PGMImage(grid)
        assert image.n_nodes == n_nodes
        assert image.compress_lambda() == n_lambda

        image = PGMImage(grid)
        assert image.compress_rho(50) == n_rho


def test_pgm_image_invalid_input():
    with pytest.raises(ValueError):
        PGMImage([[0, 300], [0, 0]], max_value=255)

    with pytest.raises(ValueError):
        PGMImage(np.zeros((3, 3), dtype=int))

    image = PGMImage([[0, 10], [10, 10]])
    with pytest.raises(ValueError):
        image.compress_rho(150)
    assert image.n_nodes == 5
    assert image.dump() == "(0 10 10 10)"


def test_pgm_image_from_file(tmp_path):
    path = tmp_path / "image.pgm"
    path.write_text(IMAGE_4X4)

    image = PGMImage.from_file(path)
    image.compress_lambda()
    output = image.save(tmp_path / "image_LAMBDA_.pgm")

    grid, max_value = read_pgm(output)
    assert max_value == 255
    assert grid.tolist() == [[3, 3, 3, 3], [3, 3, 3, 3], [6, 6, 7, 7], [6, 6, 7, 7]]


def test_parse_pgm_error_hides_int_conversion():
    with pytest.raises(ValueError, match="must be integers") as e:
        parse_pgm("P2 2 2 255 0 0 0 x")

    assert e.value.__cause__ is None
    assert e.value.__suppress_context__
