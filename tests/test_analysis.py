import math

import matplotlib

matplotlib.use("Agg")

import numpy as np

from quadtree_compressor.analysis import (
    compression_stats,
    format_stats,
    plot_sweep,
    rho_sweep,
)
from quadtree_compressor.pgm import PGMImage


def test_compression_stats():
    grid = np.array([[0, 10], [10, 10]])
    image = PGMImage(grid, max_value=10)

    stats = compression_stats(grid, image)
    assert stats.n_nodes == stats.n_nodes_initial == 5
    assert stats.ratio == 100
    assert stats.mse == 0
    assert math.isinf(stats.psnr)

    image.compress_lambda()
    stats = compression_stats(grid, image)
    assert stats.n_nodes == 1
    assert stats.ratio == 20
    assert stats.mse == (9 + 3 * 49) / 4
    assert 0 < stats.psnr < 20

    text = format_stats(stats, "lambda")
    assert "Number of nodes (lambda): \t1" in text
    assert "20.00 %" in text


def test_rho_sweep():
    grid = np.random.RandomState(0).randint(0, 256, size=(8, 8))
    df = rho_sweep(grid, max_value=255, rhos=(0, 50, 100), progress=False)

    assert list(df.columns) == ["rho", "n_nodes", "ratio", "mse", "psnr", "time"]
    assert df["rho"].tolist() == [0, 50, 100]
    assert df["n_nodes"].tolist()[0] == 1
    assert df["n_nodes"].is_monotonic_increasing
    assert df["ratio"].iloc[-1] == 100
    assert df["mse"].iloc[-1] == 0
    assert (df["time"] >= 0).all()


def test_plot_sweep(tmp_path):
    grid = np.random.RandomState(1).randint(0, 4, size=(8, 8))
    df = rho_sweep(grid, rhos=(0, 25, 50, 75, 100), progress=False)

    plot_sweep(df, tmp_path / "sweep.png")
    assert (tmp_path / "sweep.png").stat().st_size > 0
