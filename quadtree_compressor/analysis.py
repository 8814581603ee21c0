import time
from typing import NamedTuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from skimage.metrics import mean_squared_error as mse
from skimage.metrics import peak_signal_noise_ratio as psnr
from tqdm import tqdm

from .pgm import PGMImage


class CompressionStats(NamedTuple):
    n_nodes_initial: int
    n_nodes: int
    ratio: float
    mse: float
    psnr: float


def compression_stats(orig, image):
    """Compare a compressed image with its source grid.

    Parameters
    ----------
    orig : np.array
        Source grid.

    image : PGMImage
        Compressed image built from ``orig``.

    Returns
    -------
    stats : CompressionStats
        Node counts, percentage of remaining nodes, MSE and PSNR.

    """

    orig = np.asarray(orig)
    result = image.to_grid()
    assert orig.shape == result.shape, "Shape mismatch"

    if image.n_nodes_initial:
        ratio = 100.0 * image.n_nodes / image.n_nodes_initial
    else:
        ratio = 100.0

    loss = float(mse(orig, result)) if orig.size else 0.0

    if loss == 0:
        quality = float("inf")
    else:
        quality = float(psnr(orig, result, data_range=max(image.max_value, 1)))

    return CompressionStats(
        n_nodes_initial=image.n_nodes_initial,
        n_nodes=image.n_nodes,
        ratio=ratio,
        mse=loss,
        psnr=quality,
    )


def format_stats(stats, method="current"):
    return "\n".join(
        [
            "======= STATISTICS =======",
            f"Initial number of nodes: \t{stats.n_nodes_initial}",
            f"Number of nodes ({method}): \t{stats.n_nodes}",
            f"Compression rate (current/initial): \t{stats.ratio:.2f} %",
            f"MSE: \t{stats.mse:.2f}",
            f"PSNR, dB: \t{stats.psnr:.2f}",
            "==========================",
        ]
    )


def rho_sweep(grid, max_value=None, rhos=range(0, 101, 10), progress=True):
    """Compress a fresh copy of the image for each rho.

    Parameters
    ----------
    grid : np.array
        Source grid.

    max_value : int, optional (default=None)
        Maximal intensity, the maximum of the grid if None.

    rhos : iterable of int, optional (default=range(0, 101, 10))
        Percentages of nodes to keep.

    progress : bool, optional (default=True)
        Show a progress bar.

    Returns
    -------
    df : pd.DataFrame
        One row per rho with the number of nodes, the compression rate, MSE,
        PSNR and the duration of the compression in seconds.

    """

    grid = np.asarray(grid)
    data = {"rho": [], "n_nodes": [], "ratio": [], "mse": [], "psnr": [], "time": []}

    for rho in tqdm(list(rhos), disable=not progress):
        image = PGMImage(grid, max_value=max_value)

        start = time.time()
        image.compress_rho(rho)
        duration = time.time() - start

        stats = compression_stats(grid, image)
        data["rho"].append(rho)
        data["n_nodes"].append(stats.n_nodes)
        data["ratio"].append(stats.ratio)
        data["mse"].append(stats.mse)
        data["psnr"].append(stats.psnr)
        data["time"].append(duration)

    return pd.DataFrame(data=data)


def plot_sweep(df, path=None):
    """Plot PSNR against compression rate of a `rho_sweep`.

    The figure is saved to ``path`` if given, shown otherwise.
    """

    _, ax = plt.subplots()

    finite = df[np.isfinite(df["psnr"])]
    ax.plot(finite["ratio"], finite["psnr"], marker="o", ms=10, ls="-.")

    ax.set_xlabel("Compression Rate, %", fontsize=16)
    ax.set_ylabel("PSNR, dB", fontsize=16)

    if path is None:
        plt.show()
    else:
        plt.savefig(path)
    plt.close()


def show_compression(orig, images, titles):
    _, axs = plt.subplots(ncols=len(images) + 1)

    for index, image in enumerate(images):
        stats = compression_stats(orig, image)
        axs[index].imshow(image.to_grid(), cmap="gray", vmin=0, vmax=image.max_value)
        axs[index].set_title(
            f"{titles[index]}, nodes: {stats.n_nodes}, psnr: {round(stats.psnr, 2)}"
        )

    axs[-1].imshow(orig, cmap="gray")
    axs[-1].set_title("orig")

    plt.show()
