import argparse
import sys
from pathlib import Path

from .analysis import compression_stats, format_stats, plot_sweep, rho_sweep
from .converter import Anchor, convert_to_pgm
from .pgm import PGMImage, read_pgm


def derived_path(path, tag):
    """Build ``<stem><tag>`` next to path, e.g. ``lenna_RHO_50.pgm``."""

    path = Path(path)
    return path.with_name(path.stem + tag)


def available_path(path):
    """Append ``(n)`` to the stem until the path is not taken."""

    path = Path(path)
    index = 0
    candidate = path
    while candidate.exists():
        candidate = path.with_name(f"{path.stem}({index}){path.suffix}")
        index += 1
    return candidate


def load_pgm_path(path, anchor=Anchor.NORTH_WEST):
    """Return a PGM path for any image, converting it if needed."""

    path = Path(path)
    if path.suffix.lower() == ".pgm":
        return path

    pgm_path = path.with_suffix(".pgm")
    if pgm_path.exists():
        print(f"Using existing {pgm_path}")
        return pgm_path

    print("Converting the image to PGM...")
    return convert_to_pgm(path, anchor)


def load(path):
    grid, max_value = read_pgm(path)
    return grid, PGMImage(grid, max_value=max_value)


def parse_rho(value):
    rho = int(value)
    if not 0 <= rho <= 100:
        raise argparse.ArgumentTypeError(f"rho must be in 0..100, but {rho} given.")
    return rho


def run(path, rho, overwrite=False):
    """Non interactive mode: write lambda and rho compressions of path."""

    lambda_path = derived_path(path, "_LAMBDA_.pgm")
    rho_path = derived_path(path, f"_RHO_{rho}.pgm")
    if not overwrite:
        for output in (lambda_path, rho_path):
            if output.exists():
                raise FileExistsError(f"File {output} already exists.")

    grid, lambda_image = load(path)
    _, rho_image = load(path)

    print("Lambda compression...")
    lambda_image.compress_lambda()
    print(f"Rho compression (rho={rho})...")
    rho_image.compress_rho(rho)

    print(f"Written {lambda_image.save(lambda_path, overwrite)}")
    print(f"Written {rho_image.save(rho_path, overwrite)}")

    print(format_stats(compression_stats(grid, lambda_image), "lambda"))
    print(format_stats(compression_stats(grid, rho_image), f"rho {rho}"))


def compress_lambda(path, output=None, overwrite=False):
    grid, image = load(path)

    print("Lambda compression...")
    image.compress_lambda()

    output = output or derived_path(path, "_LAMBDA_.pgm")
    print(f"Written {image.save(output, overwrite)}")
    print(format_stats(compression_stats(grid, image), "lambda"))


def compress_rho(path, rho, output=None, overwrite=False):
    grid, image = load(path)

    print(f"Rho compression (rho={rho})...")
    image.compress_rho(rho)

    output = output or derived_path(path, f"_RHO_{rho}.pgm")
    print(f"Written {image.save(output, overwrite)}")
    print(format_stats(compression_stats(grid, image), f"rho {rho}"))


def dump(path, output=None):
    _, image = load(path)

    output = output or available_path(derived_path(path, "_treeSaved_.txt"))
    print(f"Written {image.tree.save(output)}")


def sweep(path, step=10, plot=None, csv=None):
    grid, max_value = read_pgm(path)

    df = rho_sweep(grid, max_value=max_value, rhos=range(0, 101, step))
    print(df.to_string(index=False))

    if csv:
        df.to_csv(csv, index=False)
    if plot:
        plot_sweep(df, plot)


MENU = """\
\t 1. Choose an image to load
\t 2. Reload the image
\t 3. Apply a lambda compression and save it
\t 4. Apply a rho compression and save it
\t 5. Save the image as PGM
\t 6. Save the tree dump
\t Anything else: quit"""


def read_rho(read=input):
    while True:
        try:
            return parse_rho(read("Give an integer 0 <= rho <= 100: "))
        except (ValueError, argparse.ArgumentTypeError):
            print("Invalid rho!", file=sys.stderr)


def read_filename(read=input):
    filename = read("Give the path to the file: ").strip()
    while not filename:
        print("Invalid path!", file=sys.stderr)
        filename = read("Give the path to the file: ").strip()
    return filename


def interactive(anchor=Anchor.WEST, read=input):
    """Textual menu over one image at a time.

    Parameters
    ----------
    anchor : Anchor, optional (default=Anchor.WEST)
        Anchor used when a non-PGM image is loaded.

    read : callable, optional (default=input)
        Prompt reader. End of input (``EOFError``) quits the menu.

    """

    try:
        path = load_pgm_path(read_filename(read), anchor)
    except EOFError:
        print()
        return
    grid, image = load(path)

    while True:
        print(MENU)

        try:
            choice = read("$ ").strip()
            if choice == "1":
                path = load_pgm_path(read_filename(read), anchor)
                grid, image = load(path)
            elif choice == "2":
                grid, image = load(path)
            elif choice == "3":
                image.compress_lambda()
                output = available_path(derived_path(path, "_LAMBDA_.pgm"))
                print(f"Written {image.save(output)}")
                print(format_stats(compression_stats(grid, image), "lambda"))
            elif choice == "4":
                rho = read_rho(read)
                image.compress_rho(rho)
                output = available_path(derived_path(path, f"_RHO_{rho}.pgm"))
                print(f"Written {image.save(output)}")
                print(format_stats(compression_stats(grid, image), f"rho {rho}"))
            elif choice == "5":
                print(f"Written {image.save(available_path(path))}")
            elif choice == "6":
                output = available_path(derived_path(path, "_treeSaved_.txt"))
                print(f"Written {image.tree.save(output)}")
            else:
                return
        except EOFError:
            print()
            return
        except (OSError, ValueError) as e:
            print(f"error: {e}", file=sys.stderr)


def _build_arg_parser():
    parser = argparse.ArgumentParser(
        prog="quadtree-compressor",
        description="Quadtree based lossy compression of grayscale PGM images.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    p_run = subparsers.add_parser(
        "run", help="Write lambda and rho compressions of an image and print statistics"
    )
    p_run.add_argument("input", help="Input PGM file")
    p_run.add_argument("rho", type=parse_rho, help="Percentage of nodes to keep [0-100]")
    p_run.add_argument("--overwrite", action="store_true", help="Replace existing outputs")

    p_lambda = subparsers.add_parser("lambda", help="Apply one lambda compression")
    p_lambda.add_argument("input", help="Input PGM file")
    p_lambda.add_argument("-o", "--output", help="Output PGM file")
    p_lambda.add_argument("--overwrite", action="store_true", help="Replace existing output")

    p_rho = subparsers.add_parser("rho", help="Apply a rho compression")
    p_rho.add_argument("input", help="Input PGM file")
    p_rho.add_argument("rho", type=parse_rho, help="Percentage of nodes to keep [0-100]")
    p_rho.add_argument("-o", "--output", help="Output PGM file")
    p_rho.add_argument("--overwrite", action="store_true", help="Replace existing output")

    p_dump = subparsers.add_parser("dump", help="Write the tree dump of an image")
    p_dump.add_argument("input", help="Input PGM file")
    p_dump.add_argument("-o", "--output", help="Output text file")

    p_convert = subparsers.add_parser(
        "convert", help="Convert a bitmap image into a power of two square PGM"
    )
    p_convert.add_argument("input", help="Input image (any format scikit-image reads)")
    p_convert.add_argument(
        "--anchor",
        choices=[anchor.name.lower() for anchor in Anchor],
        default="north_west",
        help="Part of the image kept when cropping (default: north_west)",
    )
    p_convert.add_argument("--overwrite", action="store_true", help="Replace existing output")

    p_sweep = subparsers.add_parser(
        "sweep", help="Compress an image for a range of rho and tabulate the results"
    )
    p_sweep.add_argument("input", help="Input PGM file")
    p_sweep.add_argument("--step", type=int, default=10, help="Step between rho values (default: 10)")
    p_sweep.add_argument("--plot", help="Save a PSNR/compression rate plot to this file")
    p_sweep.add_argument("--csv", help="Save the table to this CSV file")

    p_interactive = subparsers.add_parser("interactive", help="Textual menu")
    p_interactive.add_argument(
        "--anchor",
        choices=[anchor.name.lower() for anchor in Anchor],
        default="west",
        help="Part of non-PGM images kept when cropping (default: west)",
    )

    return parser


def main(argv=None):
    parser = _build_arg_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "run":
            run(args.input, args.rho, args.overwrite)
        elif args.command == "lambda":
            compress_lambda(args.input, args.output, args.overwrite)
        elif args.command == "rho":
            compress_rho(args.input, args.rho, args.output, args.overwrite)
        elif args.command == "dump":
            dump(args.input, args.output)
        elif args.command == "convert":
            anchor = Anchor[args.anchor.upper()]
            print(f"Written {convert_to_pgm(args.input, anchor, args.overwrite)}")
        elif args.command == "sweep":
            if args.step < 1:
                parser.error(f"step must be positive, but {args.step} given.")
            sweep(args.input, args.step, args.plot, args.csv)
        elif args.command == "interactive":
            interactive(Anchor[args.anchor.upper()])
        else:
            parser.error(f"Unknown command: {args.command}")
    except (OSError, ValueError) as e:
        parser.exit(1, f"error: {e}\n")


if __name__ == "__main__":  # pragma: no cover
    main()
