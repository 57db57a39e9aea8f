"""
Command line front end: blur an image without opening the window.

Usage examples
--------------

Three passes with the fast strategy, written next to the input::

    python -m imagefilterer.cli photo.jpg -n 3

Slow strategy, explicit output name (".png" is appended when missing)::

    python -m imagefilterer.cli photo.png -s slow -o blurred
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from .averaging import Strategy
from .errors import ImageFiltererError
from .session import MAX_ITERATIONS, MIN_ITERATIONS, FilterSession
from .utils import RasterImage

logger = logging.getLogger("imagefilterer")


def _setup_logging(debug: bool = False) -> None:
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _iterations(value: str) -> int:
    count = int(value)
    if not MIN_ITERATIONS <= count <= MAX_ITERATIONS:
        raise argparse.ArgumentTypeError(
            f"must be between {MIN_ITERATIONS} and {MAX_ITERATIONS}, got {count}"
        )
    return count


def _strategy(value: str) -> Strategy:
    try:
        return Strategy.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Apply a 3x3 blur filter to an image.")
    parser.add_argument("input", type=Path, help="Image to filter (.png, .jpg, .jpeg)")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Output file (PNG). Defaults to <input>_blurred.png",
    )
    parser.add_argument(
        "-s",
        "--strategy",
        type=_strategy,
        default=Strategy.FAST,
        help="Averaging strategy: fast (packed integers) or slow (channel objects)",
    )
    parser.add_argument(
        "-n",
        "--iterations",
        type=_iterations,
        default=1,
        help=f"Number of passes ({MIN_ITERATIONS}-{MAX_ITERATIONS})",
    )
    parser.add_argument("--debug", action="store_true", help="Log every pass")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        args = parse_args(argv)
    except SystemExit as e:
        # argparse has already printed the usage; --help exits with 0
        return 1 if e.code else 0
    _setup_logging(args.debug)

    session = FilterSession()
    output = args.output or args.input.with_name(f"{args.input.stem}_blurred.png")

    def progress(image: RasterImage, index: int, count: int) -> None:
        logger.info("Pass %d/%d", index, count)

    try:
        session.open(args.input)
        run = session.apply(args.strategy, args.iterations, on_progress=progress)
        run.wait()
        if run.error is not None:
            logger.error("Filtering failed: %s", run.error)
            return 1
        written = session.save(output)
    except ImageFiltererError as e:
        logger.error("%s: %s", e.title, e)
        return 1

    print(f"Saved {written}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
