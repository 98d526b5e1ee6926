"""
GEODSL CLI Entrypoint.

Parses GEODSL construction commands and prints the resulting AST.

Features:
    - Read source from `.geo` files, stdin (`-`), or inline strings (`-s`).
    - Lex and parse into a task AST plus the identifiers table.
    - Output as JSON (default) or as normalized source with every point's
      coordinates spelled out.
    - Seed default-coordinate inference for reproducible output.

Example usage:
    geodsl shapes.geo
    geodsl -s "DRAW TRIANGLE A(0,0) B(4,0) C."
    geodsl shapes.geo -f source -o resolved.geo --seed 7

Functions:
    run_geodsl(source, is_string=False, fmt="json", out=None, seed=None) -> str
        Executes the pipeline (lex → parse → output).

    main(argv=None) -> int
        Parses CLI arguments, runs the pipeline, and returns the exit code.
"""

import argparse
import json
import logging
import random
import sys

from geodsl.geodsl_errors import GeoSyntaxError
from geodsl.geodsl_format import format_task
from geodsl.geodsl_lexer import TokenIterator, tokenize
from geodsl.geodsl_parser import Parser

logger = logging.getLogger(__name__)


def read_source(source: str, is_string: bool = False) -> str:
    """Return source text from a literal string, stdin (`-`) or a file path."""
    if is_string:
        return source
    if source == "-":
        return sys.stdin.read()
    with open(source, encoding="utf-8") as f:
        return f.read()


def run_geodsl(
    source: str,
    is_string: bool = False,
    fmt: str = "json",
    out: str | None = None,
    seed: int | None = None,
) -> str:
    """
    Run the GEODSL toolchain: lex, parse, render, and write or print the result.

    Args:
        source (str): GEODSL source text, or a path to a source file, or `-` for stdin.
        is_string (bool): If True, treats `source` as raw code instead of a path.
        fmt (str): Output format, `json` or `source`.
        out (str | None): Optional path to write the output to. If None, prints to stdout.
        seed (int | None): Seed for the default-coordinate jitter.

    Returns:
        str: The rendered output.

    Raises:
        GeoSyntaxError: On the first lexical or grammar violation.
        ValueError: If `fmt` is not supported.
    """
    if fmt not in ("json", "source"):
        raise ValueError(f"Unknown output format: {fmt!r}")

    text = read_source(source, is_string)
    jitter = random.Random(seed) if seed is not None else None

    parser = Parser(TokenIterator(tokenize(text)), jitter=jitter)
    task = parser.parse_task()

    if fmt == "source":
        output = format_task(task)
    else:
        output = json.dumps(
            {
                "task": task.to_dict(),
                "identifiers": {
                    name: coords.to_dict()
                    for name, coords in parser.identifiers_table.items()
                },
            },
            indent=2,
        )

    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(output + "\n")
        logger.info("wrote %s", out)
    else:
        print(output)
    return output


def main(argv: list[str] | None = None) -> int:
    """
    Entry point for the GEODSL CLI.

    Supported flags:
        - `-s`, `--string`: Interpret source as a raw string instead of a file path.
        - `-f`, `--format`: Output format, `json` (default) or `source`.
        - `-o`, `--out`: Write output to a file.
        - `--seed`: Seed the jitter used for inferred coordinates.
        - `--verbose`: Enable debug logging.

    Returns:
        int: 0 on success, 1 on a syntax error.
    """
    parser = argparse.ArgumentParser(prog="geodsl")
    parser.add_argument("source", help="Filename, '-' for stdin, or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "-f",
        "--format",
        dest="fmt",
        choices=("json", "source"),
        default="json",
        help="Output format (default: json)",
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument("--seed", type=int, help="Seed for inferred coordinates")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        run_geodsl(
            source=args.source,
            is_string=args.string,
            fmt=args.fmt,
            out=args.out,
            seed=args.seed,
        )
    except GeoSyntaxError as e:
        print(e, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
