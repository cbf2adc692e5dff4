"""
The ``cookparse-check`` command parses recipe files and reports any errors
and warnings found.

Usage::

    $ cookparse-check FILENAME [...]

Each problem is printed along with the offending line of the recipe. If any
recipe contains errors a non-zero exit status is returned. Warnings alone do
not cause a non-zero exit status.

With ``--canonical``, the canonical (conformance test suite) form of each
recipe is printed as JSON instead.
"""

from typing import List, Optional

import sys

import json

import logging

from argparse import ArgumentParser

from pathlib import Path

from cookparse.canonical import to_canonical
from cookparse.compiler import compile
from cookparse.extensions import PRESETS


def main(argv: Optional[List[str]] = None) -> None:
    parser = ArgumentParser(
        description="""
            Check Cooklang recipe files for errors and warnings.
        """,
    )

    parser.add_argument(
        "recipe",
        type=Path,
        nargs="*",
        help="""
            The filename of the recipe to check. Pass multiple filenames to
            check multiple files.
        """,
    )

    parser.add_argument(
        "--extensions",
        "-e",
        default="canonical",
        choices=sorted(PRESETS),
        help="""
            The set of markup extensions to enable. Default: %(default)s.
        """,
    )

    parser.add_argument(
        "--canonical",
        action="store_true",
        help="""
            Print the canonical form of each recipe as JSON.
        """,
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="""
            Show debugging output.
        """,
    )

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    failed = False
    for filename in args.recipe:
        source = filename.read_text(encoding="utf-8")
        document = compile(source, args.extensions)

        if args.canonical:
            print(json.dumps(to_canonical(document), indent=2, ensure_ascii=False))

        for diagnostic in document.errors + document.warnings:
            print(
                f"{filename}: {diagnostic.severity.name.capitalize()}: "
                f"{diagnostic.format(source)}",
                file=sys.stderr if args.canonical else sys.stdout,
            )

        if document.errors:
            failed = True

    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
