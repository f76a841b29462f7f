"""pandoc JSON filter entry point.

    pandoc -F url2cite --citeproc input.md -o output.html

pandoc passes the output format as the first argument and the document as
JSON on stdin; the rewritten document goes to stdout. Options can be given
in the document's metadata or as ``--set url2cite-link-output=sup``.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from url2cite.core.exceptions import Url2CiteError
from url2cite.core.logging import configure_logging, get_logger
from url2cite.pipelines.orchestrator import Url2Cite


logger = get_logger(__name__)


def parse_override(value: str) -> tuple[str, str]:
    key, sep, option = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {value!r}")
    return key.strip(), option.strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="url2cite",
        description="pandoc filter converting links and URL citations to bibliography entries",
    )
    parser.add_argument(
        "format",
        nargs="?",
        default="",
        help="pandoc output format (passed by pandoc)",
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        type=parse_override,
        default=[],
        metavar="KEY=VALUE",
        help="override a url2cite-* option from the document metadata",
    )
    return parser


async def run(document: dict[str, Any], output_format: str,
              overrides: dict[str, Any]) -> dict[str, Any]:
    return await Url2Cite(overrides=overrides).transform(document, output_format)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()

    document = json.load(sys.stdin)
    try:
        document = asyncio.run(run(document, args.format, dict(args.overrides)))
    except Url2CiteError as e:
        logger.error("url2cite failed", error=str(e), error_type=type(e).__name__)
        return 1

    json.dump(document, sys.stdout, ensure_ascii=False)
    return 0


if __name__ == "__main__":
    sys.exit(main())
