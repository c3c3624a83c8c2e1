"""Command-line interface for generating typed command builders from a Redis `commands.json`."""

from __future__ import annotations

import argparse
import logging
import os
from collections.abc import Sequence

from redis_codegen.commands import CommandSetError
from redis_codegen.redis_types import DEFAULT_RUNTIME_MODULE, DEFAULT_TYPES_MODULE
from redis_codegen.run import PyrightValidationError, run

logger = logging.getLogger(__name__)


def setup_parser() -> argparse.ArgumentParser:
    """Setup for the parser.

    Returns:
        argparse.ArgumentParser: The parser after setup.
    """
    parser = argparse.ArgumentParser(description="Generate typed argument types and command builders for Redis.")

    parser.add_argument(
        "-p",
        "--commands",
        type=str,
        default="commands.json",
        help="path of the commands.json file that describes the command set.",
    )

    parser.add_argument(
        "-o",
        "--output-dir",
        type=str,
        default="",
        help="directory to write the generated modules to; defaults to the working directory.",
    )

    parser.add_argument(
        "--package",
        type=str,
        default="",
        help="package that the generated modules are placed in, used for imports between them.",
    )

    parser.add_argument(
        "--types-module",
        type=str,
        default=DEFAULT_TYPES_MODULE,
        help="name of the generated argument types module.",
    )

    parser.add_argument(
        "--runtime-module",
        type=str,
        default=DEFAULT_RUNTIME_MODULE,
        help="module that generated code imports RedisWrite, write_redis_args and Cmd from.",
    )

    parser.add_argument(
        "--placement",
        choices=["nested", "shortest"],
        default="nested",
        help="namespace of deduplicated types: the full path they were first found under, or the shortest free one.",
    )

    parser.add_argument(
        "--no-format",
        dest="skip_format",
        default=False,
        action="store_true",
        help="skip formatting generated modules with ruff.",
    )

    parser.add_argument(
        "--no-pyright",
        dest="skip_pyright",
        default=False,
        action="store_true",
        help="skip pyright validation of generated modules.",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        default=False,
        action="store_true",
        help="log every synthesized type.",
    )

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the generator.

    Args:
        argv (Sequence[str] | None, optional): Run arguments. Defaults to None.

    Returns:
        int: Error code.
    """
    parser = setup_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    root_directory = os.getcwd()
    logger.info("Working from root directory: %s", root_directory)

    try:
        run(args, root_directory)

    except CommandSetError as e:
        logger.error("Invalid command set: %s", e)
        return 1

    except OSError as e:
        logger.error("Generation failed: %s", e)
        return 1

    except PyrightValidationError as e:
        logger.error("Validation failed: %s", e)
        return 2

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
