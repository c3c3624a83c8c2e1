"""Top-level module for code generation."""

from __future__ import annotations

import argparse
import logging
import os.path
import subprocess
from pathlib import Path

from redis_codegen.commands import CommandSet, load_command_set
from redis_codegen.commands_writer import generate_commands
from redis_codegen.redis_types import (
    DEFAULT_COMMANDS_MODULE,
    DEFAULT_RUNTIME_MODULE,
    DEFAULT_TYPES_MODULE,
    PlacementType,
)
from redis_codegen.scope import Scope
from redis_codegen.writer import generate_types

logger = logging.getLogger(__name__)

PY_SUFFIX = ".py"


class PyrightValidationError(Exception):
    """Raised when pyright reports errors in the generated modules, or can not be run."""

    pass


def validate_with_pyright(output_files: list[Path]) -> None:
    """Type check the generated modules with pyright.

    Args:
        output_files (list[Path]): The generated modules.

    Raises:
        PyrightValidationError: If pyright reports an error, or can not be run at all.
    """
    if not output_files:
        logger.warning("Nothing to type check")
        return

    logger.info("Type checking %d generated module(s)", len(output_files))
    try:
        result = subprocess.run(
            ["pyright", *map(str, output_files)],
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as e:
        raise PyrightValidationError("pyright not found, install it or pass --no-pyright") from e
    except subprocess.SubprocessError as e:
        raise PyrightValidationError(f"pyright could not be run: {e}") from e

    errors = [line.strip() for line in result.stdout.splitlines() if " - error:" in line]
    if errors or result.returncode != 0:
        for error in errors:
            logger.error(error)
        raise PyrightValidationError(f"pyright reported {len(errors)} error(s) in the generated modules")

    logger.info("Generated modules type check cleanly")


def _ruff(arguments: list[str], source: str) -> str:
    """Run ruff on a source passed through stdin and return what it prints."""
    result = subprocess.run(
        ["ruff", *arguments, "--stdin-filename", f"generated{PY_SUFFIX}", "-"],
        input=source,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


def format_outputs(raw_input: str) -> str:
    """Sort the imports of a generated module and format it, both with ruff.

    Args:
        raw_input (str): The generated source.

    Returns:
        str: The formatted source, or the generated source unchanged if ruff is missing or fails.
    """
    try:
        sorted_imports = _ruff(["check", "--fix", "--select", "I", "--exit-zero"], raw_input)
        return _ruff(["format", "--line-length", "120"], sorted_imports)

    except subprocess.CalledProcessError as e:
        logger.error("ruff failed on a generated module, leaving it unformatted: %s", e.stderr.strip())
        return raw_input
    except FileNotFoundError:
        logger.error("ruff not found, leaving generated modules unformatted")
        return raw_input


def write_if_changed(path: Path, content: str) -> bool:
    """Write a file, unless it already has this content.

    Args:
        path (Path): The file to write.
        content (str): The new content.

    Returns:
        bool: True if the file was written.
    """
    if path.is_file() and path.read_text(encoding="utf-8") == content:
        logger.info(f"Unchanged: {path}")
        return False

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    logger.info(f"Wrote {path}")
    return True


def generate_modules(
    command_set: CommandSet,
    types_module: str = DEFAULT_TYPES_MODULE,
    runtime_module: str = DEFAULT_RUNTIME_MODULE,
    package: str = "",
    placement: PlacementType = "nested",
) -> dict[str, str]:
    """Generate the sources of the types module and the command builders module.

    Commands are processed sorted by group and name, so output does not depend on the input order.

    Args:
        command_set (CommandSet): The command set.
        types_module (str, optional): The name of the types module. Defaults to 'arg_types'.
        runtime_module (str, optional): The module generated code imports its runtime support from.
        package (str, optional): The package the generated modules are placed in, if any.
        placement (PlacementType, optional): How namespace paths of types are chosen. Defaults to 'nested'.

    Returns:
        dict[str, str]: The unformatted sources, by module name.
    """
    commands = command_set.sorted_commands()

    types_scope = Scope(name=types_module)
    registry = generate_types(commands, types_scope, types_module, placement, runtime_module)

    commands_scope = Scope(name=DEFAULT_COMMANDS_MODULE)
    generate_commands(commands, registry, commands_scope, runtime_module, package)

    return {
        types_module: types_scope.dumps(),
        DEFAULT_COMMANDS_MODULE: commands_scope.dumps(),
    }


def run(args: argparse.Namespace, root_directory: str) -> list[Path]:
    """Run the generator on a `commands.json` file.

    Args:
        args (argparse.Namespace): The arguments that were passed when calling the generator.
        root_directory (str): The directory, from which the generator is executed.

    Returns:
        list[Path]: The files that were written. Files whose content did not change are not included.
    """
    commands_path = os.path.join(root_directory, args.commands)
    output_dir = Path(root_directory, getattr(args, "output_dir", "") or ".")
    skip_format: bool = getattr(args, "skip_format", False)
    skip_pyright: bool = getattr(args, "skip_pyright", False)

    logger.info(f"Loading command set from {commands_path}")
    command_set = load_command_set(commands_path)

    sources = generate_modules(
        command_set,
        types_module=getattr(args, "types_module", DEFAULT_TYPES_MODULE),
        runtime_module=getattr(args, "runtime_module", DEFAULT_RUNTIME_MODULE),
        package=getattr(args, "package", ""),
        placement=getattr(args, "placement", "nested"),
    )

    output_files: list[Path] = []
    written: list[Path] = []
    for module_name, source in sources.items():
        if not skip_format:
            source = format_outputs(source)

        path = output_dir / f"{module_name}{PY_SUFFIX}"
        output_files.append(path)
        if write_if_changed(path, source):
            written.append(path)

    if skip_pyright:
        logger.info("Skipping pyright validation")
    else:
        validate_with_pyright(output_files)

    return written
