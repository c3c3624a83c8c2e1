"""Pytest configuration and fixtures for redis-codegen tests."""

from __future__ import annotations

import importlib
import logging
import os
import shutil
import subprocess
import sys
from pathlib import Path
from types import ModuleType

import pytest

from redis_codegen.commands import CommandSet, load_command_set

# Test directory structure
TESTS_DIR = Path(__file__).parent
FIXTURES_DIR = TESTS_DIR / "fixtures"
COMMANDS_JSON = FIXTURES_DIR / "commands.json"
GENERATED_DIR = TESTS_DIR / "_generated"
SRC_DIR = TESTS_DIR.parent / "src"


@pytest.fixture(scope="session", autouse=True)
def generate_all_modules():
    """Generate the modules for the fixture command set once at the beginning of the test session.

    The generator runs through its command line interface, with ruff formatting but without pyright.
    Tests that need the generated code use the modules from this fixture.
    """
    logger = logging.getLogger(__name__)
    logger.info(f"Generating modules from {COMMANDS_JSON}")

    if GENERATED_DIR.exists():
        shutil.rmtree(GENERATED_DIR)
    GENERATED_DIR.mkdir(parents=True, exist_ok=True)

    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(p for p in (str(SRC_DIR), env.get("PYTHONPATH", "")) if p)

    result = subprocess.run(
        [
            sys.executable,
            "-m",
            "redis_codegen.cli",
            "-p",
            str(COMMANDS_JSON),
            "-o",
            str(GENERATED_DIR),
            "--no-pyright",
        ],
        capture_output=True,
        text=True,
        env=env,
    )
    if result.returncode != 0:
        logger.error(f"Failed to generate modules:\n{result.stderr}")
        pytest.fail(f"Module generation failed: {result.stderr}")

    yield GENERATED_DIR


@pytest.fixture(scope="session")
def command_set() -> CommandSet:
    """The parsed fixture command set."""
    return load_command_set(COMMANDS_JSON)


@pytest.fixture
def generated_modules(monkeypatch) -> tuple[ModuleType, ModuleType]:
    """Import the generated `arg_types` and `commands` modules.

    The modules are removed from `sys.modules` afterwards, so every test gets fresh imports.
    """
    monkeypatch.syspath_prepend(str(GENERATED_DIR))
    for name in ("arg_types", "commands"):
        monkeypatch.delitem(sys.modules, name, raising=False)

    arg_types = importlib.import_module("arg_types")
    commands = importlib.import_module("commands")

    yield arg_types, commands

    for name in ("arg_types", "commands"):
        sys.modules.pop(name, None)
