# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# Copyright (c) 2025 Munich Quantum Software Company GmbH
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Specialization of the generic solver to a single architecture.

A specialized solver is a small generated Python module that embeds the canonical form of one architecture and hands
it to the generic engine when executed.
"""

from __future__ import annotations

import importlib.util
import json
import logging
from pathlib import Path
from string import Template
from typing import TYPE_CHECKING

from .architecture import Architecture
from .debug import DebugSink
from .exceptions import ConfigurationMismatch
from .load_architecture import load_architecture
from .solver import Solver

if TYPE_CHECKING:
    import types
    from os import PathLike

    from .configuration import Configuration

__all__ = [
    "DEFAULT_OUTPUT_DIR",
    "bind_architecture",
    "debug_dir",
    "emit_solver_source",
    "import_artifact",
    "load_artifact",
    "specialize",
]


def __dir__() -> list[str]:
    return __all__


logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = "generated-solvers"

_ARTIFACT_TEMPLATE = Template('''\
# Generated by mqt.qmrl from $origin. Do not edit.
"""Mapping solver specialized for architecture $name.

Arguments: CIRCUIT GRAPH [--mode MODE]
"""

from __future__ import annotations

import sys

from mqt.qmrl.cli import run_artifact

ARCHITECTURE = $architecture
FINGERPRINT = "$fingerprint"
DEBUG = $debug

if __name__ == "__main__":
    sys.exit(run_artifact(ARCHITECTURE, FINGERPRINT, debug=DEBUG, origin=__file__))
''')


def emit_solver_source(architecture: Architecture, debug: bool = False, origin: str | None = None) -> str:
    """Render the source of a solver specialized for an architecture.

    Args:
        architecture: The architecture to embed.
        debug: Whether the solver traces its runs to its debug sink.
        origin: Name of the specification the architecture was loaded from.

    Returns:
        The Python source of the specialized solver.
    """
    return _ARTIFACT_TEMPLATE.substitute(
        origin=origin or architecture.name,
        name=architecture.name,
        architecture=repr(architecture.to_json()),
        fingerprint=architecture.fingerprint,
        debug=repr(debug),
    )


def bind_architecture(text: str, fingerprint: str) -> Architecture:
    """Decode an embedded architecture and check it against its fingerprint.

    Raises:
        ConfigurationMismatch: If the decoded architecture does not match the fingerprint.
    """
    architecture = Architecture.from_dict(json.loads(text))
    if architecture.fingerprint != fingerprint:
        msg = (
            f"Embedded architecture {architecture.name!r} does not match its fingerprint "
            f"({architecture.fingerprint[:12]} != {fingerprint[:12]})."
        )
        raise ConfigurationMismatch(msg)
    return architecture


def debug_dir(artifact: str | PathLike[str]) -> Path:
    """The debug sink directory belonging to an artifact."""
    path = Path(artifact)
    return path.with_name(f"{path.stem}.debug")


def specialize(
    spec_path: str | PathLike[str], output_dir: str | PathLike[str] = DEFAULT_OUTPUT_DIR, *, debug: bool = False
) -> Path:
    """Compile an architecture specification into a specialized solver.

    Args:
        spec_path: Path to the architecture specification.
        output_dir: Directory receiving the solver. Defaults to "generated-solvers".
        debug: Whether to write the intermediate model to the debug sink and enable tracing in the solver.

    Returns:
        The path of the written solver, ``<output_dir>/<spec base name>.py``.

    Raises:
        ParseError: If the specification is invalid.
    """
    spec_path = Path(spec_path)
    architecture = load_architecture(spec_path)
    output = Path(output_dir)
    output.mkdir(parents=True, exist_ok=True)
    artifact = output / f"{spec_path.stem}.py"
    artifact.write_text(emit_solver_source(architecture, debug, str(spec_path)), encoding="utf-8")
    logger.info("Wrote solver for %s to %s.", architecture.name, artifact)

    if debug:
        sink = DebugSink(debug_dir(artifact))
        sink.write_model(architecture)
        sink.record(
            "specialize",
            source=str(spec_path),
            artifact=str(artifact),
            fingerprint=architecture.fingerprint,
            components=[list(component) for component in architecture.components],
        )
    return artifact


def import_artifact(path: str | PathLike[str]) -> types.ModuleType:
    """Import a specialized solver as a module without running it."""
    path = Path(path)
    spec = importlib.util.spec_from_file_location(f"qmrl_artifact_{path.stem}", path)
    if spec is None or spec.loader is None:
        msg = f"Cannot load solver from {path}."
        raise ImportError(msg)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def load_artifact(path: str | PathLike[str], configuration: Configuration | None = None) -> Solver:
    """Load a specialized solver.

    Args:
        path: Path to the solver written by :func:`specialize`.
        configuration: Solver configuration. Defaults to None, in which case the default configuration is used.

    Returns:
        A solver bound to the embedded architecture.

    Raises:
        ConfigurationMismatch: If the embedded architecture does not match its fingerprint.
    """
    module = import_artifact(path)
    return Solver(bind_architecture(module.ARCHITECTURE, module.FINGERPRINT), configuration)
