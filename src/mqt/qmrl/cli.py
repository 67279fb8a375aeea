# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# Copyright (c) 2025 Munich Quantum Software Company GmbH
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Command line interface.

``qmrl specialize SPEC`` writes a specialized solver; ``qmrl run SOLVER CIRCUIT GRAPH`` (or executing the solver
directly) maps a circuit and prints the results as JSON on stdout. Failures print an error document on stderr and
exit with status 1.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TYPE_CHECKING

from ._version import version
from .configuration import load_configuration, parse_solve_mode
from .debug import DebugSink
from .exceptions import QMRError
from .serialization import error_json, to_json
from .solver import Solver
from .specialize import DEFAULT_OUTPUT_DIR, bind_architecture, debug_dir, import_artifact, specialize

if TYPE_CHECKING:
    from collections.abc import Sequence

__all__ = [
    "main",
    "run_artifact",
]


def __dir__() -> list[str]:
    return __all__


logger = logging.getLogger(__name__)


def _configure_logging(verbosity: int) -> None:
    if verbosity <= 0:
        return
    level = logging.INFO if verbosity == 1 else logging.DEBUG
    logging.basicConfig(level=level, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")


def _add_run_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("circuit", help="circuit to map (OpenQASM 2 or JSON)")
    parser.add_argument("graph", help="runtime connectivity graph (JSON edge list)")
    parser.add_argument("--mode", default=None, help="solve mode: exact, heuristic or sabre (default: heuristic)")
    parser.add_argument(
        "--initial-layout", default="dynamic", choices=["dynamic", "identity"], help="initial layout strategy"
    )
    parser.add_argument("--config", default=None, help="JSON configuration file (default: $QMRL_CONFIG)")
    parser.add_argument("--timeout", type=float, default=None, help="time limit in seconds")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="log to stderr (-vv for debug output)")


def _solve(
    parser: argparse.ArgumentParser,
    args: argparse.Namespace,
    extra: list[str],
    architecture_json: str,
    fingerprint: str,
    debug: bool,
    origin: str | None,
) -> int:
    """Run one invocation of a specialized solver. Leftover ``--MODE`` flags select the solve mode."""
    mode = args.mode
    for token in extra:
        if not token.startswith("--") or mode is not None:
            parser.error(f"unrecognized arguments: {' '.join(extra)}")
        mode = token
    _configure_logging(args.verbose)

    sink = None
    try:
        solve_mode = parse_solve_mode(mode or "heuristic")
        architecture = bind_architecture(architecture_json, fingerprint)
        solver = Solver(architecture, load_configuration(args.config))
        if debug and origin is not None:
            sink = DebugSink(debug_dir(origin))
            sink.record("run", circuit=args.circuit, graph=args.graph, mode=solve_mode.value)
        results = solver.solve(
            args.circuit,
            args.graph,
            solve_mode,
            initial_layout=args.initial_layout,
            timeout=args.timeout,
            sink=sink,
        )
    except QMRError as exc:
        logger.debug("Invocation failed.", exc_info=True)
        if sink is not None:
            sink.record("error", type=type(exc).__name__, message=str(exc))
        print(error_json(exc), file=sys.stderr)
        return 1
    print(to_json(results))
    return 0


def run_artifact(
    architecture_json: str,
    fingerprint: str,
    *,
    debug: bool = False,
    origin: str | None = None,
    argv: Sequence[str] | None = None,
) -> int:
    """Entry point of a specialized solver.

    Args:
        architecture_json: The embedded canonical architecture.
        fingerprint: Its fingerprint.
        debug: Whether to trace the invocation to the solver's debug sink.
        origin: Path of the solver.
        argv: Command line arguments. Defaults to ``sys.argv[1:]``.

    Returns:
        The exit status.
    """
    parser = argparse.ArgumentParser(prog=origin, description="Map a circuit with a specialized solver.")
    _add_run_arguments(parser)
    args, extra = parser.parse_known_args(argv)
    return _solve(parser, args, extra, architecture_json, fingerprint, debug, origin)


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the ``qmrl`` command."""
    parser = argparse.ArgumentParser(prog="qmrl", description="Specialized qubit mapping and routing solvers.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {version}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    specialize_parser = subparsers.add_parser("specialize", help="compile an architecture specification")
    specialize_parser.add_argument("spec", help="architecture specification")
    specialize_parser.add_argument(
        "-o", "--output-dir", default=DEFAULT_OUTPUT_DIR, help=f"output directory (default: {DEFAULT_OUTPUT_DIR})"
    )
    specialize_parser.add_argument("--debug", action="store_true", help="write the model and trace runs")
    specialize_parser.add_argument("-v", "--verbose", action="count", default=0, help="log to stderr")

    run_parser = subparsers.add_parser("run", help="run a specialized solver")
    run_parser.add_argument("artifact", help="specialized solver")
    _add_run_arguments(run_parser)

    args, extra = parser.parse_known_args(argv)
    if args.command == "specialize":
        if extra:
            parser.error(f"unrecognized arguments: {' '.join(extra)}")
        _configure_logging(args.verbose)
        try:
            artifact = specialize(args.spec, args.output_dir, debug=args.debug)
        except QMRError as exc:
            print(error_json(exc), file=sys.stderr)
            return 1
        print(artifact)
        return 0

    try:
        module = import_artifact(args.artifact)
    except (OSError, ImportError) as exc:
        print(error_json(exc), file=sys.stderr)
        return 1
    return _solve(
        run_parser, args, extra, module.ARCHITECTURE, module.FINGERPRINT, module.DEBUG, str(args.artifact)
    )
