# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# Copyright (c) 2025 Munich Quantum Software Company GmbH
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""MQT QMRL library.

Specializes a generic qubit mapping and routing solver to declaratively specified quantum architectures.
"""

from __future__ import annotations

from ._version import version as __version__
from .architecture import Architecture, CouplingEdge, CouplingGraph, QubitNode
from .circuit import Circuit, Gate, load_circuit
from .configuration import Configuration, SolveMode, load_configuration
from .debug import DebugSink
from .exceptions import (
    CapacityExceeded,
    ConfigurationMismatch,
    ParseError,
    QMRError,
    SearchExhausted,
    UnknownSolveMode,
    UnroutableCircuit,
)
from .load_architecture import load_architecture, load_coupling_graph, parse_architecture
from .results import CostSummary, Mapping, MappingResults, ScheduledOperation
from .serialization import from_json, to_json
from .solver import Solver, solve
from .specialize import load_artifact, specialize

__all__ = [
    "Architecture",
    "CapacityExceeded",
    "Circuit",
    "Configuration",
    "ConfigurationMismatch",
    "CostSummary",
    "CouplingEdge",
    "CouplingGraph",
    "DebugSink",
    "Gate",
    "Mapping",
    "MappingResults",
    "ParseError",
    "QMRError",
    "QubitNode",
    "ScheduledOperation",
    "SearchExhausted",
    "SolveMode",
    "Solver",
    "UnknownSolveMode",
    "UnroutableCircuit",
    "__version__",
    "from_json",
    "load_architecture",
    "load_artifact",
    "load_circuit",
    "load_configuration",
    "load_coupling_graph",
    "parse_architecture",
    "solve",
    "specialize",
    "to_json",
]
