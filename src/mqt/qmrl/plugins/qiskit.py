# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# Copyright (c) 2025 Munich Quantum Software Company GmbH
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Module for importing Qiskit backends and circuits."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..architecture import Architecture, CouplingGraph
from ..circuit import Circuit, Gate
from ..exceptions import ParseError

if TYPE_CHECKING:
    from qiskit.circuit import QuantumCircuit
    from qiskit.providers import BackendV2

__all__ = [
    "import_backend",
    "import_circuit",
]


def __dir__() -> list[str]:
    return __all__


logger = logging.getLogger(__name__)

#: Instructions that carry no operation to be mapped
IGNORED_INSTRUCTIONS = frozenset({"barrier", "delay"})


def import_backend(backend: BackendV2) -> Architecture:
    """Import a backend from qiskit.providers.BackendV2.

    The directed coupling map is merged into undirected couplings and the backend's operation names become the
    global operation set. Backends whose coupling map is disconnected are imported as multi-component architectures.
    """
    nodes = range(backend.num_qubits)
    coupling_map = backend.coupling_map
    edges = [] if coupling_map is None else coupling_map.get_edges()
    graph = CouplingGraph.from_coupling_map(edges, nodes)
    logger.debug("Imported backend %s with %d qubits.", backend.name, backend.num_qubits)
    return Architecture(
        backend.name,
        nodes,
        graph.edges,
        operations=backend.operation_names,
        multi_component=not graph.is_connected(),
    )


def import_circuit(qc: QuantumCircuit) -> Circuit:
    """Import a circuit from qiskit.circuit.QuantumCircuit.

    Barriers and delays are dropped. Logical qubits are the indices of the circuit's qubits; qubits without operations
    are kept.

    Args:
        qc: The circuit to import.

    Returns:
        The imported circuit.

    Raises:
        ParseError: If the circuit contains an operation on more than two qubits.
    """
    gates = []
    for instruction in qc.data:
        operation = instruction.operation
        if operation.name in IGNORED_INSTRUCTIONS:
            continue
        qubits = tuple(qc.find_bit(qubit).index for qubit in instruction.qubits)
        if len(qubits) > 2:
            msg = f"Operation {operation.name!r} acts on {len(qubits)} qubits; decompose it before mapping."
            raise ParseError(msg, qc.name)
        if not qubits:
            continue
        gates.append(Gate(operation.name, qubits, len(gates)))
    return Circuit(gates, range(qc.num_qubits), qc.name)
