# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# Copyright (c) 2025 Munich Quantum Software Company GmbH
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Test the Qiskit backend and circuit imports."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from qiskit import QuantumCircuit
from qiskit.providers.fake_provider import GenericBackendV2

from mqt import qmrl
from mqt.qmrl import ParseError, load_architecture, load_circuit

if TYPE_CHECKING:
    from pathlib import Path

BASIS_GATES = ["cx", "h", "id", "rz", "sx", "x"]


@pytest.fixture
def example_circuit() -> QuantumCircuit:
    """Return a simple circuit."""
    qc = QuantumCircuit(3)
    qc.h(0)
    qc.cx(0, 1)
    qc.cx(1, 2)
    qc.measure_all()
    return qc


@pytest.fixture
def backend() -> GenericBackendV2:
    """Return a test backend."""
    return GenericBackendV2(
        num_qubits=5,
        coupling_map=[[0, 1], [1, 0], [1, 2], [2, 1], [1, 3], [3, 1], [3, 4], [4, 3]],
        basis_gates=BASIS_GATES,
    )


def test_import_backend(backend: GenericBackendV2) -> None:
    """Test that the directed coupling map of a backend collapses into undirected couplings."""
    arch = load_architecture(backend)
    assert arch.num_qubits == 5
    assert arch.coupling_map == {(0, 1), (1, 2), (1, 3), (3, 4)}
    assert arch.operations is not None
    assert {"cx", "h", "measure"} <= arch.operations
    assert not arch.multi_component


def test_import_circuit(example_circuit: QuantumCircuit) -> None:
    """Test that barriers are dropped and qubits are numbered by their index."""
    circuit = load_circuit(example_circuit)
    assert circuit.qubits == (0, 1, 2)
    assert "barrier" not in circuit.operations
    assert [gate.name for gate in circuit.gates[:3]] == ["h", "cx", "cx"]
    assert circuit.gates[2].qubits == (1, 2)
    assert [gate.index for gate in circuit.gates] == list(range(len(circuit)))


def test_solve_on_backend(example_circuit: QuantumCircuit, backend: GenericBackendV2) -> None:
    """Test that circuits can be mapped by simply providing the backend."""
    results = qmrl.solve(example_circuit, backend)
    assert results.swaps == 0
    placed = dict(results.mapping.initial)
    assert backend.coupling_map.distance(placed[0], placed[1]) == 1
    assert backend.coupling_map.distance(placed[1], placed[2]) == 1


def test_three_qubit_operations_are_rejected() -> None:
    """Test that operations on more than two qubits must be decomposed first."""
    qc = QuantumCircuit(3)
    qc.ccx(0, 1, 2)
    with pytest.raises(ParseError, match="decompose"):
        load_circuit(qc)


def test_load_qasm_file(tmp_path: Path) -> None:
    """Test that OpenQASM 2 files are read through Qiskit."""
    path = tmp_path / "bell.qasm"
    path.write_text(
        'OPENQASM 2.0;\ninclude "qelib1.inc";\nqreg q[2];\nh q[0];\ncx q[0], q[1];\n',
        encoding="utf-8",
    )
    circuit = load_circuit(path)
    assert circuit.name == "bell"
    assert [(gate.name, gate.qubits) for gate in circuit] == [("h", (0,)), ("cx", (0, 1))]


def test_invalid_qasm_file(tmp_path: Path) -> None:
    """Test that OpenQASM syntax errors are reported as parse errors."""
    path = tmp_path / "broken.qasm"
    path.write_text("OPENQASM 2.0;\nqreg q[2];\nfoo q[0];\n", encoding="utf-8")
    with pytest.raises(ParseError) as exc_info:
        load_circuit(path)
    assert exc_info.value.source == str(path)


def test_load_json_circuit(tmp_path: Path) -> None:
    """Test that JSON circuit files are named after the file."""
    path = tmp_path / "pair.json"
    path.write_text('[{"name": "cx", "qubits": ["x", "y"]}]', encoding="utf-8")
    circuit = load_circuit(path)
    assert circuit.name == "pair"
    assert circuit.qubits == ("x", "y")

    path.write_text('[{"name": "cx", "qubits": ["x", "x"]}]', encoding="utf-8")
    with pytest.raises(ParseError, match="twice"):
        load_circuit(path)
