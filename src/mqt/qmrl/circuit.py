# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# Copyright (c) 2025 Munich Quantum Software Company GmbH
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Circuits as seen by the mapper: an ordered sequence of one- and two-qubit operations on logical qubits."""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeAlias, Union

from .exceptions import ParseError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from qiskit.circuit import QuantumCircuit

__all__ = [
    "Circuit",
    "Gate",
    "Qubit",
    "load_circuit",
    "qubit_key",
]


def __dir__() -> list[str]:
    return __all__


Qubit: TypeAlias = Union[int, str]

#: Alternative spellings of operation names
GATE_ALIASES = {"cnot": "cx"}


def qubit_key(qubit: Qubit) -> tuple[bool, int | str]:
    """Sort key ordering integer qubit ids before string ids."""
    return isinstance(qubit, str), qubit


def _check_qubit(qubit: Any) -> Qubit:
    if isinstance(qubit, bool) or not isinstance(qubit, (int, str)):
        msg = f"Invalid qubit {qubit!r}: qubits are identified by non-negative integers or non-empty strings."
        raise ValueError(msg)
    if isinstance(qubit, int) and qubit < 0:
        msg = f"Invalid qubit {qubit}: integer qubit ids must be non-negative."
        raise ValueError(msg)
    if isinstance(qubit, str) and not qubit:
        msg = "Invalid qubit: string qubit ids must not be empty."
        raise ValueError(msg)
    return qubit


@dataclass(frozen=True)
class Gate:
    """A logical gate operation.

    Attributes:
        name: Lower-case operation name.
        qubits: The one or two logical qubits the operation acts on.
        index: Position of the operation in program order.
    """

    name: str
    qubits: tuple[Qubit, ...]
    index: int

    def __post_init__(self) -> None:
        name = self.name.lower()
        object.__setattr__(self, "name", GATE_ALIASES.get(name, name))
        object.__setattr__(self, "qubits", tuple(_check_qubit(q) for q in self.qubits))
        if len(self.qubits) not in {1, 2}:
            msg = (
                f"Operation {self.name!r} acts on {len(self.qubits)} qubits; "
                "only one- and two-qubit operations can be mapped."
            )
            raise ValueError(msg)
        if len(set(self.qubits)) != len(self.qubits):
            msg = f"Operation {self.name!r} acts on qubit {self.qubits[0]!r} twice."
            raise ValueError(msg)

    @property
    def is_two_qubit(self) -> bool:
        return len(self.qubits) == 2


class Circuit:
    """An ordered sequence of gates on logical qubits."""

    def __init__(self, gates: Iterable[Gate], qubits: Iterable[Qubit] = (), name: str | None = None) -> None:
        """Create a circuit.

        Args:
            gates: The gates in program order.
            qubits: Additional logical qubits that are not acted upon by any gate but still need a physical qubit.
            name: Optional name of the circuit.
        """
        self._gates = tuple(gates)
        used = {q for gate in self._gates for q in gate.qubits}
        self._qubits = tuple(sorted(used.union(_check_qubit(q) for q in qubits), key=qubit_key))
        self.name = name

    @classmethod
    def from_gates(cls, gates: Iterable[tuple[str, Iterable[Qubit]]], qubits: Iterable[Qubit] = ()) -> Circuit:
        """Create a circuit from ``(name, qubits)`` pairs, numbering them in order."""
        return cls([Gate(name, tuple(operands), i) for i, (name, operands) in enumerate(gates)], qubits)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | list[Any], source: str | None = None) -> Circuit:
        """Create a circuit from its JSON form.

        Either a list of gates or a mapping with a ``gates`` list and an optional ``qubits`` list. Each gate is a
        mapping with ``name`` (or ``type``) and ``qubits``.

        Raises:
            ParseError: If the data does not describe a valid circuit.
        """
        if isinstance(data, list):
            data = {"gates": data}
        if not isinstance(data, dict) or not isinstance(data.get("gates", []), list):
            msg = "A circuit must be a list of gates or a mapping with a 'gates' list."
            raise ParseError(msg, source)

        gates = []
        for i, entry in enumerate(data.get("gates", [])):
            name = entry.get("name", entry.get("type")) if isinstance(entry, dict) else None
            operands = entry.get("qubits") if isinstance(entry, dict) else None
            if not isinstance(name, str) or not isinstance(operands, list):
                msg = f"Gate {i} must be a mapping with a 'name' string and a 'qubits' list."
                raise ParseError(msg, source)
            try:
                gates.append(Gate(name, tuple(operands), i))
            except ValueError as exc:
                msg = f"Gate {i}: {exc}"
                raise ParseError(msg, source) from exc
        try:
            return cls(gates, data.get("qubits", ()), data.get("name"))
        except (TypeError, ValueError) as exc:
            raise ParseError(str(exc), source) from exc

    def to_dict(self) -> dict[str, Any]:
        return {
            "qubits": list(self._qubits),
            "gates": [{"name": gate.name, "qubits": list(gate.qubits)} for gate in self._gates],
        }

    @property
    def gates(self) -> tuple[Gate, ...]:
        return self._gates

    @property
    def qubits(self) -> tuple[Qubit, ...]:
        """All logical qubits, ordered by :func:`qubit_key`."""
        return self._qubits

    @property
    def num_qubits(self) -> int:
        return len(self._qubits)

    @property
    def operations(self) -> frozenset[str]:
        return frozenset(gate.name for gate in self._gates)

    def __len__(self) -> int:
        return len(self._gates)

    def __iter__(self) -> Iterator[Gate]:
        return iter(self._gates)

    def __repr__(self) -> str:
        return f"Circuit(num_qubits={self.num_qubits}, gates={len(self._gates)})"

    def interactions(self) -> Counter[tuple[Qubit, Qubit]]:
        """How often each pair of qubits shares a two-qubit gate. Pairs are ordered by :func:`qubit_key`."""
        counts: Counter[tuple[Qubit, Qubit]] = Counter()
        for gate in self._gates:
            if gate.is_two_qubit:
                a, b = sorted(gate.qubits, key=qubit_key)
                counts[a, b] += 1
        return counts

    def reversed(self) -> Circuit:
        """The same gates in reverse program order. Gate indices are kept."""
        return Circuit(reversed(self._gates), self._qubits, self.name)


def load_circuit(circ: Circuit | QuantumCircuit | str | PathLike[str] | dict[str, Any] | list[Any]) -> Circuit:
    """Load a circuit from a Circuit, a Qiskit QuantumCircuit, parsed JSON data, or a file.

    Files ending in ``.qasm`` are read as OpenQASM 2 through Qiskit; all other files are read as JSON.

    Args:
        circ: The circuit to load.

    Returns:
        The loaded circuit.

    Raises:
        ParseError: If the circuit cannot be read or is invalid.
        TypeError: If the type of ``circ`` is not supported.
    """
    if isinstance(circ, Circuit):
        return circ
    if isinstance(circ, (dict, list)):
        return Circuit.from_dict(circ)
    if isinstance(circ, (str, PathLike)):
        return _load_circuit_file(Path(circ))

    from qiskit.circuit import QuantumCircuit

    if isinstance(circ, QuantumCircuit):
        from .plugins.qiskit import import_circuit

        return import_circuit(circ)
    msg = f"Circuit type {type(circ)} not supported."
    raise TypeError(msg)


def _load_circuit_file(path: Path) -> Circuit:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot read circuit: {exc.strerror}"
        raise ParseError(msg, str(path)) from exc

    if path.suffix.lower() == ".qasm" or text.lstrip().startswith("OPENQASM"):
        from qiskit import qasm2

        from .plugins.qiskit import import_circuit

        try:
            qc = qasm2.loads(text, custom_instructions=qasm2.LEGACY_CUSTOM_INSTRUCTIONS)
        except qasm2.QASM2ParseError as exc:
            raise ParseError(str(exc), str(path)) from exc
        qc.name = path.stem
        circuit = import_circuit(qc)
        circuit.name = path.stem
        return circuit

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(exc.msg, str(path), exc.lineno, exc.colno) from exc
    circuit = Circuit.from_dict(data, source=str(path))
    if circuit.name is None:
        circuit.name = path.stem
    return circuit
