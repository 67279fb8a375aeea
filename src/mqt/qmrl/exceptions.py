# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# Copyright (c) 2025 Munich Quantum Software Company GmbH
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Errors raised while loading architectures and solving mapping problems."""

from __future__ import annotations

from typing import Any

__all__ = [
    "CapacityExceeded",
    "ConfigurationMismatch",
    "ParseError",
    "QMRError",
    "SearchExhausted",
    "UnknownSolveMode",
    "UnroutableCircuit",
]


def __dir__() -> list[str]:
    return __all__


class QMRError(Exception):
    """Base class of all errors raised by MQT QMRL."""

    def details(self) -> dict[str, Any]:
        """Structured details reported alongside the error message."""
        return {}


class ParseError(QMRError):
    """A specification, circuit, or graph input is malformed."""

    def __init__(
        self, message: str, source: str | None = None, line: int | None = None, column: int | None = None
    ) -> None:
        """Create a parse error.

        Args:
            message: Description of the violated constraint.
            source: Name of the offending input (usually a file name).
            line: 1-based line of the offending element, if known.
            column: 1-based column of the offending element, if known.
        """
        self.message = message
        self.source = source
        self.line = line
        self.column = column
        super().__init__(f"{self.location}: {message}" if self.location else message)

    @property
    def location(self) -> str:
        """The location as ``source:line:column`` (parts that are unknown are left out)."""
        parts = [str(part) for part in (self.source, self.line, self.column) if part is not None]
        return ":".join(parts)

    def details(self) -> dict[str, Any]:
        return {"source": self.source, "line": self.line, "column": self.column}


class ConfigurationMismatch(QMRError):
    """The runtime inputs are incompatible with the embedded architecture."""


class CapacityExceeded(QMRError):
    """The circuit needs more qubits than the architecture provides."""

    def __init__(self, required: int, available: int) -> None:
        self.required = required
        self.available = available
        super().__init__(f"Circuit requires {required} qubits, but only {available} physical qubits are available.")

    def details(self) -> dict[str, Any]:
        return {"required": self.required, "available": self.available}


class UnroutableCircuit(QMRError):
    """No sequence of routing primitives makes an operation executable."""

    def __init__(self, index: int, name: str, qubits: tuple[Any, ...], physical: tuple[int, ...] | None = None) -> None:
        """Create an unroutable circuit error.

        Args:
            index: Program-order index of the first unreachable operation.
            name: Name of that operation.
            qubits: Its logical operands.
            physical: The physical nodes the operands were placed on, if a placement exists.
        """
        self.index = index
        self.name = name
        self.qubits = qubits
        self.physical = physical
        super().__init__(
            f"Operation {index} ({name} on {', '.join(map(str, qubits))}) cannot be routed: "
            "its operands lie in disconnected parts of the connectivity graph."
        )

    def details(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "name": self.name,
            "qubits": list(self.qubits),
            "physical": None if self.physical is None else list(self.physical),
        }


class UnknownSolveMode(QMRError, ValueError):
    """The solve mode token does not name a known search strategy."""

    def __init__(self, token: str, known: list[str]) -> None:
        self.token = token
        self.known = known
        super().__init__(f"Unknown solve mode {token!r}. Expected one of: {', '.join(known)}.")

    def details(self) -> dict[str, Any]:
        return {"token": self.token, "known": self.known}


class SearchExhausted(QMRError):
    """The exact search exceeded its node limit or deadline before completing."""

    def __init__(self, reason: str, expanded: int) -> None:
        self.reason = reason
        self.expanded = expanded
        what = "timed out" if reason == "timeout" else "exceeded its node limit"
        super().__init__(f"Exact search {what} after expanding {expanded} nodes.")

    def details(self) -> dict[str, Any]:
        return {"reason": self.reason, "expanded": self.expanded}
