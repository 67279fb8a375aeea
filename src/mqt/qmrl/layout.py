# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# Copyright (c) 2025 Munich Quantum Software Company GmbH
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Mutable bidirectional assignment of logical qubits to physical nodes."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from .circuit import Qubit

__all__ = [
    "Layout",
]


def __dir__() -> list[str]:
    return __all__


class Layout:
    """Injective mapping from logical qubits to physical nodes that keeps the inverse in sync."""

    __slots__ = ("_l2p", "_p2l")

    def __init__(self, assignment: Mapping[Qubit, int] | Iterable[tuple[Qubit, int]] = ()) -> None:
        self._l2p: dict[Qubit, int] = {}
        self._p2l: dict[int, Qubit] = {}
        items = assignment.items() if hasattr(assignment, "items") else assignment
        for logical, physical in items:
            if logical in self._l2p or physical in self._p2l:
                msg = f"Cannot place {logical!r} on {physical}: the assignment must be injective."
                raise ValueError(msg)
            self._l2p[logical] = physical
            self._p2l[physical] = logical

    def physical(self, logical: Qubit) -> int:
        return self._l2p[logical]

    def logical(self, physical: int) -> Qubit | None:
        """The logical qubit on a physical node or None if the node is free."""
        return self._p2l.get(physical)

    def swap(self, u: int, v: int) -> None:
        """Exchange the contents of two physical nodes (either may be free)."""
        a = self._p2l.pop(u, None)
        b = self._p2l.pop(v, None)
        if a is not None:
            self._l2p[a] = v
            self._p2l[v] = a
        if b is not None:
            self._l2p[b] = u
            self._p2l[u] = b

    def copy(self) -> Layout:
        new = Layout.__new__(Layout)
        new._l2p = dict(self._l2p)
        new._p2l = dict(self._p2l)
        return new

    def as_dict(self) -> dict[Qubit, int]:
        return dict(self._l2p)

    def __contains__(self, logical: object) -> bool:
        return logical in self._l2p

    def __len__(self) -> int:
        return len(self._l2p)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Layout):
            return NotImplemented
        return self._l2p == other._l2p

    def __repr__(self) -> str:
        return f"Layout({self._l2p})"
