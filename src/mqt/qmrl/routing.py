# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# Copyright (c) 2025 Munich Quantum Software Company GmbH
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Incremental swap-based routing of a placed circuit."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .exceptions import UnroutableCircuit
from .layout import Layout
from .results import ScheduledOperation

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from .architecture import CouplingGraph
    from .circuit import Circuit, Gate, Qubit
    from .configuration import Configuration
    from .debug import DebugSink

__all__ = [
    "Route",
    "emit_schedule",
    "route",
]


def __dir__() -> list[str]:
    return __all__


logger = logging.getLogger(__name__)


class Route:
    """A routed circuit: schedule plus the layouts before and after it."""

    def __init__(
        self, initial: dict[Qubit, int], schedule: list[ScheduledOperation], final: Layout, weight: float
    ) -> None:
        self.initial = initial
        self.schedule = schedule
        self.final = final
        self.weight = weight

    @property
    def swaps(self) -> int:
        return sum(op.is_swap for op in self.schedule)


def _gate_operation(gate: Gate, layout: Layout) -> ScheduledOperation:
    return ScheduledOperation(
        "gate", gate.name, tuple(layout.physical(q) for q in gate.qubits), gate.qubits, gate.index
    )


def _split_swaps(path: Sequence[int], split: int) -> list[tuple[int, int]]:
    """Swaps bringing the ends of ``path`` together on ``path[split]`` and ``path[split + 1]``."""
    forward = [(path[j], path[j + 1]) for j in range(split)]
    backward = [(path[j], path[j - 1]) for j in range(len(path) - 1, split + 1, -1)]
    return forward + backward


def _lookahead(gates: Sequence[Gate], graph: CouplingGraph, layout: Layout, factor: float) -> float:
    score = 0.0
    weight = 1.0
    for gate in gates:
        weight *= factor
        distance = graph.distance(*(layout.physical(q) for q in gate.qubits))
        if distance is not None:
            score += weight * distance
    return score


def _upcoming(gates: Sequence[Gate], start: int, count: int) -> list[Gate]:
    upcoming: list[Gate] = []
    for gate in gates[start:]:
        if len(upcoming) >= count:
            break
        if gate.is_two_qubit:
            upcoming.append(gate)
    return upcoming


def route(
    circuit: Circuit,
    graph: CouplingGraph,
    initial: Mapping[Qubit, int],
    config: Configuration,
    sink: DebugSink | None = None,
) -> Route:
    """Route a placed circuit by inserting swaps along shortest paths.

    Gates are scanned in program order. The operands of a two-qubit gate that are not adjacent are moved towards each
    other along the canonical shortest path between them; where they meet is chosen by a decaying lookahead over the
    next two-qubit gates, preferring fewer moves of the first operand.

    Args:
        circuit: The circuit to route.
        graph: The runtime connectivity graph.
        initial: Physical node of every logical qubit before the first gate.
        config: Lookahead settings.
        sink: Optional debug sink recording every inserted swap sequence.

    Returns:
        The routed circuit.

    Raises:
        UnroutableCircuit: If the operands of a gate lie in different components.
    """
    layout = Layout(initial)
    gates = circuit.gates
    schedule: list[ScheduledOperation] = []
    weight = 0.0
    for position, gate in enumerate(gates):
        if gate.is_two_qubit:
            a, b = (layout.physical(q) for q in gate.qubits)
            if not graph.has_edge(a, b):
                path = graph.shortest_path(a, b)
                if path is None:
                    raise UnroutableCircuit(gate.index, gate.name, gate.qubits, (a, b))
                upcoming = _upcoming(gates, position + 1, config.lookaheads)
                best_split, best_score = 0, None
                for split in range(len(path) - 1):
                    trial = layout.copy()
                    for u, v in _split_swaps(path, split):
                        trial.swap(u, v)
                    score = _lookahead(upcoming, graph, trial, config.lookahead_factor)
                    if best_score is None or score < best_score:
                        best_split, best_score = split, score
                swaps = _split_swaps(path, best_split)
                for u, v in swaps:
                    layout.swap(u, v)
                    schedule.append(ScheduledOperation.swap(u, v))
                    weight += graph.weight(u, v)
                logger.debug("Gate %d: %d swaps along %s.", gate.index, len(swaps), path)
                if sink is not None:
                    sink.record("swaps", gate=gate.index, path=list(path), split=best_split, swaps=len(swaps))
        schedule.append(_gate_operation(gate, layout))
    return Route(dict(initial), schedule, layout, weight)


def emit_schedule(
    circuit: Circuit, graph: CouplingGraph, initial: Mapping[Qubit, int], swaps: Iterable[tuple[int, int, int]]
) -> Route:
    """Build the schedule for a given sequence of swaps.

    Args:
        circuit: The circuit.
        graph: The runtime connectivity graph.
        initial: Physical node of every logical qubit before the first gate.
        swaps: ``(position, u, v)`` triples, in order, inserting a swap of ``u`` and ``v`` before the gate at
            ``position``.

    Returns:
        The routed circuit.
    """
    pending: dict[int, list[tuple[int, int]]] = {}
    for position, u, v in swaps:
        pending.setdefault(position, []).append((u, v))
    layout = Layout(initial)
    schedule: list[ScheduledOperation] = []
    weight = 0.0
    for position, gate in enumerate(circuit.gates):
        for u, v in pending.get(position, ()):
            layout.swap(u, v)
            schedule.append(ScheduledOperation.swap(u, v))
            weight += graph.weight(u, v)
        schedule.append(_gate_operation(gate, layout))
    return Route(dict(initial), schedule, layout, weight)
