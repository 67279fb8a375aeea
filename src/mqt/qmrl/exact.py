# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# Copyright (c) 2025 Munich Quantum Software Company GmbH
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Swap-optimal mapping by A* search over placements and swap sequences."""

from __future__ import annotations

import heapq
import logging
import time
from typing import TYPE_CHECKING

from .exceptions import SearchExhausted, UnroutableCircuit
from .placement import Cost, placement_cost
from .routing import emit_schedule

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from .architecture import CouplingGraph
    from .circuit import Circuit, Qubit
    from .debug import DebugSink
    from .routing import Route

__all__ = [
    "exact_route",
]


def __dir__() -> list[str]:
    return __all__


logger = logging.getLogger(__name__)

Placement = tuple[int, ...]
SwapPath = tuple[tuple[int, int, int], ...]
Entry = tuple[int, Cost, Placement, SwapPath, int, Placement]


class _Search:
    """A* over ``(next gate, placement)`` states, preceded by the construction of the start placement.

    The cost of a state is the number of swaps inserted so far. Gates that are executable under the current placement
    are applied greedily, so every state waits on a non-executable two-qubit gate (or has finished the circuit). Each
    swap brings the operands of that gate at most one step closer, so ``distance - 1`` never overestimates.

    Start placements are built one logical qubit at a time. A partial placement is bounded by the first gate it decides,
    and its placement cost only grows as qubits are added, so partial states are ordered consistently with the
    complete placements they lead to.
    """

    def __init__(self, circuit: Circuit, graph: CouplingGraph) -> None:
        self.circuit = circuit
        self.graph = graph
        self.slot = {q: i for i, q in enumerate(circuit.qubits)}
        self.operands = [tuple(self.slot[q] for q in gate.qubits) for gate in circuit.gates]
        self.edges = [edge.nodes for edge in graph.edges]
        # interactions of each qubit with the qubits placed before it
        self.earlier: list[list[tuple[int, int]]] = [[] for _ in circuit.qubits]
        for (a, b), count in circuit.interactions().items():
            i, j = sorted((self.slot[a], self.slot[b]))
            self.earlier[j].append((i, count))

    @property
    def num_qubits(self) -> int:
        return len(self.earlier)

    def advance(self, position: int, placement: Placement) -> int:
        while position < len(self.operands):
            operands = self.operands[position]
            if len(operands) == 2 and not self.graph.has_edge(placement[operands[0]], placement[operands[1]]):
                break
            position += 1
        return position

    def estimate(self, position: int, placement: Placement) -> int | None:
        """Lower bound on the remaining swaps or None if the waiting gate can never execute."""
        if position == len(self.operands):
            return 0
        a, b = self.operands[position]
        distance = self.graph.distance(placement[a], placement[b])
        if distance is None:
            return None
        return max(0, distance - 1)

    def partial_estimate(self, placement: Placement) -> int:
        """Lower bound on the swaps needed after completing a partial placement."""
        placed = len(placement)
        for operands in self.operands:
            if len(operands) != 2:
                continue
            a, b = operands
            if a >= placed or b >= placed:
                return 0
            if not self.graph.has_edge(placement[a], placement[b]):
                distance = self.graph.distance(placement[a], placement[b])
                return 0 if distance is None else distance - 1
        return 0

    def extend_cost(self, cost: Cost, placement: Placement) -> Cost | None:
        """Placement cost after placing the last qubit of ``placement`` or None if it cannot reach a partner."""
        node = placement[-1]
        total = cost[1]
        for i, count in self.earlier[len(placement) - 1]:
            distance = self.graph.distance(placement[i], node)
            if distance is None:
                return None
            total += distance * count
        return cost[0], total

    def successors(self, placement: Placement) -> Iterable[tuple[int, int, Placement]]:
        occupant = {node: i for i, node in enumerate(placement)}
        for u, v in self.edges:
            i = occupant.get(u)
            j = occupant.get(v)
            if i is None and j is None:
                continue
            moved = list(placement)
            if i is not None:
                moved[i] = v
            if j is not None:
                moved[j] = u
            yield u, v, tuple(moved)


def exact_route(
    circuit: Circuit,
    graph: CouplingGraph,
    node_limit: int,
    deadline: float | None = None,
    initial: Mapping[Qubit, int] | None = None,
    upper_bound: int | None = None,
    sink: DebugSink | None = None,
) -> tuple[Route, int]:
    """Find a placement and swap sequence inserting the fewest swaps.

    Every injective placement is a start state unless ``initial`` fixes one. Start placements are generated lazily,
    so only the placements the search reaches are ever built. Among equally cheap solutions, the one whose placement
    has the lowest expected routing cost wins, then the lexically-lowest placement (physical nodes in logical qubit
    order), then the lexically-lowest swap sequence.

    Args:
        circuit: The circuit to map.
        graph: The runtime connectivity graph.
        node_limit: Maximum number of expanded states.
        deadline: Point in time (``time.monotonic()``) after which the search gives up.
        initial: Optional fixed placement.
        upper_bound: Swap count of a known solution. States that cannot do at least as well are pruned.
        sink: Optional debug sink recording search statistics.

    Returns:
        The routed circuit and the number of expanded states.

    Raises:
        SearchExhausted: If the node limit or the deadline is exceeded.
        UnroutableCircuit: If no placement and swap sequence executes every gate.
    """
    search = _Search(circuit, graph)
    qubits = circuit.qubits
    done = len(search.operands)
    progress: tuple[int, Placement] | None = None

    def start(placement: Placement, cost: Cost) -> Entry | None:
        nonlocal progress
        position = search.advance(0, placement)
        if progress is None or position > progress[0]:
            progress = (position, placement)
        estimate = search.estimate(position, placement)
        if estimate is None or (upper_bound is not None and estimate > upper_bound):
            return None
        return estimate, cost, placement, (), position, placement

    queue: list[Entry] = []
    if initial is not None:
        placement = tuple(initial[q] for q in qubits)
        entry = start(placement, placement_cost(circuit, graph, dict(zip(qubits, placement))))
    else:
        entry = start((), (0, 0)) if not qubits else (search.partial_estimate(()), (0, 0), (), (), 0, ())
    if entry is not None:
        queue.append(entry)

    closed: set[tuple[int, Placement]] = set()
    expanded = 0
    while queue:
        _, cost, first, path, position, placement = heapq.heappop(queue)
        complete = len(placement) == search.num_qubits
        if complete:
            state = (position, placement)
            if state in closed:
                continue
            closed.add(state)
            if position == done:
                logger.info("Exact search found %d swaps after expanding %d states.", len(path), expanded)
                if sink is not None:
                    sink.record("exact", expanded=expanded, swaps=len(path))
                return emit_schedule(circuit, graph, dict(zip(qubits, first)), path), expanded

        expanded += 1
        if expanded > node_limit:
            raise SearchExhausted("node_limit", expanded)
        if deadline is not None and time.monotonic() >= deadline:
            raise SearchExhausted("timeout", expanded)

        if not complete:
            used = set(placement)
            for node in graph.nodes:
                if node in used:
                    continue
                extended = (*placement, node)
                extended_cost = search.extend_cost(cost, extended)
                if extended_cost is None:
                    continue
                if len(extended) == search.num_qubits:
                    entry = start(extended, extended_cost)
                else:
                    estimate = search.partial_estimate(extended)
                    entry = None
                    if upper_bound is None or estimate <= upper_bound:
                        entry = (estimate, extended_cost, extended, (), 0, extended)
                if entry is not None:
                    heapq.heappush(queue, entry)
            continue

        for u, v, moved in search.successors(placement):
            next_position = search.advance(position, moved)
            if next_position > progress[0]:
                progress = (next_position, moved)
            estimate = search.estimate(next_position, moved)
            if estimate is None or (next_position, moved) in closed:
                continue
            f = len(path) + 1 + estimate
            if upper_bound is not None and f > upper_bound:
                continue
            heapq.heappush(queue, (f, cost, first, (*path, (position, u, v)), next_position, moved))

    if progress is None:
        # every start placement separates an interacting pair
        gate = next(gate for gate in circuit.gates if gate.is_two_qubit)
        raise UnroutableCircuit(gate.index, gate.name, gate.qubits)
    position, placement = progress
    gate = circuit.gates[position]
    physical = tuple(placement[i] for i in search.operands[position])
    raise UnroutableCircuit(gate.index, gate.name, gate.qubits, physical)
