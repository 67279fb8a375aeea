# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# Copyright (c) 2025 Munich Quantum Software Company GmbH
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Initial placement of logical qubits onto physical nodes.

A placement is judged by the routing it is expected to need: the number of interacting qubit pairs placed in
different components, then the sum of hop distances between interacting qubits weighted by how often they interact.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

import rustworkx as rx

from .circuit import qubit_key

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .architecture import CouplingGraph
    from .circuit import Circuit, Qubit
    from .configuration import Configuration
    from .debug import DebugSink

__all__ = [
    "Cost",
    "heuristic_placement",
    "identity_placement",
    "placement_cost",
]


def __dir__() -> list[str]:
    return __all__


logger = logging.getLogger(__name__)

Cost = tuple[int, int]
Adjacency = dict["Qubit", dict["Qubit", int]]


def _interaction_adjacency(circuit: Circuit) -> Adjacency:
    adjacency: Adjacency = {q: {} for q in circuit.qubits}
    for (a, b), count in circuit.interactions().items():
        adjacency[a][b] = count
        adjacency[b][a] = count
    return adjacency


def _pair_cost(graph: CouplingGraph, u: int, v: int, count: int) -> Cost:
    distance = graph.distance(u, v)
    if distance is None:
        return 1, 0
    return 0, distance * count


def placement_cost(circuit: Circuit, graph: CouplingGraph, placement: Mapping[Qubit, int]) -> Cost:
    """Expected routing cost of a placement.

    Args:
        circuit: The circuit being placed.
        graph: The runtime connectivity graph.
        placement: Physical node of every logical qubit.

    Returns:
        The number of interacting pairs that cannot reach each other and the co-occurrence weighted distance sum.
    """
    unreachable = total = 0
    for (a, b), count in circuit.interactions().items():
        missing, weighted = _pair_cost(graph, placement[a], placement[b], count)
        unreachable += missing
        total += weighted
    return unreachable, total


def identity_placement(circuit: Circuit, graph: CouplingGraph) -> dict[Qubit, int]:
    """Place the sorted logical qubits onto the sorted physical nodes."""
    return dict(zip(circuit.qubits, graph.nodes))


class _Placer:
    """Greedy construction and local search over placements of one circuit."""

    def __init__(self, circuit: Circuit, graph: CouplingGraph, deadline: float | None) -> None:
        self.circuit = circuit
        self.graph = graph
        self.deadline = deadline
        self.adjacency = _interaction_adjacency(circuit)

    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def qubit_cost(self, qubit: Qubit, node: int, placement: Mapping[Qubit, int], skip: Qubit | None = None) -> Cost:
        """Cost of the interactions of one qubit (if it were on ``node``) with all placed partners but ``skip``."""
        unreachable = total = 0
        for partner, count in self.adjacency[qubit].items():
            if partner == skip or partner not in placement:
                continue
            missing, weighted = _pair_cost(self.graph, node, placement[partner], count)
            unreachable += missing
            total += weighted
        return unreachable, total

    def greedy(self) -> dict[Qubit, int]:
        """Place qubits heaviest-first, each on the free node that is cheapest given the qubits placed so far."""
        weight = {q: sum(partners.values()) for q, partners in self.adjacency.items()}
        order = sorted(self.circuit.qubits, key=lambda q: (-weight[q], qubit_key(q)))
        free = set(self.graph.nodes)
        capacity = {component: len(component) for component in self.graph.components}
        placement: dict[Qubit, int] = {}
        for qubit in order:

            def rank(node: int, qubit: Qubit = qubit) -> tuple[int, int, int, int, int]:
                unreachable, total = self.qubit_cost(qubit, node, placement)
                return unreachable, total, -capacity[self.graph.component_of(node)], -self.graph.degree(node), node

            node = min(free, key=rank)
            placement[qubit] = node
            free.remove(node)
            capacity[self.graph.component_of(node)] -= 1
        return placement

    def improve(self, placement: dict[Qubit, int], iterations: int) -> tuple[dict[Qubit, int], int]:
        """Apply best-improvement moves (swap two qubits or move one to a free node) until none improves.

        Returns:
            The improved placement and the number of moves applied.
        """
        placement = dict(placement)
        qubits = list(self.circuit.qubits)
        moves = 0
        while moves < iterations and not self.expired():
            occupied = set(placement.values())
            free = [node for node in self.graph.nodes if node not in occupied]
            best: tuple[Cost, tuple[Qubit, Qubit | None, int]] | None = None
            for i, a in enumerate(qubits):
                pa = placement[a]
                before_a = self.qubit_cost(a, pa, placement)
                for b in qubits[i + 1 :]:
                    pb = placement[b]
                    before = _add(self.qubit_cost(a, pa, placement, b), self.qubit_cost(b, pb, placement, a))
                    after = _add(self.qubit_cost(a, pb, placement, b), self.qubit_cost(b, pa, placement, a))
                    delta = _sub(after, before)
                    if delta < (0, 0) and (best is None or delta < best[0]):
                        best = (delta, (a, b, pb))
                for node in free:
                    delta = _sub(self.qubit_cost(a, node, placement), before_a)
                    if delta < (0, 0) and (best is None or delta < best[0]):
                        best = (delta, (a, None, node))
            if best is None:
                break
            a, b, node = best[1]
            if b is not None:
                placement[a], placement[b] = placement[b], placement[a]
            else:
                placement[a] = node
            moves += 1
        return placement, moves

    def embeddings(self, limit: int, call_limit: int) -> dict[Qubit, int] | None:
        """Lexically-lowest embedding of the interaction graph into the connectivity graph, if one is found."""
        if limit <= 0:
            return None
        qubits = self.circuit.qubits
        interaction: rx.PyGraph = rx.PyGraph(multigraph=False)
        interaction.add_nodes_from(range(len(qubits)))
        index = {q: i for i, q in enumerate(qubits)}
        for a, b in self.circuit.interactions():
            interaction.add_edge(index[a], index[b], None)

        arch = self.graph.to_rustworkx()
        matcher = rx.graph_vf2_mapping(
            arch, interaction, subgraph=True, induced=False, id_order=True, call_limit=call_limit
        )
        best: tuple[int, ...] | None = None
        for found, mapping in enumerate(matcher, start=1):
            candidate = [0] * len(qubits)
            for arch_index, qubit_index in mapping.items():
                candidate[qubit_index] = arch[arch_index]
            if best is None or tuple(candidate) < best:
                best = tuple(candidate)
            if found >= limit or self.expired():
                break
        if best is None:
            return None
        return dict(zip(qubits, best))


def _add(a: Cost, b: Cost) -> Cost:
    return a[0] + b[0], a[1] + b[1]


def _sub(a: Cost, b: Cost) -> Cost:
    return a[0] - b[0], a[1] - b[1]


def heuristic_placement(
    circuit: Circuit,
    graph: CouplingGraph,
    config: Configuration,
    deadline: float | None = None,
    sink: DebugSink | None = None,
) -> dict[Qubit, int]:
    """Find a placement with low expected routing cost.

    Subgraph embeddings of the interaction graph need no routing at all and are tried first. Otherwise, a greedy
    placement is refined by local search.

    Args:
        circuit: The circuit to place.
        graph: The runtime connectivity graph. Must have at least as many nodes as the circuit has qubits.
        config: Search limits.
        deadline: Point in time (``time.monotonic()``) after which the search stops improving.
        sink: Optional debug sink recording the choice.

    Returns:
        Physical node of every logical qubit.
    """
    if not circuit.qubits:
        return {}
    placer = _Placer(circuit, graph, deadline)
    placement = placer.embeddings(config.isomorphism_candidates, config.isomorphism_call_limit)
    strategy = "embedding"
    moves = 0
    if placement is None:
        strategy = "greedy"
        placement, moves = placer.improve(placer.greedy(), config.local_search_iterations)
    cost = placement_cost(circuit, graph, placement)
    logger.info("Placed %d qubits by %s (cost %s, %d local search moves).", len(placement), strategy, cost, moves)
    if sink is not None:
        sink.record(
            "placement",
            strategy=strategy,
            cost=list(cost),
            moves=moves,
            placement=[[q, p] for q, p in placement.items()],
        )
    return placement
