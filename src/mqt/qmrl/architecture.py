# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# Copyright (c) 2025 Munich Quantum Software Company GmbH
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Architecture model: physical qubits, their couplings, and global constraints.

The connectivity graph is kept as a :class:`rustworkx.PyGraph` with stable node indices that are independent of the
node ids used in specifications. Everything derived from the graph (neighbor lists, all-pairs distances, the component
partition) is computed once on construction. Neither class exposes a way to mutate that state afterwards, so a single
instance can be shared by any number of concurrent solver invocations.
"""

from __future__ import annotations

import contextlib
import hashlib
import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeAlias, Union

import rustworkx as rx

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

__all__ = [
    "SUPPORTED_ROUTING_PRIMITIVES",
    "Architecture",
    "CouplingEdge",
    "CouplingGraph",
    "QubitNode",
]


def __dir__() -> list[str]:
    return __all__


with contextlib.suppress(TypeError):
    Graph: TypeAlias = rx.PyGraph[int, float]

EdgeLike: TypeAlias = Union["CouplingEdge", tuple[int, int], tuple[int, int, float]]

#: Routing primitives the solver knows how to insert
SUPPORTED_ROUTING_PRIMITIVES = frozenset({"swap"})


@dataclass(frozen=True)
class QubitNode:
    """A physical qubit.

    Attributes:
        id: Non-negative node id.
        operations: Native operations of this qubit or None to inherit the architecture's global operation set.
        weight: Optional calibration weight.
    """

    id: int
    operations: frozenset[str] | None = None
    weight: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "operations": None if self.operations is None else sorted(self.operations),
            "weight": self.weight,
        }


@dataclass(frozen=True, order=True)
class CouplingEdge:
    """An undirected coupling between two physical qubits, stored with the smaller node id first."""

    u: int
    v: int
    weight: float = 1.0

    def __post_init__(self) -> None:
        if self.u == self.v:
            msg = f"Self-loop on node {self.u} is not a valid coupling."
            raise ValueError(msg)
        if self.u > self.v:
            u, v = self.v, self.u
            object.__setattr__(self, "u", u)
            object.__setattr__(self, "v", v)

    @property
    def nodes(self) -> tuple[int, int]:
        return self.u, self.v

    @classmethod
    def coerce(cls, edge: EdgeLike) -> CouplingEdge:
        """Create an edge from a pair or triple of numbers, or return the edge itself."""
        if isinstance(edge, CouplingEdge):
            return edge
        if len(edge) == 2:
            return cls(int(edge[0]), int(edge[1]))
        return cls(int(edge[0]), int(edge[1]), float(edge[2]))  # type: ignore[misc]


class CouplingGraph:
    """A simple undirected connectivity graph over integer node ids."""

    def __init__(self, nodes: Iterable[int], edges: Iterable[EdgeLike]) -> None:
        """Build the graph and everything derived from it.

        Args:
            nodes: Node ids. Duplicates are ignored.
            edges: Couplings between the given nodes.

        Raises:
            ValueError: If an edge is a self-loop, a duplicate, or references an unknown node.
        """
        self._graph: Graph = rx.PyGraph(multigraph=False)
        self._index: dict[int, int] = {node: self._graph.add_node(node) for node in sorted(set(nodes))}
        self._weights: dict[tuple[int, int], float] = {}
        for item in edges:
            edge = CouplingEdge.coerce(item)
            unknown = [node for node in edge.nodes if node not in self._index]
            if unknown:
                msg = f"Edge {edge.nodes} references unknown node {unknown[0]}."
                raise ValueError(msg)
            if edge.nodes in self._weights:
                msg = f"Duplicate edge {edge.nodes}."
                raise ValueError(msg)
            self._weights[edge.nodes] = edge.weight
            self._graph.add_edge(self._index[edge.u], self._index[edge.v], edge.weight)

        self._neighbors: dict[int, tuple[int, ...]] = {
            node: tuple(sorted(self._graph[i] for i in self._graph.neighbors(index)))
            for node, index in self._index.items()
        }
        self._distances = self.__compute_distances()
        components = rx.connected_components(self._graph)
        self._components: tuple[tuple[int, ...], ...] = tuple(
            sorted(tuple(sorted(self._graph[i] for i in component)) for component in components)
        )

    def __compute_distances(self) -> dict[int, dict[int, int]]:
        """Compute hop distances between all pairs of connected nodes."""
        distances: dict[int, dict[int, int]] = {node: {node: 0} for node in self._index}
        lengths = rx.all_pairs_dijkstra_path_lengths(self._graph, lambda _weight: 1.0)
        for source, targets in lengths.items():
            row = distances[self._graph[source]]
            for target, length in targets.items():
                row[self._graph[target]] = int(length)
        return distances

    @classmethod
    def from_coupling_map(
        cls, coupling_map: Iterable[tuple[int, int]], nodes: Iterable[int] | None = None
    ) -> CouplingGraph:
        """Construct a graph from a (possibly directed) coupling map, merging reversed duplicates.

        Args:
            coupling_map: Iterable of tuples of connected qubits.
            nodes: Node ids. Defaults to the nodes appearing in the coupling map.

        Returns:
            The resulting graph.
        """
        edges = sorted({CouplingEdge(int(u), int(v)).nodes for u, v in coupling_map})
        if nodes is None:
            nodes = {node for edge in edges for node in edge}
        return cls(nodes, edges)

    @property
    def nodes(self) -> tuple[int, ...]:
        return tuple(self._index)

    @property
    def edges(self) -> tuple[CouplingEdge, ...]:
        return tuple(CouplingEdge(u, v, weight) for (u, v), weight in sorted(self._weights.items()))

    @property
    def num_nodes(self) -> int:
        return len(self._index)

    @property
    def components(self) -> tuple[tuple[int, ...], ...]:
        """The connected components, each sorted, ordered by their smallest node id."""
        return self._components

    def is_connected(self) -> bool:
        return len(self._components) == 1

    def __contains__(self, node: object) -> bool:
        return node in self._index

    def __iter__(self) -> Iterator[int]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CouplingGraph):
            return NotImplemented
        return self.nodes == other.nodes and self._weights == other._weights

    def __hash__(self) -> int:
        return hash((self.nodes, tuple(sorted(self._weights.items()))))

    def __repr__(self) -> str:
        return f"CouplingGraph(nodes={list(self.nodes)}, edges={[edge.nodes for edge in self.edges]})"

    def has_edge(self, u: int, v: int) -> bool:
        return (min(u, v), max(u, v)) in self._weights

    def weight(self, u: int, v: int) -> float:
        return self._weights[min(u, v), max(u, v)]

    def neighbors(self, node: int) -> tuple[int, ...]:
        return self._neighbors[node]

    def degree(self, node: int) -> int:
        return len(self._neighbors[node])

    def distance(self, u: int, v: int) -> int | None:
        """Number of edges on a shortest path between two nodes or None if they are disconnected."""
        return self._distances[u].get(v)

    def component_of(self, node: int) -> tuple[int, ...]:
        return next(component for component in self._components if node in component)

    def shortest_path(self, source: int, target: int) -> tuple[int, ...] | None:
        """Return the canonical shortest path between two nodes.

        Among all shortest paths, the one with the lowest sum of node ids is chosen; remaining ties are broken by
        comparing the paths lexicographically.

        Args:
            source: First node of the path.
            target: Last node of the path.

        Returns:
            The nodes on the path including both end points or None if the nodes are disconnected.
        """
        to_target = self._distances[target]
        length = to_target.get(source)
        if length is None:
            return None

        layers: dict[int, list[int]] = {}
        for node, distance in to_target.items():
            if distance <= length:
                layers.setdefault(distance, []).append(node)

        best: dict[int, tuple[int, tuple[int, ...]]] = {target: (target, (target,))}
        for distance in range(1, length + 1):
            for node in layers[distance]:
                candidates = [best[n] for n in self._neighbors[node] if to_target.get(n) == distance - 1]
                total, path = min(candidates)
                best[node] = (total + node, (node, *path))
        return best[source][1]

    def missing_from(self, other: CouplingGraph) -> tuple[list[int], list[tuple[int, int]]]:
        """Nodes and edges of this graph that the other graph lacks."""
        nodes = [node for node in self._index if node not in other]
        edges = [edge for edge in self._weights if not other.has_edge(*edge)]
        return nodes, edges

    def is_subgraph_of(self, other: CouplingGraph) -> bool:
        nodes, edges = self.missing_from(other)
        return not nodes and not edges

    def restricted_to(self, other: CouplingGraph) -> CouplingGraph:
        """Copy of the other graph's topology carrying this graph's edge weights."""
        return CouplingGraph(other.nodes, [CouplingEdge(u, v, self._weights[u, v]) for u, v in other._weights])

    def to_rustworkx(self) -> Graph:
        """A copy of the underlying rustworkx graph. Node payloads are node ids."""
        return self._graph.copy()

    def index_of(self, node: int) -> int:
        return self._index[node]


class Architecture:
    """A quantum architecture: connectivity graph plus global constraints.

    Instances are read-only. They are created once (usually by
    :func:`~mqt.qmrl.load_architecture.load_architecture`) and then bound into a solver.
    """

    def __init__(
        self,
        name: str,
        nodes: Iterable[QubitNode | int],
        edges: Iterable[EdgeLike],
        *,
        operations: Iterable[str] | None = None,
        routing_primitive: str = "swap",
        multi_component: bool = False,
        max_logical_qubits: int | None = None,
    ) -> None:
        """Create an architecture.

        Args:
            name: Name of the architecture.
            nodes: Physical qubits, either as :class:`QubitNode` objects or plain ids.
            edges: Couplings between physical qubits.
            operations: Global native operation set or None if any operation is allowed.
            routing_primitive: The primitive inserted for routing. Only ``"swap"`` is supported.
            multi_component: Whether the connectivity graph may consist of several components.
            max_logical_qubits: Optional limit on the number of logical qubits of circuits mapped to this architecture.

        Raises:
            ValueError: If the architecture violates one of its invariants.
        """
        self._name = name
        self._operations = None if operations is None else frozenset(op.lower() for op in operations)
        self._routing_primitive = routing_primitive.lower()
        self._multi_component = multi_component
        self._max_logical_qubits = max_logical_qubits

        self._nodes: dict[int, QubitNode] = {}
        for item in nodes:
            node = item if isinstance(item, QubitNode) else QubitNode(int(item))
            if node.id in self._nodes:
                msg = f"Duplicate node id {node.id}."
                raise ValueError(msg)
            if node.operations is not None and self._operations is not None:
                unsupported = sorted(node.operations - self._operations)
                if unsupported:
                    msg = f"Node {node.id} lists unsupported operation {unsupported[0]!r}."
                    raise ValueError(msg)
            self._nodes[node.id] = node
        self._nodes = dict(sorted(self._nodes.items()))

        if self._routing_primitive not in SUPPORTED_ROUTING_PRIMITIVES:
            msg = f"Unsupported routing primitive {routing_primitive!r}."
            raise ValueError(msg)
        if not self._nodes:
            msg = "An architecture needs at least one qubit."
            raise ValueError(msg)

        self._graph = CouplingGraph(self._nodes, edges)
        if not self._multi_component and not self._graph.is_connected():
            msg = (
                f"Connectivity graph of {name!r} has {len(self._graph.components)} components, "
                "but the architecture is not marked as multi-component."
            )
            raise ValueError(msg)

    @classmethod
    def from_coupling_map(
        cls, coupling_map: Iterable[tuple[int, int]], num_qubits: int | None = None, name: str = "architecture"
    ) -> Architecture:
        """Construct an architecture from a coupling map given as set of tuples of connected qubits.

        Directed coupling maps are accepted; both directions of a coupling collapse into one edge.

        Args:
            coupling_map: Iterable of tuples of connected qubits.
            num_qubits: Number of qubits. Defaults to one more than the largest qubit in the coupling map.
            name: Name of the architecture.

        Returns:
            The resulting architecture. It is marked as multi-component if its graph is disconnected.
        """
        graph = CouplingGraph.from_coupling_map(coupling_map)
        if num_qubits is None:
            num_qubits = max(graph.nodes, default=-1) + 1
        nodes = range(num_qubits)
        full = CouplingGraph(nodes, graph.edges)
        return cls(name, nodes, full.edges, multi_component=not full.is_connected())

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Architecture:
        """Reconstruct an architecture from the output of :meth:`to_dict`."""
        nodes = [
            QubitNode(
                node["id"],
                None if node.get("operations") is None else frozenset(node["operations"]),
                node.get("weight"),
            )
            for node in data["nodes"]
        ]
        return cls(
            data["name"],
            nodes,
            [tuple(edge) for edge in data["edges"]],
            operations=data.get("operations"),
            routing_primitive=data.get("routing_primitive", "swap"),
            multi_component=data.get("multi_component", False),
            max_logical_qubits=data.get("max_logical_qubits"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Canonical dictionary representation."""
        return {
            "name": self._name,
            "operations": None if self._operations is None else sorted(self._operations),
            "routing_primitive": self._routing_primitive,
            "multi_component": self._multi_component,
            "max_logical_qubits": self._max_logical_qubits,
            "nodes": [node.to_dict() for node in self._nodes.values()],
            "edges": [[edge.u, edge.v, edge.weight] for edge in self._graph.edges],
            "components": [list(component) for component in self._graph.components],
        }

    def to_json(self) -> str:
        """Canonical compact JSON representation."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @property
    def fingerprint(self) -> str:
        """SHA-256 digest of the canonical JSON representation."""
        return hashlib.sha256(self.to_json().encode("utf-8")).hexdigest()

    @property
    def name(self) -> str:
        return self._name

    @property
    def graph(self) -> CouplingGraph:
        return self._graph

    @property
    def nodes(self) -> tuple[QubitNode, ...]:
        return tuple(self._nodes.values())

    @property
    def num_qubits(self) -> int:
        return len(self._nodes)

    @property
    def coupling_map(self) -> set[tuple[int, int]]:
        return {edge.nodes for edge in self._graph.edges}

    @property
    def operations(self) -> frozenset[str] | None:
        return self._operations

    @property
    def routing_primitive(self) -> str:
        return self._routing_primitive

    @property
    def multi_component(self) -> bool:
        return self._multi_component

    @property
    def max_logical_qubits(self) -> int | None:
        return self._max_logical_qubits

    @property
    def components(self) -> tuple[tuple[int, ...], ...]:
        """The component partition of the connectivity graph."""
        return self._graph.components

    def node(self, node_id: int) -> QubitNode:
        return self._nodes[node_id]

    def native_operations(self, node_id: int) -> frozenset[str] | None:
        """Operations available on a node or None if unrestricted."""
        node = self._nodes[node_id]
        return node.operations if node.operations is not None else self._operations

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Architecture):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash(self.fingerprint)

    def __repr__(self) -> str:
        return f"Architecture(name={self._name!r}, num_qubits={self.num_qubits}, edges={len(self._graph.edges)})"
