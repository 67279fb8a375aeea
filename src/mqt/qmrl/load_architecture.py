# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# Copyright (c) 2025 Munich Quantum Software Company GmbH
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Module for loading architectures."""

from __future__ import annotations

import json
import logging
import re
from os import PathLike
from pathlib import Path
from typing import TYPE_CHECKING, Any

import networkx as nx
import yaml
from pydantic import ValidationError

from .architecture import SUPPORTED_ROUTING_PRIMITIVES, Architecture, CouplingEdge, CouplingGraph, QubitNode
from .exceptions import ParseError
from .schema import ArchitectureSpec

if TYPE_CHECKING:
    from qiskit.providers import Backend

__all__ = [
    "load_architecture",
    "load_coupling_graph",
    "parse_architecture",
]


def __dir__() -> list[str]:
    return __all__


logger = logging.getLogger(__name__)

NodePath = tuple[Any, ...]
Location = tuple[int, int]

_COUNT_LINE = re.compile(r"^\s*(\d+)\s*$")
_EDGE_LINE = re.compile(r"^\s*(\d+)\s+(\d+)\s*$")


def load_architecture(arch: str | PathLike[str] | Architecture | nx.Graph | Backend) -> Architecture:
    """Load an architecture from a specification file, an Architecture, a networkx graph, or a Qiskit backend.

    Args:
        arch: The architecture to load.

    Returns:
        The loaded architecture.

    Raises:
        ParseError: If the specification file cannot be read or is invalid.
        TypeError: If the type of ``arch`` is not supported.
    """
    if isinstance(arch, Architecture):
        return arch
    if isinstance(arch, (str, PathLike)):
        path = Path(arch)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"Cannot read architecture specification: {exc.strerror}"
            raise ParseError(msg, str(path)) from exc
        return parse_architecture(text, source=str(path), name=path.stem)
    if isinstance(arch, nx.Graph):
        return _from_networkx(arch)

    from qiskit.providers import Backend

    if isinstance(arch, Backend):
        from .plugins.qiskit import import_backend

        return import_backend(arch)
    msg = f"Architecture type {type(arch)} not supported."
    raise TypeError(msg)


def parse_architecture(text: str, source: str | None = None, name: str | None = None) -> Architecture:
    """Parse an architecture specification.

    Two formats are understood. A YAML document describing nodes, edges, and constraints, or the plain coupling-map
    format whose first line holds the number of qubits followed by one ``u v`` edge per line.

    Args:
        text: The specification text.
        source: Name of the input used in error locations.
        name: Name used if the specification does not name the architecture itself.

    Returns:
        The validated architecture.

    Raises:
        ParseError: If the specification is malformed or violates a constraint.
    """
    if _is_coupling_map(text):
        return _parse_coupling_map(text, source, name)

    try:
        root = yaml.compose(text, Loader=yaml.SafeLoader)
        data = yaml.safe_load(text)
    except yaml.MarkedYAMLError as exc:
        mark = exc.problem_mark or exc.context_mark
        msg = f"Invalid YAML: {exc.problem or exc.context}"
        if mark is None:
            raise ParseError(msg, source) from exc
        raise ParseError(msg, source, mark.line + 1, mark.column + 1) from exc
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML: {exc}"
        raise ParseError(msg, source) from exc

    if root is None:
        msg = "Empty architecture specification."
        raise ParseError(msg, source, 1, 1)
    marks: dict[NodePath, Location] = {}
    _collect_marks(root, (), marks)

    if not isinstance(data, dict):
        msg = "An architecture specification must be a mapping."
        raise ParseError(msg, source, *_locate(marks, ()))
    try:
        spec = ArchitectureSpec.model_validate(data)
    except ValidationError as exc:
        error = exc.errors()[0]
        where = ".".join(str(part) for part in error["loc"])
        msg = f"{where}: {error['msg']}" if where else error["msg"]
        raise ParseError(msg, source, *_locate(marks, error["loc"])) from exc
    return _build(spec, marks, source, name)


def _collect_marks(node: yaml.Node, path: NodePath, marks: dict[NodePath, Location]) -> None:
    """Record the 1-based start position of every element of a composed YAML document."""
    marks[path] = (node.start_mark.line + 1, node.start_mark.column + 1)
    if isinstance(node, yaml.MappingNode):
        for key, value in node.value:
            _collect_marks(value, (*path, key.value), marks)
    elif isinstance(node, yaml.SequenceNode):
        for i, item in enumerate(node.value):
            _collect_marks(item, (*path, i), marks)


def _locate(marks: dict[NodePath, Location], path: NodePath) -> Location:
    """Position of the innermost recorded element on the given path."""
    for end in range(len(path), -1, -1):
        if tuple(path[:end]) in marks:
            return marks[tuple(path[:end])]
    return 1, 1


def _build(
    spec: ArchitectureSpec, marks: dict[NodePath, Location], source: str | None, name: str | None
) -> Architecture:
    """Check the cross references of a structurally valid specification and build the architecture."""

    def fail(msg: str, *path: Any) -> ParseError:
        return ParseError(msg, source, *_locate(marks, path))

    operations = None if spec.operations is None else frozenset(op.lower() for op in spec.operations)
    if spec.routing_primitive.lower() not in SUPPORTED_ROUTING_PRIMITIVES:
        msg = f"Unsupported routing primitive {spec.routing_primitive!r}."
        raise fail(msg, "routing_primitive")
    if spec.nodes is not None and spec.num_qubits is not None:
        msg = "Specify either 'nodes' or 'num_qubits', not both."
        raise fail(msg, "num_qubits")

    nodes: dict[int, QubitNode] = {}
    if spec.nodes is not None:
        for i, entry in enumerate(spec.nodes):
            if entry.id in nodes:
                msg = f"Duplicate node id {entry.id}."
                raise fail(msg, "nodes", i)
            node_operations = None
            if entry.operations is not None:
                node_operations = frozenset(op.lower() for op in entry.operations)
                for j, op in enumerate(entry.operations):
                    if operations is not None and op.lower() not in operations:
                        msg = f"Node {entry.id} lists unsupported operation {op!r}."
                        raise fail(msg, "nodes", i, "operations", j)
            nodes[entry.id] = QubitNode(entry.id, node_operations, entry.weight)
    elif spec.num_qubits is not None:
        nodes = {i: QubitNode(i) for i in range(spec.num_qubits)}
    implicit_nodes = spec.nodes is None and spec.num_qubits is None

    edges: dict[tuple[int, int], CouplingEdge] = {}
    for j, entry in enumerate(spec.edges):
        if entry.source == entry.target:
            msg = f"Self-loop on node {entry.source}."
            raise fail(msg, "edges", j)
        edge = CouplingEdge(entry.source, entry.target, entry.weight)
        for endpoint in edge.nodes:
            if endpoint not in nodes:
                if not implicit_nodes:
                    msg = f"Edge {edge.nodes} references unknown node {endpoint}."
                    raise fail(msg, "edges", j)
                nodes[endpoint] = QubitNode(endpoint)
        if edge.nodes in edges:
            msg = f"Duplicate edge {edge.nodes}."
            raise fail(msg, "edges", j)
        edges[edge.nodes] = edge

    if not nodes:
        msg = "The architecture has no qubits."
        raise fail(msg)

    arch_name = spec.name or name or (Path(source).stem if source else "architecture")
    try:
        architecture = Architecture(
            arch_name,
            [nodes[node] for node in sorted(nodes)],
            edges.values(),
            operations=operations,
            routing_primitive=spec.routing_primitive,
            multi_component=spec.multi_component,
            max_logical_qubits=spec.max_logical_qubits,
        )
    except ValueError as exc:
        # every other invariant was checked above, so this is the connectivity check
        raise fail(str(exc), "edges") from exc

    if architecture.multi_component:
        logger.info("Architecture %r has components %s", arch_name, [list(c) for c in architecture.components])
    logger.debug(
        "Loaded architecture %r with %d qubits and %d couplings",
        arch_name,
        architecture.num_qubits,
        len(architecture.coupling_map),
    )
    return architecture


def _is_coupling_map(text: str) -> bool:
    for line in text.splitlines():
        stripped = line.split("#", 1)[0].strip()
        if stripped:
            return _COUNT_LINE.match(stripped) is not None
    return False


def _parse_coupling_map(text: str, source: str | None, name: str | None) -> Architecture:
    """Parse the plain coupling-map format (qubit count, then one edge per line).

    The format cannot mark an architecture as multi-component, so its graph must be connected.
    """
    num_qubits = None
    count_line = 1
    coupling_map: list[tuple[int, int]] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        stripped = line.split("#", 1)[0].strip()
        if not stripped:
            continue
        if num_qubits is None:
            num_qubits = int(stripped)
            count_line = lineno
            if num_qubits < 1:
                msg = "The architecture has no qubits."
                raise ParseError(msg, source, lineno, 1)
            continue
        match = _EDGE_LINE.match(stripped)
        if match is None:
            msg = f"Expected an edge 'u v', got {stripped!r}."
            raise ParseError(msg, source, lineno, 1)
        u, v = int(match.group(1)), int(match.group(2))
        for endpoint in (u, v):
            if endpoint >= num_qubits:
                msg = f"Edge ({u}, {v}) references unknown node {endpoint}."
                raise ParseError(msg, source, lineno, 1)
        if u == v:
            msg = f"Self-loop on node {u}."
            raise ParseError(msg, source, lineno, 1)
        coupling_map.append((u, v))

    arch_name = name or (Path(source).stem if source else "architecture")
    nodes = range(num_qubits or 0)
    graph = CouplingGraph.from_coupling_map(coupling_map, nodes)
    try:
        return Architecture(arch_name, nodes, graph.edges)
    except ValueError as exc:
        raise ParseError(str(exc), source, count_line, 1) from exc


def _from_networkx(graph: nx.Graph) -> Architecture:
    """Create an architecture from an undirected networkx graph with integer nodes."""
    if graph.is_directed():
        graph = graph.to_undirected()
    if not all(isinstance(node, int) and node >= 0 for node in graph.nodes):
        msg = "Architecture graphs must use non-negative integer nodes."
        raise TypeError(msg)
    edges = [CouplingEdge(u, v, float(data.get("weight", 1.0))) for u, v, data in graph.edges(data=True)]
    return Architecture(
        graph.name or "architecture",
        sorted(graph.nodes),
        edges,
        multi_component=not nx.is_connected(graph) if graph.number_of_nodes() else False,
    )


def load_coupling_graph(graph: CouplingGraph | str | PathLike[str] | list[Any] | dict[str, Any]) -> CouplingGraph:
    """Load a runtime connectivity graph.

    The graph is given as a CouplingGraph, as parsed JSON data, or as a JSON file. The JSON form is either a list of
    ``[u, v]`` edges or a mapping with an ``edges`` list and an optional ``nodes`` list (for qubits without couplings).
    Both directions of a directed coupling collapse into one edge.

    Args:
        graph: The graph to load.

    Returns:
        The loaded graph.

    Raises:
        ParseError: If the graph cannot be read or is invalid.
        TypeError: If the type of ``graph`` is not supported.
    """
    if isinstance(graph, CouplingGraph):
        return graph
    source = None
    if isinstance(graph, (str, PathLike)):
        path = Path(graph)
        source = str(path)
        try:
            graph = json.loads(path.read_text(encoding="utf-8"))
        except OSError as exc:
            msg = f"Cannot read connectivity graph: {exc.strerror}"
            raise ParseError(msg, source) from exc
        except json.JSONDecodeError as exc:
            raise ParseError(exc.msg, source, exc.lineno, exc.colno) from exc
    if not isinstance(graph, (list, dict)):
        if source is not None:
            msg = "A connectivity graph must be a list of edges or a mapping with 'edges' and 'nodes' lists."
            raise ParseError(msg, source)
        msg = f"Connectivity graph type {type(graph)} not supported."
        raise TypeError(msg)

    data = {"edges": graph} if isinstance(graph, list) else graph
    edges = data.get("edges", [])
    nodes = data.get("nodes", [])
    if not isinstance(edges, list) or not isinstance(nodes, list):
        msg = "A connectivity graph must be a list of edges or a mapping with 'edges' and 'nodes' lists."
        raise ParseError(msg, source)

    coupling_map = []
    for i, edge in enumerate(edges):
        if not (isinstance(edge, list) and len(edge) == 2 and all(_is_node_id(node) for node in edge)):
            msg = f"Edge {i} must be a pair of non-negative integers, got {edge!r}."
            raise ParseError(msg, source)
        if edge[0] == edge[1]:
            msg = f"Edge {i} is a self-loop on node {edge[0]}."
            raise ParseError(msg, source)
        coupling_map.append((edge[0], edge[1]))
    for node in nodes:
        if not _is_node_id(node):
            msg = f"Invalid node {node!r}: nodes are non-negative integers."
            raise ParseError(msg, source)
    all_nodes = set(nodes).union(node for edge in coupling_map for node in edge)
    return CouplingGraph.from_coupling_map(coupling_map, all_nodes)


def _is_node_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0
