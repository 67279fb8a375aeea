# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# Copyright (c) 2025 Munich Quantum Software Company GmbH
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Main entry point for solving qubit mapping and routing problems."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, Union

from .circuit import load_circuit
from .configuration import Configuration, SolveMode, parse_solve_mode
from .exact import exact_route
from .exceptions import CapacityExceeded, ConfigurationMismatch
from .load_architecture import load_architecture, load_coupling_graph
from .placement import heuristic_placement, identity_placement
from .results import MappingResults
from .routing import route

if TYPE_CHECKING:
    from collections.abc import Mapping
    from os import PathLike

    import networkx as nx
    from qiskit.circuit import QuantumCircuit
    from qiskit.providers import Backend

    from .architecture import Architecture, CouplingGraph
    from .circuit import Circuit, Qubit
    from .debug import DebugSink
    from .routing import Route

    CircuitInputType = Union[Circuit, QuantumCircuit, str, PathLike[str], dict[str, Any], list[Any]]
    GraphInputType = Union[CouplingGraph, str, PathLike[str], list[Any], dict[str, Any], None]
    LayoutInputType = Union[str, Mapping[Qubit, int]]

__all__ = [
    "Solver",
    "solve",
]


def __dir__() -> list[str]:
    return __all__


logger = logging.getLogger(__name__)


class Solver:
    """Solves mapping problems for one architecture.

    The architecture is read-only, so one solver may serve independent invocations concurrently.
    """

    def __init__(self, architecture: Architecture, configuration: Configuration | None = None) -> None:
        self.architecture = architecture
        self.configuration = configuration if configuration is not None else Configuration()

    def __repr__(self) -> str:
        return f"Solver(architecture={self.architecture.name!r})"

    def runtime_graph(self, coupling: GraphInputType = None) -> CouplingGraph:
        """Validate a runtime connectivity graph against the embedded one.

        The result carries the embedded edge weights. If it equals the embedded graph, the embedded graph (and its
        precomputed distances) is returned.

        Raises:
            ConfigurationMismatch: If the runtime graph has nodes or edges the embedded graph lacks.
        """
        embedded = self.architecture.graph
        if coupling is None:
            return embedded
        runtime = load_coupling_graph(coupling)
        nodes, edges = runtime.missing_from(embedded)
        if nodes or edges:
            parts = []
            if nodes:
                parts.append(f"nodes {nodes}")
            if edges:
                parts.append(f"edges {edges}")
            msg = (
                f"The runtime connectivity graph is not a subgraph of architecture {self.architecture.name!r}: "
                f"unknown {' and '.join(parts)}."
            )
            raise ConfigurationMismatch(msg)
        if runtime.nodes == embedded.nodes and len(runtime.edges) == len(embedded.edges):
            return embedded
        return embedded.restricted_to(runtime)

    def solve(
        self,
        circ: CircuitInputType,
        coupling: GraphInputType = None,
        mode: str | SolveMode = "heuristic",
        *,
        initial_layout: LayoutInputType = "dynamic",
        timeout: float | None = None,
        sink: DebugSink | None = None,
    ) -> MappingResults:
        """Map a circuit onto the architecture.

        Args:
            circ: The circuit to map.
            coupling: The runtime connectivity graph. Defaults to None, in which case the embedded graph is used.
            mode: The solve mode. Either "heuristic", "exact" or "sabre". Defaults to "heuristic".
            initial_layout: "dynamic" to search for a placement, "identity" to place the sorted logical qubits onto the
                sorted physical nodes, or an explicit mapping of logical qubits to physical nodes. Defaults to
                "dynamic".
            timeout: Time limit in seconds. Defaults to the configured timeout.
            sink: A DebugSink recording the solving process. Defaults to None.

        Returns:
            The mapping, schedule and cost.

        Raises:
            UnknownSolveMode: If the mode is not known.
            ConfigurationMismatch: If the runtime inputs do not fit the architecture.
            CapacityExceeded: If the circuit needs more qubits than available.
            UnroutableCircuit: If an operation cannot be made executable.
            SearchExhausted: If the exact search exceeds its limits.
        """
        solve_mode = parse_solve_mode(mode)
        graph = self.runtime_graph(coupling)
        circuit = load_circuit(circ)
        self._check_operations(circuit)
        self._check_capacity(circuit, graph)
        fixed = self._fixed_layout(circuit, graph, initial_layout)

        config = self.configuration
        timeout = config.timeout if timeout is None else timeout
        start = time.monotonic()
        deadline = None if timeout is None else start + timeout
        logger.info(
            "Solving %r (%d qubits, %d gates) on %r in %s mode.",
            circuit.name or "circuit",
            circuit.num_qubits,
            len(circuit),
            self.architecture.name,
            solve_mode.value,
        )

        statistics: dict[str, Any] = {"mode": solve_mode.value}
        if solve_mode is SolveMode.exact:
            placement = fixed if fixed is not None else heuristic_placement(circuit, graph, config, deadline)
            bound = route(circuit, graph, placement, config).swaps
            logger.debug("Exact search bounded by %d swaps.", bound)
            routed, expanded = exact_route(circuit, graph, config.exact_node_limit, deadline, fixed, bound, sink)
            statistics["expanded"] = expanded
            statistics["upper_bound"] = bound
        else:
            placement = fixed if fixed is not None else heuristic_placement(circuit, graph, config, deadline, sink)
            routed = route(circuit, graph, placement, config, sink)
            if solve_mode is SolveMode.sabre and fixed is None:
                routed, passes = self._bidirectional(circuit, graph, routed, deadline, sink)
                statistics["passes"] = passes
        statistics["time"] = time.monotonic() - start

        results = MappingResults.from_schedule(routed.initial, routed.schedule, routed.weight, statistics)
        logger.info("Inserted %d swaps (%d operations).", results.swaps, results.cost.schedule_length)
        if sink is not None:
            sink.record("result", mode=solve_mode.value, swaps=results.swaps, length=results.cost.schedule_length)
        return results

    def _bidirectional(
        self, circuit: Circuit, graph: CouplingGraph, first: Route, deadline: float | None, sink: DebugSink | None
    ) -> tuple[Route, int]:
        """Refine the placement by routing forwards and backwards, keeping the forward result with fewest swaps."""
        config = self.configuration
        backward_circuit = circuit.reversed()
        best = first
        placement = first.final.as_dict()
        passes = 0
        for _ in range(config.bidirectional_passes):
            if deadline is not None and time.monotonic() >= deadline:
                break
            backward = route(backward_circuit, graph, placement, config)
            forward = route(circuit, graph, backward.final.as_dict(), config)
            passes += 1
            logger.debug("Bidirectional pass %d: %d swaps.", passes, forward.swaps)
            if sink is not None:
                sink.record("pass", number=passes, swaps=forward.swaps)
            if forward.swaps < best.swaps:
                best = forward
            placement = forward.final.as_dict()
        return best, passes

    def _check_operations(self, circuit: Circuit) -> None:
        allowed = self.architecture.operations
        if allowed is None:
            return
        unsupported = sorted(circuit.operations - allowed)
        if unsupported:
            msg = (
                f"Architecture {self.architecture.name!r} does not support the operations "
                f"{', '.join(unsupported)} used by the circuit."
            )
            raise ConfigurationMismatch(msg)

    def _check_capacity(self, circuit: Circuit, graph: CouplingGraph) -> None:
        available = graph.num_nodes
        if self.architecture.max_logical_qubits is not None:
            available = min(available, self.architecture.max_logical_qubits)
        if circuit.num_qubits > available:
            raise CapacityExceeded(circuit.num_qubits, available)

    @staticmethod
    def _fixed_layout(
        circuit: Circuit, graph: CouplingGraph, initial_layout: LayoutInputType
    ) -> dict[Qubit, int] | None:
        """The placement requested by ``initial_layout`` or None if a placement should be searched for."""
        if isinstance(initial_layout, str):
            if initial_layout == "dynamic":
                return None
            if initial_layout == "identity":
                return identity_placement(circuit, graph)
            msg = f"Unknown initial layout {initial_layout!r}. Expected 'dynamic', 'identity' or a mapping."
            raise ConfigurationMismatch(msg)

        layout = dict(initial_layout)
        missing = [q for q in circuit.qubits if q not in layout]
        if missing:
            msg = f"The initial layout does not place the qubits {missing}."
            raise ConfigurationMismatch(msg)
        unknown = [q for q in layout if q not in circuit.qubits]
        if unknown:
            msg = f"The initial layout places qubits {unknown} that the circuit does not use."
            raise ConfigurationMismatch(msg)
        invalid = sorted({p for p in layout.values() if p not in graph})
        if invalid:
            msg = f"The initial layout uses nodes {invalid} that are not part of the runtime connectivity graph."
            raise ConfigurationMismatch(msg)
        if len(set(layout.values())) != len(layout):
            msg = "The initial layout places several qubits on the same node."
            raise ConfigurationMismatch(msg)
        return {q: layout[q] for q in circuit.qubits}


def solve(
    circ: CircuitInputType,
    arch: str | PathLike[str] | Architecture | nx.Graph | Backend,
    coupling: GraphInputType = None,
    mode: str | SolveMode = "heuristic",
    initial_layout: LayoutInputType = "dynamic",
    lookaheads: int | None = None,
    lookahead_factor: float | None = None,
    local_search_iterations: int | None = None,
    isomorphism_candidates: int | None = None,
    isomorphism_call_limit: int | None = None,
    bidirectional_passes: int | None = None,
    exact_node_limit: int | None = None,
    timeout: float | None = None,
    configuration: Configuration | None = None,
    sink: DebugSink | None = None,
) -> MappingResults:
    """Interface to the MQT QMRL solver for mapping quantum circuits.

    Settings left at None keep the value of ``configuration`` (or its default).

    Args:
        circ: The circuit to map.
        arch: The architecture to map to.
        coupling: The runtime connectivity graph or None to use the whole architecture. Defaults to None.
        mode: The solve mode. Either "heuristic", "exact" or "sabre". Defaults to "heuristic".
        initial_layout: The initial layout to use. Either "dynamic", "identity" or an explicit mapping. Defaults to
            "dynamic".
        lookaheads: The number of upcoming two-qubit gates considered while routing.
        lookahead_factor: The rate at which the contribution of later gates to the lookahead decreases.
        local_search_iterations: The maximum number of local search moves during placement.
        isomorphism_candidates: The maximum number of subgraph embeddings compared during placement.
        isomorphism_call_limit: The bound on the subgraph isomorphism search.
        bidirectional_passes: The number of forward/backward passes in sabre mode.
        exact_node_limit: The maximum number of states expanded in exact mode.
        timeout: The time limit in seconds.
        configuration: Base configuration. Defaults to None, in which case the default configuration is used.
        sink: A DebugSink recording the solving process. Defaults to None.

    Returns:
        The mapping results.
    """
    config = configuration.model_copy() if configuration is not None else Configuration()
    overrides = {
        "lookaheads": lookaheads,
        "lookahead_factor": lookahead_factor,
        "local_search_iterations": local_search_iterations,
        "isomorphism_candidates": isomorphism_candidates,
        "isomorphism_call_limit": isomorphism_call_limit,
        "bidirectional_passes": bidirectional_passes,
        "exact_node_limit": exact_node_limit,
        "timeout": timeout,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(config, name, value)

    architecture = load_architecture(arch)
    solver = Solver(architecture, config)
    return solver.solve(circ, coupling, mode, initial_layout=initial_layout, sink=sink)
