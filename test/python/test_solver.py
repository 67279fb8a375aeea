# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# Copyright (c) 2025 Munich Quantum Software Company GmbH
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Test solving mapping problems in all solve modes."""

from __future__ import annotations

import random

import pytest

from mqt import qmrl
from mqt.qmrl import (
    Architecture,
    CapacityExceeded,
    Circuit,
    ConfigurationMismatch,
    DebugSink,
    MappingResults,
    SearchExhausted,
    Solver,
    UnknownSolveMode,
    UnroutableCircuit,
)
from mqt.qmrl.configuration import SolveMode, parse_solve_mode
from mqt.qmrl.layout import Layout

MODES = ["heuristic", "sabre", "exact"]


@pytest.fixture
def line4() -> Architecture:
    """Return a line of four qubits."""
    return Architecture("line4", range(4), [(0, 1), (1, 2), (2, 3)], operations=["cx", "h", "x"])


@pytest.fixture
def grid() -> Architecture:
    """Return a 2x3 grid."""
    return Architecture("grid", range(6), [(0, 1), (1, 2), (3, 4), (4, 5), (0, 3), (1, 4), (2, 5)])


def assert_valid_schedule(results: MappingResults, arch: Architecture, circuit: Circuit) -> None:
    """Replay the schedule and check that it implements the circuit on adjacent qubits."""
    layout = Layout(results.mapping.initial_layout())
    gates = []
    for op in results.schedule:
        if len(op.operands) == 2:
            assert arch.graph.has_edge(*op.operands)
        if op.is_swap:
            layout.swap(*op.operands)
        else:
            assert op.operands == tuple(layout.physical(q) for q in op.logical)
            gates.append((op.name, op.logical, op.source_index))
    assert gates == [(gate.name, gate.qubits, gate.index) for gate in circuit]
    assert results.mapping.final_layout() == layout.as_dict()
    assert results.cost.inserted_primitives == sum(op.is_swap for op in results.schedule)
    assert results.cost.schedule_length == len(results.schedule)


def random_circuit(num_qubits: int, num_gates: int, seed: int) -> Circuit:
    """Return a reproducible random circuit of CNOT and X gates."""
    rng = random.Random(seed)
    gates = []
    for _ in range(num_gates):
        if rng.random() < 0.25:
            gates.append(("x", (rng.randrange(num_qubits),)))
        else:
            gates.append(("cx", tuple(rng.sample(range(num_qubits), 2))))
    return Circuit.from_gates(gates, range(num_qubits))


@pytest.mark.parametrize("mode", MODES)
def test_consecutive_placement_needs_no_swaps(line4: Architecture, mode: str) -> None:
    """Verify that a chain of interactions is placed onto consecutive qubits of a line."""
    circuit = Circuit.from_gates([("cnot", ("a", "b")), ("cnot", ("b", "c"))])
    results = qmrl.solve(circuit, line4, mode=mode)
    assert results.cost.inserted_primitives == 0
    assert results.mapping.initial_layout() == {"a": 0, "b": 1, "c": 2}
    assert [op.name for op in results.schedule] == ["cx", "cx"]
    assert_valid_schedule(results, line4, circuit)


@pytest.mark.parametrize("mode", MODES)
def test_distant_operands_need_minimal_swaps(line4: Architecture, mode: str) -> None:
    """Verify that operands two hops apart are brought together with a single swap."""
    circuit = Circuit.from_gates([("cnot", ("a", "c"))], qubits=["a", "b", "c"])
    results = qmrl.solve(circuit, line4, mode=mode, initial_layout="identity")
    assert results.mapping.initial_layout() == {"a": 0, "b": 1, "c": 2}
    assert results.cost.inserted_primitives == 1
    assert results.schedule[0].is_swap
    assert len(results.mapping.remappings) == 1
    assert results.mapping.remappings[0].position == 0
    assert_valid_schedule(results, line4, circuit)


def test_heuristic_swap_moves_along_shortest_path(line4: Architecture) -> None:
    """Verify the swaps inserted for operands at the ends of a line."""
    circuit = Circuit.from_gates([("cx", (0, 3))], qubits=range(4))
    results = qmrl.solve(circuit, line4, initial_layout={0: 0, 1: 1, 2: 2, 3: 3})
    swaps = [op.operands for op in results.schedule if op.is_swap]
    assert swaps == [(3, 2), (2, 1)]
    assert results.schedule[-1].operands == (0, 1)
    assert results.mapping.final_layout() == {0: 0, 1: 2, 2: 3, 3: 1}


def test_lookahead_chooses_meeting_point(line4: Architecture) -> None:
    """Verify that upcoming gates decide which operand is moved."""
    circuit = Circuit.from_gates([("cx", (0, 2)), ("cx", (2, 3))], qubits=[1, 3])
    results = qmrl.solve(circuit, line4, initial_layout="identity")
    swaps = [op.operands for op in results.schedule if op.is_swap]
    assert swaps == [(0, 1)]
    assert results.cost.inserted_primitives == 1
    assert_valid_schedule(results, line4, circuit)


def test_capacity_exceeded(line4: Architecture) -> None:
    """Verify that a circuit with more qubits than the architecture is rejected."""
    circuit = Circuit.from_gates([("cx", (0, 1)), ("cx", (2, 3)), ("x", (4,))])
    with pytest.raises(CapacityExceeded) as exc_info:
        qmrl.solve(circuit, line4)
    assert exc_info.value.required == 5
    assert exc_info.value.available == 4


def test_max_logical_qubits() -> None:
    """Verify that the architecture's logical qubit limit is enforced."""
    arch = Architecture("limited", range(4), [(0, 1), (1, 2), (2, 3)], max_logical_qubits=2)
    with pytest.raises(CapacityExceeded):
        qmrl.solve(Circuit.from_gates([("cx", (0, 1)), ("cx", (1, 2))]), arch)


@pytest.mark.parametrize("mode", MODES)
def test_deterministic(grid: Architecture, mode: str) -> None:
    """Verify that identical inputs produce identical output."""
    circuit = random_circuit(4, 8, seed=1)
    first = qmrl.to_json(qmrl.solve(circuit, grid, mode=mode))
    second = qmrl.to_json(qmrl.solve(circuit, grid, mode=mode))
    assert first == second


@pytest.mark.parametrize("seed", range(5))
def test_exact_never_worse_than_heuristic(grid: Architecture, seed: int) -> None:
    """Verify that the exact mode inserts at most as many swaps as the heuristic modes."""
    circuit = random_circuit(4, 8, seed)
    heuristic = qmrl.solve(circuit, grid, mode="heuristic")
    sabre = qmrl.solve(circuit, grid, mode="sabre")
    exact = qmrl.solve(circuit, grid, mode="exact")
    for results in (heuristic, sabre, exact):
        assert_valid_schedule(results, grid, circuit)
    assert sabre.swaps <= heuristic.swaps
    assert exact.swaps <= min(heuristic.swaps, sabre.swaps)


def test_sabre_statistics(grid: Architecture) -> None:
    """Verify that sabre mode runs the configured number of bidirectional passes."""
    circuit = random_circuit(5, 10, seed=3)
    results = qmrl.solve(circuit, grid, mode="--sabre", bidirectional_passes=2)
    assert results.statistics["mode"] == "sabre"
    assert results.statistics["passes"] == 2


def test_runtime_subgraph(line4: Architecture) -> None:
    """Verify that a runtime graph restricts the physical qubits used."""
    circuit = Circuit.from_gates([("cx", (0, 1)), ("cx", (1, 2)), ("cx", (0, 2))])
    results = qmrl.solve(circuit, line4, coupling=[[1, 2], [2, 3]])
    used = {p for op in results.schedule for p in op.operands}
    assert used <= {1, 2, 3}
    assert results.cost.inserted_primitives == 1


def test_runtime_graph_mismatch(line4: Architecture) -> None:
    """Verify that a runtime graph with unknown couplings is rejected."""
    circuit = Circuit.from_gates([("cx", (0, 1))])
    with pytest.raises(ConfigurationMismatch, match=r"\(0, 3\)"):
        qmrl.solve(circuit, line4, coupling=[[0, 1], [0, 3]])
    with pytest.raises(ConfigurationMismatch, match="nodes"):
        qmrl.solve(circuit, line4, coupling={"nodes": [0, 1, 9], "edges": [[0, 1]]})


def test_unsupported_operation(line4: Architecture) -> None:
    """Verify that operations outside the global operation set are rejected."""
    circuit = Circuit.from_gates([("rz", (0,)), ("cx", (0, 1))])
    with pytest.raises(ConfigurationMismatch, match="rz"):
        qmrl.solve(circuit, line4)


@pytest.mark.parametrize("mode", MODES)
def test_unroutable_circuit(mode: str) -> None:
    """Verify that interactions across components are reported as unroutable."""
    arch = Architecture("pairs", range(4), [(0, 1), (2, 3)], multi_component=True)
    circuit = Circuit.from_gates([("cx", ("a", "b")), ("cx", ("b", "c")), ("cx", ("a", "c"))])
    with pytest.raises(UnroutableCircuit) as exc_info:
        qmrl.solve(circuit, arch, mode=mode)
    assert exc_info.value.name == "cx"
    assert exc_info.value.index in {1, 2}


def test_multi_component_routing() -> None:
    """Verify that independent interaction groups are placed into separate components."""
    arch = Architecture("pairs", range(4), [(0, 1), (2, 3)], multi_component=True)
    circuit = Circuit.from_gates([("cx", (0, 1)), ("cx", (2, 3)), ("cx", (1, 0))])
    for mode in MODES:
        results = qmrl.solve(circuit, arch, mode=mode)
        assert results.cost.inserted_primitives == 0
        assert_valid_schedule(results, arch, circuit)


def test_unknown_solve_mode(line4: Architecture) -> None:
    """Verify that unknown solve modes are rejected before anything else is checked."""
    too_large = Circuit.from_gates([("cx", (i, i + 1)) for i in range(6)])
    with pytest.raises(UnknownSolveMode, match="fastest"):
        qmrl.solve(too_large, line4, mode="fastest")


@pytest.mark.parametrize(
    ("token", "mode"),
    [
        ("exact", SolveMode.exact),
        ("--exact", SolveMode.exact),
        ("HEURISTIC", SolveMode.heuristic),
        ("--onepass", SolveMode.heuristic),
        ("--sabre", SolveMode.sabre),
    ],
)
def test_parse_solve_mode(token: str, mode: SolveMode) -> None:
    """Verify the accepted spellings of solve modes."""
    assert parse_solve_mode(token) is mode


def test_search_exhausted(line4: Architecture) -> None:
    """Verify that the exact search respects its node limit."""
    circuit = Circuit.from_gates([("cx", (0, 2)), ("cx", (1, 2))])
    with pytest.raises(SearchExhausted) as exc_info:
        qmrl.solve(circuit, line4, mode="exact", exact_node_limit=1)
    assert exc_info.value.reason == "node_limit"

    with pytest.raises(SearchExhausted) as exc_info:
        qmrl.solve(
            Circuit.from_gates([("cx", (0, 2))], qubits=[1]),
            line4,
            mode="exact",
            initial_layout="identity",
            timeout=1e-9,
        )
    assert exc_info.value.reason == "timeout"


def test_exact_mode_on_large_device() -> None:
    """Verify that the exact search only builds the start placements it needs."""
    line27 = Architecture("line27", range(27), [(i, i + 1) for i in range(26)])
    circuit = Circuit.from_gates([("cx", ("a", "b")), ("cx", ("b", "c")), ("cx", ("c", "d")), ("cx", ("d", "e"))])
    results = qmrl.solve(circuit, line27, mode="exact", exact_node_limit=1000)
    assert results.swaps == 0
    assert results.mapping.initial_layout() == {"a": 0, "b": 1, "c": 2, "d": 3, "e": 4}
    assert 0 < results.statistics["expanded"] <= 1000
    assert results.statistics["upper_bound"] == 0
    assert_valid_schedule(results, line27, circuit)


def test_exact_mode_skips_split_placements() -> None:
    """Verify that placements separating interacting qubits into different components are never searched."""
    arch = Architecture("pairs", range(6), [(0, 1), (2, 3), (3, 4), (4, 5)], multi_component=True)
    circuit = Circuit.from_gates([("cx", (0, 1)), ("cx", (1, 2)), ("cx", (0, 2))])
    results = qmrl.solve(circuit, arch, mode="exact")
    assert results.swaps == 1
    assert set(results.mapping.initial_layout().values()) <= {2, 3, 4, 5}
    assert_valid_schedule(results, arch, circuit)


@pytest.mark.parametrize(
    "layout",
    [{"a": 0}, {"a": 0, "b": 0}, {"a": 0, "b": 7}, {"a": 0, "b": 1, "z": 2}, "random"],
)
def test_invalid_initial_layout(line4: Architecture, layout: object) -> None:
    """Verify that incomplete or inconsistent initial layouts are rejected."""
    circuit = Circuit.from_gates([("cx", ("a", "b"))])
    with pytest.raises(ConfigurationMismatch):
        qmrl.solve(circuit, line4, initial_layout=layout)  # type: ignore[arg-type]


def test_routing_weight() -> None:
    """Verify that the routing weight sums the weights of the couplings swapped on."""
    arch = Architecture("weighted", range(3), [(0, 1, 0.5), (1, 2, 2.0)])
    circuit = Circuit.from_gates([("cx", (0, 2))], qubits=[1])
    results = qmrl.solve(circuit, arch, initial_layout="identity")
    assert results.cost.routing_weight == 2.0


def test_empty_circuit(line4: Architecture) -> None:
    """Verify that a circuit without gates maps to an empty schedule."""
    for mode in MODES:
        results = qmrl.solve(Circuit([]), line4, mode=mode)
        assert results.schedule == ()
        assert results.mapping.initial == ()


def test_solver_reuse(line4: Architecture) -> None:
    """Verify that one solver serves several independent invocations."""
    solver = Solver(line4)
    circuit = Circuit.from_gates([("cx", (0, 2)), ("h", (1,))])
    assert solver.solve(circuit) == solver.solve(circuit)
    assert solver.solve(circuit, mode="exact").swaps <= solver.solve(circuit).swaps


def test_debug_sink_records_events(line4: Architecture) -> None:
    """Verify that the solving process is traced to a debug sink."""
    circuit = Circuit.from_gates([("cx", (0, 2))], qubits=[1])
    with DebugSink() as sink:
        qmrl.solve(circuit, line4, initial_layout="identity", sink=sink)
        events = [event["event"] for event in sink.events()]
    assert events == ["swaps", "result"]
    assert sink.path is None


def test_layout_swap() -> None:
    """Verify swaps between occupied and free physical qubits."""
    layout = Layout({"a": 0, "b": 1})
    layout.swap(1, 2)
    assert layout.as_dict() == {"a": 0, "b": 2}
    assert layout.logical(1) is None
    layout.swap(0, 2)
    assert layout.as_dict() == {"a": 2, "b": 0}
    with pytest.raises(ValueError, match="injective"):
        Layout({"a": 0, "b": 0})
