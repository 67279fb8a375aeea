# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# Copyright (c) 2025 Munich Quantum Software Company GmbH
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Test the JSON form of mapping results and errors."""

from __future__ import annotations

import json

import pytest

from mqt import qmrl
from mqt.qmrl import Architecture, CapacityExceeded, Circuit, MappingResults, ParseError, from_json, to_json
from mqt.qmrl.serialization import error_json, error_payload


@pytest.fixture
def results() -> MappingResults:
    """Return the results of mapping a small circuit that needs one swap."""
    arch = Architecture("line4", range(4), [(0, 1), (1, 2, 0.5), (2, 3)])
    circuit = Circuit.from_gates([("h", ("a",)), ("cx", ("a", "c")), ("cx", ("b", "c"))], qubits=["b"])
    return qmrl.solve(circuit, arch, initial_layout="identity")


def test_json_layout(results: MappingResults) -> None:
    """Test the key order and contents of the JSON form."""
    data = json.loads(to_json(results))
    assert list(data) == ["mapping", "schedule", "cost", "final_mapping"]
    assert data["mapping"] == [
        {"logical": "a", "physical": 0},
        {"logical": "b", "physical": 1},
        {"logical": "c", "physical": 2},
    ]
    assert data["schedule"][0] == {"kind": "gate", "name": "h", "operands": [0], "logical": ["a"], "source_index": 0}
    assert data["schedule"][1] == {"kind": "swap", "name": "swap", "operands": [2, 1]}
    assert data["cost"] == {"schedule_length": 4, "inserted_primitives": 1, "routing_weight": 0.5}
    assert data["final_mapping"] == [
        {"logical": "a", "physical": 0},
        {"logical": "b", "physical": 2},
        {"logical": "c", "physical": 1},
    ]


def test_compact_output(results: MappingResults) -> None:
    """Test that the JSON form contains no insignificant whitespace."""
    text = to_json(results)
    assert " " not in text
    assert "\n" not in text


def test_round_trip(results: MappingResults) -> None:
    """Test that parsing the JSON form reproduces the results."""
    parsed = from_json(to_json(results))
    assert parsed == results
    assert parsed.mapping.remappings == results.mapping.remappings
    assert to_json(parsed) == to_json(results)


def test_round_trip_integer_qubits() -> None:
    """Test the round trip of results on integer qubits with several swaps."""
    arch = Architecture("ring", range(5), [(0, 1), (1, 2), (2, 3), (3, 4), (0, 4)])
    circuit = Circuit.from_gates([("cx", (0, 2)), ("cx", (1, 3)), ("cx", (0, 3)), ("cx", (2, 4))])
    results = qmrl.solve(circuit, arch, mode="sabre")
    assert from_json(to_json(results)) == results


def test_malformed_results() -> None:
    """Test that malformed result documents are rejected."""
    with pytest.raises(ParseError):
        from_json('{"mapping": []}')
    with pytest.raises(ParseError) as exc_info:
        from_json("{")
    assert exc_info.value.line == 1


def test_error_payload() -> None:
    """Test the error document."""
    payload = error_payload(CapacityExceeded(5, 4))
    assert payload == {
        "error": {
            "type": "CapacityExceeded",
            "message": "Circuit requires 5 qubits, but only 4 physical qubits are available.",
            "details": {"required": 5, "available": 4},
        }
    }


def test_parse_error_payload() -> None:
    """Test that parse errors report their location as details."""
    data = json.loads(error_json(ParseError("Duplicate edge (0, 1).", "spec.yaml", 4, 5)))
    assert data["error"]["message"] == "Duplicate edge (0, 1)."
    assert data["error"]["details"] == {"source": "spec.yaml", "line": 4, "column": 5}
    assert "mapping" not in data
