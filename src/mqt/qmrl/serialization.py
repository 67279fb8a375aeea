# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# Copyright (c) 2025 Munich Quantum Software Company GmbH
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Canonical JSON form of mapping results and errors."""

from __future__ import annotations

import json
from typing import Any

from .exceptions import ParseError, QMRError
from .results import MappingResults, ScheduledOperation

__all__ = [
    "error_json",
    "error_payload",
    "from_json",
    "to_dict",
    "to_json",
]


def __dir__() -> list[str]:
    return __all__


_SEPARATORS = (",", ":")


def _assignment(pairs: tuple[tuple[Any, int], ...]) -> list[dict[str, Any]]:
    return [{"logical": logical, "physical": physical} for logical, physical in pairs]


def to_dict(results: MappingResults) -> dict[str, Any]:
    """The canonical dictionary form of mapping results."""
    return {
        "mapping": _assignment(results.mapping.initial),
        "schedule": [op.to_dict() for op in results.schedule],
        "cost": results.cost.to_dict(),
        "final_mapping": _assignment(results.mapping.final),
    }


def to_json(results: MappingResults) -> str:
    """Serialize mapping results to compact canonical JSON.

    The keys appear in the order ``mapping``, ``schedule``, ``cost``, ``final_mapping`` and the schedule is listed in
    emission order, so equal results serialize to identical text.
    """
    return json.dumps(to_dict(results), separators=_SEPARATORS)


def from_json(text: str) -> MappingResults:
    """Parse mapping results from their JSON form.

    Remapping points are reconstructed by replaying the swaps of the schedule.

    Raises:
        ParseError: If the text is not valid result JSON.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(exc.msg, None, exc.lineno, exc.colno) from exc
    try:
        initial = {entry["logical"]: entry["physical"] for entry in data["mapping"]}
        schedule = [
            ScheduledOperation(
                op["kind"],
                op["name"],
                tuple(op["operands"]),
                tuple(op["logical"]) if "logical" in op else None,
                op.get("source_index"),
            )
            for op in data["schedule"]
        ]
        routing_weight = data["cost"]["routing_weight"]
    except (KeyError, TypeError) as exc:
        msg = f"Malformed mapping results: {exc!r}"
        raise ParseError(msg) from exc
    return MappingResults.from_schedule(initial, schedule, routing_weight)


def error_payload(error: BaseException) -> dict[str, Any]:
    """The error document reported instead of results.

    Args:
        error: The error that ended the invocation.

    Returns:
        A mapping with a single ``error`` key holding the error type, message and structured details.
    """
    details = error.details() if isinstance(error, QMRError) else {}
    message = error.message if isinstance(error, ParseError) else str(error)
    return {"error": {"type": type(error).__name__, "message": message, "details": details}}


def error_json(error: BaseException) -> str:
    return json.dumps(error_payload(error), separators=_SEPARATORS)
