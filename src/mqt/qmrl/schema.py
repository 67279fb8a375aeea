# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# Copyright (c) 2025 Munich Quantum Software Company GmbH
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Structural schema of architecture specification documents.

Only the shape of a document is checked here. Cross references (unknown nodes, duplicate ids, connectivity) are
validated by :mod:`mqt.qmrl.load_architecture`, which knows where each element sits in the source text.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

__all__ = [
    "ArchitectureSpec",
    "EdgeSpec",
    "NodeSpec",
]


def __dir__() -> list[str]:
    return __all__


class StrictModel(BaseModel):
    """Base model rejecting unknown keys."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class NodeSpec(StrictModel):
    """A physical qubit entry."""

    id: StrictInt = Field(ge=0)
    operations: Optional[list[str]] = None
    weight: Optional[float] = None


class EdgeSpec(StrictModel):
    """A coupling entry."""

    source: StrictInt = Field(ge=0)
    target: StrictInt = Field(ge=0)
    weight: float = Field(default=1.0, gt=0)


class ArchitectureSpec(StrictModel):
    """A complete architecture specification document."""

    name: Optional[str] = None
    operations: Optional[list[str]] = None
    routing_primitive: str = "swap"
    multi_component: bool = False
    max_logical_qubits: Optional[StrictInt] = Field(default=None, ge=1)
    num_qubits: Optional[StrictInt] = Field(default=None, ge=1)
    nodes: Optional[list[NodeSpec]] = None
    edges: list[EdgeSpec] = Field(default_factory=list)

    @field_validator("nodes", mode="before")
    @classmethod
    def _expand_bare_ids(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [{"id": item} if isinstance(item, int) and not isinstance(item, bool) else item for item in value]
        return value

    @field_validator("edges", mode="before")
    @classmethod
    def _expand_pairs(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        expanded = []
        for item in value:
            if isinstance(item, (list, tuple)) and len(item) in {2, 3}:
                entry = {"source": item[0], "target": item[1]}
                if len(item) == 3:
                    entry["weight"] = item[2]
                expanded.append(entry)
            else:
                expanded.append(item)
        return expanded
