# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# Copyright (c) 2025 Munich Quantum Software Company GmbH
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Solver configuration and solve modes."""

from __future__ import annotations

import json
import logging
import os
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import ParseError, UnknownSolveMode

if TYPE_CHECKING:
    from os import PathLike

__all__ = [
    "CONFIG_ENV_VAR",
    "Configuration",
    "SolveMode",
    "load_configuration",
    "parse_solve_mode",
]


def __dir__() -> list[str]:
    return __all__


logger = logging.getLogger(__name__)

#: Environment variable naming a configuration file
CONFIG_ENV_VAR = "QMRL_CONFIG"


class SolveMode(str, Enum):
    """The search strategy used to solve a mapping problem."""

    exact = "exact"
    heuristic = "heuristic"
    sabre = "sabre"


#: Spellings accepted for solve modes besides their names
MODE_ALIASES = {"onepass": SolveMode.heuristic}


def parse_solve_mode(token: str | SolveMode) -> SolveMode:
    """Resolve a solve mode token such as ``"exact"`` or ``"--sabre"``.

    Args:
        token: The mode name, optionally prefixed with dashes.

    Returns:
        The solve mode.

    Raises:
        UnknownSolveMode: If the token names no solve mode.
    """
    if isinstance(token, SolveMode):
        return token
    name = str(token).lstrip("-").lower()
    if name in MODE_ALIASES:
        return MODE_ALIASES[name]
    try:
        return SolveMode(name)
    except ValueError:
        known = [mode.value for mode in SolveMode] + sorted(MODE_ALIASES)
        raise UnknownSolveMode(str(token), known) from None


class Configuration(BaseModel):
    """Tuning knobs of the solver.

    Attributes:
        lookaheads: Number of upcoming two-qubit gates considered when routing an operation.
        lookahead_factor: Rate at which the contribution of later gates to the lookahead decreases.
        local_search_iterations: Maximum number of improving moves during heuristic placement.
        isomorphism_candidates: Maximum number of subgraph embeddings compared during heuristic placement.
        isomorphism_call_limit: Bound on the internal state of the subgraph isomorphism search.
        bidirectional_passes: Number of forward/backward routing passes in sabre mode.
        exact_node_limit: Maximum number of search nodes expanded in exact mode.
        timeout: Time limit in seconds or None for no limit.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    lookaheads: int = Field(default=15, ge=0)
    lookahead_factor: float = Field(default=0.5, ge=0, le=1)
    local_search_iterations: int = Field(default=1000, ge=0)
    isomorphism_candidates: int = Field(default=64, ge=0)
    isomorphism_call_limit: int = Field(default=100000, ge=1)
    bidirectional_passes: int = Field(default=3, ge=0)
    exact_node_limit: int = Field(default=1000000, ge=1)
    timeout: Optional[float] = Field(default=None, gt=0)


def load_configuration(path: str | PathLike[str] | None = None) -> Configuration:
    """Load a configuration from a JSON file.

    Without a path, the file named by the ``QMRL_CONFIG`` environment variable is used. Without either, the defaults
    are returned.

    Raises:
        ParseError: If the file cannot be read or contains invalid settings.
    """
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR) or None
        if path is None:
            return Configuration()
    path = Path(path)
    source = str(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        msg = f"Cannot read configuration: {exc.strerror}"
        raise ParseError(msg, source) from exc
    except json.JSONDecodeError as exc:
        raise ParseError(exc.msg, source, exc.lineno, exc.colno) from exc
    if not isinstance(data, dict):
        msg = "A configuration must be a JSON object."
        raise ParseError(msg, source)
    try:
        config = Configuration.model_validate(data)
    except ValidationError as exc:
        error = exc.errors()[0]
        where = ".".join(str(part) for part in error["loc"])
        msg = f"{where}: {error['msg']}"
        raise ParseError(msg, source) from exc
    logger.debug("Loaded configuration from %s: %s", source, config)
    return config
