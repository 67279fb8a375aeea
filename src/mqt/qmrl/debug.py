# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# Copyright (c) 2025 Munich Quantum Software Company GmbH
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""A sink collecting the intermediate model and a trace of the solving process."""

from __future__ import annotations

import json
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import types

    from .architecture import Architecture

__all__ = [
    "DebugSink",
]


def __dir__() -> list[str]:
    return __all__


class DebugSink:
    """Writes debug data (the intermediate model and trace events) to a directory."""

    MODEL_FILE = "model.json"
    TRACE_FILE = "trace.jsonl"

    def __init__(self, path: str | Path | None = None) -> None:
        """Collect debug data in a directory.

        Args:
            path: Directory in which all data is written. It is created if necessary. Defaults to None, in which case
                a temporary directory is created and removed again on :meth:`close`.
        """
        if path is not None:
            self.tmp_dir: TemporaryDirectory[str] | None = None
            self.path: Path | None = Path(path)
            self.path.mkdir(parents=True, exist_ok=True)
        else:
            self.tmp_dir = TemporaryDirectory()
            self.path = Path(self.tmp_dir.name)

    def __enter__(self) -> DebugSink:
        """Enables the use of DebugSink in a with statement."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: types.TracebackType | None,
    ) -> None:
        """Closes the DebugSink after a with statement."""
        self.close()

    def close(self) -> None:
        """Cleans up the directory, if it was temporarily created."""
        if self.tmp_dir is not None:
            self.tmp_dir.cleanup()
            self.tmp_dir = None
            self.path = None

    def _file(self, name: str) -> Path:
        if self.path is None:
            msg = "The debug sink has been closed."
            raise RuntimeError(msg)
        return self.path / name

    def write_model(self, architecture: Architecture) -> Path:
        """Write the canonical form of an architecture model."""
        target = self._file(self.MODEL_FILE)
        target.write_text(json.dumps(architecture.to_dict(), indent=2) + "\n", encoding="utf-8")
        return target

    def record(self, event: str, **data: Any) -> None:
        """Append one event to the trace."""
        with self._file(self.TRACE_FILE).open("a", encoding="utf-8") as f:
            f.write(json.dumps({"event": event, **data}, separators=(",", ":")) + "\n")

    def events(self) -> list[dict[str, Any]]:
        """All events recorded so far."""
        trace = self._file(self.TRACE_FILE)
        if not trace.exists():
            return []
        with trace.open(encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]
