"""JSON file persistence for conversation watermarks."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from slack_monitor.models import WatermarkState

LOGGER = logging.getLogger(__name__)

DEFAULT_STATE_PATH = Path.home() / ".slack-monitor" / "state.json"

_STATE_KEY = "last_checked"
_LEGACY_STATE_KEY = "LastChecked"


class WatermarkStore:
    """Loads and atomically saves the watermark map as indented JSON."""

    def __init__(self, path: Path = DEFAULT_STATE_PATH) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> WatermarkState:
        """Read persisted watermarks, or start fresh when no file exists."""

        if not self._path.exists():
            LOGGER.info("No existing state file found, creating new state")
            return WatermarkState()

        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Failed to parse state file {self._path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise ValueError(f"State file {self._path} must contain a JSON object")

        raw = payload.get(_STATE_KEY)
        if raw is None:
            raw = payload.get(_LEGACY_STATE_KEY)
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ValueError(f"State file {self._path} has a non-object '{_STATE_KEY}' entry")

        state = WatermarkState(last_checked={str(k): str(v) for k, v in raw.items()})
        LOGGER.info("State loaded successfully (%d conversations tracked)", len(state))
        return state

    def save(self, state: WatermarkState) -> None:
        """Replace the state file in one rename; the old file survives any failure."""

        directory = self._path.parent
        directory.mkdir(mode=0o700, parents=True, exist_ok=True)
        data = json.dumps({_STATE_KEY: dict(state.last_checked)}, indent=2, sort_keys=True)

        # mkstemp creates the file with mode 0600.
        fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=f".{self._path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
