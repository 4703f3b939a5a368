"""
JSON-file storage for the persisted workout state.

One blob per identity lives in the data directory:

    <data_dir>/iron-stride-storage.<identity>.json

with the shape ``{"version": int, "state": {profile, history, currentPlan,
setLogs}}``.  The identity is ``anonymous`` while signed out, so several
accounts on one machine never share a file.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any

from ..core.config import ANONYMOUS_IDENTITY, LOCAL_STATE_VERSION, STORAGE_NAME
from ..core.models import AppState
from .serializers import app_state_to_dict

log = logging.getLogger(__name__)


def _safe_identity(identity: str) -> str:
    return re.sub(r"[^A-Za-z0-9_.-]+", "_", identity) or ANONYMOUS_IDENTITY


class LocalStateStorage:
    """
    Per-identity persisted state blobs.

    ``active_identity`` selects which blob load()/save() address; the sync
    coordinator switches it when the signed-in user changes.
    """

    def __init__(self, data_dir: str | Path, active_identity: str | None = None):
        """
        Initialize the storage.

        Args:
            data_dir: Directory holding the state files
            active_identity: Initial identity (None = anonymous)
        """
        self.data_dir = Path(data_dir)
        self.active_identity = active_identity

    @property
    def path(self) -> Path:
        """File backing the active identity."""
        identity = _safe_identity(self.active_identity or ANONYMOUS_IDENTITY)
        return self.data_dir / f"{STORAGE_NAME}.{identity}.json"

    def load(self) -> tuple[int, dict[str, Any]] | None:
        """
        Read the active identity's blob.

        Returns:
            (version, raw state dict), or None when missing or unreadable
        """
        path = self.path
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                blob = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            log.warning("Ignoring unreadable state file %s: %s", path, e)
            return None

        if not isinstance(blob, dict) or not isinstance(blob.get("state"), dict):
            log.warning("Ignoring malformed state file %s", path)
            return None
        version = blob.get("version")
        if isinstance(version, bool) or not isinstance(version, int):
            version = 0
        return version, blob["state"]

    def save(self, state: AppState) -> None:
        """
        Write the state for the active identity at the current version.

        Creates the data directory if needed.
        """
        self.data_dir.mkdir(parents=True, exist_ok=True)
        blob = {"version": LOCAL_STATE_VERSION, "state": app_state_to_dict(state)}
        tmp_path = self.path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(blob, f, indent=2)
        tmp_path.replace(self.path)
        log.debug("Saved state to %s", self.path)
