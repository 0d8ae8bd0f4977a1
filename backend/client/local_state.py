"""
Client-local persisted state.

A small JSON file holding the ids of polls this client has reported (hidden
from its feed regardless of server-side filtering) and whether the install
prompt was dismissed. Neither value expires.
"""

import json
import logging
import os
import threading
from pathlib import Path
from typing import Optional, Set

logger = logging.getLogger(__name__)

DEFAULT_STATE_PATH = Path.home() / ".whichonetho" / "state.json"


class LocalState:
    def __init__(self, path: Optional[os.PathLike] = None):
        self.path = Path(path or os.environ.get("WHICHONETHO_STATE_FILE", DEFAULT_STATE_PATH))
        self._lock = threading.Lock()
        self._reported: Set[int] = set()
        self._install_prompt_dismissed = False
        self._load()

    def _load(self):
        try:
            with open(self.path, encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable local state file {self.path}: {e}")
            return

        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed local state file {self.path}")
            return
        self._reported = {int(pk) for pk in data.get("reported_poll_ids", [])}
        self._install_prompt_dismissed = bool(data.get("install_prompt_dismissed", False))

    def _save(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as fh:
            json.dump(
                {
                    "reported_poll_ids": sorted(self._reported),
                    "install_prompt_dismissed": self._install_prompt_dismissed,
                },
                fh,
            )
        os.replace(tmp_path, self.path)

    @property
    def reported_poll_ids(self) -> Set[int]:
        with self._lock:
            return set(self._reported)

    def add_reported_poll(self, poll_id: int) -> None:
        with self._lock:
            if int(poll_id) in self._reported:
                return
            self._reported.add(int(poll_id))
            self._save()

    def is_reported(self, poll_id: int) -> bool:
        with self._lock:
            return int(poll_id) in self._reported

    @property
    def install_prompt_dismissed(self) -> bool:
        return self._install_prompt_dismissed

    def dismiss_install_prompt(self) -> None:
        with self._lock:
            self._install_prompt_dismissed = True
            self._save()
