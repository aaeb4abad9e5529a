"""Local checkpoint persistence.

One JSON file per (kind, owner id) under a state directory, named
``trendme_operation_<kind>_<owner>.json``. Checkpointing is a best-effort
recovery aid: no method raises on storage failure. Errors are logged and
reads behave as "no checkpoint", writes as "dropped".

Usage:
    store = CheckpointStore(Path(".trendme/checkpoints"))
    store.save(checkpoint)
    checkpoint = store.load("post", influencer_id)
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from ..constants import limits
from ..utils import now_ms
from .models import PersonaCheckpoint, PostCheckpoint, checkpoint_adapter, step_index

_logger = logging.getLogger("checkpoints")

Checkpoint = PostCheckpoint | PersonaCheckpoint

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class CheckpointStore:
    """Synchronous, failure-tolerant checkpoint store with lazy expiry."""

    def __init__(
        self,
        state_dir: Path,
        stale_after_ms: int = limits.CHECKPOINT_STALE_MS,
        prefix: str = limits.CHECKPOINT_PREFIX,
        clock: Callable[[], int] = now_ms,
    ):
        """Initialize the store.

        Args:
            state_dir: Directory holding checkpoint files.
            stale_after_ms: Age after which a checkpoint is treated as absent.
            prefix: File name prefix namespacing the store.
            clock: Epoch millisecond clock (tests inject a fixed one).
        """
        self.state_dir = Path(state_dir)
        self.stale_after_ms = stale_after_ms
        self.prefix = prefix
        self._clock = clock

    def key(self, kind: str, owner_id: str) -> str:
        return f"{self.prefix}{kind}_{_UNSAFE_CHARS.sub('_', owner_id)}"

    def _path(self, kind: str, owner_id: str) -> Path:
        return self.state_dir / f"{self.key(kind, owner_id)}.json"

    def _is_expired(self, checkpoint: Checkpoint) -> bool:
        last_saved = checkpoint.updated_at or checkpoint.timestamp
        return self._clock() - last_saved > self.stale_after_ms

    def _read(self, path: Path) -> Checkpoint | None:
        """Parse one file; unreadable or invalid files are removed."""
        try:
            with open(path, encoding="utf-8") as f:
                return checkpoint_adapter.validate_python(json.load(f))
        except FileNotFoundError:
            return None
        except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            _logger.warning(f"CORRUPT | file:{path.name} | error:{e}")
            self._unlink(path)
            return None
        except OSError as e:
            _logger.error(f"READ_FAILED | file:{path.name} | error:{e}")
            return None

    def _unlink(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            _logger.error(f"DELETE_FAILED | file:{path.name} | error:{e}")

    def save(self, checkpoint: Checkpoint) -> bool:
        """Persist a checkpoint, overwriting the previous one for its key.

        Stamps ``updated_at`` so staleness runs from the latest save. A
        save that would move a live checkpoint to an earlier step is refused.

        Returns:
            True if written.
        """
        path = self._path(checkpoint.kind, checkpoint.owner_id)
        existing = self._read(path)
        if existing is not None and not self._is_expired(existing) and existing.kind == checkpoint.kind:
            if step_index(checkpoint.kind, checkpoint.step_name) < step_index(existing.kind, existing.step_name):
                _logger.warning(
                    f"REGRESSION_REFUSED | key:{self.key(checkpoint.kind, checkpoint.owner_id)} | "
                    f"stored:{existing.step_name} | new:{checkpoint.step_name}"
                )
                return False

        checkpoint = checkpoint.model_copy(update={"updated_at": self._clock()})
        try:
            self.state_dir.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_suffix(".json.tmp")
            tmp_path.write_text(checkpoint.model_dump_json(indent=2), encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            _logger.error(f"SAVE_FAILED | key:{self.key(checkpoint.kind, checkpoint.owner_id)} | error:{e}")
            return False

        _logger.info(
            f"SAVED | key:{self.key(checkpoint.kind, checkpoint.owner_id)} | step:{checkpoint.step_name}"
        )
        return True

    def load(self, kind: str, owner_id: str) -> Checkpoint | None:
        """Return the live checkpoint for a key, purging it if stale."""
        path = self._path(kind, owner_id)
        checkpoint = self._read(path)
        if checkpoint is None:
            return None
        if self._is_expired(checkpoint):
            _logger.info(f"EXPIRED | key:{self.key(kind, owner_id)} | step:{checkpoint.step_name}")
            self._unlink(path)
            return None
        return checkpoint

    def clear(self, kind: str, owner_id: str) -> None:
        self._unlink(self._path(kind, owner_id))
        _logger.info(f"CLEARED | key:{self.key(kind, owner_id)}")

    def _files(self) -> list[Path]:
        try:
            return sorted(self.state_dir.glob(f"{self.prefix}*.json"))
        except OSError as e:
            _logger.error(f"LIST_FAILED | dir:{self.state_dir} | error:{e}")
            return []

    def list_all(self) -> list[Checkpoint]:
        """Every live checkpoint, for diagnostics."""
        live: list[Checkpoint] = []
        for path in self._files():
            checkpoint = self._read(path)
            if checkpoint is not None and not self._is_expired(checkpoint):
                live.append(checkpoint)
        return live

    def cleanup_expired(self) -> int:
        """Delete every expired checkpoint.

        Returns:
            Number of checkpoints removed.
        """
        removed = 0
        for path in self._files():
            checkpoint = self._read(path)
            if checkpoint is not None and self._is_expired(checkpoint):
                self._unlink(path)
                removed += 1
        if removed:
            _logger.info(f"CLEANUP | removed:{removed}")
        return removed
