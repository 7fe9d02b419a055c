"""Helpers for JSON input/output with atomic writes."""

from __future__ import annotations

import json
import os
import time
from pathlib import Path
from typing import Any

from ..errors import StoreError


def read_json(path: Path) -> dict[str, Any]:
    """Read JSON from *path* and return a dictionary."""

    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError as exc:
        raise StoreError(f"JSON file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise StoreError(f"Invalid JSON data in {path}") from exc
    except OSError as exc:
        raise StoreError(f"Unable to read {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise StoreError(f"Expected a JSON object in {path}")
    return data


def atomic_write_text(path: Path, data: str) -> None:
    """Atomically write *data* into *path*."""

    tmp_path = path.with_suffix(path.suffix + ".tmp")
    path.parent.mkdir(parents=True, exist_ok=True)
    with tmp_path.open("w", encoding="utf-8") as handle:
        handle.write(data)
        handle.flush()
        os.fsync(handle.fileno())
    # ``Path.replace`` can fail transiently on Windows while another process holds
    # the destination open, so retry with a short back-off before giving up.
    for attempt in range(5):
        try:
            tmp_path.replace(path)
            return
        except PermissionError:
            if attempt == 4:
                tmp_path.unlink(missing_ok=True)
                raise
            time.sleep(0.05 * (attempt + 1))


def write_json(path: Path, data: dict[str, Any]) -> None:
    """Write *data* into *path* atomically."""

    payload = json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True)
    try:
        atomic_write_text(path, payload)
    except OSError as exc:
        raise StoreError(f"Unable to write {path}: {exc}") from exc
