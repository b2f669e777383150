"""Atomic file I/O for the Planbook store.

Every store file is a single JSON document rewritten in full: a save
serialises the whole document to a temp file next to the target, flocks it,
fsyncs, and renames it over the old one.
"""

from __future__ import annotations

import fcntl
import json
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

from planbook.errors import ValidationError


def read_text(path: Path) -> str:
    """Read a text file, returning empty string if missing."""
    if not path.exists():
        return ""
    return path.read_text(encoding="utf-8")


def read_json(path: Path) -> dict[str, Any]:
    """Read a JSON document, returning an empty dict if missing or blank.

    A store file that does not hold a JSON object is reported as a
    ValidationError naming the file.
    """
    text = read_text(path)
    if not text.strip():
        return {}
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Corrupt store file {path.name}: {e}") from e
    if not isinstance(data, dict):
        raise ValidationError(f"Store file {path.name} must hold a JSON object")
    return data


def read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML mapping, returning empty dict if missing, empty or not a mapping."""
    text = read_text(path)
    if not text.strip():
        return {}
    result = yaml.safe_load(text)
    return result if isinstance(result, dict) else {}


def _atomic_write(path: Path, content: str, suffix: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_", suffix=suffix)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            try:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        os.replace(temp_path, path)
    except BaseException:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise


def write_json_atomic(path: Path, data: dict[str, Any]) -> None:
    """Replace a JSON store document in one step."""
    _atomic_write(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n", suffix=".json")


def write_yaml_atomic(path: Path, data: dict[str, Any]) -> None:
    """Replace a YAML config document in one step."""
    content = yaml.safe_dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)
    _atomic_write(path, content, suffix=".yaml")


def next_id(doc: dict[str, Any], counter: str) -> int:
    """Allocate the next integer id from a counter stored in *doc*."""
    value = int(doc.get(counter, 0) or 0) + 1
    doc[counter] = value
    return value
