"""Filesystem helpers for the JSON export."""

from __future__ import annotations
import json
import os
from typing import Any


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def write_text(path: str, content: str, encoding: str = "utf-8") -> None:
    dir_part = os.path.dirname(path)
    if dir_part:
        ensure_dir(dir_part)
    with open(path, "w", encoding=encoding) as fh:
        fh.write(content)


def write_json(path: str, payload: Any) -> str:
    """Write ``payload`` as indented UTF-8 JSON and return the path."""
    write_text(path, json.dumps(payload, indent=2, ensure_ascii=False) + "\n")
    return path
