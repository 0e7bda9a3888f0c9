"""Transcript export/import: a conversation as a JSON array of turns.

Shape on disk::

    [
      {"id": "...", "role": "user", "text": "Ciao", "timestamp": 1718000000000},
      {"id": "...", "role": "model", "text": "Ciao! ...", "timestamp": 1718000001000}
    ]

Only ``role`` and ``text`` are required when loading.
"""

from __future__ import annotations

from datetime import date
import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

from parla.errors import TranscriptError
from parla.persona import PERSONA_NAME
from parla.turns import ROLES, Turn

if TYPE_CHECKING:
    from collections.abc import Iterable
    import os


def default_filename(today: date | None = None) -> str:
    """Return the default export name, e.g. ``chat-alice-2024-06-10.json``."""
    day = today or date.today()
    return f"chat-{PERSONA_NAME.lower()}-{day.isoformat()}.json"


def dumps(turns: Iterable[Turn]) -> str:
    """Serialize turns to the transcript JSON text."""
    return json.dumps([t.to_dict() for t in turns], indent=2, ensure_ascii=False)


def _turn_from_obj(obj: Any, idx: int) -> Turn:
    if not isinstance(obj, dict):
        raise TranscriptError(f"Entry {idx} is not an object")
    role = obj.get("role")
    text = obj.get("text")
    if role not in ROLES:
        raise TranscriptError(
            f"Entry {idx} has invalid role {role!r}",
            hint="Roles must be 'user' or 'model'.",
        )
    if not isinstance(text, str):
        raise TranscriptError(f"Entry {idx} has no text")

    kwargs: dict[str, Any] = {}
    ts = obj.get("timestamp")
    if isinstance(ts, (int, float)) and not isinstance(ts, bool):
        kwargs["timestamp"] = int(ts)
    turn_id = obj.get("id")
    if isinstance(turn_id, (str, int)) and not isinstance(turn_id, bool):
        kwargs["id"] = str(turn_id)
    return Turn(role=role, text=text, **kwargs)


def loads(data: str) -> list[Turn]:
    """Parse transcript JSON text into turns, preserving order."""
    try:
        parsed = json.loads(data)
    except json.JSONDecodeError as e:
        raise TranscriptError(
            f"Transcript is not valid JSON: {e}",
            hint="Load a file previously exported from a chat.",
        ) from e
    if not isinstance(parsed, list):
        raise TranscriptError(
            "Transcript must be a JSON array of turns",
            hint="Load a file previously exported from a chat.",
        )
    return [_turn_from_obj(obj, idx) for idx, obj in enumerate(parsed)]


def save(path: str | os.PathLike[str], turns: Iterable[Turn]) -> Path:
    """Write turns to *path* as UTF-8 JSON and return the path."""
    target = Path(path)
    try:
        target.write_text(dumps(turns), encoding="utf-8")
    except OSError as e:
        raise TranscriptError(f"Cannot write transcript {target}: {e}") from e
    return target


def load(path: str | os.PathLike[str]) -> list[Turn]:
    """Read turns from a transcript file."""
    source = Path(path)
    try:
        data = source.read_text(encoding="utf-8")
    except OSError as e:
        raise TranscriptError(f"Cannot read transcript {source}: {e}") from e
    return loads(data)
