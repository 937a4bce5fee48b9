"""JSON settings file shared by the document and backup settings."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def load_config_data(config_path: Path) -> dict[str, Any]:
    """Read the settings file, returning an empty mapping when it is unusable."""
    if not config_path.exists():
        return {}
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config_data(config_path: Path, data: dict[str, Any]) -> None:
    config_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = config_path.with_suffix(config_path.suffix + ".tmp")
    temp_path.write_text(
        json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True),
        encoding="utf-8",
    )
    temp_path.replace(config_path)


def update_config_data(config_path: Path, **values: Any) -> dict[str, Any]:
    """Merge ``values`` into the stored settings and persist them."""
    payload = load_config_data(config_path)
    payload.update(values)
    save_config_data(config_path, payload)
    return payload
