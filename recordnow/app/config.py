from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

GLOBAL_CONFIG = Path(os.getenv("RECORDNOW_CONFIG") or (Path.home() / ".recordnow_config.json"))

VIEW_MODES = ("hybrid", "edit", "split", "preview")
STORAGE_MODES = ("folder", "local")
DEFAULT_AUTOSAVE_MS = 2000


def init_settings() -> None:
    GLOBAL_CONFIG.parent.mkdir(parents=True, exist_ok=True)


def _read_global_config() -> dict:
    """Return the parsed global config, or an empty dict on error/missing."""
    if not GLOBAL_CONFIG.exists():
        return {}
    try:
        payload = json.loads(GLOBAL_CONFIG.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        return {}
    return payload if isinstance(payload, dict) else {}


def _update_global_config(updates: dict) -> None:
    """Merge updates into global config file."""
    existing = _read_global_config()
    existing.update(updates)
    GLOBAL_CONFIG.write_text(json.dumps(existing, indent=2), encoding="utf-8")


def local_store_path() -> Path:
    """Where the local (no folder) document store lives: next to the config file."""
    return GLOBAL_CONFIG.with_name(".recordnow_local_store.json")


def load_last_folder() -> Optional[str]:
    last = _read_global_config().get("last_folder")
    return last if isinstance(last, str) and last else None


def save_last_folder(path: Optional[str]) -> None:
    _update_global_config({"last_folder": path})


def load_storage_mode() -> Optional[str]:
    mode = _read_global_config().get("storage_mode")
    return mode if mode in STORAGE_MODES else None


def save_storage_mode(mode: str) -> None:
    _update_global_config({"storage_mode": mode})


def load_view_mode(default: str = "hybrid") -> str:
    mode = _read_global_config().get("view_mode")
    return mode if mode in VIEW_MODES else default


def save_view_mode(mode: str) -> None:
    if mode in VIEW_MODES:
        _update_global_config({"view_mode": mode})


def load_pygments_style(default: str = "default") -> str:
    """Load preferred Pygments style for code fences."""
    style = _read_global_config().get("pygments_style")
    if isinstance(style, str) and style.strip():
        return style.strip()
    return default


def save_pygments_style(style: str) -> None:
    _update_global_config({"pygments_style": style})


def load_autosave_delay_ms(default: int = DEFAULT_AUTOSAVE_MS) -> int:
    value = _read_global_config().get("autosave_delay_ms")
    try:
        delay = int(value)
    except (TypeError, ValueError):
        return default
    return max(200, min(60_000, delay))


def load_font_size(default: int = 14) -> int:
    value = _read_global_config().get("font_size")
    try:
        size = int(value)
    except (TypeError, ValueError):
        return default
    return max(6, min(48, size))


def save_font_size(size: int) -> None:
    _update_global_config({"font_size": int(size)})


def load_sidebar_visible() -> bool:
    value = _read_global_config().get("sidebar_visible")
    return value if isinstance(value, bool) else True


def save_sidebar_visible(visible: bool) -> None:
    _update_global_config({"sidebar_visible": bool(visible)})


def load_window_geometry() -> Optional[str]:
    geom = _read_global_config().get("window_geometry")
    return geom if isinstance(geom, str) and geom else None


def save_window_geometry(geometry: str) -> None:
    _update_global_config({"window_geometry": geometry})
