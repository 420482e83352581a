"""
Where the flow builder keeps config.json and relative export files.

A source checkout resolves to the project root; a frozen (PyInstaller) build
resolves to the folder holding the executable, so saved flows sit beside it.
"""

import sys
from pathlib import Path


def get_app_dir() -> Path:
    """Directory that config.json and relative export paths hang off."""
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).resolve().parent
    # flowbuilder/paths.py -> project root
    return Path(__file__).resolve().parents[1]


def get_config_path() -> Path:
    return get_app_dir() / "config.json"


def resolve_export_path(path: str) -> Path:
    """Relative export paths are taken from the application directory."""
    p = Path(path).expanduser()
    if not p.is_absolute():
        p = get_app_dir() / p
    return p
