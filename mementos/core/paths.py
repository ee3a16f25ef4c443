#!/usr/bin/env python3
"""
paths.py
-------------------
Path constants for the Mementos project.

Defines the default filesystem locations used when no configuration file
or environment override is given. Everything lives under a single data
root, which defaults to ``~/.mementos`` and can be moved with the
``MEMENTOS_HOME`` environment variable.

The layout:
    MEMENTOS_HOME/
    ├── mementos.db    # SQLite database
    ├── config.yaml    # Optional configuration file
    ├── logs/          # Application logs
    └── storage/       # Uploaded media (local storage backend)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import os
from pathlib import Path


def _get_home() -> Path:
    """
    Determine the data root directory.

    Returns:
        Path object for the data root (not created here)
    """
    override = os.environ.get("MEMENTOS_HOME")
    if override:
        return Path(override).expanduser().resolve()
    return Path.home() / ".mementos"


# ----- Project directories -----
PACKAGE_DIR: Path = Path(__file__).resolve().parent.parent
HOME_DIR: Path = _get_home()

# --- Database ---
DB_PATH = HOME_DIR / "mementos.db"

# --- Configuration ---
CONFIG_PATH = HOME_DIR / "config.yaml"

# --- Logs & Storage ---
LOG_DIR = HOME_DIR / "logs"
STORAGE_DIR = HOME_DIR / "storage"
