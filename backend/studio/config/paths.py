"""
Paths configuration

Centralized directory paths for the application. DATA_DIR can be moved with
the environment variable of the same name; job metadata and binary assets
live in separate subdirectories.
"""

import os
from pathlib import Path

PACKAGE_DIR = Path(__file__).parent.parent
BACKEND_DIR = PACKAGE_DIR.parent
DATA_DIR = Path(os.getenv("DATA_DIR", str(BACKEND_DIR / "data")))
JOB_DATA_DIR = Path(os.getenv("JOB_DATA_DIR", str(DATA_DIR / "jobs")))
ASSET_DIR = Path(os.getenv("ASSET_DIR", str(DATA_DIR / "assets")))

__all__ = ["PACKAGE_DIR", "BACKEND_DIR", "DATA_DIR", "JOB_DATA_DIR", "ASSET_DIR"]
