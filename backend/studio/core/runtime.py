"""
Runtime environment helpers and startup checks.
"""

import os
from pathlib import Path
from typing import Dict, Iterable


def parse_bool_env(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def env_int(name: str, default: int, minimum: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return max(int(raw), minimum)
    except (TypeError, ValueError):
        return default


def env_float(name: str, default: float, minimum: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return max(float(raw), minimum)
    except (TypeError, ValueError):
        return default


def assert_directory_writable(path: Path, *, create: bool = True) -> None:
    if create:
        path.mkdir(parents=True, exist_ok=True)
    if not path.exists() or not path.is_dir():
        raise RuntimeError(f"Required directory is missing: {path}")

    probe = path / f".write_probe_{os.getpid()}.tmp"
    try:
        with open(probe, "w", encoding="utf-8") as f:
            f.write("ok")
        probe.unlink(missing_ok=True)
    except OSError as exc:
        raise RuntimeError(f"Directory is not writable: {path}") from exc


def run_startup_runtime_checks(directories: Iterable[Path]) -> Dict[str, object]:
    """Verify storage directories are usable; raises on the first unusable one."""
    report: Dict[str, object] = {"directories": {}}
    for directory in directories:
        assert_directory_writable(Path(directory))
        report["directories"][str(directory)] = "ok"
    return report
