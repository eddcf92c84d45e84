from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict

ROOT_ENV = "LESSONCLOCK_ROOT"
TABLES = ("storage", "live", "logging", "export")


@dataclass(frozen=True)
class Settings:
    data_dir: str = "data"
    outputs_dir: str = "outputs"
    logs_dir: str = "logs"
    tick_seconds: float = 1.0
    log_level: str = "WARNING"
    export_name: str = "schedule"


def project_root(explicit: Path | str | None = None) -> Path:
    if explicit is not None:
        return Path(explicit)
    env = os.environ.get(ROOT_ENV)
    return Path(env) if env else Path.cwd()


def load_settings(root: Path | str | None = None) -> Settings:
    """Load settings from configs/lessonclock.toml if present, else defaults.

    Keys may sit at the top level or under [storage], [live], [logging]
    and [export]. Unknown keys are ignored.
    """
    base = Settings()
    cfg = project_root(root) / "configs" / "lessonclock.toml"
    if not cfg.exists():
        return base
    try:
        data: Dict[str, Any] = tomllib.loads(cfg.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as e:
        logging.getLogger(__name__).warning(f"Ignoring unreadable {cfg}: {e}")
        return base
    flat: Dict[str, Any] = {k: v for k, v in data.items() if not isinstance(v, dict)}
    for table in TABLES:
        if isinstance(data.get(table), dict):
            flat.update(data[table])
    known = {f.name for f in fields(Settings)}
    overrides: Dict[str, Any] = {}
    for key, value in flat.items():
        if key not in known:
            continue
        if key == "tick_seconds":
            try:
                value = float(value)
            except (TypeError, ValueError):
                continue
            if value <= 0:
                continue
        else:
            value = str(value)
        overrides[key] = value
    return replace(base, **overrides)


def resolve(root: Path, configured: str) -> Path:
    path = Path(configured)
    return path if path.is_absolute() else root / path
