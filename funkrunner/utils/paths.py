# -*- coding: utf-8 -*-
from __future__ import annotations

from pathlib import Path
from typing import List
import sys

PLAN_FILE = "deploy.yaml"


def _is_frozen() -> bool:
    # PyInstaller /cx_Freeze
    return getattr(sys, "frozen", False)


def app_base_dir(project_root: Path) -> Path:
    # где лежат configs/ и sdks/ во время работы
    return Path(sys.executable).resolve().parent if _is_frozen() else project_root


def resolve_sdk_dir(project_root: Path, sdk: str) -> Path:
    """
    sdk: путь к каталогу SDK или имя каталога внутри sdks/
    """
    p = Path(sdk)
    if p.is_absolute():
        return p
    if p.is_dir():
        return p.resolve()
    return (app_base_dir(project_root) / "sdks" / p.name).resolve()


def iter_sdk_dirs(project_root: Path) -> List[Path]:
    folder = app_base_dir(project_root) / "sdks"
    if not folder.exists():
        return []
    return sorted(d for d in folder.iterdir() if (d / PLAN_FILE).is_file())


def resolve_source(base_dir: Path, source: str) -> Path:
    """file.source: абсолютный путь как есть, иначе относительно каталога SDK."""
    q = Path(source)
    if q.is_absolute():
        return q
    return base_dir / q
