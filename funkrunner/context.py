# -*- coding: utf-8 -*-
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict
from rich.console import Console


@dataclass
class Context:
    """
    Выполнение одного плана. data — общие переменные для шаблонов,
    одна мапа на весь прогон: шаг может записать, следующий прочитать.
    base_dir — каталог SDK, относительно него ищутся file.source.
    """

    base_dir: Path
    console: Console
    sdk_name: str = ""
    data: Dict[str, Any] = field(default_factory=dict)
    extra_env: Dict[str, str] = field(default_factory=dict)
    dry_run: bool = False
