# -*- coding: utf-8 -*-
from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from jinja2 import Environment, StrictUndefined

from .errors import ConfigError

# StrictUndefined: любая ссылка на отсутствующий ключ -> UndefinedError
_env = Environment(undefined=StrictUndefined, keep_trailing_newline=True)


def interpret_string(text: str, data: Mapping[str, Any]) -> str:
    """Подставляет значения из data в строку вида 'out/{{ name }}'."""
    if "{{" not in text and "{%" not in text:
        return text
    return _env.from_string(text).render(**data)


def render_template(
    source: str | Path, destination: str | Path, data: Mapping[str, Any]
) -> Path:
    """
    Рендерит файл-шаблон source в destination.
    Каталоги назначения создаются; результат пишется только после
    успешного рендера, чтобы не оставлять полуфабрикат.
    """
    src = Path(source)
    try:
        text = src.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read template {src}: {e}") from e
    rendered = _env.from_string(text).render(**data)

    dst = Path(destination)
    dst.parent.mkdir(parents=True, exist_ok=True)
    dst.write_text(rendered, encoding="utf-8")
    return dst
