# -*- coding: utf-8 -*-
from __future__ import annotations

from pathlib import Path

from ..context import Context
from ..steps import FileTemplateStep, MkdirStep
from ..template import interpret_string, render_template
from ..utils.paths import resolve_source
from . import register


@register(MkdirStep)
def make_dir(ctx: Context, step: MkdirStep) -> None:
    """Создаёт каталог со всеми родителями; существующий — не ошибка."""
    target = Path(interpret_string(step.path, ctx.data))
    if ctx.dry_run:
        ctx.console.print(f"[cyan]DRY[/] mkdir: {target}")
        return
    target.mkdir(parents=True, exist_ok=True)


@register(FileTemplateStep)
def file_template(ctx: Context, step: FileTemplateStep) -> None:
    """
    params:
      source: путь к шаблону относительно каталога SDK
      destination: путь результата, сам тоже шаблон
    """
    source = resolve_source(ctx.base_dir, step.source)
    destination = interpret_string(step.destination, ctx.data)
    if ctx.dry_run:
        ctx.console.print(f"[cyan]DRY[/] file: {source} -> {destination}")
        return
    render_template(source, destination, ctx.data)
