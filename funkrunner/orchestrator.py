# -*- coding: utf-8 -*-
from __future__ import annotations

from time import perf_counter

from rich.markup import escape

from .actions import REGISTRY  # импорт из __init__.py подтянет обработчики
from .context import Context
from .errors import ConfigError
from .steps import Plan


def run_plan(plan: Plan, ctx: Context) -> None:
    """
    Выполняет шаги строго по порядку. Первая ошибка прерывает план
    и уходит вызывающему; отката уже сделанного нет.
    """
    console = ctx.console
    console.print(f"Using SDK: {ctx.sdk_name} deploy plans", markup=False, highlight=False)

    for idx, step in enumerate(plan, 1):
        console.print(f" ♫ {step.name}", markup=False, highlight=False)

        fn = REGISTRY.get(type(step))
        if not fn:
            raise ConfigError(
                f"invalid config step '{step.name}' - unsupported step type {type(step).__name__}"
            )

        t0 = perf_counter()
        try:
            fn(ctx, step)
        except Exception:
            console.print(f"[red]Step #{idx} failed:[/] {escape(step.name)}", highlight=False)
            raise
        dt = perf_counter() - t0

        console.print(f"[green]OK[/] ({dt:.2f}s)")
