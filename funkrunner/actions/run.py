# -*- coding: utf-8 -*-
from __future__ import annotations

from ..context import Context
from ..process import resolve_executable, run_direct
from ..steps import ExecStep
from . import register


@register(ExecStep)
def exec_command(ctx: Context, step: ExecStep) -> None:
    """
    exec: "cmd arg1 arg2" — делится по пробелам, cmd ищется в PATH.
    Вывод идёт прямо в терминал, ничего не захватывается.
    """
    parts = step.argv()
    exe = resolve_executable(parts[0])
    args = parts[1:]

    if ctx.dry_run:
        ctx.console.print(f"[cyan]DRY[/] exec: {exe} args={args}")
        return

    run_direct(exe, args, ctx.extra_env)
