# -*- coding: utf-8 -*-
from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional, List

import typer
from jinja2 import TemplateError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .cluster import (
    Kubectl,
    create_namespace,
    delete_namespace,
    wait_for_namespace_created,
    wait_for_namespace_deleted,
)
from .context import Context
from .dsl import (
    Sdk,
    cluster_settings,
    context_vars,
    load_config,
    load_plan,
    load_yaml,
    parse_vars,
    validate_plan,
)
from .errors import ClusterError, ConfigError, PollTimeoutError, ProcessError
from .orchestrator import run_plan
from .steps import describe
from .utils.paths import PLAN_FILE, iter_sdk_dirs, resolve_sdk_dir


app = typer.Typer(add_completion=False, help="funk-runner: deploy-планы SDK и kubectl")
namespace_app = typer.Typer(help="Создание/удаление namespace с ожиданием согласованности")
app.add_typer(namespace_app, name="namespace")

console = Console()
ROOT = Path(__file__).resolve().parents[1]

_HANDLED = (
    ConfigError,
    ProcessError,
    ClusterError,
    PollTimeoutError,
    TemplateError,
    FileNotFoundError,
    subprocess.CalledProcessError,
)


def _fail(e: Exception) -> None:
    console.print(f"[red]Ошибка:[/] {escape(str(e))}", highlight=False)
    raise typer.Exit(code=1)


def _sdk(name: str) -> Sdk:
    folder = resolve_sdk_dir(ROOT, name)
    return Sdk(name=folder.name, dir=folder)


@app.command(name="list")
def list_sdks() -> None:
    """Показать SDK из каталога sdks/, у которых есть deploy.yaml"""
    rows = iter_sdk_dirs(ROOT)
    if not rows:
        console.print("[yellow]SDK пока нет.[/]")
        raise typer.Exit(code=0)
    table = Table(title="Доступные SDK")
    table.add_column("Имя")
    table.add_column("План")
    for p in rows:
        table.add_row(p.name, str(p / PLAN_FILE))
    console.print(table)


@app.command()
def check(
    sdk: str = typer.Argument(..., help="Путь к каталогу SDK или имя из папки sdks"),
) -> None:
    """Проверить deploy-план: загрузка + структурная валидация шагов."""
    s = _sdk(sdk)
    try:
        doc = load_yaml(s.plan_file)
    except (ConfigError, FileNotFoundError) as e:
        _fail(e)
    errors = validate_plan(doc)
    if errors:
        console.print("[red]Ошибки:[/]")
        for e in errors:
            console.print(f" - {escape(e)}", highlight=False)
        raise typer.Exit(code=2)

    plan = load_plan(s)
    table = Table(title=f"План {s.name}")
    table.add_column("#")
    table.add_column("Шаг")
    table.add_column("Тип")
    table.add_column("Что делает")
    for i, step in enumerate(plan, 1):
        d = describe(step)
        table.add_row(str(i), step.name, d["kind"], d["detail"])
    console.print(table)
    console.print(f"[green]OK[/]: шагов={len(plan)}")


@app.command()
def deploy(
    sdk: str = typer.Argument(..., help="Путь к каталогу SDK или имя из папки sdks"),
    profile: Optional[str] = typer.Option(None, help="Имя профиля из configs/profiles"),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Ничего не исполнять, только показать шаги"
    ),
    override: List[str] = typer.Option(
        None, "--set", help="Переопределения конфига key=value (можно несколько)"
    ),
    var: List[str] = typer.Option(
        None, "--var", help="Переменные для шаблонов key=value (можно несколько)"
    ),
) -> None:
    """
    Выполнить deploy-план SDK: грузим конфиг и план, затем шаги по порядку.
    """
    s = _sdk(sdk)
    try:
        cfg = load_config(ROOT, profile, override or [])
        plan = load_plan(s)
        data = {**context_vars(cfg), **parse_vars(var or [])}
        ctx = Context(
            base_dir=s.dir,
            console=console,
            sdk_name=s.name,
            data=data,
            dry_run=dry_run,
        )
        console.rule("[bold cyan]Сводка")
        console.print(f"План: {plan.source}", highlight=False)
        console.print(f"Шагов: {len(plan)}")
        console.print(f"Dry-run: {dry_run}")
        run_plan(plan, ctx)
    except _HANDLED as e:
        _fail(e)


def _kubectl(
    profile: Optional[str], override: Optional[List[str]], verbose: bool
):
    cfg = load_config(ROOT, profile, override or [])
    settings = cluster_settings(cfg)
    return Kubectl(settings.kubectl, console if verbose else None), settings


@namespace_app.command("create")
def namespace_create(
    name: str = typer.Argument(..., help="Имя namespace"),
    profile: Optional[str] = typer.Option(None, help="Имя профиля из configs/profiles"),
    override: List[str] = typer.Option(None, "--set", help="Переопределения key=value"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Печатать команды и попытки"),
) -> None:
    """Создать namespace (с повторами) и дождаться, пока он появится в списке."""
    try:
        kubectl, settings = _kubectl(profile, override, verbose)
        res = create_namespace(kubectl, name, settings)
        wait_for_namespace_created(kubectl, name, settings)
    except _HANDLED as e:
        _fail(e)
    console.print(res.stdout.strip(), highlight=False)
    console.print("[green]OK[/]")


@namespace_app.command("delete")
def namespace_delete(
    name: str = typer.Argument(..., help="Имя namespace"),
    profile: Optional[str] = typer.Option(None, help="Имя профиля из configs/profiles"),
    override: List[str] = typer.Option(None, "--set", help="Переопределения key=value"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Печатать команды и попытки"),
) -> None:
    """Удалить namespace и дождаться, пока он пропадёт из списка."""
    try:
        kubectl, settings = _kubectl(profile, override, verbose)
        res = delete_namespace(kubectl, name)
        wait_for_namespace_deleted(kubectl, name, settings)
    except _HANDLED as e:
        _fail(e)
    console.print(res.stdout.strip(), highlight=False)
    console.print("[green]OK[/]")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
