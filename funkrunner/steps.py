# -*- coding: utf-8 -*-
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Tuple, Union

from .errors import ConfigError


@dataclass(frozen=True)
class MkdirStep:
    name: str
    path: str


@dataclass(frozen=True)
class ExecStep:
    name: str
    command: str

    def argv(self) -> List[str]:
        # без shell-кавычек: аргумент с пробелом не выразить
        return self.command.split()


@dataclass(frozen=True)
class FileTemplateStep:
    name: str
    source: str
    destination: str


Step = Union[MkdirStep, ExecStep, FileTemplateStep]


@dataclass(frozen=True)
class Plan:
    steps: Tuple[Step, ...]
    source: str = ""

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self):
        return iter(self.steps)


def _text(raw: Mapping[str, Any], key: str) -> str:
    val = raw.get(key)
    return "" if val is None else str(val).strip()


def parse_step(raw: Mapping[str, Any], index: int = 1) -> Step:
    """
    Мапа из YAML -> ровно один из MkdirStep / ExecStep / FileTemplateStep.
    Пустые поля считаются отсутствующими.
    """
    if not isinstance(raw, Mapping):
        raise ConfigError(f"step #{index} must be a mapping")

    name = _text(raw, "name") or f"step #{index}"
    file_spec = raw.get("file") or {}
    if not isinstance(file_spec, Mapping):
        raise ConfigError(f"invalid config step '{name}' - 'file' must be a mapping")

    candidates: List[Step] = []
    mkdir = _text(raw, "mkdir")
    if mkdir:
        candidates.append(MkdirStep(name=name, path=mkdir))
    command = _text(raw, "exec")
    if command:
        candidates.append(ExecStep(name=name, command=command))
    source = _text(file_spec, "source")
    if source:
        candidates.append(
            FileTemplateStep(
                name=name, source=source, destination=_text(file_spec, "destination")
            )
        )

    if not candidates:
        raise ConfigError(f"invalid config step '{name}' - no command specified")
    if len(candidates) > 1:
        kinds = ", ".join(type(c).__name__ for c in candidates)
        raise ConfigError(f"invalid config step '{name}' - ambiguous step ({kinds})")

    step = candidates[0]
    if isinstance(step, FileTemplateStep) and not step.destination:
        raise ConfigError(f"invalid config step '{name}' - file.destination is required")
    return step


def parse_plan(doc: Mapping[str, Any], source: str = "") -> Plan:
    items = raw_steps(doc)
    if not isinstance(items, list):
        raise ConfigError(f"steps must be a list: {source or '<plan>'}")
    return Plan(
        steps=tuple(parse_step(st, i) for i, st in enumerate(items, 1)),
        source=source,
    )


def raw_steps(doc: Mapping[str, Any]) -> Any:
    spec = doc.get("spec")
    if isinstance(spec, dict) and "steps" in spec:
        return spec.get("steps") or []
    return doc.get("steps") or []


def describe(step: Step) -> Dict[str, str]:
    """Плоское описание шага для dry-run и таблиц."""
    if isinstance(step, MkdirStep):
        return {"kind": "mkdir", "detail": step.path}
    if isinstance(step, ExecStep):
        return {"kind": "exec", "detail": step.command}
    return {"kind": "file", "detail": f"{step.source} -> {step.destination}"}
