# -*- coding: utf-8 -*-
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, cast
import json
import re

import yaml
from jinja2 import Environment, StrictUndefined

from .errors import ConfigError
from .steps import Plan, parse_plan, parse_step, raw_steps
from .utils.paths import PLAN_FILE, app_base_dir
from .utils.timeparse import parse_duration


DEFAULT_MAX_RETRIES = 10
DEFAULT_RETRY_SLEEP = 5.0
DEFAULT_NAMESPACE = "kne2etests"


@dataclass(frozen=True)
class Sdk:
    """Метаданные SDK: имя и каталог, где лежит deploy.yaml и шаблоны."""

    name: str
    dir: Path

    @property
    def plan_file(self) -> Path:
        return self.dir / PLAN_FILE


@dataclass(frozen=True)
class ClusterSettings:
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_sleep: float = DEFAULT_RETRY_SLEEP
    kubectl: str = "kubectl"
    kn: str = "kn"
    namespace: str = DEFAULT_NAMESPACE


# ---------- базовые utils ----------


def _deep_merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    """
    Иммутабельный глубинный мердж: возвращает новый словарь.
    Значения из b перекрывают a.
    """
    out = dict(a)
    for k, v in b.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


_bool_map = {"true": True, "false": False}


def _parse_scalar(value: str) -> Any:
    """
    Скаляр из CLI: true/false, int, float, JSON ([], {}, "str"), иначе строка.
    """
    s = value.strip()
    low = s.lower()
    if low in _bool_map:
        return _bool_map[low]
    if re.fullmatch(r"-?\d+", s):
        return int(s)
    if re.fullmatch(r"-?\d+\.\d+", s):
        return float(s)
    if s[:1] in "{[\"" and s[-1:] in "}]\"":
        try:
            return json.loads(s)
        except ValueError:
            pass
    return s


def parse_overrides(pairs: List[str]) -> Dict[str, Any]:
    """
    ["cluster.max_retries=3", "cluster.retry_sleep=1s"]
    -> {"cluster": {"max_retries": 3, "retry_sleep": "1s"}}
    """
    root: Dict[str, Any] = {}
    for p in pairs:
        if "=" not in p:
            raise ConfigError(f"Override must be key=value, got: {p}")
        key, raw = p.split("=", 1)
        keys = key.strip().split(".")
        val = _parse_scalar(raw)
        cur = root
        for k in keys[:-1]:
            nxt = cur.setdefault(k, {})
            if not isinstance(nxt, dict):
                raise ConfigError(f"Override path collides at {k} in {p}")
            cur = nxt
        cur[keys[-1]] = val
    return root


def parse_vars(pairs: List[str]) -> Dict[str, str]:
    """--var name=svc1: плоские строки для контекста шаблонов, без разбора типов."""
    out: Dict[str, str] = {}
    for p in pairs:
        if "=" not in p:
            raise ConfigError(f"Variable must be key=value, got: {p}")
        key, val = p.split("=", 1)
        out[key.strip()] = val
    return out


def load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Cannot parse YAML {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"YAML root must be a mapping: {path}")
    return data


def validate_plan(doc: Dict[str, Any]) -> List[str]:
    errors: List[str] = []
    steps = raw_steps(doc)
    if not isinstance(steps, list) or not steps:
        errors.append("steps must be a non-empty list")
        return errors
    for i, st in enumerate(steps, 1):
        try:
            parse_step(st, i)
        except ConfigError as e:
            errors.append(str(e))
    return errors


# ---------- загрузка конфигов ----------


def _render_settings(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """
    Рендерит Jinja2 в строках секции settings на основе settings.vars.
    Шаги плана здесь не трогаем: их рендерят на этапе выполнения.
    """
    settings = cfg.get("settings")
    if not isinstance(settings, dict):
        return cfg
    vars_ = (settings.get("vars") or {}).copy()
    env = Environment(undefined=StrictUndefined)

    def _walk(x: Any) -> Any:
        if isinstance(x, str) and "{{" in x:
            return env.from_string(x).render(**vars_)
        if isinstance(x, dict):
            return {k: _walk(v) for k, v in x.items()}
        if isinstance(x, list):
            return [_walk(i) for i in x]
        return x

    out = dict(cfg)
    out["settings"] = cast(Dict[str, Any], _walk(settings))
    return out


def load_config(
    project_root: Path,
    profile: str | None,
    overrides: List[str],
) -> Dict[str, Any]:
    """
    defaults → profile → CLI overrides, затем рендер settings.
    """
    base = app_base_dir(project_root)
    defaults_p = base / "configs" / "defaults.yaml"
    profile_p = base / "configs" / "profiles" / f"{profile}.yaml" if profile else None

    result: Dict[str, Any] = {}
    if defaults_p.exists():
        result = _deep_merge(result, load_yaml(defaults_p))

    if profile_p is not None:
        if not profile_p.exists():
            raise ConfigError(f"Profile not found: {profile_p}")
        result = _deep_merge(result, load_yaml(profile_p))

    if overrides:
        result = _deep_merge(result, parse_overrides(overrides))

    return _render_settings(result)


def cluster_settings(cfg: Dict[str, Any]) -> ClusterSettings:
    raw = cfg.get("cluster") or {}
    sleep_s = parse_duration(raw.get("retry_sleep"))
    return ClusterSettings(
        max_retries=int(raw.get("max_retries") or DEFAULT_MAX_RETRIES),
        retry_sleep=DEFAULT_RETRY_SLEEP if sleep_s is None else sleep_s,
        kubectl=str(raw.get("kubectl") or "kubectl"),
        kn=str(raw.get("kn") or "kn"),
        namespace=str(raw.get("namespace") or DEFAULT_NAMESPACE),
    )


def context_vars(cfg: Dict[str, Any]) -> Dict[str, Any]:
    return dict(((cfg.get("settings") or {}).get("vars") or {}))


def load_plan(sdk: Sdk) -> Plan:
    path = sdk.plan_file
    if not path.exists():
        raise ConfigError(f"Deploy plan not found: {path}")
    return parse_plan(load_yaml(path), source=str(path))
