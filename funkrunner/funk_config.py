# -*- coding: utf-8 -*-
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml


@dataclass
class FunkFunction:
    name: str = ""
    source: str = ""
    type: str = ""
    return_type: str = ""

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "FunkFunction":
        return cls(
            name=str(raw.get("name") or ""),
            source=str(raw.get("source") or ""),
            type=str(raw.get("type") or ""),
            return_type=str(raw.get("return-type") or ""),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "source": self.source,
            "type": self.type,
            "return-type": self.return_type,
        }


@dataclass
class FunkConfig:
    """Манифест функций: {"funks": [{name, source, type, return-type}]}"""

    funks: List[FunkFunction] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "FunkConfig":
        items = raw.get("funks") or []
        if not isinstance(items, list):
            raise ValueError("funks must be a list")
        return cls(funks=[FunkFunction.from_dict(i) for i in items])

    def to_dict(self) -> Dict[str, Any]:
        return {"funks": [f.to_dict() for f in self.funks]}


def load_funk_config(path: Path) -> FunkConfig:
    # JSON — подмножество YAML, safe_load читает оба
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Manifest root must be a mapping: {path}")
    return FunkConfig.from_dict(data)
