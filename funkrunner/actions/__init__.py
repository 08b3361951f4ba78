# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Callable, Dict

REGISTRY: Dict[type, Callable] = {}


def register(kind: type):
    def deco(func: Callable):
        REGISTRY[kind] = func
        return func

    return deco


# важно: импортируем модули, чтобы обработчики зарегистрировались
from . import fs  # noqa: E402,F401
from . import run  # noqa: E402,F401
