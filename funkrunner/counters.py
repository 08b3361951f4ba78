# -*- coding: utf-8 -*-
from __future__ import annotations

import threading
from typing import Tuple


class Counters:
    """
    Два монотонных счётчика (namespace и имена сервисов) под одним локом.
    Нужны, чтобы параллельные тесты в одном процессе получали уникальные имена.
    """

    def __init__(self, namespace_start: int = 0, service_start: int = 0) -> None:
        self._lock = threading.Lock()
        self._namespace = namespace_start
        self._service = service_start

    def next_namespace(self) -> int:
        with self._lock:
            current = self._namespace
            self._namespace += 1
            return current

    def next_service_name(self, base: str) -> str:
        with self._lock:
            current = self._service
            self._service += 1
        return f"{base}{current}"

    def snapshot(self) -> Tuple[int, int]:
        with self._lock:
            return self._namespace, self._service


# общий на процесс; тестам лучше создавать свой экземпляр
SHARED = Counters()
