# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Optional


class ConfigError(ValueError):
    """Ошибка структуры плана или конфига: шаг без команды, битый YAML и т.п."""


class ExecutableNotFoundError(FileNotFoundError):
    pass


class ProcessError(RuntimeError):
    """
    Неудачный запуск внешней команды: ненулевой код возврата
    или процесс вообще не стартовал (returncode=None).
    """

    def __init__(
        self,
        stderr: str,
        cause: object,
        returncode: Optional[int] = None,
        command: str = "",
    ) -> None:
        super().__init__(f"Execution error: stderr: '{stderr}' error: '{cause}'")
        self.stderr = stderr
        self.cause = cause
        self.returncode = returncode
        self.command = command


class PollTimeoutError(TimeoutError):
    pass


class ClusterError(RuntimeError):
    """Команда к control plane отработала, но вывод не тот, что ожидали."""
