# -*- coding: utf-8 -*-
from __future__ import annotations

from time import sleep
from typing import Callable, Optional, Tuple, TypeVar

from rich.console import Console

from .utils.timeparse import format_seconds

T = TypeVar("T")

Probe = Callable[[], Tuple[str, Optional[BaseException]]]


def poll_until(
    probe: Probe,
    target: str,
    present: bool,
    max_attempts: int,
    interval: float,
    console: Optional[Console] = None,
) -> bool:
    """
    Опрашивает probe, пока target не появится (present=True)
    или не исчезнет (present=False) из его вывода.

    Ошибка самого probe не отличима от «ещё не согласовано»:
    такая попытка всегда неудачная, что бы ни было в выводе
    (пустой вывод упавшего kubectl — не «namespace исчез»).
    Между неудачными попытками — sleep(interval).
    Возвращает False, если попытки кончились.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    for attempt in range(1, max_attempts + 1):
        output, err = probe()
        if err is None and (target in output) == present:
            return True
        if attempt == max_attempts:
            break
        if console is not None:
            state = "appear" if present else "disappear"
            console.print(
                f"Waiting for '{target}' to {state}, retrying in "
                f"{format_seconds(interval)}: {attempt} of {max_attempts}",
                style="dim",
                markup=False,
                highlight=False,
            )
        sleep(interval)
    return False


def retry(
    fn: Callable[[], Tuple[T, Optional[BaseException]]],
    max_attempts: int,
    interval: float,
    console: Optional[Console] = None,
) -> Tuple[T, Optional[BaseException]]:
    """
    Слепой повтор без опроса состояния: пока fn возвращает ошибку,
    ждём interval и пробуем снова. Возвращает результат последней попытки.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    for attempt in range(1, max_attempts + 1):
        value, err = fn()
        if err is None:
            return value, None
        if attempt == max_attempts:
            break
        if console is not None:
            console.print(
                f"Attempt failed with error {err}, waiting "
                f"{format_seconds(interval)}, and trying again: {attempt} of {max_attempts}",
                style="dim",
                markup=False,
                highlight=False,
            )
        sleep(interval)
    return value, err
