# -*- coding: utf-8 -*-
from __future__ import annotations

import os
import shutil
import signal
import subprocess
import threading
from dataclasses import dataclass
from typing import IO, Any, Dict, List, Optional, Sequence, Union

from rich.console import Console

from .errors import ExecutableNotFoundError, ProcessError

# Ctrl+C, а не kill: даём процессу шанс корректно завершиться
INTERRUPT = signal.CTRL_C_EVENT if os.name == "nt" else signal.SIGINT  # type: ignore[attr-defined]

_LISTEN_TICK = 0.05
_FEED_CHUNK = 64 * 1024


@dataclass
class RunOpts:
    """
    Параметры одного запуска. Всё опционально:
      no_namespace — не добавлять --namespace (для kn)
      allow_error  — вернуть ошибку в RunResult вместо исключения
      stdout       — куда писать stdout; без него stdout копится и возвращается
      stderr       — дополнительная копия stderr (он копится всегда)
      stdin        — строка или поток (текстовый или бинарный); без него stdin пустой
      cancel       — Event: при срабатывании процессу уходит interrupt
      redact       — не печатать вывод команды в debug-логе
    """

    no_namespace: bool = False
    allow_error: bool = False
    stderr: Optional[IO[str]] = None
    stdout: Optional[IO[str]] = None
    stdin: Union[str, IO[Any], None] = None
    cancel: Optional[threading.Event] = None
    redact: bool = False


@dataclass
class RunResult:
    stdout: str
    stderr: str
    returncode: Optional[int]
    error: Optional[ProcessError] = None
    interrupted: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


class _CancelListener(threading.Thread):
    """Ждёт cancel, пока жив процесс; живёт не дольше одного run_cli."""

    def __init__(self, proc: subprocess.Popen, cancel: threading.Event) -> None:
        super().__init__(name=f"cancel-listener-{proc.pid}", daemon=True)
        self._proc = proc
        self._cancel = cancel
        self._done = threading.Event()
        self.fired = False

    def run(self) -> None:
        while not self._done.is_set():
            if self._cancel.wait(_LISTEN_TICK):
                if not self._done.is_set() and self._proc.poll() is None:
                    # best-effort: завершение не ждём
                    self._proc.send_signal(INTERRUPT)
                    self.fired = True
                return

    def stop(self) -> None:
        self._done.set()
        self.join()


def cmd_cli_desc(cli: str, args: Sequence[str]) -> str:
    return f"{cli} {' '.join(args)}"


def _debug(console: Optional[Console], msg: str) -> None:
    if console is not None:
        console.print(msg, style="dim", markup=False, highlight=False)


def _stdin_fileno(src: Any) -> Optional[int]:
    try:
        return src.fileno()
    except (AttributeError, OSError, ValueError):
        # StringIO/BytesIO: fileno нет, кормим через pipe
        return None


def _feed_stdin(dst: IO[str], src: IO[Any]) -> None:
    """Переливает src в stdin процесса кусками и закрывает его."""
    try:
        while True:
            chunk = src.read(_FEED_CHUNK)
            if not chunk:
                break
            if isinstance(chunk, bytes):
                dst.buffer.write(chunk)  # type: ignore[attr-defined]
            else:
                dst.write(chunk)
            dst.flush()
    except BrokenPipeError:
        # процесс закрыл stdin раньше, чем дочитал: как и communicate, не ошибка
        pass
    finally:
        try:
            dst.close()
        except BrokenPipeError:
            pass


def run_cli(
    cli: str,
    args: Sequence[str],
    opts: Optional[RunOpts] = None,
    console: Optional[Console] = None,
) -> RunResult:
    """
    Запускает одну внешнюю команду и захватывает её вывод.

    stderr всегда копится в буфер и попадает в текст ошибки.
    Ошибка (ненулевой код или не удалось стартовать):
      - allow_error=False -> ProcessError;
      - allow_error=True  -> RunResult.error, решает вызывающий.
    """
    opts = opts or RunOpts()
    desc = cmd_cli_desc(cli, args)
    _debug(console, f"Running '{desc}'...")

    src = opts.stdin
    payload: Optional[str] = src if isinstance(src, str) else None
    fd = None if src is None or payload is not None else _stdin_fileno(src)
    if src is None:
        stdin_arg: Any = subprocess.DEVNULL
    elif fd is not None:
        # настоящий файл/pipe отдаём процессу как есть, без чтения у себя
        stdin_arg = fd
    else:
        stdin_arg = subprocess.PIPE

    try:
        proc = subprocess.Popen(
            [cli, *args],
            stdin=stdin_arg,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
    except OSError as e:
        result = RunResult(stdout="", stderr="", returncode=None)
        result.error = ProcessError("", e, None, desc)
        return _finish(result, opts, console)

    feeder: Optional[threading.Thread] = None
    if src is not None and payload is None and fd is None:
        # stdin забирает feeder; communicate его не трогает
        pipe, proc.stdin = proc.stdin, None
        feeder = threading.Thread(
            target=_feed_stdin,
            args=(pipe, src),
            name=f"stdin-feeder-{proc.pid}",
            daemon=True,
        )
        feeder.start()

    listener: Optional[_CancelListener] = None
    if opts.cancel is not None:
        listener = _CancelListener(proc, opts.cancel)
        listener.start()

    try:
        out, err = proc.communicate(input=payload)
    except BaseException:
        proc.kill()
        proc.wait()
        raise
    finally:
        if listener is not None:
            listener.stop()
        if feeder is not None:
            feeder.join()

    if opts.stderr is not None and err:
        opts.stderr.write(err)
    if opts.stdout is not None:
        opts.stdout.write(out)
        out = ""

    result = RunResult(
        stdout=out,
        stderr=err,
        returncode=proc.returncode,
        interrupted=bool(listener and listener.fired),
    )
    if proc.returncode != 0:
        result.error = ProcessError(
            err, f"exit status {proc.returncode}", proc.returncode, desc
        )
    return _finish(result, opts, console)


def _finish(result: RunResult, opts: RunOpts, console: Optional[Console]) -> RunResult:
    if result.stdout:
        _debug(console, "Output: <redacted>" if opts.redact else f"Output: {result.stdout}")
    if result.error is not None and not opts.allow_error:
        raise result.error
    return result


def resolve_executable(name: str) -> str:
    path = shutil.which(name)
    if path is None:
        raise ExecutableNotFoundError(f"executable file not found in $PATH: {name!r}")
    return path


def run_direct(
    path: str, args: Sequence[str], extra_env: Optional[Dict[str, str]] = None
) -> int:
    """
    Запуск «вживую»: stdin/stdout/stderr родителя, окружение наследуется.
    Ненулевой код -> subprocess.CalledProcessError.
    """
    cmd: List[str] = [path, *args]
    env = None if not extra_env else {**os.environ, **extra_env}
    proc = subprocess.run(cmd, env=env, shell=False, check=True)
    return proc.returncode
