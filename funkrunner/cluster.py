# -*- coding: utf-8 -*-
from __future__ import annotations

import re
from typing import List, Optional, Sequence, Tuple

from rich.console import Console

from .counters import SHARED, Counters
from .dsl import ClusterSettings
from .errors import ClusterError, PollTimeoutError, ProcessError
from .poll import poll_until, retry
from .process import RunOpts, RunResult, run_cli


class Kubectl:
    def __init__(self, binary: str = "kubectl", console: Optional[Console] = None) -> None:
        self.binary = binary
        self.console = console

    def run(self, args: Sequence[str], opts: Optional[RunOpts] = None) -> RunResult:
        return run_cli(self.binary, args, opts, self.console)


class Kn:
    """kn, привязанный к namespace: --namespace добавляется, если не no_namespace."""

    def __init__(
        self, namespace: str, binary: str = "kn", console: Optional[Console] = None
    ) -> None:
        self.namespace = namespace
        self.binary = binary
        self.console = console

    def run(self, args: Sequence[str], opts: Optional[RunOpts] = None) -> RunResult:
        opts = opts or RunOpts()
        full: List[str] = list(args)
        if not opts.no_namespace:
            full += ["--namespace", self.namespace]
        return run_cli(self.binary, full, opts, self.console)


def match_regexp(pattern: str, actual: str) -> bool:
    return re.search(pattern, actual) is not None


def _expect(action: str, namespace: str, out: str) -> None:
    expected = f"namespace?.+{re.escape(namespace)}.+{action}"
    if not match_regexp(expected, out):
        raise ClusterError(
            f"Expected output incorrect, expecting to include:\n{expected}\n"
            f" Instead found:\n{out}"
        )


def create_namespace(
    kubectl: Kubectl, namespace: str, settings: ClusterSettings
) -> RunResult:
    """
    kubectl create namespace с повторами: API мог ещё не принять
    удаление одноимённого namespace из прошлого прогона.
    """

    def attempt() -> Tuple[RunResult, Optional[ProcessError]]:
        res = kubectl.run(["create", "namespace", namespace], RunOpts(allow_error=True))
        return res, res.error

    res, err = retry(attempt, settings.max_retries, settings.retry_sleep, kubectl.console)
    if err is not None:
        raise ClusterError(
            f"Could not create namespace with error {err}, giving up"
        ) from err
    _expect("created", namespace, res.stdout)
    return res


def delete_namespace(kubectl: Kubectl, namespace: str) -> RunResult:
    res = kubectl.run(["delete", "namespace", namespace])
    _expect("deleted", namespace, res.stdout)
    return res


def check_namespace(
    kubectl: Kubectl, namespace: str, present: bool, settings: ClusterSettings
) -> bool:
    def probe() -> Tuple[str, Optional[ProcessError]]:
        res = kubectl.run(["get", "namespace"], RunOpts(allow_error=True))
        return res.stdout, res.error

    return poll_until(
        probe,
        namespace,
        present,
        settings.max_retries,
        settings.retry_sleep,
        kubectl.console,
    )


def wait_for_namespace_created(
    kubectl: Kubectl, namespace: str, settings: ClusterSettings
) -> None:
    if not check_namespace(kubectl, namespace, True, settings):
        raise PollTimeoutError(f"Error creating namespace {namespace}, timed out")


def wait_for_namespace_deleted(
    kubectl: Kubectl, namespace: str, settings: ClusterSettings
) -> None:
    if not check_namespace(kubectl, namespace, False, settings):
        raise PollTimeoutError(f"Error deleting namespace {namespace}, timed out")


class ClusterSession:
    """
    Изолированный namespace на время одного теста/прогона:
    setup() выбирает уникальное имя и создаёт его, teardown() удаляет.
    """

    def __init__(
        self,
        settings: ClusterSettings,
        counters: Optional[Counters] = None,
        console: Optional[Console] = None,
        create_namespace_on_setup: bool = True,
    ) -> None:
        self.settings = settings
        self.counters = counters or SHARED
        self.kubectl = Kubectl(settings.kubectl, console)
        self.create_namespace_on_setup = create_namespace_on_setup
        self.namespace = ""
        self.namespace_created = False
        self.kn: Optional[Kn] = None

    def setup(self) -> "ClusterSession":
        self.namespace = f"{self.settings.namespace}{self.counters.next_namespace()}"
        self.kn = Kn(self.namespace, self.settings.kn, self.kubectl.console)
        if self.create_namespace_on_setup:
            create_namespace(self.kubectl, self.namespace, self.settings)
            self.namespace_created = True
            wait_for_namespace_created(self.kubectl, self.namespace, self.settings)
        return self

    def teardown(self, wait: bool = True) -> None:
        """Удаляет namespace, если его создали, и ждёт, пока он пропадёт из списка."""
        if not self.namespace_created:
            return
        delete_namespace(self.kubectl, self.namespace)
        self.namespace_created = False
        if wait:
            wait_for_namespace_deleted(self.kubectl, self.namespace, self.settings)

    def service_name(self, base: str) -> str:
        return self.counters.next_service_name(base)

    def __enter__(self) -> "ClusterSession":
        return self.setup()

    def __exit__(self, *exc: object) -> None:
        self.teardown()
