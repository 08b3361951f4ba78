from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from funkrunner.cluster import (
    ClusterSession,
    Kn,
    Kubectl,
    create_namespace,
    delete_namespace,
    match_regexp,
    wait_for_namespace_created,
    wait_for_namespace_deleted,
)
from funkrunner.counters import Counters
from funkrunner.dsl import ClusterSettings
from funkrunner.errors import ClusterError, PollTimeoutError, ProcessError
from funkrunner.process import RunOpts, RunResult

SETTINGS = ClusterSettings(max_retries=3, retry_sleep=0.5)


class FakeCli:
    """Подменяет run_cli: ответы по первому аргументу, последний ответ повторяется."""

    def __init__(self, responses: Dict[str, List[Tuple[str, int]]]) -> None:
        self.responses = responses
        self.calls: List[Tuple[str, List[str], RunOpts]] = []

    def __call__(
        self,
        cli: str,
        args: Sequence[str],
        opts: Optional[RunOpts] = None,
        console: object = None,
    ) -> RunResult:
        opts = opts or RunOpts()
        self.calls.append((cli, list(args), opts))
        queue = self.responses[args[0]]
        out, rc = queue.pop(0) if len(queue) > 1 else queue[0]
        res = RunResult(stdout=out, stderr="" if rc == 0 else "boom", returncode=rc)
        if rc != 0:
            res.error = ProcessError("boom", f"exit status {rc}", rc)
            if not opts.allow_error:
                raise res.error
        return res

    def verbs(self, verb: str) -> int:
        return sum(1 for _, args, _ in self.calls if args[0] == verb)


@pytest.fixture
def fake(monkeypatch: pytest.MonkeyPatch, no_sleep: list):
    def _install(responses: Dict[str, List[Tuple[str, int]]]) -> FakeCli:
        cli = FakeCli(responses)
        monkeypatch.setattr("funkrunner.cluster.run_cli", cli)
        return cli

    return _install


def test_create_namespace_retries_until_success(fake, no_sleep: list) -> None:
    cli = fake({"create": [("", 1), ("", 1), ("namespace/ns0 created\n", 0)]})
    res = create_namespace(Kubectl(), "ns0", SETTINGS)
    assert res.stdout == "namespace/ns0 created\n"
    assert cli.verbs("create") == 3
    assert no_sleep == [0.5, 0.5]
    assert all(opts.allow_error for _, _, opts in cli.calls)


def test_create_namespace_gives_up(fake) -> None:
    cli = fake({"create": [("", 1)]})
    with pytest.raises(ClusterError, match="giving up") as exc:
        create_namespace(Kubectl(), "ns0", SETTINGS)
    assert isinstance(exc.value.__cause__, ProcessError)
    assert cli.verbs("create") == SETTINGS.max_retries


def test_create_namespace_unexpected_output(fake) -> None:
    fake({"create": [("namespace/other created\n", 0)]})
    with pytest.raises(ClusterError, match="Expected output incorrect"):
        create_namespace(Kubectl(), "ns0", SETTINGS)


def test_delete_namespace_checks_output(fake) -> None:
    fake({"delete": [('namespace "ns0" deleted\n', 0)]})
    assert delete_namespace(Kubectl(), "ns0").returncode == 0


def test_delete_namespace_failure_is_fatal(fake) -> None:
    fake({"delete": [("", 1)]})
    with pytest.raises(ProcessError):
        delete_namespace(Kubectl(), "ns0")


def test_wait_created_polls_until_listed(fake) -> None:
    cli = fake({"get": [("default Active\n", 0), ("", 1), ("ns0 Active\n", 0)]})
    wait_for_namespace_created(Kubectl(), "ns0", SETTINGS)
    assert cli.verbs("get") == 3


def test_wait_created_times_out(fake) -> None:
    cli = fake({"get": [("default Active\n", 0)]})
    with pytest.raises(PollTimeoutError, match="Error creating namespace ns0, timed out"):
        wait_for_namespace_created(Kubectl(), "ns0", SETTINGS)
    assert cli.verbs("get") == SETTINGS.max_retries


def test_wait_deleted_polls_until_gone(fake) -> None:
    cli = fake({"get": [("ns0 Terminating\n", 0), ("default Active\n", 0)]})
    wait_for_namespace_deleted(Kubectl(), "ns0", SETTINGS)
    assert cli.verbs("get") == 2


def test_wait_deleted_does_not_trust_failed_listing(fake) -> None:
    cli = fake({"get": [("", 1)]})
    with pytest.raises(PollTimeoutError):
        wait_for_namespace_deleted(Kubectl(), "ns0", SETTINGS)
    assert cli.verbs("get") == SETTINGS.max_retries


def test_wait_deleted_times_out(fake) -> None:
    fake({"get": [("ns0 Terminating\n", 0)]})
    with pytest.raises(PollTimeoutError, match="Error deleting namespace ns0"):
        wait_for_namespace_deleted(Kubectl(), "ns0", SETTINGS)


def test_kn_scopes_to_namespace(fake) -> None:
    cli = fake({"service": [("ok", 0)]})
    kn = Kn("ns3")
    kn.run(["service", "list"])
    kn.run(["service", "list"], RunOpts(no_namespace=True))
    assert cli.calls[0][1] == ["service", "list", "--namespace", "ns3"]
    assert cli.calls[1][1] == ["service", "list"]
    assert cli.calls[0][0] == "kn"


def test_session_setup_and_teardown(fake) -> None:
    settings = ClusterSettings(max_retries=3, retry_sleep=0.5, namespace="kne2e")
    cli = fake(
        {
            "create": [("namespace/kne2e0 created\n", 0)],
            "get": [("kne2e0 Active\n", 0), ("kne2e0 Terminating\n", 0), ("default Active\n", 0)],
            "delete": [('namespace "kne2e0" deleted\n', 0)],
        }
    )
    counters = Counters()
    with ClusterSession(settings, counters) as session:
        assert session.namespace == "kne2e0"
        assert session.namespace_created
        assert session.kn is not None and session.kn.namespace == "kne2e0"
        assert session.service_name("hello") == "hello0"
    assert not session.namespace_created
    assert cli.verbs("delete") == 1
    # один список на setup, ещё два — пока namespace не пропадёт
    assert cli.verbs("get") == 3


def test_session_teardown_without_wait(fake) -> None:
    cli = fake(
        {
            "create": [("namespace/kne2etests0 created\n", 0)],
            "get": [("kne2etests0 Active\n", 0)],
            "delete": [('namespace "kne2etests0" deleted\n', 0)],
        }
    )
    session = ClusterSession(SETTINGS, Counters()).setup()
    session.teardown(wait=False)
    assert cli.verbs("get") == 1


def test_session_teardown_times_out_when_namespace_lingers(fake) -> None:
    fake(
        {
            "create": [("namespace/kne2etests0 created\n", 0)],
            "get": [("kne2etests0 Terminating\n", 0)],
            "delete": [('namespace "kne2etests0" deleted\n', 0)],
        }
    )
    session = ClusterSession(SETTINGS, Counters()).setup()
    with pytest.raises(PollTimeoutError, match="Error deleting namespace kne2etests0"):
        session.teardown()


def test_session_without_namespace_creation(fake) -> None:
    cli = fake({})
    session = ClusterSession(SETTINGS, Counters(5), create_namespace_on_setup=False).setup()
    assert session.namespace == "kne2etests5"
    session.teardown()
    assert cli.calls == []


def test_match_regexp() -> None:
    assert match_regexp("namespace?.+ns1.+created", "namespace/ns1 created")
    assert not match_regexp("namespace?.+ns1.+created", "namespace/ns1 deleted")
