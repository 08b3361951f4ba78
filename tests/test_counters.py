from __future__ import annotations

import threading

from funkrunner.counters import Counters


def test_sequences_start_at_zero() -> None:
    c = Counters()
    assert [c.next_namespace() for _ in range(3)] == [0, 1, 2]
    assert c.next_service_name("hello") == "hello0"
    assert c.next_service_name("hello") == "hello1"
    assert c.snapshot() == (3, 2)


def test_instances_are_independent() -> None:
    a, b = Counters(), Counters()
    a.next_namespace()
    assert b.next_namespace() == 0


def test_concurrent_callers_get_distinct_gapless_values() -> None:
    c = Counters()
    per_thread = 200
    seen: list[int] = []
    names: list[str] = []
    lock = threading.Lock()

    def worker() -> None:
        local = [c.next_namespace() for _ in range(per_thread)]
        local_names = [c.next_service_name("svc") for _ in range(per_thread)]
        with lock:
            seen.extend(local)
            names.extend(local_names)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(seen) == list(range(8 * per_thread))
    assert sorted(names) == sorted(f"svc{i}" for i in range(8 * per_thread))
