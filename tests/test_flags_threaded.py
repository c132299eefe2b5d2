import threading

from flagreg import FlagRegistry


def test_concurrent_set_same_flag():
    r = FlagRegistry()
    barrier = threading.Barrier(20)

    def setter():
        barrier.wait()
        for _ in range(100):
            r.set("f")

    threads = [threading.Thread(target=setter) for _ in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert r.is_set("f")
    assert len(r) == 1
    assert r.snapshot() == frozenset({"f"})


def test_concurrent_set_and_is_set():
    r = FlagRegistry()

    def writer(start, end):
        for i in range(start, end):
            r.set(f"k{i}")

    def reader(results):
        for i in range(50):
            results.append(r.is_set(f"k{i}"))

    write_threads = [threading.Thread(target=writer, args=(i*10, (i+1)*10)) for i in range(5)]
    read_results = []
    read_threads = [threading.Thread(target=reader, args=(read_results,)) for _ in range(5)]

    for t in write_threads:
        t.start()
    for t in read_threads:
        t.start()

    for t in write_threads + read_threads:
        t.join()

    for i in range(50):
        assert r.is_set(f"k{i}")
    assert len(r) == 50
    for val in read_results:
        assert isinstance(val, bool)


def test_claim_is_won_by_exactly_one_thread():
    r = FlagRegistry()
    barrier = threading.Barrier(16)
    wins = []

    def claimer():
        barrier.wait()
        if r.claim("leader"):
            wins.append(threading.get_ident())

    threads = [threading.Thread(target=claimer) for _ in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(wins) == 1
    assert r.is_set("leader")


def test_once_is_not_atomic_across_threads():
    r = FlagRegistry()
    calls = []
    started = threading.Event()
    release = threading.Event()

    def slow():
        calls.append("first")
        started.set()
        release.wait(5)

    t = threading.Thread(target=r.once, args=("f", slow))
    t.start()
    assert started.wait(5)

    # the first action has not finished, so the flag is still unset
    r.once("f", lambda: calls.append("second"))
    release.set()
    t.join()

    assert calls == ["first", "second"]
    assert r.is_set("f")


def test_once_exclusive_runs_action_exactly_once():
    r = FlagRegistry()
    barrier = threading.Barrier(16)
    calls = []
    results = []

    def action():
        calls.append(1)

    def worker():
        barrier.wait()
        results.append(r.once_exclusive("f", action))

    threads = [threading.Thread(target=worker) for _ in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert calls == [1]
    assert results.count(True) == 1
    assert results.count(False) == 15


def test_once_exclusive_waiter_sees_flag_set():
    r = FlagRegistry()
    calls = []
    results = []
    started = threading.Event()
    release = threading.Event()

    def slow():
        calls.append("first")
        started.set()
        release.wait(5)

    first = threading.Thread(target=lambda: results.append(r.once_exclusive("f", slow)))
    first.start()
    assert started.wait(5)

    second = threading.Thread(
        target=lambda: results.append(r.once_exclusive("f", lambda: calls.append("second")))
    )
    second.start()
    second.join(0.1)
    assert second.is_alive()

    release.set()
    first.join()
    second.join()

    assert calls == ["first"]
    assert sorted(results) == [False, True]


def test_once_exclusive_does_not_block_other_flags():
    r = FlagRegistry()
    started = threading.Event()
    release = threading.Event()

    def slow():
        started.set()
        release.wait(5)

    t = threading.Thread(target=r.once_exclusive, args=("a", slow))
    t.start()
    assert started.wait(5)

    assert r.once_exclusive("b", lambda: None) is True
    assert r.is_set("b")
    assert not r.is_set("a")

    release.set()
    t.join()
    assert r.is_set("a")


def test_bulk_blocks_other_writers():
    r = FlagRegistry()
    done = threading.Event()

    def setter():
        r.set("other")
        done.set()

    with r.bulk():
        t = threading.Thread(target=setter)
        t.start()
        assert not done.wait(0.1)
        assert not r.is_set("other")
    t.join()
    assert r.is_set("other")


def test_once_exclusive_waiter_inside_bulk_does_not_deadlock():
    r = FlagRegistry()
    calls = []
    results = []
    started = threading.Event()
    release = threading.Event()

    def slow():
        calls.append("first")
        started.set()
        release.wait(5)

    def bulk_caller():
        with r.bulk() as f:
            release.set()
            results.append(f.once_exclusive("f", lambda: calls.append("second")))

    first = threading.Thread(target=r.once_exclusive, args=("f", slow))
    first.start()
    assert started.wait(5)

    second = threading.Thread(target=bulk_caller)
    second.start()

    first.join(5)
    second.join(5)
    assert not first.is_alive()
    assert not second.is_alive()
    assert calls == ["first"]
    assert results == [False]
    # registry lock is free again
    r.set("after")
    assert r.is_set("after")


def test_once_exclusive_waiter_retries_after_failure():
    r = FlagRegistry()
    calls = []
    results = []
    started = threading.Event()
    release = threading.Event()

    def failing():
        calls.append("first")
        started.set()
        release.wait(5)
        raise RuntimeError("boom")

    def first_caller():
        try:
            r.once_exclusive("f", failing)
        except RuntimeError:
            results.append("raised")

    first = threading.Thread(target=first_caller)
    first.start()
    assert started.wait(5)

    second = threading.Thread(
        target=lambda: results.append(r.once_exclusive("f", lambda: calls.append("second")))
    )
    second.start()
    second.join(0.1)
    assert second.is_alive()

    release.set()
    first.join(5)
    second.join(5)

    assert calls == ["first", "second"]
    assert sorted(results, key=str) == [True, "raised"]
    assert r.is_set("f")
    assert r._in_progress == {}
