"""
Concurrency tests for MicroHash HashStore.

Several threads hammer the same key; field counts, increments and the
registry entry of the key must come out consistent.
"""

import sys
import os
import threading

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from microhash.config import Config
from microhash.storage.hash import HashStore
from microhash.storage.registry import MemoryKeyRegistry

THREADS = 8
ROUNDS = 300


def make_store():
    config = Config()
    return HashStore(registry=MemoryKeyRegistry(config), config=config)


def run_threads(target):
    threads = [threading.Thread(target=target, args=(i,)) for i in range(THREADS)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()


def test_concurrent_hincrby():
    store = make_store()

    def worker(i):
        for _ in range(ROUNDS):
            store.hincrby('counter', 'n', 1)

    run_threads(worker)
    assert store.hget('counter', 'n') == str(THREADS * ROUNDS)

    print("[OK] Concurrent HINCRBY")


def test_concurrent_create_and_destroy():
    """Racing last-field deletes never leave an empty hash or a stale key."""
    store = make_store()

    def worker(i):
        field = f'f{i}'
        for _ in range(ROUNDS):
            store.hset('shared', field, 'v')
            store.hdel('shared', field)

    run_threads(worker)

    assert store.exists('shared') is False
    assert store.hlen('shared') == 0
    assert store.registry.exists('shared') == 0


def test_concurrent_hmset_is_atomic_for_readers():
    store = make_store()
    fields = [f'f{i}' for i in range(20)]
    seen = []

    def writer(i):
        for round_no in range(ROUNDS // 10):
            args = []
            for field in fields:
                args.extend([field, f'{i}-{round_no}'])
            store.hmset('snap', *args)

    def reader():
        for _ in range(ROUNDS):
            values = store.hvals('snap')
            if values:
                seen.append(len(set(values)))

    readers = [threading.Thread(target=reader) for _ in range(2)]
    for t in readers:
        t.start()
    run_threads(writer)
    for t in readers:
        t.join()

    # Every snapshot comes from a single HMSET call
    assert all(count == 1 for count in seen)
    assert store.hlen('snap') == len(fields)


def test_other_stripe_is_not_blocked():
    """A key whose stripe lock is held does not stall keys on other stripes."""
    store = make_store()
    held = store._lock_for('a')
    other = next(key for key in (f'b{i}' for i in range(1000))
                 if store._lock_for(key) is not held)

    done = []
    free = threading.Thread(target=lambda: done.append(store.hset(other, 'f', 'v')))
    blocked = threading.Thread(target=lambda: done.append(store.hset('a', 'f', 'v')))

    held.acquire()
    try:
        free.start()
        free.join(timeout=2)
        assert not free.is_alive()
        assert done == [True]

        blocked.start()
        blocked.join(timeout=0.2)
        assert blocked.is_alive()
    finally:
        held.release()

    blocked.join(timeout=2)
    assert not blocked.is_alive()
    assert done == [True, True]
    assert store.hget(other, 'f') == 'v'
    assert store.hget('a', 'f') == 'v'

    print("[OK] Independent stripes")


if __name__ == '__main__':
    test_concurrent_hincrby()
    test_concurrent_create_and_destroy()
    test_concurrent_hmset_is_atomic_for_readers()
    test_other_stripe_is_not_blocked()
    print("All concurrency tests passed!")
