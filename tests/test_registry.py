"""
Test suite for the MicroHash key registry.

Verifies MemoryKeyRegistry bookkeeping on its own and as the keyspace a
HashStore reports to: type conflicts, key limits and keyspace queries.
"""

import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest

from microhash.config import Config
from microhash.core.constants import TYPE_HASH, TYPE_LIST, TYPE_STRING
from microhash.exceptions import WrongTypeError, OutOfMemoryError
from microhash.storage.hash import HashStore
from microhash.storage.registry import KeyRegistry, MemoryKeyRegistry


def test_register_and_unregister():
    registry = MemoryKeyRegistry(Config())

    assert registry.register_if_absent('k', TYPE_HASH) is True
    assert registry.register_if_absent('k', TYPE_HASH) is False
    assert registry.exists('k') == 1
    assert registry.type('k') == 'hash'

    assert registry.unregister_if_empty('k') is True
    assert registry.unregister_if_empty('k') is False
    assert registry.exists('k') == 0
    assert registry.type('k') == 'none'

    print("[OK] Register/unregister")


def test_exists_counts_each_argument():
    registry = MemoryKeyRegistry(Config())
    registry.register('a')
    registry.register('b', TYPE_LIST)

    assert registry.exists('a', 'b', 'c') == 2
    assert registry.exists('a', 'a') == 2
    assert registry.type('a') == 'string'
    assert registry.type('b') == 'list'


def test_keys_pattern():
    registry = MemoryKeyRegistry(Config())
    for key in ('user:1', 'user:2', 'session:1'):
        registry.register_if_absent(key, TYPE_HASH)

    assert registry.keys() == ['user:1', 'user:2', 'session:1']
    assert registry.keys('user:*') == ['user:1', 'user:2']
    assert registry.keys('*:1') == ['user:1', 'session:1']
    assert registry.keys('nothing*') == []


def test_check_type():
    registry = MemoryKeyRegistry(Config())
    registry.register('s', TYPE_STRING)

    registry.check_type('missing', TYPE_HASH)
    registry.check_type('s', TYPE_STRING)
    with pytest.raises(WrongTypeError):
        registry.check_type('s', TYPE_HASH)


def test_hash_commands_reject_other_types():
    registry = MemoryKeyRegistry(Config())
    store = HashStore(registry=registry, config=Config())
    registry.register('s', TYPE_STRING)

    with pytest.raises(WrongTypeError) as excinfo:
        store.hset('s', 'f', 'v')
    assert str(excinfo.value).startswith('WRONGTYPE')

    with pytest.raises(WrongTypeError):
        store.hget('s', 'f')
    with pytest.raises(WrongTypeError):
        store.hmset('s', 'f', 'v')
    with pytest.raises(WrongTypeError):
        store.hincrby('s', 'f', 1)

    assert store.exists('s') is False
    assert registry.type('s') == 'string'

    print("[OK] WRONGTYPE")


def test_max_keys():
    config = Config({'maxkeys': 2})
    registry = MemoryKeyRegistry(config)
    store = HashStore(registry=registry, config=config)

    store.hset('a', 'f', 'v')
    store.hset('b', 'f', 'v')
    with pytest.raises(OutOfMemoryError):
        store.hset('c', 'f', 'v')
    with pytest.raises(OutOfMemoryError):
        store.hmset('c', 'f1', 'v1', 'f2', 'v2')

    assert store.exists('c') is False
    assert registry.exists('c') == 0

    # Existing hashes still accept new fields
    assert store.hset('a', 'g', 'v') is True

    # Freeing a key makes room again
    store.hdel('b', 'f')
    assert store.hset('c', 'f', 'v') is True


def test_stub_registry_is_used():
    class DenyAll(KeyRegistry):
        def check_type(self, key, type_id):
            raise WrongTypeError()

        def register_if_absent(self, key, type_id):
            return True

        def unregister_if_empty(self, key):
            return True

    store = HashStore(registry=DenyAll(), config=Config())
    assert isinstance(store.registry, DenyAll)

    with pytest.raises(WrongTypeError):
        store.hlen('any')


def test_base_registry_is_abstract():
    registry = KeyRegistry()
    with pytest.raises(NotImplementedError):
        registry.check_type('k', TYPE_HASH)
    with pytest.raises(NotImplementedError):
        registry.register_if_absent('k', TYPE_HASH)
    with pytest.raises(NotImplementedError):
        registry.unregister_if_empty('k')


def test_register_refuses_to_retype_live_key():
    """A live hash cannot be claimed by another type until its data is gone."""
    registry = MemoryKeyRegistry(Config())
    store = HashStore(registry=registry, config=Config())
    store.hset('k', 'f', 'old')

    with pytest.raises(WrongTypeError):
        registry.register('k', TYPE_STRING)
    assert registry.type('k') == 'hash'

    # Registering the type it already holds is a no-op
    registry.register('k', TYPE_HASH)
    assert store.hget('k', 'f') == 'old'

    store.purge('k')
    registry.register('k', TYPE_STRING)
    assert registry.type('k') == 'string'
    assert store.exists('k') is False
    with pytest.raises(WrongTypeError):
        store.hget('k', 'f')

    registry.unregister_if_empty('k')
    assert store.hget('k', 'f') is None

    print("[OK] Register refuses retype")


def test_store_flush_keeps_registry_in_step():
    registry = MemoryKeyRegistry(Config())
    store = HashStore(registry=registry, config=Config())
    registry.register('s', TYPE_STRING)
    store.hset('a', 'f', 'v')
    store.hset('b', 'f', 'v')

    store.flush()
    for key in ('a', 'b'):
        assert registry.exists(key) == int(store.exists(key)) == 0
    assert registry.keys() == ['s']
    assert not hasattr(registry, 'flush')

    # A flushed key comes back registered on its next write
    store.hset('a', 'g', 'v')
    assert store.exists('a') is True
    assert registry.exists('a') == 1
    assert registry.type('a') == 'hash'


def run_all_tests():
    """Run all registry tests."""
    print("=" * 60)
    print("MicroHash Key Registry Tests")
    print("=" * 60)

    module = sys.modules[__name__]
    for name in sorted(dir(module)):
        if name.startswith('test_'):
            getattr(module, name)()

    print("All registry tests passed!")


if __name__ == '__main__':
    run_all_tests()
