"""
MicroHash - an in-process emulation of the Redis hash command family.

MicroHash reproduces the observable semantics of HSET, HGET, HDEL,
HEXISTS, HGETALL, HKEYS, HVALS, HLEN, HMGET, HMSET, HSETNX, HINCRBY and
HINCRBYFLOAT against an in-memory store, without any network round-trip.
It is meant as a test double and as the hash engine of a larger
key/value emulator.

Usage:
    from microhash import HashStore

    store = HashStore()
    store.hset('user:1', 'name', 'ada')
    store.hincrby('user:1', 'visits', 1)
    store.hgetall('user:1')   # {'name': 'ada', 'visits': '1'}
"""

from microhash.config import Config, get_config, init_config
from microhash.exceptions import (
    RedisError, WrongTypeError, OutOfMemoryError, ArgumentCountError,
    WrongArityError, TypeMismatchError, NotIntegerError, NotFloatError,
    UnknownCommandError,
)
from microhash.storage import KeyRegistry, MemoryKeyRegistry, HashStore
from microhash.router import CommandRouter

__version__ = '1.0.0'
__all__ = [
    '__version__',
    'HashStore', 'KeyRegistry', 'MemoryKeyRegistry', 'CommandRouter',
    'Config', 'get_config', 'init_config',
    'RedisError', 'WrongTypeError', 'OutOfMemoryError', 'ArgumentCountError',
    'WrongArityError', 'TypeMismatchError', 'NotIntegerError', 'NotFloatError',
    'UnknownCommandError',
]
