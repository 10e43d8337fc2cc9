"""
MicroHash Key Registry Module

The key registry is the keyspace-wide record of which keys are live and
which data type each one holds. The hash engine does not own it: it is
injected, so several data-type engines can share one keyspace and tests
can substitute a stub.

A HashStore talks to its registry at three points:
- check_type() before every command, to reject keys of another type
- register_if_absent() when a hash goes from absent to populated
- unregister_if_empty() when a hash loses its last field
"""

import threading

from microhash.config import get_config
from microhash.core.constants import TYPE_STRING, TYPE_NAMES, MAX_KEYS
from microhash.exceptions import WrongTypeError, OutOfMemoryError
from microhash.utils import glob_match


class KeyRegistry:
    """
    Interface a HashStore expects from its key registry.

    Implementations must be safe to call from several threads; the hash
    engine calls them while holding the lock of the key involved.
    """

    __slots__ = ()

    def check_type(self, key, type_id):
        """
        Raise WrongTypeError if key is live with a type other than type_id.

        Args:
            key: str - key about to be operated on
            type_id: int - TYPE_* constant of the caller
        """
        raise NotImplementedError

    def register_if_absent(self, key, type_id):
        """
        Record key as live with type_id unless it is already recorded.

        Args:
            key: str - key that just became populated
            type_id: int - TYPE_* constant

        Returns:
            bool: True if the key was newly registered
        """
        raise NotImplementedError

    def unregister_if_empty(self, key):
        """
        Forget key, which no longer holds any data.

        Args:
            key: str - key that just became empty

        Returns:
            bool: True if the key was registered
        """
        raise NotImplementedError


class MemoryKeyRegistry(KeyRegistry):
    """
    In-process key registry backed by a dict of key -> type id.

    Enforces the 'maxkeys' limit when new keys are registered and answers
    the keyspace queries (EXISTS, TYPE, KEYS) of the emulated server.
    """

    __slots__ = ('_types', '_lock', '_max_keys')

    def __init__(self, config=None):
        """
        Initialize an empty registry.

        Args:
            config: Config - Optional config (default: global config)
        """
        config = config or get_config()
        self._types = {}
        self._lock = threading.Lock()
        self._max_keys = config.get('maxkeys', MAX_KEYS)

    # =========================================================================
    # KeyRegistry Interface
    # =========================================================================

    def check_type(self, key, type_id):
        with self._lock:
            actual_type = self._types.get(key)
        if actual_type is not None and actual_type != type_id:
            raise WrongTypeError()

    def register_if_absent(self, key, type_id):
        with self._lock:
            if key in self._types:
                return False
            if self._max_keys and len(self._types) >= self._max_keys:
                raise OutOfMemoryError()
            self._types[key] = type_id
            return True

    def unregister_if_empty(self, key):
        with self._lock:
            return self._types.pop(key, None) is not None

    # =========================================================================
    # Keyspace Queries
    # =========================================================================

    def register(self, key, type_id=TYPE_STRING):
        """
        Record key as holding type_id.

        Used by engines for the other data types sharing this keyspace. A
        live key of another type is never replaced: its owning engine has
        to remove its data (and unregister it) first, otherwise that data
        would outlive its registry entry.

        Args:
            key: str - key to record
            type_id: int - TYPE_* constant

        Raises:
            WrongTypeError: if key is live with another type
            OutOfMemoryError: if a new key would exceed maxkeys
        """
        with self._lock:
            actual_type = self._types.get(key)
            if actual_type is not None and actual_type != type_id:
                raise WrongTypeError()
            if key not in self._types and self._max_keys and len(self._types) >= self._max_keys:
                raise OutOfMemoryError()
            self._types[key] = type_id

    def exists(self, *keys):
        """
        Check how many keys exist.

        Args:
            *keys: str - keys to check

        Returns:
            int: number of keys that exist (repeated keys count each time)
        """
        with self._lock:
            return sum(1 for key in keys if key in self._types)

    def type(self, key):
        """
        Get type name of key.

        Args:
            key: str - key to check

        Returns:
            str: type name (string, hash, list, set, zset, stream, none)
        """
        with self._lock:
            type_id = self._types.get(key)
        if type_id is None:
            return 'none'
        return TYPE_NAMES.get(type_id, 'none')

    def keys(self, pattern='*'):
        """
        Find all keys matching a pattern.

        Args:
            pattern: str - glob pattern (* ? [abc])

        Returns:
            list[str]: matching keys in registration order
        """
        with self._lock:
            live = list(self._types)
        if pattern == '*':
            return live
        return [key for key in live if glob_match(pattern, key)]

    def __len__(self):
        with self._lock:
            return len(self._types)
