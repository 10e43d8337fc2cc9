"""
MicroHash Hash Store Module

Implements the Redis hash command family (HSET, HGET, HDEL, HEXISTS,
HGETALL, HKEYS, HVALS, HLEN, HMGET, HMSET, HSETNX, HINCRBY, HINCRBYFLOAT)
over an in-memory map of key -> hash.

Key Lifecycle:
- A hash exists only while it holds at least one field
- The first successful field write creates it and registers the key
- Removing the last field destroys it and unregisters the key
- There is no "empty hash" state

Hash Encoding Strategy:
- Small hash (<= hash_max_ziplist_entries fields): ziplist, a list of
  (field, value) tuples. Linear search but compact layout
- Large hash: dict. Promotion happens once, when a field is added past
  the threshold, and is never reversed
- Both encodings keep fields in first-insertion order

Concurrency:
- Keys are striped over a fixed set of re-entrant locks
- Every command, reads included, runs under the lock of its key, so a
  reader never sees a partly applied HMSET and two last-field deletes
  cannot both destroy the same hash
- Registry calls happen under that same lock
"""

import math
import threading

from microhash.config import get_config
from microhash.core.constants import (
    TYPE_HASH, ENCODING_ZIPLIST, ENCODING_HASHTABLE, ZIPLIST_MAX_ENTRIES,
    LOCK_STRIPES, INT64_MIN, INT64_MAX,
)
from microhash.exceptions import ArgumentCountError, NotIntegerError, NotFloatError
from microhash.storage.registry import MemoryKeyRegistry
from microhash.utils import to_canonical, parse_int, parse_float, format_float, log


def _field_list(command, args):
    """
    Normalize HDEL/HMGET arguments into a list of canonical fields.

    Each argument may be a single field or a list/tuple of fields.

    Raises:
        ArgumentCountError: if no field was given
    """
    fields = []
    for arg in args:
        if isinstance(arg, (list, tuple)):
            fields.extend(to_canonical(field) for field in arg)
        else:
            fields.append(to_canonical(arg))
    if not fields:
        raise ArgumentCountError(command)
    return fields


def _pair_list(command, args):
    """
    Normalize HMSET-style arguments into a list of canonical (field, value) pairs.

    Accepts either a flat sequence (field, value, field, value, ...) or a
    sequence of 2-element lists/tuples. Validation runs on the normalized
    form, so no caller data is written unless every pair is well formed.

    Raises:
        ArgumentCountError: on zero arguments, a dangling field, or a
            pair that does not hold exactly two elements
    """
    if not args:
        raise ArgumentCountError(command)

    if any(isinstance(arg, (list, tuple)) for arg in args):
        pairs = []
        for arg in args:
            if not isinstance(arg, (list, tuple)) or len(arg) != 2:
                raise ArgumentCountError(command)
            pairs.append((to_canonical(arg[0]), to_canonical(arg[1])))
        return pairs

    if len(args) % 2 != 0:
        raise ArgumentCountError(command)
    return [
        (to_canonical(args[i]), to_canonical(args[i + 1]))
        for i in range(0, len(args), 2)
    ]


class HashStore:
    """
    Redis hash command engine.

    Owns the key -> hash map and reports key creation and destruction to
    an injected KeyRegistry (a MemoryKeyRegistry when none is given).

    Keys, fields and values of every command are converted to canonical
    strings first, so 1 and "1" name the same field and every stored
    value reads back as a string.

    Internal representation:
    - Ziplist: list[(str, str), ...] up to hash_max_ziplist_entries fields
    - Dict: dict[str, str] beyond that
    """

    __slots__ = ('_data', '_registry', '_locks', '_max_ziplist_entries')

    def __init__(self, registry=None, config=None):
        """
        Initialize an empty hash store.

        Args:
            registry: KeyRegistry - Keyspace registry (default: new MemoryKeyRegistry)
            config: Config - Optional config (default: global config)
        """
        config = config or get_config()
        self._data = {}
        self._registry = registry if registry is not None else MemoryKeyRegistry(config)
        stripes = max(1, config.get('lock_stripes', LOCK_STRIPES))
        self._locks = tuple(threading.RLock() for _ in range(stripes))
        self._max_ziplist_entries = config.get('hash_max_ziplist_entries', ZIPLIST_MAX_ENTRIES)

    @property
    def registry(self):
        """KeyRegistry this store reports key lifecycle changes to."""
        return self._registry

    # =========================================================================
    # Internal Helper Methods
    # =========================================================================

    def _lock_for(self, key):
        return self._locks[hash(key) % len(self._locks)]

    @staticmethod
    def _find(data, field):
        """
        Look up a field in either encoding.

        Args:
            data: dict | list - hash data
            field: str - field name

        Returns:
            str | None: value or None if field missing
        """
        if isinstance(data, list):
            for f, v in data:
                if f == field:
                    return v
            return None
        return data.get(field)

    def _create(self, key, pairs):
        """
        Create a hash from its first pairs and register the key.

        The registry is asked first so a refused key (type clash or key
        limit) leaves nothing behind.

        Args:
            key: str - hash key
            pairs: list[(str, str)] - non-empty field-value pairs
        """
        self._registry.register_if_absent(key, TYPE_HASH)

        # Later duplicates overwrite earlier ones but keep the first position
        merged = dict(pairs)
        if len(merged) > self._max_ziplist_entries:
            self._data[key] = merged
        else:
            self._data[key] = list(merged.items())
        log('debug', 'HashStore', f'Created hash {key!r} ({len(merged)} fields)')

    def _destroy(self, key):
        """
        Drop a hash that lost its last field and unregister the key.

        Args:
            key: str - hash key
        """
        del self._data[key]
        self._registry.unregister_if_empty(key)
        log('debug', 'HashStore', f'Destroyed empty hash {key!r}')

    def _set_field(self, key, field, value):
        """
        Set field in the hash at key, creating the hash if needed.

        Caller must hold the key lock and have checked the key type.

        Returns:
            bool: True if field was created, False if it was overwritten
        """
        data = self._data.get(key)

        if data is None:
            self._create(key, [(field, value)])
            return True

        if isinstance(data, list):
            for i, (f, v) in enumerate(data):
                if f == field:
                    data[i] = (field, value)
                    return False

            if len(data) >= self._max_ziplist_entries:
                hash_dict = dict(data)
                hash_dict[field] = value
                self._data[key] = hash_dict
                log('debug', 'HashStore', f'Promoted hash {key!r} to {ENCODING_HASHTABLE}')
            else:
                data.append((field, value))
            return True

        is_new = field not in data
        data[field] = value
        return is_new

    def _set_pairs(self, key, pairs):
        """
        Apply validated pairs to the hash at key in one step.

        Returns:
            int: number of fields created
        """
        with self._lock_for(key):
            self._registry.check_type(key, TYPE_HASH)

            if key not in self._data:
                self._create(key, pairs)
                return len(self._data[key])

            created = 0
            for field, value in pairs:
                if self._set_field(key, field, value):
                    created += 1
            return created

    def _read(self, key):
        """
        Fetch hash data for a read command.

        Caller must hold the key lock.

        Returns:
            dict | list | None: hash data or None if key is absent
        """
        self._registry.check_type(key, TYPE_HASH)
        return self._data.get(key)

    # =========================================================================
    # Hash Operations
    # =========================================================================

    def hset(self, key, field, value):
        """
        Set field in hash.

        Args:
            key: hash key
            field: field name
            value: field value (stored as its canonical string)

        Returns:
            bool: True if new field created, False if field updated

        Raises:
            WrongTypeError: if key holds another data type
        """
        key = to_canonical(key)
        field = to_canonical(field)
        value = to_canonical(value)

        with self._lock_for(key):
            self._registry.check_type(key, TYPE_HASH)
            return self._set_field(key, field, value)

    def hset_many(self, key, *args):
        """
        Set one or more fields in hash (the variadic HSET form).

        Args:
            key: hash key
            *args: field, value, field, value, ... or (field, value) pairs

        Returns:
            int: number of fields created

        Raises:
            ArgumentCountError: if the arguments do not form whole pairs
            WrongTypeError: if key holds another data type
        """
        pairs = _pair_list('hset', args)
        return self._set_pairs(to_canonical(key), pairs)

    def hget(self, key, field):
        """
        Get field value from hash.

        Args:
            key: hash key
            field: field name

        Returns:
            str | None: field value or None if key or field is missing
        """
        key = to_canonical(key)
        field = to_canonical(field)

        with self._lock_for(key):
            data = self._read(key)
            if data is None:
                return None
            return self._find(data, field)

    def hdel(self, key, *fields):
        """
        Delete fields from hash.

        Each argument may be a field or a list of fields. Removing the
        last field destroys the hash.

        Args:
            key: hash key
            *fields: field names or lists of field names

        Returns:
            int: number of fields deleted (a repeated field counts once)

        Raises:
            ArgumentCountError: if no field was given
        """
        key = to_canonical(key)
        fields = _field_list('hdel', fields)

        with self._lock_for(key):
            data = self._read(key)
            if data is None:
                return 0

            count = 0
            if isinstance(data, list):
                doomed = set(fields)
                kept = [(f, v) for f, v in data if f not in doomed]
                count = len(data) - len(kept)
                if count:
                    data[:] = kept
            else:
                for field in fields:
                    if field in data:
                        del data[field]
                        count += 1

            if count and not data:
                self._destroy(key)
            return count

    def hexists(self, key, field):
        """
        Check if field exists in hash.

        Returns:
            bool: True if field exists, False otherwise (or if key absent)
        """
        key = to_canonical(key)
        field = to_canonical(field)

        with self._lock_for(key):
            data = self._read(key)
            if data is None:
                return False
            if isinstance(data, list):
                return any(f == field for f, v in data)
            return field in data

    def hgetall(self, key):
        """
        Get all fields and values from hash.

        Returns:
            dict[str, str]: fields in insertion order ({} if key absent)
        """
        key = to_canonical(key)

        with self._lock_for(key):
            data = self._read(key)
            if data is None:
                return {}
            return dict(data)

    def hkeys(self, key):
        """
        Get all field names from hash.

        Returns:
            list[str]: field names in insertion order ([] if key absent)
        """
        key = to_canonical(key)

        with self._lock_for(key):
            data = self._read(key)
            if data is None:
                return []
            if isinstance(data, list):
                return [field for field, value in data]
            return list(data.keys())

    def hvals(self, key):
        """
        Get all values from hash, aligned with hkeys() order.

        Returns:
            list[str]: values ([] if key absent)
        """
        key = to_canonical(key)

        with self._lock_for(key):
            data = self._read(key)
            if data is None:
                return []
            if isinstance(data, list):
                return [value for field, value in data]
            return list(data.values())

    def hlen(self, key):
        """
        Get number of fields in hash.

        Returns:
            int: number of fields (0 if hash doesn't exist)
        """
        key = to_canonical(key)

        with self._lock_for(key):
            data = self._read(key)
            if data is None:
                return 0
            return len(data)

    def hmget(self, key, *fields):
        """
        Get values of multiple fields from hash.

        Fields may be passed as separate arguments or as one list.

        Args:
            key: hash key
            *fields: field names or lists of field names

        Returns:
            list[str | None]: values aligned with the requested fields

        Raises:
            ArgumentCountError: if no field was requested
        """
        key = to_canonical(key)
        fields = _field_list('hmget', fields)

        with self._lock_for(key):
            data = self._read(key)
            if data is None:
                return [None] * len(fields)
            # Build lookup dict for ziplists (avoid O(n^2))
            lookup = dict(data) if isinstance(data, list) else data
            return [lookup.get(field) for field in fields]

    def hmset(self, key, *args):
        """
        Set multiple fields in hash.

        Args:
            key: hash key
            *args: field, value, field, value, ... or (field, value) pairs

        Returns:
            str: 'OK'

        Raises:
            ArgumentCountError: on zero arguments, a field without a value,
                or a pair that does not hold exactly two elements. Nothing
                is written in that case.
        """
        pairs = _pair_list('hmset', args)
        self._set_pairs(to_canonical(key), pairs)
        return 'OK'

    def hsetnx(self, key, field, value):
        """
        Set field in hash only if field doesn't exist.

        Returns:
            bool: True if field was set, False if it already existed
        """
        key = to_canonical(key)
        field = to_canonical(field)
        value = to_canonical(value)

        with self._lock_for(key):
            data = self._read(key)
            if data is not None and self._find(data, field) is not None:
                return False
            return self._set_field(key, field, value)

    def hincrby(self, key, field, increment):
        """
        Increment integer value of hash field.

        A missing field counts as 0. The stored string is re-parsed on
        every call, so values written by HSET are accepted when they are
        valid integers.

        Args:
            key: hash key
            field: field name
            increment: int or integer string

        Returns:
            int: new value after increment

        Raises:
            NotIntegerError: if increment or the stored value is not an
                integer, or the result leaves the 64-bit range
        """
        key = to_canonical(key)
        field = to_canonical(field)
        increment = parse_int(increment)

        with self._lock_for(key):
            data = self._read(key)
            current = None if data is None else self._find(data, field)

            if current is None:
                new_value = increment
            else:
                new_value = parse_int(current, 'hash value is not an integer') + increment

            if not INT64_MIN <= new_value <= INT64_MAX:
                raise NotIntegerError('increment or decrement would overflow')

            self._set_field(key, field, str(new_value))
            return new_value

    def hincrbyfloat(self, key, field, increment):
        """
        Increment float value of hash field.

        A missing field counts as 0. The result is stored using
        utils.format_float (9.1 -> "9.1", 10.0 -> "10").

        Args:
            key: hash key
            field: field name
            increment: float, int or numeric string

        Returns:
            float: new value after increment

        Raises:
            NotFloatError: if increment or the stored value is not a valid
                float, or the result is NaN or infinite
        """
        key = to_canonical(key)
        field = to_canonical(field)
        increment = parse_float(increment)

        with self._lock_for(key):
            data = self._read(key)
            current = None if data is None else self._find(data, field)

            if current is None:
                new_value = increment
            else:
                new_value = parse_float(current, 'hash value is not a float') + increment

            if not math.isfinite(new_value):
                raise NotFloatError('increment would produce NaN or Infinity')

            self._set_field(key, field, format_float(new_value))
            return new_value

    # =========================================================================
    # Keyspace Hooks
    # =========================================================================

    def exists(self, key):
        """
        Check whether a hash is stored under key.

        Used by the expiry collaborator to decide whether a key is live.
        """
        key = to_canonical(key)
        with self._lock_for(key):
            return key in self._data

    def purge(self, key):
        """
        Remove the whole hash at key (e.g. when the key expires).

        Returns:
            bool: True if a hash was removed
        """
        key = to_canonical(key)
        with self._lock_for(key):
            if key not in self._data:
                return False
            self._destroy(key)
        log('verbose', 'HashStore', f'Purged hash {key!r}')
        return True

    def encoding(self, key):
        """
        Get internal encoding of the hash at key (OBJECT ENCODING).

        Returns:
            str | None: 'ziplist', 'hashtable' or None if key absent
        """
        key = to_canonical(key)
        with self._lock_for(key):
            data = self._data.get(key)
        if data is None:
            return None
        return ENCODING_ZIPLIST if isinstance(data, list) else ENCODING_HASHTABLE

    def flush(self):
        """
        Remove every hash and unregister their keys. Used by FLUSHDB/FLUSHALL.

        Returns:
            int: number of hashes removed
        """
        for lock in self._locks:
            lock.acquire()
        try:
            count = len(self._data)
            for key in list(self._data):
                self._destroy(key)
            return count
        finally:
            for lock in reversed(self._locks):
                lock.release()

    def __len__(self):
        return len(self._data)
