"""
MicroHash core package.

Shared constants for the hash engine and its collaborators.
"""

from .constants import (
    TYPE_STRING, TYPE_HASH, TYPE_LIST, TYPE_SET, TYPE_ZSET, TYPE_STREAM,
    TYPE_NAMES,
    ENCODING_ZIPLIST, ENCODING_HASHTABLE, ZIPLIST_MAX_ENTRIES,
    MAX_KEYS, LOCK_STRIPES, INT64_MIN, INT64_MAX,
)

__all__ = [
    'TYPE_STRING', 'TYPE_HASH', 'TYPE_LIST', 'TYPE_SET', 'TYPE_ZSET',
    'TYPE_STREAM', 'TYPE_NAMES',
    'ENCODING_ZIPLIST', 'ENCODING_HASHTABLE', 'ZIPLIST_MAX_ENTRIES',
    'MAX_KEYS', 'LOCK_STRIPES', 'INT64_MIN', 'INT64_MAX',
]
