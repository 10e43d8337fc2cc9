"""
MicroHash Constants Module

Defines type identifiers, storage thresholds and numeric limits shared by
the hash engine, the key registry and the command router.
"""

# =============================================================================
# Key Types
# =============================================================================
# Type ids recorded by the key registry for every live key. Only hashes are
# created by this package; the other ids let a registry shared with other
# data types report conflicts.

TYPE_STRING = 0
TYPE_HASH = 1
TYPE_LIST = 2
TYPE_SET = 3
TYPE_ZSET = 4
TYPE_STREAM = 5

TYPE_NAMES = {
    TYPE_STRING: 'string',
    TYPE_HASH: 'hash',
    TYPE_LIST: 'list',
    TYPE_SET: 'set',
    TYPE_ZSET: 'zset',
    TYPE_STREAM: 'stream',
}

# =============================================================================
# Hash Encodings
# =============================================================================

ENCODING_ZIPLIST = 'ziplist'      # list of (field, value) tuples
ENCODING_HASHTABLE = 'hashtable'  # dict

ZIPLIST_MAX_ENTRIES = 64  # Field count at which a ziplist is promoted
                          # to a hashtable. Linear scans stay cheap below it

# =============================================================================
# Limits
# =============================================================================

MAX_KEYS = 50000    # Maximum number of live keys in a MemoryKeyRegistry

LOCK_STRIPES = 16   # Number of key locks a HashStore stripes keys over

# Signed 64-bit range of HINCRBY operands and results
INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1

# Integral floats below this magnitude are formatted without a fraction
FLOAT_INTEGRAL_LIMIT = 1e17
