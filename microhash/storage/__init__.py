"""
Storage module for MicroHash.

Provides the hash command engine and the key registry it reports key
lifecycle changes to.
"""

from .registry import KeyRegistry, MemoryKeyRegistry
from .hash import HashStore

__all__ = ['KeyRegistry', 'MemoryKeyRegistry', 'HashStore']
