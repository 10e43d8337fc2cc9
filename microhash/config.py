"""
MicroHash Configuration Module

Provides configuration management for the hash engine and its key
registry. A HashStore reads its thresholds from the Config it is given,
or from the process-wide instance returned by get_config().
"""

from microhash.utils import glob_match as _match_pattern


# Default configuration values
DEFAULT_CONFIG = {
    # Encoding
    'hash_max_ziplist_entries': 64,  # Fields before ziplist -> hashtable

    # Concurrency
    'lock_stripes': 16,  # Key locks per HashStore

    # Limits
    'maxkeys': 50000,  # Live keys allowed in a MemoryKeyRegistry (0 = no limit)

    # Logging
    'loglevel': 'notice',  # debug, verbose, notice, warning
}


class Config:
    """
    Configuration manager for MicroHash.

    Provides get/set access to configuration values. Keys that are not
    part of DEFAULT_CONFIG are rejected.
    """

    __slots__ = ('_config',)

    def __init__(self, initial_config=None):
        """
        Initialize configuration with defaults.

        Args:
            initial_config: dict - Optional initial configuration to merge with defaults
        """
        self._config = dict(DEFAULT_CONFIG)
        if initial_config:
            for key, value in initial_config.items():
                if key in DEFAULT_CONFIG:
                    self._config[key] = value

    def get(self, key, default=None):
        """
        Get configuration value.

        Args:
            key: str - Configuration key
            default: Any - Default value if key not found

        Returns:
            Configuration value or default
        """
        return self._config.get(key, default)

    def set(self, key, value):
        """
        Set configuration value.

        Args:
            key: str - Configuration key
            value: Any - Value to set

        Returns:
            bool: True if key exists and was set, False if unknown key
        """
        if key in DEFAULT_CONFIG:
            self._config[key] = value
            return True
        return False

    def get_all(self):
        """
        Get all configuration values.

        Returns:
            dict: Copy of all configuration values
        """
        return dict(self._config)

    def get_matching(self, pattern):
        """
        Get configuration values matching glob pattern.

        Args:
            pattern: str - Glob pattern (supports * ? and [...])

        Returns:
            dict: Matching configuration key-value pairs
        """
        if pattern == '*':
            return self.get_all()

        result = {}
        for key, value in self._config.items():
            if _match_pattern(pattern, key):
                result[key] = value
        return result


# Global configuration instance
_global_config = None


def get_config():
    """
    Get global configuration instance.

    Returns:
        Config: Global configuration instance
    """
    global _global_config
    if _global_config is None:
        _global_config = Config()
    return _global_config


def init_config(config_dict=None):
    """
    Initialize global configuration.

    Args:
        config_dict: dict - Optional initial configuration

    Returns:
        Config: Initialized configuration instance
    """
    global _global_config
    _global_config = Config(config_dict)
    return _global_config
