"""
MicroHash Exceptions Module

Defines the exception hierarchy for MicroHash error handling.
Exceptions map to Redis error responses (RESP2 error strings), so a
protocol front-end can forward them to clients unchanged.
"""


class RedisError(Exception):
    """
    Base exception for all Redis errors.

    Attributes:
        prefix: str - Error prefix (e.g., 'ERR', 'WRONGTYPE')
    """

    prefix = 'ERR'

    def __init__(self, message=None):
        """
        Initialize Redis error.

        Args:
            message: str - Error message (without prefix)
        """
        self.message = message
        if message:
            super().__init__(f'{self.prefix} {message}')
        else:
            super().__init__(self.prefix)

    def to_resp(self):
        """
        Convert to RESP2 error string.

        Returns:
            bytes: RESP2-encoded error response
        """
        return f'-{str(self)}\r\n'.encode()


class WrongTypeError(RedisError):
    """
    Raised when a hash command is executed against a key of another type.

    Example: HSET on a key registered as a list.
    """

    prefix = 'WRONGTYPE'

    def __init__(self):
        super().__init__('Operation against a key holding the wrong kind of value')


class OutOfMemoryError(RedisError):
    """
    Raised when creating a key would exceed the configured key limit.
    """

    prefix = 'OOM'

    def __init__(self):
        super().__init__('command not allowed: max keys limit reached')


class ArgumentCountError(RedisError):
    """
    Raised when a command has the wrong number or shape of arguments.

    Always raised before the command touches any stored data.
    """

    def __init__(self, command_name):
        self.command = command_name.lower()
        super().__init__(f"wrong number of arguments for '{self.command}' command")


# Name used by the command router, kept for parity with the protocol wording
WrongArityError = ArgumentCountError


class TypeMismatchError(RedisError):
    """
    Raised when a stored value or an argument cannot be read as a number.
    """


class NotIntegerError(TypeMismatchError):
    """
    Raised when a value is not a valid 64-bit integer.
    """

    def __init__(self, message='value is not an integer or out of range'):
        super().__init__(message)


class NotFloatError(TypeMismatchError):
    """
    Raised when a value is not a valid float.
    """

    def __init__(self, message='value is not a valid float'):
        super().__init__(message)


class UnknownCommandError(RedisError):
    """
    Raised when an unknown command is received.
    """

    def __init__(self, command_name):
        super().__init__(f"unknown command '{command_name}'")
