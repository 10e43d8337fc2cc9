"""Command router for MicroHash.

Provides the hash command dispatch table with arity validation and flags,
for front-ends that forward raw argument lists. Results are protocol-shaped
Python values (ints for integer replies, flat lists for HGETALL, strings
for bulk replies) rather than encoded RESP frames.
"""

from microhash.exceptions import WrongArityError, UnknownCommandError
from microhash.utils import to_canonical, format_float


class CommandInfo:
    """Metadata about a hash command.

    Attributes:
        name: Command name, upper case
        handler: Callable(store, *args) that executes the command
        arity: Argument count including command name (>0 exact, <0 minimum)
        flags: Command flags (readonly, write, fast, slow)
    """
    __slots__ = ('name', 'handler', 'arity', 'flags')

    def __init__(self, name, handler, arity, flags=()):
        self.name = name
        self.handler = handler
        self.arity = arity
        self.flags = flags


class CommandRouter:
    """Command dispatch table for a HashStore.

    Routes commands to handlers with arity validation. Lookup is
    case-insensitive and accepts str or bytes command names.
    """
    __slots__ = ('_commands', '_store')

    def __init__(self, store):
        """Initialize router over a hash store.

        Args:
            store: HashStore instance
        """
        self._store = store
        self._commands = {}
        self._register_all_commands()

    @staticmethod
    def _normalize(cmd):
        return to_canonical(cmd).upper()

    def register(self, name, handler, arity, flags=()):
        """Register a command with the router.

        Args:
            name: Command name
            handler: Callable(store, *args)
            arity: Argument count including command name
            flags: Tuple of flag strings
        """
        cmd_upper = self._normalize(name)
        self._commands[cmd_upper] = CommandInfo(cmd_upper, handler, arity, flags)

    def execute(self, cmd, args):
        """Execute a command with arguments.

        Args:
            cmd: Command name as str or bytes
            args: List of arguments (excluding command name)

        Returns:
            Command result

        Raises:
            UnknownCommandError: if the command is not registered
            WrongArityError: if the argument count is wrong
            RedisError: any error raised by the command itself
        """
        cmd_upper = self._normalize(cmd)
        cmd_info = self._commands.get(cmd_upper)

        if cmd_info is None:
            raise UnknownCommandError(to_canonical(cmd))

        if not self._check_arity(cmd_info, args):
            raise WrongArityError(cmd_upper)

        return cmd_info.handler(self._store, *args)

    @staticmethod
    def _check_arity(cmd_info, args):
        """Check if argument count matches command arity.

        Args:
            cmd_info: CommandInfo instance
            args: List of arguments (excluding command name)

        Returns:
            True if arity is valid
        """
        arg_count = len(args) + 1  # +1 for command name

        if cmd_info.arity > 0:
            return arg_count == cmd_info.arity
        elif cmd_info.arity < 0:
            return arg_count >= abs(cmd_info.arity)
        return True

    def get_command_info(self, cmd):
        """Get command metadata.

        Args:
            cmd: Command name as str or bytes

        Returns:
            CommandInfo instance or None
        """
        return self._commands.get(self._normalize(cmd))

    def get_commands(self):
        """Get all registered commands.

        Returns:
            Dict of command name -> CommandInfo
        """
        return self._commands.copy()

    def get_commands_by_flag(self, flag):
        """Get names of commands carrying a flag.

        Args:
            flag: Flag name (readonly, write, fast, slow)

        Returns:
            List of command names
        """
        return [name for name, info in self._commands.items() if flag in info.flags]

    def _register_all_commands(self):
        """Register the hash command family."""
        self.register('HSET', self._cmd_hset, -4, ('write', 'fast'))
        self.register('HGET', self._cmd_hget, 3, ('readonly', 'fast'))
        self.register('HDEL', self._cmd_hdel, -3, ('write', 'fast'))
        self.register('HEXISTS', self._cmd_hexists, 3, ('readonly', 'fast'))
        self.register('HGETALL', self._cmd_hgetall, 2, ('readonly', 'slow'))
        self.register('HKEYS', self._cmd_hkeys, 2, ('readonly', 'slow'))
        self.register('HVALS', self._cmd_hvals, 2, ('readonly', 'slow'))
        self.register('HLEN', self._cmd_hlen, 2, ('readonly', 'fast'))
        self.register('HMGET', self._cmd_hmget, -3, ('readonly', 'fast'))
        self.register('HMSET', self._cmd_hmset, -4, ('write', 'fast'))
        self.register('HSETNX', self._cmd_hsetnx, 4, ('write', 'fast'))
        self.register('HINCRBY', self._cmd_hincrby, 4, ('write', 'fast'))
        self.register('HINCRBYFLOAT', self._cmd_hincrbyfloat, 4, ('write', 'fast'))

    # Hash command handlers

    @staticmethod
    def _cmd_hset(store, *args):
        """HSET key field value [field value...] - set hash fields."""
        return store.hset_many(args[0], *args[1:])

    @staticmethod
    def _cmd_hget(store, *args):
        """HGET key field - get hash field."""
        return store.hget(args[0], args[1])

    @staticmethod
    def _cmd_hdel(store, *args):
        """HDEL key field [field...] - delete hash fields."""
        return store.hdel(args[0], *args[1:])

    @staticmethod
    def _cmd_hexists(store, *args):
        """HEXISTS key field - check field existence."""
        return 1 if store.hexists(args[0], args[1]) else 0

    @staticmethod
    def _cmd_hgetall(store, *args):
        """HGETALL key - get all fields and values as a flat list."""
        result = []
        for field, value in store.hgetall(args[0]).items():
            result.append(field)
            result.append(value)
        return result

    @staticmethod
    def _cmd_hkeys(store, *args):
        """HKEYS key - get all field names."""
        return store.hkeys(args[0])

    @staticmethod
    def _cmd_hvals(store, *args):
        """HVALS key - get all values."""
        return store.hvals(args[0])

    @staticmethod
    def _cmd_hlen(store, *args):
        """HLEN key - get number of fields."""
        return store.hlen(args[0])

    @staticmethod
    def _cmd_hmget(store, *args):
        """HMGET key field [field...] - get multiple fields."""
        return store.hmget(args[0], *args[1:])

    @staticmethod
    def _cmd_hmset(store, *args):
        """HMSET key field value [field value...] - set multiple fields."""
        return store.hmset(args[0], *args[1:])

    @staticmethod
    def _cmd_hsetnx(store, *args):
        """HSETNX key field value - set field if absent."""
        return 1 if store.hsetnx(args[0], args[1], args[2]) else 0

    @staticmethod
    def _cmd_hincrby(store, *args):
        """HINCRBY key field increment - increment field by integer."""
        return store.hincrby(args[0], args[1], args[2])

    @staticmethod
    def _cmd_hincrbyfloat(store, *args):
        """HINCRBYFLOAT key field increment - increment field by float (bulk reply)."""
        return format_float(store.hincrbyfloat(args[0], args[1], args[2]))
