"""
MicroHash Utility Functions

Provides common utility functions for pattern matching, argument coercion,
strict number parsing and float formatting shared by the hash engine, the
key registry and the configuration layer.
"""

import math

from microhash.core.constants import INT64_MIN, INT64_MAX, FLOAT_INTEGRAL_LIMIT
from microhash.exceptions import NotIntegerError, NotFloatError


_DIGITS = '0123456789'

_LOG_LEVELS = {
    'debug': 0,
    'verbose': 1,
    'notice': 2,
    'warning': 3,
}


def glob_match(pattern, text):
    """
    Match text against glob-style pattern (Redis KEYS/SCAN pattern matching).

    Supports:
    - * : matches any sequence of characters (including empty)
    - ? : matches exactly one character
    - [abc] : matches one character from the set
    - [a-z] : matches one character from the range
    - [^abc] : matches one character NOT in the set
    - \\ : escapes the next character (literal match)

    Args:
        pattern: str - Glob pattern
        text: str - Text to match

    Returns:
        bool: True if text matches pattern
    """
    # Empty pattern only matches empty text
    if not pattern:
        return not text

    pi = 0  # pattern index
    ti = 0  # text index
    star_pi = -1  # position after last *
    star_ti = -1  # position in text when * was found

    while ti < len(text):
        if pi < len(pattern):
            pc = pattern[pi]

            if pc == '*':
                star_pi = pi + 1
                star_ti = ti
                pi += 1
                continue

            elif pc == '?':
                pi += 1
                ti += 1
                continue

            elif pc == '[':
                matched, class_end = _match_char_class(pattern, pi, text[ti])
                if matched:
                    pi = class_end
                    ti += 1
                    continue

            elif pc == '\\':
                pi += 1
                if pi < len(pattern) and pattern[pi] == text[ti]:
                    pi += 1
                    ti += 1
                    continue

            elif pc == text[ti]:
                pi += 1
                ti += 1
                continue

        # No match at current position - try backtracking to last *
        if star_pi != -1:
            pi = star_pi
            star_ti += 1
            ti = star_ti
        else:
            return False

    # Skip any trailing * in pattern
    while pi < len(pattern) and pattern[pi] == '*':
        pi += 1

    return pi == len(pattern)


def _match_char_class(pattern, start, char):
    """
    Match character against character class [abc] or [a-z] or [^abc].

    Args:
        pattern: str - Pattern
        start: int - Position of '[' in pattern
        char: str - Character to match

    Returns:
        tuple: (matched: bool, end_position: int)
               end_position is position after ']' if matched, start if not
    """
    end = start + 1
    while end < len(pattern):
        if pattern[end] == ']':
            break
        if pattern[end] == '\\' and end + 1 < len(pattern):
            end += 2
        else:
            end += 1

    if end >= len(pattern):
        # Unclosed bracket - treat as literal
        return (pattern[start] == char, start + 1)

    i = start + 1
    negate = False

    if i < end and pattern[i] == '^':
        negate = True
        i += 1

    matched = False

    while i < end:
        if pattern[i] == '\\' and i + 1 < end:
            i += 1
            if pattern[i] == char:
                matched = True
            i += 1
            continue

        if i + 2 < end and pattern[i + 1] == '-':
            if pattern[i] <= char <= pattern[i + 2]:
                matched = True
            i += 3
            continue

        if pattern[i] == char:
            matched = True

        i += 1

    if negate:
        matched = not matched

    return (matched, end + 1)


def to_canonical(value):
    """
    Convert a key, field or value to its canonical string form.

    Any object that can render itself as a string is accepted; bytes are
    decoded as UTF-8 so raw protocol arguments address the same entries as
    their text equivalents.

    Args:
        value: Any - Value to convert

    Returns:
        str: Canonical string form
    """
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode('utf-8')
    return str(value)


def _is_int_literal(text):
    """Check text against the protocol's integer syntax."""
    negative = text.startswith('-')
    body = text[1:] if negative else text
    if not body:
        return False
    for ch in body:
        if ch not in _DIGITS:
            return False
    if body[0] == '0':
        # Only a bare "0" may start with zero ("-0" and "007" are rejected)
        return body == '0' and not negative
    return True


def parse_int(value, message=None):
    """
    Parse a 64-bit signed integer using the protocol's strict rules.

    Accepts Python ints and strings such as "42" or "-7". Rejects leading
    '+', leading zeros, whitespace, underscores, fractional forms and
    anything outside the signed 64-bit range.

    Args:
        value: int | str | bytes - Value to parse
        message: str - Error message to raise with (default: generic)

    Returns:
        int: Parsed value

    Raises:
        NotIntegerError: if value is not a valid integer
    """
    error_args = [message] if message else []

    if isinstance(value, bool):
        raise NotIntegerError(*error_args)

    if isinstance(value, int):
        number = value
    else:
        try:
            text = to_canonical(value)
        except UnicodeDecodeError:
            raise NotIntegerError(*error_args)
        if not _is_int_literal(text):
            raise NotIntegerError(*error_args)
        number = int(text)

    if not INT64_MIN <= number <= INT64_MAX:
        raise NotIntegerError(*error_args)
    return number


def parse_float(value, message=None):
    """
    Parse a finite float using the protocol's strict rules.

    Accepts Python ints and floats and strings in decimal or exponent form.
    Rejects non-ASCII text (e.g. fullwidth digits), whitespace, underscores,
    NaN and infinities.

    Args:
        value: float | int | str | bytes - Value to parse
        message: str - Error message to raise with (default: generic)

    Returns:
        float: Parsed value

    Raises:
        NotFloatError: if value is not a valid finite float
    """
    error_args = [message] if message else []

    if isinstance(value, bool):
        raise NotFloatError(*error_args)

    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            raise NotFloatError(*error_args)
    else:
        try:
            text = to_canonical(value)
        except UnicodeDecodeError:
            raise NotFloatError(*error_args)
        if not text or not text.isascii() or '_' in text or text != text.strip():
            raise NotFloatError(*error_args)
        try:
            number = float(text)
        except ValueError:
            raise NotFloatError(*error_args)

    if not math.isfinite(number):
        raise NotFloatError(*error_args)
    return number


def format_float(value):
    """
    Format a float the way HINCRBYFLOAT stores it.

    Integral values below 1e17 in magnitude drop the fractional part
    (10.0 -> "10"); everything else uses the shortest representation that
    round-trips (9.1 -> "9.1", 1e-20 -> "1e-20").

    Args:
        value: float - Finite value to format

    Returns:
        str: Canonical string form
    """
    if value.is_integer() and abs(value) < FLOAT_INTEGRAL_LIMIT:
        return str(int(value))
    return repr(value)


def log(level, component, message):
    """
    Print a log line if the configured loglevel allows it.

    Args:
        level: str - debug, verbose, notice or warning
        component: str - Prefix shown in brackets (e.g. 'HashStore')
        message: str - Log message
    """
    from microhash.config import get_config

    threshold = _LOG_LEVELS.get(get_config().get('loglevel'), _LOG_LEVELS['notice'])
    if _LOG_LEVELS.get(level, _LOG_LEVELS['notice']) >= threshold:
        print(f'[{component}] {message}')
