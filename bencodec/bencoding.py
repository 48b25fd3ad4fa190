from typing import NamedTuple

from .errors import (
    InvariantViolationError,
    MalformedTokenError,
    NestingDepthError,
    TruncatedInputError,
    UnsupportedByteError,
    ValueRangeError,
)
from .values import INT_MAX, INT_MIN, ByteString, Dictionary, Integer, List, Value

TOKEN_INTEGER = b'i'
TOKEN_LIST = b'l'
TOKEN_DICT = b'd'
TOKEN_END = b'e'
TOKEN_NEGATIVE = b'-'
TOKEN_STRING_SEPARATOR = b':'
DIGITS = b'0123456789'

DEFAULT_MAX_DEPTH = 256
# Each nesting level costs the decoder two stack frames; this keeps the
# deepest allowed document inside the interpreter's default recursion limit.
MAX_DEPTH_LIMIT = 300

# len(str(INT_MAX)); anything longer cannot be in range
_MAX_INT_DIGITS = 10

# closing marker scheduled by the encoder after a container's children
_CLOSE = object()


class Decoder:
    """
    Decodes a bencoded byte string.

    The decoder keeps a read position into the input and never copies the
    unconsumed remainder. Each call to decode() reads one complete value
    starting at the current position, so concatenated values can be read
    one after another. After a failure the position is unspecified.
    """
    def __init__(self, data: bytes, max_depth: int = DEFAULT_MAX_DEPTH):
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError('The data to decode must be bytes.')
        if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 1:
            raise ValueError(f'max_depth must be a positive integer, not {max_depth!r}.')
        if max_depth > MAX_DEPTH_LIMIT:
            raise ValueError(f'max_depth must not exceed {MAX_DEPTH_LIMIT}, not {max_depth}.')
        self._data = bytes(data)
        self._index = 0
        self._max_depth = max_depth

    @property
    def consumed(self) -> int:
        return self._index

    @property
    def remaining(self) -> int:
        return len(self._data) - self._index

    @property
    def at_end(self) -> bool:
        return self._index >= len(self._data)

    def decode(self) -> Value:
        """
        Decodes the next value.

        Returns:
            The decoded Value (ByteString, Integer, List or Dictionary).

        Raises:
            DecodeError: If the bencoded data is malformed, truncated, out
                of range or nested too deeply.
        """
        try:
            return self._decode_value(0)
        except RecursionError:
            # the caller's own stack was already too deep for max_depth
            raise NestingDepthError('Nesting exceeds the available call stack', self._index) from None

    def _read_char(self) -> bytes:
        """Returns the byte at the current index, or b'' at end of input."""
        return self._data[self._index:self._index + 1]

    def _decode_value(self, depth: int) -> Value:
        char = self._read_char()
        if not char:
            raise TruncatedInputError('Expected a value, found end of input', self._index)
        if char in DIGITS:
            return self._decode_str()
        if char == TOKEN_INTEGER:
            return self._decode_int()
        if char == TOKEN_LIST:
            return self._decode_list(depth + 1)
        if char == TOKEN_DICT:
            return self._decode_dict(depth + 1)
        raise UnsupportedByteError(f'Unsupported leading byte {char!r}', self._index)

    def _decode_int(self) -> Integer:
        """Decodes a bencoded integer (e.g., 'i42e')."""
        start = self._index
        self._index += 1  # 'i'
        negative = self._read_char() == TOKEN_NEGATIVE
        if negative:
            self._index += 1

        digits_start = self._index
        while True:
            char = self._read_char()
            if not char:
                raise TruncatedInputError('Integer is missing its terminating "e"', self._index)
            if char == TOKEN_END:
                break
            if char not in DIGITS:
                raise MalformedTokenError(f'Unexpected byte {char!r} in integer', self._index)
            self._index += 1

        digits = self._data[digits_start:self._index]
        if not digits:
            raise MalformedTokenError('Integer has no digits', self._index)
        if digits[0:1] == b'0' and (negative or len(digits) > 1):
            raise MalformedTokenError('Integer has a leading zero', digits_start)
        self._index += 1  # 'e'

        if len(digits) > _MAX_INT_DIGITS:
            raise ValueRangeError(f'Integer with {len(digits)} digits is outside the 32-bit signed range', start)
        value = -int(digits) if negative else int(digits)
        if not INT_MIN <= value <= INT_MAX:
            raise ValueRangeError(f'Integer {value} is outside the 32-bit signed range', start)
        return Integer(value)

    def _decode_str(self) -> ByteString:
        """
        Decodes a bencoded byte string (e.g., '4:spam').

        Leading zeros in the length prefix are accepted.
        """
        start = self._index
        while True:
            char = self._read_char()
            if not char:
                raise TruncatedInputError('String length is missing its ":"', self._index)
            if char == TOKEN_STRING_SEPARATOR:
                break
            if char not in DIGITS:
                raise MalformedTokenError(f'Unexpected byte {char!r} in string length', self._index)
            self._index += 1
        if self._index == start:
            raise MalformedTokenError('String length is missing', start)

        digits = self._data[start:self._index].lstrip(b'0')
        self._index += 1  # ':'
        available = self.remaining
        if len(digits) > len(str(available)):
            raise TruncatedInputError(f'String length exceeds the {available} bytes remaining', self._index)
        length = int(digits or b'0')
        if length > available:
            raise TruncatedInputError(f'String declares {length} bytes but only {available} remain', self._index)

        end = self._index + length
        value = self._data[self._index:end]
        self._index = end
        return ByteString(value)

    def _check_depth(self, depth: int):
        if depth > self._max_depth:
            raise NestingDepthError(f'Nesting exceeds the maximum depth of {self._max_depth}', self._index)

    def _decode_list(self, depth: int) -> List:
        """Decodes a bencoded list (e.g., 'l4:spami42ee')."""
        self._check_depth(depth)
        self._index += 1  # 'l'
        items = []
        while True:
            char = self._read_char()
            if not char:
                raise TruncatedInputError('List is missing its terminating "e"', self._index)
            if char == TOKEN_END:
                self._index += 1
                return List(items)
            items.append(self._decode_value(depth))

    def _decode_dict(self, depth: int) -> Dictionary:
        """
        Decodes a bencoded dictionary (e.g., 'd3:bar4:spam3:fooi42ee').

        Keys may arrive in any order. A repeated key keeps the value of
        its last occurrence.
        """
        self._check_depth(depth)
        self._index += 1  # 'd'
        entries = {}
        while True:
            char = self._read_char()
            if not char:
                raise TruncatedInputError('Dictionary is missing its terminating "e"', self._index)
            if char == TOKEN_END:
                self._index += 1
                return Dictionary(entries)
            if char not in DIGITS:
                raise MalformedTokenError(f'Dictionary key must be a byte string, found {char!r}', self._index)
            key = self._decode_str().value
            if self._read_char() == TOKEN_END:
                raise MalformedTokenError(f'Dictionary key {key!r} has no value', self._index)
            entries[key] = self._decode_value(depth)


class Encoder:
    """
    Encodes a Value into its canonical bencoded byte string.
    """
    def __init__(self, data: Value):
        if not isinstance(data, Value):
            raise TypeError(f'Cannot encode type: {type(data).__name__}. Use from_python() for plain objects.')
        self._data = data

    def encode(self) -> bytes:
        """
        Starts the encoding process.

        Returns:
            The bencoded data as a bytes object.

        Raises:
            InvariantViolationError: If the Value tree is inconsistent.
        """
        chunks = []
        # Values and _CLOSE markers still to write, next one last.
        pending = [self._data]
        while pending:
            self._encode_obj(pending.pop(), pending, chunks)
        return b''.join(chunks)

    def _encode_obj(self, data, pending: list, chunks: list):
        """Encodes one Value, scheduling container children on pending."""
        if data is _CLOSE:
            chunks.append(TOKEN_END)
        elif isinstance(data, ByteString):
            self._encode_str(data.value, chunks)
        elif isinstance(data, Integer):
            self._encode_int(data.value, chunks)
        elif isinstance(data, List):
            chunks.append(TOKEN_LIST)
            pending.append(_CLOSE)
            pending.extend(reversed(data.items))
        elif isinstance(data, Dictionary):
            chunks.append(TOKEN_DICT)
            pending.append(_CLOSE)
            for key, value in reversed(sorted(data.items(), key=self._dict_key)):
                pending.append(value)
                pending.append(ByteString(key))
        else:
            raise InvariantViolationError(f'Cannot encode {type(data).__name__} inside a Value tree')

    @staticmethod
    def _dict_key(item):
        key = item[0]
        if not isinstance(key, bytes):
            raise InvariantViolationError(f'Dictionary key {key!r} is not bytes')
        return key

    @staticmethod
    def _encode_str(value, chunks: list):
        if not isinstance(value, bytes):
            raise InvariantViolationError(f'ByteString payload {value!r} is not bytes')
        chunks.append(b'%d' % len(value))
        chunks.append(TOKEN_STRING_SEPARATOR)
        chunks.append(value)

    @staticmethod
    def _encode_int(value, chunks: list):
        if isinstance(value, bool) or not isinstance(value, int) or not INT_MIN <= value <= INT_MAX:
            raise InvariantViolationError(f'Integer payload {value!r} is not a 32-bit signed int')
        chunks.append(b'i%de' % value)


class Decoded(NamedTuple):
    """
    Result of decode().

    remaining counts the bytes left after the value. They are not an
    error, but a caller expecting exactly one document should check it.
    """
    value: Value
    consumed: int
    remaining: int


def decode(data: bytes, max_depth: int = DEFAULT_MAX_DEPTH) -> Decoded:
    """Decodes one value from the start of data."""
    decoder = Decoder(data, max_depth=max_depth)
    value = decoder.decode()
    return Decoded(value, decoder.consumed, decoder.remaining)


def encode(value: Value) -> bytes:
    return Encoder(value).encode()


def is_canonical(data: bytes, max_depth: int = DEFAULT_MAX_DEPTH) -> bool:
    """
    Checks whether data is exactly one value in canonical form.

    Raises:
        DecodeError: If data is not valid Bencode at all.
    """
    result = decode(data, max_depth=max_depth)
    return result.remaining == 0 and encode(result.value) == bytes(data)
