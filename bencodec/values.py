import collections.abc

INT_MIN = -2 ** 31
INT_MAX = 2 ** 31 - 1


class Value:
    """
    Base class of the four Bencode variants.

    Values are immutable trees: every container exclusively owns its
    children and nothing can be changed after construction.

    Truthiness follows len() for ByteString, List and Dictionary, so an
    empty one is false. An Integer is always true, Integer(0) included;
    test .value to check for zero.
    """
    __slots__ = ()

    def __setattr__(self, name, value):
        raise AttributeError(f'{type(self).__name__} is immutable')

    def __delattr__(self, name):
        raise AttributeError(f'{type(self).__name__} is immutable')

    def to_python(self):
        """
        Returns the plain Python view (bytes, int, list or dict).

        Every variant overrides this; Value itself is never instantiated.
        """
        raise NotImplementedError


def _init(obj, **fields):
    for name, value in fields.items():
        object.__setattr__(obj, name, value)


class ByteString(Value):
    """
    A length-prefixed run of raw bytes. No text encoding is implied.

    len() is the payload length; an empty ByteString is false.
    """
    __slots__ = ('value',)

    def __init__(self, value: bytes = b''):
        if isinstance(value, (bytearray, memoryview)):
            value = bytes(value)
        if not isinstance(value, bytes):
            raise TypeError(f'ByteString payload must be bytes, not {type(value).__name__}.')
        _init(self, value=value)

    def __len__(self):
        return len(self.value)

    def __eq__(self, other):
        if not isinstance(other, ByteString):
            return NotImplemented
        return self.value == other.value

    def __hash__(self):
        return hash((ByteString, self.value))

    def __repr__(self):
        return f'ByteString({self.value!r})'

    def to_python(self) -> bytes:
        return self.value


class Integer(Value):
    """A signed 32-bit integer."""
    __slots__ = ('value',)

    def __init__(self, value: int = 0):
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f'Integer payload must be int, not {type(value).__name__}.')
        if not INT_MIN <= value <= INT_MAX:
            raise ValueError(f'Integer {value} is outside the 32-bit signed range.')
        _init(self, value=value)

    def __eq__(self, other):
        if not isinstance(other, Integer):
            return NotImplemented
        return self.value == other.value

    def __hash__(self):
        return hash((Integer, self.value))

    def __repr__(self):
        return f'Integer({self.value})'

    def to_python(self) -> int:
        return self.value


def _check_value(item, where):
    if not isinstance(item, Value):
        raise TypeError(f'{where} must hold Values, not {type(item).__name__}.')
    return item


class List(Value, collections.abc.Sequence):
    """An ordered sequence of Values."""
    __slots__ = ('items',)

    def __init__(self, items=()):
        _init(self, items=tuple(_check_value(item, 'List') for item in items))

    def __getitem__(self, index):
        if isinstance(index, slice):
            return List(self.items[index])
        return self.items[index]

    def __len__(self):
        return len(self.items)

    def __eq__(self, other):
        if not isinstance(other, List):
            return NotImplemented
        return self.items == other.items

    def __hash__(self):
        return hash((List, self.items))

    def __repr__(self):
        return f'List({list(self.items)!r})'

    def to_python(self) -> list:
        return [item.to_python() for item in self.items]


class Dictionary(Value, collections.abc.Mapping):
    """
    A mapping from byte-string keys to Values.

    Accepts a mapping or an iterable of (key, value) pairs. Keys may be
    given as bytes or ByteString and are stored as bytes. When a key
    repeats, the last occurrence wins. Iteration is in ascending raw
    key order, which is also the order the encoder writes.
    """
    __slots__ = ('_items',)

    def __init__(self, items=()):
        if isinstance(items, collections.abc.Mapping):
            items = items.items()
        entries = {}
        for key, value in items:
            if isinstance(key, ByteString):
                key = key.value
            elif isinstance(key, (bytearray, memoryview)):
                key = bytes(key)
            if not isinstance(key, bytes):
                raise TypeError(f'Dictionary keys must be bytes, not {type(key).__name__}.')
            entries[key] = _check_value(value, 'Dictionary')
        _init(self, _items=dict(sorted(entries.items())))

    def __getitem__(self, key):
        if isinstance(key, ByteString):
            key = key.value
        return self._items[key]

    def __iter__(self):
        return iter(self._items)

    def __len__(self):
        return len(self._items)

    def __eq__(self, other):
        if not isinstance(other, Dictionary):
            return NotImplemented
        return self._items == other._items

    def __hash__(self):
        return hash((Dictionary, frozenset(self._items.items())))

    def __repr__(self):
        return f'Dictionary({self._items!r})'

    def to_python(self) -> dict:
        return {key: value.to_python() for key, value in self._items.items()}


def from_python(obj) -> Value:
    """
    Builds a Value tree from plain Python objects.

    str is encoded as UTF-8, both as a byte string and as a dictionary
    key. Values already in the tree are taken as they are.

    Raises:
        TypeError: For any object with no Bencode counterpart.
        ValueError: For an int outside the 32-bit signed range.
    """
    if isinstance(obj, Value):
        return obj
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return ByteString(obj)
    if isinstance(obj, str):
        return ByteString(obj.encode('utf-8'))
    if isinstance(obj, int) and not isinstance(obj, bool):
        return Integer(obj)
    if isinstance(obj, (list, tuple)):
        return List(from_python(item) for item in obj)
    if isinstance(obj, dict):
        return Dictionary(
            (key.encode('utf-8') if isinstance(key, str) else key, from_python(value))
            for key, value in obj.items()
        )
    raise TypeError(f'Unsupported type for bencoding: {type(obj).__name__}')
