class BencodeError(ValueError):
    """Base class for every failure raised by the codec."""


class DecodeError(BencodeError):
    """
    The input is not a valid Bencode document.

    Attributes:
        position: Byte offset at which the failure was detected.
    """
    def __init__(self, message: str, position: int):
        super().__init__(f'{message} at index {position}')
        self.position = position


class MalformedTokenError(DecodeError):
    """An unexpected byte where the grammar requires a literal or a digit."""


class UnsupportedByteError(MalformedTokenError):
    """The lookahead byte does not start any value."""


class TruncatedInputError(DecodeError):
    """The input ended while a value still expected more bytes."""


class ValueRangeError(DecodeError):
    """A well-formed integer outside the 32-bit signed range."""


class NestingDepthError(DecodeError):
    """Lists and dictionaries are nested deeper than the decoder allows."""


class EncodeError(BencodeError):
    """A Value tree could not be encoded."""


class InvariantViolationError(EncodeError):
    """The Value tree is internally inconsistent."""
