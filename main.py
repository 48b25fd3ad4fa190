import logging
import sys

from bencodec.bencoding import decode, encode
from bencodec.errors import DecodeError

logger = logging.getLogger(__name__)

USAGE = 'Usage: python main.py [--check] [--debug] < document.bencode'

EXIT_OK = 0
EXIT_NOT_CANONICAL = 1
EXIT_ERROR = 2


def main(argv=None) -> int:
    """
    Reads one Bencode document from stdin and writes its canonical form.

    With --check nothing is written; the exit status tells whether the
    input already was canonical.
    """
    args = sys.argv[1:] if argv is None else argv
    unknown = [arg for arg in args if arg not in ('--check', '--debug')]
    if unknown:
        print(USAGE, file=sys.stderr)
        return EXIT_ERROR
    check = '--check' in args

    logging.basicConfig(
        level=logging.DEBUG if '--debug' in args else logging.INFO,
        format='%(levelname)s: %(message)s',
    )

    data = sys.stdin.buffer.read()
    try:
        result = decode(data)
    except DecodeError as e:
        logger.error('%s: %s', type(e).__name__, e)
        return EXIT_ERROR

    logger.debug('Decoded %s from %d bytes', type(result.value).__name__, result.consumed)
    if result.remaining:
        logger.warning('Ignoring %d trailing bytes after index %d', result.remaining, result.consumed)

    canonical = encode(result.value)
    if check:
        if canonical != data[:result.consumed]:
            logger.info('Input is not in canonical form')
            return EXIT_NOT_CANONICAL
        return EXIT_OK

    sys.stdout.buffer.write(canonical)
    sys.stdout.buffer.flush()
    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
