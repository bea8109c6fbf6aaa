"""Connection settings and their validation."""
# std imports
import codecs
import collections

# local imports
from .errors import ConfigError

__all__ = ('Config', 'make_config', 'parse_port',
           'DEFAULT_ERASE', 'DEFAULT_INTERRUPT')

#: Keys that delete the last character of the line buffer.
DEFAULT_ERASE = ('\x7f',)

#: Key that closes the session, Ctrl-X.
DEFAULT_INTERRUPT = '\x18'

Config = collections.namedtuple('Config', [
    'host', 'port', 'term', 'encoding', 'cols', 'rows',
    'erase', 'interrupt'])


def parse_port(port):
    """
    Return ``port`` as an integer TCP port number.

    :param port: integer, or string of decimal digits.
    :raises ConfigError: not a number, or outside of range 1-65535.
    """
    if isinstance(port, bool):
        raise ConfigError('port must be a number, got {!r}'.format(port))
    if isinstance(port, str):
        if not port.strip().isdigit():
            raise ConfigError('port must be a number, got {!r}'.format(port))
        port = int(port.strip())
    elif not isinstance(port, int):
        raise ConfigError('port must be a number, got {!r}'.format(port))
    if not 0 < port < 65536:
        raise ConfigError('port {} out of range 1-65535'.format(port))
    return port


def make_config(host, port=23, *, term='unknown', encoding='utf8',
                cols=80, rows=24, erase=DEFAULT_ERASE,
                interrupt=DEFAULT_INTERRUPT):
    """
    Return validated :class:`Config` for a connection attempt.

    :raises ConfigError: invalid host, port, encoding or window size.
    """
    if not isinstance(host, str) or not host.strip():
        raise ConfigError('host must be given')
    host = host.strip()
    if any(char.isspace() for char in host):
        raise ConfigError('host {!r} contains whitespace'.format(host))
    port = parse_port(port)

    try:
        codecs.lookup(encoding)
    except LookupError:
        raise ConfigError('unknown encoding {!r}'.format(encoding))

    if cols < 1 or rows < 1:
        raise ConfigError('window size {}x{} not valid'.format(cols, rows))
    if interrupt in erase:
        raise ConfigError('interrupt key may not also be an erase key')

    return Config(host=host, port=port, term=term, encoding=encoding,
                  cols=cols, rows=rows, erase=tuple(erase),
                  interrupt=interrupt)
