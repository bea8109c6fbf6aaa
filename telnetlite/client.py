#!/usr/bin/env python3
"""
Telnet Client API for the 'telnetlite' python package.
"""
# std imports
import argparse
import asyncio
import contextlib
import os
import sys

# local imports
from telnetlite import accessories
from telnetlite import client_shell
from telnetlite.config import make_config
from telnetlite.display import TerminalDisplay
from telnetlite.errors import ConfigError, TransportError
from telnetlite.session import TelnetSession

__all__ = ('open_connection', 'open_session')


async def open_connection(host, port=23, display=None, *,
                          session_factory=None, term='unknown',
                          cols=80, rows=24, encoding='utf8', **kwargs):
    """
    Connect to a TCP Telnet server as a Telnet client.

    :param str host: Remote Internet TCP Server host.
    :param port: Remote Internet host TCP port, integer or decimal string.
    :param display: Receives the data stream of the server, an instance
        of :class:`~.TerminalDisplay` writing to standard out when
        ``None``.
    :param session_factory: Session class, :class:`~.TelnetSession` when
        ``None``.
    :param str term: Terminal type sent for requests of TTYPE, :rfc:`1091`.
    :param int cols: Window width sent by NAWS :rfc:`1073`.
    :param int rows: Window height sent by NAWS.
    :param str encoding: Encoding of keyboard input sent to the server.
    :param kwargs: ``erase``, ``interrupt`` keys and ``waiter_closed``
        future, given to the session.
    :raises ConfigError: ``host`` or ``port`` is not valid, no connection
        is attempted.
    :raises TransportError: the connection could not be made.
    :return: connected session.
    :rtype: TelnetSession
    """
    waiter_closed = kwargs.pop('waiter_closed', None)
    config = make_config(host, port, term=term, encoding=encoding,
                         cols=cols, rows=rows, **kwargs)
    if display is None:
        display = TerminalDisplay()
    if session_factory is None:
        session_factory = TelnetSession

    def connection_factory():
        return session_factory(
            display,
            term=config.term,
            cols=config.cols,
            rows=config.rows,
            encoding=config.encoding,
            erase=config.erase,
            interrupt=config.interrupt,
            waiter_closed=waiter_closed,
        )

    try:
        _, session = await asyncio.get_event_loop().create_connection(
            connection_factory, config.host, config.port)
    except OSError as err:
        raise TransportError('Unable to connect to {0} {1}: {2}'.format(
            config.host, config.port, err), err)
    return session


@contextlib.asynccontextmanager
async def open_session(host, port=23, display=None, **kwargs):
    """
    Context manager of a connected :class:`~.TelnetSession`.

    The session and its transport are closed when the block exits, by
    any means.  Arguments are those of :func:`open_connection`.
    """
    session = await open_connection(host, port, display, **kwargs)
    try:
        yield session
    finally:
        session.close()


async def run_client():
    """Command-line 'telnetlite-client' entry point, via setuptools."""
    parser = _get_argument_parser()
    args = parser.parse_args()
    try:
        kwargs = _transform_args(args)
    except ConfigError as err:
        parser.error(str(err))
    config = kwargs.pop('config')
    config_msg = 'Client configuration: {key_values}'.format(
        key_values=accessories.repr_mapping(config._asdict()))

    log = accessories.make_logger(
        name=__name__,
        loglevel=kwargs.pop('loglevel'),
        logfile=kwargs.pop('logfile'),
        logfmt=kwargs.pop('logfmt'),
    )
    log.debug(config_msg)

    return await client_shell.telnet_client_shell(config)


def _get_argument_parser():
    parser = argparse.ArgumentParser(
        description='Telnet protocol client',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument('host', action='store', help='hostname')
    parser.add_argument('port', nargs='?', default='23', help='port number')
    parser.add_argument(
        '--term', default=os.environ.get('TERM', 'unknown'),
        help='terminal type')
    parser.add_argument('--encoding', default='utf8', help='encoding name')
    parser.add_argument('--loglevel', default='warn', help='log level')
    parser.add_argument(
        '--logfmt', default=accessories._DEFAULT_LOGFMT, help='log format')
    parser.add_argument('--logfile', help='filepath')
    return parser


def _transform_args(args):
    return {
        'config': make_config(args.host, args.port, term=args.term,
                              encoding=args.encoding),
        'loglevel': args.loglevel,
        'logfile': args.logfile,
        'logfmt': args.logfmt,
    }


def main():
    sys.exit(asyncio.run(run_client()))


if __name__ == '__main__':
    main()
