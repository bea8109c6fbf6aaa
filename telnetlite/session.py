"""Module provides class TelnetSession."""
# std imports
import asyncio
import logging
import struct

# local imports
from .demux import (Demultiplexer, Data, Negotiate, Command, EscapedIAC,
                    SubnegotiationStart, SubnegotiationEnd)
from .negotiation import Negotiator, LOCAL, REMOTE
from .linebuffer import LineBuffer
from .errors import TransportError, ProtocolError
from .config import DEFAULT_ERASE, DEFAULT_INTERRUPT
from .telopt import (IAC, SB, SE, IS, SEND, BINARY, ECHO, SGA, NAWS, TTYPE,
                     name_command)

__all__ = ('TelnetSession',)


class TelnetSession(asyncio.Protocol):
    """
    Telnet client session of a single connection.

    The session interprets bytes received by the transport, negotiating
    options and writing data to ``display``, and sends keyboard input
    given to :meth:`feed_key` through its :class:`~.LineBuffer`.

    All methods are called from the event loop, so that inbound data,
    keyboard input and transport errors are handled one at a time.

    :param display: object with methods ``write(bytes)``, ``bell()`` and
        ``clear()``, such as :class:`~.TerminalDisplay`.
    :param str term: terminal type answered for TTYPE, :rfc:`1091`.
    :param int cols: window width sent by NAWS, :rfc:`1073`.
    :param int rows: window height sent by NAWS.
    :param str encoding: encoding of keyboard input sent.
    :param erase: keys that delete the last character typed.
    :param str interrupt: key that closes the session.
    :param asyncio.Future waiter_closed: future resolved when the session
        is closed, created when not given.
    """

    #: Options we agree to perform when asked.
    supported_local = (BINARY, SGA, NAWS, TTYPE)

    #: Options we agree to let the server perform when offered.
    wanted_remote = (BINARY, ECHO, SGA)

    _transport = None
    _closing = False

    def __init__(self, display, *, term='unknown', cols=80, rows=24,
                 encoding='utf8', erase=DEFAULT_ERASE,
                 interrupt=DEFAULT_INTERRUPT, waiter_closed=None):
        self.log = logging.getLogger('telnetlite.session')
        self.display = display
        self.term = term
        self.cols, self.rows = cols, rows
        self.waiter_closed = waiter_closed or asyncio.Future()
        #: the exception that closed this session, if any.
        self.exception = None
        self.demux = Demultiplexer()
        self.options = Negotiator(self.send_iac,
                                  supported_local=self.supported_local,
                                  wanted_remote=self.wanted_remote,
                                  on_change=self.option_changed)
        self.line_buffer = LineBuffer(self.send, display,
                                      on_interrupt=self.close,
                                      erase=erase, interrupt=interrupt,
                                      encoding=encoding)

    def __repr__(self):
        hostport = self.get_extra_info('peername', ['-', 'closing'])[:2]
        return '<TelnetSession {0} {1}>'.format(*hostport)

    # Base protocol methods

    def connection_made(self, transport):
        """Called when a connection is made."""
        self._transport = transport
        self.demux.reset()
        self.log.info('Connected to %s', self)
        self.display.write('connected to {0} {1}\r\n'.format(
            *self.get_extra_info('peername', ['-', '-'])[:2]).encode())

    def data_received(self, data):
        """Process bytes received by transport."""
        for event in self.demux.feed(data):
            if self._closing:
                break
            self.dispatch(event)

    def eof_received(self):
        """Called when the other end calls write_eof() or equivalent."""
        self.log.debug('EOF from server, closing.')
        self.connection_lost(None)

    def connection_lost(self, exc):
        """
        Called when the connection is lost or closed.

        :param Exception exc: exception.  ``None`` indicates a closing
            EOF sent by the peer, or a close made by this end.
        """
        if self._closing:
            return
        if exc is None:
            self.log.info('Connection closed to %s', self)
            self.display.write(
                b'\r\nConnection closed by foreign host.\r\n')
            self._close()
        else:
            self.fail(TransportError(
                'Connection lost: {}'.format(exc), exc))

    # public properties

    @property
    def connected(self):
        """Whether the transport is open and the session usable."""
        return self._transport is not None and not self._closing

    @property
    def will_echo(self):
        """Whether the server echoes our input."""
        return self.options.remote_enabled(ECHO)

    @property
    def mode(self):
        """
        String describing NVT mode.

        :rtype str: One of:

            ``kludge``: Server WILL ECHO and WILL SGA, each key is sent
                as it is pressed and echoed by the server.

            ``local``: Default NVT half-duplex mode, line editing is
                performed locally and sent on carriage return.
        """
        if self.will_echo and self.options.remote_enabled(SGA):
            return 'kludge'
        return 'local'

    def get_extra_info(self, name, default=None):
        """Get optional transport information."""
        if self._transport:
            return self._transport.get_extra_info(name, default)
        return default

    # inbound events

    def dispatch(self, event):
        """Act on a single event of the :class:`~.Demultiplexer`."""
        if isinstance(event, Data):
            self.display.write(event.data)
        elif isinstance(event, EscapedIAC):
            self.display.write(event.data)
        elif isinstance(event, Negotiate):
            self.options.receive(event.command, event.option)
        elif isinstance(event, SubnegotiationStart):
            self.log.debug('recv IAC SB {}'.format(
                name_command(event.option)))
        elif isinstance(event, SubnegotiationEnd):
            try:
                self.handle_subnegotiation(event.option, event.payload)
            except ProtocolError as err:
                self.log.warning('SB {}: {}'.format(
                    name_command(event.option), err))
        elif isinstance(event, Command):
            self.log.debug('recv IAC {} (ignored)'.format(
                name_command(event.command)))

    def handle_subnegotiation(self, opt, payload):
        """
        Callback for end of sub-negotiation buffer.

        :raises ProtocolError: payload is not understood.
        """
        self.log.debug('recv IAC SB {} {!r} IAC SE'.format(
            name_command(opt), payload))
        if opt == TTYPE:
            if payload[:1] != SEND:
                raise ProtocolError('expected SEND, got {!r}'.format(payload))
            if not self.options.local_enabled(TTYPE):
                raise ProtocolError('SB TTYPE SEND without DO TTYPE')
            self.send_ttype()
        else:
            self.log.debug('SB {} unhandled'.format(name_command(opt)))

    def option_changed(self, direction, opt, enabled):
        """Callback of :class:`~.Negotiator` for enabled or disabled option."""
        self.log.debug('{} {} {}'.format(
            direction, name_command(opt), 'on' if enabled else 'off'))
        if direction == LOCAL and opt == NAWS and enabled:
            self.send_naws()
        elif direction == REMOTE and opt in (ECHO, SGA):
            self.line_buffer.set_mode(linemode=self.mode == 'local',
                                      echo=not self.will_echo)

    # outbound

    def write(self, buf):
        """
        Write bytes to transport, or fail the session.

        Returns True if written.
        """
        if not self.connected:
            self.log.debug('not connected, dropped {!r}'.format(buf))
            return False
        try:
            self._transport.write(buf)
        except OSError as err:
            self.fail(TransportError('Write failed: {}'.format(err), err))
            return False
        return True

    def send(self, data):
        """Send data bytes, escaping IAC."""
        return self.write(data.replace(IAC, IAC + IAC))

    def send_iac(self, cmd, opt):
        """Send ``IAC cmd opt``."""
        return self.write(IAC + cmd + opt)

    def send_ttype(self):
        """Send ``IAC SB TTYPE IS term IAC SE``."""
        self.log.debug('send IAC SB TTYPE IS {!r} IAC SE'.format(self.term))
        term = self.term.encode('ascii', 'replace')
        return self.write(IAC + SB + TTYPE + IS + term + IAC + SE)

    def send_naws(self):
        """Send ``IAC SB NAWS cols rows IAC SE``."""
        cols, rows = min(self.cols, 0xffff), min(self.rows, 0xffff)
        value = struct.pack('!HH', cols, rows).replace(IAC, IAC + IAC)
        self.log.debug('send IAC SB NAWS (cols={}, rows={}) IAC SE'
                       .format(cols, rows))
        return self.write(IAC + SB + NAWS + value + IAC + SE)

    # local input

    def feed_key(self, keys):
        """Process a keyboard input event."""
        if self._closing:
            self.log.debug('closed, ignored key {!r}'.format(keys))
            return
        self.line_buffer.feed(keys)

    def resize(self, cols, rows):
        """
        Window size changed.

        The new size is sent when NAWS has been negotiated, otherwise it
        is only recorded.
        """
        self.cols, self.rows = cols, rows
        if self.options.local_enabled(NAWS):
            self.send_naws()

    # closing

    def fail(self, exc):
        """Report ``exc`` to the display once, and close without clearing."""
        if self._closing:
            return
        self.log.info('%s: %s', self, exc)
        self.exception = exc
        self.display.write('\r\n{}\r\n'.format(exc).encode())
        self._close()

    def close(self):
        """Close the connection and clear the display."""
        if self._closing:
            return
        self.log.info('Closing %s', self)
        self._close()
        self.display.clear()

    def _close(self):
        self._closing = True
        # a partially received command is dropped without error
        self.demux.reset()
        if self._transport is not None:
            self._transport.close()
        # break circular references
        self._transport = None
        if not self.waiter_closed.done():
            self.waiter_closed.set_result(self)
