"""Local line editing of keyboard input before it is sent to the peer."""
# std imports
import logging

# 3rd party
import wcwidth

# local imports
from .config import DEFAULT_ERASE, DEFAULT_INTERRUPT

__all__ = ('LineBuffer', 'CR')

CR = '\r'

#: Cursor left, then delete character, understood by any vt100 display.
_ERASE_SEQ = '\b\x1b[P'


class LineBuffer(object):
    """
    Accumulate keystrokes into a line, sent on carriage return.

    :param send: callable receiving encoded bytes to transmit.
    :param display: object with methods ``write(bytes)`` and ``bell()``.
    :param callable on_interrupt: called without arguments when the
        interrupt key is pressed.
    :param erase: keys that delete the last character.
    :param str interrupt: key that calls ``on_interrupt``.
    :param str encoding: encoding of bytes sent and echoed.
    """

    #: Whether keystrokes are echoed to the display; False when the peer
    #: echoes our input.
    echo = True

    #: Whether keystrokes are buffered until carriage return; False in
    #: character-at-a-time mode, where each key is sent as it is pressed.
    linemode = True

    def __init__(self, send, display, on_interrupt=None, *,
                 erase=DEFAULT_ERASE, interrupt=DEFAULT_INTERRUPT,
                 encoding='utf8', log=None):
        self._send = send
        self.display = display
        self.on_interrupt = on_interrupt
        self.erase_keys = tuple(erase)
        self.interrupt_key = interrupt
        self.encoding = encoding
        self.log = log or logging.getLogger(__name__)
        self._buffer = []

    @property
    def line(self):
        """Characters received since the last carriage return."""
        return ''.join(self._buffer)

    def _encode(self, string):
        return string.encode(self.encoding, 'replace')

    def _echo(self, string):
        if self.echo:
            self.display.write(self._encode(string))

    def feed(self, keys):
        """
        Process one unit of keyboard input.

        :param str keys: characters of a single key event, a paste may
            contain many.  Each character is edited in turn.
        """
        for key in keys:
            if key == self.interrupt_key:
                self.log.debug('interrupt key {!r}'.format(key))
                if self.on_interrupt is not None:
                    self.on_interrupt()
                return
            if not self.linemode:
                self._send(self._encode(key))
            elif key == CR:
                self.send_line()
            elif key in self.erase_keys:
                self.erase()
            else:
                self._buffer.append(key)
                self._echo(key)

    def send_line(self):
        """Send buffer and carriage return, and clear it."""
        line = self.line + CR
        self._buffer.clear()
        self._send(self._encode(line))
        self._echo(CR)

    def erase(self):
        """Delete the last character, or ring the bell when there is none."""
        if not self._buffer:
            self.display.bell()
            return
        char = self._buffer.pop()
        # a double-width character occupies two cells, a combining one none
        width = wcwidth.wcwidth(char)
        if width < 0:
            width = 1
        if self.echo and width:
            self.display.write(self._encode(_ERASE_SEQ * width))

    def flush(self):
        """Send buffered characters, without carriage return."""
        if self._buffer:
            line = self.line
            self._buffer.clear()
            self._send(self._encode(line))

    def set_mode(self, linemode, echo):
        """
        Change editing and echo mode, as negotiated with the peer.

        Leaving line mode sends any characters buffered so far.
        """
        if self.linemode and not linemode:
            self.flush()
        if (linemode, echo) != (self.linemode, self.echo):
            self.log.debug('linemode={}, echo={}'.format(linemode, echo))
        self.linemode, self.echo = linemode, echo
