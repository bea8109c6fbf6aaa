"""Displays that receive the data stream of a session."""
# std imports
import sys

__all__ = ('Display', 'TerminalDisplay')


class Display(object):
    """
    Interface of a session's display.

    Bytes given to :meth:`write` are passed through untouched, the display
    is expected to interpret any terminal escape sequences itself.
    """

    def write(self, data):
        raise NotImplementedError

    def bell(self):
        raise NotImplementedError

    def clear(self):
        raise NotImplementedError


class TerminalDisplay(Display):
    """
    Display writing to a vt100-compatible terminal.

    :param stream: writable binary stream, such as the
        :class:`asyncio.StreamWriter` of standard out.  When ``None``,
        ``sys.stdout.buffer`` is used.
    """

    #: Clear screen and move cursor to top-left.
    CLEAR_SEQ = b'\x1b[2J\x1b[1;1H'

    def __init__(self, stream=None):
        self.stream = stream if stream is not None else sys.stdout.buffer

    def write(self, data):
        self.stream.write(data)
        if hasattr(self.stream, 'flush'):
            self.stream.flush()

    def bell(self):
        self.write(b'\x07')

    def clear(self):
        self.write(self.CLEAR_SEQ)
