# std imports
import asyncio
import codecs
import contextlib
import logging
import os
import struct
import sys

# local
from . import accessories
from .display import TerminalDisplay
from .errors import TransportError

__all__ = ("telnet_client_shell",)


if sys.platform == "win32":

    async def telnet_client_shell(config):
        raise NotImplementedError(
            "win32 not yet supported as telnet client. Please contribute!"
        )

else:
    import collections
    import fcntl
    import signal
    import termios

    class Terminal(object):
        """
        Context manager of the controlling terminal, when there is one.

        While entered, a terminal on stdin is in raw mode so that every
        key, including erase and ^X, reaches the session's line buffer
        unaltered.  The saved mode is restored on exit.
        """

        ModeDef = collections.namedtuple(
            "mode", ["iflag", "oflag", "cflag", "lflag", "ispeed", "ospeed", "cc"]
        )

        def __init__(self):
            self._fileno = sys.stdin.fileno()
            self._istty = os.path.sameopenfile(0, 1)

        def __enter__(self):
            self._save_mode = self.get_mode()
            if self._istty:
                self.set_mode(self.determine_mode(self._save_mode))
            return self

        def __exit__(self, *_):
            if self._istty:
                termios.tcsetattr(
                    self._fileno, termios.TCSAFLUSH, list(self._save_mode)
                )

        @property
        def istty(self):
            return self._istty

        def get_mode(self):
            if self._istty:
                return self.ModeDef(*termios.tcgetattr(self._fileno))

        def set_mode(self, mode):
            termios.tcsetattr(self._fileno, termios.TCSAFLUSH, list(mode))

        def determine_mode(self, mode):
            """Return raw copy of ``mode``, as tty.setraw would set it."""
            # keep CR as typed, no flow control or parity stripping
            iflag = mode.iflag & ~(
                termios.BRKINT
                | termios.ICRNL
                | termios.INPCK
                | termios.ISTRIP
                | termios.IXON
            )
            cflag = (mode.cflag & ~(termios.CSIZE | termios.PARENB)) | termios.CS8
            # the line buffer edits and echoes, ^C and ^X are plain keys
            lflag = mode.lflag & ~(
                termios.ICANON | termios.IEXTEN | termios.ISIG | termios.ECHO
            )
            # server output is written as received
            oflag = mode.oflag & ~(termios.OPOST | termios.ONLCR)
            cc = list(mode.cc)
            cc[termios.VMIN] = 1
            cc[termios.VTIME] = 0
            return mode._replace(
                iflag=iflag, oflag=oflag, cflag=cflag, lflag=lflag, cc=cc
            )

        def get_winsize(self, default=(24, 80)):
            """Return (rows, cols) of terminal, or ``default``."""
            if not self._istty:
                return default
            buf = struct.pack("hhhh", 0, 0, 0, 0)
            try:
                buf = fcntl.ioctl(self._fileno, termios.TIOCGWINSZ, buf)
            except OSError:
                return default
            rows, cols, _, _ = struct.unpack("hhhh", buf)
            return rows, cols

        async def make_stdio(self):
            """Return (reader, writer) streams of stdin and stdout."""
            loop = asyncio.get_event_loop()
            reader = asyncio.StreamReader()
            await loop.connect_read_pipe(
                lambda: asyncio.StreamReaderProtocol(reader), sys.stdin
            )
            # a tty's stdin and stdout are one file, and writing to
            # sys.stdout would share its non-blocking mode with stdin
            pipe = sys.stdin if self._istty else sys.stdout
            transport, protocol = await loop.connect_write_pipe(
                asyncio.streams.FlowControlMixin, pipe
            )
            writer = asyncio.StreamWriter(transport, protocol, None, loop)
            return reader, writer

    async def telnet_client_shell(config):
        """
        Minimal telnet client shell for POSIX terminals.

        Connects to the host of ``config`` and relays keys typed to the
        session until it is closed, by the server, a transport error, or
        the interrupt key.  Returns exit status, 0 unless the connection
        failed.

        stdin or stdout may also be a pipe or file, behaving much like nc(1):
        end of input leaves the session open until the server closes it.
        """
        from .client import open_session

        log = logging.getLogger("telnetlite.client_shell")
        loop = asyncio.get_event_loop()

        with Terminal() as term:
            stdin, stdout = await term.make_stdio()
            display = TerminalDisplay(stdout)
            rows, cols = term.get_winsize(default=(config.rows, config.cols))
            watch_winch = term.istty and hasattr(signal, "SIGWINCH")
            try:
                session_cm = open_session(
                    config.host, config.port, display,
                    term=config.term, cols=cols, rows=rows,
                    encoding=config.encoding, erase=config.erase,
                    interrupt=config.interrupt)
                async with session_cm as session:
                    stdout.write(
                        "Escape character is '{escape}'.\r\n".format(
                            escape=accessories.name_unicode(config.interrupt)
                        ).encode()
                    )
                    if watch_winch:
                        loop.add_signal_handler(
                            signal.SIGWINCH,
                            lambda: session.resize(*reversed(term.get_winsize())),
                        )
                    try:
                        await _relay_keys(stdin, session, config.encoding, log)
                    finally:
                        if watch_winch:
                            loop.remove_signal_handler(signal.SIGWINCH)
            except TransportError as err:
                log.debug("connect failed: %s", err)
                stdout.write("{}\r\n".format(err).encode())
                return 1
            stdout.write(b"\x1b[mConnection closed.\r\n")
            return 1 if session.exception else 0

    async def _relay_keys(stdin, session, encoding, log):
        """
        Give keyboard input to ``session`` until it is closed.

        At end of input no more keys are read, but the session is left
        open for the server to finish its output and disconnect.
        """
        decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        stdin_task = accessories.make_reader_task(stdin)
        try:
            while not session.waiter_closed.done():
                done, _ = await asyncio.wait(
                    {stdin_task, session.waiter_closed},
                    return_when=asyncio.FIRST_COMPLETED,
                )
                if stdin_task not in done:
                    continue
                inp = stdin_task.result()
                if not inp:
                    log.debug("EOF from client stdin")
                    session.feed_key(decoder.decode(b"", final=True))
                    await asyncio.wait({session.waiter_closed})
                    break
                session.feed_key(decoder.decode(inp))
                stdin_task = accessories.make_reader_task(stdin)
        finally:
            stdin_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await stdin_task
