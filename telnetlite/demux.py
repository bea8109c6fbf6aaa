"""Split an inbound telnet byte stream into data and IAC command events."""
# std imports
import collections
import logging

# local imports
from .telopt import IAC, SB, SE, NEGOTIATION_COMMANDS, name_command

__all__ = ('Demultiplexer', 'PendingCommand', 'Data', 'Negotiate', 'Command',
           'SubnegotiationStart', 'SubnegotiationEnd', 'EscapedIAC')

# Pre-allocated single-byte cache to avoid per-byte bytes() allocations
_ONE_BYTE = [bytes([i]) for i in range(256)]

#: Largest subnegotiation payload buffered before it is discarded.
SB_MAXSIZE = 1 << 15

#: A run of plain data bytes.
Data = collections.namedtuple('Data', ['data'])

#: ``IAC DO|DONT|WILL|WONT option``.
Negotiate = collections.namedtuple('Negotiate', ['command', 'option'])

#: Any other two-byte ``IAC command``, such as ``NOP`` or ``GA``.
Command = collections.namedtuple('Command', ['command'])

#: ``IAC SB option`` was received.
SubnegotiationStart = collections.namedtuple('SubnegotiationStart',
                                             ['option'])

#: ``IAC SE`` closed the subnegotiation of ``option``.
SubnegotiationEnd = collections.namedtuple('SubnegotiationEnd',
                                           ['option', 'payload'])

#: ``IAC IAC``, a literal 0xFF data byte.
EscapedIAC = collections.namedtuple('EscapedIAC', ['data'], defaults=(IAC,))


class PendingCommand(object):
    """Parse state of an IAC command not yet completely received."""

    def __init__(self):
        self.reset()

    def reset(self):
        #: Whether the last byte was an IAC awaiting its command byte.
        self.iac_received = False
        #: DO, DONT, WILL, WONT or SB awaiting its option byte.
        self.cmd_received = None
        #: Option byte of the subnegotiation being buffered.
        self.sb_option = None
        self.sb_buffer = bytearray()
        #: Subnegotiation exceeded SB_MAXSIZE, skipped until IAC SE.
        self.sb_overflow = False

    @property
    def pending(self):
        """Whether a command is partially received."""
        return bool(self.iac_received or self.cmd_received is not None
                    or self.sb_option is not None)

    def __repr__(self):
        return ('<PendingCommand iac_received={0.iac_received} '
                'cmd_received={0.cmd_received!r} sb_option={0.sb_option!r} '
                'sb_len={1}>'.format(self, len(self.sb_buffer)))


class Demultiplexer(object):
    """
    Telnet IAC interpreter for the inbound direction.

    Bytes given to :meth:`feed` are scanned for IAC sequences, yielding
    events strictly in the order their bytes were received.  A command
    split across two reads is completed by the next call to :meth:`feed`.

    Malformed sequences are never fatal: the offending bytes are logged
    and discarded, and scanning resumes with the byte that follows.
    """

    def __init__(self, log=None):
        self.log = log or logging.getLogger(__name__)
        self.pending = PendingCommand()
        #: Total bytes given to :meth:`feed`.
        self.byte_count = 0
        #: Number of malformed sequences discarded.
        self.discarded = 0

    def reset(self):
        """Forget any partially received command, as for a new stream."""
        if self.pending.pending:
            self.log.debug('discard partial command: {!r}'.format(
                self.pending))
        self.pending.reset()

    def _discard(self, reason):
        self.discarded += 1
        self.log.warning('protocol error, discarded: {}'.format(reason))

    def _interpret(self, char):
        """Handle the byte following IAC outside of a subnegotiation."""
        if char == IAC:
            yield EscapedIAC()
        elif char in NEGOTIATION_COMMANDS or char == SB:
            self.pending.cmd_received = char
        elif char == SE:
            self._discard('IAC SE without IAC SB')
        else:
            yield Command(char)

    def feed(self, data):
        """
        Generate events for the given bytes.

        :param bytes data: bytes received from transport.
        """
        pending = self.pending
        run = bytearray()
        for byte in data:
            self.byte_count += 1
            char = _ONE_BYTE[byte]

            if pending.sb_option is not None:
                if pending.iac_received:
                    pending.iac_received = False
                    if char == IAC:
                        if not pending.sb_overflow:
                            pending.sb_buffer.append(byte)
                    elif char == SE:
                        opt, payload = pending.sb_option, bytes(
                            pending.sb_buffer)
                        overflow = pending.sb_overflow
                        pending.reset()
                        if not overflow:
                            yield SubnegotiationEnd(opt, payload)
                    else:
                        # the payload is lost, the command is not
                        if not pending.sb_overflow:
                            self._discard(
                                'SB {} interrupted by IAC {}'.format(
                                    name_command(pending.sb_option),
                                    name_command(char)))
                        pending.reset()
                        yield from self._interpret(char)
                elif char == IAC:
                    pending.iac_received = True
                elif pending.sb_overflow:
                    pass
                elif len(pending.sb_buffer) >= SB_MAXSIZE:
                    self._discard('SB {} exceeds {} bytes'.format(
                        name_command(pending.sb_option), SB_MAXSIZE))
                    pending.sb_buffer.clear()
                    pending.sb_overflow = True
                else:
                    pending.sb_buffer.append(byte)

            elif pending.cmd_received == SB:
                pending.cmd_received = None
                pending.sb_option = char
                yield SubnegotiationStart(char)

            elif pending.cmd_received is not None:
                cmd = pending.cmd_received
                pending.reset()
                yield Negotiate(cmd, char)

            elif pending.iac_received:
                pending.iac_received = False
                yield from self._interpret(char)

            elif char == IAC:
                if run:
                    yield Data(bytes(run))
                    run.clear()
                pending.iac_received = True

            else:
                run.append(byte)

        if run:
            yield Data(bytes(run))
