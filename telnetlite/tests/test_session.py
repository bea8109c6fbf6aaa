"""Test :class:`~.TelnetSession` against fake transport and display."""
# std imports
import asyncio
import struct

# 3rd party
import pytest

# local imports
from telnetlite.errors import TransportError
from telnetlite.telopt import (IAC, DO, DONT, WILL, WONT, SB, SE, IS, SEND,
                               ECHO, SGA, NAWS, TTYPE, BINARY, NOP, STATUS)
from telnetlite.tests.accessories import make_session


@pytest.mark.asyncio
async def test_connected_message():
    session, transport, display = make_session()
    assert session.connected
    assert display.written == b'connected to 192.0.2.1 23\r\n'
    assert repr(session) == '<TelnetSession 192.0.2.1 23>'
    assert transport.writes == []


@pytest.mark.asyncio
async def test_data_and_negotiation_in_order():
    session, transport, display = make_session()
    del display.calls[:]
    session.data_received(b'A' + IAC + WILL + ECHO + b'B' + IAC + IAC)
    assert display.written == b'AB\xff'
    assert transport.written == IAC + DO + ECHO
    assert session.will_echo


@pytest.mark.asyncio
async def test_ignored_commands():
    session, transport, display = make_session()
    del display.calls[:]
    session.data_received(IAC + NOP + b'x')
    assert display.written == b'x'
    assert transport.writes == []


@pytest.mark.asyncio
async def test_negotiation_policy():
    session, transport, _ = make_session()
    session.data_received(IAC + DO + ECHO + IAC + DO + BINARY +
                          IAC + WILL + STATUS + IAC + WILL + SGA)
    assert transport.written == (IAC + WONT + ECHO + IAC + WILL + BINARY +
                                 IAC + DONT + STATUS + IAC + DO + SGA)


@pytest.mark.asyncio
async def test_dont_on_wont_no_response():
    session, transport, _ = make_session()
    session.data_received(IAC + DONT + NAWS)
    assert transport.writes == []


@pytest.mark.asyncio
async def test_naws_sent_when_enabled():
    session, transport, _ = make_session(cols=132, rows=43)
    session.data_received(IAC + DO + NAWS)
    assert transport.written == (
        IAC + WILL + NAWS +
        IAC + SB + NAWS + struct.pack('!HH', 132, 43) + IAC + SE)


@pytest.mark.asyncio
async def test_naws_escapes_iac():
    session, transport, _ = make_session(cols=255, rows=24)
    session.data_received(IAC + DO + NAWS)
    assert transport.writes[-1] == (
        IAC + SB + NAWS + b'\x00\xff\xff\x00\x18' + IAC + SE)


@pytest.mark.asyncio
async def test_resize():
    session, transport, _ = make_session()
    session.resize(100, 50)
    # not negotiated, only recorded
    assert transport.writes == []
    assert (session.cols, session.rows) == (100, 50)
    session.data_received(IAC + DO + NAWS)
    session.resize(90, 30)
    assert transport.writes[-1] == (
        IAC + SB + NAWS + struct.pack('!HH', 90, 30) + IAC + SE)


@pytest.mark.asyncio
async def test_ttype():
    session, transport, _ = make_session(term='xterm-256color')
    session.data_received(IAC + DO + TTYPE)
    session.data_received(IAC + SB + TTYPE + SEND + IAC + SE)
    assert transport.written == (
        IAC + WILL + TTYPE +
        IAC + SB + TTYPE + IS + b'xterm-256color' + IAC + SE)


@pytest.mark.asyncio
async def test_ttype_without_do_is_ignored():
    session, transport, display = make_session()
    session.data_received(IAC + SB + TTYPE + SEND + IAC + SE + b'ok')
    assert transport.writes == []
    assert display.written.endswith(b'ok')
    assert session.connected


@pytest.mark.asyncio
async def test_line_sent_with_iac_escaped():
    session, transport, display = make_session(encoding='latin1')
    session.feed_key('\xff\r')
    assert transport.written == b'\xff\xff\r'


@pytest.mark.asyncio
async def test_line_buffer_scenario():
    session, transport, display = make_session()
    del display.calls[:]
    session.feed_key('abc')
    session.feed_key('\x7f')
    session.feed_key('d\r')
    assert transport.written == b'abd\r'
    assert display.written == b'abc\b\x1b[Pd\r'


@pytest.mark.asyncio
async def test_kludge_mode():
    """Server WILL ECHO and WILL SGA: keys are sent as pressed."""
    session, transport, display = make_session()
    session.feed_key('ab')
    session.data_received(IAC + WILL + ECHO + IAC + WILL + SGA)
    assert session.mode == 'kludge'
    del transport.writes[:]
    del display.calls[:]
    session.feed_key('c')
    assert transport.writes == [b'c']
    assert display.calls == []
    session.data_received(IAC + WONT + SGA)
    assert session.mode == 'local'
    assert session.line_buffer.linemode


@pytest.mark.asyncio
async def test_interrupt_closes_and_clears():
    session, transport, display = make_session()
    session.feed_key('ab\x18')
    assert transport.closed
    assert not session.connected
    assert display.calls[-1] == ('clear', None)
    assert session.waiter_closed.done()
    assert session.waiter_closed.result() is session
    assert transport.writes == []


@pytest.mark.asyncio
async def test_connection_reset_mid_session():
    """Reset: session closed, one error shown, no further sends."""
    session, transport, display = make_session()
    session.feed_key('ab')
    del display.calls[:]
    session.connection_lost(ConnectionResetError('Connection reset by peer'))
    assert not session.connected
    assert isinstance(session.exception, TransportError)
    assert len(display.calls) == 1
    assert b'Connection reset by peer' in display.written
    assert transport.closed

    # further input and notifications are ignored
    session.feed_key('c\r')
    session.connection_lost(None)
    session.data_received(IAC + DO + NAWS)
    assert transport.writes == []
    assert len(display.calls) == 1
    assert session.waiter_closed.done()


@pytest.mark.asyncio
async def test_write_failure():
    session, transport, display = make_session(
        fail_with=BrokenPipeError('Broken pipe'))
    session.feed_key('a\r')
    assert not session.connected
    assert isinstance(session.exception, TransportError)
    assert b'\r\nWrite failed: Broken pipe\r\n' in display.written
    assert not session.write(b'more')


@pytest.mark.asyncio
async def test_foreign_host_closed():
    session, transport, display = make_session()
    session.eof_received()
    assert display.written.endswith(
        b'\r\nConnection closed by foreign host.\r\n')
    assert session.exception is None
    assert session.waiter_closed.done()
    assert ('clear', None) not in display.calls


@pytest.mark.asyncio
async def test_partial_command_discarded_on_close():
    session, transport, display = make_session()
    session.data_received(IAC + WILL)
    assert session.demux.pending.pending
    session.connection_lost(None)
    assert not session.demux.pending.pending
    assert transport.writes == []


@pytest.mark.asyncio
async def test_close_is_idempotent():
    session, transport, display = make_session()
    session.close()
    session.close()
    assert display.calls.count(('clear', None)) == 1


@pytest.mark.asyncio
async def test_waiter_closed_given():
    waiter = asyncio.Future()
    session, _, _ = make_session(waiter_closed=waiter)
    assert session.waiter_closed is waiter
    session.close()
    assert (await waiter) is session
