"""Test the POSIX terminal shell of telnetlite-client."""
# std imports
import os
import sys
import asyncio

# 3rd party
import pytest

if sys.platform == "win32":
    pytest.skip("POSIX-only tests", allow_module_level=True)

# std imports
import termios  # noqa: E402

# local imports
from telnetlite.client_shell import Terminal, _relay_keys  # noqa: E402
from telnetlite.display import TerminalDisplay  # noqa: E402
from telnetlite.tests.accessories import (  # noqa: E402,F401
    bind_host, make_session)

#: Directory containing the telnetlite package, for child processes.
PROJECT_ROOT = os.path.dirname(os.path.dirname(
    os.path.dirname(os.path.abspath(__file__))))


def _cooked_mode():
    return Terminal.ModeDef(
        iflag=termios.BRKINT | termios.ICRNL | termios.IXON,
        oflag=termios.OPOST | termios.ONLCR,
        cflag=termios.CS7 | termios.PARENB | termios.CREAD,
        lflag=termios.ICANON | termios.ECHO | termios.ISIG | termios.IEXTEN,
        ispeed=termios.B38400,
        ospeed=termios.B38400,
        cc=[b"\x00"] * termios.NCCS,
    )


def _make_term(istty=False):
    term = Terminal.__new__(Terminal)
    term._fileno = -1
    term._istty = istty
    return term


def test_determine_mode_is_raw():
    mode = _cooked_mode()
    raw = _make_term().determine_mode(mode)
    assert not raw.lflag & (termios.ICANON | termios.ECHO | termios.ISIG |
                            termios.IEXTEN)
    assert not raw.iflag & (termios.ICRNL | termios.IXON | termios.BRKINT)
    assert not raw.oflag & termios.OPOST
    assert raw.cflag & termios.CSIZE == termios.CS8
    assert not raw.cflag & termios.PARENB
    assert raw.cflag & termios.CREAD
    assert raw.cc[termios.VMIN] == 1
    assert raw.cc[termios.VTIME] == 0
    assert (raw.ispeed, raw.ospeed) == (mode.ispeed, mode.ospeed)
    # the saved mode is untouched, to be restored on exit
    assert mode.lflag & termios.ICANON
    assert mode.cc[termios.VMIN] == b"\x00"


def test_get_winsize_default_without_tty():
    term = _make_term(istty=False)
    assert term.get_winsize() == (24, 80)
    assert term.get_winsize(default=(43, 132)) == (43, 132)


@pytest.mark.asyncio
async def test_relay_keys_until_session_closed():
    session, transport, display = make_session()
    stdin = asyncio.StreamReader()
    task = asyncio.ensure_future(
        _relay_keys(stdin, session, 'utf8', session.log))
    stdin.feed_data('caf\xe9'.encode('utf8')[:-1])
    stdin.feed_data('caf\xe9'.encode('utf8')[-1:] + b'\r')
    await asyncio.sleep(0.01)
    assert transport.written == 'caf\xe9\r'.encode('utf8')

    # end of input does not close the session
    stdin.feed_eof()
    await asyncio.sleep(0.01)
    assert not task.done()
    assert session.connected

    session.eof_received()
    await asyncio.wait_for(task, 2)
    assert display.written.endswith(
        b'\r\nConnection closed by foreign host.\r\n')


@pytest.mark.asyncio
async def test_relay_keys_interrupt():
    session, transport, display = make_session()
    stdin = asyncio.StreamReader()
    task = asyncio.ensure_future(
        _relay_keys(stdin, session, 'utf8', session.log))
    stdin.feed_data(b'ab\x18')
    await asyncio.wait_for(task, 2)
    assert not session.connected
    assert transport.writes == []
    assert display.calls[-1] == ('clear', None)


async def _run_client(port, stdin_data):
    env = dict(os.environ)
    env['PYTHONPATH'] = os.pathsep.join(
        filter(None, (PROJECT_ROOT, env.get('PYTHONPATH'))))
    proc = await asyncio.create_subprocess_exec(
        sys.executable, '-m', 'telnetlite.client', '127.0.0.1', str(port),
        stdin=asyncio.subprocess.PIPE,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        env=env)
    stdout, stderr = await asyncio.wait_for(proc.communicate(stdin_data), 10)
    return proc.returncode, stdout, stderr


@pytest.mark.asyncio
async def test_piped_stdin_awaits_server_reply(bind_host):
    """Like nc(1), output after end of input is shown until server closes."""
    async def handler(reader, writer):
        line = await asyncio.wait_for(reader.readexactly(4), 5)
        await asyncio.sleep(0.3)
        writer.write(b'reply to ' + line + b'\n')
        await writer.drain()
        writer.close()

    server = await asyncio.start_server(handler, bind_host, 0)
    port = server.sockets[0].getsockname()[1]
    try:
        returncode, stdout, stderr = await _run_client(port, b'who\r')
    finally:
        server.close()
        await server.wait_closed()
    assert returncode == 0, stderr
    assert b"Escape character is '^X'." in stdout
    assert b'reply to who\r\n' in stdout
    assert b'Connection closed by foreign host.' in stdout
    assert TerminalDisplay.CLEAR_SEQ not in stdout
    assert stdout.endswith(b'Connection closed.\r\n')


@pytest.mark.asyncio
async def test_connect_failure_exit_status(bind_host):
    server = await asyncio.start_server(lambda r, w: None, bind_host, 0)
    port = server.sockets[0].getsockname()[1]
    server.close()
    await server.wait_closed()
    returncode, stdout, stderr = await _run_client(port, b'')
    assert returncode == 1, stderr
    assert b'Unable to connect to 127.0.0.1' in stdout
