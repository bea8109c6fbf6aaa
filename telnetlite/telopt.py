"""Telnet command and option byte values, and their debug names."""

# commands, rfc-854
IAC = b"\xff"
DONT = b"\xfe"
DO = b"\xfd"
WONT = b"\xfc"
WILL = b"\xfb"
SB = b"\xfa"
GA = b"\xf9"
EL = b"\xf8"
EC = b"\xf7"
AYT = b"\xf6"
AO = b"\xf5"
IP = b"\xf4"
BRK = b"\xf3"
DM = b"\xf2"
NOP = b"\xf1"
SE = b"\xf0"
(EOF, SUSP, ABORT, CMD_EOR) = (bytes([const]) for const in range(236, 240))

# options
BINARY = b"\x00"
ECHO = b"\x01"
SGA = b"\x03"
STATUS = b"\x05"
TM = b"\x06"
LOGOUT = b"\x12"
TTYPE = b"\x18"
EOR = b"\x19"
NAWS = b"\x1f"
TSPEED = b" "
LFLOW = b"!"
LINEMODE = b'"'
XDISPLOC = b"#"
ENCRYPT = b"&"
NEW_ENVIRON = b"'"
CHARSET = b"*"
theNULL = b"\x00"

# subnegotiation verbs, rfc-1091 and others
(IS, SEND) = (bytes([const]) for const in range(2))

#: The three-byte negotiation commands.
NEGOTIATION_COMMANDS = (DO, DONT, WILL, WONT)

__all__ = (
    "ABORT",
    "AO",
    "AYT",
    "BINARY",
    "BRK",
    "CHARSET",
    "CMD_EOR",
    "DM",
    "DO",
    "DONT",
    "EC",
    "ECHO",
    "EL",
    "ENCRYPT",
    "EOF",
    "EOR",
    "GA",
    "IAC",
    "IP",
    "IS",
    "LFLOW",
    "LINEMODE",
    "LOGOUT",
    "NAWS",
    "NEGOTIATION_COMMANDS",
    "NEW_ENVIRON",
    "NOP",
    "SB",
    "SE",
    "SEND",
    "SGA",
    "STATUS",
    "SUSP",
    "TM",
    "TSPEED",
    "TTYPE",
    "WILL",
    "WONT",
    "XDISPLOC",
    "name_command",
    "name_commands",
    "theNULL",
)

#: List of globals that may match an iac command option bytes
_DEBUG_OPTS = dict(
    [
        (value, key)
        for key, value in globals().items()
        if key
        in (
            "BINARY",
            "ECHO",
            "SGA",
            "STATUS",
            "TM",
            "LOGOUT",
            "TTYPE",
            "EOR",
            "NAWS",
            "TSPEED",
            "LFLOW",
            "LINEMODE",
            "XDISPLOC",
            "ENCRYPT",
            "NEW_ENVIRON",
            "CHARSET",
            "IAC",
            "DONT",
            "DO",
            "WONT",
            "WILL",
            "SB",
            "GA",
            "EL",
            "EC",
            "AYT",
            "AO",
            "IP",
            "BRK",
            "DM",
            "NOP",
            "SE",
            "EOF",
            "SUSP",
            "ABORT",
            "CMD_EOR",
        )
    ]
)


def name_command(byte):
    """Return string description for (maybe) telnet command byte."""
    return _DEBUG_OPTS.get(byte, repr(byte))


def name_commands(cmds, sep=" "):
    """Return string description for array of (maybe) telnet command bytes."""
    return sep.join([name_command(bytes([byte])) for byte in cmds])
