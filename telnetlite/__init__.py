"""telnetlite: an asyncio Telnet client protocol core, in python."""
# pylint: disable=wildcard-import,undefined-variable
from .errors import *           # noqa
from .config import *           # noqa
from .demux import *            # noqa
from .negotiation import *      # noqa
from .linebuffer import *       # noqa
from .display import *          # noqa
from .session import *          # noqa
from .client import *           # noqa
from .telopt import *           # noqa
from .accessories import get_version as __get_version

__all__ = (
    errors.__all__ +
    config.__all__ +
    demux.__all__ +
    negotiation.__all__ +
    linebuffer.__all__ +
    display.__all__ +
    session.__all__ +
    client.__all__ +
    telopt.__all__
)  # noqa

__author__ = "telnetlite authors"
__license__ = 'ISC'
__version__ = __get_version()
