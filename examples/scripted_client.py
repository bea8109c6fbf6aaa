#!/usr/bin/env python3
"""
Send lines to a telnet server and print what it returns.

Usage::

    python scripted_client.py host port 'first line' 'second line'
"""
import argparse
import asyncio
import logging

import telnetlite

ARGS = argparse.ArgumentParser(
    description="Send lines to telnet host",
    formatter_class=argparse.ArgumentDefaultsHelpFormatter)
ARGS.add_argument('host', help='Host name', action='store')
ARGS.add_argument('port', nargs='?', help='Port number', default='23')
ARGS.add_argument('lines', nargs='*', help='Lines to send')
ARGS.add_argument('--wait', help='Seconds to wait for output after each line',
                  default=1.0, type=float)
ARGS.add_argument('--loglevel', help='Logging level',
                  action="store", dest="loglevel",
                  default='warn', type=str)


async def send_lines(host, port, lines, wait):
    display = telnetlite.TerminalDisplay()
    async with telnetlite.open_session(host, port, display) as session:
        for line in lines:
            await asyncio.sleep(wait)
            session.feed_key(line + '\r')
        await asyncio.sleep(wait)


def main():
    args = ARGS.parse_args()
    logging.basicConfig(level=getattr(logging, args.loglevel.upper()))
    asyncio.run(send_lines(args.host, args.port, args.lines, args.wait))


if __name__ == '__main__':
    main()
