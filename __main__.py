"""
Entry point for Robespierre.
This module provides a command-line interface to run the example bot.
"""

import argparse

from Robespierre.config import config
from Robespierre.core.logging import auto_configure
from Robespierre.start import bot


def parse():
    # Initialize argument parser for command line interface
    parser = argparse.ArgumentParser(prog='Robespierre', description='Robespierre example bot')
    parser.add_argument('--token', default=config.BOT_TOKEN,
                        help='Bot token (default: $ROBESPIERRE_TOKEN)')
    parser.add_argument('--prefix', default=config.COMMAND_PREFIX,
                        help=f'Command prefix (default: {config.COMMAND_PREFIX})')
    parser.add_argument('--cache-messages', type=int, default=config.CACHE_MESSAGES,
                        help=f'Messages cached per channel, 0 disables (default: {config.CACHE_MESSAGES})')
    parser.add_argument('--owner', action='append', default=[],
                        help='User id allowed to run owners-only commands (repeatable)')
    parser.add_argument('--env', choices=['development', 'production', 'testing'], default=None,
                        help='Logging environment (default: $ROBESPIERRE_ENV or development)')

    args = parser.parse_args()

    return args


def main():
    args = parse()

    auto_configure(args.env)
    bot(token=args.token, prefix=args.prefix, cache_messages=args.cache_messages, owners=args.owner)


if __name__ == '__main__':
    main()
