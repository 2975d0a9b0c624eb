#!/usr/bin/env python3
"""
Ping Bot Example for Robespierre

Starts the example bot with:
- ping, echo and whois commands
- a math group with an add command
- message caching and server tracking

Set ROBESPIERRE_TOKEN before running.
"""

from Robespierre.core.logging import auto_configure
from Robespierre.start import bot


def main():
    """Run the example bot."""
    auto_configure()

    bot(prefix="!", cache_messages=50)


if __name__ == "__main__":
    main()
