"""
    ____        __                    _
   / __ \____  / /_  ___  _________  (_)__  _____________
  / /_/ / __ \/ __ \/ _ \/ ___/ __ \/ / _ \/ ___/ ___/ _ \
 / _, _/ /_/ / /_/ /  __(__  ) /_/ / /  __/ /  / /  /  __/
/_/ |_|\____/_.___/\___/____/ .___/_/\___/_/  /_/   \___/
                           /_/

Robespierre Project - An asyncio client library and bot framework for Revolt.

Keeps a streaming connection to the chat server, mirrors what it sees into a
local cache, and routes chat commands to typed handler functions.

License: Apache-2.0 License
"""

__version__ = "0.3.0"
