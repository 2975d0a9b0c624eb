"""
Configuration module for Robespierre.
Stores connection endpoints, credentials and framework defaults.
"""

import os
from typing import Dict, Any


class Config:
    """Library configuration class."""

    # Credentials
    BOT_TOKEN = os.environ.get("ROBESPIERRE_TOKEN", "")

    # Endpoints
    API_ROOT = os.environ.get("ROBESPIERRE_API_ROOT", "https://api.revolt.chat")
    WS_URL = os.environ.get("ROBESPIERRE_WS_URL", "wss://ws.revolt.chat")

    # Framework
    COMMAND_PREFIX = os.environ.get("ROBESPIERRE_PREFIX", "!")

    # Cache: messages kept per channel, 0 disables message caching
    CACHE_MESSAGES = int(os.environ.get("ROBESPIERRE_CACHE_MESSAGES", "100"))

    # Connection timings (seconds)
    PING_INTERVAL = 15
    TYPING_INTERVAL = 2.5

    # HTTP timeouts (seconds)
    HTTP_TIMEOUT = 60
    HTTP_CONNECT_TIMEOUT = 10

    @classmethod
    def get_config(cls) -> Dict[str, Any]:
        """Get all configuration values as a dictionary."""
        return {
            "BOT_TOKEN": cls.BOT_TOKEN,
            "API_ROOT": cls.API_ROOT,
            "WS_URL": cls.WS_URL,
            "COMMAND_PREFIX": cls.COMMAND_PREFIX,
            "CACHE_MESSAGES": cls.CACHE_MESSAGES,
            "PING_INTERVAL": cls.PING_INTERVAL,
            "TYPING_INTERVAL": cls.TYPING_INTERVAL,
            "HTTP_TIMEOUT": cls.HTTP_TIMEOUT,
            "HTTP_CONNECT_TIMEOUT": cls.HTTP_CONNECT_TIMEOUT,
        }


# Create config instance
config = Config()
