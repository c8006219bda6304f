"""Equipment loan bot: chat commands for reserving shared gear."""

__version__ = "0.1.0"
