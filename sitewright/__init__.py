"""sitewright: chat-driven web project generation backend."""

__version__ = "0.1.0"
