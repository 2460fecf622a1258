"""Checkout Flows Server - checkout and subscription flow demos over MCP and HTTP."""

__version__ = "0.1.0"
