"""Render a Discord user's identity and badges as a PNG card."""

__version__ = "0.1.0"
