"""Automated messaging responder: session lifecycle, conversation memory and replies."""

__version__ = "0.1.0"
