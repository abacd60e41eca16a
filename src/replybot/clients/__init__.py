"""Adapters for the external services the responder talks to."""
