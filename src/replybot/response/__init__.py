"""Entry-point helpers for generating replies."""

from .pipeline import ReplyPipeline

__all__ = ["ReplyPipeline"]
