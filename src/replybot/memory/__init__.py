"""
Short-term memory package.

Modules
=======

``conversation``
    Defines :class:`~replybot.memory.conversation.ConversationMemory`, the
    per-correspondent turn buffer with its wipe-all eviction policy.
``cache``
    Time-stamped cache entries plus the settings snapshot and model-list
    caches built on top of them.
"""

from .conversation import ConversationMemory, Turn

__all__ = ["ConversationMemory", "Turn"]
