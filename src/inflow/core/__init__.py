"""Core run primitives: the execution context pipeline and status callbacks."""

from .callbacks import BaseCallbackHandler, CallbackManager, StdOutCallbackHandler
from .context import Context, RunTrace, adopt, freeze, initial_context, merge

__all__ = [
    "BaseCallbackHandler",
    "CallbackManager",
    "Context",
    "RunTrace",
    "StdOutCallbackHandler",
    "adopt",
    "freeze",
    "initial_context",
    "merge",
]
