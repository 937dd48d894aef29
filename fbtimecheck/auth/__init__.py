"""Token handling for fbTimeCheck."""

from .token_manager import TokenManager, CodeProvider, ConsoleCodeProvider, StaticCodeProvider

__all__ = ['TokenManager', 'CodeProvider', 'ConsoleCodeProvider', 'StaticCodeProvider']
