"""
Game Module - Score Bookkeeping
"""

from .scorekeeper import GameError, Scorekeeper

__all__ = ["GameError", "Scorekeeper"]
