"""
Interpreter Module - Command Tree Execution

Expands a compiled program into step-queue actions lazily, one block level
at a time, consulting the car's sensors for guards.
"""

from .interpreter import Interpreter

__all__ = ["Interpreter"]
