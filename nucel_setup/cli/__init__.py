"""
nucel-setup CLI module.

This module provides the command-line interface run by the CI action.
"""

from .actions import ActionsEnvironment, get_input
from .parser import CLI, main

__all__ = ["CLI", "main", "ActionsEnvironment", "get_input"]
