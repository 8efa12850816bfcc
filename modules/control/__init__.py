"""Suspension state machine and command publishing."""
from .suspension import SuspensionController
from .command_emitter import CommandEmitter

__all__ = ["SuspensionController", "CommandEmitter"]
