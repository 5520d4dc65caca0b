"""
Drawing Errors
==============

Error taxonomy for the drawing engine.

- ValidationError: user-recoverable (e.g. finishing a polygon too early).
  Session state is left untouched so drawing can continue.
- MalformedInputEvent: a host event the adapter cannot translate.
  Dropped at the adapter boundary, never reaches the state machine.
- InvariantViolation: a commit was requested with nothing to commit.
  The call is refused, nothing is mutated.

None of these is fatal to the host application.
"""


class DrawError(Exception):
    """Base class for drawing engine errors."""
    pass


class ValidationError(DrawError):
    """Raised when user input cannot be finalized yet (session stays open)."""
    pass


class MalformedInputEvent(DrawError):
    """Raised when a host event lacks a usable coordinate or delta."""
    pass


class InvariantViolation(DrawError):
    """Raised when a commit is attempted with an empty or incomplete buffer."""
    pass
