class InvalidStateError(RuntimeError):
    """Raised when a window operation is called in a state that does not allow it."""
