class InvariantViolation(Exception):
    """Raised when a write would break a content-tree invariant."""
    pass
