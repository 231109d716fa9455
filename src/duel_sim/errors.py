class SimModelError(Exception):
    """Raised for programming errors: unknown instance ids, unregistered effects, bad arguments."""


class IllegalPlacementError(Exception):
    """A move violates a placement rule. Carries the log key describing the violation."""

    def __init__(self, log_key: str, **params):
        super().__init__(log_key)
        self.log_key = log_key
        self.params = params


class ArchiveFormatError(ValueError):
    """An archive file could not be understood."""
