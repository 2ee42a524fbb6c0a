"""
Exceptions raised by the fixture engine.
"""


class FixtureEngineError(Exception):
    """Base exception for all fixture engine errors."""
    pass


class InvalidInputError(FixtureEngineError):
    """Raised when a caller hands the engine input it cannot generate from."""
    pass


class InvalidFormatError(InvalidInputError):
    """Raised for an unsupported tournament format or playoff structure."""
    pass


class BracketStructureError(FixtureEngineError):
    """Raised when an expected downstream match is missing from a bracket."""
    pass
