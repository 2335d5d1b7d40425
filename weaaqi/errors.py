"""
Error types for the weaaqi dashboard.

Every error raised by the package derives from one of the built-in exception
families (ValueError for bad input, RuntimeError for provider failures) so
callers can catch either the specific class or the generic family.
"""


class InvalidReadingError(ValueError):
    """Raised when a Reading violates the domain the resolvers assume."""


class RuleTableError(ValueError):
    """Raised when a rule table breaks its ordering or catch-all invariants."""


class DataFetchError(RuntimeError):
    """Raised when the weather or air-quality provider cannot be reached or answers badly."""


class ConfigError(ValueError):
    """Raised when an environment setting cannot be parsed."""
