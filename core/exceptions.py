"""
Exception Definitions - Custom exceptions for the ELIZA responder
=================================================================

This module defines all custom exceptions used throughout the application,
providing clear error handling and meaningful error messages.
"""


class ElizaError(Exception):
    """
    Base exception for all ELIZA responder errors.

    All custom exceptions in this application inherit from this base class,
    allowing for easy catching of all application-specific errors.

    Attributes:
        message (str): Human-readable error description
        details (dict): Additional error details for debugging
    """

    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            details: Optional dictionary with additional error context
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return formatted error message with details if present."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigError(ElizaError):
    """
    Configuration-related errors.

    Raised when there are issues with:
    - Unreadable configuration files
    - Invalid configuration values
    - Unknown built-in rule tables
    """
    pass


class ResourceUnavailable(ElizaError):
    """
    An external rule source could not be fetched or read.

    Fatal to the load attempt only. Callers recover by keeping or
    falling back to an in-process table.

    Attributes:
        source (str): Path or URL that failed
    """

    def __init__(self, message: str, source: str = "", details: dict = None):
        self.source = source
        details = dict(details or {})
        if source:
            details.setdefault("source", source)
        super().__init__(message, details)


class MalformedRuleTable(ElizaError):
    """
    Structural problem in a rule source.

    Raised when strict parsing meets:
    - A template line before any pattern line
    - A pattern line with no templates
    - A document that is not a rule table at all

    Also raised when a table cannot be written in the requested format.

    Attributes:
        line (int): 1-based line number, 0 when unknown
    """

    def __init__(self, message: str, line: int = 0, details: dict = None):
        self.line = line
        details = dict(details or {})
        if line:
            details.setdefault("line", line)
        super().__init__(message, details)


class PatternCompileFailure(ElizaError):
    """
    A single rule's pattern is invalid.

    Never fatal: the engine skips the rule, reports the failure and
    moves on to the next rule.

    Attributes:
        pattern (str): The offending pattern source
    """

    def __init__(self, message: str, pattern: str = "", details: dict = None):
        self.pattern = pattern
        details = dict(details or {})
        if pattern:
            details.setdefault("pattern", pattern)
        super().__init__(message, details)
