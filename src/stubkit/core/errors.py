"""
Error types for stubkit.

Stubbing itself declares no error kinds: absence is an ``AttributeError``
on read and ``None`` as a call result, and errors raised by fakes propagate
unmodified. The types here cover configuration only.
"""


class StubkitError(Exception):
    """Base exception for all stubkit errors."""

    def __init__(self, message: str, source: str | None = None):
        self.message = message
        self.source = source
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with its source if available."""
        if self.source:
            return f"{self.source}: {self.message}"
        return self.message


class PolicyError(StubkitError):
    """
    Raised when a stub policy cannot be loaded.

    Examples:
    - Malformed TOML in pyproject.toml
    - Negative nesting depth
    - Non-string identity-sensitive names
    """

    pass
