"""Exception hierarchy for limit checks.

Everything raised on purpose by a provider check derives from
LimitCheckError, so the aggregation layer can degrade a single provider
without catching unrelated bugs by name.
"""


class LimitCheckError(RuntimeError):
    """Base class for hard failures of a single provider check."""


class ConfigError(LimitCheckError):
    """Required configuration is missing or points at nothing."""


class ProviderUnavailableError(LimitCheckError):
    """The provider's executable or browser profile cannot be used."""


class ResponseTimeoutError(LimitCheckError):
    """No matching network response was observed before the deadline."""

    def __init__(self, message: str, url_substring: str = ""):
        super().__init__(message)
        self.url_substring = url_substring


class ApiEnvelopeError(LimitCheckError):
    """The observed API response carried an explicit error envelope."""

    def __init__(self, message: str, code: int | None = None):
        super().__init__(message)
        self.code = code


class StructuralMarkerError(LimitCheckError):
    """The captured output does not contain the view that was requested."""
