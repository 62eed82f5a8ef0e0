"""Custom exception hierarchy for Steal Your Stats.

All application exceptions inherit from :class:`StatsError`, which carries
an optional ``provider_name`` so error handlers can identify which external
service (e.g. "setlistfm", "internet_archive", "musicbrainz") caused the
failure.

    StatsError  (base -- catch-all for any application error)
    +-- FetchError               (remote call failed: network, status, JSON)
    |   +-- RateLimitError       (upstream answered 429)
    +-- ProviderUnavailableError (external service down / not configured)
    +-- ConfigurationError       (startup / missing config)
    +-- IndexStoreError          (persisted song index unreadable/unwritable)

The index builder treats ``RateLimitError`` differently from every other
``FetchError``: it waits out a cooldown before moving on to the next year.
"""


class StatsError(Exception):
    """Base exception for all Steal Your Stats errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name``.  ``__str__`` prefixes the provider name in brackets,
    e.g. ``[setlistfm] Rate limit exceeded``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Remote fetch errors
# ---------------------------------------------------------------------------

class FetchError(StatsError):
    """Raised when a remote fetch fails (network error, bad status, bad JSON)."""

    def __init__(
        self,
        message: str = "Remote fetch failed",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self._status_code = status_code
        super().__init__(message=message, provider_name=provider_name)

    @property
    def status_code(self) -> int | None:
        return self._status_code


class RateLimitError(FetchError):
    """Raised when an upstream API answers with HTTP 429."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        provider_name: str | None = None,
        status_code: int | None = 429,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name, status_code=status_code)


class ProviderUnavailableError(StatsError):
    """Raised when an external service is unreachable or not configured."""

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Configuration / storage errors
# ---------------------------------------------------------------------------

class ConfigurationError(StatsError):
    """Raised when configuration is invalid or missing."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class IndexStoreError(StatsError):
    """Raised when the persisted song index cannot be read or written."""

    def __init__(
        self,
        message: str = "Song index store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
