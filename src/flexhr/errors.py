"""Error hierarchy for flexhr.

Transport failures are not exceptions: they resolve to a
:class:`~flexhr.response.ConnectionFailure`. The exceptions here cover
misuse of the library contract.
"""

from __future__ import annotations


class FlexhrError(Exception):
    """Base exception for all flexhr errors.

    Attributes:
        message: Human-readable error description.
        url: The URL of the request involved, if any.

    """

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.url = url

    def __str__(self) -> str:
        """Return a string representation of the error."""
        if self.url:
            return f"{self.message} | URL: {self.url}"
        return self.message


class DispatchError(FlexhrError):
    """No handler is available for a dispatched response.

    Raised when neither a status-specific handler nor the ``OK``/``Error``
    fallback applicable to the response was supplied.

    Attributes:
        status: Status code of the response being dispatched.

    """

    def __init__(self, message: str, *, url: str | None = None, status: int) -> None:
        super().__init__(message, url=url)
        self.status = status
