"""Shared protocol definitions."""

from typing import Protocol


class RequestLogger(Protocol):
    """Protocol for request logging (Dashboard, ConsoleLogger).

    ``request_id`` ties a completion or error to the relay that started it;
    it is None for failures raised before a request was prepared.
    """

    def log_request(self, method: str, target_url: str, *, route: str, request_id: str) -> None: ...
    def log_response(self, route: str, status: int, *, request_id: str | None = None) -> None: ...
    def log_error(
        self,
        route: str,
        status: int,
        message: str,
        *,
        request_id: str | None = None,
    ) -> None: ...
