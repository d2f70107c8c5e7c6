"""
API gateway protocol.

The gateway is the only way the library talks to the remote service. It
performs one authenticated request and returns the decoded JSON body, or
raises ``GatewayError`` with the response status. Authentication, token
refresh, TLS and socket-level retries all live behind it.

Example:
    >>> class MyGateway:
    ...     async def call(self, method, path, *, query=None, scope=None, body=None):
    ...         response = await self._session.request(method, self._url(path), ...)
    ...         if response.status >= 400:
    ...             raise GatewayError(response.status, await response.text())
    ...         return await response.json()
"""

from typing import Any, Protocol, runtime_checkable

from helixsub.types import Query


@runtime_checkable
class ApiGateway(Protocol):
    """
    Protocol for authenticated API request execution.

    Implementations must:
    - Raise ``GatewayError`` for every non-success status
    - Enforce their own timeouts and raise on expiry
    - Return ``None`` for empty response bodies (e.g., 204)
    """

    async def call(
        self,
        method: str,
        path: str,
        *,
        query: Query | None = None,
        scope: str | None = None,
        body: Any = None,
    ) -> Any:
        """
        Perform one API request.

        Args:
            method: HTTP method (e.g., "GET", "POST", "DELETE")
            path: API path relative to the service root (e.g., "subscriptions")
            query: Query parameters; sequence values are repeated
            scope: Permission scope the request requires, if any
            body: JSON-serializable request body

        Returns:
            The decoded JSON response body

        Raises:
            GatewayError: If the remote service answers with an error status
        """
        ...


__all__ = ["ApiGateway"]
