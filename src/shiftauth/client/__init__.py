"""HTTP client for the broker REST API.

:class:`RestClient` is the transport the auth strategies negotiate with:
it owns the resend loop and the session-token exchange.
"""

from shiftauth.client.rest_client import RestClient

__all__ = ["RestClient"]
