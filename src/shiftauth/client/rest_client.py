"""Synchronous broker client with the authentication retry loop.

This module provides :class:`RestClient`, the blocking HTTP client used by
the shiftauth CLI. It wraps :class:`httpx.Client` and layers on:

- **Auth negotiation** -- every request is built by the active
  :class:`~shiftauth.auth.base.AuthStrategy` and resent while the strategy's
  :meth:`~shiftauth.auth.base.AuthStrategy.retry_auth` asks for it, up to
  ``max_auth_retries`` times.
- **Session exchange** -- :meth:`RestClient.supports_sessions` and
  :meth:`RestClient.new_session` let a
  :class:`~shiftauth.auth.token.TokenAuth` mint a new bearer token.
- **Retry with backoff** -- retries on 5xx and network errors with
  exponential delay (1 s, 2 s, 4 s, ...).
- **Client certificates** -- when the chain contains a
  :class:`~shiftauth.auth.certificate.CertificateAuth`, its files are loaded
  into the TLS context.
"""

from __future__ import annotations

import ssl
import time
from typing import Any, Optional

import httpx

from shiftauth import __version__
from shiftauth.auth.base import LAZY_AUTH, AuthStrategy
from shiftauth.auth.certificate import CertificateAuth
from shiftauth.exceptions import (
    AuthError,
    ConnectionError_,
    CredentialLoadError,
    NotFoundError,
    ServerError,
)
from shiftauth.models import DEFAULT_SERVER, AuthOptions, SessionToken
from shiftauth.output import OutputManager, get_output


class RestClient:
    """Synchronous HTTP client for the broker REST API.

    Must be used as a context manager so that the underlying transport is
    opened and closed.

    Args:
        options: Resolved options (server and request settings).
        auth: Strategy chain used for every request.
        output: Message sink for debug lines.
        transport: Optional httpx transport (tests pass a
            :class:`httpx.MockTransport`).

    Example::

        with RestClient(options, create_auth(options)) as client:
            response = client.get("/domains")
    """

    def __init__(
        self,
        options: AuthOptions,
        auth: AuthStrategy,
        output: Optional[OutputManager] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._options = options
        self._auth = auth
        self._output = output
        self._transport = transport
        self._client: Optional[httpx.Client] = None
        self._supports_sessions: Optional[bool] = None

    @property
    def base_url(self) -> str:
        return f"https://{self._options.server or DEFAULT_SERVER}/broker/rest"

    @property
    def auth(self) -> AuthStrategy:
        return self._auth

    @property
    def output(self) -> OutputManager:
        return self._output if self._output is not None else get_output()

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> RestClient:
        config = self._options.request
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=config.timeout,
            verify=self._ssl_verify(),
            follow_redirects=True,
            headers={"Accept": "application/json"},
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[Any] = None,
        lazy_auth: bool = False,
    ) -> httpx.Response:
        """Make an authenticated request and map error statuses to exceptions.

        Raises:
            AuthError: On a final 401 / 403.
            NotFoundError: On 404.
            ServerError: On 5xx after all retries, or other 4xx.
            ConnectionError_: On network / timeout errors after all retries.
        """
        response = self._negotiate(
            self._auth, method, path, params=params, json_body=json_body, lazy_auth=lazy_auth
        )
        self._map_response_error(response)
        return response

    def get(self, path: str, **kwargs: Any) -> httpx.Response:
        """Send a GET request."""
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> httpx.Response:
        """Send a POST request."""
        return self.request("POST", path, **kwargs)

    def supports_sessions(self) -> bool:
        """Return ``True`` if the broker can issue authorization tokens.

        The API description at ``/api`` is fetched once per client and
        checked for an ``ADD_AUTHORIZATION`` link.
        """
        if self._supports_sessions is None:
            response = self._execute_with_retry({"method": "GET", "path": "/api"})
            links: dict[str, Any] = {}
            if response.is_success:
                try:
                    links = response.json().get("data") or {}
                except (ValueError, AttributeError):
                    links = {}
            else:
                self.output.debug(f"API description returned HTTP {response.status_code}")
            self._supports_sessions = "ADD_AUTHORIZATION" in links
        return self._supports_sessions

    def new_session(self, auth: AuthStrategy) -> Optional[SessionToken]:
        """Exchange the credentials of *auth* for a session token.

        Returns:
            The issued :class:`~shiftauth.models.SessionToken`, or ``None``
            when the broker cannot issue tokens or refuses the credentials.

        Raises:
            ServerError: If the broker answers with an unexpected error.
        """
        if not self.supports_sessions():
            return None
        response = self._negotiate(
            auth,
            "POST",
            "/user/authorizations",
            json_body={"scope": "session", "note": f"shiftauth {__version__}"},
        )
        if response.status_code in (401, 403):
            self.output.debug(f"Authorization request refused with HTTP {response.status_code}")
            return None
        self._map_response_error(response)
        try:
            data = response.json().get("data") or {}
            return SessionToken.model_validate(data)
        except ValueError as exc:
            raise ServerError(f"Unexpected authorization response: {exc}") from exc

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _negotiate(
        self,
        auth: AuthStrategy,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[Any] = None,
        lazy_auth: bool = False,
    ) -> httpx.Response:
        """Send the request, resending while *auth* asks for another attempt."""
        max_auth_retries = self._options.request.max_auth_retries
        attempt = 0
        while True:
            req: dict[str, Any] = {
                "method": method,
                "path": path,
                "params": params,
                "json": json_body,
            }
            if lazy_auth:
                req[LAZY_AUTH] = True
            response = self._execute_with_retry(auth.to_request(req))
            if attempt >= max_auth_retries or not auth.retry_auth(response, self):
                return response
            attempt += 1
            self.output.debug(
                f"Retrying {method} {path} with new credentials "
                f"(attempt {attempt}/{max_auth_retries})"
            )

    def _execute_with_retry(self, req: dict[str, Any]) -> httpx.Response:
        """Execute one request description with exponential-backoff retry.

        Retries on 5xx status codes and connection / timeout errors up to
        ``max_retries`` times. The delay doubles each attempt: 1 s, 2 s, 4 s, ...
        """
        assert self._client is not None, "Client not initialised -- use as context manager"

        max_retries = self._options.request.max_retries
        kwargs = self._httpx_kwargs(req)

        for attempt in range(max_retries + 1):
            try:
                response = self._client.request(**kwargs)
            except (httpx.ConnectError, httpx.TimeoutException, httpx.NetworkError) as exc:
                if attempt < max_retries:
                    delay = 2 ** attempt
                    self.output.debug(
                        f"Connection error: {exc}, retrying in {delay}s "
                        f"(attempt {attempt + 1}/{max_retries})"
                    )
                    time.sleep(delay)
                    continue
                raise ConnectionError_(
                    f"Connection failed after {max_retries + 1} attempts: {exc}"
                ) from exc

            if response.status_code >= 500 and attempt < max_retries:
                delay = 2 ** attempt
                self.output.debug(
                    f"Server error {response.status_code}, retrying in {delay}s "
                    f"(attempt {attempt + 1}/{max_retries})"
                )
                time.sleep(delay)
                continue
            return response

        raise ServerError("Request failed after all retries")  # pragma: no cover

    @staticmethod
    def _httpx_kwargs(req: dict[str, Any]) -> dict[str, Any]:
        """Translate a request description into :meth:`httpx.Client.request` kwargs."""
        kwargs: dict[str, Any] = {
            "method": req["method"],
            "url": req["path"],
            "headers": dict(req.get("headers") or {}),
        }
        if req.get("params"):
            kwargs["params"] = req["params"]
        if req.get("json") is not None:
            kwargs["json"] = req["json"]
        if req.get("user") is not None:
            kwargs["auth"] = httpx.BasicAuth(req["user"], req.get("password") or "")
        # client_cert / client_key are presented through the TLS context.
        return kwargs

    def _ssl_verify(self) -> ssl.SSLContext | bool:
        """Build the TLS verification setting, including any client certificate."""
        verify_ssl = self._options.request.verify_ssl
        cert_file, key_file = self._client_cert_paths()
        if not cert_file:
            return verify_ssl

        context = ssl.create_default_context()
        if not verify_ssl:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        try:
            context.load_cert_chain(cert_file, key_file)
        except OSError as exc:
            raise CredentialLoadError(
                f"Unable to use client certificate {cert_file}: {exc}"
            ) from exc
        return context

    def _client_cert_paths(self) -> tuple[Optional[str], Optional[str]]:
        strategy: Optional[AuthStrategy] = self._auth
        while strategy is not None:
            if isinstance(strategy, CertificateAuth):
                return strategy.cert_paths
            strategy = getattr(strategy, "auth", None)
        return None, None

    def _map_response_error(self, response: httpx.Response) -> None:
        """Raise a typed exception for error HTTP status codes."""
        status = response.status_code
        if status < 400:
            return

        try:
            detail = response.json()
            messages = detail.get("messages") if isinstance(detail, dict) else None
            if messages:
                msg = "; ".join(str(m.get("text", m)) for m in messages if m)
            elif isinstance(detail, dict):
                msg = detail.get("message") or detail.get("error") or ""
            else:
                msg = str(detail)
        except (ValueError, AttributeError):
            msg = response.text[:200] if response.text else ""

        prefix = f"HTTP {status}"
        full_msg = f"{prefix}: {msg}" if msg else prefix

        if status in (401, 403):
            raise AuthError(full_msg)
        if status == 404:
            raise NotFoundError(full_msg)
        raise ServerError(full_msg)
