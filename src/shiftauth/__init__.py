"""shiftauth -- authentication strategies for an OpenShift broker REST client.

Every HTTP exchange with the broker goes through an auth *strategy* that
attaches credentials before the request is sent and, after a 401, decides
whether to send it again with refreshed credentials. Credentials come from
configuration, interactive prompts, client-certificate files, or a session
token minted by the broker and cached on disk.

Typical workflow::

    shiftauth --login dev@example.com login   # cache a session token
    shiftauth get /domains                    # reuse it
    shiftauth logout                          # forget it

Modules:
    app: Typer application and CLI entry point.
    auth: Auth strategies, the token store, and the strategy factory.
    client: httpx-based broker client owning the retry loop.
    models: Pydantic models shared across the package.
    config: XDG-aware option resolution and atomic writes.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr output and terminal prompts with Rich.
"""

__version__ = "0.1.0"
