"""HTTP client helpers for the StreamVault CLI."""
from __future__ import annotations

import httpx


def create_client(
    base_url: str,
    *,
    timeout: float = 10.0,
    transport: httpx.BaseTransport | None = None,
    admin_token: str | None = None,
) -> httpx.Client:
    """Instantiate an HTTPX client, attaching the admin token header when given."""

    headers = {"X-Admin-Token": admin_token} if admin_token else None
    return httpx.Client(base_url=base_url, timeout=timeout, transport=transport, headers=headers)
