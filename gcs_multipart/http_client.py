"""HTTP transport factory for the multipart client.

Creates the httpx client that MultipartClient sends requests through,
with the configured timeout, User-Agent and bearer token.

Credentials are attached once as a default header; refreshing them is
left to whoever builds the config.
"""

import httpx

from gcs_multipart.config import ClientConfig


def build_http_client(config: ClientConfig) -> httpx.Client:
    """Build an httpx client for the given configuration.

    Args:
        config: Client configuration with timeout, user agent and an
               optional access token.

    Returns:
        An httpx.Client. The caller owns it and should close it.
    """
    headers = {"User-Agent": config.user_agent}
    if config.access_token:
        headers["Authorization"] = f"Bearer {config.access_token}"

    return httpx.Client(
        headers=headers,
        timeout=httpx.Timeout(config.timeout_seconds),
    )
