"""
Application credential acquisition.
"""
import logging
from typing import Sequence

import httpx

from ..models import AppAccessToken
from .base import CredentialError, ProviderClient, ProviderError

logger = logging.getLogger(__name__)


async def fetch_app_access_token(
    client: httpx.AsyncClient,
    auth_url: str,
    client_id: str,
    client_secret: str,
    scopes: Sequence[str] = (),
) -> AppAccessToken:
    """
    Run the OAuth client-credentials grant against the provider's token endpoint.

    Args:
        client: Shared HTTP client
        auth_url: OAuth base URL (e.g., "https://id.twitch.tv/oauth2")
        client_id: Application client ID
        client_secret: Application client secret
        scopes: Scopes to request

    Returns:
        AppAccessToken for use on Helix calls

    Raises:
        CredentialError: If the token endpoint rejects the request
    """
    response = await client.post(
        f"{auth_url.rstrip('/')}/token",
        data={
            "client_id": client_id,
            "client_secret": client_secret,
            "grant_type": "client_credentials",
            "scope": " ".join(scopes),
        },
    )
    if response.is_error:
        try:
            message = response.json().get("message", response.text)
        except ValueError:
            message = response.text
        raise CredentialError(
            f"Token request failed: {message}", status_code=response.status_code
        )

    payload = response.json()
    return AppAccessToken(
        access_token=payload["access_token"],
        expires_in=payload.get("expires_in", 0),
        token_type=payload.get("token_type", "bearer"),
        scopes=payload.get("scope") or list(scopes),
    )


async def acquire_credential(
    provider: ProviderClient,
    client_id: str,
    client_secret: str,
    scopes: Sequence[str] = (),
) -> AppAccessToken:
    """
    Obtain the application credential through the provider.

    Any failure is raised as CredentialError so startup can treat it as fatal.
    """
    try:
        token = await provider.get_app_access_token(client_id, client_secret, scopes)
    except CredentialError:
        raise
    except (ProviderError, httpx.HTTPError) as e:
        raise CredentialError(f"Failed to acquire application token: {e}") from e

    logger.info(f"Acquired application credential via {provider.name}: {token}")
    return token
