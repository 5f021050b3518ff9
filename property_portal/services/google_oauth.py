"""Google sign-in: ID token verification against Google's token-info endpoint."""

import logging
from dataclasses import dataclass

import httpx

logger = logging.getLogger(__name__)


class OAuthVerificationError(Exception):
    """The ID token is invalid, expired or issued for another client."""


@dataclass(frozen=True)
class GoogleIdentity:
    email: str
    name: str
    subject: str


class GoogleTokenVerifier:
    """Verifies Google ID tokens via the token-info endpoint with httpx."""

    def __init__(self, client_id: str, tokeninfo_url: str, timeout: float = 10.0) -> None:
        self._client_id = client_id
        self._tokeninfo_url = tokeninfo_url
        self._timeout = timeout

    async def verify(self, id_token: str) -> GoogleIdentity:
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(self._tokeninfo_url, params={"id_token": id_token})
        except httpx.HTTPError as e:
            logger.error("Google token-info request failed: %s", e)
            raise OAuthVerificationError("Could not reach Google to verify the token") from e

        if response.status_code != 200:
            raise OAuthVerificationError("Invalid Google ID token")

        claims = response.json()
        if self._client_id and claims.get("aud") != self._client_id:
            raise OAuthVerificationError("Google ID token was issued for a different client")
        if str(claims.get("email_verified", "")).lower() != "true":
            raise OAuthVerificationError("Google account email is not verified")

        email = (claims.get("email") or "").lower()
        if not email:
            raise OAuthVerificationError("Google ID token has no email")

        return GoogleIdentity(
            email=email,
            name=claims.get("name") or email.split("@")[0],
            subject=claims.get("sub", ""),
        )
