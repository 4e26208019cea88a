"""
PayPal Token Verification

Verifies the PayPal-issued Bearer JWT on incoming cart and checkout requests
against PayPal's public key set.

In strict mode (PAYPAL_JWT_STRICT=true) missing or invalid tokens are rejected
with 401. Otherwise they are logged and the request continues, which is useful
during early sandbox testing before PayPal has fully provisioned the merchant.
"""

import logging
from typing import Any, Optional

import jwt
from fastapi import HTTPException, Request
from starlette.concurrency import run_in_threadpool

from ..core.config import settings

logger = logging.getLogger(__name__)

JWKS_CACHE_SECONDS = 600
JWKS_MAX_CACHED_KEYS = 5


class PayPalTokenVerifier:
    """
    FastAPI dependency for PayPal JWT verification.

    Returns the decoded claims when the token verifies, or None when a
    non-strict verifier lets an unauthenticated request through.
    """

    def __init__(
        self,
        jwks_uri: str,
        strict: bool = False,
        jwks_client: Optional[jwt.PyJWKClient] = None,
    ):
        """
        Args:
            jwks_uri: PayPal public key set endpoint
            strict: If True, reject requests without a valid token
            jwks_client: Optional pre-built key client
        """
        self.jwks_uri = jwks_uri
        self.strict = strict
        self._jwks_client = jwks_client or jwt.PyJWKClient(
            jwks_uri,
            cache_keys=True,
            max_cached_keys=JWKS_MAX_CACHED_KEYS,
            lifespan=JWKS_CACHE_SECONDS,
        )

    def _decode(self, token: str) -> dict[str, Any]:
        # Blocking: may fetch the key set over the network
        signing_key = self._jwks_client.get_signing_key_from_jwt(token)
        return jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            options={"verify_aud": False},
        )

    def _reject_or_pass(self, detail: str, reason: str) -> None:
        if self.strict:
            raise HTTPException(status_code=401, detail=detail)
        logger.warning(f"{reason} - proceeding in non-strict mode")

    async def __call__(self, request: Request) -> Optional[dict[str, Any]]:
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            return self._reject_or_pass(
                "Missing Authorization header",
                "No Bearer token",
            )

        token = auth_header.split(" ", 1)[1].strip()

        try:
            claims = await run_in_threadpool(self._decode, token)
        except jwt.PyJWTError as e:
            return self._reject_or_pass(
                f"Invalid or expired token: {e}",
                f"JWT verification failed: {e}",
            )

        request.state.paypal_token = claims
        logger.debug(f"PayPal token verified: sub={claims.get('sub')}")
        return claims


def get_paypal_token_verifier() -> PayPalTokenVerifier:
    """Create the verifier for the configured PayPal environment"""
    verifier = PayPalTokenVerifier(
        jwks_uri=settings.paypal_jwks_uri,
        strict=settings.paypal_jwt_strict,
    )
    logger.info(
        f"PayPal JWT verification: {'strict' if verifier.strict else 'non-strict'} "
        f"({verifier.jwks_uri})"
    )
    return verifier


# Dependency instance
verify_paypal_token = get_paypal_token_verifier()
