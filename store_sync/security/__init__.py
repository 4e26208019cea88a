# Request authentication

from .paypal_auth import PayPalTokenVerifier, get_paypal_token_verifier, verify_paypal_token

__all__ = ["PayPalTokenVerifier", "get_paypal_token_verifier", "verify_paypal_token"]
