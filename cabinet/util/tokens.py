"""Generation and verification of link codes, request tokens and OTPs."""

import hashlib
import hmac
import secrets

# No 0/O, 1/I/L or 5/S so codes survive being read aloud or retyped
LINK_CODE_ALPHABET = "ABCDEFGHJKMNPQRTUVWXYZ2346789"


def generate_link_code(length: int) -> str:
    """Generate a human-enterable link code.

    Args:
        length: Number of characters

    Returns:
        Uppercase code drawn from ``LINK_CODE_ALPHABET``
    """
    return "".join(secrets.choice(LINK_CODE_ALPHABET) for _ in range(length))


def normalize_link_code(code: str) -> str:
    """Canonical form used for storage and lookup (trimmed, uppercase)."""
    return "".join(code.split()).upper()


def generate_request_token() -> str:
    """Generate an opaque unlink request token."""
    return secrets.token_urlsafe(32)


def hash_request_token(token: str) -> str:
    """Hash a request token for storage and lookup."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def generate_otp(length: int) -> str:
    """Generate a numeric one-time password."""
    return "".join(secrets.choice("0123456789") for _ in range(length))


def hash_otp(otp: str, request_token: str) -> str:
    """Hash an OTP bound to the request token it was issued for.

    Args:
        otp: The plain one-time password
        request_token: The plain request token (acts as the HMAC key)

    Returns:
        Hex digest
    """
    return hmac.new(
        request_token.encode("utf-8"), otp.encode("utf-8"), hashlib.sha256
    ).hexdigest()


def verify_otp(otp: str, request_token: str, otp_hash: str) -> bool:
    """Constant-time comparison of a submitted OTP against its stored hash."""
    return hmac.compare_digest(hash_otp(otp.strip(), request_token), otp_hash)
