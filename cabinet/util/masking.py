"""Masking of external identifiers before they leave the service."""

_VISIBLE_TAIL = 3


def mask_provider_user_id(provider: str, provider_user_id: str) -> str:
    """Mask a provider user id for display.

    Emails keep the first character of the local part and the domain
    (``a***@example.com``); every other id keeps its last three characters
    (``...123``).

    Args:
        provider: Provider value (``telegram``, ``email``...)
        provider_user_id: Full external identifier

    Returns:
        Masked identifier that never equals the full value
    """
    if provider == "email" and "@" in provider_user_id:
        local, _, domain = provider_user_id.partition("@")
        return f"{local[:1]}***@{domain}"

    if len(provider_user_id) <= _VISIBLE_TAIL:
        return "***"

    return f"...{provider_user_id[-_VISIBLE_TAIL:]}"
