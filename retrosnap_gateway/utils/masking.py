"""Helpers for keeping identities out of logs and responses."""


def mask_email(email: str) -> str:
    """
    Mask an email for logging: first two characters and the last character
    of the local part stay visible.

    Examples:
        mask_email("jonathan@example.com")  -> "jo***n@example.com"
        mask_email("ab@example.com")        -> "a***@example.com"
    """
    if not email:
        return "<none>"

    email = email.strip()
    local, sep, domain = email.partition("@")

    if len(local) <= 3:
        masked = f"{local[:1]}***"
    else:
        masked = f"{local[:2]}***{local[-1]}"

    return f"{masked}{sep}{domain}"
