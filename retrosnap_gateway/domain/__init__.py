from .account import Account, Identity, normalize_email

__all__ = ["Account", "Identity", "normalize_email"]
