from notetree.domains.identity.resolver import IdentityResolver

__all__ = [
    "IdentityResolver"
]
