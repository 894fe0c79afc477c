"""Infrastructure providers."""

# Import bases
from .oauth import OAuthProvider
from .persistence import PersistenceProvider
from .ratelimit import RateLimitProvider

# Import implementations (needed for __subclasses__())
from .oauth import ProdOAuthProvider  # noqa: F401
from .persistence import ProdPersistenceProvider  # noqa: F401
from .ratelimit import ProdRateLimitProvider  # noqa: F401

__all__ = [
    "OAuthProvider",
    "PersistenceProvider",
    "ProdOAuthProvider",
    "ProdPersistenceProvider",
    "ProdRateLimitProvider",
    "RateLimitProvider",
]
