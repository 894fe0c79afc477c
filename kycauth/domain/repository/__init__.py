"""Repository interfaces.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence layer.
"""

from kycauth.domain.repository.attempt import AttemptResult, AttemptStore
from kycauth.domain.repository.user import UserRepository

__all__ = [
    "AttemptResult",
    "AttemptStore",
    "UserRepository",
]
