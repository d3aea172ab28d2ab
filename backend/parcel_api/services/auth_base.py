"""
Parcel Delivery Backend — Abstract Token Verifier Interface
=============================================================

What:  Abstract base class for bearer-credential verification, plus the
       AuthenticatedUser claims model it produces.
How:   Concrete implementations inherit from TokenVerifier and implement verify().
Who:   Called by the `get_current_user` dependency in parcel_api/auth.py.

Implementations:
    - FirebaseTokenVerifier: Firebase ID tokens via firebase-admin
    - Tests attach an in-memory verifier to app.state.token_verifier
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class AuthenticatedUser(BaseModel):
    """Identity claims decoded from a verified credential."""
    uid: str = Field(description="Identity-provider subject id")
    email: Optional[str] = Field(default=None, description="Verified email, if any")
    claims: Dict[str, Any] = Field(default_factory=dict, description="All decoded claims")


class TokenVerifier(ABC):
    """
    Contract:
        - verify() accepts the raw token (without the "Bearer " prefix)
        - Returns AuthenticatedUser on success
        - Raises ForbiddenError for any token that fails verification
          (expired, revoked, malformed, bad signature)
        - Raises ConfigurationError when the verifier itself is not usable
    """

    @abstractmethod
    async def verify(self, token: str) -> AuthenticatedUser:
        ...
