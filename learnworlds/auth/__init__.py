"""Authentication modules for LearnWorlds API access.

Supports:
- OAuth2 authorization code, password and client credentials grants
- Token refresh with an expiry buffer
- Token revocation
"""

from .oauth2 import OAuth2Client, TokenResponse, Tokens

__all__ = ["OAuth2Client", "TokenResponse", "Tokens"]
