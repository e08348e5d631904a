"""Authentication module"""

from members_api.auth.jwt import (
    AuthContext,
    create_access_token,
    get_auth_context,
    issue_token_for_user,
    verify_token,
)
from members_api.auth.passwords import hash_password, verify_password

__all__ = [
    "AuthContext",
    "create_access_token",
    "get_auth_context",
    "issue_token_for_user",
    "verify_token",
    "hash_password",
    "verify_password",
]
