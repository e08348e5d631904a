"""Authentication routes"""

import logging

from fastapi import APIRouter, HTTPException, Query

from members_api.auth.jwt import issue_token_for_user
from members_api.models.auth import AuthResponse
from members_api.services.database_service import db_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=AuthResponse)
def authenticate(
    username: str = Query(None, description="Username"),
    password: str = Query(None, description="Password")
):
    """
    Exchange a username and password for a bearer token.

    Unknown users and wrong passwords get the same 404 so the response
    does not reveal which usernames exist.
    """
    user = None
    if username and password:
        user = db_service.authenticate(username, password)

    if not user:
        logger.info(f"Auth failed for username '{username}'")
        raise HTTPException(status_code=404, detail="User not found")

    token, expires_at = issue_token_for_user(user)
    logger.info(f"Auth success for user {user['id']}")

    return AuthResponse(jwt=token, expires=expires_at.isoformat())
