"""API Routes"""

from members_api.routes import auth, members

__all__ = ["auth", "members"]
