"""Models module"""

from members_api.models.auth import AuthResponse
from members_api.models.member import Member, MemberCreate, MemberUpdate

__all__ = ["AuthResponse", "Member", "MemberCreate", "MemberUpdate"]
