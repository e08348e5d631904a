"""Member models"""

from typing import Optional

from pydantic import BaseModel, Field


class MemberCreate(BaseModel):
    Firstname: str
    Lastname: str
    Email: str = Field(..., min_length=1)
    Active: bool = False  # also accepts "true"/"false"/"1"/"0"


class MemberUpdate(BaseModel):
    Firstname: Optional[str] = None
    Lastname: Optional[str] = None
    Email: Optional[str] = Field(None, min_length=1)
    Active: Optional[bool] = None


class Member(BaseModel):
    MemberId: int
    Firstname: str
    Lastname: str
    Email: str
    Active: bool
