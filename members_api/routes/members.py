"""Member routes"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response

from members_api.auth.jwt import AuthContext, get_auth_context
from members_api.models.member import Member, MemberCreate, MemberUpdate
from members_api.services.database_service import (
    db_service,
    DuplicateEntryError,
    InvalidFilterError,
)
from members_api.services.negotiation import render

logger = logging.getLogger(__name__)
router = APIRouter()


def _parse_member_id(member_id: str) -> int:
    """Ids that are not integers cannot exist"""
    if not (member_id.isascii() and member_id.isdigit()):
        raise HTTPException(status_code=404, detail=f"No member {member_id} found")
    return int(member_id)


@router.get("", response_model=List[Member])
async def list_members(
    request: Request,
    accept: Optional[str] = Header(None),
    auth: AuthContext = Depends(get_auth_context)
):
    """List members, filtered by any field given as a query parameter"""
    filters = dict(request.query_params)

    try:
        members = db_service.list_members(filters)
    except InvalidFilterError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not members:
        return Response(status_code=204)

    return render(members, accept)


@router.post("", response_model=Member, status_code=201)
async def add_member(
    data: MemberCreate,
    accept: Optional[str] = Header(None),
    auth: AuthContext = Depends(get_auth_context)
):
    """Add a member"""
    try:
        member = db_service.create_member(data.model_dump())
    except DuplicateEntryError as e:
        logger.info(f"Rejected duplicate member: {e}")
        raise HTTPException(status_code=409, detail=str(e))

    return render(
        member,
        accept,
        status_code=201,
        headers={"Location": f"/members/{member['MemberId']}"}
    )


@router.get("/{member_id}", response_model=Member)
async def get_member(
    member_id: str,
    accept: Optional[str] = Header(None),
    auth: AuthContext = Depends(get_auth_context)
):
    """Get a member"""
    member = db_service.get_member(_parse_member_id(member_id))
    if not member:
        raise HTTPException(status_code=404, detail=f"No member {member_id} found")
    return render(member, accept)


@router.patch("/{member_id}", response_model=Member)
async def update_member(
    member_id: str,
    data: MemberUpdate,
    accept: Optional[str] = Header(None),
    auth: AuthContext = Depends(get_auth_context)
):
    """Update a member"""
    updates = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}

    try:
        member = db_service.update_member(_parse_member_id(member_id), updates)
    except DuplicateEntryError as e:
        raise HTTPException(status_code=409, detail=str(e))

    if not member:
        raise HTTPException(status_code=404, detail=f"No member {member_id} found")
    return render(member, accept)


@router.delete("/{member_id}", response_model=Member)
async def delete_member(
    member_id: str,
    accept: Optional[str] = Header(None),
    auth: AuthContext = Depends(get_auth_context)
):
    """Delete a member, returning it as it was before deletion"""
    member = db_service.delete_member(_parse_member_id(member_id))
    if not member:
        raise HTTPException(status_code=404, detail=f"No member {member_id} found")
    return render(member, accept)
