"""
Caller identity and group membership.

Authentication happens at the gateway, which forwards the verified user id in
the X-User-Id header. This module only resolves that id and the caller's
accepted membership in the group named by the route.
"""

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from .database import get_db
from .domain.scheduling.repository import GroupRepository
from .models import GroupMember
from .shared.validators import validate_user_id

logger = logging.getLogger(__name__)


async def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """Return the authenticated user id forwarded by the gateway"""
    if not x_user_id:
        logger.warning("❌ Request without X-User-Id header")
        raise HTTPException(status_code=401, detail="Not authenticated")
    if not validate_user_id(x_user_id):
        logger.warning("❌ Malformed X-User-Id header")
        raise HTTPException(status_code=401, detail="Invalid user identity")
    return x_user_id


def require_group_member(
    group_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> GroupMember:
    """Resolve the caller's accepted membership in the route's group"""
    member = GroupRepository.get_member(db, group_id, user_id)
    if member is None:
        logger.warning(f"⚠️ User {user_id} is not a member of group {group_id}")
        raise HTTPException(status_code=403, detail="Not a member of this group")
    return member
