"""
Ulyngo Backend — User Activity Log
====================================

Appends rows to user_activity_logs inside the caller's transaction.
"""

import logging
import uuid
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import UserActivityLog

logger = logging.getLogger(__name__)


async def record_activity(
    db: AsyncSession,
    user_id: uuid.UUID,
    activity_type: str,
    target_id: Optional[uuid.UUID] = None,
    data: Optional[Dict[str, Any]] = None,
) -> UserActivityLog:
    entry = UserActivityLog(
        user_id=user_id,
        activity_type=activity_type,
        target_id=target_id,
        activity_data=data or {},
    )
    db.add(entry)
    await db.flush()
    logger.debug("Activity %s recorded for user %s", activity_type, user_id)
    return entry
