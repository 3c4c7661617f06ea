"""
Per-user upload quota, computed from MediaUpload rows.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Optional, Tuple

from flask import current_app
from sqlalchemy import func

from app import db
from app.lib.time import window_start
from app.models import MediaUpload, User

logger = logging.getLogger(__name__)


@dataclass
class QuotaResult:
    allowed: bool
    reason: Optional[str] = None
    remaining: Dict[str, int] = field(default_factory=dict)


def check_upload_quota(user_id: str, file_size: int, now: datetime = None) -> QuotaResult:
    """
    Decide whether `user_id` may upload another file of `file_size` bytes.

    Limits (from config): uploads per hour, uploads per day, bytes per day.
    """
    max_hourly = current_app.config['UPLOAD_MAX_PER_HOUR']
    max_daily = current_app.config['UPLOAD_MAX_PER_DAY']
    max_daily_bytes = current_app.config['UPLOAD_MAX_BYTES_PER_DAY']

    hour_ago = window_start(timedelta(hours=1), now)
    day_ago = window_start(timedelta(days=1), now)

    hourly_count = db.session.query(func.count(MediaUpload.id)).filter(
        MediaUpload.user_id == user_id,
        MediaUpload.created_at >= hour_ago,
    ).scalar() or 0

    daily_count, daily_bytes = db.session.query(
        func.count(MediaUpload.id),
        func.coalesce(func.sum(MediaUpload.size_bytes), 0),
    ).filter(
        MediaUpload.user_id == user_id,
        MediaUpload.created_at >= day_ago,
    ).one()
    daily_count = daily_count or 0
    daily_bytes = int(daily_bytes or 0)

    remaining_hourly = max(0, max_hourly - hourly_count)
    remaining_daily = max(0, max_daily - daily_count)
    remaining_bytes = max(0, max_daily_bytes - daily_bytes)

    if hourly_count >= max_hourly:
        logger.info(f"Upload quota: hourly limit hit for user {user_id}")
        return QuotaResult(
            allowed=False,
            reason=f"Hourly upload limit reached ({max_hourly} uploads/hour). Please try again later.",
            remaining={'hourly': 0, 'daily': remaining_daily, 'dailySize': remaining_bytes},
        )

    if daily_count >= max_daily:
        logger.info(f"Upload quota: daily limit hit for user {user_id}")
        return QuotaResult(
            allowed=False,
            reason=f"Daily upload limit reached ({max_daily} uploads/day). Please try again tomorrow.",
            remaining={'hourly': remaining_hourly, 'daily': 0, 'dailySize': remaining_bytes},
        )

    if daily_bytes + file_size > max_daily_bytes:
        logger.info(f"Upload quota: daily size limit hit for user {user_id}")
        return QuotaResult(
            allowed=False,
            reason=f"Daily file size limit reached ({max_daily_bytes // (1024 * 1024)}MB/day). Please try again tomorrow.",
            remaining={'hourly': remaining_hourly, 'daily': remaining_daily, 'dailySize': 0},
        )

    return QuotaResult(
        allowed=True,
        remaining={
            'hourly': max(0, remaining_hourly - 1),
            'daily': max(0, remaining_daily - 1),
            'dailySize': max(0, remaining_bytes - file_size),
        },
    )


def reserve_upload(user_id: str, kind: str, path: str, file_size: int,
                   content_type: str = None) -> Tuple[QuotaResult, Optional[MediaUpload]]:
    """
    Check the quota and record the upload in one transaction.

    The user's row is locked (SELECT ... FOR UPDATE) while counting, so
    parallel uploads by the same user are counted one after another. The
    MediaUpload row is committed before anything is written to storage;
    release_upload() removes it again if the storage write fails.
    """
    db.session.query(User.id).filter(User.id == user_id).with_for_update().first()

    quota = check_upload_quota(user_id, file_size)
    if not quota.allowed:
        db.session.rollback()
        return quota, None

    upload = MediaUpload(
        user_id=user_id,
        kind=kind,
        path=path,
        size_bytes=file_size,
        content_type=content_type,
    )
    db.session.add(upload)
    db.session.commit()
    return quota, upload


def release_upload(upload: MediaUpload) -> None:
    """Drop a reservation whose file never reached storage."""
    path, user_id = upload.path, upload.user_id
    db.session.delete(upload)
    db.session.commit()
    logger.info(f"Released upload reservation {path} for user {user_id}")
