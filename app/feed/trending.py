"""
Trending Classifier

A post is trending when at least TRENDING_MIN_COMMENTS comments were
written on it during the trailing TRENDING_WINDOW. Counted with one grouped
query for the whole batch of posts.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable

from sqlalchemy import func

from app import db
from app.feed.constants import TRENDING_MIN_COMMENTS, TRENDING_WINDOW
from app.lib.time import window_start
from app.models import Comment

logger = logging.getLogger(__name__)


def count_recent_comments(post_ids: Iterable[str], now: datetime = None) -> Dict[str, int]:
    """Comments per post created inside the trending window. Posts without any are absent."""
    ids = list(dict.fromkeys(post_ids))
    if not ids:
        return {}

    since = window_start(TRENDING_WINDOW, now)
    rows = db.session.query(
        Comment.post_id,
        func.count(Comment.id)
    ).filter(
        Comment.post_id.in_(ids),
        Comment.created_at >= since,
    ).group_by(Comment.post_id).all()

    return {post_id: count for post_id, count in rows}


def classify_trending(post_ids: Iterable[str], now: datetime = None) -> Dict[str, bool]:
    """
    Map every post id to its trending flag.

    Args:
        post_ids: Posts to classify
        now: Reference time (defaults to current UTC time)

    Returns:
        Dict of post_id -> bool, with an entry for every requested id
    """
    ids = list(dict.fromkeys(post_ids))
    counts = count_recent_comments(ids, now)
    return {post_id: counts.get(post_id, 0) >= TRENDING_MIN_COMMENTS for post_id in ids}
