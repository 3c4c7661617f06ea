"""
Feed Aggregator

Builds the post listings the clients render: the subscribed-universities
feed plus the shared enrichment step used by every other post list.

Enrichment adds, per post:
- total comment count (live, one grouped query),
- the timestamp of the newest comment not written by the viewer, taken
  from the newest LATEST_COMMENT_SCAN_DEPTH comments of each post (one
  windowed query); when all of those belong to the viewer the key is left
  out, even if an older comment by someone else exists,
- the trending flag from the Trending Classifier.
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import joinedload

from app import db
from app.feed.constants import (
    ACTIVITY_LIMIT,
    LATEST_COMMENT_SCAN_DEPTH,
    MAIN_FEED_LIMIT,
    SUBSCRIBED_FEED_LIMIT,
)
from app.feed.subscriptions import get_subscribed_university_ids, list_subscriptions
from app.feed.trending import classify_trending
from app.models import Comment, Post

logger = logging.getLogger(__name__)


def _with_author_and_university(query):
    return query.options(joinedload(Post.author), joinedload(Post.university))


def recent_posts_for_universities(university_ids: Iterable[str], exclude_author_id: Optional[str] = None,
                                  limit: int = SUBSCRIBED_FEED_LIMIT) -> List[Post]:
    """Newest posts in the given universities, optionally skipping one author's posts."""
    ids = list(university_ids)
    if not ids:
        return []

    query = _with_author_and_university(Post.query).filter(Post.university_id.in_(ids))
    if exclude_author_id:
        query = query.filter(Post.author_id != exclude_author_id)

    return query.order_by(Post.created_at.desc()).limit(limit).all()


def count_comments(post_ids: Sequence[str]) -> Dict[str, int]:
    """Total comments per post, soft-deleted ones included."""
    if not post_ids:
        return {}

    rows = db.session.query(
        Comment.post_id,
        func.count(Comment.id)
    ).filter(Comment.post_id.in_(post_ids)).group_by(Comment.post_id).all()
    return {post_id: count for post_id, count in rows}


def recent_comment_authors(post_ids: Sequence[str], depth: int = LATEST_COMMENT_SCAN_DEPTH) -> Dict[str, List[tuple]]:
    """
    Newest `depth` comments per post as (author_id, created_at), newest first.
    """
    if not post_ids:
        return {}

    rank = func.row_number().over(
        partition_by=Comment.post_id,
        order_by=(Comment.created_at.desc(), Comment.id.desc()),
    ).label('rank')

    ranked = db.session.query(
        Comment.post_id.label('post_id'),
        Comment.author_id.label('author_id'),
        Comment.created_at.label('created_at'),
        rank,
    ).filter(Comment.post_id.in_(post_ids)).subquery()

    rows = db.session.query(
        ranked.c.post_id,
        ranked.c.author_id,
        ranked.c.created_at,
    ).filter(ranked.c.rank <= depth).order_by(ranked.c.post_id, ranked.c.rank).all()

    grouped = defaultdict(list)
    for post_id, author_id, created_at in rows:
        grouped[post_id].append((author_id, created_at))
    return grouped


def latest_comment_by_others(recent: List[tuple], viewer_id: Optional[str]) -> Optional[datetime]:
    """First (newest) comment timestamp in `recent` not written by the viewer."""
    for author_id, created_at in recent:
        if author_id != viewer_id:
            return created_at
    return None


def enrich_posts(posts: Sequence[Post], viewer_id: Optional[str], now: datetime = None) -> List[Dict[str, Any]]:
    """
    Serialize posts with comment metadata and trending status.

    Args:
        posts: Posts in display order (order is preserved)
        viewer_id: Requesting user, used for the latest-activity scan
        now: Reference time for the trending window

    Returns:
        List of JSON-ready dicts
    """
    if not posts:
        return []

    post_ids = [post.id for post in posts]
    comment_counts = count_comments(post_ids)
    recent = recent_comment_authors(post_ids)
    trending = classify_trending(post_ids, now)

    results = []
    for post in posts:
        data = post.to_dict()
        data['commentCount'] = comment_counts.get(post.id, 0)
        data['isTrending'] = trending.get(post.id, False)
        latest = latest_comment_by_others(recent.get(post.id, []), viewer_id)
        if latest is not None:
            data['latestCommentTimestamp'] = latest.isoformat()
        results.append(data)
    return results


def get_subscribed_feed(user_id: str, now: datetime = None) -> List[Dict[str, Any]]:
    """
    Newest posts from the universities `user_id` follows, excluding the
    user's own posts.

    Returns an empty list without querying posts when the user has no
    subscriptions.
    """
    university_ids = get_subscribed_university_ids(user_id)
    if not university_ids:
        return []

    posts = recent_posts_for_universities(
        university_ids,
        exclude_author_id=user_id,
        limit=SUBSCRIBED_FEED_LIMIT,
    )
    logger.debug(f"Subscribed feed for {user_id}: {len(posts)} posts from {len(university_ids)} universities")
    return enrich_posts(posts, user_id, now)


def get_main_feed(viewer_id: str, limit: int = MAIN_FEED_LIMIT, now: datetime = None) -> List[Dict[str, Any]]:
    """Newest posts across all universities."""
    posts = _with_author_and_university(Post.query).order_by(Post.created_at.desc()).limit(limit).all()
    return enrich_posts(posts, viewer_id, now)


def get_university_feed(university_id: str, viewer_id: str, now: datetime = None) -> List[Dict[str, Any]]:
    """All posts of one university, newest first."""
    posts = _with_author_and_university(Post.query).filter(
        Post.university_id == university_id
    ).order_by(Post.created_at.desc()).all()
    return enrich_posts(posts, viewer_id, now)


def get_user_activity(user_id: str, now: datetime = None) -> Dict[str, Any]:
    """
    The user's own recent posts, posts by others they commented on, and
    their subscriptions.
    """
    user_posts = _with_author_and_university(Post.query).filter(
        Post.author_id == user_id
    ).order_by(Post.created_at.desc()).limit(ACTIVITY_LIMIT).all()

    commented_post_ids = select(Comment.post_id).where(Comment.author_id == user_id).distinct()
    commented_posts = _with_author_and_university(Post.query).filter(
        Post.author_id != user_id,
        Post.id.in_(commented_post_ids),
    ).order_by(Post.created_at.desc()).limit(ACTIVITY_LIMIT).all()

    enriched = enrich_posts(list(user_posts) + list(commented_posts), user_id, now)
    split = len(user_posts)

    return {
        'userPosts': enriched[:split],
        'postsWithUserComments': enriched[split:],
        'subscribedUniversities': [sub.to_dict() for sub in list_subscriptions(user_id)],
    }
