"""
Feed package.

Read-side aggregation for post listings: which universities a user follows,
which posts to show, and the per-post metadata (comment counts, latest
activity, trending flag) the clients render.
"""

from app.feed.aggregator import (
    enrich_posts,
    get_main_feed,
    get_subscribed_feed,
    get_university_feed,
    get_user_activity,
    recent_posts_for_universities,
)
from app.feed.subscriptions import get_subscribed_university_ids, list_subscriptions
from app.feed.trending import classify_trending

__all__ = [
    'classify_trending',
    'enrich_posts',
    'get_main_feed',
    'get_subscribed_feed',
    'get_subscribed_university_ids',
    'get_university_feed',
    'get_user_activity',
    'list_subscriptions',
    'recent_posts_for_universities',
]
