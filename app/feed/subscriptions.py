"""
Subscription Reader

Resolves which universities a user follows.
"""

from typing import List, Set

from sqlalchemy.orm import joinedload

from app import db
from app.models import UserUniversitySubscription


def get_subscribed_university_ids(user_id: str) -> Set[str]:
    """
    Return the ids of the universities `user_id` is subscribed to.

    An empty set is a normal result; callers must treat it as "no feed"
    rather than passing it on as an empty IN filter.
    """
    if not user_id:
        return set()

    rows = db.session.query(UserUniversitySubscription.university_id).filter(
        UserUniversitySubscription.user_id == user_id
    ).all()
    return {row.university_id for row in rows}


def list_subscriptions(user_id: str) -> List[UserUniversitySubscription]:
    """Subscriptions with their university, newest first."""
    return UserUniversitySubscription.query.options(
        joinedload(UserUniversitySubscription.university)
    ).filter_by(
        user_id=user_id
    ).order_by(UserUniversitySubscription.created_at.desc()).all()
