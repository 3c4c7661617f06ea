"""
Endpoints scoped to the signed-in user: subscribed feed, subscriptions,
read markers and activity.
"""
from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from app.feed import get_subscribed_feed, get_user_activity, list_subscriptions
from app.models import PostRead


user_bp = Blueprint('user_api', __name__)


@user_bp.route('/user/subscribed-posts', methods=['GET'])
@login_required
def subscribed_posts():
    return jsonify(get_subscribed_feed(current_user.id))


@user_bp.route('/user/subscriptions', methods=['GET'])
@login_required
def subscriptions():
    return jsonify([sub.to_dict() for sub in list_subscriptions(current_user.id)])


@user_bp.route('/user/read-posts', methods=['GET'])
@login_required
def read_posts():
    """Map of post id to the last time the user opened it."""
    reads = PostRead.query.filter_by(user_id=current_user.id).all()
    return jsonify({read.post_id: read.last_read_at.isoformat() for read in reads})


@user_bp.route('/user/activity', methods=['GET'])
@login_required
def activity():
    return jsonify(get_user_activity(current_user.id))
