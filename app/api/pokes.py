"""
Poke Endpoints

A poke nudges the author of a post or comment. Recipients see their
newest pending pokes and acknowledge or dismiss them.
"""
from datetime import timedelta

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required
from sqlalchemy.orm import joinedload

from app import db, limiter
from app.api.errors import InvalidInput, NotFound, RateLimited
from app.api.utils import get_json_body, get_or_404, get_rate_limit_key, require_valid_id
from app.lib.time import utcnow_naive, window_start
from app.models import Comment, Poke, Post


pokes_bp = Blueprint('pokes_api', __name__)

POKE_COOLDOWN = timedelta(minutes=5)
PENDING_POKES_LIMIT = 10


@pokes_bp.route('/pokes', methods=['GET'])
@login_required
def list_pokes():
    pokes = Poke.query.options(
        joinedload(Poke.sender),
        joinedload(Poke.post),
        joinedload(Poke.comment),
    ).filter(
        Poke.recipient_id == current_user.id,
        Poke.status == Poke.STATUS_PENDING,
    ).order_by(Poke.created_at.desc()).limit(PENDING_POKES_LIMIT).all()

    return jsonify([poke.to_dict(include_targets=True) for poke in pokes])


@pokes_bp.route('/pokes', methods=['POST'])
@login_required
@limiter.limit("30 per minute", key_func=get_rate_limit_key)
def create_poke():
    data = get_json_body()
    target_id = data.get('targetId')
    target_type = data.get('targetType')

    if not target_id or not target_type:
        raise InvalidInput('targetId and targetType are required')

    target_id = require_valid_id(target_id, 'target')

    post_id = None
    comment_id = None

    if target_type == 'post':
        post = get_or_404(Post, target_id, 'Post not found')
        recipient_id = post.author_id
        post_id = post.id
    elif target_type == 'comment':
        comment = get_or_404(Comment, target_id, 'Comment not found')
        recipient_id = comment.author_id
        comment_id = comment.id
        post_id = comment.post_id
    else:
        raise InvalidInput('Invalid target type')

    if recipient_id == current_user.id:
        raise InvalidInput('Kendi gönderini dürtemezsin')

    duplicate_query = Poke.query.filter(
        Poke.sender_id == current_user.id,
        Poke.recipient_id == recipient_id,
        Poke.status == Poke.STATUS_PENDING,
        Poke.created_at >= window_start(POKE_COOLDOWN),
    )
    if comment_id:
        duplicate_query = duplicate_query.filter(Poke.comment_id == comment_id)
    else:
        duplicate_query = duplicate_query.filter(Poke.post_id == post_id)

    if duplicate_query.first():
        raise RateLimited('Bu içerik için zaten dürttün')

    poke = Poke(
        sender_id=current_user.id,
        recipient_id=recipient_id,
        post_id=post_id,
        comment_id=comment_id,
    )
    db.session.add(poke)
    db.session.commit()

    return jsonify(poke.to_dict()), 201


@pokes_bp.route('/pokes/<poke_id>', methods=['PATCH'])
@login_required
def update_poke(poke_id):
    """Acknowledge (default) or dismiss a poke addressed to the caller."""
    poke_id = require_valid_id(poke_id, 'poke id')

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    action = data.get('action') or 'acknowledge'
    if action not in ('acknowledge', 'dismiss'):
        raise InvalidInput('Invalid action')

    poke = db.session.get(Poke, poke_id)
    if not poke or poke.recipient_id != current_user.id:
        raise NotFound('Poke not found')

    poke.status = Poke.STATUS_DECLINED if action == 'dismiss' else Poke.STATUS_ACKNOWLEDGED
    poke.seen_at = utcnow_naive()
    db.session.commit()

    return jsonify(poke.to_dict())
