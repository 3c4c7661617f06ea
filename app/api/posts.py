"""
Post and Comment Endpoints

Main post list, post CRUD in the default university, comments with soft
delete, and read markers.
"""
from flask import Blueprint, current_app, jsonify
from flask_login import current_user, login_required
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from app import db, limiter
from app.api.errors import Forbidden, Internal, InvalidInput, NotFound
from app.api.utils import get_json_body, get_or_404, get_rate_limit_key, require_valid_id
from app.feed import enrich_posts, get_main_feed
from app.lib.time import utcnow_naive
from app.lib.validation import validate_comment_payload, validate_post_payload
from app.models import Comment, Post, PostRead, University


posts_bp = Blueprint('posts_api', __name__)


@posts_bp.route('/posts', methods=['GET'])
@login_required
def list_posts():
    return jsonify(get_main_feed(current_user.id))


@posts_bp.route('/posts', methods=['POST'])
@login_required
@limiter.limit("30 per minute", key_func=get_rate_limit_key)
def create_post():
    """Create a post in the default university."""
    data = get_json_body()

    cleaned, error = validate_post_payload(data)
    if error:
        raise InvalidInput(error)

    short_name = current_app.config['DEFAULT_UNIVERSITY_SHORT_NAME']
    university = University.query.filter_by(short_name=short_name).first()
    if not university:
        current_app.logger.error(f"Default university {short_name} is missing; run flask seed-universities")
        raise Internal('Default university not found')

    post = Post(
        title=cleaned['title'],
        content=cleaned['content'],
        image=cleaned['image'],
        audio=cleaned['audio'],
        author_id=current_user.id,
        university_id=university.id,
    )
    db.session.add(post)
    db.session.commit()

    response = post.to_dict()
    response['commentCount'] = 0
    response['isTrending'] = False
    return jsonify(response), 201


@posts_bp.route('/posts/<post_id>', methods=['GET'])
@login_required
def get_post(post_id):
    """Single post with every comment, oldest first."""
    post_id = require_valid_id(post_id, 'post ID')

    post = get_or_404(Post, post_id, 'Post not found')

    comments = post.comments.options(joinedload(Comment.author)).order_by(
        Comment.created_at.asc(), Comment.id.asc()
    ).all()

    data = enrich_posts([post], current_user.id)[0]
    data['comments'] = [comment.to_dict() for comment in comments]
    return jsonify(data)


@posts_bp.route('/posts/<post_id>', methods=['DELETE'])
@login_required
def delete_post(post_id):
    post_id = require_valid_id(post_id, 'post ID')

    post = get_or_404(Post, post_id, 'Post not found')

    if post.author_id != current_user.id:
        raise Forbidden('You can only delete your own posts')

    db.session.delete(post)
    db.session.commit()

    current_app.logger.info(f"Post {post_id} deleted by its author")
    return jsonify({'success': True}), 200


@posts_bp.route('/posts/<post_id>/comments', methods=['POST'])
@login_required
@limiter.limit("60 per minute", key_func=get_rate_limit_key)
def create_comment(post_id):
    post_id = require_valid_id(post_id, 'post ID')
    data = get_json_body()

    cleaned, error = validate_comment_payload(data)
    if error:
        raise InvalidInput(error)

    post = get_or_404(Post, post_id, 'Post not found')

    comment = Comment(
        content=cleaned['content'],
        image=cleaned['image'],
        audio=cleaned['audio'],
        author_id=current_user.id,
        post_id=post.id,
    )
    db.session.add(comment)
    db.session.commit()

    return jsonify(comment.to_dict()), 201


@posts_bp.route('/posts/<post_id>/comments/<comment_id>', methods=['DELETE'])
@login_required
def delete_comment(post_id, comment_id):
    """
    Soft delete: the row stays so comment counts and thread shape are
    preserved, only the content is replaced with the tombstone.
    """
    post_id = require_valid_id(post_id, 'post ID')
    comment_id = require_valid_id(comment_id, 'comment ID')

    comment = db.session.get(Comment, comment_id)
    if not comment or comment.post_id != post_id:
        raise NotFound('Comment not found')

    if comment.author_id != current_user.id:
        raise Forbidden('You can only delete your own comments')

    if not comment.is_deleted:
        comment.soft_delete()
        db.session.commit()

    return jsonify(comment.to_dict()), 200


def find_post_read(user_id, post_id):
    return PostRead.query.filter_by(user_id=user_id, post_id=post_id).first()


@posts_bp.route('/posts/<post_id>/mark-read', methods=['POST'])
@login_required
def mark_read(post_id):
    post_id = require_valid_id(post_id, 'post ID')

    get_or_404(Post, post_id, 'Post not found')

    now = utcnow_naive()
    post_read = find_post_read(current_user.id, post_id)
    if post_read:
        post_read.last_read_at = now
    else:
        db.session.add(PostRead(user_id=current_user.id, post_id=post_id, last_read_at=now))

    try:
        db.session.commit()
    except IntegrityError:
        # A parallel mark-read inserted the row between our lookup and insert
        db.session.rollback()
        PostRead.query.filter_by(user_id=current_user.id, post_id=post_id).update({'last_read_at': now})
        db.session.commit()

    return jsonify({'success': True})
