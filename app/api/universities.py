"""
University Endpoints

Listing (cached static attributes + live counts), detail, per-university
posts, and subscribe/unsubscribe.
"""
from flask import Blueprint, current_app, jsonify
from flask_login import current_user, login_required
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from app import db, limiter
from app.api.errors import Conflict, InvalidInput
from app.api.utils import get_json_body, get_or_404, get_rate_limit_key, get_university_cache, require_valid_id
from app.feed import get_subscribed_university_ids, get_university_feed
from app.lib.validation import validate_post_payload
from app.models import Post, University, UserUniversitySubscription


universities_bp = Blueprint('universities_api', __name__)


def get_university_list():
    """
    Static university attributes, sorted by name, served from the cache
    while it is fresh and reloaded from the database otherwise.
    """
    uni_cache = get_university_cache()
    now = uni_cache.clock()
    universities, timestamp, _ttl = uni_cache.get()

    if universities is None or not uni_cache.is_fresh(timestamp, now):
        universities = [u.to_dict() for u in University.query.order_by(University.name.asc()).all()]
        uni_cache.set(universities, now)
        current_app.logger.debug(f"University cache refilled with {len(universities)} entries")

    return universities


def count_posts_by_university():
    rows = db.session.query(Post.university_id, func.count(Post.id)).group_by(Post.university_id).all()
    return {university_id: count for university_id, count in rows}


@universities_bp.route('/universities', methods=['GET'])
def list_universities():
    """
    All universities with live post counts and the caller's subscription
    state. Anonymous callers get isSubscribed=false everywhere.
    """
    universities = get_university_list()
    post_counts = count_posts_by_university()

    subscribed_ids = set()
    if current_user.is_authenticated:
        subscribed_ids = get_subscribed_university_ids(current_user.id)

    return jsonify([
        {
            **university,
            'totalPosts': post_counts.get(university['id'], 0),
            'isSubscribed': university['id'] in subscribed_ids,
        }
        for university in universities
    ])


@universities_bp.route('/universities/<university_id>', methods=['GET'])
def get_university(university_id):
    university_id = require_valid_id(university_id, 'university ID')

    university = get_or_404(University, university_id, 'University not found')

    return jsonify(university.to_dict())


@universities_bp.route('/universities/<university_id>/posts', methods=['GET'])
@login_required
def list_university_posts(university_id):
    university_id = require_valid_id(university_id, 'university ID')

    get_or_404(University, university_id, 'University not found')

    return jsonify(get_university_feed(university_id, current_user.id))


@universities_bp.route('/universities/<university_id>/posts', methods=['POST'])
@login_required
@limiter.limit("30 per minute", key_func=get_rate_limit_key)
def create_university_post(university_id):
    university_id = require_valid_id(university_id, 'university ID')
    data = get_json_body()

    cleaned, error = validate_post_payload(data)
    if error:
        raise InvalidInput(error)

    university = get_or_404(University, university_id, 'University not found')

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


@universities_bp.route('/universities/<university_id>/subscribe', methods=['POST'])
@login_required
@limiter.limit("60 per minute", key_func=get_rate_limit_key)
def subscribe(university_id):
    university_id = require_valid_id(university_id, 'university ID')

    get_or_404(University, university_id, 'University not found')

    existing = UserUniversitySubscription.query.filter_by(
        user_id=current_user.id,
        university_id=university_id,
    ).first()
    if existing:
        raise Conflict('Already subscribed')

    subscription = UserUniversitySubscription(user_id=current_user.id, university_id=university_id)
    db.session.add(subscription)
    try:
        db.session.commit()
    except IntegrityError:
        # Concurrent subscribe from another request won the unique constraint
        db.session.rollback()
        raise Conflict('Already subscribed')

    current_app.logger.info(f"User {current_user.id} subscribed to university {university_id}")
    return jsonify(subscription.to_dict()), 201


@universities_bp.route('/universities/<university_id>/subscribe', methods=['DELETE'])
@login_required
@limiter.limit("60 per minute", key_func=get_rate_limit_key)
def unsubscribe(university_id):
    university_id = require_valid_id(university_id, 'university ID')

    get_or_404(University, university_id, 'University not found')

    subscription = UserUniversitySubscription.query.filter_by(
        user_id=current_user.id,
        university_id=university_id,
    ).first()
    if not subscription:
        raise Conflict('Not subscribed')

    db.session.delete(subscription)
    db.session.commit()

    current_app.logger.info(f"User {current_user.id} unsubscribed from university {university_id}")
    return jsonify({'success': True}), 200
