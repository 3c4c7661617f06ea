import uuid

from flask_login import UserMixin

from app import db
from app.lib.time import utcnow_naive


COMMENT_TOMBSTONE = 'silinmiş'


def generate_id():
    """Opaque 32-char hex id used for every primary key."""
    return uuid.uuid4().hex


def _iso(value):
    return value.isoformat() if value else None


class User(UserMixin, db.Model):
    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    email = db.Column(db.String(255), nullable=False, unique=True)
    name = db.Column(db.String(150))
    gender = db.Column(db.String(20))
    custom_color = db.Column(db.String(20))
    created_at = db.Column(db.DateTime, default=utcnow_naive)

    posts = db.relationship('Post', backref='author', lazy='dynamic')
    subscriptions = db.relationship('UserUniversitySubscription', backref='user', lazy='dynamic',
                                    cascade='all, delete-orphan')

    def to_public_dict(self):
        """Display attributes only; name and email never leave the server."""
        return {
            'gender': self.gender,
            'customColor': self.custom_color,
        }


class University(db.Model):
    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    name = db.Column(db.String(200), nullable=False)
    short_name = db.Column(db.String(50), nullable=False, unique=True)
    city = db.Column(db.String(100))
    type = db.Column(db.String(20), default='public')  # 'public' or 'private'
    created_at = db.Column(db.DateTime, default=utcnow_naive)

    posts = db.relationship('Post', backref='university', lazy='dynamic')

    def to_summary_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'shortName': self.short_name,
        }

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'shortName': self.short_name,
            'city': self.city,
            'type': self.type,
        }


class UserUniversitySubscription(db.Model):
    __tablename__ = 'user_university_subscription'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'university_id', name='uq_subscription_user_university'),
        db.Index('idx_subscription_user_id', 'user_id'),
    )

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    user_id = db.Column(db.String(36), db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False)
    university_id = db.Column(db.String(36), db.ForeignKey('university.id', ondelete='CASCADE'), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow_naive)

    university = db.relationship('University')

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'universityId': self.university_id,
            'createdAt': _iso(self.created_at),
            'university': self.university.to_dict() if self.university else None,
        }


class Post(db.Model):
    __table_args__ = (
        db.Index('idx_post_university_created', 'university_id', 'created_at'),
        db.Index('idx_post_author_created', 'author_id', 'created_at'),
    )

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    title = db.Column(db.String(200), nullable=False)
    content = db.Column(db.Text, nullable=False, default='')
    image = db.Column(db.String(1024))
    audio = db.Column(db.String(1024))
    author_id = db.Column(db.String(36), db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False)
    university_id = db.Column(db.String(36), db.ForeignKey('university.id', ondelete='CASCADE'), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow_naive, nullable=False)

    comments = db.relationship('Comment', backref='post', lazy='dynamic',
                               cascade='all, delete-orphan', passive_deletes=True)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'content': self.content,
            'image': self.image,
            'audio': self.audio,
            'createdAt': _iso(self.created_at),
            'authorId': self.author_id,
            'universityId': self.university_id,
            'author': self.author.to_public_dict() if self.author else None,
            'university': self.university.to_summary_dict() if self.university else None,
        }


class Comment(db.Model):
    __table_args__ = (
        db.Index('idx_comment_post_created', 'post_id', 'created_at'),
    )

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    content = db.Column(db.Text, nullable=False, default='')
    image = db.Column(db.String(1024))
    audio = db.Column(db.String(1024))
    author_id = db.Column(db.String(36), db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False)
    post_id = db.Column(db.String(36), db.ForeignKey('post.id', ondelete='CASCADE'), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow_naive, nullable=False)
    is_deleted = db.Column(db.Boolean, default=False, nullable=False)
    deleted_at = db.Column(db.DateTime)

    author = db.relationship('User')

    def soft_delete(self):
        """Replace content with the tombstone; id, author and post stay untouched."""
        self.is_deleted = True
        self.deleted_at = utcnow_naive()
        self.content = COMMENT_TOMBSTONE
        self.image = None
        self.audio = None

    def to_dict(self):
        return {
            'id': self.id,
            'content': self.content,
            'image': self.image,
            'audio': self.audio,
            'createdAt': _iso(self.created_at),
            'authorId': self.author_id,
            'postId': self.post_id,
            'isDeleted': self.is_deleted,
            'author': self.author.to_public_dict() if self.author else None,
        }


class PostRead(db.Model):
    __tablename__ = 'post_read'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'post_id', name='uq_post_read_user_post'),
    )

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    user_id = db.Column(db.String(36), db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False)
    post_id = db.Column(db.String(36), db.ForeignKey('post.id', ondelete='CASCADE'), nullable=False)
    last_read_at = db.Column(db.DateTime, default=utcnow_naive, nullable=False)


class Poke(db.Model):
    STATUS_PENDING = 'PENDING'
    STATUS_ACKNOWLEDGED = 'ACKNOWLEDGED'
    STATUS_DECLINED = 'DECLINED'

    __table_args__ = (
        db.Index('idx_poke_recipient_status', 'recipient_id', 'status'),
    )

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    sender_id = db.Column(db.String(36), db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False)
    recipient_id = db.Column(db.String(36), db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False)
    post_id = db.Column(db.String(36), db.ForeignKey('post.id', ondelete='CASCADE'))
    comment_id = db.Column(db.String(36), db.ForeignKey('comment.id', ondelete='CASCADE'))
    status = db.Column(db.String(20), default=STATUS_PENDING, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow_naive, nullable=False)
    seen_at = db.Column(db.DateTime)

    sender = db.relationship('User', foreign_keys=[sender_id])
    post = db.relationship('Post')
    comment = db.relationship('Comment')

    def to_dict(self, include_targets=False):
        data = {
            'id': self.id,
            'senderId': self.sender_id,
            'recipientId': self.recipient_id,
            'postId': self.post_id,
            'commentId': self.comment_id,
            'status': self.status,
            'createdAt': _iso(self.created_at),
            'seenAt': _iso(self.seen_at),
        }
        if include_targets:
            data['sender'] = self.sender.to_public_dict() if self.sender else None
            data['post'] = {'id': self.post.id, 'title': self.post.title} if self.post else None
            data['comment'] = {
                'id': self.comment.id,
                'content': self.comment.content,
                'postId': self.comment.post_id,
            } if self.comment else None
        return data


class MediaUpload(db.Model):
    __tablename__ = 'media_upload'
    __table_args__ = (
        db.Index('idx_media_upload_user_created', 'user_id', 'created_at'),
    )

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    user_id = db.Column(db.String(36), db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False)
    kind = db.Column(db.String(10), nullable=False)  # 'image' or 'audio'
    path = db.Column(db.String(512), nullable=False)
    size_bytes = db.Column(db.Integer, nullable=False, default=0)
    content_type = db.Column(db.String(100))
    created_at = db.Column(db.DateTime, default=utcnow_naive, nullable=False)
