"""
Tests for comment creation and soft delete.
"""

from conftest import make_comment, make_post


class TestCreateComment:

    def test_creates_comment(self, auth_client, db, user, other_user, university):
        post = make_post(db, other_user, university)

        response = auth_client.post(f'/api/posts/{post.id}/comments', json={'content': 'Katılıyorum'})

        assert response.status_code == 201
        data = response.get_json()
        assert data['content'] == 'Katılıyorum'
        assert data['postId'] == post.id
        assert data['authorId'] == user.id
        assert data['isDeleted'] is False
        assert data['author'] == {'gender': 'female', 'customColor': '#ff6600'}
        assert 'email' not in data['author']
        assert 'name' not in data['author']

    def test_unknown_post(self, auth_client):
        response = auth_client.post('/api/posts/missing/comments', json={'content': 'x'})

        assert response.status_code == 404

    def test_empty_comment_rejected(self, auth_client, db, other_user, university):
        post = make_post(db, other_user, university)

        response = auth_client.post(f'/api/posts/{post.id}/comments', json={'content': '   '})

        assert response.status_code == 400

    def test_too_long_comment_rejected(self, auth_client, db, other_user, university):
        post = make_post(db, other_user, university)

        response = auth_client.post(f'/api/posts/{post.id}/comments', json={'content': 'a' * 2001})

        assert response.status_code == 400
        assert response.get_json() == {'error': 'Content must be 2000 characters or less'}

    def test_audio_only_comment(self, auth_client, db, other_user, university):
        post = make_post(db, other_user, university)

        response = auth_client.post(f'/api/posts/{post.id}/comments', json={
            'audio': 'https://cdn.example.com/audio/a.webm',
        })

        assert response.status_code == 201
        assert response.get_json()['content'] == ''


class TestDeleteComment:

    def test_soft_delete_keeps_row(self, auth_client, db, user, other_user, university):
        from app.models import Comment, COMMENT_TOMBSTONE
        post = make_post(db, other_user, university)
        comment = make_comment(db, user, post, content='Pişman oldum')
        comment_id = comment.id

        response = auth_client.delete(f'/api/posts/{post.id}/comments/{comment_id}')

        assert response.status_code == 200
        data = response.get_json()
        assert data['content'] == COMMENT_TOMBSTONE
        assert data['isDeleted'] is True

        db.session.expire_all()
        stored = db.session.get(Comment, comment_id)
        assert stored is not None
        assert stored.content == COMMENT_TOMBSTONE
        assert stored.author_id == user.id
        assert stored.post_id == post.id
        assert stored.deleted_at is not None

    def test_comment_count_unchanged_after_delete(self, auth_client, db, user, other_user, university):
        post = make_post(db, other_user, university)
        comment = make_comment(db, user, post)
        make_comment(db, other_user, post)

        auth_client.delete(f'/api/posts/{post.id}/comments/{comment.id}')

        data = auth_client.get(f'/api/posts/{post.id}').get_json()
        assert data['commentCount'] == 2
        assert len(data['comments']) == 2

    def test_cannot_delete_someone_elses_comment(self, auth_client, db, user, other_user, university):
        from app.models import Comment
        post = make_post(db, user, university)
        comment = make_comment(db, other_user, post, content='Not yours')
        comment_id = comment.id

        response = auth_client.delete(f'/api/posts/{post.id}/comments/{comment_id}')

        assert response.status_code == 403
        db.session.expire_all()
        assert db.session.get(Comment, comment_id).content == 'Not yours'

    def test_comment_on_different_post_is_404(self, auth_client, db, user, other_user, university):
        post = make_post(db, other_user, university)
        other_post = make_post(db, other_user, university)
        comment = make_comment(db, user, post)

        response = auth_client.delete(f'/api/posts/{other_post.id}/comments/{comment.id}')

        assert response.status_code == 404

    def test_unknown_comment(self, auth_client, db, other_user, university):
        post = make_post(db, other_user, university)

        response = auth_client.delete(f'/api/posts/{post.id}/comments/missing')

        assert response.status_code == 404
        assert response.get_json() == {'error': 'Comment not found'}

    def test_repeated_delete_is_idempotent(self, auth_client, db, user, other_user, university):
        post = make_post(db, other_user, university)
        comment = make_comment(db, user, post)

        auth_client.delete(f'/api/posts/{post.id}/comments/{comment.id}')
        response = auth_client.delete(f'/api/posts/{post.id}/comments/{comment.id}')

        assert response.status_code == 200
        assert response.get_json()['isDeleted'] is True
