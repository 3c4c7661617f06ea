"""
Tests for post endpoints: create, read, delete and read markers.
"""

from unittest.mock import patch

from conftest import login, make_comment, make_post


class TestCreatePost:

    def test_creates_in_default_university(self, auth_client, user, default_university):
        response = auth_client.post('/api/posts', json={'title': 'Merhaba', 'content': 'İlk gönderi'})

        assert response.status_code == 201
        data = response.get_json()
        assert data['title'] == 'Merhaba'
        assert data['universityId'] == default_university.id
        assert data['authorId'] == user.id
        assert data['isTrending'] is False
        assert data['commentCount'] == 0
        assert data['author'] == {'gender': 'female', 'customColor': '#ff6600'}

    def test_missing_default_university(self, auth_client):
        response = auth_client.post('/api/posts', json={'title': 'Merhaba', 'content': 'x'})

        assert response.status_code == 500
        assert response.get_json() == {'error': 'Default university not found'}

    def test_title_required(self, auth_client, default_university):
        response = auth_client.post('/api/posts', json={'content': 'no title'})

        assert response.status_code == 400
        assert response.get_json() == {'error': 'Title is required'}

    def test_needs_content_or_media(self, auth_client, default_university):
        response = auth_client.post('/api/posts', json={'title': 'Only a title'})

        assert response.status_code == 400

    def test_image_only_post(self, auth_client, default_university):
        response = auth_client.post('/api/posts', json={
            'title': 'Photo',
            'image': 'https://cdn.example.com/posts/a.png',
        })

        assert response.status_code == 201
        assert response.get_json()['image'] == 'https://cdn.example.com/posts/a.png'

    def test_html_is_stripped(self, auth_client, default_university):
        response = auth_client.post('/api/posts', json={
            'title': '<b>Bold</b> title',
            'content': '<script>alert(1)</script>text',
        })

        data = response.get_json()
        assert data['title'] == 'Bold title'
        assert '<' not in data['content']

    def test_invalid_json(self, auth_client, default_university):
        response = auth_client.post('/api/posts', data='not json', content_type='application/json')

        assert response.status_code == 400
        assert response.get_json() == {'error': 'Invalid JSON in request body'}

    def test_create_in_specific_university(self, auth_client, university):
        response = auth_client.post(
            f'/api/universities/{university.id}/posts',
            json={'title': 'Kampüs', 'content': 'Yemekhane kapalı mı?'},
        )

        assert response.status_code == 201
        assert response.get_json()['university']['shortName'] == 'BOUN'

    def test_create_in_unknown_university(self, auth_client):
        response = auth_client.post('/api/universities/nope/posts', json={'title': 'x', 'content': 'y'})

        assert response.status_code == 404


class TestGetPost:

    def test_includes_comments_oldest_first(self, auth_client, db, user, other_user, university):
        from datetime import timedelta
        from app.lib.time import utcnow_naive
        now = utcnow_naive()
        post = make_post(db, other_user, university)
        second = make_comment(db, user, post, content='second', created_at=now - timedelta(minutes=1))
        first = make_comment(db, other_user, post, content='first', created_at=now - timedelta(minutes=5))

        response = auth_client.get(f'/api/posts/{post.id}')

        assert response.status_code == 200
        data = response.get_json()
        assert [c['id'] for c in data['comments']] == [first.id, second.id]
        assert data['commentCount'] == 2
        assert data['comments'][0]['author'] == {'gender': 'male', 'customColor': '#0066ff'}

    def test_unknown_post(self, auth_client):
        response = auth_client.get('/api/posts/missing')

        assert response.status_code == 404
        assert response.get_json() == {'error': 'Post not found'}


class TestDeletePost:

    def test_author_can_delete(self, auth_client, db, user, university):
        from app.models import Post
        post = make_post(db, user, university)
        post_id = post.id

        response = auth_client.delete(f'/api/posts/{post_id}')

        assert response.status_code == 200
        db.session.expire_all()
        assert db.session.get(Post, post_id) is None

    def test_other_user_cannot_delete(self, auth_client, db, other_user, university):
        post = make_post(db, other_user, university)

        response = auth_client.delete(f'/api/posts/{post.id}')

        assert response.status_code == 403

    def test_other_user_goes_through_forbidden(self, auth_client, db, other_user, university):
        from app.api.errors import Forbidden
        post = make_post(db, other_user, university)

        with patch('app.api.posts.Forbidden', wraps=Forbidden) as mock_forbidden:
            response = auth_client.delete(f'/api/posts/{post.id}')

        mock_forbidden.assert_called_once_with('You can only delete your own posts')
        assert response.get_json() == {'error': 'You can only delete your own posts'}

    def test_unknown_post(self, auth_client):
        assert auth_client.delete('/api/posts/missing').status_code == 404


class TestMarkRead:

    def test_upserts_single_row(self, auth_client, db, user, other_user, university):
        from app.models import PostRead
        post = make_post(db, other_user, university)

        assert auth_client.post(f'/api/posts/{post.id}/mark-read').status_code == 200
        first = PostRead.query.filter_by(user_id=user.id, post_id=post.id).one().last_read_at

        auth_client.post(f'/api/posts/{post.id}/mark-read')

        db.session.expire_all()
        rows = PostRead.query.filter_by(user_id=user.id, post_id=post.id).all()
        assert len(rows) == 1
        assert rows[0].last_read_at >= first

    def test_parallel_insert_falls_back_to_update(self, auth_client, db, user, other_user, university):
        from datetime import datetime
        from app.models import PostRead
        post = make_post(db, other_user, university)
        post_id = post.id
        db.session.add(PostRead(user_id=user.id, post_id=post_id, last_read_at=datetime(2020, 1, 1)))
        db.session.commit()

        # The lookup misses the row another request just wrote, so the insert hits the unique constraint
        with patch('app.api.posts.find_post_read', return_value=None):
            response = auth_client.post(f'/api/posts/{post_id}/mark-read')

        assert response.status_code == 200
        db.session.expire_all()
        rows = PostRead.query.filter_by(user_id=user.id, post_id=post_id).all()
        assert len(rows) == 1
        assert rows[0].last_read_at > datetime(2020, 1, 1)

    def test_unknown_post(self, auth_client):
        assert auth_client.post('/api/posts/missing/mark-read').status_code == 404

    def test_requires_login(self, client, db, user, university):
        post = make_post(db, user, university)

        assert client.post(f'/api/posts/{post.id}/mark-read').status_code == 401

        login(client, user)
        assert client.post(f'/api/posts/{post.id}/mark-read').status_code == 200
