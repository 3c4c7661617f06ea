"""
Tests for input validation helpers.
"""

import pytest

from app.lib.validation import (
    sanitize_and_validate,
    sanitize_input,
    validate_comment_payload,
    validate_id,
    validate_media_url,
    validate_post_payload,
)


class TestValidateId:

    @pytest.mark.parametrize('value', ['abc123', 'a-b_c', 'f' * 100])
    def test_valid(self, value):
        assert validate_id(value) == (True, None)

    @pytest.mark.parametrize('value,error', [
        (None, 'ID is required'),
        ('', 'ID is required'),
        ('   ', 'ID cannot be empty'),
        ('f' * 101, 'ID is too long'),
        ('abc/def', 'ID contains invalid characters'),
        ("1' OR '1'='1", 'ID contains invalid characters'),
    ])
    def test_invalid(self, value, error):
        assert validate_id(value) == (False, error)

    def test_non_string(self):
        assert validate_id(123)[0] is False


class TestSanitizeInput:

    def test_strips_tags(self):
        assert sanitize_input('<b>hello</b> world') == 'hello world'

    def test_removes_event_handlers(self):
        assert 'onerror' not in sanitize_input('<img src=x onerror=alert(1)>text')

    def test_removes_javascript_urls(self):
        assert 'javascript:' not in sanitize_input('click javascript:alert(1)')

    def test_decodes_entities(self):
        assert sanitize_input('Tom &amp; Jerry') == 'Tom & Jerry'

    def test_keeps_newlines_and_tabs(self):
        assert sanitize_input('a\nb\tc\x00d') == 'a\nb\tcd'

    def test_keeps_turkish_text(self):
        assert sanitize_input('  Çok güzel bir gün  ') == 'Çok güzel bir gün'

    def test_non_string(self):
        assert sanitize_input(None) == ''


class TestSanitizeAndValidate:

    def test_required(self):
        assert sanitize_and_validate('', 10, 'Title') == ('', 'Title is required')

    def test_empty_after_sanitizing(self):
        assert sanitize_and_validate('<p></p>', 10, 'Title') == ('', 'Title cannot be empty')

    def test_too_long(self):
        value, error = sanitize_and_validate('x' * 11, 10, 'Title')
        assert error == 'Title must be 10 characters or less'
        assert value == 'x' * 10


class TestMediaUrl:

    def test_empty_is_allowed(self):
        assert validate_media_url(None, 'Image') == (None, None)
        assert validate_media_url('', 'Image') == (None, None)

    def test_https_url(self):
        assert validate_media_url('https://cdn.example.com/a.png', 'Image') == ('https://cdn.example.com/a.png', None)

    def test_rejects_other_schemes(self):
        assert validate_media_url('javascript:alert(1)', 'Image')[1] == 'Image must be a valid URL'


class TestPayloads:

    def test_post_payload(self):
        cleaned, error = validate_post_payload({'title': ' Başlık ', 'content': 'İçerik'})

        assert error is None
        assert cleaned == {'title': 'Başlık', 'content': 'İçerik', 'image': None, 'audio': None}

    def test_post_title_too_long(self):
        _cleaned, error = validate_post_payload({'title': 'x' * 201, 'content': 'y'})
        assert error == 'Title must be 200 characters or less'

    def test_post_content_too_long(self):
        _cleaned, error = validate_post_payload({'title': 't', 'content': 'y' * 10001})
        assert error == 'Content must be 10000 characters or less'

    def test_post_requires_body(self):
        _cleaned, error = validate_post_payload({'title': 't'})
        assert error == 'Post must have at least content, image, or audio'

    def test_comment_requires_body(self):
        _cleaned, error = validate_comment_payload({'content': ''})
        assert error == 'Comment must have at least content, image, or audio'

    def test_comment_with_image(self):
        cleaned, error = validate_comment_payload({'image': 'https://cdn.example.com/a.png'})
        assert error is None
        assert cleaned['image'] == 'https://cdn.example.com/a.png'

    def test_non_dict(self):
        assert validate_post_payload(['x']) == (None, 'Invalid input')
