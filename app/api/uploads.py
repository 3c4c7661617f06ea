"""
Media Upload Endpoints

Multipart image and audio uploads plus signed URLs for direct-to-bucket
uploads. Size, type and path are checked first; the quota is then reserved
as a MediaUpload row before anything touches storage.
"""
import os
import secrets
import time

from flask import Blueprint, current_app, jsonify, request, send_from_directory
from flask_login import current_user, login_required

from app import limiter
from app.api.errors import Internal, InvalidInput, NotFound, RateLimited, api_error
from app.api.utils import get_json_body, get_media_storage, get_rate_limit_key
from app.lib.media_storage import is_safe_path
from app.lib.upload_quota import release_upload, reserve_upload


uploads_bp = Blueprint('uploads_api', __name__)

ALLOWED_IMAGE_TYPES = {'image/jpeg', 'image/jpg', 'image/png', 'image/gif', 'image/webp'}

# MediaRecorder output differs per browser; Safari reports video/mp4 for audio
ALLOWED_AUDIO_TYPES = {
    'audio/mpeg',
    'audio/mp3',
    'audio/wav',
    'audio/webm',
    'audio/ogg',
    'audio/aac',
    'audio/opus',
    'audio/mp4',
    'video/mp4',
    'audio/x-m4a',
}
DEFAULT_AUDIO_TYPE = 'audio/webm'


def base_mime_type(content_type):
    """'audio/webm; codecs=opus' -> 'audio/webm'"""
    return (content_type or '').split(';')[0].strip().lower()


def normalize_audio_type(content_type):
    base = base_mime_type(content_type)
    if not base:
        return DEFAULT_AUDIO_TYPE
    if base == 'video/mp4':
        return 'audio/mp4'
    return base


def build_upload_path(folder, filename, default_ext):
    """'<folder>/<random>_<epoch_ms>.<ext>', extension taken from the client filename."""
    ext = default_ext
    if filename and '.' in filename:
        candidate = filename.rsplit('.', 1)[1].lower()
        if candidate.isalnum():
            ext = candidate
    name = f"{secrets.token_hex(6)}_{int(time.time() * 1000)}.{ext}"
    return f"{folder}/{name}"


def _handle_upload(kind, max_size, default_folder, default_ext):
    file = request.files.get('file')
    if file is None:
        raise InvalidInput('No file provided')

    data = file.read()
    if len(data) > max_size:
        raise InvalidInput(f"File size exceeds maximum of {max_size // (1024 * 1024)}MB")

    if kind == 'image':
        content_type = base_mime_type(file.mimetype)
        if content_type not in ALLOWED_IMAGE_TYPES:
            raise InvalidInput('Invalid file type. Only JPEG, PNG, GIF, and WebP are allowed.')
    else:
        raw_type = file.content_type or ''
        if raw_type and base_mime_type(raw_type) not in ALLOWED_AUDIO_TYPES:
            raise InvalidInput(
                f"Invalid file type: {raw_type}. Allowed types: MP3, WAV, WebM, OGG, AAC, Opus, MP4/M4A.",
                receivedType=raw_type,
                baseType=base_mime_type(raw_type),
            )
        content_type = normalize_audio_type(raw_type)

    folder = request.args.get('folder') or default_folder
    path = build_upload_path(folder, file.filename, default_ext)
    if not is_safe_path(path):
        raise InvalidInput('Invalid folder')

    user_id = current_user.id
    quota, upload = reserve_upload(user_id, kind, path, len(data), content_type)
    if upload is None:
        raise RateLimited(quota.reason or 'Upload limit reached', rateLimit=quota.remaining)

    url = None
    try:
        url = get_media_storage().save(data, path, content_type)
    finally:
        if not url:
            release_upload(upload)
    if not url:
        raise Internal('Failed to upload file')

    current_app.logger.info(f"Stored {kind} upload {path} ({len(data)} bytes) for user {user_id}")
    return jsonify({'url': url, 'path': path})


@uploads_bp.route('/upload/image', methods=['POST'])
@login_required
@limiter.limit("30 per minute", key_func=get_rate_limit_key)
def upload_image():
    return _handle_upload(
        'image',
        current_app.config['MAX_IMAGE_UPLOAD_SIZE'],
        default_folder='posts',
        default_ext='jpg',
    )


@uploads_bp.route('/upload/audio', methods=['POST'])
@login_required
@limiter.limit("30 per minute", key_func=get_rate_limit_key)
def upload_audio():
    return _handle_upload(
        'audio',
        current_app.config['MAX_AUDIO_UPLOAD_SIZE'],
        default_folder='audio',
        default_ext='mp3',
    )


@uploads_bp.route('/upload/signed-url', methods=['POST'])
@login_required
@limiter.limit("30 per minute", key_func=get_rate_limit_key)
def signed_upload_url():
    data = get_json_body()
    file_path = data.get('filePath')
    file_type = data.get('fileType')

    if not file_path or not file_type:
        raise InvalidInput('Missing filePath or fileType')

    if not is_safe_path(file_path):
        raise InvalidInput('Invalid filePath')

    storage = get_media_storage()
    signed_url = storage.create_signed_upload_url(file_path, file_type)
    if not signed_url:
        return api_error('Signed uploads are not available for the configured storage provider', 503)

    return jsonify({
        'signedUrl': signed_url,
        'path': file_path,
        'publicUrl': storage.public_url(file_path),
    })


@uploads_bp.route('/media/<path:path>', methods=['GET'])
def serve_local_media(path):
    """Development only: files written by the filesystem provider."""
    storage = get_media_storage()
    if storage.provider != 'filesystem' or not is_safe_path(path):
        raise NotFound()
    return send_from_directory(os.path.abspath(storage.local_dir), path)
