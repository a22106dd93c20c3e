"""
Supporting community endpoints.

- POST /screen                            content screening preview
- GET  /tags/translate                    university / major tag translation
- GET  /<posts|answers>/<id>/history      edit history (optionally reconstructed)
- GET  /users/<id>/posts|answers|comments per-author listings
- GET  /users/me/likes                    what the caller liked

Blueprint: moderation_bp, mounted at /api/community
"""
from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from murshid.errors import ValidationError
from murshid.i18n import get_request_language
from murshid.routes import services, json_body
from murshid.services.screening import screen_content
from murshid.utils.auth_utils import get_current_actor

moderation_bp = Blueprint('moderation_bp', __name__)

HISTORY_TYPES = {'posts': 'post', 'answers': 'answer'}


@moderation_bp.route('/screen', methods=['POST'])
def screen():
    data = json_body()
    language = data.get('language') or get_request_language()
    text = data.get('text')
    if text is not None and not isinstance(text, str):
        raise ValidationError('validation.invalid_choice', field='text', value=text)
    analysis = screen_content(text or '', language)
    return jsonify(analysis.to_dict())


@moderation_bp.route('/tags/translate', methods=['GET'])
def translate_tags():
    raw = request.args.get('tags', '')
    tags = [tag.strip() for tag in raw.split(',') if tag.strip()]
    language = request.args.get('target') or get_request_language()
    translated = services.tags.translate_many(tags, language)
    return jsonify({'tags': translated, 'language': language})


@moderation_bp.route('/<any(posts, answers):collection>/<int:content_id>/history', methods=['GET'])
def content_history(collection, content_id):
    content_type = HISTORY_TYPES[collection]
    if request.args.get('reconstruct', 'false').lower() == 'true':
        return jsonify(services.versioning.reconstruct_versions(content_type, content_id))
    history = services.versioning.get_version_history(content_type, content_id)
    return jsonify({'count': len(history), 'versions': history})


@moderation_bp.route('/<any(posts, answers):collection>/<int:content_id>/history/<int:version_number>',
                     methods=['GET'])
def content_version(collection, content_id, version_number):
    version = services.versioning.get_version(HISTORY_TYPES[collection], content_id, version_number)
    return jsonify(version)


@moderation_bp.route('/users/<int:user_id>/posts', methods=['GET'])
def user_posts(user_id):
    return jsonify(services.community.posts_by_author(user_id))


@moderation_bp.route('/users/<int:user_id>/answers', methods=['GET'])
def user_answers(user_id):
    return jsonify(services.community.answers_by_author(user_id))


@moderation_bp.route('/users/<int:user_id>/comments', methods=['GET'])
def user_comments(user_id):
    return jsonify(services.community.comments_by_author(user_id))


@moderation_bp.route('/users/me/likes', methods=['GET'])
@jwt_required()
def my_likes():
    actor = get_current_actor(services.store)
    return jsonify(services.community.liked_items(actor['id']))
