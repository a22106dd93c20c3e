"""
Community post endpoints.

- Listing (search / type filter), admin listing including deleted posts
- Post detail with derived counters and the caller's like state
- Create / edit (author) / soft delete with cascade (author or admin)
- Like / unlike

Blueprint: posts_bp, mounted at /api/community
"""
from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from murshid.i18n import get_request_language
from murshid.routes import services, json_body
from murshid.utils.auth_utils import admin_required, get_current_actor, get_optional_actor

posts_bp = Blueprint('posts_bp', __name__)


@posts_bp.route('/posts', methods=['GET'])
def list_posts():
    posts = services.community.list_posts(
        search=request.args.get('search'),
        post_type=request.args.get('type'),
        limit=request.args.get('limit', type=int),
    )
    return jsonify(posts)


@posts_bp.route('/posts/admin', methods=['GET'])
@admin_required
def list_posts_for_admin():
    posts = services.community.list_posts_for_admin(
        search=request.args.get('search'),
        post_type=request.args.get('type'),
    )
    return jsonify(posts)


@posts_bp.route('/posts/<int:post_id>', methods=['GET'])
def get_post(post_id):
    actor = get_optional_actor(services.store)
    include_deleted = bool(actor and actor['is_admin'])
    post = services.community.get_post(post_id, include_deleted=include_deleted)
    if actor:
        post['liked'] = services.community.has_liked('post', post_id, actor['id'])
    return jsonify(post)


@posts_bp.route('/posts', methods=['POST'])
@jwt_required()
def create_post():
    actor = get_current_actor(services.store)
    post = services.community.create_post(json_body(), actor, get_request_language())
    return jsonify(post), 201


@posts_bp.route('/posts/<int:post_id>', methods=['PUT'])
@jwt_required()
def update_post(post_id):
    actor = get_current_actor(services.store)
    post = services.community.update_post(post_id, json_body(), actor, get_request_language())
    return jsonify(post)


@posts_bp.route('/posts/<int:post_id>', methods=['DELETE'])
@jwt_required()
def delete_post(post_id):
    actor = get_current_actor(services.store)
    reason = json_body().get('reason') or request.args.get('reason')
    result = services.community.delete_post(post_id, actor, reason)
    return jsonify({'message': 'Post deleted', 'cascade': result.to_dict()})


@posts_bp.route('/posts/<int:post_id>/like', methods=['POST', 'DELETE'])
@jwt_required()
def toggle_post_like(post_id):
    actor = get_current_actor(services.store)
    if request.method == 'POST':
        status = services.community.like('post', post_id, actor)
    else:
        status = services.community.unlike('post', post_id, actor)
    return jsonify(status)
