"""
Comment endpoints (comments hang off answers, one level of replies).

Blueprint: comments_bp, mounted at /api/community
"""
from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from murshid.i18n import get_request_language
from murshid.routes import services, json_body
from murshid.utils.auth_utils import get_current_actor

comments_bp = Blueprint('comments_bp', __name__)


@comments_bp.route('/answers/<int:answer_id>/comments', methods=['GET'])
def list_comments(answer_id):
    return jsonify(services.community.list_comments(answer_id))


@comments_bp.route('/answers/<int:answer_id>/comments', methods=['POST'])
@jwt_required()
def create_comment(answer_id):
    actor = get_current_actor(services.store)
    comment = services.community.create_comment(answer_id, json_body(), actor, get_request_language())
    return jsonify(comment), 201


@comments_bp.route('/comments/<int:comment_id>', methods=['PUT'])
@jwt_required()
def update_comment(comment_id):
    actor = get_current_actor(services.store)
    comment = services.community.update_comment(comment_id, json_body(), actor, get_request_language())
    return jsonify(comment)


@comments_bp.route('/comments/<int:comment_id>', methods=['DELETE'])
@jwt_required()
def delete_comment(comment_id):
    actor = get_current_actor(services.store)
    reason = json_body().get('reason') or request.args.get('reason')
    result = services.community.delete_comment(comment_id, actor, reason)
    return jsonify({'message': 'Comment deleted', 'cascade': result.to_dict()})


@comments_bp.route('/comments/<int:comment_id>/like', methods=['POST', 'DELETE'])
@jwt_required()
def toggle_comment_like(comment_id):
    actor = get_current_actor(services.store)
    if request.method == 'POST':
        status = services.community.like('comment', comment_id, actor)
    else:
        status = services.community.unlike('comment', comment_id, actor)
    return jsonify(status)
