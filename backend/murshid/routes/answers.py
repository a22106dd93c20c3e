"""
Answer endpoints: list and create under a post, edit, delete (cascades to
comments), accept / unaccept, like / unlike.

Blueprint: answers_bp, mounted at /api/community
"""
from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from murshid.i18n import get_request_language
from murshid.routes import services, json_body
from murshid.utils.auth_utils import get_current_actor

answers_bp = Blueprint('answers_bp', __name__)


@answers_bp.route('/posts/<int:post_id>/answers', methods=['GET'])
def list_answers(post_id):
    return jsonify(services.community.list_answers(post_id))


@answers_bp.route('/posts/<int:post_id>/answers', methods=['POST'])
@jwt_required()
def create_answer(post_id):
    actor = get_current_actor(services.store)
    answer = services.community.create_answer(post_id, json_body(), actor, get_request_language())
    return jsonify(answer), 201


@answers_bp.route('/answers/<int:answer_id>', methods=['PUT'])
@jwt_required()
def update_answer(answer_id):
    actor = get_current_actor(services.store)
    answer = services.community.update_answer(answer_id, json_body(), actor, get_request_language())
    return jsonify(answer)


@answers_bp.route('/answers/<int:answer_id>', methods=['DELETE'])
@jwt_required()
def delete_answer(answer_id):
    actor = get_current_actor(services.store)
    reason = json_body().get('reason') or request.args.get('reason')
    result = services.community.delete_answer(answer_id, actor, reason)
    return jsonify({'message': 'Answer deleted', 'cascade': result.to_dict()})


@answers_bp.route('/answers/<int:answer_id>/accept', methods=['POST'])
@jwt_required()
def accept_answer(answer_id):
    actor = get_current_actor(services.store)
    answer = services.community.accept_answer(answer_id, actor, post_id=json_body().get('post_id'))
    return jsonify(answer)


@answers_bp.route('/answers/<int:answer_id>/unaccept', methods=['POST'])
@jwt_required()
def unaccept_answer(answer_id):
    actor = get_current_actor(services.store)
    answer = services.community.unaccept_answer(answer_id, actor, post_id=json_body().get('post_id'))
    return jsonify(answer)


@answers_bp.route('/answers/<int:answer_id>/like', methods=['POST', 'DELETE'])
@jwt_required()
def toggle_answer_like(answer_id):
    actor = get_current_actor(services.store)
    if request.method == 'POST':
        status = services.community.like('answer', answer_id, actor)
    else:
        status = services.community.unlike('answer', answer_id, actor)
    return jsonify(status)
