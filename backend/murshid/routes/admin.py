"""
Admin maintenance endpoints (all require the is_admin claim).

- GET  /errors, POST /errors/reset   error statistics
- GET  /cache/stats                  cache hit/miss counters
- POST /tags/refresh                 rebuild the tag translation cache
- GET  /cascades/partial             cascades that stopped part way
- POST /cascades/repair              re-run them (inline, or queued with ?async=true)

Blueprint: admin_bp, mounted at /api/admin
"""
from flask import Blueprint, jsonify, request, current_app

from murshid.routes import services
from murshid.utils import cache_manager
from murshid.utils.auth_utils import admin_required
from murshid.utils.error_handler import ErrorHandler

admin_bp = Blueprint('admin_bp', __name__)


def _wants_async():
    return request.args.get('async', 'false').lower() == 'true'


@admin_bp.route('/errors', methods=['GET'])
@admin_required
def get_error_stats():
    return jsonify({'status': 'success', 'data': ErrorHandler.get_error_stats()})


@admin_bp.route('/errors/reset', methods=['POST'])
@admin_required
def reset_error_stats():
    return jsonify(ErrorHandler.reset_stats())


@admin_bp.route('/cache/stats', methods=['GET'])
@admin_required
def get_cache_stats():
    return jsonify({'status': 'success', 'data': cache_manager.get_stats()})


@admin_bp.route('/tags/refresh', methods=['POST'])
@admin_required
def refresh_tags():
    if _wants_async():
        from murshid.tasks import refresh_tag_translations
        task = refresh_tag_translations.delay()
        return jsonify({'status': 'queued', 'task_id': task.id}), 202
    entries = services.tags.refresh()
    return jsonify({'status': 'success', 'entries': entries})


@admin_bp.route('/cascades/partial', methods=['GET'])
@admin_required
def list_partial_cascades():
    return jsonify(services.cascade.find_partial_cascades())


@admin_bp.route('/cascades/repair', methods=['POST'])
@admin_required
def repair_cascades():
    if _wants_async():
        from murshid.tasks import repair_partial_cascades
        task = repair_partial_cascades.delay()
        return jsonify({'status': 'queued', 'task_id': task.id}), 202
    results = services.cascade.repair_partial_cascades()
    current_app.logger.info(f"Repaired {len(results)} partial cascades")
    return jsonify({'status': 'success', 'repaired': [result.to_dict() for result in results]})
