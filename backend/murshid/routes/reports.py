"""
Content report endpoints.

Users submit reports (rate limited) and ask whether they may report an item;
admins list, preview, dismiss, action and delete reports.

Blueprint: reports_bp, mounted at /api/community/reports
"""
from flask import Blueprint, jsonify, request, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity, verify_jwt_in_request
from flask_limiter.util import get_remote_address

from murshid import limiter
from murshid.routes import services, json_body
from murshid.utils.auth_utils import admin_required, get_current_actor

reports_bp = Blueprint('reports_bp', __name__)


def _report_rate_limit():
    return current_app.config.get('REPORT_RATE_LIMIT', '20 per hour')


def _reporter_key():
    """Limit per reporting user, falling back to the client address."""
    verify_jwt_in_request(optional=True)
    identity = get_jwt_identity()
    return f"reporter:{identity}" if identity else get_remote_address()


@reports_bp.route('', methods=['POST'])
@jwt_required()
@limiter.limit(_report_rate_limit, key_func=_reporter_key)
def submit_report():
    actor = get_current_actor(services.store)
    report = services.reports.submit_report(actor, json_body())
    return jsonify(report), 201


@reports_bp.route('/can-report', methods=['GET'])
@jwt_required()
def can_report():
    actor = get_current_actor(services.store)
    answer = services.reports.can_report(
        actor,
        request.args.get('content_type'),
        request.args.get('content_id'),
    )
    return jsonify(answer)


@reports_bp.route('', methods=['GET'])
@admin_required
def list_reports():
    reports = services.reports.list_reports(
        status=request.args.get('status'),
        content_type=request.args.get('content_type'),
        window=request.args.get('window'),
        search=request.args.get('search'),
        with_content=request.args.get('with_content', 'false').lower() == 'true',
    )
    return jsonify(reports)


@reports_bp.route('/pending-count', methods=['GET'])
@admin_required
def pending_count():
    return jsonify({'pending': services.reports.pending_count()})


@reports_bp.route('/<int:report_id>', methods=['GET'])
@admin_required
def get_report(report_id):
    return jsonify(services.reports.get_report(report_id))


@reports_bp.route('/<int:report_id>/dismiss', methods=['POST'])
@admin_required
def dismiss_report(report_id):
    admin = get_current_actor(services.store)
    report = services.reports.dismiss_report(report_id, admin, json_body().get('notes'))
    return jsonify(report)


@reports_bp.route('/<int:report_id>/action', methods=['POST'])
@admin_required
def action_report(report_id):
    admin = get_current_actor(services.store)
    report = services.reports.action_report(report_id, admin, json_body().get('notes'))
    return jsonify(report)


@reports_bp.route('/<int:report_id>', methods=['DELETE'])
@admin_required
def delete_report(report_id):
    admin = get_current_actor(services.store)
    services.reports.delete_report(report_id, admin)
    return jsonify({'message': 'Report deleted'})
