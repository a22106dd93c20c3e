"""
Error handling module

Provides application wide error handling:
- CommunityError subclasses rendered as JSON in the request language
- Plain HTTP errors (400/401/403/404/405/429/500) with localized messages
- Error statistics per status code, endpoint and client IP for the admin dashboard

User facing messages come from murshid.i18n; the full detail of internal
errors only goes to the log.
"""

from flask import jsonify, request, current_app
from werkzeug.exceptions import HTTPException
import re
import time
import threading
from collections import defaultdict, Counter
import traceback
from datetime import datetime

from murshid.errors import CommunityError, StoreError
from murshid.i18n import translate, get_request_language

# URL patterns and the not-found message used for them
URL_PATTERNS = [
    (re.compile(r'/api/community/posts/([^/]+)'), 'not_found.post'),
    (re.compile(r'/api/community/answers/([^/]+)'), 'not_found.answer'),
    (re.compile(r'/api/community/comments/([^/]+)'), 'not_found.comment'),
    (re.compile(r'/api/community/reports/([^/]+)'), 'not_found.report'),
]

MAX_RECENT_ERRORS = 100

# Error counters
_error_lock = threading.Lock()
_error_stats = {
    'last_reset': time.time(),
    'total_count': 0,
    'by_code': defaultdict(int),
    'by_endpoint': defaultdict(int),
    'by_error': defaultdict(int),
    'recent_errors': [],
    'ip_count': Counter()
}


class ErrorHandler:
    """Error handler"""

    @staticmethod
    def register_handlers(app):
        """Register every error handler"""

        @app.errorhandler(CommunityError)
        def handle_community_error(e):
            language = get_request_language()
            if isinstance(e, StoreError):
                current_app.logger.error(
                    f"Store error on {request.method} {request.path}: {e.error_code} "
                    f"detail={getattr(e, 'detail', None)}"
                )
            ErrorHandler._record_error(e.status_code, e.error_code, str(e))
            return jsonify(e.to_dict(language)), e.status_code

        @app.errorhandler(404)
        def handle_not_found(e):
            path = request.path
            message_key = 'not_found.resource'
            for pattern, key in URL_PATTERNS:
                if pattern.search(path):
                    message_key = key
                    break

            ErrorHandler._record_error(404, 'not_found', message_key)
            return jsonify({
                'error': 'not_found',
                'message': translate(message_key),
                'status': 404,
                'path': path
            }), 404

        @app.errorhandler(500)
        def handle_server_error(e):
            error_detail = str(getattr(e, 'original_exception', None) or e)
            error_trace = traceback.format_exc()
            current_app.logger.error(f"Server error: {request.path} - {error_detail}\n{error_trace}")
            ErrorHandler._record_error(500, 'server_error', error_detail)
            return ErrorHandler.json_error(500)

        for code in [400, 401, 403, 405, 429]:
            app.register_error_handler(code, ErrorHandler._create_error_handler(code))

    @staticmethod
    def json_error(status_code):
        """Localized JSON body for a bare HTTP status"""
        return jsonify({
            'error': f'error_{status_code}',
            'message': translate(f'http.{status_code}'),
            'status': status_code
        }), status_code

    @staticmethod
    def _create_error_handler(status_code):
        """Handler for one HTTP status code"""
        def handler(e):
            description = e.description if isinstance(e, HTTPException) else str(e)
            ErrorHandler._record_error(status_code, f'error_{status_code}', description)
            return ErrorHandler.json_error(status_code)

        return handler

    @staticmethod
    def _record_error(status_code, error_code, error_msg):
        """Record error statistics"""
        path = request.path
        client_ip = request.remote_addr
        with _error_lock:
            _error_stats['total_count'] += 1
            _error_stats['by_code'][status_code] += 1
            _error_stats['by_endpoint'][ErrorHandler._simplify_path(path)] += 1
            _error_stats['by_error'][error_code] += 1
            _error_stats['ip_count'][client_ip] += 1

            _error_stats['recent_errors'].append({
                'timestamp': datetime.now().isoformat(),
                'status_code': status_code,
                'error': error_code,
                'path': path,
                'method': request.method,
                'client_ip': client_ip,
                'message': error_msg
            })
            if len(_error_stats['recent_errors']) > MAX_RECENT_ERRORS:
                _error_stats['recent_errors'] = _error_stats['recent_errors'][-MAX_RECENT_ERRORS:]

    @staticmethod
    def _simplify_path(path):
        """Replace ids in a path with placeholders"""
        return re.sub(r'/\d+', '/{id}', path)

    @staticmethod
    def get_error_stats():
        """Error statistics snapshot"""
        with _error_lock:
            return {
                'total_count': _error_stats['total_count'],
                'by_code': dict(_error_stats['by_code']),
                'by_endpoint': dict(_error_stats['by_endpoint']),
                'by_error': dict(_error_stats['by_error']),
                'recent_errors': _error_stats['recent_errors'][-20:],
                'top_ips': dict(_error_stats['ip_count'].most_common(10)),
                'last_reset': _error_stats['last_reset']
            }

    @staticmethod
    def reset_stats():
        """Reset error statistics"""
        with _error_lock:
            _error_stats['last_reset'] = time.time()
            _error_stats['total_count'] = 0
            _error_stats['by_code'] = defaultdict(int)
            _error_stats['by_endpoint'] = defaultdict(int)
            _error_stats['by_error'] = defaultdict(int)
            _error_stats['recent_errors'] = []
            _error_stats['ip_count'] = Counter()

        return {"success": True, "message": "Error statistics reset"}
