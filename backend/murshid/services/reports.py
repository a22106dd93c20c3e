"""
Report lifecycle service

A report moves pending -> dismissed | actioned; both outcomes are terminal.
Actioning runs the soft-delete cascade on the reported content before the
report is closed. A reporter holds at most one pending report per target;
once that report is closed the same content may be reported again.
"""
import logging
from datetime import datetime, timedelta

from murshid.errors import (
    ConflictError, DuplicateError, DuplicateReportError, NotFoundError,
    PermissionDeniedError, ValidationError,
)
from murshid.models import (
    REPORT_CONTENT_TYPES, REPORT_REASONS, REPORT_STATUSES,
    REPORT_STATUS_PENDING, REPORT_STATUS_DISMISSED, REPORT_STATUS_ACTIONED,
)
from murshid.store import ILike, AtLeast
from murshid.services.cascade import CascadeService

logger = logging.getLogger(__name__)

REPORTS = 'community_reports'
DEFAULT_ACTION_REASON = 'Content removed by admin due to report'
PREVIEW_LENGTH = 200
REPORT_WINDOWS = ('today', 'week', 'month')

CONTENT_TABLES = {
    'post': 'community_posts',
    'answer': 'community_answers',
    'comment': 'community_comments',
}


def window_start(window, now=None):
    """Lower bound of a creation window; None for no window."""
    if not window or window == 'all':
        return None
    if window not in REPORT_WINDOWS:
        raise ValidationError('validation.invalid_choice', field='window', value=window)
    now = now or datetime.utcnow()
    if window == 'today':
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if window == 'week':
        return now - timedelta(days=7)
    return now - timedelta(days=30)


def _check_choice(value, choices, field):
    if value not in choices:
        raise ValidationError('validation.invalid_choice', field=field, value=value)


def _as_id(value, field):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError('validation.invalid_choice', field=field, value=value)


class ReportService:
    def __init__(self, store, cascade=None):
        self.store = store
        self.cascade = cascade or CascadeService(store)

    def _target(self, content_type, content_id):
        return self.store.select_one(CONTENT_TABLES[content_type], {'id': content_id})

    def _pending_filter(self, reporter_id, content_type, content_id):
        return {
            'reporter_id': reporter_id,
            'reported_content_type': content_type,
            'reported_content_id': content_id,
            'status': REPORT_STATUS_PENDING,
        }

    def has_pending_report(self, reporter_id, content_type, content_id):
        return self.store.count(REPORTS, self._pending_filter(reporter_id, content_type, content_id)) > 0

    # --- submission ---

    def submit_report(self, actor, payload):
        content_type = payload.get('reported_content_type')
        _check_choice(content_type, REPORT_CONTENT_TYPES, 'reported_content_type')
        content_id = _as_id(payload.get('reported_content_id'), 'reported_content_id')
        reason = payload.get('reason')
        _check_choice(reason, REPORT_REASONS, 'reason')
        description = (payload.get('description') or '').strip() or None

        target = self._target(content_type, content_id)
        if target is None or target['is_deleted']:
            raise NotFoundError(f'not_found.{content_type}')
        if target['author_id'] == actor['id']:
            raise PermissionDeniedError('permission.self_report')
        if self.has_pending_report(actor['id'], content_type, content_id):
            raise DuplicateReportError()

        try:
            report = self.store.insert(REPORTS, {
                'reporter_id': actor['id'],
                'reporter_name': actor.get('name') or 'Anonymous',
                'reported_content_type': content_type,
                'reported_content_id': content_id,
                'reason': reason,
                'description': description,
                'status': REPORT_STATUS_PENDING,
            })
        except DuplicateError:
            # Lost the race with a simultaneous submission
            raise DuplicateReportError()
        logger.info(f"User {actor['id']} reported {content_type} {content_id} ({reason}), report {report['id']}")
        return report

    def can_report(self, actor, content_type, content_id):
        """Whether the UI should offer the report action, and why not."""
        _check_choice(content_type, REPORT_CONTENT_TYPES, 'content_type')
        content_id = _as_id(content_id, 'content_id')
        target = self._target(content_type, content_id)
        if target is None or target['is_deleted']:
            return {'can_report': False, 'reason': 'not_found'}
        if target['author_id'] == actor['id']:
            return {'can_report': False, 'reason': 'own_content'}
        if self.has_pending_report(actor['id'], content_type, content_id):
            return {'can_report': False, 'reason': 'already_reported'}
        return {'can_report': True, 'reason': None}

    # --- reading ---

    def content_preview(self, report):
        """Preview fields joined at read time; missing content gives empty fields."""
        preview = {
            'content_title': '',
            'content_preview': '',
            'content_author_id': None,
            'content_author_name': '',
            'content_is_deleted': None,
        }
        content_type = report['reported_content_type']
        if content_type not in CONTENT_TABLES:
            return preview
        target = self._target(content_type, report['reported_content_id'])
        if target is None:
            return preview
        preview.update({
            'content_title': target.get('title') or '',
            'content_preview': (target.get('content') or '')[:PREVIEW_LENGTH],
            'content_author_id': target.get('author_id'),
            'content_author_name': target.get('author_name') or '',
            'content_is_deleted': bool(target.get('is_deleted')),
        })
        return preview

    def list_reports(self, status=None, content_type=None, window=None, search=None, with_content=False):
        filters = {}
        if status and status != 'all':
            _check_choice(status, REPORT_STATUSES, 'status')
            filters['status'] = status
        if content_type and content_type != 'all':
            _check_choice(content_type, REPORT_CONTENT_TYPES, 'content_type')
            filters['reported_content_type'] = content_type
        since = window_start(window)
        if since is not None:
            filters['created_at'] = AtLeast(since)
        any_of = None
        search = (search or '').strip()
        if search:
            any_of = {
                'reporter_name': ILike(search),
                'reason': ILike(search),
                'description': ILike(search),
            }
        reports = self.store.select(REPORTS, filters, any_of=any_of, order_by='created_at', descending=True)
        if with_content:
            for report in reports:
                report.update(self.content_preview(report))
        return reports

    def get_report(self, report_id, with_content=True):
        report = self.store.select_one(REPORTS, {'id': report_id})
        if report is None:
            raise NotFoundError('not_found.report')
        if with_content:
            report.update(self.content_preview(report))
        return report

    def pending_count(self):
        return self.store.count(REPORTS, {'status': REPORT_STATUS_PENDING})

    # --- resolution ---

    def _require_pending(self, report_id):
        report = self.get_report(report_id, with_content=False)
        if report['status'] != REPORT_STATUS_PENDING:
            raise ConflictError('conflict.report_resolved')
        return report

    def _close(self, report_id, status, admin, notes):
        affected = self.store.update(
            REPORTS,
            {'id': report_id, 'status': REPORT_STATUS_PENDING},
            {
                'status': status,
                'reviewed_by': admin['id'],
                'reviewed_at': datetime.utcnow(),
                'resolution_notes': notes,
            },
        )
        if affected == 0:
            # Another admin closed it first
            raise ConflictError('conflict.report_resolved')
        logger.info(f"Admin {admin['id']} marked report {report_id} as {status}")
        return self.get_report(report_id)

    def dismiss_report(self, report_id, admin, notes=None):
        self._require_pending(report_id)
        return self._close(report_id, REPORT_STATUS_DISMISSED, admin, (notes or '').strip() or None)

    def action_report(self, report_id, admin, notes=None):
        """Remove the reported content through the cascade, then close the report."""
        report = self._require_pending(report_id)
        notes = (notes or '').strip() or None
        result = self.cascade.delete_content(
            report['reported_content_type'],
            report['reported_content_id'],
            admin,
            notes or DEFAULT_ACTION_REASON,
        )
        closed = self._close(report_id, REPORT_STATUS_ACTIONED, admin, notes)
        closed['cascade'] = result.to_dict()
        return closed

    def delete_report(self, report_id, admin):
        if self.store.delete(REPORTS, {'id': report_id}) == 0:
            raise NotFoundError('not_found.report')
        logger.info(f"Admin {admin['id']} deleted report {report_id}")
