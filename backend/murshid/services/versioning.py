"""
Edit history service

Before an edit of a post or answer is saved, the pre-edit snapshot and the
diff to the post-edit snapshot are appended as the next version. Writing
history is best effort: a failure is logged and never blocks the edit.
"""
import logging

from murshid.errors import DuplicateError, NotFoundError, ValidationError
from murshid.models import VERSION_CONTENT_TYPES
from murshid.utils.diff import compute_diff, apply_diff

logger = logging.getLogger(__name__)

VERSIONS = 'content_versions'

POST_VERSION_FIELDS = ('title', 'content', 'tags', 'major_tags', 'university_tags')
ANSWER_VERSION_FIELDS = ('content',)


def post_snapshot(post):
    return {field: post.get(field) if field in ('title', 'content') else list(post.get(field) or [])
            for field in POST_VERSION_FIELDS}


def answer_snapshot(answer):
    return {field: answer.get(field) for field in ANSWER_VERSION_FIELDS}


def _check_type(content_type):
    if content_type not in VERSION_CONTENT_TYPES:
        raise ValidationError('validation.invalid_choice', field='content_type', value=content_type)


class VersioningService:
    def __init__(self, store):
        self.store = store

    def next_version_number(self, content_type, content_id):
        current = self.store.max_value(VERSIONS, 'version_number',
                                       {'content_type': content_type, 'content_id': content_id})
        return (current or 0) + 1

    def save_content_version(self, content_type, content_id, previous, new, editor):
        """Append a version; returns the stored row, or None when nothing was written."""
        try:
            _check_type(content_type)
            diff = compute_diff(previous, new)
            for attempt in range(2):
                row = {
                    'content_type': content_type,
                    'content_id': content_id,
                    'version_number': self.next_version_number(content_type, content_id),
                    'previous_data': previous,
                    'diff': diff,
                    'edited_by': editor.get('id'),
                    'editor_name': editor.get('name'),
                }
                try:
                    return self.store.insert(VERSIONS, row)
                except DuplicateError:
                    # Another edit took this number; recompute once
                    if attempt:
                        raise
        except Exception as e:
            logger.error(f"Failed to save version for {content_type}:{content_id}: {e}", exc_info=True)
        return None

    def get_version_history(self, content_type, content_id):
        _check_type(content_type)
        return self.store.select(VERSIONS, {'content_type': content_type, 'content_id': content_id},
                                 order_by='version_number', descending=True)

    def get_version(self, content_type, content_id, version_number):
        _check_type(content_type)
        version = self.store.select_one(VERSIONS, {
            'content_type': content_type,
            'content_id': content_id,
            'version_number': version_number,
        })
        if version is None:
            raise NotFoundError('not_found.version')
        return version

    def get_version_count(self, content_type, content_id):
        _check_type(content_type)
        return self.store.count(VERSIONS, {'content_type': content_type, 'content_id': content_id})

    def has_version_history(self, content_type, content_id):
        return self.get_version_count(content_type, content_id) > 0

    def reconstruct_versions(self, content_type, content_id):
        """
        Every snapshot in order: version 0 is the original content, version n
        the content right after edit n. Each stored previous_data is used as
        the base of its step so a lost version does not corrupt later ones.
        """
        versions = list(reversed(self.get_version_history(content_type, content_id)))
        if not versions:
            return []
        snapshots = [{
            'version_number': 0,
            'data': versions[0]['previous_data'],
            'edited_by': None,
            'editor_name': None,
            'created_at': None,
        }]
        state = versions[0]['previous_data']
        for version in versions:
            base = version['previous_data'] if version['previous_data'] is not None else state
            state = apply_diff(base, version['diff'])
            snapshots.append({
                'version_number': version['version_number'],
                'data': state,
                'edited_by': version['edited_by'],
                'editor_name': version['editor_name'],
                'created_at': version['created_at'],
            })
        return snapshots
