"""
Tests for the soft-delete cascade
"""
from datetime import datetime

import pytest

from murshid.errors import CascadeError, NotFoundError, PermissionDeniedError, StoreError, ValidationError
from murshid.services.cascade import (
    ANSWER_CASCADE_REASON, AUTHOR_DELETE_REASON, POST_CASCADE_REASON, CascadeService,
)
from murshid.store import QueryStore

DELETED_AT = datetime(2026, 1, 5, 10, 0)


class FailingStore(QueryStore):
    """QueryStore whose updates on one table fail until `failing` is cleared"""

    def __init__(self, fail_table):
        super().__init__()
        self.fail_table = fail_table
        self.failing = True

    def update(self, table, filters, patch):
        if self.failing and table == self.fail_table:
            raise StoreError(detail='connection reset')
        return super().update(table, filters, patch)


def _row(store, table, row_id):
    return store.select_one(table, {'id': row_id})


@pytest.fixture
def second_comment(services, actors, thread):
    comment = services.community.create_comment(
        thread['answer_two'], {'content': 'Good point about the campus.'}, actors['student'])
    return comment['id']


class TestPostCascade:
    """Deleting a post removes its answers and comments"""

    def test_author_deletes_post(self, services, actors, thread, second_comment):
        result = services.cascade.delete_post(thread['post'], actors['author'])
        assert result.steps == {'comments': 2, 'answers': 2, 'post': 1}
        assert result.total == 5
        assert result.root_changed is True

        store = services.store
        post = _row(store, 'community_posts', thread['post'])
        assert post['is_deleted'] is True
        assert post['deletion_reason'] == AUTHOR_DELETE_REASON
        assert post['deleted_by'] == actors['author']['id']
        for answer_id in (thread['answer_one'], thread['answer_two']):
            answer = _row(store, 'community_answers', answer_id)
            assert answer['is_deleted'] is True
            assert answer['deletion_reason'] == POST_CASCADE_REASON
        for comment_id in (thread['comment'], second_comment):
            comment = _row(store, 'community_comments', comment_id)
            assert comment['is_deleted'] is True
            assert comment['deletion_reason'] == POST_CASCADE_REASON
            assert comment['deleted_at'] == post['deleted_at']

    def test_repeat_is_idempotent(self, services, actors, thread):
        services.cascade.delete_post(thread['post'], actors['author'])
        first = _row(services.store, 'community_posts', thread['post'])

        result = services.cascade.delete_post(thread['post'], actors['admin'], 'Cleanup')
        assert result.total == 0
        assert result.root_changed is False
        # Audit fields are written once
        again = _row(services.store, 'community_posts', thread['post'])
        assert again['deleted_by'] == first['deleted_by']
        assert again['deletion_reason'] == AUTHOR_DELETE_REASON

    def test_already_deleted_answer_keeps_its_reason(self, services, actors, thread):
        services.cascade.delete_answer(thread['answer_one'], actors['student'])
        services.cascade.delete_post(thread['post'], actors['author'])
        answer = _row(services.store, 'community_answers', thread['answer_one'])
        assert answer['deletion_reason'] == AUTHOR_DELETE_REASON
        assert answer['deleted_by'] == actors['student']['id']

    def test_missing_post(self, services, actors):
        with pytest.raises(NotFoundError):
            services.cascade.delete_post(9999, actors['admin'], 'Spam')

    def test_failure_reports_completed_steps(self, services, actors, thread):
        failing = FailingStore('community_answers')
        cascade = CascadeService(failing)
        with pytest.raises(CascadeError) as excinfo:
            cascade.delete_post(thread['post'], actors['author'])
        error = excinfo.value
        assert error.failed_step == 'answers'
        assert error.completed_steps == ['collect_answers', 'comments']
        assert error.root_type == 'post'

        store = services.store
        assert _row(store, 'community_comments', thread['comment'])['is_deleted'] is True
        assert _row(store, 'community_answers', thread['answer_one'])['is_deleted'] is False
        assert _row(store, 'community_posts', thread['post'])['is_deleted'] is False

        # Retrying finishes the job without touching finished steps
        failing.failing = False
        result = cascade.delete_post(thread['post'], actors['author'])
        assert result.steps == {'comments': 0, 'answers': 2, 'post': 1}


class TestAnswerAndCommentCascade:
    """Answers take their comments with them, comments are leaves"""

    def test_answer_cascade(self, services, actors, thread):
        result = services.cascade.delete_answer(thread['answer_one'], actors['student'])
        assert result.steps == {'comments': 1, 'answer': 1}
        comment = _row(services.store, 'community_comments', thread['comment'])
        assert comment['deletion_reason'] == ANSWER_CASCADE_REASON
        # The post and the other answer are untouched
        assert _row(services.store, 'community_posts', thread['post'])['is_deleted'] is False
        assert _row(services.store, 'community_answers', thread['answer_two'])['is_deleted'] is False

    def test_deleting_accepted_answer_unsolves_post(self, services, actors, thread):
        services.community.accept_answer(thread['answer_one'], actors['author'])
        result = services.cascade.delete_answer(thread['answer_one'], actors['student'])
        assert result.steps == {'comments': 1, 'answer': 1}
        assert _row(services.store, 'community_answers', thread['answer_one'])['is_accepted'] is False
        assert _row(services.store, 'community_posts', thread['post'])['is_solved'] is False
        # The other answer can still be accepted
        services.community.accept_answer(thread['answer_two'], actors['author'])
        assert _row(services.store, 'community_posts', thread['post'])['is_solved'] is True

    def test_comment_delete(self, services, actors, thread):
        result = services.cascade.delete_comment(thread['comment'], actors['author'])
        assert result.steps == {'comment': 1}

    def test_delete_content_rejects_unknown_type(self, services, actors):
        with pytest.raises(ValidationError):
            services.cascade.delete_content('user', 1, actors['admin'], 'Spam')


class TestPermissions:
    """Who may delete, and when a reason is required"""

    def test_other_user_denied(self, services, actors, thread):
        with pytest.raises(PermissionDeniedError):
            services.cascade.delete_post(thread['post'], actors['student'], 'Not mine')

    def test_admin_needs_reason(self, services, actors, thread):
        with pytest.raises(ValidationError) as excinfo:
            services.cascade.delete_post(thread['post'], actors['admin'], '   ')
        assert excinfo.value.message_key == 'validation.reason_required'

    def test_admin_with_reason(self, services, actors, thread):
        services.cascade.delete_post(thread['post'], actors['admin'], 'Off topic')
        post = _row(services.store, 'community_posts', thread['post'])
        assert post['deleted_by'] == actors['admin']['id']
        assert post['deletion_reason'] == 'Off topic'

    def test_author_reason_is_kept(self, services, actors, thread):
        services.cascade.delete_post(thread['post'], actors['author'], 'Found my answer elsewhere')
        post = _row(services.store, 'community_posts', thread['post'])
        assert post['deletion_reason'] == 'Found my answer elsewhere'


class TestPartialCascades:
    """Detection and repair of cascades that stopped part way"""

    def _delete_root_only(self, services, actors, thread):
        services.store.update('community_posts', {'id': thread['post']}, {
            'is_deleted': True,
            'deleted_by': actors['admin']['id'],
            'deleted_at': DELETED_AT,
            'deletion_reason': 'Duplicate question',
        })

    def test_nothing_partial(self, services, thread):
        assert services.cascade.find_partial_cascades() == []

    def test_find_partial_post(self, services, actors, thread):
        self._delete_root_only(services, actors, thread)
        [entry] = services.cascade.find_partial_cascades()
        assert entry['root_type'] == 'post'
        assert entry['root_id'] == thread['post']
        assert entry['deleted_by'] == actors['admin']['id']
        assert entry['live_descendants'] == 3

    def test_repair(self, services, actors, thread):
        self._delete_root_only(services, actors, thread)
        [result] = services.cascade.repair_partial_cascades()
        assert result.steps == {'comments': 1, 'answers': 2, 'post': 0}
        answer = _row(services.store, 'community_answers', thread['answer_one'])
        assert answer['deleted_by'] == actors['admin']['id']
        assert answer['deletion_reason'] == POST_CASCADE_REASON
        assert answer['deleted_at'] == '2026-01-05T10:00:00Z'
        assert services.cascade.find_partial_cascades() == []

    def test_find_partial_answer(self, services, actors, thread):
        services.store.update('community_answers', {'id': thread['answer_one']}, {
            'is_deleted': True,
            'deleted_by': actors['student']['id'],
            'deletion_reason': AUTHOR_DELETE_REASON,
        })
        [entry] = services.cascade.find_partial_cascades()
        assert entry['root_type'] == 'answer'
        assert entry['live_descendants'] == 1
