"""
Tests for edit history
"""
import pytest

from murshid.errors import NotFoundError, StoreError, ValidationError
from murshid.services.versioning import VersioningService, post_snapshot
from murshid.store import QueryStore

ORIGINAL = ('Engineering programs differ a lot across universities, so compare '
            'the course plans and the lab hours before you decide.')
EDITS = [
    ORIGINAL.replace('lab hours', 'lab hours and internships'),
    ORIGINAL.replace('before you decide', 'before you apply'),
    'Compare course plans first.',
]


class BrokenStore(QueryStore):
    """QueryStore whose inserts always fail"""

    def insert(self, table, row):
        raise StoreError(detail='disk full')


@pytest.fixture
def edited_answer(services, actors, thread):
    """answer_one edited three times by its author"""
    for content in [ORIGINAL] + EDITS:
        services.community.update_answer(thread['answer_one'], {'content': content}, actors['student'])
    return thread['answer_one']


class TestVersionHistory:
    """Numbering and history queries"""

    def test_numbers_are_sequential(self, services, edited_answer):
        history = services.versioning.get_version_history('answer', edited_answer)
        assert [v['version_number'] for v in history] == [4, 3, 2, 1]
        assert services.versioning.get_version_count('answer', edited_answer) == 4
        assert services.versioning.has_version_history('answer', edited_answer) is True

    def test_editor_recorded(self, services, actors, edited_answer):
        version = services.versioning.get_version('answer', edited_answer, 2)
        assert version['edited_by'] == actors['student']['id']
        assert version['editor_name'] == 'Omar Student'
        assert version['previous_data'] == {'content': ORIGINAL}

    def test_missing_version(self, services, edited_answer):
        with pytest.raises(NotFoundError):
            services.versioning.get_version('answer', edited_answer, 99)

    def test_no_history(self, services, thread):
        assert services.versioning.get_version_history('post', thread['post']) == []
        assert services.versioning.has_version_history('post', thread['post']) is False
        assert services.versioning.reconstruct_versions('post', thread['post']) == []

    def test_invalid_type(self, services):
        with pytest.raises(ValidationError):
            services.versioning.get_version_history('comment', 1)

    def test_save_returns_none_on_failure(self, app, actors):
        versioning = VersioningService(BrokenStore())
        saved = versioning.save_content_version('answer', 1, {'content': 'a'}, {'content': 'b'}, actors['admin'])
        assert saved is None


class TestReconstruct:
    """Walking history forward from the original"""

    def test_reconstruct_answer(self, services, edited_answer):
        snapshots = services.versioning.reconstruct_versions('answer', edited_answer)
        assert [s['version_number'] for s in snapshots] == [0, 1, 2, 3, 4]
        # Version 0 is the content as first written
        assert snapshots[0]['data'] == {'content': 'Look at the accreditation of each department first.'}
        assert [s['data']['content'] for s in snapshots[1:]] == [ORIGINAL] + EDITS

    def test_reconstruct_post(self, services, actors, thread):
        community = services.community
        before = post_snapshot(community.get_post(thread['post']))
        community.update_post(thread['post'], {'tags': ['advice'], 'content': ORIGINAL}, actors['author'])
        community.update_post(thread['post'], {'title': 'Engineering programs', 'tags': []}, actors['author'])
        after = post_snapshot(community.get_post(thread['post']))

        snapshots = services.versioning.reconstruct_versions('post', thread['post'])
        assert snapshots[0]['data'] == before
        assert snapshots[-1]['data'] == after
        assert snapshots[1]['data']['tags'] == ['advice']
