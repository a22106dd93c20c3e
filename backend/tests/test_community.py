"""
Tests for posts, answers, comments and likes
"""
import pytest

from murshid import db
from murshid.errors import DuplicateError, NotFoundError, PermissionDeniedError, ValidationError
from murshid.models import CommunityAnswer

POST_TITLE = 'Choosing a university for engineering'
POST_CONTENT = 'I would like advice on which program offers the strongest engineering courses.'


class TestPosts:
    """Post creation, listing and editing"""

    def test_create_snapshots_author(self, services, actors):
        post = services.community.create_post(
            {'title': POST_TITLE, 'content': POST_CONTENT, 'tags': ['advice', 'advice', ' planning ']},
            actors['author'])
        assert post['author_name'] == 'Sara Author'
        assert post['author_role'] == 'student'
        assert post['author_university'] == 'King Saud University'
        assert post['author_major'] == 'Computer Science'
        assert post['tags'] == ['advice', 'planning']
        assert post['likes_count'] == 0
        assert post['answers_count'] == 0
        assert post['views_count'] == 0
        assert post['warnings'] == []

    def test_student_posts_are_questions(self, services, actors):
        post = services.community.create_post(
            {'title': POST_TITLE, 'content': POST_CONTENT, 'post_type': 'announcement'}, actors['author'])
        assert post['post_type'] == 'question'

    def test_specialist_may_announce(self, services, actors):
        post = services.community.create_post(
            {'title': 'Open day next week', 'content': POST_CONTENT, 'post_type': 'announcement'},
            actors['specialist'])
        assert post['post_type'] == 'announcement'
        assert post['author_role'] == 'specialist'

    @pytest.mark.parametrize('payload, key', [
        ({'title': '', 'content': POST_CONTENT}, 'validation.required'),
        ({'title': 'x' * 201, 'content': POST_CONTENT}, 'validation.too_long'),
        ({'title': POST_TITLE, 'content': 'Too short'}, 'validation.content_too_short'),
        ({'title': POST_TITLE, 'content': POST_CONTENT, 'post_type': 'poll'}, 'validation.invalid_choice'),
    ])
    def test_invalid_posts(self, services, actors, payload, key):
        with pytest.raises(ValidationError) as excinfo:
            services.community.create_post(payload, actors['author'])
        assert excinfo.value.message_key == key

    def test_blocked_content_is_not_stored(self, services, actors):
        with pytest.raises(ValidationError):
            services.community.create_post(
                {'title': POST_TITLE, 'content': 'This offer is a scam, do not trust it at all.'},
                actors['author'])
        assert services.store.count('community_posts') == 0

    def test_list_counts_and_search(self, services, actors, thread):
        services.community.like('post', thread['post'], actors['student'])
        [post] = services.community.list_posts(search='ENGINEERING')
        assert post['id'] == thread['post']
        assert post['answers_count'] == 2
        assert post['likes_count'] == 1
        assert services.community.list_posts(search='astronomy') == []
        assert services.community.list_posts(post_type='announcements') == []
        with pytest.raises(ValidationError):
            services.community.list_posts(post_type='polls')

    def test_deleted_posts_hidden(self, services, actors, thread):
        services.community.delete_post(thread['post'], actors['author'])
        assert services.community.list_posts() == []
        with pytest.raises(NotFoundError):
            services.community.get_post(thread['post'])
        [post] = services.community.list_posts_for_admin()
        assert post['is_deleted'] is True
        assert services.community.get_post(thread['post'], include_deleted=True)['id'] == thread['post']

    def test_update_by_author_writes_version(self, services, actors, thread):
        post = services.community.update_post(thread['post'], {'title': 'Choosing a university'}, actors['author'])
        assert post['title'] == 'Choosing a university'
        [version] = services.versioning.get_version_history('post', thread['post'])
        assert version['version_number'] == 1
        assert version['previous_data']['title'] == POST_TITLE

    def test_unchanged_update_writes_no_version(self, services, actors, thread):
        services.community.update_post(thread['post'], {'title': POST_TITLE}, actors['author'])
        assert services.versioning.get_version_count('post', thread['post']) == 0

    def test_update_by_other_denied(self, services, actors, thread):
        with pytest.raises(PermissionDeniedError):
            services.community.update_post(thread['post'], {'title': 'Mine now'}, actors['student'])


class TestAnswers:
    """Answers and the accepted answer rule"""

    def test_answers_newest_first(self, services, thread):
        answers = services.community.list_answers(thread['post'])
        assert [answer['id'] for answer in answers] == [thread['answer_two'], thread['answer_one']]

    def test_answer_on_deleted_post(self, services, actors, thread):
        services.community.delete_post(thread['post'], actors['author'])
        with pytest.raises(NotFoundError):
            services.community.create_answer(thread['post'], {'content': 'Late reply'}, actors['student'])

    def test_accept_marks_solved(self, services, actors, thread):
        answer = services.community.accept_answer(thread['answer_one'], actors['author'])
        assert answer['is_accepted'] is True
        assert services.community.get_post(thread['post'])['is_solved'] is True

    def test_accepting_another_moves_acceptance(self, services, actors, thread):
        services.community.accept_answer(thread['answer_one'], actors['author'])
        services.community.accept_answer(thread['answer_two'], actors['author'])
        accepted = services.store.select('community_answers', {'post_id': thread['post'], 'is_accepted': True})
        assert [answer['id'] for answer in accepted] == [thread['answer_two']]

    def test_unaccept_clears_solved(self, services, actors, thread):
        services.community.accept_answer(thread['answer_one'], actors['author'])
        services.community.unaccept_answer(thread['answer_one'], actors['author'])
        assert services.community.get_post(thread['post'])['is_solved'] is False

    def test_only_post_author_or_admin_accepts(self, services, actors, thread):
        with pytest.raises(PermissionDeniedError) as excinfo:
            services.community.accept_answer(thread['answer_one'], actors['student'])
        assert excinfo.value.message_key == 'permission.not_post_author'
        services.community.accept_answer(thread['answer_one'], actors['admin'])

    def test_answer_must_belong_to_post(self, services, actors, thread):
        with pytest.raises(ValidationError):
            services.community.accept_answer(thread['answer_one'], actors['author'], post_id=thread['post'] + 1)

    def test_index_allows_one_accepted_answer(self, services, thread):
        """The partial unique index rejects a second accepted answer"""
        services.store.update('community_answers', {'id': thread['answer_one']}, {'is_accepted': True})
        with pytest.raises(DuplicateError):
            services.store.update('community_answers', {'id': thread['answer_two']}, {'is_accepted': True})
        assert db.session.query(CommunityAnswer).filter_by(is_accepted=True).count() == 1

    def test_edit_answer_versioned(self, services, actors, thread):
        services.community.update_answer(thread['answer_one'], {'content': 'Check accreditation first.'},
                                         actors['student'])
        assert services.versioning.get_version_count('answer', thread['answer_one']) == 1


class TestComments:
    """Threaded comments"""

    def test_reply_threading(self, services, actors, thread):
        reply = services.community.create_comment(
            thread['answer_one'], {'content': 'Glad it helped.', 'parent_comment_id': thread['comment']},
            actors['student'])
        nested = services.community.create_comment(
            thread['answer_one'], {'content': 'Me too.', 'parent_comment_id': reply['id']},
            actors['specialist'])
        # A reply to a reply joins the top-level thread
        assert nested['parent_comment_id'] == thread['comment']

        [root] = services.community.list_comments(thread['answer_one'])
        assert root['id'] == thread['comment']
        assert [r['id'] for r in root['replies']] == [reply['id'], nested['id']]

    def test_parent_from_other_answer(self, services, actors, thread):
        with pytest.raises(ValidationError) as excinfo:
            services.community.create_comment(
                thread['answer_two'], {'content': 'Wrong thread', 'parent_comment_id': thread['comment']},
                actors['student'])
        assert excinfo.value.message_key == 'validation.parent_comment_mismatch'

    def test_comments_by_author_carry_post(self, services, actors, thread):
        [comment] = services.community.comments_by_author(actors['author']['id'])
        assert comment['post_id'] == thread['post']

    def test_update_comment(self, services, actors, thread):
        comment = services.community.update_comment(thread['comment'], {'content': 'Thanks again.'},
                                                    actors['author'])
        assert comment['content'] == 'Thanks again.'
        with pytest.raises(PermissionDeniedError):
            services.community.update_comment(thread['comment'], {'content': 'No.'}, actors['student'])


class TestLikes:
    """Likes are idempotent per user"""

    def test_like_twice(self, services, actors, thread):
        services.community.like('answer', thread['answer_one'], actors['author'])
        status = services.community.like('answer', thread['answer_one'], actors['author'])
        assert status == {'liked': True, 'likes_count': 1}

    def test_unlike(self, services, actors, thread):
        services.community.like('comment', thread['comment'], actors['student'])
        status = services.community.unlike('comment', thread['comment'], actors['student'])
        assert status == {'liked': False, 'likes_count': 0}

    def test_liked_items_skip_deleted(self, services, actors, thread):
        services.community.like('post', thread['post'], actors['student'])
        services.community.like('answer', thread['answer_two'], actors['student'])
        services.community.delete_answer(thread['answer_two'], actors['specialist'])
        liked = services.community.liked_items(actors['student']['id'])
        assert [post['id'] for post in liked['posts']] == [thread['post']]
        assert liked['answers'] == []
        assert liked['comments'] == []

    def test_unknown_like_target(self, services, actors):
        with pytest.raises(ValidationError):
            services.community.like('report', 1, actors['student'])


class TestAcceptThenDeleteScenario:
    """Accept A1, accept A2, delete the post"""

    def test_scenario(self, services, actors, thread):
        community = services.community
        community.accept_answer(thread['answer_one'], actors['author'])
        community.accept_answer(thread['answer_two'], actors['author'])
        answers = {a['id']: a for a in services.store.select('community_answers', {'post_id': thread['post']})}
        assert answers[thread['answer_one']]['is_accepted'] is False
        assert answers[thread['answer_two']]['is_accepted'] is True

        community.delete_post(thread['post'], actors['author'])
        for answer in services.store.select('community_answers', {'post_id': thread['post']}):
            assert answer['is_deleted'] is True
            assert answer['deletion_reason'] == 'Post deleted'
        assert community.get_post(thread['post'], include_deleted=True)['answers_count'] == 0
