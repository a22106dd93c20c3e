"""
Soft-delete cascade service

Deleting a post marks, in order:
  1. every comment under any of its answers   (reason "Post deleted")
  2. every answer of the post                 (reason "Post deleted")
  3. the post itself                          (caller's reason)
Deleting an answer marks its comments ("Answer deleted") then the answer, and
releases its acceptance so the post is no longer solved.
Comments are leaves.

Every update is conditioned on is_deleted = false, so audit fields are
written once and a repeated call finishes a cascade that stopped part way.
Steps are committed one by one; a failing step raises CascadeError naming the
steps that already completed and nothing is rolled back.
"""
import logging
from collections import OrderedDict
from datetime import datetime

from murshid.errors import (
    CascadeError, NotFoundError, PermissionDeniedError, StoreError, ValidationError,
)

logger = logging.getLogger(__name__)

POST_CASCADE_REASON = 'Post deleted'
ANSWER_CASCADE_REASON = 'Answer deleted'
AUTHOR_DELETE_REASON = 'Deleted by author'

POSTS = 'community_posts'
ANSWERS = 'community_answers'
COMMENTS = 'community_comments'


class CascadeResult:
    """How many rows each cascade step moved from live to deleted."""

    def __init__(self, root_type, root_id, deleted_by, reason):
        self.root_type = root_type
        self.root_id = root_id
        self.deleted_by = deleted_by
        self.reason = reason
        self.steps = OrderedDict()

    @property
    def total(self):
        return sum(self.steps.values())

    @property
    def root_changed(self):
        """False when the root was already deleted before this call."""
        return self.steps.get(self.root_type, 0) > 0

    def to_dict(self):
        return {
            'root_type': self.root_type,
            'root_id': self.root_id,
            'deleted_by': self.deleted_by,
            'reason': self.reason,
            'steps': dict(self.steps),
            'total': self.total,
        }

    def __repr__(self):
        return f'<CascadeResult {self.root_type}:{self.root_id} {dict(self.steps)}>'


def _parse_timestamp(value):
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value.rstrip('Z'))


class CascadeService:
    def __init__(self, store):
        self.store = store

    # --- permission and reason resolution ---

    @staticmethod
    def resolve_reason(root, actor, reason):
        """Author or admin may delete; admins removing others' content must say why."""
        reason = (reason or '').strip() or None
        is_author = root.get('author_id') == actor.get('id')
        if not is_author and not actor.get('is_admin'):
            raise PermissionDeniedError('permission.not_owner')
        if reason:
            return reason
        if not is_author:
            raise ValidationError('validation.reason_required')
        return AUTHOR_DELETE_REASON

    def _load_root(self, table, root_id, not_found_key):
        try:
            root = self.store.select_one(table, {'id': root_id})
        except StoreError:
            logger.error(f"Cascade could not load {table} id={root_id}")
            raise
        if root is None:
            raise NotFoundError(not_found_key)
        return root

    # --- step runner ---

    def _mark_deleted(self, table, filters, actor_id, reason, timestamp):
        live = dict(filters)
        live['is_deleted'] = False
        return self.store.update(table, live, {
            'is_deleted': True,
            'deleted_at': timestamp,
            'deleted_by': actor_id,
            'deletion_reason': reason,
        })

    def _run(self, result, steps):
        completed = []
        for name, step in steps:
            try:
                outcome = step()
            except CascadeError:
                raise
            except StoreError as e:
                logger.error(
                    f"Cascade {result.root_type}:{result.root_id} failed at step '{name}' "
                    f"after {completed}: {e.detail or e}"
                )
                raise CascadeError(result.root_type, result.root_id, name, completed,
                                   detail=e.detail) from e
            if isinstance(outcome, int):
                result.steps[name] = outcome
            completed.append(name)
        logger.info(f"Cascade {result.root_type}:{result.root_id} by user {result.deleted_by}: "
                    f"{dict(result.steps)}")
        return result

    # --- cascades without permission checks (also used by repair) ---

    def cascade_post(self, post_id, actor_id, reason, timestamp=None):
        timestamp = timestamp or datetime.utcnow()
        result = CascadeResult('post', post_id, actor_id, reason)
        collected = {}

        def collect_answers():
            rows = self.store.select(ANSWERS, {'post_id': post_id})
            collected['answer_ids'] = [row['id'] for row in rows]

        steps = [
            ('collect_answers', collect_answers),
            ('comments', lambda: self._mark_deleted(
                COMMENTS, {'answer_id': collected['answer_ids']}, actor_id, POST_CASCADE_REASON, timestamp)),
            ('answers', lambda: self._mark_deleted(
                ANSWERS, {'post_id': post_id}, actor_id, POST_CASCADE_REASON, timestamp)),
            ('post', lambda: self._mark_deleted(
                POSTS, {'id': post_id}, actor_id, reason, timestamp)),
        ]
        return self._run(result, steps)

    def cascade_answer(self, answer_id, actor_id, reason, timestamp=None):
        timestamp = timestamp or datetime.utcnow()
        result = CascadeResult('answer', answer_id, actor_id, reason)

        def release_acceptance():
            # A deleted answer cannot stay accepted, nor keep its post solved
            answer = self.store.select_one(ANSWERS, {'id': answer_id})
            if answer is None or not answer['is_accepted']:
                return
            self.store.update(ANSWERS, {'id': answer_id}, {'is_accepted': False})
            self.store.update(POSTS, {'id': answer['post_id'], 'is_deleted': False}, {'is_solved': False})

        steps = [
            ('comments', lambda: self._mark_deleted(
                COMMENTS, {'answer_id': answer_id}, actor_id, ANSWER_CASCADE_REASON, timestamp)),
            ('answer', lambda: self._mark_deleted(
                ANSWERS, {'id': answer_id}, actor_id, reason, timestamp)),
            ('release_acceptance', release_acceptance),
        ]
        return self._run(result, steps)

    def cascade_comment(self, comment_id, actor_id, reason, timestamp=None):
        timestamp = timestamp or datetime.utcnow()
        result = CascadeResult('comment', comment_id, actor_id, reason)
        steps = [
            ('comment', lambda: self._mark_deleted(
                COMMENTS, {'id': comment_id}, actor_id, reason, timestamp)),
        ]
        return self._run(result, steps)

    # --- public entry points ---

    def delete_post(self, post_id, actor, reason=None):
        post = self._load_root(POSTS, post_id, 'not_found.post')
        reason = self.resolve_reason(post, actor, reason)
        return self.cascade_post(post['id'], actor['id'], reason)

    def delete_answer(self, answer_id, actor, reason=None):
        answer = self._load_root(ANSWERS, answer_id, 'not_found.answer')
        reason = self.resolve_reason(answer, actor, reason)
        return self.cascade_answer(answer['id'], actor['id'], reason)

    def delete_comment(self, comment_id, actor, reason=None):
        comment = self._load_root(COMMENTS, comment_id, 'not_found.comment')
        reason = self.resolve_reason(comment, actor, reason)
        return self.cascade_comment(comment['id'], actor['id'], reason)

    def delete_content(self, content_type, content_id, actor, reason=None):
        handlers = {
            'post': self.delete_post,
            'answer': self.delete_answer,
            'comment': self.delete_comment,
        }
        if content_type not in handlers:
            raise ValidationError('validation.invalid_choice', field='content_type', value=content_type)
        return handlers[content_type](content_id, actor, reason)

    # --- partial cascade detection and repair ---

    def find_partial_cascades(self):
        """Deleted posts and answers that still have live descendants."""
        partial = []

        deleted_posts = self.store.select(POSTS, {'is_deleted': True}, order_by='id')
        if deleted_posts:
            post_ids = [post['id'] for post in deleted_posts]
            answers = self.store.select(ANSWERS, {'post_id': post_ids})
            answer_post = {answer['id']: answer['post_id'] for answer in answers}
            live_by_post = {}
            for answer in answers:
                if not answer['is_deleted']:
                    live_by_post[answer['post_id']] = live_by_post.get(answer['post_id'], 0) + 1
            for comment in self.store.select(COMMENTS, {'answer_id': list(answer_post), 'is_deleted': False}):
                post_id = answer_post[comment['answer_id']]
                live_by_post[post_id] = live_by_post.get(post_id, 0) + 1
            for post in deleted_posts:
                if live_by_post.get(post['id']):
                    partial.append(self._partial_entry('post', post, live_by_post[post['id']]))

        deleted_answers = self.store.select(ANSWERS, {'is_deleted': True}, order_by='id')
        if deleted_answers:
            live_by_answer = {}
            live_comments = self.store.select(
                COMMENTS, {'answer_id': [a['id'] for a in deleted_answers], 'is_deleted': False})
            for comment in live_comments:
                live_by_answer[comment['answer_id']] = live_by_answer.get(comment['answer_id'], 0) + 1
            for answer in deleted_answers:
                if live_by_answer.get(answer['id']):
                    partial.append(self._partial_entry('answer', answer, live_by_answer[answer['id']]))

        return partial

    @staticmethod
    def _partial_entry(root_type, row, live_descendants):
        return {
            'root_type': root_type,
            'root_id': row['id'],
            'deleted_by': row['deleted_by'],
            'deleted_at': row['deleted_at'],
            'deletion_reason': row['deletion_reason'],
            'live_descendants': live_descendants,
        }

    def repair_partial_cascades(self):
        """Re-run every partial cascade as its original deleting actor."""
        results = []
        for entry in self.find_partial_cascades():
            cascade = self.cascade_post if entry['root_type'] == 'post' else self.cascade_answer
            result = cascade(entry['root_id'], entry['deleted_by'], entry['deletion_reason'],
                             timestamp=_parse_timestamp(entry['deleted_at']))
            results.append(result)
        return results
