"""
Community content service: posts, answers, comments and likes.

All reads and writes go through the QueryStore. Counters (likes_count,
answers_count) are derived from live rows at read time; views are disabled
and always reported as 0.
"""
import logging

from murshid.errors import (
    DuplicateError, NotFoundError, PermissionDeniedError, ValidationError,
)
from murshid.models import POST_TYPES
from murshid.store import ILike
from murshid.services.cascade import CascadeService
from murshid.services.screening import screen_submission
from murshid.services.versioning import VersioningService, post_snapshot, answer_snapshot
from murshid.utils.auth_utils import normalize_role

logger = logging.getLogger(__name__)

POSTS = 'community_posts'
ANSWERS = 'community_answers'
COMMENTS = 'community_comments'

TITLE_MAX_LENGTH = 200
POST_CONTENT_MIN_LENGTH = 20

# Listing filter value -> stored post_type
POST_TYPE_FILTERS = {
    'questions': 'question',
    'discussions': 'discussion',
    'announcements': 'announcement',
}

# content type -> (content table, like table, like foreign key, not found key)
LIKE_TARGETS = {
    'post': (POSTS, 'community_post_likes', 'post_id', 'not_found.post'),
    'answer': (ANSWERS, 'community_answer_likes', 'answer_id', 'not_found.answer'),
    'comment': (COMMENTS, 'community_comment_likes', 'comment_id', 'not_found.comment'),
}


def author_snapshot(actor):
    """Author fields copied onto new content; later profile edits do not touch them."""
    university = actor.get('establishment_name')
    if not university and actor.get('university_id') is not None:
        university = str(actor['university_id'])
    return {
        'author_id': actor['id'],
        'author_name': actor.get('name') or 'Anonymous',
        'author_role': normalize_role(actor),
        'author_university': university,
        'author_major': actor.get('track'),
        'author_academic_level': actor.get('level'),
        'author_avatar': actor.get('avatar_url'),
    }


def _clean_text(value):
    return value.strip() if isinstance(value, str) else ''


def _clean_tags(value, field):
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ValidationError('validation.invalid_choice', field=field, value=value)
    tags = []
    for tag in value:
        tag = str(tag).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def validate_post_fields(title, content):
    if not title:
        raise ValidationError('validation.required', field='title')
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError('validation.too_long', field='title', limit=TITLE_MAX_LENGTH)
    if not content:
        raise ValidationError('validation.required', field='content')
    if len(content) < POST_CONTENT_MIN_LENGTH:
        raise ValidationError('validation.content_too_short', limit=POST_CONTENT_MIN_LENGTH)


def validate_body(content):
    if not content:
        raise ValidationError('validation.required', field='content')


def build_comment_tree(comments):
    """
    One-level thread: top-level comments with their replies, oldest first.
    Replies whose parent is not in the list (hidden or deleted) are dropped.
    """
    by_id = {}
    roots = []
    for comment in comments:
        node = dict(comment)
        node['replies'] = []
        by_id[node['id']] = node
    for comment in comments:
        node = by_id[comment['id']]
        parent_id = node.get('parent_comment_id')
        if parent_id is None:
            roots.append(node)
        elif parent_id in by_id:
            by_id[parent_id]['replies'].append(node)
    return roots


class CommunityService:
    def __init__(self, store, versioning=None, cascade=None):
        self.store = store
        self.versioning = versioning or VersioningService(store)
        self.cascade = cascade or CascadeService(store)

    # --- counters ---

    def _like_counts(self, like_table, key, ids):
        counts = {}
        for like in self.store.select(like_table, {key: list(ids)}):
            counts[like[key]] = counts.get(like[key], 0) + 1
        return counts

    def _with_post_counters(self, posts):
        if not posts:
            return []
        ids = [post['id'] for post in posts]
        likes = self._like_counts('community_post_likes', 'post_id', ids)
        answers = {}
        for answer in self.store.select(ANSWERS, {'post_id': ids, 'is_deleted': False}):
            answers[answer['post_id']] = answers.get(answer['post_id'], 0) + 1
        for post in posts:
            post['likes_count'] = likes.get(post['id'], 0)
            post['answers_count'] = answers.get(post['id'], 0)
            post['views_count'] = 0
        return posts

    def _with_like_counters(self, rows, like_table, key):
        if not rows:
            return []
        likes = self._like_counts(like_table, key, [row['id'] for row in rows])
        for row in rows:
            row['likes_count'] = likes.get(row['id'], 0)
        return rows

    # --- lookups ---

    def _get_live(self, table, content_id, not_found_key):
        row = self.store.select_one(table, {'id': content_id})
        if row is None or row['is_deleted']:
            raise NotFoundError(not_found_key)
        return row

    @staticmethod
    def _require_author(row, actor):
        if row['author_id'] != actor['id']:
            raise PermissionDeniedError('permission.not_owner')

    # --- posts ---

    def list_posts(self, search=None, post_type=None, include_deleted=False, limit=None):
        filters = {} if include_deleted else {'is_deleted': False}
        if post_type and post_type != 'all':
            if post_type not in POST_TYPE_FILTERS:
                raise ValidationError('validation.invalid_choice', field='type', value=post_type)
            filters['post_type'] = POST_TYPE_FILTERS[post_type]
        any_of = None
        search = _clean_text(search)
        if search:
            any_of = {'title': ILike(search), 'content': ILike(search)}
        posts = self.store.select(POSTS, filters, any_of=any_of, order_by='created_at',
                                  descending=True, limit=limit)
        return self._with_post_counters(posts)

    def list_posts_for_admin(self, search=None, post_type=None):
        return self.list_posts(search=search, post_type=post_type, include_deleted=True)

    def get_post(self, post_id, include_deleted=False):
        post = self.store.select_one(POSTS, {'id': post_id})
        if post is None or (post['is_deleted'] and not include_deleted):
            raise NotFoundError('not_found.post')
        return self._with_post_counters([post])[0]

    def create_post(self, payload, actor, language='en'):
        title = _clean_text(payload.get('title'))
        content = _clean_text(payload.get('content'))
        validate_post_fields(title, content)
        post_type = payload.get('post_type') or 'question'
        if post_type not in POST_TYPES:
            raise ValidationError('validation.invalid_choice', field='post_type', value=post_type)
        # Students may only ask questions
        if normalize_role(actor) == 'student':
            post_type = 'question'
        warnings = screen_submission({'title': title, 'content': content}, language)

        row = {
            'title': title,
            'content': content,
            'post_type': post_type,
            'tags': _clean_tags(payload.get('tags'), 'tags'),
            'major_tags': _clean_tags(payload.get('major_tags'), 'major_tags'),
            'university_tags': _clean_tags(payload.get('university_tags'), 'university_tags'),
        }
        row.update(author_snapshot(actor))
        post = self.store.insert(POSTS, row)
        logger.info(f"User {actor['id']} created post {post['id']} ({post_type})")
        post = self._with_post_counters([post])[0]
        post['warnings'] = warnings
        return post

    def update_post(self, post_id, payload, actor, language='en'):
        post = self._get_live(POSTS, post_id, 'not_found.post')
        self._require_author(post, actor)
        before = post_snapshot(post)

        title = _clean_text(payload['title']) if 'title' in payload else post['title']
        content = _clean_text(payload['content']) if 'content' in payload else post['content']
        validate_post_fields(title, content)
        warnings = screen_submission({'title': title, 'content': content}, language)

        after = {
            'title': title,
            'content': content,
            'tags': _clean_tags(payload['tags'], 'tags') if 'tags' in payload else before['tags'],
            'major_tags': (_clean_tags(payload['major_tags'], 'major_tags')
                           if 'major_tags' in payload else before['major_tags']),
            'university_tags': (_clean_tags(payload['university_tags'], 'university_tags')
                                if 'university_tags' in payload else before['university_tags']),
        }
        if after != before:
            self.versioning.save_content_version('post', post['id'], before, after, actor)
            self.store.update(POSTS, {'id': post['id']}, after)
        post = self.get_post(post['id'])
        post['warnings'] = warnings
        return post

    def delete_post(self, post_id, actor, reason=None):
        return self.cascade.delete_post(post_id, actor, reason)

    def posts_by_author(self, author_id):
        posts = self.store.select(POSTS, {'author_id': author_id}, order_by='created_at', descending=True)
        return self._with_post_counters(posts)

    # --- answers ---

    def list_answers(self, post_id):
        answers = self.store.select(ANSWERS, {'post_id': post_id, 'is_deleted': False},
                                    order_by='created_at', descending=True)
        return self._with_like_counters(answers, 'community_answer_likes', 'answer_id')

    def get_answer(self, answer_id):
        answer = self._get_live(ANSWERS, answer_id, 'not_found.answer')
        return self._with_like_counters([answer], 'community_answer_likes', 'answer_id')[0]

    def create_answer(self, post_id, payload, actor, language='en'):
        self._get_live(POSTS, post_id, 'not_found.post')
        content = _clean_text(payload.get('content'))
        validate_body(content)
        warnings = screen_submission({'content': content}, language)

        row = {'post_id': post_id, 'content': content, 'is_deleted': False}
        row.update(author_snapshot(actor))
        answer = self.store.insert(ANSWERS, row)
        logger.info(f"User {actor['id']} answered post {post_id} with answer {answer['id']}")
        answer['likes_count'] = 0
        answer['warnings'] = warnings
        return answer

    def update_answer(self, answer_id, payload, actor, language='en'):
        answer = self._get_live(ANSWERS, answer_id, 'not_found.answer')
        self._require_author(answer, actor)
        content = _clean_text(payload.get('content'))
        validate_body(content)
        warnings = screen_submission({'content': content}, language)

        before = answer_snapshot(answer)
        after = {'content': content}
        if after != before:
            self.versioning.save_content_version('answer', answer['id'], before, after, actor)
            self.store.update(ANSWERS, {'id': answer['id']}, after)
        answer = self.get_answer(answer['id'])
        answer['warnings'] = warnings
        return answer

    def delete_answer(self, answer_id, actor, reason=None):
        return self.cascade.delete_answer(answer_id, actor, reason)

    def answers_by_author(self, author_id):
        answers = self.store.select(ANSWERS, {'author_id': author_id}, order_by='created_at', descending=True)
        return self._with_like_counters(answers, 'community_answer_likes', 'answer_id')

    def _answer_for_acceptance(self, answer_id, actor, post_id=None):
        answer = self._get_live(ANSWERS, answer_id, 'not_found.answer')
        if post_id is not None and answer['post_id'] != post_id:
            raise ValidationError('validation.answer_not_in_post')
        post = self._get_live(POSTS, answer['post_id'], 'not_found.post')
        if post['author_id'] != actor['id'] and not actor.get('is_admin'):
            raise PermissionDeniedError('permission.not_post_author')
        return answer, post

    def accept_answer(self, answer_id, actor, post_id=None):
        """Accept one answer: clear accepted siblings, accept, mark the post solved."""
        answer, post = self._answer_for_acceptance(answer_id, actor, post_id)
        self.store.update(ANSWERS, {'post_id': post['id'], 'is_accepted': True}, {'is_accepted': False})
        self.store.update(ANSWERS, {'id': answer['id']}, {'is_accepted': True})
        self.store.update(POSTS, {'id': post['id']}, {'is_solved': True})
        logger.info(f"User {actor['id']} accepted answer {answer['id']} on post {post['id']}")
        return self.get_answer(answer['id'])

    def unaccept_answer(self, answer_id, actor, post_id=None):
        answer, post = self._answer_for_acceptance(answer_id, actor, post_id)
        self.store.update(ANSWERS, {'id': answer['id']}, {'is_accepted': False})
        if self.store.count(ANSWERS, {'post_id': post['id'], 'is_accepted': True}) == 0:
            self.store.update(POSTS, {'id': post['id']}, {'is_solved': False})
        return self.get_answer(answer['id'])

    # --- comments ---

    def list_comments(self, answer_id):
        comments = self.store.select(COMMENTS, {'answer_id': answer_id, 'is_deleted': False},
                                     order_by='created_at')
        comments = self._with_like_counters(comments, 'community_comment_likes', 'comment_id')
        return build_comment_tree(comments)

    def create_comment(self, answer_id, payload, actor, language='en'):
        self._get_live(ANSWERS, answer_id, 'not_found.answer')
        content = _clean_text(payload.get('content'))
        validate_body(content)

        parent_id = payload.get('parent_comment_id')
        if parent_id is not None:
            parent = self._get_live(COMMENTS, parent_id, 'not_found.comment')
            if parent['answer_id'] != answer_id:
                raise ValidationError('validation.parent_comment_mismatch')
            # Threads are one level deep: a reply to a reply joins the top-level thread
            parent_id = parent['parent_comment_id'] or parent['id']
        warnings = screen_submission({'content': content}, language)

        row = {'answer_id': answer_id, 'parent_comment_id': parent_id, 'content': content}
        row.update(author_snapshot(actor))
        comment = self.store.insert(COMMENTS, row)
        comment['likes_count'] = 0
        comment['replies'] = []
        comment['warnings'] = warnings
        return comment

    def update_comment(self, comment_id, payload, actor, language='en'):
        comment = self._get_live(COMMENTS, comment_id, 'not_found.comment')
        self._require_author(comment, actor)
        content = _clean_text(payload.get('content'))
        validate_body(content)
        warnings = screen_submission({'content': content}, language)
        self.store.update(COMMENTS, {'id': comment['id']}, {'content': content})
        comment = self._get_live(COMMENTS, comment['id'], 'not_found.comment')
        comment['warnings'] = warnings
        return comment

    def delete_comment(self, comment_id, actor, reason=None):
        return self.cascade.delete_comment(comment_id, actor, reason)

    def comments_by_author(self, author_id):
        comments = self.store.select(COMMENTS, {'author_id': author_id}, order_by='created_at', descending=True)
        answer_ids = {comment['answer_id'] for comment in comments}
        post_of = {answer['id']: answer['post_id'] for answer in self.store.select(ANSWERS, {'id': list(answer_ids)})}
        for comment in comments:
            comment['post_id'] = post_of.get(comment['answer_id'])
        return comments

    # --- likes ---

    def _like_target(self, content_type):
        if content_type not in LIKE_TARGETS:
            raise ValidationError('validation.invalid_choice', field='content_type', value=content_type)
        return LIKE_TARGETS[content_type]

    def like(self, content_type, content_id, actor):
        """Idempotent: liking twice leaves one like."""
        table, like_table, key, not_found_key = self._like_target(content_type)
        self._get_live(table, content_id, not_found_key)
        try:
            self.store.insert(like_table, {key: content_id, 'user_id': actor['id']})
        except DuplicateError:
            logger.debug(f"User {actor['id']} already liked {content_type} {content_id}")
        return self.like_status(content_type, content_id, actor['id'])

    def unlike(self, content_type, content_id, actor):
        _, like_table, key, _ = self._like_target(content_type)
        self.store.delete(like_table, {key: content_id, 'user_id': actor['id']})
        return self.like_status(content_type, content_id, actor['id'])

    def has_liked(self, content_type, content_id, user_id):
        _, like_table, key, _ = self._like_target(content_type)
        return self.store.count(like_table, {key: content_id, 'user_id': user_id}) > 0

    def like_status(self, content_type, content_id, user_id):
        _, like_table, key, _ = self._like_target(content_type)
        return {
            'liked': self.has_liked(content_type, content_id, user_id),
            'likes_count': self.store.count(like_table, {key: content_id}),
        }

    def liked_items(self, user_id):
        """Live content the user liked, most recent like first."""
        result = {}
        for content_type, (table, like_table, key, _) in LIKE_TARGETS.items():
            likes = self.store.select(like_table, {'user_id': user_id}, order_by='created_at', descending=True)
            ids = [like[key] for like in likes]
            rows = {row['id']: row for row in self.store.select(table, {'id': ids, 'is_deleted': False})}
            result[content_type + 's'] = [rows[i] for i in ids if i in rows]
        self._with_post_counters(result['posts'])
        return result
