"""
Generic structured query store.

Services never touch the ORM directly: they address tables by name and pass
JSON-shaped dicts in and out through QueryStore. Every statement commits on
its own, so multi-step operations (cascades, accept answer) are sequences of
independently committed writes.

Filter predicates:
- plain value       -> column = value (None -> IS NULL)
- list/tuple/set    -> column IN (...)
- ILike('text')     -> case-insensitive substring match
- AtLeast(value)    -> column >= value (creation windows)
- any_of={...}      -> OR group of the above
"""
import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from murshid import db
from murshid.errors import StoreError, DuplicateError
from murshid.models import (
    User, University, Major,
    CommunityPost, CommunityAnswer, CommunityComment,
    CommunityPostLike, CommunityAnswerLike, CommunityCommentLike,
    CommunityReport, ContentVersion,
)

logger = logging.getLogger(__name__)

TABLES = {
    'users': User,
    'universities': University,
    'majors': Major,
    'community_posts': CommunityPost,
    'community_answers': CommunityAnswer,
    'community_comments': CommunityComment,
    'community_post_likes': CommunityPostLike,
    'community_answer_likes': CommunityAnswerLike,
    'community_comment_likes': CommunityCommentLike,
    'community_reports': CommunityReport,
    'content_versions': ContentVersion,
}


class ILike:
    """Case-insensitive substring predicate."""

    def __init__(self, text):
        self.text = text or ''

    def __repr__(self):
        return f'ILike({self.text!r})'


class AtLeast:
    """Lower bound predicate (column >= value)."""

    def __init__(self, value):
        self.value = value

    def __repr__(self):
        return f'AtLeast({self.value!r})'


def _escape_like(text):
    return text.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


class QueryStore:
    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session or db.session

    # --- predicate building ---

    def _model(self, table):
        model = TABLES.get(table)
        if model is None:
            raise StoreError(detail=f'unknown table {table!r}')
        return model

    def _column(self, model, name):
        column = getattr(model, name, None)
        if column is None:
            raise StoreError(detail=f'unknown column {model.__tablename__}.{name}')
        return column

    def _predicate(self, model, name, value):
        column = self._column(model, name)
        if isinstance(value, ILike):
            return column.ilike(f'%{_escape_like(value.text)}%', escape='\\')
        if isinstance(value, AtLeast):
            return column >= value.value
        if isinstance(value, (list, tuple, set, frozenset)):
            return column.in_(list(value))
        if value is None:
            return column.is_(None)
        return column == value

    def _query(self, table, filters=None, any_of=None):
        model = self._model(table)
        query = self.session.query(model)
        for name, value in (filters or {}).items():
            query = query.filter(self._predicate(model, name, value))
        if any_of:
            query = query.filter(or_(*[self._predicate(model, name, value)
                                       for name, value in any_of.items()]))
        return model, query

    @staticmethod
    def _empty_in(filters):
        # IN () matches nothing; skip the round trip
        return any(isinstance(v, (list, tuple, set, frozenset)) and not v
                   for v in (filters or {}).values())

    def _fail(self, action, table, error):
        self.session.rollback()
        if isinstance(error, IntegrityError):
            logger.warning(f"Store {action} on {table} violated a constraint: {error.orig}")
            raise DuplicateError(detail=str(error.orig)) from error
        logger.error(f"Store {action} on {table} failed: {error}", exc_info=True)
        raise StoreError(detail=str(error)) from error

    # --- read operations ---

    def select(self, table, filters=None, any_of=None, order_by=None, descending=False, limit=None):
        if self._empty_in(filters):
            return []
        try:
            model, query = self._query(table, filters, any_of)
            if order_by:
                names = [order_by] if isinstance(order_by, str) else list(order_by)
                for name in names:
                    column = self._column(model, name)
                    query = query.order_by(column.desc() if descending else column.asc())
            if limit:
                query = query.limit(limit)
            return [row.to_dict() for row in query.all()]
        except SQLAlchemyError as e:
            self._fail('select', table, e)

    def select_one(self, table, filters):
        rows = self.select(table, filters, limit=1)
        return rows[0] if rows else None

    def count(self, table, filters=None, any_of=None):
        if self._empty_in(filters):
            return 0
        try:
            _, query = self._query(table, filters, any_of)
            return query.count()
        except SQLAlchemyError as e:
            self._fail('count', table, e)

    def max_value(self, table, column, filters=None):
        try:
            model, query = self._query(table, filters)
            return query.with_entities(db.func.max(self._column(model, column))).scalar()
        except SQLAlchemyError as e:
            self._fail('max', table, e)

    # --- write operations ---

    def insert(self, table, row):
        model = self._model(table)
        try:
            instance = model(**row)
            self.session.add(instance)
            self.session.commit()
            return instance.to_dict()
        except SQLAlchemyError as e:
            self._fail('insert', table, e)

    def update(self, table, filters, patch):
        """Apply patch to every matching row; returns the affected row count."""
        if not filters:
            raise StoreError(detail=f'refusing unfiltered update on {table}')
        if self._empty_in(filters):
            return 0
        try:
            _, query = self._query(table, filters)
            affected = query.update(dict(patch), synchronize_session=False)
            self.session.commit()
            return affected
        except SQLAlchemyError as e:
            self._fail('update', table, e)

    def delete(self, table, filters):
        if not filters:
            raise StoreError(detail=f'refusing unfiltered delete on {table}')
        if self._empty_in(filters):
            return 0
        try:
            _, query = self._query(table, filters)
            affected = query.delete(synchronize_session=False)
            self.session.commit()
            return affected
        except SQLAlchemyError as e:
            self._fail('delete', table, e)
