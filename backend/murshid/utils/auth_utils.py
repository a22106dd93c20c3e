from functools import wraps
from flask import g
from flask_jwt_extended import jwt_required, get_jwt, get_jwt_identity, verify_jwt_in_request

from murshid.errors import NotFoundError, PermissionDeniedError


def normalize_role(user):
    """Role snapshot for audit fields: admin wins, then specialist, else student."""
    if user.get('is_admin'):
        return 'admin'
    if user.get('role') == 'specialist':
        return 'specialist'
    return 'student'


def load_actor(store, user_id):
    """The actor dict handed to services; raises NotFoundError for unknown ids."""
    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        raise NotFoundError('not_found.user')
    user = store.select_one('users', {'id': user_id})
    if user is None:
        raise NotFoundError('not_found.user')
    return {
        'id': user['id'],
        'name': user.get('name') or 'Anonymous',
        'role': normalize_role(user),
        'is_admin': bool(user.get('is_admin')),
        'establishment_name': user.get('establishment_name'),
        'university_id': user.get('university_id'),
        'track': user.get('track'),
        'level': user.get('level'),
        'avatar_url': user.get('avatar_url'),
    }


def get_current_actor(store):
    """Actor for the JWT identity of the current request (cached on g)."""
    identity = get_jwt_identity()
    actor = g.get('murshid_actor')
    if actor is None or str(actor['id']) != str(identity):
        actor = load_actor(store, identity)
        g.murshid_actor = actor
    return actor


def get_optional_actor(store):
    """Actor when a valid token was sent, otherwise None (public endpoints)."""
    verify_jwt_in_request(optional=True)
    if get_jwt_identity() is None:
        return None
    return get_current_actor(store)


def admin_required(fn):
    """
    Decorator: only admins may call the endpoint.

    Checks the 'is_admin' claim of the JWT; jwt_required() is applied here so
    the token is verified before the claim is read.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        claims = get_jwt()
        if claims.get('is_admin') is True:
            return fn(*args, **kwargs)
        raise PermissionDeniedError('permission.admin_only')

    return jwt_required()(wrapper)
