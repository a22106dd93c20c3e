"""
Pytest configuration and fixtures for the Murshid community backend tests
"""
import pytest
from flask_jwt_extended import create_access_token

from murshid import create_app, db
from murshid.models import User, University, Major
from murshid.services import build_services
from murshid.store import QueryStore


TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SECRET_KEY': 'test-secret-key',
    'JWT_SECRET_KEY': 'test-jwt-secret-key-with-enough-length',
    'CACHE_TYPE': 'SimpleCache',
    'RATELIMIT_ENABLED': False,
    'RATELIMIT_STORAGE_URI': 'memory://',
    'LOG_TO_FILE': False,
    'SCREENING_EXTRA_TERMS': [],
}

# Text that passes screening without warnings
POST_TITLE = 'Choosing a university for engineering'
POST_CONTENT = 'I would like advice on which program offers the strongest engineering courses.'
ANSWER_ONE = 'Look at the accreditation of each department first.'
ANSWER_TWO = 'Visit the campus and talk to current students.'
COMMENT_TEXT = 'Thanks, that helps a lot.'


@pytest.fixture
def app():
    """Create and configure a test Flask application"""
    flask_app = create_app(TEST_CONFIG)

    with flask_app.app_context():
        db.create_all()
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create a test client for the Flask application"""
    return app.test_client()


@pytest.fixture
def store(app):
    return QueryStore()


@pytest.fixture
def services(store):
    return build_services(store)


def _make_user(email, name, role='student', is_admin=False, **extra):
    user = User(email=email, name=name, role=role, is_admin=is_admin, **extra)
    db.session.add(user)
    db.session.commit()
    return user.id


@pytest.fixture
def users(app):
    """Author, another student, a specialist and an admin (ids)"""
    return {
        'author': _make_user('author@example.com', 'Sara Author', establishment_name='King Saud University',
                             track='Computer Science', level='Second year'),
        'student': _make_user('student@example.com', 'Omar Student'),
        'specialist': _make_user('specialist@example.com', 'Dr. Lina', role='specialist'),
        'admin': _make_user('admin@example.com', 'Admin', is_admin=True),
    }


@pytest.fixture
def actors(services, users):
    """Actor dicts as the routes build them"""
    from murshid.utils.auth_utils import load_actor
    return {key: load_actor(services.store, user_id) for key, user_id in users.items()}


@pytest.fixture
def auth_headers(app, users):
    """Authorization headers per user key"""
    admin_ids = {users['admin']}

    def headers(key, lang=None):
        user_id = users[key]
        token = create_access_token(identity=str(user_id),
                                    additional_claims={'is_admin': user_id in admin_ids})
        result = {'Authorization': f'Bearer {token}'}
        if lang:
            result['Accept-Language'] = lang
        return result

    return headers


@pytest.fixture
def thread(services, actors):
    """A post by 'author', answers by 'student' and 'specialist', one comment on the first answer"""
    community = services.community
    post = community.create_post({'title': POST_TITLE, 'content': POST_CONTENT}, actors['author'])
    answer_one = community.create_answer(post['id'], {'content': ANSWER_ONE}, actors['student'])
    answer_two = community.create_answer(post['id'], {'content': ANSWER_TWO}, actors['specialist'])
    comment = community.create_comment(answer_one['id'], {'content': COMMENT_TEXT}, actors['author'])
    return {
        'post': post['id'],
        'answer_one': answer_one['id'],
        'answer_two': answer_two['id'],
        'comment': comment['id'],
    }


@pytest.fixture
def catalog(app):
    """Universities and majors with Arabic names"""
    db.session.add_all([
        University(name='King Saud University', name_ar='جامعة الملك سعود'),
        University(name='Untranslated College', name_ar=None),
        Major(name='Computer Science', name_ar='علوم الحاسب'),
        Major(name='Medicine', name_ar='الطب'),
    ])
    db.session.commit()
