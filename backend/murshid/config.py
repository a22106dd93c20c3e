import os
from dotenv import load_dotenv

# Load the .env file
load_dotenv()

# API settings
API_HOST = os.getenv('API_HOST', '0.0.0.0')
API_PORT = int(os.getenv('API_PORT', 5001))
API_DEBUG = os.getenv('API_DEBUG', 'True').lower() == 'true'

# Security settings
SECRET_KEY = os.getenv('SECRET_KEY', 'dev_secret_key_12345')
JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'jwt_secret_key_67890')
JWT_ACCESS_TOKEN_EXPIRES = 60 * 60 * 24 * 30  # 30 days
JWT_TOKEN_LOCATION = ['headers']
JWT_HEADER_NAME = 'Authorization'
JWT_HEADER_TYPE = 'Bearer'

# Database settings
DB_TYPE = os.getenv('DB_TYPE', 'sqlite')
DB_USER = os.getenv('DB_USER')
DB_PASSWORD = os.getenv('DB_PASSWORD')
DB_HOST = os.getenv('DB_HOST', 'localhost')
DB_PORT = os.getenv('DB_PORT', '5432')
DB_NAME = os.getenv('DB_NAME')
SQLALCHEMY_TRACK_MODIFICATIONS = False
SQLALCHEMY_ECHO = False

# Redis settings (cache, rate limiter, Celery broker)
REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')

# --- Cache settings ---
CACHE_TYPE = os.getenv('CACHE_TYPE', 'RedisCache')
CACHE_KEY_PREFIX = 'murshid:'
TAG_CACHE_TTL = int(os.getenv('TAG_CACHE_TTL', 60 * 60 * 6))  # 6 hours

# --- Rate limiting ---
RATELIMIT_ENABLED = os.getenv('RATELIMIT_ENABLED', 'True').lower() == 'true'
RATELIMIT_STORAGE_URI = os.getenv('RATELIMIT_STORAGE_URI', REDIS_URL)
REPORT_RATE_LIMIT = os.getenv('REPORT_RATE_LIMIT', '20 per hour')

# --- Content screening ---
# Comma separated, appended to the built-in English vocabulary
SCREENING_EXTRA_TERMS = [
    term.strip().lower()
    for term in os.getenv('SCREENING_EXTRA_TERMS', '').split(',')
    if term.strip()
]

# Logging
LOG_DIR = os.getenv('LOG_DIR', os.path.join(os.path.abspath(os.path.dirname(__file__)), '..', 'logs'))

# CORS settings
CORS_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:8080",
    "http://localhost:3000",
]
if os.getenv('CORS_EXTRA_ORIGIN'):
    CORS_ORIGINS.append(os.getenv('CORS_EXTRA_ORIGIN'))


def get_database_uri():
    """Build the database URI"""
    if DB_TYPE == 'postgresql':
        return f'postgresql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}'
    else:
        # SQLite by default
        return 'sqlite:///' + os.path.join(os.path.abspath(os.path.dirname(__file__)), 'murshid.db')
