#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Murshid community backend launcher

Usage:
1. Development server: python run.py
2. Production: gunicorn -w 4 -b 0.0.0.0:5001 "run:app"
3. Worker: celery -A murshid.celery_utils.celery_app worker -Q celery,maintenance
"""

# backend/run.py
import os
import logging
import time

import redis
from dotenv import load_dotenv

from murshid import create_app as flask_create_app
from murshid.config import API_HOST, API_PORT, API_DEBUG, REDIS_URL

logger = logging.getLogger(__name__)

# Application instance for gunicorn
app = flask_create_app()


def test_redis_connection():
    """Check that the cache / rate limit / broker Redis answers."""
    try:
        logger.info(f"Connecting to Redis: {REDIS_URL}")
        client = redis.from_url(REDIS_URL)
        test_key = f"murshid:redis_test_{time.time()}"
        client.set(test_key, "ok")
        value = client.get(test_key)
        client.delete(test_key)
        if value:
            logger.info("Redis connection test succeeded")
            return True
        logger.error("Redis connection test failed: could not read back the test key")
        return False
    except redis.RedisError as e:
        logger.error(f"Redis connection test failed: {e}")
        return False


if __name__ == '__main__':
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(levelname)s] %(name)s: %(message)s')

    if not test_redis_connection():
        logger.warning("Redis is unreachable; caching and rate limiting will fail until it is up")

    logger.info(f"Starting with HOST={API_HOST}, PORT={API_PORT}, DEBUG={API_DEBUG}")
    os.makedirs(app.config['LOG_DIR'], exist_ok=True)
    app.run(host=API_HOST, port=API_PORT, debug=API_DEBUG)
