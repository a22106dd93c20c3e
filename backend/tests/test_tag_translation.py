"""
Tests for the tag translation cache
"""
from murshid import db
from murshid.models import Major
from murshid.services.tag_translation import CACHE_KEY, TagTranslationCache
from murshid.utils import cache_manager


class DictBackend:
    """In-memory backend recording the timeouts it was given"""

    def __init__(self):
        self.data = {}
        self.timeouts = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value, timeout=None):
        self.data[key] = value
        self.timeouts[key] = timeout
        return True

    def delete(self, key):
        return self.data.pop(key, None) is not None


class TestTranslate:
    """Lookups through the default Flask-Caching backend"""

    def test_english_to_arabic(self, services, catalog):
        assert services.tags.translate('Computer Science', 'ar') == 'علوم الحاسب'
        assert services.tags.translate('king saud university', 'ar') == 'جامعة الملك سعود'

    def test_arabic_to_english(self, services, catalog):
        assert services.tags.translate('الطب', 'en') == 'Medicine'

    def test_unknown_tag_unchanged(self, services, catalog):
        assert services.tags.translate('Robotics', 'ar') == 'Robotics'
        # Rows without an Arabic name are not translated
        assert services.tags.translate('Untranslated College', 'ar') == 'Untranslated College'

    def test_translate_many(self, services, catalog):
        assert services.tags.translate_many(['Medicine', 'Robotics', ''], 'ar') == ['الطب', 'Robotics', '']
        assert services.tags.translate_many([], 'ar') == []

    def test_uses_cache_manager(self, services, catalog):
        sets_before = cache_manager.stats['sets']
        services.tags.translate('Medicine', 'ar')
        services.tags.translate('Medicine', 'ar')
        assert cache_manager.stats['sets'] == sets_before + 1


class TestCacheLifecycle:
    """The map is built once and rebuilt on refresh"""

    def test_cached_until_refresh(self, store, catalog):
        backend = DictBackend()
        tags = TagTranslationCache(store, backend=backend, ttl=30)
        assert tags.translate('Law', 'ar') == 'Law'
        assert backend.timeouts[CACHE_KEY] == 30

        db.session.add(Major(name='Law', name_ar='القانون'))
        db.session.commit()
        # Still the old map
        assert tags.translate('Law', 'ar') == 'Law'

        assert tags.refresh() == 8
        assert tags.translate('Law', 'ar') == 'القانون'

    def test_invalidate_rebuilds_lazily(self, store, catalog):
        backend = DictBackend()
        tags = TagTranslationCache(store, backend=backend)
        tags.refresh()
        tags.invalidate()
        assert CACHE_KEY not in backend.data
        assert tags.translate('Medicine', 'ar') == 'الطب'
        assert CACHE_KEY in backend.data

    def test_ttl_from_config(self, app, store):
        app.config['TAG_CACHE_TTL'] = 120
        assert TagTranslationCache(store).ttl == 120
