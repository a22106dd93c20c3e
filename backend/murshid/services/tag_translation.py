"""
Tag translation cache

Curated post tags are university and major names. The cache maps each
lower-cased English and Arabic name to its {'en', 'ar'} pair, stored in the
Flask-Caching backend under one key with a TTL. The map is rebuilt lazily on
the first lookup after it expires, on refresh(), and by the
refresh_tag_translations Celery task.
"""
import logging

from flask import current_app, has_app_context

from murshid.i18n import normalize_language
from murshid.utils import cache_manager
from murshid.utils.cache_manager import KEY_PREFIX, TTL

logger = logging.getLogger(__name__)

CACHE_KEY = cache_manager.make_key(KEY_PREFIX['TAGS'], 'translations')


class TagTranslationCache:
    def __init__(self, store, backend=None, ttl=None):
        self.store = store
        self.backend = backend if backend is not None else cache_manager
        self._ttl = ttl

    @property
    def ttl(self):
        if self._ttl is not None:
            return self._ttl
        if has_app_context():
            return current_app.config.get('TAG_CACHE_TTL', TTL['TAGS'])
        return TTL['TAGS']

    def _build(self):
        mapping = {}
        for table in ('universities', 'majors'):
            for row in self.store.select(table):
                name, name_ar = row.get('name'), row.get('name_ar')
                if not name or not name_ar:
                    continue
                pair = {'en': name, 'ar': name_ar}
                mapping[name.lower()] = pair
                mapping[name_ar.lower()] = pair
        return mapping

    def refresh(self):
        """Rebuild the map from universities and majors; returns the entry count."""
        mapping = self._build()
        self.backend.set(CACHE_KEY, mapping, timeout=self.ttl)
        logger.info(f"Tag translation cache refreshed with {len(mapping)} entries")
        return len(mapping)

    def invalidate(self):
        self.backend.delete(CACHE_KEY)

    def _mapping(self):
        mapping = self.backend.get(CACHE_KEY)
        if mapping is None:
            mapping = self._build()
            self.backend.set(CACHE_KEY, mapping, timeout=self.ttl)
        return mapping

    def translate(self, tag, language='en'):
        """Tag in the target language, or unchanged when unknown."""
        if not tag:
            return tag
        pair = self._mapping().get(tag.strip().lower())
        return pair[normalize_language(language)] if pair else tag

    def translate_many(self, tags, language='en'):
        if not tags:
            return tags
        mapping = self._mapping()
        language = normalize_language(language)
        result = []
        for tag in tags:
            pair = mapping.get(tag.strip().lower()) if tag else None
            result.append(pair[language] if pair else tag)
        return result
