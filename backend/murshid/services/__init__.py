"""
Community services.

Each service takes a QueryStore; routes and Celery tasks build them with
build_services() so tests can hand in their own store.
"""
from murshid.store import QueryStore
from .screening import ContentAnalysis, screen_content, screen_submission
from .cascade import CascadeService, CascadeResult
from .versioning import VersioningService
from .community import CommunityService
from .reports import ReportService
from .tag_translation import TagTranslationCache


class Services:
    def __init__(self, store=None):
        self.store = store or QueryStore()
        self.cascade = CascadeService(self.store)
        self.versioning = VersioningService(self.store)
        self.community = CommunityService(self.store, versioning=self.versioning, cascade=self.cascade)
        self.reports = ReportService(self.store, cascade=self.cascade)
        self.tags = TagTranslationCache(self.store)


def build_services(store=None):
    return Services(store)


__all__ = [
    'ContentAnalysis', 'screen_content', 'screen_submission',
    'CascadeService', 'CascadeResult', 'VersioningService', 'CommunityService',
    'ReportService', 'TagTranslationCache', 'Services', 'build_services',
]
