"""
Content screening service

Classifies user submitted text before it reaches the content graph:
1. Vocabulary match against an English and an Arabic wordlist (both always run)
2. Suspicious patterns: phone numbers, email addresses, links, repeated characters
3. Excessive use of capital letters

screen_content() never raises and has no side effects; the caller decides
whether to block (severity 'high') or just warn (severity 'medium').
"""
import logging
import re

from flask import current_app, has_app_context

from murshid.config import SCREENING_EXTRA_TERMS
from murshid.errors import ValidationError
from murshid.i18n import translate, normalize_language

logger = logging.getLogger(__name__)

SEVERITY_LOW = 'low'
SEVERITY_MEDIUM = 'medium'
SEVERITY_HIGH = 'high'

# Matched against the lower-cased text
ENGLISH_TERMS = frozenset([
    # profanity
    'fuck', 'shit', 'bitch', 'damn', 'hell', 'ass', 'bastard', 'crap', 'piss',
    'whore', 'slut', 'cock', 'dick', 'pussy', 'tits', 'boobs', 'sex', 'porn',
    'nude', 'naked', 'xxx', 'adult', 'escort', 'prostitute', 'hooker',
    # hate speech and violence
    'nigger', 'faggot', 'retard', 'tranny',
    'nazi', 'hitler', 'terrorist', 'jihad', 'isis', 'kill', 'murder', 'rape',
    'suicide', 'bomb', 'gun', 'weapon', 'violence', 'hate', 'racist',
    # spam and scams
    'scam', 'fraud', 'fake', 'cheat', 'hack', 'crack', 'pirate', 'illegal',
    'drugs', 'cocaine', 'heroin', 'marijuana', 'weed', 'cannabis', 'meth',
    'gambling', 'casino', 'bet', 'lottery', 'money', 'cash', 'bitcoin',
    # harassment
    'harassment', 'bullying', 'threat', 'abuse', 'stalking', 'doxxing',
    'discrimination', 'offensive', 'inappropriate', 'vulgar', 'obscene',
])

# Matched against the raw text
ARABIC_TERMS = frozenset([
    # profanity
    'كس', 'زب', 'عرص', 'خرا', 'لعنة', 'جحش', 'حمار', 'كلب', 'قحبة', 'شرموطة',
    'منيوك', 'ابن الكلب', 'ابن الشرموطة', 'يا كلب', 'يا حمار', 'يا جحش',
    # hate speech and violence
    'إرهابي', 'قتل', 'اقتل', 'موت', 'انتحار', 'قنبلة', 'سلاح', 'عنف', 'كراهية',
    'عنصري', 'تمييز', 'اغتصاب', 'جنس', 'إباحي', 'عاري', 'عارية', 'فاحش',
    # scams
    'احتيال', 'خداع', 'نصب', 'غش', 'اختراق', 'قرصنة', 'غير قانوني', 'مخدرات',
    'كوكايين', 'هيروين', 'حشيش', 'مخدر', 'قمار', 'كازينو', 'رهان', 'يانصيب',
    # harassment
    'مضايقة', 'تنمر', 'تهديد', 'إساءة', 'ملاحقة', 'تحرش', 'مسيء', 'غير مناسب',
    'بذيء', 'مبتذل', 'وقح',
])

# (message key, pattern), checked in this order.
# ASCII word boundaries: Arabic letters glued to a number or address still count as a boundary
SUSPICIOUS_PATTERNS = [
    ('screening.phone', re.compile(r'\b[0-9]{10,}\b', re.ASCII)),
    ('screening.email', re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b', re.ASCII)),
    ('screening.url', re.compile(r'https?://[^\s]+')),
    ('screening.repeated', re.compile(r'(.)\1{4,}')),
]

CAPS_RATIO_LIMIT = 0.5
CAPS_MIN_LENGTH = 20
_CAPS_RE = re.compile(r'[A-Z]')

_SEVERITY_RANK = {SEVERITY_LOW: 0, SEVERITY_MEDIUM: 1, SEVERITY_HIGH: 2}


class ContentAnalysis:
    """Outcome of screening one block of text."""

    def __init__(self, is_allowed=True, issues=None, severity=SEVERITY_LOW):
        self.is_allowed = is_allowed
        self.issues = list(issues or [])
        self.severity = severity

    def to_dict(self):
        return {
            'isAllowed': self.is_allowed,
            'issues': list(self.issues),
            'severity': self.severity,
        }

    def __eq__(self, other):
        if not isinstance(other, ContentAnalysis):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f'<ContentAnalysis {self.severity} allowed={self.is_allowed} issues={len(self.issues)}>'


def _escalate(current, target):
    return target if _SEVERITY_RANK[target] > _SEVERITY_RANK[current] else current


def _extra_terms():
    if has_app_context():
        return current_app.config.get('SCREENING_EXTRA_TERMS') or []
    return SCREENING_EXTRA_TERMS


def find_violations(text):
    """Every vocabulary term found in text (English on lower case, Arabic raw)."""
    if not text or not isinstance(text, str):
        return []
    lowered = text.lower()
    english = ENGLISH_TERMS.union(term.lower() for term in _extra_terms())
    violations = sorted(term for term in english if term in lowered)
    violations.extend(sorted(term for term in ARABIC_TERMS if term in text))
    return violations


def screen_content(text, language='en'):
    """Screen one block of text; language only selects the message strings."""
    language = normalize_language(language)
    analysis = ContentAnalysis()
    # Non-text input screens as empty
    if not text or not isinstance(text, str):
        return analysis

    violations = find_violations(text)
    if violations:
        analysis.issues.append(translate('screening.vocabulary', language, count=len(violations)))
        analysis.severity = _escalate(analysis.severity, SEVERITY_HIGH)

    for message_key, pattern in SUSPICIOUS_PATTERNS:
        if pattern.search(text):
            analysis.issues.append(translate(message_key, language))
            analysis.severity = _escalate(analysis.severity, SEVERITY_MEDIUM)

    caps_ratio = len(_CAPS_RE.findall(text)) / len(text)
    if caps_ratio > CAPS_RATIO_LIMIT and len(text) > CAPS_MIN_LENGTH:
        analysis.issues.append(translate('screening.caps', language))
        analysis.severity = _escalate(analysis.severity, SEVERITY_MEDIUM)

    analysis.is_allowed = analysis.severity != SEVERITY_HIGH
    return analysis


def screen_submission(fields, language='en'):
    """
    Screen the text fields of a submission (title, content, ...).

    Raises ValidationError when any field is blocked; otherwise returns the
    warnings raised by the allowed fields.
    """
    warnings = []
    blocked = []
    for name, text in fields.items():
        analysis = screen_content(text, language)
        if not analysis.is_allowed:
            blocked.extend(analysis.issues)
        else:
            warnings.extend(analysis.issues)
    if blocked:
        logger.info(f"Blocked submission, fields={list(fields)}, issues={blocked}")
        raise ValidationError('validation.content_rejected', issues='; '.join(blocked))
    return warnings
