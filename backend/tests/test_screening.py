"""
Tests for content screening
"""
import pytest

from murshid.errors import ValidationError
from murshid.services.screening import (
    ContentAnalysis, find_violations, screen_content, screen_submission,
)


class TestScreenContent:
    """Severity and issues for single blocks of text"""

    def test_empty_text_is_low(self):
        """Empty or missing text is allowed with no issues"""
        for text in ('', None):
            analysis = screen_content(text)
            assert analysis.is_allowed is True
            assert analysis.issues == []
            assert analysis.severity == 'low'

    def test_clean_text_is_low(self):
        """Ordinary academic text passes untouched"""
        analysis = screen_content('Which university offers the strongest nursing program?')
        assert analysis == ContentAnalysis(True, [], 'low')

    def test_vocabulary_blocks(self):
        """A wordlist match makes the text high severity and not allowed"""
        analysis = screen_content('this is a scam')
        assert analysis.is_allowed is False
        assert analysis.severity == 'high'
        assert analysis.issues[0] == 'Contains inappropriate language (1 violations)'

    def test_arabic_vocabulary_blocks(self):
        """The Arabic wordlist is checked regardless of the message language"""
        analysis = screen_content('هذا احتيال واضح', 'en')
        assert analysis.is_allowed is False
        assert analysis.severity == 'high'

    def test_phone_number_warns(self):
        """Ten or more digits is a medium warning"""
        analysis = screen_content('Call me on 0551234567 tomorrow')
        assert analysis.is_allowed is True
        assert analysis.severity == 'medium'
        assert 'Contains phone numbers' in analysis.issues

    def test_patterns_glued_to_arabic(self):
        """Arabic letters next to a number or address do not hide it"""
        phone = screen_content('اتصل على0551234567', 'ar')
        assert phone.severity == 'medium'
        assert phone.issues == ['يحتوي على أرقام هواتف']
        email = screen_content('راسلنيtest@example.com', 'ar')
        assert email.severity == 'medium'
        assert len(email.issues) == 1

    def test_non_text_is_low(self):
        """Numbers and other non-string values screen as empty"""
        for value in (12345678901, ['scam'], {'text': 'scam'}):
            assert screen_content(value).to_dict() == {'isAllowed': True, 'issues': [], 'severity': 'low'}
        assert find_violations(12345678901) == []

    def test_email_and_link_warn(self):
        """Email addresses and links are reported in pattern order"""
        analysis = screen_content('Write to someone@example.com or see https://example.org/page')
        assert analysis.severity == 'medium'
        assert analysis.issues == ['Contains email addresses', 'Contains external links']

    def test_repeated_characters_warn(self):
        analysis = screen_content('Wowwwww great')
        assert analysis.issues == ['Contains repeated characters (potential spam)']

    def test_caps_warns(self):
        """More than half capitals on a text longer than 20 characters"""
        analysis = screen_content('PLEASE READ THIS NOW FRIENDS')
        assert analysis.severity == 'medium'
        assert analysis.issues == ['Excessive use of capital letters']

    def test_short_caps_ignored(self):
        """Short shouting is tolerated"""
        assert screen_content('OK THANKS').issues == []

    def test_high_wins_over_medium(self):
        """Vocabulary plus a pattern stays high and lists both issues"""
        analysis = screen_content('scam offer at https://example.org')
        assert analysis.severity == 'high'
        assert len(analysis.issues) == 2

    def test_arabic_messages(self):
        """The language only selects message strings"""
        analysis = screen_content('Call me on 0551234567 tomorrow', 'ar')
        assert analysis.issues == ['يحتوي على أرقام هواتف']

    def test_deterministic(self):
        """Same input, same result"""
        text = 'Visit https://example.org for a scam'
        assert screen_content(text).to_dict() == screen_content(text).to_dict()

    def test_to_dict_shape(self):
        assert screen_content('').to_dict() == {'isAllowed': True, 'issues': [], 'severity': 'low'}


class TestFindViolations:
    """Vocabulary matching"""

    def test_substring_match(self):
        """Terms match inside longer words"""
        assert find_violations('Scammers everywhere') == ['scam']

    def test_extra_terms_from_config(self, app):
        """SCREENING_EXTRA_TERMS extends the English list"""
        app.config['SCREENING_EXTRA_TERMS'] = ['Spoiler']
        assert find_violations('no spoilers please') == ['spoiler']

    def test_identity_terms_not_flagged(self):
        """Identity terms are not part of the wordlist"""
        assert find_violations('support group for gay and lesbian students') == []


class TestScreenSubmission:
    """Multi-field screening used before writes"""

    def test_blocked_field_raises(self):
        with pytest.raises(ValidationError) as excinfo:
            screen_submission({'title': 'Simple title', 'content': 'a scam'})
        assert excinfo.value.message_key == 'validation.content_rejected'
        assert 'inappropriate language' in str(excinfo.value)

    def test_warnings_returned(self):
        warnings = screen_submission({'title': 'Simple title', 'content': 'Reach me on 0551234567'})
        assert warnings == ['Contains phone numbers']


class TestExampleScenario:
    """Email and repeated characters warn; a banned word on top blocks"""

    TEXT = 'Contact me at test@example.com now!!!!!'

    def test_warns(self):
        analysis = screen_content(self.TEXT)
        assert analysis.issues == ['Contains email addresses', 'Contains repeated characters (potential spam)']
        assert analysis.severity == 'medium'
        assert analysis.is_allowed is True

    def test_banned_word_escalates(self):
        analysis = screen_content(self.TEXT + ' Total scam.')
        assert analysis.severity == 'high'
        assert analysis.is_allowed is False
