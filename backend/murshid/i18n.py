"""
User facing message catalogue (English and Arabic).

Errors carry a message key; the error handler renders the key in the language
of the request. Internal log lines stay in English and never go through here.
"""
from flask import has_request_context, request

SUPPORTED_LANGUAGES = ('en', 'ar')
DEFAULT_LANGUAGE = 'en'

MESSAGES = {
    # --- validation ---
    'validation.required': {
        'en': 'Field "{field}" is required',
        'ar': 'الحقل "{field}" مطلوب',
    },
    'validation.too_long': {
        'en': 'Field "{field}" is too long (maximum {limit} characters)',
        'ar': 'الحقل "{field}" طويل جداً (الحد الأقصى {limit} حرف)',
    },
    'validation.content_too_short': {
        'en': 'Content is too short (minimum {limit} characters)',
        'ar': 'المحتوى قصير جداً ({limit} حرف على الأقل)',
    },
    'validation.invalid_choice': {
        'en': 'Invalid value "{value}" for "{field}"',
        'ar': 'قيمة غير صالحة "{value}" للحقل "{field}"',
    },
    'validation.reason_required': {
        'en': 'A deletion reason is required',
        'ar': 'يجب ذكر سبب الحذف',
    },
    'validation.content_rejected': {
        'en': 'Content not allowed: {issues}',
        'ar': 'المحتوى غير مسموح: {issues}',
    },
    'validation.parent_comment_mismatch': {
        'en': 'The replied comment does not belong to this answer',
        'ar': 'التعليق المردود عليه لا ينتمي إلى هذه الإجابة',
    },
    'validation.answer_not_in_post': {
        'en': 'This answer does not belong to the post',
        'ar': 'هذه الإجابة لا تنتمي إلى المنشور',
    },
    # --- permission ---
    'permission.not_owner': {
        'en': 'You are not allowed to modify this content',
        'ar': 'لا يمكنك تعديل هذا المحتوى',
    },
    'permission.admin_only': {
        'en': 'Admins only',
        'ar': 'للمشرفين فقط',
    },
    'permission.self_report': {
        'en': 'You cannot report your own content',
        'ar': 'لا يمكنك الإبلاغ عن المحتوى الخاص بك',
    },
    'permission.not_post_author': {
        'en': 'Only the author of the post can accept an answer',
        'ar': 'فقط صاحب المنشور يمكنه قبول الإجابة',
    },
    # --- not found ---
    'not_found.post': {
        'en': 'Post not found or already deleted',
        'ar': 'المنشور غير موجود أو تم حذفه',
    },
    'not_found.answer': {
        'en': 'Answer not found or already deleted',
        'ar': 'الإجابة غير موجودة أو تم حذفها',
    },
    'not_found.comment': {
        'en': 'Comment not found or already deleted',
        'ar': 'التعليق غير موجود أو تم حذفه',
    },
    'not_found.report': {
        'en': 'Report not found',
        'ar': 'البلاغ غير موجود',
    },
    'not_found.version': {
        'en': 'Version not found',
        'ar': 'النسخة غير موجودة',
    },
    'not_found.user': {
        'en': 'User not found',
        'ar': 'المستخدم غير موجود',
    },
    'not_found.resource': {
        'en': 'The requested resource does not exist',
        'ar': 'المورد المطلوب غير موجود',
    },
    # --- conflict ---
    'conflict.already_reported': {
        'en': 'You have already reported this content',
        'ar': 'لقد قمت بالإبلاغ عن هذا المحتوى مسبقاً',
    },
    'conflict.report_resolved': {
        'en': 'This report has already been resolved',
        'ar': 'تمت معالجة هذا البلاغ مسبقاً',
    },
    'conflict.duplicate': {
        'en': 'This record already exists',
        'ar': 'هذا السجل موجود مسبقاً',
    },
    # --- store ---
    'store.unavailable': {
        'en': 'The service is temporarily unavailable, please try again',
        'ar': 'الخدمة غير متاحة مؤقتاً، يرجى المحاولة مرة أخرى',
    },
    'store.cascade_incomplete': {
        'en': 'Deletion did not complete, please try again',
        'ar': 'لم يكتمل الحذف، يرجى المحاولة مرة أخرى',
    },
    # --- generic HTTP ---
    'http.400': {'en': 'Invalid request', 'ar': 'طلب غير صالح'},
    'http.401': {'en': 'Authentication required', 'ar': 'يجب تسجيل الدخول'},
    'http.403': {'en': 'Access denied', 'ar': 'الوصول مرفوض'},
    'http.405': {'en': 'Method not allowed', 'ar': 'الطريقة غير مسموحة'},
    'http.422': {'en': 'Invalid access token', 'ar': 'رمز الوصول غير صالح'},
    'http.429': {'en': 'Too many requests', 'ar': 'عدد كبير جداً من الطلبات'},
    'http.500': {
        'en': 'Internal server error, please try again later',
        'ar': 'خطأ داخلي في الخادم، يرجى المحاولة لاحقاً',
    },
    # --- screening issues ---
    'screening.vocabulary': {
        'en': 'Contains inappropriate language ({count} violations)',
        'ar': 'يحتوي على كلمات غير مناسبة ({count} مخالفة)',
    },
    'screening.phone': {'en': 'Contains phone numbers', 'ar': 'يحتوي على أرقام هواتف'},
    'screening.email': {'en': 'Contains email addresses', 'ar': 'يحتوي على عناوين بريد إلكتروني'},
    'screening.url': {'en': 'Contains external links', 'ar': 'يحتوي على روابط خارجية'},
    'screening.repeated': {
        'en': 'Contains repeated characters (potential spam)',
        'ar': 'يحتوي على أحرف متكررة (محتمل أن يكون سبام)',
    },
    'screening.caps': {
        'en': 'Excessive use of capital letters',
        'ar': 'استخدام مفرط للأحرف الكبيرة',
    },
}


def normalize_language(language):
    if not language:
        return DEFAULT_LANGUAGE
    language = str(language).strip().lower()[:2]
    return language if language in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE


def get_request_language():
    """Language of the current request: ?lang= first, then Accept-Language."""
    if not has_request_context():
        return DEFAULT_LANGUAGE
    explicit = request.args.get('lang')
    if explicit:
        return normalize_language(explicit)
    best = request.accept_languages.best_match(SUPPORTED_LANGUAGES)
    return best or DEFAULT_LANGUAGE


def translate(key, language=None, **params):
    """Render a message key; unknown keys come back as the key itself."""
    language = normalize_language(language) if language else get_request_language()
    entry = MESSAGES.get(key)
    if not entry:
        return key
    template = entry.get(language) or entry[DEFAULT_LANGUAGE]
    try:
        return template.format(**params)
    except (KeyError, IndexError):
        return template
