"""Language detection for English/Chinese content."""
import re

# CJK Unified Ideographs
CJK_PATTERN = re.compile(r'[\u4e00-\u9fff]')

SUPPORTED_LANGUAGES = ('en', 'zh')
DEFAULT_LANGUAGE = 'en'

LANGUAGE_LABELS = {
    'en': 'English',
    'zh': 'Simplified Chinese',
}


def detect_lang(text: str) -> str:
    """Return 'zh' if the text contains any Chinese character, else 'en'."""
    if text and CJK_PATTERN.search(text):
        return 'zh'
    return 'en'


def needs_translation(text: str, target_lang: str, force_translate: bool = False) -> bool:
    """Decide whether a text has to go through translation at all.

    Blank text never does. ``force_translate`` skips the same-language
    check, which is how bilingual place names get their Chinese prefix even
    when the source is already partly Chinese.
    """
    if not text or not text.strip():
        return False
    if force_translate:
        return True
    return detect_lang(text) != target_lang


def normalize_lang(lang, default: str = DEFAULT_LANGUAGE) -> str:
    """Normalize a ``lang`` parameter (e.g. 'ZH ' -> 'zh')."""
    if not isinstance(lang, str) or not lang.strip():
        return default
    return lang.strip().lower()


def is_supported(lang) -> bool:
    return lang in SUPPORTED_LANGUAGES
