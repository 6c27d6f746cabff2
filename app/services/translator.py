"""OpenAI-backed batch translator for the community app."""
import json
import logging
import re

import openai
from openai import OpenAI

from app.services.errors import TranslationServiceError
from app.services.language import LANGUAGE_LABELS

logger = logging.getLogger(__name__)

DEFAULT_MODEL = 'gpt-4o'

_FENCE_PATTERN = re.compile(r'^```(?:json)?\s*|\s*```$')

PLACE_EXAMPLES = (
    'Bishan MRT → 碧山地铁站 Bishan MRT, '
    'Jurong East MRT → 裕廊东地铁站 Jurong East MRT, '
    'Tampines Mall → 淡滨尼商场 Tampines Mall, '
    'Boon Lay Community Club → 文礼民众俱乐部 Boon Lay Community Club, '
    'MTC Office → MTC 办公室 MTC Office, '
    'Singapore Chinese Cultural Centre → 新加坡华族文化中心 Singapore Chinese Cultural Centre.'
)


def build_system_prompt(target_lang: str) -> str:
    """Instructions for translating a JSON array of app texts."""
    target_language = LANGUAGE_LABELS.get(target_lang, target_lang)
    return (
        f"You are a translator for a Singapore community app. "
        f"Translate the following texts to {target_language}.\n\n"
        "Location rules:\n"
        "- For ALL locations when translating to Chinese, output: Chinese + a space + English. "
        "If the input is already Chinese and no English is provided, translate the Chinese "
        "into English and append it. Examples:\n"
        f"   {PLACE_EXAMPLES}\n"
        "   Do NOT partially translate. Every word must be translated in the Chinese portion "
        "(MRT → 地铁站, Office → 办公室, Club → 俱乐部, Centre → 中心, etc.).\n"
        "- Keep bus stop numbers, Block/Blk numbers, street addresses (Lorong, Jalan, etc.), "
        "unit numbers, and postal codes in their original form.\n"
        "- If no official Chinese name exists for a location, keep it in English.\n\n"
        "Output rules:\n"
        "- When translating to English, output English only (remove any Chinese content).\n"
        "- When translating to Chinese, follow the location rule above.\n"
        "Return ONLY a JSON array of translated strings, in the same order and with the same "
        "number of items. No explanations, no markdown, just the JSON array."
    )


def build_messages(texts, target_lang):
    return [
        {'role': 'system', 'content': build_system_prompt(target_lang)},
        {'role': 'user', 'content': json.dumps(list(texts), ensure_ascii=False)},
    ]


def parse_translations(content, expected: int) -> list:
    """Parse the model's JSON array and check it lines up with the request.

    Raises TranslationServiceError for anything that is not a list of
    ``expected`` strings, since a misaligned array would put translations
    against the wrong texts.
    """
    if not content or not content.strip():
        raise TranslationServiceError('Empty response from translation API')

    text = _FENCE_PATTERN.sub('', content.strip())
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        # Tolerate chatter around the array
        start, end = text.find('['), text.rfind(']')
        if start == -1 or end <= start:
            raise TranslationServiceError('Translation API returned non-JSON output')
        try:
            parsed = json.loads(text[start:end + 1])
        except json.JSONDecodeError as e:
            raise TranslationServiceError(f'Translation API returned malformed JSON: {e}') from e

    if not isinstance(parsed, list):
        raise TranslationServiceError(
            f'Translation API returned {type(parsed).__name__}, expected a JSON array'
        )
    if len(parsed) != expected:
        raise TranslationServiceError(
            f'Translation API returned {len(parsed)} items for {expected} texts'
        )
    if not all(isinstance(item, str) for item in parsed):
        raise TranslationServiceError('Translation API returned non-string items')
    return parsed


class OpenAITranslator:
    """Translates a batch of texts with a single chat completion."""

    def __init__(self, api_key=None, model=DEFAULT_MODEL, temperature=0.1, timeout=30.0, client=None):
        self.api_key = (api_key or '').strip()
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self._client = client

    @property
    def enabled(self) -> bool:
        return bool(self.api_key) or self._client is not None

    @property
    def client(self):
        if self._client is None:
            self._client = OpenAI(api_key=self.api_key, timeout=self.timeout)
        return self._client

    def translate_batch(self, texts, target_lang: str) -> list:
        """Translate ``texts`` into ``target_lang``, preserving order and length."""
        texts = list(texts)
        if not texts:
            return []
        if not self.enabled:
            raise TranslationServiceError('OPENAI_API_KEY is not configured')

        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=build_messages(texts, target_lang),
                temperature=self.temperature,
            )
        except openai.APIStatusError as e:
            raise TranslationServiceError(
                f'Translation API error: {e.message}', status_code=e.status_code
            ) from e
        except openai.OpenAIError as e:
            raise TranslationServiceError(f'Translation API unreachable: {e}') from e

        choices = getattr(completion, 'choices', None) or []
        content = choices[0].message.content if choices else None
        translations = parse_translations(content, expected=len(texts))

        logger.debug(f"Translated {len(texts)} texts to {target_lang} with {self.model}")
        return translations
