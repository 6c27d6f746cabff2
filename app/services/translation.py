"""Translation service with a persistent cache in front of the translator."""
import logging

from flask import current_app

from app.models.translation_cache import TranslationRecord
from app.services.errors import CacheWriteError, TranslationServiceError
from app.services.language import is_supported, needs_translation, normalize_lang

logger = logging.getLogger(__name__)


def get_translation_service() -> 'TranslationService':
    """Return the service created for the current app."""
    return current_app.extensions['translation']


class TranslationService:
    """Cache-aside translation of text batches.

    ``translator`` needs ``enabled`` and ``translate_batch(texts, lang)``;
    ``store`` needs ``lookup(texts, lang)`` and ``upsert(records)``.
    Neither holds per-request state, so one instance serves every request.
    """

    def __init__(self, translator, store):
        self.translator = translator
        self.store = store

    @property
    def enabled(self) -> bool:
        return bool(getattr(self.translator, 'enabled', False))

    def translate_texts(self, texts, target_lang, force_translate: bool = False) -> list:
        """
        Translate a list of texts, keeping positions.

        FAST PATHS (no store or API access):
        - Unsupported target language: texts come back unchanged
        - Blank entries become ""
        - Texts already in the target language (unless force_translate)

        Identical texts are looked up and translated once and the result is
        copied to every position. Cache and translator failures fall back to
        the original text; they never fail the batch.
        """
        if not texts:
            return []
        lang = normalize_lang(target_lang)
        if not is_supported(lang):
            return list(texts)

        results, new_records = self._resolve(list(texts), lang, force_translate)
        self._persist(new_records)
        return results

    def translate_fields(self, fields: dict, target_lang, force_translate: bool = False) -> dict:
        """Translate the non-blank string values of a mapping.

        Other values are left as they are; the input mapping is not modified.
        """
        if not fields:
            return fields

        keys = [key for key, value in fields.items() if isinstance(value, str) and value.strip()]
        if not keys:
            return dict(fields)

        translated = self.translate_texts([fields[key] for key in keys], target_lang, force_translate)
        result = dict(fields)
        for key, value in zip(keys, translated):
            result[key] = value or result[key]
        return result

    def _resolve(self, texts: list, lang: str, force_translate: bool):
        """Fill in every position; return (results, records worth caching)."""
        results = [None] * len(texts)
        needed = {}  # dedup key -> original indices

        for index, text in enumerate(texts):
            if not isinstance(text, str) or not text.strip():
                results[index] = ''
                continue
            if not needs_translation(text, lang, force_translate):
                results[index] = text
                continue
            needed.setdefault(text.strip(), []).append(index)

        if not needed:
            return results, []

        cached = {}
        try:
            cached = self.store.lookup(list(needed), lang)
        except Exception:
            logger.exception("Translation cache lookup error, treating as misses")

        missing = []
        for key, indices in needed.items():
            cached_text = cached.get(key)
            if cached_text:
                for index in indices:
                    results[index] = cached_text
            else:
                missing.append(key)

        if not missing:
            return results, []

        translations = self._translate_missing(missing, lang)

        new_records = []
        for key, translated in zip(missing, translations):
            for index in needed[key]:
                results[index] = translated if translated else texts[index]
            if translated and translated.strip() != key:
                new_records.append(TranslationRecord(key, lang, translated.strip()))

        logger.info(
            f"Translated batch to {lang}: {len(texts)} texts, {len(needed)} unique, "
            f"{len(needed) - len(missing)} cached, {len(new_records)} new"
        )
        return results, new_records

    def _translate_missing(self, missing: list, lang: str) -> list:
        """Translate cache misses in one call; None marks a text left as-is."""
        if not self.enabled:
            logger.debug(f"Translation disabled, passing {len(missing)} texts through")
            return [None] * len(missing)

        try:
            translations = list(self.translator.translate_batch(missing, lang))
        except TranslationServiceError as e:
            logger.warning(f"Translation API error, using original texts: {e}")
            return [None] * len(missing)
        except Exception:
            logger.exception("Translation API call failed, using original texts")
            return [None] * len(missing)

        if len(translations) != len(missing):
            logger.warning(
                f"Translation API returned {len(translations)} items for {len(missing)} texts, "
                f"using original texts"
            )
            return [None] * len(missing)
        return [text if isinstance(text, str) and text.strip() else None for text in translations]

    def _persist(self, records: list):
        if not records:
            return
        try:
            self.store.upsert(records)
        except CacheWriteError as e:
            logger.error(f"Translation cache save error: {e}")
        except Exception:
            logger.exception("Translation cache save error")
