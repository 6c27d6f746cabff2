"""Translate route - batch translation for the mobile client."""

import logging

from flask import Blueprint, request, jsonify

from app.services.language import SUPPORTED_LANGUAGES
from app.services.translation import get_translation_service

logger = logging.getLogger(__name__)

translate_bp = Blueprint('translate', __name__)


@translate_bp.route('', methods=['POST'])
def translate_texts():
    """Translate a list of texts.

    Body:
    - texts: list of strings (required, non-empty)
    - targetLang: 'en' or 'zh' (required)
    - forceTranslate: translate even texts already in targetLang (default false)

    Returns {'translations': [...]} with one entry per input text, in order.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    texts = data.get('texts')
    target_lang = data.get('targetLang')

    if not texts or not isinstance(texts, list):
        return jsonify({'error': 'texts array is required'}), 400

    if target_lang not in SUPPORTED_LANGUAGES:
        return jsonify({'error': "targetLang must be 'en' or 'zh'"}), 400

    force_translate = data.get('forceTranslate') is True

    try:
        translations = get_translation_service().translate_texts(
            texts, target_lang, force_translate=force_translate
        )
    except Exception:
        logger.exception("Translation request failed")
        return jsonify({'error': 'Translation failed'}), 500

    return jsonify({'translations': translations}), 200
