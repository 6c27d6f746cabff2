"""Announcement routes with per-client localization."""

import logging

from flask import Blueprint, request, jsonify

from app import db
from app.models import Announcement
from app.services.language import SUPPORTED_LANGUAGES, is_supported, normalize_lang
from app.services.translation import get_translation_service

logger = logging.getLogger(__name__)

announcements_bp = Blueprint('announcements', __name__)


@announcements_bp.route('', methods=['GET'])
def get_announcements():
    """Get all announcements, newest first.

    Query params:
    - lang: 'en' (default) or 'zh'. Titles, messages and locations are
      translated into this language; 'en' returns them as stored.

    Titles and messages share one translation batch and locations a second
    one, so the whole page costs at most two API calls.
    """
    lang = normalize_lang(request.args.get('lang'))

    try:
        announcements = [a.to_dict() for a in Announcement.get_recent()]
    except Exception:
        logger.exception("Failed to load announcements")
        return jsonify({'error': 'Failed to fetch announcements'}), 500

    if lang == 'en' or not is_supported(lang) or not announcements:
        return jsonify(announcements), 200

    texts = []
    for announcement in announcements:
        texts.append(announcement['title'] or '')
        texts.append(announcement['message'] or '')
    locations = [announcement['location'] or '' for announcement in announcements]

    service = get_translation_service()
    try:
        translated = service.translate_texts(texts, lang)
        # Place names often mix scripts, so Chinese always goes to the translator
        translated_locations = service.translate_texts(
            locations, lang, force_translate=(lang == 'zh')
        )
    except Exception:
        logger.exception(f"Failed to translate announcements to {lang}")
        return jsonify(announcements), 200

    for i, announcement in enumerate(announcements):
        announcement['title'] = translated[2 * i] or announcement['title']
        announcement['message'] = translated[2 * i + 1] or announcement['message']
        announcement['location'] = translated_locations[i] or announcement['location']

    return jsonify(announcements), 200


@announcements_bp.route('', methods=['POST'])
def create_announcement():
    """Post a new announcement and warm the translation cache for it."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    title = data.get('title')
    message = data.get('message')

    if not title or not message:
        return jsonify({'error': 'Title and message are required'}), 400

    try:
        announcement = Announcement(
            title=title,
            message=message,
            location=data.get('location')
        )
        db.session.add(announcement)
        db.session.commit()
    except Exception:
        db.session.rollback()
        logger.exception("Failed to create announcement")
        return jsonify({'error': 'Failed to create announcement'}), 500

    warm_translations({'title': title, 'message': message}, location=data.get('location'))

    return jsonify({
        'message': 'Announcement posted successfully',
        'data': announcement.to_dict()
    }), 201


def warm_translations(fields: dict, location=None):
    """Translate fields into every supported language so later reads hit the cache.

    The location is warmed the way the listing reads it: forced for Chinese.
    """
    service = get_translation_service()
    if not service.enabled:
        return

    for lang in SUPPORTED_LANGUAGES:
        try:
            service.translate_fields(fields, lang)
            if isinstance(location, str) and location.strip():
                service.translate_texts([location], lang, force_translate=(lang == 'zh'))
        except Exception:
            logger.exception(f"Failed to pre-translate announcement to {lang}")
