"""Database models for the community events backend."""

from .announcement import Announcement
from .translation_cache import TranslationCache, TranslationRecord

__all__ = ['Announcement', 'TranslationCache', 'TranslationRecord']
