"""File-based gloss store: one JSON file per lexical entry, grouped by language.

Layout:
    <data_root>/gloss/
        <language>/
            <slug>.json   # content, transcriptions, logs, 12 relation fields, flags, media

A gloss is addressed by (language, slug), where slug = derive_slug(content).
Relations are lists of "<language>:<slug>" refs. Symmetrical relations are
mirrored on both ends; within-language relations never cross languages;
delete_with_cleanup sweeps the whole corpus so no reference dangles.
"""

from gloss.errors import (
    EmptySlugError,
    GlossError,
    GlossNotFoundError,
    IncompleteRecordError,
    LanguageMismatchError,
    UnknownFieldError,
)
from gloss.models import AudioPronunciation, DeleteResult, Gloss, IntegrityIssue, UsageInfo
from gloss.operations import attach_translation_with_note, mark_gloss_log
from gloss.relations import (
    RELATIONSHIP_FIELDS,
    SYMMETRICAL_RELATIONS,
    WITHIN_LANGUAGE_RELATIONS,
    relation_field,
)
from gloss.slug import derive_slug
from gloss.store import GlossStore

__all__ = [
    "RELATIONSHIP_FIELDS",
    "SYMMETRICAL_RELATIONS",
    "WITHIN_LANGUAGE_RELATIONS",
    "AudioPronunciation",
    "DeleteResult",
    "EmptySlugError",
    "Gloss",
    "GlossError",
    "GlossNotFoundError",
    "GlossStore",
    "IncompleteRecordError",
    "IntegrityIssue",
    "LanguageMismatchError",
    "UnknownFieldError",
    "UsageInfo",
    "attach_translation_with_note",
    "derive_slug",
    "mark_gloss_log",
    "relation_field",
]
