"""Common gloss workflows built on GlossStore.

Log markers record that an automated process already judged an operation
impossible for a gloss, so it is not attempted again:

    mark_gloss_log(store, "spa:sal", SPLIT_CONSIDERED_UNNECESSARY)
    mark_gloss_log(store, "arb:؟", translation_impossible("eng"))
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from gloss.errors import GlossNotFoundError

if TYPE_CHECKING:
    from gloss.models import Gloss
    from gloss.store import GlossStore

SPLIT_CONSIDERED_UNNECESSARY = "SPLIT_CONSIDERED_UNNECESSARY"


def translation_impossible(language: str) -> str:
    return f"TRANSLATION_CONSIDERED_IMPOSSIBLE:{language}"


def usage_example_impossible(language: str) -> str:
    return f"USAGE_EXAMPLE_CONSIDERED_IMPOSSIBLE:{language}"


def log_timestamp(now: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a Z suffix: 2026-01-02T03:04:05.678Z."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return now.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def attach_translation_with_note(
    store: GlossStore,
    source: Gloss,
    translation_text: str,
    translation_language: str,
    note_text: str | None,
    note_language: str,
) -> Gloss:
    """Link source to a translation, optionally noting something about the translation.

    The translation link is symmetrical. The note (usually in the learner's
    native language) is attached one-way to the translation gloss.
    Returns the translation gloss.
    """
    translation = store.ensure(translation_language, translation_text)
    store.attach(source, "translations", translation)

    if note_text and note_text.strip():
        note = store.ensure(note_language, note_text.strip())
        store.attach(translation, "notes", note)

    return translation


def mark_gloss_log(
    store: GlossStore,
    ref: str,
    marker: str,
    now: datetime | None = None,
) -> Gloss:
    """Add a timestamped marker to a gloss's logs. Raises GlossNotFoundError.

    Two markers with the same timestamp collide; the later one wins.
    """
    gloss = store.resolve_ref(ref)
    if gloss is None:
        raise GlossNotFoundError(ref)

    stamp = log_timestamp(now or datetime.now(UTC))
    gloss.logs[stamp] = marker
    store.save(gloss)
    return gloss


def has_log_marker(gloss: Gloss, marker: str) -> bool:
    return marker in gloss.logs.values()
