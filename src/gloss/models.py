"""Data models for the file-based gloss store."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from gloss.relations import RELATIONSHIP_FIELDS

REF_SEPARATOR = ":"


def normalize_language(language: str) -> str:
    return language.strip().lower()


def make_ref(language: str, slug: str) -> str:
    """Build a GlossRef string: "<language>:<slug>"."""
    return f"{language}{REF_SEPARATOR}{slug}"


def split_ref(ref: str) -> tuple[str, str] | None:
    """Split a GlossRef into (language, slug), or None if it is malformed.

    Only the first colon separates: slugs may themselves contain colons
    when they come from outside derive_slug. The slug is returned as-is;
    derive_slug keeps leading spaces, so " hello" is a distinct slug.
    """
    language, sep, slug = ref.partition(REF_SEPARATOR)
    language = normalize_language(language)
    if not sep or not language or not slug:
        return None
    return language, slug


def _str_list(d: dict[str, Any], key: str) -> list[str]:
    value = d.get(key) or []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        msg = f"{key} must be a list of strings"
        raise ValueError(msg)
    return list(value)


def _str_dict(d: dict[str, Any], key: str) -> dict[str, str]:
    value = d.get(key) or {}
    if not isinstance(value, dict) or not all(isinstance(v, str) for v in value.values()):
        msg = f"{key} must be an object of strings"
        raise ValueError(msg)
    return dict(value)


@dataclass
class AudioPronunciation:
    filename: str
    comment: str | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> AudioPronunciation:
        return cls(filename=d.get("filename", ""), comment=d.get("comment"))

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"filename": self.filename}
        if self.comment is not None:
            d["comment"] = self.comment
        return d


@dataclass
class Gloss:
    """A lexical entry stored at <data_root>/gloss/<language>/<slug>.json.

    The slug is not part of the file body; it is implied by the filename.
    """

    content: str
    language: str
    slug: str | None = None
    transcriptions: dict[str, str] = field(default_factory=dict)
    logs: dict[str, str] = field(default_factory=dict)   # ISO-8601 UTC timestamp -> marker

    # Relation fields: ordered, duplicate-free lists of "<language>:<slug>"
    morphologically_related: list[str] = field(default_factory=list)
    parts: list[str] = field(default_factory=list)
    has_similar_meaning: list[str] = field(default_factory=list)
    sounds_similar: list[str] = field(default_factory=list)
    usage_examples: list[str] = field(default_factory=list)
    to_be_differentiated_from: list[str] = field(default_factory=list)
    collocations: list[str] = field(default_factory=list)
    typical_follow_up: list[str] = field(default_factory=list)
    children: list[str] = field(default_factory=list)
    translations: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)

    needs_human_check: bool = False
    exclude_from_learning: bool = False

    # Media/credit payload, never touched by the relation engine
    decorative_images: list[str] = field(default_factory=list)
    semantic_images: list[str] = field(default_factory=list)
    unambigious_images: list[str] = field(default_factory=list)
    audio_pronunciations: list[AudioPronunciation] = field(default_factory=list)
    credits: list[str] = field(default_factory=list)

    @property
    def ref(self) -> str | None:
        """This gloss as a GlossRef, or None before it has been persisted."""
        if not self.slug:
            return None
        return make_ref(self.language, self.slug)

    @classmethod
    def from_dict(
        cls,
        d: dict[str, Any],
        slug: str | None = None,
        language: str | None = None,
    ) -> Gloss:
        """Build a Gloss from a file body. Missing keys become empty containers.

        Raises ValueError if a present key has the wrong shape.
        """
        lang = language if language is not None else d.get("language") or "und"
        content = d.get("content", "")
        if not isinstance(content, str):
            msg = f"content must be a string, got {type(content).__name__}"
            raise ValueError(msg)
        relations = {name: _str_list(d, name) for name in RELATIONSHIP_FIELDS}
        audio = d.get("audioPronunciations") or []
        if not isinstance(audio, list) or not all(isinstance(a, dict) for a in audio):
            msg = "audioPronunciations must be a list of objects"
            raise ValueError(msg)
        return cls(
            content=content,
            language=normalize_language(lang),
            slug=slug,
            transcriptions=_str_dict(d, "transcriptions"),
            logs=_str_dict(d, "logs"),
            needs_human_check=bool(d.get("needsHumanCheck", False)),
            exclude_from_learning=bool(d.get("excludeFromLearning", False)),
            decorative_images=_str_list(d, "decorativeImages"),
            semantic_images=_str_list(d, "semanticImages"),
            unambigious_images=_str_list(d, "unambigiousImages"),
            audio_pronunciations=[AudioPronunciation.from_dict(a) for a in audio],
            credits=_str_list(d, "credits"),
            **relations,
        )

    def to_dict(self) -> dict[str, Any]:
        """File body: the full field set except the slug."""
        d: dict[str, Any] = {
            "content": self.content,
            "language": self.language,
            "transcriptions": dict(self.transcriptions),
            "logs": dict(self.logs),
        }
        for name in RELATIONSHIP_FIELDS:
            d[name] = list(getattr(self, name))
        d.update({
            "needsHumanCheck": self.needs_human_check,
            "excludeFromLearning": self.exclude_from_learning,
            "decorativeImages": list(self.decorative_images),
            "semanticImages": list(self.semantic_images),
            "unambigiousImages": list(self.unambigious_images),
            "audioPronunciations": [a.to_dict() for a in self.audio_pronunciations],
            "credits": list(self.credits),
        })
        return d


@dataclass
class DeleteResult:
    """Outcome of GlossStore.delete_with_cleanup."""

    success: bool
    message: str
    refs_removed: int = 0     # glosses re-written to drop the deleted ref


@dataclass
class UsageInfo:
    """Glosses that use a given gloss as a part, usage example or translation."""

    used_as_part: list[str] = field(default_factory=list)
    used_as_usage_example: list[str] = field(default_factory=list)
    used_as_translation: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class IntegrityIssue:
    """A relation that breaks one of the store's invariants.

    kind is one of: dangling | missing_backref | cross_language | duplicate | malformed_ref
    """

    ref: str        # owner of the offending field
    field: str
    kind: str
    target: str

    def describe(self) -> str:
        return f"{self.ref} {self.field} -> {self.target}: {self.kind}"
