"""Read and write gloss JSON files, and keep the relation graph consistent.

GlossStore is the public API:
    store = GlossStore("/path/to/data")
    hello = store.ensure("eng", "hello")
    hallo = store.ensure("deu", "hallo")
    store.attach(hello, "translations", hallo)     # mirrored onto hallo
    store.delete_with_cleanup("eng", "hello")      # sweeps every reference

Layout:
    <data_root>/
        gloss/
            <language>/          # normalised: lowercased, trimmed
                <slug>.json      # full record except the slug itself

Every call re-reads from disk; there is no cache and no locking. A single
logical writer is assumed.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from gloss.errors import EmptySlugError, IncompleteRecordError, LanguageMismatchError
from gloss.models import (
    DeleteResult,
    Gloss,
    IntegrityIssue,
    UsageInfo,
    make_ref,
    normalize_language,
    split_ref,
)
from gloss.relations import RELATIONS, relation_field
from gloss.slug import derive_slug

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

logger = logging.getLogger("gloss.store")

_GLOSS_SUBDIR = "gloss"
_SUFFIX = ".json"


def _safe_name(name: str) -> bool:
    return bool(name) and name not in (".", "..") and "/" not in name and "\\" not in name


class GlossStore:
    """JSON-file-backed gloss store."""

    def __init__(self, data_root: Path | str) -> None:
        self.data_root = Path(data_root)
        self.gloss_dir = self.data_root / _GLOSS_SUBDIR

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def _language_dir(self, language: str) -> Path:
        return self.gloss_dir / normalize_language(language)

    def _gloss_path(self, language: str, slug: str) -> Path:
        return self._language_dir(language) / f"{slug}{_SUFFIX}"

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def exists(self, language: str, slug: str) -> bool:
        if not (_safe_name(normalize_language(language)) and _safe_name(slug)):
            return False
        return self._gloss_path(language, slug).is_file()

    def load(self, language: str, slug: str) -> Gloss | None:
        """Load a gloss. Missing, unreadable or malformed files all yield None."""
        if not self.exists(language, slug):
            return None
        path = self._gloss_path(language, slug)
        try:
            with path.open(encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("failed to load gloss %s: %s", make_ref(language, slug), exc)
            return None
        if not isinstance(data, dict):
            logger.warning("skipping %s: not a gloss record", path)
            return None
        try:
            return Gloss.from_dict(data, slug=slug, language=language)
        except (TypeError, ValueError, AttributeError) as exc:
            logger.warning("malformed gloss %s: %s", make_ref(language, slug), exc)
            return None

    def resolve_ref(self, ref: str) -> Gloss | None:
        """Load the gloss a "<language>:<slug>" ref points at."""
        parts = split_ref(ref)
        if parts is None:
            return None
        return self.load(*parts)

    def find_by_content(self, language: str, content: str) -> Gloss | None:
        try:
            slug = derive_slug(content)
        except EmptySlugError:
            return None
        return self.load(language, slug)

    def list_languages(self) -> list[str]:
        """Language directories present in the store."""
        if not self.gloss_dir.is_dir():
            return []
        return sorted(d.name for d in self.gloss_dir.iterdir() if d.is_dir())

    def list_slugs(self, language: str) -> list[str]:
        """Slugs stored for one language (a single directory listing)."""
        lang_dir = self._language_dir(language)
        if not lang_dir.is_dir():
            return []
        return sorted(
            p.name[: -len(_SUFFIX)]
            for p in lang_dir.iterdir()
            if p.name.endswith(_SUFFIX) and p.is_file()
        )

    def list_glosses(self, language: str | None = None) -> list[Gloss]:
        """Load every gloss into a list. Prefer the iter_* generators on large corpora."""
        if language is not None:
            return list(self.iter_language(language))
        return list(self.iter_all())

    # ------------------------------------------------------------------
    # Iterate (lazy: one directory listing and one record in memory)
    # ------------------------------------------------------------------

    def iter_language(self, language: str) -> Iterator[Gloss]:
        """Yield glosses of one language, skipping unparseable files."""
        for slug in self.list_slugs(language):
            gloss = self.load(language, slug)
            if gloss is not None:
                yield gloss

    def iter_all(self) -> Iterator[Gloss]:
        """Yield every gloss in the corpus, language by language."""
        for language in self.list_languages():
            yield from self.iter_language(language)

    def iter_matching(
        self,
        predicate: Callable[[Gloss], bool],
        language: str | None = None,
    ) -> Iterator[Gloss]:
        source = self.iter_language(language) if language is not None else self.iter_all()
        for gloss in source:
            if predicate(gloss):
                yield gloss

    def find_by_tag(self, tag_ref: str, language: str | None = None) -> Iterator[Gloss]:
        """Glosses whose tags contain tag_ref."""
        return self.iter_matching(lambda g: tag_ref in g.tags, language)

    def search_content(self, substring: str, language: str | None = None) -> Iterator[Gloss]:
        """Case-insensitive substring search over content."""
        needle = substring.casefold()
        return self.iter_matching(lambda g: needle in g.content.casefold(), language)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def ensure(self, language: str, content: str) -> Gloss:
        """Return the gloss for (language, content), creating it if missing."""
        existing = self.find_by_content(language, content)
        if existing is not None:
            return existing
        return self.create(Gloss(content=content, language=normalize_language(language)))

    def create(self, gloss: Gloss) -> Gloss:
        """Persist a new gloss. If one already exists at its slug, return that instead."""
        slug = derive_slug(gloss.content)
        language = normalize_language(gloss.language)
        if not _safe_name(language):
            msg = f"Invalid language tag: {gloss.language!r}"
            raise IncompleteRecordError(msg)

        existing = self.load(language, slug)
        if existing is not None:
            return existing
        if self.exists(language, slug):
            logger.warning("overwriting unreadable gloss %s", make_ref(language, slug))

        gloss.slug = slug
        gloss.language = language
        self._write(gloss)
        logger.info("created %s", gloss.ref)
        return gloss

    def save(self, gloss: Gloss) -> None:
        """Overwrite the full record for gloss."""
        if not gloss.slug or not gloss.language:
            msg = "Gloss must have language and slug before saving."
            raise IncompleteRecordError(msg, details={"content": gloss.content})
        self._write(gloss)

    def delete(self, language: str, slug: str) -> None:
        """Remove a gloss file. No-op if absent. Does not touch references."""
        if self.exists(language, slug):
            self._gloss_path(language, slug).unlink(missing_ok=True)

    def _write(self, gloss: Gloss) -> None:
        """Write to tmp then rename, so readers never see a half-written record."""
        path = self._gloss_path(gloss.language, gloss.slug or "")
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".tmp")
        try:
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(gloss.to_dict(), f, indent=2, ensure_ascii=False)
            tmp.replace(path)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise
        logger.debug("saved %s", gloss.ref)

    # ------------------------------------------------------------------
    # Relations
    # ------------------------------------------------------------------

    @staticmethod
    def _require_ref(gloss: Gloss) -> str:
        ref = gloss.ref
        if ref is None:
            msg = f"Gloss {gloss.content!r} has no slug; create it before relating it."
            raise IncompleteRecordError(msg)
        return ref

    def attach(self, base: Gloss, field: str, target: Gloss) -> None:
        """Add target to base.<field>, mirroring onto target for symmetrical fields.

        All validation happens before anything is written. base is saved only
        if it changed, then target likewise; the two saves are independent.
        """
        rel = relation_field(field)
        if rel.within_language and target.language != base.language:
            raise LanguageMismatchError(field, base.language, target.language)
        base_ref = self._require_ref(base)
        target_ref = self._require_ref(target)

        refs = rel.refs(base)
        if target_ref not in refs:
            refs.append(target_ref)
            self.save(base)

        if rel.symmetrical:
            back = rel.refs(target)
            if base_ref not in back:
                back.append(base_ref)
                self.save(target)

    def detach(self, base: Gloss, field: str, target_ref: str) -> None:
        """Remove target_ref from base.<field> and, if symmetrical, the back-reference.

        A symmetrical target that no longer exists is skipped.
        """
        rel = relation_field(field)
        refs = rel.refs(base)
        refs[:] = [r for r in refs if r != target_ref]
        self.save(base)

        if not rel.symmetrical:
            return
        target = self.resolve_ref(target_ref)
        if target is None:
            logger.debug("detach: %s no longer exists, skipping mirror", target_ref)
            return
        base_ref = self._require_ref(base)
        back = rel.refs(target)
        back[:] = [r for r in back if r != base_ref]
        self.save(target)

    def usage_info(self, gloss: Gloss) -> UsageInfo:
        """Scan the corpus for glosses using gloss as a part, example or translation."""
        ref = self._require_ref(gloss)
        info = UsageInfo()
        for item in self.iter_all():
            if ref in item.parts:
                info.used_as_part.append(item.ref or "")
            if ref in item.usage_examples:
                info.used_as_usage_example.append(item.ref or "")
            if ref in item.translations:
                info.used_as_translation.append(item.ref or "")
        return info

    # ------------------------------------------------------------------
    # Cascading delete
    # ------------------------------------------------------------------

    def delete_with_cleanup(self, language: str, slug: str) -> DeleteResult:
        """Delete a gloss and remove every reference to it across the corpus.

        O(corpus): there is no reverse index, so every record is visited once.
        A record that cannot be read or re-written is logged and skipped.
        """
        language = normalize_language(language)
        target_ref = make_ref(language, slug)
        if not self.exists(language, slug):
            return DeleteResult(success=False, message=f"Gloss not found: {target_ref}")

        self.delete(language, slug)

        cleaned = 0
        failed = 0
        for item in self.iter_all():
            changed = False
            for rel in RELATIONS.values():
                refs = rel.refs(item)
                if target_ref in refs:
                    refs[:] = [r for r in refs if r != target_ref]
                    changed = True
            if not changed:
                continue
            try:
                self.save(item)
            except OSError:
                logger.exception("failed to clean references in %s", item.ref)
                failed += 1
                continue
            cleaned += 1

        message = f"Deleted {target_ref}. Cleaned references in {cleaned} glosses."
        if failed:
            message += f" {failed} glosses could not be rewritten."
        logger.info("deleted %s: cleaned %d, failed %d", target_ref, cleaned, failed)
        return DeleteResult(success=True, message=message, refs_removed=cleaned)

    # ------------------------------------------------------------------
    # Integrity
    # ------------------------------------------------------------------

    def _inspect(self, gloss: Gloss) -> list[IntegrityIssue]:
        owner = self._require_ref(gloss)
        issues: list[IntegrityIssue] = []
        for rel in RELATIONS.values():
            seen: set[str] = set()
            for target in rel.refs(gloss):
                if target in seen:
                    issues.append(IntegrityIssue(owner, rel.name, "duplicate", target))
                    continue
                seen.add(target)

                parts = split_ref(target)
                if parts is None:
                    issues.append(IntegrityIssue(owner, rel.name, "malformed_ref", target))
                    continue
                if rel.within_language and normalize_language(parts[0]) != gloss.language:
                    issues.append(IntegrityIssue(owner, rel.name, "cross_language", target))
                    continue
                other = self.load(*parts)
                if other is None:
                    issues.append(IntegrityIssue(owner, rel.name, "dangling", target))
                elif rel.symmetrical and owner not in rel.refs(other):
                    issues.append(IntegrityIssue(owner, rel.name, "missing_backref", target))
        return issues

    def check_integrity(self, language: str | None = None) -> Iterator[IntegrityIssue]:
        """Lazily report every relation that breaks a store invariant."""
        source = self.iter_language(language) if language is not None else self.iter_all()
        for gloss in source:
            yield from self._inspect(gloss)

    def repair(self, language: str | None = None, *, dry_run: bool = False) -> list[IntegrityIssue]:
        """Fix what check_integrity reports. Returns the issues found.

        Dangling, cross-language, malformed and duplicate refs are dropped from
        their owner; missing back-references are restored on the target.
        """
        found: list[IntegrityIssue] = []
        source = self.iter_language(language) if language is not None else self.iter_all()
        for gloss in source:
            issues = self._inspect(gloss)
            if not issues:
                continue
            found.extend(issues)
            if not dry_run:
                self._apply_repairs(gloss, issues)
        return found

    def _apply_repairs(self, gloss: Gloss, issues: list[IntegrityIssue]) -> None:
        drop: dict[str, set[str]] = {}
        dedupe: set[str] = set()
        for issue in issues:
            logger.info("repairing %s", issue.describe())
            if issue.kind == "missing_backref":
                self._restore_backref(gloss, issue)
            elif issue.kind == "duplicate":
                dedupe.add(issue.field)
            else:
                drop.setdefault(issue.field, set()).add(issue.target)

        touched = dedupe | drop.keys()
        if not touched:
            return
        for name in touched:
            removed = drop.get(name, set())
            refs = RELATIONS[name].refs(gloss)
            refs[:] = [r for r in dict.fromkeys(refs) if r not in removed]
        self.save(gloss)

    def _restore_backref(self, gloss: Gloss, issue: IntegrityIssue) -> None:
        target = self.resolve_ref(issue.target)
        if target is None:
            return
        back = RELATIONS[issue.field].refs(target)
        if issue.ref not in back:
            back.append(issue.ref)
            self.save(target)
