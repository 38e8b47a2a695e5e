"""Tests for the integrity check and repair pass."""

import json

from gloss.relations import SYMMETRICAL_RELATIONS


def _kinds(issues):
    return sorted((i.ref, i.field, i.kind, i.target) for i in issues)


class TestCheckIntegrity:
    """Tests for GlossStore.check_integrity."""

    def test_clean_corpus(self, store, hello, hallo):
        """A corpus built through attach has no issues."""
        store.attach(hello, "translations", hallo)
        store.attach(hello, "parts", store.ensure("eng", "hel"))
        assert list(store.check_integrity()) == []

    def test_missing_backref(self, store, hello, hallo):
        """An interrupted mirror shows up as missing_backref."""
        hello.translations.append("deu:hallo")
        store.save(hello)

        assert _kinds(store.check_integrity()) == [
            ("eng:hello", "translations", "missing_backref", "deu:hallo"),
        ]

    def test_dangling(self, store, hello):
        """A ref to a missing gloss is dangling."""
        hello.parts.append("eng:gone")
        store.save(hello)
        assert _kinds(store.check_integrity()) == [
            ("eng:hello", "parts", "dangling", "eng:gone"),
        ]

    def test_cross_language(self, store, hello, hallo):
        """A within-language field pointing abroad is reported."""
        hello.sounds_similar.append("deu:hallo")
        store.save(hello)
        assert _kinds(store.check_integrity()) == [
            ("eng:hello", "sounds_similar", "cross_language", "deu:hallo"),
        ]

    def test_duplicate_and_malformed(self, store, hello):
        """Duplicate and unparseable refs are reported."""
        hel = store.ensure("eng", "hel")
        hello.parts.extend([hel.ref, hel.ref, "nonsense"])
        store.save(hello)
        assert _kinds(store.check_integrity()) == [
            ("eng:hello", "parts", "duplicate", "eng:hel"),
            ("eng:hello", "parts", "malformed_ref", "nonsense"),
        ]

    def test_language_filter(self, store, hello, hallo):
        """check_integrity can be restricted to one language."""
        hello.parts.append("eng:gone")
        store.save(hello)
        assert list(store.check_integrity("deu")) == []


class TestRepair:
    """Tests for GlossStore.repair."""

    def test_restores_backref(self, store, hello, hallo):
        """A missing mirror is written onto the target."""
        hello.translations.append("deu:hallo")
        store.save(hello)

        issues = store.repair()

        assert [i.kind for i in issues] == ["missing_backref"]
        assert store.load("deu", "hallo").translations == ["eng:hello"]
        assert list(store.check_integrity()) == []

    def test_drops_bad_refs(self, store, hello, hallo):
        """Dangling, cross-language, duplicate and malformed refs are removed."""
        hel = store.ensure("eng", "hel")
        hello.parts.extend([hel.ref, hel.ref, "eng:gone", "nonsense"])
        hello.sounds_similar.append("deu:hallo")
        store.save(hello)

        store.repair()

        repaired = store.load("eng", "hello")
        assert repaired.parts == ["eng:hel"]
        assert repaired.sounds_similar == []
        assert list(store.check_integrity()) == []

    def test_dry_run_changes_nothing(self, store, hello):
        """dry_run reports without writing."""
        hello.parts.append("eng:gone")
        store.save(hello)

        issues = store.repair(dry_run=True)

        assert len(issues) == 1
        assert store.load("eng", "hello").parts == ["eng:gone"]

    def test_symmetry_after_repair(self, store):
        """After repair every symmetrical ref is mirrored."""
        words = [store.ensure("eng", w) for w in ("a", "b", "c")]
        for field in SYMMETRICAL_RELATIONS - {"translations"}:
            getattr(words[0], field).extend(["eng:b", "eng:c"])
        store.save(words[0])

        store.repair()

        for word in ("b", "c"):
            gloss = store.load("eng", word)
            for field in SYMMETRICAL_RELATIONS - {"translations"}:
                assert getattr(gloss, field) == ["eng:a"]


class TestLeadingSpaceAndColonSlugs:
    """Slugs that differ from a neighbour only by a leading space or contain a colon."""

    def test_leading_space_not_dangling(self, store, hallo):
        """A valid ref to " hello" is not reported, and repair keeps it."""
        spaced = store.ensure("eng", " hello")
        store.attach(hallo, "translations", spaced)
        store.attach(hallo, "notes", spaced)

        assert list(store.check_integrity()) == []
        assert store.repair() == []
        assert store.load("deu", "hallo").notes == ["eng: hello"]

    def test_colon_slug_resolves(self, store, hello, tmp_path):
        """A slug containing a colon is checked against its own file."""
        path = tmp_path / "data" / "gloss" / "eng" / "a:b.json"
        path.write_text(json.dumps({"content": "a:b"}))
        colon = store.resolve_ref("eng:a:b")
        store.attach(hello, "has_similar_meaning", colon)

        assert store.load("eng", "a:b").has_similar_meaning == ["eng:hello"]
        assert list(store.check_integrity()) == []
