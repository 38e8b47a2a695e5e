"""Tests for lazy corpus iteration and filtered search."""

import types
from itertools import islice

from gloss.store import GlossStore


def _seed(store):
    for word in ("apple", "Apfelsine", "banana"):
        store.ensure("eng", word)
    for word in ("Apfel", "Banane"):
        store.ensure("deu", word)


class TestIterLanguage:
    """Tests for per-language iteration."""

    def test_yields_all(self, store):
        """Every gloss of the language is yielded once."""
        _seed(store)
        assert sorted(g.content for g in store.iter_language("eng")) == [
            "Apfelsine", "apple", "banana",
        ]

    def test_is_generator(self, store):
        """Iteration is lazy."""
        assert isinstance(store.iter_language("eng"), types.GeneratorType)
        assert isinstance(store.iter_all(), types.GeneratorType)

    def test_missing_language_empty(self, store):
        """A language with no directory yields nothing."""
        assert list(store.iter_language("xxx")) == []

    def test_skips_non_records(self, store, tmp_path):
        """Non-JSON files, corrupt JSON and stray directories are skipped."""
        _seed(store)
        eng = tmp_path / "data" / "gloss" / "eng"
        (eng / "README.txt").write_text("not a gloss")
        (eng / "broken.json").write_text("{")
        (eng / "leftover.json.tmp").write_text("{}")
        (eng / "subdir.json").mkdir()
        assert len(list(store.iter_language("eng"))) == 3

    def test_early_stop_reads_no_further(self, store, monkeypatch):
        """Stopping after one item loads exactly one record."""
        _seed(store)
        loaded = []
        original = GlossStore.load

        def counting_load(self, language, slug):
            loaded.append(slug)
            return original(self, language, slug)

        monkeypatch.setattr(GlossStore, "load", counting_load)

        first = next(store.iter_all())
        assert first.language == "deu"
        assert loaded == [first.slug]

    def test_nothing_read_before_first_next(self, store, monkeypatch):
        """Creating the generator performs no reads."""
        _seed(store)
        calls = []
        monkeypatch.setattr(store, "list_slugs", lambda language: calls.append(language) or [])
        gen = store.iter_language("eng")
        assert calls == []
        list(gen)
        assert calls == ["eng"]


class TestIterAll:
    """Tests for whole-corpus iteration."""

    def test_all_languages(self, store):
        """iter_all walks every language directory."""
        _seed(store)
        refs = [g.ref for g in store.iter_all()]
        assert len(refs) == 5
        assert {r.split(":")[0] for r in refs} == {"eng", "deu"}

    def test_empty_store(self, store):
        """An empty store yields nothing."""
        assert list(store.iter_all()) == []
        assert store.list_languages() == []

    def test_list_glosses(self, store):
        """The eager helper matches the lazy iterators."""
        _seed(store)
        assert len(store.list_glosses()) == 5
        assert len(store.list_glosses("deu")) == 2


class TestFiltered:
    """Tests for find_by_tag / search_content / iter_matching."""

    def test_search_case_insensitive(self, store):
        """Substring search ignores case."""
        _seed(store)
        hits = sorted(g.content for g in store.search_content("APF"))
        assert hits == ["Apfel", "Apfelsine"]

    def test_search_one_language(self, store):
        """search_content can be restricted to one language."""
        _seed(store)
        hits = [g.content for g in store.search_content("ban", language="deu")]
        assert hits == ["Banane"]

    def test_search_limit(self, store):
        """Callers can stop a search early."""
        _seed(store)
        assert len(list(islice(store.search_content("a"), 2))) == 2

    def test_find_by_tag(self, store):
        """Tag membership filters across languages."""
        _seed(store)
        fruit = store.ensure("eng", "fruit")
        for language, word in (("eng", "apple"), ("deu", "Apfel")):
            store.attach(store.find_by_content(language, word), "tags", fruit)

        tagged = sorted(g.ref for g in store.find_by_tag("eng:fruit"))
        assert tagged == ["deu:Apfel", "eng:apple"]
        assert [g.ref for g in store.find_by_tag("eng:fruit", language="deu")] == ["deu:Apfel"]

    def test_iter_matching(self, store):
        """Arbitrary predicates compose with iteration."""
        _seed(store)
        long_words = [g.content for g in store.iter_matching(lambda g: len(g.content) > 6)]
        assert long_words == ["Apfelsine"]
