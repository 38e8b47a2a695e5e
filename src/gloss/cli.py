"""gloss CLI: relation-aware store for language-learning glosses.

Commands:
    gloss init [NAME]                       create gloss.toml + data dirs
    gloss slug CONTENT                      print the slug content maps to
    gloss ensure LANG CONTENT               find or create a gloss
    gloss show REF                          dump a gloss
    gloss attach REF FIELD TARGET           add a relation (mirrored if symmetrical)
    gloss detach REF FIELD TARGET           remove a relation
    gloss delete REF                        delete + sweep all references
    gloss search QUERY                      substring search over content
    gloss tagged TAG_REF                    glosses carrying a tag
    gloss usage REF                         where a gloss is used
    gloss translate REF TEXT LANG           attach a translation (+ note)
    gloss mark REF MARKER                   add a timestamped log marker
    gloss check                             report/repair broken relations
    gloss status                            corpus stats
"""

from __future__ import annotations

import contextlib
import logging
from itertools import islice
from pathlib import Path
from typing import TYPE_CHECKING

import click

from gloss.config import GlossConfig, init_config, load_config
from gloss.errors import GlossError
from gloss.models import split_ref
from gloss.operations import attach_translation_with_note, mark_gloss_log
from gloss.relations import RELATIONSHIP_FIELDS
from gloss.slug import derive_slug
from gloss.store import GlossStore

if TYPE_CHECKING:
    from collections.abc import Iterator

    from gloss.models import Gloss

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_cfg() -> GlossConfig:
    try:
        return load_config()
    except (ValueError, OSError) as exc:
        raise click.ClickException(str(exc)) from exc


def _open_store() -> GlossStore:
    return GlossStore(_load_cfg().data_root)


def _resolve(store: GlossStore, ref: str) -> Gloss:
    gloss = store.resolve_ref(ref)
    if gloss is None:
        raise click.ClickException(f"Gloss not found: {ref}")
    return gloss


@contextlib.contextmanager
def _gloss_errors() -> Iterator[None]:
    """Turn library errors into clean CLI errors."""
    try:
        yield
    except GlossError as exc:
        raise click.ClickException(exc.message) from exc


def _setup_logging(verbose: bool) -> None:
    level_name = "info"
    if not verbose:
        try:
            level_name = load_config().logging.level
        except (ValueError, OSError):
            level_name = "warning"
    level = getattr(logging, level_name.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(asctime)s %(name)s %(message)s")


def _echo_refs(glosses: Iterator[Gloss]) -> int:
    n = 0
    for gloss in glosses:
        click.echo(f"{gloss.ref}\t{gloss.content}")
        n += 1
    return n


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="gloss")
@click.option("-v", "--verbose", is_flag=True, help="Log store activity to stderr")
def cli(verbose: bool) -> None:
    """Relation-aware store for language-learning glosses."""
    _setup_logging(verbose)


# ---------------------------------------------------------------------------
# gloss init / gloss slug
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("name", required=False)
@click.option("--dir", "root", default=".", show_default=True, help="Project root")
def init(name: str | None, root: str) -> None:
    """Create gloss.toml and the data directory in the current project."""
    root_path = Path(root).resolve()
    try:
        config_path = init_config(root_path, name=name)
        click.echo(f"Created {config_path}")
    except FileExistsError:
        click.echo("gloss.toml already exists, skipping init")

    cfg = load_config(root_path)
    cfg.ensure_dirs()
    click.echo(f"Data root : {cfg.data_root}")


@cli.command()
@click.argument("content")
def slug(content: str) -> None:
    """Print the slug CONTENT maps to."""
    with _gloss_errors():
        click.echo(derive_slug(content))


# ---------------------------------------------------------------------------
# gloss ensure / gloss show
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("language")
@click.argument("content")
def ensure(language: str, content: str) -> None:
    """Find the gloss for CONTENT in LANGUAGE, creating it if missing."""
    store = _open_store()
    with _gloss_errors():
        gloss = store.ensure(language, content)
    click.echo(gloss.ref)


@cli.command()
@click.argument("ref")
def show(ref: str) -> None:
    """Show every non-empty field of a gloss.

    \b
    gloss show eng:hello
    """
    from rich.console import Console
    from rich.table import Table

    store = _open_store()
    gloss = _resolve(store, ref)

    table = Table(title=f"{gloss.ref}  {gloss.content}", show_header=False)
    table.add_column("Field", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in sorted(gloss.transcriptions.items()):
        table.add_row(f"transcription:{key}", value)
    for name in RELATIONSHIP_FIELDS:
        refs = getattr(gloss, name)
        if refs:
            table.add_row(name, "\n".join(refs))
    for stamp in sorted(gloss.logs):
        table.add_row(f"log {stamp}", gloss.logs[stamp])
    if gloss.needs_human_check:
        table.add_row("needsHumanCheck", "[yellow]yes[/yellow]")
    if gloss.exclude_from_learning:
        table.add_row("excludeFromLearning", "yes")

    Console().print(table)


# ---------------------------------------------------------------------------
# gloss attach / gloss detach / gloss delete
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("ref")
@click.argument("field", type=click.Choice(RELATIONSHIP_FIELDS))
@click.argument("target_ref")
def attach(ref: str, field: str, target_ref: str) -> None:
    """Relate REF to TARGET_REF (mirrored for symmetrical fields).

    \b
    gloss attach eng:hello translations deu:hallo
    """
    store = _open_store()
    base = _resolve(store, ref)
    target = _resolve(store, target_ref)
    with _gloss_errors():
        store.attach(base, field, target)
    click.echo(f"{ref} {field} -> {target_ref}")


@cli.command()
@click.argument("ref")
@click.argument("field", type=click.Choice(RELATIONSHIP_FIELDS))
@click.argument("target_ref")
def detach(ref: str, field: str, target_ref: str) -> None:
    """Remove TARGET_REF from REF's FIELD (and the mirror, if symmetrical)."""
    store = _open_store()
    base = _resolve(store, ref)
    with _gloss_errors():
        store.detach(base, field, target_ref)
    click.echo(f"{ref} {field} -/-> {target_ref}")


@cli.command()
@click.argument("ref")
def delete(ref: str) -> None:
    """Delete a gloss and remove every reference to it (full corpus sweep)."""
    parts = split_ref(ref)
    if parts is None:
        raise click.ClickException(f"Not a gloss ref: {ref} (expected LANG:SLUG)")
    store = _open_store()
    result = store.delete_with_cleanup(*parts)
    if not result.success:
        raise click.ClickException(result.message)
    click.echo(result.message)


# ---------------------------------------------------------------------------
# gloss search / gloss tagged / gloss usage
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("query")
@click.option("--lang", "language", default=None, help="Restrict to one language")
@click.option("--limit", default=20, show_default=True, help="Stop after this many matches")
def search(query: str, language: str | None, limit: int) -> None:
    """Case-insensitive substring search over gloss content."""
    store = _open_store()
    n = _echo_refs(islice(store.search_content(query, language), limit))
    if n == 0:
        click.echo("No matches.", err=True)


@cli.command()
@click.argument("tag_ref")
@click.option("--lang", "language", default=None, help="Restrict to one language")
@click.option("--limit", default=50, show_default=True, help="Stop after this many matches")
def tagged(tag_ref: str, language: str | None, limit: int) -> None:
    """List glosses whose tags contain TAG_REF."""
    store = _open_store()
    n = _echo_refs(islice(store.find_by_tag(tag_ref, language), limit))
    if n == 0:
        click.echo("No matches.", err=True)


@cli.command()
@click.argument("ref")
def usage(ref: str) -> None:
    """Show which glosses use REF as a part, usage example or translation."""
    store = _open_store()
    info = store.usage_info(_resolve(store, ref))
    for label, refs in (
        ("Part of", info.used_as_part),
        ("Usage example of", info.used_as_usage_example),
        ("Translation of", info.used_as_translation),
    ):
        click.echo(f"{label} ({len(refs)}):")
        for r in refs:
            click.echo(f"  {r}")


# ---------------------------------------------------------------------------
# gloss translate / gloss mark
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("ref")
@click.argument("text")
@click.argument("language")
@click.option("--note", default=None, help="Note attached to the translation")
@click.option("--note-lang", default=None, help="Language of the note (default: native_language)")
def translate(ref: str, text: str, language: str, note: str | None, note_lang: str | None) -> None:
    """Attach TEXT in LANGUAGE as a translation of REF.

    \b
    gloss translate eng:thanks Danke deu --note informal
    """
    cfg = _load_cfg()
    store = GlossStore(cfg.data_root)
    source = _resolve(store, ref)
    with _gloss_errors():
        translation = attach_translation_with_note(
            store, source, text, language, note, note_lang or cfg.native_language
        )
    click.echo(translation.ref)


@cli.command()
@click.argument("ref")
@click.argument("marker")
def mark(ref: str, marker: str) -> None:
    """Add a timestamped MARKER to REF's logs.

    \b
    gloss mark spa:sal SPLIT_CONSIDERED_UNNECESSARY
    """
    store = _open_store()
    with _gloss_errors():
        mark_gloss_log(store, ref, marker)
    click.echo(f"Marked {ref}: {marker}")


# ---------------------------------------------------------------------------
# gloss check / gloss status
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--lang", "language", default=None, help="Only inspect one language")
@click.option("--repair", is_flag=True, help="Fix the issues found")
@click.option("--dry-run", is_flag=True, help="With --repair: show what would change")
def check(language: str | None, repair: bool, dry_run: bool) -> None:
    """Find dangling, one-sided, cross-language and duplicate relations.

    Exits 1 if issues were found and left unrepaired.
    """
    store = _open_store()
    if repair:
        issues = store.repair(language, dry_run=dry_run)
    else:
        issues = list(store.check_integrity(language))

    for issue in issues:
        click.echo(issue.describe())

    if not issues:
        click.echo("No issues found.")
        return
    if repair and not dry_run:
        click.echo(f"Repaired {len(issues)} issue(s).")
        return
    click.echo(f"{len(issues)} issue(s) found.", err=True)
    raise SystemExit(1)


@cli.command()
def status() -> None:
    """Show per-language gloss counts."""
    from rich.console import Console
    from rich.table import Table

    cfg = _load_cfg()
    store = GlossStore(cfg.data_root)

    table = Table(title=f"gloss: {cfg.name}", show_header=True, header_style="bold")
    table.add_column("Language", style="dim", no_wrap=True)
    table.add_column("Glosses", justify="right")

    languages = store.list_languages()
    total = 0
    for language in languages:
        n = len(store.list_slugs(language))
        total += n
        table.add_row(language, str(n))
    if not languages:
        table.add_row("[red]empty[/red]", "0")
    table.add_row("", "")
    table.add_row("Total", str(total))
    table.caption = str(cfg.data_root)

    Console().print(table)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    cli(standalone_mode=True)


if __name__ == "__main__":
    main()
