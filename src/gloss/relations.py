"""Relation taxonomy: the twelve relation fields and the rules attached to them.

Within-language fields may only point at glosses of the owner's language.
Symmetrical fields are mirrored: attaching A -> B also attaches B -> A.
Everything else is one-directional (a note attaches to a translation without
the translation noting back).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from operator import attrgetter
from typing import TYPE_CHECKING

from gloss.errors import UnknownFieldError

if TYPE_CHECKING:
    from collections.abc import Callable

    from gloss.models import Gloss

RELATIONSHIP_FIELDS: tuple[str, ...] = (
    "morphologically_related",
    "parts",
    "has_similar_meaning",
    "sounds_similar",
    "usage_examples",
    "to_be_differentiated_from",
    "collocations",
    "typical_follow_up",
    "children",
    "translations",
    "notes",
    "tags",
)

WITHIN_LANGUAGE_RELATIONS: frozenset[str] = frozenset({
    "morphologically_related",
    "parts",
    "has_similar_meaning",
    "sounds_similar",
    "usage_examples",
    "to_be_differentiated_from",
    "collocations",
    "typical_follow_up",
})

SYMMETRICAL_RELATIONS: frozenset[str] = frozenset({
    "morphologically_related",
    "has_similar_meaning",
    "sounds_similar",
    "to_be_differentiated_from",
    "translations",
})


@dataclass(frozen=True)
class RelationField:
    """One relation field with its rules and a getter bound at definition time."""

    name: str
    within_language: bool
    symmetrical: bool
    _getter: Callable[[Gloss], list[str]] = field(repr=False, compare=False)

    def refs(self, gloss: Gloss) -> list[str]:
        """The live ref list of gloss for this field (mutate in place to change it)."""
        return self._getter(gloss)


RELATIONS: dict[str, RelationField] = {
    name: RelationField(
        name=name,
        within_language=name in WITHIN_LANGUAGE_RELATIONS,
        symmetrical=name in SYMMETRICAL_RELATIONS,
        _getter=attrgetter(name),
    )
    for name in RELATIONSHIP_FIELDS
}


def relation_field(name: str) -> RelationField:
    """Look up a relation field by name. Raises UnknownFieldError."""
    try:
        return RELATIONS[name]
    except KeyError:
        raise UnknownFieldError(name) from None
