"""Filesystem-safe slugs derived from gloss content.

Unicode is kept verbatim so slugs stay readable in every script; only
characters that break common filesystems are removed.
"""

from __future__ import annotations

import re

from gloss.errors import EmptySlugError

MAX_SLUG_LENGTH = 120

# / \ ? * : | " < >  plus control characters U+0000..U+001F
_ILLEGAL_RE = re.compile(r'[/\\?*:|"<>\x00-\x1f]')
# Windows rejects names ending in a space or dot
_TRAILING_RE = re.compile(r"[ .]+$")


def derive_slug(content: str) -> str:
    """Return the slug for content. Raises EmptySlugError if nothing usable remains."""
    if not content:
        msg = "Content must produce a valid slug."
        raise EmptySlugError(msg)

    slug = _ILLEGAL_RE.sub("", content)
    slug = _TRAILING_RE.sub("", slug)
    if len(slug) > MAX_SLUG_LENGTH:
        slug = _TRAILING_RE.sub("", slug[:MAX_SLUG_LENGTH])

    if not slug:
        msg = "Content must produce a valid slug."
        raise EmptySlugError(msg, details={"content": content})
    return slug
