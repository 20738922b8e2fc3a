"""Alias resolution between pages of a single snapshot."""

from collections.abc import Iterable, Mapping

from pagegraph.core.models import EntityID, Page


def page_to_aliases(page: Page, upper: bool) -> list[str]:
    """Return the alias names declared by a page, optionally upper-cased."""
    aliases = page.properties.alias if page.properties else []
    return [a.upper() if upper else a for a in aliases]


def pages_to_alias_map(pages: Iterable[Page]) -> dict[EntityID, EntityID]:
    """Map each aliased page id to the id of the page declaring the alias.

    Alias names are matched against page names exactly. Names with no
    matching page are ignored. If a page is claimed by several pages, the
    last one in iteration order wins.
    """
    pages = list(pages)
    by_name: dict[str, Page] = {}
    for page in pages:
        # duplicate names resolve to the first page
        by_name.setdefault(page.name, page)

    aliases: dict[EntityID, EntityID] = {}
    for page in pages:
        for name in page_to_aliases(page, False):
            aliased = by_name.get(name)
            if aliased is not None:
                aliases[aliased.id] = page.id
    return aliases


def remove_aliases(aliases: Mapping[EntityID, EntityID], pages: Iterable[Page]) -> list[Page]:
    """Return the pages that are not aliases of another page."""
    return [p for p in pages if p.id not in aliases]
