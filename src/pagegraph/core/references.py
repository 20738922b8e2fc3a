"""Reference normalization and target resolution.

A block's raw references are turned into ``(source, target)`` pairs by a
normalizer, and each target is then resolved to the page that should receive
the edge. Targets may name a block rather than a page; those are looked up
through the host's ``get_block`` collaborator.
"""

from collections.abc import Awaitable, Callable, Collection, Iterable, Iterator, Mapping, Sequence

from pagegraph.core.models import Block, EntityID, Page, Reference

GetBlockFn = Callable[[EntityID], Awaitable[Block | None]]
ReferenceNormalizer = Callable[[bool, Sequence[Page], Block], Iterable[Reference]]


def block_to_references(journal: bool, journals: Sequence[Page], block: Block) -> Iterator[Reference]:
    """Yield the references contributed by a single block.

    Every target in ``block.refs`` is attributed to the block's page. Pages in
    the block's ancestor path that are not the page itself and not one of the
    block's own targets are nested parents; each target is also attributed to
    every nested parent, so nesting under ``[[B]]`` links ``B`` to whatever
    the child block references.

    When ``journal`` is false, journal pages are neither targets nor nested
    parents.

    Args:
        journal: Whether journal pages are included in the graph.
        journals: Pages flagged as journal entries.
        block: The block to normalize.
    """
    if not block.refs or block.page is None:
        return

    excluded = set() if journal else {p.id for p in journals}
    page_id = block.page.id
    targets = [r.id for r in block.refs if r.id not in excluded]
    own = {r.id for r in block.refs}

    parents: list[EntityID] = []
    for ref in block.path_refs:
        if ref.id == page_id or ref.id in own or ref.id in excluded:
            continue
        if ref.id not in parents:
            parents.append(ref.id)

    for target in targets:
        yield Reference(page_id, target)
        for parent in parents:
            if parent != target:
                yield Reference(parent, target)


async def ref_to_page_ref(
    get_block: GetBlockFn,
    aliases: Mapping[EntityID, EntityID],
    page_ids: Collection[EntityID],
    ref: EntityID,
) -> EntityID | None:
    """Resolve a raw reference target to the canonical page id.

    ``page_ids`` holds the ids of the alias-filtered snapshot pages. Aliased
    pages resolve to their canonical page. Targets that are not known pages
    are treated as block ids and resolve to the block's owning page.

    Returns:
        The page id, or None when the target cannot be mapped to a page.
    """
    if ref in aliases:
        return aliases[ref]
    if ref in page_ids:
        return ref

    block = await get_block(ref)
    if block is None or block.page is None:
        return None
    owner = block.page.id
    return aliases.get(owner, owner)
