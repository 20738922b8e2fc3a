"""Tests for reference normalization and target resolution."""

from unittest.mock import AsyncMock

import pytest

from pagegraph.core.models import Block, Page, Reference
from pagegraph.core.references import block_to_references, ref_to_page_ref


def block(refs, path_refs, page_id):
    return Block.model_validate(
        {
            "refs": [{"id": r} for r in refs],
            "path-refs": [{"id": r} for r in path_refs],
            "page": {"id": page_id},
        }
    )


# ============================================================
# block_to_references
# ============================================================


class TestBlockToReferences:
    def test_direct_reference(self):
        refs = list(block_to_references(False, [], block([2], [1, 2], 1)))
        assert refs == [Reference(1, 2)]

    def test_multiple_targets(self):
        refs = list(block_to_references(False, [], block([2, 3], [1, 2, 3], 1)))
        assert refs == [Reference(1, 2), Reference(1, 3)]

    def test_nested_parent_attribution(self):
        refs = list(block_to_references(False, [], block([3], [1, 2, 3], 1)))
        assert refs == [Reference(1, 3), Reference(2, 3)]

    def test_deeply_nested_parents(self):
        refs = list(block_to_references(False, [], block([4], [1, 2, 3, 4], 1)))
        assert refs == [Reference(1, 4), Reference(2, 4), Reference(3, 4)]

    def test_no_refs_yields_nothing(self):
        assert list(block_to_references(False, [], block([], [1], 1))) == []

    def test_block_without_page_yields_nothing(self):
        blk = Block.model_validate({"refs": [{"id": 2}]})
        assert list(block_to_references(False, [], blk)) == []

    def test_journal_target_suppressed(self):
        journals = [Page(id=2, name="Jan 1st", journal=True)]
        refs = list(block_to_references(False, journals, block([2], [1, 2], 1)))
        assert refs == []

    def test_journal_parent_suppressed(self):
        journals = [Page(id=2, name="Jan 1st", journal=True)]
        refs = list(block_to_references(False, journals, block([3], [1, 2, 3], 1)))
        assert refs == [Reference(1, 3)]

    def test_journal_owned_block_keeps_regular_parent(self):
        # the owning journal page stays as source; the assembler drops it
        journals = [Page(id=4, name="Jan 1st", journal=True)]
        refs = list(block_to_references(False, journals, block([3], [4, 5, 3], 4)))
        assert refs == [Reference(4, 3), Reference(5, 3)]

    def test_journals_kept_when_enabled(self):
        journals = [Page(id=2, name="Jan 1st", journal=True)]
        refs = list(block_to_references(True, journals, block([3], [1, 2, 3], 1)))
        assert refs == [Reference(1, 3), Reference(2, 3)]


# ============================================================
# ref_to_page_ref
# ============================================================


class TestRefToPageRef:
    @pytest.mark.asyncio
    async def test_known_page(self):
        get_block = AsyncMock()
        assert await ref_to_page_ref(get_block, {}, {1, 2}, 2) == 2
        get_block.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_aliased_page(self):
        get_block = AsyncMock()
        assert await ref_to_page_ref(get_block, {2: 1}, {1, 3}, 2) == 1
        get_block.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_block_resolves_to_owning_page(self):
        get_block = AsyncMock(return_value=Block.model_validate({"page": {"id": 2}}))
        assert await ref_to_page_ref(get_block, {}, {1, 2}, 30) == 2
        get_block.assert_awaited_once_with(30)

    @pytest.mark.asyncio
    async def test_block_on_aliased_page(self):
        get_block = AsyncMock(return_value=Block.model_validate({"page": {"id": 2}}))
        assert await ref_to_page_ref(get_block, {2: 1}, {1}, 30) == 1

    @pytest.mark.asyncio
    async def test_unknown_block(self):
        get_block = AsyncMock(return_value=None)
        assert await ref_to_page_ref(get_block, {}, {1}, 30) is None

    @pytest.mark.asyncio
    async def test_block_without_page(self):
        get_block = AsyncMock(return_value=Block())
        assert await ref_to_page_ref(get_block, {}, {1}, 30) is None
