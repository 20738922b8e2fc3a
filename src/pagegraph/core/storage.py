"""Snapshot sources feeding the graph build."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

import yaml
from pydantic import ValidationError

from pagegraph.core.models import Block, EntityID, GraphSettings, Page

logger = logging.getLogger(__name__)


class SnapshotError(Exception):
    """Raised when a snapshot cannot be parsed or validated."""


class GraphSource(ABC):
    """Abstract base class for the collaborators of a graph build."""

    @abstractmethod
    async def get_all_pages(self) -> list[Page]:
        """Get every page in the snapshot."""
        ...

    @abstractmethod
    async def get_block_references(self) -> list[list[Block]]:
        """Get blocks carrying references, grouped in batches."""
        ...

    @abstractmethod
    def get_settings(self) -> GraphSettings:
        """Get the build settings."""
        ...

    @abstractmethod
    async def get_block(self, ref: EntityID) -> Block | None:
        """Get a block by id. Returns None if not found."""
        ...


class SnapshotSource(GraphSource):
    """File-based source reading a YAML (or JSON) snapshot.

    The file has a ``pages`` list and a ``blocks`` list of batches::

        pages:
          - {id: 1, name: A, "journal?": false}
        blocks:
          - - {id: 10, refs: [{id: 2}], path-refs: [{id: 1}, {id: 2}], page: {id: 1}}

    The file is read once, on first access.
    """

    def __init__(self, path: Path, settings: GraphSettings | None = None):
        self.path = path
        self.settings = settings or GraphSettings()
        self._pages: list[Page] | None = None
        self._batches: list[list[Block]] | None = None
        self._blocks_by_id: dict[EntityID, Block] = {}

    def _load(self) -> None:
        """Parse and validate the snapshot file."""
        if self._pages is not None:
            return

        try:
            raw = self.path.read_text(encoding="utf-8")
        except (UnicodeDecodeError, IsADirectoryError) as e:
            raise SnapshotError(f"Unreadable snapshot {self.path}: {e}") from e
        try:
            data = yaml.safe_load(raw) or {}
        except yaml.YAMLError as e:
            raise SnapshotError(f"Invalid snapshot {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise SnapshotError(f"Invalid snapshot {self.path}: expected a mapping")

        try:
            pages = [Page.model_validate(p) for p in data.get("pages") or []]
            batches = [
                [Block.model_validate(b) for b in batch or []]
                for batch in data.get("blocks") or []
            ]
        except (ValidationError, TypeError) as e:
            raise SnapshotError(f"Invalid snapshot {self.path}: {e}") from e

        self._pages = pages
        self._batches = batches
        self._blocks_by_id = {
            b.id: b for batch in batches for b in batch if b.id is not None
        }
        logger.info(
            "Loaded snapshot %s: %d pages, %d blocks",
            self.path,
            len(pages),
            sum(len(batch) for batch in batches),
        )

    async def get_all_pages(self) -> list[Page]:
        """Get every page in the snapshot."""
        self._load()
        return list(self._pages)

    async def get_block_references(self) -> list[list[Block]]:
        """Get the block batches that carry references."""
        self._load()
        return [[b for b in batch if b.refs] for batch in self._batches]

    def get_settings(self) -> GraphSettings:
        """Get the build settings."""
        return self.settings

    async def get_block(self, ref: EntityID) -> Block | None:
        """Get a block by id."""
        self._load()
        return self._blocks_by_id.get(ref)
