"""Data models for PageGraph.

Field aliases follow the host application's wire format (``journal?``,
``path-refs``, ``graphHide``); models also accept the Python field names.
"""

from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

EntityID = int | str


class EntityRef(BaseModel):
    """Reference to a page or block by identifier."""

    id: EntityID


class PageProperties(BaseModel):
    """Page property bag. Unknown properties are kept."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    alias: list[str] = Field(default_factory=list)
    graph_hide: bool = Field(default=False, alias="graphHide")

    @field_validator("alias", mode="before")
    @classmethod
    def _single_alias(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("graph_hide", mode="before")
    @classmethod
    def _truthy_flag(cls, value):
        if isinstance(value, str):
            return value.strip().lower() not in ("", "false", "no", "off", "0")
        return bool(value)


class Page(BaseModel):
    """A graph node candidate."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: EntityID
    name: str
    journal: bool = Field(default=False, alias="journal?")
    properties: PageProperties | None = None


class Block(BaseModel):
    """A unit of content owned by a page, possibly nested under other blocks."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: EntityID | None = None
    refs: list[EntityRef] = Field(default_factory=list)
    path_refs: list[EntityRef] = Field(default_factory=list, alias="path-refs")
    page: EntityRef | None = None

    @field_validator("refs", "path_refs", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return [] if value is None else value


class GraphSettings(BaseModel):
    """Settings consulted during a graph build."""

    journal: bool = False


class Reference(NamedTuple):
    """A directed reference from a page to a raw page or block identifier."""

    source: EntityID
    target: EntityID
