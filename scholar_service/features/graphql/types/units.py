"""GraphQL types for units (campuses, departments, series, journals)."""

from __future__ import annotations

from datetime import date
from typing import Annotated

import strawberry
from strawberry.types import Info

from scholar_service.features.graphql.dataloaders.relationships import (
    load_unit_children,
    load_unit_issues,
    load_unit_parents,
)
from scholar_service.features.graphql.types.enums import UnitType
from scholar_service.features.graphql.types.items import (
    AfterArg,
    BeforeArg,
    FirstArg,
    IncludeArg,
    Items,
    MoreArg,
    OrderArg,
    TagsArg,
    list_items,
)
from scholar_service.features.items import models
from scholar_service.features.items.listings import UnitDescendantsListing
from scholar_service.features.items.planner import ItemScope

UnitTypeArg = Annotated[
    UnitType | None,
    strawberry.argument(description="Type of unit, e.g. ORU, SERIES, JOURNAL"),
]


@strawberry.type(description="A single issue of a journal")
class Issue:
    volume: str | None = strawberry.field(description="Volume number (sometimes null for issue-only journals)")
    issue: str | None = strawberry.field(description="Issue number (sometimes null for volume-only journals)")
    published: date | None = strawberry.field(description="Date the issue was published")

    @classmethod
    def from_model(cls, issue: models.Issue) -> Issue:
        return cls(volume=issue.volume, issue=issue.issue, published=issue.published)


@strawberry.type(description="A campus, department, series, or other organized unit")
class Unit:
    model: strawberry.Private[models.Unit]

    @strawberry.field(description="Short unit identifier, e.g. 'lbnl_rw'")
    def id(self) -> strawberry.ID:
        return strawberry.ID(self.model.id)

    @strawberry.field(description="Human-readable name of the unit")
    def name(self) -> str:
        return self.model.name

    @strawberry.field(description="Type of unit, e.g. ORU, SERIES, JOURNAL")
    def type(self) -> UnitType:
        return models.UnitType(self.model.type.lower())

    @strawberry.field(description="ISSN, applies to units of type=JOURNAL only")
    def issn(self) -> str | None:
        return self.model.attributes.issn

    @strawberry.field(description="Query items in the unit (incl. children)")
    def items(
        self,
        info: Info,
        first: FirstArg = None,
        more: MoreArg = None,
        before: BeforeArg = None,
        after: AfterArg = None,
        include: IncludeArg = None,
        tags: TagsArg = None,
        order: OrderArg = None,
    ) -> Items | None:
        return list_items(
            info,
            ItemScope(unit_id=self.model.id),
            first=first,
            more=more,
            before=before,
            after=after,
            include=include,
            tags=tags,
            order=order,
        )

    @strawberry.field(description="Direct hierarchical children (i.e. sub-units)")
    async def children(self, info: Info) -> list[Unit] | None:
        units = await info.context.resolve(load_unit_children(info.context.loaders, self.model.id))
        return [Unit(model=unit) for unit in units] if units is not None else None

    @strawberry.field(description="Query all children, grandchildren, etc. of this unit")
    def descendants(
        self,
        info: Info,
        first: FirstArg = None,
        more: MoreArg = None,
        type: UnitTypeArg = None,
    ) -> Units | None:
        ctx = info.context
        listing = UnitDescendantsListing.plan(
            ctx.store,
            self.model.id,
            first=first,
            more=more,
            type=type,
            pagination=ctx.pagination,
        )
        return Units(listing=listing)

    @strawberry.field(description="Direct hierarchical parent(s) (i.e. owning units)")
    async def parents(self, info: Info) -> list[Unit] | None:
        units = await info.context.resolve(load_unit_parents(info.context.loaders, self.model.id))
        return [Unit(model=unit) for unit in units] if units is not None else None

    @strawberry.field(description="All journal issues published by this unit (only applies if type=JOURNAL)")
    async def issues(self, info: Info) -> list[Issue] | None:
        issues = await info.context.resolve(load_unit_issues(info.context.loaders, self.model.id))
        return [Issue.from_model(issue) for issue in issues] if issues is not None else None


@strawberry.type(description="A list of units, with paging capability because there are thousands")
class Units:
    listing: strawberry.Private[UnitDescendantsListing]

    @strawberry.field(description="Approximate total units on all pages")
    async def total(self) -> int:
        return await self.listing.total()

    @strawberry.field(description="Array of the units on this page")
    async def nodes(self) -> list[Unit]:
        return [Unit(model=unit) for unit in await self.listing.nodes()]

    @strawberry.field(description="Opaque cursor string for next page")
    async def more(self) -> str | None:
        return await self.listing.more()


__all__ = ["Issue", "Unit", "Units"]
