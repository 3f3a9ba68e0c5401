"""GraphQL types for items.

Provides:
- Item: one publication, with loader-backed journal, unit and people fields
- Items: one page of a planned item listing
- LocalID, SuppFile: values decoded from the item's attributes
- Shared ``items(...)`` argument aliases and ``list_items`` used by every
  parent that exposes an items listing
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Annotated

import strawberry
from strawberry.types import Info

from scholar_service.features.graphql.dataloaders.relationships import (
    load_item_units,
    load_journal_issue,
    load_journal_unit,
)
from scholar_service.features.graphql.types.enums import (
    FileVersion,
    ItemIDScheme,
    ItemOrder,
    ItemStatus,
    ItemType,
)
from scholar_service.features.items import models
from scholar_service.features.items.listings import AuthorListing, ContributorListing
from scholar_service.features.items.planner import ItemArgs, ItemListing, ItemScope, plan_items

if TYPE_CHECKING:
    from scholar_service.features.graphql.context import GraphQLContext
    from scholar_service.features.items.attributes import LocalId
    from scholar_service.features.items.attributes import SuppFile as SuppFileAttributes

# Type aliases for annotated arguments with descriptions
FirstArg = Annotated[
    int | None,
    strawberry.argument(description="Number of results to return (values 1..500 are valid)"),
]
MoreArg = Annotated[
    str | None,
    strawberry.argument(
        description=(
            "Opaque string obtained from the `more` field of a prior result, used to fetch "
            "the next set of nodes. Do not specify any other arguments with this one."
        )
    ),
]
BeforeArg = Annotated[
    datetime | None,
    strawberry.argument(description="Return only items *before* this date/time (within the `order` ordering)"),
]
AfterArg = Annotated[
    datetime | None,
    strawberry.argument(description="Return only items *after* this date/time (within the `order` ordering)"),
]
IncludeArg = Annotated[
    list[ItemStatus] | None,
    strawberry.argument(description="Include items w/ given status(es). Defaults to PUBLISHED only."),
]
TagsArg = Annotated[
    list[str] | None,
    strawberry.argument(
        description=(
            "Subset items with keyword, subject, discipline, grant, type, and/or source. "
            "E.g. 'tags: [\"keyword:food\"]' or 'tags: [\"grant:USDOE\"]'"
        )
    ),
]
OrderArg = Annotated[
    ItemOrder | None,
    strawberry.argument(
        description="Sets the ordering of results (and affects interpretation of `before` and `after`). Defaults to ADDED_DESC."
    ),
]

# Item identifier types in local_ids
_LOCAL_ID_SCHEMES = {
    "merritt": (ItemIDScheme.ARK, "Merritt"),
    "doi": (ItemIDScheme.DOI, None),
    "lbnl": (ItemIDScheme.LBNL_PUB_ID, None),
    "oa_harvester": (ItemIDScheme.OA_PUB_ID, None),
}


def _ctx(info: Info) -> GraphQLContext:
    return info.context


@strawberry.type(description="Local item identifier, e.g. DOI, PubMed ID, LBNL ID, etc.")
class LocalID:
    id: str = strawberry.field(description="The identifier string")
    scheme: ItemIDScheme = strawberry.field(description="The scheme under which the identifier was minted")
    sub_scheme: str | None = strawberry.field(
        default=None, description="If scheme is OTHER_ID, this will be more specific"
    )

    @classmethod
    def from_attrs(cls, local_id: LocalId) -> LocalID:
        scheme, sub_scheme = _LOCAL_ID_SCHEMES.get(local_id.type, (ItemIDScheme.OTHER_ID, local_id.type))
        return cls(id=local_id.id, scheme=scheme, sub_scheme=sub_scheme)


@strawberry.type(description="A file containing supplemental material for an item")
class SuppFile:
    file: str = strawberry.field(description="Name of the file")
    content_type: str | None = strawberry.field(description="Content MIME type of file, if known")
    size: int | None = strawberry.field(description="Size of the file in bytes")
    download_link: str = strawberry.field(description="URL to download the file")

    @classmethod
    def from_attrs(cls, item_id: str, supp: SuppFileAttributes, content_url: str) -> SuppFile:
        return cls(
            file=supp.file,
            content_type=supp.mime_type,
            size=supp.size,
            download_link=f"{content_url}/content/{item_id}/supp/{supp.file}",
        )


@strawberry.type(description="An item")
class Item:
    """GraphQL type wrapping an ``items`` row.

    Scalar fields read the row and its decoded attributes. Journal, unit and
    people fields go through the request's loaders, so a page of items costs
    one query per relationship rather than one per item.
    """

    model: strawberry.Private[models.Item]

    @strawberry.field(description="ARK identifier")
    def id(self, info: Info) -> strawberry.ID:
        return strawberry.ID(f"{_ctx(info).app_settings.ark_prefix}{self.model.id}")

    @strawberry.field(description="Title of the item (may include embedded HTML formatting tags)")
    def title(self) -> str:
        return self.model.title or ""

    @strawberry.field(description="Publication status; usually PUBLISHED")
    def status(self) -> ItemStatus:
        return models.ItemStatus.from_stored(self.model.status)

    @strawberry.field(description="Publication type; majority are ARTICLE")
    def type(self) -> ItemType:
        return models.ItemType.from_genre(self.model.genre)

    @strawberry.field(description="Date the item was published")
    def published(self) -> date:
        return self.model.published

    @strawberry.field(description="Date the item was added to the repository")
    def added(self) -> date:
        return self.model.added

    @strawberry.field(description="Date and time the item was last updated")
    def updated(self) -> datetime:
        return self.model.updated

    @strawberry.field(description="Permanent link to the item on the public site")
    def permalink(self, info: Info) -> str:
        short_id = self.model.id.removeprefix("qt")
        return f"{_ctx(info).app_settings.frontend_url}/uc/item/{short_id}"

    @strawberry.field(description="Main content MIME type (e.g. application/pdf)")
    def content_type(self) -> str | None:
        return self.model.content_type

    @strawberry.field(description="Download link for PDF/content file (if applicable)")
    def content_link(self, info: Info) -> str | None:
        if self.model.status != "published" or self.model.content_type != "application/pdf":
            return None
        content_url = _ctx(info).app_settings.content_url
        return f"{content_url}/content/{self.model.id}/{self.model.id}.pdf"

    @strawberry.field(description="Size of PDF/content file in bytes (if applicable)")
    def content_size(self) -> int | None:
        return self.model.attributes.content_length

    @strawberry.field(description="Version of a content file, e.g. AUTHOR_VERSION")
    def content_version(self) -> FileVersion | None:
        version = self.model.attributes.content_version
        try:
            return models.FileVersion(version) if version else None
        except ValueError:
            return None

    @strawberry.field(description="All authors (can be long)")
    async def authors(
        self, info: Info, first: FirstArg = None, more: MoreArg = None
    ) -> Annotated["Authors", strawberry.lazy("scholar_service.features.graphql.types.people")] | None:
        from scholar_service.features.graphql.types.people import Authors

        ctx = _ctx(info)
        listing = AuthorListing.plan(
            ctx.loaders, self.model.id, first=first, more=more, pagination=ctx.pagination
        )
        if not await ctx.resolve(listing.nodes()):
            return None
        return Authors(listing=listing)

    @strawberry.field(description="Abstract (may include embedded HTML formatting tags)")
    def abstract(self) -> str | None:
        return self.model.attributes.abstract

    @strawberry.field(description="Journal name")
    async def journal(self, info: Info) -> str | None:
        if not self.model.section:
            return self.model.attributes.journal_field("name")
        ctx = _ctx(info)
        unit = load_journal_unit(ctx.loaders, self.model.section)
        return await ctx.resolve(unit.then_present(lambda u: u.name))

    @strawberry.field(description="Journal volume number")
    async def volume(self, info: Info) -> str | None:
        if not self.model.section:
            return self.model.attributes.journal_field("volume")
        ctx = _ctx(info)
        issue = load_journal_issue(ctx.loaders, self.model.section)
        return await ctx.resolve(issue.then_present(lambda i: i.volume))

    @strawberry.field(description="Journal issue number")
    async def issue(self, info: Info) -> str | None:
        if not self.model.section:
            return self.model.attributes.journal_field("issue")
        ctx = _ctx(info)
        issue = load_journal_issue(ctx.loaders, self.model.section)
        return await ctx.resolve(issue.then_present(lambda i: i.issue))

    @strawberry.field(description="Journal ISSN")
    async def issn(self, info: Info) -> str | None:
        if not self.model.section:
            return self.model.attributes.journal_field("issn")
        ctx = _ctx(info)
        unit = load_journal_unit(ctx.loaders, self.model.section)
        return await ctx.resolve(unit.then_present(lambda u: u.attributes.issn))

    @strawberry.field(description="Publisher of the item (if any)")
    def publisher(self) -> str | None:
        return self.model.attributes.publisher

    @strawberry.field(description="Proceedings within which item appears (if any)")
    def proceedings(self) -> str | None:
        return self.model.attributes.proceedings

    @strawberry.field(description="Book ISBN")
    def isbn(self) -> str | None:
        return self.model.attributes.isbn

    @strawberry.field(description="Editors, advisors, etc. (if any)")
    async def contributors(
        self, info: Info, first: FirstArg = None, more: MoreArg = None
    ) -> Annotated["Contributors", strawberry.lazy("scholar_service.features.graphql.types.people")] | None:
        from scholar_service.features.graphql.types.people import Contributors

        ctx = _ctx(info)
        listing = ContributorListing.plan(
            ctx.loaders, self.model.id, first=first, more=more, pagination=ctx.pagination
        )
        if not await ctx.resolve(listing.nodes()):
            return None
        return Contributors(listing=listing)

    @strawberry.field(description="The series/unit id(s) associated with this item")
    async def units(
        self, info: Info
    ) -> list[Annotated["Unit", strawberry.lazy("scholar_service.features.graphql.types.units")]] | None:
        from scholar_service.features.graphql.types.units import Unit

        ctx = _ctx(info)
        units = await ctx.resolve(load_item_units(ctx.loaders, self.model.id))
        if units is None:
            return None
        return [Unit(model=unit) for unit in units]

    @strawberry.field(description="Unified disciplines, keywords, grants, etc.")
    def tags(self) -> list[str] | None:
        attrs = self.model.attributes
        genre = models.ItemType.from_genre(self.model.genre).name
        return [
            *(f"discipline:{s}" for s in attrs.disciplines),
            *(f"keyword:{s}" for s in attrs.keywords),
            *(f"subject:{s}" for s in attrs.subjects),
            *(f"grant:{g.name}" for g in attrs.grants),
            f"source:{self.model.source}",
            f"type:{genre}",
        ]

    @strawberry.field(description="Subject terms (unrestricted) applying to this item")
    def subjects(self) -> list[str] | None:
        return list(self.model.attributes.subjects) or None

    @strawberry.field(description="Keywords (unrestricted) applying to this item")
    def keywords(self) -> list[str] | None:
        return list(self.model.attributes.keywords) or None

    @strawberry.field(description="Disciplines applying to this item")
    def disciplines(self) -> list[str] | None:
        return list(self.model.attributes.disciplines) or None

    @strawberry.field(description="Funding grants linked to this item")
    def grants(self) -> list[str] | None:
        return [grant.name for grant in self.model.attributes.grants] or None

    @strawberry.field(description="Language specification (ISO 639-2 code)")
    def language(self) -> str | None:
        return self.model.attributes.language

    @strawberry.field(description="Embargo expiration date (if status=EMBARGOED)")
    def embargo_expires(self) -> date | None:
        embargo = self.model.attributes.embargo_date
        try:
            return date.fromisoformat(embargo[:10]) if embargo else None
        except ValueError:
            return None

    @strawberry.field(description="License (none, or cc-by-nd, etc.)")
    def rights(self) -> str | None:
        return self.model.rights

    @strawberry.field(description="First page (within a larger work like a journal issue)")
    def fpage(self) -> str | None:
        return self.model.attributes.journal_field("fpage")

    @strawberry.field(description="Last page (within a larger work like a journal issue)")
    def lpage(self) -> str | None:
        return self.model.attributes.journal_field("lpage")

    @strawberry.field(description="Combined first page - last page")
    def pagination(self) -> str | None:
        return self.model.attributes.pagination

    @strawberry.field(description="Supplemental material (if any)")
    def supp_files(self, info: Info) -> list[SuppFile] | None:
        content_url = _ctx(info).app_settings.content_url
        files = [
            SuppFile.from_attrs(self.model.id, supp, content_url)
            for supp in self.model.attributes.supp_files
        ]
        return files or None

    @strawberry.field(description="Source system within the repository environment")
    def source(self) -> str:
        return self.model.source

    @strawberry.field(description="If publication originated from UCPMS, the type within that system")
    def ucpms_pub_type(self) -> str | None:
        return self.model.attributes.uc_pms_pub_type

    @strawberry.field(
        name="localIDs", description="Local item identifiers, e.g. DOI, PubMed ID, LBNL, etc."
    )
    def local_ids(self) -> list[LocalID] | None:
        ids = [LocalID.from_attrs(local_id) for local_id in self.model.attributes.all_local_ids()]
        return ids or None

    @strawberry.field(description="Published web location(s) external to the repository")
    def external_links(self) -> list[str] | None:
        return list(self.model.attributes.pub_web_loc) or None

    @strawberry.field(description="Title of the book within which this item appears")
    def book_title(self) -> str | None:
        return self.model.attributes.book_title

    @strawberry.field(description="Name of original (pre-PDF-conversion) file")
    def native_file_name(self) -> str | None:
        native = self.model.attributes.native_file
        return native.name if native else None

    @strawberry.field(description="Size of original (pre-PDF-conversion) file")
    def native_file_size(self) -> str | None:
        native = self.model.attributes.native_file
        return native.size if native else None

    @strawberry.field(description="Whether the work has undergone a peer review process")
    def is_peer_reviewed(self) -> bool:
        return bool(self.model.attributes.is_peer_reviewed)


@strawberry.type(description="A list of items, possibly very long, with paging capability")
class Items:
    listing: strawberry.Private[ItemListing]

    @strawberry.field(description="Approximate total items on all pages")
    async def total(self) -> int:
        return await self.listing.total()

    @strawberry.field(description="Array of the items on this page")
    async def nodes(self) -> list[Item]:
        return [Item(model=row) for row in await self.listing.nodes()]

    @strawberry.field(description="Opaque cursor string for next page")
    async def more(self) -> str | None:
        return await self.listing.more()


def list_items(
    info: Info,
    scope: ItemScope | None = None,
    *,
    first: int | None = None,
    more: str | None = None,
    before: datetime | None = None,
    after: datetime | None = None,
    include: list[models.ItemStatus] | None = None,
    tags: list[str] | None = None,
    order: models.ItemOrder | None = None,
) -> Items:
    """Plan an items listing for a resolver."""
    ctx = _ctx(info)
    args = ItemArgs(
        first=first,
        more=more,
        before=before,
        after=after,
        include=include,
        tags=tags,
        order=order,
    )
    return Items(listing=plan_items(ctx.store, args, scope, pagination=ctx.pagination))


__all__ = [
    "AfterArg",
    "BeforeArg",
    "FirstArg",
    "IncludeArg",
    "Item",
    "Items",
    "LocalID",
    "MoreArg",
    "OrderArg",
    "SuppFile",
    "TagsArg",
    "list_items",
]
