"""GraphQL types for authors and contributors."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import strawberry
from strawberry.types import Info

from scholar_service.core.exceptions import RestrictedFieldError
from scholar_service.features.graphql.dataloaders.relationships import load_person_authorships
from scholar_service.features.graphql.types.enums import AuthorIDScheme, Role
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
from scholar_service.features.items.listings import AuthorListing, ContributorListing
from scholar_service.features.items.planner import ItemScope

if TYPE_CHECKING:
    from scholar_service.features.graphql.context import GraphQLContext
    from scholar_service.features.items.attributes import AuthorAttributes

logger = logging.getLogger(__name__)


@strawberry.type(description="Individual access to parts of the name, generally only used in special cases")
class NameParts:
    name: str = strawberry.field(description="Combined name parts; usually 'lname, fname'")
    fname: str | None = strawberry.field(default=None, description="First name / given name")
    lname: str | None = strawberry.field(default=None, description="Last name / surname")
    mname: str | None = strawberry.field(default=None, description="Middle name")
    suffix: str | None = strawberry.field(default=None, description="Suffix (e.g. Ph.D)")
    institution: str | None = strawberry.field(default=None, description="Institutional affiliation")
    organization: str | None = strawberry.field(
        default=None, description="Instead of lname/fname if this is a group/corp"
    )

    @classmethod
    def from_attrs(cls, attrs: AuthorAttributes) -> NameParts:
        return cls(
            name=attrs.name or "",
            fname=attrs.fname,
            lname=attrs.lname,
            mname=attrs.mname,
            suffix=attrs.suffix,
            institution=attrs.institution,
            organization=attrs.organization,
        )


@strawberry.type(description="Author identifier, e.g. repository ARK, ORCID, other.")
class AuthorID:
    id: str = strawberry.field(description="The identifier string")
    scheme: AuthorIDScheme = strawberry.field(description="The scheme under which the identifier was minted")
    sub_scheme: str | None = strawberry.field(
        default=None, description="If scheme is OTHER_ID, this will be more specific"
    )


def _variant_key(attrs: AuthorAttributes) -> str:
    return json.dumps(attrs.name_variant(), sort_keys=True)


@strawberry.type(description="A single author (can be a person or organization)")
class Author:
    """GraphQL type wrapping an ``item_authors`` row.

    ``id_scheme_hint`` names the attribute key (e.g. ``ORCID_id``) the author
    was looked up by, which then scopes the author's ``items`` listing.
    """

    model: strawberry.Private[models.ItemAuthor]
    id_scheme_hint: strawberry.Private[str | None] = None

    @strawberry.field(description="Combined name parts; usually 'lname, fname'")
    def name(self) -> str:
        return self.model.attributes.name or ""

    @strawberry.field(description="Individual name parts for special needs")
    def name_parts(self) -> NameParts | None:
        return NameParts.from_attrs(self.model.attributes)

    @strawberry.field(description="Repository person ID (many authors have none)")
    def id(self) -> strawberry.ID | None:
        return strawberry.ID(self.model.person_id) if self.model.person_id else None

    @strawberry.field(description="All name variants")
    async def variants(self, info: Info) -> list[NameParts]:
        if not self.model.person_id:
            return [NameParts.from_attrs(self.model.attributes)]
        ctx: GraphQLContext = info.context
        rows = await ctx.resolve(load_person_authorships(ctx.loaders, self.model.person_id))
        unique = {_variant_key(row.attributes): row.attributes for row in rows or [self.model]}
        return [NameParts.from_attrs(unique[key]) for key in sorted(unique)]

    @strawberry.field(description="Query items by this author")
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
            self.items_scope(),
            first=first,
            more=more,
            before=before,
            after=after,
            include=include,
            tags=tags,
            order=order,
        )

    def items_scope(self) -> ItemScope:
        """Scope of ``items``: person, else identifier, else just this item."""
        identifiers = self.model.attributes.identifiers()
        id_key = self.id_scheme_hint or next(iter(identifiers), None)
        if self.model.person_id and not self.id_scheme_hint:
            return ItemScope(person_id=self.model.person_id)
        if id_key and identifiers.get(id_key):
            return ItemScope(author_key=id_key, author_id=identifiers[id_key])
        return ItemScope(item_id=self.model.item_id)

    @strawberry.field(description="Email (restricted field)")
    def email(self) -> str | None:
        raise RestrictedFieldError("email")

    @strawberry.field(description="ORCID identifier")
    def orcid(self) -> str | None:
        return self.model.attributes.orcid

    @strawberry.field(description="Unified author identifiers, e.g. repository ARK, ORCID, OTHER.")
    def ids(self) -> list[AuthorID] | None:
        ids: list[AuthorID] = []
        if self.model.person_id:
            ids.append(AuthorID(id=self.model.person_id, scheme=models.AuthorIDScheme.ARK))
        for key, value in self.model.attributes.identifiers().items():
            kind = key.removesuffix("_id")
            if kind == "ORCID":
                ids.append(AuthorID(id=value, scheme=models.AuthorIDScheme.ORCID))
            else:
                ids.append(AuthorID(id=value, scheme=models.AuthorIDScheme.OTHER_ID, sub_scheme=kind))
        return ids or None


@strawberry.type(description="A list of authors, with paging capability because some items have thousands")
class Authors:
    listing: strawberry.Private[AuthorListing]

    @strawberry.field(description="Approximate total authors on all pages")
    async def total(self, info: Info) -> int:
        return await info.context.resolve(self.listing.total())

    @strawberry.field(description="Array of the authors on this page")
    async def nodes(self, info: Info) -> list[Author]:
        rows = await info.context.resolve(self.listing.nodes())
        return [Author(model=row) for row in rows or []]

    @strawberry.field(description="Opaque cursor string for next page")
    async def more(self, info: Info) -> str | None:
        return await info.context.resolve(self.listing.more())


@strawberry.type(description="A single contributor (can be a person or organization)")
class Contributor:
    model: strawberry.Private[models.ItemContrib]

    @strawberry.field(description="Combined name parts; usually 'lname, fname'")
    def name(self) -> str:
        return self.model.attributes.name or ""

    @strawberry.field(description="Role in which this person or org contributed")
    def role(self) -> Role | None:
        try:
            return models.Role(self.model.role.lower())
        except ValueError:
            logger.warning(
                "Unknown contributor role %r",
                self.model.role,
                extra={"item_id": self.model.item_id, "ordering": self.model.ordering},
            )
            return None

    @strawberry.field(description="Individual name parts for special needs")
    def name_parts(self) -> NameParts | None:
        return NameParts.from_attrs(self.model.attributes)

    @strawberry.field(description="Email (restricted field)")
    def email(self) -> str | None:
        raise RestrictedFieldError("email")


@strawberry.type(description="A list of contributors (e.g. editors, advisors), with rarely-needed paging capability")
class Contributors:
    listing: strawberry.Private[ContributorListing]

    @strawberry.field(description="Approximate total contributors on all pages")
    async def total(self, info: Info) -> int:
        return await info.context.resolve(self.listing.total())

    @strawberry.field(description="Array of the contributors on this page")
    async def nodes(self, info: Info) -> list[Contributor]:
        rows = await info.context.resolve(self.listing.nodes())
        return [Contributor(model=row) for row in rows or []]

    @strawberry.field(description="Opaque cursor string for next page")
    async def more(self, info: Info) -> str | None:
        return await info.context.resolve(self.listing.more())


__all__ = [
    "Author",
    "AuthorID",
    "Authors",
    "Contributor",
    "Contributors",
    "NameParts",
]
