"""Query resolvers for the GraphQL API.

Provides read operations:
- item(id, scheme): one item by ARK, DOI or local identifier
- items(...): cursor-paginated listing of all items
- unit(id), rootUnit: units of the hierarchy
- author(id, scheme, subScheme, email): one author by identifier or email
"""

from __future__ import annotations

import logging
import re
from typing import Annotated

import strawberry
from sqlalchemy import String, cast, func, select
from strawberry.types import Info

from scholar_service.core.exceptions import RequestError
from scholar_service.features.graphql.types.enums import AuthorIDScheme, ItemIDScheme
from scholar_service.features.graphql.types.items import (
    AfterArg,
    BeforeArg,
    FirstArg,
    IncludeArg,
    Item,
    Items,
    MoreArg,
    OrderArg,
    TagsArg,
    list_items,
)
from scholar_service.features.graphql.types.people import Author
from scholar_service.features.graphql.types.units import Unit
from scholar_service.features.items import models

logger = logging.getLogger(__name__)

ARK_PATTERN = re.compile(r"^ark:/13030/(qt\w{8})$")
DOI_PATTERN = re.compile(r"^.*?\b(10\..*)$")
SUB_SCHEME_PATTERN = re.compile(r"^\w+$")

# Candidate rows scanned when matching a local identifier
LOCAL_ID_SCAN_LIMIT = 100

_LOCAL_ID_TYPES = {
    models.ItemIDScheme.LBNL_PUB_ID: "lbnl",
    models.ItemIDScheme.OA_PUB_ID: "oa_harvester",
    models.ItemIDScheme.ARK: "merritt",
}

ItemIdArg = Annotated[strawberry.ID, strawberry.argument(description="Item identifier")]
ItemSchemeArg = Annotated[
    ItemIDScheme | None,
    strawberry.argument(description="Identifier scheme; defaults to ARK"),
]
AuthorIdArg = Annotated[strawberry.ID | None, strawberry.argument(description="Author identifier")]
AuthorSchemeArg = Annotated[
    AuthorIDScheme | None,
    strawberry.argument(description="Identifier scheme; defaults to the repository ARK"),
]
SubSchemeArg = Annotated[
    str | None,
    strawberry.argument(description="Required with OTHER_ID, e.g. 'lbnl' for 'lbnl_id'"),
]
EmailArg = Annotated[str | None, strawberry.argument(description="Author email address")]


async def find_item(info: Info, id: str, scheme: models.ItemIDScheme) -> models.Item | None:
    """Look up one item by identifier.

    Raises:
        RequestError: If the scheme cannot be queried.
    """
    ctx = info.context
    if scheme is models.ItemIDScheme.ARK and (match := ARK_PATTERN.match(id)):
        return await ctx.resolve(ctx.loaders.load_one(models.Item, match.group(1)))

    if scheme is models.ItemIDScheme.DOI and (match := DOI_PATTERN.match(id)):
        stmt = select(models.Item).where(
            models.Item.attrs["doi"].as_string().endswith(match.group(1), autoescape=True)
        )
        return await ctx.store.fetch_first(stmt, "item by DOI")

    local_type = _LOCAL_ID_TYPES.get(scheme)
    if local_type is not None:
        stmt = (
            select(models.Item)
            .where(cast(models.Item.attrs["local_ids"], String).contains(id, autoescape=True))
            .limit(LOCAL_ID_SCAN_LIMIT)
        )
        for item in await ctx.store.fetch_all(stmt, "item by local id"):
            if any(loc.id == id and loc.type == local_type for loc in item.attributes.local_ids):
                return item
        return None

    raise RequestError("currently unsupported scheme for querying", extra={"scheme": scheme.name})


async def find_author(
    info: Info,
    id: str | None,
    scheme: models.AuthorIDScheme | None,
    sub_scheme: str | None,
    email: str | None,
) -> Author | None:
    """Look up one author by identifier or email.

    Raises:
        RequestError: Unless exactly one of ``id`` and ``email`` is given, or
            if ``OTHER_ID`` lacks a valid ``sub_scheme``.
    """
    ctx = info.context
    if (id is None) == (email is None):
        raise RequestError("must specify either 'id' or 'email'")

    if email is not None:
        address = email.lower()
        person = await ctx.store.fetch_first(
            select(models.Person).where(
                func.lower(models.Person.attrs["email"].as_string()) == address
            ),
            "person by email",
        )
        if person is None:
            row = await ctx.store.fetch_first(
                select(models.ItemAuthor).where(
                    func.lower(models.ItemAuthor.attrs["email"].as_string()) == address
                ),
                "author by email",
            )
            return Author(model=row) if row is not None else None
        return await _first_authorship(info, person.id)

    if scheme in (None, models.AuthorIDScheme.ARK):
        person = await ctx.resolve(ctx.loaders.load_one(models.Person, id))
        if person is None:
            return None
        return await _first_authorship(info, person.id)

    if scheme is models.AuthorIDScheme.ORCID:
        id_key = "ORCID_id"
        person = await ctx.store.fetch_first(
            select(models.Person).where(models.Person.attrs[id_key].as_string() == id),
            "person by ORCID",
        )
        if person is not None:
            return await _first_authorship(info, person.id, id_scheme_hint=id_key)
    else:
        if not sub_scheme or not SUB_SCHEME_PATTERN.match(sub_scheme):
            raise RequestError("valid subScheme required with 'OTHER' scheme")
        id_key = f"{sub_scheme}_id"

    row = await ctx.store.fetch_first(
        select(models.ItemAuthor)
        .where(models.ItemAuthor.attrs[id_key].as_string() == id)
        .order_by(models.ItemAuthor.item_id, models.ItemAuthor.ordering),
        f"author by {id_key}",
    )
    return Author(model=row, id_scheme_hint=id_key) if row is not None else None


async def _first_authorship(
    info: Info, person_id: str, id_scheme_hint: str | None = None
) -> Author | None:
    row = await info.context.store.fetch_first(
        select(models.ItemAuthor)
        .where(models.ItemAuthor.person_id == person_id)
        .order_by(models.ItemAuthor.item_id, models.ItemAuthor.ordering),
        "first authorship of person",
    )
    return Author(model=row, id_scheme_hint=id_scheme_hint) if row is not None else None


@strawberry.type(description="The repository access API")
class Query:
    """GraphQL Query resolvers."""

    @strawberry.field(description="Get item's info given its identifier")
    async def item(
        self,
        info: Info,
        id: ItemIdArg,
        scheme: ItemSchemeArg = None,
    ) -> Item | None:
        item = await find_item(info, str(id), scheme or models.ItemIDScheme.ARK)
        return Item(model=item) if item is not None else None

    @strawberry.field(description="Query a list of all items")
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
            first=first,
            more=more,
            before=before,
            after=after,
            include=include,
            tags=tags,
            order=order,
        )

    @strawberry.field(description="Get a unit given its identifier")
    async def unit(self, info: Info, id: strawberry.ID) -> Unit | None:
        unit = await info.context.resolve(info.context.loaders.load_one(models.Unit, str(id)))
        return Unit(model=unit) if unit is not None else None

    @strawberry.field(description="The root of the unit hierarchy")
    async def root_unit(self, info: Info) -> Unit:
        unit = await info.context.resolve(info.context.loaders.load_one(models.Unit, "root"))
        if unit is None:
            logger.error("Root unit is missing from the units table")
            msg = "Root unit not found"
            raise LookupError(msg)
        return Unit(model=unit)

    @strawberry.field(
        description="Get an author by ID (scheme optional, defaults to ARK), or email address"
    )
    async def author(
        self,
        info: Info,
        id: AuthorIdArg = None,
        scheme: AuthorSchemeArg = None,
        sub_scheme: SubSchemeArg = None,
        email: EmailArg = None,
    ) -> Author | None:
        return await find_author(info, str(id) if id is not None else None, scheme, sub_scheme, email)


__all__ = ["Query", "find_author", "find_item"]
