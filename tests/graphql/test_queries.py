"""Tests for GraphQL query resolvers."""

from __future__ import annotations

import base64
import json
from typing import TYPE_CHECKING

from scholar_service.core.exceptions import StoreError
from scholar_service.features.graphql.schema import schema
from scholar_service.features.items.models import ItemContrib, Section
from scholar_service.infra.database import get_session_factory
from tests.graphql.conftest import (
    AUTHOR_QUERY,
    ITEM_AUTHORS_QUERY,
    ITEM_QUERY,
    ITEMS_QUERY,
    ROOT_UNIT_QUERY,
)

if TYPE_CHECKING:
    from scholar_service.core.batching import SqlAlchemyStore
    from scholar_service.features.graphql.context import GraphQLContext

ARK = "ark:/13030/qt00000001"


def hand_built_cursor(query: dict) -> str:
    text = json.dumps({"v": 1, "q": query}, separators=(",", ":"))
    return base64.urlsafe_b64encode(text.encode()).decode().rstrip("=")


async def test_item_by_ark(graphql_context: GraphQLContext) -> None:
    """Test that an item resolves its scalar, journal and unit fields."""
    result = await schema.execute(
        ITEM_QUERY, variable_values={"id": ARK}, context_value=graphql_context
    )

    assert result.errors is None
    item = result.data["item"]
    assert item["id"] == ARK
    assert item["title"] == "Item 1"
    assert item["status"] == "PUBLISHED"
    assert item["type"] == "ARTICLE"
    assert item["added"] == "2020-01-01"
    assert item["permalink"] == "https://site.test/uc/item/00000001"
    assert item["contentLink"] == "https://content.test/content/qt00000001/qt00000001.pdf"
    assert item["contentSize"] == 2048
    assert item["contentVersion"] == "PUBLISHER_VERSION"
    assert item["journal"] == "Journal of Tests"
    assert (item["volume"], item["issue"]) == ("5", "2")
    assert item["issn"] == "1234-5678"
    assert item["pagination"] == "10-20"
    assert item["disciplines"] == ["Life Sciences"]
    assert [unit["id"] for unit in item["units"]] == ["lbnl_rw", "jtest"]
    assert item["authors"] == {"total": 3}
    assert item["suppFiles"] == [
        {
            "file": "data.csv",
            "contentType": "text/csv",
            "downloadLink": "https://content.test/content/qt00000001/supp/data.csv",
        }
    ]


async def test_item_local_ids_doi_first(graphql_context: GraphQLContext) -> None:
    result = await schema.execute(
        ITEM_QUERY, variable_values={"id": ARK}, context_value=graphql_context
    )

    assert result.data["item"]["localIDs"] == [
        {"id": "https://doi.org/10.1234/abc.1", "scheme": "DOI", "subScheme": None},
        {"id": "LBNL-1001", "scheme": "LBNL_PUB_ID", "subScheme": None},
    ]


async def test_item_without_journal_section(graphql_context: GraphQLContext) -> None:
    """Test that external journal attributes are used when there is no section."""
    result = await schema.execute(
        ITEM_QUERY,
        variable_values={"id": "ark:/13030/qt00000005"},
        context_value=graphql_context,
    )

    assert result.errors is None
    item = result.data["item"]
    assert item["journal"] == "Outside Journal"
    assert item["issn"] == "9999-0000"
    assert item["contentLink"] is None
    assert item["units"] is None
    assert item["authors"] is None
    assert item["localIDs"] is None


async def test_item_by_doi(graphql_context: GraphQLContext) -> None:
    result = await schema.execute(
        ITEM_QUERY,
        variable_values={"id": "doi:10.1234/abc.1", "scheme": "DOI"},
        context_value=graphql_context,
    )

    assert result.errors is None
    assert result.data["item"]["id"] == ARK


async def test_item_by_local_id(graphql_context: GraphQLContext) -> None:
    result = await schema.execute(
        ITEM_QUERY,
        variable_values={"id": "LBNL-1001", "scheme": "LBNL_PUB_ID"},
        context_value=graphql_context,
    )

    assert result.errors is None
    assert result.data["item"]["id"] == ARK


async def test_unknown_item_is_null(graphql_context: GraphQLContext) -> None:
    result = await schema.execute(
        ITEM_QUERY,
        variable_values={"id": "ark:/13030/qt99999999"},
        context_value=graphql_context,
    )

    assert result.errors is None
    assert result.data["item"] is None


async def test_item_authors_paging(graphql_context: GraphQLContext) -> None:
    """Test that author pages continue from the returned cursor."""
    first = await schema.execute(
        ITEM_AUTHORS_QUERY,
        variable_values={"id": ARK, "first": 2},
        context_value=graphql_context,
    )

    assert first.errors is None
    authors = first.data["item"]["authors"]
    assert authors["total"] == 3
    assert [a["name"] for a in authors["nodes"]] == ["Doe, Jane", "Roe, Rich"]
    assert authors["nodes"][0] == {"name": "Doe, Jane", "id": "p1", "orcid": "0000-0001"}
    assert authors["more"] is not None

    rest = await schema.execute(
        ITEM_AUTHORS_QUERY,
        variable_values={"id": ARK, "more": authors["more"]},
        context_value=graphql_context,
    )

    assert rest.errors is None
    assert [a["name"] for a in rest.data["item"]["authors"]["nodes"]] == ["Poe, Ed"]
    assert rest.data["item"]["authors"]["more"] is None


async def test_restricted_email_field(graphql_context: GraphQLContext) -> None:
    result = await schema.execute(
        'query { item(id: "ark:/13030/qt00000001") { authors { nodes { email } } } }',
        context_value=graphql_context,
    )

    assert result.errors is not None
    assert result.errors[0].message == "'email' field is restricted"


async def test_items_with_tag_filter(graphql_context: GraphQLContext) -> None:
    result = await schema.execute(
        ITEMS_QUERY,
        variable_values={"tags": ["type:ETD"]},
        context_value=graphql_context,
    )

    assert result.errors is None
    assert result.data["items"] == {
        "total": 1,
        "more": None,
        "nodes": [{"id": "ark:/13030/qt00000002", "type": "ETD"}],
    }


async def test_items_paging(graphql_context: GraphQLContext) -> None:
    first = await schema.execute(
        ITEMS_QUERY,
        variable_values={"first": 4, "order": "ADDED_ASC"},
        context_value=graphql_context,
    )
    more = first.data["items"]["more"]
    rest = await schema.execute(
        ITEMS_QUERY, variable_values={"more": more}, context_value=graphql_context
    )

    assert rest.errors is None
    assert [n["id"] for n in rest.data["items"]["nodes"]] == [
        "ark:/13030/qt00000005",
        "ark:/13030/qt00000006",
    ]


async def test_items_invalid_first(graphql_context: GraphQLContext) -> None:
    result = await schema.execute(
        ITEMS_QUERY, variable_values={"first": 0}, context_value=graphql_context
    )

    assert result.errors is not None
    assert result.errors[0].message == "'first' must be in range 1..500"


async def test_items_more_with_other_arguments(graphql_context: GraphQLContext) -> None:
    first = await schema.execute(
        ITEMS_QUERY, variable_values={"first": 1}, context_value=graphql_context
    )
    result = await schema.execute(
        ITEMS_QUERY,
        variable_values={"first": 1, "more": first.data["items"]["more"]},
        context_value=graphql_context,
    )

    assert result.errors is not None
    assert "Do not specify other arguments" in result.errors[0].message


async def test_author_by_email(graphql_context: GraphQLContext) -> None:
    """Test that email lookup is case-insensitive and scopes items to the person."""
    result = await schema.execute(
        AUTHOR_QUERY,
        variable_values={"email": "JANE@example.ORG"},
        context_value=graphql_context,
    )

    assert result.errors is None
    author = result.data["author"]
    assert author["id"] == "p1"
    assert author["name"] == "Doe, Jane"
    assert author["ids"] == [
        {"id": "p1", "scheme": "ARK", "subScheme": None},
        {"id": "0000-0001", "scheme": "ORCID", "subScheme": None},
    ]
    assert author["items"]["total"] == 2


async def test_author_by_orcid(graphql_context: GraphQLContext) -> None:
    result = await schema.execute(
        AUTHOR_QUERY,
        variable_values={"id": "0000-0001", "scheme": "ORCID"},
        context_value=graphql_context,
    )

    assert result.errors is None
    author = result.data["author"]
    assert author["name"] == "Doe, Jane"
    assert author["items"]["nodes"] == [{"id": ARK}]


async def test_author_by_other_id(graphql_context: GraphQLContext) -> None:
    result = await schema.execute(
        AUTHOR_QUERY,
        variable_values={"id": "L77", "scheme": "OTHER_ID", "subScheme": "lbnl"},
        context_value=graphql_context,
    )

    assert result.errors is None
    author = result.data["author"]
    assert author["name"] == "Roe, Rich"
    assert author["id"] is None
    assert author["ids"] == [{"id": "L77", "scheme": "OTHER_ID", "subScheme": "lbnl"}]
    assert author["items"]["total"] == 2


async def test_author_other_id_requires_sub_scheme(graphql_context: GraphQLContext) -> None:
    result = await schema.execute(
        AUTHOR_QUERY,
        variable_values={"id": "L77", "scheme": "OTHER_ID"},
        context_value=graphql_context,
    )

    assert result.errors is not None
    assert result.errors[0].message == "valid subScheme required with 'OTHER' scheme"


async def test_author_requires_id_or_email(graphql_context: GraphQLContext) -> None:
    result = await schema.execute(AUTHOR_QUERY, context_value=graphql_context)

    assert result.errors is not None
    assert result.errors[0].message == "must specify either 'id' or 'email'"


async def test_root_unit(graphql_context: GraphQLContext) -> None:
    """Test that hidden units are left out of children and descendants."""
    result = await schema.execute(ROOT_UNIT_QUERY, context_value=graphql_context)

    assert result.errors is None
    root = result.data["rootUnit"]
    assert root["id"] == "root"
    assert root["type"] == "ROOT"
    assert [unit["id"] for unit in root["children"]] == ["lbnl", "jtest"]
    assert root["descendants"]["total"] == 3
    assert [unit["id"] for unit in root["descendants"]["nodes"]] == ["jtest", "lbnl", "lbnl_rw"]


async def test_unit_items_include_sub_units(graphql_context: GraphQLContext) -> None:
    result = await schema.execute(
        'query { unit(id: "lbnl") { name type items { total } parents { id } } }',
        context_value=graphql_context,
    )

    assert result.errors is None
    assert result.data["unit"] == {
        "name": "Lawrence Berkeley National Laboratory",
        "type": "CAMPUS",
        "items": {"total": 2},
        "parents": [{"id": "root"}],
    }


async def test_items_error_leaves_sibling_fields(graphql_context: GraphQLContext) -> None:
    """Test that a bad items argument only nulls that field."""
    result = await schema.execute(
        '{ unit(id: "lbnl") { id } items(first: 0) { total } }',
        context_value=graphql_context,
    )

    assert result.data == {"unit": {"id": "lbnl"}, "items": None}
    assert [error.path for error in result.errors] == [["items"]]


async def test_nested_items_error_keeps_parent(graphql_context: GraphQLContext) -> None:
    result = await schema.execute(
        '{ unit(id: "lbnl") { id name items(tags: ["colour:x"]) { total } } }',
        context_value=graphql_context,
    )

    assert result.data == {
        "unit": {"id": "lbnl", "name": "Lawrence Berkeley National Laboratory", "items": None}
    }
    assert result.errors[0].path == ["unit", "items"]


async def test_unreadable_cursor_is_request_error(graphql_context: GraphQLContext) -> None:
    """Test that a cursor with an impossible boundary is reported, not masked."""
    token = hand_built_cursor(
        {"first": 2, "order": "UPDATED_DESC", "last_value": "2020-13-45", "last_id": "qt00000003"}
    )
    result = await schema.execute(
        ITEMS_QUERY, variable_values={"more": token}, context_value=graphql_context
    )

    assert result.data == {"items": None}
    assert result.errors[0].message.startswith("Invalid cursor")


async def test_failed_fetch_is_error_on_its_field_only(
    graphql_context: GraphQLContext, store: SqlAlchemyStore, monkeypatch
) -> None:
    """Test that a failed section fetch nulls journal while siblings resolve."""
    fetch_by_keys = store.fetch_by_keys

    async def sections_down(model, key_column, keys):
        if model is Section:
            raise StoreError("Batched query failed: Section.id in set")
        return await fetch_by_keys(model, key_column, keys)

    monkeypatch.setattr(store, "fetch_by_keys", sections_down)

    result = await schema.execute(
        "query ($id: ID!) { a: item(id: $id) { title journal units { id } } }",
        variable_values={"id": ARK},
        context_value=graphql_context,
    )

    assert result.data == {
        "a": {"title": "Item 1", "journal": None, "units": [{"id": "lbnl_rw"}, {"id": "jtest"}]}
    }
    assert len(result.errors) == 1
    assert result.errors[0].path == ["a", "journal"]
    assert result.errors[0].message == "Batched query failed: Section.id in set"


async def test_unknown_contributor_role_is_null(graphql_context: GraphQLContext) -> None:
    async with get_session_factory()() as session:
        session.add(
            ItemContrib(
                item_id="qt00000003", ordering=1, role="translator", attrs={"name": "Lee, Kim"}
            )
        )
        await session.commit()

    result = await schema.execute(
        'query { item(id: "ark:/13030/qt00000003") { contributors { nodes { name role } } } }',
        context_value=graphql_context,
    )

    assert result.errors is None
    assert result.data["item"]["contributors"]["nodes"] == [{"name": "Lee, Kim", "role": None}]
