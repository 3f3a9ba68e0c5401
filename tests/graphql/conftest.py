"""GraphQL test queries.

The seeded database and ``graphql_context`` fixture come from the root
conftest; this module holds the query documents shared by the tests.
"""

from __future__ import annotations

ITEM_QUERY = """
    query GetItem($id: ID!, $scheme: ItemIDScheme) {
        item(id: $id, scheme: $scheme) {
            id
            title
            status
            type
            added
            permalink
            contentLink
            contentSize
            contentVersion
            journal
            volume
            issue
            issn
            pagination
            disciplines
            localIDs { id scheme subScheme }
            units { id name }
            authors { total }
            suppFiles { file contentType downloadLink }
        }
    }
"""

ITEM_AUTHORS_QUERY = """
    query ItemAuthors($id: ID!, $first: Int, $more: String) {
        item(id: $id) {
            authors(first: $first, more: $more) {
                total
                more
                nodes { name id orcid }
            }
        }
    }
"""

ITEMS_QUERY = """
    query ListItems($first: Int, $more: String, $tags: [String!], $order: ItemOrder) {
        items(first: $first, more: $more, tags: $tags, order: $order) {
            total
            more
            nodes { id type }
        }
    }
"""

AUTHOR_QUERY = """
    query GetAuthor($id: ID, $scheme: AuthorIDScheme, $subScheme: String, $email: String) {
        author(id: $id, scheme: $scheme, subScheme: $subScheme, email: $email) {
            id
            name
            ids { id scheme subScheme }
            items { total nodes { id } }
        }
    }
"""

ROOT_UNIT_QUERY = """
    query {
        rootUnit {
            id
            type
            children { id }
            descendants { total nodes { id } }
        }
    }
"""
