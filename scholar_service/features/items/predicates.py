"""Compile ``<prefix>:<value>`` tag filters into SQL predicates.

Prefixes:
    discipline: exact element of ``attrs.disciplines``
    keyword:    case-insensitive substring of ``attrs.keywords``
    subject:    case-insensitive substring of ``attrs.subjects``
    grant:      case-insensitive substring of ``attrs.grants``
    type:       item genre (``ETD`` also matches ``dissertation``)
    source:     originating system, exact

Substring tags match against the serialized JSON of the whole collection,
so ``keyword:food`` matches an item whose keywords include "Food Safety".
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from sqlalchemy import Boolean, String, cast, func
from sqlalchemy.exc import CompileError
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.functions import FunctionElement

from scholar_service.core.exceptions import RequestError
from scholar_service.features.items.models import Item

if TYPE_CHECKING:
    from sqlalchemy.sql.compiler import SQLCompiler
    from sqlalchemy.sql.elements import ColumnElement

TAG_PREFIXES = ("discipline", "keyword", "subject", "grant", "type", "source")

_SUBSTRING_KEYS = {"keyword": "keywords", "subject": "subjects", "grant": "grants"}
_KEY_PATTERN = re.compile(r"^\w+$")


class json_array_contains(FunctionElement[bool]):
    """``value`` is an element of the JSON array stored under ``key``.

    Usage:
        stmt.where(json_array_contains(Item.attrs, "disciplines", "Law"))
    """

    type = Boolean()
    name = "json_array_contains"
    # The key is rendered into the SQL text, not bound, so statements are not cached
    inherit_cache = False

    def __init__(self, column: Any, key: str, value: str) -> None:
        if not _KEY_PATTERN.match(key):
            msg = f"Invalid JSON key: {key!r}"
            raise ValueError(msg)
        self.key = key
        super().__init__(column, value)


def _parts(element: json_array_contains, compiler: SQLCompiler, **kw: Any) -> tuple[str, str]:
    column, value = list(element.clauses)
    return compiler.process(column, **kw), compiler.process(value, **kw)


@compiles(json_array_contains)
def _compile_default(element: json_array_contains, compiler: SQLCompiler, **kw: Any) -> str:
    msg = f"json_array_contains is not supported on {compiler.dialect.name}"
    raise CompileError(msg)


@compiles(json_array_contains, "sqlite")
def _compile_sqlite(element: json_array_contains, compiler: SQLCompiler, **kw: Any) -> str:
    column, value = _parts(element, compiler, **kw)
    return (
        f"EXISTS (SELECT 1 FROM json_each({column}, '$.{element.key}') "
        f"WHERE json_each.value = {value})"
    )


@compiles(json_array_contains, "postgresql")
def _compile_postgresql(element: json_array_contains, compiler: SQLCompiler, **kw: Any) -> str:
    column, value = _parts(element, compiler, **kw)
    return f"(({column}) -> '{element.key}') @> jsonb_build_array(CAST({value} AS TEXT))"


@compiles(json_array_contains, "mysql")
@compiles(json_array_contains, "mariadb")
def _compile_mysql(element: json_array_contains, compiler: SQLCompiler, **kw: Any) -> str:
    column, value = _parts(element, compiler, **kw)
    return f"JSON_CONTAINS({column}, JSON_QUOTE({value}), '$.{element.key}')"


def genre_values(type_name: str) -> list[str]:
    """Genres stored for an ``ItemType`` name (``NON_TEXTUAL`` -> ``non-textual``)."""
    lowered = type_name.lower()
    if lowered == "etd":
        return ["etd", "dissertation"]
    return [lowered.replace("_", "-")]


def compile_tag(tag: str) -> ColumnElement[bool]:
    """Translate one tag filter into a predicate on ``Item``.

    Raises:
        RequestError: If the tag does not start with a known prefix.
    """
    prefix, sep, value = tag.partition(":")
    if not sep or prefix not in TAG_PREFIXES:
        raise RequestError(
            "tags must start with 'discipline:', 'keyword:', 'subject:', "
            "'grant:', 'type:', or 'source:'",
            extra={"tag": tag},
        )
    if prefix == "discipline":
        return json_array_contains(Item.attrs, "disciplines", value)
    if prefix in _SUBSTRING_KEYS:
        serialized = cast(Item.attrs[_SUBSTRING_KEYS[prefix]], String)
        return func.lower(serialized).contains(value.lower(), autoescape=True)
    if prefix == "type":
        return Item.genre.in_(genre_values(value))
    return Item.source == value


__all__ = ["TAG_PREFIXES", "compile_tag", "genre_values", "json_array_contains"]
