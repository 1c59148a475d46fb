"""Unit tests for statement filters."""

from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy import select
from sqlalchemy.dialects import sqlite
from sqlalchemy.sql.elements import False_, True_

from cursorable.core.database.exceptions import InvalidFilterError
from cursorable.core.database.filters import (
    BeforeAfter,
    CollectionFilter,
    FilterGroup,
    SearchFilter,
    as_clause,
)
from tests.models import Article


def _sql(element) -> str:
    return str(element.compile(dialect=sqlite.dialect(), compile_kwargs={"literal_binds": True}))


class TestSearchFilter:
    def test_case_insensitive_or(self):
        clause = SearchFilter([Article.title, Article.status], "Py").clause()

        assert _sql(clause) == (
            "lower(articles.title) LIKE '%py%' OR lower(articles.status) LIKE '%py%'"
        )

    def test_empty_value_matches_everything(self):
        assert SearchFilter(Article.title, "").clause() is None


class TestCollectionFilter:
    def test_in(self):
        clause = CollectionFilter(Article.status, ["draft", "published"]).clause()

        assert _sql(clause) == "articles.status IN ('draft', 'published')"

    def test_not_in(self):
        clause = CollectionFilter(Article.status, ["draft"], invert=True).clause()

        assert "articles.status NOT IN ('draft')" in _sql(clause)

    def test_empty_collection(self):
        """IN () matches nothing; NOT IN () matches everything."""
        assert isinstance(CollectionFilter(Article.status, []).clause(), False_)
        assert CollectionFilter(Article.status, [], invert=True).clause() is None


class TestBeforeAfter:
    def test_range(self):
        clause = BeforeAfter(
            Article.created_at, after=datetime(2023, 1, 1), before=datetime(2023, 2, 1)
        ).clause()

        assert clause is not None
        assert " AND " in str(clause)

    def test_no_bounds(self):
        assert BeforeAfter(Article.created_at).clause() is None


class TestFilterGroup:
    def test_and_group_skips_match_all_members(self):
        group = FilterGroup([SearchFilter(Article.title, ""), Article.rating > 3])

        assert _sql(group.clause()) == "articles.rating > 3"

    def test_or_group_with_match_all_member(self):
        """A member that matches everything makes an OR group match everything."""
        group = FilterGroup(
            [SearchFilter(Article.title, ""), Article.rating > 3], operator="or"
        )

        assert isinstance(group.clause(), True_)

    def test_apply(self):
        statement = FilterGroup([Article.rating > 3, Article.status == "draft"]).apply(
            select(Article.id)
        )

        assert "WHERE articles.rating > 3 AND articles.status = 'draft'" in _sql(statement)


class TestAsClause:
    def test_none(self):
        assert as_clause(None) is None

    def test_expression(self):
        expression = Article.rating > 3

        assert as_clause(expression) is expression

    def test_list_is_anded(self):
        clause = as_clause([Article.rating > 3, CollectionFilter(Article.status, ["x"])])

        assert _sql(clause) == "articles.rating > 3 AND articles.status IN ('x')"

    def test_single_element_list(self):
        expression = Article.rating > 3

        assert as_clause([expression, SearchFilter(Article.title, "")]) is expression

    @pytest.mark.parametrize("value", ["rating > 3", 42, {"rating": 3}])
    def test_unsupported_value(self, value):
        """Raw SQL strings and other objects are not filters."""
        with pytest.raises(InvalidFilterError):
            as_clause(value)
