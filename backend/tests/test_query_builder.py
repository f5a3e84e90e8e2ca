import pytest

from catalog_api.core.exceptions import InvalidQueryException
from catalog_api.services.catalog.query_builder import ProductQuery, SortOption, build_product_query


def test_defaults_when_no_parameters() -> None:
    query = build_product_query({})

    assert query == ProductQuery()
    assert query.page == 1
    assert query.limit == 10
    assert query.skip == 0
    assert query.sort is SortOption.newest
    assert query.to_conditions() == []
    assert query.where_clause() is None


def test_default_limit_can_be_overridden_for_public_listing() -> None:
    assert build_product_query({}, default_limit=12).limit == 12
    assert build_product_query({"limit": "5"}, default_limit=12).limit == 5


@pytest.mark.parametrize(
    "raw,expected_field,expected_desc",
    [
        ("price-high", "price", True),
        ("price-low", "price", False),
        ("name", "name", False),
        ("newest", "created_at", True),
        ("cheapest-first", "created_at", True),
        ("", "created_at", True),
    ],
)
def test_sort_keys(raw: str, expected_field: str, expected_desc: bool) -> None:
    query = build_product_query({"sortBy": raw})
    assert query.sort.field == expected_field
    assert query.sort.descending is expected_desc


def test_pagination_window() -> None:
    query = build_product_query({"page": "3", "limit": "4"})
    assert (query.page, query.limit, query.skip) == (3, 4, 8)
    assert query.pages(9) == 3
    assert query.pages(8) == 2
    assert query.pages(0) == 0


@pytest.mark.parametrize("raw", ["abc", "0", "-2", "1.5", ""])
def test_bad_page_and_limit_fall_back_to_defaults(raw: str) -> None:
    query = build_product_query({"page": raw, "limit": raw})
    assert query.page == 1
    assert query.limit == 10


def test_price_range_parses_either_bound() -> None:
    assert build_product_query({"minPrice": "2.5"}).min_price == 2.5
    assert build_product_query({"minPrice": "2.5"}).max_price is None
    query = build_product_query({"minPrice": "1", "maxPrice": "10"})
    assert (query.min_price, query.max_price) == (1.0, 10.0)
    assert len(query.to_conditions()) == 2


@pytest.mark.parametrize("param", ["minPrice", "maxPrice"])
@pytest.mark.parametrize("raw", ["cheap", "nan", "inf", "1,5"])
def test_non_numeric_price_is_rejected(param: str, raw: str) -> None:
    with pytest.raises(InvalidQueryException) as exc_info:
        build_product_query({param: raw})
    assert exc_info.value.status_code == 400
    assert exc_info.value.parameter == param


def test_blank_price_is_treated_as_absent() -> None:
    query = build_product_query({"minPrice": " ", "maxPrice": ""})
    assert query.min_price is None and query.max_price is None


def test_attribute_options_from_json_array() -> None:
    query = build_product_query({"attributes": '["red", "large", "red"]'})
    assert query.options == ("red", "large")
    assert len(query.to_conditions()) == 1


def test_attribute_options_accept_plain_comma_list() -> None:
    assert build_product_query({"attributes": "red, green"}).options == ("red", "green")
    assert build_product_query({"attributes": '"red"'}).options == ("red",)


@pytest.mark.parametrize("raw", ["[1, 2]", '{"color": "red"}', "42"])
def test_malformed_attribute_filter_is_rejected(raw: str) -> None:
    with pytest.raises(InvalidQueryException):
        build_product_query({"attributes": raw})


def test_search_and_status_are_trimmed() -> None:
    query = build_product_query({"search": "  apple ", "status": " active "})
    assert query.search == "apple"
    assert query.status == "active"
    assert len(query.to_conditions()) == 2


def test_order_by_always_ends_with_id_tie_breaker() -> None:
    order = build_product_query({"sortBy": "price-low"}).order_by()
    assert len(order) == 2
    assert "products.id" in str(order[1])
