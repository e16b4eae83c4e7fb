from datetime import datetime, timezone
from enum import Enum

from hypothesis import given
from hypothesis import strategies as st

from proto2fetch.runtime.search_params import format_scalar, object_to_search_params


class Status(Enum):
    ACTIVE = "USER_STATUS_ACTIVE"


class TestFormatScalar:
    def test_values(self) -> None:
        assert format_scalar(True) == "true"
        assert format_scalar(False) == "false"
        assert format_scalar(10) == "10"
        assert format_scalar(2.0) == "2"
        assert format_scalar(2.5) == "2.5"
        assert format_scalar(Status.ACTIVE) == "USER_STATUS_ACTIVE"
        assert format_scalar(b"abc") == "abc"
        assert format_scalar(datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)) == "2024-01-02T03:04:05+00:00"


class TestObjectToSearchParams:
    def test_list_of_objects(self) -> None:
        params = object_to_search_params({"sort": [{"field": "name", "direction": "asc"}]})
        assert params == [("sort[0].field", "name"), ("sort[0].direction", "asc")]
        assert all("[object Object]" not in value for _, value in params)

    def test_sort_list(self) -> None:
        params = object_to_search_params(
            {"sort": [{"field": "name", "direction": "asc"}, {"field": "created_at", "direction": "desc"}]}
        )
        assert params == [
            ("sort[0].field", "name"),
            ("sort[0].direction", "asc"),
            ("sort[1].field", "created_at"),
            ("sort[1].direction", "desc"),
        ]

    def test_nested_objects(self) -> None:
        params = object_to_search_params({"filter": {"name": "ann", "status": {"code": 1}}})
        assert params == [("filter.name", "ann"), ("filter.status.code", "1")]

    def test_scalar_lists_repeat_the_key(self) -> None:
        assert object_to_search_params({"ids": [1, 2, 3]}) == [("ids", "1"), ("ids", "2"), ("ids", "3")]

    def test_none_is_omitted(self) -> None:
        params = object_to_search_params({"page": 1, "filter": None, "tags": [None, "a"], "nested": {"x": None}})
        assert params == [("page", "1"), ("tags", "a")]

    def test_empty_containers_produce_nothing(self) -> None:
        assert object_to_search_params({"tags": [], "filter": {}}) == []

    def test_mixed_request(self) -> None:
        params = object_to_search_params(
            {
                "page": 2,
                "size": 20,
                "active": True,
                "sort": [{"field": "created_at", "direction": "desc"}, {"field": "name", "direction": "asc"}],
            }
        )
        assert params == [
            ("page", "2"),
            ("size", "20"),
            ("active", "true"),
            ("sort[0].field", "created_at"),
            ("sort[0].direction", "desc"),
            ("sort[1].field", "name"),
            ("sort[1].direction", "asc"),
        ]

    @given(st.dictionaries(st.text(min_size=1), st.one_of(st.none(), st.integers(), st.text(), st.booleans())))
    def test_flat_objects_keep_order(self, obj: dict) -> None:
        expected = [(key, format_scalar(value)) for key, value in obj.items() if value is not None]
        assert object_to_search_params(obj) == expected
