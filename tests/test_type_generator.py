import logging
import re

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from proto2fetch.generators.type_mapping import TypeMappingOptions, map_field_type, to_camel_case
from proto2fetch.generators.types import (
    TypeScriptTypeGenerator,
    sort_messages_by_dependency,
    translate_to_types,
    unique_messages_containing,
)
from proto2fetch.parser import ParsedSchema
from proto2fetch.parser.models import ProtoEnum, ProtoField, SchemaFile
from tests.conftest import make_field, make_message, make_schema, scalar_fields


class TestDependencyOrder:
    def test_dependencies_come_first(self) -> None:
        user = make_message("User", make_field("address", "Address"), make_field("id", "int64", 2))
        address = make_message("Address", make_field("city"))
        ordered = sort_messages_by_dependency([user, address])
        assert [message.name for message in ordered] == ["Address", "User"]

    def test_repeated_reference(self) -> None:
        response = make_message("ListUsersResponse", make_field("users", "User", repeated=True))
        user = make_message("User", make_field("id", "int64"))
        ordered = sort_messages_by_dependency([response, user])
        assert [message.name for message in ordered] == ["User", "ListUsersResponse"]

    def test_independent_messages_keep_order(self) -> None:
        messages = [make_message(name, make_field("id")) for name in ("B", "A", "C")]
        assert [message.name for message in sort_messages_by_dependency(messages)] == ["B", "A", "C"]

    def test_cycle_is_reported(self, caplog: pytest.LogCaptureFixture) -> None:
        category = make_message("Category", make_field("featured", "Product"))
        product = make_message("Product", make_field("category", "Category"))
        with caplog.at_level(logging.WARNING, logger="proto2fetch"):
            ordered = sort_messages_by_dependency([category, product])
        assert [message.name for message in ordered] == ["Product", "Category"]
        assert "Circular dependency" in caplog.text

    def test_duplicate_names_are_emitted_once(self) -> None:
        first = make_message("Shared", make_field("id"))
        second = make_message("Shared", make_field("other"))
        assert len(sort_messages_by_dependency([first, second])) == 1


class TestInterfaces:
    def test_user_interface(self, parsed_schema: ParsedSchema) -> None:
        result = translate_to_types(parsed_schema)
        user = re.search(r"export interface User \{\n(.*?)\n\}", result, re.DOTALL)
        assert user is not None
        body = user.group(1)
        assert "  id: bigint;" in body
        assert "  createdAt: Date;" in body
        assert "  tags: string[];" in body
        assert "  nickname?: string;" in body
        assert "  bio?: string;" in body
        assert "  phone?: string;" in body
        assert "  labels: Record<string, string>;" in body
        assert "  status: UserStatus;" in body
        assert "  address: Address;" in body

    def test_jsdoc(self, parsed_schema: ParsedSchema) -> None:
        result = translate_to_types(parsed_schema)
        assert "/**\n * A registered user.\n */\nexport interface User {" in result
        assert "  /**\n   * Unique user id.\n   */\n  id: bigint;" in result

    def test_no_comments(self, parsed_schema: ParsedSchema) -> None:
        result = translate_to_types(parsed_schema, include_comments=False)
        assert "/**" not in result
        assert "export interface User {\n  id: bigint;" in result

    def test_string_policies(self, parsed_schema: ParsedSchema) -> None:
        options = TypeMappingOptions(date_as_string=True, bigint_as_string=True)
        result = translate_to_types(parsed_schema, options)
        assert "  createdAt: string;" in result
        assert "  id: string;" in result
        assert re.search(r"export interface SuccessResponse \{.*?timestamp: string;", result, re.DOTALL)

    def test_dependencies_are_declared_first(self, parsed_schema: ParsedSchema) -> None:
        result = translate_to_types(parsed_schema)
        assert result.index("export interface Address {") < result.index("export interface User {")
        assert result.index("export interface UserFilter {") < result.index("export interface ListUsersRequest {")

    def test_deterministic(self, parsed_schema: ParsedSchema) -> None:
        assert translate_to_types(parsed_schema) == translate_to_types(parsed_schema)

    def test_header(self, parsed_schema: ParsedSchema) -> None:
        result = translate_to_types(parsed_schema)
        assert result.startswith("// This file is auto-generated. Do not edit manually.\n")

    @settings(max_examples=25)
    @given(st.lists(scalar_fields(), min_size=1, max_size=5, unique_by=lambda field: field.name))
    def test_every_field_is_declared(self, fields: list[ProtoField]) -> None:
        schema = make_schema([make_message("Sample", *fields)])
        result = TypeScriptTypeGenerator(include_comments=False).generate_types(schema)
        for field in fields:
            marker = "?" if field.optional else ""
            assert f"  {to_camel_case(field.name)}{marker}: {map_field_type(field)};" in result
        assert result.count("export interface Sample {") == 1


class TestEnums:
    def test_union(self, parsed_schema: ParsedSchema) -> None:
        result = translate_to_types(parsed_schema)
        assert (
            "export type UserStatus = 'USER_STATUS_UNSPECIFIED' | 'USER_STATUS_ACTIVE' | 'USER_STATUS_BANNED';"
            in result
        )

    def test_empty_enum_is_never(self) -> None:
        schema = make_schema(enums=[ProtoEnum(name="Nothing")])
        assert "export type Nothing = never;" in translate_to_types(schema)

    def test_enum_shadowed_by_message(self) -> None:
        schema = make_schema(
            [make_message("Status", make_field("code"))],
            enums=[ProtoEnum(name="Status", values=["A"])],
        )
        result = translate_to_types(schema)
        assert "export interface Status {" in result
        assert "export type Status =" not in result


class TestUtilityTypes:
    def test_schema_without_services(self) -> None:
        result = translate_to_types(make_schema([make_message("Lonely", make_field("id"))]))
        assert "export interface Lonely {" in result
        assert "export type Empty = Record<string, never>;" in result
        assert "export interface Pagination {" in result

    def test_all_utility_types(self) -> None:
        result = translate_to_types(make_schema())
        for declaration in (
            "export type Empty = Record<string, never>;",
            "export interface Pagination {",
            "export interface ErrorDetail {",
            "export interface ErrorResponse {",
            "export interface SuccessResponse {",
            "export interface PaginatedRequest<TFilter = any, TSort = any> {",
            "export interface PaginatedResponse<TData = any> {",
            "export interface FilterOperators<T> {",
            "export type FilterBuilder<T> = {",
            "export interface SortDirection {",
            "export type SortBuilder<T> = {",
        ):
            assert declaration in result

    def test_schema_type_shadows_utility(self) -> None:
        schema = make_schema([make_message("Pagination", make_field("offset", "int32"))])
        result = translate_to_types(schema)
        assert result.count("export interface Pagination {") == 1
        assert "  offset: number;" in result

    @pytest.mark.parametrize("name", ["Filter", "Sort"])
    def test_builder_class_shadows_utility(self, name: str) -> None:
        result = translate_to_types(make_schema([make_message(name, make_field("name"))]))
        assert f"export class {name}Builder {{" in result
        assert f"export type {name}Builder<T>" not in result

    def test_disabled_builders_keep_utility(self) -> None:
        schema = make_schema([make_message("Filter", make_field("name"))])
        result = translate_to_types(schema, filter_builders=False)
        assert "export type FilterBuilder<T> = {" in result
        assert "export class FilterBuilder" not in result

    def test_sort_direction_enum(self) -> None:
        schema = make_schema(
            [make_message("UserSort", make_field("name"))],
            enums=[ProtoEnum(name="SortDirection", values=["ASC", "DESC"])],
        )
        result = translate_to_types(schema)
        assert "export type SortDirection = 'ASC' | 'DESC';" in result
        assert "export interface SortDirection {" not in result
        assert "SortDirection[]" not in result
        assert "  private sorts: Array<{ field: string; direction: 'asc' | 'desc' }> = [];" in result

    def test_sort_builders_use_utility_entry(self) -> None:
        result = translate_to_types(make_schema([make_message("UserSort", make_field("name"))]))
        assert "  private sorts: SortDirection[] = [];" in result
        assert "  build(): SortDirection[] {" in result


class TestFilterBuilders:
    def test_user_filter(self, parsed_schema: ParsedSchema) -> None:
        result = translate_to_types(parsed_schema)
        assert "// Filter Builders" in result
        assert "export class UserFilterBuilder {" in result
        assert "  private filter: Partial<UserFilter> & Record<string, unknown> = {};" in result
        for setter in (
            "name(value: string): this {",
            "nameLike(value: string): this {",
            "emailLike(value: string): this {",
            "createdAt(value: Date): this {",
            "createdAtAfter(value: Date): this {",
            "createdAtBefore(value: Date): this {",
            "status(value: UserStatus): this {",
        ):
            assert setter in result
        assert "emailLikeLike" not in result
        assert "export function createUserFilterBuilder(): UserFilterBuilder {" in result

    def test_duplicate_filter_messages(self) -> None:
        duplicate = make_message("UserFilter", make_field("name"))
        schema = ParsedSchema(
            files=[
                SchemaFile(package_name="a", messages=[duplicate]),
                SchemaFile(package_name="b", messages=[duplicate]),
            ]
        )
        result = translate_to_types(schema)
        assert result.count("export class UserFilterBuilder {") == 1
        assert result.count("export interface UserFilter {") == 1

    def test_map_field_gets_no_derived_setters(self) -> None:
        message = make_message("TagFilter", make_field("labels", "string", map_key_type_name="string"))
        result = translate_to_types(make_schema([message]))
        assert "labels(value: Record<string, string>): this {" in result
        assert "labelsLike" not in result

    def test_disabled(self, parsed_schema: ParsedSchema) -> None:
        result = translate_to_types(parsed_schema, filter_builders=False)
        assert "// Filter Builders" not in result
        assert "UserFilterBuilder" not in result


class TestSortBuilders:
    def test_declared_fields(self) -> None:
        message = make_message("CustomSort", make_field("priority", "int32"), make_field("status", "string", 2))
        result = translate_to_types(make_schema([message]))
        assert "export class CustomSortBuilder {" in result
        assert "  byPriority(direction: 'asc' | 'desc' = 'asc'): this {" in result
        assert "    this.sorts.push({ field: 'priority', direction });" in result
        assert "  byStatus(direction: 'asc' | 'desc' = 'asc'): this {" in result
        assert "byId(" not in result

    def test_fallback_fields(self) -> None:
        result = translate_to_types(make_schema([make_message("EmptySort")]))
        for method, field in (
            ("byId", "id"),
            ("byName", "name"),
            ("byCreatedAt", "created_at"),
            ("byUpdatedAt", "updated_at"),
            ("byEmail", "email"),
            ("byPhone", "phone"),
        ):
            assert f"  {method}(direction: 'asc' | 'desc' = 'asc'): this {{" in result
            assert f"field: '{field}'" in result

    def test_disabled(self, parsed_schema: ParsedSchema) -> None:
        result = translate_to_types(parsed_schema, sort_builders=False)
        assert "// Sort Builders" not in result


class TestUniqueMessages:
    def test_first_occurrence_wins(self) -> None:
        first = make_message("OrderFilter", make_field("id"))
        second = make_message("OrderFilter", make_field("other"))
        selected = unique_messages_containing([first, make_message("Order"), second], "Filter")
        assert selected == [first]
