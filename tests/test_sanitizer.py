from proto2fetch.parser.sanitizer import (
    extract_imports,
    extract_package,
    remove_imports,
    strip_custom_options,
)

PROTO = """syntax = "proto3";

package shop.v1;

import "google/api/annotations.proto";
import public "common.proto";
import "protoc-gen-openapiv2/options/annotations.proto"; // docs

// option (vendor.ext) = "in a comment";
message Item {
  string id = 1 [(vendor.field) = {description: "x, y"}, deprecated = true];
  string name = 2 [(vendor.field).title = "n"];
  string url = 3 [json_name = "link"];
}

service ItemService {
  rpc GetItem(Item) returns (Item) {
    option (google.api.http) = {
      get: "/v1/items/{id}"
    };
    option (vendor.operation) = {
      summary: "Get; an item"
      tags: "items"
    };
    option (vendor.operation).deprecated = true;
  }
}
"""


def keep_google(extension: str) -> bool:
    return not extension.startswith("vendor.")


class TestExtract:
    def test_extract_imports(self) -> None:
        assert extract_imports(PROTO) == [
            "google/api/annotations.proto",
            "common.proto",
            "protoc-gen-openapiv2/options/annotations.proto",
        ]

    def test_extract_package(self) -> None:
        assert extract_package(PROTO) == "shop.v1"
        assert extract_package('syntax = "proto3";') == ""


class TestRemoveImports:
    def test_removes_only_targets(self) -> None:
        result = remove_imports(PROTO, ["protoc-gen-openapiv2/options/annotations.proto"])
        assert "protoc-gen-openapiv2" not in result
        assert 'import "google/api/annotations.proto";' in result
        assert 'import public "common.proto";' in result

    def test_removes_public_import(self) -> None:
        result = remove_imports(PROTO, ["common.proto"])
        assert "common.proto" not in result


class TestStripCustomOptions:
    def test_strips_rejected_option_statements(self) -> None:
        result = strip_custom_options(PROTO, keep_google)
        assert "(vendor.operation)" not in result
        assert "Get; an item" not in result
        assert "option (google.api.http)" in result
        assert 'get: "/v1/items/{id}"' in result

    def test_strips_field_option_entries(self) -> None:
        result = strip_custom_options(PROTO, keep_google)
        assert "string id = 1 [ deprecated = true];" in result
        assert "string name = 2 ;" in result
        assert 'string url = 3 [json_name = "link"];' in result

    def test_comments_are_untouched(self) -> None:
        result = strip_custom_options(PROTO, keep_google)
        assert '// option (vendor.ext) = "in a comment";' in result

    def test_keep_all_is_identity(self) -> None:
        assert strip_custom_options(PROTO, lambda _: True) == PROTO
