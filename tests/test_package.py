import json

from proto2fetch.generators.package import build_package_json, generate_package_json, generate_readme
from proto2fetch.parser import ParsedSchema
from proto2fetch.parser.models import ProtoService
from tests.conftest import make_method, make_schema


class TestPackageJson:
    def test_defaults(self) -> None:
        package = build_package_json(make_schema())
        assert package["name"] == "generated-api-client"
        assert package["version"] == "1.0.0"
        assert package["description"] == "Generated API client from protobuf definitions"
        assert package["main"] == "./client.js"
        assert package["types"] == "./client.d.ts"
        assert package["dependencies"] == {"proto2fetch": "^1.0.0"}
        assert package["devDependencies"] == {"typescript": "^5.0.0"}
        assert package["scripts"] == {"build": "tsc", "dev": "tsc --watch"}

    def test_package_name_and_schema_description(self, parsed_schema: ParsedSchema) -> None:
        package = build_package_json(parsed_schema, "@acme/users-client")
        assert package["name"] == "@acme/users-client"
        assert package["description"] == parsed_schema.description

    def test_serialized_with_two_space_indent(self) -> None:
        content = generate_package_json(make_schema(), "client")
        assert content.startswith('{\n  "name": "client",\n')
        assert content.endswith("}\n")
        assert json.loads(content)["name"] == "client"


class TestReadme:
    def test_usage_examples(self, parsed_schema: ParsedSchema) -> None:
        readme = generate_readme(parsed_schema, "users-client", "UsersClient", "https://users.example.com")
        assert readme.startswith("# users-client\n")
        assert "npm install users-client" in readme
        assert "import { UsersClient } from 'users-client';" in readme
        assert "baseUrl: 'https://users.example.com'," in readme
        assert "// Get an order\nconst result = await client.getOrder(request);" in readme
        assert "const result2 = await client.cancelOrder(request);" in readme
        assert "const result3 = await client.getUser(request);" in readme
        assert "result4" not in readme

    def test_empty_get_has_no_argument(self) -> None:
        method = make_method("GetProfile", "Empty", "User", "GET", "/me", description="Current user\nmore text")
        schema = make_schema(services=[ProtoService(name="ProfileService", methods=[method])])
        readme = generate_readme(schema)
        assert "// Current user\nconst result = await client.getProfile();" in readme
        assert "more text" not in readme

    def test_defaults(self) -> None:
        readme = generate_readme(make_schema())
        assert readme.startswith("# Generated API Client\n")
        assert "npm install generated-api-client" in readme
        assert "baseUrl: 'https://api.example.com'," in readme
        assert readme.endswith("*This client was generated using [proto2fetch](https://github.com/szy0syz/proto2fetch).*\n")
