import base64
import json

from dovetail.api.builder import RequestBuilder, basic_auth_header, query_value
from dovetail.api.models import Credentials, RequestSpec

CREDS = Credentials(api_key="secret", base_url="https://acme.teamwork.com")


class TestBuildUrl:
    def test_joins_base_and_path(self):
        url = RequestBuilder().build_url("https://acme.teamwork.com", "projects/42.json")
        assert url == "https://acme.teamwork.com/projects/42.json"

    def test_no_double_slash(self):
        url = RequestBuilder().build_url("https://acme.teamwork.com/", "/projects/starred.json")
        assert url == "https://acme.teamwork.com/projects/starred.json"

    def test_query_keeps_insertion_order(self):
        url = RequestBuilder().build_url(
            "https://acme.teamwork.com", "projects.json", {"page": 2, "pageSize": 50}
        )
        assert url == "https://acme.teamwork.com/projects.json?page=2&pageSize=50"

    def test_empty_query_adds_nothing(self):
        url = RequestBuilder().build_url("https://acme.teamwork.com", "projects.json", {})
        assert url.endswith("projects.json")


class TestQueryString:
    def test_booleans_render_lowercase(self):
        qs = RequestBuilder().build_query_string({"includePeople": True, "archived": False})
        assert qs == "includePeople=true&archived=false"

    def test_values_not_encoded_by_default(self):
        qs = RequestBuilder().build_query_string({"searchTerm": "a b&c"})
        assert qs == "searchTerm=a b&c"

    def test_encode_query_opt_in(self):
        qs = RequestBuilder(encode_query=True).build_query_string({"searchTerm": "a b&c"})
        assert qs == "searchTerm=a%20b%26c"

    def test_query_value(self):
        assert query_value(None) == ""
        assert query_value(3) == "3"
        assert query_value(True) == "true"


class TestBuild:
    def test_basic_auth_uses_placeholder_password(self):
        header = basic_auth_header("secret")
        assert header.startswith("Basic ")
        assert base64.b64decode(header[6:]).decode() == "secret:X"

    def test_get_has_no_body(self):
        req = RequestBuilder().build(RequestSpec(method="GET", path="projects.json"), CREDS)
        assert req.body is None
        assert "Content-Type" not in req.headers
        assert req.headers["Accept"] == "application/json"

    def test_post_serializes_body(self):
        spec = RequestSpec(method="POST", path="projects.json", body={"project": {"name": "X"}})
        req = RequestBuilder().build(spec, CREDS)
        assert json.loads(req.body) == {"project": {"name": "X"}}
        assert req.headers["Content-Type"] == "application/json"

    def test_put_without_body(self):
        req = RequestBuilder().build(RequestSpec(method="PUT", path="tasks/1/complete.json"), CREDS)
        assert req.body is None

    def test_delete_ignores_body(self):
        spec = RequestSpec(method="DELETE", path="tasks/1.json", body={"x": 1})
        req = RequestBuilder().build(spec, CREDS)
        assert req.body is None
