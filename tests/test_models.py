import pytest

from dovetail.api.models import Pagination, RequestSpec, ResponseEnvelope
from dovetail.api.unwrap import decode_body, extract_key
from dovetail.errors import (
    DovetailError,
    NotAuthorized,
    RequestFailed,
    ResponseDecodeError,
    UnexpectedResponse,
    UnknownResourceError,
    mask_api_key,
)
from dovetail.resources.transforms import backfill_id, notify_flag, translate_tag_color


class TestPagination:
    def test_reads_headers_case_insensitively(self):
        envelope = ResponseEnvelope(
            status_code=200, headers={"x-page": "2", "X-Pages": "5", "X-RECORDS": "123"}
        )
        assert envelope.pagination == Pagination(page=2, pages=5, records=123)

    def test_missing_or_garbage_headers(self):
        envelope = ResponseEnvelope(status_code=200, headers={"X-Page": "abc"})
        assert envelope.pagination == Pagination()


class TestRequestSpec:
    def test_frozen(self):
        spec = RequestSpec(method="GET", path="projects.json")
        with pytest.raises(Exception):
            spec.path = "tasks.json"


class TestUnwrap:
    def test_decode(self):
        assert decode_body(b'{"a": 1}') == {"a": 1}
        assert decode_body(b"  ") is None

    def test_decode_error(self):
        with pytest.raises(ResponseDecodeError) as exc:
            decode_body(b"not json", endpoint="x.json")
        assert exc.value.endpoint == "x.json"
        assert isinstance(exc.value, RequestFailed)

    def test_extract_key(self):
        assert extract_key({"project": {"id": 1}}, "project") == {"id": 1}
        assert extract_key([1, 2], None) == [1, 2]

    def test_extract_missing_key(self):
        with pytest.raises(UnexpectedResponse, match="no 'project' key"):
            extract_key(None, "project", endpoint="projects/1.json")


class TestErrors:
    def test_mask_api_key(self):
        assert mask_api_key("abcdefghij") == "ab…ij"
        assert mask_api_key("short") == "*****"
        assert mask_api_key("") == "<none>"

    def test_not_authorized_message(self):
        error = NotAuthorized("abcdefghij", "me.json")
        assert error.message == "Teamwork API key `ab…ij` does not have permission for this request."
        assert error.api_key == "abcdefghij"

    def test_family(self):
        for error in (
            NotAuthorized("k", "x"),
            RequestFailed("boom"),
            UnexpectedResponse("k"),
            UnknownResourceError("widgets", ["projects"]),
        ):
            assert isinstance(error, DovetailError)

    def test_unknown_resource_lists_available(self):
        error = UnknownResourceError("widgets", ["tasks", "projects"])
        assert error.message == "Unknown resource 'widgets'. Available: projects, tasks"


class TestTransforms:
    @pytest.mark.parametrize(
        "given, expected",
        [("red", "#d84640"), ("grey", "#a6a6a6"), ("#123456", "#123456"), (None, None)],
    )
    def test_translate_tag_color(self, given, expected):
        assert translate_tag_color(given) == expected

    @pytest.mark.parametrize(
        "given, expected",
        [(True, "yes"), ("yes", "yes"), (1, "yes"), (False, "no"), ("no", "no"), (None, "no")],
    )
    def test_notify_flag(self, given, expected):
        assert notify_flag({"notify": given})["notify"] == expected

    def test_backfill_id(self):
        assert backfill_id({"TASKLISTID": "9"}) == {"TASKLISTID": "9", "id": "9"}
        assert backfill_id({"TASKLISTID": "9", "id": "1"})["id"] == "1"
