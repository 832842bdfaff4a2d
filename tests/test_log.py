import json
import os
import subprocess
import sys
from pathlib import Path

import pytest
from structlog.testing import capture_logs

from dovetail.errors import NotAuthorized, RequestFailed, ValidationError
from dovetail.log import configure_logging

from conftest import API_KEY

SRC_DIR = Path(__file__).resolve().parent.parent / "src"


class TestEvents:
    def test_not_authorized_logs_masked_key(self, client, transport):
        transport.respond(401, {})
        with capture_logs() as logs:
            with pytest.raises(NotAuthorized):
                client.get("me.json")
        event = next(e for e in logs if e["event"] == "teamwork_not_authorized")
        assert event["endpoint"] == "me.json"
        assert API_KEY not in json.dumps(logs)

    def test_request_events(self, client, transport):
        with capture_logs() as logs:
            client.get("me.json")
        assert [e["event"] for e in logs] == ["teamwork_request_sent", "teamwork_request_succeeded"]

    def test_validation_failure_event(self, tw):
        with capture_logs() as logs:
            with pytest.raises(ValidationError):
                tw.projects.create({})
        assert logs[-1]["event"] == "teamwork_validation_failed"
        assert logs[-1]["field"] == "name"

    def test_dispatch_event(self, tw):
        with capture_logs() as logs:
            tw.dispatch("taskLists")
        assert len(logs) == 1
        assert logs[0]["event"] == "resource_dispatched"
        assert logs[0]["resource"] == "task_lists"


class TestConfigureLogging:
    def test_json_lines_to_stderr(self, client, transport, capsys):
        configure_logging(use_json=True)
        transport.respond(500, "boom")
        with pytest.raises(RequestFailed):
            client.get("projects.json")
        line = capsys.readouterr().err.strip().splitlines()[-1]
        event = json.loads(line)
        assert event["event"] == "teamwork_request_failed"
        assert event["status_code"] == 500
        assert event["level"] == "warning"

    def test_debug_filtered_unless_verbose(self, client, capsys):
        configure_logging(use_json=True)
        client.get("me.json")
        assert capsys.readouterr().err == ""

        configure_logging(verbose=True, use_json=True)
        client.get("me.json")
        assert "teamwork_request_sent" in capsys.readouterr().err


LIBRARY_SCRIPT = """
import json

from dovetail.api.client import ApiClient
from dovetail.api.transport import TransportResponse
from dovetail.dispatcher import Dovetail
from dovetail.errors import NotAuthorized


class ScriptedTransport:
    def __init__(self):
        self.statuses = [200, 401]

    def execute(self, method, url, headers, body=None):
        body = json.dumps({"project": {"id": 42}}).encode()
        return TransportResponse(status_code=self.statuses.pop(0), body=body)


tw = Dovetail(ApiClient("library-key-123", "https://acme.teamwork.com", transport=ScriptedTransport()))
tw.projects.get(42)
try:
    tw.projects.get(42)
except NotAuthorized:
    pass
"""


class TestLibraryDefaults:
    def _run(self, script):
        env = {**os.environ, "PYTHONPATH": os.pathsep.join(filter(None, [str(SRC_DIR), os.environ.get("PYTHONPATH")]))}
        return subprocess.run(
            [sys.executable, "-c", script], capture_output=True, text=True, env=env, timeout=60
        )

    def test_unconfigured_library_writes_nothing(self):
        result = self._run(LIBRARY_SCRIPT)
        assert result.returncode == 0, result.stderr
        assert result.stdout == ""
        assert result.stderr == ""

    def test_host_logging_receives_warnings(self):
        script = "import logging, sys\nlogging.basicConfig(stream=sys.stdout, level=logging.WARNING)\n" + LIBRARY_SCRIPT
        result = self._run(script)
        assert result.returncode == 0, result.stderr
        assert "teamwork_not_authorized" in result.stdout
        assert "teamwork_request_sent" not in result.stdout
        assert "library-key-123" not in result.stdout
