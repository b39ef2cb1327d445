"""
Unit Tests for log formatting and request context
"""
import json
import logging

from cmis_portal.core.logging_config import (
    JSONFormatter,
    ContextualFormatter,
    set_request_id,
    set_student_id,
    generate_request_id,
)
from cmis_portal.core.middleware import is_quiet_path


def record(msg="Storage store: resumes/a.pdf", **extra):
    rec = logging.LogRecord("cmis_portal", logging.INFO, __file__, 10, msg, None, None)
    rec.__dict__.update(extra)
    return rec


class TestFormatters:
    """Context variables and extra= fields reach the output"""

    def test_json_includes_context_and_extra(self):
        set_request_id("abc12345")
        set_student_id("42")
        try:
            payload = json.loads(JSONFormatter().format(record(event_type="storage", storage_key="resumes/a.pdf")))
        finally:
            set_request_id("")
            set_student_id("")

        assert payload["message"] == "Storage store: resumes/a.pdf"
        assert payload["request_id"] == "abc12345"
        assert payload["student_id"] == "42"
        assert payload["event_type"] == "storage"
        assert payload["storage_key"] == "resumes/a.pdf"
        assert "msg" not in payload

    def test_json_omits_empty_context(self):
        payload = json.loads(JSONFormatter().format(record()))

        assert "request_id" not in payload
        assert "student_id" not in payload

    def test_text_uses_placeholders_without_context(self):
        formatter = ContextualFormatter("[%(request_id)s] [%(student_id)s] %(message)s")

        assert formatter.format(record("hello")) == "[-] [-] hello"

    def test_request_ids_are_short_and_unique(self):
        first, second = generate_request_id(), generate_request_id()

        assert len(first) == 8
        assert first != second


class TestQuietPaths:
    """Health and docs requests are not logged individually"""

    def test_health_and_docs(self):
        assert is_quiet_path("/api/health")
        assert is_quiet_path("/api/health/ready")
        assert is_quiet_path("/docs")

    def test_api_routes_are_logged(self):
        assert not is_quiet_path("/api/students/register")
