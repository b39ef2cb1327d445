"""
Unit Tests for the error taxonomy
"""
from cmis_portal.core.exceptions import (
    PortalError,
    ValidationError,
    MissingFieldsError,
    InvalidFileTypeError,
    FileTooLargeError,
    AuthenticationError,
    AccountNotSetUpError,
    InvalidTokenError,
    AuthorizationError,
    StudentNotFoundError,
    EventNotFoundError,
    ConflictError,
    UpstreamStorageError,
    PersistenceError,
    UpstreamServiceError,
    WebhookNotConfiguredError,
    error_response,
)


class TestStatusCodes:
    """Each error kind maps to one HTTP status"""

    def test_validation_family_is_400(self):
        assert ValidationError("bad").status_code == 400
        assert MissingFieldsError(["uin"]).status_code == 400
        assert InvalidFileTypeError("image/png", ["application/pdf"]).status_code == 400
        assert FileTooLargeError(11, 10).status_code == 400

    def test_auth_family(self):
        assert AuthenticationError().status_code == 401
        assert AccountNotSetUpError().status_code == 401
        assert InvalidTokenError().status_code == 401
        assert AuthorizationError().status_code == 403

    def test_not_found_and_conflict(self):
        assert StudentNotFoundError(1).status_code == 404
        assert EventNotFoundError(1).status_code == 404
        assert ConflictError("dup").status_code == 409

    def test_upstream_failures(self):
        assert UpstreamStorageError().status_code == 500
        assert PersistenceError("x").status_code == 500
        assert WebhookNotConfiguredError().status_code == 500
        assert UpstreamServiceError("x").status_code == 502


class TestMessages:
    """Messages the portal frontend displays verbatim"""

    def test_missing_fields_lists_names(self):
        err = MissingFieldsError(["uin", "email"])

        assert err.message == "Missing required fields: uin, email"
        assert err.details == {"fields": ["uin", "email"]}

    def test_invalid_file_type_message(self):
        err = InvalidFileTypeError("image/png", ["application/pdf"])

        assert err.message == "Invalid file type. Only PDF and DOCX files are allowed."

    def test_file_too_large_message(self):
        err = FileTooLargeError(12 * 1024 * 1024, 10 * 1024 * 1024)

        assert err.message == "File size exceeds 10MB limit."

    def test_account_not_set_up_message(self):
        assert AccountNotSetUpError().message == "Account not properly set up. Please contact administrator."


class TestErrorResponse:
    """Wire shape of error bodies"""

    def test_body_is_error_only_by_default(self):
        err = PersistenceError("GPA must be between 0.0 and 4.0.", field="gpa", diagnostic="CHECK failed")

        assert error_response(err) == {"error": "GPA must be between 0.0 and 4.0."}

    def test_details_included_on_request(self):
        err = PersistenceError("GPA must be between 0.0 and 4.0.", field="gpa", diagnostic="CHECK failed")
        body = error_response(err, include_details=True)

        assert body["details"] == {"field": "gpa", "diagnostic": "CHECK failed"}

    def test_no_details_key_when_empty(self):
        body = error_response(AuthenticationError(), include_details=True)

        assert body == {"error": "Invalid email or password"}

    def test_storage_error_records_key(self):
        err = UpstreamStorageError(key="resumes/1-abc.pdf")

        assert err.details["s3_key"] == "resumes/1-abc.pdf"

    def test_upstream_status_recorded(self):
        err = UpstreamServiceError("Failed to trigger n8n pipeline", upstream_status=503)

        assert err.details["upstream_status"] == 503
