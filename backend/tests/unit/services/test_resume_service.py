"""
Unit Tests for resume validation and replacement
"""
import pytest

from cmis_portal.core.exceptions import InvalidFileTypeError, FileTooLargeError
from cmis_portal.services.resume_service import (
    ResumeUpload,
    read_resume_part,
    validate_resume,
    replace_resume,
)
from mocks.fake_storage import FakeStorageService


DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class FakePart:
    def __init__(self, content: bytes, filename="cv.pdf", content_type="application/pdf"):
        self._content = content
        self.filename = filename
        self.content_type = content_type

    async def read(self):
        return self._content


class TestReadResumePart:
    """Multipart parts to ResumeUpload"""

    @pytest.mark.asyncio
    async def test_file_part(self):
        resume = await read_resume_part(FakePart(b"%PDF", content_type="application/pdf; charset=binary"))

        assert resume.filename == "cv.pdf"
        assert resume.content_type == "application/pdf"
        assert resume.size == 4

    @pytest.mark.asyncio
    async def test_empty_file_is_no_resume(self):
        assert await read_resume_part(FakePart(b"")) is None

    @pytest.mark.asyncio
    async def test_text_value_is_no_resume(self):
        assert await read_resume_part("resume.pdf") is None
        assert await read_resume_part(None) is None


class TestValidateResume:
    """Type first, then size"""

    def test_pdf_and_docx_allowed(self):
        validate_resume(ResumeUpload("cv.pdf", "application/pdf", b"x"))
        validate_resume(ResumeUpload("cv.docx", DOCX, b"x"))

    def test_png_rejected(self):
        with pytest.raises(InvalidFileTypeError):
            validate_resume(ResumeUpload("cv.png", "image/png", b"x"))

    def test_too_large(self):
        with pytest.raises(FileTooLargeError):
            validate_resume(ResumeUpload("cv.pdf", "application/pdf", b"x" * 11), max_size=10)

    def test_type_checked_before_size(self):
        with pytest.raises(InvalidFileTypeError):
            validate_resume(ResumeUpload("cv.png", "image/png", b"x" * 11), max_size=10)


class TestReplaceResume:
    """Old object is removed best-effort before the new upload"""

    @pytest.mark.asyncio
    async def test_previous_deleted(self):
        storage = FakeStorageService()
        resume = ResumeUpload("cv.pdf", "application/pdf", b"%PDF")

        stored = await replace_resume(storage, resume, "resumes/old.pdf")

        assert storage.calls_of("delete") == ["resumes/old.pdf"]
        assert stored.key in storage.objects

    @pytest.mark.asyncio
    async def test_failed_delete_does_not_block_upload(self):
        storage = FakeStorageService()
        storage.fail_delete = True
        resume = ResumeUpload("cv.pdf", "application/pdf", b"%PDF")

        stored = await replace_resume(storage, resume, "resumes/old.pdf")

        assert stored.key in storage.objects

    @pytest.mark.asyncio
    async def test_no_previous_key(self):
        storage = FakeStorageService()
        resume = ResumeUpload("cv.pdf", "application/pdf", b"%PDF")

        await replace_resume(storage, resume, None)

        assert storage.calls_of("delete") == []
