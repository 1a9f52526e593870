import sys
import os
import io
import unittest
from unittest.mock import patch, MagicMock

# Add the src directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from PyPDF2 import PdfWriter

from core.state import AppState, KeywordResult
from utils.pdf_reader import extract_text_from_pdf, is_pdf_upload, sync_pdf_upload, PdfExtractionError


def make_blank_pdf(pages: int = 1) -> bytes:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=200, height=200)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


class TestPdfReader(unittest.TestCase):

    def test_blank_pdf_yields_empty_text(self):
        self.assertEqual(extract_text_from_pdf(make_blank_pdf(2)), "")

    def test_pages_are_joined_with_blank_line(self):
        pages = [MagicMock(), MagicMock()]
        pages[0].extract_text.return_value = "  Claim 1. A heater."
        pages[1].extract_text.return_value = "Claim 2. The heater of claim 1.  "
        with patch('utils.pdf_reader.PdfReader') as mock_reader:
            mock_reader.return_value.pages = pages
            text = extract_text_from_pdf(b"%PDF-1.4")

        self.assertEqual(text, "Claim 1. A heater.\n\nClaim 2. The heater of claim 1.")

    def test_invalid_bytes_raise_extraction_error(self):
        with self.assertRaises(PdfExtractionError):
            extract_text_from_pdf(b"this is not a pdf")

    def test_is_pdf_upload(self):
        self.assertTrue(is_pdf_upload("patent.bin", "application/pdf"))
        self.assertTrue(is_pdf_upload("US1234567.PDF", None))
        self.assertFalse(is_pdf_upload("notes.txt", "text/plain"))
        self.assertFalse(is_pdf_upload(None, None))


MESSAGES = {"invalid_pdf": "Please upload a valid PDF file.", "pdf_error": "Failed to parse PDF: {error}"}


def make_upload(name: str, data: bytes, mime_type: str = "application/pdf") -> MagicMock:
    upload = MagicMock()
    upload.name = name
    upload.type = mime_type
    upload.getvalue.return_value = data
    return upload


class TestSyncPdfUpload(unittest.TestCase):

    def test_failed_upload_is_parsed_only_once(self):
        state = AppState()
        upload = make_upload("broken.pdf", b"this is not a pdf")

        sync_pdf_upload(state, upload, MESSAGES)
        self.assertTrue(state.error.startswith("Failed to parse PDF: "))
        self.assertIsNone(state.file_name)

        # a later rerun (e.g. after a successful analysis) must not bring the error back
        state.error = None
        state.results = [KeywordResult(keyword="heating")]
        sync_pdf_upload(state, upload, MESSAGES)

        self.assertIsNone(state.error)
        self.assertEqual([r.keyword for r in state.results], ["heating"])
        upload.getvalue.assert_called_once()

    def test_successful_upload_loads_text_once(self):
        state = AppState(results=[KeywordResult(keyword="stale")], error="old error")
        upload = make_upload("patent.pdf", make_blank_pdf())

        with patch('utils.pdf_reader.extract_text_from_pdf', return_value="Claim 1. A heater.") as mock_extract:
            sync_pdf_upload(state, upload, MESSAGES)
            state.patent_text = "edited by the user"
            sync_pdf_upload(state, upload, MESSAGES)

        mock_extract.assert_called_once()
        self.assertEqual(state.file_name, "patent.pdf")
        self.assertEqual(state.patent_text, "edited by the user")
        self.assertEqual(state.results, [])
        self.assertIsNone(state.error)

    def test_removed_upload_clears_file_name(self):
        state = AppState(patent_text="Claim 1. A heater.", file_name="patent.pdf", last_upload_name="patent.pdf")

        sync_pdf_upload(state, None, MESSAGES)

        self.assertIsNone(state.file_name)
        self.assertIsNone(state.last_upload_name)
        self.assertEqual(state.patent_text, "Claim 1. A heater.")

    def test_reuploading_after_removal_parses_again(self):
        state = AppState()
        upload = make_upload("patent.pdf", make_blank_pdf())

        sync_pdf_upload(state, upload, MESSAGES)
        sync_pdf_upload(state, None, MESSAGES)
        sync_pdf_upload(state, upload, MESSAGES)

        self.assertEqual(upload.getvalue.call_count, 2)
        self.assertEqual(state.file_name, "patent.pdf")

    def test_non_pdf_upload_sets_error(self):
        state = AppState()
        sync_pdf_upload(state, make_upload("notes.txt", b"text", "text/plain"), MESSAGES)

        self.assertEqual(state.error, "Please upload a valid PDF file.")
        self.assertIsNone(state.file_name)


if __name__ == '__main__':
    unittest.main()
