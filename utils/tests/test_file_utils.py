"""
Unit tests for file_utils module.
"""

import unittest

from utils.file_utils import (
    decode_data_url,
    encode_data_url,
    file_name_from_url,
    format_file_size,
    sanitize_filename,
)


class TestFormatFileSize(unittest.TestCase):

    def test_bytes(self) -> None:
        self.assertEqual(format_file_size(0), "0 B")
        self.assertEqual(format_file_size(512), "512 B")
        self.assertEqual(format_file_size(1023), "1023 B")

    def test_kilobytes(self) -> None:
        self.assertEqual(format_file_size(1024), "1.0 KB")
        self.assertEqual(format_file_size(1536), "1.5 KB")

    def test_megabytes(self) -> None:
        self.assertEqual(format_file_size(1024 * 1024), "1.0 MB")
        self.assertEqual(format_file_size(1_500_000), "1.4 MB")
        self.assertEqual(format_file_size(5 * 1024 * 1024 * 1024), "5120.0 MB")

    def test_negative_treated_as_zero(self) -> None:
        self.assertEqual(format_file_size(-5), "0 B")


class TestFileNameFromUrl(unittest.TestCase):

    def test_last_segment(self) -> None:
        self.assertEqual(file_name_from_url("https://example.com/a/b/song.mp3"), "song.mp3")

    def test_percent_decoded(self) -> None:
        self.assertEqual(file_name_from_url("https://example.com/My%20Song.mp3"), "My Song.mp3")

    def test_query_ignored(self) -> None:
        self.assertEqual(file_name_from_url("https://example.com/doc.pdf?x=1"), "doc.pdf")

    def test_no_path_falls_back(self) -> None:
        self.assertEqual(file_name_from_url("https://example.com"), "download")
        self.assertEqual(file_name_from_url("https://example.com/"), "download")


class TestSanitizeFilename(unittest.TestCase):

    def test_replaces_reserved_characters(self) -> None:
        self.assertEqual(sanitize_filename("a<b>:c.mp3"), "a_b_c.mp3")

    def test_empty_falls_back(self) -> None:
        self.assertEqual(sanitize_filename(""), "download")
        self.assertEqual(sanitize_filename("..."), "download")

    def test_truncates_keeping_extension(self) -> None:
        result = sanitize_filename("x" * 200 + ".pdf", max_length=50)
        self.assertEqual(len(result), 50)
        self.assertTrue(result.endswith(".pdf"))


class TestDataUrl(unittest.TestCase):

    def test_encode_format(self) -> None:
        self.assertEqual(encode_data_url(b"hi", "text/plain"), "data:text/plain;base64,aGk=")

    def test_decode_binary(self) -> None:
        payload = bytes(range(256))
        self.assertEqual(decode_data_url(encode_data_url(payload, "application/octet-stream")), payload)

    def test_decode_rejects_non_data_url(self) -> None:
        with self.assertRaises(ValueError):
            decode_data_url("https://example.com/a.png")

    def test_decode_rejects_non_base64(self) -> None:
        with self.assertRaises(ValueError):
            decode_data_url("data:text/plain,hello")

    def test_decode_rejects_bad_base64(self) -> None:
        with self.assertRaises(ValueError):
            decode_data_url("data:text/plain;base64,@@@")


if __name__ == "__main__":
    unittest.main()
