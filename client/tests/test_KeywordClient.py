"""
Unit tests for KeywordClient.
"""

import unittest
from unittest.mock import MagicMock

import requests

from client.KeywordClient import KeywordClient
from utils.Errors import KeywordLookupError
from utils.Logger import Logger


def _response(status: int, body=None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.ok = status < 400
    if body is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = body
    return resp


class TestKeywordClient(unittest.TestCase):
    """Test cases for KeywordClient."""

    def setUp(self) -> None:
        Logger.initialize(log_level="WARNING", log_file=False)
        self.session = MagicMock()
        self.client = KeywordClient("http://localhost:3000/", session=self.session)

    def test_blank_keyword_makes_no_request(self) -> None:
        for keyword in ("", "   ", None):
            with self.assertRaises(KeywordLookupError) as cm:
                self.client.search(keyword)
            self.assertEqual(str(cm.exception), "Enter a keyword")
        self.session.post.assert_not_called()

    def test_search_posts_trimmed_keyword(self) -> None:
        self.session.post.return_value = _response(200, {"urls": ["https://x.org/a.mp3"]})
        urls = self.client.search("  music ")
        self.assertEqual(urls, ["https://x.org/a.mp3"])
        args, kwargs = self.session.post.call_args
        self.assertEqual(args[0], "http://localhost:3000/api/keywords")
        self.assertEqual(kwargs["json"], {"keyword": "music"})

    def test_unknown_keyword_uses_server_error(self) -> None:
        self.session.post.return_value = _response(404, {"error": "No URLs found for this keyword"})
        with self.assertRaises(KeywordLookupError) as cm:
            self.client.search("nothing")
        self.assertEqual(str(cm.exception), "No URLs found for this keyword")

    def test_error_without_body(self) -> None:
        self.session.post.return_value = _response(404)
        with self.assertRaises(KeywordLookupError) as cm:
            self.client.search("nothing")
        self.assertEqual(str(cm.exception), "No URLs for this keyword")

    def test_unreachable_server(self) -> None:
        self.session.post.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(KeywordLookupError):
            self.client.search("music")

    def test_all_keywords(self) -> None:
        self.session.get.return_value = _response(200, {"keywords": ["music", "video"]})
        self.assertEqual(self.client.all_keywords(), ["music", "video"])
        self.assertEqual(self.session.get.call_args[0][0], "http://localhost:3000/api/all-keywords")

    def test_all_keywords_server_error(self) -> None:
        self.session.get.return_value = _response(500)
        with self.assertRaises(KeywordLookupError):
            self.client.all_keywords()


if __name__ == "__main__":
    unittest.main()
