"""Tests for page fetching and HTML parsing."""

import httpx
import pytest

from aeo_rules.fetcher import FetchError, fetch_page, normalize_url
from aeo_rules.models import PageContent

HTML = """<html><head>
<title> Balcony Tomatoes </title>
<meta name="description" content="  Grow tomatoes on a balcony.  ">
<meta name="keywords" content="tomatoes, balcony, , gardening">
<script>var tracking = true;</script>
</head><body>
<h1>Growing tomatoes</h1>
<h2>Soil</h2><h2>Watering</h2>
<p>Pick a sunny spot.</p>
</body></html>"""


class TestPageContent:
    def test_from_html(self):
        page = PageContent.from_html("https://example.com/tomatoes", HTML)

        assert page.title == "Balcony Tomatoes"
        assert page.description == "Grow tomatoes on a balcony."
        assert page.keywords == ["tomatoes", "balcony", "gardening"]
        assert page.headings == {"h1": ["Growing tomatoes"], "h2": ["Soil", "Watering"]}
        assert "Pick a sunny spot." in page.content
        assert "tracking" not in page.content

    def test_empty_html(self):
        page = PageContent.from_html("https://example.com/", "")

        assert page.title is None
        assert page.description is None
        assert page.content is None


class TestFetchPage:
    def test_normalize_url(self):
        assert normalize_url(" example.com ") == "https://example.com"
        assert normalize_url("http://example.com") == "http://example.com"

    def test_fetch(self):
        def handler(request):
            return httpx.Response(200, html=HTML)

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            page, elapsed = fetch_page("example.com/tomatoes", client=client)

        assert page.url == "https://example.com/tomatoes"
        assert page.title == "Balcony Tomatoes"
        assert elapsed >= 0

    def test_http_error(self):
        with httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(404))) as client:
            with pytest.raises(FetchError, match="HTTP 404"):
                fetch_page("https://example.com/missing", client=client)

    def test_timeout(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(FetchError, match="Timeout after 3s"):
                fetch_page("https://example.com/", timeout=3, client=client)

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(FetchError, match="Request failed"):
                fetch_page("https://example.com/", client=client)
