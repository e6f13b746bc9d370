"""
Integration tests for the server-rendered pages.
"""
import pytest
from urllib.parse import parse_qs, urlparse
from fastapi.testclient import TestClient

from core.archive import ArchiveStore
from core.sheets import SheetData
from web.main import app
from web.routes.api._deps import get_archive_store, get_sheets, get_today, limiter


@pytest.fixture
def archive(tmp_path) -> ArchiveStore:
    return ArchiveStore(tmp_path / "archive.db")


@pytest.fixture
def client(fake_sheets, archive, today):
    app.dependency_overrides[get_sheets] = lambda: fake_sheets
    app.dependency_overrides[get_today] = lambda: today
    app.dependency_overrides[get_archive_store] = lambda: archive
    limiter.enabled = False
    yield TestClient(app)
    app.dependency_overrides.clear()
    limiter.enabled = True


def _location(response) -> tuple:
    parsed = urlparse(response.headers["location"])
    return parsed.path, parse_qs(parsed.query)


class TestPresetRedirect:
    """?preset= resolves server-side and redirects to start/end."""

    def test_redirects_to_canonical_range(self, client):
        response = client.get("/", params={"preset": "last_7_days", "closer": "Alice"}, follow_redirects=False)
        assert response.status_code == 302
        path, query = _location(response)
        assert path == "/"
        assert query == {"closer": ["Alice"], "start": ["2024-03-04"], "end": ["2024-03-10"]}

    def test_all_time_clears_range(self, client):
        response = client.get(
            "/leads", params={"preset": "all_time", "start": "2024-01-01", "end": "2024-01-31"},
            follow_redirects=False,
        )
        assert response.headers["location"] == "/leads"

    def test_unknown_preset_dropped(self, client):
        response = client.get("/lead-flow", params={"preset": "bogus", "goal": "Scale"}, follow_redirects=False)
        path, query = _location(response)
        assert path == "/lead-flow"
        assert query == {"goal": ["Scale"]}


class TestPages:
    """Tests for page rendering."""

    def test_sales_page(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert "Total Cash" in response.text
        assert "$2,100.50" in response.text
        assert "All Time" in response.text

    def test_sales_page_range(self, client):
        response = client.get("/", params={"start": "2024-03-01", "end": "2024-03-05"})
        assert "$1,700.50" in response.text
        assert "2024-03-01 - 2024-03-05" in response.text

    def test_leads_page(self, client):
        response = client.get("/leads")
        assert response.status_code == 200
        assert "Qualification Rate" in response.text

    def test_lead_flow_page(self, client):
        response = client.get("/lead-flow", params={"source": "youtube"})
        assert response.status_code == 200
        assert "Applicants" in response.text

    def test_youtube_page(self, client):
        response = client.get("/youtube")
        assert response.status_code == 200
        assert "vid1" in response.text
        assert 'action="/youtube/archive/vid1"' in response.text

    def test_missing_column_warning(self, client, fake_sheets):
        fake_sheets.sheets = {key: SheetData(["Name"], [{"Name": "x"}]) for key in fake_sheets.sheets}
        response = client.get("/")
        assert response.status_code == 200
        assert "No column found" in response.text


class TestPickerRendering:
    """Tests for the shared picker partial."""

    def test_closed_by_default(self, client):
        response = client.get("/")
        assert "Apply" not in response.text
        assert "open=1" in response.text

    def test_open_picker(self, client):
        response = client.get("/leads", params={"open": "1"})
        assert "March 2024" in response.text
        assert "Apply" in response.text
        assert "Last 7 Days" in response.text

    def test_open_picker_with_picks(self, client):
        response = client.get("/", params=[("open", "1"), ("pick", "2024-03-02"), ("pick", "2024-03-08")])
        assert response.status_code == 200
        assert "2024-03-02 - 2024-03-08" in response.text

    def test_bad_picker_state_is_reset(self, client):
        response = client.get("/", params=[("open", "1"), ("pick", "garbage"), ("month", "2024-99")])
        assert response.status_code == 200
        assert "March 2024" in response.text

    def test_year_zero_month_is_reset(self, client):
        """A month cursor before year 1 falls back to today's month."""
        response = client.get("/", params={"open": "1", "month": "0000-01"})
        assert response.status_code == 200
        assert "March 2024" in response.text

    def test_end_on_maximum_date(self, client):
        response = client.get("/", params={"start": "2024-03-01", "end": "9999-12-31"})
        assert response.status_code == 200
        assert "2024-03-01 - 9999-12-31" in response.text


class TestYouTubeActions:
    """Tests for the YouTube page form actions."""

    def test_archive_redirects_with_filters(self, client, archive):
        response = client.post("/youtube/archive/vid1?start=2024-03-01&sort=aov", follow_redirects=False)
        assert response.status_code == 303
        path, query = _location(response)
        assert path == "/youtube"
        assert query == {"start": ["2024-03-01"], "sort": ["aov"]}
        assert archive.load() == frozenset({"vid1"})

    def test_archived_section(self, client, archive):
        archive.persist({"vid2"})
        response = client.get("/youtube")
        assert "Archived" in response.text
        assert "Restore" in response.text

    def test_tracking_link_form(self, client):
        response = client.get("/youtube", params={"base_url": "https://example.com", "video_url": "https://youtu.be/abc123"})
        assert "utm_content=abc123" in response.text
