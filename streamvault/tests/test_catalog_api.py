"""Smoke tests for the catalog API application factory."""
from __future__ import annotations

import json
import sys
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from streamvault.catalog_api import create_app  # noqa: E402
from streamvault.catalog_api.schemas import ShowCreate  # noqa: E402
from streamvault.catalog_api.services import (  # noqa: E402
    TmdbNotFoundError,
    TmdbService,
    TmdbServiceError,
)
from streamvault.catalog_api.settings import CatalogSettings  # noqa: E402

DRIVE_URL = "https://drive.google.com/file/d/abc123/preview"

SHOW_PAYLOAD = {
    "title": "Dark",
    "slug": "dark",
    "description": "A missing child sets four families on a frantic hunt.",
    "posterUrl": "https://img.test/dark-poster.jpg",
    "backdropUrl": "https://img.test/dark-backdrop.jpg",
    "year": 2017,
    "rating": "TV-MA",
    "genres": "Sci-Fi, Mystery",
    "language": "German",
    "totalSeasons": 1,
    "category": "horror",
}

INDEX_HTML = """<!DOCTYPE html>
<html>
  <head>
    <title>StreamVault</title>
    <meta name="description" content="Default description">
    <meta property="og:title" content="StreamVault">
    <meta name="twitter:card" content="summary">
  </head>
  <body><div id="root"></div></body>
</html>
"""


class StubTmdbService:
    """Stand-in for the TMDB client."""

    def __init__(self, show: ShowCreate | None = None, error: Exception | None = None) -> None:
        self.show = show
        self.error = error
        self.calls: list[tuple[str | None, int | None]] = []

    def show_from_tmdb(self, *, title: str | None = None, tmdb_id: int | None = None) -> ShowCreate:
        self.calls.append((title, tmdb_id))
        if self.error:
            raise self.error
        assert self.show is not None
        return self.show


def build_settings(tmp_path: Path, **overrides: object) -> CatalogSettings:
    values: dict[str, object] = {
        "data_file": str(tmp_path / "catalog.json"),
        "database_url": f"sqlite:///{tmp_path / 'feedback.db'}",
        "admin_username": "admin",
        "admin_password": "secret",
        "base_url": "https://streamvault.test",
        "resend_api_key": None,
        "tmdb_api_key": None,
    }
    values.update(overrides)
    return CatalogSettings(**values)


@pytest.fixture()
def client(tmp_path: Path) -> TestClient:
    """Provide a test client backed by an isolated catalog file and database."""

    app = create_app(settings=build_settings(tmp_path))
    return TestClient(app)


@pytest.fixture()
def admin_headers(client: TestClient) -> dict[str, str]:
    response = client.post("/api/admin/login", json={"username": "admin", "password": "secret"})
    assert response.status_code == 200
    return {"X-Admin-Token": response.json()["token"]}


def create_show(client: TestClient, headers: dict[str, str], **overrides: object) -> dict:
    payload = {**SHOW_PAYLOAD, **overrides}
    response = client.post("/api/admin/shows", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_health_endpoint_reports_catalog_counts(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "version": "0.1.0", "shows": 0, "episodes": 0}


def test_login_rejects_bad_credentials(client: TestClient) -> None:
    response = client.post("/api/admin/login", json={"username": "admin", "password": "wrong"})

    assert response.status_code == 401


def test_admin_routes_require_token(client: TestClient) -> None:
    """Admin mutations should fail with 401 without a valid token."""

    assert client.post("/api/admin/shows", json=SHOW_PAYLOAD).status_code == 401
    assert (
        client.post(
            "/api/admin/shows", json=SHOW_PAYLOAD, headers={"X-Admin-Token": "admin_forged"}
        ).status_code
        == 401
    )
    assert client.delete("/api/admin/shows").status_code == 401
    assert client.get("/api/admin/issue-reports").status_code == 401


def test_verify_and_logout_round_trip(client: TestClient, admin_headers: dict[str, str]) -> None:
    assert client.get("/api/admin/verify", headers=admin_headers).json() == {"valid": True}

    logout = client.post("/api/admin/logout", headers=admin_headers)
    assert logout.status_code == 200

    assert client.get("/api/admin/verify", headers=admin_headers).json() == {"valid": False}
    assert client.post("/api/admin/shows", json=SHOW_PAYLOAD, headers=admin_headers).status_code == 401


def test_show_crud_flow(client: TestClient, admin_headers: dict[str, str]) -> None:
    """Shows can be created, fetched by slug, patched and deleted."""

    created = create_show(client, admin_headers)
    assert created["slug"] == "dark"
    assert created["featured"] is False
    assert created["cast"] is None

    fetched = client.get("/api/shows/dark")
    assert fetched.status_code == 200
    assert fetched.json() == created

    patched = client.put(
        f"/api/admin/shows/{created['id']}", json={"featured": True}, headers=admin_headers
    )
    assert patched.status_code == 200
    assert patched.json()["featured"] is True
    assert patched.json()["title"] == "Dark"

    assert [show["slug"] for show in client.get("/api/shows", params={"featured": True}).json()] == [
        "dark"
    ]

    deleted = client.delete(f"/api/admin/shows/{created['id']}", headers=admin_headers)
    assert deleted.status_code == 200
    assert client.get("/api/shows/dark").status_code == 404


def test_duplicate_slug_returns_conflict(client: TestClient, admin_headers: dict[str, str]) -> None:
    create_show(client, admin_headers)

    response = client.post("/api/admin/shows", json=SHOW_PAYLOAD, headers=admin_headers)

    assert response.status_code == 409
    assert "dark" in response.json()["detail"]


def test_update_unknown_show_returns_not_found(
    client: TestClient, admin_headers: dict[str, str]
) -> None:
    response = client.put("/api/admin/shows/missing", json={"title": "X"}, headers=admin_headers)

    assert response.status_code == 404


def test_invalid_show_payload_is_rejected(client: TestClient, admin_headers: dict[str, str]) -> None:
    response = client.post(
        "/api/admin/shows", json={**SHOW_PAYLOAD, "year": "soon"}, headers=admin_headers
    )

    assert response.status_code == 422


def test_search_requires_query(client: TestClient, admin_headers: dict[str, str]) -> None:
    create_show(client, admin_headers)

    assert client.get("/api/shows/search").status_code == 400
    assert client.get("/api/shows/search", params={"q": "  "}).status_code == 400
    results = client.get("/api/shows/search", params={"q": "mystery"}).json()
    assert [show["slug"] for show in results] == ["dark"]


def test_categories_are_listed(client: TestClient) -> None:
    slugs = [category["slug"] for category in client.get("/api/categories").json()]

    assert slugs == ["action", "drama", "comedy", "horror"]


def test_episode_lifecycle(client: TestClient, admin_headers: dict[str, str]) -> None:
    show = create_show(client, admin_headers)

    created = client.post(
        "/api/admin/episodes",
        json={
            "showId": show["id"],
            "season": 1,
            "episodeNumber": 1,
            "title": "Secrets",
            "videoUrl": DRIVE_URL,
        },
        headers=admin_headers,
    )
    assert created.status_code == 201
    episode = created.json()
    assert episode["thumbnailUrl"] == "https://drive.google.com/thumbnail?id=abc123&sz=w1280"
    assert episode["duration"] == 45

    duplicate = client.post(
        "/api/admin/episodes",
        json={
            "showId": show["id"],
            "season": 1,
            "episodeNumber": 1,
            "title": "Again",
            "videoUrl": DRIVE_URL,
        },
        headers=admin_headers,
    )
    assert duplicate.status_code == 409

    orphan = client.post(
        "/api/admin/episodes",
        json={"showId": "missing", "season": 1, "episodeNumber": 1, "title": "X", "videoUrl": DRIVE_URL},
        headers=admin_headers,
    )
    assert orphan.status_code == 404

    updated = client.put(
        f"/api/admin/episodes/{episode['id']}", json={"title": "Lies"}, headers=admin_headers
    )
    assert updated.json()["title"] == "Lies"
    assert updated.json()["showId"] == show["id"]

    assert len(client.get(f"/api/episodes/{show['id']}").json()) == 1

    assert client.delete(f"/api/admin/episodes/{episode['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/episodes/{show['id']}").json() == []
    assert client.delete(f"/api/admin/episodes/{episode['id']}", headers=admin_headers).status_code == 404


def test_bulk_episode_import_and_season_delete(
    client: TestClient, admin_headers: dict[str, str]
) -> None:
    """Bulk imports skip duplicates and reconcile totalSeasons."""

    show = create_show(client, admin_headers)
    rows = [
        {"season": 1, "episodeNumber": 1, "videoUrl": DRIVE_URL},
        {"season": 1, "episodeNumber": 2, "videoUrl": DRIVE_URL},
        {"season": 2, "episodeNumber": 1, "videoUrl": DRIVE_URL},
    ]

    first = client.post(
        "/api/admin/episodes/bulk", json={"slug": "dark", "episodes": rows}, headers=admin_headers
    )
    assert first.status_code == 200
    assert first.json()["added"] == 3
    assert first.json()["totalSeasons"] == 2

    second = client.post(
        "/api/admin/episodes/bulk", json={"slug": "dark", "episodes": rows}, headers=admin_headers
    )
    assert second.json()["added"] == 0
    assert second.json()["skipped"] == 3

    episodes = client.get(f"/api/episodes/{show['id']}").json()
    assert all(episode["airDate"] for episode in episodes)

    deleted = client.delete(f"/api/admin/shows/{show['id']}/seasons/1", headers=admin_headers)
    assert deleted.json() == {"success": True, "deleted": 2, "season": 1}
    assert len(client.get(f"/api/episodes/{show['id']}").json()) == 1

    unknown = client.delete("/api/admin/shows/nope/seasons/1", headers=admin_headers)
    assert unknown.status_code == 404

    missing = client.post(
        "/api/admin/episodes/bulk", json={"slug": "nope", "episodes": rows}, headers=admin_headers
    )
    assert missing.status_code == 404


def test_delete_all_shows_clears_catalog(client: TestClient, admin_headers: dict[str, str]) -> None:
    create_show(client, admin_headers)
    create_show(client, admin_headers, slug="1899", title="1899")

    response = client.delete("/api/admin/shows", headers=admin_headers)

    assert response.json()["deleted"] == 2
    assert client.get("/api/shows").json() == []


def test_inline_import_with_missing_shows(client: TestClient, admin_headers: dict[str, str]) -> None:
    payload = {
        "shows": [
            {
                "title": "Sacred Games",
                "slug": "sacred-games",
                "seasons": {"season_1": [{"episode": 1, "embed_url": DRIVE_URL}]},
            }
        ]
    }

    reported = client.post("/api/admin/import", json=payload, headers=admin_headers)
    assert reported.status_code == 200
    assert reported.json()["notFoundShows"] == ["Sacred Games (sacred-games)"]

    created = client.post(
        "/api/admin/import",
        json=payload,
        params={"createMissingShows": True},
        headers=admin_headers,
    )
    assert created.json()["showsCreated"] == 1
    assert created.json()["episodesImported"] == 1
    assert client.get("/api/shows/sacred-games").status_code == 200


def test_import_file_endpoint(
    client: TestClient, admin_headers: dict[str, str], tmp_path: Path
) -> None:
    create_show(client, admin_headers)
    export = tmp_path / "dark.json"
    export.write_text(
        json.dumps(
            {
                "showSlug": "dark",
                "episodes": [{"seasonNumber": 1, "episodeNumber": 1, "videoUrl": DRIVE_URL}],
            }
        ),
        encoding="utf-8",
    )
    broken = tmp_path / "broken.json"
    broken.write_text("{oops", encoding="utf-8")

    ok = client.post("/api/admin/import-file", json={"filePath": str(export)}, headers=admin_headers)
    assert ok.status_code == 200
    assert ok.json()["episodesImported"] == 1

    missing = client.post(
        "/api/admin/import-file", json={"filePath": str(tmp_path / "nope.json")}, headers=admin_headers
    )
    assert missing.status_code == 404

    invalid = client.post("/api/admin/import-file", json={"filePath": str(broken)}, headers=admin_headers)
    assert invalid.status_code == 400

    binary = tmp_path / "binary.json"
    binary.write_bytes(b'{"showSlug": "\xff\xfe"}')
    undecodable = client.post(
        "/api/admin/import-file", json={"filePath": str(binary)}, headers=admin_headers
    )
    assert undecodable.status_code == 400


def test_watchlist_is_scoped_per_session_and_upserts(client: TestClient) -> None:
    """Adding the same show twice keeps a single entry for the session."""

    alice = {"X-Session-Id": "alice"}
    first = client.post(
        "/api/watchlist", json={"showId": "s1", "addedAt": "2024-01-01T00:00:00Z"}, headers=alice
    ).json()
    second = client.post(
        "/api/watchlist", json={"showId": "s1", "addedAt": "2024-02-01T00:00:00Z"}, headers=alice
    ).json()

    assert first["id"] == second["id"]
    assert client.get("/api/watchlist", headers=alice).json()[0]["addedAt"].startswith("2024-02-01")
    assert len(client.get("/api/watchlist", headers=alice).json()) == 1
    assert client.get("/api/watchlist", headers={"X-Session-Id": "bob"}).json() == []

    client.post("/api/watchlist", json={"showId": "s2"})
    assert [entry["showId"] for entry in client.get("/api/watchlist").json()] == ["s2"]

    assert client.delete("/api/watchlist/s1", headers=alice).json()["success"] is True
    assert client.get("/api/watchlist", headers=alice).json() == []


def test_progress_keeps_latest_position_per_show(client: TestClient) -> None:
    headers = {"X-Session-Id": "alice"}
    base = {"showId": "s1", "episodeId": "e1", "season": 1, "episodeNumber": 1, "progress": 20}

    client.post("/api/progress", json=base, headers=headers)
    client.post(
        "/api/progress",
        json={**base, "episodeId": "e2", "episodeNumber": 2, "progress": 55.5},
        headers=headers,
    )

    entries = client.get("/api/progress", headers=headers).json()
    assert len(entries) == 1
    assert entries[0]["episodeId"] == "e2"
    assert entries[0]["progress"] == 55.5

    rejected = client.post("/api/progress", json={**base, "progress": 150}, headers=headers)
    assert rejected.status_code == 422


def test_content_requests_are_deduplicated(client: TestClient, admin_headers: dict[str, str]) -> None:
    """Repeat requests for a title bump its counter instead of adding rows."""

    payload = {"contentType": "series", "title": "Severance", "email": "fan@example.test"}

    first = client.post("/api/request-content", json=payload)
    second = client.post("/api/request-content", json={**payload, "title": "  severance "})
    client.post("/api/request-content", json={"contentType": "series", "title": "Dark"})

    assert first.json()["requestCount"] == 1
    assert second.json()["requestCount"] == 2

    top = client.get("/api/top-requests").json()
    assert top[0]["title"] == "Severance"
    assert top[0]["requestCount"] == 2
    assert len(top) == 2

    listed = client.get("/api/admin/content-requests", headers=admin_headers).json()
    assert len(listed) == 2


def test_issue_reports_are_stored_open(client: TestClient, admin_headers: dict[str, str]) -> None:
    response = client.post(
        "/api/report-issue",
        json={
            "issueType": "playback",
            "title": "Episode will not load",
            "description": "S1E1 shows a black screen.",
            "url": "https://streamvault.test/watch/dark?season=1&episode=1",
        },
    )

    assert response.status_code == 200
    report_id = response.json()["reportId"]

    reports = client.get("/api/admin/issue-reports", headers=admin_headers).json()
    assert [report["id"] for report in reports] == [report_id]
    assert reports[0]["status"] == "open"

    assert client.get(
        "/api/admin/issue-reports", params={"status": "closed"}, headers=admin_headers
    ).json() == []


def test_tmdb_endpoint_without_api_key(client: TestClient, admin_headers: dict[str, str]) -> None:
    response = client.post("/api/admin/shows/tmdb", json={"title": "Dark"}, headers=admin_headers)

    assert response.status_code == 503


def test_tmdb_endpoint_creates_show(client: TestClient, admin_headers: dict[str, str]) -> None:
    stub = StubTmdbService(show=ShowCreate(**{**SHOW_PAYLOAD, "slug": "dark-tmdb"}))
    client.app.state.app_state.tmdb_service = stub

    response = client.post("/api/admin/shows/tmdb", json={"tmdbId": 70523}, headers=admin_headers)

    assert response.status_code == 201
    assert response.json()["slug"] == "dark-tmdb"
    assert stub.calls == [(None, 70523)]


@pytest.mark.parametrize(
    ("error", "status_code"),
    [(TmdbNotFoundError("no match"), 404), (TmdbServiceError("boom"), 502)],
)
def test_tmdb_endpoint_maps_errors(
    client: TestClient, admin_headers: dict[str, str], error: Exception, status_code: int
) -> None:
    client.app.state.app_state.tmdb_service = StubTmdbService(error=error)

    response = client.post("/api/admin/shows/tmdb", json={"title": "Dark"}, headers=admin_headers)

    assert response.status_code == status_code


def test_tmdb_endpoint_handles_non_latin_titles(
    client: TestClient, admin_headers: dict[str, str]
) -> None:
    """Titles without Latin characters get an id-based slug; unmappable ones return 502."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/tv/93405"):
            return httpx.Response(200, json={"id": 93405, "name": "오징어 게임"})
        return httpx.Response(200, json={"name": "오징어 게임"})

    client.app.state.app_state.tmdb_service = TmdbService(
        "key", transport=httpx.MockTransport(handler)
    )

    created = client.post("/api/admin/shows/tmdb", json={"tmdbId": 93405}, headers=admin_headers)
    assert created.status_code == 201, created.text
    assert created.json()["slug"] == "tmdb-93405"

    unmappable = client.post("/api/admin/shows/tmdb", json={"tmdbId": 1}, headers=admin_headers)
    assert unmappable.status_code == 502


def test_tmdb_request_requires_title_or_id(client: TestClient, admin_headers: dict[str, str]) -> None:
    client.app.state.app_state.tmdb_service = StubTmdbService()

    response = client.post("/api/admin/shows/tmdb", json={}, headers=admin_headers)

    assert response.status_code == 422


def test_sitemap_and_robots(client: TestClient, admin_headers: dict[str, str]) -> None:
    show = create_show(client, admin_headers, title="Tom & Jerry", slug="tom-and-jerry")
    client.post(
        "/api/admin/episodes/bulk",
        json={"slug": "tom-and-jerry", "episodes": [{"season": 1, "episodeNumber": 3}]},
        headers=admin_headers,
    )

    sitemap = client.get("/sitemap.xml")
    assert sitemap.status_code == 200
    assert sitemap.headers["content-type"].startswith("application/xml")
    body = sitemap.text
    assert "<loc>https://streamvault.test/show/tom-and-jerry</loc>" in body
    assert "<loc>https://streamvault.test/watch/tom-and-jerry/1/3</loc>" in body
    assert "<loc>https://streamvault.test/category/horror</loc>" in body
    assert "Tom &amp; Jerry" in body
    assert show["id"] not in body

    robots = client.get("/robots.txt")
    assert robots.status_code == 200
    assert "Sitemap: https://streamvault.test/sitemap.xml" in robots.text


def test_show_page_requires_index_template(client: TestClient) -> None:
    assert client.get("/show/dark").status_code == 404


def test_show_and_watch_pages_inject_meta_tags(tmp_path: Path) -> None:
    index = tmp_path / "index.html"
    index.write_text(INDEX_HTML, encoding="utf-8")
    client = TestClient(create_app(settings=build_settings(tmp_path, index_html_path=str(index))))
    token = client.post("/api/admin/login", json={"username": "admin", "password": "secret"}).json()["token"]
    headers = {"X-Admin-Token": token}
    create_show(client, headers, title="Dark <Mystery>")
    client.post(
        "/api/admin/episodes/bulk",
        json={"slug": "dark", "episodes": [{"season": 1, "episodeNumber": 1, "title": "Secrets"}]},
        headers=headers,
    )

    show_page = client.get("/show/dark").text
    assert "<title>Dark &lt;Mystery&gt; - Watch Free on StreamVault</title>" in show_page
    assert "Default description" not in show_page
    assert show_page.count("<title>") == 1

    watch_page = client.get("/watch/dark", params={"season": 1, "episode": 1}).text
    assert 'content="video.episode"' in watch_page
    assert "S1E1: Secrets" in watch_page

    unknown = client.get("/show/unknown").text
    assert unknown == INDEX_HTML
