"""TMDB lookups used to create shows from third-party metadata."""
from __future__ import annotations

import logging
import re
from datetime import date
from typing import Any

import httpx
from pydantic import ValidationError

from ..schemas import ShowCreate

logger = logging.getLogger(__name__)

GENRE_CATEGORIES: dict[str, str] = {
    "Action & Adventure": "action",
    "Sci-Fi & Fantasy": "sci-fi",
    "Drama": "drama",
    "Comedy": "comedy",
    "Crime": "crime",
    "Mystery": "mystery",
    "Thriller": "thriller",
    "Horror": "horror",
    "Romance": "romance",
    "Animation": "animation",
    "Documentary": "documentary",
    "Family": "family",
}

TV_RATINGS = frozenset({"TV-Y", "TV-Y7", "TV-G", "TV-PG", "TV-14", "TV-MA", "NR"})

LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese",
    "hi": "Hindi",
    "pt": "Portuguese",
    "ru": "Russian",
    "ar": "Arabic",
}


class TmdbServiceError(RuntimeError):
    """Raised when TMDB cannot be reached or returns an unusable response."""


class TmdbNotFoundError(TmdbServiceError):
    """Raised when no TMDB show matches the lookup."""


def generate_slug(title: str) -> str:
    """Lowercase ``title`` and collapse every run of non-alphanumerics into a hyphen."""

    return re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")


class TmdbService:
    """Thin client over the TMDB v3 TV endpoints."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.themoviedb.org/3",
        image_base_url: str = "https://image.tmdb.org/t/p",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._image_base_url = image_base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        query = {"api_key": self._api_key, **params}
        try:
            with httpx.Client(
                base_url=self._base_url, timeout=self._timeout, transport=self._transport
            ) as client:
                response = client.get(path, params=query)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                raise TmdbNotFoundError("TMDB has no record for this show") from exc
            raise TmdbServiceError(f"TMDB responded with HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise TmdbServiceError(f"Unable to reach TMDB: {exc}") from exc
        except ValueError as exc:
            raise TmdbServiceError("TMDB returned invalid JSON") from exc

    def search_show(self, title: str) -> int:
        """Return the TMDB id of the best match for ``title``."""

        data = self._get("/search/tv", {"query": title})
        results = data.get("results") or []
        if not results:
            raise TmdbNotFoundError(f'Could not find "{title}" on TMDB')
        for candidate in results[:5]:
            logger.debug(
                "TMDB candidate %s (%s)",
                candidate.get("name"),
                (candidate.get("first_air_date") or "N/A")[:4],
            )
        return int(results[0]["id"])

    def fetch_show(self, tmdb_id: int) -> dict[str, Any]:
        """Fetch show details including content ratings and aggregate credits."""

        return self._get(
            f"/tv/{tmdb_id}", {"append_to_response": "content_ratings,aggregate_credits"}
        )

    def build_show(self, details: dict[str, Any]) -> ShowCreate:
        """Map a TMDB details payload onto a catalog show."""

        title = details.get("name") or details.get("original_name") or ""
        first_air_date = details.get("first_air_date") or ""
        year = int(first_air_date[:4]) if first_air_date[:4].isdigit() else date.today().year
        genres = [genre.get("name", "") for genre in details.get("genres") or []]
        vote_average = details.get("vote_average")

        cast_members = (details.get("aggregate_credits") or {}).get("cast") or []
        top_cast = sorted(
            cast_members, key=lambda member: member.get("total_episode_count", 0), reverse=True
        )[:5]

        poster_path = details.get("poster_path")
        backdrop_path = details.get("backdrop_path")

        slug = generate_slug(title) or generate_slug(details.get("original_name") or "")
        if not slug and details.get("id"):
            slug = f"tmdb-{details['id']}"

        try:
            return ShowCreate(
                title=title,
                slug=slug,
                description=details.get("overview") or "",
                poster_url=f"{self._image_base_url}/w500{poster_path}" if poster_path else "",
                backdrop_url=(
                    f"{self._image_base_url}/original{backdrop_path}" if backdrop_path else ""
                ),
                year=year,
                rating=_us_rating(details.get("content_ratings")),
                imdb_rating=f"{vote_average:.1f}" if vote_average else None,
                genres=", ".join(name for name in genres if name),
                language=LANGUAGE_NAMES.get(details.get("original_language") or "", "English"),
                total_seasons=details.get("number_of_seasons") or 1,
                cast=", ".join(member.get("name", "") for member in top_cast),
                creators=", ".join(
                    creator.get("name", "") for creator in details.get("created_by") or []
                ),
                category=_category_for(genres),
            )
        except ValidationError as exc:
            raise TmdbServiceError(f"TMDB show {details.get('id')} cannot be mapped: {exc}") from exc

    def show_from_tmdb(self, *, title: str | None = None, tmdb_id: int | None = None) -> ShowCreate:
        """Resolve a show by id or title and return it as a create payload."""

        if tmdb_id is None:
            if not title:
                raise TmdbServiceError("A title or TMDB id is required")
            tmdb_id = self.search_show(title)
        logger.info("Fetching TMDB show %s", tmdb_id)
        return self.build_show(self.fetch_show(tmdb_id))


def _us_rating(content_ratings: dict[str, Any] | None) -> str:
    for entry in (content_ratings or {}).get("results") or []:
        if entry.get("iso_3166_1") == "US" and entry.get("rating") in TV_RATINGS:
            return entry["rating"]
    return "NR"


def _category_for(genres: list[str]) -> str:
    for genre in genres:
        category = GENRE_CATEGORIES.get(genre)
        if category:
            return category
    return "drama"
