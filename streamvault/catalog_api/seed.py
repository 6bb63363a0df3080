"""Demo catalog used when seeding an empty data file."""
from __future__ import annotations

from typing import Iterator, Sequence

from .schemas import EpisodeImportRow, ShowCreate

DEMO_VIDEO_URL = "https://drive.google.com/file/d/1zcFHiGEOwgq2-j6hMqpsE0ov7qcIUqCd/preview"

DEMO_SHOWS: tuple[ShowCreate, ...] = (
    ShowCreate(
        title="Stranger Things",
        slug="stranger-things",
        description=(
            "When a young boy vanishes, a small town uncovers a mystery involving secret "
            "experiments, terrifying supernatural forces and one strange little girl."
        ),
        poster_url="https://images.unsplash.com/photo-1574267432644-f65e2d32b5c1?w=600&h=900&fit=crop",
        backdrop_url="https://images.unsplash.com/photo-1574267432644-f65e2d32b5c1?w=1920&h=800&fit=crop",
        year=2016,
        rating="TV-14",
        imdb_rating="8.7",
        genres="Sci-Fi, Horror, Drama",
        language="English",
        total_seasons=4,
        cast="Millie Bobby Brown, Finn Wolfhard, Winona Ryder",
        creators="The Duffer Brothers",
        featured=True,
        trending=True,
        category="horror",
    ),
    ShowCreate(
        title="Breaking Bad",
        slug="breaking-bad",
        description=(
            "A high school chemistry teacher diagnosed with inoperable lung cancer turns to "
            "manufacturing and selling methamphetamine in order to secure his family's future."
        ),
        poster_url="https://images.unsplash.com/photo-1536440136628-849c177e76a1?w=600&h=900&fit=crop",
        backdrop_url="https://images.unsplash.com/photo-1536440136628-849c177e76a1?w=1920&h=800&fit=crop",
        year=2008,
        rating="TV-MA",
        imdb_rating="9.5",
        genres="Crime, Drama, Thriller",
        language="English",
        total_seasons=5,
        cast="Bryan Cranston, Aaron Paul, Anna Gunn",
        creators="Vince Gilligan",
        featured=True,
        trending=True,
        category="drama",
    ),
    ShowCreate(
        title="Money Heist",
        slug="money-heist",
        description=(
            "An unusual group of robbers attempt to carry out the most perfect robbery in "
            "Spanish history - stealing 2.4 billion euros from the Royal Mint of Spain."
        ),
        poster_url="https://images.unsplash.com/photo-1551269901-5c5e14c25df7?w=600&h=900&fit=crop",
        backdrop_url="https://images.unsplash.com/photo-1551269901-5c5e14c25df7?w=1920&h=800&fit=crop",
        year=2017,
        rating="TV-MA",
        imdb_rating="8.2",
        genres="Action, Crime, Thriller",
        language="Spanish",
        total_seasons=5,
        cast="Álvaro Morte, Itziar Ituño, Pedro Alonso",
        creators="Álex Pina",
        featured=True,
        trending=True,
        category="action",
    ),
    ShowCreate(
        title="The Office",
        slug="the-office",
        description=(
            "A mockumentary on a group of typical office workers, where the workday consists "
            "of ego clashes, inappropriate behavior, and tedium."
        ),
        poster_url="https://images.unsplash.com/photo-1497366754035-f200968a6e72?w=600&h=900&fit=crop",
        backdrop_url="https://images.unsplash.com/photo-1497366754035-f200968a6e72?w=1920&h=800&fit=crop",
        year=2005,
        rating="TV-14",
        imdb_rating="9.0",
        genres="Comedy",
        language="English",
        total_seasons=9,
        cast="Steve Carell, John Krasinski, Jenna Fischer",
        creators="Greg Daniels",
        featured=False,
        trending=True,
        category="comedy",
    ),
)


def _demo_episodes(show: ShowCreate) -> list[EpisodeImportRow]:
    rows: list[EpisodeImportRow] = []
    for season in range(1, min(show.total_seasons, 2) + 1):
        count = 8 if season == 1 else 6
        for number in range(1, count + 1):
            rows.append(
                EpisodeImportRow(
                    season=season,
                    episode_number=number,
                    title=f"Episode {number}",
                    description=(
                        f"In this episode of {show.title}, the story continues to unfold "
                        "with unexpected twists and turns."
                    ),
                    duration=42 + (number * 3) % 18,
                    video_url=DEMO_VIDEO_URL,
                    air_date=f"{show.year}-{season:02d}-{min(number * 7, 28):02d}",
                )
            )
    return rows


def demo_catalog(shows: Sequence[ShowCreate] = DEMO_SHOWS) -> Iterator[tuple[ShowCreate, list[EpisodeImportRow]]]:
    """Yield each demo show with its generated episodes."""

    for show in shows:
        yield show, _demo_episodes(show)
