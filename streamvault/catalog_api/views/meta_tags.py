"""Social and search meta tags injected into the client index page."""
from __future__ import annotations

import re
from dataclasses import dataclass

from ..schemas import EpisodeModel, ShowModel

SITE_NAME = "StreamVault"

_HTML_ENTITIES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#039;",
}

_DEFAULT_TAG_PATTERNS = (
    re.compile(r'<meta name="title"[^>]*>'),
    re.compile(r'<meta name="description"[^>]*>'),
    re.compile(r'<meta property="og:[^"]*"[^>]*>'),
    re.compile(r'<meta name="twitter:[^"]*"[^>]*>'),
    re.compile(r"<title>.*?</title>", re.DOTALL),
)


@dataclass(slots=True)
class MetaTags:
    title: str
    description: str
    image: str
    url: str
    type: str = "website"


def escape_html(text: str | None) -> str:
    """Escape text for an HTML attribute, using ``&#039;`` for single quotes."""

    return "".join(_HTML_ENTITIES.get(char, char) for char in text or "")


def generate_meta_tags(tags: MetaTags) -> str:
    """Render primary, Open Graph and Twitter tags for ``tags``."""

    title = escape_html(tags.title)
    description = escape_html(tags.description)
    image = escape_html(tags.image)
    return "\n".join(
        [
            "    <!-- Primary Meta Tags -->",
            f'    <meta name="title" content="{title}">',
            f'    <meta name="description" content="{description}">',
            f"    <title>{title}</title>",
            "",
            "    <!-- Open Graph / Facebook -->",
            f'    <meta property="og:type" content="{escape_html(tags.type)}">',
            f'    <meta property="og:url" content="{escape_html(tags.url)}">',
            f'    <meta property="og:title" content="{title}">',
            f'    <meta property="og:description" content="{description}">',
            f'    <meta property="og:image" content="{image}">',
            f'    <meta property="og:site_name" content="{SITE_NAME}">',
            "",
            "    <!-- Twitter -->",
            '    <meta name="twitter:card" content="summary_large_image">',
            f'    <meta name="twitter:title" content="{title}">',
            f'    <meta name="twitter:description" content="{description}">',
            f'    <meta name="twitter:image" content="{image}">',
        ]
    )


def inject_meta_tags(html: str, tags: str) -> str:
    """Replace the default title and social tags of ``html`` with ``tags``."""

    for pattern in _DEFAULT_TAG_PATTERNS:
        html = pattern.sub("", html)
    return html.replace("</head>", f"{tags}\n  </head>", 1)


def show_meta_tags(show: ShowModel, base_url: str) -> MetaTags:
    return MetaTags(
        title=f"{show.title} - Watch Free on {SITE_NAME}",
        description=show.description
        or f"Watch {show.title} online free in HD. {show.total_seasons} seasons available.",
        image=show.poster_url or show.backdrop_url,
        url=f"{base_url.rstrip('/')}/show/{show.slug}",
        type="video.tv_show",
    )


def episode_meta_tags(show: ShowModel, episode: EpisodeModel, base_url: str) -> MetaTags:
    season, number = episode.season, episode.episode_number
    return MetaTags(
        title=f"{show.title} S{season}E{number}: {episode.title} - {SITE_NAME}",
        description=episode.description
        or f"Watch {show.title} Season {season} Episode {number} online free in HD.",
        image=episode.thumbnail_url or show.backdrop_url,
        url=f"{base_url.rstrip('/')}/watch/{show.slug}?season={season}&episode={number}",
        type="video.episode",
    )
