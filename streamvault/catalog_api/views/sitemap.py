"""Sitemap and robots.txt rendering from catalog state."""
from __future__ import annotations

from datetime import date
from typing import Iterable, Mapping, Sequence
from urllib.parse import quote

from ..schemas import Category, EpisodeModel, ShowModel

STATIC_PAGES: tuple[tuple[str, str, str], ...] = (
    ("/", "1.0", "daily"),
    ("/series", "0.9", "daily"),
    ("/movies", "0.9", "daily"),
    ("/trending", "0.9", "daily"),
    ("/search", "0.8", "weekly"),
    ("/watchlist", "0.7", "weekly"),
    ("/about", "0.6", "monthly"),
    ("/contact", "0.6", "monthly"),
    ("/privacy", "0.5", "monthly"),
    ("/terms", "0.5", "monthly"),
    ("/dmca", "0.5", "monthly"),
    ("/help", "0.6", "monthly"),
    ("/faq", "0.6", "monthly"),
    ("/report", "0.6", "monthly"),
    ("/request", "0.6", "monthly"),
)

_XML_ENTITIES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&apos;",
}


def escape_xml(text: str | None) -> str:
    """Escape text content for XML, using ``&apos;`` for single quotes."""

    return "".join(_XML_ENTITIES.get(char, char) for char in text or "")


def escape_xml_url(url: str | None) -> str:
    """Escape a URL for use as ``<loc>`` text."""

    return (url or "").replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def page_url(base: str, *segments: object) -> str:
    """Join percent-encoded path segments onto ``base`` and escape the result for XML."""

    path = "/".join(quote(str(segment), safe="") for segment in segments)
    return escape_xml_url(f"{base}/{path}")


def _url_entry(
    loc: str,
    lastmod: str,
    changefreq: str,
    priority: str,
    images: Iterable[tuple[str, str, str | None]] = (),
) -> str:
    lines = [
        "  <url>",
        f"    <loc>{loc}</loc>",
        f"    <lastmod>{lastmod}</lastmod>",
        f"    <changefreq>{changefreq}</changefreq>",
        f"    <priority>{priority}</priority>",
    ]
    for image_loc, title, caption in images:
        lines.append("    <image:image>")
        lines.append(f"      <image:loc>{image_loc}</image:loc>")
        lines.append(f"      <image:title>{title}</image:title>")
        if caption is not None:
            lines.append(f"      <image:caption>{caption}</image:caption>")
        lines.append("    </image:image>")
    lines.append("  </url>")
    return "\n".join(lines)


def build_sitemap(
    base_url: str,
    categories: Sequence[Category],
    shows: Sequence[ShowModel],
    episodes_by_show: Mapping[str, Sequence[EpisodeModel]],
    lastmod: date | None = None,
) -> str:
    """Render the full sitemap covering static, category, show and episode pages."""

    base = base_url.rstrip("/")
    stamp = (lastmod or date.today()).isoformat()
    entries = [
        _url_entry(escape_xml_url(f"{base}{path}"), stamp, changefreq, priority)
        for path, priority, changefreq in STATIC_PAGES
    ]
    entries.extend(
        _url_entry(page_url(base, "category", category.slug), stamp, "weekly", "0.8")
        for category in categories
    )

    for show in shows:
        title = escape_xml(show.title)
        entries.append(
            _url_entry(
                page_url(base, "show", show.slug),
                stamp,
                "weekly",
                "0.9",
                images=(
                    (escape_xml_url(show.poster_url), title, escape_xml(show.description)),
                    (escape_xml_url(show.backdrop_url), f"{title} - Backdrop", None),
                ),
            )
        )
        for episode in episodes_by_show.get(show.id, ()):
            episode_title = escape_xml(
                f"{show.title} - S{episode.season}E{episode.episode_number}"
            )
            entries.append(
                _url_entry(
                    page_url(base, "watch", show.slug, episode.season, episode.episode_number),
                    stamp,
                    "monthly",
                    "0.7",
                    images=((escape_xml_url(episode.thumbnail_url), episode_title, None),),
                )
            )

    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9"\n'
        '        xmlns:image="http://www.google.com/schemas/sitemap-image/1.1">\n'
        + "\n".join(entries)
        + "\n</urlset>\n"
    )


def build_robots_txt(base_url: str) -> str:
    base = base_url.rstrip("/")
    return "\n".join(
        [
            "User-agent: *",
            "Allow: /",
            "Disallow: /admin",
            "Disallow: /api/",
            "",
            f"Sitemap: {base}/sitemap.xml",
            "",
        ]
    )
