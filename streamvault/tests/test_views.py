"""Tests for sitemap and meta tag rendering."""
from __future__ import annotations

import sys
import xml.etree.ElementTree as ET
from datetime import date
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from streamvault.catalog_api.schemas import Category, EpisodeModel, ShowModel  # noqa: E402
from streamvault.catalog_api.views.meta_tags import (  # noqa: E402
    MetaTags,
    episode_meta_tags,
    escape_html,
    generate_meta_tags,
    inject_meta_tags,
    show_meta_tags,
)
from streamvault.catalog_api.views.sitemap import (  # noqa: E402
    STATIC_PAGES,
    build_robots_txt,
    build_sitemap,
    escape_xml,
    escape_xml_url,
    page_url,
)

SITEMAP_NS = "{http://www.sitemaps.org/schemas/sitemap/0.9}"


def make_show() -> ShowModel:
    return ShowModel(
        id="s1",
        title="Rick & Morty's \"Adventures\"",
        slug="rick-and-morty",
        description="Science <and> chaos",
        poster_url="https://img.test/poster.jpg?w=600&h=900",
        backdrop_url="https://img.test/backdrop.jpg",
        year=2013,
        total_seasons=7,
    )


def make_episode() -> EpisodeModel:
    return EpisodeModel(
        id="e1",
        show_id="s1",
        season=1,
        episode_number=2,
        title="Lawnmower Dog",
        thumbnail_url="https://img.test/thumb.jpg?a=1&b=2",
    )


def test_escapers_differ_on_single_quotes() -> None:
    """XML and HTML escaping encode apostrophes differently."""

    assert escape_xml("Rick's") == "Rick&apos;s"
    assert escape_html("Rick's") == "Rick&#039;s"
    assert escape_xml('<a & "b">') == "&lt;a &amp; &quot;b&quot;&gt;"
    assert escape_html('<a & "b">') == "&lt;a &amp; &quot;b&quot;&gt;"
    assert escape_xml_url("https://x.test/?a=1&b=2") == "https://x.test/?a=1&amp;b=2"
    assert escape_xml(None) == ""


def test_sitemap_is_well_formed_and_complete() -> None:
    show = make_show()
    categories = [Category(id="action", name="Action", slug="action")]

    xml_text = build_sitemap(
        "https://streamvault.test/",
        categories,
        [show],
        {"s1": [make_episode()]},
        lastmod=date(2024, 1, 2),
    )

    root = ET.fromstring(xml_text)
    locs = [element.text for element in root.iter(f"{SITEMAP_NS}loc")]
    assert len(locs) == len(STATIC_PAGES) + 1 + 1 + 1
    assert "https://streamvault.test/" in locs
    assert "https://streamvault.test/category/action" in locs
    assert "https://streamvault.test/show/rick-and-morty" in locs
    assert "https://streamvault.test/watch/rick-and-morty/1/2" in locs
    assert "<lastmod>2024-01-02</lastmod>" in xml_text
    assert "Rick &amp; Morty&apos;s &quot;Adventures&quot;" in xml_text
    assert "poster.jpg?w=600&amp;h=900" in xml_text
    assert "thumb.jpg?a=1&amp;b=2" in xml_text


def test_robots_txt_points_to_sitemap() -> None:
    robots = build_robots_txt("https://streamvault.test/")

    assert "User-agent: *" in robots
    assert robots.strip().endswith("Sitemap: https://streamvault.test/sitemap.xml")


def test_generate_meta_tags_escapes_html() -> None:
    fragment = generate_meta_tags(
        MetaTags(
            title="Rick's <Show>",
            description='Say "hi"',
            image="https://img.test/a.jpg?x=1&y=2",
            url="https://streamvault.test/show/x",
        )
    )

    assert '<meta name="title" content="Rick&#039;s &lt;Show&gt;">' in fragment
    assert 'content="Say &quot;hi&quot;"' in fragment
    assert 'content="https://img.test/a.jpg?x=1&amp;y=2"' in fragment
    assert '<meta property="og:type" content="website">' in fragment
    assert '<meta name="twitter:card" content="summary_large_image">' in fragment


def test_inject_meta_tags_replaces_defaults() -> None:
    html = (
        "<html><head><title>Default</title>"
        '<meta name="description" content="old">'
        '<meta property="og:image" content="old.jpg">'
        '<meta name="twitter:title" content="old">'
        '<meta name="viewport" content="width=device-width">'
        "</head><body></body></html>"
    )

    result = inject_meta_tags(html, "<!-- tags -->")

    assert "Default" not in result
    assert "old" not in result
    assert '<meta name="viewport" content="width=device-width">' in result
    assert result.index("<!-- tags -->") < result.index("</head>")


def test_show_and_episode_meta_tags() -> None:
    show = make_show().model_copy(update={"description": ""})
    episode = make_episode().model_copy(update={"description": ""})

    show_tags = show_meta_tags(show, "https://streamvault.test")
    assert show_tags.url == "https://streamvault.test/show/rick-and-morty"
    assert show_tags.description.endswith("7 seasons available.")
    assert show_tags.image == show.poster_url
    assert show_tags.type == "video.tv_show"

    episode_tags = episode_meta_tags(show, episode, "https://streamvault.test")
    assert episode_tags.url == "https://streamvault.test/watch/rick-and-morty?season=1&episode=2"
    assert episode_tags.title.endswith("S1E2: Lawnmower Dog - StreamVault")
    assert episode_tags.image == episode.thumbnail_url
    assert "Season 1 Episode 2" in episode_tags.description


def test_sitemap_encodes_unsafe_slugs() -> None:
    show = ShowModel(id="s1", title="Tom & Jerry", slug="tom&jerry<1>")
    episode = make_episode()
    categories = [Category(id="kids", name="Kids & Family", slug="kids&family")]

    xml_text = build_sitemap("https://x.test", categories, [show], {"s1": [episode]})

    root = ET.fromstring(xml_text)
    locs = [element.text for element in root.iter(f"{SITEMAP_NS}loc")]
    assert "https://x.test/show/tom%26jerry%3C1%3E" in locs
    assert "https://x.test/watch/tom%26jerry%3C1%3E/1/2" in locs
    assert "https://x.test/category/kids%26family" in locs
    assert page_url("https://x.test", "show", "a b") == "https://x.test/show/a%20b"
    assert escape_xml_url("https://x.test/<a>") == "https://x.test/&lt;a&gt;"
