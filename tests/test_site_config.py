import json

import pytest

from models import db, SiteConfig
from services import site_config


def store(**values):
    for key, value in values.items():
        db.session.add(SiteConfig(key=key, value=value))
    db.session.commit()


def test_string_keys_fall_back_to_defaults(app):
    assert site_config.resolve("hero_title") == site_config.REGISTRY["hero_title"].default
    assert site_config.resolve("contact_email") == "hello@artistic-nav.com"


def test_stored_string_wins(app):
    store(site_name="My Directory")
    assert site_config.resolve("site_name") == "My Directory"


def test_blank_string_counts_as_missing(app):
    store(footer_copyright="   ")
    assert site_config.resolve("footer_copyright") == site_config.REGISTRY["footer_copyright"].default


def test_admin_title_prefix_defaults_from_suffix(app):
    assert site_config.resolve("admin_title_links") == "Links"
    assert site_config.resolve("admin_title_hero_slides") == "Hero Slides"
    store(admin_title_links="Bookmarks")
    assert site_config.resolve("admin_title_links") == "Bookmarks"


def test_unregistered_key_is_returned_raw(app):
    assert site_config.resolve("banner") is None
    store(banner='{"active": true}')
    assert site_config.resolve("banner") == '{"active": true}'


@pytest.mark.parametrize("raw, expected", [
    ("[3, 1, 2]", [3, 1, 2]),
    ('["4", 5, "x", true, null, 6.5]', [4, 5]),
    ("not json", []),
    ('{"ids": [1]}', []),
    ("", []),
])
def test_featured_ids_parsing_never_raises(app, raw, expected):
    assert site_config.resolve("featured_links", {"featured_links": raw}) == expected


def test_link_tags_default_and_parsing(app):
    assert site_config.resolve("link_tags") == site_config.DEFAULT_LINK_TAGS
    assert site_config.resolve("link_tags", {"link_tags": '["Type", 3, " Color "]'}) == ["Type", "Color"]
    assert site_config.resolve("link_tags", {"link_tags": "oops"}) == site_config.DEFAULT_LINK_TAGS


def test_default_list_is_not_shared(app):
    tags = site_config.resolve("link_tags")
    tags.append("Mutated")
    assert "Mutated" not in site_config.resolve("link_tags")


def test_admin_password_falls_back_to_configured_default(app):
    assert site_config.resolve("admin_password") == "admin123"
    app.config["ADMIN_DEFAULT_PASSWORD"] = "changeme"
    try:
        assert site_config.resolve("admin_password") == "changeme"
    finally:
        app.config["ADMIN_DEFAULT_PASSWORD"] = "admin123"


def test_public_config_hides_password(app):
    store(admin_password="hunter2", admin_title_gallery="Pictures", hero_title="Hi")
    public = site_config.public_config()
    assert "admin_password" not in public
    assert public["hero_title"] == "Hi"
    assert public["admin_title_gallery"] == "Pictures"
    assert public["link_tags"] == site_config.DEFAULT_LINK_TAGS


def test_upsert_creates_then_updates(app):
    site_config.upsert("site_name", "One")
    db.session.commit()
    site_config.upsert("site_name", "Two")
    db.session.commit()
    assert SiteConfig.query.filter_by(key="site_name").count() == 1
    assert site_config.resolve("site_name") == "Two"


## FEATURED LINKS ##

@pytest.fixture
def link_pool(make_category, make_link):
    """10 links: five with snapshots (clicks 10, 5, 20, 1, 0), five more popular without."""
    category = make_category("Pool")
    with_snapshot = [
        make_link(category, title=f"snap {clicks}", clicks=clicks, snapshot_url=f"/uploads/{clicks}.png")
        for clicks in (10, 5, 20, 1, 0)
    ]
    without_snapshot = [
        make_link(category, title=f"plain {clicks}", clicks=clicks)
        for clicks in (100, 90, 80, 70, 60)
    ]
    return with_snapshot + without_snapshot


def titles(links):
    return [link.title for link in links]


def test_featured_fill_prefers_popular_snapshots(app, link_pool):
    featured = site_config.resolve_featured_links()
    assert titles(featured) == ["snap 20", "snap 10", "snap 5"]


def test_featured_keeps_configured_and_skips_unknown(app, link_pool):
    chosen = link_pool[6]
    store(featured_links=json.dumps([chosen.id, 999]))

    featured = site_config.resolve_featured_links()
    assert titles(featured) == [chosen.title, "snap 20", "snap 10"]


def test_featured_configured_order_is_preserved(app, link_pool):
    ids = [link_pool[9].id, link_pool[0].id, link_pool[5].id]
    store(featured_links=json.dumps(ids))
    assert [link.id for link in site_config.resolve_featured_links()] == ids


def test_featured_curated_list_is_not_truncated(app, link_pool):
    ids = [link.id for link in link_pool[:5]]
    store(featured_links=json.dumps(ids))
    assert [link.id for link in site_config.resolve_featured_links()] == ids


def test_featured_repeated_ids_are_used_once(app, link_pool):
    chosen = link_pool[3]
    store(featured_links=json.dumps([chosen.id, chosen.id]))
    featured = site_config.resolve_featured_links()
    assert [link.id for link in featured].count(chosen.id) == 1
    assert len(featured) == 3


def test_featured_falls_back_to_any_link_without_snapshots(app, make_category, make_link):
    category = make_category("Few")
    make_link(category, title="with", clicks=1, snapshot_url="/s.png")
    make_link(category, title="hot", clicks=50)
    make_link(category, title="warm", clicks=20)
    make_link(category, title="cold", clicks=0)

    assert titles(site_config.resolve_featured_links()) == ["with", "hot", "warm"]


def test_featured_blank_snapshot_does_not_count(app, make_category, make_link):
    category = make_category("Blank")
    make_link(category, title="blank", clicks=99, snapshot_url="  ")
    make_link(category, title="real", clicks=1, snapshot_url="/r.png")
    assert titles(site_config.resolve_featured_links()) == ["real", "blank"]


def test_featured_with_no_links_is_empty(app):
    store(featured_links="[1, 2, 3]")
    assert site_config.resolve_featured_links() == []


def test_featured_bad_config_still_fills(app, link_pool):
    store(featured_links="{broken")
    assert titles(site_config.resolve_featured_links()) == ["snap 20", "snap 10", "snap 5"]
