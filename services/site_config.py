"""Typed reads over the flat ``site_config`` key/value table.

Every key the site understands is registered once with its kind, its
fallback and its parser. ``resolve`` is the only reader: a value that is
missing, blank or fails to parse falls back to the registered default, so the
public pages and the admin console agree on what an unset key means.
"""
import json
import logging

from flask import current_app

from models import db, Link, SiteConfig
from services.errors import ValidationError
from services.ordering import coerce_id

logger = logging.getLogger(__name__)

FEATURED_COUNT = 3
DEFAULT_ADMIN_PASSWORD = "admin123"
DEFAULT_LINK_TAGS = ["Design", "Tools", "Inspiration", "AI", "Development", "Resources"]
ADMIN_TITLE_PREFIX = "admin_title_"


# --- PARSERS ---
# Each parser takes the raw stored string and either returns the typed value
# or raises ValueError/TypeError, which sends resolve() to the fallback.

def parse_string(raw):
    if not raw.strip():
        raise ValueError("blank value")
    return raw


def parse_id_list(raw):
    data = json.loads(raw)
    if not isinstance(data, list):
        raise ValueError("expected a JSON array")
    ids = []
    for item in data:
        try:
            ids.append(coerce_id(item))
        except ValidationError:
            continue
    return ids


def parse_string_list(raw):
    data = json.loads(raw)
    if not isinstance(data, list):
        raise ValueError("expected a JSON array")
    return [item.strip() for item in data if isinstance(item, str) and item.strip()]


class ConfigOption:
    def __init__(self, kind, default, parser=parse_string, secret=False):
        self.kind = kind
        self.default = default
        self.parser = parser
        self.secret = secret

    def default_for(self, key):
        if callable(self.default):
            return self.default(key)
        if isinstance(self.default, list):
            return list(self.default)
        return self.default


def _admin_password_default(key):
    return current_app.config.get("ADMIN_DEFAULT_PASSWORD") or DEFAULT_ADMIN_PASSWORD


def _admin_title_default(key):
    return key[len(ADMIN_TITLE_PREFIX):].replace("_", " ").strip().title()


REGISTRY = {
    "site_name": ConfigOption("string", "Artistic Nav"),
    "site_slogan": ConfigOption("string", "A curated archive of design tools and artistic inspiration."),
    "hero_title": ConfigOption("string", "Where Inspiration Meets Design"),
    "hero_subtitle": ConfigOption("string", "A carefully curated digital archive of the purest design tools and artistic inspiration."),
    "footer_copyright": ConfigOption("string", "© 2026 Artistic Nav"),
    "contact_email": ConfigOption("string", "hello@artistic-nav.com"),
    "social_twitter": ConfigOption("string", "Twitter"),
    "social_instagram": ConfigOption("string", "Instagram"),
    "featured_links": ConfigOption("id_list", [], parse_id_list),
    "link_tags": ConfigOption("string_list", DEFAULT_LINK_TAGS, parse_string_list),
    "admin_password": ConfigOption("string", _admin_password_default, secret=True),
}

PREFIX_REGISTRY = [
    (ADMIN_TITLE_PREFIX, ConfigOption("string", _admin_title_default)),
]


def lookup_option(key):
    option = REGISTRY.get(key)
    if option is not None:
        return option
    for prefix, prefixed in PREFIX_REGISTRY:
        if key.startswith(prefix) and len(key) > len(prefix):
            return prefixed
    return None


def is_secret(key):
    option = lookup_option(key)
    return option is not None and option.secret


def load_config_map():
    return {row.key: row.value for row in SiteConfig.query.all()}


def resolve(key, config_map=None):
    """Typed value for ``key``.

    ``config_map`` is a preloaded ``{key: raw}`` dict; without it the key is
    read from the store. Unregistered keys come back raw (or None).
    """
    if config_map is None:
        row = SiteConfig.query.filter_by(key=key).first()
        raw = row.value if row else None
    else:
        raw = config_map.get(key)

    option = lookup_option(key)
    if option is None:
        return raw
    if raw is not None:
        try:
            return option.parser(raw)
        except (ValueError, TypeError) as exc:
            logger.debug("Config key %s unreadable as %s (%s), using default", key, option.kind, exc)
    return option.default_for(key)


def public_config(config_map=None):
    """Every non-secret registered key, plus any stored admin titles, resolved."""
    if config_map is None:
        config_map = load_config_map()
    result = {}
    for key, option in REGISTRY.items():
        if option.secret:
            continue
        result[key] = resolve(key, config_map)
    for key in sorted(config_map):
        if key.startswith(ADMIN_TITLE_PREFIX) and lookup_option(key) is not None:
            result[key] = resolve(key, config_map)
    return result


def upsert(key, value):
    """Stage a create-or-update of one key; the caller commits."""
    setting = SiteConfig.query.filter_by(key=key).first()
    if not setting:
        setting = SiteConfig(key=key)
        db.session.add(setting)
    setting.value = value
    return setting


## FEATURED LINKS ##

def resolve_featured_links(links=None, config_map=None, limit=FEATURED_COUNT):
    """Homepage showcase: curated ids first, then popular links with a snapshot, then any popular link.

    1. ``featured_links`` ids in configured order; unknown and repeated ids are skipped.
    2. Until ``limit`` is reached: unselected links with a snapshot, by clicks desc.
    3. Until ``limit`` is reached: any unselected link, by clicks desc.

    Curated ids are never truncated. Ties on clicks go to the lower id.
    """
    if links is None:
        links = Link.query.order_by(Link.id).all()
    by_id = {link.id: link for link in links}

    selected = []
    seen = set()
    for link_id in resolve("featured_links", config_map):
        link = by_id.get(link_id)
        if link is None or link_id in seen:
            continue
        selected.append(link)
        seen.add(link_id)

    popular = sorted(links, key=lambda link: (-(link.clicks or 0), link.id))
    for wanted in (lambda link: link.has_snapshot, lambda link: True):
        for link in popular:
            if len(selected) >= limit:
                break
            if link.id in seen or not wanted(link):
                continue
            selected.append(link)
            seen.add(link.id)

    return selected
