"""Create/update/delete/reorder for every content type.

Functions validate their input completely before touching the session, raise
the errors from ``services.errors`` and commit on success. Anything that
fails after staging changes is rolled back by the request's error handler.
"""
import json
import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import db, Category, Link, GalleryImage, AboutContent, SiteConfig, HeroSlide
from services import site_config
from services.errors import (
    DuplicateNameError,
    InvalidReferenceError,
    NotFoundError,
    ReorderConflictError,
    ValidationError,
)
from services.ordering import SiblingGroup, append, coerce_id, next_sort_order, remove, reorder

logger = logging.getLogger(__name__)


# --- HELPERS ---

def _text(data, field, required=False):
    value = data.get(field)
    if value is None:
        if required:
            raise ValidationError(f"Missing field: {field}")
        return None
    if not isinstance(value, str):
        raise ValidationError(f"Field {field} must be a string")
    value = value.strip()
    if required and not value:
        raise ValidationError(f"Missing field: {field}")
    return value or None


def _flag(data, field):
    value = data.get(field)
    if not isinstance(value, bool):
        raise ValidationError(f"Field {field} must be true or false")
    return value


def _get_or_404(model, raw_id, label):
    entity = db.session.get(model, coerce_id(raw_id))
    if entity is None:
        raise NotFoundError(f"{label} not found")
    return entity


def ids_from_items(items):
    """Accept ``[1, 2]`` as well as ``[{"id": 1}, {"id": 2}]``."""
    if not isinstance(items, list):
        raise ValidationError("Expected a list of ids")
    return [coerce_id(item.get("id") if isinstance(item, dict) else item) for item in items]


def category_group():
    return SiblingGroup(Category, label="categories")


def link_group(category_id):
    return SiblingGroup(Link, Link.category_id == category_id, label=f"links of category {category_id}")


def hero_group():
    return SiblingGroup(HeroSlide, label="hero slides")


## CATEGORIES ##

def list_categories():
    return Category.query.order_by(Category.sort_order, Category.id).all()


def _check_name_free(name, exclude_id=None):
    existing = Category.query.filter_by(name=name).first()
    if existing and existing.id != exclude_id:
        raise DuplicateNameError(f"Category '{name}' already exists")


def _commit_category(name):
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise DuplicateNameError(f"Category '{name}' already exists")


def create_category(data):
    name = _text(data, "name", required=True)
    _check_name_free(name)
    category = append(category_group(), Category(name=name))
    _commit_category(name)
    logger.info("Category %s created (%s)", category.id, name)
    return category


def update_category(data):
    category = _get_or_404(Category, data.get("id"), "Category")
    name = _text(data, "name", required=True)
    _check_name_free(name, exclude_id=category.id)
    category.name = name
    _commit_category(name)
    logger.info("Category %s renamed to %s", category.id, name)
    return category


def delete_category(raw_id):
    """Delete a category together with every link in it."""
    category = _get_or_404(Category, raw_id, "Category")
    category_id, link_count = category.id, len(category.links)
    remove(category)
    db.session.commit()
    logger.info("Category %s deleted with %d links", category_id, link_count)


def reorder_categories(items):
    return reorder(category_group(), ids_from_items(items))


## LINKS ##

def list_links(category_id=None):
    query = Link.query
    if category_id is not None:
        query = query.filter_by(category_id=coerce_id(category_id))
    return query.order_by(Link.category_id, Link.sort_order, Link.id).all()


def _resolve_category(raw_id):
    if raw_id is None or raw_id == "":
        raise ValidationError("Missing field: categoryId")
    try:
        category_id = coerce_id(raw_id)
    except ValidationError:
        raise InvalidReferenceError(f"Category {raw_id!r} does not exist")
    category = db.session.get(Category, category_id)
    if category is None:
        raise InvalidReferenceError(f"Category {category_id} does not exist")
    return category


def create_link(data):
    title = _text(data, "title", required=True)
    url = _text(data, "url", required=True)
    icon = _text(data, "icon")
    snapshot_url = _text(data, "snapshotUrl")
    description = _text(data, "description")
    category = _resolve_category(data.get("categoryId"))

    link = Link(
        title=title,
        url=url,
        icon=icon,
        snapshot_url=snapshot_url,
        description=description,
        category_id=category.id,
        clicks=0,
    )
    append(link_group(category.id), link)
    db.session.commit()
    logger.info("Link %s created in category %s", link.id, category.id)
    return link


def update_link(data):
    """Partial update. ``clicks`` is never writable here."""
    link = _get_or_404(Link, data.get("id"), "Link")

    changes = {}
    for field, attr in (("title", "title"), ("url", "url")):
        if field in data:
            changes[attr] = _text(data, field, required=True)
    for field, attr in (("icon", "icon"), ("snapshotUrl", "snapshot_url"), ("description", "description")):
        if field in data:
            changes[attr] = _text(data, field)
    target = None
    if "categoryId" in data:
        target = _resolve_category(data.get("categoryId"))

    for attr, value in changes.items():
        setattr(link, attr, value)
    if target is not None and target.id != link.category_id:
        # moved links go to the end of their new category
        link.sort_order = next_sort_order(link_group(target.id))
        link.category_id = target.id

    db.session.commit()
    logger.info("Link %s updated", link.id)
    return link


def delete_link(raw_id):
    link = _get_or_404(Link, raw_id, "Link")
    link_id = link.id
    remove(link)
    db.session.commit()
    logger.info("Link %s deleted", link_id)


def reorder_links(items, category_id=None):
    """Reorder the links of one category.

    Without an explicit ``category_id`` the category is taken from the listed
    links, which must all belong to the same one.
    """
    ids = ids_from_items(items)
    if category_id is None:
        if not ids:
            raise ValidationError("Missing field: categoryId")
        owners = db.session.scalars(
            select(Link.category_id).where(Link.id.in_(ids)).distinct()
        ).all()
        if len(owners) != 1:
            raise ReorderConflictError("Links to reorder must all belong to one category")
        category_id = owners[0]
    else:
        category_id = _resolve_category(category_id).id
    return reorder(link_group(category_id), ids)


def record_click(raw_id):
    """Best-effort +1 on a link's click counter. Returns whether a row was counted.

    Unknown or malformed ids, and store failures, are no-ops: this is a
    fire-and-forget signal from the public pages.
    """
    try:
        link_id = coerce_id(raw_id)
    except ValidationError:
        return False
    try:
        result = db.session.execute(
            update(Link)
            .where(Link.id == link_id)
            .values(clicks=Link.clicks + 1)
            .execution_options(synchronize_session=False)
        )
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.warning("Click on link %s not recorded", link_id, exc_info=True)
        return False
    return result.rowcount > 0


## GALLERY ##

def list_gallery():
    return GalleryImage.query.order_by(GalleryImage.created_at.desc(), GalleryImage.id.desc()).all()


def create_gallery_image(data):
    image = GalleryImage(url=_text(data, "url", required=True), title=_text(data, "title"))
    db.session.add(image)
    db.session.commit()
    logger.info("Gallery image %s added", image.id)
    return image


def update_gallery_image(data):
    image = _get_or_404(GalleryImage, data.get("id"), "Image")
    url = _text(data, "url", required=True) if "url" in data else image.url
    title = _text(data, "title") if "title" in data else image.title
    image.url = url
    image.title = title
    db.session.commit()
    return image


def delete_gallery_image(raw_id):
    image = _get_or_404(GalleryImage, raw_id, "Image")
    image_id = image.id
    db.session.delete(image)
    db.session.commit()
    logger.info("Gallery image %s deleted", image_id)


## ABOUT ##

def current_about():
    # Several rows may exist; the oldest one is the one the site shows
    return AboutContent.query.order_by(AboutContent.id).first()


def create_about(data):
    about = AboutContent(
        title=_text(data, "title") or "",
        description=_text(data, "description") or "",
    )
    db.session.add(about)
    db.session.commit()
    return about


def save_about(data):
    """Update the row named by ``id``, or the current row when no id is given."""
    if data.get("id") is not None:
        about = _get_or_404(AboutContent, data.get("id"), "About content")
    else:
        about = current_about()
    title = _text(data, "title")
    description = _text(data, "description")
    if about is None:
        return create_about(data)
    if "title" in data:
        about.title = title or ""
    if "description" in data:
        about.description = description or ""
    db.session.commit()
    return about


## HERO SLIDES ##

def list_hero_slides(active_only=False):
    query = HeroSlide.query
    if active_only:
        query = query.filter_by(is_active=True)
    return query.order_by(HeroSlide.sort_order, HeroSlide.id).all()


def create_hero_slide(data):
    slide = HeroSlide(
        title=_text(data, "title", required=True),
        subtitle=_text(data, "subtitle", required=True),
        description=_text(data, "description"),
        code_snippet=_text(data, "codeSnippet"),
        is_active=_flag(data, "isActive") if data.get("isActive") is not None else True,
    )
    append(hero_group(), slide)
    db.session.commit()
    logger.info("Hero slide %s created", slide.id)
    return slide


def update_hero_slide(data):
    slide = _get_or_404(HeroSlide, data.get("id"), "Slide")
    changes = {}
    for field, attr in (("title", "title"), ("subtitle", "subtitle")):
        if field in data:
            changes[attr] = _text(data, field, required=True)
    for field, attr in (("description", "description"), ("codeSnippet", "code_snippet")):
        if field in data:
            changes[attr] = _text(data, field)
    if data.get("isActive") is not None:
        changes["is_active"] = _flag(data, "isActive")

    for attr, value in changes.items():
        setattr(slide, attr, value)
    db.session.commit()
    return slide


def delete_hero_slide(raw_id):
    slide = _get_or_404(HeroSlide, raw_id, "Slide")
    slide_id = slide.id
    remove(slide)
    db.session.commit()
    logger.info("Hero slide %s deleted", slide_id)


def reorder_hero_slides(items):
    return reorder(hero_group(), ids_from_items(items))


## SITE CONFIG ##

PASSWORD_ENDPOINT_HINT = "The admin password can only be changed through /api/auth/password"


def list_configs():
    rows = SiteConfig.query.order_by(SiteConfig.key).all()
    return [row for row in rows if not site_config.is_secret(row.key)]


def _config_pairs(configs):
    if not isinstance(configs, list):
        raise ValidationError("Expected configs: [{key, value}]")
    pairs = []
    for item in configs:
        if not isinstance(item, dict):
            raise ValidationError("Expected configs: [{key, value}]")
        key = item.get("key")
        if not isinstance(key, str) or not key.strip():
            raise ValidationError("Every config entry needs a key")
        value = item.get("value")
        if value is not None and not isinstance(value, str):
            value = json.dumps(value, ensure_ascii=False)
        pairs.append((key.strip(), value))
    return pairs


def upsert_configs(configs):
    """Upsert each key on its own.

    Keys are independent: each one is committed separately, and a key the store
    rejects is reported in ``failed`` without undoing the keys saved before or
    after it. Secret keys are refused here; the admin password only changes
    through ``auth.change_password``. Returns ``(updated_keys, failed)``.
    """
    pairs = _config_pairs(configs)
    updated, failed = [], []
    for key, value in pairs:
        if site_config.is_secret(key):
            logger.warning("Config batch tried to write secret key %s", key)
            failed.append({"key": key, "error": PASSWORD_ENDPOINT_HINT})
            continue
        try:
            site_config.upsert(key, value)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.warning("Config key %s not saved: %s", key, exc.__class__.__name__)
            failed.append({"key": key, "error": "Could not save value"})
        else:
            updated.append(key)
    logger.info("Config batch saved: %d updated, %d failed", len(updated), len(failed))
    return updated, failed


def delete_config(key):
    if key and site_config.is_secret(key):
        raise ValidationError(PASSWORD_ENDPOINT_HINT)
    setting = SiteConfig.query.filter_by(key=key).first() if key else None
    if setting is None:
        raise NotFoundError(f"Config key {key!r} not found")
    db.session.delete(setting)
    db.session.commit()
    logger.info("Config key %s deleted", key)
