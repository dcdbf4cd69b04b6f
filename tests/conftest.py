"""
Pytest fixtures for the API test suite.

The app reads its configuration at import, so the environment is set before
``app`` is imported: a throwaway SQLite file (not ``:memory:``, so threads get
real separate connections) and fixed secrets. Every test gets a freshly
created schema.
"""
import os
import shutil
import tempfile

import pytest

_db_dir = tempfile.mkdtemp(prefix="artistic-nav-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_db_dir, "test.db")
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ADMIN_DEFAULT_PASSWORD"] = "admin123"
os.environ["LOG_LEVEL"] = "WARNING"

from app import app as flask_app  # noqa: E402
from models import db, Category, Link, HeroSlide  # noqa: E402

DEFAULT_PASSWORD = "admin123"


def pytest_sessionfinish(session, exitstatus):
    shutil.rmtree(_db_dir, ignore_errors=True)


@pytest.fixture
def app():
    flask_app.config.update(TESTING=True)
    with flask_app.app_context():
        db.create_all()
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(app):
    client = app.test_client()
    response = client.post("/api/auth/login", json={"password": DEFAULT_PASSWORD})
    assert response.status_code == 200, response.get_json()
    return client


@pytest.fixture
def make_category(app):
    def _make(name, sort_order=None):
        if sort_order is None:
            sort_order = Category.query.count()
        category = Category(name=name, sort_order=sort_order)
        db.session.add(category)
        db.session.commit()
        return category
    return _make


@pytest.fixture
def make_link(app):
    def _make(category, title="Link", clicks=0, snapshot_url=None, sort_order=None):
        if sort_order is None:
            sort_order = Link.query.filter_by(category_id=category.id).count()
        link = Link(
            title=title,
            url=f"https://example.com/{title.lower().replace(' ', '-')}",
            category_id=category.id,
            clicks=clicks,
            snapshot_url=snapshot_url,
            sort_order=sort_order,
        )
        db.session.add(link)
        db.session.commit()
        return link
    return _make


@pytest.fixture
def make_slide(app):
    def _make(title, is_active=True, sort_order=None):
        if sort_order is None:
            sort_order = HeroSlide.query.count()
        slide = HeroSlide(title=title, subtitle=f"{title} subtitle", is_active=is_active, sort_order=sort_order)
        db.session.add(slide)
        db.session.commit()
        return slide
    return _make
