import uuid

import pytest
from flask_jwt_extended import create_access_token

from domaincms import create_app
from domaincms.extensions import db
from domaincms.models.user import User


def build_test_app(overrides=None):
    app = create_app("testing", overrides)
    with app.app_context():
        db.create_all()
    return app


@pytest.fixture()
def app():
    app = build_test_app()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


def create_user(app, *, email=None, password="password123", is_admin=True, is_active=True):
    with app.app_context():
        user = User()
        user.email = email or f"user-{uuid.uuid4().hex[:8]}@example.com"
        user.name = "Test User"
        user.is_admin = is_admin
        user.is_active = is_active
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user.id


def auth_headers(app, user_id):
    with app.app_context():
        token = create_access_token(identity=user_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def admin_id(app):
    return create_user(app, email="admin@example.com")


@pytest.fixture()
def admin_headers(app, admin_id):
    return auth_headers(app, admin_id)


@pytest.fixture()
def make_domain(client, admin_headers):
    def _make(slug="webdev", **fields):
        payload = {
            "name": slug.replace("-", " ").title(),
            "slug": slug,
            "pageType": "direct",
            "isPublished": True,
        }
        payload.update(fields)
        response = client.post("/api/admin/domains", json=payload, headers=admin_headers)
        assert response.status_code == 201, response.get_json()
        return response.get_json()["domain"]
    return _make


@pytest.fixture()
def make_page(client, admin_headers):
    def _make(domain_id, slug, **fields):
        payload = {
            "title": slug.replace("-", " ").title(),
            "slug": slug,
            "domainId": domain_id,
        }
        payload.update(fields)
        response = client.post("/api/admin/pages", json=payload, headers=admin_headers)
        assert response.status_code == 201, response.get_json()
        return response.get_json()["page"]
    return _make


@pytest.fixture()
def make_category(client, admin_headers):
    def _make(slug="tech", column=1, **fields):
        payload = {
            "name": slug.title(),
            "slug": slug,
            "columnPosition": column,
        }
        payload.update(fields)
        response = client.post("/api/admin/categories", json=payload, headers=admin_headers)
        assert response.status_code == 201, response.get_json()
        return response.get_json()["category"]
    return _make


@pytest.fixture()
def cached_app():
    """App with a real SimpleCache store instead of NullCache."""
    app = build_test_app({"CACHE_TYPE": "SimpleCache"})
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def small_cache_app():
    """SimpleCache store that prunes after a handful of entries."""
    app = build_test_app({"CACHE_TYPE": "SimpleCache", "CACHE_THRESHOLD": 10})
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def make_user(app):
    def _make(**fields):
        return create_user(app, **fields)
    return _make


@pytest.fixture()
def headers_for(app):
    def _headers(user_id):
        return auth_headers(app, user_id)
    return _headers
