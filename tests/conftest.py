"""Shared test fixtures."""
import pytest
from menucraft import create_app
from menucraft.extensions import db
from menucraft.models import MenuItem, Storefront, User


@pytest.fixture
def app():
    """Application configured for tests (in-memory SQLite, no CSRF)."""
    app = create_app('testing')
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def app_ctx(app):
    """Push an application context for service-level tests."""
    with app.app_context():
        yield app


def _create_owner(username, store_name, slug):
    user = User(username=username)
    user.set_password('secret123')
    db.session.add(user)
    db.session.commit()
    storefront = Storefront(owner_id=user.id, name=store_name, slug=slug)
    db.session.add(storefront)
    db.session.commit()
    return user, storefront


@pytest.fixture
def storefront(app_ctx):
    """A storefront owned by 'seller', inside the pushed app context."""
    _, storefront = _create_owner('seller', 'Acme Tools', 'acme-tools')
    return storefront


@pytest.fixture
def add_item(app_ctx):
    """Insert menu rows directly, bypassing validation."""
    def _add_item(storefront, label, parent=None, sort_order=0, **kwargs):
        kwargs.setdefault('link_type', 'page')
        kwargs.setdefault('target', label.lower().replace(' ', '-'))
        item = MenuItem(
            storefront_id=storefront.id,
            label=label,
            parent_id=parent.id if parent is not None else None,
            sort_order=sort_order,
            **kwargs
        )
        db.session.add(item)
        db.session.commit()
        return item
    return _add_item


@pytest.fixture
def owner(app):
    """Create a seller with a storefront; returns their ids."""
    with app.app_context():
        user, storefront = _create_owner('seller', 'Acme Tools', 'acme-tools')
        return {'user_id': user.id, 'storefront_id': storefront.id, 'slug': storefront.slug}


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, username='seller', password='secret123'):
    return client.post('/login', json={'username': username, 'password': password})


@pytest.fixture
def owner_client(app, owner):
    """Test client logged in as the storefront owner."""
    client = app.test_client()
    response = login(client)
    assert response.status_code == 200
    return client
