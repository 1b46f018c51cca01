"""
Pytest fixtures for OrderByte backend tests.

Every test gets a fresh application with its own in-memory store loaded with
the seed dataset (bella-vista, urban-cafe, their staff and a superadmin).
"""

import pytest

from orderbyte import create_app
from orderbyte.extensions import db
from orderbyte.services import staff_service


STAFF_PASSWORD = "Staff123!"
SUPERADMIN_PASSWORD = "Admin123!"


@pytest.fixture(scope='function')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SECRET_KEY': 'test-secret-key',
        'BCRYPT_ROUNDS': 4,
    })

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Direct access to the store session."""
    yield db.session
    db.session.rollback()


def get_auth_token(app, email: str, password: str, organization_id: str | None = None) -> str:
    """
    Log in through the API and return the bearer token.

    Uses a throwaway client so the session cookie never leaks into the
    client a test is asserting with.
    """
    payload = {'email': email, 'password': password}
    if organization_id is not None:
        payload['organizationId'] = organization_id
    response = app.test_client().post('/api/auth/login', json=payload)
    assert response.status_code == 200, response.get_json()
    return response.get_json()['token']


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def manager_headers(app):
    """Bella Vista manager (seeded)."""
    return auth_headers(get_auth_token(app, 'manager@bellavista.com', STAFF_PASSWORD))


@pytest.fixture(scope='function')
def urban_admin_headers(app):
    """Urban Café admin (seeded)."""
    return auth_headers(get_auth_token(app, 'admin@urbancafe.com', STAFF_PASSWORD))


@pytest.fixture(scope='function')
def superadmin_headers(app):
    return auth_headers(get_auth_token(app, 'superadmin@orderbyte.com', SUPERADMIN_PASSWORD))


@pytest.fixture(scope='function')
def role_headers(app):
    """
    Factory: create a Bella Vista staff member with the given role and
    return bearer headers for them.
    """
    def _make(role: str, org_id: str = 'bella-vista') -> dict:
        email = f'{role}@{org_id}.test'
        staff_service.create_staff(org_id, email=email, name=role.title(), role=role, password=STAFF_PASSWORD)
        return auth_headers(get_auth_token(app, email, STAFF_PASSWORD, organization_id=org_id))

    return _make


@pytest.fixture(scope='function')
def login(app):
    """Factory: bearer headers for any seeded or test-created account."""
    def _login(email: str, password: str, organization_id: str | None = None) -> dict:
        return auth_headers(get_auth_token(app, email, password, organization_id))

    return _login


@pytest.fixture(scope='function')
def place_order():
    """Factory: POST /api/orders with sensible defaults."""
    def _place(client, org_id='bella-vista', items=None, **extra):
        payload = {
            'organizationId': org_id,
            'customerName': 'Test Customer',
            'tableNumber': '7',
            'items': items if items is not None else [{'itemId': 'margherita', 'quantity': 1}],
        }
        payload.update(extra)
        return client.post('/api/orders', json=payload)

    return _place
