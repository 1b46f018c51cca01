# Overview: API tests for login, session lookup, logout and session expiry.

from datetime import timedelta

from orderbyte.models import SessionToken
from orderbyte.services.session_service import hash_token

STAFF_PASSWORD = "Staff123!"
SUPERADMIN_PASSWORD = "Admin123!"


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


def _login(client, email, password, **extra):
    return client.post('/api/auth/login', json={'email': email, 'password': password, **extra})


class TestLogin:

    def test_staff_login(self, client):
        response = _login(client, 'manager@bellavista.com', STAFF_PASSWORD)
        assert response.status_code == 200
        body = response.get_json()
        assert body['user']['role'] == 'manager'
        assert body['session']['organizationId'] == 'bella-vista'
        assert len(body['token']) == 64
        cookie = next(c for c in response.headers.getlist('Set-Cookie') if c.startswith('session_id='))
        assert 'HttpOnly' in cookie

    def test_superadmin_login(self, client):
        response = _login(client, 'superadmin@orderbyte.com', SUPERADMIN_PASSWORD)
        assert response.status_code == 200
        body = response.get_json()
        assert body['user']['role'] == 'superadmin'
        assert body['session']['organizationId'] is None

    def test_email_is_case_insensitive(self, client):
        assert _login(client, 'Manager@BellaVista.com', STAFF_PASSWORD).status_code == 200

    def test_wrong_password(self, client):
        response = _login(client, 'manager@bellavista.com', 'Wrong123!')
        assert response.status_code == 401
        assert response.get_json()['error'] == 'Invalid credentials'

    def test_unknown_user(self, client):
        assert _login(client, 'nobody@example.com', STAFF_PASSWORD).status_code == 401

    def test_missing_fields(self, client):
        response = client.post('/api/auth/login', json={'email': 'manager@bellavista.com'})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Email and password are required'

    def test_scoped_to_other_org(self, client):
        response = _login(client, 'manager@bellavista.com', STAFF_PASSWORD, organizationId='urban-cafe')
        assert response.status_code == 401

    def test_staff_without_password_cannot_login(self, client, app):
        from orderbyte.services import staff_service
        staff_service.create_staff('bella-vista', email='nologin@example.com', name='N', role='chef')
        assert _login(client, 'nologin@example.com', '').status_code == 400
        assert _login(client, 'nologin@example.com', STAFF_PASSWORD).status_code == 401

    def test_inactive_org_staff_cannot_login(self, client, app):
        from orderbyte.services import organization_service
        organization_service.delete_organization('bella-vista')
        assert _login(client, 'manager@bellavista.com', STAFF_PASSWORD).status_code == 401


class TestSession:

    def test_session_with_bearer(self, client, manager_headers):
        response = client.get('/api/auth/session', headers=manager_headers)
        assert response.status_code == 200
        session = response.get_json()['session']
        assert session['email'] == 'manager@bellavista.com'
        assert session['role'] == 'manager'

    def test_session_with_cookie(self, client):
        _login(client, 'manager@bellavista.com', STAFF_PASSWORD)
        response = client.get('/api/auth/session')
        assert response.status_code == 200

    def test_no_session(self, client):
        response = client.get('/api/auth/session')
        assert response.status_code == 401
        assert response.get_json()['error'] == 'No session'

    def test_garbage_token(self, client):
        response = client.get('/api/auth/session', headers=auth_headers('nope'))
        assert response.status_code == 401
        assert response.get_json()['error'] == 'Invalid session'

    def test_logout_revokes(self, client):
        token = _login(client, 'manager@bellavista.com', STAFF_PASSWORD).get_json()['token']
        response = client.post('/api/auth/logout', headers=auth_headers(token))
        assert response.status_code == 200

        assert client.get('/api/auth/session', headers=auth_headers(token)).status_code == 401

    def test_logout_without_session(self, client):
        assert client.delete('/api/auth/logout').status_code == 200

    def test_idle_timeout(self, client, db_session):
        token = _login(client, 'manager@bellavista.com', STAFF_PASSWORD).get_json()['token']
        record = db_session.query(SessionToken).filter_by(token_hash=hash_token(token)).one()
        record.last_used_at = record.last_used_at - timedelta(hours=3)
        db_session.commit()

        assert client.get('/api/auth/session', headers=auth_headers(token)).status_code == 401
        db_session.refresh(record)
        assert record.is_revoked is True
        assert record.revoked_reason == 'Idle timeout'

    def test_absolute_expiry(self, client, db_session):
        token = _login(client, 'manager@bellavista.com', STAFF_PASSWORD).get_json()['token']
        record = db_session.query(SessionToken).filter_by(token_hash=hash_token(token)).one()
        record.expires_at = record.created_at - timedelta(seconds=1)
        db_session.commit()

        assert client.get('/api/auth/session', headers=auth_headers(token)).status_code == 401

    def test_org_deactivation_ends_staff_sessions(self, client, manager_headers):
        from orderbyte.services import organization_service
        organization_service.delete_organization('bella-vista')
        assert client.get('/api/auth/session', headers=manager_headers).status_code == 401

    def test_token_stored_hashed(self, client, db_session):
        token = _login(client, 'manager@bellavista.com', STAFF_PASSWORD).get_json()['token']
        assert db_session.query(SessionToken).filter_by(token_hash=token).first() is None
