"""
Guestbook Backend: Endpoint Tests
=================================

What:  HTTP-level behaviour through a TestClient (lifespan included).

What we test:
    ✅ Fresh startup seeds exactly the four demo entries; restart duplicates
    ✅ Permit-all: public routes answer anonymous visitors without 401/403
    ✅ /login shows the login view whatever the session state
    ✅ Form login → authenticated; logout → cleared, redirected to "/"
    ✅ No CSRF token needed on state-changing requests
    ✅ Method security on add (login) and delete (ADMIN)
    ✅ Writes commit before the redirect or 204 goes out
"""

import logging

import pytest
from fastapi.testclient import TestClient
from markupsafe import escape
from sqlalchemy.ext.asyncio import AsyncSession

from guestbook.main import create_app
from guestbook.middleware.logging import level_for
from guestbook.services.seed_service import DEMO_ENTRIES

from conftest import fetch_entries, login, make_settings


def _contains_entry(html: str, text: str) -> bool:
    return str(escape(text)) in html


class TestSeeding:

    def test_fresh_startup_seeds_demo_entries(self, test_settings):
        with TestClient(create_app(test_settings)):
            pass

        assert fetch_entries(test_settings) == list(DEMO_ENTRIES)

    def test_restart_appends_duplicate_demo_entries(self, test_settings):
        # Current behaviour: the seed runner has no existence check
        for _ in range(2):
            with TestClient(create_app(test_settings)):
                pass

        assert fetch_entries(test_settings) == list(DEMO_ENTRIES) * 2

    def test_guestbook_page_lists_seeded_entries(self, client):
        resp = client.get("/guestbook")
        assert resp.status_code == 200
        for name, text in DEMO_ENTRIES:
            assert _contains_entry(resp.text, name)
            assert _contains_entry(resp.text, text)


class TestPermitAll:

    def test_public_routes_answer_anonymous_visitors(self, client):
        for path in ("/guestbook", "/login", "/health"):
            resp = client.get(path, follow_redirects=False)
            assert resp.status_code == 200, path

    def test_root_redirects_to_guestbook(self, client):
        resp = client.get("/", follow_redirects=False)
        assert resp.status_code == 302
        assert resp.headers["location"] == "/guestbook"

    def test_unknown_route_is_404_not_401(self, client):
        resp = client.get("/no/such/page")
        assert resp.status_code == 404
        assert "Not Found" in resp.text

    def test_health(self, client):
        resp = client.get("/health")
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    def test_request_id_echoed(self, client):
        resp = client.get("/guestbook", headers={"X-Request-ID": "abc12345"})
        assert resp.headers["X-Request-ID"] == "abc12345"


class TestFormLogin:

    def test_login_view_for_anonymous(self, client):
        resp = client.get("/login")
        assert resp.status_code == 200
        assert "Please sign in" in resp.text

    def test_login_view_when_already_signed_in(self, client):
        login(client)
        resp = client.get("/login")
        assert resp.status_code == 200
        assert "Please sign in" in resp.text
        assert "Signed in as" in resp.text

    def test_valid_credentials_authenticate_session(self, client):
        resp = login(client)
        assert resp.status_code == 302
        assert resp.headers["location"] == "/"

        page = client.get("/guestbook")
        assert "Signed in as <strong>user</strong>" in page.text

    def test_invalid_credentials_redirect_with_error(self, client):
        resp = login(client, password="wrong")
        assert resp.status_code == 302
        assert resp.headers["location"] == "/login?error"

        page = client.get("/login?error")
        assert "Invalid username and password." in page.text
        assert "Signed in as" not in client.get("/guestbook").text

    def test_logout_clears_authentication_and_redirects_home(self, client):
        login(client)

        resp = client.post("/logout", follow_redirects=False)
        assert resp.status_code == 302
        assert resp.headers["location"] == "/"

        page = client.get("/guestbook")
        assert "Signed in as" not in page.text
        # Writing needs a login again
        resp = client.post("/guestbook", data={"name": "x", "text": "y"}, follow_redirects=False)
        assert resp.headers["location"] == "/login"

    def test_logout_accepts_get(self, client):
        login(client)
        resp = client.get("/logout", follow_redirects=False)
        assert resp.status_code == 302
        assert "Signed in as" not in client.get("/guestbook").text


class TestAddEntry:

    def test_anonymous_post_redirects_to_login_then_back(self, client):
        resp = client.post(
            "/guestbook",
            data={"name": "Anon", "text": "sneaky"},
            follow_redirects=False,
        )
        assert resp.status_code == 302
        assert resp.headers["location"] == "/login"

        resp = login(client)
        assert resp.headers["location"] == "/guestbook"

    def test_post_without_csrf_token_succeeds(self, client, test_settings):
        login(client)

        resp = client.post(
            "/guestbook",
            data={"name": "Duke", "text": "Hail to the king, baby!"},
            follow_redirects=False,
        )
        assert resp.status_code == 303
        assert resp.headers["location"] == "/guestbook"

        entries = fetch_entries(test_settings)
        assert entries[-1] == ("Duke", "Hail to the king, baby!")
        assert len(entries) == len(DEMO_ENTRIES) + 1

    def test_invalid_form_rerenders_with_errors(self, client, test_settings):
        login(client)

        resp = client.post("/guestbook", data={"name": "Keep me", "text": "   "})
        assert resp.status_code == 400
        assert "Please enter a message" in resp.text
        assert 'value="Keep me"' in resp.text
        assert len(fetch_entries(test_settings)) == len(DEMO_ENTRIES)


class TestDeleteEntry:

    def test_admin_can_delete(self, admin_client):
        login(admin_client, "admin", "admin")

        resp = admin_client.delete("/guestbook/1")
        assert resp.status_code == 204

        page = admin_client.get("/guestbook")
        assert not _contains_entry(page.text, "first!!!")
        assert _contains_entry(page.text, "Hasta la vista, baby")

    def test_admin_form_delete_redirects(self, admin_client):
        login(admin_client, "admin", "admin")

        resp = admin_client.post("/guestbook/2/delete", follow_redirects=False)
        assert resp.status_code == 303
        assert resp.headers["location"] == "/guestbook"

    def test_unknown_entry_is_404(self, admin_client):
        login(admin_client, "admin", "admin")
        assert admin_client.delete("/guestbook/999").status_code == 404

    def test_user_without_admin_role_is_forbidden(self, client, test_settings):
        login(client)
        resp = client.delete("/guestbook/1")
        assert resp.status_code == 403
        assert len(fetch_entries(test_settings)) == len(DEMO_ENTRIES)

    def test_anonymous_delete_redirects_to_login(self, client):
        resp = client.delete("/guestbook/1", follow_redirects=False)
        assert resp.status_code == 302
        assert resp.headers["location"] == "/login"

    @pytest.mark.parametrize("method, path", [
        ("POST", "/guestbook/2/delete"),
        ("DELETE", "/guestbook/2"),
    ])
    def test_login_after_anonymous_delete_lands_on_a_page(self, admin_client, method, path):
        resp = admin_client.request(method, path, follow_redirects=False)
        assert resp.headers["location"] == "/login"

        # No GET route at the delete URL, so login falls back to "/"
        resp = login(admin_client, "admin", "admin")
        assert resp.headers["location"] == "/"

        page = admin_client.get(resp.headers["location"])
        assert page.status_code == 200
        assert _contains_entry(page.text, "Hasta la vista, baby")


class TestMethodSecurityToggle:

    def test_disabled_method_security_lets_anonymous_post(self, tmp_path):
        settings = make_settings(tmp_path, method_security_enabled=False)
        with TestClient(create_app(settings)) as c:
            resp = c.post("/guestbook", data={"name": "Anon", "text": "hi"}, follow_redirects=False)
            assert resp.status_code == 303

        assert fetch_entries(settings)[-1] == ("Anon", "hi")


class TestAccessLog:

    @pytest.mark.parametrize("status, level", [
        (200, logging.INFO),
        (303, logging.INFO),
        (403, logging.WARNING),
        (404, logging.WARNING),
        (500, logging.ERROR),
    ])
    def test_level_follows_status(self, status, level):
        assert level_for(status) == level

    def test_signed_in_user_is_logged(self, client, caplog):
        login(client)
        with caplog.at_level(logging.INFO, logger="guestbook.access"):
            client.get("/guestbook")

        lines = [r.getMessage() for r in caplog.records if r.name == "guestbook.access"]
        assert any(line.startswith("GET /guestbook 200") and "user=user" in line for line in lines)


class TestCommitBeforeResponse:
    """Writes are committed before the client sees the redirect or 204."""

    @pytest.fixture
    def events(self, monkeypatch):
        recorded = []
        original_commit = AsyncSession.commit

        async def recording_commit(session):
            recorded.append("commit")
            await original_commit(session)

        monkeypatch.setattr(AsyncSession, "commit", recording_commit)
        return recorded

    @staticmethod
    def _client(settings, events) -> TestClient:
        app = create_app(settings)

        async def recording_app(scope, receive, send):
            async def recording_send(message):
                if message["type"] == "http.response.start":
                    events.append(f"response {message['status']}")
                await send(message)

            await app(scope, receive, recording_send)

        return TestClient(recording_app)

    def test_add_entry(self, test_settings, events):
        with self._client(test_settings, events) as c:
            login(c)
            events.clear()
            resp = c.post(
                "/guestbook",
                data={"name": "Duke", "text": "Groovy"},
                follow_redirects=False,
            )

        assert resp.status_code == 303
        assert events.index("commit") < events.index("response 303")

    def test_delete_entry(self, tmp_path, events):
        settings = make_settings(tmp_path, user_name="admin", user_password="admin", user_roles="USER,ADMIN")
        with self._client(settings, events) as c:
            login(c, "admin", "admin")
            events.clear()
            resp = c.delete("/guestbook/1")

        assert resp.status_code == 204
        assert events.index("commit") < events.index("response 204")


class TestErrorResponses:

    def test_unexpected_error_keeps_request_id_header(self, test_settings):
        app = create_app(test_settings)

        @app.get("/explode")
        async def explode():
            raise RuntimeError("boom")

        with TestClient(app, raise_server_exceptions=False) as c:
            resp = c.get("/explode", headers={"X-Request-ID": "abc12345"})

        assert resp.status_code == 500
        assert resp.headers["X-Request-ID"] == "abc12345"
        assert "boom" not in resp.text
