"""Tests for health endpoint, static assets and CORS."""

from pathlib import Path

from codetrain.web.routes.frontend import _resolve_asset


class TestHealthEndpoint:
    """Tests for GET /api/health."""

    def test_health_returns_ok(self, client):
        """Health endpoint returns status ok."""
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_health_returns_environment(self, client):
        """Health endpoint reports the environment profile."""
        data = client.get("/api/health").json()
        assert data["environment"] == "development"
        assert data["version"] == "0.1.0"

    def test_health_returns_timestamp(self, client):
        """Health endpoint returns ISO timestamp."""
        data = client.get("/api/health").json()
        assert "T" in data["timestamp"]


class TestFrontend:
    """Tests for static assets and SPA fallback."""

    def test_root_serves_index(self, client):
        """/ serves the entry document."""
        response = client.get("/")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "auth-forms" in response.text

    def test_static_asset_served(self, client):
        """Existing files are served as-is."""
        response = client.get("/js/app.js")
        assert response.status_code == 200
        assert "checkAuthStatus" in response.text

    def test_unknown_route_falls_back_to_index(self, client):
        """Client-side routes get index.html."""
        response = client.get("/dashboard/settings")
        assert response.status_code == 200
        assert "auth-forms" in response.text

    def test_unknown_api_route_is_json_404(self, client):
        """Unknown API paths are not swallowed by the fallback."""
        response = client.get("/api/nope")
        assert response.status_code == 404
        assert response.json() == {"error": "Not found"}

    def test_development_disables_caching(self, client):
        """Development assets are not cached."""
        assert client.get("/js/app.js").headers["cache-control"] == "no-cache"

    def test_learning_page_has_no_eval(self, client):
        """The code console never evaluates user input."""
        script = client.get("/js/learning.js").text
        assert "eval(" not in script
        assert "new Function" not in script

    def test_resolve_asset_stays_inside_static_dir(self, tmp_path):
        """Path traversal does not escape the static directory."""
        static_dir = tmp_path / "static"
        static_dir.mkdir()
        (static_dir / "index.html").write_text("<html></html>")
        (tmp_path / "secret.txt").write_text("secret")

        assert _resolve_asset(static_dir, "index.html") == (static_dir / "index.html").resolve()
        assert _resolve_asset(static_dir, "../secret.txt") is None
        assert _resolve_asset(static_dir, "") is None
        assert _resolve_asset(Path(static_dir), "missing.js") is None


class TestCors:
    """Tests for origin allow-listing."""

    def test_allowed_origin_with_credentials(self, client):
        """Allowed origins are echoed with credentials."""
        response = client.get("/api/health", headers={"Origin": "http://localhost:3000"})
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
        assert response.headers["access-control-allow-credentials"] == "true"

    def test_unknown_origin_not_allowed(self, client):
        """Other origins get no CORS grant."""
        response = client.get("/api/health", headers={"Origin": "https://evil.example.com"})
        assert "access-control-allow-origin" not in response.headers

    def test_preflight(self, client):
        """Preflight for a JSON POST succeeds for allowed origins."""
        response = client.options(
            "/api/auth/login",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )
        assert response.status_code == 200
