"""Route module requests end to end.

Covers dispatch to the right handler, the response envelope, request bodies,
handler errors, the request timeout and not-found handling under the prefix.
"""

from __future__ import annotations

import time

from fastapi.testclient import TestClient

from ladybug.modules import dispatch

# ── Dispatch ───────────────────────────────────────────────────────────────────


class TestDispatch:
    def test_hello_scenario(self, client):
        """GET /api/example/hello returns the handler message plus the envelope."""
        r = client.get("/api/example/hello")
        assert r.status_code == 200
        data = r.json()
        assert data["message"] == "Hello, world!"
        assert data["status"] == "success"
        assert data["developer"] == "tester"
        assert data["version"] == "9.9.9"
        assert data["timestamp"]

    def test_each_module_reaches_its_own_handler(self, make_client, write_module):
        """Distinct method/path pairs are routed to exactly their module."""
        for name, method in (("alpha", "GET"), ("beta", "POST"), ("gamma", "PUT"), ("delta", "DELETE")):
            write_module(
                f"{name}.py",
                {"path": "/multi", "name": name, "method": method},
                body=f"ctx.res.json({{'handler': {name!r}}})",
            )
        client = make_client()

        assert client.get("/api/multi").json()["handler"] == "alpha"
        assert client.post("/api/multi").json()["handler"] == "beta"
        assert client.put("/api/multi").json()["handler"] == "gamma"
        assert client.delete("/api/multi").json()["handler"] == "delta"

    def test_returned_value_is_the_response(self, make_client, write_module):
        write_module("ret.py", {"path": "/ret", "name": "Ret"}, body="return {'returned': True}")
        r = make_client().get("/api/ret")
        assert r.status_code == 200
        assert r.json()["returned"] is True
        assert r.json()["framework"] == "Ladybug API Framework"

    def test_handler_status_wins_over_envelope(self, make_client, write_module):
        write_module(
            "err.py",
            {"path": "/err", "name": "Err"},
            body="ctx.res.status(422).json({'status': 'error', 'reason': 'bad input'})",
        )
        r = make_client().get("/api/err")
        assert r.status_code == 422
        assert r.json()["status"] == "error"
        assert r.json()["developer"] == "tester"

    def test_array_body_is_not_enveloped(self, make_client, write_module):
        write_module("list.py", {"path": "/list", "name": "List"}, body="ctx.res.json([1, 2, 3])")
        assert make_client().get("/api/list").json() == [1, 2, 3]

    def test_no_response_gives_204(self, make_client, write_module):
        write_module("quiet.py", {"path": "/quiet", "name": "Quiet"}, body="return None")
        r = make_client().get("/api/quiet")
        assert r.status_code == 204
        assert r.content == b""

    def test_sync_handler(self, make_client, api_dir):
        (api_dir / "sync.py").write_text(
            "meta = {'path': '/sync', 'name': 'Sync'}\n\n\ndef on_start(ctx):\n    return {'sync': True}\n"
        )
        assert make_client().get("/api/sync").json()["sync"] is True

    def test_path_params_and_query(self, make_client, write_module):
        write_module(
            "user.py",
            {"path": "/users/:user_id", "name": "User"},
            body="ctx.res.json({'id': ctx.params['user_id'], 'q': ctx.query.get('q')})",
        )
        data = make_client().get("/api/users/42", params={"q": "bug"}).json()
        assert data["id"] == "42"
        assert data["q"] == "bug"

    def test_alternate_prefix(self, make_client, hello_module):
        client = make_client(api_prefix="/ladybug")
        assert client.get("/ladybug/example/hello").status_code == 200
        assert client.get("/api/example/hello").status_code == 404


# ── Request bodies ─────────────────────────────────────────────────────────────


class TestBodies:
    def _echo(self, write_module):
        write_module(
            "echo.py",
            {"path": "/echo", "name": "Echo", "method": "POST"},
            body="ctx.res.json({'body': ctx.body})",
        )

    def test_json_body(self, make_client, write_module):
        self._echo(write_module)
        r = make_client().post("/api/echo", json={"a": 1, "b": [1, 2]})
        assert r.json()["body"] == {"a": 1, "b": [1, 2]}

    def test_form_body(self, make_client, write_module):
        self._echo(write_module)
        r = make_client().post("/api/echo", data={"name": "lady", "kind": "bug"})
        assert r.json()["body"] == {"name": "lady", "kind": "bug"}

    def test_empty_body_is_empty_object(self, make_client, write_module):
        self._echo(write_module)
        assert make_client().post("/api/echo").json()["body"] == {}

    def test_malformed_json_is_400(self, make_client, write_module):
        self._echo(write_module)
        r = make_client().post("/api/echo", content=b"{not json", headers={"Content-Type": "application/json"})
        assert r.status_code == 400
        assert r.json()["code"] == "BAD_REQUEST"

    def test_oversized_body_is_413(self, make_client, write_module):
        self._echo(write_module)
        r = make_client(body_limit=16).post("/api/echo", json={"data": "x" * 100})
        assert r.status_code == 413
        assert r.json()["code"] == "PAYLOAD_TOO_LARGE"


# ── Handler failures ───────────────────────────────────────────────────────────


class TestFailures:
    def test_handler_exception_is_500_without_detail(self, make_client, write_module):
        write_module("boom.py", {"path": "/boom", "name": "Boom"}, body="raise ValueError('secret detail')")
        r = make_client().get("/api/boom")
        assert r.status_code == 500
        data = r.json()
        assert data["status"] == "error"
        assert data["code"] == "INTERNAL_ERROR"
        assert data["message"] == "Internal server error"
        assert "secret detail" not in r.text

    def test_error_after_responding_keeps_response(self, make_client, write_module):
        write_module(
            "half.py",
            {"path": "/half", "name": "Half"},
            body="""
            ctx.res.json({'done': True})
            raise RuntimeError('after the fact')
            """,
        )
        r = make_client().get("/api/half")
        assert r.status_code == 200
        assert r.json()["done"] is True

    def test_timeout_is_408_and_late_write_is_refused(self, make_client, write_module, tmp_path):
        """A slow handler gets a 408; its late write never reaches the client."""
        marker = tmp_path / "late.txt"
        write_module(
            "slow.py",
            {"path": "/slow", "name": "Slow"},
            extra="import asyncio\nfrom pathlib import Path",
            body=f"""
            await asyncio.sleep(0.5)
            try:
                ctx.res.json({{'late': True}})
            except Exception as exc:
                Path({str(marker)!r}).write_text(type(exc).__name__)
            """,
        )
        client = make_client(request_timeout=0.1)
        before = set(dispatch._pending)

        r = client.get("/api/slow")
        assert r.status_code == 408
        assert r.json()["code"] == "TIMEOUT"
        assert r.json()["status"] == "error"
        [task] = dispatch._pending - before

        deadline = time.monotonic() + 5
        while task in dispatch._pending and time.monotonic() < deadline:
            time.sleep(0.05)
        assert task.done()
        assert task not in dispatch._pending
        assert marker.read_text() == "ResponseAlreadySentError"

    def test_fast_response_beats_slow_cleanup(self, make_client, write_module):
        """Responding early returns immediately even if the handler keeps working."""
        write_module(
            "early.py",
            {"path": "/early", "name": "Early"},
            extra="import asyncio",
            body="""
            ctx.res.json({'early': True})
            await asyncio.sleep(0.3)
            """,
        )
        r = make_client(request_timeout=0.1).get("/api/early")
        assert r.status_code == 200
        assert r.json()["early"] is True


# ── Not found ──────────────────────────────────────────────────────────────────


class TestNotFound:
    def test_unknown_api_path(self, client):
        r = client.get("/api/does/not/exist")
        assert r.status_code == 404
        data = r.json()
        assert data["code"] == "NOT_FOUND"
        assert data["status"] == "error"
        assert "/api/info" in data["suggestion"]

    def test_wrong_method_is_not_found(self, client):
        r = client.post("/api/example/hello")
        assert r.status_code == 404
        assert r.json()["code"] == "NOT_FOUND"

    def test_unknown_page_outside_prefix_is_html(self, client):
        r = client.get("/nowhere")
        assert r.status_code == 404
        assert r.headers["content-type"].startswith("text/html")

    def test_web_dir_404_page_is_used(self, make_client, tmp_path, hello_module):
        web = tmp_path / "web"
        web.mkdir()
        (web / "404.html").write_text("<h1>custom 404</h1>")
        r = make_client().get("/nowhere")
        assert r.status_code == 404
        assert "custom 404" in r.text


class TestServerErrors:
    """Errors raised outside a route module reach the app-wide handler."""

    def _client(self, make_app):
        app = make_app()

        async def boom():
            raise RuntimeError("internal detail")

        app.add_api_route("/api/crash", boom)
        app.add_api_route("/crash", boom)
        return TestClient(app, raise_server_exceptions=False)

    def test_api_error_is_json(self, make_app):
        r = self._client(make_app).get("/api/crash")
        assert r.status_code == 500
        assert r.json()["code"] == "INTERNAL_ERROR"
        assert "internal detail" not in r.text

    def test_page_error_is_html(self, make_app):
        r = self._client(make_app).get("/crash")
        assert r.status_code == 500
        assert r.headers["content-type"].startswith("text/html")
