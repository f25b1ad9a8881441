"""
HTTP-level tests through FastAPI's TestClient.
"""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from workinfo.app import create_app
from workinfo.repositories.sql_repository import SQLRepository

PLAUSIBLE = '<script defer src="https://plausible.io/js/script.js" data-domain="acme.com"></script>'
CARD = {"first_name": "Ana", "last_name": "Silva", "company": "Acme", "email": "ana@acme.com"}


@pytest.fixture()
def client(db_env):
    with TestClient(create_app()) as c:
        yield c


def _csrf(client: TestClient) -> str:
    client.get("/login")
    return client.cookies["csrf_token"]


def _register(client: TestClient, username: str = "ana") -> str:
    token = _csrf(client)
    resp = client.post(
        "/auth/register",
        data={
            "email": f"{username}@acme.com",
            "username": username,
            "password": "s3cretpass",
            "password_confirm": "s3cretpass",
            "csrf_token": token,
        },
        follow_redirects=False,
    )
    assert resp.status_code == 303
    assert resp.headers["location"] == "/dashboard"
    return token


def test_guards_redirect(client):
    resp = client.get("/dashboard", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/login?next=/dashboard"

    _register(client)
    resp = client.get("/login", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/dashboard"
    assert client.get("/dashboard").status_code == 200


def test_login_requires_csrf_token(client):
    resp = client.post("/auth/login", data={"email": "a@b.co", "password": "x"}, follow_redirects=False)
    assert resp.status_code == 403


def test_login_error_redirects_back_with_message(client):
    token = _csrf(client)
    resp = client.post(
        "/auth/login",
        data={"email": "nobody@acme.com", "password": "wrongpass", "csrf_token": token},
        follow_redirects=False,
    )
    assert resp.status_code == 303
    assert resp.headers["location"].startswith("/login?error=Invalid+email+or+password")


def test_login_is_rate_limited(client):
    token = _csrf(client)
    codes = [
        client.post(
            "/auth/login",
            data={"email": "x@acme.com", "password": "wrongpass", "csrf_token": token},
            follow_redirects=False,
        ).status_code
        for _ in range(11)
    ]
    assert codes[:10] == [303] * 10
    assert codes[10] == 429


def test_login_honours_safe_next(client):
    token = _register(client)
    client.post("/auth/logout", data={"csrf_token": token}, follow_redirects=False)
    token = _csrf(client)
    resp = client.post(
        "/auth/login",
        data={"email": "ana@acme.com", "password": "s3cretpass", "next": "//evil.com", "csrf_token": token},
        follow_redirects=False,
    )
    assert resp.headers["location"] == "/dashboard"


def test_username_available(client):
    assert client.get("/auth/username-available", params={"username": "Ana"}).json() == {
        "username": "ana",
        "valid": True,
        "available": True,
    }
    _register(client)
    assert client.get("/auth/username-available", params={"username": "ANA"}).json()["available"] is False
    assert client.get("/auth/username-available", params={"username": "a!"}).json()["valid"] is False


def test_card_api_flow(client):
    token = _register(client)
    headers = {"x-csrf-token": token}
    assert client.get("/api/card").json() == {"card": None}

    resp = client.put("/api/card", json=dict(CARD, tracking_script="<script>alert(1)</script>"), headers=headers)
    assert resp.status_code == 422
    assert resp.json()["errors"] == {"tracking_script": "Invalid script format or unsupported provider"}

    resp = client.put("/api/card", json=dict(CARD, tracking_script=PLAUSIBLE), headers=headers)
    assert resp.status_code == 200
    assert resp.json()["card"]["username"] == "ana"

    check = client.post("/api/card/tracking-script/validate", json={"tracking_script": PLAUSIBLE})
    assert check.json() == {"valid": True, "error": None, "provider": "Plausible"}

    share = client.get("/api/card/share").json()
    assert share["share_url"] == "https://cards.example.com/users/ana"
    assert share["vcard_url"].endswith("/users/ana/vcard")

    assert client.put("/api/card", json=CARD).status_code == 403
    assert client.request("DELETE", "/api/card", headers=headers).json() == {"deleted": True}


def test_public_card_page_injects_only_sanitized_script(client):
    token = _register(client)
    payload = dict(CARD, tracking_script=PLAUSIBLE, theme_primary_light="#112233")
    client.put("/api/card", json=payload, headers={"x-csrf-token": token})

    resp = client.get("/users/ANA")
    assert resp.status_code == 200
    assert '<script src="https://plausible.io/js/script.js" defer data-domain="acme.com" async></script>' in resp.text
    assert "--color-primary: #112233" in resp.text
    csp = resp.headers["content-security-policy"]
    assert "script-src 'self' https://plausible.io;" in csp
    assert "connect-src 'self' https://plausible.io https://*.plausible.io" in csp

    data = client.get("/api/public/ana").json()
    assert "tracking_script" not in data
    assert data["tracking"] == {
        "source": "https://plausible.io/js/script.js",
        "attributes": {"defer": True, "data-domain": "acme.com"},
        "provider": "Plausible",
    }

    vcf = client.get("/users/ana/vcard")
    assert vcf.headers["content-disposition"] == 'attachment; filename="ana.vcf"'
    assert "FN:Ana Silva" in vcf.text

    qr = client.get("/users/ana/qr.png")
    assert qr.headers["content-type"] == "image/png"
    assert qr.content.startswith(b"\x89PNG")


def test_public_card_with_rejected_script_renders_without_it(client):
    _register(client)
    repo = SQLRepository()
    user = repo.get_user_by_username("ana")
    # Written straight to the store, skipping the save-time check.
    repo.create_card(user.id, "ana", dict(CARD, tracking_script='<script src="https://evil.example.com/x.js"></script>'))
    resp = client.get("/users/ana")
    assert resp.status_code == 200
    assert "evil.example.com" not in resp.text
    assert "script-src 'self';" in resp.headers["content-security-policy"]


def test_public_card_missing_is_404(client):
    assert client.get("/users/ghost").status_code == 404
    assert client.get("/api/public/ghost").status_code == 404


def test_theme_routes(client):
    assert client.get("/theme").json()["mode"] == "auto"
    assert client.post("/theme/toggle").json()["mode"] == "light"
    resp = client.post("/theme/toggle")
    assert resp.json()["mode"] == "dark"
    assert resp.headers["accept-ch"] == "Sec-CH-Prefers-Color-Scheme"

    resp = client.post("/theme/colors", json={"primaryLight": "#000000", "primaryDark": "bogus"})
    assert resp.json()["colors"] == {"primaryLight": "#000000", "primaryDark": "#60a5fa"}

    resp = client.post("/theme", json={"mode": "auto"}, headers={"Sec-CH-Prefers-Color-Scheme": "dark"})
    assert resp.json()["is_dark"] is True

    assert client.post("/theme/reset").json()["colors"]["primaryLight"] == "#2563eb"


def test_manifest_and_offline(client):
    manifest = client.get("/manifest.webmanifest")
    assert manifest.headers["content-type"].startswith("application/manifest+json")
    body = manifest.json()
    assert body["short_name"] == "WorkInfo"
    assert body["theme_color"] == "#3B82F6"
    assert body["icons"][-1]["purpose"] == "any maskable"
    assert client.get("/offline").status_code == 200


def test_profile_image_upload(client):
    import io

    from PIL import Image

    token = _register(client)
    buf = io.BytesIO()
    Image.new("RGB", (50, 50), "white").save(buf, format="JPEG")
    resp = client.post(
        "/api/card/image",
        files={"file": ("me.jpg", buf.getvalue(), "image/jpeg")},
        headers={"x-csrf-token": token},
    )
    assert resp.status_code == 200
    assert resp.json()["url"].startswith("https://cards.example.com/static/uploads/cards/")

    bad = client.post(
        "/api/card/image",
        files={"file": ("me.gif", b"GIF89a", "image/gif")},
        headers={"x-csrf-token": token},
    )
    assert bad.status_code == 400


def test_card_api_rejects_cross_origin_writes(client):
    token = _register(client)
    resp = client.put(
        "/api/card",
        json=CARD,
        headers={"x-csrf-token": token, "origin": "https://evil.example.com"},
    )
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Invalid origin."
    assert client.put("/api/card", json=CARD, headers={"x-csrf-token": "x" * 43}).status_code == 403
    assert client.get("/api/card").json() == {"card": None}
