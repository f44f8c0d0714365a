import uuid

import pytest


pytestmark = pytest.mark.asyncio


async def register_user(client, email: str, password: str, **extra):
    return await client.post(
        "/api/auth/register",
        json={"email": email, "password": password, **extra},
    )


async def login_user(client, email: str, password: str):
    return await client.post(
        "/api/auth/login",
        json={"email": email, "password": password},
    )


async def test_register_and_login_flow(client):
    email = f"learner_{uuid.uuid4().hex[:6]}@example.com"
    password = "StrongPass!23"

    resp = await register_user(client, email, password, name="Ada Lovelace", location="London")
    body = resp.json()
    assert resp.status_code == 201
    assert body["success"] is True
    assert body["data"]["user"]["email"] == email
    assert body["data"]["user"]["name"] == "Ada Lovelace"
    assert body["data"]["user"]["username"] == email.split("@")[0]
    assert body["data"]["user"]["availability"] == "weekends"
    assert body["data"]["accessToken"]

    # Duplicate email should fail
    dup_resp = await register_user(client, email, password)
    assert dup_resp.status_code == 409
    assert dup_resp.json()["detail"]["code"] == "EMAIL_EXISTS"

    # Successful login
    login_resp = await login_user(client, email, password)
    login_body = login_resp.json()
    assert login_resp.status_code == 200
    assert login_body["success"] is True
    assert "accessToken" in login_body["data"]
    assert "accessToken" in login_resp.cookies

    # Invalid password
    bad_login = await login_user(client, email, "wrong")
    assert bad_login.status_code == 401
    assert bad_login.json()["detail"]["code"] == "AUTH_INVALID_CREDENTIALS"


async def test_register_email_is_case_insensitive(client):
    await register_user(client, "Grace@Example.com", "secret1")
    dup = await register_user(client, "grace@example.com", "secret1")
    assert dup.status_code == 409

    login = await login_user(client, "GRACE@example.com", "secret1")
    assert login.status_code == 200


async def test_register_race_on_same_email(client, monkeypatch):
    """A registration that slips past the lookup still gets EMAIL_EXISTS, not a 500."""
    from skillswap.api.routers import auth as auth_router

    assert (await register_user(client, "twin@example.com", "secret1")).status_code == 201
    client.cookies.clear()

    async def never_taken(email):
        return False

    monkeypatch.setattr(auth_router, "_email_taken", never_taken)
    resp = await register_user(client, "twin@example.com", "secret2")
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "EMAIL_EXISTS"


async def test_username_gets_suffix_when_taken(client):
    first = await register_user(client, "sam@one.example.com", "secret1")
    second = await register_user(client, "sam@two.example.com", "secret1")
    assert first.json()["data"]["user"]["username"] == "sam"
    assert second.json()["data"]["user"]["username"] == "sam2"


async def test_register_validation_errors(client):
    resp = await register_user(client, "not-an-email", "abc")
    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert detail["code"] == "VALIDATION_ERROR"
    fields = {f["field"] for f in detail["fields"]}
    assert {"email", "password"} <= fields


async def test_me_change_password_and_logout(client):
    email = f"user_{uuid.uuid4().hex[:6]}@example.com"
    password = "UserInit#123"
    new_password = "UserNew#456"
    await register_user(client, email, password)

    login_resp = await login_user(client, email, password)
    token = login_resp.json()["data"]["accessToken"]
    headers = {"Authorization": f"Bearer {token}"}

    me_resp = await client.get("/api/auth/me", headers=headers)
    assert me_resp.status_code == 200
    assert me_resp.json()["data"]["email"] == email

    wrong_current = await client.post(
        "/api/auth/change-password",
        json={"currentPassword": "nope", "newPassword": new_password},
        headers=headers,
    )
    assert wrong_current.status_code == 400
    assert wrong_current.json()["detail"]["code"] == "INVALID_PASSWORD"

    change_resp = await client.post(
        "/api/auth/change-password",
        json={"currentPassword": password, "newPassword": new_password},
        headers=headers,
    )
    assert change_resp.status_code == 200
    assert change_resp.json()["data"]["ok"] is True

    # Old password should fail, new password succeeds
    assert (await login_user(client, email, password)).status_code == 401
    assert (await login_user(client, email, new_password)).status_code == 200

    logout_resp = await client.post("/api/auth/logout")
    assert logout_resp.status_code == 200
    assert logout_resp.json()["success"] is True


async def test_cookie_authenticates_requests(client):
    email = "cookie@example.com"
    await register_user(client, email, "secret1")
    client.cookies.clear()

    login = await login_user(client, email, "secret1")
    assert login.cookies["accessToken"] == login.json()["data"]["accessToken"]
    client.cookies.clear()
    client.cookies.set("accessToken", login.cookies["accessToken"])
    me_resp = await client.get("/api/auth/me")  # Cookie only, no header
    assert me_resp.status_code == 200
    assert me_resp.json()["data"]["email"] == email


async def test_auth_failures(client, create_user):
    client.cookies.clear()
    missing = await client.get("/api/auth/me")
    assert missing.status_code == 401
    assert missing.json()["detail"] == "AUTH_REQUIRED"

    garbage = await client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.token"})
    assert garbage.status_code == 401
    assert garbage.json()["detail"] == "AUTH_INVALID_TOKEN"

    user, password = await create_user()
    token = (await login_user(client, user.email, password)).json()["data"]["accessToken"]
    client.cookies.clear()
    await user.delete()
    gone = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert gone.status_code == 401
    assert gone.json()["detail"] == "AUTH_USER_NOT_FOUND"


async def test_banned_user_is_locked_out(client, create_user):
    user, password = await create_user()
    token = (await login_user(client, user.email, password)).json()["data"]["accessToken"]
    client.cookies.clear()

    user.is_banned = True
    await user.save()

    login = await login_user(client, user.email, password)
    assert login.status_code == 403
    assert login.json()["detail"]["code"] == "ACCOUNT_BANNED"

    me_resp = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me_resp.status_code == 403
    assert me_resp.json()["detail"] == "ACCOUNT_BANNED"


async def test_health(client):
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["database"] == "connected"
    assert data["onlineUsers"] == 0
