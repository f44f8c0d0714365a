import pytest

from skillswap.models.rating import Rating
from skillswap.models.review import Review
from skillswap.models.swap_request import SwapRequest


pytestmark = pytest.mark.asyncio


async def test_profile_read_and_partial_update(client, member, create_skill):
    user, headers = await member(full_name="Ada", location="London")
    await create_skill(user, "Python")
    await create_skill(user, "Pottery", "wanted")

    resp = await client.get("/api/users/profile", headers=headers)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["name"] == "Ada"
    assert data["email"] == user.email
    assert [s["name"] for s in data["offeredSkills"]] == ["Python"]
    assert [s["name"] for s in data["wantedSkills"]] == ["Pottery"]
    assert data["avgRating"] is None
    assert data["totalRatings"] == 0

    upd = await client.put(
        "/api/users/profile",
        headers=headers,
        json={"bio": "Curious", "availability": "evenings", "isPublic": False, "location": ""},
    )
    assert upd.status_code == 200
    data = upd.json()["data"]
    assert data["bio"] == "Curious"
    assert data["availability"] == "evenings"
    assert data["isPublic"] is False
    assert data["location"] is None
    assert data["name"] == "Ada"  # untouched


async def test_profile_update_rejects_unknown_availability(client, member):
    _, headers = await member()
    resp = await client.put("/api/users/profile", headers=headers, json={"availability": "never"})
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "VALIDATION_ERROR"


async def test_search_filters_and_paginates(client, member, create_user, create_admin, create_skill):
    viewer, headers = await member(full_name="Viewer")
    await create_skill(viewer, "Python")

    alice, _ = await create_user(full_name="Alice")
    bob, _ = await create_user(full_name="Bob")
    carol, _ = await create_user(full_name="Carol", is_public=False)
    dave, _ = await create_user(full_name="Dave", is_banned=True)
    admin, _ = await create_admin(full_name="Eve Admin")
    await create_skill(alice, "Python for Data")
    await create_skill(bob, "Guitar")
    await create_skill(carol, "Python")
    await create_skill(dave, "Python")
    await create_skill(admin, "Python")

    resp = await client.get("/api/users/search", headers=headers)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert [u["name"] for u in data["users"]] == ["Alice", "Bob"]
    assert data["pagination"] == {"page": 1, "limit": 10, "total": 2, "totalPages": 1}
    assert "email" not in data["users"][0]

    resp = await client.get("/api/users/search", headers=headers, params={"skill": "python"})
    assert [u["name"] for u in resp.json()["data"]["users"]] == ["Alice"]
    assert resp.json()["data"]["users"][0]["offeredSkills"][0]["name"] == "Python for Data"

    resp = await client.get("/api/users/search", headers=headers, params={"page": 2, "limit": 1})
    data = resp.json()["data"]
    assert [u["name"] for u in data["users"]] == ["Bob"]
    assert data["pagination"]["totalPages"] == 2


async def test_search_limit_bounds(client, member):
    _, headers = await member()
    assert (await client.get("/api/users/search", headers=headers, params={"limit": 51})).status_code == 400
    assert (await client.get("/api/users/search", headers=headers, params={"limit": 0})).status_code == 400


async def test_public_profile_with_reviews(client, member, create_user, create_skill):
    viewer, headers = await member()
    alice, _ = await create_user(full_name="Alice")
    skill_a = await create_skill(alice, "Piano")
    skill_v = await create_skill(viewer, "Spanish")
    swap = await SwapRequest.create(
        requester=viewer, offered_skill=skill_v, wanted_skill=skill_a, status="completed"
    )
    await Rating.create(swap=swap, rater=viewer, rated=alice, rating=5, feedback="Great teacher")
    await Review.create(user=alice, reviewer=viewer, swap=swap, rating=5, comment="Great teacher")

    resp = await client.get(f"/api/users/{alice.id}", headers=headers)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["name"] == "Alice"
    assert "email" not in data
    assert data["avgRating"] == 5.0
    assert data["totalRatings"] == 1
    assert data["reviews"][0]["comment"] == "Great teacher"
    assert data["reviews"][0]["reviewerId"] == viewer.id


async def test_hidden_profiles(client, member, create_user, create_admin, auth_header_factory):
    _, headers = await member()
    private, private_pw = await create_user(is_public=False)
    banned, _ = await create_user(is_banned=True)

    assert (await client.get(f"/api/users/{private.id}", headers=headers)).status_code == 404
    assert (await client.get(f"/api/users/{banned.id}", headers=headers)).status_code == 404
    assert (await client.get("/api/users/999999", headers=headers)).status_code == 404

    # Owner and admins still see them
    own_headers = await auth_header_factory(private.email, private_pw)
    assert (await client.get(f"/api/users/{private.id}", headers=own_headers)).status_code == 200

    admin, admin_pw = await create_admin()
    admin_headers = await auth_header_factory(admin.email, admin_pw)
    assert (await client.get(f"/api/users/{banned.id}", headers=admin_headers)).status_code == 200
