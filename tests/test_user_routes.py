from pymongo.errors import PyMongoError

from app.models.mongodb import (
    AccountDocument,
    MenuUploadDocument,
    RatingDocument,
    RestaurantVisitDocument,
    SessionDocument,
    TasteProfileDocument,
    UserDocument,
)
from app.schemas.taste_profile import TasteProfile
from app.services.auth import verify_password
from app.services.taste_profile import save_profile


async def test_onboarding_completed_grants_two_scans_once(client, make_user, auth_headers):
    user = await make_user()
    headers = await auth_headers(user)

    response = await client.post("/user/update-onboarding", headers=headers, json={"status": "COMPLETED"})
    assert response.status_code == 200
    assert response.json()["data"] == {
        "onboardingStatus": "COMPLETED",
        "freeScanCount": 2,
        "emailVerified": True
    }

    response = await client.post("/user/update-onboarding", headers=headers, json={"status": "SKIPPED"})
    assert response.json()["data"]["onboardingStatus"] == "COMPLETED"
    assert response.json()["data"]["freeScanCount"] == 2


async def test_onboarding_skipped_grants_one_scan(client, make_user, auth_headers):
    user = await make_user()

    response = await client.post(
        "/user/update-onboarding",
        headers=await auth_headers(user),
        json={"status": "SKIPPED"}
    )

    assert response.json()["data"]["freeScanCount"] == 1
    assert (await UserDocument.get(user.id)).free_scan_count == 1


async def test_onboarding_rejects_other_status(client, make_user, auth_headers):
    user = await make_user()

    response = await client.post(
        "/user/update-onboarding",
        headers=await auth_headers(user),
        json={"status": "NOT_STARTED"}
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Invalid status"}


async def test_onboarding_status(client, make_user, auth_headers):
    user = await make_user(free_scan_count=3)

    response = await client.get("/user/onboarding-status", headers=await auth_headers(user))

    assert response.json()["data"]["onboardingStatus"] == "NOT_STARTED"
    assert response.json()["data"]["freeScanCount"] == 3


async def test_update_profile_name_and_password(client, make_user, auth_headers):
    user = await make_user()
    headers = await auth_headers(user)

    response = await client.put("/user/profile", headers=headers, json={
        "name": "Annie",
        "currentPassword": "wrong999",
        "newPassword": "newpass99"
    })
    assert response.status_code == 400

    response = await client.put("/user/profile", headers=headers, json={
        "name": "Annie",
        "currentPassword": "pw123456",
        "newPassword": "newpass99"
    })
    assert response.status_code == 200
    assert response.json()["user"]["name"] == "Annie"
    assert verify_password("newpass99", (await UserDocument.get(user.id)).password_hash)


async def test_delete_account_requires_reason(client, make_user, auth_headers):
    user = await make_user()
    headers = await auth_headers(user)

    response = await client.request("DELETE", "/user/delete-account", headers=headers, json={"reason": "  "})
    assert response.status_code == 400

    response = await client.delete("/user/delete-account", headers=headers)
    assert response.status_code == 400
    assert await UserDocument.get(user.id) is not None


async def test_delete_account_cascades(client, make_user, auth_headers):
    user = await make_user()
    other = await make_user(email="bob@example.com", name="Bob")
    headers = await auth_headers(user)
    await save_profile(user.id, TasteProfile())
    menu = MenuUploadDocument(user_id=user.id)
    await menu.insert()
    await RestaurantVisitDocument(user_id=user.id, restaurant_name="Noodle Bar", ordered_dish="Ramen").insert()
    await RatingDocument(user_id=user.id, dish_name="Ramen", rating=4, menu_upload_id=menu.id).insert()
    await AccountDocument(user_id=user.id, provider="google", provider_account_id="google-123").insert()
    await MenuUploadDocument(user_id=other.id).insert()

    response = await client.request(
        "DELETE",
        "/user/delete-account",
        headers=headers,
        json={"reason": "Moving abroad"}
    )

    assert response.status_code == 200
    assert await UserDocument.get(user.id) is None
    for model in (
        TasteProfileDocument,
        MenuUploadDocument,
        RestaurantVisitDocument,
        RatingDocument,
        SessionDocument,
        AccountDocument,
    ):
        assert await model.find(model.user_id == user.id).count() == 0
    assert await MenuUploadDocument.find(MenuUploadDocument.user_id == other.id).count() == 1

    response = await client.get("/auth/me", headers=headers)
    assert response.status_code == 401
    response = await client.get("/auth/check-session", headers=headers)
    assert response.json()["valid"] is False


async def test_delete_account_database_failure(client, make_user, auth_headers, monkeypatch):
    user = await make_user()
    headers = await auth_headers(user)

    async def failing_delete(self, *args, **kwargs):
        raise PyMongoError("write failed")

    monkeypatch.setattr(UserDocument, "delete", failing_delete)

    response = await client.request(
        "DELETE",
        "/user/delete-account",
        headers=headers,
        json={"reason": "Moving abroad"}
    )

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Failed to delete account"}
    assert await UserDocument.get(user.id) is not None
