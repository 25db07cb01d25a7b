from datetime import datetime

import httpx
from pymongo.errors import PyMongoError

from app.models.mongodb import MenuUploadDocument, RestaurantVisitDocument, SpiceLevel
from app.schemas.taste_profile import TasteProfile
from app.services import taste_profile
from app.services.taste_profile import get_profile, save_profile


async def test_create_and_list_visits(client, make_user, auth_headers):
    user = await make_user()
    headers = await auth_headers(user)

    await client.post("/diary/visits", headers=headers, json={
        "restaurantName": "Noodle Bar",
        "orderedDish": "Ramen",
        "rating": 4,
        "visitDate": "2024-03-01T19:00:00"
    })
    response = await client.post("/diary/visits", headers=headers, json={
        "restaurantName": "  Thai Garden ",
        "orderedDish": "Pad Thai",
        "visitDate": "2024-04-01T19:00:00"
    })
    assert response.status_code == 200
    assert response.json()["data"]["restaurantName"] == "Thai Garden"

    response = await client.get("/diary/visits", headers=headers)
    visits = response.json()["visits"]
    assert [visit["orderedDish"] for visit in visits] == ["Pad Thai", "Ramen"]


async def test_create_visit_requires_names(client, make_user, auth_headers):
    user = await make_user()

    response = await client.post("/diary/visits", headers=await auth_headers(user), json={
        "restaurantName": "   ",
        "orderedDish": "Ramen"
    })

    assert response.status_code == 400
    assert await RestaurantVisitDocument.find_all().count() == 0


async def test_visits_are_private(client, make_user, auth_headers):
    ann = await make_user()
    bob = await make_user(email="bob@example.com", name="Bob")
    await RestaurantVisitDocument(
        user_id=ann.id,
        restaurant_name="Noodle Bar",
        ordered_dish="Ramen",
        visit_date=datetime(2024, 1, 1)
    ).insert()

    response = await client.get("/diary/visits", headers=await auth_headers(bob))

    assert response.json()["visits"] == []


async def test_visit_from_scan_uses_upload_details(client, make_user, auth_headers):
    user = await make_user()
    menu = MenuUploadDocument(user_id=user.id, restaurant_name="Thai Garden", mood="cozy")
    await menu.insert()

    response = await client.post("/diary/visit", headers=await auth_headers(user), json={
        "menuUploadId": str(menu.id),
        "orderedDish": "Green Curry"
    })

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["restaurantName"] == "Thai Garden"
    assert data["mood"] == "cozy"
    assert data["menuUploadId"] == str(menu.id)


async def test_visit_from_scan_unknown_restaurant(client, make_user, auth_headers):
    user = await make_user()
    menu = MenuUploadDocument(user_id=user.id)
    await menu.insert()

    response = await client.post("/diary/visit", headers=await auth_headers(user), json={
        "menuUploadId": str(menu.id),
        "orderedDish": "Soup"
    })

    assert response.json()["data"]["restaurantName"] == "Unknown Restaurant"


async def test_visit_from_scan_adjusts_profile(client, make_user, auth_headers, genai_client):
    user = await make_user()
    await save_profile(user.id, TasteProfile(spice_preference=SpiceLevel.MILD))
    menu = MenuUploadDocument(user_id=user.id, restaurant_name="Thai Garden")
    await menu.insert()
    genai_client.models.replies.append('{"spicePreference": "hot"}')

    response = await client.post("/diary/visit", headers=await auth_headers(user), json={
        "menuUploadId": str(menu.id),
        "orderedDish": "Jungle Curry",
        "rating": 5
    })

    assert response.status_code == 200
    assert (await get_profile(user.id)).spice_preference == SpiceLevel.HOT


async def test_visit_from_scan_survives_profile_update_failure(client, make_user, auth_headers, genai_client):
    user = await make_user()
    await save_profile(user.id, TasteProfile(spice_preference=SpiceLevel.MILD))
    menu = MenuUploadDocument(user_id=user.id)
    await menu.insert()
    genai_client.models.replies.append("not json at all")

    response = await client.post("/diary/visit", headers=await auth_headers(user), json={
        "menuUploadId": str(menu.id),
        "orderedDish": "Jungle Curry",
        "rating": 2
    })

    assert response.status_code == 200
    assert await RestaurantVisitDocument.find_all().count() == 1
    assert (await get_profile(user.id)).spice_preference == SpiceLevel.MILD


async def test_visit_from_scan_survives_model_connection_error(client, make_user, auth_headers, genai_client):
    user = await make_user()
    await save_profile(user.id, TasteProfile(spice_preference=SpiceLevel.MILD))
    menu = MenuUploadDocument(user_id=user.id)
    await menu.insert()
    genai_client.models.replies.append(httpx.ConnectError("connection refused"))

    response = await client.post("/diary/visit", headers=await auth_headers(user), json={
        "menuUploadId": str(menu.id),
        "orderedDish": "Jungle Curry",
        "rating": 2
    })

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert await RestaurantVisitDocument.find_all().count() == 1
    assert (await get_profile(user.id)).spice_preference == SpiceLevel.MILD


async def test_visit_from_scan_survives_profile_write_failure(
    client, make_user, auth_headers, genai_client, monkeypatch
):
    user = await make_user()
    await save_profile(user.id, TasteProfile(spice_preference=SpiceLevel.MILD))
    menu = MenuUploadDocument(user_id=user.id)
    await menu.insert()
    genai_client.models.replies.append('{"spicePreference": "hot"}')

    async def failing_save(*args, **kwargs):
        raise PyMongoError("write failed")

    monkeypatch.setattr(taste_profile, "save_profile", failing_save)

    response = await client.post("/diary/visit", headers=await auth_headers(user), json={
        "menuUploadId": str(menu.id),
        "orderedDish": "Jungle Curry",
        "rating": 5
    })

    assert response.status_code == 200
    assert await RestaurantVisitDocument.find_all().count() == 1
    assert (await get_profile(user.id)).spice_preference == SpiceLevel.MILD


async def test_visit_from_scan_other_users_menu(client, make_user, auth_headers):
    ann = await make_user()
    bob = await make_user(email="bob@example.com", name="Bob")
    menu = MenuUploadDocument(user_id=ann.id)
    await menu.insert()

    response = await client.post("/diary/visit", headers=await auth_headers(bob), json={
        "menuUploadId": str(menu.id),
        "orderedDish": "Soup"
    })

    assert response.status_code == 404
