import pytest

from app.models.mongodb import SpiceLevel, TasteLevel
from app.schemas.taste_profile import TasteProfile
from app.services.taste_profile import get_profile, merge_patch, save_profile
from app.utils.errors import ModelResponseError

PROFILE = {
    "favoriteDishes": ["pad thai", "  ", "ramen"],
    "dislikedIngredients": ["cilantro"],
    "dietaryRestrictions": {"vegetarian": True, "glutenFree": True},
    "spicePreference": "hot",
    "tastePreferences": {"umami": "like", "bitter": "dislike"},
    "cuisinePreferences": ["thai"],
    "allergies": ["peanuts"],
    "additionalNotes": "Small plates"
}


def test_merge_patch_replaces_named_fields_and_ignores_unknown():
    current = TasteProfile.model_validate(PROFILE)

    merged = merge_patch(current, {
        "spicePreference": "very-hot",
        "tastePreferences": {"sweet": "like"},
        "mysteryField": 42
    })

    assert merged.spice_preference == SpiceLevel.VERY_HOT
    assert merged.taste_preferences.sweet == TasteLevel.LIKE
    # Nested objects are replaced whole
    assert merged.taste_preferences.umami == TasteLevel.NEUTRAL
    assert merged.allergies == ["peanuts"]


def test_merge_patch_rejects_invalid_values():
    current = TasteProfile.model_validate(PROFILE)

    with pytest.raises(ModelResponseError):
        merge_patch(current, {"spicePreference": "lava"})


async def test_get_taste_profile_defaults(client, make_user, auth_headers):
    user = await make_user()

    response = await client.get("/profile/taste", headers=await auth_headers(user))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["spicePreference"] == "medium"
    assert data["favoriteDishes"] == []
    assert data["dietaryRestrictions"]["glutenFree"] is False


async def test_save_taste_profile_round_trip(client, make_user, auth_headers):
    user = await make_user()
    headers = await auth_headers(user)

    response = await client.post("/profile/taste", headers=headers, json=PROFILE)
    assert response.status_code == 200
    assert response.json()["data"]["favoriteDishes"] == ["pad thai", "ramen"]

    response = await client.post("/profile/taste", headers=headers, json={**PROFILE, "spicePreference": "mild"})
    assert response.json()["data"]["spicePreference"] == "mild"

    stored = await get_profile(user.id)
    assert stored.spice_preference == SpiceLevel.MILD
    assert stored.dietary_restrictions.gluten_free is True


async def test_save_taste_profile_rejects_bad_enum(client, make_user, auth_headers):
    user = await make_user()

    response = await client.post(
        "/profile/taste",
        headers=await auth_headers(user),
        json={**PROFILE, "spicePreference": "nuclear"}
    )

    assert response.status_code == 400
    assert await get_profile(user.id) is None


async def test_update_from_rating(client, make_user, auth_headers, genai_client):
    user = await make_user()
    await save_profile(user.id, TasteProfile.model_validate(PROFILE))
    genai_client.models.replies.append('{"favoriteDishes": ["pad thai", "ramen", "laksa"], "unknown": true}')

    response = await client.post(
        "/profile/update-from-rating",
        headers=await auth_headers(user),
        json={"dish": "Laksa", "rating": 5}
    )

    assert response.status_code == 200
    assert response.json()["data"]["favoriteDishes"] == ["pad thai", "ramen", "laksa"]
    assert (await get_profile(user.id)).favorite_dishes == ["pad thai", "ramen", "laksa"]
    assert "Laksa" in genai_client.models.calls[0]["contents"]


async def test_update_from_rating_keeps_profile_on_bad_patch(client, make_user, auth_headers, genai_client):
    user = await make_user()
    await save_profile(user.id, TasteProfile.model_validate(PROFILE))
    genai_client.models.replies.append('{"spicePreference": "lava"}')

    response = await client.post(
        "/profile/update-from-rating",
        headers=await auth_headers(user),
        json={"dish": "Laksa", "rating": 1}
    )

    assert response.status_code == 500
    assert (await get_profile(user.id)).spice_preference == SpiceLevel.HOT


async def test_update_from_rating_without_profile(client, make_user, auth_headers, genai_client):
    user = await make_user()

    response = await client.post(
        "/profile/update-from-rating",
        headers=await auth_headers(user),
        json={"dish": "Laksa", "rating": 4}
    )

    assert response.status_code == 404
    assert genai_client.models.calls == []
