import httpx
import pytest
from google.genai import errors as genai_errors

from app.models.mongodb import MenuItem
from app.utils.errors import ModelResponseError, ValidationError
from conftest import MENU_REPLY, RECOMMENDATION_REPLY


async def test_scan_menu_sends_image_and_decodes_items(gemini, genai_client):
    genai_client.models.replies.append(f"```json\n{MENU_REPLY}\n```")

    items = await gemini.scan_menu(b"\xff\xd8jpeg-bytes", "image/jpeg")

    assert [item.name for item in items] == ["Pad Thai", "Green Curry", "Mango Sticky Rice"]
    assert items[1].price == "13"
    call = genai_client.models.calls[0]
    assert call["model"] == gemini.vision_model
    assert len(call["contents"]) == 2


async def test_scan_menu_rejects_non_images_without_calling_model(gemini, genai_client):
    with pytest.raises(ValidationError):
        await gemini.scan_menu(b"%PDF-1.7", "application/pdf")

    assert genai_client.models.calls == []


async def test_api_errors_become_model_response_errors(gemini, genai_client):
    genai_client.models.replies.append(
        genai_errors.APIError(503, {"error": {"message": "overloaded", "status": "UNAVAILABLE"}})
    )

    with pytest.raises(ModelResponseError):
        await gemini.scan_menu(b"\xff\xd8jpeg-bytes", "image/jpeg")


@pytest.mark.parametrize("error", [
    httpx.ConnectError("connection refused"),
    httpx.ReadTimeout("timed out"),
])
async def test_transport_errors_become_model_response_errors(gemini, genai_client, error):
    genai_client.models.replies.append(error)

    with pytest.raises(ModelResponseError):
        await gemini.adjust_profile("Pad Thai", 2, {})


async def test_empty_reply_is_a_model_response_error(gemini, genai_client):
    genai_client.models.replies.append("")

    with pytest.raises(ModelResponseError):
        await gemini.adjust_profile("Pad Thai", 5, {})


async def test_recommend_uses_json_mode_and_profile(gemini, genai_client):
    genai_client.models.replies.append(RECOMMENDATION_REPLY)

    recommendations = await gemini.recommend(
        [MenuItem(name="Pad Thai"), MenuItem(name="Green Curry")],
        {"spicePreference": "hot", "allergies": ["peanuts"]},
        mood="comfort food"
    )

    assert [r.score for r in recommendations] == [91, 78, 65]
    call = genai_client.models.calls[0]
    assert call["config"].response_mime_type == "application/json"
    assert "peanuts" in call["contents"]
    assert "comfort food" in call["contents"]
