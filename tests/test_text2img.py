"""Text2ImageService 单元测试。"""

from __future__ import annotations

import pytest
import requests

from modules.pipelines import text2img
from modules.pipelines.arguments import GenerationRequest, Resolution


def build_request(seed=None) -> GenerationRequest:
    return GenerationRequest(prompt="a cat", resolution=Resolution.SQUARE, seed=seed)


def test_session_carries_bearer_credentials(config, make_session):
    session = make_session(body={"images": [{"url": "https://x/img.png"}]})
    text2img.Text2ImageService(config, session=session)

    assert session.headers["Authorization"] == "Bearer sk-test"
    assert session.headers["Content-Type"] == "application/json"


def test_build_payload_uses_config_defaults(config, make_session):
    service = text2img.Text2ImageService(config, session=make_session())

    payload = service.build_payload(build_request())

    assert payload == {
        "model": "black-forest-labs/FLUX.1-schnell",
        "prompt": "a cat",
        "image_size": "1024x1024",
        "batch_size": 1,
        "num_inference_steps": 20,
        "guidance_scale": 7.5,
    }


def test_build_payload_copies_seed(config, make_session):
    service = text2img.Text2ImageService(config, session=make_session())

    assert service.build_payload(build_request(seed=0))["seed"] == 0


def test_generate_returns_image_result(config, make_session):
    body = {"images": [{"url": "https://x/img.png"}], "seed": 42, "timings": {"inference": 1.2}}
    session = make_session(body=body)
    service = text2img.Text2ImageService(config, session=session)

    result = service.generate(build_request(seed=42))

    assert result.image_url == "https://x/img.png"
    assert result.seed == 42
    assert result.prompt == "a cat"
    assert result.resolution == "1024x1024"
    assert result.raw_response == body
    assert session.calls[0]["url"] == "https://api.siliconflow.cn/v1/images/generations"
    assert session.calls[0]["json"]["seed"] == 42
    assert session.calls[0]["timeout"] is None


@pytest.mark.parametrize(
    "body",
    [
        {"data": []},
        {"images": []},
        {"images": [{"b64_json": "..."}]},
        {"images": [{"url": ""}]},
        {"images": ["https://x/img.png"]},
        b"<html>busy</html>",
    ],
)
def test_generate_without_image_url_raises_shape_error(config, make_session, body):
    service = text2img.Text2ImageService(config, session=make_session(body=body))

    with pytest.raises(text2img.UpstreamShapeError):
        service.generate(build_request())


@pytest.mark.parametrize(
    "body, message",
    [
        ({"error": {"message": "bad prompt"}}, "bad prompt"),
        ({"code": 20012, "message": "Model disabled.", "data": None}, "Model disabled."),
        ({"error": "quota exceeded"}, "quota exceeded"),
        ({"detail": "not authenticated"}, "not authenticated"),
    ],
)
def test_generate_http_error_extracts_message(config, make_session, body, message):
    service = text2img.Text2ImageService(config, session=make_session(status=400, body=body))

    with pytest.raises(text2img.UpstreamError) as excinfo:
        service.generate(build_request())

    assert excinfo.value.status == 400
    assert excinfo.value.message == message


def test_generate_http_error_falls_back_to_exception_text(config, make_session):
    service = text2img.Text2ImageService(config, session=make_session(status=503, body=b"upstream down"))

    with pytest.raises(text2img.UpstreamError) as excinfo:
        service.generate(build_request())

    assert excinfo.value.status == 503
    assert "503" in excinfo.value.message


def test_generate_network_error_has_no_status(config, make_session):
    session = make_session(error=requests.ConnectionError("connection refused"))
    service = text2img.Text2ImageService(config, session=session)

    with pytest.raises(text2img.UpstreamError) as excinfo:
        service.generate(build_request())

    assert excinfo.value.status is None
    assert excinfo.value.message == "connection refused"


def test_response_view_ignores_non_integer_seed():
    view = text2img.ImageGenerationResponse.from_payload({"images": [{"url": "u"}], "seed": "42"})

    assert view.image_url == "u"
    assert view.seed is None
