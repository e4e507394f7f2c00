"""Text-to-image generation through the SiliconFlow images API."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from config.settings import AppConfig
from modules.pipelines.arguments import GenerationRequest

logger = logging.getLogger(__name__)


class UpstreamError(RuntimeError):
    """The SiliconFlow API answered with an error status or was unreachable."""

    def __init__(self, status: Optional[int], message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message


class UpstreamShapeError(RuntimeError):
    """The SiliconFlow API answered successfully but without an image URL."""


def _non_empty_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


@dataclass(frozen=True, slots=True)
class ImageGenerationResponse:
    """Typed view over the success body of an image generation call."""

    raw: Any
    image_url: Optional[str]
    seed: Optional[int]

    @classmethod
    def from_payload(cls, payload: Any) -> "ImageGenerationResponse":
        if not isinstance(payload, dict):
            return cls(raw=payload, image_url=None, seed=None)

        image_url = None
        images = payload.get("images")
        if isinstance(images, list) and images:
            first = images[0]
            if isinstance(first, dict):
                image_url = _non_empty_str(first.get("url"))

        seed = payload.get("seed")
        if isinstance(seed, bool) or not isinstance(seed, int):
            seed = None
        return cls(raw=payload, image_url=image_url, seed=seed)


@dataclass(frozen=True, slots=True)
class UpstreamErrorBody:
    """Typed view over an error body, used only to find a readable message."""

    message: Optional[str]

    @classmethod
    def from_payload(cls, payload: Any) -> "UpstreamErrorBody":
        if not isinstance(payload, dict):
            return cls(message=None)

        message = _non_empty_str(payload.get("message"))
        if message is None:
            error = payload.get("error")
            if isinstance(error, dict):
                message = _non_empty_str(error.get("message"))
            else:
                message = _non_empty_str(error)
        if message is None:
            message = _non_empty_str(payload.get("detail"))
        return cls(message=message)


def _json_or_none(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


@dataclass(slots=True)
class ImageResult:
    """Result of one successful generation."""

    prompt: str
    resolution: str
    image_url: str
    seed: Optional[int]
    raw_response: Any


class Text2ImageService:
    """Facade around the SiliconFlow image generation endpoint."""

    def __init__(self, config: AppConfig, session: Optional[requests.Session] = None) -> None:
        self.config = config
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {config.siliconflow_key or ''}",
                "Content-Type": "application/json",
            }
        )

    def build_payload(self, request: GenerationRequest) -> dict[str, Any]:
        """Return the JSON body for the generation endpoint."""
        payload: dict[str, Any] = {
            "model": self.config.model_id,
            "prompt": request.prompt,
            "image_size": request.resolution.value,
            "batch_size": self.config.batch_size,
            "num_inference_steps": self.config.num_inference_steps,
            "guidance_scale": self.config.guidance_scale,
        }
        if request.seed is not None:
            payload["seed"] = request.seed
        return payload

    def generate(self, request: GenerationRequest) -> ImageResult:
        """Generate an image and return its URL.

        Raises UpstreamError on HTTP or network failures and
        UpstreamShapeError when a success body carries no image URL.
        """
        payload = self.build_payload(request)
        logger.debug("Sending payload to SiliconFlow: %s", json.dumps(payload, ensure_ascii=False))

        try:
            response = self._session.post(
                self.config.image_generation_url,
                json=payload,
                timeout=self.config.request_timeout,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            failed = exc.response
            status = failed.status_code if failed is not None else None
            body = UpstreamErrorBody.from_payload(_json_or_none(failed) if failed is not None else None)
            raise UpstreamError(status, body.message or str(exc)) from exc
        except requests.RequestException as exc:
            raise UpstreamError(None, str(exc)) from exc

        # 非 JSON 响应体按"无字段"处理
        parsed = ImageGenerationResponse.from_payload(_json_or_none(response))
        logger.debug("Received response from SiliconFlow: %s", parsed.raw)
        if parsed.image_url is None:
            logger.error("Failed to extract image URL from response: %s", parsed.raw)
            raise UpstreamShapeError(
                "SiliconFlow API returned a response, but it did not contain an image URL."
            )

        return ImageResult(
            prompt=request.prompt,
            resolution=request.resolution.value,
            image_url=parsed.image_url,
            seed=parsed.seed,
            raw_response=parsed.raw,
        )
