from __future__ import annotations

import logging
from typing import Optional

from PIL import Image

from media_providers.core.bridge import HttpRequest, RequestBridge
from media_providers.core.config import VisionConfig, VisionProviderName
from media_providers.core.errors import ArgumentError, ConfigurationError, MediaServiceError, ProtocolError
from media_providers.core.imaging import ImageInput, prepare_image, to_data_uri
from media_providers.core.interfaces import VisionProvider
from media_providers.core.normalizer import JsonBody, check_status, classify, extract_message_content
from media_providers.providers.base import BridgedService

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"
HUGGINGFACE_ROUTE_SUFFIX = ":fireworks-ai"


class OpenAIVision(BridgedService, VisionProvider):
    """
    OpenAI-compatible chat completions with one image attached.
    Works against api.openai.com and the HuggingFace router.
    """

    name = "OpenAIVision"

    def __init__(self, config: VisionConfig, bridge: RequestBridge) -> None:
        super().__init__(bridge)
        self._cfg = config

        if not config.api_key:
            logger.warning("[OpenAIVision] API key is not set. Please configure VISION_API_KEY.")

    def model_name(self) -> str:
        model = self._cfg.model or DEFAULT_MODEL
        if self._cfg.provider == VisionProviderName.HUGGINGFACE.value and ":" not in model:
            model += HUGGINGFACE_ROUTE_SUFFIX
        return model

    async def is_available(self) -> bool:
        if not self._cfg.api_key:
            return False
        probe = Image.new("RGB", (2, 2), (128, 128, 128))
        try:
            reply = await self.generate("Reply with 'ok'", probe, "You are a vision assistant.")
        except MediaServiceError as e:
            logger.warning(f"[OpenAIVision] Availability check failed: {e}")
            return False
        return bool(reply)

    async def generate(
        self,
        prompt: str,
        image: ImageInput,
        system_prompt: Optional[str] = None,
    ) -> str:
        prompt = (prompt or "").strip()
        if not prompt:
            raise ArgumentError("OpenAIVision.generate received empty prompt.")
        if image is None:
            raise ArgumentError("OpenAIVision.generate received no image.")
        if not self._cfg.api_key:
            raise ConfigurationError("API key is required for the vision service.")

        self._begin()
        jpeg = prepare_image(image, self._cfg.image_size)

        combined = prompt if not (system_prompt or "").strip() else f"{system_prompt}\n\n{prompt}"
        payload = {
            "model": self.model_name(),
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": combined},
                        {"type": "image_url", "image_url": {"url": to_data_uri(jpeg)}},
                    ],
                }
            ],
            "max_tokens": self._cfg.max_tokens,
        }

        request = HttpRequest(
            method="POST",
            url=self._cfg.full_url(),
            headers={
                "Authorization": f"Bearer {self._cfg.api_key}",
                "Content-Type": "application/json",
            },
            json=payload,
        )

        response = await self._exchange(request)
        check_status(response, "Vision")

        body = classify(response)
        if not isinstance(body, JsonBody):
            raise ProtocolError("Vision response is not JSON.")
        text = extract_message_content(body.document)
        self._ensure_not_cancelled()
        return text
