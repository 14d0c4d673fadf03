from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, Mapping, Optional

import httpx

from media_providers.core.bridge import RequestBridge
from media_providers.core.config import (
    STTConfig,
    STTProviderName,
    TTSConfig,
    TTSProviderName,
    VisionConfig,
    VisionProviderName,
)
from media_providers.core.errors import ArgumentError, NotSupportedError
from media_providers.core.interfaces import LocalTranscriber, STTProvider, TTSProvider, VisionProvider
from media_providers.core.scheduler import AsyncioScheduler, Scheduler
from media_providers.providers.stt_huggingface import HuggingFaceSTT
from media_providers.providers.stt_whisper_local import LocalWhisperSTT
from media_providers.providers.tts_alltalk import AllTalkTTS
from media_providers.providers.tts_elevenlabs import ElevenLabsTTS
from media_providers.providers.tts_huggingface import HuggingFaceTTS
from media_providers.providers.vision_openai import OpenAIVision

logger = logging.getLogger(__name__)

_PROVIDERS_NEEDING_KEY = {
    "stt": {
        STTProviderName.HUGGINGFACE.value,
        STTProviderName.AZURE.value,
        STTProviderName.GOOGLE.value,
        STTProviderName.AWS.value,
    },
    "tts": {TTSProviderName.ELEVENLABS.value},
    "vision": {VisionProviderName.OPENAI.value, VisionProviderName.HUGGINGFACE.value},
}


def _key(name: Any) -> str:
    return str(getattr(name, "value", name) or "").strip().lower()


def _resolve(
    capability: str,
    requested: str,
    builders: Mapping[str, Callable[[], Any]],
    fallbacks: Mapping[str, str],
) -> str:
    """
    Pick the registered adapter name for `requested`.

    Explicit fallbacks warn and substitute. An unknown provider is
    substituted (with a warning) only when exactly one adapter is registered;
    otherwise it is rejected.
    """
    if requested in builders:
        return requested

    if requested in fallbacks:
        substitute = fallbacks[requested]
        logger.warning(
            f"{capability} provider '{requested}' not yet implemented. Falling back to {substitute}."
        )
        return substitute

    if len(builders) == 1:
        only = next(iter(builders))
        logger.warning(f"{capability} provider '{requested}' is not supported. Using {only} only.")
        return only

    available = ", ".join(sorted(builders))
    raise NotSupportedError(
        f"{capability} provider '{requested}' is not supported. Available providers: {available}"
    )


def requires_api_key(capability: str, provider: Any) -> bool:
    return _key(provider) in _PROVIDERS_NEEDING_KEY.get(capability, set())


def requires_local_transcriber(provider: Any) -> bool:
    return _key(provider) == STTProviderName.WHISPER_LOCAL.value


class _ServiceFactory:
    capability = ""

    def __init__(self, scheduler: Scheduler, http_client: Optional[httpx.AsyncClient] = None) -> None:
        if scheduler is None:
            raise ArgumentError(f"{type(self).__name__} requires a scheduler.")
        self._scheduler = scheduler
        self._http_client = http_client

    def _bridge(self, timeout_s: float) -> RequestBridge:
        return RequestBridge(self._scheduler, timeout_s=timeout_s, client=self._http_client)

    def _warn_missing_key(self, provider: str, api_key: str) -> None:
        if requires_api_key(self.capability, provider) and not api_key:
            logger.warning(f"{self.capability} provider '{provider}' needs an API key but none is configured.")


class STTServiceFactory(_ServiceFactory):
    capability = "stt"

    FALLBACKS = {
        STTProviderName.AZURE.value: STTProviderName.HUGGINGFACE.value,
        STTProviderName.GOOGLE.value: STTProviderName.HUGGINGFACE.value,
        STTProviderName.AWS.value: STTProviderName.HUGGINGFACE.value,
    }

    def __init__(
        self,
        scheduler: Scheduler,
        http_client: Optional[httpx.AsyncClient] = None,
        local_transcriber: Optional[LocalTranscriber] = None,
    ) -> None:
        super().__init__(scheduler, http_client)
        self._local_transcriber = local_transcriber

    def create(self, config: STTConfig) -> STTProvider:
        if config is None:
            raise ArgumentError("STT config is required.")

        builders: dict[str, Callable[[], STTProvider]] = {
            STTProviderName.WHISPER_LOCAL.value: lambda: self._local(config),
            STTProviderName.HUGGINGFACE.value: lambda: HuggingFaceSTT(config, self._bridge(config.timeout_s)),
        }
        name = _resolve("STT", _key(config.provider), builders, self.FALLBACKS)
        self._warn_missing_key(name, config.api_key)
        logger.info(f"Creating STT service: {name}")
        return builders[name]()

    def _local(self, config: STTConfig) -> STTProvider:
        if self._local_transcriber is None:
            logger.error("A local transcriber is required for the whisper_local provider!")
            raise ArgumentError(
                "whisper_local requires a local transcriber. Pass one to STTServiceFactory "
                "or switch to the huggingface provider."
            )
        return LocalWhisperSTT(config, self._local_transcriber)


class TTSServiceFactory(_ServiceFactory):
    capability = "tts"

    def create(self, config: TTSConfig) -> TTSProvider:
        if config is None:
            raise ArgumentError("TTS config is required.")

        builders: dict[str, Callable[[], TTSProvider]] = {
            TTSProviderName.ELEVENLABS.value: lambda: ElevenLabsTTS(config, self._bridge(config.timeout_s)),
            TTSProviderName.ALLTALK.value: lambda: AllTalkTTS(
                config, self._bridge(config.timeout_s), self._scheduler
            ),
            TTSProviderName.HUGGINGFACE.value: lambda: HuggingFaceTTS(config, self._bridge(config.timeout_s)),
        }
        name = _resolve("TTS", _key(config.provider), builders, {})
        self._warn_missing_key(name, config.api_key)
        logger.info(f"Creating TTS service: {name}")
        return builders[name]()


class VisionServiceFactory(_ServiceFactory):
    capability = "vision"

    def create(self, config: VisionConfig) -> VisionProvider:
        if config is None:
            raise ArgumentError("Vision config is required.")

        requested = _key(config.provider)
        if requested == VisionProviderName.HUGGINGFACE.value:
            # Same adapter, routed through the HuggingFace OpenAI-compatible endpoint.
            requested = VisionProviderName.OPENAI.value

        builders: dict[str, Callable[[], VisionProvider]] = {
            VisionProviderName.OPENAI.value: lambda: OpenAIVision(config, self._bridge(config.timeout_s)),
        }
        name = _resolve("Vision", requested, builders, {})
        self._warn_missing_key(name, config.api_key)
        logger.info(f"Creating vision service: {name} ({config.model})")
        return builders[name]()


def get_stt_provider(
    name: str = "",
    scheduler: Optional[Scheduler] = None,
    local_transcriber: Optional[LocalTranscriber] = None,
) -> STTProvider:
    cfg = STTConfig.from_env()
    if name:
        cfg = replace(cfg, provider=_key(name))
    factory = STTServiceFactory(scheduler or AsyncioScheduler(), local_transcriber=local_transcriber)
    return factory.create(cfg)


def get_tts_provider(name: str = "", scheduler: Optional[Scheduler] = None) -> TTSProvider:
    cfg = TTSConfig.from_env(_key(name) or None)
    return TTSServiceFactory(scheduler or AsyncioScheduler()).create(cfg)


def get_vision_provider(name: str = "", scheduler: Optional[Scheduler] = None) -> VisionProvider:
    cfg = VisionConfig.from_env()
    if name:
        cfg = replace(cfg, provider=_key(name))
    return VisionServiceFactory(scheduler or AsyncioScheduler()).create(cfg)
