from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class STTProviderName(str, Enum):
    WHISPER_LOCAL = "whisper_local"
    HUGGINGFACE = "huggingface"
    AZURE = "azure"
    GOOGLE = "google"
    AWS = "aws"


class TTSProviderName(str, Enum):
    ELEVENLABS = "elevenlabs"
    ALLTALK = "alltalk"
    HUGGINGFACE = "huggingface"


class VisionProviderName(str, Enum):
    OPENAI = "openai"
    HUGGINGFACE = "huggingface"


def _env_str(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class STTConfig:
    provider: str = STTProviderName.HUGGINGFACE.value
    api_key: str = ""
    base_url: str = "https://router.huggingface.co/hf-inference/models/"
    model: str = "openai/whisper-large-v3-turbo"
    default_language: str = "en"
    timeout_s: float = 30.0
    sample_rate: int = 16000

    @staticmethod
    def from_env() -> "STTConfig":
        return STTConfig(
            provider=_env_str("STT_PROVIDER", STTProviderName.HUGGINGFACE.value).lower(),
            api_key=_env_str("HF_TOKEN"),
            base_url=_env_str("STT_BASE_URL", "https://router.huggingface.co/hf-inference/models/"),
            model=_env_str("STT_MODEL", "openai/whisper-large-v3-turbo"),
            default_language=_env_str("STT_LANGUAGE", "en"),
            timeout_s=float(os.getenv("STT_TIMEOUT_S", "30")),
        )


@dataclass(frozen=True)
class TTSConfig:
    provider: str = TTSProviderName.ELEVENLABS.value
    api_key: str = ""

    # ElevenLabs
    elevenlabs_base_url: str = "https://api.elevenlabs.io/v1"
    elevenlabs_voice_id: str = "dCnu06FiOZma2KVNUoPZ"
    elevenlabs_model_id: Optional[str] = "eleven_multilingual_v2"
    output_format: str = "mp3_44100_128"  # mp3_44100_128 is a common default

    # AllTalk (local server)
    alltalk_url: str = "http://127.0.0.1:7851"
    alltalk_endpoint_path: str = "/api/tts-generate"
    alltalk_voice: str = "male_01.wav"
    alltalk_fetch_delay_s: float = 0.3

    # HuggingFace router / inference
    huggingface_url: str = "https://router.huggingface.co/fal-ai/fal-ai/kokoro/american-english"

    default_language: str = "en"
    speech_rate: float = 1.0
    timeout_s: float = 20.0
    enable_caching: bool = True
    max_cache_size: int = 50

    @property
    def default_voice(self) -> str:
        if self.provider == TTSProviderName.ALLTALK.value:
            return self.alltalk_voice
        if self.provider == TTSProviderName.HUGGINGFACE.value:
            return "default"
        return self.elevenlabs_voice_id

    def alltalk_generate_url(self) -> str:
        return self.alltalk_url.rstrip("/") + "/" + self.alltalk_endpoint_path.lstrip("/")

    @staticmethod
    def from_env(provider: Optional[str] = None) -> "TTSConfig":
        provider = (provider or _env_str("TTS_PROVIDER", TTSProviderName.ELEVENLABS.value)).lower()
        if provider == TTSProviderName.HUGGINGFACE.value:
            api_key = _env_str("HF_TOKEN")
        else:
            api_key = _env_str("ELEVENLABS_API_KEY")

        return TTSConfig(
            provider=provider,
            api_key=api_key,
            elevenlabs_voice_id=_env_str("ELEVENLABS_VOICE_ID", "dCnu06FiOZma2KVNUoPZ"),
            elevenlabs_model_id=_env_str("ELEVENLABS_MODEL_ID", "eleven_multilingual_v2") or None,
            output_format=_env_str("ELEVENLABS_OUTPUT_FORMAT", "mp3_44100_128"),
            alltalk_url=_env_str("ALLTALK_URL", "http://127.0.0.1:7851"),
            alltalk_voice=_env_str("ALLTALK_VOICE", "male_01.wav"),
            huggingface_url=_env_str(
                "HF_TTS_URL", "https://router.huggingface.co/fal-ai/fal-ai/kokoro/american-english"
            ),
            default_language=_env_str("TTS_LANGUAGE", "en"),
            speech_rate=float(os.getenv("TTS_SPEED", "1.0")),
            timeout_s=float(os.getenv("TTS_TIMEOUT_S", "20")),
            enable_caching=_env_bool("TTS_CACHE", True),
            max_cache_size=int(os.getenv("TTS_CACHE_SIZE", "50")),
        )


@dataclass(frozen=True)
class VisionConfig:
    provider: str = VisionProviderName.OPENAI.value
    api_key: str = ""
    base_url: str = "https://api.openai.com/v1"
    endpoint_path: str = "/chat/completions"
    model: str = "gpt-4o-mini"
    max_tokens: int = 512
    timeout_s: float = 30.0
    image_size: int = 512

    def full_url(self) -> str:
        return self.base_url.rstrip("/") + "/" + self.endpoint_path.lstrip("/")

    @staticmethod
    def from_env() -> "VisionConfig":
        api_key = _env_str("VISION_API_KEY") or _env_str("OPENAI_API_KEY")
        return VisionConfig(
            provider=_env_str("VISION_PROVIDER", VisionProviderName.OPENAI.value).lower(),
            api_key=api_key,
            base_url=_env_str("VISION_BASE_URL", "https://api.openai.com/v1"),
            model=_env_str("VISION_MODEL", "gpt-4o-mini"),
            max_tokens=int(os.getenv("VISION_MAX_TOKENS", "512")),
            timeout_s=float(os.getenv("VISION_TIMEOUT_S", "30")),
        )
