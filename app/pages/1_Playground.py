from __future__ import annotations

import streamlit as st
from dotenv import load_dotenv

from media_providers.core.audio import decode_audio, encode_wav
from media_providers.core.errors import (
    ArgumentError,
    ConfigurationError,
    MediaServiceError,
    RequestTimeoutError,
    UnavailableError,
)
from media_providers.core.factory import get_stt_provider, get_tts_provider, get_vision_provider
from media_providers.core.metrics import Timer
from ui.common import render_alltalk_status_sidebar, run_and_close, run_async

load_dotenv()

st.set_page_config(page_title="Playground | Media Providers", page_icon="🎙️", layout="wide")

st.title("✅ Playground: STT · TTS · Vision")
st.caption("Pick a capability and provider, run one request, and inspect the result and latency.")

if "last_result" not in st.session_state:
    st.session_state["last_result"] = None

# ---- Sidebar controls ----
with st.sidebar:
    st.header("Capability")
    capability = st.radio("Capability", ["Text-to-Speech", "Speech-to-Text", "Vision"], label_visibility="collapsed")

    if capability == "Text-to-Speech":
        tts_choice = st.selectbox("TTS Provider", ["elevenlabs", "alltalk", "huggingface"], index=0)
        speed = st.slider("Speed", min_value=0.25, max_value=2.0, value=1.0, step=0.05)
        synthesize_twice = st.checkbox(
            "Synthesize twice",
            value=True,
            help="The second call should be served from the response cache.",
        )
        if tts_choice == "alltalk":
            render_alltalk_status_sidebar()
    elif capability == "Speech-to-Text":
        stt_choice = st.selectbox("STT Provider", ["huggingface"], index=0)
        expected_text = st.text_input("Expected text (optional)", value="")
    else:
        vision_choice = st.selectbox("Vision Provider", ["openai", "huggingface"], index=0)
        system_prompt = st.text_area("System prompt (optional)", value="You are a helpful language tutor.", height=100)


async def _run_tts(text: str) -> dict:
    timer = Timer()
    tts = get_tts_provider(tts_choice)
    tts.set_speed(speed)

    async def work(service):
        clip = await timer.measure_async("tts_ms", lambda: service.synthesize(text))
        if synthesize_twice:
            await timer.measure_async("tts_cached_ms", lambda: service.synthesize(text))
        return encode_wav(clip), clip.duration

    wav, duration = await run_and_close(tts, work)
    return {"kind": "tts", "audio": wav, "duration": duration, "metrics": timer.summary()}


async def _run_stt(audio_bytes: bytes) -> dict:
    timer = Timer()
    stt = get_stt_provider(stt_choice)
    clip = decode_audio(audio_bytes, name="upload")

    async def work(service):
        return await timer.measure_async(
            "stt_ms",
            lambda: service.transcribe_with_confidence(clip, expected_text.strip() or None),
        )

    result = await run_and_close(stt, work)
    return {
        "kind": "stt",
        "text": result.text,
        "confidence": result.confidence,
        "metadata": result.metadata,
        "metrics": timer.summary(),
    }


async def _run_vision(prompt: str, image_bytes: bytes) -> dict:
    timer = Timer()
    vision = get_vision_provider(vision_choice)

    async def work(service):
        return await timer.measure_async(
            "vision_ms",
            lambda: service.generate(prompt, image_bytes, system_prompt.strip() or None),
        )

    text = await run_and_close(vision, work)
    return {"kind": "vision", "text": text, "model": vision.model_name(), "metrics": timer.summary()}


# ---- Main UI ----
col1, col2 = st.columns([2, 1], gap="large")

with col1:
    if capability == "Text-to-Speech":
        user_text = st.text_area("Text", value="Hallo! Wie geht es dir heute?", height=120)
    elif capability == "Speech-to-Text":
        upload = st.file_uploader("Audio file", type=["wav", "flac", "ogg", "mp3"])
    else:
        prompt = st.text_area("Prompt", value="What objects do you see? Answer with short nouns.", height=100)
        image_upload = st.file_uploader("Image", type=["png", "jpg", "jpeg"])
    run = st.button("Run", type="primary", use_container_width=True)

with col2:
    st.subheader("Latency Metrics")
    metrics_placeholder = st.empty()

st.divider()

if run:
    try:
        with st.spinner("Running request..."):
            if capability == "Text-to-Speech":
                result = run_async(lambda: _run_tts(user_text))
            elif capability == "Speech-to-Text":
                if upload is None:
                    st.warning("Please upload an audio file.")
                    st.stop()
                result = run_async(lambda: _run_stt(upload.getvalue()))
            else:
                if image_upload is None:
                    st.warning("Please upload an image.")
                    st.stop()
                result = run_async(lambda: _run_vision(prompt, image_upload.getvalue()))
        st.session_state["last_result"] = result

    except ArgumentError as e:
        st.warning(f"**Invalid input:** {e}")
        st.stop()
    except ConfigurationError as e:
        st.error("**Configuration Error**")
        st.markdown(f"""
        The provider rejected or is missing its credential. Please:
        1. Check your `.env` file (`HF_TOKEN`, `ELEVENLABS_API_KEY`, `VISION_API_KEY`)
        2. Restart the app after editing it

        **Error details:** {e}
        """)
        st.stop()
    except UnavailableError as e:
        st.error("**Provider Unavailable**")
        st.markdown(f"The backend is not ready yet (model loading or server down). Retry in a few seconds.\n\n`{e}`")
        st.stop()
    except RequestTimeoutError as e:
        st.error("**Request Timeout**")
        st.markdown(f"**Error details:** {e}")
        st.stop()
    except MediaServiceError as e:
        st.error(f"**{type(e).__name__}**")
        st.markdown(f"```\n{e}\n```")
        st.stop()

selected = st.session_state.get("last_result")

if selected:
    if selected["kind"] == "tts":
        st.subheader("Audio Output")
        st.caption(f"Duration: {selected['duration']:.2f}s")
        st.audio(selected["audio"], format="audio/wav")
    elif selected["kind"] == "stt":
        st.subheader("Transcript")
        st.write(selected["text"])
        st.metric("Confidence", f"{selected['confidence']:.2f}")
        if "accuracy" in selected["metadata"]:
            st.metric("Accuracy vs. expected", f"{selected['metadata']['accuracy']:.2f}")
    else:
        st.subheader("Model Response")
        st.caption(f"Model: {selected['model']}")
        st.write(selected["text"])

    with metrics_placeholder.container():
        for name, value in selected["metrics"].items():
            st.metric(name.replace("_ms", " (ms)"), f"{value:.0f}")

    with st.expander("Raw metrics"):
        st.json(selected["metrics"])
else:
    st.info("No runs yet. Choose a provider and click **Run**.")
