from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

import streamlit as st
from dotenv import load_dotenv

from media_providers.core.config import TTSConfig
from media_providers.core.status import ServerStatus, check_server

load_dotenv()

T = TypeVar("T")


@st.cache_data(ttl=5)
def _get_alltalk_status_cached(base_url: str) -> ServerStatus:
    return check_server(base_url)


def run_async(fn: Callable[[], Awaitable[T]]) -> T:
    """Run one coroutine on a fresh event loop (Streamlit scripts are synchronous)."""
    return asyncio.run(fn())


async def run_and_close(service: Any, fn: Callable[[Any], Awaitable[T]]) -> T:
    """Call fn(service) and always release the service's transport and cache."""
    try:
        return await fn(service)
    finally:
        aclose = getattr(service, "aclose", None)
        if aclose is not None:
            await aclose()


def render_alltalk_status_sidebar(title: str = "Local TTS Status (AllTalk)") -> ServerStatus:
    """
    Sidebar widget:
      - Shows whether the local AllTalk server answers
      - Refresh button re-probes immediately

    Returns: status
    """
    st.divider()
    st.subheader(title)

    cfg = TTSConfig.from_env()
    status = _get_alltalk_status_cached(cfg.alltalk_url)

    if status.ok:
        st.success("AllTalk is running")
        st.caption(f"Base URL: {status.base_url}")
        st.caption(f"Default voice: {cfg.alltalk_voice}")
    else:
        st.warning("AllTalk is not running (or not reachable).")
        st.caption(f"Base URL: {status.base_url}")
        st.markdown("**How to fix**")
        st.caption("Start the AllTalk server, or set `ALLTALK_URL` in `.env`, then refresh.")

        with st.expander("Details (debug)"):
            st.write(status.error or "No additional error details.")

    if st.button("Refresh status", use_container_width=True):
        _get_alltalk_status_cached.clear()
        st.rerun()

    return status
