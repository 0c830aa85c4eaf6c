# voice_relay/ui/streamlit_app.py
from __future__ import annotations

import os
import time

import streamlit as st

from voice_relay.ui.api_client import ApiClient
from voice_relay.ui.pipeline import CommandOutcome, PipelineError, PlaybackGuard, VoiceCommandPipeline

st.set_page_config(page_title="Voice Relay", page_icon="🎙️", layout="centered")

st.markdown("## 🎙️ Voice Relay")
st.caption("Flow: Record → Transcribe → Understand → Execute → (optional) Speak")

# ----------------------------
# Session state
# ----------------------------
if "api_base_url" not in st.session_state:
    st.session_state.api_base_url = os.getenv("VOICE_RELAY_API_URL", "http://localhost:8000")

if "outcome" not in st.session_state:
    st.session_state.outcome = None  # type: ignore

if "error" not in st.session_state:
    st.session_state.error = ""

if "speech" not in st.session_state:
    st.session_state.speech = None  # type: ignore

# ----------------------------
# Sidebar
# ----------------------------
with st.sidebar:
    st.header("Settings")
    st.session_state.api_base_url = st.text_input("API Base URL", st.session_state.api_base_url)

    if st.button("Health", use_container_width=True):
        try:
            st.success(ApiClient(st.session_state.api_base_url).health())
        except Exception as e:
            st.error(str(e))

api = ApiClient(st.session_state.api_base_url)
pipeline = VoiceCommandPipeline(api)

# the guard must survive reruns to see an in-flight playback
if "playback" not in st.session_state or st.session_state.playback.api.base_url != api.base_url:
    st.session_state.playback = PlaybackGuard(api)
playback: PlaybackGuard = st.session_state.playback

# ----------------------------
# Main
# ----------------------------
audio = st.audio_input("Record your voice command", sample_rate=16000)

send_clicked = st.button("📨 Send Command", use_container_width=True, disabled=audio is None)

if send_clicked and audio is not None:
    st.session_state.error = ""
    st.session_state.outcome = None
    st.session_state.speech = None
    with st.spinner("Processing..."):
        try:
            st.session_state.outcome = pipeline.run(
                audio_bytes=audio.getvalue(),
                filename=f"voice_{int(time.time())}.wav",
                content_type="audio/wav",
            )
        except PipelineError as e:
            st.session_state.error = f"{e.stage}: {e.message}"

if st.session_state.error:
    st.error(st.session_state.error)

outcome: CommandOutcome | None = st.session_state.outcome
if outcome is not None:
    st.divider()
    with st.chat_message("user"):
        st.markdown(f"**Transcript:** {outcome.transcript}")

    with st.chat_message("assistant"):
        intent = outcome.intent
        st.markdown(
            f"**Intent:** `{intent.action}` · {intent.title or '_(untitled)_'}"
            + (f" · ⏰ {intent.time}" if intent.time else "")
            + f" · confidence {intent.confidence:.2f}"
        )
        if intent.details:
            st.caption(intent.details)
        label = "**Result (mock):**" if outcome.execution.mock else "**Result:**"
        st.markdown(f"{label} {outcome.execution.result}")

    if st.button("🔊 Speak result", use_container_width=True, disabled=playback.busy):
        try:
            audio_bytes = playback.speak(outcome.execution.result)
            if audio_bytes is not None:
                st.session_state.speech = audio_bytes
        except PipelineError as e:
            st.error(f"{e.stage}: {e.message}")

    if st.session_state.speech:
        st.audio(st.session_state.speech, format="audio/mpeg", autoplay=True)
