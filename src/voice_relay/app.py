# voice_relay/app.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Annotated, Optional

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException
from starlette.responses import JSONResponse, Response

from voice_relay import __version__
from voice_relay.core import VoiceRelay
from voice_relay.core.synthesizer import AUDIO_MEDIA_TYPE
from voice_relay.core.uploads import ensure_single_part, receive_audio
from voice_relay.errors import VoiceRelayError
from voice_relay.schemas import ExecuteRequest, HealthResponse, Intent, TextRequest, TranscriptionResponse
from voice_relay.settings import Settings, settings

logger = logging.getLogger("voice_relay")


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    relay: VoiceRelay = app.state.relay
    await relay.aclose()


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(x) for x in err.get("loc", []) if x != "body")
        msg = err.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or "Invalid request"


def create_app(config: Optional[Settings] = None) -> FastAPI:
    cfg = config or settings

    app = FastAPI(
        title="Voice Relay API",
        description="Voice command relay: speech-to-text, intent parsing, workflow dispatch, text-to-speech",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.relay = VoiceRelay.from_settings(cfg)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse()

    @app.post("/stt", response_model=TranscriptionResponse)
    async def speech_to_text(
        request: Request,
        audio: Annotated[Optional[UploadFile], File(description="Audio file (mp3/mp4/mpeg/mpga/m4a/wav/webm, ≤25MB)")] = None,
    ):
        # form() is cached on the request, this does not re-read the body
        form = await request.form()
        ensure_single_part(form.getlist("audio"))
        upload = await receive_audio(
            audio,
            max_bytes=cfg.MAX_UPLOAD_BYTES,
            upload_dir=cfg.UPLOAD_DIR,
        )
        relay: VoiceRelay = request.app.state.relay
        text = await relay.transcriber.transcribe(upload)
        return TranscriptionResponse(text=text)

    @app.post("/intent", response_model=Intent)
    async def parse_intent(request: Request, body: TextRequest):
        relay: VoiceRelay = request.app.state.relay
        return await relay.classifier.classify(body.text)

    @app.post("/execute")
    async def execute(request: Request, body: ExecuteRequest):
        relay: VoiceRelay = request.app.state.relay
        result = await relay.dispatcher.dispatch(body.model_dump(exclude_unset=True))
        return result.to_payload()

    @app.post("/tts")
    async def text_to_speech(request: Request, body: TextRequest):
        relay: VoiceRelay = request.app.state.relay
        audio = await relay.synthesizer.synthesize(body.text)
        return Response(
            content=audio,
            media_type=AUDIO_MEDIA_TYPE,
            headers={"Content-Disposition": 'inline; filename="response.mp3"'},
        )

    @app.exception_handler(VoiceRelayError)
    async def relay_error_handler(_: Request, exc: VoiceRelayError):
        if exc.status_code >= 500:
            logger.error("%s: %s (%s)", exc.code, exc.message, exc.cause)
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(_: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": _validation_message(exc), "code": "invalid_request"})

    @app.exception_handler(HTTPException)
    async def http_exc_handler(_: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    return app
