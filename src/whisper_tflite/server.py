"""FastAPI server for one-shot file transcription.

Clients POST a complete audio file and receive the text. The server
depends only on the Transcriber, so it runs with real or fake backends.
"""

import asyncio
import io

from fastapi import FastAPI, HTTPException, Request

from whisper_tflite.constants import N_MEL, SAMPLE_RATE
from whisper_tflite.errors import (
    AudioFormatError,
    AudioIOError,
    FeatureExtractionError,
    InferenceError,
)
from whisper_tflite.pipeline import Transcriber, Transcription


def create_app(transcriber: Transcriber) -> FastAPI:
    """Create a FastAPI application around a transcriber.

    Args:
        transcriber: Pipeline shared by all requests.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(title="Whisper TFLite Transcription Service")
    # The interpreter holds mutable tensor buffers, so runs are serialized.
    engine_lock = asyncio.Lock()

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {
            "status": "ok",
            "sample_rate": SAMPLE_RATE,
            "mel_bands": N_MEL,
            "vocab_size": transcriber.vocab.size,
            "multilingual": transcriber.vocab.is_multilingual,
        }

    @app.post("/v1/transcribe")
    async def transcribe(request: Request):
        """Transcribe an audio file sent as the raw request body.

        The body must be a 16kHz, 16-bit PCM mono or stereo file.
        Response: {"text": "...", "tokens": [...], "duration": seconds}
        """
        body = await request.body()
        try:
            result = await _transcribe(transcriber, engine_lock, body)
        except AudioIOError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        except AudioFormatError as e:
            raise HTTPException(status_code=415, detail=str(e)) from e
        except (FeatureExtractionError, InferenceError) as e:
            raise HTTPException(status_code=500, detail=str(e)) from e

        return {
            "text": result.text,
            "tokens": list(result.token_ids),
            "duration": result.audio_seconds,
        }

    return app


async def _transcribe(transcriber: Transcriber, lock: asyncio.Lock, body: bytes) -> Transcription:
    """Run the blocking pipeline in the default executor."""
    loop = asyncio.get_event_loop()
    async with lock:
        return await loop.run_in_executor(None, transcriber.transcribe_file, io.BytesIO(body))
