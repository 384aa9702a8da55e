"""Gemini video analysis.

Sends a video inline to Gemini together with an instruction and returns the
model's prose answer. The answer is only ever used as a source of
``HH:MM:SS`` tokens for the timestamp extractor.
"""
import asyncio
import logging
import mimetypes
from pathlib import Path
from typing import Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai.types import Blob, Content, GenerateContentConfig, Part

from segcut.config import settings
from segcut.pipeline.errors import (
    CollaboratorError,
    CollaboratorRejected,
    CollaboratorTimeout,
    PayloadTooLarge,
)

logger = logging.getLogger(__name__)

REJECTED_GUIDANCE = (
    "Gemini API rejected the request. This could be due to:\n"
    "1. The API key may be invalid or have insufficient permissions\n"
    "2. The video format may not be supported or the file is too large\n"
    "3. The video duration may exceed the model's limits\n"
    "Try with a different video or check your API key configuration."
)
TOO_LARGE_GUIDANCE = "The video file is too large to process. Try with a smaller video or compress the current one."


def keep_event_prompt(event_description: str) -> str:
    """Prompt asking for the single window where an event happens."""
    return (
        f'Identify the segment in the video where the following event occurs: "{event_description}". '
        "Provide the start and end timestamps in HH:MM:SS format for this segment. "
        "If the event spans multiple segments, provide the timestamps for the primary occurrence."
    )


def remove_event_prompt(event_description: str) -> str:
    """Prompt asking for every window where an event happens."""
    return (
        f'Identify all segments in the video where the following event occurs: "{event_description}". '
        "Provide the start and end timestamps in HH:MM:SS format for each segment. "
        "If the event occurs multiple times, list all occurrences with their respective timestamps."
    )


def classify_api_error(error: genai_errors.APIError) -> CollaboratorError:
    """Map a google-genai API error to a collaborator error with guidance."""
    message = str(getattr(error, "message", "") or error)
    status = str(getattr(error, "status", "") or "")
    code = getattr(error, "code", None)

    if code == 413 or "exceeds maximum allowed size" in message or "File too large" in message:
        return PayloadTooLarge(TOO_LARGE_GUIDANCE)
    if code in (400, 401, 403) or status == "INVALID_ARGUMENT" or "invalid argument" in message.lower():
        return CollaboratorRejected(REJECTED_GUIDANCE)
    return CollaboratorError(f"Failed to analyze video: {message}")


class GeminiVideoAnalyzer:
    """Asks Gemini questions about a local video file."""

    def __init__(self, client=None, model: Optional[str] = None):
        self._client = client
        self.model = model or settings.gemini_model

    @property
    def client(self):
        if self._client is None:
            if not settings.google_api_key.strip():
                raise CollaboratorRejected(
                    "Gemini API key is not configured. Please add a valid GOOGLE_API_KEY to your .env file."
                )
            self._client = genai.Client(api_key=settings.google_api_key)
        return self._client

    async def _video_part(self, video_path: Path) -> Part:
        size_mb = video_path.stat().st_size / (1024 * 1024)
        if size_mb > settings.max_inline_video_mb:
            raise PayloadTooLarge(
                f"{TOO_LARGE_GUIDANCE} ({size_mb:.1f} MB, limit {settings.max_inline_video_mb} MB)"
            )
        mime_type, _ = mimetypes.guess_type(video_path.name)
        if not mime_type or not mime_type.startswith("video/"):
            mime_type = "video/mp4"
        logger.info(f"Video loaded ({size_mb:.1f} MB, {mime_type})")
        data = await asyncio.to_thread(video_path.read_bytes)
        return Part(inline_data=Blob(data=data, mime_type=mime_type))

    async def analyze(self, video_path: str | Path, prompt: str, duration: Optional[float] = None) -> str:
        """
        Analyze a video with Gemini.

        Args:
            video_path: Local path to the video file
            prompt: Instruction for the model
            duration: Video length in seconds, mentioned in the prompt when known

        Returns:
            The model's text answer

        Raises:
            CollaboratorTimeout: If no answer arrives within analysis_timeout_seconds
            CollaboratorRejected: If the API refuses the request
            PayloadTooLarge: If the video is too large to send inline
            CollaboratorError: For any other analysis failure
        """
        video_path = Path(video_path)
        client = self.client

        text = prompt
        if duration is not None:
            text = f"This is a video that's {duration:.1f} seconds long. {prompt}"
        text += " Provide a detailed description and analysis of the video content."

        contents = [Content(role="user", parts=[await self._video_part(video_path), Part(text=text)])]
        config = GenerateContentConfig(
            temperature=settings.gemini_temperature,
            max_output_tokens=settings.gemini_max_output_tokens,
        )

        timeout = settings.analysis_timeout_seconds
        logger.info(f"Sending {video_path.name} to {self.model} (timeout {timeout:.0f}s)")
        try:
            response = await asyncio.wait_for(
                client.aio.models.generate_content(model=self.model, contents=contents, config=config),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            logger.warning(f"Gemini request for {video_path.name} timed out after {timeout:.0f}s")
            raise CollaboratorTimeout(
                f"The Gemini API request timed out after {timeout:.0f} seconds. "
                "Try again later when the service might be less busy, or use a shorter video."
            ) from e
        except genai_errors.APIError as e:
            logger.error(f"Gemini API error: {e}")
            raise classify_api_error(e) from e
        except Exception as e:
            logger.error(f"Gemini request for {video_path.name} failed: {e}")
            raise CollaboratorError(f"Failed to analyze video: {e}") from e

        if response.text is None:
            raise CollaboratorError("Failed to analyze video: Gemini returned an empty response")

        logger.info("Gemini response received")
        return response.text
