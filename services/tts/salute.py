"""
SaluteSpeech synthesis backend.

POSTs raw text to the SmartSpeech REST endpoint and returns the WAV bytes.
Refreshing an expired token is the caller's job; this backend only reports
how the call failed.
"""

import logging
from typing import Optional

import httpx

from .base import TTSBackend
from .errors import TransportError, UpstreamRejected, DecodeError, truncate_body

logger = logging.getLogger(__name__)

DEFAULT_SYNTHESIS_URL = "https://smartspeech.sber.ru/rest/v1/text:synthesize"

OPERATION = "synthesize"


class SaluteSpeechBackend(TTSBackend):
    """SmartSpeech REST synthesis (audio/x-wav)."""

    audio_filename = "voice.wav"

    def __init__(
        self,
        synthesis_url: str = DEFAULT_SYNTHESIS_URL,
        timeout_s: float = 30.0,
        verify_tls: bool = True,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.synthesis_url = synthesis_url
        self.timeout_s = timeout_s
        self.verify_tls = verify_tls
        self.http_client = client

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self.http_client is None:
            self.http_client = httpx.AsyncClient(
                timeout=self.timeout_s, verify=self.verify_tls
            )
        return self.http_client

    async def synthesize(self, text: str, token: str) -> bytes:
        """
        Synthesize text with the given bearer token.

        Returns:
            Exact response body on 200

        Raises:
            TransportError: endpoint unreachable or timed out
            UpstreamRejected: any non-200 status, with status and body
            DecodeError: text has no UTF-8 form, or body could not be read
        """
        try:
            body = text.encode("utf-8")
        except UnicodeEncodeError as e:
            # Lone surrogates survive JSON parsing but have no UTF-8 form
            raise DecodeError(OPERATION, f"encoding request text: {e}") from e

        client = await self._get_http_client()
        headers = {
            "Content-Type": "application/text",
            "Accept": "audio/x-wav",
            "Authorization": f"Bearer {token}",
        }

        try:
            response = await client.post(
                self.synthesis_url,
                content=body,
                headers=headers,
                timeout=self.timeout_s,
            )
        except httpx.DecodingError as e:
            raise DecodeError(OPERATION, f"reading response body: {e}") from e
        except httpx.RequestError as e:
            logger.error(f"[{OPERATION}] request to {self.synthesis_url} failed: {e}")
            raise TransportError(OPERATION, f"sending request: {e}") from e

        if response.status_code != 200:
            logger.error(
                f"[{OPERATION}] status={response.status_code} "
                f"body={truncate_body(response.text)}"
            )
            raise UpstreamRejected(OPERATION, response.status_code, response.text)

        audio = response.content
        if not audio:
            raise DecodeError(OPERATION, "empty audio body")

        logger.debug(f"[{OPERATION}] {len(audio)} bytes for {len(text)} chars")
        return audio

    async def close(self):
        """Close HTTP client."""
        if self.http_client:
            await self.http_client.aclose()
