"""
SaluteSpeech OAuth client.

Exchanges the static pre-shared key for a scoped bearer token.
Pure with respect to state: the caller decides where the token goes.
"""

import logging
import uuid
from typing import Optional

import httpx

from .errors import DecodeError, TransportError, UpstreamRejected, truncate_body

logger = logging.getLogger(__name__)

DEFAULT_OAUTH_URL = "https://ngw.devices.sberbank.ru:9443/api/v2/oauth"
DEFAULT_SCOPE = "SALUTE_SPEECH_PERS"

OPERATION = "acquire_token"


class SaluteAuthClient:
    """
    Credential provider for SaluteSpeech.

    POSTs ``scope=<scope>`` form-encoded with ``Authorization: Basic <key>``
    and reads ``access_token`` from the JSON answer.
    """

    def __init__(
        self,
        oauth_url: str = DEFAULT_OAUTH_URL,
        scope: str = DEFAULT_SCOPE,
        rq_uid: Optional[str] = None,
        timeout_s: float = 30.0,
        verify_tls: bool = True,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.oauth_url = oauth_url
        self.scope = scope
        self.rq_uid = rq_uid
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

    async def acquire(self, auth_key: str) -> str:
        """
        Obtain a fresh access token.

        Args:
            auth_key: Static Basic credential issued by the provider

        Returns:
            Bearer token string

        Raises:
            TransportError: endpoint unreachable or timed out
            UpstreamRejected: non-200 answer (401 for a bad key)
            DecodeError: body is not JSON or has no access_token
        """
        client = await self._get_http_client()
        headers = {
            "Accept": "application/json",
            "Authorization": f"Basic {auth_key}",
            "RqUID": self.rq_uid or str(uuid.uuid4()),
        }

        try:
            response = await client.post(
                self.oauth_url,
                data={"scope": self.scope},
                headers=headers,
                timeout=self.timeout_s,
            )
        except httpx.RequestError as e:
            logger.error(f"[{OPERATION}] request to {self.oauth_url} failed: {e}")
            raise TransportError(OPERATION, f"sending request: {e}") from e

        if response.status_code != 200:
            logger.error(
                f"[{OPERATION}] status={response.status_code} "
                f"body={truncate_body(response.text)}"
            )
            raise UpstreamRejected(OPERATION, response.status_code, response.text)

        try:
            payload = response.json()
        except ValueError as e:
            raise DecodeError(OPERATION, f"decoding response: {e}") from e

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not isinstance(token, str) or not token:
            raise DecodeError(OPERATION, "response has no access_token")

        logger.debug(f"[{OPERATION}] token acquired")
        return token

    async def close(self):
        """Close HTTP client."""
        if self.http_client:
            await self.http_client.aclose()
