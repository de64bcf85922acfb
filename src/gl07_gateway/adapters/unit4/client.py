"""Unit4 REST API adapter using httpx."""

import json
import logging
import threading
from collections.abc import Callable
from datetime import datetime, timezone

import httpx
from pydantic import ValidationError

from ...config import Unit4Config
from ...domain.errors import AuthenticationError, ConfigurationError
from ...domain.unit4 import BatchError, BatchResponse, TransactionBatchRequest
from ...ports.unit4 import Unit4Port
from .token import TokenCache

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Unit4ApiClient(Unit4Port):
    """Posts transaction batches with a cached client-credentials token.

    Token refresh is serialized by one lock, so concurrent callers wait for
    the request in flight instead of issuing their own.
    """

    def __init__(
        self,
        config: Unit4Config,
        http: httpx.Client | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.config = config
        self.http = http or httpx.Client(timeout=config.timeout)
        self.clock = clock
        self._token = TokenCache()
        self._token_lock = threading.Lock()

    @property
    def batch_url(self) -> str:
        return f"{self.config.base_url.rstrip('/')}{self.config.batch_path}"

    def close(self) -> None:
        self.http.close()

    def post_batch(self, request: TransactionBatchRequest) -> BatchResponse:
        token = self._access_token()
        url = self.batch_url

        logger.info(
            f"Posting transaction batch to Unit4: {url} "
            f"({request.voucher_count} vouchers, {request.transaction_count} transactions)"
        )
        logger.debug(
            f"Batch id {request.batch_information.batch_id}, "
            f"interface {request.batch_information.interface}"
        )

        try:
            response = self.http.post(
                url,
                content=request.to_json(),
                params={"tenant": self.config.tenant_id} if self.config.tenant_id else None,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Content-Type": "application/json",
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"Unit4 request failed: {e}")
            return BatchResponse(
                status="Error",
                message=f"Request failed: {e}",
                errors=[BatchError(code=type(e).__name__, message=str(e))],
            )

        body = response.text
        if response.status_code == httpx.codes.UNAUTHORIZED:
            logger.warning("Unit4 rejected the access token, dropping cached token")
            with self._token_lock:
                self._token.clear()

        if not response.is_success:
            logger.error(f"Unit4 API error: {response.status_code} - {body}")
            return BatchResponse(
                status="Error",
                message=f"HTTP {response.status_code}: {body}",
                errors=[BatchError(code=str(response.status_code), message=body)],
            )

        if not body.strip():
            logger.info(f"Unit4 API returned {response.status_code} with empty body")
            return BatchResponse(
                status="Success", message=f"HTTP {response.status_code}: Request accepted"
            )

        try:
            result = BatchResponse.model_validate(json.loads(body))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Could not parse Unit4 response as JSON: {e}. Content: {body[:500]}")
            return BatchResponse(
                status="Success",
                message=f"HTTP {response.status_code}: Request accepted (response not JSON)",
            )

        if result.status is None:
            result.status = "Success"
        logger.info(f"Unit4 API response: {result.status}")
        return result

    def test_connection(self) -> bool:
        try:
            return bool(self._access_token())
        except Exception as e:
            logger.error(f"Unit4 connection test failed: {e}")
            return False

    def _access_token(self) -> str:
        with self._token_lock:
            cached = self._token.valid_token(self.clock())
            if cached:
                return cached

            cfg = self.config
            if not (cfg.token_url and cfg.client_id and cfg.client_secret):
                raise ConfigurationError("Unit4 OAuth settings are not configured")

            logger.debug("Requesting new OAuth token from Unit4")
            try:
                response = self.http.post(
                    cfg.token_url,
                    data={
                        "grant_type": "client_credentials",
                        "client_id": cfg.client_id,
                        "client_secret": cfg.client_secret,
                        "scope": cfg.scope or "api",
                    },
                )
            except httpx.HTTPError as e:
                raise AuthenticationError(f"OAuth token request failed: {e}") from e

            if not response.is_success:
                logger.error(
                    f"OAuth token request failed: {response.status_code} - {response.text}"
                )
                raise AuthenticationError(f"Failed to obtain OAuth token: {response.text}")

            try:
                data = response.json()
                access_token = data["access_token"]
                expires_in = int(data.get("expires_in") or 0)
            except (ValueError, KeyError, TypeError) as e:
                raise AuthenticationError("Invalid OAuth token response") from e
            if not access_token:
                raise AuthenticationError("Invalid OAuth token response")

            self._token.store(access_token, expires_in, self.clock())
            logger.info(f"Obtained new OAuth token, expires in {expires_in} seconds")
            return access_token
