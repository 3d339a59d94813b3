"""
Outbound HTTP helpers shared by the Google clients
"""
import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ..core.config import settings
from ..core.logging import get_logger

logger = get_logger(__name__)

# Rate limiting and server errors are worth another try; any other 4xx is final
RETRYABLE_STATUS = {429, 500, 502, 503, 504}


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS
    return isinstance(exc, httpx.TransportError)


def _log_retry(retry_state) -> None:
    logger.warning(
        f"Retrying request (attempt {retry_state.attempt_number}): "
        f"{retry_state.outcome.exception()}"
    )


def new_async_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT)


async def send_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    max_attempts: int = None,
    backoff: float = None,
    **kwargs,
) -> httpx.Response:
    """
    Send a request, retrying transport failures, 429 and 5xx with exponential backoff

    Returns the last response even when it is an error status; the caller
    decides what a non-2xx means. Transport errors that outlive the retries
    are re-raised.
    """
    if max_attempts is None:
        max_attempts = settings.HTTP_MAX_ATTEMPTS
    if backoff is None:
        backoff = settings.HTTP_BACKOFF_SECONDS

    try:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=backoff, max=settings.HTTP_BACKOFF_MAX_SECONDS),
            retry=retry_if_exception(_is_retryable),
            before_sleep=_log_retry,
            reraise=True,
        ):
            with attempt:
                response = await client.request(method, url, **kwargs)
                if response.status_code in RETRYABLE_STATUS:
                    response.raise_for_status()
    except httpx.HTTPStatusError as e:
        return e.response

    return response
