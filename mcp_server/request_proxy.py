"""HTTP GET pass-through used by the send-get-request tool.

The proxy makes exactly one request per call and never raises: any failure is
reported in the returned text, prefixed with ``ERROR_PREFIX``.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from models.data_models import SendGetRequestArgs

logger = logging.getLogger(__name__)


SUCCESS_PREFIX = "请求成功: "
ERROR_PREFIX = "请求错误"
DEFAULT_TIMEOUT_SECONDS = 10.0


class UnexpectedResponseError(ValueError):
    """Response body is not a JSON object carrying a ``data`` field."""


def encode_query_params(params: Dict[str, Any]) -> List[Tuple[str, str]]:
    """Flatten tool ``params`` into query string pairs.

    ``None`` values are dropped, lists repeat their key, booleans become
    ``true``/``false`` and nested objects are sent as JSON.
    """
    pairs: List[Tuple[str, str]] = []
    for key, value in params.items():
        values = value if isinstance(value, list) else [value]
        for item in values:
            if item is None:
                continue
            pairs.append((key, _encode_scalar(item)))
    return pairs


def _encode_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return serialize_data(value)
    return str(value)


def serialize_data(value: Any) -> str:
    """Compact JSON with non-ASCII text left as is."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def extract_data(response: httpx.Response) -> Any:
    """Return the ``data`` field of a JSON object response body.

    Raises:
        UnexpectedResponseError: If the body is not JSON, not an object, or has no ``data``
    """
    try:
        body = response.json()
    except ValueError as e:
        raise UnexpectedResponseError(f"response body is not valid JSON: {e}") from e

    if not isinstance(body, dict):
        raise UnexpectedResponseError(f"expected a JSON object, got {type(body).__name__}")
    if "data" not in body:
        raise UnexpectedResponseError("response body has no 'data' field")
    return body["data"]


def format_error(error: Exception) -> str:
    return f"{ERROR_PREFIX} ({type(error).__name__}: {error})"


async def _get(client: httpx.AsyncClient, args: SendGetRequestArgs, timeout: float) -> httpx.Response:
    url = httpx.URL(str(args.uri))
    # params= replaces the URL's own query, so keep its pairs ahead of ours
    response = await client.get(
        url,
        params=url.params.multi_items() + encode_query_params(args.params),
        headers=args.headers or {},
        timeout=timeout,
    )
    response.raise_for_status()
    return response


async def send_get_request(
    args: SendGetRequestArgs,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """Issue one GET request and describe the outcome as text.

    Args:
        args: Validated tool arguments
        timeout: Seconds before the request is abandoned
        client: Optional shared client; a short-lived one is used otherwise

    Returns:
        ``SUCCESS_PREFIX`` plus the serialized ``data`` field, or an
        ``ERROR_PREFIX`` message describing the failure
    """
    logger.info(f"GET {args.uri} ({len(args.params)} params)")

    try:
        if client is None:
            async with httpx.AsyncClient(follow_redirects=True) as owned_client:
                response = await _get(owned_client, args, timeout)
        else:
            response = await _get(client, args, timeout)

        data = extract_data(response)

    except Exception as e:
        logger.warning(f"GET {args.uri} failed: {type(e).__name__}: {e}")
        return format_error(e)

    logger.info(f"GET {args.uri} succeeded with status {response.status_code}")
    return SUCCESS_PREFIX + serialize_data(data)
