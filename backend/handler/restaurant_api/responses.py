import base64
import binascii
import json
import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from .errors import ApiError, InternalError, ValidationError

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Authorization,Content-Type,X-Request-Id",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
}


class DecimalJSONEncoder(json.JSONEncoder):
    def default(self, o):
        if isinstance(o, Decimal):
            # DynamoDB hands numbers back as Decimal
            return int(o) if o == o.to_integral_value() else float(o)
        return super().default(o)


def resp(status: int, body: Any, headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    base = {"Content-Type": "application/json", **CORS_HEADERS}
    if headers:
        base.update(headers)
    return {
        "statusCode": status,
        "headers": base,
        "body": json.dumps(body, cls=DecimalJSONEncoder),
    }


def error_to_response(e: Exception) -> Dict[str, Any]:
    if isinstance(e, ApiError):
        if e.status_code >= 500:
            logger.error("%s: %s", e.error, e.message)
        else:
            logger.warning("Rejected request: %s (%s)", e.message, e.status_code)
        return resp(e.status_code, e.to_body())
    logger.exception("Unhandled error")
    return resp(500, InternalError().to_body())


def parse_json(event: Dict[str, Any]) -> Dict[str, Any]:
    """Decode the proxy event body into a dict; an absent body is an empty dict."""
    body = event.get("body")
    if not body:
        return {}
    if event.get("isBase64Encoded"):
        try:
            body = base64.b64decode(body).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            raise ValidationError("Invalid JSON body")
    try:
        data = json.loads(body)
    except ValueError:
        raise ValidationError("Invalid JSON body")
    if not isinstance(data, dict):
        raise ValidationError("JSON body must be an object")
    return data


def get_header(event: Dict[str, Any], name: str) -> Optional[str]:
    headers = {k.lower(): v for k, v in (event.get("headers") or {}).items()}
    return headers.get(name.lower())
