"""
Common request/response utilities shared by the Lambda handler and the local server.
"""

import base64
import json
import os
from typing import Dict, Any, Optional
from aws_lambda_powertools import Logger, Metrics
from aws_lambda_powertools.metrics import MetricUnit

# Constants
SERVICE_NAME = os.environ.get('POWERTOOLS_SERVICE_NAME', 'url-shortener')

HTTP_STATUS_OK = 200
HTTP_STATUS_MOVED_PERMANENTLY = 301
HTTP_STATUS_BAD_REQUEST = 400
HTTP_STATUS_NOT_FOUND = 404
HTTP_STATUS_METHOD_NOT_ALLOWED = 405
HTTP_STATUS_INTERNAL_ERROR = 500

# CORS headers
CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'GET, POST, OPTIONS',
    'Access-Control-Allow-Headers': 'Content-Type'
}

# Common response headers
JSON_HEADERS = {
    'Content-Type': 'application/json',
    **CORS_HEADERS
}

REDIRECT_HEADERS = {
    'Cache-Control': 'no-cache, no-store, must-revalidate',
    'Pragma': 'no-cache',
    'Expires': '0'
}


def get_base_url(event: Dict[str, Any]) -> str:
    """
    Get base URL from environment variable or construct from API Gateway context.

    Args:
        event: Lambda event object

    Returns:
        str: Base URL for the service, without a trailing slash
    """
    base_url = os.environ.get('BASE_URL')
    if base_url:
        return base_url.rstrip('/')

    headers = event.get('headers') or {}
    host = headers.get('Host') or headers.get('host') or 'unknown-host'
    stage = (event.get('requestContext') or {}).get('stage', 'unknown-stage')
    return f"https://{host}/{stage}"


def extract_code(event: Dict[str, Any]) -> Optional[str]:
    """
    Extract the short code from API Gateway path parameters.

    Accepts either a ``{code}`` resource parameter or a single-segment
    ``{proxy+}`` path.

    Args:
        event: Lambda event object

    Returns:
        The code, or None if the request path carries none
    """
    path_params = event.get('pathParameters') or {}
    code = path_params.get('code')
    if code:
        return code

    proxy_path = path_params.get('proxy', '')
    path_parts = [part for part in proxy_path.split('/') if part]
    if len(path_parts) == 1:
        return path_parts[0]

    return None


def get_request_body(event: Dict[str, Any]) -> Optional[str]:
    """
    Return the raw request body as text, decoding base64 payloads.

    Raises:
        ValidationError: If a base64 body cannot be decoded
    """
    body = event.get('body')
    if body is None:
        return None

    if isinstance(body, dict):
        return json.dumps(body)

    if event.get('isBase64Encoded'):
        try:
            return base64.b64decode(body, validate=True).decode('utf-8')
        except (ValueError, UnicodeDecodeError):
            raise ValidationError("Request body is not valid base64 text")

    return body


def create_json_response(
    status_code: int,
    body: Dict[str, Any],
    additional_headers: Optional[Dict[str, str]] = None
) -> Dict[str, Any]:
    """
    Create a standardized JSON response in API Gateway proxy format.

    Args:
        status_code: HTTP status code
        body: Response body dictionary
        additional_headers: Optional additional headers

    Returns:
        Dict: Proxy response object
    """
    headers = JSON_HEADERS.copy()
    if additional_headers:
        headers.update(additional_headers)

    return {
        'statusCode': status_code,
        'headers': headers,
        'body': json.dumps(body)
    }


def create_redirect_response(location: str) -> Dict[str, Any]:
    """
    Create a 301 redirect response.

    Args:
        location: URL to redirect to

    Returns:
        Dict: Proxy response object
    """
    headers = REDIRECT_HEADERS.copy()
    headers['Location'] = location

    return {
        'statusCode': HTTP_STATUS_MOVED_PERMANENTLY,
        'headers': headers,
        'body': ''
    }


def create_error_response(
    status_code: int,
    error_message: str,
    logger: Logger,
    metrics: Optional[Metrics] = None,
    metric_name: str = "Errors"
) -> Dict[str, Any]:
    """
    Create a standardized error response with logging and, when given, metrics.

    Args:
        status_code: HTTP status code
        error_message: Error message to return
        logger: Lambda Powertools logger
        metrics: Lambda Powertools metrics, or None outside Lambda
        metric_name: Metric name for error tracking

    Returns:
        Dict: Proxy response object
    """
    if status_code >= HTTP_STATUS_INTERNAL_ERROR:
        logger.error(f"Error {status_code}: {error_message}")
    else:
        logger.info(f"Error {status_code}: {error_message}")

    if metrics is not None:
        metrics.add_metric(name=metric_name, unit=MetricUnit.Count, value=1)

    return create_json_response(
        status_code=status_code,
        body={'error': error_message}
    )


class ShortlinkError(Exception):
    """Base exception class for request handling errors."""

    def __init__(self, message: str, status_code: int = HTTP_STATUS_INTERNAL_ERROR):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ValidationError(ShortlinkError):
    """Exception for malformed requests."""

    def __init__(self, message: str):
        super().__init__(message, HTTP_STATUS_BAD_REQUEST)


class NotFoundError(ShortlinkError):
    """Exception for unknown short codes."""

    def __init__(self, message: str = "URL not found"):
        super().__init__(message, HTTP_STATUS_NOT_FOUND)


class MethodNotAllowedError(ShortlinkError):
    """Exception for unsupported HTTP methods."""

    def __init__(self, method: str):
        super().__init__(f"Method not allowed: {method}", HTTP_STATUS_METHOD_NOT_ALLOWED)
        self.method = method


class StorageError(ShortlinkError):
    """Exception for mapping store failures."""

    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(f"Storage error: {message}", HTTP_STATUS_INTERNAL_ERROR)
        self.original_error = original_error
