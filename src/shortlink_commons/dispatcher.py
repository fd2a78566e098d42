"""
Method-based request dispatch: POST creates a mapping, GET redirects.
"""

from typing import Any, Callable, Dict, Optional
from aws_lambda_powertools import Logger, Metrics
from aws_lambda_powertools.metrics import MetricUnit

from .code_utils import extract_target_url, generate_code
from .http_utils import (
    create_json_response, create_redirect_response, create_error_response,
    ShortlinkError, ValidationError, NotFoundError, MethodNotAllowedError, StorageError,
    HTTP_STATUS_OK, SERVICE_NAME
)
from .store import MappingStore

logger = Logger(service=SERVICE_NAME)


class RequestDispatcher:
    """
    Routes shorten and redirect requests to a mapping store.

    Args:
        store: Backend holding code to URL mappings
        base_url: Prefix for the returned short URL, if known
        metrics: Powertools metrics to count outcomes on, or None
        code_generator: Callable returning a new code
    """

    def __init__(
        self,
        store: MappingStore,
        base_url: Optional[str] = None,
        metrics: Optional[Metrics] = None,
        code_generator: Callable[[], str] = generate_code
    ):
        self.store = store
        self.base_url = base_url.rstrip('/') if base_url else None
        self.metrics = metrics
        self.code_generator = code_generator

    def dispatch(self, method: str, code: Optional[str] = None, body: Optional[str] = None) -> Dict[str, Any]:
        """
        Handle one request and return an API Gateway proxy response.

        Args:
            method: HTTP method
            code: Short code from the request path, if any
            body: Raw request body, if any
        """
        method = (method or '').upper()
        logger.info(f"Received request: {method} {code or ''}")

        if method == 'POST':
            return self.shorten(body)
        if method == 'GET':
            return self.resolve(code)
        return self._error_response(MethodNotAllowedError(method or 'UNKNOWN'), "MethodNotAllowed")

    def shorten(self, body: Optional[str]) -> Dict[str, Any]:
        """Create a mapping for the URL carried in ``body``."""
        try:
            long_url = extract_target_url(body)
            code = self.code_generator()
            self.store.put(code, long_url)
        except ValidationError as e:
            return self._error_response(e, "ValidationErrors")
        except StorageError as e:
            return self._error_response(e, "StorageErrors", "Storage operation failed")
        except Exception as e:
            logger.error(f"Unexpected error: {str(e)}", exc_info=True)
            return self._error_response(ShortlinkError(str(e)), "UnexpectedErrors", "Internal server error")

        logger.info(f"URL shortened successfully. Code: {code}")
        self._add_metric("UrlShortened")

        return create_json_response(
            status_code=HTTP_STATUS_OK,
            body={
                'code': code,
                'shortUrl': f"{self.base_url}/{code}" if self.base_url else code,
                'longUrl': long_url
            }
        )

    def resolve(self, code: Optional[str]) -> Dict[str, Any]:
        """Redirect to the URL stored for ``code``."""
        try:
            if not code:
                raise ValidationError("Missing short code")

            long_url = self.store.get(code)
            if long_url is None:
                self._add_metric("UrlNotFound")
                raise NotFoundError(f"URL not found for code: {code}")
        except (ValidationError, NotFoundError) as e:
            return self._error_response(e)
        except StorageError as e:
            return self._error_response(e, "StorageErrors", "Storage operation failed")
        except Exception as e:
            logger.error(f"Unexpected error: {str(e)}", exc_info=True)
            return self._error_response(ShortlinkError(str(e)), "UnexpectedErrors", "Internal server error")

        logger.info(f"Redirecting {code} to {long_url[:50]}")
        self._add_metric("SuccessfulRedirects")

        return create_redirect_response(long_url)

    def _add_metric(self, name: str) -> None:
        if self.metrics is not None:
            self.metrics.add_metric(name=name, unit=MetricUnit.Count, value=1)

    def _error_response(
        self,
        error: ShortlinkError,
        metric_name: Optional[str] = None,
        public_message: Optional[str] = None
    ) -> Dict[str, Any]:
        # the caller only sees public_message; keep the backend detail in the log
        if isinstance(error, StorageError):
            logger.error(error.message)

        return create_error_response(
            status_code=error.status_code,
            error_message=public_message or error.message,
            logger=logger,
            metrics=self.metrics if metric_name else None,
            metric_name=metric_name or "Errors"
        )
