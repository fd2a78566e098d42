import unittest
import base64
import json
import sys
import os

# Add src directory to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from shortlink_commons.http_utils import (
    SERVICE_NAME, get_base_url, extract_code, get_request_body,
    create_json_response, create_redirect_response, create_error_response,
    ShortlinkError, ValidationError, NotFoundError, MethodNotAllowedError, StorageError,
    HTTP_STATUS_OK, HTTP_STATUS_MOVED_PERMANENTLY, HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_NOT_FOUND, HTTP_STATUS_METHOD_NOT_ALLOWED, HTTP_STATUS_INTERNAL_ERROR
)
from aws_lambda_powertools import Logger, Metrics


class TestHttpUtils(unittest.TestCase):

    def setUp(self):
        """Set up test fixtures"""
        self.logger = Logger(service=SERVICE_NAME)
        self.metrics = Metrics(namespace="UrlShortenerServiceTest")
        self._saved_base_url = os.environ.pop('BASE_URL', None)

    def tearDown(self):
        os.environ.pop('BASE_URL', None)
        if self._saved_base_url is not None:
            os.environ['BASE_URL'] = self._saved_base_url
        self.metrics.clear_metrics()

    def test_get_base_url_from_environment(self):
        """Test getting base URL from environment variable"""
        os.environ['BASE_URL'] = 'https://short.example.com/'

        event = {'headers': {'Host': 'api.amazonaws.com'}}
        self.assertEqual(get_base_url(event), 'https://short.example.com')

    def test_get_base_url_from_event(self):
        """Test constructing base URL from API Gateway event"""
        event = {
            'headers': {'Host': 'api.example.com'},
            'requestContext': {'stage': 'prod'}
        }

        self.assertEqual(get_base_url(event), 'https://api.example.com/prod')

    def test_get_base_url_fallback(self):
        """Test base URL construction with missing data"""
        self.assertEqual(get_base_url({}), 'https://unknown-host/unknown-stage')
        self.assertEqual(get_base_url({'headers': None}), 'https://unknown-host/unknown-stage')

    def test_extract_code_from_path_parameter(self):
        """Test extracting the code from a {code} path parameter"""
        event = {'pathParameters': {'code': 'abc123'}}
        self.assertEqual(extract_code(event), 'abc123')

    def test_extract_code_from_proxy_path(self):
        """Test extracting the code from a single-segment proxy path"""
        event = {'pathParameters': {'proxy': '/abc123'}}
        self.assertEqual(extract_code(event), 'abc123')

    def test_extract_code_missing(self):
        """Test requests without a code"""
        for event in [{}, {'pathParameters': None}, {'pathParameters': {'proxy': 'api/shorten'}}]:
            with self.subTest(event=event):
                self.assertIsNone(extract_code(event))

    def test_get_request_body_text(self):
        """Test plain string bodies are returned unchanged"""
        event = {'body': '{"url": "https://example.com"}'}
        self.assertEqual(get_request_body(event), '{"url": "https://example.com"}')

    def test_get_request_body_base64(self):
        """Test base64-encoded bodies are decoded"""
        encoded = base64.b64encode(b'https://example.com').decode('ascii')
        event = {'body': encoded, 'isBase64Encoded': True}
        self.assertEqual(get_request_body(event), 'https://example.com')

    def test_get_request_body_invalid_base64(self):
        """Test undecodable base64 raises ValidationError"""
        event = {'body': '%%%not-base64%%%', 'isBase64Encoded': True}
        with self.assertRaises(ValidationError):
            get_request_body(event)

    def test_get_request_body_rejects_non_alphabet_characters(self):
        """Test characters outside the base64 alphabet are not silently dropped"""
        for body in ['%%%', 'aHR0cHM6Ly9leGFtcGxlLmNvbQ==%%%', 'aHR0 cHM6']:
            with self.subTest(body=body):
                with self.assertRaises(ValidationError):
                    get_request_body({'body': body, 'isBase64Encoded': True})

    def test_loggers_share_service_name(self):
        """Test every module logs under the service name, defaulting to url-shortener"""
        from shortlink_commons import dispatcher, dynamodb_store
        from shortlink_server import app, app_factory
        from shortlink_handlers import shortenOrRedirectURL

        for module in [dispatcher, dynamodb_store, app, app_factory, shortenOrRedirectURL]:
            with self.subTest(module=module.__name__):
                self.assertEqual(module.logger.service, SERVICE_NAME)

        if 'POWERTOOLS_SERVICE_NAME' not in os.environ:
            self.assertEqual(SERVICE_NAME, 'url-shortener')

    def test_get_request_body_dict(self):
        """Test dictionary bodies are serialized back to JSON"""
        event = {'body': {'url': 'https://example.com'}}
        self.assertEqual(json.loads(get_request_body(event)), {'url': 'https://example.com'})

    def test_get_request_body_missing(self):
        """Test a missing body is None"""
        self.assertIsNone(get_request_body({}))

    def test_create_json_response(self):
        """Test creating JSON response"""
        body = {'code': 'abc123', 'longUrl': 'https://example.com'}
        response = create_json_response(HTTP_STATUS_OK, body)

        self.assertEqual(response['statusCode'], HTTP_STATUS_OK)
        self.assertEqual(response['headers']['Content-Type'], 'application/json')
        self.assertIn('Access-Control-Allow-Origin', response['headers'])
        self.assertEqual(json.loads(response['body']), body)

    def test_create_json_response_with_additional_headers(self):
        """Test creating JSON response with additional headers"""
        response = create_json_response(HTTP_STATUS_OK, {}, {'X-Custom-Header': 'custom-value'})

        self.assertEqual(response['headers']['X-Custom-Header'], 'custom-value')
        self.assertEqual(response['headers']['Content-Type'], 'application/json')

    def test_create_redirect_response(self):
        """Test creating redirect response"""
        location = 'https://example.com/redirected'
        response = create_redirect_response(location)

        self.assertEqual(response['statusCode'], HTTP_STATUS_MOVED_PERMANENTLY)
        self.assertEqual(response['headers']['Location'], location)
        self.assertIn('Cache-Control', response['headers'])
        self.assertEqual(response['body'], '')

    def test_create_error_response(self):
        """Test creating error response with metrics"""
        response = create_error_response(
            HTTP_STATUS_BAD_REQUEST,
            'Test error message',
            self.logger,
            self.metrics
        )

        self.assertEqual(response['statusCode'], HTTP_STATUS_BAD_REQUEST)
        self.assertEqual(json.loads(response['body']), {'error': 'Test error message'})

    def test_create_error_response_without_metrics(self):
        """Test creating error response outside Lambda"""
        response = create_error_response(HTTP_STATUS_INTERNAL_ERROR, 'boom', self.logger)

        self.assertEqual(response['statusCode'], HTTP_STATUS_INTERNAL_ERROR)
        self.assertEqual(json.loads(response['body'])['error'], 'boom')

    def test_shortlink_error(self):
        """Test ShortlinkError exception"""
        error = ShortlinkError("Test error", HTTP_STATUS_BAD_REQUEST)

        self.assertEqual(error.message, "Test error")
        self.assertEqual(error.status_code, HTTP_STATUS_BAD_REQUEST)
        self.assertEqual(str(error), "Test error")
        self.assertEqual(ShortlinkError("x").status_code, HTTP_STATUS_INTERNAL_ERROR)

    def test_error_subclasses(self):
        """Test each error subclass carries its status code"""
        self.assertEqual(ValidationError("bad").status_code, HTTP_STATUS_BAD_REQUEST)
        self.assertEqual(NotFoundError().status_code, HTTP_STATUS_NOT_FOUND)
        self.assertEqual(NotFoundError().message, "URL not found")

        not_allowed = MethodNotAllowedError("PUT")
        self.assertEqual(not_allowed.status_code, HTTP_STATUS_METHOD_NOT_ALLOWED)
        self.assertEqual(not_allowed.method, "PUT")

    def test_storage_error(self):
        """Test StorageError keeps the original error"""
        cause = RuntimeError("connection reset")
        error = StorageError("put_item failed", cause)

        self.assertEqual(error.status_code, HTTP_STATUS_INTERNAL_ERROR)
        self.assertEqual(error.message, "Storage error: put_item failed")
        self.assertIs(error.original_error, cause)
        self.assertIsInstance(error, ShortlinkError)


if __name__ == '__main__':
    unittest.main()
