from aws_lambda_powertools import Logger, Tracer, Metrics
from aws_lambda_powertools.logging import correlation_paths

from shortlink_commons.http_utils import (
    get_base_url, extract_code, get_request_body, create_error_response, ValidationError,
    SERVICE_NAME
)
from shortlink_commons.dynamodb_store import DynamoDBStore
from shortlink_commons.dispatcher import RequestDispatcher

# Initialize powertools
logger = Logger(service=SERVICE_NAME)
tracer = Tracer()
metrics = Metrics(namespace="UrlShortenerService")

# Created on first invocation and reused by warm containers
store = None


def get_store() -> DynamoDBStore:
    global store
    if store is None:
        store = DynamoDBStore()
        logger.info(f"Using DynamoDB table: {store.table_name}")
    return store


@tracer.capture_lambda_handler
@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@metrics.log_metrics(capture_cold_start_metric=True)
def lambda_handler(event, context):
    """
    Lambda handler for shortening and redirecting.

    Expected input from API Gateway:
    - POST with body ``{"url": "https://example.com/long"}`` or the bare URL
    - GET with path parameter ``code``

    Returns:
    - 200 JSON ``{"code", "shortUrl", "longUrl"}`` for POST
    - 301 redirect for a known code, 404 JSON for an unknown one
    - 400 for a malformed body, 405 for other methods, 500 on storage failure
    """
    method = event.get('httpMethod', '')
    code = extract_code(event)

    try:
        body = get_request_body(event)
    except ValidationError as e:
        return create_error_response(
            status_code=e.status_code,
            error_message=e.message,
            logger=logger,
            metrics=metrics,
            metric_name="ValidationErrors"
        )

    dispatcher = RequestDispatcher(
        store=get_store(),
        base_url=get_base_url(event),
        metrics=metrics
    )
    return dispatcher.dispatch(method, code, body)
