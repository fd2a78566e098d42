"""
Commons package for the short-link service.
"""

from .code_utils import (
    generate_code,
    is_valid_code,
    is_valid_url,
    extract_target_url,
    CODE_LENGTH,
    CODE_ALPHABET,
    MAX_URL_LENGTH
)

from .http_utils import (
    get_base_url,
    extract_code,
    get_request_body,
    create_json_response,
    create_redirect_response,
    create_error_response,
    ShortlinkError,
    ValidationError,
    NotFoundError,
    MethodNotAllowedError,
    StorageError
)

from .store import MappingStore, InMemoryStore, LockedInMemoryStore
from .dynamodb_store import DynamoDBStore
from .dispatcher import RequestDispatcher

__all__ = [
    # Code utilities
    'generate_code',
    'is_valid_code',
    'is_valid_url',
    'extract_target_url',
    'CODE_LENGTH',
    'CODE_ALPHABET',
    'MAX_URL_LENGTH',

    # Request/response utilities
    'get_base_url',
    'extract_code',
    'get_request_body',
    'create_json_response',
    'create_redirect_response',
    'create_error_response',
    'ShortlinkError',
    'ValidationError',
    'NotFoundError',
    'MethodNotAllowedError',
    'StorageError',

    # Stores
    'MappingStore',
    'InMemoryStore',
    'LockedInMemoryStore',
    'DynamoDBStore',

    'RequestDispatcher',
]
