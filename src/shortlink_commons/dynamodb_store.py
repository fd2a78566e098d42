"""
DynamoDB-backed mapping store.
"""

import os
import boto3
from typing import Optional
from botocore.exceptions import BotoCoreError, ClientError
from aws_lambda_powertools import Logger

from .http_utils import SERVICE_NAME, StorageError
from .store import MappingStore

# Constants
DEFAULT_TABLE_NAME = 'url-shortner'
CODE_ATTRIBUTE = 'Code'
URL_ATTRIBUTE = 'URL'
MAX_KEY_BYTES = 2048

logger = Logger(service=SERVICE_NAME)


def _handle_client_error(error: Exception, operation: str) -> None:
    """
    Convert a boto3 failure into a StorageError.

    Args:
        error: The ClientError or BotoCoreError raised by boto3
        operation: Description of the operation that failed

    Raises:
        StorageError: Always
    """
    if isinstance(error, ClientError):
        error_code = error.response.get('Error', {}).get('Code', 'Unknown')
        error_message = error.response.get('Error', {}).get('Message', str(error))
    else:
        error_code = type(error).__name__
        error_message = str(error)

    # logged once by whoever turns the StorageError into a response
    raise StorageError(f"DynamoDB {operation} failed: {error_code} - {error_message}", error)


class DynamoDBStore(MappingStore):
    """
    Mapping store on a DynamoDB table keyed by ``Code`` with a ``URL`` attribute.

    The boto3 table resource is created on first use unless one is injected.
    """

    def __init__(self, table_name: Optional[str] = None, table=None):
        self.table_name = table_name or os.environ.get('DYNAMODB_TABLE_NAME', DEFAULT_TABLE_NAME)
        self._table = table

    @property
    def table(self):
        if self._table is None:
            if not self.table_name:
                raise StorageError("DynamoDB table not configured")
            try:
                self._table = boto3.resource('dynamodb').Table(self.table_name)
            except BotoCoreError as e:
                _handle_client_error(e, "connect")
        return self._table

    def put(self, code: str, url: str) -> None:
        """
        Write a mapping unconditionally; an existing code is overwritten.

        Raises:
            StorageError: If the put_item call fails
        """
        try:
            self.table.put_item(Item={CODE_ATTRIBUTE: code, URL_ATTRIBUTE: url})
        except (ClientError, BotoCoreError) as e:
            _handle_client_error(e, "put_item")

        logger.debug(f"Stored mapping {code} in {self.table_name}")

    def get(self, code: str) -> Optional[str]:
        """
        Retrieve the URL for a code.

        Returns:
            The stored URL, or None if the item does not exist

        Raises:
            StorageError: If the get_item call fails or the item has no URL
        """
        # DynamoDB rejects partition keys over MAX_KEY_BYTES; no stored code is that long
        if len(code.encode('utf-8')) > MAX_KEY_BYTES:
            logger.debug(f"Code of {len(code)} characters exceeds the key size limit")
            return None

        try:
            response = self.table.get_item(Key={CODE_ATTRIBUTE: code})
        except (ClientError, BotoCoreError) as e:
            _handle_client_error(e, "get_item")

        item = response.get('Item')
        if item is None:
            return None

        url = item.get(URL_ATTRIBUTE)
        if not isinstance(url, str):
            raise StorageError(f"item {code} has no {URL_ATTRIBUTE} attribute")
        return url
