"""DynamoDB-backed storage of conversation turns.

Table schema:
  - PK: `id` (S), formatted as "{client_msg_id}#{role}#{user}"
  - GSI `threadTsIndex`: PK `threadTs` (S)
  - Attributes: `content` (S), `saidAt` (S), `role` (S)
"""

import logging

import boto3
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError

from src.models.turn import Turn

log = logging.getLogger(__name__)

DEFAULT_THREAD_INDEX = "threadTsIndex"

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


class StorageError(Exception):
    """The message table rejected a request or could not be reached."""


def _serialize(item: dict) -> dict:
    return {key: _serializer.serialize(value) for key, value in item.items()}


def _deserialize(item: dict) -> dict:
    return {key: _deserializer.deserialize(value) for key, value in item.items()}


class MessageStore:
    def __init__(self, client, table_name: str, thread_index: str = DEFAULT_THREAD_INDEX) -> None:
        self._client = client
        self.table_name = table_name
        self.thread_index = thread_index

    @classmethod
    def from_config(cls, config) -> "MessageStore":
        client = boto3.client("dynamodb", region_name=config.aws_region)
        return cls(client, config.messages_table_name, config.messages_thread_index)

    def append(self, turn: Turn) -> None:
        try:
            self._client.put_item(TableName=self.table_name, Item=_serialize(turn.to_item()))
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"Failed to store turn {turn.id}") from exc

    def list_by_thread(self, thread_ts: str) -> list[Turn]:
        """All turns of a thread, in no particular order."""
        query = {
            "TableName": self.table_name,
            "IndexName": self.thread_index,
            "KeyConditionExpression": "#threadTs = :threadTs",
            "ExpressionAttributeNames": {"#threadTs": "threadTs"},
            "ExpressionAttributeValues": {":threadTs": {"S": thread_ts}},
        }
        items = []
        try:
            while True:
                response = self._client.query(**query)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                query["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"Failed to list turns for thread {thread_ts}") from exc
        log.debug("Thread %s: %d stored turns", thread_ts, len(items))
        return [Turn.from_item(_deserialize(item)) for item in items]

    def delete(self, turn_id: str) -> None:
        # DynamoDB treats deleting a missing key as success
        try:
            self._client.delete_item(TableName=self.table_name, Key={"id": {"S": turn_id}})
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"Failed to delete turn {turn_id}") from exc
