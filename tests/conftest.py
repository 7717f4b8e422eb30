import pytest
from botocore.exceptions import ClientError

from src.models.turn import Turn
from src.stores.messages import MessageStore


class FakeDynamoClient:
    """In-memory stand-in for the boto3 DynamoDB client: one table keyed by id, string attributes only."""

    def __init__(self, page_size: int = 100) -> None:
        self.items: dict[str, dict] = {}
        self.page_size = page_size
        self.failing_deletes: set[str] = set()
        self.calls: list[str] = []

    def put_item(self, TableName, Item):
        self.calls.append("put_item")
        self.items[Item["id"]["S"]] = Item

    def query(self, TableName, IndexName, KeyConditionExpression, ExpressionAttributeNames, ExpressionAttributeValues, ExclusiveStartKey=None):
        self.calls.append("query")
        attribute = ExpressionAttributeNames["#threadTs"]
        wanted = ExpressionAttributeValues[":threadTs"]["S"]
        matches = [item for item in self.items.values() if item[attribute]["S"] == wanted]
        start = int(ExclusiveStartKey["offset"]["N"]) if ExclusiveStartKey else 0
        page = matches[start:start + self.page_size]
        response = {"Items": page}
        if start + self.page_size < len(matches):
            response["LastEvaluatedKey"] = {"offset": {"N": str(start + self.page_size)}}
        return response

    def delete_item(self, TableName, Key):
        self.calls.append("delete_item")
        turn_id = Key["id"]["S"]
        if turn_id in self.failing_deletes:
            raise ClientError({"Error": {"Code": "ProvisionedThroughputExceededException", "Message": "slow down"}}, "DeleteItem")
        self.items.pop(turn_id, None)

    def ids(self) -> set[str]:
        return set(self.items)


@pytest.fixture
def dynamo():
    return FakeDynamoClient()


@pytest.fixture
def store(dynamo):
    return MessageStore(dynamo, "messages", "threadTsIndex")


def make_turn(n: int, thread_ts: str = "100.000", role: str = "user") -> Turn:
    return Turn(
        id=f"msg-{n:02d}#{role}#U123",
        thread_ts=thread_ts,
        content=f"turn {n}",
        said_at=f"2026-10-19T07:00:{n:02d}.000000000Z",
        role=role,
    )
