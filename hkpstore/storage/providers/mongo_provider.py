from __future__ import annotations
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, Tuple

from pymongo import ASCENDING, MongoClient, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from hkpstore.constants import DEFAULT_COLLECTION_NAME, DEFAULT_DB_NAME, DEFAULT_MONGO_URI
from hkpstore.errors import BackendError, UniquenessViolation
from hkpstore.logger import get_logger
from hkpstore.storage.provider import CollectionHandle, StorageProvider

log = get_logger("hkpstore.storage.mongo")


@contextmanager
def _driver_errors():
    try:
        yield
    except DuplicateKeyError as e:
        raise UniquenessViolation(str(e)) from e
    except PyMongoError as e:
        raise BackendError(str(e)) from e


class _MongoCollection(CollectionHandle):
    def __init__(self, collection, session=None):
        self.c = collection
        # only pass session= when one was opened, so sessionless clients work
        self._kw = {"session": session} if session is not None else {}

    def ensure_index(self, field: str, unique: bool = False, background: bool = False) -> None:
        with _driver_errors():
            self.c.create_index([(field, ASCENDING)], unique=unique, background=background, **self._kw)

    def find(self, filter: Dict[str, Any], limit: int = 0) -> Iterator[Dict[str, Any]]:
        with _driver_errors():
            cursor = self.c.find(filter, **self._kw)
            if limit:
                cursor = cursor.limit(limit)
            # drain inside the session; the cursor must not outlive it
            return iter(list(cursor))

    def insert(self, doc: Dict[str, Any]) -> None:
        with _driver_errors():
            self.c.insert_one(dict(doc), **self._kw)

    def find_and_modify(self, filter: Dict[str, Any], update: Dict[str, Any]) -> Tuple[int, Optional[Dict[str, Any]]]:
        with _driver_errors():
            doc = self.c.find_one_and_update(
                filter, update, return_document=ReturnDocument.AFTER, **self._kw
            )
        if doc is None:
            return 0, None
        return 1, doc


class MongoStorage(StorageProvider):
    """
    MongoDB provider.

    Each ``session()`` opens a client session from the driver's pool and ends
    it when the block exits. Pass ``use_sessions=False`` for clients that do
    not implement sessions; operations then use the driver's implicit ones.
    """

    name = "mongo"

    def __init__(
        self,
        uri: str = DEFAULT_MONGO_URI,
        db_name: str = DEFAULT_DB_NAME,
        collection: str = DEFAULT_COLLECTION_NAME,
        client: Optional[MongoClient] = None,
        use_sessions: bool = True,
    ):
        self.db_name = db_name
        self.collection_name = collection
        self.use_sessions = use_sessions
        self._owns_client = client is None
        self.client = client if client is not None else MongoClient(uri)
        log.info(f"[MONGO] bound db={db_name} collection={collection}")

    @contextmanager
    def session(self):
        collection = self.client[self.db_name][self.collection_name]
        if not self.use_sessions:
            yield _MongoCollection(collection)
            return

        with _driver_errors():
            s = self.client.start_session()
        try:
            yield _MongoCollection(collection, s)
        finally:
            s.end_session()

    def close(self) -> None:
        if self._owns_client:
            self.client.close()
