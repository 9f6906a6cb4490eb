"""
Storage Service

Collection-based document storage behind a narrow interface, plus the two
typed stores the games use:

- PuzzleStore: fetch or save a puzzle definition by id
- ResultStore: append a result record, read them back in bulk

MongoDocumentStore is the production backend; MemoryDocumentStore keeps
everything in process for tests and local development.
"""

import copy
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from bson.objectid import ObjectId
from pymongo.errors import PyMongoError
from pymongo.mongo_client import MongoClient
from pymongo.server_api import ServerApi

from ..config.game_settings import GAME_COLLECTIONS
from ..errors import LoadError, NotFoundError, PersistenceFailure
from ..models.game import PuzzleDefinition, Variant, puzzle_from_document
from ..models.result import ResultRecord


class StorageError(Exception):
    """Raised by a backend when the underlying database cannot be used."""


class DocumentStore(ABC):
    """Minimal document database: collections of JSON-like dicts keyed by id."""

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def put(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def append(self, collection: str, data: Dict[str, Any]) -> str:
        """Stores a new document under a generated id and returns the id."""

    @abstractmethod
    def query_all(self, collection: str) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def query_by(self, collection: str, field: str, value: Any) -> List[Dict[str, Any]]:
        ...

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        pass


class MongoDocumentStore(DocumentStore):
    def __init__(self, mongo_uri: str, db_name: str, timeout_ms: int = 5000):
        self.client = MongoClient(
            mongo_uri,
            server_api=ServerApi('1'),
            serverSelectionTimeoutMS=timeout_ms,
        )
        self.db = self.client[db_name]

    @staticmethod
    def _out(doc: Dict[str, Any]) -> Dict[str, Any]:
        doc = dict(doc)
        doc['id'] = str(doc.pop('_id'))
        return doc

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        try:
            doc = self.db[collection].find_one({'_id': doc_id})
        except PyMongoError as e:
            raise StorageError(str(e)) from e
        return self._out(doc) if doc else None

    def put(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        body = {k: v for k, v in data.items() if k != 'id'}
        try:
            self.db[collection].replace_one({'_id': doc_id}, body, upsert=True)
        except PyMongoError as e:
            raise StorageError(str(e)) from e

    def append(self, collection: str, data: Dict[str, Any]) -> str:
        body = {k: v for k, v in data.items() if k != 'id'}
        body['_id'] = str(ObjectId())
        try:
            self.db[collection].insert_one(body)
        except PyMongoError as e:
            raise StorageError(str(e)) from e
        return body['_id']

    def query_all(self, collection: str) -> List[Dict[str, Any]]:
        try:
            return [self._out(doc) for doc in self.db[collection].find()]
        except PyMongoError as e:
            raise StorageError(str(e)) from e

    def query_by(self, collection: str, field: str, value: Any) -> List[Dict[str, Any]]:
        try:
            return [self._out(doc) for doc in self.db[collection].find({field: value})]
        except PyMongoError as e:
            raise StorageError(str(e)) from e

    def ping(self) -> bool:
        try:
            self.client.admin.command('ping')
            return True
        except PyMongoError:
            return False

    def close(self) -> None:
        self.client.close()


class MemoryDocumentStore(DocumentStore):
    """In-memory backend for testing. Documents are copied in and out."""

    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._lock = threading.Lock()
        self._counter = 0

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            doc = self._collections.get(collection, {}).get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    def put(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        with self._lock:
            doc = copy.deepcopy(data)
            doc['id'] = doc_id
            self._collections.setdefault(collection, {})[doc_id] = doc

    def append(self, collection: str, data: Dict[str, Any]) -> str:
        with self._lock:
            self._counter += 1
            doc_id = f"{self._counter:012d}"
            doc = copy.deepcopy(data)
            doc['id'] = doc_id
            self._collections.setdefault(collection, {})[doc_id] = doc
            return doc_id

    def query_all(self, collection: str) -> List[Dict[str, Any]]:
        with self._lock:
            return [copy.deepcopy(d) for d in self._collections.get(collection, {}).values()]

    def query_by(self, collection: str, field: str, value: Any) -> List[Dict[str, Any]]:
        with self._lock:
            return [
                copy.deepcopy(d) for d in self._collections.get(collection, {}).values()
                if d.get(field) == value
            ]


class PuzzleStore:
    """Puzzle definitions, one collection per game."""

    def __init__(self, backend: DocumentStore):
        self.backend = backend

    def get(self, variant: Variant, puzzle_id: str) -> PuzzleDefinition:
        """Raises NotFoundError for unknown ids and LoadError when storage fails."""
        collection = GAME_COLLECTIONS[variant.value]['puzzles']
        try:
            doc = self.backend.get(collection, puzzle_id)
        except StorageError as e:
            raise LoadError(f"Could not load game {puzzle_id}: {e}") from e

        if doc is None:
            raise NotFoundError(f"Game {puzzle_id} not found")
        try:
            return puzzle_from_document(variant, doc)
        except (KeyError, TypeError, ValueError) as e:
            raise LoadError(f"Game {puzzle_id} is malformed: {e}") from e

    def exists(self, variant: Variant, puzzle_id: str) -> bool:
        collection = GAME_COLLECTIONS[variant.value]['puzzles']
        try:
            return self.backend.get(collection, puzzle_id) is not None
        except StorageError as e:
            raise LoadError(str(e)) from e

    def put(self, variant: Variant, puzzle_id: str, puzzle: PuzzleDefinition,
            created_at: Optional[str] = None) -> None:
        collection = GAME_COLLECTIONS[variant.value]['puzzles']
        doc = puzzle.to_document()
        if created_at:
            doc['createdAt'] = created_at
        try:
            self.backend.put(collection, puzzle_id, doc)
        except StorageError as e:
            raise PersistenceFailure(f"Could not save game {puzzle_id}: {e}") from e


class ResultStore:
    """Append-only result records, one collection per game."""

    def __init__(self, backend: DocumentStore):
        self.backend = backend

    def append(self, record: ResultRecord) -> str:
        collection = GAME_COLLECTIONS[record.variant.value]['results']
        try:
            return self.backend.append(collection, record.to_document())
        except StorageError as e:
            raise PersistenceFailure(f"Could not save result for {record.game_id}: {e}") from e

    def query_all(self, variant: Variant) -> List[ResultRecord]:
        collection = GAME_COLLECTIONS[variant.value]['results']
        try:
            docs = self.backend.query_all(collection)
        except StorageError as e:
            raise LoadError(f"Could not load results: {e}") from e
        return [ResultRecord.from_document(variant, d) for d in docs]

    def query_by_user(self, variant: Variant, user_id: str) -> List[ResultRecord]:
        collection = GAME_COLLECTIONS[variant.value]['results']
        try:
            docs = self.backend.query_by(collection, 'userId', user_id)
        except StorageError as e:
            raise LoadError(f"Could not load results: {e}") from e
        return [ResultRecord.from_document(variant, d) for d in docs]
