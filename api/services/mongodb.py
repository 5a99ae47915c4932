# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
MongoDB service layer with connection pooling.

The service is constructed once by the application factory and handed to
every component that needs storage; there is no module-level instance.
"""

import os
import logging
from datetime import datetime, timezone
from typing import List, Dict, Optional, Any, Sequence, Tuple
from pymongo import MongoClient, ASCENDING, DESCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import (
    ConnectionFailure,
    ServerSelectionTimeoutError,
    DuplicateKeyError
)
from bson import ObjectId
from bson.errors import InvalidId

logger = logging.getLogger(__name__)

Sort = Sequence[Tuple[str, int]]


class DuplicateDocumentError(ValueError):
    """Raised when a unique index rejects a write."""


class MongoDBService:
    """MongoDB service with connection pooling and id normalization."""

    def __init__(self, connection_string: str = None, database_name: str = None):
        """Initialize MongoDB service with connection pooling."""
        self.connection_string = connection_string or os.getenv(
            'MONGODB_URI',
            'mongodb://localhost:27017/contratos_dev'
        )
        self.database_name = database_name or os.getenv('MONGODB_DATABASE', 'contratos_dev')
        self._client: Optional[MongoClient] = None
        self._database: Optional[Database] = None

        # Connection pool settings
        self.max_pool_size = int(os.getenv('MONGODB_MAX_POOL_SIZE', '10'))
        self.min_pool_size = int(os.getenv('MONGODB_MIN_POOL_SIZE', '1'))
        self.max_idle_time_ms = int(os.getenv('MONGODB_MAX_IDLE_TIME_MS', '30000'))
        self.server_selection_timeout_ms = int(os.getenv('MONGODB_SERVER_SELECTION_TIMEOUT_MS', '5000'))

        logger.info(f"MongoDB service initialized for database: {self.database_name}")

    @property
    def client(self) -> MongoClient:
        """Get MongoDB client with connection pooling."""
        if self._client is None:
            try:
                self._client = MongoClient(
                    self.connection_string,
                    maxPoolSize=self.max_pool_size,
                    minPoolSize=self.min_pool_size,
                    maxIdleTimeMS=self.max_idle_time_ms,
                    serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                    retryWrites=True,
                    retryReads=True
                )
                # Test connection
                self._client.admin.command('ping')
                logger.info("MongoDB connection established successfully")
            except (ConnectionFailure, ServerSelectionTimeoutError) as e:
                logger.error(f"Failed to connect to MongoDB: {e}")
                self._client = None
                raise

        return self._client

    @property
    def database(self) -> Database:
        """Get MongoDB database."""
        if self._database is None:
            self._database = self.client[self.database_name]
        return self._database

    def get_collection(self, collection_name: str) -> Collection:
        """Get MongoDB collection."""
        return self.database[collection_name]

    def close_connection(self) -> None:
        """Close MongoDB connection."""
        if self._client:
            self._client.close()
            self._client = None
            self._database = None
            logger.info("MongoDB connection closed")

    def health_check(self) -> Dict[str, Any]:
        """Check MongoDB connection health."""
        try:
            # Ping the database
            result = self.client.admin.command('ping')

            # Get server info
            server_info = self.client.server_info()

            return {
                'status': 'healthy',
                'ping': result.get('ok') == 1,
                'version': server_info.get('version'),
                'database': self.database_name,
                'connection_pool_size': self.max_pool_size
            }
        except Exception as e:
            logger.error(f"MongoDB health check failed: {e}")
            return {
                'status': 'unhealthy',
                'error': str(e),
                'database': self.database_name
            }

    @staticmethod
    def _to_object_id(doc_id: str) -> Optional[ObjectId]:
        """Convert a string id, None when it is not a valid ObjectId."""
        if not doc_id:
            return None
        try:
            return ObjectId(doc_id)
        except (InvalidId, TypeError):
            return None

    @staticmethod
    def _normalize(document: Optional[Dict]) -> Optional[Dict]:
        """Replace ``_id`` with its string form under ``id``."""
        if document is None:
            return None
        document = dict(document)
        if "_id" in document:
            document["id"] = str(document.pop("_id"))
        return document

    # CRUD Operations

    def find(self, collection: str, query: Dict = None, sort: Sort = None,
             limit: int = 0) -> List[Dict]:
        """Find documents matching a query."""
        try:
            cursor = self.get_collection(collection).find(query or {})
            if sort:
                cursor = cursor.sort(list(sort))
            if limit:
                cursor = cursor.limit(limit)

            documents = [self._normalize(doc) for doc in cursor]
            logger.debug(f"Found {len(documents)} documents in {collection}")
            return documents

        except Exception as e:
            logger.error(f"Failed to find documents in {collection}: {e}")
            raise

    def find_one(self, collection: str, doc_id: str) -> Optional[Dict]:
        """Find a single document by id; invalid ids are treated as missing."""
        object_id = self._to_object_id(doc_id)
        if object_id is None:
            logger.debug(f"Invalid document ID {doc_id} for {collection}")
            return None
        return self.find_one_by(collection, {"_id": object_id})

    def find_one_by(self, collection: str, query: Dict) -> Optional[Dict]:
        """Find the first document matching a query."""
        try:
            document = self.get_collection(collection).find_one(query)
            return self._normalize(document)
        except Exception as e:
            logger.error(f"Failed to find document in {collection}: {e}")
            raise

    def find_by_ids(self, collection: str, doc_ids: Sequence[str]) -> Dict[str, Dict]:
        """Find documents by id, keyed by their string id."""
        object_ids = [oid for oid in (self._to_object_id(i) for i in set(doc_ids)) if oid is not None]
        if not object_ids:
            return {}
        documents = self.find(collection, {"_id": {"$in": object_ids}})
        return {doc["id"]: doc for doc in documents}

    def create(self, collection: str, document: Dict) -> Dict:
        """Insert a document, returning it with its id and timestamps."""
        try:
            now = datetime.now(timezone.utc)
            document = dict(document)
            document["created_at"] = now
            document["updated_at"] = now
            document["_id"] = ObjectId()

            result = self.get_collection(collection).insert_one(document)

            logger.info(f"Created document in {collection}: {result.inserted_id}")
            return self._normalize(document)

        except DuplicateKeyError as e:
            logger.error(f"Duplicate key error in {collection}: {e}")
            raise DuplicateDocumentError("Document with this identifier already exists")
        except Exception as e:
            logger.error(f"Failed to create document in {collection}: {e}")
            raise

    def update(self, collection: str, doc_id: str, updates: Dict) -> Optional[Dict]:
        """Set fields on a document, returning the updated document or None if missing."""
        object_id = self._to_object_id(doc_id)
        if object_id is None:
            return None

        try:
            updates = dict(updates)
            updates["updated_at"] = datetime.now(timezone.utc)

            document = self.get_collection(collection).find_one_and_update(
                {"_id": object_id},
                {"$set": updates},
                return_document=ReturnDocument.AFTER
            )

            if document:
                logger.info(f"Updated document {doc_id} in {collection}")
            else:
                logger.warning(f"No document updated for {doc_id} in {collection}")
            return self._normalize(document)

        except DuplicateKeyError as e:
            logger.error(f"Duplicate key error in {collection}: {e}")
            raise DuplicateDocumentError("Document with this identifier already exists")
        except Exception as e:
            logger.error(f"Failed to update document {doc_id} in {collection}: {e}")
            raise

    def delete(self, collection: str, doc_id: str) -> Optional[Dict]:
        """Delete a document, returning the removed document or None if missing."""
        object_id = self._to_object_id(doc_id)
        if object_id is None:
            return None

        try:
            document = self.get_collection(collection).find_one_and_delete({"_id": object_id})

            if document:
                logger.warning(f"Deleted document {doc_id} in {collection}")
            else:
                logger.warning(f"No document deleted for {doc_id} in {collection}")
            return self._normalize(document)

        except Exception as e:
            logger.error(f"Failed to delete document {doc_id} in {collection}: {e}")
            raise

    # Index Management

    def create_indexes(self) -> None:
        """Create performance indexes for all collections."""
        try:
            logger.info("Creating MongoDB indexes...")

            contracts = self.get_collection("contracts")
            contracts.create_index("contract_id")
            contracts.create_index("department")
            contracts.create_index("end_date")

            minutes = self.get_collection("minutes")
            minutes.create_index("minute_id")
            minutes.create_index("department")
            minutes.create_index("end_date")

            amendments = self.get_collection("contract_amendments")
            amendments.create_index([("contract_id", ASCENDING), ("status", ASCENDING)])
            amendments.create_index([("created_at", DESCENDING)])

            utility_units = self.get_collection("utility_units")
            utility_units.create_index("local_name")

            profiles = self.get_collection("profiles")
            profiles.create_index("email", unique=True)

            audit_logs = self.get_collection("audit_logs")
            audit_logs.create_index([("created_at", DESCENDING)])
            audit_logs.create_index([("user_email", ASCENDING), ("created_at", DESCENDING)])
            audit_logs.create_index([("resource_type", ASCENDING), ("created_at", DESCENDING)])

            logger.info("MongoDB indexes created successfully")

        except Exception as e:
            logger.error(f"Failed to create MongoDB indexes: {e}")
            raise
