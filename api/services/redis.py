# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Redis service for the JWT token blocklist.

HTTPS URLs are served by the Upstash HTTP client for serverless deployments;
``redis://`` URLs use the standard redis-py client for local development.
"""

import os
import time
from typing import Optional, Dict, Any
import redis
from upstash_redis import Redis as UpstashRedis
from opentelemetry import trace
import logging

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

BLOCKLIST_PREFIX = "jwt:blocked:"


class RedisConnectionError(Exception):
    """Raised when Redis connection fails."""
    pass


class RedisService:
    """
    Redis service backing the logout token blocklist.

    Redis is optional: without a configured URL, or when the server cannot
    be reached at start-up, every operation degrades to a no-op.
    """

    def __init__(self, redis_url: Optional[str] = None, redis_token: Optional[str] = None, client=None):
        """
        Initialize the Redis service.

        Args:
            redis_url: Upstash HTTPS URL or redis:// connection URL
            redis_token: Upstash Redis authentication token
            client: Pre-built client, used as is
        """
        self.redis_url = redis_url or os.getenv("REDIS_URL")
        self.redis_token = redis_token or os.getenv("REDIS_TOKEN")

        if client is not None:
            self.client = client
            return

        if not self.redis_url:
            logger.warning("No REDIS_URL configured, Redis operations will be disabled")
            self.client = None
            return

        try:
            if self.redis_url.startswith("https://"):
                self.client = UpstashRedis(url=self.redis_url, token=self.redis_token)
            else:
                self.client = redis.from_url(self.redis_url, decode_responses=True)

            self._test_connection()

            logger.info("Redis service initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize Redis service: {str(e)}")
            self.client = None

    def _test_connection(self) -> None:
        """Test Redis connection."""
        if not self.ping():
            raise RedisConnectionError("Redis ping failed")

    def is_available(self) -> bool:
        """Check if Redis service is available."""
        return self.client is not None

    def _handle_redis_error(self, operation: str, error: Exception) -> None:
        """Handle Redis operation errors with logging."""
        logger.error(f"Redis {operation} failed: {str(error)}")

    def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> bool:
        """
        Set a key-value pair with TTL.

        Args:
            key: Redis key
            value: Value to store
            ttl_seconds: Time to live in seconds

        Returns:
            True if successful, False otherwise
        """
        if not self.is_available():
            return False

        with tracer.start_as_current_span("redis.set_with_ttl") as span:
            span.set_attributes({
                "redis.operation": "set_with_ttl",
                "redis.key": key,
                "redis.ttl": ttl_seconds
            })

            try:
                result = self.client.setex(key, ttl_seconds, value)
                span.set_attribute("redis.result", "success")
                logger.debug(f"Redis SET successful: {key} (TTL: {ttl_seconds}s)")
                # redis-py answers True, Upstash answers "OK"
                return result is True or result == "OK"

            except Exception as e:
                span.set_attribute("redis.result", "error")
                self._handle_redis_error("SET", e)
                return False

    def exists(self, key: str) -> bool:
        """Check if key exists."""
        if not self.is_available():
            return False

        try:
            return self.client.exists(key) > 0
        except Exception as e:
            self._handle_redis_error("EXISTS", e)
            return False

    # JWT Token Blocklist Methods

    def is_token_blocked(self, token_id: str) -> bool:
        """
        Check if a JWT token is in the blocklist.

        Args:
            token_id: Unique token identifier

        Returns:
            True if token is blocked, False otherwise
        """
        if not self.is_available():
            logger.warning("Redis unavailable for token blocklist check - allowing token")
            return False

        with tracer.start_as_current_span("redis.is_token_blocked") as span:
            span.set_attribute("redis.operation", "is_token_blocked")

            result = self.exists(f"{BLOCKLIST_PREFIX}{token_id}")

            span.set_attribute("auth.token_blocked", result)
            logger.debug(f"Token blocklist check: {token_id} -> {'blocked' if result else 'allowed'}")

            return result

    def block_token(self, token_id: str, ttl_seconds: int) -> bool:
        """
        Add a JWT token to the blocklist.

        Args:
            token_id: Unique token identifier
            ttl_seconds: Time to live (should match token expiration)

        Returns:
            True if token was blocked, False otherwise
        """
        if not self.is_available():
            logger.error("Redis unavailable - cannot block token")
            return False

        with tracer.start_as_current_span("redis.block_token") as span:
            span.set_attributes({
                "redis.operation": "block_token",
                "redis.ttl": ttl_seconds
            })

            result = self.set_with_ttl(f"{BLOCKLIST_PREFIX}{token_id}", "1", ttl_seconds)

            span.set_attribute("auth.token_block_result", "success" if result else "failed")

            if result:
                logger.info(f"Token blocked successfully: {token_id} (TTL: {ttl_seconds}s)")
            else:
                logger.error(f"Failed to block token: {token_id}")

            return result

    # Health Check Methods

    def ping(self) -> bool:
        """Ping Redis server."""
        if not self.is_available():
            return False

        try:
            result = self.client.ping()
            return result is True or result == "PONG"
        except Exception as e:
            logger.error(f"Redis ping failed: {str(e)}")
            return False

    def health_check(self) -> Dict[str, Any]:
        """
        Perform Redis health check.

        Returns:
            Health check results
        """
        if not self.is_available():
            return {
                "status": "unavailable",
                "message": "Redis client not initialized",
                "timestamp": time.time()
            }

        start_time = time.time()
        healthy = self.ping()
        response_time = (time.time() - start_time) * 1000

        return {
            "status": "healthy" if healthy else "unhealthy",
            "response_time_ms": round(response_time, 2),
            "timestamp": time.time()
        }
