# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request utilities for extracting and processing request data.
"""

from flask import request, jsonify, Response
from typing import Dict, Any, Optional, Tuple

HAL_CONTENT_TYPE = 'application/hal+json'


class RequestParser:
    """Utility for parsing and extracting request data."""

    @staticmethod
    def get_client_info() -> Dict[str, Any]:
        """Client address and agent recorded with audit entries."""
        forwarded = request.headers.get('X-Forwarded-For', '')
        return {
            'ip_address': forwarded.split(',')[0].strip() if forwarded else request.remote_addr,
            'user_agent': request.headers.get('User-Agent', ''),
            'session_id': request.headers.get('X-Session-ID')
        }


class ResponseBuilder:
    """Builds HAL+JSON responses."""

    @staticmethod
    def hal(data: Dict[str, Any], status_code: int = 200) -> Tuple[Response, int]:
        response = jsonify(data)
        response.headers['Content-Type'] = HAL_CONTENT_TYPE
        return response, status_code

    @staticmethod
    def no_content() -> Tuple[str, int]:
        return '', 204


class HeaderUtils:
    """Utilities for working with HTTP headers."""

    @staticmethod
    def get_bearer_token() -> Optional[str]:
        """
        Extract Bearer token from Authorization header.

        Returns:
            Token string or None if not found
        """
        auth_header = request.headers.get('Authorization', '')
        if auth_header.startswith('Bearer '):
            return auth_header[7:].strip() or None
        return None
