# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
HAL (Hypertext Application Language) response formatting utilities.
Implements HATEOAS API responses with permission-dependent affordance links.
"""

from typing import Dict, List, Any, Optional
from urllib.parse import urljoin, urlencode

from models.responses import HalLink

PROBLEM_BASE_URL = "https://api.contratos.local/problems"


class HalLinkBuilder:
    """Builder for HAL links with proper URL construction."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip('/') + '/'

    def build_link(
        self,
        path: str,
        method: str = "GET",
        content_type: Optional[str] = None,
        title: Optional[str] = None,
        templated: bool = False
    ) -> HalLink:
        """Build a HAL link with proper URL construction."""
        href = urljoin(self.base_url, path.lstrip('/'))

        return HalLink(
            href=href,
            method=method,
            type=content_type,
            title=title,
            templated=templated
        )

    def build_self_link(self, resource_path: str) -> HalLink:
        """Build self link for a resource."""
        return self.build_link(resource_path, title="Self")

    def build_collection_link(self, collection_path: str) -> HalLink:
        """Build link to parent collection."""
        return self.build_link(collection_path, title="Collection")


class AffordanceLinkBuilder:
    """Builder for affordance links that depend on the caller's permissions."""

    def __init__(self, base_url: str):
        self.link_builder = HalLinkBuilder(base_url)

    def build_resource_affordances(
        self,
        collection_path: str,
        resource_id: str,
        can_manage: bool
    ) -> Dict[str, HalLink]:
        """Self and collection links, plus edit/delete when the caller may manage."""
        base_path = f"{collection_path}/{resource_id}"
        links = {
            'self': self.link_builder.build_self_link(base_path),
            'collection': self.link_builder.build_collection_link(collection_path)
        }

        if can_manage:
            links['edit'] = self.link_builder.build_link(
                base_path,
                method="PUT",
                content_type="application/json",
                title="Edit"
            )
            links['delete'] = self.link_builder.build_link(
                base_path,
                method="DELETE",
                title="Delete"
            )

        return links


class HalResponseBuilder:
    """Main HAL response builder."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip('/')
        self.link_builder = HalLinkBuilder(base_url)
        self.affordance_builder = AffordanceLinkBuilder(base_url)

    @staticmethod
    def _dump_links(links: Dict[str, HalLink]) -> Dict[str, Dict[str, Any]]:
        return {rel: link.model_dump(exclude_none=True) for rel, link in links.items()}

    def build_resource_response(
        self,
        data: Dict[str, Any],
        collection_path: str,
        resource_id: str,
        can_manage: bool = False,
        extra_links: Optional[Dict[str, HalLink]] = None
    ) -> Dict[str, Any]:
        """Build a HAL resource response with affordance links."""
        response = dict(data)
        links = self.affordance_builder.build_resource_affordances(collection_path, resource_id, can_manage)
        if extra_links:
            links.update(extra_links)
        response['_links'] = self._dump_links(links)
        return response

    def build_collection_response(
        self,
        items: List[Dict[str, Any]],
        collection_path: str,
        query_params: Optional[Dict[str, Any]] = None,
        can_manage: bool = False
    ) -> Dict[str, Any]:
        """Build a HAL collection response embedding every item."""
        params = {key: value for key, value in (query_params or {}).items() if value not in (None, '')}
        self_path = f"{collection_path}?{urlencode(params)}" if params else collection_path

        links = {'self': self.link_builder.build_link(self_path, title="Current collection")}
        if can_manage:
            links['create'] = self.link_builder.build_link(
                collection_path,
                method="POST",
                content_type="application/json",
                title="Create"
            )

        return {
            'total': len(items),
            '_links': self._dump_links(links),
            '_embedded': {
                'items': items
            }
        }

    def build_error_response(
        self,
        error_type: str,
        title: str,
        status: int,
        detail: str,
        instance: str,
        validation_errors: Optional[List[Dict[str, Any]]] = None
    ) -> Dict[str, Any]:
        """Build RFC 7807 compliant error response with HAL links."""
        error_response = {
            'type': f"{PROBLEM_BASE_URL}/{error_type}",
            'title': title,
            'status': status,
            'detail': detail,
            'instance': instance
        }

        if validation_errors:
            error_response['errors'] = validation_errors

        links = {
            'help': self.link_builder.build_link(
                f"/docs/errors#{error_type}",
                title="Error documentation"
            )
        }

        if error_type == "validation-error":
            links['schema'] = self.link_builder.build_link(
                "/openapi/openapi.json",
                title="API schema"
            )
        elif error_type in ("authentication-required", "invalid-token", "token-revoked"):
            links['login'] = self.link_builder.build_link(
                "/api/auth/login",
                method="POST",
                content_type="application/json",
                title="Login"
            )
        elif error_type == "insufficient-permissions":
            links['profile'] = self.link_builder.build_link(
                "/api/users/me",
                title="Current user"
            )

        error_response['_links'] = self._dump_links(links)
        return error_response


class HalFormatter:
    """High-level HAL formatter with convenience methods."""

    def __init__(self, base_url: str):
        self.builder = HalResponseBuilder(base_url)

    def format_resource(
        self,
        resource: Dict[str, Any],
        collection_path: str,
        can_manage: bool = False
    ) -> Dict[str, Any]:
        """Format a single record (camelCase dict with an ``id``)."""
        return self.builder.build_resource_response(
            resource,
            collection_path,
            resource['id'],
            can_manage
        )

    def format_collection(
        self,
        resources: List[Dict[str, Any]],
        collection_path: str,
        can_manage: bool = False,
        filters: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Format a list of records, each carrying its own links."""
        formatted = [
            self.format_resource(resource, collection_path, can_manage)
            for resource in resources
        ]
        return self.builder.build_collection_response(formatted, collection_path, filters, can_manage)

    def format_validation_error(
        self,
        detail: str,
        instance: str,
        validation_errors: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        """Format a validation error response."""
        return self.builder.build_error_response(
            "validation-error",
            "Validation Error",
            400,
            detail,
            instance,
            validation_errors
        )

    def format_authentication_error(
        self,
        detail: str,
        instance: str,
        error_type: str = "authentication-required",
        title: str = "Authentication Required"
    ) -> Dict[str, Any]:
        """Format an authentication error response."""
        return self.builder.build_error_response(error_type, title, 401, detail, instance)

    def format_authorization_error(
        self,
        detail: str,
        instance: str
    ) -> Dict[str, Any]:
        """Format an authorization error response."""
        return self.builder.build_error_response(
            "insufficient-permissions",
            "Insufficient Permissions",
            403,
            detail,
            instance
        )

    def format_not_found_error(
        self,
        detail: str,
        instance: str
    ) -> Dict[str, Any]:
        """Format a not found error response."""
        return self.builder.build_error_response(
            "resource-not-found",
            "Resource Not Found",
            404,
            detail,
            instance
        )

    def format_conflict_error(
        self,
        detail: str,
        instance: str
    ) -> Dict[str, Any]:
        """Format a conflict error response."""
        return self.builder.build_error_response(
            "resource-conflict",
            "Resource Conflict",
            409,
            detail,
            instance
        )

    def format_service_unavailable_error(
        self,
        detail: str,
        instance: str
    ) -> Dict[str, Any]:
        """Format a service unavailable error response."""
        return self.builder.build_error_response(
            "service-unavailable",
            "Service Unavailable",
            503,
            detail,
            instance
        )

    def format_server_error(
        self,
        detail: str,
        instance: str
    ) -> Dict[str, Any]:
        """Format a server error response."""
        return self.builder.build_error_response(
            "internal-server-error",
            "Internal Server Error",
            500,
            detail,
            instance
        )
