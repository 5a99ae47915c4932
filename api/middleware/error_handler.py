# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Error handling middleware with structured HAL responses.
Provides centralized error handling and formatting for Flask applications.
"""

from flask import Flask, request, jsonify
from werkzeug.exceptions import HTTPException
from pydantic import ValidationError
from typing import Dict, Any, List, Tuple
from opentelemetry import trace
import logging
import traceback

from services.hal import HalFormatter

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class CustomException(Exception):
    """Base class for custom application exceptions."""

    def __init__(self, message: str, status_code: int = 500, error_type: str = "application-error"):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_type = error_type


class ValidationException(CustomException):
    """Exception for validation errors."""

    def __init__(self, message: str, validation_errors: list = None):
        super().__init__(message, 400, "validation-error")
        self.validation_errors = validation_errors or []


class AuthenticationException(CustomException):
    """Exception for authentication errors."""

    def __init__(self, message: str, error_type: str = "authentication-required",
                 title: str = "Authentication Required"):
        super().__init__(message, 401, error_type)
        self.title = title


class AuthorizationException(CustomException):
    """Exception for authorization errors."""

    def __init__(self, message: str):
        super().__init__(message, 403, "insufficient-permissions")


class NotFoundException(CustomException):
    """Exception for resource not found errors."""

    def __init__(self, message: str):
        super().__init__(message, 404, "resource-not-found")


class ConflictException(CustomException):
    """Exception for resource conflict errors."""

    def __init__(self, message: str):
        super().__init__(message, 409, "resource-conflict")


class ServiceUnavailableException(CustomException):
    """Exception for service unavailable errors."""

    def __init__(self, message: str):
        super().__init__(message, 503, "service-unavailable")


def _pydantic_errors(error: ValidationError) -> List[Dict[str, Any]]:
    return [
        {
            "field": ".".join(str(loc) for loc in item["loc"]),
            "message": item["msg"],
            "type": item["type"]
        }
        for item in error.errors()
    ]


class ErrorHandlerMiddleware:
    """Centralized error handling middleware with HAL response formatting."""

    def __init__(self, app: Flask, hal_formatter: HalFormatter):
        self.app = app
        self.hal_formatter = hal_formatter
        self.register_error_handlers()

    @property
    def is_production(self) -> bool:
        return self.app.config.get('ENVIRONMENT') == 'production'

    def register_error_handlers(self):
        """Register error handlers with Flask application."""

        @self.app.errorhandler(CustomException)
        def handle_custom_exception(error: CustomException):
            return self.handle_custom_exception(error)

        @self.app.errorhandler(ValidationError)
        def handle_model_validation_error(error: ValidationError):
            return self.handle_model_validation_error(error)

        @self.app.errorhandler(HTTPException)
        def handle_http_exception(error: HTTPException):
            if error.code is not None and error.code >= 500:
                return self.handle_server_error(error)
            return self.handle_client_error(error)

        # Handle generic exceptions
        @self.app.errorhandler(Exception)
        def handle_generic_exception(error):
            return self.handle_unexpected_error(error)

    def handle_custom_exception(self, error: CustomException) -> Tuple[Any, int]:
        """
        Format application exceptions raised by services and routes.

        Args:
            error: Raised application exception

        Returns:
            Tuple of (JSON response, status code)
        """
        with tracer.start_as_current_span("error_handler.custom_exception") as span:
            span.set_attributes({
                "error.type": error.error_type,
                "error.status": error.status_code,
                "http.method": request.method,
                "http.path": request.path
            })

            logger.warning(
                f"Custom exception: {error.error_type}",
                extra={
                    "error_type": error.error_type,
                    "status_code": error.status_code,
                    "detail": error.message,
                    "path": request.path,
                    "method": request.method
                }
            )

            formatter = self.hal_formatter
            if isinstance(error, ValidationException):
                error_response = formatter.format_validation_error(
                    error.message,
                    request.path,
                    error.validation_errors
                )
            elif isinstance(error, AuthenticationException):
                error_response = formatter.format_authentication_error(
                    error.message, request.path, error.error_type, error.title
                )
            elif isinstance(error, AuthorizationException):
                error_response = formatter.format_authorization_error(error.message, request.path)
            elif isinstance(error, NotFoundException):
                error_response = formatter.format_not_found_error(error.message, request.path)
            elif isinstance(error, ConflictException):
                error_response = formatter.format_conflict_error(error.message, request.path)
            elif isinstance(error, ServiceUnavailableException):
                error_response = formatter.format_service_unavailable_error(error.message, request.path)
            else:
                error_response = formatter.format_server_error(error.message, request.path)

            return jsonify(error_response), error.status_code

    def handle_model_validation_error(self, error: ValidationError) -> Tuple[Any, int]:
        """Validation errors raised outside the request parsing helpers."""
        validation_errors = _pydantic_errors(error)
        logger.warning(
            "Model validation failed",
            extra={"path": request.path, "method": request.method, "errors": validation_errors}
        )
        error_response = self.hal_formatter.format_validation_error(
            f"Validation failed for {error.title}",
            request.path,
            validation_errors
        )
        return jsonify(error_response), 400

    def handle_client_error(self, error: HTTPException) -> Tuple[Any, int]:
        """
        Handle client errors (4xx status codes).

        Args:
            error: HTTP exception

        Returns:
            Tuple of (JSON response, status code)
        """
        with tracer.start_as_current_span("error_handler.client_error") as span:
            span.set_attributes({
                "error.status": error.code,
                "http.method": request.method,
                "http.path": request.path
            })

            title = error.name
            detail = str(error.description) if error.description else title

            logger.warning(
                f"Client error: {title}",
                extra={
                    "status_code": error.code,
                    "detail": detail,
                    "path": request.path,
                    "method": request.method,
                    "user_agent": request.headers.get('User-Agent'),
                    "ip_address": request.remote_addr
                }
            )

            if error.code == 401:
                error_response = self.hal_formatter.format_authentication_error(detail, request.path)
            elif error.code == 403:
                error_response = self.hal_formatter.format_authorization_error(detail, request.path)
            elif error.code == 404:
                error_response = self.hal_formatter.format_not_found_error(detail, request.path)
            elif error.code == 409:
                error_response = self.hal_formatter.format_conflict_error(detail, request.path)
            else:
                error_type = title.lower().replace(' ', '-')
                error_response = self.hal_formatter.builder.build_error_response(
                    error_type,
                    title,
                    error.code,
                    detail,
                    request.path
                )

            return jsonify(error_response), error.code

    def handle_server_error(self, error: HTTPException) -> Tuple[Any, int]:
        """
        Handle server errors (5xx status codes).

        Args:
            error: HTTP exception

        Returns:
            Tuple of (JSON response, status code)
        """
        with tracer.start_as_current_span("error_handler.server_error") as span:
            span.set_attributes({
                "error.status": error.code,
                "http.method": request.method,
                "http.path": request.path
            })

            detail = str(error.description) if error.description else error.name

            logger.error(
                f"Server error: {error.name}",
                extra={
                    "status_code": error.code,
                    "detail": detail,
                    "path": request.path,
                    "method": request.method
                },
                exc_info=True
            )

            if error.code == 503:
                error_response = self.hal_formatter.format_service_unavailable_error(detail, request.path)
                return jsonify(error_response), 503

            # Don't expose internal error details in production
            if self.is_production:
                detail = "An internal server error occurred"

            error_response = self.hal_formatter.format_server_error(detail, request.path)
            return jsonify(error_response), error.code

    def handle_unexpected_error(self, error: Exception) -> Tuple[Any, int]:
        """
        Handle unexpected exceptions not caught by specific handlers.

        Args:
            error: Unexpected exception

        Returns:
            Tuple of (JSON response, status code)
        """
        with tracer.start_as_current_span("error_handler.unexpected_error") as span:
            span.set_attributes({
                "error.type": "unexpected-error",
                "error.class": error.__class__.__name__,
                "http.method": request.method,
                "http.path": request.path
            })

            # Record exception in span
            span.record_exception(error)

            logger.error(
                f"Unexpected error: {error.__class__.__name__}",
                extra={
                    "error_type": "unexpected-error",
                    "error_class": error.__class__.__name__,
                    "error_message": str(error),
                    "path": request.path,
                    "method": request.method,
                    "traceback": traceback.format_exc()
                },
                exc_info=True
            )

            # Don't expose internal error details
            detail = "An unexpected error occurred"
            if not self.is_production:
                detail = f"{error.__class__.__name__}: {str(error)}"

            error_response = self.hal_formatter.format_server_error(detail, request.path)

            return jsonify(error_response), 500
