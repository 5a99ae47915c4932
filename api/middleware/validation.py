# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request validation using Pydantic models.

Views parse their payloads after authentication; failures raise
``ValidationException`` and are rendered by the error handler as
validation problems.
"""

from flask import request
from typing import Type, Dict, Any, List, TypeVar
from pydantic import BaseModel, ValidationError
from opentelemetry import trace
import logging

from middleware.error_handler import ValidationException

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

ModelT = TypeVar('ModelT', bound=BaseModel)


def format_validation_errors(validation_error: ValidationError) -> List[Dict[str, Any]]:
    """
    Format Pydantic validation errors for API response.

    Args:
        validation_error: Pydantic ValidationError

    Returns:
        List of formatted error dictionaries
    """
    errors = []

    for error in validation_error.errors():
        field_path = ".".join(str(loc) for loc in error["loc"])
        errors.append({
            "field": field_path,
            "message": error["msg"],
            "type": error["type"],
            "input": error.get("input")
        })

    return errors


def parse_model(model_class: Type[ModelT], data: Dict[str, Any]) -> ModelT:
    """Validate a mapping against a model, raising ValidationException on failure."""
    try:
        return model_class.model_validate(data)
    except ValidationError as e:
        validation_errors = format_validation_errors(e)
        logger.warning(
            "Request validation failed",
            extra={
                "model": model_class.__name__,
                "path": request.path,
                "method": request.method,
                "errors": validation_errors
            }
        )
        raise ValidationException(
            f"Request validation failed for {model_class.__name__}",
            validation_errors
        )


def parse_json_body(model_class: Type[ModelT]) -> ModelT:
    """
    Parse and validate the JSON request body.

    Raises:
        ValidationException: On a missing or non-JSON body or invalid fields
    """
    with tracer.start_as_current_span("validation.parse_json_body") as span:
        span.set_attributes({
            "validation.model": model_class.__name__,
            "http.method": request.method,
            "http.path": request.path
        })

        if not request.is_json:
            span.set_attribute("validation.result", "invalid_content_type")
            raise ValidationException(
                "Request must have Content-Type: application/json",
                [{
                    "field": "content-type",
                    "message": "Expected application/json",
                    "type": "content_type_error",
                    "input": request.content_type
                }]
            )

        json_data = request.get_json(silent=True)
        if not isinstance(json_data, dict):
            span.set_attribute("validation.result", "invalid_json")
            raise ValidationException(
                "Invalid JSON in request body",
                [{
                    "field": "body",
                    "message": "Expected a JSON object",
                    "type": "json_error",
                    "input": None
                }]
            )

        body = parse_model(model_class, json_data)
        span.set_attribute("validation.result", "success")
        return body


def parse_query_params(model_class: Type[ModelT]) -> ModelT:
    """Parse and validate query string parameters."""
    with tracer.start_as_current_span("validation.parse_query_params") as span:
        span.set_attribute("validation.model", model_class.__name__)
        return parse_model(model_class, request.args.to_dict())
