# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Contracts API - Flask Application Entry Point

This module builds the Flask application with OpenAPI 3.0 support,
configures middleware, and wires the storage, cache and auth services into
the record services used by the routes.
"""

import os
import logging
from typing import Any, Dict, Mapping, Optional
from flask_openapi3 import OpenAPI, Info

from domain.alerts import DEFAULT_THRESHOLDS, parse_thresholds
from observability.config import setup_observability
from observability.middleware import add_observability_middleware
from middleware.auth import AuthMiddleware
from middleware.error_handler import ErrorHandlerMiddleware
from services.alerts import AlertService
from services.amendments import AmendmentService
from services.audit import AuditService, DEFAULT_LIMIT
from services.auth import AuthService
from services.hal import HalFormatter
from services.health import HealthCheckService
from services.mongodb import MongoDBService
from services.records import ContractService, MinuteService
from services.redis import RedisService
from services.users import UserService
from services.utility_units import UtilityUnitService

logger = logging.getLogger(__name__)

# OpenAPI info
info = Info(
    title="Contratos API",
    version="1.0.0",
    description="Municipal contracts back-office API with HATEOAS Level-3 support"
)


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).lower() == 'true'


def load_config(overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """
    Read configuration from environment variables.

    Args:
        overrides: Explicit values taking precedence over the environment

    Returns:
        Configuration mapping for ``app.config``
    """
    environment = os.getenv('ENVIRONMENT', 'development')
    config = {
        'ENVIRONMENT': environment,
        'MONGODB_URI': os.getenv('MONGODB_URI', 'mongodb://localhost:27017/contratos_dev'),
        'MONGODB_DATABASE': os.getenv('MONGODB_DATABASE', 'contratos_dev'),
        'REDIS_URL': os.getenv('REDIS_URL', 'redis://localhost:6379'),
        'REDIS_TOKEN': os.getenv('REDIS_TOKEN', ''),
        'JWT_PRIVATE_KEY': os.getenv('JWT_PRIVATE_KEY'),
        'JWT_PUBLIC_KEY': os.getenv('JWT_PUBLIC_KEY'),
        'BASE_URL': os.getenv('BASE_URL', 'http://localhost:5000'),
        'DOCS_ENABLED': os.getenv('DOCS_ENABLED', 'true'),
        'OTEL_ENABLED': os.getenv('OTEL_ENABLED', 'true'),
        'AUDIT_LOG_LIMIT': os.getenv('AUDIT_LOG_LIMIT', str(DEFAULT_LIMIT)),
        'ALERT_THRESHOLDS': os.getenv('ALERT_THRESHOLDS', ','.join(str(d) for d in DEFAULT_THRESHOLDS))
    }
    config.update(overrides or {})

    config['DEBUG'] = config['ENVIRONMENT'] == 'development'
    config['DOCS_ENABLED'] = _flag(config['DOCS_ENABLED'])
    config['OTEL_ENABLED'] = _flag(config['OTEL_ENABLED'])
    config['AUDIT_LOG_LIMIT'] = int(config['AUDIT_LOG_LIMIT'])
    config['ALERT_THRESHOLDS'] = parse_thresholds(config['ALERT_THRESHOLDS'], DEFAULT_THRESHOLDS)
    return config


def create_app(config: Optional[Mapping[str, Any]] = None,
               mongodb_service: Optional[MongoDBService] = None,
               redis_service: Optional[RedisService] = None,
               auth_service: Optional[AuthService] = None) -> OpenAPI:
    """
    Create and configure the Flask application.

    Services passed in are used as-is, which is how tests inject mocks;
    otherwise they are built from configuration.
    """
    settings = load_config(config)
    setup_observability(settings['ENVIRONMENT'], settings['OTEL_ENABLED'])

    app = OpenAPI(__name__, info=info, doc_ui=settings['DOCS_ENABLED'])
    app.config.update(settings)

    add_observability_middleware(app, instrument=settings['OTEL_ENABLED'])

    # Infrastructure services
    if mongodb_service is None:
        mongodb_service = MongoDBService(settings['MONGODB_URI'], settings['MONGODB_DATABASE'])
    if redis_service is None:
        redis_service = RedisService(settings['REDIS_URL'], settings['REDIS_TOKEN'] or None)
    if auth_service is None:
        auth_service = AuthService(settings['JWT_PRIVATE_KEY'], settings['JWT_PUBLIC_KEY'])

    hal_formatter = HalFormatter(settings['BASE_URL'])
    audit_service = AuditService(mongodb_service, settings['AUDIT_LOG_LIMIT'])

    # Make services available to routes
    app.mongodb_service = mongodb_service
    app.redis_service = redis_service
    app.auth_service = auth_service
    app.hal_formatter = hal_formatter
    app.auth_middleware = AuthMiddleware(auth_service, redis_service)
    app.audit_service = audit_service
    app.contract_service = ContractService(mongodb_service, audit_service)
    app.minute_service = MinuteService(mongodb_service, audit_service)
    app.amendment_service = AmendmentService(mongodb_service, audit_service)
    app.utility_unit_service = UtilityUnitService(mongodb_service)
    app.user_service = UserService(mongodb_service, audit_service, auth_service, redis_service)
    app.alert_service = AlertService(mongodb_service, settings['ALERT_THRESHOLDS'])
    app.health_service = HealthCheckService(mongodb_service, redis_service, settings['ENVIRONMENT'])

    ErrorHandlerMiddleware(app, hal_formatter)

    # Register routes
    from routes.alerts import alerts_bp
    from routes.amendments import amendments_bp
    from routes.audit import audit_bp
    from routes.auth import auth_bp
    from routes.contracts import contracts_bp
    from routes.health import health_bp
    from routes.minutes import minutes_bp
    from routes.users import users_bp
    from routes.utility_units import utility_units_bp

    for blueprint in (auth_bp, contracts_bp, minutes_bp, amendments_bp, utility_units_bp,
                      users_bp, audit_bp, alerts_bp, health_bp):
        app.register_api(blueprint)

    logger.info(
        "Application created",
        extra={"environment": settings['ENVIRONMENT'], "docs_enabled": settings['DOCS_ENABLED']}
    )
    return app


if __name__ == '__main__':
    # Development server
    application = create_app()
    application.run(
        host='0.0.0.0',
        port=int(os.getenv('PORT', 5000)),
        debug=application.config['DEBUG']
    )
