#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Create the first super admin console user.

Usage: create_admin.py <email> <password> [name]
"""

import os
import sys
import logging

# Add the parent directory to the path so we can import from api
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from middleware.error_handler import ConflictException
from models.enums import UserRole
from models.requests import CreateUserRequest
from services.audit import AuditService
from services.auth import AuthService
from services.mongodb import MongoDBService
from services.users import UserService

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def main(argv):
    if len(argv) < 3:
        print(__doc__.strip())
        sys.exit(2)

    email, password = argv[1], argv[2]
    name = argv[3] if len(argv) > 3 else 'Administrador'

    mongo_service = MongoDBService()
    try:
        user_service = UserService(mongo_service, AuditService(mongo_service), AuthService())
        profile = user_service.create_user(
            CreateUserRequest(email=email, password=password, name=name, role=UserRole.SUPER_ADMIN)
        )
        logger.info(f"Super admin created: {profile.email} ({profile.id})")
    except ConflictException as e:
        logger.error(e.message)
        sys.exit(1)
    finally:
        mongo_service.close_connection()


if __name__ == "__main__":
    main(sys.argv)
