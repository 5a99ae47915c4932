#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Print a fresh RS256 key pair as JWT_PRIVATE_KEY / JWT_PUBLIC_KEY values.

Configured keys keep tokens valid across restarts and serverless instances.
"""

import os
import sys

# Add the parent directory to the path so we can import from api
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.auth import AuthService


def main():
    private_key, public_key = AuthService.generate_key_pair()
    newline = "\\n"
    print(f'JWT_PRIVATE_KEY="{private_key.replace(chr(10), newline)}"')
    print(f'JWT_PUBLIC_KEY="{public_key.replace(chr(10), newline)}"')


if __name__ == "__main__":
    main()
