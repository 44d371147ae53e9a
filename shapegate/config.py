# -*- coding: utf-8 -*-

# Shapegate
# Copyright (C) 2025 Jwadow
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""
Shapegate Configuration.

Centralized storage for all settings and constants.
Loads environment variables and provides typed access to them.
"""

import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

_TRUTHY_VALUES = ("true", "1", "yes", "on", "enabled")


def _get_bool_env(var_name: str, default: str = "false") -> bool:
    """
    Read a boolean flag from the environment.

    Args:
        var_name: Environment variable name
        default: Raw value used when the variable is not set

    Returns:
        True for "true", "1", "yes", "on" or "enabled" (case-insensitive)
    """
    return os.getenv(var_name, default).strip().lower() in _TRUTHY_VALUES


# ==================================================================================================
# Server Settings
# ==================================================================================================

# Server host (default: 0.0.0.0 - listen on all interfaces)
# Use "127.0.0.1" to only allow local connections
DEFAULT_SERVER_HOST: str = "0.0.0.0"
SERVER_HOST: str = os.getenv("SERVER_HOST", DEFAULT_SERVER_HOST)

# Server port (default: 8000)
# Can be overridden by CLI: python main.py --port 9000
DEFAULT_SERVER_PORT: int = 8000
SERVER_PORT: int = int(os.getenv("SERVER_PORT", str(DEFAULT_SERVER_PORT)))

# ==================================================================================================
# Validation Policy
# ==================================================================================================

# Undeclared fields in records are dropped from the validated data by default.
# Set to true to reject requests that carry fields the route does not declare.
STRICT_RECORD_FIELDS: bool = _get_bool_env("STRICT_RECORD_FIELDS")

# A guard predicate that raises is treated as a failed check (400) by default.
# Set to true to surface such errors as server errors (500) instead, so bugs
# in predicates are not reported as client mistakes.
GUARD_FAULTS_PROPAGATE: bool = _get_bool_env("GUARD_FAULTS_PROPAGATE")

# Maximum request body size in bytes (default: 100kb). Larger bodies get 413.
# Only application/json and +json bodies are read; other bodies count as {}.
DEFAULT_MAX_BODY_SIZE: int = 100 * 1024
MAX_BODY_SIZE: int = int(os.getenv("MAX_BODY_SIZE", str(DEFAULT_MAX_BODY_SIZE)))

# Domain accepted by the demo email guard on the /items and /inline routes
ALLOWED_EMAIL_DOMAIN: str = os.getenv("ALLOWED_EMAIL_DOMAIN", "gmail.com").strip().lstrip("@")

# ==================================================================================================
# Logging Settings
# ==================================================================================================

# Log level for the application
# Available levels: TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL
# Set to DEBUG to see every rejected request with its failing stage
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# ==================================================================================================
# Application Version
# ==================================================================================================

APP_VERSION: str = "1.0"
APP_TITLE: str = "Shapegate"
APP_DESCRIPTION: str = "Request validation pipeline for body, query and path parameters."
