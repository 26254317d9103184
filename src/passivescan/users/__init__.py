# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""User management exports."""

from .manager import ContextUserAuthManager, ExtensionUserManagement, load_user_management
from .models import User

__all__ = ["ContextUserAuthManager", "ExtensionUserManagement", "User", "load_user_management"]
