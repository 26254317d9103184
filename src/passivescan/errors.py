# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Exception types raised while loading scan configuration."""


class PassiveScanError(Exception):
    """Base class for passivescan errors."""


class ContextDefinitionError(PassiveScanError, ValueError):
    """A context definition could not be turned into a Context."""

    def __init__(self, message: str, *, context_name: str | None = None):
        self.context_name = context_name
        if context_name:
            message = f"context {context_name!r}: {message}"
        super().__init__(message)


class UserDefinitionError(PassiveScanError, ValueError):
    """A user definition could not be turned into a User."""


__all__ = ["ContextDefinitionError", "PassiveScanError", "UserDefinitionError"]
