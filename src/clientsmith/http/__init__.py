# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request/response model exports."""

from .headers import header_value, merge_headers, normalize_headers
from .models import MethodDescriptor, Request, Response
from .query import to_query_string

__all__ = [
    "MethodDescriptor",
    "Request",
    "Response",
    "header_value",
    "merge_headers",
    "normalize_headers",
    "to_query_string",
]
