# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Decoder for attachment content supplied inline as base64 text."""

from __future__ import annotations

import base64
import binascii


class Base64Fetcher:
    """Turn base64 text into the attachment's raw bytes.

    Missing padding is tolerated since clients often strip it.
    """

    def fetch(self, base64_content: str) -> bytes:
        if not base64_content:
            raise ValueError("Empty base64 content")

        content = base64_content.strip()
        padding_needed = 4 - (len(content) % 4)
        if padding_needed != 4:
            content += "=" * padding_needed

        try:
            return base64.b64decode(content, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 content: {e}") from e
