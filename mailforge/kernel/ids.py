"""
Mailforge Kernel - Identifier generation

Short, collision-resistant ids with a type prefix: sec_*, col_*, blk_*.
Only uniqueness is guaranteed, never the value.
"""

from __future__ import annotations

import secrets
import string

# URL-safe alphabet, 64 symbols; 10 symbols gives 60 bits of entropy
_ALPHABET = string.ascii_letters + string.digits + "_-"
_ID_LENGTH = 10


def generate_id(prefix: str | None = None) -> str:
    token = "".join(secrets.choice(_ALPHABET) for _ in range(_ID_LENGTH))
    return f"{prefix}_{token}" if prefix else token


def generate_section_id() -> str:
    return generate_id("sec")


def generate_column_id() -> str:
    return generate_id("col")


def generate_block_id() -> str:
    return generate_id("blk")
