"""Collision-safe worktree directory naming.

A branch maps to ``<slug>--<8hex>``: the slug keeps the directory readable,
the hash of the full branch name keeps branches that sanitize to the same
slug (``feature/a-b`` and ``feature-a/b``) apart.
"""

FNV_OFFSET_BASIS = 0xCBF29CE484222325
FNV_PRIME = 0x100000001B3
HASH_SEPARATOR = "--"
EMPTY_SLUG = "branch"


def slugify(branch: str) -> str:
    """Lowercase ASCII alphanumerics, collapse everything else to single hyphens."""
    chars = []
    prev_hyphen = True  # suppress leading hyphen

    for ch in branch:
        if ch.isascii() and ch.isalnum():
            chars.append(ch.lower())
            prev_hyphen = False
        elif not prev_hyphen:
            chars.append("-")
            prev_hyphen = True

    slug = "".join(chars).rstrip("-")
    return slug or EMPTY_SLUG


def hash8(text: str) -> str:
    """8 hex digits from the 64-bit FNV-1a hash of ``text`` (low 32 bits)."""
    h = FNV_OFFSET_BASIS
    for byte in text.encode("utf-8"):
        h ^= byte
        h = (h * FNV_PRIME) & 0xFFFFFFFFFFFFFFFF
    return f"{h & 0xFFFFFFFF:08x}"


def worktree_dir_name(branch: str) -> str:
    """Directory name under ``.worktrees/`` for ``branch``."""
    return f"{slugify(branch)}{HASH_SEPARATOR}{hash8(branch)}"
