"""
Content fingerprint of a resolved file set.
"""

import hashlib
from typing import List

from .models import FileRef


def hash_files(files: List[FileRef]) -> str:
    """SHA-256 over file contents, ordered by storage key then content.

    Paths and timestamps do not contribute, so the same contents always
    give the same digest regardless of iteration order.
    """
    entries = sorted(((f.key_on_s3, f.read_bytes()) for f in files), key=lambda e: (e[0], e[1]))

    digest = hashlib.sha256()
    for _, contents in entries:
        digest.update(len(contents).to_bytes(8, "big"))
        digest.update(contents)
    return digest.hexdigest()
