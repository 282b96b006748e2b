"""Co-authorship proof store.

A proof is free text the user writes about their own part in a commit. Its
PIN is the SHA-256 hex digest of that text, and the record is stored as
``<pin>.json`` in the proof directory. A commit message carrying
``X-Claude-Code-Co-Authorship-Proof: <pin>`` is accepted only when the
record exists.
"""

from __future__ import annotations

__all__ = [
    'CoAuthorshipProof',
    'proof_exists',
    'proof_pin',
    'submit_proof',
]

import hashlib
import logging
from datetime import UTC, datetime

import filelock

from policy_lib import paths
from policy_lib.schemas.hooks import StrictModel

logger = logging.getLogger(__name__)


class CoAuthorshipProof(StrictModel):
    pin: str
    proof: str
    timestamp: str


def proof_pin(proof: str) -> str:
    return hashlib.sha256(proof.encode('utf-8')).hexdigest()


def proof_exists(pin: str) -> bool:
    """True if a proof record exists for ``pin``. Malformed PINs never exist."""
    try:
        path = paths.proof_path(pin)
    except ValueError:
        return False
    return path.is_file()


def submit_proof(proof: str, *, now: datetime | None = None) -> CoAuthorshipProof:
    """Write a proof record atomically (write tmp + rename) under a file lock.

    Resubmitting the same text overwrites the record.
    """
    pin = proof_pin(proof)
    record = CoAuthorshipProof(
        pin=pin,
        proof=proof,
        timestamp=(now or datetime.now(UTC)).isoformat(),
    )
    path = paths.proof_path(pin)
    path.parent.mkdir(parents=True, exist_ok=True)
    with filelock.FileLock(path.with_suffix('.lock')):
        temp_path = path.with_suffix('.tmp')
        try:
            temp_path.write_text(record.model_dump_json(indent=2) + '\n', encoding='utf-8')
            temp_path.rename(path)
        finally:
            temp_path.unlink(missing_ok=True)
    logger.info('Stored co-authorship proof %s at %s', pin, path)
    return record
