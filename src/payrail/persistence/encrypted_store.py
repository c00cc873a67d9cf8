"""Encrypted in-memory bank profile vault.

Profiles are held only as AES-256-GCM ciphertext (12-byte nonce, 16-byte
tag, ciphertext, base64 encoded) and decrypted per lookup. The key is
configured as ``"<key id>:<base64 32-byte key>"``.
"""

from __future__ import annotations

import base64
import binascii
import os
import threading

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from payrail.core.exceptions import ConfigurationError, ProfileStoreError
from payrail.models.payout import EmployeeBankProfile

NONCE_SIZE = 12
TAG_SIZE = 16


def parse_key(spec: str) -> tuple[str, bytes]:
    """Split ``"<kid>:<base64>"`` into key id and 32 key bytes."""
    kid, sep, encoded = spec.partition(":")
    if not sep or not encoded:
        raise ConfigurationError("Vault key must look like '<key id>:<base64 key>'")
    try:
        key = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ConfigurationError(f"Vault key {kid!r} is not valid base64") from exc
    if len(key) != 32:
        raise ConfigurationError(f"Vault key {kid!r} must be 32 bytes for AES-256-GCM, got {len(key)}")
    return kid, key


class EncryptedBankProfileStore:
    """IBankProfileStore keeping only encrypted profiles in memory."""

    def __init__(self, key_spec: str) -> None:
        self.key_id, key = parse_key(key_spec)
        self._aead = AESGCM(key)
        self._blobs: dict[int, str] = {}
        self._lock = threading.Lock()

    def upsert_employee_bank(self, profile: EmployeeBankProfile) -> None:
        blob = self._encrypt(profile.model_dump_json().encode("utf-8"))
        with self._lock:
            self._blobs[profile.employee_id] = blob

    def get_employee_bank(self, employee_id: int) -> EmployeeBankProfile | None:
        with self._lock:
            blob = self._blobs.get(employee_id)
        if blob is None:
            return None
        return EmployeeBankProfile.model_validate_json(self._decrypt(blob, employee_id))

    def _encrypt(self, plaintext: bytes) -> str:
        nonce = os.urandom(NONCE_SIZE)
        sealed = self._aead.encrypt(nonce, plaintext, None)  # ciphertext || tag
        ciphertext, tag = sealed[:-TAG_SIZE], sealed[-TAG_SIZE:]
        return base64.b64encode(nonce + tag + ciphertext).decode("ascii")

    def _decrypt(self, blob: str, employee_id: int) -> bytes:
        raw = base64.b64decode(blob)
        nonce = raw[:NONCE_SIZE]
        tag = raw[NONCE_SIZE:NONCE_SIZE + TAG_SIZE]
        ciphertext = raw[NONCE_SIZE + TAG_SIZE:]
        try:
            return self._aead.decrypt(nonce, ciphertext + tag, None)
        except InvalidTag as exc:
            raise ProfileStoreError(f"Bank profile for employee #{employee_id} failed authentication") from exc
