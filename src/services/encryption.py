"""Encryption of stored provider API keys."""

import base64
import hashlib
import logging
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from src.config import settings
from src.services.errors import MissingCredentialError

logger = logging.getLogger(__name__)

KDF_SALT = b"catalog_extractor_api_keys"
KDF_ITERATIONS = 100000


class EncryptionService:
    def __init__(self, secret_key: Optional[str] = None):
        self.secret_key = secret_key or settings.encryption_secret_key
        if not self.secret_key:
            raise MissingCredentialError("ENCRYPTION_SECRET_KEY must be set to store API keys")
        self._fernet = Fernet(self._derive_key(self.secret_key))

    @staticmethod
    def _derive_key(secret_key: str) -> bytes:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=KDF_SALT,
            iterations=KDF_ITERATIONS,
        )
        return base64.urlsafe_b64encode(kdf.derive(secret_key.encode()))

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode()).decode()

    def decrypt(self, ciphertext: str) -> str:
        try:
            return self._fernet.decrypt(ciphertext.encode()).decode()
        except InvalidToken as e:
            logger.error("Stored API key could not be decrypted with the configured secret")
            raise MissingCredentialError("Stored API key could not be decrypted") from e

    @staticmethod
    def hash_key(api_key: str) -> str:
        return hashlib.sha256(api_key.encode()).hexdigest()


class APIKeyManager:
    def __init__(self, encryption_service: EncryptionService):
        self.encryption_service = encryption_service

    def store_api_key(self, api_key: str) -> tuple[str, str]:
        encrypted_key = self.encryption_service.encrypt(api_key)
        key_hash = self.encryption_service.hash_key(api_key)
        return encrypted_key, key_hash

    def retrieve_api_key(self, encrypted_key: str) -> str:
        return self.encryption_service.decrypt(encrypted_key)

    def verify_api_key(self, api_key: str, stored_hash: str) -> bool:
        return self.encryption_service.hash_key(api_key) == stored_hash
