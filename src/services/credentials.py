"""Where the Gemini API key comes from.

Lookup order is an explicit key, then ``GEMINI_API_KEY`` from the environment,
then the active key stored encrypted in the database. A stored key that cannot
be decrypted counts as missing.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from src.config import settings
from src.models.domain import APIKey, LLMProvider
from src.services.encryption import EncryptionService
from src.services.errors import MissingCredentialError

logger = logging.getLogger(__name__)


def active_key_record(db: Session, provider: LLMProvider = LLMProvider.GEMINI) -> Optional[APIKey]:
    return (
        db.query(APIKey)
        .filter(APIKey.provider == provider.value, APIKey.is_active == True)  # noqa: E712
        .order_by(APIKey.updated_at.desc())
        .first()
    )


class CredentialResolver:
    def __init__(
        self,
        db: Optional[Session] = None,
        explicit_key: Optional[str] = None,
        provider: LLMProvider = LLMProvider.GEMINI,
    ):
        self.db = db
        self.explicit_key = explicit_key
        self.provider = provider

    def resolve(self) -> str:
        if self.explicit_key:
            return self.explicit_key
        if settings.gemini_api_key:
            return settings.gemini_api_key

        record = active_key_record(self.db, self.provider) if self.db is not None else None
        if record is None:
            raise MissingCredentialError(f"No active {self.provider.value} API key found")
        logger.debug(f"Using stored {self.provider.value} API key {record.id}")
        return EncryptionService().decrypt(record.encrypted_key)

    def is_configured(self) -> bool:
        try:
            self.resolve()
        except MissingCredentialError:
            return False
        return True
