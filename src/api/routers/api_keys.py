"""API router for the stored Gemini API key.

Keys are encrypted at rest and never returned. An environment key
(``GEMINI_API_KEY``) wins over anything stored here.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from src.models import APIKey, get_db
from src.models.domain import LLMProvider
from src.models.schemas import APIKeyCreate, APIKeyResponse, APIKeyUpdate, CredentialStatus
from src.services.credentials import CredentialResolver, active_key_record
from src.services.encryption import APIKeyManager, EncryptionService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_key_manager() -> APIKeyManager:
    return APIKeyManager(EncryptionService())


def _load_key(db: Session, key_id: int) -> APIKey:
    record = db.get(APIKey, key_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"API key {key_id} not found")
    return record


@router.get("/api-keys/status", response_model=CredentialStatus)
async def credential_status(db: Session = Depends(get_db)) -> CredentialStatus:
    """Whether extraction can run with the current configuration."""
    return CredentialStatus(
        provider=LLMProvider.GEMINI,
        configured=CredentialResolver(db).is_configured(),
    )


@router.post("/api-keys", response_model=APIKeyResponse, status_code=201)
async def create_api_key(
    payload: APIKeyCreate,
    db: Session = Depends(get_db),
    manager: APIKeyManager = Depends(get_key_manager),
) -> APIKeyResponse:
    if active_key_record(db, payload.provider) is not None:
        raise HTTPException(
            status_code=400,
            detail=f"An active API key already exists for provider '{payload.provider.value}'. "
            "Update or deactivate the existing key instead.",
        )

    encrypted_key, key_hash = manager.store_api_key(payload.api_key)
    record = APIKey(provider=payload.provider.value, encrypted_key=encrypted_key, key_hash=key_hash)
    db.add(record)
    db.commit()
    db.refresh(record)
    logger.info(f"Stored {record.provider} API key {record.id}")
    return APIKeyResponse.model_validate(record)


@router.get("/api-keys", response_model=List[APIKeyResponse])
async def list_api_keys(
    provider: Optional[LLMProvider] = None,
    active_only: bool = True,
    db: Session = Depends(get_db),
) -> List[APIKeyResponse]:
    query = db.query(APIKey)
    if provider is not None:
        query = query.filter(APIKey.provider == provider.value)
    if active_only:
        query = query.filter(APIKey.is_active == True)  # noqa: E712
    return [APIKeyResponse.model_validate(r) for r in query.order_by(APIKey.created_at.desc())]


@router.put("/api-keys/{key_id}", response_model=APIKeyResponse)
async def update_api_key(
    key_id: int,
    changes: APIKeyUpdate,
    db: Session = Depends(get_db),
    manager: APIKeyManager = Depends(get_key_manager),
) -> APIKeyResponse:
    record = _load_key(db, key_id)
    if changes.api_key is not None:
        record.encrypted_key, record.key_hash = manager.store_api_key(changes.api_key)
    if changes.is_active is not None:
        record.is_active = changes.is_active
    db.commit()
    db.refresh(record)
    return APIKeyResponse.model_validate(record)


@router.delete("/api-keys/{key_id}", status_code=204)
async def delete_api_key(key_id: int, db: Session = Depends(get_db)) -> None:
    db.delete(_load_key(db, key_id))
    db.commit()
    logger.info(f"Deleted API key {key_id}")
