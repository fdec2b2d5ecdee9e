"""
Modality endpoints.

Listing for every signed-in user; changes restricted to admins.
"""

from fastapi import APIRouter, Depends, File, UploadFile, status

from club.api.dependencies import get_active_user, get_store, require_admin
from club.schemas.modality import Modality, ModalityCreate, ModalityUpdate
from club.schemas.user import User
from club.services.club_store import ClubStore

router = APIRouter()


@router.get("", summary="List modalities.", response_model=list[Modality])
def list_modalities(store: ClubStore = Depends(get_store), user: User = Depends(get_active_user)):
    return store.modalities


@router.post("", summary="Create a modality.", response_model=Modality, status_code=status.HTTP_201_CREATED)
def create_modality(data: ModalityCreate, store: ClubStore = Depends(get_store),
                    admin: User = Depends(require_admin)):
    """Without an image URL the placeholder image is used."""
    return store.add_modality(data)


@router.put("/{modality_id}", summary="Update a modality.", response_model=Modality)
def update_modality(modality_id: str, data: ModalityUpdate, store: ClubStore = Depends(get_store),
                    admin: User = Depends(require_admin)):
    return store.update_modality(modality_id, data)


@router.delete("/{modality_id}", summary="Delete a modality without sessions.",
               status_code=status.HTTP_204_NO_CONTENT)
def delete_modality(modality_id: str, store: ClubStore = Depends(get_store), admin: User = Depends(require_admin)):
    store.delete_modality(modality_id)


@router.post("/{modality_id}/image", summary="Upload the modality cover image.", response_model=Modality)
def upload_image(modality_id: str, image: UploadFile = File(...), store: ClubStore = Depends(get_store),
                 admin: User = Depends(require_admin)):
    return store.upload_modality_image(modality_id, image.file.read(), image.filename or "", image.content_type)
