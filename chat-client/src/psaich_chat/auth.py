"""Firebase Auth identity and profile operations."""

import logging
from pathlib import Path

from firebase_admin import auth, storage  # type: ignore[import-untyped]

from psaich_shared import Identity, ProfileUpdate

from .firebase_client import FirestoreClient

logger = logging.getLogger(__name__)


def fetch_identity(uid: str) -> Identity:
    """Get the identity fields Firebase Auth holds for a user."""
    record = auth.get_user(uid)
    return Identity(
        uid=record.uid,
        email=record.email,
        display_name=record.display_name,
        photo_url=record.photo_url,
        phone_number=record.phone_number,
    )


def update_user_profile(client: FirestoreClient, profile: ProfileUpdate) -> None:
    """Save a settings form to both Firebase Auth and the user document."""
    auth_fields = {}
    if profile.display_name is not None:
        auth_fields["display_name"] = profile.display_name
    if profile.photo_url is not None:
        auth_fields["photo_url"] = profile.photo_url
    if auth_fields:
        auth.update_user(client.user_id, **auth_fields)

    client.update_profile(profile)
    logger.info("Updated profile for %s", client.user_id)


def upload_profile_image(uid: str, image_path: Path, bucket_name: str | None = None) -> str:
    """Upload a profile picture and return its public URL."""
    bucket = storage.bucket(bucket_name)
    blob = bucket.blob(f"profile_images/{uid}")
    blob.upload_from_filename(str(image_path))
    blob.make_public()
    logger.info("Uploaded profile image for %s", uid)
    return blob.public_url
