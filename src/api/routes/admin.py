"""Administrative endpoints: behavior snapshot save and reload.

Useful for persisting in-memory behavior before a deploy and restoring it
afterwards without waiting for a restart.
"""

import logging
from typing import Dict, Union

from fastapi import APIRouter, Depends

from src.api.dependencies import get_service
from src.api.exceptions import (
    SnapshotLoadError,
    SnapshotNotConfiguredError,
    SnapshotNotFoundError,
)
from src.recommender.service import RecommendationService

# Configure module logger
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
)


def _snapshot_path(service: RecommendationService) -> str:
    if not service.config.snapshot_path:
        raise SnapshotNotConfiguredError()
    return service.config.snapshot_path


@router.post("/snapshot/save")
def save_snapshot(
    service: RecommendationService = Depends(get_service),
) -> Dict[str, Union[str, int]]:
    """Write all behavior profiles to the configured snapshot file."""
    path = _snapshot_path(service)
    num_profiles = service.save_snapshot(path)
    return {"status": "Snapshot saved", "num_profiles": num_profiles}


@router.post("/snapshot/load")
def load_snapshot(
    service: RecommendationService = Depends(get_service),
) -> Dict[str, Union[str, int]]:
    """Replace in-memory behavior with the configured snapshot.

    Raises:
        SnapshotNotConfiguredError: If no snapshot path is configured.
        SnapshotNotFoundError: If the snapshot file does not exist.
        SnapshotLoadError: If the file cannot be read as a snapshot.
    """
    path = _snapshot_path(service)
    logger.info("Reloading behavior snapshot...")

    try:
        num_profiles = service.load_snapshot(path)
    except FileNotFoundError:
        raise SnapshotNotFoundError(path)
    except Exception as e:
        logger.error(f"Failed to load snapshot: {e}", exc_info=True)
        raise SnapshotLoadError(path, e)

    return {"status": "Snapshot loaded", "num_profiles": num_profiles}
