"""Public listing of the platforms users can connect."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from oauth_broker.dependencies import get_config_resolver
from oauth_broker.schemas.platform import PlatformConfigListing
from oauth_broker.services.config_resolver import ConfigResolver, ConfigSourceUnavailable

logger = logging.getLogger(__name__)

router = APIRouter(tags=["platforms"])


@router.get("/configs", response_model=List[PlatformConfigListing])
async def list_platform_configs(
    resolver: ConfigResolver = Depends(get_config_resolver),
) -> List[PlatformConfigListing]:
    """Enabled platforms with their scopes and redirect URIs (no client credentials)."""
    try:
        rows = await resolver.list_enabled()
    except ConfigSourceUnavailable:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"reason": "config_unavailable", "message": "Failed to fetch platform configurations"},
        )
    return [PlatformConfigListing.model_validate(row) for row in rows]
