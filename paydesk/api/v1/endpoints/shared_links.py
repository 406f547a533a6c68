from typing import List
from fastapi import APIRouter, Depends
from paydesk.core.auth import get_session_credentials
from paydesk.models.scope import Credentials
from paydesk.models.shared_link import SharedLinkValidation
from paydesk.schemas.shared_link import DeleteResult, SharedLinkCreate, SharedLinkResponse, SharedLinkURL
from paydesk.services.access_gate import AccessGate
from paydesk.services.shared_link_service import SharedLinkService

router = APIRouter()

@router.post("", response_model=SharedLinkURL)
async def create_shared_invoice_link(
    link_in: SharedLinkCreate,
    credentials: Credentials = Depends(get_session_credentials)
):
    """Create (or return the existing) public invoice link for a pay period"""
    scope = AccessGate.authorize_role(credentials)
    link = await SharedLinkService.mint(link_in.month, link_in.year, link_in.period, scope)
    return SharedLinkURL(url=SharedLinkService.build_url(link.token))

@router.get("", response_model=List[SharedLinkResponse])
async def list_shared_links(credentials: Credentials = Depends(get_session_credentials)):
    """All shared links, newest first"""
    scope = AccessGate.authorize_role(credentials)
    links = await SharedLinkService.list_links(scope)
    return [
        SharedLinkResponse(
            id=str(link.id),
            token=link.token,
            url=SharedLinkService.build_url(link.token),
            month=link.month,
            year=link.year,
            period=link.period,
            created_at=link.created_at,
            expires_at=link.expires_at
        )
        for link in links
    ]

@router.get("/{token}/validate", response_model=SharedLinkValidation, response_model_exclude_none=True)
async def validate_shared_link(token: str):
    """Resolve a shared link to its pay period (public)"""
    return await SharedLinkService.validate(token)

@router.delete("/{token}", response_model=DeleteResult)
async def delete_shared_link(
    token: str,
    credentials: Credentials = Depends(get_session_credentials)
):
    """Revoke a shared link"""
    scope = AccessGate.authorize_role(credentials)
    return DeleteResult(success=await SharedLinkService.revoke(token, scope))
