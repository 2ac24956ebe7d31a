from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.posts.schemas import PostCreate, PostResponse
from app.modules.posts.service import PostService
from app.core.access import Principal
from app.core.dependencies import get_current_principal, require_ownership_or_admin, require_permission
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/posts", tags=["posts"])


def get_post_service(supabase: Client = Depends(get_supabase)) -> PostService:
    return PostService(supabase)


@router.get("", response_model=List[PostResponse])
async def list_posts(
    author_id: Optional[str] = None,
    ride_id: Optional[str] = None,
    club_id: Optional[str] = None,
    limit: int = 20,
    offset: int = 0,
    principal: Principal = Depends(get_current_principal),
    service: PostService = Depends(get_post_service)
):
    return service.list_posts(author_id=author_id, ride_id=ride_id, club_id=club_id, limit=limit, offset=offset)


@router.post("", response_model=PostResponse, status_code=201)
async def create_post(
    post_data: PostCreate,
    principal: Principal = Depends(require_permission("CREATE_POSTS")),
    service: PostService = Depends(get_post_service)
):
    return service.create_post(post_data, principal.id)


@router.get("/{id}", response_model=PostResponse)
async def get_post(
    id: str,
    principal: Principal = Depends(get_current_principal),
    service: PostService = Depends(get_post_service)
):
    return service.get_post_by_id(id)


@router.delete("/{id}", status_code=204)
async def delete_post(
    id: str,
    principal: Principal = Depends(require_ownership_or_admin("post")),
    service: PostService = Depends(get_post_service)
):
    """Delete a post (author, or moderators via the admin bypass)"""
    service.delete_post(id)
    return None
