from supabase import Client
from app.modules.posts.schemas import PostCreate, PostResponse
from app.core.errors import DatabaseError, ErrorCode, NotFound
from app.core.timeutils import to_iso, utcnow
from app.database.supabase_client import first_row
from typing import List, Optional


class PostService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_post(self, post_data: PostCreate, author_id: str) -> PostResponse:
        now = to_iso(utcnow())
        result = self.supabase.table("posts").insert({
            **post_data.model_dump(),
            "author_id": author_id,
            "created_at": now,
            "updated_at": now,
        }).execute()
        if not result.data:
            raise DatabaseError("Failed to create post")
        return PostResponse(**result.data[0])

    def get_post_by_id(self, post_id: str) -> PostResponse:
        result = self.supabase.table("posts")\
            .select("*")\
            .eq("id", post_id)\
            .maybe_single()\
            .execute()
        row = first_row(result)
        if row is None:
            raise NotFound("Post not found", ErrorCode.POST_NOT_FOUND)
        return PostResponse(**row)

    def list_posts(
        self,
        author_id: Optional[str] = None,
        ride_id: Optional[str] = None,
        club_id: Optional[str] = None,
        limit: int = 20,
        offset: int = 0
    ) -> List[PostResponse]:
        query = self.supabase.table("posts").select("*")
        if author_id:
            query = query.eq("author_id", author_id)
        if ride_id:
            query = query.eq("ride_id", ride_id)
        if club_id:
            query = query.eq("club_id", club_id)
        result = query.order("created_at", desc=True)\
            .limit(limit)\
            .offset(offset)\
            .execute()
        return [PostResponse(**row) for row in (result.data or [])]

    def delete_post(self, post_id: str) -> bool:
        result = self.supabase.table("posts")\
            .delete()\
            .eq("id", post_id)\
            .execute()
        if not result.data:
            raise NotFound("Post not found", ErrorCode.POST_NOT_FOUND)
        return True
