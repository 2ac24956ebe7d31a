from postgrest.exceptions import APIError
from supabase import create_client, Client
from app.config import settings

# Postgres SQLSTATE for a unique constraint violation
UNIQUE_VIOLATION = "23505"


class SupabaseClient:
    """Process-wide Supabase clients: one for request handlers, one service-role client for jobs."""
    _client: Client = None
    _service_client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            cls._client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Used by scheduled jobs and scripts."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key
            )
        return cls._service_client or cls.get_client()

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_service_supabase() -> Client:
    return SupabaseClient.get_service_client()


def first_row(result):
    """Row from a maybe_single() query, or None. Newer postgrest clients return None instead of an empty response."""
    if result is None or not result.data:
        return None
    data = result.data
    if isinstance(data, list):
        return data[0] if data else None
    return data


def is_unique_violation(error: Exception) -> bool:
    return isinstance(error, APIError) and error.code == UNIQUE_VIOLATION
