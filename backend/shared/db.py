import os
from typing import Any, Callable

from dotenv import load_dotenv
from supabase import Client, create_client

load_dotenv()

# Table names in the portal's Supabase project
NOTIFICATIONS_TABLE = "notifications"
USER_PROFILES_TABLE = "user_profiles"


def get_supabase_client() -> Client:
    """
    Get a Supabase client authenticated with the service role key.

    The delivery engine writes to other users' notification rows, so it
    cannot run with an end-user key.

    Raises:
        ValueError: If SUPABASE_URL or SUPABASE_SERVICE_KEY is not configured
    """
    url = os.getenv("SUPABASE_URL")
    service_key = os.getenv("SUPABASE_SERVICE_KEY")

    if not url or not service_key:
        raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be set")

    return create_client(url, service_key)


# PostgREST returns at most this many rows per request (Supabase `max-rows`)
PAGE_SIZE = 1000


def fetch_all_rows(
    build_query: Callable[[], Any], page_size: int = PAGE_SIZE
) -> list[dict[str, Any]]:
    """
    Run a select page by page with `.range()` until a short page comes back.

    Args:
        build_query: Returns a fresh, ordered select query on each call
        page_size: Rows requested per page

    Returns:
        All rows across every page
    """
    rows: list[dict[str, Any]] = []
    start = 0
    while True:
        response = build_query().range(start, start + page_size - 1).execute()
        page = response.data or []
        rows.extend(page)
        if len(page) < page_size:
            return rows
        start += page_size
