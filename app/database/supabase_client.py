from typing import Optional

from fastapi import HTTPException, Request, status
from supabase import Client, ClientOptions, create_client

from app.config.settings import Settings


class SupabaseClientFactory:
    """Builds Supabase clients for one application instance.

    Created once by ``create_app`` and kept on ``app.state``. Clients used for
    data access carry the caller's JWT so row-level security sees the caller;
    the anon client is only used for auth calls that happen before a token exists.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._anon_client: Optional[Client] = None
        self._service_client: Optional[Client] = None

    def _require_configured(self):
        if not self.settings.is_supabase_configured:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Supabase is not configured"
            )

    def anon(self) -> Client:
        self._require_configured()
        if self._anon_client is None:
            self._anon_client = create_client(self.settings.supabase_url, self.settings.supabase_key)
        return self._anon_client

    def for_token(self, token: str) -> Client:
        """Client whose PostgREST requests run as the owner of ``token``."""
        self._require_configured()
        options = ClientOptions(
            headers={"Authorization": f"Bearer {token}"},
            auto_refresh_token=False,
            persist_session=False,
        )
        return create_client(self.settings.supabase_url, self.settings.supabase_key, options=options)

    def service(self) -> Client:
        """Client with service_role key; bypasses RLS. Only for auth admin calls."""
        self._require_configured()
        if not self.settings.supabase_service_role_key:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Service role key not configured"
            )
        if self._service_client is None:
            self._service_client = create_client(
                self.settings.supabase_url, self.settings.supabase_service_role_key
            )
        return self._service_client


def get_client_factory(request: Request) -> SupabaseClientFactory:
    return request.app.state.supabase_factory
