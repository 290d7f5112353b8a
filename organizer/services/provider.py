from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi import Request
from supabase import AuthError, Client, PostgrestAPIError, create_client


class ProviderError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ProviderConfigError(RuntimeError):
    pass


def _dump(model) -> Optional[Dict[str, Any]]:
    if model is None:
        return None
    return model.model_dump(mode="json")


class SupabaseGateway:
    """
    Тонкая обёртка над клиентом Supabase: наружу отдаём только dict/list
    и ProviderError, чтобы роутеры не знали о типах SDK.
    """

    def __init__(self, url: str, anon_key: str, max_user_clients: int = 256):
        if not url or not anon_key:
            raise ProviderConfigError(
                "Missing Supabase environment variables (SUPABASE_URL, SUPABASE_ANON_KEY)"
            )
        self.url = url
        self.anon_key = anon_key
        self._anon = create_client(url, anon_key)
        # клиенты по токену сессии, не больше max_user_clients
        self._user_client = lru_cache(maxsize=max_user_clients)(self._new_user_client)

    def _new_user_client(self, access_token: str) -> Client:
        # отдельный клиент на токен, чтобы RLS видел пользователя
        client = create_client(self.url, self.anon_key)
        client.postgrest.auth(access_token)
        return client

    def _client(self, access_token: Optional[str] = None) -> Client:
        if not access_token:
            return self._anon
        return self._user_client(access_token)

    # ---- auth ----

    def sign_up(self, email: str, password: str, name: str = "") -> Dict[str, Any]:
        client = self._client()
        try:
            res = client.auth.sign_up(
                {"email": email, "password": password, "options": {"data": {"name": name}}}
            )
        except AuthError as exc:
            raise ProviderError(exc.message) from exc
        return {"user": _dump(res.user)}

    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        client = self._client()
        try:
            res = client.auth.sign_in_with_password({"email": email, "password": password})
        except AuthError as exc:
            raise ProviderError(exc.message) from exc

        session = res.session
        return {
            "user": _dump(res.user),
            "token": session.access_token if session else None,
            "refreshToken": session.refresh_token if session else None,
        }

    def sign_out(self, access_token: str) -> None:
        try:
            self._anon.auth.admin.sign_out(access_token)
        except AuthError as exc:
            raise ProviderError(exc.message) from exc

    def get_user(self, access_token: str) -> Optional[Dict[str, Any]]:
        try:
            res = self._anon.auth.get_user(access_token)
        except AuthError:
            return None
        if res is None or res.user is None:
            return None
        return _dump(res.user)

    def refresh(self, refresh_token: str) -> Dict[str, Any]:
        client = self._client()
        try:
            res = client.auth.refresh_session(refresh_token)
        except AuthError as exc:
            raise ProviderError(exc.message) from exc

        session = res.session
        if session is None:
            raise ProviderError("Invalid refresh token")
        return {"token": session.access_token, "refreshToken": session.refresh_token}

    # ---- tables ----

    def select(
        self,
        table: str,
        access_token: str,
        filters: Dict[str, Any],
        columns: str = "*",
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Dict[str, Any]]:
        query = self._client(access_token).table(table).select(columns)
        for column, value in filters.items():
            query = query.eq(column, value)
        if order_by:
            query = query.order(order_by, desc=descending)
        try:
            return query.execute().data or []
        except PostgrestAPIError as exc:
            raise ProviderError(exc.message or str(exc)) from exc

    def insert(self, table: str, access_token: str, row: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            data = self._client(access_token).table(table).insert(row).execute().data
        except PostgrestAPIError as exc:
            raise ProviderError(exc.message or str(exc)) from exc
        return data[0] if data else None

    def update(
        self,
        table: str,
        access_token: str,
        values: Dict[str, Any],
        filters: Dict[str, Any],
    ) -> Optional[Dict[str, Any]]:
        query = self._client(access_token).table(table).update(values)
        for column, value in filters.items():
            query = query.eq(column, value)
        try:
            data = query.execute().data
        except PostgrestAPIError as exc:
            raise ProviderError(exc.message or str(exc)) from exc
        return data[0] if data else None

    def delete(self, table: str, access_token: str, filters: Dict[str, Any]) -> None:
        query = self._client(access_token).table(table).delete()
        for column, value in filters.items():
            query = query.eq(column, value)
        try:
            query.execute()
        except PostgrestAPIError as exc:
            raise ProviderError(exc.message or str(exc)) from exc


@lru_cache
def _gateway_for(url: str, anon_key: str) -> SupabaseGateway:
    return SupabaseGateway(url, anon_key)


def get_gateway(request: Request) -> SupabaseGateway:
    settings = request.app.state.settings
    return _gateway_for(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)
