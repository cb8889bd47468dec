"""Summary: FastAPI application for InboxHub.

Importance: Exposes the merged inbox and integration management over HTTP.
Alternatives: Use a CLI-only workflow or a different web framework.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from inboxhub.app import AppServices, build_services
from inboxhub.config import AppConfig
from inboxhub.http_client import create_client_session
from inboxhub.models import Provider
from inboxhub.storage.sqlite_store import IntegrationStoreError


logger = logging.getLogger(__name__)


class UserCreateRequest(BaseModel):
    """Summary: Request payload for user creation.

    Importance: Integrations need an owning user.
    Alternatives: Provision users from an identity provider.
    """

    display_name: str = Field(min_length=1)
    email: str = Field(min_length=3)


class IntegrationCreateRequest(BaseModel):
    """Summary: Request payload for storing provider credentials.

    Importance: Records tokens produced by an external OAuth flow.
    Alternatives: Complete the OAuth exchange inside this service.
    """

    provider: Provider
    access_token: str = Field(min_length=1)
    refresh_token: str | None = None
    expires_at: str | None = None


def create_app(config: AppConfig) -> FastAPI:
    """Summary: Create a FastAPI app wired to InboxHub services.

    Importance: The shared HTTP session and services live for the app's lifespan.
    Alternatives: Instantiate services globally outside the factory.
    """

    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=config.log_level, format="%(levelname)s %(name)s: %(message)s"
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        async with create_client_session(config.http_timeout_seconds) as session:
            app.state.services = build_services(config, session)
            yield

    app = FastAPI(title="InboxHub API", version="0.1.0", lifespan=lifespan)

    def get_services(request: Request) -> AppServices:
        return request.app.state.services

    def require_api_key(x_api_key: str | None = Header(default=None)) -> None:
        """Summary: Enforce API key authentication when configured.

        Importance: Adds a minimal security layer for local and private deployments.
        Alternatives: Use OAuth or session-based authentication.
        """

        if not config.api_key:
            return
        if x_api_key != config.api_key:
            raise HTTPException(status_code=401, detail="Invalid API key")

    @app.exception_handler(IntegrationStoreError)
    async def store_unavailable(_request: Request, exc: IntegrationStoreError) -> JSONResponse:
        logger.error("Integration store unavailable: %s", exc)
        return JSONResponse(status_code=503, content={"detail": "Integration store unavailable"})

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/users", dependencies=[Depends(require_api_key)])
    def create_user(
        payload: UserCreateRequest, services: AppServices = Depends(get_services)
    ) -> dict[str, Any]:
        user_id = services.users.create_user(payload.display_name, payload.email)
        return {"id": user_id}

    @app.get("/users/{user_id}/inbox", dependencies=[Depends(require_api_key)])
    async def get_inbox(
        user_id: int, services: AppServices = Depends(get_services)
    ) -> dict[str, Any]:
        """Summary: Return the merged inbox for a user.

        Importance: Repeated polling within the freshness window is served from cache.
        Alternatives: Stream provider results as they arrive.
        """

        bundle = await services.aggregator.get_messages(user_id)
        return {"messages": bundle.to_dict()}

    @app.get("/users/{user_id}/integrations", dependencies=[Depends(require_api_key)])
    def list_integrations(
        user_id: int, services: AppServices = Depends(get_services)
    ) -> list[dict[str, Any]]:
        return [
            {
                "provider": integration.provider.value,
                "expires_at": integration.expires_at,
                "has_refresh_token": integration.has_refresh_token,
                "created_at": integration.created_at,
                "updated_at": integration.updated_at,
            }
            for integration in services.integrations.list_integrations(user_id)
        ]

    @app.post("/users/{user_id}/integrations", dependencies=[Depends(require_api_key)])
    def connect_integration(
        user_id: int,
        payload: IntegrationCreateRequest,
        services: AppServices = Depends(get_services),
    ) -> dict[str, Any]:
        """Summary: Store credentials for a provider.

        Importance: The user's next inbox request queries the new provider.
        Alternatives: Wait for the cached inbox to expire.
        """

        if services.users.get_user(user_id) is None:
            raise HTTPException(status_code=404, detail="User not found")
        services.integrations.connect(
            user_id,
            payload.provider,
            payload.access_token,
            payload.refresh_token,
            payload.expires_at,
        )
        return {"provider": payload.provider.value, "status": "connected"}

    @app.delete(
        "/users/{user_id}/integrations/{provider}", dependencies=[Depends(require_api_key)]
    )
    def disconnect_integration(
        user_id: int, provider: Provider, services: AppServices = Depends(get_services)
    ) -> dict[str, Any]:
        if not services.integrations.disconnect(user_id, provider):
            raise HTTPException(status_code=404, detail="Integration not found")
        return {"provider": provider.value, "status": "disconnected"}

    return app
