"""FastAPI application issuing and checking media access tokens."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from mediatoken.cache import CachedIssuer, MemoryTokenCache
from mediatoken.config import Settings, load_settings
from mediatoken.errors import MissingSecretError
from mediatoken.galleries import load_galleries, sign_gallery
from mediatoken.tokens.codec import TokenCodec
from mediatoken.tokens.models import IssuedToken, VerifiedToken

logger = logging.getLogger(__name__)

app = FastAPI(title="Media Token API")

NO_STORE = {"Cache-Control": "no-cache, no-store, must-revalidate"}
MAX_BATCH_SIZE = 100

token_cache = MemoryTokenCache()


class ResourceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    resource_name: str | None = Field(default=None, alias="resourceName")
    # Older clients send video names in this field as well.
    image_name: str | None = Field(default=None, alias="imageName")

    def resource(self) -> str | None:
        return self.resource_name or self.image_name


class TokenRequest(ResourceRequest):
    expires_in_minutes: int | None = Field(default=None, alias="expiresInMinutes")


class BatchTokenRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    resource_names: list[str] = Field(alias="resourceNames")
    expires_in_minutes: int | None = Field(default=None, alias="expiresInMinutes")


class VerifyRequest(ResourceRequest):
    token: str


def get_settings() -> Settings:
    return load_settings()


def get_codec(settings: Settings = Depends(get_settings)) -> TokenCodec:
    return settings.codec()


def get_issuer(codec: TokenCodec = Depends(get_codec), settings: Settings = Depends(get_settings)) -> CachedIssuer:
    return CachedIssuer(codec, token_cache, refresh_margin=settings.refresh_margin)


def _issued_payload(result: IssuedToken) -> dict[str, Any]:
    return {
        "resourceName": result.resource,
        "imageUrl": result.url,
        "token": result.token,
        "expires": result.expires,
        "expiresAt": result.expires_at,
        "expiresInMinutes": result.lifetime_minutes,
    }


def _lifetime(requested: int | None, settings: Settings) -> int:
    return settings.default_minutes if requested is None else requested


@app.exception_handler(MissingSecretError)
async def missing_secret_handler(request: Request, exc: MissingSecretError) -> JSONResponse:
    logger.error("Media signing is not configured: %s", exc)
    return JSONResponse({"success": False, "error": "Media signing unavailable"}, status_code=503, headers=NO_STORE)


@app.get("/healthz")
async def healthz() -> JSONResponse:
    return JSONResponse({"status": "ok"})


@app.post("/api/media-token")
async def issue_token(
    payload: TokenRequest,
    issuer: CachedIssuer = Depends(get_issuer),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    name = payload.resource()
    if not name:
        raise HTTPException(status_code=400, detail="resourceName is required", headers=NO_STORE)
    result = issuer.issue(name, _lifetime(payload.expires_in_minutes, settings))
    if not isinstance(result, IssuedToken):
        logger.info("Rejected token request for %r: %s", name, result.detail)
        raise HTTPException(status_code=400, detail="Invalid resource name", headers=NO_STORE)
    logger.info("Issued media token for %s", result.resource)
    return JSONResponse({"success": True, "data": _issued_payload(result)}, headers=NO_STORE)


@app.post("/api/media-tokens")
async def issue_tokens(
    payload: BatchTokenRequest,
    issuer: CachedIssuer = Depends(get_issuer),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    if len(payload.resource_names) > MAX_BATCH_SIZE:
        raise HTTPException(status_code=400, detail=f"At most {MAX_BATCH_SIZE} resources per request", headers=NO_STORE)
    results = issuer.issue_many(payload.resource_names, _lifetime(payload.expires_in_minutes, settings))
    items: list[dict[str, Any]] = []
    for name, result in zip(payload.resource_names, results):
        if isinstance(result, IssuedToken):
            items.append({"resourceName": name, "success": True, "data": _issued_payload(result)})
        else:
            logger.info("Rejected token request for %r: %s", name, result.detail)
            items.append({"resourceName": name, "success": False, "error": "Invalid resource name"})
    logger.info("Issued %s of %s media tokens", sum(item["success"] for item in items), len(items))
    return JSONResponse({"success": True, "data": items}, headers=NO_STORE)


@app.post("/api/media-token/verify")
async def verify_token(payload: VerifyRequest, codec: TokenCodec = Depends(get_codec)) -> JSONResponse:
    name = payload.resource()
    if not name:
        raise HTTPException(status_code=400, detail="resourceName is required", headers=NO_STORE)
    result = codec.verify(payload.token, name)
    if not isinstance(result, VerifiedToken):
        logger.warning("Token verification failed for %r: %s", name, result.reason.value)
        raise HTTPException(status_code=403, detail="Access denied", headers=NO_STORE)
    return JSONResponse(
        {
            "success": True,
            "data": {
                "valid": True,
                "expires": result.expires,
                "expiresAt": result.expires_at,
                "remainingTime": result.remaining_seconds,
            },
        },
        headers=NO_STORE,
    )


@app.get("/api/galleries/{name}")
async def gallery(
    name: str,
    codec: TokenCodec = Depends(get_codec),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    galleries = load_galleries(settings.galleries_path)
    if name not in galleries:
        raise HTTPException(status_code=404, detail="Unknown gallery")
    selected = galleries[name]
    urls = sign_gallery(codec, selected, settings.default_minutes)
    images = [{"resourceName": resource, "imageUrl": urls[resource]} for resource in selected.resources]
    return JSONResponse(
        {"success": True, "data": {"name": selected.name, "title": selected.title, "images": images}},
        headers=NO_STORE,
    )
