"""
src/api/schemas.py
==================
Pydantic v2 request/response models for the Vitrine API.

Products are open-ended: the named fields below are the ones the storefront
uses, and `extra="allow"` passes any other key through to products.json
unchanged. Only `id` is owned by the server.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# ── auth ──────────────────────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    token: str


class ChangePasswordRequest(BaseModel):
    oldPassword: str = Field(..., min_length=1)
    newPassword: str = Field(..., min_length=1)


class OkResponse(BaseModel):
    ok: bool = True


# ── products ──────────────────────────────────────────────────────────────────

class ProductFields(BaseModel):
    """Caller-supplied product fields for create / update. All optional."""

    model_config = ConfigDict(extra="allow")

    name:     Optional[str] = None
    price:    Optional[str] = Field(None, description='Display price, e.g. "R$ 89,90"')
    category: Optional[str] = None
    image:    Optional[str] = Field(None, description="Image path or URL")
    tag:      Optional[str] = None
    url:      Optional[str] = Field(None, description="Product / affiliate link")

    def supplied(self) -> dict[str, Any]:
        """Only the keys the caller actually sent, extras included."""
        data  = self.model_dump()
        extra = self.model_extra or {}
        return {k: v for k, v in data.items() if k in self.model_fields_set or k in extra}


class ProductRecord(ProductFields):
    id: int = Field(..., ge=1)


# ── errors / health ───────────────────────────────────────────────────────────

class ErrorResponse(BaseModel):
    error:   str = Field(..., description="Machine-stable error code")
    message: str


class HealthResponse(BaseModel):
    status:     str
    version:    str
    components: dict[str, str]
