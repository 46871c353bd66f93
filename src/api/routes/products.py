"""
src/api/routes/products.py
===========================
GET    /api/products          full catalog (public)
GET    /api/products/{id}     one product (public)
POST   /api/products          create, server assigns id (Bearer)
PUT    /api/products/{id}     shallow merge, id pinned   (Bearer)
DELETE /api/products/{id}     remove                     (Bearer)

Handlers are thin: the catalog does the work. Catalog calls are blocking file
I/O, so they run through asyncio.to_thread() to keep the event loop free.
Records are returned as stored (dicts) so unknown fields pass straight through.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, Path, Request, Response, status

from src.api.auth    import Identity, require_user
from src.api.schemas import ErrorResponse, ProductFields, ProductRecord

logger = logging.getLogger(__name__)

router = APIRouter()

_AUTH_ERRORS = {401: {"model": ErrorResponse}}
_NOT_FOUND   = {404: {"model": ErrorResponse}}


def _catalog(request: Request):
    return request.app.state.catalog


@router.get(
    "/products",
    summary="List all products",
)
async def list_products(request: Request) -> list[dict]:
    return await asyncio.to_thread(_catalog(request).list)


@router.get(
    "/products/{product_id}",
    summary="Get one product",
    responses={200: {"model": ProductRecord}, **_NOT_FOUND},
)
async def get_product(request: Request, product_id: int = Path(...)) -> dict:
    return await asyncio.to_thread(_catalog(request).get, product_id)


@router.post(
    "/products",
    status_code=status.HTTP_201_CREATED,
    summary="Create a product",
    responses={201: {"model": ProductRecord}, **_AUTH_ERRORS},
)
async def create_product(
    request: Request,
    fields:  ProductFields,
    user:    Identity = Depends(require_user),
) -> dict:
    record = await asyncio.to_thread(_catalog(request).create, fields.supplied())
    logger.info("create_product: id=%s by=%s", record["id"], user.username)
    return record


@router.put(
    "/products/{product_id}",
    summary="Update a product (partial fields)",
    responses={200: {"model": ProductRecord}, **_AUTH_ERRORS, **_NOT_FOUND},
)
async def update_product(
    request:    Request,
    fields:     ProductFields,
    product_id: int = Path(...),
    user:       Identity = Depends(require_user),
) -> dict:
    record = await asyncio.to_thread(_catalog(request).update, product_id, fields.supplied())
    logger.info("update_product: id=%s by=%s", product_id, user.username)
    return record


@router.delete(
    "/products/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a product",
    responses={**_AUTH_ERRORS, **_NOT_FOUND},
)
async def delete_product(
    request:    Request,
    product_id: int = Path(...),
    user:       Identity = Depends(require_user),
) -> Response:
    await asyncio.to_thread(_catalog(request).delete, product_id)
    logger.info("delete_product: id=%s by=%s", product_id, user.username)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
