"""
Auth API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from . import dependencies, schemas, service

router = APIRouter(prefix="/api/users")


@router.post(
    "/register",
    response_model=schemas.RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(payload: schemas.RegisterRequest) -> schemas.RegisterResponse:
    return await service.register(payload)


@router.post("/login", response_model=schemas.LoginResponse)
async def login(payload: schemas.LoginRequest) -> schemas.LoginResponse:
    return await service.login(payload)


@router.get("/verifyAdmin", response_model=schemas.AdminStatusResponse)
async def verify_admin(
    claims: dict = Depends(dependencies.get_current_claims),
) -> schemas.AdminStatusResponse:
    return await service.verify_admin(dependencies.current_user_id(claims))
