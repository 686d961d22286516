"""API router for REST endpoints."""

from fastapi import APIRouter

from app.api import documents, messages, tiktok, waitlist

router = APIRouter()

router.include_router(documents.router, prefix="/documents", tags=["documents"])

router.include_router(messages.router, prefix="/messages", tags=["messages"])

router.include_router(waitlist.router, prefix="/waitlist", tags=["waitlist"])

router.include_router(tiktok.router, prefix="/tiktok", tags=["tiktok"])
