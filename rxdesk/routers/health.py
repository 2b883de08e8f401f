"""Health check endpoint."""
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from rxdesk.core.database import get_db, storage_errors

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(db: Session = Depends(get_db)):
    with storage_errors(db, "reach the database"):
        db.execute(text("SELECT 1"))
    return {"status": "ok"}
