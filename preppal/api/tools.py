"""Kitchen tool inventory API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from preppal.api.deps import current_user
from preppal.core.auth import AuthUser
from preppal.core.database import get_db
from preppal.models.models import Tool
from preppal.schemas.schemas import ToolCreate, ToolResponse

router = APIRouter(prefix="/api/tools", tags=["tools"])

SEARCH_LIMIT = 10


@router.get("", response_model=list[ToolResponse])
def list_tools(
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """List the user's tools by name."""
    return db.query(Tool).filter(Tool.user_id == user.id).order_by(Tool.name).all()


@router.get("/search", response_model=list[ToolResponse])
def search_tools(
    q: str = Query("", description="Name prefix or fragment"),
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """Tools whose name contains ``q`` (case-insensitive), for autocomplete."""
    query = db.query(Tool).filter(Tool.user_id == user.id)
    if q.strip():
        query = query.filter(Tool.name.ilike(f"%{q.strip()}%"))
    return query.order_by(Tool.name).limit(SEARCH_LIMIT).all()


@router.post("", response_model=ToolResponse, status_code=201)
def create_tool(
    data: ToolCreate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """Add a tool; an existing tool with the same name (any case) is returned instead."""
    name = data.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Tool name is required")

    existing = db.query(Tool).filter(
        Tool.user_id == user.id,
        func.lower(Tool.name) == name.lower()
    ).first()
    if existing:
        return existing

    tool = Tool(user_id=user.id, name=name)
    db.add(tool)
    db.commit()
    db.refresh(tool)
    return tool
