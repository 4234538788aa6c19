"""Tag catalogue endpoints."""

from fastapi import APIRouter

from qcktlk_forum.api.v1.dependencies import SessionDep
from qcktlk_forum.models import Tag
from qcktlk_forum.schemas.tag import PopularTag, TagResponse
from qcktlk_forum.services.posts import popular_tags

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("/", response_model=list[TagResponse])
async def list_tags(db: SessionDep) -> list[Tag]:
    """Return every tag in the catalogue, alphabetically."""
    return db.query(Tag).order_by(Tag.name).all()


@router.get("/popular", response_model=list[PopularTag])
async def list_popular_tags(db: SessionDep) -> list[PopularTag]:
    """Return the ten tags used by the most live posts."""
    return [PopularTag(name=name, count=count) for name, count in popular_tags(db)]
