"""Favorite routes — per-user bookmarks on reference files."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ...dependencies import get_current_user_id, get_db
from ...models.favorite import Favorite
from ...models.reference_file import ReferenceFile
from ...utils.logging import get_logger
from ...utils.pagination import page_offset, search_pattern, total_pages
from .auth import envelope
from .catalogs import catalog_thumbnails
from .files import file_to_dict

logger = get_logger("api.favorites")

router = APIRouter(prefix="/favorites", tags=["favorites"])


# --- Request bodies ---

class FavoriteRequest(BaseModel):
    file: Optional[int] = None


# --- Helpers ---

def _file_id(body: FavoriteRequest) -> int:
    """Validate the ``file`` field of a favorite request body."""
    if body.file is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing or invalid 'file' parameter in JSON body.",
        )
    if body.file <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Reference file ID must be a positive integer.",
        )
    return body.file


def _user_favorites(user_id: int):
    return (
        select(Favorite, ReferenceFile)
        .join(ReferenceFile, Favorite.reference_file_id == ReferenceFile.id)
        .where(Favorite.user_id == user_id)
    )


# --- Endpoints ---

@router.get("")
async def list_favorites(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """All of the caller's favorites, ordered by file name."""
    result = await db.execute(_user_favorites(user_id).order_by(ReferenceFile.name.asc()))
    return envelope([
        {
            "id": fav.id,
            "created_at": fav.created_at.isoformat() if fav.created_at else None,
            "reference_file_id": fav.reference_file_id,
            "file": rf.src,
            "thumbnail": rf.thumbnail,
            "file_name": rf.name,
            "file_directory": rf.directory,
        }
        for fav, rf in result.all()
    ])


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_favorite(
    body: FavoriteRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    file_id = _file_id(body)

    if await db.get(ReferenceFile, file_id) is None:
        raise HTTPException(status_code=404, detail="Reference file not found.")

    existing = await db.execute(
        select(Favorite.id).where(
            Favorite.user_id == user_id, Favorite.reference_file_id == file_id
        )
    )
    if existing.first() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This file is already in favorites for this user.",
        )

    favorite = Favorite(user_id=user_id, reference_file_id=file_id)
    db.add(favorite)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent insert of the same pair
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This file is already in favorites for this user.",
        )
    await db.refresh(favorite)

    logger.info("favorite_added", user_id=user_id, reference_file_id=file_id)
    return envelope({"id": favorite.id}, code=201, message="created")


@router.delete("")
async def remove_favorite(
    body: FavoriteRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    file_id = _file_id(body)

    result = await db.execute(
        delete(Favorite).where(
            Favorite.user_id == user_id, Favorite.reference_file_id == file_id
        )
    )
    await db.commit()
    if result.rowcount == 0:
        raise HTTPException(status_code=404, detail="Favorite not found for this user.")

    logger.info("favorite_removed", user_id=user_id, reference_file_id=file_id)
    return envelope("Favorite removed.")


@router.get("/check")
async def check_favorite(
    file: int = Query(..., gt=0),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Favorite.id).where(
            Favorite.user_id == user_id, Favorite.reference_file_id == file
        )
    )
    return envelope({"isFavorite": result.first() is not None})


@router.get("/catalogs")
async def list_favorite_catalogs(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=200),
    thumbnails: int = Query(3, ge=0, le=20),
    search: Optional[str] = Query(None),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Directories holding at least one of the caller's favorites."""
    conditions = [Favorite.user_id == user_id]
    pattern = search_pattern(search)
    if pattern is not None:
        conditions.append(
            or_(ReferenceFile.directory.like(pattern), ReferenceFile.name.like(pattern))
        )
    joined = (
        select(ReferenceFile.directory)
        .join(Favorite, Favorite.reference_file_id == ReferenceFile.id)
        .where(and_(*conditions))
    )

    total = (
        await db.execute(
            select(func.count(func.distinct(ReferenceFile.directory)))
            .select_from(ReferenceFile)
            .join(Favorite, Favorite.reference_file_id == ReferenceFile.id)
            .where(and_(*conditions))
        )
    ).scalar_one()
    directories = (
        await db.execute(
            joined.distinct()
            .order_by(ReferenceFile.directory.asc())
            .limit(size)
            .offset(page_offset(page, size))
        )
    ).scalars().all()

    return envelope({
        "catalogs": [
            {"directory": d, "thumbnails": await catalog_thumbnails(db, d, thumbnails)}
            for d in directories
        ],
        "total": total,
        "page": page,
        "size": size,
        "totalPages": total_pages(total, size),
        "searchQuery": search,
    })


@router.get("/catalogs/files")
async def list_favorites_by_catalog(
    directory: str = Query(""),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=200),
    search: Optional[str] = Query(None),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """The caller's favorites inside one directory, optionally filtered by file name."""
    if not directory.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Catalog directory cannot be empty.",
        )

    conditions = [Favorite.user_id == user_id, ReferenceFile.directory == directory]
    pattern = search_pattern(search)
    if pattern is not None:
        conditions.append(ReferenceFile.name.like(pattern))

    total = (
        await db.execute(
            select(func.count(ReferenceFile.id))
            .select_from(ReferenceFile)
            .join(Favorite, Favorite.reference_file_id == ReferenceFile.id)
            .where(and_(*conditions))
        )
    ).scalar_one()
    result = await db.execute(
        select(Favorite, ReferenceFile)
        .join(ReferenceFile, Favorite.reference_file_id == ReferenceFile.id)
        .where(and_(*conditions))
        .order_by(ReferenceFile.name.asc())
        .limit(size)
        .offset(page_offset(page, size))
    )

    files = []
    for fav, rf in result.all():
        entry = file_to_dict(rf)
        entry["favorite_id"] = fav.id
        entry["favorited_at"] = fav.created_at.isoformat() if fav.created_at else None
        files.append(entry)

    return envelope({
        "files": files,
        "total": total,
        "page": page,
        "size": size,
        "totalPages": total_pages(total, size),
        "directoryFilter": directory,
        "searchQuery": search,
    })
