"""Catalog routes — reference files grouped by directory, with preview thumbnails."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...dependencies import get_db
from ...models.reference_file import ReferenceFile
from ...utils.pagination import page_offset, search_pattern, total_pages
from .auth import envelope

router = APIRouter(prefix="/catalogs", tags=["catalogs"])


async def catalog_thumbnails(db: AsyncSession, directory: str, limit: int) -> list[str]:
    """First ``limit`` thumbnails of a directory, oldest file first."""
    if limit <= 0:
        return []
    result = await db.execute(
        select(ReferenceFile.thumbnail)
        .where(ReferenceFile.directory == directory)
        .order_by(ReferenceFile.id.asc())
        .limit(limit)
    )
    return [thumb for thumb in result.scalars().all() if thumb]


@router.get("")
async def list_catalogs(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=200),
    thumbnails: int = Query(3, ge=0, le=20),
    search: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Distinct directories in name order, optionally filtered by directory or file name."""
    condition = None
    pattern = search_pattern(search)
    if pattern is not None:
        condition = or_(ReferenceFile.directory.like(pattern), ReferenceFile.name.like(pattern))

    count_query = select(func.count(func.distinct(ReferenceFile.directory)))
    dir_query = select(ReferenceFile.directory).distinct()
    if condition is not None:
        count_query = count_query.where(condition)
        dir_query = dir_query.where(condition)

    total = (await db.execute(count_query)).scalar_one()
    directories = (
        await db.execute(
            dir_query.order_by(ReferenceFile.directory.asc())
            .limit(size)
            .offset(page_offset(page, size))
        )
    ).scalars().all()

    catalogs = [
        {"directory": d, "thumbnails": await catalog_thumbnails(db, d, thumbnails)}
        for d in directories
    ]
    return envelope({
        "catalogs": catalogs,
        "total": total,
        "page": page,
        "size": size,
        "totalPages": total_pages(total, size),
        "searchQuery": search,
    })
