"""Reference file listing."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...dependencies import get_db
from ...models.reference_file import ReferenceFile
from ...utils.pagination import page_offset, total_pages
from .auth import envelope

router = APIRouter(prefix="/files", tags=["files"])


def file_to_dict(rf: ReferenceFile) -> dict:
    return {
        "id": rf.id,
        "name": rf.name,
        "directory": rf.directory,
        "src": rf.src,
        "thumbnail": rf.thumbnail,
        "corrupted": rf.corrupted,
        "created_at": rf.created_at.isoformat() if rf.created_at else None,
        "updated_at": rf.updated_at.isoformat() if rf.updated_at else None,
    }


@router.get("")
async def list_files(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
):
    total = (await db.execute(select(func.count(ReferenceFile.id)))).scalar_one()
    result = await db.execute(
        select(ReferenceFile)
        .order_by(ReferenceFile.id.asc())
        .limit(size)
        .offset(page_offset(page, size))
    )
    return envelope({
        "files": [file_to_dict(rf) for rf in result.scalars().all()],
        "total": total,
        "page": page,
        "size": size,
        "totalPages": total_pages(total, size),
    })
