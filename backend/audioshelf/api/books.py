"""
Books API Routes

公开端点：书籍列表/详情、播放地址、播放进度。
"""
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from audioshelf.api.dependencies import get_storage
from audioshelf.database import get_db
from audioshelf.schemas import (
    BookResponse,
    PlayUrlRequest,
    PlayUrlResponse,
    ProgressResponse,
    ProgressUpdate,
)
from audioshelf.services import BookService, PlayUrlService, ProgressService
from audioshelf.services.storage_service import ObjectStorage


router = APIRouter()


# ==================== Catalogue ====================


@router.get("/books", response_model=list[BookResponse])
async def list_books(
    search: Optional[str] = Query(None, description="按标题/作者搜索（不区分大小写）"),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
):
    """
    获取书籍列表

    最新创建的在前；每本书附带有序章节和封面的限时地址。
    """
    service = BookService(db, storage)
    return [service.to_response(book) for book in service.list_books(search)]


@router.get("/books/{book_id}", response_model=BookResponse)
async def get_book(
    book_id: str,
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
):
    """获取书籍详情"""
    service = BookService(db, storage)
    return service.to_response(service.get_book(book_id))


# ==================== Playback ====================


@router.post("/books/{book_id}/play-url", response_model=PlayUrlResponse)
async def create_play_url(
    book_id: str,
    payload: Optional[PlayUrlRequest] = Body(None),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
):
    """
    签发章节播放地址

    未指定 chapterId 时返回 order 最小的章节。
    书籍/章节不存在或书籍无章节时返回 404。
    """
    chapter_id = payload.chapter_id if payload else None
    return PlayUrlService(db, storage).issue(book_id, chapter_id)


# ==================== Progress ====================


@router.get("/books/{book_id}/progress", response_model=ProgressResponse)
async def get_progress(
    book_id: str,
    session_id: str = Query(..., alias="sessionId", min_length=1),
    db: Session = Depends(get_db),
):
    """
    获取播放进度

    无记录时返回零值 {currentChapterId: null, position: 0, completed: false}。
    """
    return ProgressService(db).get(session_id, book_id)


@router.post("/books/{book_id}/progress", response_model=ProgressResponse)
async def save_progress(
    book_id: str,
    payload: ProgressUpdate,
    db: Session = Depends(get_db),
):
    """
    保存播放进度（last-write-wins）

    返回保存后的记录。
    """
    return ProgressService(db).upsert(book_id, payload)
