"""
Admin API Routes

管理端端点：登录/登出、上传地址、书籍增删改。
除登录/登出外，所有端点都经过 require_admin。
"""
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from audioshelf import config
from audioshelf.api.dependencies import get_storage, password_matches, require_admin
from audioshelf.database import get_db
from audioshelf.schemas import (
    AdminBookListItem,
    AdminBookResponse,
    AdminLoginRequest,
    BookCreate,
    BookUpdate,
    UploadUrlRequest,
    UploadUrlResponse,
)
from audioshelf.services import BookService, generate_object_key
from audioshelf.services.storage_service import ObjectStorage


# Login/logout must stay reachable without the gate
auth_router = APIRouter()
router = APIRouter(dependencies=[Depends(require_admin)])


# ==================== Auth ====================


@auth_router.post("/admin/auth")
async def login(payload: AdminLoginRequest, response: Response):
    """
    管理员登录

    密码正确时写入 httpOnly Cookie（有效期 24 小时）。
    """
    if not config.ADMIN_PASSWORD:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server configuration error",
        )
    if not password_matches(payload.password, config.ADMIN_PASSWORD):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid password",
        )

    response.set_cookie(
        key=config.ADMIN_COOKIE_NAME,
        value=config.ADMIN_PASSWORD,
        max_age=config.ADMIN_COOKIE_MAX_AGE,
        httponly=True,
        secure=not config.DEBUG,
        samesite="lax",
    )
    return {"success": True}


@auth_router.delete("/admin/auth")
async def logout(response: Response):
    """管理员登出（清除 Cookie）"""
    response.delete_cookie(key=config.ADMIN_COOKIE_NAME)
    return {"success": True}


# ==================== Upload ====================


@router.post("/admin/upload-url", response_model=UploadUrlResponse)
async def create_upload_url(
    payload: UploadUrlRequest,
    storage: ObjectStorage = Depends(get_storage),
):
    """
    签发上传地址

    audio/* 存放在 audio/ 前缀下，image/* 存放在 covers/ 前缀下。
    """
    object_key = generate_object_key(payload.filename, prefix=payload.key_prefix)
    upload_url = storage.presign_upload(object_key, payload.content_type)
    return UploadUrlResponse(upload_url=upload_url, object_key=object_key)


# ==================== Books ====================


@router.get("/admin/books", response_model=list[AdminBookListItem])
async def admin_list_books(
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
):
    """管理端书籍列表（id, title）"""
    books = BookService(db, storage).list_books()
    return [AdminBookListItem.model_validate(book) for book in books]


@router.post(
    "/admin/books",
    response_model=AdminBookResponse,
    status_code=status.HTTP_201_CREATED,
)
async def admin_create_book(
    payload: BookCreate,
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
):
    """
    创建书籍

    至少一个章节；章节 order 按列表位置生成，总时长自动计算。
    """
    service = BookService(db, storage)
    return service.to_admin_response(service.create_book(payload))


@router.get("/admin/books/{book_id}", response_model=AdminBookResponse)
async def admin_get_book(
    book_id: str,
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
):
    """管理端书籍详情（含对象 key）"""
    service = BookService(db, storage)
    return service.to_admin_response(service.get_book(book_id))


@router.put("/admin/books/{book_id}", response_model=AdminBookResponse)
async def admin_update_book(
    book_id: str,
    payload: BookUpdate,
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
):
    """
    更新书籍（整体替换）

    带 id 的章节原地更新，不带 id 的为新章节，缺失的章节被删除（含音频对象）。
    """
    service = BookService(db, storage)
    return service.to_admin_response(service.update_book(book_id, payload))


@router.delete("/admin/books/{book_id}")
async def admin_delete_book(
    book_id: str,
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
):
    """
    删除书籍

    尽力删除音频和封面对象，然后级联删除章节与播放进度。
    """
    BookService(db, storage).delete_book(book_id)
    return {"success": True}
