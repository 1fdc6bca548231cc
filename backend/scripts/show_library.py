"""
书库概览脚本

功能：
1. 列出所有书籍（章节数、总时长）
2. 指定 --session 时显示该会话在每本书上的续播位置

使用方法：
    python scripts/show_library.py
    python scripts/show_library.py --session <session-id>
"""
import argparse
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import or_, select
from sqlalchemy.orm import selectinload
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from audioshelf.database import get_session
from audioshelf.models import Book
from audioshelf.services import ProgressService


def format_duration(seconds: float) -> str:
    """秒数格式化为 H:MM:SS"""
    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"


def main():
    """主函数"""
    parser = argparse.ArgumentParser(description="Show the AudioShelf library")
    parser.add_argument("--session", help="Listening session id to show progress for")
    parser.add_argument("--search", help="Filter by title/author")
    args = parser.parse_args()

    console = Console()
    console.print(Panel.fit("[bold blue]AudioShelf 书库[/bold blue]"))

    with get_session() as db:
        stmt = select(Book).options(selectinload(Book.chapters)).order_by(Book.created_at.desc())
        if args.search:
            pattern = f"%{args.search}%"
            stmt = stmt.where(or_(Book.title.ilike(pattern), Book.author.ilike(pattern)))
        books = db.scalars(stmt).all()

        if not books:
            console.print("[yellow]书库为空[/yellow]")
            return

        table = Table(title=f"共 {len(books)} 本书")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("书名", style="bold")
        table.add_column("作者")
        table.add_column("章节", justify="right")
        table.add_column("总时长", justify="right")
        if args.session:
            table.add_column("续播位置", style="green")

        progress_service = ProgressService(db)
        for book in books:
            row = [
                book.id,
                book.title,
                book.author,
                str(len(book.chapters)),
                format_duration(book.total_duration),
            ]
            if args.session:
                row.append(_describe_progress(progress_service, args.session, book))
            table.add_row(*row)

        console.print(table)


def _describe_progress(service: ProgressService, session_id: str, book) -> str:
    progress = service.get(session_id, book.id)
    if progress.completed:
        return "已听完"
    if not progress.current_chapter_id:
        return "-"
    chapter = next((c for c in book.chapters if c.id == progress.current_chapter_id), None)
    if chapter is None:
        return "章节已删除（从头开始）"
    return f"第 {chapter.order} 章 {format_duration(progress.position)}"


if __name__ == "__main__":
    main()
