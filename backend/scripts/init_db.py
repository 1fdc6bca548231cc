#!/usr/bin/env python
"""
数据库初始化脚本

功能：
1. 创建 books / chapters / playback_progress 表
2. 指定 --reset 时先删除所有表（会清空书库和播放进度）

使用方法：
    python scripts/init_db.py
    python scripts/init_db.py --reset
"""
import argparse
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from rich.console import Console
from rich.prompt import Confirm
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from audioshelf.config import DATABASE_PATH
from audioshelf.database import create_tables, get_engine, reset_database


def main():
    """主函数"""
    parser = argparse.ArgumentParser(description="Create the AudioShelf tables")
    parser.add_argument("--reset", action="store_true", help="Drop every table first (deletes all data)")
    parser.add_argument("--yes", action="store_true", help="Do not ask before --reset")
    args = parser.parse_args()

    console = Console()
    console.print(f"数据库位置: [cyan]{DATABASE_PATH}[/cyan]")

    try:
        if args.reset:
            if not args.yes and not Confirm.ask("[red]删除所有书籍和播放进度？[/red]"):
                console.print("[yellow]已取消[/yellow]")
                return
            reset_database()
            console.print("[green]数据库已重置[/green]")
        else:
            create_tables()

        tables = sorted(inspect(get_engine()).get_table_names())
        console.print(f"[green]共 {len(tables)} 张表:[/green] {', '.join(tables)}")
    except SQLAlchemyError as e:
        console.print(f"[red]数据库初始化失败: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
