"""
API Server Launcher

启动 AudioShelf REST API 服务。

Usage:
    python scripts/run_api.py
    python scripts/run_api.py --port 9000 --no-reload
"""
import argparse
import sys
from pathlib import Path

# Add backend directory to path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

import uvicorn
from rich.console import Console
from rich.panel import Panel

from audioshelf.config import (
    ADMIN_PASSWORD,
    API_HOST,
    API_PORT,
    API_PREFIX,
    APP_NAME,
    APP_VERSION,
    S3_BUCKET,
)


def main():
    """启动 API 服务"""
    parser = argparse.ArgumentParser(description=f"Run the {APP_NAME} API")
    parser.add_argument("--host", default=API_HOST)
    parser.add_argument("--port", type=int, default=API_PORT)
    parser.add_argument("--no-reload", action="store_true", help="Disable auto reload")
    args = parser.parse_args()

    console = Console()
    console.print(Panel.fit(
        f"[bold blue]{APP_NAME} REST API v{APP_VERSION}[/bold blue]\n\n"
        f"API:     http://{args.host}:{args.port}{API_PREFIX}\n"
        f"Docs:    http://{args.host}:{args.port}/docs\n"
        f"Bucket:  {S3_BUCKET}"
    ))
    if not ADMIN_PASSWORD:
        console.print("[yellow]ADMIN_PASSWORD 未设置，管理接口将返回 500[/yellow]")

    uvicorn.run(
        "audioshelf.main:app",
        host=args.host,
        port=args.port,
        reload=not args.no_reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
