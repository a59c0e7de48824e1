"""
Main entry point for the Quote API.
Provides command-line interface for serving, validating and inspecting the quote collection.
"""

import argparse
import sys
from typing import Optional

from utils import main_logger, config_manager, resolve_path, DataLoadError
from store import QuoteStore, QueryEngine


def load_store(source: Optional[str] = None, strict_length: Optional[bool] = None) -> QuoteStore:
    """按命令行参数或配置加载语录集合"""
    quotes_config = config_manager.get_quotes_config()
    path = resolve_path(source or quotes_config.source_path)
    strict = quotes_config.strict_length if strict_length is None else strict_length
    return QuoteStore.load(path, strict_length=strict)


def cmd_serve(args) -> int:
    """启动API服务器"""
    from api.app import run

    run(host=args.host, port=args.port, reload=True if args.reload else None)
    return 0


def cmd_validate(args) -> int:
    """校验数据源"""
    try:
        store = load_store(args.source, strict_length=True if args.strict_length else None)
    except DataLoadError as e:
        main_logger.error(f"[Main] Quote source is invalid: {e}")
        print(f"INVALID: {e.message}")
        return 1

    print(f"OK: {len(store)} quotes loaded from {store.source}")
    return 0


def cmd_stats(args) -> int:
    """显示集合统计"""
    try:
        store = load_store(args.source)
    except DataLoadError as e:
        main_logger.error(f"[Main] Failed to load quotes: {e}")
        print(f"ERROR: {e.message}")
        return 1

    engine = QueryEngine(store)
    stats = engine.stats()
    tags = engine.list_tags()["tags"]

    print("=" * 50)
    print(f"Source:  {store.source}")
    print(f"Quotes:  {stats['total_quotes']}")
    print(f"Authors: {stats['total_authors']}")
    print(f"Tags:    {stats['total_tags']}")
    print("-" * 50)
    print(", ".join(tags))
    print("=" * 50)
    return 0


def create_parser() -> argparse.ArgumentParser:
    """创建命令行解析器"""
    parser = argparse.ArgumentParser(
        description="Quote API - 只读语录数据服务",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
  python main.py serve --port 3000
  python main.py validate --source data/quotes.json --strict-length
  python main.py stats
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='可用命令')

    serve_parser = subparsers.add_parser('serve', help='启动API服务器')
    serve_parser.add_argument('--host', default=None, help='监听地址 (默认: 配置文件)')
    serve_parser.add_argument('--port', type=int, default=None, help='监听端口 (默认: 配置文件)')
    serve_parser.add_argument('--reload', action='store_true', help='开发模式自动重载')
    serve_parser.set_defaults(func=cmd_serve)

    validate_parser = subparsers.add_parser('validate', help='校验语录数据源')
    validate_parser.add_argument('--source', type=str, default=None, help='数据文件路径 (默认: 配置文件)')
    validate_parser.add_argument('--strict-length', action='store_true', help='长度与正文不一致时视为错误')
    validate_parser.set_defaults(func=cmd_validate)

    stats_parser = subparsers.add_parser('stats', help='显示语录集合统计')
    stats_parser.add_argument('--source', type=str, default=None, help='数据文件路径 (默认: 配置文件)')
    stats_parser.set_defaults(func=cmd_stats)

    return parser


def main(argv=None) -> int:
    """主函数"""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        return args.func(args)
    except KeyboardInterrupt:
        main_logger.info("[Main] Received keyboard interrupt")
        return 0


if __name__ == "__main__":
    sys.exit(main())
