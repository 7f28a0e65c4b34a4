# -*- coding: utf-8 -*-
"""
manifest-gen 命令行接口

根据 Cargo.toml 的 [package.metadata.plugin] 生成 plugin.toml。

用法: manifest-gen --cargo-toml <path> [--output <path>]
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .exceptions import ManifestError
from .generator import generate_manifest_from_cargo


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """解析命令行参数"""
    parser = argparse.ArgumentParser(
        prog="manifest-gen",
        description="根据 Cargo.toml 的 [package.metadata.plugin] 生成 plugin.toml",
    )
    parser.add_argument("cargo_toml_positional", nargs="?", metavar="CARGO_TOML", help="Cargo.toml 路径")
    parser.add_argument("--cargo-toml", dest="cargo_toml", help="Cargo.toml 路径")
    parser.add_argument("--output", "-o", help="输出路径，默认输出到标准输出")
    parser.add_argument("--verbose", "-v", action="store_true", help="输出调试日志")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    """命令行主入口"""
    args = parse_arguments(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    cargo_toml = args.cargo_toml or args.cargo_toml_positional
    if not cargo_toml:
        print("错误: 必须指定 --cargo-toml <path>", file=sys.stderr)
        sys.exit(1)

    cargo_toml_path = Path(cargo_toml)
    if not cargo_toml_path.exists():
        print(f"错误: 文件不存在: {cargo_toml_path}", file=sys.stderr)
        sys.exit(1)

    try:
        manifest = generate_manifest_from_cargo(cargo_toml_path)
        toml_str = manifest.to_toml()
    except ManifestError as e:
        print(f"错误: {e}", file=sys.stderr)
        sys.exit(1)

    if args.output:
        try:
            Path(args.output).write_text(toml_str, encoding="utf-8")
        except OSError as e:
            print(f"写入 {args.output} 失败: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        sys.stdout.write(toml_str)

    sys.exit(0)


if __name__ == "__main__":
    main()
