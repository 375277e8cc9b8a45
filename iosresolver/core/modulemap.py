"""module.modulemap 宽松解析

只关心 link 指令，其余内容一律忽略。这不是完整的 modulemap 语法实现:
已有框架包里的 modulemap 格式并不严格，宽松处理才能兼容。
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

from iosresolver.core.models import ModuleMapLink, ModuleMapLinkKind

_IGNORED = ModuleMapLink(ModuleMapLinkKind.IGNORED)


def parse_line(line: str) -> ModuleMapLink:
    """解析单行

    去掉行首空格后最多切成两段:
      link framework "Foo"  -> FRAMEWORK "Foo.framework"
      link z                -> FLAG "-lz"
    """
    items = line.lstrip(" ").split(" ", 1)
    if len(items) < 2 or items[0] != "link":
        return _IGNORED
    rest = items[1]
    if rest.startswith("framework"):
        parts = rest.split(" ", 1)
        if len(parts) < 2:
            return _IGNORED
        return ModuleMapLink(
            ModuleMapLinkKind.FRAMEWORK, parts[1].strip('"') + ".framework",
        )
    return ModuleMapLink(ModuleMapLinkKind.FLAG, "-l" + rest)


def iter_links(path: Path) -> Iterator[ModuleMapLink]:
    """逐行解析 modulemap 文件，只产出 link 条目"""
    with open(path, encoding="utf-8") as f:
        for raw in f:
            link = parse_line(raw.rstrip("\r\n"))
            if link.kind is not ModuleMapLinkKind.IGNORED:
                yield link
