"""Podfile 生成

只生成 CocoaPods 需要的最小 Podfile: 不让 pod 工具改写工程
（integrate_targets => false），产物由第 4 阶段自行合并。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from iosresolver.core.models import Pod

logger = logging.getLogger(__name__)


def render_podfile(
    target_sdk: str,
    target_name: str,
    pods: Iterable[Pod],
    source: str = "https://github.com/CocoaPods/Specs.git",
) -> str:
    """渲染 Podfile 文本，pod 行按名称排序"""
    lines = [
        f"source '{source}'",
        "install! 'cocoapods', :integrate_targets => false",
        f"platform :ios, '{target_sdk}'",
        "",
        f"target '{target_name}' do",
    ]
    lines.extend(p.podfile_line for p in sorted(pods, key=lambda p: p.name))
    lines.append("end")
    return "\n".join(lines) + "\n"


def write_podfile(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    logger.info("Podfile 已生成: %s", path)
    return path
