"""Pod 依赖注册表

各插件在加载阶段调用 declare() 声明自己需要的 pod，
之后整条后处理流水线只读使用。

注册表是显式传递的上下文对象，不是模块级全局状态；
"声明即检查目标 SDK" 的组合行为由 services.sdk_service.PodDeclarer 完成。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterator

from iosresolver.core.exceptions import ValidationError, VersionFormatError
from iosresolver.core.models import Pod
from iosresolver.core.version import min_sdk_to_version
from iosresolver.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)


class PodRegistry:
    """以 pod 名为键的去重声明表（同名重复声明以最后一次为准）"""

    def __init__(self) -> None:
        self._pods: dict[str, Pod] = {}

    def declare(
        self,
        name: str,
        version: str | None = None,
        bitcode_enabled: bool = True,
        min_target_sdk: str | None = None,
    ) -> Pod:
        """新增或覆盖一个 pod 声明"""
        if not name:
            raise ValidationError("pod name 为必填")
        pod = Pod(
            name=name, version=version,
            bitcode_enabled=bitcode_enabled, min_target_sdk=min_target_sdk,
        )
        if name in self._pods:
            logger.debug("pod 声明被覆盖: %s", name)
        self._pods[name] = pod
        return pod

    def contains(self, name: str) -> bool:
        return name in self._pods

    def get(self, name: str) -> Pod | None:
        return self._pods.get(name)

    def is_empty(self) -> bool:
        return not self._pods

    def pods(self) -> list[Pod]:
        """按名称排序的 pod 列表，保证生成内容稳定"""
        return [self._pods[k] for k in sorted(self._pods)]

    def bitcode_disabled_names(self) -> list[str]:
        """未启用 bitcode 编译的 pod 名；非空即整个工程关闭 bitcode"""
        return [p.name for p in self.pods() if not p.bitcode_enabled]

    def __len__(self) -> int:
        return len(self._pods)

    def __iter__(self) -> Iterator[Pod]:
        return iter(self.pods())


def read_dependency_file(path: str | Path) -> list[dict[str, Any]]:
    """读取一个插件依赖声明文件，返回规范化后的声明列表

    文件格式:
        pods:
          - name: Firebase/Core
            version: "3.4+"
            bitcode: true
            min_sdk: "7.0"
    """
    data = load_yaml(path)
    entries = data.get("pods") or []
    if not isinstance(entries, list):
        raise ValidationError(f"依赖文件 pods 段必须是列表: {path}")

    problems: list[str] = []
    result: list[dict[str, Any]] = []
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict) or not entry.get("name"):
            problems.append(f"第 {i + 1} 项缺少 name")
            continue
        version = entry.get("version")
        min_sdk = entry.get("min_sdk")
        if min_sdk is not None:
            try:
                min_sdk_to_version(str(min_sdk))
            except VersionFormatError:
                problems.append(f"第 {i + 1} 项 min_sdk 无效: {min_sdk}")
                continue
        result.append({
            "name": str(entry["name"]),
            "version": None if version is None else str(version),
            "bitcode_enabled": bool(entry.get("bitcode", True)),
            "min_target_sdk": None if min_sdk is None else str(min_sdk),
        })
    if problems:
        raise ValidationError(f"依赖文件无效: {path}", details=problems)
    return result
