"""领域协议定义

流水线依赖的外部协作者（宿主构建设置、交互提示、Xcode 工程读写）
都以 typing.Protocol 描述，服务层只依赖这些抽象。
"""

from __future__ import annotations

from typing import Protocol


# =========================================================================
# 宿主构建设置
# =========================================================================

class BuildSettingsAccessor(Protocol):
    """宿主构建设置的读写接口"""

    @property
    def active_build_target(self) -> str:
        """当前激活的构建平台，如 "iOS" """
        ...

    def get_target_sdk(self) -> str:
        """iOS 目标版本，"major.minor" 形式"""
        ...

    def set_target_sdk(self, value: str) -> None:
        ...


class PreferenceStore(Protocol):
    """宿主级偏好"""

    @property
    def resolver_enabled(self) -> bool:
        ...


# =========================================================================
# 交互提示
# =========================================================================

class UpgradePrompt(Protocol):
    """目标 SDK 不足时的确认交互

    交互式宿主弹出确认框；无人值守的宿主（CI、测试）给出预设答案。
    """

    def prompt_upgrade(self, required: str, blockers: list[str]) -> bool:
        """询问是否把目标版本提升到 required，返回是否同意"""
        ...

    def notify(self, title: str, message: str) -> None:
        """展示一条只需确认的消息"""
        ...


# =========================================================================
# Xcode 工程读写
# =========================================================================

class ProjectMutator(Protocol):
    """Xcode 工程文件的最小修改接口

    文件格式本身由实现负责，服务层只通过以下操作修改工程。
    """

    def target_guid_by_name(self, name: str) -> str:
        ...

    def set_build_property(self, target: str, name: str, value: str) -> None:
        """覆盖构建设置"""
        ...

    def add_build_property(self, target: str, name: str, value: str) -> None:
        """向构建设置追加一个值（不去重）"""
        ...

    def add_file(self, path: str, project_path: str) -> str:
        """登记文件引用，返回文件 guid"""
        ...

    def add_file_to_build(self, target: str, file_guid: str) -> None:
        ...

    def add_framework_to_project(
        self, target: str, framework: str, weak: bool,
    ) -> None:
        """链接系统框架"""
        ...

    def write_to_string(self) -> str:
        ...
