"""宿主设置存储

- EditorPrefs: 宿主级编辑器偏好（跨工程），保存功能开关
- PlayerSettings: 工程级构建设置，保存当前构建平台和 iOS 目标版本

两者都以 YAML 文件持久化，读写即时落盘。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from iosresolver.utils.yaml_io import load_yaml, save_yaml

logger = logging.getLogger(__name__)

PREFERENCE_ENABLED = "iosresolver.enabled"

BUILD_TARGET_IOS = "iOS"
DEFAULT_TARGET_OS_VERSION = "8.0"


class _YamlStore:
    """单文件键值存储"""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._data: dict[str, Any] = load_yaml(self.path)

    def _get(self, key: str, default: Any) -> Any:
        return self._data.get(key, default)

    def _set(self, key: str, value: Any) -> None:
        self._data[key] = value
        save_yaml(self.path, self._data)


class EditorPrefs(_YamlStore):
    """编辑器偏好"""

    def get_bool(self, key: str, default: bool = False) -> bool:
        return bool(self._get(key, default))

    def set_bool(self, key: str, value: bool) -> None:
        self._set(key, bool(value))

    @property
    def resolver_enabled(self) -> bool:
        """是否向生成的 Xcode 工程注入 pod 依赖（默认开启）"""
        return self.get_bool(PREFERENCE_ENABLED, default=True)

    @resolver_enabled.setter
    def resolver_enabled(self, value: bool) -> None:
        self.set_bool(PREFERENCE_ENABLED, value)


class PlayerSettings(_YamlStore):
    """工程构建设置（BuildSettingsAccessor 的默认实现）"""

    @property
    def active_build_target(self) -> str:
        return str(self._get("active_build_target", BUILD_TARGET_IOS))

    @active_build_target.setter
    def active_build_target(self, value: str) -> None:
        self._set("active_build_target", value)

    def get_target_sdk(self) -> str:
        """iOS 目标版本字符串，如 "7.1" """
        return str(self._get("target_os_version", DEFAULT_TARGET_OS_VERSION))

    def set_target_sdk(self, value: str) -> None:
        self._set("target_os_version", value)
        logger.debug("target_os_version = %s", value)
