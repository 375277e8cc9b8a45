"""集中配置管理

工程名、Pods 目录、pod 工具搜索路径等常量统一放在 Config 中，
支持从 YAML 文件加载 + 编程式覆盖。
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path

from iosresolver.core.exceptions import ConfigError
from iosresolver.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "configs/iosresolver.yml"


@dataclass
class Config:
    """全局配置"""

    # Xcode 工程
    project_name: str = "Unity-iPhone"
    target_name: str = "Unity-iPhone"

    # CocoaPods
    pods_dir: str = "Pods"
    podfile_name: str = "Podfile"
    pod_source: str = "https://github.com/CocoaPods/Specs.git"
    pod_search_paths: list[str] = field(
        default_factory=lambda: ["/usr/local/bin/pod", "/usr/bin/pod"],
    )

    # 宿主持久化
    settings_file: str = "ProjectSettings/iosresolver.yml"
    prefs_file: str = "~/.iosresolver/prefs.yml"

    # 插件依赖声明文件
    deps_glob: str = "**/*Dependencies.yml"

    extra: dict = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_FILE) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        data = load_yaml(path)
        if not data:
            return cls()
        known = {f for f in cls.__dataclass_fields__}
        matched = {k: v for k, v in data.items() if k in known and k != "extra"}
        extra = {k: v for k, v in data.items() if k not in known}
        paths = matched.get("pod_search_paths")
        if paths is not None and not isinstance(paths, list):
            raise ConfigError(f"pod_search_paths 必须是列表: {path}")
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg

    @property
    def prefs_path(self) -> Path:
        return Path(self.prefs_file).expanduser()

    def to_dict(self) -> dict:
        return asdict(self)


_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = DEFAULT_CONFIG_FILE) -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current
