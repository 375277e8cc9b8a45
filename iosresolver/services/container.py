"""服务容器 — 一次会话共享的注册表、设置和服务

一个容器对应一次"插件加载 → 构建后处理"会话: 同一容器内的
registry / settings 是同一实例，插件声明的 pod 会被流水线看到。

依赖关系图（→ 表示依赖）:
  declarer → registry, sdk
  sdk      → settings, prompt
  pipeline → registry, settings, prefs, sdk, installer, patcher

用法:
    container = ServiceContainer(config=cfg, prompt=ScriptedPrompt(True))
    container.declarer.add_pod("Firebase/Core", "3.4+")
    container.pipeline.run("build/ios")
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from iosresolver.core.config import Config
    from iosresolver.core.protocols import UpgradePrompt
    from iosresolver.core.registry import PodRegistry
    from iosresolver.core.settings import EditorPrefs, PlayerSettings
    from iosresolver.services.installer import PodInstaller
    from iosresolver.services.patcher import ProjectPatcher
    from iosresolver.services.pipeline import PostProcessPipeline
    from iosresolver.services.sdk_service import PodDeclarer, TargetSdkService
    from iosresolver.utils.shell import CommandExecutor

logger = logging.getLogger(__name__)


class ServiceContainer:
    """懒加载服务容器"""

    def __init__(
        self,
        config: Config | None = None,
        *,
        project_root: str | Path = ".",
        prompt: UpgradePrompt | None = None,
        executor: CommandExecutor | None = None,
    ) -> None:
        self._instances: dict[str, object] = {}
        if config is None:
            from iosresolver.core.config import get_config
            config = get_config()
        self._config = config
        self.project_root = Path(project_root)
        self._prompt = prompt
        self._executor = executor

    @property
    def config(self) -> Config:
        return self._config

    # ---- 状态 ----

    @property
    def registry(self) -> PodRegistry:
        if "registry" not in self._instances:
            from iosresolver.core.registry import PodRegistry
            self._instances["registry"] = PodRegistry()
        return self._instances["registry"]  # type: ignore[return-value]

    @property
    def settings(self) -> PlayerSettings:
        if "settings" not in self._instances:
            from iosresolver.core.settings import PlayerSettings
            self._instances["settings"] = PlayerSettings(
                self.project_root / self._config.settings_file,
            )
        return self._instances["settings"]  # type: ignore[return-value]

    @property
    def prefs(self) -> EditorPrefs:
        if "prefs" not in self._instances:
            from iosresolver.core.settings import EditorPrefs
            self._instances["prefs"] = EditorPrefs(self._config.prefs_path)
        return self._instances["prefs"]  # type: ignore[return-value]

    # ---- 服务 ----

    @property
    def sdk(self) -> TargetSdkService:
        if "sdk" not in self._instances:
            from iosresolver.services.sdk_service import TargetSdkService
            self._instances["sdk"] = TargetSdkService(
                self.settings, prompt=self._prompt,
            )
        return self._instances["sdk"]  # type: ignore[return-value]

    @property
    def declarer(self) -> PodDeclarer:
        if "declarer" not in self._instances:
            from iosresolver.services.sdk_service import PodDeclarer
            self._instances["declarer"] = PodDeclarer(self.registry, self.sdk)
        return self._instances["declarer"]  # type: ignore[return-value]

    @property
    def installer(self) -> PodInstaller:
        if "installer" not in self._instances:
            from iosresolver.services.installer import PodInstaller
            self._instances["installer"] = PodInstaller(
                list(self._config.pod_search_paths), executor=self._executor,
            )
        return self._instances["installer"]  # type: ignore[return-value]

    @property
    def patcher(self) -> ProjectPatcher:
        if "patcher" not in self._instances:
            from iosresolver.services.patcher import ProjectPatcher
            self._instances["patcher"] = ProjectPatcher()
        return self._instances["patcher"]  # type: ignore[return-value]

    @property
    def pipeline(self) -> PostProcessPipeline:
        if "pipeline" not in self._instances:
            from iosresolver.services.pipeline import PostProcessPipeline
            self._instances["pipeline"] = PostProcessPipeline(
                config=self._config,
                registry=self.registry,
                settings=self.settings,
                prefs=self.prefs,
                sdk=self.sdk,
                installer=self.installer,
                patcher=self.patcher,
            )
        return self._instances["pipeline"]  # type: ignore[return-value]


# ---- 全局单例 ----

_global: ServiceContainer | None = None
_global_lock = threading.Lock()


def get_container() -> ServiceContainer:
    """获取全局 ServiceContainer 单例"""
    global _global  # noqa: PLW0603
    if _global is not None:
        return _global
    with _global_lock:
        if _global is None:
            _global = ServiceContainer()
        return _global


def set_container(container: ServiceContainer) -> None:
    """由 CLI 入口按命令行参数构造后注册"""
    global _global  # noqa: PLW0603
    with _global_lock:
        _global = container


def reset_container() -> None:
    """重置全局容器（仅用于测试）"""
    global _global  # noqa: PLW0603
    with _global_lock:
        _global = None
