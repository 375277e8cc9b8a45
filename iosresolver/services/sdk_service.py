"""目标 SDK 策略服务 + 依赖声明入口

两条路径:
  - 声明时即时检查（PodDeclarer.add_pod）: 目标版本低于该 pod 的最低要求时
    直接改写设置并记录日志，让用户尽早看到设置变化
  - 构建前交互检查（TargetSdkService.update_target_sdk）: 通过 UpgradePrompt
    询问用户，同意后改写设置并提示需要重新构建
"""

from __future__ import annotations

import logging
from pathlib import Path

from iosresolver.core.models import Pod
from iosresolver.core.protocols import BuildSettingsAccessor, UpgradePrompt
from iosresolver.core.registry import PodRegistry, read_dependency_file
from iosresolver.core.version import (
    UpgradeRequirement,
    needs_upgrade,
    string_to_version,
    version_to_string,
)

logger = logging.getLogger(__name__)


class TargetSdkService:
    """iOS 目标版本检查与提升"""

    def __init__(
        self,
        settings: BuildSettingsAccessor,
        prompt: UpgradePrompt | None = None,
    ) -> None:
        self.settings = settings
        self.prompt = prompt

    @property
    def current_version(self) -> int:
        return string_to_version(self.settings.get_target_sdk())

    def apply_upgrade(self, version: int, trigger: str = "") -> None:
        """改写目标版本并记录变化"""
        old = self.settings.get_target_sdk()
        new = version_to_string(version)
        self.settings.set_target_sdk(new)
        if trigger:
            logger.info(
                "iOS Target SDK changed from %s to %s required by the %s pod",
                old, new, trigger,
            )
        else:
            logger.info("iOS Target SDK changed from %s to %s", old, new)

    def check_pod(self, pod: Pod, notify_user: bool = True) -> bool:
        """声明时检查单个 pod，返回目标版本是否低于其要求

        notify_user=False 时只做判断，不改写设置。
        """
        min_version = pod.min_sdk_version
        if self.current_version >= min_version:
            return False
        if notify_user:
            self.apply_upgrade(min_version, trigger=pod.name)
        return True

    def needs_update(self, registry: PodRegistry) -> UpgradeRequirement | None:
        return needs_upgrade(self.current_version, registry.pods())

    def update_target_sdk(self, registry: PodRegistry) -> bool:
        """交互式检查，返回目标版本是否被修改

        未配置 prompt 时视为拒绝，只记录警告。
        """
        requirement = self.needs_update(registry)
        if requirement is None:
            return False
        required = requirement.version_string
        if self.prompt is None:
            logger.warning(
                "目标 SDK %s 低于 pods (%s) 要求的最低版本 %s",
                self.settings.get_target_sdk(), ", ".join(requirement.pod_names),
                required,
            )
            return False
        if not self.prompt.prompt_upgrade(required, requirement.pod_names):
            return False
        self.apply_upgrade(requirement.version)
        self.prompt.notify(
            "Target SDK updated.",
            f"Target SDK has been updated to {required}.  You must restart "
            "the build for this change to take effect.",
        )
        return True


class PodDeclarer:
    """插件依赖声明入口: 写入注册表后立即检查目标 SDK"""

    def __init__(self, registry: PodRegistry, sdk: TargetSdkService) -> None:
        self.registry = registry
        self.sdk = sdk

    def add_pod(
        self,
        name: str,
        version: str | None = None,
        bitcode_enabled: bool = True,
        min_target_sdk: str | None = None,
    ) -> Pod:
        pod = self.registry.declare(
            name, version=version,
            bitcode_enabled=bitcode_enabled, min_target_sdk=min_target_sdk,
        )
        self.sdk.check_pod(pod)
        return pod

    def load_file(self, path: str | Path) -> list[Pod]:
        """声明一个依赖文件中的全部 pod"""
        pods = [self.add_pod(**entry) for entry in read_dependency_file(path)]
        logger.info("已从 %s 声明 %d 个 pod", path, len(pods))
        return pods

    def discover(self, root: str | Path, pattern: str) -> list[Path]:
        """在插件目录下按 glob 查找依赖文件并逐个声明（按路径排序）"""
        files = sorted(p for p in Path(root).glob(pattern) if p.is_file())
        for f in files:
            self.load_file(f)
        return files
