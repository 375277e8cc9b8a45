"""iOS 工程后处理流水线

宿主生成 Xcode 工程后按固定顺序执行四个阶段:

  1. patch_project        基础构建设置 + bitcode 策略
  2. gen_podfile          生成 Podfile
  3. install_pods         执行 pod install（目标 SDK 刚被修改时提前返回）
  4. update_project_deps  合并 Pods 产物到工程

每个阶段都先检查 should_inject()（当前平台是 iOS、功能已开启、
存在 pod 声明），不满足则静默跳过。任一阶段失败只提前返回，
不回滚前面阶段的修改，后续阶段各自根据产物是否存在决定是否继续。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from iosresolver.core.config import Config
from iosresolver.core.models import PipelineReport, StageOutcome
from iosresolver.core.pbxproj import PbxProject
from iosresolver.core.podfile import render_podfile, write_podfile
from iosresolver.core.protocols import (
    BuildSettingsAccessor,
    PreferenceStore,
    ProjectMutator,
)
from iosresolver.core.registry import PodRegistry
from iosresolver.core.settings import BUILD_TARGET_IOS
from iosresolver.services.installer import INSTALL_INSTRUCTIONS, PodInstaller
from iosresolver.services.patcher import ProjectPatcher
from iosresolver.services.sdk_service import TargetSdkService
from iosresolver.utils.yaml_io import atomic_write

logger = logging.getLogger(__name__)

BUILD_ORDER_PATCH_PROJECT = 1
BUILD_ORDER_GEN_PODFILE = 2
BUILD_ORDER_INSTALL_PODS = 3
BUILD_ORDER_UPDATE_DEPS = 4

ProjectLoader = Callable[[Path], ProjectMutator]


class PostProcessPipeline:
    """后处理流水线

    registry 在插件加载阶段填充完毕，流水线执行期间只读。
    """

    def __init__(
        self,
        config: Config,
        registry: PodRegistry,
        settings: BuildSettingsAccessor,
        prefs: PreferenceStore,
        sdk: TargetSdkService,
        installer: PodInstaller,
        patcher: ProjectPatcher | None = None,
        project_loader: ProjectLoader | None = None,
    ) -> None:
        self.config = config
        self.registry = registry
        self.settings = settings
        self.prefs = prefs
        self.sdk = sdk
        self.installer = installer
        self.patcher = patcher or ProjectPatcher()
        self._load_project = project_loader or PbxProject.load

    # ---- 公共 ----

    def should_inject(self) -> bool:
        return (
            self.settings.active_build_target == BUILD_TARGET_IOS
            and self.prefs.resolver_enabled
            and not self.registry.is_empty()
        )

    def project_path(self, project_dir: Path) -> Path:
        return (
            Path(project_dir)
            / f"{self.config.project_name}.xcodeproj"
            / "project.pbxproj"
        )

    def _save_project(self, project: ProjectMutator, path: Path) -> None:
        atomic_write(path, project.write_to_string())
        logger.info("工程文件已写回: %s", path)

    @staticmethod
    def _skipped(name: str) -> StageOutcome:
        return StageOutcome(name=name, status="skipped")

    # ---- 阶段 ----

    def patch_project(self, project_dir: Path) -> StageOutcome:
        name = "patch_project"
        if not self.should_inject():
            return self._skipped(name)
        path = self.project_path(project_dir)
        project = self._load_project(path)
        target = project.target_guid_by_name(self.config.target_name)
        self.patcher.apply_baseline_settings(
            project, target, self.registry.bitcode_disabled_names(),
        )
        self._save_project(project, path)
        return StageOutcome(name=name, status="done")

    def gen_podfile(self, project_dir: Path) -> StageOutcome:
        name = "gen_podfile"
        if not self.should_inject():
            return self._skipped(name)
        content = render_podfile(
            self.settings.get_target_sdk(),
            self.config.target_name,
            self.registry.pods(),
            source=self.config.pod_source,
        )
        write_podfile(Path(project_dir) / self.config.podfile_name, content)
        return StageOutcome(name=name, status="done")

    def install_pods(self, project_dir: Path) -> StageOutcome:
        name = "install_pods"
        if not self.should_inject():
            return self._skipped(name)
        if self.sdk.update_target_sdk(self.registry):
            return StageOutcome(
                name=name, status="aborted",
                message="目标 SDK 已更新，需要重新构建",
            )

        pod_command = self.installer.locate()
        if not pod_command:
            logger.error(
                "'pod' command not found; unable to generate a usable Xcode "
                "project. %s", INSTALL_INSTRUCTIONS,
            )
            return StageOutcome(name=name, status="aborted", message="pod 工具未找到")

        cwd = str(project_dir)
        if not self.installer.ensure_minimum_version(pod_command, cwd=cwd):
            return StageOutcome(name=name, status="aborted", message="pod 版本过低")

        result = self.installer.install(pod_command, cwd)
        if not result.success:
            return StageOutcome(
                name=name, status="aborted",
                message=f"pod install 失败 (rc={result.returncode})",
            )
        return StageOutcome(name=name, status="done")

    def update_project_deps(self, project_dir: Path) -> StageOutcome:
        name = "update_project_deps"
        if not self.should_inject():
            return self._skipped(name)
        project_dir = Path(project_dir)
        staging = project_dir / self.config.pods_dir
        if not staging.is_dir():
            return StageOutcome(
                name=name, status="skipped", message="Pods 目录不存在",
            )

        path = self.project_path(project_dir)
        project = self._load_project(path)
        target = project.target_guid_by_name(self.config.target_name)
        self.patcher.integrate_staged_artifacts(project, target, project_dir, staging)
        self._save_project(project, path)
        return StageOutcome(name=name, status="done")

    # ---- 整体执行 ----

    def stages(self) -> list[tuple[int, Callable[[Path], StageOutcome]]]:
        return [
            (BUILD_ORDER_PATCH_PROJECT, self.patch_project),
            (BUILD_ORDER_GEN_PODFILE, self.gen_podfile),
            (BUILD_ORDER_INSTALL_PODS, self.install_pods),
            (BUILD_ORDER_UPDATE_DEPS, self.update_project_deps),
        ]

    def run(self, project_dir: str | Path) -> PipelineReport:
        """按顺序执行全部阶段，阶段失败不影响后续阶段被调用"""
        project_dir = Path(project_dir)
        report = PipelineReport(project_dir=str(project_dir))
        for _, stage in sorted(self.stages(), key=lambda s: s[0]):
            outcome = stage(project_dir)
            report.stages.append(outcome)
            if outcome.status == "aborted":
                logger.warning("阶段 %s 提前结束: %s", outcome.name, outcome.message)
        logger.info(
            "后处理完成: %s",
            ", ".join(f"{s.name}={s.status}" for s in report.stages),
        )
        return report
