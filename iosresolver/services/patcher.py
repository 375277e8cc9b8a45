"""Xcode 工程修补

职责:
- 第 1 阶段: 写入 CocoaPods 需要的基础构建设置和 bitcode 策略
- 第 4 阶段: 把 pod install 产出的 framework / 资源 / 链接参数合并进工程

文件移动和复制不是事务性的: 中途失败会让磁盘与内存中的工程不一致，
由最终写回失败或用户重新构建暴露出来。
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from iosresolver.core.modulemap import iter_links
from iosresolver.core.models import IntegrationResult, ModuleMapLinkKind
from iosresolver.core.protocols import ProjectMutator

logger = logging.getLogger(__name__)

INHERITED = "$(inherited)"
FRAMEWORKS_DIR = "Frameworks"
RESOURCES_DIR = "Resources"
MODULE_MAP = Path("Modules") / "module.modulemap"


def delete_existing(path: Path) -> None:
    """删除已存在的文件或目录"""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()


def find_framework_bundles(staging_dir: Path) -> list[Path]:
    """递归查找 *.framework 目录，不进入 framework 内部"""
    bundles: list[Path] = []
    for candidate in sorted(staging_dir.rglob("*.framework")):
        if not candidate.is_dir():
            continue
        rel_parents = candidate.relative_to(staging_dir).parents
        if any(p.suffix == ".framework" for p in rel_parents):
            continue
        bundles.append(candidate)
    return bundles


class ProjectPatcher:
    """工程修补器"""

    def apply_baseline_settings(
        self,
        project: ProjectMutator,
        target: str,
        bitcode_disabled: list[str],
    ) -> None:
        """写入基础构建设置

        $(inherited) 采用追加方式，重复执行会累积多个标记，不做去重。
        """
        if bitcode_disabled:
            logger.warning(
                "Bitcode is disabled due to the following Cocoapods (%s)",
                ", ".join(bitcode_disabled),
            )
        project.set_build_property(target, "CLANG_ENABLE_MODULES", "YES")
        project.add_build_property(target, "OTHER_LDFLAGS", INHERITED)
        project.add_build_property(target, "OTHER_CFLAGS", INHERITED)
        project.add_build_property(target, "HEADER_SEARCH_PATHS", INHERITED)
        project.set_build_property(target, "FRAMEWORK_SEARCH_PATHS", INHERITED)
        project.add_build_property(
            target, "FRAMEWORK_SEARCH_PATHS", f"$(PROJECT_DIR)/{FRAMEWORKS_DIR}",
        )
        project.add_build_property(target, "OTHER_LDFLAGS", "-ObjC")
        if bitcode_disabled:
            project.set_build_property(target, "ENABLE_BITCODE", "NO")

    def integrate_staged_artifacts(
        self,
        project: ProjectMutator,
        target: str,
        project_dir: Path,
        staging_dir: Path,
    ) -> IntegrationResult | None:
        """合并 pod 产物，staging_dir 不存在（安装失败）时返回 None 且不修改工程"""
        if not staging_dir.is_dir():
            logger.debug("Pods 目录不存在，跳过合并: %s", staging_dir)
            return None

        (project_dir / FRAMEWORKS_DIR).mkdir(parents=True, exist_ok=True)
        (project_dir / RESOURCES_DIR).mkdir(parents=True, exist_ok=True)

        result = IntegrationResult()
        frameworks: set[str] = set()
        link_flags: set[str] = set()
        for bundle in find_framework_bundles(staging_dir):
            rel = f"{FRAMEWORKS_DIR}/{bundle.name}"
            dest = project_dir / rel
            delete_existing(dest)
            shutil.move(str(bundle), str(dest))
            project.add_file_to_build(target, project.add_file(rel, rel))
            result.framework_bundles.append(bundle.name)

            module_map = dest / MODULE_MAP
            if module_map.is_file():
                for link in iter_links(module_map):
                    if link.kind is ModuleMapLinkKind.FRAMEWORK:
                        frameworks.add(link.value)
                    else:
                        link_flags.add(link.value)

            resources = dest / RESOURCES_DIR
            if resources.is_dir():
                result.resources.extend(
                    self._merge_resources(project, target, project_dir, resources),
                )

        for framework in sorted(frameworks):
            project.add_framework_to_project(target, framework, False)
        for flag in sorted(link_flags):
            project.add_build_property(target, "OTHER_LDFLAGS", flag)
        result.linked_frameworks = sorted(frameworks)
        result.link_flags = sorted(link_flags)

        logger.info(
            "已合并 %d 个 framework, %d 个资源, %d 个系统框架, %d 个链接参数",
            len(result.framework_bundles), len(result.resources),
            len(result.linked_frameworks), len(result.link_flags),
        )
        return result

    @staticmethod
    def _merge_resources(
        project: ProjectMutator, target: str, project_dir: Path, resources: Path,
    ) -> list[str]:
        """文件覆盖复制，子目录先删后移动"""
        merged: list[str] = []
        entries = sorted(resources.iterdir())
        for src in (e for e in entries if e.is_file()):
            rel = f"{RESOURCES_DIR}/{src.name}"
            shutil.copy2(src, project_dir / rel)
            project.add_file_to_build(target, project.add_file(rel, rel))
            merged.append(rel)
        for src in (e for e in entries if e.is_dir()):
            rel = f"{RESOURCES_DIR}/{src.name}"
            dest = project_dir / rel
            delete_existing(dest)
            shutil.move(str(src), str(dest))
            project.add_file_to_build(target, project.add_file(rel, rel))
            merged.append(rel)
        return merged
