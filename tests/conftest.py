"""共享测试夹具: 最小 Unity-iPhone 工程、假执行器、记录型工程修改器"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from iosresolver.core.config import Config
from iosresolver.utils.shell import CommandResult

PBXPROJ = """// !$*UTF8*$!
{
	archiveVersion = 1;
	classes = {
	};
	objectVersion = 46;
	objects = {

/* Begin PBXBuildFile section */
		AA0000000000000000000001 /* main.mm in Sources */ = {isa = PBXBuildFile; fileRef = AA0000000000000000000002 /* main.mm */; };
/* End PBXBuildFile section */

/* Begin PBXFileReference section */
		AA0000000000000000000002 /* main.mm */ = {isa = PBXFileReference; lastKnownFileType = sourcecode.cpp.objcpp; path = main.mm; sourceTree = "<group>"; };
/* End PBXFileReference section */

/* Begin PBXFrameworksBuildPhase section */
		AA0000000000000000000010 /* Frameworks */ = {
			isa = PBXFrameworksBuildPhase;
			buildActionMask = 2147483647;
			files = (
			);
			runOnlyForDeploymentPostprocessing = 0;
		};
/* End PBXFrameworksBuildPhase section */

/* Begin PBXGroup section */
		AA0000000000000000000020 = {
			isa = PBXGroup;
			children = (
				AA0000000000000000000002 /* main.mm */,
			);
			sourceTree = "<group>";
		};
/* End PBXGroup section */

/* Begin PBXNativeTarget section */
		AA0000000000000000000030 /* Unity-iPhone */ = {
			isa = PBXNativeTarget;
			buildConfigurationList = AA0000000000000000000040 /* Build configuration list for PBXNativeTarget "Unity-iPhone" */;
			buildPhases = (
				AA0000000000000000000011 /* Resources */,
				AA0000000000000000000012 /* Sources */,
				AA0000000000000000000010 /* Frameworks */,
			);
			buildRules = (
			);
			dependencies = (
			);
			name = "Unity-iPhone";
			productName = "Unity-iPhone";
			productType = "com.apple.product-type.application";
		};
/* End PBXNativeTarget section */

/* Begin PBXProject section */
		AA0000000000000000000050 /* Project object */ = {
			isa = PBXProject;
			mainGroup = AA0000000000000000000020;
			targets = (
				AA0000000000000000000030 /* Unity-iPhone */,
			);
		};
/* End PBXProject section */

/* Begin PBXResourcesBuildPhase section */
		AA0000000000000000000011 /* Resources */ = {
			isa = PBXResourcesBuildPhase;
			buildActionMask = 2147483647;
			files = (
			);
			runOnlyForDeploymentPostprocessing = 0;
		};
/* End PBXResourcesBuildPhase section */

/* Begin PBXSourcesBuildPhase section */
		AA0000000000000000000012 /* Sources */ = {
			isa = PBXSourcesBuildPhase;
			buildActionMask = 2147483647;
			files = (
				AA0000000000000000000001 /* main.mm in Sources */,
			);
			runOnlyForDeploymentPostprocessing = 0;
		};
/* End PBXSourcesBuildPhase section */

/* Begin XCBuildConfiguration section */
		AA0000000000000000000060 /* Debug */ = {
			isa = XCBuildConfiguration;
			buildSettings = {
				OTHER_LDFLAGS = (
					"-weak_framework",
					CoreMotion,
				);
				PRODUCT_NAME = ProductName;
				"CODE_SIGN_IDENTITY[sdk=iphoneos*]" = "iPhone Developer";
			};
			name = Debug;
		};
		AA0000000000000000000061 /* Release */ = {
			isa = XCBuildConfiguration;
			buildSettings = {
				PRODUCT_NAME = ProductName;
			};
			name = Release;
		};
/* End XCBuildConfiguration section */

/* Begin XCConfigurationList section */
		AA0000000000000000000040 /* Build configuration list for PBXNativeTarget "Unity-iPhone" */ = {
			isa = XCConfigurationList;
			buildConfigurations = (
				AA0000000000000000000060 /* Debug */,
				AA0000000000000000000061 /* Release */,
			);
			defaultConfigurationIsVisible = 0;
			defaultConfigurationName = Release;
		};
/* End XCConfigurationList section */
	};
	rootObject = AA0000000000000000000050 /* Project object */;
}
"""


class FakeExecutor:
    """按命令最后一个参数返回预设结果，并记录调用"""

    def __init__(
        self,
        version_output: str = "1.5.3\n",
        version_rc: int = 0,
        install_rc: int = 0,
        on_install: Callable[[Path], None] | None = None,
    ) -> None:
        self.version_output = version_output
        self.version_rc = version_rc
        self.install_rc = install_rc
        self.on_install = on_install
        self.calls: list[tuple[list[str], str, dict[str, str]]] = []

    def execute(
        self,
        args: list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
    ) -> CommandResult:
        self.calls.append((list(args), cwd, dict(env or {})))
        if args[-1] == "--version":
            return CommandResult(self.version_rc, self.version_output, "")
        if args[-1] == "install":
            if self.on_install is not None and self.install_rc == 0:
                self.on_install(Path(cwd))
            return CommandResult(self.install_rc, "install stdout", "install stderr")
        return CommandResult(127, "", f"unknown command: {args}")


class RecordingProject:
    """ProjectMutator 的内存实现，只记录调用"""

    def __init__(self) -> None:
        self.properties: dict[str, list[str]] = {}
        self.files: dict[str, str] = {}
        self.build_files: list[str] = []
        self.frameworks: list[tuple[str, bool]] = []
        self.writes = 0

    def target_guid_by_name(self, name: str) -> str:
        return f"target:{name}"

    def set_build_property(self, target: str, name: str, value: str) -> None:
        self.properties[name] = [value]

    def add_build_property(self, target: str, name: str, value: str) -> None:
        self.properties.setdefault(name, []).append(value)

    def add_file(self, path: str, project_path: str) -> str:
        return self.files.setdefault(path, f"file:{path}")

    def add_file_to_build(self, target: str, file_guid: str) -> None:
        self.build_files.append(file_guid)

    def add_framework_to_project(self, target: str, framework: str, weak: bool) -> None:
        self.frameworks.append((framework, weak))

    def write_to_string(self) -> str:
        self.writes += 1
        return repr(self.properties)


@pytest.fixture()
def recording_project() -> RecordingProject:
    return RecordingProject()


@pytest.fixture()
def make_executor() -> type[FakeExecutor]:
    return FakeExecutor


@pytest.fixture()
def unity_project(tmp_path: Path) -> Path:
    """tmp_path/build 下的最小 Unity-iPhone 工程目录"""
    project_dir = tmp_path / "build"
    xcodeproj = project_dir / "Unity-iPhone.xcodeproj"
    xcodeproj.mkdir(parents=True)
    (xcodeproj / "project.pbxproj").write_text(PBXPROJ, encoding="utf-8")
    return project_dir


@pytest.fixture()
def pod_tool(tmp_path: Path) -> Path:
    """一个存在的假 pod 可执行文件路径（只用于 locate）"""
    path = tmp_path / "bin" / "pod"
    path.parent.mkdir(parents=True)
    path.write_text("#!/bin/sh\n", encoding="utf-8")
    return path


@pytest.fixture()
def config(tmp_path: Path, pod_tool: Path) -> Config:
    return Config(
        pod_search_paths=[str(tmp_path / "missing" / "pod"), str(pod_tool)],
        settings_file=str(tmp_path / "ProjectSettings" / "iosresolver.yml"),
        prefs_file=str(tmp_path / "prefs.yml"),
    )


def _stage_framework(
    pods_dir: Path,
    name: str,
    modulemap: str = "",
    resources: dict[str, str] | None = None,
    resource_dirs: list[str] | None = None,
) -> Path:
    """模拟 pod install 在 Pods 下生成一个 framework 包"""
    bundle = pods_dir / name / "Frameworks" / f"{name}.framework"
    bundle.mkdir(parents=True)
    (bundle / name).write_text("binary", encoding="utf-8")
    if modulemap:
        (bundle / "Modules").mkdir()
        (bundle / "Modules" / "module.modulemap").write_text(modulemap, encoding="utf-8")
    if resources or resource_dirs:
        res = bundle / "Resources"
        res.mkdir()
        for fname, content in (resources or {}).items():
            (res / fname).write_text(content, encoding="utf-8")
        for dname in resource_dirs or []:
            (res / dname).mkdir()
            (res / dname / "item.txt").write_text(dname, encoding="utf-8")
    return bundle


@pytest.fixture()
def pbxproj_text() -> str:
    return PBXPROJ


@pytest.fixture()
def stage_framework() -> Callable[..., Path]:
    return _stage_framework
