"""核心数据模型

Pod 声明、modulemap 解析结果、流水线报告集中定义在这里。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from iosresolver.core.version import min_sdk_to_version

LATEST = "LATEST"


@dataclass
class Pod:
    """一个 CocoaPods 依赖声明

    version 取值:
      - None / "" / "LATEST": 始终拉取最新版本
      - 以 "+" 结尾（如 "2.0+"）: 该版本起、下一个大版本之前的任意版本
      - 其他: 精确版本
    """

    name: str
    version: str | None = None
    bitcode_enabled: bool = True
    min_target_sdk: str | None = None  # "major.minor"

    @property
    def podfile_line(self) -> str:
        """Podfile 中的一行 pod 声明"""
        expr = ""
        if self.version and self.version != LATEST:
            if self.version.endswith("+"):
                expr = f", '~> {self.version[:-1]}'"
            else:
                expr = f", '{self.version}'"
        return f"pod '{self.name}'{expr}"

    @property
    def min_sdk_version(self) -> int:
        """最低 SDK 的整数形式，未声明时为 0"""
        return min_sdk_to_version(self.min_target_sdk)


class ModuleMapLinkKind(Enum):
    """modulemap 单行解析结果的类型"""

    FRAMEWORK = "framework"
    FLAG = "flag"
    IGNORED = "ignored"


@dataclass(frozen=True)
class ModuleMapLink:
    """modulemap 中的一条 link 指令

    FRAMEWORK: value 为 "Foo.framework"
    FLAG:      value 为 "-lfoo"
    IGNORED:   value 为空
    """

    kind: ModuleMapLinkKind
    value: str = ""


@dataclass
class IntegrationResult:
    """第 4 阶段合并到工程中的内容汇总"""

    framework_bundles: list[str] = field(default_factory=list)
    resources: list[str] = field(default_factory=list)
    linked_frameworks: list[str] = field(default_factory=list)
    link_flags: list[str] = field(default_factory=list)


@dataclass
class StageOutcome:
    """单个流水线阶段的执行结果"""

    name: str
    status: str  # "done", "skipped", "aborted"
    message: str = ""


@dataclass
class PipelineReport:
    """一次完整后处理的阶段结果汇总"""

    project_dir: str
    stages: list[StageOutcome] = field(default_factory=list)

    def status_of(self, name: str) -> str:
        for stage in self.stages:
            if stage.name == name:
                return stage.status
        return ""

    @property
    def completed(self) -> bool:
        return bool(self.stages) and all(s.status == "done" for s in self.stages)
