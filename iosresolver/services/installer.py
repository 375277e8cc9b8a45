"""CocoaPods 工具调用

职责:
- 按固定顺序查找 pod 可执行文件
- 检查版本（至少 1.x）
- 在工程目录执行 pod install

工具缺失、版本过低、install 失败均以 error 日志上报并返回失败，
不抛异常；后续阶段通过 Pods 目录是否存在自行判断。
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from iosresolver.utils.shell import CommandExecutor, CommandResult, get_executor

logger = logging.getLogger(__name__)

INSTALL_INSTRUCTIONS = (
    "You can install cocoapods with the Ruby gem package manager:\n"
    " > sudo gem install -n /usr/local/bin cocoapods\n"
    " > pod setup"
)


def utf8_lang(ambient: str | None = None) -> str:
    """保留环境 LANG 的语言部分，强制 UTF-8 编码，如 "de_DE.ISO-8859-1" -> "de_DE.UTF-8" """
    base = (ambient or "en_US.UTF-8").split(".")[0] or "en_US"
    return f"{base}.UTF-8"


class PodInstaller:
    """pod 工具定位与调用"""

    def __init__(
        self,
        search_paths: list[str],
        executor: CommandExecutor | None = None,
    ) -> None:
        self.search_paths = search_paths
        self._executor = executor

    @property
    def executor(self) -> CommandExecutor:
        return self._executor or get_executor()

    def locate(self) -> str | None:
        for path in self.search_paths:
            if Path(path).is_file():
                return path
        return None

    def ensure_minimum_version(self, pod_command: str, cwd: str = ".") -> bool:
        r = self.executor.execute([pod_command, "--version"], cwd=cwd)
        version = r.stdout.strip()
        if not r.success or not version or version[0] == "0":
            logger.error(
                "Error running cocoapods. Please ensure you have at least "
                "version 1.0.0.  %s", INSTALL_INSTRUCTIONS,
            )
            return False
        logger.info("CocoaPods 版本: %s", version)
        return True

    def install_env(self) -> dict[str, str]:
        return {"LANG": utf8_lang(os.environ.get("LANG"))}

    def install(
        self,
        pod_command: str,
        cwd: str,
        env: dict[str, str] | None = None,
    ) -> CommandResult:
        """执行 pod install，失败时原样输出 stdout / stderr"""
        overrides = {**self.install_env(), **(env or {})}
        logger.info("执行 pod install (cwd=%s)", cwd)
        r = self.executor.execute([pod_command, "install"], cwd=cwd, env=overrides)
        if not r.success:
            logger.error(
                "Pod install failed. See the output below for details.\n\n%s\n\n%s",
                r.stdout, r.stderr,
            )
        return r
