"""iosresolver 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

from __future__ import annotations

import os
from typing import Any

import click

from iosresolver import __version__
from iosresolver.core.exceptions import IOSResolverError
from iosresolver.services.container import (
    ServiceContainer,
    get_container,
    set_container,
)
from iosresolver.utils.logger import setup_logging


def _svc() -> ServiceContainer:
    """获取全局服务容器的快捷方式"""
    return get_container()


def _declare_all() -> Any:
    """加载 --deps 指定的文件和插件目录下发现的依赖文件，返回注册表"""
    ctx = click.get_current_context()
    opts = ctx.find_root().meta.get("iosresolver", {})
    svc = _svc()
    for path in opts.get("deps", ()):
        svc.declarer.load_file(path)
    plugins_dir = opts.get("plugins_dir")
    if plugins_dir:
        svc.declarer.discover(plugins_dir, svc.config.deps_glob)
    return svc.registry


class _Group(click.Group):
    """把业务异常转换为 ClickException，输出友好提示"""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except IOSResolverError as e:
            raise click.ClickException(f"[{e.code}] {e}") from e


@click.group(cls=_Group)
@click.version_option(version=__version__)
@click.option("--config", "-c", "config_path", default=None, help="配置文件路径")
@click.option("--project-root", default=".", help="宿主工程根目录（设置文件相对于此）")
@click.option("--deps", multiple=True, help="依赖声明文件（可多次指定）")
@click.option("--plugins-dir", default=None, help="在该目录下自动发现依赖声明文件")
@click.option("--yes", "assume_yes", is_flag=True, help="目标 SDK 不足时不询问直接提升")
def main(
    config_path: str | None, project_root: str,
    deps: tuple[str, ...], plugins_dir: str | None, assume_yes: bool,
) -> None:
    """iosresolver - Unity iOS 工程 CocoaPods 依赖注入工具"""
    setup_logging(
        level=os.getenv("IOSRESOLVER_LOG_LEVEL", "INFO"),
        json_output=os.getenv("IOSRESOLVER_LOG_JSON", "") == "1",
    )
    from iosresolver.core.config import get_config, init_config
    from iosresolver.services.prompts import ClickPrompt, ScriptedPrompt

    cfg = init_config(config_path) if config_path else get_config()
    prompt = ScriptedPrompt(accept=True) if assume_yes else ClickPrompt()
    set_container(ServiceContainer(cfg, project_root=project_root, prompt=prompt))
    click.get_current_context().meta["iosresolver"] = {
        "deps": deps, "plugins_dir": plugins_dir,
    }


# 注册各领域子命令
from iosresolver.cli.cmd_pods import register as _reg_pods  # noqa: E402
from iosresolver.cli.cmd_build import register as _reg_build  # noqa: E402
from iosresolver.cli.cmd_settings import register as _reg_settings  # noqa: E402

_reg_pods(main)
_reg_build(main)
_reg_settings(main)
