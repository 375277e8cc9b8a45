"""CLI — 功能开关与宿主设置"""

from __future__ import annotations

import click

from iosresolver.cli import _svc


def register(group: click.Group) -> None:
    group.add_command(enable)
    group.add_command(disable)
    group.add_command(status)
    group.add_command(set_target)


@click.command()
def enable() -> None:
    """开启 iOS 依赖注入"""
    _svc().prefs.resolver_enabled = True
    click.echo("iOS 依赖注入: 已开启")


@click.command()
def disable() -> None:
    """关闭 iOS 依赖注入"""
    _svc().prefs.resolver_enabled = False
    click.echo("iOS 依赖注入: 已关闭")


@click.command()
def status() -> None:
    """查看开关、构建平台、目标 SDK 和 pod 工具位置"""
    svc = _svc()
    enabled = "开启" if svc.prefs.resolver_enabled else "关闭"
    click.echo(f"依赖注入:   {enabled}")
    click.echo(f"构建平台:   {svc.settings.active_build_target}")
    click.echo(f"目标 SDK:   {svc.settings.get_target_sdk()}")
    click.echo(f"pod 工具:   {svc.installer.locate() or '未找到'}")


@click.command(name="set-target")
@click.option("--platform", default=None, help="当前构建平台，如 iOS / Android")
@click.option("--sdk", default=None, help="iOS 目标版本，如 8.0")
def set_target(platform: str | None, sdk: str | None) -> None:
    """修改宿主构建设置"""
    settings = _svc().settings
    if platform:
        settings.active_build_target = platform
    if sdk:
        from iosresolver.core.version import string_to_version
        string_to_version(sdk)
        settings.set_target_sdk(sdk)
    click.echo(
        f"构建平台: {settings.active_build_target}  "
        f"目标 SDK: {settings.get_target_sdk()}"
    )
