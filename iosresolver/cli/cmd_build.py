"""CLI — 目标 SDK 检查与工程后处理"""

from __future__ import annotations

import click

from iosresolver.cli import _declare_all, _svc


def register(group: click.Group) -> None:
    group.add_command(check_sdk)
    group.add_command(postprocess)


@click.command(name="check-sdk")
def check_sdk() -> None:
    """检查目标 SDK 是否满足全部 pod，不足时询问是否提升"""
    registry = _declare_all()
    svc = _svc()
    requirement = svc.sdk.needs_update(registry)
    if requirement is None:
        click.echo(f"目标 SDK {svc.settings.get_target_sdk()} 满足要求")
        return
    if svc.sdk.update_target_sdk(registry):
        click.echo(f"目标 SDK 已更新为 {svc.settings.get_target_sdk()}")
    else:
        click.echo(
            f"目标 SDK 未修改，最低要求 {requirement.version_string} "
            f"({', '.join(requirement.pod_names)})"
        )


@click.command()
@click.argument("project_dir", type=click.Path(exists=True, file_okay=False))
@click.option("--strict", is_flag=True, help="任一阶段提前结束时以非零码退出")
def postprocess(project_dir: str, strict: bool) -> None:
    """对生成的 Xcode 工程执行 4 个后处理阶段"""
    _declare_all()
    report = _svc().pipeline.run(project_dir)
    for stage in report.stages:
        suffix = f"  {stage.message}" if stage.message else ""
        click.echo(f"  [{stage.status:7s}] {stage.name}{suffix}")
    if strict and any(s.status == "aborted" for s in report.stages):
        raise SystemExit(1)
