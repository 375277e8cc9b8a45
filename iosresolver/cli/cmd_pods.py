"""CLI — pod 声明与 Podfile 命令"""

from __future__ import annotations

from pathlib import Path

import click

from iosresolver.cli import _declare_all, _svc
from iosresolver.core.podfile import render_podfile
from iosresolver.core.version import min_sdk_to_version
from iosresolver.utils.yaml_io import load_yaml, save_yaml


def register(group: click.Group) -> None:
    group.add_command(add_pod)
    group.add_command(list_pods)
    group.add_command(podfile)


@click.command(name="add")
@click.argument("name")
@click.option("--version", "version", default=None, help="版本: 1.2.3 / 2.0+ / LATEST")
@click.option("--no-bitcode", is_flag=True, help="该 pod 未启用 bitcode 编译")
@click.option("--min-sdk", default=None, help="最低 iOS 版本，如 7.0")
@click.option(
    "--file", "deps_file", default="IOSResolverDependencies.yml",
    help="写入的依赖声明文件",
)
def add_pod(
    name: str, version: str | None, no_bitcode: bool,
    min_sdk: str | None, deps_file: str,
) -> None:
    """声明一个 pod（同名覆盖）并立即检查目标 SDK"""
    # 校验须在写文件之前
    min_sdk_to_version(min_sdk)
    data = load_yaml(deps_file)
    entries = [e for e in (data.get("pods") or []) if e.get("name") != name]
    entry: dict[str, object] = {"name": name}
    if version:
        entry["version"] = version
    if no_bitcode:
        entry["bitcode"] = False
    if min_sdk:
        entry["min_sdk"] = min_sdk
    entries.append(entry)
    data["pods"] = entries
    save_yaml(deps_file, data)

    _declare_all()
    pod = _svc().declarer.add_pod(
        name, version=version,
        bitcode_enabled=not no_bitcode, min_target_sdk=min_sdk,
    )
    click.echo(f"已声明: {pod.podfile_line}  ({deps_file})")


@click.command(name="list")
def list_pods() -> None:
    """列出已声明的 pod"""
    registry = _declare_all()
    if registry.is_empty():
        click.echo("没有已声明的 pod。")
        return
    for p in registry.pods():
        bitcode = "bitcode" if p.bitcode_enabled else "no-bitcode"
        click.echo(
            f"  {p.name:32s} {p.version or 'LATEST':12s} "
            f"[{bitcode}] min_sdk={p.min_target_sdk or '-'}"
        )


@click.command()
@click.option("--output", "-o", default=None, help="写入路径（不指定则输出到终端）")
def podfile(output: str | None) -> None:
    """按当前声明渲染 Podfile"""
    registry = _declare_all()
    svc = _svc()
    content = render_podfile(
        svc.settings.get_target_sdk(), svc.config.target_name,
        registry.pods(), source=svc.config.pod_source,
    )
    if output:
        Path(output).write_text(content, encoding="utf-8")
        click.echo(f"Podfile 已写入: {output}")
    else:
        click.echo(content, nl=False)
