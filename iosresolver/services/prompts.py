"""UpgradePrompt 的两种宿主实现"""

from __future__ import annotations

import logging

import click

logger = logging.getLogger(__name__)


class ClickPrompt:
    """终端交互确认"""

    def prompt_upgrade(self, required: str, blockers: list[str]) -> bool:
        click.echo("Unsupported Target SDK", err=True)
        click.echo(
            "Target SDK selected in the iOS Player Settings is not supported "
            "by the Cocoapods included in this project. The build will very "
            f"likely fail. The minimum supported version is \"{required}\" "
            f"required by pods ({', '.join(blockers)}).",
            err=True,
        )
        return click.confirm(
            "Would you like to update the target SDK version?", default=True,
        )

    def notify(self, title: str, message: str) -> None:
        click.echo(f"{title} {message}", err=True)


class ScriptedPrompt:
    """无人值守宿主: 按预设答案回应，并记录收到的请求"""

    def __init__(self, accept: bool = False) -> None:
        self.accept = accept
        self.requests: list[tuple[str, list[str]]] = []
        self.messages: list[tuple[str, str]] = []

    def prompt_upgrade(self, required: str, blockers: list[str]) -> bool:
        self.requests.append((required, list(blockers)))
        return self.accept

    def notify(self, title: str, message: str) -> None:
        self.messages.append((title, message))
        logger.info("%s %s", title, message)
