"""iOS 平台版本策略

平台版本在内部用整数比较: "major.minor" -> major * 10 + minor。
仅支持一位数的 minor（"7.1" -> 71）；"9.10" 这样的输入会得到 910，
这是已知限制，调用方需保证 minor 只有一位。
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

from iosresolver.core.exceptions import VersionFormatError

if TYPE_CHECKING:
    from iosresolver.core.models import Pod

_DIGITS_RE = re.compile(r"[0-9]+")


@dataclass
class UpgradeRequirement:
    """当前目标版本不满足依赖时的最低要求"""

    version: int
    pod_names: list[str]

    @property
    def version_string(self) -> str:
        return version_to_string(self.version)


def string_to_version(value: str) -> int:
    """去掉所有 "." 后按整数解析

    >>> string_to_version("7.1")
    71
    """
    digits = value.replace(".", "")
    if not _DIGITS_RE.fullmatch(digits):
        raise VersionFormatError(f"无效的平台版本: {value!r}")
    return int(digits)


def version_to_string(version: int) -> str:
    """71 -> "7.1" """
    return f"{version // 10}.{version % 10}"


def normalize_min_sdk(min_sdk: str | None) -> str:
    """缺省视为 "0.0"，不带 minor 的 "8" 补成 "8.0" """
    if not min_sdk:
        return "0.0"
    if "." not in min_sdk:
        return min_sdk + ".0"
    return min_sdk


def min_sdk_to_version(min_sdk: str | None) -> int:
    """pod 最低 SDK 声明的整数形式，缺省为 0，格式无效时抛 VersionFormatError"""
    return string_to_version(normalize_min_sdk(min_sdk))


def bucket_by_min_version(pods: Iterable[Pod]) -> dict[int, list[str]]:
    """按最低版本分组，返回按版本升序排列的 {版本: [pod 名]}

    未声明最低版本（或为 0）的 pod 不参与分组。
    """
    buckets: dict[int, list[str]] = {}
    for pod in pods:
        min_version = pod.min_sdk_version
        if min_version == 0:
            continue
        buckets.setdefault(min_version, []).append(pod.name)
    return dict(sorted(buckets.items()))


def needs_upgrade(
    current_version: int, pods: Iterable[Pod],
) -> UpgradeRequirement | None:
    """判断当前目标版本是否需要提升

    只检查最低的那个分组: 当前版本不低于最低分组即视为满足，
    即使更高的分组仍未满足也不报告（每次构建会重新检查）。
    """
    buckets = bucket_by_min_version(pods)
    if not buckets:
        return None
    lowest, names = next(iter(buckets.items()))
    if current_version >= lowest:
        return None
    return UpgradeRequirement(version=lowest, pod_names=list(names))
