"""统一异常体系

所有业务异常继承 IOSResolverError，CLI 层据此输出友好提示。

注意: pod 工具缺失 / 版本过低 / install 失败不是异常，
它们以 error 日志上报，由所在阶段提前返回。
"""

from __future__ import annotations


class IOSResolverError(Exception):
    """基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(IOSResolverError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class ValidationError(IOSResolverError):
    """依赖声明等输入数据校验失败"""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class VersionFormatError(IOSResolverError, ValueError):
    """平台版本字符串不是 "major.minor" 数字形式"""

    code = "VERSION_FORMAT_ERROR"


class ProjectFileError(IOSResolverError):
    """Xcode 工程文件缺失、无法解析或找不到目标"""

    code = "PROJECT_FILE_ERROR"
