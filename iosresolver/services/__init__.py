"""服务层

拆分说明:
- sdk_service.py: 目标 SDK 策略 + pod 声明入口
- installer.py: pod 工具定位与调用
- patcher.py: Xcode 工程修补
- pipeline.py: 4 阶段后处理流水线
- container.py: 会话级服务容器
"""

from iosresolver.services.installer import PodInstaller
from iosresolver.services.patcher import ProjectPatcher
from iosresolver.services.pipeline import PostProcessPipeline
from iosresolver.services.sdk_service import PodDeclarer, TargetSdkService

__all__ = [
    "PodDeclarer",
    "PodInstaller",
    "PostProcessPipeline",
    "ProjectPatcher",
    "TargetSdkService",
]
