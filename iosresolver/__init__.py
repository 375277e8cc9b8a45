"""iosresolver - Unity iOS 工程 CocoaPods 依赖注入工具"""

__version__ = "1.0.0"
