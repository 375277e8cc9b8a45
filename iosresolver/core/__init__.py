"""核心层: 数据模型、注册表、版本策略、Podfile / modulemap / pbxproj 处理"""
