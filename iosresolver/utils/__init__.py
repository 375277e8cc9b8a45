"""通用工具: 日志、子进程执行、YAML 读写"""
