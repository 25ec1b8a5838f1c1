"""
上下文工程服务层
构建 -> 压缩 -> 品质分析 / 一致性检查。
"""
from services.context_service import ContextService

__all__ = ["ContextService"]
