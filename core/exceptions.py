"""
自定义异常类
用于在上下文引擎的不同层之间传递具有明确语义的错误信息。
"""

class NotFoundError(Exception):
    """当引用的项目或章节不存在时发生错误"""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"找不到{entity}: {entity_id}")

class FactStoreError(Exception):
    """当读取事实存储 (SQLite) 失败时发生错误"""
    pass

class ConfigurationError(Exception):
    """当应用配置不正确或缺失时发生错误"""
    pass
