"""核心领域层：数据模型、业务对象、异常与固定标记表。"""
