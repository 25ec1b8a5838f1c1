"""
核心数据模型 (Data Models)
定义存储在 SQLite (content.db) 中的表结构。
上下文引擎只读取这些表；settings 与 relationships 以 JSON 文本存储。
"""
from sqlalchemy import Column, Integer, String, Text, ForeignKey
from sqlalchemy.orm import declarative_base

Base = declarative_base()

class Project(Base):
    """
    项目表
    type 为题材标签 (isekai / school / scifi / fantasy)，settings 为嵌套配置的 JSON。
    """
    __tablename__ = 'projects'

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=True) # 题材
    description = Column(Text, nullable=True)
    settings = Column(Text, nullable=True) # JSON

class Character(Base):
    """
    角色表
    relationships 为 [{target_character_id, relationship_type, description}] 的 JSON 列表。
    """
    __tablename__ = 'characters'

    seq = Column(Integer, primary_key=True, autoincrement=True) # 保证读取顺序与创建顺序一致
    id = Column(String, unique=True, nullable=False)
    project_id = Column(String, ForeignKey('projects.id'), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    personality = Column(Text, nullable=True)
    background = Column(Text, nullable=True)
    appearance = Column(Text, nullable=True)
    role = Column(String, nullable=True)
    relationships = Column(Text, nullable=True) # JSON

class Chapter(Base):
    """
    章节表
    存储正文及其在项目中的位置。
    """
    __tablename__ = 'chapters'

    id = Column(String, primary_key=True)
    project_id = Column(String, ForeignKey('projects.id'), nullable=False, index=True)
    title = Column(String, nullable=True)
    order_num = Column(Integer, nullable=False, default=0) # 第几章
    content = Column(Text, nullable=True)
