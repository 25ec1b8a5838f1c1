"""
SQLite 数据库管理器 (SQL Store)
负责管理单项目目录下的 content.db，为上下文引擎提供项目、角色、章节事实。
读取失败统一抛出 FactStoreError，由上层决定降级方式；写入失败回滚并记录日志。
"""
import os
import logging
import json
from functools import lru_cache
from typing import List, Optional
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from core.models import Base, Project, Character, Chapter
from core.schemas import (
    ProjectRecord, CharacterRecord, ChapterRecord, Relationship, ProjectGenre
)
from core.exceptions import FactStoreError

logger = logging.getLogger(__name__)

@lru_cache(maxsize=5)
def get_engine(project_root: str):
    """
    获取指定项目的数据库引擎 (带缓存)。
    """
    os.makedirs(project_root, exist_ok=True)
    db_path = os.path.join(project_root, "content.db")
    # 使用 check_same_thread=False 允许多线程并发读取
    engine = create_engine(f"sqlite:///{db_path}", connect_args={"check_same_thread": False})

    # 自动建表
    Base.metadata.create_all(engine)
    return engine

def get_session(project_root: str) -> Session:
    """
    获取一个新的数据库会话。
    引擎创建或建表失败 (content.db 损坏、目录不可写) 统一转为 FactStoreError。
    """
    try:
        engine = get_engine(project_root)
    except (SQLAlchemyError, OSError) as e:
        raise FactStoreError(f"无法打开项目数据库 {project_root}: {e}") from e
    SessionLocal = sessionmaker(bind=engine)
    return SessionLocal()

def _load_json(raw: Optional[str], default):
    if not raw:
        return default
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning(f"无法解析 JSON 字段，使用默认值: {raw[:50]}")
        return default

# --- ORM -> 事实记录 ---

def _to_project_record(row: Project) -> ProjectRecord:
    settings = _load_json(row.settings, {})
    return ProjectRecord(
        id=row.id,
        name=row.name,
        genre=ProjectGenre.parse(row.type),
        description=row.description or "",
        settings=settings if isinstance(settings, dict) else {},
    )

def _to_character_record(row: Character) -> CharacterRecord:
    relationships = _load_json(row.relationships, [])
    if not isinstance(relationships, list):
        relationships = []
    return CharacterRecord(
        id=row.id,
        project_id=row.project_id,
        name=row.name,
        description=row.description or "",
        personality=row.personality or "",
        background=row.background or "",
        appearance=row.appearance or "",
        role=row.role or "",
        relationships=tuple(Relationship.from_dict(r) for r in relationships if isinstance(r, dict)),
    )

def _to_chapter_record(row: Chapter) -> ChapterRecord:
    return ChapterRecord(
        id=row.id,
        project_id=row.project_id,
        title=row.title or "",
        order_num=row.order_num or 0,
        content=row.content or "",
    )

# --- 读取操作 ---

def get_project(project_root: str, project_id: str) -> Optional[ProjectRecord]:
    """按 ID 读取项目，不存在时返回 None"""
    session = get_session(project_root)
    try:
        row = session.query(Project).filter_by(id=project_id).first()
        return _to_project_record(row) if row else None
    except SQLAlchemyError as e:
        raise FactStoreError(f"读取项目失败 {project_id}: {e}") from e
    finally:
        session.close()

def get_chapter(project_root: str, chapter_id: str) -> Optional[ChapterRecord]:
    """按 ID 读取章节，不存在时返回 None"""
    session = get_session(project_root)
    try:
        row = session.query(Chapter).filter_by(id=chapter_id).first()
        return _to_chapter_record(row) if row else None
    except SQLAlchemyError as e:
        raise FactStoreError(f"读取章节失败 {chapter_id}: {e}") from e
    finally:
        session.close()

def get_characters_by_project(project_root: str, project_id: str) -> List[CharacterRecord]:
    """获取项目的所有角色，按创建顺序排列"""
    session = get_session(project_root)
    try:
        rows = session.query(Character).filter_by(project_id=project_id).order_by(Character.seq).all()
        return [_to_character_record(r) for r in rows]
    except SQLAlchemyError as e:
        raise FactStoreError(f"读取角色列表失败 {project_id}: {e}") from e
    finally:
        session.close()

def get_chapters_by_project(project_root: str, project_id: str) -> List[ChapterRecord]:
    """获取项目的所有章节，按章节顺序排列"""
    session = get_session(project_root)
    try:
        rows = session.query(Chapter).filter_by(project_id=project_id).order_by(Chapter.order_num).all()
        return [_to_chapter_record(r) for r in rows]
    except SQLAlchemyError as e:
        raise FactStoreError(f"读取章节列表失败 {project_id}: {e}") from e
    finally:
        session.close()

# --- 写入操作 (用于初始化与测试数据) ---

def save_project(project_root: str, project_id: str, name: str, genre: str = None,
                 description: str = "", settings: dict = None) -> bool:
    """保存或更新项目"""
    try:
        session = get_session(project_root)
    except FactStoreError as e:
        logger.error(f"保存项目失败 {project_id}: {e}")
        return False
    try:
        settings_str = json.dumps(settings or {}, ensure_ascii=False)
        project = session.query(Project).filter_by(id=project_id).first()
        if project:
            project.name = name
            project.type = genre
            project.description = description
            project.settings = settings_str
        else:
            session.add(Project(id=project_id, name=name, type=genre,
                                description=description, settings=settings_str))
        session.commit()
        return True
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"保存项目失败 {project_id}: {e}")
        return False
    finally:
        session.close()

def save_character(project_root: str, character_id: str, project_id: str, name: str,
                   description: str = "", personality: str = "", background: str = "",
                   appearance: str = "", role: str = "", relationships: list = None) -> bool:
    """保存或更新角色"""
    if not name:
        logger.error(f"角色名称不能为空: {character_id}")
        return False
    try:
        session = get_session(project_root)
    except FactStoreError as e:
        logger.error(f"保存角色失败 {character_id}: {e}")
        return False
    try:
        fields = {
            "project_id": project_id,
            "name": name,
            "description": description,
            "personality": personality,
            "background": background,
            "appearance": appearance,
            "role": role,
            "relationships": json.dumps(relationships or [], ensure_ascii=False),
        }
        character = session.query(Character).filter_by(id=character_id).first()
        if character:
            for k, v in fields.items():
                setattr(character, k, v)
        else:
            session.add(Character(id=character_id, **fields))
        session.commit()
        return True
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"保存角色失败 {character_id}: {e}")
        return False
    finally:
        session.close()

def save_chapter(project_root: str, chapter_id: str, project_id: str, title: str = "",
                 content: str = "", order_num: int = 0) -> bool:
    """保存或更新章节"""
    try:
        session = get_session(project_root)
    except FactStoreError as e:
        logger.error(f"保存章节失败 {chapter_id}: {e}")
        return False
    try:
        chapter = session.query(Chapter).filter_by(id=chapter_id).first()
        if chapter:
            chapter.project_id = project_id
            chapter.title = title
            chapter.content = content
            chapter.order_num = order_num
        else:
            session.add(Chapter(id=chapter_id, project_id=project_id, title=title,
                                content=content, order_num=order_num))
        session.commit()
        return True
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"保存章节失败 {chapter_id}: {e}")
        return False
    finally:
        session.close()
