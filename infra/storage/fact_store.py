"""
事实存储适配器 (Fact Store)
将 sql_db 的函数绑定到单个项目目录，作为上下文引擎唯一的数据来源。
"""
import logging
from typing import List, Optional
from core.schemas import ProjectRecord, CharacterRecord, ChapterRecord
from infra.storage import sql_db

logger = logging.getLogger(__name__)

class FactStore:
    """
    只读事实访问器。
    读取失败时抛出 FactStoreError，由调用方决定如何降级。
    """

    def __init__(self, project_root: str):
        self.project_root = project_root

    def get_project(self, project_id: str) -> Optional[ProjectRecord]:
        return sql_db.get_project(self.project_root, project_id)

    def get_chapter(self, chapter_id: str) -> Optional[ChapterRecord]:
        return sql_db.get_chapter(self.project_root, chapter_id)

    def get_characters_by_project(self, project_id: str) -> List[CharacterRecord]:
        return sql_db.get_characters_by_project(self.project_root, project_id)

    def get_chapters_by_project(self, project_id: str) -> List[ChapterRecord]:
        return sql_db.get_chapters_by_project(self.project_root, project_id)
