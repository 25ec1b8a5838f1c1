"""
上下文构建器 (Context Builder)
根据项目、角色与章节事实，组装交给 LLM 的续写上下文。
段落顺序固定：项目 (含世界观) -> 角色 -> 当前章节与相关内容。
"""
from __future__ import annotations
import logging
from typing import List, Optional
from core import constants as C
from core.exceptions import NotFoundError, FactStoreError
from core.schemas import ProjectRecord, CharacterRecord, ChapterRecord

logger = logging.getLogger(__name__)

def extract_relevant_content(content: str, position: int) -> str:
    """
    以 position (行号) 为中心截取章节正文窗口。

    窗口半宽为 min(50, floor(总行数 * 0.3))，至少 1 行；
    position 超出范围时夹取到首尾，因此末尾之后的位置得到尾部窗口。
    """
    lines = content.split("\n")
    total = len(lines)
    if total <= 1:
        return content

    half_width = max(1, min(C.WINDOW_MAX_HALF_WIDTH, total * C.WINDOW_RATIO_PERCENT // 100))
    position = min(max(0, position), total)
    start = max(0, position - half_width)
    end = min(total, position + half_width)
    return "\n".join(lines[start:end])

def render_characters(characters: List[CharacterRecord]) -> str:
    """渲染角色段落；角色列表为空时返回空字符串"""
    if not characters:
        return ""

    names_by_id = {c.id: c.name for c in characters}
    context = f"{C.CHARACTERS_LABEL}\n"
    for character in characters:
        context += f"{C.CHARACTER_ENTRY_PREFIX}{character.name}{C.NAME_SEPARATOR}{character.description}\n"
        if character.personality:
            context += f"{C.CHARACTER_DETAIL_INDENT}{C.PERSONALITY_LABEL}{character.personality}\n"
        if character.background:
            context += f"{C.CHARACTER_DETAIL_INDENT}{C.BACKGROUND_LABEL}{character.background}\n"
        if character.relationships:
            rendered = []
            for rel in character.relationships:
                if rel.description:
                    rendered.append(rel.description)
                else:
                    # 无描述时退回 "对象（关系类型）"
                    target = names_by_id.get(rel.target_character_id, C.UNKNOWN_CHARACTER)
                    rendered.append(f"{target}（{rel.relationship_type}）" if rel.relationship_type else target)
            context += f"{C.CHARACTER_DETAIL_INDENT}{C.RELATIONSHIP_LABEL}{C.RELATIONSHIP_SEPARATOR.join(rendered)}\n"
    return context + "\n"


class ContextBuilder:
    """
    上下文构建器。

    只有项目或章节缺失会以 NotFoundError 抛出；
    角色列表读取失败仅记录日志，角色段落被省略。
    """

    def __init__(self, store):
        self.store = store

    def build_context(self, project_id: str, chapter_id: str, position: int) -> str:
        """
        构建续写上下文。

        Args:
            project_id (str): 项目 ID。
            chapter_id (str): 章节 ID。
            position (int): 续写位置 (>= 0)。

        Returns:
            str: 组装好的上下文。

        Raises:
            NotFoundError: 项目或章节不存在。
        """
        # 1. 项目
        project = self._fetch_project(project_id)
        if project is None:
            raise NotFoundError("專案", project_id)

        # 2. 当前章节
        chapter = self._fetch_chapter(chapter_id)
        if chapter is None:
            raise NotFoundError("章節", chapter_id)

        # 3. 角色 (失败时降级为空列表)
        characters = self._fetch_characters(project_id)

        # 4. 组装
        context = self.build_project_context(project)
        context += render_characters(characters)
        context += self.build_chapter_context(chapter, position)

        logger.debug(f"上下文构建完成 - 项目: {project_id}, 章节: {chapter_id}, 位置: {position}, 长度: {len(context)}")
        return context

    @staticmethod
    def build_project_context(project: ProjectRecord) -> str:
        context = f"{C.PROJECT_LABEL}{project.name}\n"
        context += f"{C.GENRE_LABEL}{C.GENRE_NAMES[project.genre]}\n"
        context += f"{C.DESCRIPTION_LABEL}{project.description}\n\n"

        # 世界观只在选择了模板且题材有对应设定时出现
        if project.selected_template:
            context += ContextBuilder.build_world_context(project)
        return context

    @staticmethod
    def build_world_context(project: ProjectRecord) -> str:
        template = C.WORLD_TEMPLATES.get(project.genre)
        if not template:
            return ""
        world_context = f"{C.WORLD_LABEL}\n"
        for line in template:
            world_context += f"- {line}\n"
        return world_context + "\n"

    @staticmethod
    def build_chapter_context(chapter: ChapterRecord, position: int) -> str:
        context = f"{C.CHAPTER_LABEL}{chapter.title}\n"
        relevant_content = extract_relevant_content(chapter.content, position)
        if relevant_content:
            context += f"{C.RELEVANT_CONTENT_LABEL}\n{relevant_content}\n\n"
        return context

    # --- 事实读取 (各自独立降级) ---

    def _fetch_project(self, project_id: str) -> Optional[ProjectRecord]:
        try:
            return self.store.get_project(project_id)
        except FactStoreError as e:
            logger.error(f"获取项目失败: {e}")
            return None

    def _fetch_chapter(self, chapter_id: str) -> Optional[ChapterRecord]:
        try:
            return self.store.get_chapter(chapter_id)
        except FactStoreError as e:
            logger.error(f"获取章节失败: {e}")
            return None

    def _fetch_characters(self, project_id: str) -> List[CharacterRecord]:
        try:
            return list(self.store.get_characters_by_project(project_id))
        except FactStoreError as e:
            logger.error(f"获取角色列表失败: {e}")
            return []
