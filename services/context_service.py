"""
上下文服务 (Context Service)
生成编排层调用的唯一入口：构建、压缩、品质分析、一致性检查，以及角色识别与上下文统计。
除 NotFoundError 外，所有失败都在本层被吸收为降级结果。
"""
from __future__ import annotations
import logging
from typing import List, Optional
from config import load_environment
from config.loader import load_config, get_max_length
from core.exceptions import FactStoreError
from core.schemas import (
    CharacterRecord, ConsistencyIssue, ContextStats, PreparedContext, QualityReport
)
from infra.storage.fact_store import FactStore
from services.character_analyzer import (
    detect_new_characters, extract_aliases, integrate_characters, is_character_mentioned
)
from services.context_builder import ContextBuilder, extract_relevant_content
from services.context_compressor import compress_context
from services.consistency_checker import ConsistencyChecker
from services.quality_analyzer import QualityAnalyzer

logger = logging.getLogger(__name__)

class ContextService:
    def __init__(self, store, config: dict = None):
        self.store = store
        self.config = config if config is not None else load_config()
        self.builder = ContextBuilder(store)
        self.checker = ConsistencyChecker(store)

    @classmethod
    def from_config(cls, config: dict = None) -> "ContextService":
        """按配置中的 storage.project_root 创建基于 SQLite 的服务"""
        load_environment()
        config = config if config is not None else load_config()
        project_root = config.get("storage", {}).get("project_root", "data/project")
        logger.info(f"上下文服务使用项目目录: {project_root}")
        return cls(FactStore(project_root), config)

    # --- 核心操作 ---

    def build_context(self, project_id: str, chapter_id: str, position: int) -> str:
        return self.builder.build_context(project_id, chapter_id, position)

    def compress_context(self, context: str, max_length: int) -> str:
        return compress_context(context, max_length)

    def analyze_quality(self, context: str) -> QualityReport:
        return QualityAnalyzer.analyze_context_quality(context)

    def check_consistency(self, text: str, project_id: str) -> List[ConsistencyIssue]:
        return self.checker.check_consistency(text, project_id)

    def extract_relevant_content(self, content: str, position: int) -> str:
        return extract_relevant_content(content, position)

    def integrate_characters(self, context: str, characters: List[CharacterRecord]) -> str:
        return integrate_characters(context, characters)

    # --- 流水线 ---

    def prepare_context(self, project_id: str, chapter_id: str, position: int,
                        max_length: Optional[int] = None) -> PreparedContext:
        """
        构建上下文，超出长度预算时压缩，并附上品质报告。

        Args:
            max_length (int, optional): 长度预算，缺省时取配置 context.max_length。

        Raises:
            NotFoundError: 项目或章节不存在。
        """
        budget = max_length if max_length is not None else get_max_length(self.config)
        context = self.build_context(project_id, chapter_id, position)
        original_length = len(context)

        compressed = original_length > budget
        if compressed:
            context = self.compress_context(context, budget)
            logger.info(f"上下文超出预算 ({original_length} > {budget})，已压缩至 {len(context)}")

        return PreparedContext(
            context=context,
            report=self.analyze_quality(context),
            compressed=compressed,
            original_length=original_length,
        )

    # --- 辅助查询 ---

    def get_context_stats(self, project_id: str) -> ContextStats:
        """统计项目的章节数、角色数与正文总字数，读取失败的部分记为 0"""
        stats = ContextStats()
        try:
            chapters = self.store.get_chapters_by_project(project_id)
            stats.chapter_count = len(chapters)
            stats.total_characters = sum(len(c.content) for c in chapters)
        except FactStoreError as e:
            logger.error(f"统计章节失败: {e}")
        try:
            stats.character_count = len(self.store.get_characters_by_project(project_id))
        except FactStoreError as e:
            logger.error(f"统计角色失败: {e}")

        stats.estimated_tokens = QualityAnalyzer.tokens_for_length(stats.total_characters)
        return stats

    def get_relevant_characters(self, project_id: str, content: str) -> List[CharacterRecord]:
        """返回在文本中以名字或别名被提及的角色，保持角色列表顺序"""
        try:
            characters = self.store.get_characters_by_project(project_id)
        except FactStoreError as e:
            logger.error(f"获取相关角色失败: {e}")
            return []
        return [c for c in characters if is_character_mentioned(content, c)]

    def detect_new_characters(self, content: str, project_id: Optional[str] = None) -> List[str]:
        """
        找出文本中可能的角色名称。

        Args:
            content (str): 待分析文本。
            project_id (str, optional): 给出时排除该项目已有角色的名字与别名；角色列表读取失败时不做排除。
        """
        names = detect_new_characters(content)
        if project_id is None:
            return names
        try:
            characters = self.store.get_characters_by_project(project_id)
        except FactStoreError as e:
            logger.error(f"获取已知角色失败: {e}")
            return names
        known = set()
        for character in characters:
            known.add(character.name)
            known.update(extract_aliases(character))
        return [n for n in names if n not in known]
