"""
品质分析器 (Quality Analyzer)
以标记与关键词匹配为上下文打分，无需调用 LLM。
所有评分均为上下文字符串的纯函数，结果范围 0-100。
"""
import math
import re
from typing import List
from core import constants as C
from core.schemas import QualityReport

CHARACTER_LINE_PATTERN = re.compile(r"- [^：]+：[^\n]+")
RELEVANT_CONTENT_PATTERN = re.compile(re.escape(C.RELEVANT_CONTENT_LABEL) + r"([\s\S]*)")

# (标记, 分值)
CHARACTER_MARKER_POINTS = (
    (C.CHARACTERS_LABEL, 30),
    (C.RELATIONSHIP_LABEL, 20),
    (C.PERSONALITY_LABEL, 10),
)
CHARACTER_LINE_POINTS = 10
CHARACTER_LINE_CAP = 40

WORLD_MARKER_POINTS = (
    (C.WORLD_LABEL, 40),
    (C.GENRE_LABEL, 20),
)
WORLD_KEYWORD_POINTS = 10

NARRATIVE_BASE_SCORE = 50
NARRATIVE_MARKER_POINTS = (
    (C.CHAPTER_LABEL, 20),
    (C.RELEVANT_CONTENT_LABEL, 20),
)
NARRATIVE_LENGTH_POINTS = 10

def _clamp(score: int) -> int:
    return max(0, min(100, score))

def _marker_score(context: str, table) -> int:
    return sum(points for marker, points in table if marker in context)


class QualityAnalyzer:
    @staticmethod
    def estimate_tokens(context: str) -> int:
        """粗略估算 token 数 (约 4 字符 = 1 token)，并非真实分词结果"""
        return QualityAnalyzer.tokens_for_length(len(context))

    @staticmethod
    def tokens_for_length(length: int) -> int:
        return math.ceil(length / C.CHARS_PER_TOKEN)

    @staticmethod
    def analyze_character_info_quality(context: str) -> int:
        score = _marker_score(context, CHARACTER_MARKER_POINTS)
        character_lines = CHARACTER_LINE_PATTERN.findall(context)
        score += min(CHARACTER_LINE_CAP, len(character_lines) * CHARACTER_LINE_POINTS)
        return _clamp(score)

    @staticmethod
    def analyze_world_building_quality(context: str) -> int:
        score = _marker_score(context, WORLD_MARKER_POINTS)
        score += WORLD_KEYWORD_POINTS * sum(1 for keyword in C.WORLD_KEYWORDS if keyword in context)
        return _clamp(score)

    @staticmethod
    def analyze_narrative_coherence(context: str) -> int:
        score = NARRATIVE_BASE_SCORE + _marker_score(context, NARRATIVE_MARKER_POINTS)

        # 相关内容长度适中才加分
        match = RELEVANT_CONTENT_PATTERN.search(context)
        if match:
            content_length = len(match.group(1))
            if C.RELEVANT_CONTENT_MIN_LENGTH < content_length < C.RELEVANT_CONTENT_MAX_LENGTH:
                score += NARRATIVE_LENGTH_POINTS
        return _clamp(score)

    @staticmethod
    def generate_suggestions(character_quality: int, world_quality: int, narrative_quality: int) -> List[str]:
        """按维度累积改进建议；全部达标时只给出一条肯定建议"""
        suggestions = []
        rules = (
            (character_quality, C.CHARACTER_SUGGESTIONS),
            (world_quality, C.WORLD_SUGGESTIONS),
            (narrative_quality, C.NARRATIVE_SUGGESTIONS),
        )
        for score, texts in rules:
            if score < C.QUALITY_THRESHOLD:
                suggestions.extend(texts)

        if not suggestions:
            suggestions.append(C.GOOD_QUALITY_SUGGESTION)
        return suggestions

    @staticmethod
    def analyze_context_quality(context: str) -> QualityReport:
        """
        分析上下文品质。

        Args:
            context (str): 组装或压缩后的上下文。

        Returns:
            QualityReport: token 估算、三项子分数、总分及改进建议。
        """
        character_quality = QualityAnalyzer.analyze_character_info_quality(context)
        world_quality = QualityAnalyzer.analyze_world_building_quality(context)
        narrative_quality = QualityAnalyzer.analyze_narrative_coherence(context)
        overall_quality = round((character_quality + world_quality + narrative_quality) / 3)

        return QualityReport(
            total_tokens=QualityAnalyzer.estimate_tokens(context),
            character_info_quality=character_quality,
            world_building_quality=world_quality,
            narrative_coherence_quality=narrative_quality,
            overall_quality=overall_quality,
            suggestions=QualityAnalyzer.generate_suggestions(character_quality, world_quality, narrative_quality),
        )
