"""
一致性检查器 (Consistency Checker)
将新写成或 AI 生成的文本与项目既定的角色事实对照，报告可能的偏移。
角色名单读取失败时只记录日志并返回空列表，绝不向调用方抛出。
"""
from __future__ import annotations
import logging
import re
from typing import List, Optional, Tuple
from core import constants as C
from core.exceptions import FactStoreError
from core.schemas import CharacterRecord, ConsistencyIssue, IssueType, Severity

logger = logging.getLogger(__name__)

SENTENCE_SPLIT_PATTERN = re.compile(r"[。！？!?\n]")

def split_sentences(text: str) -> List[str]:
    return [s for s in SENTENCE_SPLIT_PATTERN.split(text) if s.strip()]

def canonical_trait_pairs(personality: str) -> List[Tuple[str, str]]:
    """
    从设定性格中取出 (既定特质, 相反特质) 对。
    设定本身同时包含两个相反特质时不参与判断。
    """
    pairs = []
    if not personality:
        return pairs
    for first, second in C.OPPOSITE_TRAITS:
        for trait, opposite in ((first, second), (second, first)):
            if trait in personality and opposite not in personality:
                pairs.append((trait, opposite))
    return pairs

def mentions_unnegated(sentence: str, word: str) -> bool:
    """word 在句中至少出现一次，且该处前面不是否定词 (不、沒有、並非、毫無)"""
    start = sentence.find(word)
    while start != -1:
        if not sentence[:start].endswith(C.NEGATION_PREFIXES):
            return True
        start = sentence.find(word, start + 1)
    return False

def find_character_contradiction(text: str, character: CharacterRecord) -> Optional[Tuple[str, str]]:
    """
    在提及该角色的句子中寻找与既定特质相反的描写。
    句子里同时出现既定特质本身时视为对比描写，不算矛盾；被否定的相反特质 (如 "並不衝動") 也不算。

    Returns:
        (既定特质, 文本中的相反特质)，未发现矛盾时返回 None。
    """
    pairs = canonical_trait_pairs(character.personality)
    if not pairs:
        return None
    for sentence in split_sentences(text):
        if character.name not in sentence:
            continue
        for trait, opposite in pairs:
            if trait not in sentence and mentions_unnegated(sentence, opposite):
                return trait, opposite
    return None

def has_logical_inconsistencies(text: str) -> bool:
    """
    同一句中出现两个不同的时段，或在 "同時" 的描写中出现两个不同地点，视为逻辑矛盾信号。
    """
    for sentence in split_sentences(text):
        times = [w for w in C.TIME_OF_DAY_WORDS if w in sentence]
        if len(times) >= 2:
            return True
        if C.SIMULTANEITY_WORD in sentence:
            places = [w for w in C.PLACE_WORDS if w in sentence]
            if len(places) >= 2:
                return True
    return False


class ConsistencyChecker:
    """检查文本在角色、设定、剧情三方面的一致性"""

    def __init__(self, store):
        self.store = store

    def check_consistency(self, text: str, project_id: str) -> List[ConsistencyIssue]:
        """
        检查一致性问题。

        Args:
            text (str): 待检查文本。
            project_id (str): 项目 ID。

        Returns:
            List[ConsistencyIssue]: 依次为角色、设定、剧情问题；同类问题按角色顺序排列。
        """
        try:
            characters = list(self.store.get_characters_by_project(project_id))
        except FactStoreError as e:
            logger.error(f"一致性检查时获取角色列表失败: {e}")
            return []

        issues = []
        issues.extend(self.check_character_consistency(text, characters))
        issues.extend(self.check_setting_consistency(text, project_id))
        issues.extend(self.check_plot_consistency(text))

        if issues:
            logger.info(f"项目 {project_id} 发现 {len(issues)} 个一致性问题")
        return issues

    @staticmethod
    def check_character_consistency(text: str, characters: List[CharacterRecord]) -> List[ConsistencyIssue]:
        issues = []
        for character in characters:
            if not character.name or character.name not in text:
                continue
            contradiction = find_character_contradiction(text, character)
            if contradiction is None:
                continue
            trait, opposite = contradiction
            issues.append(ConsistencyIssue(
                type=IssueType.CHARACTER,
                severity=Severity.MEDIUM,
                description=f"角色 {character.name} 的描述可能與設定不一致：設定為「{trait}」，文中出現「{opposite}」",
                suggestion=f"檢查 {character.name} 的性格和行為是否符合角色設定",
            ))
        return issues

    @staticmethod
    def check_setting_consistency(text: str, project_id: str) -> List[ConsistencyIssue]:
        """设定一致性的挂载点；事实存储中尚无可比对的地点/时间设定，恒返回空列表"""
        return []

    @staticmethod
    def check_plot_consistency(text: str) -> List[ConsistencyIssue]:
        """无论发现多少处信号，只汇总为一个低严重度问题"""
        if not has_logical_inconsistencies(text):
            return []
        return [ConsistencyIssue(
            type=IssueType.PLOT,
            severity=Severity.LOW,
            description="內容中可能存在邏輯不一致的地方",
            suggestion="檢查故事情節的邏輯性和連貫性",
        )]
