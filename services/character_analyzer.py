"""
角色分析器 (Character Analyzer)
负责文本中的角色识别：别名提及、新角色候选名，以及把角色详细资料并入上下文。
全部为基于固定查找表的正则启发式，不访问事实存储。
"""
from __future__ import annotations
import re
from typing import Iterable, List
from core import constants as C
from core.schemas import CharacterRecord

def _alternation(words: Iterable[str]) -> str:
    return "|".join(re.escape(w) for w in words)

ENGLISH_NAME_PATTERN = re.compile(r"[A-Z][a-z]+")
CJK_NAME_BEFORE_ACTION_PATTERN = re.compile(
    r"[\u4e00-\u9fff]{2,4}(?=" + _alternation(C.ACTION_VERBS) + ")"
)
NAMED_AS_PATTERN = re.compile(r"(?:" + _alternation(C.NAMING_WORDS) + r")([^\s，。！？]{2,4})")
ACTION_VERB_PATTERN = re.compile(_alternation(C.ACTION_VERBS))
ALIAS_PATTERN = re.compile(
    r"(?:" + _alternation(C.ALIAS_MARKERS) + r")[：:]([^\s，。]{1,%d})" % C.ALIAS_MAX_LENGTH
)

def extract_aliases(character: CharacterRecord) -> List[str]:
    """从角色描述中提取 "別名：" / "暱稱：" / "外號：" 之后的称呼"""
    if not character.description:
        return []
    return [a.strip() for a in ALIAS_PATTERN.findall(character.description) if a.strip()]

def is_character_mentioned(content: str, character: CharacterRecord) -> bool:
    if character.name and character.name in content:
        return True
    return any(alias in content for alias in extract_aliases(character))

def detect_new_characters(content: str) -> List[str]:
    """
    找出文本中可能的角色名称。

    依次套用三种规则：英文首字母大写的单词、动作动词前的 2-4 个汉字、
    "叫做" / "名為" / "是" 之后的 2-4 个字符。结果去重，保持首次出现的顺序。
    """
    candidates = []
    candidates.extend(ENGLISH_NAME_PATTERN.findall(content))
    candidates.extend(CJK_NAME_BEFORE_ACTION_PATTERN.findall(content))
    candidates.extend(NAMED_AS_PATTERN.findall(content))

    names = []
    for candidate in candidates:
        name = ACTION_VERB_PATTERN.sub("", candidate, count=1).strip()
        if len(name) >= C.NEW_CHARACTER_MIN_LENGTH and name not in names:
            names.append(name)
    return names

def render_character_details(characters: List[CharacterRecord]) -> str:
    if not characters:
        return ""

    indent = C.CHARACTER_DETAIL_INDENT
    block = f"\n{C.CHARACTER_DETAILS_LABEL}\n"
    for character in characters:
        block += f"\n{character.name}{C.NAME_SEPARATOR}\n"
        block += f"{indent}{C.DESCRIPTION_LABEL}{character.description}\n"
        for label, value in (
            (C.PERSONALITY_LABEL, character.personality),
            (C.BACKGROUND_LABEL, character.background),
            (C.APPEARANCE_LABEL, character.appearance),
            (C.ROLE_LABEL, character.role),
        ):
            if value:
                block += f"{indent}{label}{value}\n"
        if character.relationships:
            block += f"{indent}{C.RELATIONSHIPS_DETAIL_LABEL}\n"
            for rel in character.relationships:
                block += f"{C.RELATIONSHIP_DETAIL_INDENT}- {rel.relationship_type}{C.NAME_SEPARATOR}{rel.description}\n"
    return block

def integrate_characters(context: str, characters: List[CharacterRecord]) -> str:
    """
    在上下文末尾追加 "相關角色詳細資訊：" 段落，列出每个角色的描述、性格、背景、外貌、定位与人际关系。
    角色列表为空时原样返回。
    """
    return context + render_character_details(characters)
