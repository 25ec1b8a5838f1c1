"""
上下文压缩器 (Context Compressor)
在长度预算内保留价值最高的段落：
项目名锚点 -> 当前章节 -> 角色 (先逐个精简，再从末尾丢弃) -> 其余项目与世界观信息。
纯字符串运算，不做任何 I/O。
"""
import logging
from typing import List, Optional, Tuple
from core import constants as C

logger = logging.getLogger(__name__)

TRUNCATION_MARK = "\n...(內容已截斷)...\n"

def _keep_lines(text: str) -> List[str]:
    """按行切分并保留换行符"""
    parts = text.split("\n")
    lines = [p + "\n" for p in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines

def _split_sections(context: str) -> Optional[Tuple[str, str, str, str]]:
    """
    拆分为 (锚点行, 其余项目段落, 角色段落, 章节段落)。
    找不到任何段落标记时返回 None。
    """
    chapter_idx = context.find(C.CHAPTER_LABEL)
    limit = chapter_idx if chapter_idx != -1 else len(context)
    characters_idx = context.find(C.CHARACTERS_LABEL, 0, limit)

    if chapter_idx == -1 and characters_idx == -1 and not context.startswith(C.PROJECT_LABEL):
        return None

    project_end = characters_idx if characters_idx != -1 else limit
    project = context[:project_end]
    characters = context[characters_idx:limit] if characters_idx != -1 else ""
    chapter = context[chapter_idx:] if chapter_idx != -1 else ""

    anchor, rest = "", project
    if project.startswith(C.PROJECT_LABEL):
        anchor, _, rest = project.partition("\n")
    return anchor, rest, characters, chapter

def _fit_head(text: str, budget: int) -> str:
    """保留开头部分，有余量时附加截断标记"""
    if len(text) <= budget:
        return text
    if budget > len(TRUNCATION_MARK) * 2:
        return text[:budget - len(TRUNCATION_MARK)] + TRUNCATION_MARK
    return text[:budget]

def _fit_lines(text: str, budget: int) -> str:
    """逐行保留，靠前的行优先"""
    kept = ""
    for line in _keep_lines(text):
        if len(kept) + len(line) > budget:
            break
        kept += line
    return kept

def _fit_characters(section: str, budget: int) -> str:
    """
    角色段落的分级压缩：
    完整保留 -> 每个角色只留 "- 名字：描述" 行 (有余量时靠前角色恢复细节) -> 从末尾丢弃角色 -> 整段丢弃。
    """
    if not section or budget <= 0:
        return ""
    if len(section) <= budget:
        return section

    lines = _keep_lines(section)
    header = lines[0]
    entries: List[List[str]] = []
    for line in lines[1:]:
        if line.startswith(C.CHARACTER_ENTRY_PREFIX) or not entries:
            entries.append([line])
        elif line.strip():
            entries[-1].append(line)

    used = len(header)
    chosen = []
    for entry in entries:
        if used + len(entry[0]) > budget:
            break
        chosen.append(entry)
        used += len(entry[0])
    if not chosen:
        return ""

    kept = header
    for entry in chosen:
        details = "".join(entry[1:])
        if details and used + len(details) <= budget:
            used += len(details)
            kept += entry[0] + details
        else:
            kept += entry[0]
    if used + 1 <= budget:
        kept += "\n"
    return kept

def compress_context(context: str, max_length: int) -> str:
    """
    将上下文压缩到 max_length 以内。

    Args:
        context (str): 已组装的上下文 (或任意字符串)。
        max_length (int): 最大长度；非正数时返回空字符串。

    Returns:
        str: 长度不超过 max_length 的上下文；原文未超长时原样返回。
    """
    if max_length <= 0:
        return ""
    if len(context) <= max_length:
        return context

    sections = _split_sections(context)
    if sections is None:
        return context[:max_length]
    anchor, project_rest, characters, chapter = sections

    budget = max_length
    anchor_block = ""
    if anchor:
        if len(anchor) > budget:
            # 预算不足以容纳整行时只保留项目名
            return anchor[len(C.PROJECT_LABEL):][:budget]
        anchor_block = anchor + "\n" if len(anchor) < budget else anchor
        budget -= len(anchor_block)

    kept_chapter = _fit_head(chapter, budget)
    budget -= len(kept_chapter)

    kept_characters = _fit_characters(characters, budget)
    budget -= len(kept_characters)

    kept_project = _fit_lines(project_rest, budget)

    compressed = anchor_block + kept_project + kept_characters + kept_chapter
    logger.debug(f"上下文已压缩: {len(context)} -> {len(compressed)} (预算 {max_length})")
    return compressed[:max_length]
