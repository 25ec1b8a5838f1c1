"""
上下文标记与固定查找表
构建器写入、压缩器解析、品质分析器计分，三者共用同一套标记，任何改动都会同时影响三处。
"""
from core.schemas import ProjectGenre

# --- 段落标记 ---
PROJECT_LABEL = "專案："
GENRE_LABEL = "類型："
DESCRIPTION_LABEL = "描述："
WORLD_LABEL = "世界觀："
CHARACTERS_LABEL = "主要角色："
PERSONALITY_LABEL = "性格："
BACKGROUND_LABEL = "背景："
RELATIONSHIP_LABEL = "關係："
CHAPTER_LABEL = "當前章節："
RELEVANT_CONTENT_LABEL = "相關內容："
CHARACTER_DETAILS_LABEL = "相關角色詳細資訊："
APPEARANCE_LABEL = "外貌："
ROLE_LABEL = "角色："
RELATIONSHIPS_DETAIL_LABEL = "人際關係："

CHARACTER_ENTRY_PREFIX = "- "
CHARACTER_DETAIL_INDENT = "  "
NAME_SEPARATOR = "："
RELATIONSHIP_SEPARATOR = "、"
UNKNOWN_CHARACTER = "未知角色"
RELATIONSHIP_DETAIL_INDENT = "    "

# --- 题材 ---
GENRE_NAMES = {
    ProjectGenre.ISEKAI: "異世界",
    ProjectGenre.SCHOOL: "校園",
    ProjectGenre.SCIFI: "科幻",
    ProjectGenre.FANTASY: "奇幻",
    ProjectGenre.GENERIC: "通用",
}

WORLD_TEMPLATES = {
    ProjectGenre.ISEKAI: (
        "異世界設定，主角從現代世界穿越而來",
        "可能包含魔法、劍與魔法的世界觀",
    ),
    ProjectGenre.SCHOOL: (
        "校園背景，以學校生活為主",
        "青春、友情、戀愛元素",
    ),
    ProjectGenre.SCIFI: (
        "科幻背景，包含未來科技元素",
        "可能涉及太空、人工智慧、時間旅行等",
    ),
    ProjectGenre.FANTASY: (
        "奇幻世界，包含魔法和神秘生物",
        "劍與魔法的經典設定",
    ),
}

# --- 相关内容窗口 ---
WINDOW_MAX_HALF_WIDTH = 50
WINDOW_RATIO_PERCENT = 30 # 总行数的 30%，按整数向下取整

# --- 品质评分 ---
CHARS_PER_TOKEN = 4
QUALITY_THRESHOLD = 70
WORLD_KEYWORDS = ("魔法", "科技", "學校", "異世界", "未來", "現代")
RELEVANT_CONTENT_MIN_LENGTH = 100
RELEVANT_CONTENT_MAX_LENGTH = 2000

CHARACTER_SUGGESTIONS = (
    "建議添加更詳細的角色描述和背景資訊",
    "考慮加入角色之間的關係說明",
)
WORLD_SUGGESTIONS = (
    "建議補充更豐富的世界觀設定",
    "添加更多關於故事背景的具體細節",
)
NARRATIVE_SUGGESTIONS = (
    "建議提供更多相關的故事內容作為上下文",
    "確保章節資訊清晰完整",
)
GOOD_QUALITY_SUGGESTION = "上下文品質良好，可以繼續創作"

# --- 一致性检查 ---
OPPOSITE_TRAITS = (
    ("冷漠", "熱情"),
    ("內向", "外向"),
    ("溫柔", "粗暴"),
    ("冷靜", "衝動"),
    ("開朗", "陰沉"),
    ("勇敢", "膽小"),
    ("誠實", "虛偽"),
    ("樂觀", "悲觀"),
)
TIME_OF_DAY_WORDS = ("早上", "中午", "晚上", "深夜")
PLACE_WORDS = ("學校", "家裡", "街道", "商店")
SIMULTANEITY_WORD = "同時"
NEGATION_PREFIXES = ("不", "沒有", "並非", "毫無")

# --- 角色识别 ---
ALIAS_MARKERS = ("別名", "暱稱", "外號")
ALIAS_MAX_LENGTH = 6
ACTION_VERBS = ("說", "道", "表示", "回答", "問", "笑", "哭", "喊")
NAMING_WORDS = ("叫做", "名為", "是")
NEW_CHARACTER_MIN_LENGTH = 2
