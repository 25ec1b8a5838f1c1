"""
业务对象定义 (Schemas)
定义系统各层级间传递的强类型数据结构，确保数据流透明且可预测。
事实记录 (Record) 由事实存储产出且只读；报告与问题对象由上下文引擎按需创建，不做持久化。
"""
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional, List, Dict, Any, Tuple

class ProjectGenre(str, Enum):
    """项目题材。未知或缺失的题材一律按 GENERIC 处理。"""
    ISEKAI = "isekai"
    SCHOOL = "school"
    SCIFI = "scifi"
    FANTASY = "fantasy"
    GENERIC = "generic"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ProjectGenre":
        try:
            return cls(value)
        except ValueError:
            return cls.GENERIC

class IssueType(str, Enum):
    CHARACTER = "character"
    SETTING = "setting"
    PLOT = "plot"

class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

@dataclass(frozen=True)
class Relationship:
    target_character_id: str
    relationship_type: str = ""
    description: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Relationship":
        return cls(
            target_character_id=str(data.get("target_character_id") or ""),
            relationship_type=data.get("relationship_type") or "",
            description=data.get("description") or "",
        )

@dataclass(frozen=True)
class ProjectRecord:
    """项目事实 (只读)"""
    id: str
    name: str
    genre: ProjectGenre = ProjectGenre.GENERIC
    description: str = ""
    settings: Dict[str, Any] = field(default_factory=dict, hash=False)

    @property
    def selected_template(self) -> Optional[str]:
        """世界观模板选择，位于 settings.template_settings.selected_template"""
        template_settings = self.settings.get("template_settings") or {}
        if not isinstance(template_settings, dict):
            return None
        return template_settings.get("selected_template") or None

@dataclass(frozen=True)
class CharacterRecord:
    """角色事实 (只读)"""
    id: str
    project_id: str
    name: str
    description: str = ""
    personality: str = ""
    background: str = ""
    appearance: str = ""
    role: str = ""
    relationships: Tuple[Relationship, ...] = ()

@dataclass(frozen=True)
class ChapterRecord:
    """章节事实 (只读)"""
    id: str
    project_id: str
    title: str = ""
    order_num: int = 0
    content: str = ""

@dataclass
class QualityReport:
    """上下文品质报告，各子分数范围 0-100"""
    total_tokens: int
    character_info_quality: int
    world_building_quality: int
    narrative_coherence_quality: int
    overall_quality: int
    suggestions: List[str] = field(default_factory=list)

    def to_dict(self):
        return asdict(self)

@dataclass
class ConsistencyIssue:
    """生成文本与既定事实之间的潜在矛盾"""
    type: IssueType
    severity: Severity
    description: str
    suggestion: str

    def to_dict(self):
        data = asdict(self)
        data["type"] = self.type.value
        data["severity"] = self.severity.value
        return data

@dataclass
class ContextStats:
    """项目上下文规模统计"""
    total_characters: int = 0
    estimated_tokens: int = 0
    chapter_count: int = 0
    character_count: int = 0

@dataclass
class PreparedContext:
    """上下文流水线执行结果"""
    context: str
    report: QualityReport
    compressed: bool = False
    original_length: int = 0
