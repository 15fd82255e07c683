from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Domain(str, Enum):
    MULTIPLICATION = "multiplication"
    DIVISION = "division"
    FRACTIONS = "fractions"
    PATTERNS = "patterns"
    WORD_PROBLEMS = "word_problems"


DOMAIN_ORDER = [
    Domain.MULTIPLICATION,
    Domain.DIVISION,
    Domain.FRACTIONS,
    Domain.PATTERNS,
    Domain.WORD_PROBLEMS,
]


class QuestionType(str, Enum):
    MCQ_SINGLE = "mcq_single"
    MCQ_MULTI = "mcq_multi"
    VISUAL = "visual"
    WORD = "word"


class League(str, Enum):
    U8 = "U8"
    U10 = "U10"
    U12 = "U12"
    U14 = "U14"
    HS = "HS"
    COLLEGE = "College"


LEAGUE_ORDER = [League.U8, League.U10, League.U12, League.U14, League.HS, League.COLLEGE]

# selector history windows; the session history never keeps more than this
MAX_RECENT_IDS = 100
MAX_RECENT_SKILL_TAGS = 5


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )


class ItemSource(CamelModel):
    kind: str = "generated"
    origin: str = "math_striker_templates"
    license: str = "proprietary_generated"


SOURCE = ItemSource()


class BankItem(CamelModel):
    id: str
    version: str
    domain: Domain
    skill_tag: str
    subskill_tags: list[str] = []
    grade_band: str
    question_type: QuestionType
    global_difficulty: int = Field(ge=1, le=6)
    skill_difficulty: int = Field(ge=1, le=6)
    prompt: str
    choices: Optional[list[str]] = None
    correct_answer: Union[str, list[str]]
    visual: Optional[dict[str, Any]] = None
    explanation: str = ""
    source: ItemSource = SOURCE
    hash: str

    def to_record(self) -> dict:
        """Wire record: camelCase keys, absent optionals omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


class SelectionCriteria(BaseModel):
    target_difficulty: int = Field(ge=1, le=6)
    skill_tag: Optional[str] = None
    weak_skills: list[str] = []
    recent_ids: list[str] = Field(default_factory=list, max_length=MAX_RECENT_IDS)
    recent_skill_tags: list[str] = Field(default_factory=list, max_length=MAX_RECENT_SKILL_TAGS)


class BankManifest(CamelModel):
    version: str
    seed: int
    generated_at: str
    totals: dict[str, int]
