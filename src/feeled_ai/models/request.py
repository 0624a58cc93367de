"""Story generation request and its option catalogues."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Grade(str, Enum):
    """School grade the story is pitched at."""

    GRADE_1 = "Grade 1"
    GRADE_2 = "Grade 2"
    GRADE_3 = "Grade 3"
    GRADE_4 = "Grade 4"
    GRADE_5 = "Grade 5"
    GRADE_6 = "Grade 6"
    GRADE_7 = "Grade 7"
    GRADE_8 = "Grade 8"
    GRADE_9 = "Grade 9"
    GRADE_10 = "Grade 10"
    GRADE_11 = "Grade 11"
    GRADE_12 = "Grade 12"


class Language(str, Enum):
    """Language the story is written in."""

    ENGLISH = "English"
    SPANISH = "Spanish"
    FRENCH = "French"
    GERMAN = "German"
    MANDARIN_CHINESE = "Mandarin Chinese"
    HINDI = "Hindi"
    ARABIC = "Arabic"
    BENGALI = "Bengali"
    RUSSIAN = "Russian"
    PORTUGUESE = "Portuguese"
    INDONESIAN = "Indonesian"
    URDU = "Urdu"
    JAPANESE = "Japanese"
    SWAHILI = "Swahili"
    TAMIL = "Tamil"
    TELUGU = "Telugu"
    KANNADA = "Kannada"
    MALAYALAM = "Malayalam"
    MARATHI = "Marathi"
    GUJARATI = "Gujarati"
    PUNJABI = "Punjabi"
    ODIA = "Odia"
    ASSAMESE = "Assamese"


class EmotionTone(str, Enum):
    """Emotional register of the story and its narration."""

    CURIOUS = "Curious"
    INSPIRING = "Inspiring"
    FUNNY = "Funny"
    MORAL = "Moral"


class UserRole(str, Enum):
    """Who is asking for the story."""

    TEACHER = "Teacher"
    STUDENT = "Student"
    PARENT = "Parent"


class NarrationVoice(str, Enum):
    """Prebuilt narration voices of the audio model."""

    ALLOY = "alloy"
    ASH = "ash"
    BALLAD = "ballad"
    CORAL = "coral"
    ECHO = "echo"
    SAGE = "sage"
    SHIMMER = "shimmer"
    VERSE = "verse"


class GenerationRequest(BaseModel):
    """One caller request. Immutable once submitted."""

    model_config = ConfigDict(frozen=True)

    topic: str = Field(..., max_length=500, description="Academic topic to explain")
    grade: Grade = Field(default=Grade.GRADE_5)
    language: Language = Field(default=Language.ENGLISH)
    emotion_tone: EmotionTone = Field(default=EmotionTone.CURIOUS)
    user_role: UserRole = Field(default=UserRole.TEACHER)
    voice: NarrationVoice | None = Field(default=None, description="Narration voice id")

    @field_validator("topic")
    @classmethod
    def _topic_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("topic must not be empty")
        return value
