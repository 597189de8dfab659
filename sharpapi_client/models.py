import json
import os
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from sharpapi_client.errors import ConfigurationError


class JobStatus(str, Enum):
    new = "new"
    pending = "pending"
    failed = "failed"
    success = "success"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.failed, JobStatus.success)


class JobType(str, Enum):
    """Task identifiers understood by the service"""

    ECOMMERCE_REVIEW_SENTIMENT = "ecommerce_review_sentiment"
    ECOMMERCE_PRODUCT_CATEGORIES = "ecommerce_product_categories"
    ECOMMERCE_PRODUCT_INTRO = "ecommerce_product_intro"
    ECOMMERCE_THANK_YOU_EMAIL = "ecommerce_thank_you_email"
    HR_PARSE_RESUME = "hr_parse_resume"
    HR_JOB_DESCRIPTION = "hr_job_description"
    HR_RELATED_SKILLS = "hr_related_skills"
    HR_RELATED_JOB_POSITIONS = "hr_related_job_positions"
    TTH_REVIEW_SENTIMENT = "tth_review_sentiment"
    TTH_TA_PRODUCT_CATEGORIES = "tth_ta_product_categories"
    TTH_HOSPITALITY_PRODUCT_CATEGORIES = "tth_hospitality_product_categories"
    CONTENT_DETECT_PHONES = "content_detect_phones"
    CONTENT_DETECT_EMAILS = "content_detect_emails"
    CONTENT_DETECT_SPAM = "content_detect_spam"
    CONTENT_SUMMARIZE = "content_summarize"
    CONTENT_KEYWORDS = "content_keywords"
    CONTENT_TRANSLATE = "content_translate"
    CONTENT_PARAPHRASE = "content_paraphrase"
    CONTENT_PROOFREAD = "content_proofread"
    SEO_GENERATE_TAGS = "seo_generate_tags"


class VoiceTone(str, Enum):
    ADVENTUROUS = "Adventurous"
    ACADEMIC = "Academic"
    ARTICULATE = "Articulate"
    ASSERTIVE = "Assertive"
    AUTHORITATIVE = "Authoritative"
    CAPTIVATING = "Captivating"
    CASUAL = "Casual"
    CANDID = "Candid"
    COMPELLING = "Compelling"
    COMICAL = "Comical"
    CULTURED = "Cultured"
    ECLECTIC = "Eclectic"
    EDUCATIONAL = "Educational"
    EFFORTLESS = "Effortless"
    ELOQUENT = "Eloquent"
    EMPATHETIC = "Empathetic"
    EMPOWERING = "Empowering"
    ENCOURAGING = "Encouraging"
    ENGAGING = "Engaging"
    ENLIGHTENING = "Enlightening"
    ENTHUSIASTIC = "Enthusiastic"
    EXPRESSIVE = "Expressive"
    FORMAL = "Formal"
    FRIENDLY = "Friendly"
    FUNNY = "Funny"
    HEARTENING = "Heartening"
    HEARTFELT = "Heartfelt"
    HUMOROUS = "Humorous"
    IMPASSIONED = "Impassioned"
    INSPIRATIONAL = "Inspirational"
    INSTRUCTIONAL = "Instructional"
    INTELLECTUAL = "Intellectual"
    INFORMAL = "Informal"
    INVENTIVE = "Inventive"
    LIVELY = "Lively"
    LYRICAL = "Lyrical"
    LUXURIOUS = "Luxurious"
    MINIMALIST = "Minimalist"
    NARRATIVE = "Narrative"
    NEUTRAL = "Neutral"
    NOSTALGIC = "Nostalgic"
    OPTIMISTIC = "Optimistic"
    PERSUASIVE = "Persuasive"
    PESSIMISTIC = "Pessimistic"
    PROVOCATIVE = "Provocative"
    QUIRKY = "Quirky"
    RESPECTFUL = "Respectful"
    SERIOUS = "Serious"
    SINCERE = "Sincere"
    STORYTELLING = "Storytelling"
    SYMPATHETIC = "Sympathetic"
    TECH_SAVVY = "Tech-Savvy"
    THOUGHTFUL = "Thoughtful"
    TOUCHING = "Touching"
    WITTY = "Witty"


class JobRecord(BaseModel):
    """Snapshot of a remote job as last observed by the poller"""

    id: Optional[str] = None
    type: Optional[str] = None
    status: JobStatus
    result: Optional[Any] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def job_type(self) -> Optional[JobType]:
        try:
            return JobType(self.type)
        except ValueError:
            return None

    def result_json(self) -> Optional[str]:
        """Returns the job result as a prettified JSON string"""
        if self.result is None:
            return None
        return json.dumps(self.result, indent=2)


class PollingPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_interval_seconds: float = Field(default=10.0, gt=0)
    max_wait_seconds: float = Field(default=180.0, ge=0)
    use_server_hint: bool = True


class ClientConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    api_key: str
    base_url: str = "https://sharpapi.com/api/v1"
    user_agent: str = "SharpAPIPythonClient/1.2.0"
    polling: PollingPolicy = PollingPolicy()
    request_timeout: float = Field(default=30.0, gt=0)

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClientConfig":
        """Builds a config from SHARP_API_* environment variables (and a .env file, if any)"""
        load_dotenv()
        try:
            polling = PollingPolicy(
                base_interval_seconds=float(os.environ.get("SHARP_API_POLLING_INTERVAL", 10)),
                max_wait_seconds=float(os.environ.get("SHARP_API_POLLING_WAIT", 180)),
                use_server_hint=os.environ.get("SHARP_API_USE_SERVER_HINT", "true").lower()
                not in ("0", "false", "no"),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid SHARP_API_POLLING_* setting: {e}") from e
        values: Dict[str, Any] = {
            "api_key": os.environ.get("SHARP_API_KEY", ""),
            "polling": polling,
        }
        if os.environ.get("SHARP_API_BASE_URL"):
            values["base_url"] = os.environ["SHARP_API_BASE_URL"]
        if os.environ.get("SHARP_API_USER_AGENT"):
            values["user_agent"] = os.environ["SHARP_API_USER_AGENT"]
        values.update(overrides)
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid SHARP_API_* setting: {e}") from e


class DispatchResponse(BaseModel):
    status_code: int
    body: Any = None
    headers: Dict[str, str] = Field(default_factory=dict)


class SubscriptionInfo(BaseModel):
    timestamp: datetime
    on_trial: bool = False
    trial_ends: Optional[datetime] = None
    subscribed: bool = False
    current_subscription_start: Optional[datetime] = None
    current_subscription_end: Optional[datetime] = None
    subscription_words_quota: int = 0
    subscription_words_used: int = 0
    subscription_words_used_percentage: float = 0


class JobDescriptionParameters(BaseModel):
    name: str
    company_name: Optional[str] = None
    minimum_work_experience: Optional[str] = None
    minimum_education: Optional[str] = None
    employment_type: Optional[str] = None
    required_skills: Optional[List[str]] = None
    optional_skills: Optional[List[str]] = None
    country: Optional[str] = None
    remote: Optional[bool] = None
    visa_sponsored: Optional[bool] = None
    voice_tone: Optional[Union[VoiceTone, str]] = None
    context: Optional[str] = None
    language: Optional[str] = None
