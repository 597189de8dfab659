"""Static catalog of the tasks the service accepts.

Each entry maps a JobType to its submission path and the parameter fields the
endpoint understands. Task wrappers never build request bodies by hand; they
go through build_task so that every submission is checked against the catalog.
"""

from enum import Enum
from typing import Any, Dict, FrozenSet, NamedTuple, Tuple

from sharpapi_client.errors import TaskParameterError
from sharpapi_client.models import JobType


class TaskSpec(NamedTuple):
    job_type: JobType
    path: str
    required: FrozenSet[str] = frozenset()
    optional: FrozenSet[str] = frozenset()
    file_upload: bool = False


_STYLED = frozenset({"language", "max_quantity", "voice_tone", "context"})
_STYLED_LENGTH = frozenset({"language", "max_length", "voice_tone", "context"})
_LOCATED = frozenset({"city", "country"}) | _STYLED
_RELATED = frozenset({"language", "max_quantity"})
_CONTENT = frozenset({"content"})

TASK_CATALOG: Dict[JobType, TaskSpec] = {
    spec.job_type: spec
    for spec in (
        TaskSpec(JobType.ECOMMERCE_REVIEW_SENTIMENT, "/ecommerce/review_sentiment", _CONTENT),
        TaskSpec(JobType.ECOMMERCE_PRODUCT_CATEGORIES, "/ecommerce/product_categories", _CONTENT, _STYLED),
        TaskSpec(
            JobType.ECOMMERCE_PRODUCT_INTRO,
            "/ecommerce/product_intro",
            _CONTENT,
            frozenset({"language", "max_length", "voice_tone"}),
        ),
        TaskSpec(JobType.ECOMMERCE_THANK_YOU_EMAIL, "/ecommerce/thank_you_email", _CONTENT, _STYLED_LENGTH),
        TaskSpec(
            JobType.HR_PARSE_RESUME,
            "/hr/parse_resume",
            optional=frozenset({"language"}),
            file_upload=True,
        ),
        TaskSpec(
            JobType.HR_JOB_DESCRIPTION,
            "/hr/job_description",
            frozenset({"name"}),
            frozenset(
                {
                    "company_name",
                    "minimum_work_experience",
                    "minimum_education",
                    "employment_type",
                    "required_skills",
                    "optional_skills",
                    "country",
                    "remote",
                    "visa_sponsored",
                    "voice_tone",
                    "context",
                    "language",
                }
            ),
        ),
        TaskSpec(JobType.HR_RELATED_SKILLS, "/hr/related_skills", _CONTENT, _RELATED),
        TaskSpec(JobType.HR_RELATED_JOB_POSITIONS, "/hr/related_job_positions", _CONTENT, _RELATED),
        TaskSpec(JobType.TTH_REVIEW_SENTIMENT, "/tth/review_sentiment", _CONTENT),
        TaskSpec(JobType.TTH_TA_PRODUCT_CATEGORIES, "/tth/ta_product_categories", _CONTENT, _LOCATED),
        TaskSpec(
            JobType.TTH_HOSPITALITY_PRODUCT_CATEGORIES,
            "/tth/hospitality_product_categories",
            _CONTENT,
            _LOCATED,
        ),
        TaskSpec(JobType.CONTENT_DETECT_PHONES, "/content/detect_phones", _CONTENT),
        TaskSpec(JobType.CONTENT_DETECT_EMAILS, "/content/detect_emails", _CONTENT),
        TaskSpec(JobType.CONTENT_DETECT_SPAM, "/content/detect_spam", _CONTENT),
        TaskSpec(JobType.CONTENT_SUMMARIZE, "/content/summarize", _CONTENT, _STYLED_LENGTH),
        TaskSpec(JobType.CONTENT_KEYWORDS, "/content/keywords", _CONTENT, _STYLED),
        TaskSpec(
            JobType.CONTENT_TRANSLATE,
            "/content/translate",
            frozenset({"content", "language"}),
            frozenset({"voice_tone", "context"}),
        ),
        TaskSpec(JobType.CONTENT_PARAPHRASE, "/content/paraphrase", _CONTENT, _STYLED_LENGTH),
        TaskSpec(JobType.CONTENT_PROOFREAD, "/content/proofread", _CONTENT),
        TaskSpec(
            JobType.SEO_GENERATE_TAGS,
            "/seo/generate_tags",
            _CONTENT,
            frozenset({"language", "voice_tone"}),
        ),
    )
}


def task_spec(job_type: JobType) -> TaskSpec:
    try:
        return TASK_CATALOG[JobType(job_type)]
    except (KeyError, ValueError) as e:
        raise TaskParameterError(f"Unknown task type: {job_type!r}") from e


def build_task(job_type: JobType, has_file: bool = False, **params: Any) -> Tuple[str, Dict[str, Any]]:
    """Validates params against the catalog and returns the (task path, params) pair to submit"""
    spec = task_spec(job_type)

    if spec.file_upload and not has_file:
        raise TaskParameterError(f"{spec.job_type.value} requires a file upload")

    cleaned = {
        key: value.value if isinstance(value, Enum) else value
        for key, value in params.items()
        if value is not None
    }

    unknown = set(cleaned) - spec.required - spec.optional
    if unknown:
        raise TaskParameterError(
            f"Unknown parameters for {spec.job_type.value}: {', '.join(sorted(unknown))}"
        )

    missing = [field for field in sorted(spec.required) if cleaned.get(field) in (None, "")]
    if missing:
        raise TaskParameterError(
            f"Missing required parameters for {spec.job_type.value}: {', '.join(missing)}"
        )

    return spec.path, cleaned
