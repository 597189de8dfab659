import asyncio
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from loguru import logger
from pydantic import ValidationError

from sharpapi_client.catalog import build_task
from sharpapi_client.dispatcher import Dispatcher, FilePayload
from sharpapi_client.errors import DecodingError
from sharpapi_client.models import (
    ClientConfig,
    JobDescriptionParameters,
    JobRecord,
    JobType,
    PollingPolicy,
    SubscriptionInfo,
    VoiceTone,
)
from sharpapi_client.poller import JobPoller

Tone = Optional[Union[VoiceTone, str]]


class SharpApiClient:
    """Dispatches AI jobs to SharpAPI and collects their results"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        config: Optional[ClientConfig] = None,
        on_status_change: Optional[Callable[[JobRecord], Any]] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if config is None:
            config = ClientConfig(api_key=api_key or "")
        elif api_key is not None:
            config = config.model_copy(update={"api_key": api_key})

        self.config = config
        self.logger = logger
        self.dispatcher = Dispatcher(config)
        self.poller = JobPoller(
            self.dispatcher, config.polling, on_status_change=on_status_change, sleep=sleep
        )

    async def submit_job(
        self,
        task_path: str,
        params: Optional[Mapping[str, Any]] = None,
        file: Optional[FilePayload] = None,
    ) -> str:
        """Submits a job and returns its status URL"""
        response = await self.dispatcher.submit(task_path, params, file)
        body = response.body
        if not isinstance(body, dict) or not body.get("status_url"):
            raise DecodingError(f"Submission to {task_path} returned no status_url: {body!r}")
        self.logger.info(f"Submitted job to {task_path}, status at {body['status_url']}")
        return body["status_url"]

    async def submit(
        self, job_type: JobType, file: Optional[FilePayload] = None, **params: Any
    ) -> str:
        path, payload = build_task(job_type, has_file=file is not None, **params)
        return await self.submit_job(path, payload, file)

    async def await_completion(
        self, handle: str, policy: Optional[PollingPolicy] = None
    ) -> JobRecord:
        return await self.poller.await_completion(handle, policy)

    async def fetch_results(self, status_url: str) -> JobRecord:
        """Polls status_url with the configured policy and returns the job record"""
        return await self.poller.await_completion(status_url)

    async def submit_and_wait(
        self,
        job_type: JobType,
        file: Optional[FilePayload] = None,
        policy: Optional[PollingPolicy] = None,
        **params: Any,
    ) -> JobRecord:
        handle = await self.submit(job_type, file, **params)
        return await self.await_completion(handle, policy)

    async def ping(self) -> dict:
        """Checks API availability and its internal timestamp"""
        return await self.dispatcher.get("/ping")

    async def quota(self) -> Optional[SubscriptionInfo]:
        """Returns details of the current subscription period, or None if the service sent none"""
        info = await self.dispatcher.get("/quota")
        if not isinstance(info, dict):
            raise DecodingError(f"Unexpected quota body: {info!r}")
        if not info.get("timestamp"):
            return None
        try:
            return SubscriptionInfo.model_validate(info)
        except ValidationError as e:
            raise DecodingError(f"Unexpected quota body: {info!r}") from e

    # HR

    async def parse_resume(self, file: FilePayload, language: Optional[str] = None) -> str:
        """Parses a resume (PDF/DOC/DOCX/TXT/RTF) into structured data points"""
        return await self.submit(JobType.HR_PARSE_RESUME, file, language=language)

    async def generate_job_description(self, parameters: JobDescriptionParameters) -> str:
        return await self.submit(
            JobType.HR_JOB_DESCRIPTION, **parameters.model_dump(exclude_none=True)
        )

    async def related_skills(
        self, skill_name: str, language: Optional[str] = None, max_quantity: Optional[int] = None
    ) -> str:
        return await self.submit(
            JobType.HR_RELATED_SKILLS,
            content=skill_name,
            language=language,
            max_quantity=max_quantity,
        )

    async def related_job_positions(
        self,
        job_position_name: str,
        language: Optional[str] = None,
        max_quantity: Optional[int] = None,
    ) -> str:
        return await self.submit(
            JobType.HR_RELATED_JOB_POSITIONS,
            content=job_position_name,
            language=language,
            max_quantity=max_quantity,
        )

    # E-commerce

    async def product_review_sentiment(self, review: str) -> str:
        return await self.submit(JobType.ECOMMERCE_REVIEW_SENTIMENT, content=review)

    async def product_categories(
        self,
        product_name: str,
        language: Optional[str] = None,
        max_quantity: Optional[int] = None,
        voice_tone: Tone = None,
        context: Optional[str] = None,
    ) -> str:
        """Suggests catalogue categories for a product, weighted 1.0-10.0 by relevance"""
        return await self.submit(
            JobType.ECOMMERCE_PRODUCT_CATEGORIES,
            content=product_name,
            language=language,
            max_quantity=max_quantity,
            voice_tone=voice_tone,
            context=context,
        )

    async def generate_product_intro(
        self,
        product_data: str,
        language: Optional[str] = None,
        max_length: Optional[int] = None,
        voice_tone: Tone = None,
    ) -> str:
        return await self.submit(
            JobType.ECOMMERCE_PRODUCT_INTRO,
            content=product_data,
            language=language,
            max_length=max_length,
            voice_tone=voice_tone,
        )

    async def generate_thank_you_email(
        self,
        product_name: str,
        language: Optional[str] = None,
        max_length: Optional[int] = None,
        voice_tone: Tone = None,
        context: Optional[str] = None,
    ) -> str:
        return await self.submit(
            JobType.ECOMMERCE_THANK_YOU_EMAIL,
            content=product_name,
            language=language,
            max_length=max_length,
            voice_tone=voice_tone,
            context=context,
        )

    # Content

    async def detect_phones(self, text: str) -> str:
        return await self.submit(JobType.CONTENT_DETECT_PHONES, content=text)

    async def detect_emails(self, text: str) -> str:
        return await self.submit(JobType.CONTENT_DETECT_EMAILS, content=text)

    async def detect_spam(self, text: str) -> str:
        return await self.submit(JobType.CONTENT_DETECT_SPAM, content=text)

    async def summarize_text(
        self,
        text: str,
        language: Optional[str] = None,
        max_length: Optional[int] = None,
        voice_tone: Tone = None,
        context: Optional[str] = None,
    ) -> str:
        return await self.submit(
            JobType.CONTENT_SUMMARIZE,
            content=text,
            language=language,
            max_length=max_length,
            voice_tone=voice_tone,
            context=context,
        )

    async def generate_keywords(
        self,
        text: str,
        language: Optional[str] = None,
        max_quantity: Optional[int] = None,
        voice_tone: Tone = None,
        context: Optional[str] = None,
    ) -> str:
        return await self.submit(
            JobType.CONTENT_KEYWORDS,
            content=text,
            language=language,
            max_quantity=max_quantity,
            voice_tone=voice_tone,
            context=context,
        )

    async def translate(
        self,
        text: str,
        language: str,
        voice_tone: Tone = None,
        context: Optional[str] = None,
    ) -> str:
        return await self.submit(
            JobType.CONTENT_TRANSLATE,
            content=text,
            language=language,
            voice_tone=voice_tone,
            context=context,
        )

    async def paraphrase(
        self,
        text: str,
        language: Optional[str] = None,
        max_length: Optional[int] = None,
        voice_tone: Tone = None,
        context: Optional[str] = None,
    ) -> str:
        return await self.submit(
            JobType.CONTENT_PARAPHRASE,
            content=text,
            language=language,
            max_length=max_length,
            voice_tone=voice_tone,
            context=context,
        )

    async def proofread(self, text: str) -> str:
        return await self.submit(JobType.CONTENT_PROOFREAD, content=text)

    async def generate_seo_tags(
        self, text: str, language: Optional[str] = None, voice_tone: Tone = None
    ) -> str:
        """Generates META tags; include page and image URLs in text to fill more of them"""
        return await self.submit(
            JobType.SEO_GENERATE_TAGS, content=text, language=language, voice_tone=voice_tone
        )

    # Travel, tourism & hospitality

    async def travel_review_sentiment(self, text: str) -> str:
        return await self.submit(JobType.TTH_REVIEW_SENTIMENT, content=text)

    async def tours_and_activities_product_categories(
        self,
        product_name: str,
        city: Optional[str] = None,
        country: Optional[str] = None,
        language: Optional[str] = None,
        max_quantity: Optional[int] = None,
        voice_tone: Tone = None,
        context: Optional[str] = None,
    ) -> str:
        return await self.submit(
            JobType.TTH_TA_PRODUCT_CATEGORIES,
            content=product_name,
            city=city,
            country=country,
            language=language,
            max_quantity=max_quantity,
            voice_tone=voice_tone,
            context=context,
        )

    async def hospitality_product_categories(
        self,
        product_name: str,
        city: Optional[str] = None,
        country: Optional[str] = None,
        language: Optional[str] = None,
        max_quantity: Optional[int] = None,
        voice_tone: Tone = None,
        context: Optional[str] = None,
    ) -> str:
        return await self.submit(
            JobType.TTH_HOSPITALITY_PRODUCT_CATEGORIES,
            content=product_name,
            city=city,
            country=country,
            language=language,
            max_quantity=max_quantity,
            voice_tone=voice_tone,
            context=context,
        )
