from datetime import datetime, timezone

import pytest
from sharpapi_client.errors import (
    ConfigurationError,
    DecodingError,
    TaskParameterError,
    TransportError,
)
from sharpapi_client.models import (
    ClientConfig,
    JobDescriptionParameters,
    JobStatus,
    JobType,
    PollingPolicy,
    VoiceTone,
)
from sharpapi_client.sharpapi_client import SharpApiClient


def test_client_requires_api_key():
    with pytest.raises(ConfigurationError, match="API key is required."):
        SharpApiClient("")


def test_client_defaults():
    client = SharpApiClient("test_api_key")

    assert client.config.api_key == "test_api_key"
    assert client.config.base_url == "https://sharpapi.com/api/v1"
    assert client.config.polling == PollingPolicy(
        base_interval_seconds=10, max_wait_seconds=180, use_server_hint=True
    )


def test_api_key_overrides_config():
    config = ClientConfig(api_key="old", base_url="http://localhost:1")
    client = SharpApiClient("new", config=config)

    assert client.config.api_key == "new"
    assert client.config.base_url == "http://localhost:1"
    assert config.api_key == "old"


def test_independent_clients_do_not_share_config():
    first = SharpApiClient("first")
    second = SharpApiClient("second", config=ClientConfig(api_key="x", base_url="http://other"))

    assert first.dispatcher.headers()["Authorization"] == "Bearer first"
    assert second.dispatcher.headers()["Authorization"] == "Bearer second"
    assert first.config.base_url != second.config.base_url


@pytest.mark.asyncio
async def test_product_categories_returns_status_url(server, client):
    """Test that a submission hands back the status URL untouched."""
    server_instance, _ = server
    server_instance.status_url_override = "https://x/job/status/12345"

    status_url = await client.product_categories("Test Product")

    assert status_url == "https://x/job/status/12345"
    submitted = server_instance.requests[-1]
    assert submitted["path"] == "/ecommerce/product_categories"
    assert submitted["body"] == {"content": "Test Product"}


@pytest.mark.asyncio
async def test_translate_sends_language(server, client):
    server_instance, _ = server

    await client.translate("Hello, world!", "French")

    submitted = server_instance.requests[-1]
    assert submitted["path"] == "/content/translate"
    assert submitted["body"] == {"content": "Hello, world!", "language": "French"}


@pytest.mark.asyncio
async def test_optional_parameters_and_voice_tone(server, client):
    server_instance, _ = server

    await client.tours_and_activities_product_categories(
        "Oasis of the Bay",
        city="Ha Long",
        country="Vietnam",
        max_quantity=3,
        voice_tone=VoiceTone.TECH_SAVVY,
    )

    assert server_instance.requests[-1]["body"] == {
        "content": "Oasis of the Bay",
        "city": "Ha Long",
        "country": "Vietnam",
        "max_quantity": 3,
        "voice_tone": "Tech-Savvy",
    }


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method, path",
    [
        ("product_review_sentiment", "/ecommerce/review_sentiment"),
        ("detect_phones", "/content/detect_phones"),
        ("detect_emails", "/content/detect_emails"),
        ("detect_spam", "/content/detect_spam"),
        ("proofread", "/content/proofread"),
        ("travel_review_sentiment", "/tth/review_sentiment"),
        ("related_skills", "/hr/related_skills"),
        ("related_job_positions", "/hr/related_job_positions"),
        ("generate_product_intro", "/ecommerce/product_intro"),
        ("generate_thank_you_email", "/ecommerce/thank_you_email"),
        ("summarize_text", "/content/summarize"),
        ("generate_keywords", "/content/keywords"),
        ("paraphrase", "/content/paraphrase"),
        ("generate_seo_tags", "/seo/generate_tags"),
        ("hospitality_product_categories", "/tth/hospitality_product_categories"),
    ],
)
async def test_content_wrappers(server, client, method, path):
    server_instance, _ = server

    status_url = await getattr(client, method)("Some content")

    assert "/job/status/" in status_url
    assert server_instance.requests[-1]["path"] == path
    assert server_instance.requests[-1]["body"] == {"content": "Some content"}


@pytest.mark.asyncio
async def test_generate_job_description(server, client):
    server_instance, _ = server
    parameters = JobDescriptionParameters(
        name="Senior PHP Engineer",
        company_name="ACME LTD",
        required_skills=["PHP8", "Laravel"],
        remote=True,
        voice_tone=VoiceTone.FORMAL,
    )

    await client.generate_job_description(parameters)

    assert server_instance.requests[-1]["path"] == "/hr/job_description"
    assert server_instance.requests[-1]["body"] == {
        "name": "Senior PHP Engineer",
        "company_name": "ACME LTD",
        "required_skills": ["PHP8", "Laravel"],
        "remote": True,
        "voice_tone": "Formal",
    }


@pytest.mark.asyncio
async def test_parse_resume_uploads_file(server, client, tmp_path):
    server_instance, _ = server
    resume = tmp_path / "cv.pdf"
    resume.write_bytes(b"%PDF-1.4 fake")

    status_url = await client.parse_resume(resume, language="English")

    assert "/job/status/" in status_url
    submitted = server_instance.requests[-1]
    assert submitted["path"] == "/hr/parse_resume"
    assert submitted["body"] == {"file": "cv.pdf", "language": "English"}


@pytest.mark.asyncio
async def test_missing_required_parameter_is_not_submitted(server, client):
    server_instance, _ = server

    with pytest.raises(TaskParameterError):
        await client.translate("Hello", "")

    assert server_instance.requests == []


@pytest.mark.asyncio
async def test_submit_job_to_unknown_path(client):
    with pytest.raises(TransportError) as excinfo:
        await client.submit_job("/nowhere/at_all", {"content": "x"})

    assert excinfo.value.status == 404


@pytest.mark.asyncio
async def test_submit_and_wait(server, client, sleep):
    """Test submission followed by polling until success."""
    server_instance, _ = server
    server_instance.status_script = [
        ({"type": "content_keywords", "status": "pending"}, {"Retry-After": "2"}),
        ({"type": "content_keywords", "status": "success", "result": ["a", "b"]}, {}),
    ]

    record = await client.submit_and_wait(JobType.CONTENT_KEYWORDS, content="Lorem ipsum")

    assert record.status == JobStatus.success
    assert record.job_type == JobType.CONTENT_KEYWORDS
    assert record.result == ["a", "b"]
    assert sleep.calls == [2]


@pytest.mark.asyncio
async def test_ping(client):
    response = await client.ping()

    assert response["ping"] == "pong"
    assert "timestamp" in response


@pytest.mark.asyncio
async def test_quota(server, client):
    server_instance, _ = server

    info = await client.quota()

    assert info.timestamp == datetime(2024, 10, 6, 12, 0, tzinfo=timezone.utc)
    assert info.subscribed is True
    assert info.subscription_words_used == 5000
    assert info.subscription_words_quota == 100000
    assert server_instance.requests[-1]["path"] == "/quota"
    assert server_instance.requests[-1]["headers"]["Authorization"] == "Bearer test_api_key"


@pytest.mark.asyncio
async def test_quota_without_timestamp(server, client):
    server_instance, _ = server
    server_instance.quota_payload.pop("timestamp")

    assert await client.quota() is None


@pytest.mark.asyncio
async def test_quota_with_null_trial_end(server, client):
    server_instance, _ = server
    server_instance.quota_payload["trial_ends"] = None

    info = await client.quota()

    assert info.trial_ends is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "field, value",
    [
        ("trial_ends", "not-a-date"),
        ("timestamp", "yesterday-ish"),
        ("subscription_words_used", "lots"),
    ],
)
async def test_quota_with_malformed_field(server, client, field, value):
    server_instance, _ = server
    server_instance.quota_payload[field] = value

    with pytest.raises(DecodingError):
        await client.quota()


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [[], ["timestamp"], "quota"])
async def test_quota_body_not_an_object(server, client, payload):
    server_instance, _ = server
    server_instance.quota_payload = payload

    with pytest.raises(DecodingError):
        await client.quota()
