import asyncio

from sharpapi_server import SharpApiServer
from sharpapi_client.errors import SharpApiError
from sharpapi_client.models import ClientConfig, JobRecord, PollingPolicy, VoiceTone
from sharpapi_client.sharpapi_client import SharpApiClient


async def status_changed(record: JobRecord):
    print(f"Job {record.id} status changed to: {record.status.value}")


async def main():
    PORT = 8000
    server = SharpApiServer(completion_time=5.0, error_rate=0.1, retry_after="1")
    await server.start(port=PORT)
    print(f"Server started on http://localhost:{PORT}")

    config = ClientConfig(
        api_key="example-key",
        base_url=f"http://localhost:{PORT}",
        polling=PollingPolicy(base_interval_seconds=2.0, max_wait_seconds=30.0),
    )
    client = SharpApiClient(config=config, on_status_change=status_changed)

    try:
        print(f"Ping: {await client.ping()}")
        quota = await client.quota()
        if quota is not None:
            print(f"Words used: {quota.subscription_words_used}/{quota.subscription_words_quota}")

        status_url = await client.product_categories(
            "Lenovo Chromebook Laptop 15.6\" HD Touchscreen",
            max_quantity=5,
            voice_tone=VoiceTone.NEUTRAL,
        )
        print(f"Status URL: {status_url}")

        job = await client.fetch_results(status_url)
        print(f"Final status: {job.status.value}")
        if job.is_terminal:
            print(job.result_json())
        else:
            print("Gave up waiting, the job is still running")
    except SharpApiError as e:
        print(f"Error occurred: {e}")
    finally:
        await server.stop()


if __name__ == "__main__":
    asyncio.run(main())
