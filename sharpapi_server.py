import random
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from aiohttp import web
from loguru import logger

from sharpapi_client.catalog import TASK_CATALOG

TASK_PATHS = {spec.path: spec.job_type for spec in TASK_CATALOG.values()}

QUOTA_SNAPSHOT = {
    "timestamp": "2024-10-06T12:00:00Z",
    "on_trial": False,
    "trial_ends": "2024-11-06T12:00:00Z",
    "subscribed": True,
    "current_subscription_start": "2024-10-01T12:00:00Z",
    "current_subscription_end": "2024-11-01T12:00:00Z",
    "subscription_words_quota": 100000,
    "subscription_words_used": 5000,
    "subscription_words_used_percentage": 5,
}


class SharpApiServer:
    """In-process stand-in for the SharpAPI service.

    Jobs stay pending until completion_time seconds after submission, then
    succeed (or fail, with probability error_rate). Tests can instead queue
    exact status responses in status_script, or verbatim bodies in
    raw_status_script, consumed one per status request.
    """

    def __init__(
        self,
        completion_time: float = 10.0,
        error_rate: float = 0.1,
        retry_after: Optional[str] = "1",
    ):
        self.completion_time = completion_time
        self.error_rate = error_rate
        self.retry_after = retry_after
        self.status_script: List[Tuple[Dict[str, Any], Dict[str, str]]] = []
        self.raw_status_script: List[Tuple[str, Dict[str, str]]] = []
        self.status_url_override: Optional[str] = None
        self.quota_payload: Any = dict(QUOTA_SNAPSHOT)
        self.requests: List[Dict[str, Any]] = []
        self.jobs: Dict[str, Dict[str, Any]] = {}
        self.runner: Optional[web.AppRunner] = None
        self.app = web.Application()
        self.app.router.add_get("/ping", self.handle_ping)
        self.app.router.add_get("/quota", self.handle_quota)
        self.app.router.add_get("/job/status/{job_id}", self.handle_status)
        self.app.router.add_post("/{group}/{task}", self.handle_submit)
        self.logger = logger

    def _record(self, request: web.Request, body: Any = None) -> None:
        self.requests.append(
            {
                "method": request.method,
                "path": request.path,
                "query": dict(request.query),
                "headers": dict(request.headers),
                "body": body,
            }
        )

    async def handle_ping(self, request):
        self._record(request)
        return web.json_response({"ping": "pong", "timestamp": datetime.now().isoformat()})

    async def handle_quota(self, request):
        self._record(request)
        return web.json_response(self.quota_payload)

    async def handle_submit(self, request):
        job_type = TASK_PATHS.get(request.path)
        if job_type is None:
            return web.json_response({"message": "Not found"}, status=404)

        if request.content_type == "multipart/form-data":
            form = await request.post()
            body = {
                key: value.filename if isinstance(value, web.FileField) else value
                for key, value in form.items()
            }
        else:
            body = await request.json()
        self._record(request, body)

        job_id = str(uuid.uuid4())
        self.jobs[job_id] = {"type": job_type.value, "submitted_at": datetime.now(), "params": body}
        status_url = self.status_url_override or f"{request.url.origin()}/job/status/{job_id}"
        self.logger.info(f"Accepted {job_type.value} job {job_id}")
        return web.json_response({"status_url": status_url}, status=202)

    async def handle_status(self, request):
        self._record(request)
        job_id = request.match_info["job_id"]

        if self.raw_status_script:
            text, headers = self.raw_status_script.pop(0)
            self.logger.info("Returning raw status body")
            return web.Response(text=text, content_type="application/json", headers=headers)

        if self.status_script:
            attributes, headers = self.status_script.pop(0)
            self.logger.info(f"Returning scripted status {attributes.get('status')}")
            return web.json_response(
                {"data": {"id": job_id, "attributes": attributes}}, headers=headers
            )

        job = self.jobs.get(job_id)
        if job is None:
            return web.json_response({"message": "Job not found"}, status=404)

        attributes: Dict[str, Any] = {"type": job["type"]}
        headers: Dict[str, str] = {}
        elapsed = (datetime.now() - job["submitted_at"]).total_seconds()

        if elapsed < self.completion_time:
            self.logger.info(f"Returning pending status (elapsed: {elapsed:.1f}s)")
            attributes["status"] = "pending"
            if self.retry_after is not None:
                headers["Retry-After"] = self.retry_after
        elif job.setdefault("failed", random.random() < self.error_rate):
            self.logger.info("Returning failed status")
            attributes["status"] = "failed"
        else:
            self.logger.info("Returning success status")
            attributes["status"] = "success"
            attributes["result"] = {"echo": job["params"]}

        return web.json_response(
            {"data": {"id": job_id, "attributes": attributes}}, headers=headers
        )

    async def start(self, port: int = 8080):
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        site = web.TCPSite(self.runner, "localhost", port)
        await site.start()
        self.logger.info(f"Server started on port {port}")
        return site

    async def stop(self):
        if self.runner is None:
            return
        await self.runner.cleanup()
        self.logger.info("Server stopped")
