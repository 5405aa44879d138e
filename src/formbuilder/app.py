from __future__ import annotations

from fastapi import FastAPI

from formbuilder.config import Settings
from formbuilder.routes.api import router as api_router
from formbuilder.services import LocalFormService, LocalSubmissionService
from formbuilder.storage import Storage, init_storage


def create_app(settings: Settings | None = None, storage: Storage | None = None) -> FastAPI:
    settings = settings or Settings()
    storage = storage or init_storage(settings)

    app = FastAPI(
        title="formbuilder",
        openapi_tags=[
            {"name": "api/forms", "description": "REST API: forms"},
            {"name": "api/submissions", "description": "REST API: submissions"},
            {"name": "system", "description": "System"},
        ],
    )

    app.state.settings = settings
    app.state.storage = storage
    app.state.form_service = LocalFormService(storage)
    app.state.submission_service = LocalSubmissionService(storage)

    app.include_router(api_router)

    @app.get("/healthz", tags=["system"])
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    return app
