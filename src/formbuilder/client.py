from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from formbuilder.config import Settings
from formbuilder.errors import InvalidFormError, NotFoundError, SubmissionNetworkError

logger = logging.getLogger(__name__)

GENERIC_SUBMIT_ERROR = "An error occurred while submitting the form"


class _APIClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url, timeout=self._timeout, transport=self._transport
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        async with self._client() as client:
            response = await client.request(method, path, **kwargs)
        if response.status_code == 404:
            raise NotFoundError(_message(response, "Form not found"))
        if response.status_code == 400:
            raise InvalidFormError(_message(response, "Bad request"))
        response.raise_for_status()
        return response.json()


def _message(response: httpx.Response, default: str) -> str:
    try:
        payload = response.json()
    except ValueError:
        return default
    if isinstance(payload, dict):
        return str(payload.get("message") or payload.get("detail") or default)
    return default


class HTTPFormService(_APIClient):
    async def create_form(self, definition: Mapping[str, Any]) -> dict[str, Any]:
        payload = await self._request("POST", "/forms", json=dict(definition))
        form_id = (payload.get("form") or {}).get("formId") or payload.get("formId")
        logger.info("Form created remotely: %s", form_id)
        return {"success": bool(payload.get("success")), "formId": form_id, "form": payload.get("form")}

    async def update_form(self, form_id: str, patch: Mapping[str, Any]) -> dict[str, Any]:
        payload = await self._request("PUT", f"/forms/{form_id}", json=dict(patch))
        return payload["form"]

    async def delete_form(self, form_id: str) -> None:
        await self._request("DELETE", f"/forms/{form_id}")

    async def get_form(self, form_id: str) -> dict[str, Any]:
        payload = await self._request("GET", f"/forms/{form_id}")
        return payload["form"]

    async def list_forms(self, user_id: str) -> list[dict[str, Any]]:
        payload = await self._request("GET", f"/forms/user/{user_id}")
        return payload.get("forms", [])

    async def list_public_forms(self) -> list[dict[str, Any]]:
        payload = await self._request("GET", "/forms/public/forms")
        return payload.get("forms", [])


class HTTPSubmissionService(_APIClient):
    async def submit_form(self, form_id: str, values: Mapping[str, Any]) -> dict[str, Any]:
        try:
            payload = await self._request("POST", f"/forms/{form_id}/submit", json=dict(values))
        except (httpx.HTTPError, ValueError) as exc:
            logger.exception("Submission failed: %s", form_id)
            raise SubmissionNetworkError(GENERIC_SUBMIT_ERROR) from exc
        if not payload.get("success"):
            raise SubmissionNetworkError(str(payload.get("message") or GENERIC_SUBMIT_ERROR))
        logger.info("Submission sent: %s", form_id)
        return {"success": True, "message": payload.get("message", "")}

    async def list_submissions(self, form_id: str) -> list[dict[str, Any]]:
        payload = await self._request("GET", f"/forms/{form_id}/submissions")
        return payload.get("submissions", [])


def connect(
    settings: Settings, transport: httpx.AsyncBaseTransport | None = None
) -> tuple[HTTPFormService, HTTPSubmissionService]:
    return (
        HTTPFormService(settings.api_base_url, transport=transport),
        HTTPSubmissionService(settings.api_base_url, transport=transport),
    )
