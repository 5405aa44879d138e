from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from formbuilder.errors import NotFoundError, SubmissionNetworkError

router = APIRouter(prefix="/api/forms")


async def _json_object(request: Request) -> dict:
    try:
        payload = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Request body must be JSON")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Request body must be an object")
    return payload


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"success": False, "message": message}, status_code=status_code)


@router.post("", tags=["api/forms"])
async def api_create_form(request: Request) -> JSONResponse:
    forms = request.app.state.form_service
    payload = await _json_object(request)
    try:
        result = await forms.create_form(payload)
    except ValueError as exc:
        return _error(400, str(exc))
    return JSONResponse({"success": True, "form": result["form"]}, status_code=201)


@router.get("/public/forms", tags=["api/forms"])
async def api_public_forms(request: Request) -> JSONResponse:
    forms = request.app.state.form_service
    return JSONResponse({"success": True, "forms": await forms.list_public_forms()})


@router.get("/user/{user_id}", tags=["api/forms"])
async def api_user_forms(request: Request, user_id: str) -> JSONResponse:
    forms = request.app.state.form_service
    return JSONResponse({"success": True, "forms": await forms.list_forms(user_id)})


@router.get("/{form_id}", tags=["api/forms"])
async def api_get_form(request: Request, form_id: str) -> JSONResponse:
    forms = request.app.state.form_service
    try:
        form = await forms.get_form(form_id)
    except NotFoundError as exc:
        return _error(404, str(exc))
    return JSONResponse({"success": True, "form": form})


@router.put("/{form_id}", tags=["api/forms"])
async def api_update_form(request: Request, form_id: str) -> JSONResponse:
    forms = request.app.state.form_service
    payload = await _json_object(request)
    try:
        form = await forms.update_form(form_id, payload)
    except NotFoundError as exc:
        return _error(404, str(exc))
    except ValueError as exc:
        return _error(400, str(exc))
    return JSONResponse({"success": True, "form": form})


@router.delete("/{form_id}", tags=["api/forms"])
async def api_delete_form(request: Request, form_id: str) -> JSONResponse:
    forms = request.app.state.form_service
    try:
        await forms.delete_form(form_id)
    except NotFoundError as exc:
        return _error(404, str(exc))
    return JSONResponse(
        {"success": True, "message": "Form and its submissions deleted successfully"}
    )


@router.post("/{form_id}/submit", tags=["api/submissions"])
async def api_submit_form(request: Request, form_id: str) -> JSONResponse:
    submissions = request.app.state.submission_service
    payload = await _json_object(request)
    try:
        result = await submissions.submit_form(form_id, payload)
    except NotFoundError as exc:
        return _error(404, str(exc))
    except SubmissionNetworkError as exc:
        return _error(500, str(exc))
    return JSONResponse(result, status_code=201)


@router.get("/{form_id}/submissions", tags=["api/submissions"])
async def api_list_submissions(request: Request, form_id: str) -> JSONResponse:
    submissions = request.app.state.submission_service
    try:
        items = await submissions.list_submissions(form_id)
    except NotFoundError as exc:
        return _error(404, str(exc))
    return JSONResponse({"success": True, "submissions": items})
