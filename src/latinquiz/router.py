import logging
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, File, Form, Request, Response, UploadFile
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from .config import settings
from .controller import QuizController
from .errors import EmptyVocabulary, QuizError, VocabularyError
from .globals import get_session_registry, get_vocab_manager, templates
from .models import QuizState
from .registry import SessionRegistry
from .vocabulary import VocabularyManager, read_import_csv

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Dependencies ---
def get_session_id(
    session_id: Optional[str] = Cookie(None, alias=settings.SESSION_COOKIE_NAME)
) -> Optional[str]:
    return session_id


def _error(exc: Exception, status_code: int) -> JSONResponse:
    return JSONResponse(
        {"error": getattr(exc, "code", "error"), "message": str(exc)},
        status_code=status_code,
    )


def _no_session() -> JSONResponse:
    return JSONResponse(
        {"error": "no_session", "message": "Session invalid"}, status_code=401
    )


def _parse_target_grade(raw: str) -> Optional[float]:
    try:
        grade = float(raw.replace(",", "."))
    except (AttributeError, ValueError):
        return None
    return grade if 1.0 <= grade <= 10.0 else None


# --- Pages ---
@router.get("/", response_class=HTMLResponse)
async def home(request: Request, vocab: VocabularyManager = Depends(get_vocab_manager)):
    return templates.TemplateResponse(
        request, "start.html", {"total_words": len(vocab.get_active_vocabulary())}
    )


@router.post("/start")
async def start_quiz_session(
    request: Request,
    player_name: str = Form(""),
    target_grade: str = Form(""),
    restart: str = Form(""),
    session_id: Optional[str] = Depends(get_session_id),
    registry: SessionRegistry = Depends(get_session_registry),
    vocab: VocabularyManager = Depends(get_vocab_manager),
):
    controller = registry.get(session_id)
    if controller is None:
        session_id, controller = registry.create()

    name = player_name.strip() or None
    grade = _parse_target_grade(target_grade)
    # The restart button on the result page replays with the same player
    if restart:
        name = name or controller.player_name
        grade = grade or controller.target_grade

    try:
        controller.restart(vocab.get_active_vocabulary(), player_name=name, target_grade=grade)
    except EmptyVocabulary as e:
        logger.warning(f"Session {session_id} could not start: {e}")
        response = templates.TemplateResponse(
            request, "start.html", {"total_words": 0, "error": str(e)}, status_code=422
        )
    else:
        response = RedirectResponse(url="/quiz", status_code=302)

    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session_id,
        httponly=True,
        samesite="Lax",
    )
    return response


@router.get("/quiz", response_class=HTMLResponse)
async def quiz_page(
    request: Request,
    session_id: Optional[str] = Depends(get_session_id),
    registry: SessionRegistry = Depends(get_session_registry),
):
    controller = registry.get(session_id)
    if controller is None or controller.state == QuizState.NOT_STARTED:
        return RedirectResponse(url="/", status_code=302)
    if controller.state == QuizState.FINISHED:
        return RedirectResponse(url="/result", status_code=302)
    return templates.TemplateResponse(request, "quiz.html", {})


@router.get("/result", response_class=HTMLResponse)
async def result_page(
    request: Request,
    session_id: Optional[str] = Depends(get_session_id),
    registry: SessionRegistry = Depends(get_session_registry),
):
    controller = registry.get(session_id)
    if controller is None or not controller.finished:
        return RedirectResponse(url="/", status_code=302)
    return templates.TemplateResponse(request, "result.html", {"results": controller.results()})


@router.get("/vocabulary", response_class=HTMLResponse)
async def vocabulary_page(
    request: Request,
    session_id: Optional[str] = Depends(get_session_id),
    registry: SessionRegistry = Depends(get_session_registry),
    vocab: VocabularyManager = Depends(get_vocab_manager),
):
    controller = registry.get(session_id)
    if controller is not None:
        if controller.state == QuizState.IN_PROGRESS:
            return RedirectResponse(url="/quiz", status_code=302)
        if controller.state != QuizState.MANAGING_VOCABULARY:
            controller.enter_vocabulary_manager()
    return templates.TemplateResponse(request, "vocabulary.html", {"counts": vocab.counts()})


# --- Quiz API ---
@router.get("/api/state")
async def get_state(
    session_id: Optional[str] = Depends(get_session_id),
    registry: SessionRegistry = Depends(get_session_registry),
):
    controller = registry.get(session_id)
    if controller is None:
        return _no_session()
    return controller.snapshot()


@router.post("/api/answer")
async def submit_answer(
    answer: str = Form(""),
    session_id: Optional[str] = Depends(get_session_id),
    registry: SessionRegistry = Depends(get_session_registry),
):
    controller: Optional[QuizController] = registry.get(session_id)
    if controller is None:
        return _no_session()
    try:
        result = controller.submit(answer)
    except QuizError as e:
        status_code = 422 if e.code == "invalid_submission" else 409
        return _error(e, status_code)
    return result


@router.get("/api/result")
async def get_result_data(
    session_id: Optional[str] = Depends(get_session_id),
    registry: SessionRegistry = Depends(get_session_registry),
):
    controller = registry.get(session_id)
    if controller is None:
        return _no_session()
    try:
        return controller.results()
    except QuizError as e:
        return _error(e, 409)


@router.post("/api/reset")
async def reset_session(
    response: Response,
    session_id: Optional[str] = Depends(get_session_id),
    registry: SessionRegistry = Depends(get_session_registry),
):
    registry.drop(session_id)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"status": "success"}


# --- Vocabulary API ---
@router.get("/api/vocabulary")
async def list_vocabulary(q: str = "", vocab: VocabularyManager = Depends(get_vocab_manager)):
    return {
        "counts": vocab.counts(),
        "words": vocab.search(q),
        "removed": vocab.get_removed(),
    }


@router.post("/api/vocabulary")
async def add_vocabulary(
    headword: str = Form(""),
    translations: str = Form(""),
    vocab: VocabularyManager = Depends(get_vocab_manager),
):
    try:
        entry = vocab.add_entry(headword, translations)
    except VocabularyError as e:
        return _error(e, 422)
    return {"status": "success", "entry": entry}


@router.delete("/api/vocabulary/{headword:path}")
async def remove_vocabulary(headword: str, vocab: VocabularyManager = Depends(get_vocab_manager)):
    try:
        vocab.remove_entry(headword)
    except VocabularyError as e:
        return _error(e, 404)
    return {"status": "success"}


@router.post("/api/vocabulary/import")
async def import_vocabulary(
    file: UploadFile = File(...),
    vocab: VocabularyManager = Depends(get_vocab_manager),
):
    data = await file.read()
    try:
        entries = read_import_csv(data)
    except VocabularyError as e:
        logger.warning(f"Rejected import {file.filename}: {e}")
        return _error(e, 422)
    return {"status": "success", "imported": vocab.import_entries(entries)}


@router.post("/api/vocabulary/close")
async def close_vocabulary_manager(
    session_id: Optional[str] = Depends(get_session_id),
    registry: SessionRegistry = Depends(get_session_registry),
):
    controller = registry.get(session_id)
    if controller is not None and controller.state == QuizState.MANAGING_VOCABULARY:
        controller.leave_vocabulary_manager()
    return {"status": "success", "state": controller.state if controller else QuizState.NOT_STARTED}


@router.post("/api/vocabulary/{headword:path}/restore")
async def restore_vocabulary(headword: str, vocab: VocabularyManager = Depends(get_vocab_manager)):
    try:
        vocab.restore_entry(headword)
    except VocabularyError as e:
        return _error(e, 404)
    return {"status": "success"}
