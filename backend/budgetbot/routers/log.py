"""Shortcut endpoint for logging a spending from a forwarded bank SMS.

The raw text is rewritten by the LLM into the ``"Amount [CODE] Name"`` grammar
and then goes through the regular ingestion path.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from .. import crud
from ..db import get_db
from ..deps import get_llm
from ..errors import ConfigurationError, ForbiddenError, NotFoundError, ParseError, RequestError
from ..llm import LLMOracle
from ..models import TransactionKind
from ..schemas import LogBody
from ..services import RecordedTransaction, create_transaction_from_message

logger = logging.getLogger(__name__)

router = APIRouter(tags=["log"])


def _log_message(db: Session, llm: LLMOracle | None, user_id: str, message: str | None) -> dict[str, Any]:
    if not message or not message.strip():
        raise RequestError("Message is required")
    logger.info("Received SMS log request for %s (%d chars)", user_id, len(message))

    user = crud.get_user(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    if not user.ai_features_enabled:
        raise ForbiddenError("AI features are not enabled for this user")
    if llm is None:
        logger.error("OPENAI_API_KEY is not set")
        raise ConfigurationError("OpenAI API key not configured")

    extracted = llm.extract_transaction(message)
    try:
        spending = create_transaction_from_message(db, user, extracted, TransactionKind.SPENDING)
    except ParseError as exc:
        raise ParseError("Failed to parse transaction from AI response", ai_response=extracted) from exc

    recorded = RecordedTransaction(kind=TransactionKind.SPENDING, transaction=spending)
    return {
        "success": True,
        "message": "Spending logged successfully",
        "spending": recorded.summary().model_dump(),
    }


@router.get("/{user_id}/log")
def log_from_query(
    user_id: str,
    message: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    llm: LLMOracle | None = Depends(get_llm),
) -> dict[str, Any]:
    return _log_message(db, llm, user_id, message)


@router.post("/{user_id}/log")
def log_from_body(
    user_id: str,
    body: Optional[LogBody] = Body(default=None),
    message: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    llm: LLMOracle | None = Depends(get_llm),
) -> dict[str, Any]:
    text = (body.first_text() if body else None) or message
    return _log_message(db, llm, user_id, text)
