"""
Web Routes - API endpoints and page routes
=========================================

This module defines all web routes for the ELIZA responder interface.
Every request answers from the rule table that is current when the
request arrives.
"""

from fastapi import APIRouter, Request, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, field_validator

from core.exceptions import ElizaError
from core.logging import get_logger

logger = get_logger("web.routes")

router = APIRouter()


# === Page Routes ===

@router.get("/", response_class=HTMLResponse)
async def chat_page(request: Request):
    """Render the chat page."""
    templates = request.app.state.templates
    config = request.app.state.config

    return templates.TemplateResponse(
        request,
        "chat.html",
        {
            "app_name": config.app_name,
            "user_label": config.ui.user_label,
            "bot_label": config.ui.bot_label,
        }
    )


# === API Routes ===

class ChatMessage(BaseModel):
    """Chat message model."""
    message: str

    @field_validator("message")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("message cannot be blank")
        return value


@router.get("/health")
async def health(request: Request):
    """Liveness check with the size of the active rule table."""
    table = request.app.state.responder.table
    return {
        "status": "ok",
        "rules": len(table),
        "catch_all": table.has_catch_all(),
    }


@router.post("/api/respond")
async def respond(request: Request, chat: ChatMessage):
    """Reply to one message."""
    responder = request.app.state.responder
    response = responder.respond(chat.message)
    return {"message": chat.message, "response": response}


@router.get("/api/rules")
async def list_rules(request: Request):
    """List the rules of the active table in match order."""
    table = request.app.state.responder.table
    return {
        "rules": [
            {
                "position": position,
                "name": rule.name,
                "pattern": rule.pattern.source,
                "match_type": rule.pattern.match_type.value,
                "templates": len(rule.templates),
            }
            for position, rule in enumerate(table, start=1)
        ]
    }


@router.post("/api/rules/reload")
def reload_rules(request: Request):
    """Rebuild the rule table from configuration (runs in the threadpool)."""
    responder = request.app.state.responder

    try:
        table = responder.reload()
    except ElizaError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return {"success": True, "rules": len(table), "catch_all": table.has_catch_all()}
