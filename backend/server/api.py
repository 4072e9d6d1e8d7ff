"""
Tool API routes — mounted as a sub-router on the main FastAPI app.

GET  /api/tools          list enabled tools with their JSON schemas
POST /api/tools/{name}   run one tool; body is the tool's arguments
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, HTTPException, Request

from core.errors import ToolArgumentError, ToolNotFoundError
from core.models import ToolInfo, ToolResult
from server.tools import call_tool, enabled_tools

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/api", tags=["tools"])


def _disabled(request: Request) -> List[str]:
    return request.app.state.settings.disabled_tools


@router.get("/tools", response_model=List[ToolInfo])
async def list_tools(request: Request):
    return [t.info() for t in enabled_tools(_disabled(request))]


@router.post("/tools/{name}", response_model=ToolResult)
async def run_tool(request: Request, name: str, arguments: Optional[Dict[str, Any]] = Body(default=None)):
    if name in _disabled(request):
        raise HTTPException(status_code=404, detail=f"Tool '{name}' is disabled.")
    try:
        return await call_tool(request.app.state.generator, name, arguments)
    except ToolNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ToolArgumentError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception:
        logger.exception("Tool %s failed", name)
        raise HTTPException(status_code=500, detail="Tool call failed")
