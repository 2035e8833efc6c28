"""API router - mounts every resource router under /api."""

from fastapi import APIRouter

from .execution_stream import router as stream_router
from .executions import router as executions_router
from .nodes import router as nodes_router
from .tools import router as tools_router
from .workflows import router as workflows_router

router = APIRouter(prefix="/api")

router.include_router(workflows_router, tags=["Workflows"])
router.include_router(executions_router, tags=["Executions"])
router.include_router(nodes_router, tags=["Nodes"])
router.include_router(stream_router, tags=["Streaming"])
router.include_router(tools_router, tags=["Tools"])
