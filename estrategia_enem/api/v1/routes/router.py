# Main Router - estrategia_enem/api/v1/routes/router.py
from fastapi import APIRouter
from estrategia_enem.api.v1.routes.chat.chat import router as chat_router
from estrategia_enem.api.v1.routes.essays.essays import router as essays_router
from estrategia_enem.api.v1.routes.exams.exams import router as exams_router
from estrategia_enem.api.v1.routes.stats.stats import router as stats_router

router = APIRouter()

# Authentication happens upstream; handlers receive an already-verified userId
router.include_router(chat_router)
router.include_router(essays_router)
router.include_router(exams_router)
router.include_router(stats_router)
