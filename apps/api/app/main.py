import logging

from fastapi import FastAPI

from apps.api.app.routers.greetings import router as greetings_router
from apps.api.app.routers.health import router as health_router

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI()
app.include_router(greetings_router)
app.include_router(health_router)
