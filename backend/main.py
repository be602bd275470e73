import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from dependencies import get_route_resolver
from routers.markers_router import router as markers_router
from routers.chains_router import router as chains_router
from routers.routes_router import router as routes_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # rehydrate the route cache before any resolution
    get_route_resolver()
    yield


app = FastAPI(title="Marker Chain API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(markers_router, prefix="/api", tags=["markers"])
app.include_router(chains_router, prefix="/api", tags=["chains"])
app.include_router(routes_router, prefix="/api", tags=["routes"])


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.HOST, port=settings.PORT)
