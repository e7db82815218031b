import logging
from contextlib import asynccontextmanager
from pathlib import Path
import uvicorn
from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.config import get_settings
from app.dependencies import close_poke_client
from app.logging_config import configure_logging
from app.routes import api, pages

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(f"Pokedex starting ({settings.app_env}), PokeAPI at {settings.pokeapi_base_url}")
    yield
    # Release the shared PokeAPI connection pool
    await close_poke_client()


app = FastAPI(
    title="Pokedex",
    description="Browse, search and filter Pokemon from PokeAPI, as HTML pages or JSON.",
    lifespan=lifespan,
)

app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
app.include_router(pages.router)
app.include_router(api.router)


# Unmatched routes (and any HTTPException that escapes a route) get the same
# error shape as the handled ones: JSON envelope under /api, error page elsewhere
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if request.url.path.startswith("/api"):
        return api.error_response(exc.status_code, str(exc.detail))
    if exc.status_code == 404:
        return pages.render_error(
            request, exc.status_code, "Page not found", "The page you are looking for does not exist."
        )
    return pages.render_error(request, exc.status_code, "Something went wrong", str(exc.detail))


def run():
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
    )


if __name__ == "__main__":
    run()
