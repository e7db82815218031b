"""HTML page routes for the Pokedex UI."""
import logging
from pathlib import Path
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from app.clients.pokeapi_client import APIClientError
from app.dependencies import get_pokemon_service
from app.routes.params import parse_positive_int
from app.services.pokemon_service import PokemonService

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

router = APIRouter(tags=["pages"])
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render_error(request: Request, status_code: int, message: str, error: str) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "error.html",
        {"message": message, "error": error},
        status_code=status_code,
    )


def _upstream_failure(request: Request, message: str, e: APIClientError) -> HTMLResponse:
    logger.error(f"{message}: {e.detail}")
    return render_error(request, status.HTTP_500_INTERNAL_SERVER_ERROR, message, e.detail)


@router.get("/", response_class=HTMLResponse)
async def home_page(
    request: Request,
    page: str | None = None,
    limit: str | None = None,
    service: PokemonService = Depends(get_pokemon_service),
):
    """Render the paginated list of all Pokemon."""
    page_limit = parse_positive_int(limit)
    try:
        data = await service.get_all_pokemon(parse_positive_int(page, 1), page_limit)
        types = await service.get_pokemon_types()
    except APIClientError as e:
        return _upstream_failure(request, "Failed to load Pokemon", e)

    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "result": data,
            "types": types,
            "search_query": "",
            "selected_type": "",
            "base_path": "/",
            "limit": page_limit,
        },
    )


@router.get("/search", response_class=HTMLResponse)
async def search_page(
    request: Request,
    q: str | None = None,
    service: PokemonService = Depends(get_pokemon_service),
):
    """Render search results as a single, unpaginated page."""
    try:
        types = await service.get_pokemon_types()
        data = await service.search_pokemon(q)
    except APIClientError as e:
        return _upstream_failure(request, "Search failed", e)

    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "result": data,
            "types": types,
            "current_page": 1,
            "total_pages": 1,
            "has_next_page": False,
            "has_prev_page": False,
            "search_query": q or "",
            "selected_type": "",
        },
    )


@router.get("/type/{type_name}", response_class=HTMLResponse)
async def type_page(
    type_name: str,
    request: Request,
    page: str | None = None,
    service: PokemonService = Depends(get_pokemon_service),
):
    """Render the paginated list of Pokemon of one type."""
    try:
        types = await service.get_pokemon_types()
        data = await service.get_pokemon_by_type(type_name, parse_positive_int(page, 1))
    except APIClientError as e:
        return _upstream_failure(request, "Failed to load Pokemon by type", e)

    if data is None:
        return render_error(
            request, status.HTTP_404_NOT_FOUND, "Type not found", f"No Pokemon type found: {type_name}"
        )

    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "result": data,
            "types": types,
            "search_query": "",
            "selected_type": type_name,
            "base_path": f"/type/{type_name}",
            "limit": None,
        },
    )


@router.get("/pokemon/{name_or_id}", response_class=HTMLResponse)
async def pokemon_page(
    name_or_id: str,
    request: Request,
    service: PokemonService = Depends(get_pokemon_service),
):
    """Render the detail page of a single Pokemon."""
    try:
        pokemon = await service.get_pokemon_details(name_or_id)
    except APIClientError as e:
        return _upstream_failure(request, "Failed to load Pokemon details", e)

    if pokemon is None:
        return render_error(
            request,
            status.HTTP_404_NOT_FOUND,
            "Pokemon not found",
            f"No Pokemon found with name or ID: {name_or_id}",
        )

    return templates.TemplateResponse(request, "pokemon.html", {"pokemon": pokemon})
