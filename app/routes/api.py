import logging
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from app.clients.pokeapi_client import APIClientError
from app.dependencies import get_pokemon_service
from app.models import (
    ApiErrorResponse,
    ApiResponse,
    PokemonDetails,
    PokemonPage,
    PokemonType,
    SearchResult,
    TypePokemonPage,
)
from app.routes.params import parse_positive_int
from app.services.pokemon_service import PokemonService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["api"],
    responses={
        status.HTTP_404_NOT_FOUND: {"model": ApiErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ApiErrorResponse},
    },
)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ApiErrorResponse(error=message).model_dump())


def _upstream_failure(e: APIClientError) -> JSONResponse:
    # The upstream error text is passed through to the caller as-is
    logger.error(f"API request failed: {e.detail}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, e.detail)


@router.get(
    "/pokemon",
    response_model=ApiResponse[PokemonPage],
    summary="Returns one page of Pokemon with full details",
)
async def api_get_all_pokemon(
    page: str | None = None,
    limit: str | None = None,
    service: PokemonService = Depends(get_pokemon_service),
):
    try:
        data = await service.get_all_pokemon(parse_positive_int(page, 1), parse_positive_int(limit))
    except APIClientError as e:
        return _upstream_failure(e)
    return ApiResponse(data=data)


# Declared before /pokemon/{name_or_id} so "search" is not taken for a name
@router.get(
    "/pokemon/search",
    response_model=ApiResponse[SearchResult],
    summary="Searches Pokemon by exact or partial name",
)
async def api_search_pokemon(
    q: str | None = None,
    service: PokemonService = Depends(get_pokemon_service),
):
    try:
        data = await service.search_pokemon(q)
    except APIClientError as e:
        return _upstream_failure(e)
    return ApiResponse(data=data)


@router.get(
    "/pokemon/{name_or_id}",
    response_model=ApiResponse[PokemonDetails],
    summary="Returns a single Pokemon by name or ID",
)
async def api_get_pokemon_details(
    name_or_id: str,
    service: PokemonService = Depends(get_pokemon_service),
):
    try:
        pokemon = await service.get_pokemon_details(name_or_id)
    except APIClientError as e:
        return _upstream_failure(e)

    if pokemon is None:
        return error_response(status.HTTP_404_NOT_FOUND, f"Pokemon not found: {name_or_id}")
    return ApiResponse(data=pokemon)


@router.get(
    "/types",
    response_model=ApiResponse[list[PokemonType]],
    summary="Returns every Pokemon type",
)
async def api_get_types(service: PokemonService = Depends(get_pokemon_service)):
    try:
        types = await service.get_pokemon_types()
    except APIClientError as e:
        return _upstream_failure(e)
    return ApiResponse(data=types)


@router.get(
    "/types/{type_name}",
    response_model=ApiResponse[TypePokemonPage],
    summary="Returns one page of Pokemon of the given type",
)
async def api_get_pokemon_by_type(
    type_name: str,
    page: str | None = None,
    service: PokemonService = Depends(get_pokemon_service),
):
    try:
        data = await service.get_pokemon_by_type(type_name, parse_positive_int(page, 1))
    except APIClientError as e:
        return _upstream_failure(e)

    if data is None:
        return error_response(status.HTTP_404_NOT_FOUND, f"Type not found: {type_name}")
    return ApiResponse(data=data)
