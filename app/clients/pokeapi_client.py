import httpx
import logging
from typing import TypeVar
from urllib.parse import quote
from fastapi import HTTPException
from pydantic import BaseModel, ValidationError
from app.models import (
    NamedResource,
    NamedResourceList,
    Pokemon,
    PokemonSpecies,
    TypeDetail,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def path_segment(key: str | int) -> str:
    """
    Lowercases and percent-encodes a lookup key so it stays a single path segment.
    "?", "#", "/" and dot segments would otherwise be read as URL syntax.
    """
    segment = quote(str(key).lower(), safe="")
    if segment.strip(".") == "":
        segment = segment.replace(".", "%2E")
    return segment


# Raised for every upstream failure except a 404 on a keyed lookup
class APIClientError(HTTPException):
    def __init__(self, detail: str, status_code: int = 500):
        super().__init__(status_code=status_code, detail=f"External API Error: {detail}")


class PokeAPIClient:
    BASE_URL = "https://pokeapi.co/api/v2"
    MAX_SEARCH_LIMIT = 1000

    def __init__(self, base_url: str = None, timeout: float = 10.0, max_search_limit: int = None):
        self.client = httpx.AsyncClient(base_url=base_url or self.BASE_URL, timeout=timeout)
        self.max_search_limit = max_search_limit or self.MAX_SEARCH_LIMIT

    async def _fetch(
        self,
        url: str,
        model: type[ModelT],
        action: str,
        params: dict = None,
        allow_missing: bool = False,
    ) -> ModelT | None:
        """
        GETs a PokeAPI resource and validates it against `model`.
        Returns None on 404 when `allow_missing` is set; any other failure raises APIClientError.
        """
        logger.debug(f"PokeAPI request: {url} params={params}")

        try:
            response = await self.client.get(url, params=params)
            if allow_missing and response.status_code == 404:
                logger.info(f"PokeAPI resource not found: {url}")
                return None
            response.raise_for_status()  # Raises for 4xx/5xx status codes
            return model.model_validate(response.json())

        except httpx.HTTPStatusError as e:
            detail = f"{action}: PokeAPI failed with status {e.response.status_code}"
            logger.error(detail)
            raise APIClientError(detail=detail) from e
        except httpx.RequestError as e:
            # Handle network failures/timeouts
            detail = f"{action}: PokeAPI network error: {str(e) or type(e).__name__}"
            logger.error(detail)
            raise APIClientError(detail=detail) from e
        except ValidationError as e:
            detail = f"{action}: PokeAPI returned an unexpected response format ({e.error_count()} invalid fields)"
            logger.error(detail)
            raise APIClientError(detail=detail) from e
        except ValueError as e:
            # Body was not JSON at all
            detail = f"{action}: PokeAPI returned an unexpected response format"
            logger.error(detail)
            raise APIClientError(detail=detail) from e

    async def get_pokemon_list(self, limit: int = 20, offset: int = 0) -> NamedResourceList:
        """Fetches one window of the Pokemon index (name + url references)."""
        return await self._fetch(
            "/pokemon",
            NamedResourceList,
            "Failed to fetch Pokemon list",
            params={"limit": limit, "offset": offset},
        )

    async def get_pokemon(self, name_or_id: str | int) -> Pokemon | None:
        """Fetches a single Pokemon by name or ID. Returns None if PokeAPI does not know it."""
        # PokeAPI names are lowercase
        key = path_segment(name_or_id)
        return await self._fetch(
            f"/pokemon/{key}",
            Pokemon,
            "Failed to fetch Pokemon",
            allow_missing=True,
        )

    async def get_pokemon_species(self, name_or_id: str | int) -> PokemonSpecies | None:
        """Fetches species data (descriptions, genus, color). Returns None if not found."""
        key = path_segment(name_or_id)
        return await self._fetch(
            f"/pokemon-species/{key}",
            PokemonSpecies,
            "Failed to fetch Pokemon species",
            allow_missing=True,
        )

    async def search_pokemon(self, query: str, limit: int = None) -> NamedResourceList:
        """
        Searches Pokemon by partial name.
        Only the first `limit` entries of the index are scanned, matches past that window are missed.
        """
        limit = limit or self.max_search_limit
        data = await self._fetch(
            "/pokemon",
            NamedResourceList,
            "Failed to search Pokemon",
            params={"limit": limit, "offset": 0},
        )

        needle = query.lower()
        matches = [entry for entry in data.results if needle in entry.name.lower()]
        logger.info(f"Search '{query}' matched {len(matches)} of {len(data.results)} scanned Pokemon")

        return NamedResourceList(count=len(matches), results=matches)

    async def get_types(self) -> list[NamedResource]:
        """Fetches every type PokeAPI knows about, in upstream order."""
        data = await self._fetch("/type", NamedResourceList, "Failed to fetch Pokemon types")
        return data.results

    async def get_pokemon_by_type(self, type_name: str) -> list[NamedResource] | None:
        """
        Fetches all Pokemon of a type. PokeAPI does not paginate this endpoint,
        so the full membership list is returned. Returns None if the type does not exist.
        """
        data = await self._fetch(
            f"/type/{path_segment(type_name)}",
            TypeDetail,
            "Failed to fetch Pokemon by type",
            allow_missing=True,
        )
        if data is None:
            return None
        # Unwrap the {slot, pokemon: {name, url}} nesting
        return [entry.pokemon for entry in data.pokemon]

    async def close(self):
        """Close the underlying HTTP connection pool (call on app shutdown)."""
        await self.client.aclose()
