import asyncio
import logging
import math
from app.clients.pokeapi_client import PokeAPIClient
from app.models import PokemonDetails, PokemonPage, PokemonType, SearchResult, TypePokemonPage
from app.services.formatting import format_name, format_pokemon_data

logger = logging.getLogger(__name__)


class PokemonService:
    # Pseudo-types PokeAPI lists that no Pokemon actually has
    HIDDEN_TYPES = ("unknown", "shadow")
    # Max partial matches resolved into full details per search
    SEARCH_RESULT_LIMIT = 20

    def __init__(self, poke_client: PokeAPIClient, default_limit: int = 20, max_concurrency: int = 20):
        self._poke_client = poke_client
        self._default_limit = default_limit
        self._max_concurrency = max_concurrency

    async def get_pokemon_details(self, name_or_id: str | int) -> PokemonDetails | None:
        """
        Fetches a Pokemon and enriches it with species data.
        Returns None if the Pokemon does not exist. Species data is best-effort:
        any failure fetching it falls back to the display defaults.
        """
        pokemon = await self._poke_client.get_pokemon(name_or_id)
        if pokemon is None:
            return None

        species = None
        try:
            species = await self._poke_client.get_pokemon_species(pokemon.id)
        except Exception as e:
            logger.warning(f"Species data unavailable for Pokemon {pokemon.id}, using defaults: {e}")

        return format_pokemon_data(pokemon, species)

    async def get_all_pokemon(self, page: int = 1, limit: int = None) -> PokemonPage:
        """Fetches one page of the Pokemon index with full details for every entry."""
        limit = limit or self._default_limit
        offset = (page - 1) * limit

        data = await self._poke_client.get_pokemon_list(limit=limit, offset=offset)
        details = await self._fetch_details([entry.name for entry in data.results])

        return PokemonPage(
            pokemon=[p for p in details if p is not None],
            **self._paging(page, limit, data.count),
        )

    async def search_pokemon(self, query: str | None) -> SearchResult:
        """
        Exact name/ID match first, then a partial name search over the scanned index.
        For partial searches total_count is the number of matches found, which can be
        larger than the number of Pokemon returned (capped at SEARCH_RESULT_LIMIT).
        """
        if not query or not query.strip():
            return SearchResult(pokemon=[], total_count=0)
        query = query.strip()

        exact_match = await self.get_pokemon_details(query)
        if exact_match is not None:
            return SearchResult(pokemon=[exact_match], total_count=1)

        search_results = await self._poke_client.search_pokemon(query)
        names = [entry.name for entry in search_results.results[: self.SEARCH_RESULT_LIMIT]]
        details = await self._fetch_details(names)

        return SearchResult(
            pokemon=[p for p in details if p is not None],
            total_count=search_results.count,
        )

    async def get_pokemon_types(self) -> list[PokemonType]:
        types = await self._poke_client.get_types()
        return [
            PokemonType(name=t.name, display_name=format_name(t.name))
            for t in types
            if t.name not in self.HIDDEN_TYPES
        ]

    async def get_pokemon_by_type(
        self, type_name: str, page: int = 1, limit: int = None
    ) -> TypePokemonPage | None:
        """
        Fetches one page of Pokemon of the given type. Returns None if the type does not exist.
        PokeAPI returns the whole membership list, so the page is sliced here
        before any detail is fetched.
        """
        members = await self._poke_client.get_pokemon_by_type(type_name)
        if members is None:
            return None

        limit = limit or self._default_limit
        offset = (page - 1) * limit
        page_members = members[offset:offset + limit]

        details = await self._fetch_details([entry.name for entry in page_members])

        return TypePokemonPage(
            pokemon=[p for p in details if p is not None],
            type=type_name,
            **self._paging(page, limit, len(members)),
        )

    async def _fetch_details(self, names: list[str]) -> list[PokemonDetails | None]:
        """
        Resolves full details for every name concurrently, at most `max_concurrency` at a time.
        Results keep the order of `names`. A failure for any name fails the whole batch.
        """
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def fetch_one(name: str) -> PokemonDetails | None:
            async with semaphore:
                return await self.get_pokemon_details(name)

        return await asyncio.gather(*(fetch_one(name) for name in names))

    @staticmethod
    def _paging(page: int, limit: int, total_count: int) -> dict:
        offset = (page - 1) * limit
        return {
            "total_count": total_count,
            "current_page": page,
            "total_pages": math.ceil(total_count / limit),
            "has_next_page": offset + limit < total_count,
            "has_prev_page": page > 1,
        }
