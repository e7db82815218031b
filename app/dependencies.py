from app.clients import PokeAPIClient
from app.config import Settings, get_settings
from app.services import PokemonService
from fastapi import Depends

_poke_client = None

def get_poke_client() -> PokeAPIClient:
    global _poke_client
    if _poke_client is None:
        settings = get_settings()
        _poke_client = PokeAPIClient(
            base_url=settings.pokeapi_base_url,
            timeout=settings.request_timeout,
            max_search_limit=settings.max_search_limit,
        )
    return _poke_client

async def close_poke_client():
    global _poke_client
    if _poke_client is not None:
        await _poke_client.close()
        _poke_client = None

def get_pokemon_service(
    poke_client: PokeAPIClient = Depends(get_poke_client),
    settings: Settings = Depends(get_settings),
) -> PokemonService:
    return PokemonService(
        poke_client=poke_client,
        default_limit=settings.default_page_limit,
        max_concurrency=settings.max_concurrency,
    )
