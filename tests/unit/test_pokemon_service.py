import asyncio
import pytest
from unittest.mock import AsyncMock
from app.services.pokemon_service import PokemonService
from app.models import (
    NamedResource,
    NamedResourceList,
    Pokemon,
    PokemonDetails,
    PokemonSpecies,
    SearchResult,
    TypePokemonPage,
)
from app.clients.pokeapi_client import APIClientError

# Sample data returned by the MOCKED client
MOCK_SPECIES = PokemonSpecies.model_validate(
    {
        "capture_rate": 190,
        "base_happiness": 70,
        "color": {"name": "yellow", "url": ""},
        "flavor_text_entries": [{"flavor_text": "It stores electricity.", "language": {"name": "en", "url": ""}}],
        "genera": [{"genus": "Mouse Pokémon", "language": {"name": "en", "url": ""}}],
    }
)


def make_pokemon(name: str, pokemon_id: int = 1) -> Pokemon:
    return Pokemon(id=pokemon_id, name=name, height=4, weight=60)


def resource_list(names: list[str], count: int = None) -> NamedResourceList:
    return NamedResourceList(
        count=len(names) if count is None else count,
        results=[NamedResource(name=name) for name in names],
    )


def pokedex(*names: str):
    """get_pokemon side effect: knows `names` (numbered in order), None for anything else."""
    known = {name: make_pokemon(name, index) for index, name in enumerate(names, start=1)}
    return lambda name_or_id: known.get(str(name_or_id).lower())


@pytest.fixture
def poke_client():
    # Use AsyncMock for methods that are awaited
    client = AsyncMock()
    client.get_pokemon.return_value = make_pokemon("pikachu", 25)
    client.get_pokemon_species.return_value = MOCK_SPECIES
    return client


@pytest.fixture
def pokemon_service(poke_client):
    return PokemonService(poke_client=poke_client, default_limit=20, max_concurrency=20)


# --- DETAILS ---

@pytest.mark.asyncio
async def test_get_pokemon_details_merges_species(pokemon_service, poke_client):
    result = await pokemon_service.get_pokemon_details("Pikachu")

    poke_client.get_pokemon.assert_called_once_with("Pikachu")
    # Species is looked up by the numeric id of the fetched Pokemon
    poke_client.get_pokemon_species.assert_called_once_with(25)

    assert isinstance(result, PokemonDetails)
    assert result.id == 25
    assert result.display_name == "Pikachu"
    assert result.description == "It stores electricity."
    assert result.genus == "Mouse Pokémon"
    assert result.color == "yellow"
    assert result.capture_rate == 190
    assert result.base_happiness == 70


@pytest.mark.asyncio
async def test_get_pokemon_details_not_found(pokemon_service, poke_client):
    poke_client.get_pokemon.return_value = None

    result = await pokemon_service.get_pokemon_details("missingno")

    assert result is None
    poke_client.get_pokemon_species.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "species_failure",
    [
        APIClientError(detail="Failed to fetch Pokemon species: PokeAPI failed with status 500"),
        RuntimeError("unexpected"),
    ],
)
async def test_species_failure_degrades_to_defaults(pokemon_service, poke_client, species_failure):
    """A species outage must not take down the detail lookup."""
    poke_client.get_pokemon_species.side_effect = species_failure

    result = await pokemon_service.get_pokemon_details("pikachu")

    assert result is not None
    assert result.id == 25
    assert result.description == "No description available."
    assert result.genus == "Unknown"
    assert result.color == "gray"
    assert result.capture_rate == 0
    assert result.base_happiness == 0


@pytest.mark.asyncio
async def test_species_absent_degrades_to_defaults(pokemon_service, poke_client):
    poke_client.get_pokemon_species.return_value = None

    result = await pokemon_service.get_pokemon_details("pikachu")

    assert result.description == "No description available."
    assert result.color == "gray"


@pytest.mark.asyncio
async def test_pokemon_fetch_failure_propagates(pokemon_service, poke_client):
    poke_client.get_pokemon.side_effect = APIClientError(detail="Failed to fetch Pokemon: PokeAPI failed with status 502")

    with pytest.raises(APIClientError) as excinfo:
        await pokemon_service.get_pokemon_details("pikachu")

    assert "status 502" in excinfo.value.detail


# --- LIST PAGE ---

@pytest.mark.asyncio
async def test_get_all_pokemon_fetches_details_for_window(pokemon_service, poke_client):
    names = ["bulbasaur", "ivysaur", "venusaur"]
    poke_client.get_pokemon_list.return_value = resource_list(names, count=1302)
    poke_client.get_pokemon.side_effect = pokedex(*names)

    result = await pokemon_service.get_all_pokemon(page=1, limit=3)

    poke_client.get_pokemon_list.assert_called_once_with(limit=3, offset=0)
    assert [p.name for p in result.pokemon] == names
    assert result.total_count == 1302
    assert result.current_page == 1
    assert result.total_pages == 434
    assert result.has_next_page is True
    assert result.has_prev_page is False


@pytest.mark.asyncio
async def test_get_all_pokemon_drops_entries_that_resolve_to_absent(pokemon_service, poke_client):
    """An index entry PokeAPI can no longer resolve is left out; the upstream total is kept."""
    poke_client.get_pokemon_list.return_value = resource_list(["bulbasaur", "missingno", "venusaur"], count=3)
    poke_client.get_pokemon.side_effect = pokedex("bulbasaur", "venusaur")

    result = await pokemon_service.get_all_pokemon(page=1, limit=3)

    assert poke_client.get_pokemon.call_count == 3
    assert [p.name for p in result.pokemon] == ["bulbasaur", "venusaur"]
    assert result.total_count == 3
    assert result.has_next_page is False


@pytest.mark.asyncio
async def test_get_all_pokemon_uses_default_limit(pokemon_service, poke_client):
    poke_client.get_pokemon_list.return_value = resource_list([], count=45)

    result = await pokemon_service.get_all_pokemon(2)

    poke_client.get_pokemon_list.assert_called_once_with(limit=20, offset=20)
    assert result.total_pages == 3


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "page, limit, total_count",
    [
        (1, 20, 45),
        (2, 20, 45),
        (3, 20, 45),
        (2, 20, 40),
        (1, 10, 10),
        (1, 20, 0),
        (5, 7, 30),
    ],
)
async def test_get_all_pokemon_paging_flags_are_consistent(pokemon_service, poke_client, page, limit, total_count):
    poke_client.get_pokemon_list.return_value = resource_list([], count=total_count)
    offset = (page - 1) * limit

    result = await pokemon_service.get_all_pokemon(page, limit)

    assert result.has_next_page == (offset + limit < total_count)
    assert result.has_prev_page == (page > 1)
    assert result.total_pages == -(-total_count // limit)


@pytest.mark.asyncio
async def test_get_all_pokemon_keeps_order_when_calls_finish_out_of_order(pokemon_service, poke_client):
    names = ["slowpoke", "rapidash", "snorlax"]
    delays = {"slowpoke": 0.03, "rapidash": 0.0, "snorlax": 0.01}
    known = pokedex(*names)

    async def fetch(name):
        await asyncio.sleep(delays[name])
        return known(name)

    poke_client.get_pokemon_list.return_value = resource_list(names)
    poke_client.get_pokemon.side_effect = fetch

    result = await pokemon_service.get_all_pokemon(1, 3)

    assert [p.name for p in result.pokemon] == names


@pytest.mark.asyncio
async def test_fan_out_respects_concurrency_cap(poke_client):
    service = PokemonService(poke_client=poke_client, default_limit=20, max_concurrency=2)
    names = [f"pokemon-{i}" for i in range(6)]
    known = pokedex(*names)
    in_flight = 0
    peak = 0

    async def fetch(name):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return known(name)

    poke_client.get_pokemon_list.return_value = resource_list(names)
    poke_client.get_pokemon.side_effect = fetch

    result = await service.get_all_pokemon(1, 6)

    assert len(result.pokemon) == 6
    assert peak == 2


@pytest.mark.asyncio
async def test_get_all_pokemon_one_failed_detail_fails_the_page(pokemon_service, poke_client):
    names = ["bulbasaur", "ivysaur", "venusaur"]
    known = pokedex(*names)

    def fetch(name):
        if name == "ivysaur":
            raise APIClientError(detail="Failed to fetch Pokemon: PokeAPI failed with status 500")
        return known(name)

    poke_client.get_pokemon_list.return_value = resource_list(names)
    poke_client.get_pokemon.side_effect = fetch

    with pytest.raises(APIClientError):
        await pokemon_service.get_all_pokemon(1, 3)


# --- SEARCH ---

@pytest.mark.asyncio
@pytest.mark.parametrize("query", ["", "   ", None])
async def test_blank_search_makes_no_upstream_calls(pokemon_service, poke_client, query):
    result = await pokemon_service.search_pokemon(query)

    assert result == SearchResult(pokemon=[], total_count=0)
    assert poke_client.mock_calls == []


@pytest.mark.asyncio
async def test_exact_search_bypasses_partial_search(pokemon_service, poke_client):
    result = await pokemon_service.search_pokemon("pikachu")

    assert [p.name for p in result.pokemon] == ["pikachu"]
    assert result.total_count == 1
    poke_client.search_pokemon.assert_not_called()


@pytest.mark.asyncio
async def test_partial_search_resolves_first_twenty_matches(pokemon_service, poke_client):
    """total_count reports every match found, even those past the 20 resolved ones."""
    names = [f"chu-{i}" for i in range(25)]
    poke_client.get_pokemon.side_effect = pokedex(*names)
    poke_client.search_pokemon.return_value = resource_list(names)

    result = await pokemon_service.search_pokemon("chu")

    poke_client.search_pokemon.assert_called_once_with("chu")
    # One exact lookup for "chu" plus twenty detail lookups
    assert poke_client.get_pokemon.call_count == 21
    assert [p.name for p in result.pokemon] == names[:20]
    assert result.total_count == 25


@pytest.mark.asyncio
async def test_partial_search_drops_unresolvable_matches(pokemon_service, poke_client):
    poke_client.get_pokemon.side_effect = pokedex("pichu", "raichu")
    poke_client.search_pokemon.return_value = resource_list(["pichu", "pikachu-gone", "raichu"])

    result = await pokemon_service.search_pokemon("  chu ")

    poke_client.search_pokemon.assert_called_once_with("chu")
    assert [p.name for p in result.pokemon] == ["pichu", "raichu"]
    assert result.total_count == 3


# --- TYPES ---

@pytest.mark.asyncio
async def test_get_pokemon_types_excludes_reserved_types(pokemon_service, poke_client):
    poke_client.get_types.return_value = [
        NamedResource(name=name)
        for name in ["normal", "fighting", "unknown", "fire", "shadow", "stellar"]
    ]

    result = await pokemon_service.get_pokemon_types()

    assert [(t.name, t.display_name) for t in result] == [
        ("normal", "Normal"),
        ("fighting", "Fighting"),
        ("fire", "Fire"),
        ("stellar", "Stellar"),
    ]


@pytest.mark.asyncio
async def test_get_pokemon_by_type_unknown_type(pokemon_service, poke_client):
    poke_client.get_pokemon_by_type.return_value = None

    assert await pokemon_service.get_pokemon_by_type("plasma") is None
    poke_client.get_pokemon.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "page, expected_count, has_next, has_prev",
    [
        (1, 20, True, False),
        (2, 20, True, True),
        (3, 5, False, True),
        (4, 0, False, True),
    ],
)
async def test_get_pokemon_by_type_paginates_membership(
    pokemon_service, poke_client, page, expected_count, has_next, has_prev
):
    names = [f"fire-{i}" for i in range(45)]
    poke_client.get_pokemon_by_type.return_value = [NamedResource(name=name) for name in names]
    poke_client.get_pokemon.side_effect = pokedex(*names)

    result = await pokemon_service.get_pokemon_by_type("fire", page, 20)

    assert isinstance(result, TypePokemonPage)
    assert result.type == "fire"
    assert len(result.pokemon) == expected_count
    assert result.total_count == 45
    assert result.total_pages == 3
    assert result.current_page == page
    assert result.has_next_page is has_next
    assert result.has_prev_page is has_prev
    # Details are fetched only for the requested slice
    assert poke_client.get_pokemon.call_count == expected_count
    assert [p.name for p in result.pokemon] == names[(page - 1) * 20:page * 20]
