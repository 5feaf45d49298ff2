import asyncio

import pytest
from lsprotocol import types
from coralls.lsp.utils.capabilities import SessionConfig
from coralls.lsp.utils.models import DEFAULT_SETTINGS, SETTINGS_SECTION, ExampleSettings, Pending, Resolved
from coralls.lsp.utils.settings_cache import SettingsCache, SettingsFetchError, parse_settings


URI = "file:///program.coral"


def test_default_settings():
    assert DEFAULT_SETTINGS.max_number_of_problems == 1000


def test_parse_settings_accepts_camel_case_alias():
    assert parse_settings({"maxNumberOfProblems": 3}).max_number_of_problems == 3


def test_parse_settings_none_yields_defaults():
    assert parse_settings(None) == DEFAULT_SETTINGS


def test_parse_settings_rejects_invalid_payload():
    with pytest.raises(SettingsFetchError):
        parse_settings({"maxNumberOfProblems": "many"})


@pytest.mark.asyncio
async def test_global_settings_used_without_configuration_capability(cache_without_configuration, fetcher):
    settings = await cache_without_configuration.get(URI)
    assert settings == DEFAULT_SETTINGS
    fetcher.assert_not_called()
    assert len(cache_without_configuration) == 0


@pytest.mark.asyncio
async def test_configuration_change_replaces_global_settings(cache_without_configuration):
    cache_without_configuration.on_configuration_changed({SETTINGS_SECTION: {"maxNumberOfProblems": 2}})
    settings = await cache_without_configuration.get(URI)
    assert settings.max_number_of_problems == 2


@pytest.mark.asyncio
async def test_configuration_change_without_section_restores_defaults(cache_without_configuration):
    cache_without_configuration.on_configuration_changed({SETTINGS_SECTION: {"maxNumberOfProblems": 2}})
    cache_without_configuration.on_configuration_changed({})
    assert await cache_without_configuration.get(URI) == DEFAULT_SETTINGS

    cache_without_configuration.on_configuration_changed(None)
    assert await cache_without_configuration.get(URI) == DEFAULT_SETTINGS


@pytest.mark.asyncio
async def test_settings_fetched_once_and_cached(cache_with_configuration, fetcher):
    first = await cache_with_configuration.get(URI)
    second = await cache_with_configuration.get(URI)

    assert first.max_number_of_problems == 5
    assert second == first
    fetcher.assert_awaited_once_with(URI)
    assert isinstance(cache_with_configuration.get_entry(URI), Resolved)


@pytest.mark.asyncio
async def test_each_resource_has_its_own_entry(cache_with_configuration, fetcher):
    await cache_with_configuration.get(URI)
    await cache_with_configuration.get("file:///other.coral")
    assert fetcher.await_count == 2
    assert len(cache_with_configuration) == 2


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_pending_fetch():
    release = asyncio.Event()
    calls = []

    async def slow_fetcher(resource):
        calls.append(resource)
        await release.wait()
        return {"maxNumberOfProblems": 7}

    cache = SettingsCache(SessionConfig(has_configuration_capability=True), slow_fetcher)
    first = asyncio.ensure_future(cache.get(URI))
    second = asyncio.ensure_future(cache.get(URI))
    await asyncio.sleep(0)

    assert isinstance(cache.get_entry(URI), Pending), "Expected a pending entry while the fetch is in flight"

    release.set()
    results = await asyncio.gather(first, second)

    assert calls == [URI], "Expected a single fetch for concurrent callers"
    assert [s.max_number_of_problems for s in results] == [7, 7]
    assert cache.get_entry(URI) == Resolved(ExampleSettings(maxNumberOfProblems=7))


@pytest.mark.asyncio
async def test_configuration_change_forces_fresh_fetch(cache_with_configuration, fetcher):
    await cache_with_configuration.get(URI)

    fetcher.return_value = {"maxNumberOfProblems": 9}
    cache_with_configuration.on_configuration_changed({"ignored": True})
    assert cache_with_configuration.get_entry(URI) is None

    settings = await cache_with_configuration.get(URI)
    assert settings.max_number_of_problems == 9
    assert fetcher.await_count == 2


@pytest.mark.asyncio
async def test_invalidation_during_fetch_keeps_new_state():
    release = asyncio.Event()

    async def slow_fetcher(resource):
        await release.wait()
        return {"maxNumberOfProblems": 4}

    cache = SettingsCache(SessionConfig(has_configuration_capability=True), slow_fetcher)
    pending = asyncio.ensure_future(cache.get(URI))
    await asyncio.sleep(0)

    cache.on_configuration_changed(None)
    release.set()

    assert (await pending).max_number_of_problems == 4
    assert cache.get_entry(URI) is None, "A fetch started before invalidation must not repopulate the cache"


@pytest.mark.asyncio
async def test_failed_fetch_propagates_and_leaves_no_entry(cache_with_configuration, fetcher):
    fetcher.side_effect = RuntimeError("host went away")

    with pytest.raises(SettingsFetchError):
        await cache_with_configuration.get(URI)
    assert cache_with_configuration.get_entry(URI) is None

    fetcher.side_effect = None
    fetcher.return_value = {"maxNumberOfProblems": 1}
    settings = await cache_with_configuration.get(URI)
    assert settings.max_number_of_problems == 1, "Expected the next call to retry the fetch"


@pytest.mark.asyncio
async def test_null_section_from_host_yields_defaults(cache_with_configuration, fetcher):
    fetcher.return_value = None
    assert await cache_with_configuration.get(URI) == DEFAULT_SETTINGS


@pytest.mark.asyncio
async def test_closing_document_drops_its_entry(cache_with_configuration, fetcher):
    await cache_with_configuration.get(URI)
    cache_with_configuration.handle_document_close(
        types.DidCloseTextDocumentParams(text_document=types.TextDocumentIdentifier(uri=URI))
    )
    assert cache_with_configuration.get_entry(URI) is None

    await cache_with_configuration.get(URI)
    assert fetcher.await_count == 2
