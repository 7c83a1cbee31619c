"""Tests for directory lookups."""

from unittest.mock import Mock, patch

import httpx
import pytest

from cruxconnect import CruxId, HttpDirectory, InMemoryDirectory

FOO = CruxId.from_string("foo123@cruxdev.crux")


@pytest.mark.asyncio
async def test_inmemory_directory_register_and_unregister():
    directory = InMemoryDirectory()
    assert await directory.resolve(FOO) is None

    directory.register("Foo123@cruxdev.crux", "02abcd")
    assert await directory.resolve(FOO) == "02abcd"

    directory.unregister(FOO)
    assert await directory.resolve(FOO) is None


@pytest.mark.asyncio
@patch("httpx.AsyncClient.get")
async def test_http_directory_resolves_public_key(mock_get):
    mock_get.return_value = Mock(status_code=200, json=Mock(return_value={"publicKey": "02abcd"}))

    directory = HttpDirectory("http://directory.local/")
    assert await directory.resolve(FOO) == "02abcd"
    mock_get.assert_awaited_once_with("http://directory.local/identities/foo123@cruxdev.crux")


@pytest.mark.asyncio
@patch("httpx.AsyncClient.get")
async def test_http_directory_not_found_is_none(mock_get):
    mock_get.return_value = Mock(status_code=404)

    assert await HttpDirectory("http://directory.local").resolve(FOO) is None


@pytest.mark.asyncio
@patch("httpx.AsyncClient.get")
async def test_http_directory_propagates_backend_errors(mock_get):
    mock_get.side_effect = httpx.ConnectError("directory unreachable")

    with pytest.raises(httpx.ConnectError):
        await HttpDirectory("http://directory.local").resolve(FOO)
