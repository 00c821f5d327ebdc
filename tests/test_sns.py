import httpx
import pytest
from solders.pubkey import Pubkey

from app.errors import ProviderError
from app.providers.sns import ROOT_DOMAIN_ACCOUNT, SnsProvider, get_domain_key, get_hashed_name, get_name_account_key
from conftest import DOMAIN_OWNER, RECIPIENT


def registry_account(owner: str) -> bytes:
    return bytes(32) + bytes(Pubkey.from_string(owner)) + bytes(32) + b"\x00" * 16


def make_sns(rpc, handler) -> SnsProvider:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="https://sns.test")
    return SnsProvider(rpc, http=http)


def test_domain_key_ignores_sol_suffix_and_is_deterministic():
    assert get_domain_key("alice") == get_domain_key("alice.sol") == get_domain_key("alice.sol")
    assert get_domain_key("alice") != get_domain_key("bob")


def test_subdomain_key_is_derived_from_parent():
    parent = get_name_account_key(get_hashed_name("alice"), parent=ROOT_DOMAIN_ACCOUNT)
    expected = get_name_account_key(get_hashed_name("\0pay"), parent=parent)

    assert get_domain_key("pay.alice.sol") == expected
    assert get_domain_key("pay.alice.sol") != get_domain_key("alice.sol")


def test_domain_key_rejects_deep_names():
    with pytest.raises(ValueError):
        get_domain_key("a.b.c.sol")


async def test_direct_resolve_strips_suffix(rpc):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return httpx.Response(200, json={"s": "ok", "result": RECIPIENT})

    owner = await make_sns(rpc, handler).try_resolve("alice.sol")

    assert owner == RECIPIENT
    assert seen == ["/resolve/alice"]
    rpc.get_account_data.assert_not_called()


async def test_sol_record_used_when_direct_resolve_fails(rpc):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.startswith("/resolve/"):
            return httpx.Response(500, text="upstream down")
        assert request.url.path == "/record-v2/alice.sol/SOL"
        return httpx.Response(200, json={"s": "ok", "result": {"deserialized": RECIPIENT}})

    assert await make_sns(rpc, handler).try_resolve("alice.sol") == RECIPIENT


async def test_registry_derivation_used_when_proxy_paths_fail(rpc):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.startswith("/resolve/"):
            raise httpx.ConnectError("proxy unreachable", request=request)
        return httpx.Response(200, json={"s": "error", "result": "Record not found"})

    rpc.get_account_data.return_value = registry_account(DOMAIN_OWNER)

    owner = await make_sns(rpc, handler).try_resolve("alice.sol")

    assert owner == DOMAIN_OWNER
    rpc.get_account_data.assert_awaited_once_with(get_domain_key("alice"))


async def test_non_address_results_are_skipped(rpc):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"s": "ok", "result": "not-a-key"})

    rpc.get_account_data.return_value = registry_account(DOMAIN_OWNER)

    assert await make_sns(rpc, handler).try_resolve("alice.sol") == DOMAIN_OWNER


async def test_all_strategies_failing_raises(rpc):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"s": "error"})

    rpc.get_account_data.return_value = None

    with pytest.raises(ProviderError):
        await make_sns(rpc, handler).try_resolve("ghost.sol")


async def test_non_sol_domain_only_tries_record_lookup(rpc):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return httpx.Response(200, json={"s": "error"})

    with pytest.raises(ProviderError):
        await make_sns(rpc, handler).try_resolve("bob.superteam")

    assert seen == ["/record-v2/bob.superteam/SOL"]
    rpc.get_account_data.assert_not_called()
