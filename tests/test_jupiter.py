import json

import httpx
import pytest

from app.config import settings
from app.errors import ProviderError, QuoteFailed, TransactionBuildFailed
from app.providers.jupiter import JupiterProvider
from app.services.tokens import SOL_MINT, USDC_MINT
from conftest import USER, make_quote


def make_provider(handler) -> JupiterProvider:
    return JupiterProvider(http=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


async def test_get_quote_sends_oracle_params():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url).split("?")[0]
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"inAmount": "1000000000", "outAmount": "151234567", "slippageBps": 50})

    quote = await make_provider(handler).get_quote(SOL_MINT, USDC_MINT, 1_000_000_000, 50)

    assert seen["url"] == settings.jupiter_quote_url
    assert seen["params"] == {
        "inputMint": SOL_MINT,
        "outputMint": USDC_MINT,
        "amount": "1000000000",
        "slippageBps": "50",
    }
    assert quote.output_amount == 151_234_567
    assert quote.raw["outAmount"] == "151234567"


async def test_quote_error_text_is_preserved():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, text='{"error":"Could not find any route","errorCode":"COULD_NOT_FIND_ANY_ROUTE"}')

    with pytest.raises(QuoteFailed) as exc_info:
        await make_provider(handler).get_quote(SOL_MINT, USDC_MINT, 1, 50)

    assert "COULD_NOT_FIND_ANY_ROUTE" in exc_info.value.message
    assert exc_info.value.status_code == 500


async def test_quote_transport_error_is_quote_failed():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(QuoteFailed):
        await make_provider(handler).get_quote(SOL_MINT, USDC_MINT, 1, 50)


async def test_quote_without_out_amount_fails():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"routePlan": []})

    with pytest.raises(QuoteFailed):
        await make_provider(handler).get_quote(SOL_MINT, USDC_MINT, 1, 50)


async def test_build_swap_transaction_request_body():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"swapTransaction": "AQAB", "lastValidBlockHeight": 42})

    quote = make_quote(SOL_MINT, USDC_MINT, 1_000_000_000, 150_000_000)
    data = await make_provider(handler).build_swap_transaction(quote, USER)

    assert data["swapTransaction"] == "AQAB"
    assert seen["body"] == {
        "quoteResponse": quote.raw,
        "userPublicKey": USER,
        "wrapAndUnwrapSol": True,
        "dynamicComputeUnitLimit": True,
        "prioritizationFeeLamports": "auto",
    }


async def test_build_swap_transaction_error_text_is_preserved():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, text="Invalid quoteResponse")

    quote = make_quote(SOL_MINT, USDC_MINT, 1, 1)
    with pytest.raises(TransactionBuildFailed, match="Invalid quoteResponse"):
        await make_provider(handler).build_swap_transaction(quote, USER)


async def test_search_tokens_parses_metadata():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["query"] == "bonk"
        return httpx.Response(200, json=[{
            "id": "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263",
            "symbol": "Bonk",
            "name": "Bonk",
            "decimals": 5,
            "icon": "https://example.invalid/bonk.png",
            "isVerified": True,
            "tags": ["verified", "strict"],
            "usdPrice": 0.0000212,
            "mcap": 1.6e9,
            "liquidity": 4.1e6,
            "organicScore": 97.5,
            "organicScoreLabel": "high",
            "holderCount": 950000,
            "fdv": 1.8e9,
        }])

    tokens = await make_provider(handler).search_tokens("bonk")

    assert len(tokens) == 1
    bonk = tokens[0]
    assert bonk.mint == "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"
    assert bonk.decimals == 5
    assert bonk.organic_score == 97.5
    assert bonk.holder_count == 950000
    assert bonk.tags == ["verified", "strict"]


async def test_search_tokens_error_raises_provider_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="maintenance")

    with pytest.raises(ProviderError) as exc_info:
        await make_provider(handler).search_tokens("bonk")
    assert exc_info.value.body == "maintenance"


async def test_get_usd_price_reads_keyed_response():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={SOL_MINT: {"usdPrice": 151.25, "decimals": 9}})

    assert await make_provider(handler).get_usd_price(SOL_MINT) == 151.25


async def test_get_usd_price_missing_is_none():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={})

    assert await make_provider(handler).get_usd_price(SOL_MINT) is None


async def test_quote_with_non_json_body_is_quote_failed():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>gateway hiccup</html>")

    with pytest.raises(QuoteFailed, match="gateway hiccup"):
        await make_provider(handler).get_quote(SOL_MINT, USDC_MINT, 1, 50)


async def test_swap_with_non_json_body_is_build_failed():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>gateway hiccup</html>")

    quote = make_quote(SOL_MINT, USDC_MINT, 1, 1)
    with pytest.raises(TransactionBuildFailed, match="gateway hiccup"):
        await make_provider(handler).build_swap_transaction(quote, USER)


async def test_search_with_non_json_body_is_provider_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="not json")

    with pytest.raises(ProviderError, match="Invalid JSON"):
        await make_provider(handler).search_tokens("bonk")
