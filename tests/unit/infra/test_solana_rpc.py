"""Tests for SolanaRPCClient — JSON-RPC communication."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from tenacity import wait_none

from usdcindexer.exceptions import ExternalServiceError, TransientFetchError
from usdcindexer.infra.blockchain.solana.rpc_client import SolanaRPCClient


@pytest.fixture(autouse=True)
def no_retry_wait(monkeypatch):
    monkeypatch.setattr(SolanaRPCClient._call.retry, "wait", wait_none())


@pytest.fixture()
def mock_http():
    return AsyncMock()


@pytest.fixture()
def rpc(mock_http):
    return SolanaRPCClient(rpc_url="https://api.mainnet-beta.solana.com", http_client=mock_http)


def _mock_response(data: dict, status_code: int = 200):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = data
    return resp


def _sent_payload(mock_http) -> dict:
    call_args = mock_http.post.call_args
    return call_args[1]["json"] if "json" in call_args[1] else call_args[0][1]


class TestGetSignatures:
    async def test_returns_signatures(self, rpc, mock_http):
        sigs = [
            {"signature": "sig1", "slot": 101, "blockTime": 1700000001, "err": None},
            {"signature": "sig2", "slot": 100, "blockTime": 1700000000, "err": None},
        ]
        mock_http.post.return_value = _mock_response({"jsonrpc": "2.0", "id": 1, "result": sigs})

        result = await rpc.get_signatures("SomeAddress123")
        assert len(result) == 2
        assert result[0]["signature"] == "sig1"
        assert result[1]["slot"] == 100

    async def test_none_result(self, rpc, mock_http):
        mock_http.post.return_value = _mock_response({"jsonrpc": "2.0", "id": 1, "result": None})

        result = await rpc.get_signatures("SomeAddress123")
        assert result == []

    async def test_pagination_params(self, rpc, mock_http):
        mock_http.post.return_value = _mock_response({"jsonrpc": "2.0", "id": 1, "result": []})

        await rpc.get_signatures("Addr", before="prevSig", limit=500)
        payload = _sent_payload(mock_http)
        assert payload["method"] == "getSignaturesForAddress"
        assert payload["params"][0] == "Addr"
        assert payload["params"][1]["before"] == "prevSig"
        assert payload["params"][1]["limit"] == 500

    async def test_first_page_has_no_cursor(self, rpc, mock_http):
        mock_http.post.return_value = _mock_response({"jsonrpc": "2.0", "id": 1, "result": []})

        await rpc.get_signatures("Addr")
        opts = _sent_payload(mock_http)["params"][1]
        assert "before" not in opts
        assert opts["limit"] == 1000

    async def test_limit_capped_at_rpc_maximum(self, rpc, mock_http):
        mock_http.post.return_value = _mock_response({"jsonrpc": "2.0", "id": 1, "result": []})

        await rpc.get_signatures("Addr", limit=5000)
        assert _sent_payload(mock_http)["params"][1]["limit"] == 1000


class TestGetTransaction:
    async def test_returns_tx(self, rpc, mock_http):
        tx_data = {
            "meta": {"preTokenBalances": [], "postTokenBalances": []},
            "blockTime": 1700000000,
        }
        mock_http.post.return_value = _mock_response({"jsonrpc": "2.0", "id": 1, "result": tx_data})

        result = await rpc.get_transaction("someSig123")
        assert result is not None
        assert result["blockTime"] == 1700000000

        payload = _sent_payload(mock_http)
        assert payload["method"] == "getTransaction"
        assert payload["params"][0] == "someSig123"
        assert payload["params"][1]["maxSupportedTransactionVersion"] == 0

    async def test_not_found_returns_none(self, rpc, mock_http):
        mock_http.post.return_value = _mock_response({"jsonrpc": "2.0", "id": 1, "result": None})

        result = await rpc.get_transaction("missingTx")
        assert result is None


class TestRPCErrors:
    async def test_rpc_error_retried_then_raised(self, rpc, mock_http):
        mock_http.post.return_value = _mock_response({
            "jsonrpc": "2.0", "id": 1,
            "error": {"code": -32600, "message": "Invalid request"},
        })

        with pytest.raises(TransientFetchError, match="Invalid request"):
            await rpc.get_transaction("sig")

        assert mock_http.post.call_count == 5

    async def test_rate_limited_status(self, rpc, mock_http):
        mock_http.post.return_value = _mock_response({}, status_code=429)

        with pytest.raises(TransientFetchError, match="429"):
            await rpc.get_signatures("Addr")

    async def test_transport_error_wrapped(self, rpc, mock_http):
        mock_http.post.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(TransientFetchError):
            await rpc.get_signatures("Addr")

    async def test_non_json_body(self, rpc, mock_http):
        resp = MagicMock()
        resp.status_code = 200
        resp.json.side_effect = ValueError("not json")
        mock_http.post.return_value = resp

        with pytest.raises(TransientFetchError):
            await rpc.get_transaction("sig")

    async def test_recovers_after_transient_failure(self, rpc, mock_http):
        mock_http.post.side_effect = [
            _mock_response({}, status_code=503),
            _mock_response({"jsonrpc": "2.0", "id": 1, "result": [{"signature": "sig1"}]}),
        ]

        result = await rpc.get_signatures("Addr")
        assert result == [{"signature": "sig1"}]
        assert mock_http.post.call_count == 2

    @pytest.mark.parametrize("body", [None, [1, 2, 3], "gateway says hi"])
    async def test_non_object_body_retried_then_raised(self, rpc, mock_http, body):
        mock_http.post.return_value = _mock_response(body)

        with pytest.raises(TransientFetchError, match="unexpected"):
            await rpc.get_transaction("sig")

        assert mock_http.post.call_count == 5

    @pytest.mark.parametrize("result", [{"signature": "sig1"}, [{"slot": 1}], ["sig1"]])
    async def test_malformed_signature_list(self, rpc, mock_http, result):
        mock_http.post.return_value = _mock_response({"jsonrpc": "2.0", "id": 1, "result": result})

        with pytest.raises(TransientFetchError, match="Malformed"):
            await rpc.get_signatures("Addr")

    def test_transient_error_is_external_service_error(self):
        assert issubclass(TransientFetchError, ExternalServiceError)
