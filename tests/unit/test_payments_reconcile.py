import asyncio

import httpx

from reservation.payments.reconcile import (
    ReconcileOutcome,
    classify_status,
    http_status_fetcher,
    reconcile_payment_status,
)


def _fetcher(*responses):
    calls = {"n": 0}

    async def fetch(order_no):
        value = responses[min(calls["n"], len(responses) - 1)]
        calls["n"] += 1
        if isinstance(value, Exception):
            raise value
        return value

    return fetch, calls


def test_classify_status():
    assert classify_status("PAID") == ReconcileOutcome.SUCCESS
    assert classify_status("payment_timeout") == ReconcileOutcome.FAILURE
    assert classify_status("CANCELED_UNPAID") == ReconcileOutcome.FAILURE
    assert classify_status("PENDING") is None
    assert classify_status("RETURNED") is None
    assert classify_status(None) is None


def test_paid_after_pending_polls():
    fetch, calls = _fetcher("PENDING", "PENDING", "PAID")
    result = asyncio.run(reconcile_payment_status("resv_1", fetch, interval=0, max_polls=10))
    assert result.outcome == ReconcileOutcome.SUCCESS
    assert result.polls == 3
    assert calls["n"] == 3


def test_failed_status_stops_polling():
    fetch, calls = _fetcher("PAYMENT_FAILED")
    result = asyncio.run(reconcile_payment_status("resv_1", fetch, interval=0, max_polls=10))
    assert result.outcome == ReconcileOutcome.FAILURE
    assert calls["n"] == 1


def test_pending_after_max_polls():
    fetch, calls = _fetcher("PENDING")
    result = asyncio.run(reconcile_payment_status("resv_1", fetch, interval=0, max_polls=4))
    assert result.outcome == ReconcileOutcome.PENDING
    assert result.status == "PENDING"
    assert calls["n"] == 4


def test_errors_are_retried_then_fail_on_last_poll():
    fetch, calls = _fetcher(RuntimeError("down"), "PAID")
    result = asyncio.run(reconcile_payment_status("resv_1", fetch, interval=0, max_polls=3))
    assert result.outcome == ReconcileOutcome.SUCCESS

    fetch, calls = _fetcher(RuntimeError("down"))
    result = asyncio.run(reconcile_payment_status("resv_1", fetch, interval=0, max_polls=3))
    assert result.outcome == ReconcileOutcome.FAILURE
    assert calls["n"] == 3


def test_http_status_fetcher_reads_status_endpoint():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v1/payments/resv_1/status"
        return httpx.Response(200, json={"orderNo": "resv_1", "status": "PAID"})

    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            fetch = http_status_fetcher(client, "http://testserver")
            return await reconcile_payment_status("resv_1", fetch, interval=0, max_polls=2)

    result = asyncio.run(scenario())
    assert result.outcome == ReconcileOutcome.SUCCESS
