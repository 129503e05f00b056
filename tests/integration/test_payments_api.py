import re

from reservation.estimate.store import store as estimate_store
from reservation.orders import repository as orders_repository
from reservation.orders import service as orders_service

BUYER = {"buyer_name": "Hong Gildong", "buyer_tel": "010-1234-5678", "buyer_email": "hong@example.com"}


def _fill_cart(client):
    client.post("/api/v1/estimate/dates", json={"check_in": "2024-01-01", "check_out": "2024-01-03"})
    client.post("/api/v1/estimate/items", json={"product_id": "superior-twin"})


def test_init_rejects_empty_cart(client):
    res = client.post("/api/v1/payments/init", json=BUYER)
    assert res.status_code == 400


def test_init_validates_buyer_email(client):
    _fill_cart(client)
    res = client.post("/api/v1/payments/init", json={**BUYER, "buyer_email": "not-an-email"})
    assert res.status_code == 422


def test_init_returns_payment_payload(client):
    _fill_cart(client)
    res = client.post("/api/v1/payments/init", json=BUYER)
    assert res.status_code == 200
    data = res.json()

    order_no = data["orderNo"]
    assert order_no.startswith("resv_")
    init = data["paymentInit"]
    assert init["moid"] == order_no
    assert init["amt"] == "154000"
    assert init["itemName"] == "Superior Twin"
    assert re.fullmatch(r"[0-9a-f]{64}", init["requestHash"])
    assert data["gateway"]["fields"]["ordTel"] == "01012345678"
    assert data["launchUrl"] == f"/payment/launch/{order_no}"
    assert client.get("/api/v1/estimate").json()["orderNo"] == order_no


def test_init_persistence_failure_is_502(client, monkeypatch):
    monkeypatch.setattr("reservation.orders.repository.insert_order", lambda row: None)
    _fill_cart(client)
    assert client.post("/api/v1/payments/init", json=BUYER).status_code == 502


def test_launch_page_renders_autosubmit_form(client):
    _fill_cart(client)
    order_no = client.post("/api/v1/payments/init", json=BUYER).json()["orderNo"]

    res = client.get(f"/payment/launch/{order_no}")
    assert res.status_code == 200
    assert "text/html" in res.headers["content-type"]
    assert 'action="https://testapi.kispg.co.kr/v2/auth"' in res.text
    assert f'name="ordNo" value="{order_no}"' in res.text
    assert "form-action 'self' https://testapi.kispg.co.kr" in res.headers["content-security-policy"]


def test_launch_unknown_order_is_404(client):
    assert client.get("/payment/launch/resv_missing").status_code == 404


def test_gateway_return_records_unverified_result_and_posts_message(client):
    _fill_cart(client)
    order_no = client.post("/api/v1/payments/init", json=BUYER).json()["orderNo"]

    res = client.post("/payment/kispg-return", data={
        "resultCd": "0000", "resultMsg": "OK", "ordNo": order_no, "tid": "T123", "amt": "154000",
    })
    assert res.status_code == 200
    assert "PAYMENT_RESULT" in res.text
    assert "window.opener.postMessage" in res.text
    assert order_no in res.text

    # retour navigateur non signé: la commande n'est pas réglée
    status = client.get(f"/api/v1/payments/{order_no}/status").json()
    assert status == {"orderNo": order_no, "status": "RETURNED"}
    assert len(client.get("/api/v1/estimate").json()["items"]) == 1


def test_forged_return_from_another_browser_does_not_settle_order(app):
    from fastapi.testclient import TestClient

    with TestClient(app) as guest, TestClient(app) as forger:
        _fill_cart(guest)
        order_no = guest.post("/api/v1/payments/init", json=BUYER).json()["orderNo"]

        res = forger.get(f"/payment/kispg-return?resultCd=0000&ordNo={order_no}&tid=X&amt=1")
        assert res.status_code == 200
        assert '"success": false' in res.text
        assert orders_service.get_order_status(order_no) == "PENDING"

        forger.get(f"/payment/kispg-return?resultCd=0000&ordNo={order_no}&tid=X&amt=154000")
        assert orders_service.get_order_status(order_no) != "PAID"


def test_gateway_return_for_unknown_order_writes_nothing(client):
    res = client.get("/payment/kispg-return?resultCd=0000&ordNo=resv_missing&amt=154000")
    assert res.status_code == 200
    assert '"success": false' in res.text
    assert orders_repository.get_order("resv_missing") is None


def test_gateway_failure_via_query_string_keeps_cart(client):
    _fill_cart(client)
    order_no = client.post("/api/v1/payments/init", json=BUYER).json()["orderNo"]

    res = client.get(f"/payment/kispg-return?resultCode=9999&moid={order_no}&resultMsg=Declined&amt=154000")
    assert res.status_code == 200
    assert '"success": false' in res.text
    assert client.get(f"/api/v1/payments/{order_no}/status").json()["status"] == "RETURNED"
    assert len(client.get("/api/v1/estimate").json()["items"]) == 1


def test_confirmed_payment_is_paid_and_empties_estimate(client):
    _fill_cart(client)
    order_no = client.post("/api/v1/payments/init", json=BUYER).json()["orderNo"]
    client.post("/payment/kispg-return", data={"resultCd": "0000", "ordNo": order_no, "amt": "154000"})

    assert orders_service.confirm_payment(order_no, paid=True, amount=154000, tid="T123") == "PAID"

    status = client.get(f"/api/v1/payments/{order_no}/status").json()
    assert status == {"orderNo": order_no, "status": "PAID"}
    # commande réglée: le devis de la session est libéré
    assert len(estimate_store) == 0
    assert client.get("/api/v1/estimate").json()["items"] == []


def test_cookieless_reads_do_not_accumulate_estimates(client):
    for _ in range(50):
        client.cookies.clear()
        assert client.get("/api/v1/estimate").status_code == 200
        assert client.get("/api/v1/payments/resv_missing/status").status_code == 404
    assert len(estimate_store) == 0


def test_status_unknown_order_is_404(client):
    res = client.get("/api/v1/payments/resv_missing/status")
    assert res.status_code == 404
    assert res.json() == {"detail": "Commande introuvable"}


def test_payment_page_error_is_html_for_browser_requests(client):
    res = client.get("/payment/launch/resv_<missing>", headers={"accept": "text/html"})
    assert res.status_code == 404
    assert "text/html" in res.headers["content-type"]
    assert "Commande introuvable" in res.text
    assert "<missing>" not in res.text
