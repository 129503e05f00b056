import asyncio

from reservation.payments.channel import MessageChannel
from reservation.payments.handshake import PaymentHandshake
from reservation.payments.session import PaymentInit, PaymentSession, PaymentStatus

ORIGIN = "http://localhost:8000"
ORDER = "resv_1_1700000000000"


class FakePopup:
    def __init__(self, name):
        self.name = name
        self.closed = False
        self.forms = []
        self.close_calls = 0

    async def submit_form(self, form):
        self.forms.append(form)

    async def close(self):
        self.close_calls += 1
        self.closed = True


class FakeHost:
    def __init__(self, blocked=False, fail=False):
        self.blocked = blocked
        self.fail = fail
        self.opened = []

    def screen_size(self):
        return (1920, 1080)

    async def open_popup(self, name, features):
        await asyncio.sleep(0)
        if self.fail:
            raise RuntimeError("window.open exploded")
        if self.blocked:
            return None
        popup = FakePopup(name)
        self.opened.append((popup, features))
        return popup


class Recorder:
    def __init__(self):
        self.completed = []
        self.closed = 0
        self.notices = []

    def on_complete(self, success, data):
        self.completed.append((success, data))

    def on_close(self):
        self.closed += 1

    def notify(self, level, title, message):
        self.notices.append((level, title))


def _session():
    init = PaymentInit(
        mid="kistest00m", moid=ORDER, amt="200000", item_name="Superior Twin", buyer_name="Hong",
        buyer_tel="010-1234-5678", buyer_email="hong@example.com", request_hash="h", edi_date="20240101090000",
        return_url=f"{ORIGIN}/payment/kispg-return",
    )
    return PaymentSession(order_id=ORDER, init=init)


def _handshake(host=None, result_timeout=0, **kwargs):
    rec = Recorder()
    channel = MessageChannel()
    hs = PaymentHandshake(
        _session(), host or FakeHost(), channel,
        on_complete=rec.on_complete, on_close=rec.on_close, notify=rec.notify,
        allowed_origins=[ORIGIN], gateway_url="https://pg.example/auth",
        poll_interval=0.01, result_timeout=result_timeout, **kwargs,
    )
    return hs, channel, rec


def _result(success=True, order=ORDER):
    return {"type": "PAYMENT_RESULT", "orderId": order, "success": success, "data": {"tid": "T1"}}


def test_trigger_opens_centered_popup_and_submits_form():
    async def scenario():
        host = FakeHost()
        hs, channel, rec = _handshake(host)
        assert await hs.trigger() is True
        popup, features = host.opened[0]
        assert popup.name == f"kispg_payment_{ORDER}_1"
        assert "width=825,height=700" in features
        form = popup.forms[0]
        assert form.target == popup.name
        assert form.action == "https://pg.example/auth"
        assert form.fields["ordNo"] == ORDER
        assert hs.session.status == PaymentStatus.AWAITING_RESULT
        assert hs.in_progress
        await hs.dispose()

    asyncio.run(scenario())


def test_double_trigger_opens_single_popup():
    async def scenario():
        host = FakeHost()
        hs, channel, rec = _handshake(host)
        first, second = await asyncio.gather(hs.trigger(), hs.trigger())
        assert sorted([first, second]) == [False, True]
        assert len(host.opened) == 1
        assert ("info", "Notice") in rec.notices
        await hs.dispose()

    asyncio.run(scenario())


def test_valid_result_completes_once_and_closes_popup():
    async def scenario():
        host = FakeHost()
        hs, channel, rec = _handshake(host)
        await hs.trigger()
        popup = host.opened[0][0]

        await channel.publish(ORIGIN, _result(success=True))
        await channel.publish(ORIGIN, _result(success=False))
        await asyncio.sleep(0.05)

        assert rec.completed == [(True, {"tid": "T1"})]
        assert rec.closed == 0
        assert popup.close_calls == 1
        assert hs.session.status == PaymentStatus.COMPLETED
        assert hs.session.success is True
        assert not hs.in_progress
        assert channel.subscriber_count == 0

    asyncio.run(scenario())


def test_failed_result_is_reported_as_completion():
    async def scenario():
        hs, channel, rec = _handshake()
        await hs.trigger()
        await channel.publish(ORIGIN, _result(success=False))
        assert rec.completed == [(False, {"tid": "T1"})]
        assert hs.session.success is False

    asyncio.run(scenario())


def test_mismatched_order_or_origin_is_ignored():
    async def scenario():
        hs, channel, rec = _handshake()
        await hs.trigger()
        await channel.publish(ORIGIN, _result(order="resv_other"))
        await channel.publish("https://evil.example", _result())
        assert rec.completed == []
        assert hs.in_progress
        await hs.dispose()

    asyncio.run(scenario())


def test_user_closing_popup_abandons_once():
    async def scenario():
        host = FakeHost()
        hs, channel, rec = _handshake(host)
        await hs.trigger()
        host.opened[0][0].closed = True
        await asyncio.sleep(0.05)

        assert rec.closed == 1
        assert rec.completed == []
        assert hs.session.status == PaymentStatus.ABANDONED
        assert hs.session.abandon_reason == "popup_closed"
        assert not hs.in_progress
        assert channel.subscriber_count == 0

        # un résultat tardif n'est plus traité
        await channel.publish(ORIGIN, _result())
        assert rec.completed == []

    asyncio.run(scenario())


def test_close_after_result_does_not_fire_close_callback():
    async def scenario():
        host = FakeHost()
        hs, channel, rec = _handshake(host)
        await hs.trigger()
        await channel.publish(ORIGIN, _result())
        host.opened[0][0].closed = True
        await asyncio.sleep(0.05)
        assert rec.closed == 0
        assert len(rec.completed) == 1

    asyncio.run(scenario())


def test_blocked_popup_notifies_and_allows_retry():
    async def scenario():
        host = FakeHost(blocked=True)
        hs, channel, rec = _handshake(host)
        assert await hs.trigger() is False
        assert ("error", "Popup blocked") in rec.notices
        assert not hs.in_progress
        assert hs.session.status == PaymentStatus.CREATED
        assert channel.subscriber_count == 0

        host.blocked = False
        assert await hs.trigger() is True
        assert host.opened[0][0].name.endswith("_2")
        await hs.dispose()

    asyncio.run(scenario())


def test_unexpected_error_notifies_and_clears_progress():
    async def scenario():
        hs, channel, rec = _handshake(FakeHost(fail=True))
        assert await hs.trigger() is False
        assert ("error", "Payment error") in rec.notices
        assert not hs.in_progress

    asyncio.run(scenario())


def test_result_timeout_abandons_and_closes_popup():
    async def scenario():
        host = FakeHost()
        hs, channel, rec = _handshake(host, result_timeout=0.03)
        await hs.trigger()
        await asyncio.sleep(0.15)
        assert rec.closed == 1
        assert hs.session.abandon_reason == "timeout"
        assert host.opened[0][0].closed
        assert ("warning", "Payment timed out") in rec.notices

    asyncio.run(scenario())


def test_retrigger_after_abandon_starts_new_attempt():
    async def scenario():
        host = FakeHost()
        hs, channel, rec = _handshake(host)
        await hs.trigger()
        host.opened[0][0].closed = True
        await asyncio.sleep(0.05)
        assert await hs.trigger() is True
        assert len(host.opened) == 2
        assert hs.session.attempts == 2
        await hs.dispose()

    asyncio.run(scenario())


def test_dispose_releases_without_callbacks():
    async def scenario():
        host = FakeHost()
        hs, channel, rec = _handshake(host)
        await hs.trigger()
        await hs.dispose()
        await asyncio.sleep(0.05)
        assert host.opened[0][0].closed
        assert rec.closed == 0
        assert rec.completed == []
        assert channel.subscriber_count == 0
        assert hs.session.abandon_reason == "disposed"

    asyncio.run(scenario())


class UnreadablePopup(FakePopup):
    """Popup dont l'état lève (cible navigateur détruite)."""

    def __init__(self, name):
        super().__init__(name)
        self.broken = False

    @property
    def closed(self):
        if self.broken:
            raise RuntimeError("Target page has been closed")
        return self._closed

    @closed.setter
    def closed(self, value):
        self._closed = value


class UnreadableHost(FakeHost):
    async def open_popup(self, name, features):
        await asyncio.sleep(0)
        popup = UnreadablePopup(name)
        self.opened.append((popup, features))
        return popup


def test_unreadable_popup_state_is_treated_as_closed():
    async def scenario():
        host = UnreadableHost()
        hs, channel, rec = _handshake(host)
        await hs.trigger()
        host.opened[0][0].broken = True
        await asyncio.sleep(0.05)

        assert rec.closed == 1
        assert hs.session.status == PaymentStatus.ABANDONED
        assert hs.session.abandon_reason == "popup_closed"
        assert not hs.in_progress
        assert channel.subscriber_count == 0
        assert await hs.trigger() is True
        await hs.dispose()

    asyncio.run(scenario())


def test_failing_close_callback_does_not_leave_payment_in_progress():
    async def scenario():
        host = FakeHost()
        hs, channel, rec = _handshake(host)

        def explode():
            raise RuntimeError("ui gone")

        hs.on_close = explode
        await hs.trigger()
        host.opened[0][0].closed = True
        await asyncio.sleep(0.05)

        assert not hs.in_progress
        assert hs.session.abandon_reason == "popup_closed"
        assert await hs.trigger() is True
        assert len(host.opened) == 2
        await hs.dispose()

    asyncio.run(scenario())
