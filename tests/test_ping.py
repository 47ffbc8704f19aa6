import pytest

from pingreport import IcmpTransport, ProbeRequest, ProbeRunner, RootRequired, probe

from .util import has_raw_socket


@pytest.mark.skipif(has_raw_socket(), reason="Raw sockets are allowed")
def test_root_required():
    with pytest.raises(RootRequired):
        ProbeRunner().run(ProbeRequest("127.0.0.1", count=1))


@pytest.mark.skipif(not has_raw_socket(), reason="Requires root privileges")
def test_localhost():
    outcomes, stats = probe("127.0.0.1", count=2, interval=0)
    assert stats.received == 2
    assert stats.loss_percent == 0.0
    assert outcomes[0].detail.startswith("Reply from 127.0.0.1: bytes=32")


@pytest.mark.skipif(not has_raw_socket(), reason="Requires root privileges")
def test_large_payload():
    outcomes, _ = probe("127.0.0.1", count=1, size=8000)
    assert outcomes[0].succeeded
    assert "bytes=8000" in outcomes[0].detail


@pytest.mark.skipif(not has_raw_socket(), reason="Requires root privileges")
def test_timeout():
    # RFC 5737 test range, should never answer
    outcomes, stats = probe("192.0.2.1", count=2, interval=0)
    assert stats.loss_percent == 100.0
    assert stats.mean is None
    assert all(not o.succeeded for o in outcomes)


@pytest.mark.skipif(not has_raw_socket(), reason="Requires root privileges")
def test_host_unreachable():
    outcomes, _ = probe("definitelynotahost.invalid", count=1)
    assert not outcomes[0].succeeded
    assert "Cannot resolve host" in outcomes[0].detail


@pytest.mark.skipif(not has_raw_socket(), reason="Requires root privileges")
def test_transport_close():
    transport = IcmpTransport()
    with transport:
        transport.echo("127.0.0.1", b"x" * 16, 1.0)
    assert not transport._sockets
