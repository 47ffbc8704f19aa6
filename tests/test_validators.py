import pytest

from pingreport import is_valid_filename, is_valid_host


@pytest.mark.parametrize(
    "host",
    ["192.168.1.1", "0.0.0.0", "255.255.255.255", "example.com", "sub.example.org", "localhost.localdomain"],
)
def test_valid_host(host):
    assert is_valid_host(host)


@pytest.mark.parametrize(
    "host",
    [
        "",
        "   ",
        None,
        "has space.com",
        "999.1.1.1",
        "1.2.3.256",
        "-1.2.3.4",
        ".startswithdot",
        "endswithdot.",
        "localhost",
    ],
)
def test_invalid_host(host):
    assert not is_valid_host(host)


@pytest.mark.parametrize("name", ["results.txt", "ping results.txt", "a"])
def test_valid_filename(name):
    assert is_valid_filename(name)


@pytest.mark.parametrize("name", ["", "  ", "dir/file.txt", "a:b", "what?", "tab\tname"])
def test_invalid_filename(name):
    assert not is_valid_filename(name)
