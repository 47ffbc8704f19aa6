import io
import json

import pytest

from pingreport import ProbeRunner, RootRequired
from pingreport.cli import PingApplication, main
from pingreport.console import ConsoleUI, RenderContext

from .util import Factory, no_sleep, ok


def runner_for(script):
    return ProbeRunner(Factory(script), sleep=no_sleep)


def make_app(answers, script=()):
    stream = io.StringIO()
    replies = iter(answers)
    ui = ConsoleUI(RenderContext(stream=stream, width=60, color=False), input_func=lambda prompt: next(replies))
    return PingApplication(ui, runner_for(script)), stream


def test_one_shot(capsys):
    assert main(["192.0.2.10", "-c", "2"], runner=runner_for([ok(10), ok(30)])) == 0
    out = capsys.readouterr().out
    assert "Reply from 192.0.2.10: bytes=32 time=10ms TTL=64" in out
    assert "Average response time: 20.00ms" in out


def test_one_shot_json(capsys):
    assert main(["192.0.2.10", "-c", "4", "-j"], runner=runner_for([ok(20), ok(30), ok(40)])) == 0
    data = json.loads(capsys.readouterr().out)
    assert len(data["outcomes"]) == 4
    assert data["statistics"]["loss_percent"] == 25.0
    assert data["statistics"]["mean"] == 30.0


def test_one_shot_json_address_and_ttl(capsys):
    script = [ok(5, address="2001:db8::1", ttl=None), ok(7)]
    assert main(["example.com", "-c", "3", "--json"], runner=runner_for(script)) == 0
    first, second, third = json.loads(capsys.readouterr().out)["outcomes"]
    assert first["address"] == "2001:db8::1"
    assert first["ttl"] is None
    assert second["address"] == "192.0.2.10"
    assert second["ttl"] == 64
    assert third["succeeded"] is False
    assert third["address"] is None
    assert third["ttl"] is None


def test_one_shot_json_no_replies(capsys):
    assert main(["192.0.2.10", "-c", "2", "--json"], runner=runner_for([])) == 0
    stats = json.loads(capsys.readouterr().out)["statistics"]
    assert stats == {"total": 2, "received": 0, "lost": 2, "loss_percent": 100.0}


def test_one_shot_save_and_load(tmp_path, capsys):
    path = str(tmp_path / "results.txt")
    assert main(["192.0.2.10", "-c", "1", "--save", path], runner=runner_for([ok(10)])) == 0
    capsys.readouterr()
    assert main(["--load", path]) == 0
    with open(path, encoding="utf-8") as f:
        assert capsys.readouterr().out == f.read()


def test_load_missing(tmp_path, capsys):
    assert main(["--load", str(tmp_path / "missing.txt")]) == 1
    assert "not found" in capsys.readouterr().out


def test_setup_error(capsys):
    assert main(["192.0.2.10"], runner=runner_for([RootRequired("Root privileges required")])) == 1
    assert "Root privileges required" in capsys.readouterr().out


@pytest.mark.parametrize(
    "args",
    [["has space.com"], ["999.1.1.1"], ["192.0.2.1", "-c", "0"], ["192.0.2.1", "-s", "65501"], ["192.0.2.1", "-t", "0"]],
)
def test_cli_error(args):
    with pytest.raises(SystemExit):
        main(args)


def test_menu_exit():
    app, stream = make_app(["4"])
    assert app.run() == 0
    assert "Exiting..." in stream.getvalue()


def test_menu_plays_logo_once(monkeypatch):
    app, _ = make_app(["9", "3", "1", "4"])
    calls = []
    monkeypatch.setattr(app.ui, "logo", lambda: calls.append(1))
    app.run()
    assert calls == [1]


def test_menu_invalid_choice():
    app, stream = make_app(["9", "4"])
    app.run()
    assert "Invalid choice!" in stream.getvalue()


def test_menu_ping_and_save(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    answers = ["1", "bad host", "example.com", "", "", "y", "results.txt", "4"]
    app, stream = make_app(answers, [ok(20), ok(30), ok(40)])
    app.run()
    text = stream.getvalue()
    assert "Invalid IP address or domain name" in text
    assert "Pinging example.com with 32 bytes of data" in text
    assert "Packets lost: 1 (25.0%)" in text
    assert "Results saved." in text
    report = (tmp_path / "results.txt").read_text(encoding="utf-8")
    assert "Lost packets: 1/4 (25.0%)" in report
    assert "Average response time: 30.00ms" in report


def test_menu_save_declined_overwrite(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "results.txt").write_text("old")
    answers = ["1", "192.0.2.10", "1", "", "y", "results.txt", "n", "4"]
    app, stream = make_app(answers, [ok(10)])
    app.run()
    assert "Save cancelled." in stream.getvalue()
    assert (tmp_path / "results.txt").read_text() == "old"


def test_menu_load_missing(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    app, stream = make_app(["2", "missing.txt", "4"])
    app.run()
    assert "The file does not exist." in stream.getvalue()


def test_menu_load(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "saved.txt").write_text("=== Ping Results - x ===\n", encoding="utf-8")
    app, stream = make_app(["2", "saved.txt", "4"])
    app.run()
    assert "=== Ping Results - x ===" in stream.getvalue()


def test_menu_change_theme():
    app, stream = make_app(["3", "2", "4"])
    app.run()
    assert app.ui.ctx.theme_name == "Hacker"
    assert "Theme changed to Hacker!" in stream.getvalue()


def test_menu_setup_error():
    app, stream = make_app(["1", "192.0.2.10", "", "", "4"], [RootRequired("Root privileges required")])
    assert app.run() == 0
    assert "Root privileges required" in stream.getvalue()
