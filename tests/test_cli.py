"""Tests for the tokenwatch command line."""

from __future__ import annotations

import io
import json
import sys

import pytest

from tokenwatch import cli


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("TOKENWATCH_CONFIG", raising=False)
    monkeypatch.delenv("TOKENWATCH_EXPIRING_SOON_SECONDS", raising=False)
    monkeypatch.delenv("TOKENWATCH_ALLOW_MISSING_EXP", raising=False)
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)


def _run(monkeypatch, *argv: str) -> int:
    """Run main() with ``argv`` and return its exit code (0 if it returns)."""
    monkeypatch.setattr(sys, "argv", ["tokenwatch", *argv])
    try:
        cli.main()
    except SystemExit as exc:
        return exc.code
    return 0


class TestInspect:
    def test_human_output(self, monkeypatch, capsys, make_token, now):
        token = make_token({"sub": "user-1", "exp": now + 3600, "iat": now})

        assert _run(monkeypatch, "inspect", token, "--at", str(now)) == 0

        out = capsys.readouterr().out
        assert "Status: valid" in out
        assert "(in 3600s)" in out
        assert '"sub": "user-1"' in out

    def test_expired_output(self, monkeypatch, capsys, make_token, now):
        token = make_token({"exp": now - 60})

        _run(monkeypatch, "inspect", token, "--at", str(now))

        out = capsys.readouterr().out
        assert "Status: expired" in out
        assert "(60s ago)" in out

    def test_json_output(self, monkeypatch, capsys, make_token, now):
        token = make_token({"exp": now + 3600, "iat": now + 60})

        _run(monkeypatch, "inspect", token, "--json", "--at", str(now))

        data = json.loads(capsys.readouterr().out)
        assert data["status"] == "not_yet_valid"
        assert data["header"]["typ"] == "JWT"

    def test_malformed_output(self, monkeypatch, capsys):
        _run(monkeypatch, "inspect", "only.two")

        out = capsys.readouterr().out
        assert "Status: malformed" in out
        assert "claims" not in out

    def test_reads_stdin(self, monkeypatch, capsys, make_token, now):
        token = make_token({"exp": now + 3600})
        monkeypatch.setattr(sys, "stdin", io.StringIO(token + "\n"))

        _run(monkeypatch, "inspect", "-", "--at", str(now))

        assert "Status: valid" in capsys.readouterr().out


class TestCheck:
    def test_valid_exits_zero(self, monkeypatch, capsys, make_token, now):
        token = make_token({"exp": now + 3600})
        assert _run(monkeypatch, "check", token, "--at", str(now)) == 0
        assert capsys.readouterr().out.strip() == "valid"

    def test_expired_exits_one(self, monkeypatch, capsys, make_token, now):
        token = make_token({"exp": now - 1})
        assert _run(monkeypatch, "check", token, "--at", str(now)) == 1
        assert capsys.readouterr().out.strip() == "expired"

    def test_missing_exp_policy_from_config(self, monkeypatch, tmp_path, make_token, now):
        config_path = tmp_path / "tokenwatch.yaml"
        config_path.write_text("inspector:\n  allow_missing_exp: true\n")
        token = make_token({"id": 1})

        assert _run(monkeypatch, "check", token, "--at", str(now)) == 1
        assert _run(
            monkeypatch, "--config", str(config_path), "check", token, "--at", str(now),
        ) == 0

    def test_unparseable_config_file(self, monkeypatch, capsys, tmp_path):
        config_path = tmp_path / "broken.yaml"
        config_path.write_text("inspector: [unclosed\n")

        code = _run(monkeypatch, "--config", str(config_path), "check", "a.b.c")

        assert code == 1
        assert capsys.readouterr().out.startswith("Error: ")

    def test_missing_config_file(self, monkeypatch, capsys, tmp_path):
        code = _run(monkeypatch, "--config", str(tmp_path / "nope.yaml"), "check", "a.b.c")
        assert code == 1
        assert "Error: Inspector config not found" in capsys.readouterr().out
