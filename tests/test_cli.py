"""Tests for main.py -- the credcore command line."""

from __future__ import annotations

import uuid

import pytest

import main
from auth.tokens import MIN_KEY_BYTES, TokenIssuer
from core.config import Settings

from tests.conftest import TEST_KEY


@pytest.fixture
def cli_settings(monkeypatch):
    def _apply(**values) -> Settings:
        settings = Settings(_env_file=None, **values)
        monkeypatch.setattr(main, "get_settings", lambda: settings)
        return settings

    return _apply


def test_genkey_prints_a_valid_key(capsys):
    assert main.main(["genkey"]) == 0
    key = capsys.readouterr().out.strip()
    assert len(key.encode("utf-8")) >= MIN_KEY_BYTES
    TokenIssuer.configure(key)


def test_genkey_rejects_small_sizes(capsys):
    assert main.main(["genkey", "--bytes", "16"]) == main.EXIT_CONFIG_ERROR


def test_create_user_prints_token(cli_settings, capsys):
    db_url = f"sqlite:///file:test_cli_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"
    cli_settings(token_key=TEST_KEY, database_url=db_url)
    code = main.main(["create-user", "--email", "x@y.com", "--display-name", "X Y", "--password", "Secret1"])
    assert code == 0
    out = capsys.readouterr().out
    token = out.split("token:")[1].strip()
    claims = TokenIssuer.configure(TEST_KEY).decode(token)
    assert claims["email"] == "x@y.com"


def test_create_user_without_key_exits_with_config_error(cli_settings, capsys):
    cli_settings(token_key="")
    code = main.main(["create-user", "--email", "x@y.com", "--display-name", "X Y", "--password", "Secret1"])
    assert code == main.EXIT_CONFIG_ERROR
    assert "TOKEN_KEY" in capsys.readouterr().err


def test_serve_without_key_exits_before_uvicorn(cli_settings, capsys):
    cli_settings(token_key="short")
    assert main.main(["serve"]) == main.EXIT_CONFIG_ERROR


def test_serve_with_public_key_lookalike_exits_before_uvicorn(cli_settings, capsys):
    cli_settings(token_key="ssh-rsa " + "k" * 60)
    assert main.main(["serve"]) == main.EXIT_CONFIG_ERROR
    assert "TOKEN_KEY" in capsys.readouterr().err
