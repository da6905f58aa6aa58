import json

import pytest

from autotx.errors import ConfigurationError
from autotx.main import check_chain_id, parse_args, prompt_int, run

from conftest import CHAIN_ID, KEY_1, FakeLedger


def answers(*values):
    it = iter(values)
    return lambda prompt: next(it)


def test_prompt_int_repeats_until_valid(capsys):
    assert prompt_int("n: ", 1, input_func=answers("abc", "0", " 3 ")) == 3
    out = capsys.readouterr().out
    assert "Invalid number" in out
    assert "greater than or equal to 1" in out


def test_prompt_int_allows_zero_wait():
    assert prompt_int("wait: ", 0, input_func=answers("0")) == 0


def test_parse_args():
    args = parse_args(["--transactions", "3", "--wait", "0", "--seed", "9", "--rpc-url", "http://x"])
    assert args.transactions == 3
    assert args.wait == 0
    assert args.seed == 9
    assert args.rpc_url == "http://x"
    assert args.encrypt_keys is None


def test_chain_id_mismatch(query):
    with pytest.raises(ConfigurationError):
        check_chain_id(FakeLedger(chain=1), query, CHAIN_ID)


def test_chain_id_unreachable_is_tolerated(query):
    ledger = FakeLedger()
    ledger.fail("chain_id", 5)
    check_chain_id(ledger, query, CHAIN_ID)


def test_run_with_bad_keys_file(tmp_path):
    keys = tmp_path / "keys.json"
    keys.write_text(json.dumps(["not a key"]))
    args = parse_args(["--config", str(tmp_path / "autotx.ini"), "--keys", str(keys),
                       "--encrypt-keys", str(tmp_path / "out.enc")])
    with pytest.raises(ConfigurationError):
        run(args)


def test_run_encrypts_keys(tmp_path, monkeypatch):
    keys = tmp_path / "keys.json"
    keys.write_text(json.dumps([KEY_1]))
    out = tmp_path / "out.enc"
    monkeypatch.setattr("autotx.main.getpass.getpass", lambda prompt: "pw")
    args = parse_args(["--config", str(tmp_path / "autotx.ini"), "--keys", str(keys),
                       "--encrypt-keys", str(out)])
    assert run(args) == 0
    data = json.loads(out.read_text())
    assert set(data) == {"salt", "keys"}


def test_run_end_to_end(tmp_path, monkeypatch, capsys):
    keys = tmp_path / "keys.json"
    keys.write_text(json.dumps([KEY_1]))
    ledger = FakeLedger()
    monkeypatch.setattr("autotx.main.RemoteLedger.connect", lambda *a, **kw: ledger)
    monkeypatch.setattr("autotx.main.install_interrupt_handler", lambda cancel: None)
    args = parse_args(["--config", str(tmp_path / "autotx.ini"), "--keys", str(keys),
                       "--transactions", "2", "--wait", "0", "--seed", "1"])

    assert run(args) == 0

    out = capsys.readouterr().out
    assert "will perform 2 transactions" in out
    assert out.count("From: 0xf39F...2266") == 2
    assert "Run finished: 2 sent, 0 skipped, 2/2 slots attempted" in out
    assert len(ledger.broadcasts) == 2


def test_package_entry_point_does_not_run_on_import(monkeypatch):
    import importlib

    calls = []
    monkeypatch.setattr("autotx.main.main", lambda: calls.append(1))
    importlib.import_module("autotx.__main__")
    assert calls == []
