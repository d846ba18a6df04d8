import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

from airdrop_merkle.cli import main

DATA = Path(__file__).parent / "data" / "recipients.json"
SRC = Path(__file__).resolve().parents[1] / "src"


def test_cli_build_and_verify(tmp_path):
    """End-to-end: build claims via module invocation, then verify them from the written file."""
    out = tmp_path / "claims.json"
    env = dict(os.environ, PYTHONPATH=str(SRC) + os.pathsep + os.environ.get("PYTHONPATH", ""))
    proc_build = subprocess.run(
        [sys.executable, "-m", "airdrop_merkle.cli", "build", "--input", str(DATA), "--out", str(out)],
        capture_output=True, text=True, env=env,
    )
    assert proc_build.returncode == 0, proc_build.stderr
    assert out.exists()
    doc = json.loads(out.read_text())
    assert f"Merkle root: {doc['merkle_root']}" in proc_build.stdout

    proc_verify = subprocess.run(
        [sys.executable, "-m", "airdrop_merkle.cli", "verify", "--claims", str(out), "--recipients", str(DATA)],
        capture_output=True, text=True, env=env,
    )
    assert proc_verify.returncode == 0, proc_verify.stderr + "\n" + proc_verify.stdout
    assert "All 5 checks OK." in proc_verify.stdout


def test_cli_build_default_output(tmp_path, monkeypatch):
    from airdrop_merkle.settings import settings
    monkeypatch.setattr(settings, "airdrop_out_dir", tmp_path / "out")
    assert main(["build", "--input", str(DATA)]) == 0
    assert (tmp_path / "out" / "claims.json").exists()


def test_cli_proof(capsys):
    assert main(["proof", "--input", str(DATA), "--index", "2"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["index"] == 2
    assert payload["amount"] == "300"
    assert payload["merkle_root"].startswith("0x")
    assert all(p.startswith("0x") and len(p) == 66 for p in payload["proof"])

    assert main(["proof", "--input", str(DATA), "--index", "9"]) == 3


def test_cli_verify_single_claim_and_tampering(tmp_path, capsys):
    out = tmp_path / "claims.json"
    assert main(["build", "--input", str(DATA), "--out", str(out)]) == 0
    capsys.readouterr()

    assert main(["verify", "--claims", str(out), "--index", "0"]) == 0
    assert "claim 0: OK" in capsys.readouterr().out

    assert main(["verify", "--claims", str(out), "--index", "0", "--amount", "101"]) == 4
    assert "claim 0: MISMATCH" in capsys.readouterr().out

    other = json.loads(out.read_text())["claims"][1]["account"]
    assert main(["verify", "--claims", str(out), "--index", "0", "--account", other]) == 4
    assert main(["verify", "--claims", str(out), "--index", "7"]) == 3


def test_cli_rejects_bad_input(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps([{"account": "0xnope", "amount": 1}]))
    assert main(["build", "--input", str(bad), "--out", str(tmp_path / "c.json")]) == 2
    assert not (tmp_path / "c.json").exists()
    assert main(["build", "--input", str(tmp_path / "missing.json")]) == 2
    assert main(["verify", "--claims", str(bad)]) == 2


def test_settings_read_from_environment(monkeypatch, tmp_path):
    from airdrop_merkle.settings import Settings
    monkeypatch.setenv("AIRDROP_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("AIRDROP_OUT_DIR", str(tmp_path))
    monkeypatch.setenv("AIRDROP_CHECKSUM_ACCOUNTS", "false")
    s = Settings()
    assert s.airdrop_log_level == "DEBUG"
    assert s.claims_path == tmp_path / "claims.json"
    assert s.airdrop_checksum_accounts is False


def test_cli_verify_rejects_conflicting_recipients(tmp_path, capsys):
    out = tmp_path / "claims.json"
    assert main(["build", "--input", str(DATA), "--out", str(out)]) == 0
    account = json.loads(out.read_text())["claims"][0]["account"]
    conflicting = tmp_path / "conflicting.json"
    conflicting.write_text(json.dumps([
        {"account": account, "amount": 1, "index": 0},
        {"account": account, "amount": 2, "index": 0},
    ]))
    capsys.readouterr()
    assert main(["verify", "--claims", str(out), "--recipients", str(conflicting)]) == 2
    assert "index 0" in capsys.readouterr().err


def test_cli_build_unwritable_output(tmp_path, capsys):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")
    assert main(["build", "--input", str(DATA), "--out", str(blocker / "claims.json")]) == 2
    assert "Cannot write claims" in capsys.readouterr().err


def test_cli_rejects_unknown_log_level(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--log-level", "bogus", "proof", "--input", str(DATA), "--index", "0"])
    assert exc.value.code == 2
    assert main(["--log-level", "debug", "proof", "--input", str(DATA), "--index", "0"]) == 0
