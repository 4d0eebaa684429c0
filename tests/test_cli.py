"""Tests for the command line interface."""

import json
import logging
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from filelock import FileLock

from income_proof.cli import main
from income_proof.feeds.synthetic import EMPLOYER_NAMES
from income_proof.store.persistence import lock_path

WALLET = "0x742d35Cc6634C0532925a3b844Bc9e7595f1E123"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in ("KAFKA_BOOTSTRAP_SERVERS", "BLOCKED_JURISDICTIONS", "SEED", "REGISTRY_PATH"):
        monkeypatch.delenv(name, raising=False)
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("income_proof").setLevel(logging.NOTSET)


@pytest.fixture
def registry_path(tmp_path: Path) -> Path:
    return tmp_path / "proofs.json"


def run(registry_path: Path, *args: str) -> int:
    return main(["--registry", str(registry_path), "--seed", "42", *args])


class TestScan:
    def test_scan(self, registry_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert run(registry_path, "scan", "--wallet", WALLET) == 0

        out = capsys.readouterr().out
        assert "Average monthly:" in out
        assert any(name in out for name in EMPLOYER_NAMES)
        assert "[SUCCESS] Scan Complete" in out
        assert not registry_path.exists()


class TestMint:
    def test_mint_then_verify(self, registry_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert run(registry_path, "mint", "--wallet", WALLET, "--jurisdiction", "US") == 0
        assert "Your income proof #1 has been minted" in capsys.readouterr().out

        data = json.loads(registry_path.read_text())
        verification_hash = data["records"]["1"]["verification_hash"]

        assert run(registry_path, "verify", "1") == 0
        assert run(registry_path, "verify", "--kind", "hash", verification_hash) == 0
        assert run(registry_path, "verify", "--kind", "wallet", WALLET.lower()) == 0
        assert "[SUCCESS] Proof Verified" in capsys.readouterr().out

    def test_mint_writes_events(self, registry_path: Path, tmp_path: Path) -> None:
        events_dir = tmp_path / "events"
        assert main(
            ["--registry", str(registry_path), "--seed", "1", "--events-dir", str(events_dir),
             "mint", "--wallet", WALLET]
        ) == 0

        event = json.loads((events_dir / "proof_issued.jsonl").read_text().splitlines()[0])
        assert event["event_type"] == "proof.issued"
        assert event["data"]["wallet_address"] == WALLET

    def test_blocked_jurisdiction(self, registry_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert run(registry_path, "mint", "--wallet", WALLET, "--jurisdiction", "KP") == 1

        assert "[ERROR] Jurisdiction Blocked" in capsys.readouterr().err
        assert not registry_path.exists()

    def test_registry_locked(
        self,
        registry_path: Path,
        capsys: pytest.CaptureFixture[str],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("REGISTRY_LOCK_TIMEOUT", "0.05")
        with FileLock(str(lock_path(registry_path))):
            assert run(registry_path, "mint", "--wallet", WALLET) == 1

        assert "RegistryLockedError" in capsys.readouterr().err
        assert not registry_path.exists()

    def test_token_ids_increase(self, registry_path: Path) -> None:
        run(registry_path, "mint", "--wallet", WALLET)
        run(registry_path, "mint", "--wallet", WALLET)

        data = json.loads(registry_path.read_text())
        assert sorted(data["records"]) == ["1", "2"]


class TestVerify:
    def test_not_found(self, registry_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert run(registry_path, "verify", "5") == 1
        assert "No income proof found" in capsys.readouterr().err

    def test_garbled_token_id(self, registry_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert run(registry_path, "verify", "abc") == 1
        assert "Invalid token id" in capsys.readouterr().err


class TestRevoke:
    def test_revoke_invalidates(self, registry_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        run(registry_path, "mint", "--wallet", WALLET)
        assert run(registry_path, "revoke", "1", "--reason", "left job") == 0
        capsys.readouterr()

        assert run(registry_path, "verify", "1") == 1
        captured = capsys.readouterr()
        assert "no (revoked)" in captured.out
        assert "Proof has been revoked" in captured.err

        data = json.loads(registry_path.read_text())
        assert data["audit_log"][0]["data"]["reason"] == "left job"

    def test_revoke_unknown(self, registry_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert run(registry_path, "revoke", "9") == 1
        assert "ProofNotFoundError" in capsys.readouterr().err


class TestHistory:
    def test_empty(self, registry_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert run(registry_path, "history", "--wallet", WALLET) == 0
        assert "haven't minted" in capsys.readouterr().out

    def test_lists_proofs(self, registry_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        run(registry_path, "mint", "--wallet", WALLET)
        run(registry_path, "mint", "--wallet", WALLET)
        run(registry_path, "revoke", "1")
        capsys.readouterr()

        assert run(registry_path, "history", "--wallet", WALLET) == 0
        lines = capsys.readouterr().out.strip().splitlines()
        assert len(lines) == 2
        assert lines[0].startswith("#1") and lines[0].endswith("revoked")
        assert lines[1].startswith("#2") and lines[1].endswith("valid")


class TestJurisdictions:
    def test_list(self, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BLOCKED_JURISDICTIONS", '["RU"]')
        assert main(["jurisdictions"]) == 0

        out = capsys.readouterr().out
        permitted, blocked = out.split("Blocked:")
        assert "US  United States" in permitted
        assert "KP  North Korea" in blocked
        assert "RU  RU" in blocked


class TestExportPostgres:
    @patch("income_proof.store.postgres.psycopg")
    def test_export(
        self, mock_psycopg: MagicMock, registry_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        run(registry_path, "mint", "--wallet", WALLET)
        run(registry_path, "mint", "--wallet", WALLET)

        assert run(registry_path, "export-postgres") == 0

        conn = mock_psycopg.connect.return_value.__enter__.return_value
        cursor = conn.cursor.return_value.__enter__.return_value
        rows = cursor.executemany.call_args.args[1]
        assert [row[0] for row in rows] == [1, 2]
        assert "Exported 2 proofs to PostgreSQL" in capsys.readouterr().out
