# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import io
import json

import pytest

from passivescan.cli import main as cli_main


@pytest.fixture
def definitions(tmp_path):
    contexts = tmp_path / "contexts.json"
    contexts.write_text(
        json.dumps(
            {
                "contexts": [
                    {
                        "name": "shop",
                        "include": [r"https://shop\.example/.*"],
                        "technologies": {"include": ["Db.MySQL"]},
                        "custom_pages": [{"matcher": "Item not found", "type": "NOTFOUND_404"}],
                    }
                ]
            }
        ),
        encoding="utf-8",
    )
    users = tmp_path / "users.json"
    users.write_text(json.dumps({"users": [{"context_id": 1, "name": "alice"}]}), encoding="utf-8")
    message = tmp_path / "message.json"
    message.write_text(
        json.dumps(
            {
                "request": {"url": "https://shop.example/item?id=9"},
                "response": {"status_code": 200, "body": "<h1>Item not found</h1>"},
            }
        ),
        encoding="utf-8",
    )
    return contexts, users, message


def test_cli_json_output(definitions, capsys):
    contexts, users, message = definitions
    exit_code = cli_main.main([str(message), "--contexts", str(contexts), "--users", str(users), "--json"])
    assert exit_code == 0

    report = json.loads(capsys.readouterr().out)
    facts = report["facts"]
    assert facts["has_context"] is True
    assert facts["context"] == {"id": 1, "name": "shop"}
    assert facts["tech_set"] == {"include": ["Db.MySQL"], "exclude": []}
    assert [user["name"] for user in facts["users"]] == ["alice"]
    assert facts["pages"] == {"200": False, "404": True, "500": False, "other": False}
    assert report["scan"]["alerts"] == []


def test_cli_pretty_output_from_stdin(definitions, capsys, monkeypatch):
    contexts, _, _ = definitions
    monkeypatch.setenv("PASSIVESCAN_CONTEXTS_FILE", str(contexts))
    monkeypatch.setattr(
        "sys.stdin",
        io.StringIO(json.dumps({"url": "https://other.example/", "status_code": 500, "body": "Fatal error: oops in x.php on line 3"})),
    )
    assert cli_main.main(["-"]) == 0

    out = capsys.readouterr().out
    assert "Context: -" in out
    assert "Users: -" in out
    assert "Page classification: -" in out
    assert "Application Error Disclosure" in out


def test_cli_reports_definition_errors(tmp_path, capsys):
    contexts = tmp_path / "contexts.json"
    contexts.write_text(json.dumps({"contexts": [{"name": "bad", "include": ["("]}]}), encoding="utf-8")
    message = tmp_path / "message.json"
    message.write_text(json.dumps({"url": "https://shop.example/"}), encoding="utf-8")

    assert cli_main.main([str(message), "--contexts", str(contexts)]) == 2
    assert "invalid URL regex" in capsys.readouterr().err


def test_cli_requires_contexts(monkeypatch, tmp_path):
    monkeypatch.delenv("PASSIVESCAN_CONTEXTS_FILE", raising=False)
    with pytest.raises(SystemExit) as excinfo:
        cli_main.main([str(tmp_path / "message.json")])
    assert excinfo.value.code == 2


def test_cli_reports_malformed_message(definitions, tmp_path, capsys):
    contexts, _, _ = definitions
    message = tmp_path / "broken.json"
    message.write_text(json.dumps({"request": "https://shop.example/", "response": {}}), encoding="utf-8")

    assert cli_main.main([str(message), "--contexts", str(contexts)]) == 2
    assert "must be mappings" in capsys.readouterr().err


def test_cli_reports_malformed_user_credentials(definitions, tmp_path, capsys):
    contexts, _, message = definitions
    users = tmp_path / "bad-users.json"
    users.write_text(
        json.dumps({"users": [{"context_id": 1, "name": "alice", "credentials": "secret"}]}), encoding="utf-8"
    )

    assert cli_main.main([str(message), "--contexts", str(contexts), "--users", str(users)]) == 2
    assert "invalid user entry" in capsys.readouterr().err


def test_cli_resolves_context_once_per_message(definitions, monkeypatch, capsys):
    contexts, _, message = definitions
    calls = []
    original = cli_main.PassiveScanRunner.scan_data

    def counting_scan_data(self, msg):
        calls.append(msg.request.url)
        return original(self, msg)

    monkeypatch.setattr(cli_main.PassiveScanRunner, "scan_data", counting_scan_data)
    assert cli_main.main([str(message), "--contexts", str(contexts), "--json"]) == 0
    assert calls == ["https://shop.example/item?id=9"]
    assert json.loads(capsys.readouterr().out)["facts"]["pages"]["404"] is True
