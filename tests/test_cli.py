"""Tests for mailharvest CLI commands."""

import importlib
import json

import pytest
import yaml
from click.testing import CliRunner

from mailharvest.cli import main

from conftest import SHORT, VIDEO, build_message

# The package re-exports the `fetch` command under the module's name
fetch_module = importlib.import_module("mailharvest.cli.fetch")


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("MAILHARVEST_ROOT", "MAILHARVEST_SENDER", "MAILHARVEST_PASSWORD"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def project(tmp_path, monkeypatch):
    """Create an initialized project in a temp directory."""
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(main, ["init", "-s", "teacher@example.com"])
    assert result.exit_code == 0
    assert (tmp_path / ".mailharvest" / "config.yaml").exists()
    return tmp_path


def read_config(root):
    return yaml.safe_load((root / ".mailharvest" / "config.yaml").read_text())


class TestInit:
    def test_init_default(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(main, ["init"])
        assert result.exit_code == 0
        assert "Initialized" in result.output
        assert "$yyyy-$mm-$dd/$filename" in result.output
        config = read_config(tmp_path)
        assert config["layout"] == "daily"
        assert config["attachments_dir"] == "data/attachments"

    def test_init_options(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(main, ["i", "-L", "sender", "-d", "out", "-s", "prof@uni.edu"])
        assert result.exit_code == 0
        config = read_config(tmp_path)
        assert config["layout"] == "sender"
        assert config["attachments_dir"] == "out"
        assert config["sender"] == "prof@uni.edu"

    def test_init_custom_template(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(main, ["init", "-L", "$yyyy/$subj20/$filename"])
        assert result.exit_code == 0
        assert read_config(tmp_path)["layout"] == "$yyyy/$subj20/$filename"

    def test_init_invalid_layout(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(main, ["init", "-L", "$yyyy/$mm"])
        assert result.exit_code != 0
        assert "Invalid layout" in result.output
        assert not (tmp_path / ".mailharvest").exists()

    def test_init_already_initialized(self, runner, project):
        result = runner.invoke(main, ["init", "-L", "flat"])
        assert result.exit_code == 0
        assert "Already initialized" in result.output
        assert read_config(project)["layout"] == "daily"


class TestAccount:
    def test_requires_init(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(main, ["account", "ls"])
        assert result.exit_code == 1
        assert "mailharvest init" in result.output

    def test_add_ls_rm(self, runner, project):
        result = runner.invoke(main, ["account", "add", "gmail", "me@gmail.com", "-p", "secret"])
        assert result.exit_code == 0
        assert "Account 'gmail' saved (gmail: me@gmail.com)" in result.output
        acct = read_config(project)["accounts"]["gmail"]
        assert acct == {"type": "gmail", "user": "me@gmail.com", "password": "secret"}

        result = runner.invoke(main, ["a", "l"])
        assert result.exit_code == 0
        assert "me@gmail.com" in result.output

        result = runner.invoke(main, ["account", "rm", "gmail"])
        assert result.exit_code == 0
        assert "removed" in result.output
        assert "accounts" not in read_config(project)

    def test_add_password_from_stdin(self, runner, project):
        result = runner.invoke(main, ["account", "add", "gmail", "me@gmail.com"], input="piped\n")
        assert result.exit_code == 0
        assert read_config(project)["accounts"]["gmail"]["password"] == "piped"

    def test_add_generic_imap(self, runner, project):
        result = runner.invoke(main, [
            "account", "add", "-H", "imap.example.com", "-P", "143",
            "work", "me@example.com", "-p", "pw",
        ])
        assert result.exit_code == 0
        acct = read_config(project)["accounts"]["work"]
        assert acct["type"] == "imap"
        assert acct["host"] == "imap.example.com"
        assert acct["port"] == 143

    def test_add_cannot_infer_type(self, runner, project):
        result = runner.invoke(main, ["account", "add", "work", "me@example.com", "-p", "pw"])
        assert result.exit_code == 1
        assert "Cannot infer account type" in result.output

    def test_imap_type_needs_host(self, runner, project):
        result = runner.invoke(main, ["account", "add", "-t", "imap", "work", "me@example.com", "-p", "pw"])
        assert result.exit_code == 1
        assert "needs an IMAP host" in result.output

    def test_ls_empty(self, runner, project):
        result = runner.invoke(main, ["account", "ls"])
        assert "No accounts configured." in result.output

    def test_rm_missing(self, runner, project):
        result = runner.invoke(main, ["account", "rm", "nope"])
        assert result.exit_code == 1
        assert "not found" in result.output


class TestExtract:
    def test_eml(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        path = tmp_path / "msg.eml"
        path.write_bytes(build_message(body=f"Watch this:\n{VIDEO}\n").as_bytes())
        result = runner.invoke(main, ["extract", str(path)])
        assert result.exit_code == 0
        assert "Watch this:" in result.output
        assert "Links (1):" in result.output
        assert f"  {VIDEO}" in result.output

    def test_eml_json(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        path = tmp_path / "msg.eml"
        body = f"---------- Forwarded message ---------\nFrom: a@b.c\n\nSee {SHORT}"
        path.write_bytes(build_message(body=body).as_bytes())
        result = runner.invoke(main, ["x", str(path), "-j"])
        assert result.exit_code == 0
        assert json.loads(result.output) == {"body": f"See {SHORT}", "links": [SHORT]}

    def test_payload_json(self, runner, tmp_path, monkeypatch):
        from mailharvest.extract import encode_payload

        monkeypatch.chdir(tmp_path)
        path = tmp_path / "msg.json"
        path.write_text(json.dumps({
            "id": "18c",
            "payload": {
                "mimeType": "multipart/alternative",
                "parts": [
                    {"mimeType": "text/plain", "body": {"data": encode_payload(f"Hi {VIDEO}".encode())}},
                    {"mimeType": "text/html", "body": {"data": encode_payload(b"<p>Hi</p>")}},
                ],
            },
        }))
        result = runner.invoke(main, ["extract", str(path), "-b"])
        assert result.exit_code == 0
        assert result.output == f"Hi {VIDEO}\n"

    def test_no_body_no_links(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        path = tmp_path / "msg.json"
        path.write_text(json.dumps({"mimeType": "multipart/mixed", "parts": []}))
        result = runner.invoke(main, ["extract", str(path)])
        assert result.exit_code == 0
        assert "No body found" in result.output
        assert "No links found" in result.output

    def test_invalid_json(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        path = tmp_path / "msg.json"
        path.write_text("{not json")
        result = runner.invoke(main, ["extract", str(path)])
        assert result.exit_code == 1
        assert "Invalid JSON" in result.output


class TestLinks:
    def test_stdin(self, runner):
        text = f"first {VIDEO} then {SHORT} and {VIDEO} again"
        result = runner.invoke(main, ["links"], input=text)
        assert result.exit_code == 0
        assert result.output.splitlines() == [VIDEO, SHORT]

    def test_file(self, runner, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("nothing to see")
        result = runner.invoke(main, ["l", str(path)])
        assert result.exit_code == 0
        assert result.output == ""


class FakeClient:
    filters_attachments = True
    folder = "[Gmail]/All Mail"

    def __init__(self, messages):
        self.messages = messages
        self.login = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def connect(self, user, password):
        self.login = (user, password)

    def select_folder(self, folder=None, readonly=True):
        return len(self.messages)

    def search_filter(self, search):
        return list(self.messages)

    def fetch_raw(self, uid):
        return self.messages[uid]


class TestFetch:
    def test_requires_init(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(main, ["fetch", "gmail"])
        assert result.exit_code == 1
        assert "mailharvest init" in result.output

    def test_unknown_account(self, runner, project):
        result = runner.invoke(main, ["fetch", "gmail"])
        assert result.exit_code == 1
        assert "Account 'gmail' not found" in result.output

    def test_no_sender(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        runner.invoke(main, ["init"])
        runner.invoke(main, ["account", "add", "gmail", "me@gmail.com", "-p", "pw"])
        result = runner.invoke(main, ["fetch", "gmail"])
        assert result.exit_code == 1
        assert "No sender configured" in result.output

    def test_fetch(self, runner, project, monkeypatch):
        runner.invoke(main, ["account", "add", "gmail", "me@gmail.com", "-p", "pw"])
        client = FakeClient({
            b"5": build_message(
                body=f"Listen: {VIDEO}",
                attachments=[("week3.pdf", b"%PDF")],
                subject="Fwd: Week 3",
            ).as_bytes(),
        })
        monkeypatch.setattr(fetch_module, "get_imap_client", lambda acct: client)

        result = runner.invoke(main, ["fetch", "gmail", "-v"])
        assert result.exit_code == 0, result.output
        assert client.login == ("me@gmail.com", "pw")
        assert "from:teacher@example.com has:attachment newer_than:7d" in result.output
        assert "1 messages: Saved 1 attachments, 0 already present, 1 summaries" in result.output

        day = project / "data" / "attachments" / "2025-12-09"
        assert (day / "week3.pdf").read_bytes() == b"%PDF"
        assert (day / "Week 3_summary.docx").exists()

        result = runner.invoke(main, ["f", "gmail"])
        assert "Saved 0 attachments, 1 already present" in result.output

    def test_dry_run(self, runner, project, monkeypatch):
        runner.invoke(main, ["account", "add", "gmail", "me@gmail.com", "-p", "pw"])
        client = FakeClient({b"1": build_message(attachments=[("a.pdf", b"x")]).as_bytes()})
        monkeypatch.setattr(fetch_module, "get_imap_client", lambda acct: client)

        result = runner.invoke(main, ["fetch", "gmail", "-n", "-p", "override"])
        assert result.exit_code == 0, result.output
        assert "DRY RUN" in result.output
        assert "Would save 1 attachments" in result.output
        assert client.login == ("me@gmail.com", "override")
        assert not (project / "data").exists()
