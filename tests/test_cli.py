"""Command Line Tests"""

import json

import pytest

from members_api.__main__ import build_parser, main


class TestCreateUser:

    def test_creates_user(self, database, capsys):
        exit_code = main(["create-user", "alice", "--password", "wonderland"])

        assert exit_code == 0
        assert database.authenticate("alice", "wonderland")
        assert "alice" in capsys.readouterr().out

    def test_existing_user_fails_without_update(self, database):
        main(["create-user", "alice", "--password", "wonderland"])

        assert main(["create-user", "alice", "--password", "looking-glass"]) == 1
        assert database.authenticate("alice", "wonderland")

    def test_update_resets_password(self, database):
        main(["create-user", "alice", "--password", "wonderland"])

        assert main(["create-user", "alice", "--password", "looking-glass", "--update"]) == 0
        assert database.authenticate("alice", "looking-glass")

    def test_prompts_for_password(self, database, monkeypatch):
        monkeypatch.setattr("getpass.getpass", lambda prompt: "prompted-pass")

        assert main(["create-user", "bob"]) == 0
        assert database.authenticate("bob", "prompted-pass")


class TestSeed:

    def test_seeds_from_yaml(self, database, tmp_path):
        seed_file = tmp_path / "members.yaml"
        seed_file.write_text(
            "- Firstname: Lewis\n"
            "  Lastname: Carroll\n"
            "  Email: lewis@user.com\n"
            "  Active: true\n"
            "- Firstname: Ada\n"
            "  Lastname: Lovelace\n"
            "  Email: ada@user.com\n",
            encoding="utf-8"
        )

        assert main(["seed", str(seed_file)]) == 0

        members = database.list_members()
        assert [m["Firstname"] for m in members] == ["Lewis", "Ada"]
        assert members[0]["Active"] is True
        assert members[1]["Active"] is False

    def test_seeds_from_json_skipping_duplicates_and_invalid(self, database, tmp_path, capsys):
        records = [
            {"Firstname": "Lewis", "Lastname": "Carroll", "Email": "lewis@user.com"},
            {"Firstname": "Again", "Lastname": "Carroll", "Email": "lewis@user.com"},
            {"Firstname": "NoEmail", "Lastname": "Person"},
        ]
        seed_file = tmp_path / "seed.json"
        seed_file.write_text(json.dumps(records), encoding="utf-8")

        assert main(["seed", str(seed_file)]) == 0

        assert len(database.list_members()) == 1
        assert "Seeded 1 member(s), skipped 2" in capsys.readouterr().out

    def test_missing_file(self, database, tmp_path):
        assert main(["seed", str(tmp_path / "absent.yaml")]) == 1

    def test_rejects_non_list(self, database, tmp_path):
        seed_file = tmp_path / "members.yaml"
        seed_file.write_text("Firstname: Solo\n", encoding="utf-8")

        assert main(["seed", str(seed_file)]) == 1


class TestParser:

    def test_serve_defaults(self):
        args = build_parser().parse_args(["serve"])

        assert args.host == "127.0.0.1"
        assert args.port == 8000
        assert args.reload is False

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()

    def test_unknown_command_exits(self):
        with pytest.raises(SystemExit):
            main(["frobnicate"])
