"""
Tests for the command line interface.
"""

import json

import pytest
from relatedposts import __version__
from relatedposts.app import main


def _lines(capsys):
    return capsys.readouterr().out.splitlines()


class TestRelated:
    """Test the related command."""

    def test_related(self, capsys, corpus_file):
        main(["related", "--id", "cache", "--store", str(corpus_file)])

        ids = [line.split("\t")[0] for line in _lines(capsys)]
        # secret is restricted, wip is a draft
        assert ids == ["queue", "diary", "pinned-notice"]

    def test_max(self, capsys, corpus_file):
        main(["related", "--id", "cache", "--max", "1", "--store", str(corpus_file)])
        assert _lines(capsys) == ["queue\tBuilding a Queue"]

    def test_max_from_env(self, capsys, corpus_file, monkeypatch):
        monkeypatch.setenv("RELATEDPOSTS_MAX_COUNT", "2")
        main(["related", "--id", "cache", "--store", str(corpus_file)])
        assert len(_lines(capsys)) == 2

    def test_invalid_max_from_env(self, corpus_file, monkeypatch):
        monkeypatch.setenv("RELATEDPOSTS_MAX_COUNT", "many")
        with pytest.raises(SystemExit, match="RELATEDPOSTS_MAX_COUNT"):
            main(["related", "--id", "cache", "--store", str(corpus_file)])

    def test_zero_max(self, capsys, corpus_file):
        main(["related", "--id", "cache", "--max", "0", "--store", str(corpus_file)])
        assert _lines(capsys) == ["No related posts."]

    def test_negative_max(self, corpus_file):
        with pytest.raises(SystemExit, match="--max"):
            main(["related", "--id", "cache", "--max", "-1", "--store", str(corpus_file)])

    def test_explain(self, capsys, corpus_file):
        main(["related", "--id", "cache", "--max", "1", "--explain", "--store", str(corpus_file)])
        line = _lines(capsys)[0]
        assert line.startswith("queue\t")
        assert "tags=50.00" in line
        assert "cat=10" in line

    def test_unknown_id(self, corpus_file):
        with pytest.raises(SystemExit, match="Post not found"):
            main(["related", "--id", "nope", "--store", str(corpus_file)])

    def test_draft_reference_needs_flag(self, capsys, corpus_file):
        with pytest.raises(SystemExit):
            main(["related", "--id", "wip", "--store", str(corpus_file)])

        main(["related", "--id", "wip", "--drafts", "--store", str(corpus_file)])
        assert _lines(capsys)[0].startswith("cache\t")

    def test_from_database(self, capsys, corpus_file, tmp_path):
        db_path = tmp_path / "posts.db"
        main(["import", "--store", str(corpus_file), "--db", str(db_path)])
        capsys.readouterr()

        main(["related", "--id", "cache", "--db", str(db_path)])
        ids = [line.split("\t")[0] for line in _lines(capsys)]
        assert ids == ["queue", "diary", "pinned-notice"]

    def test_missing_database(self, tmp_path):
        with pytest.raises(SystemExit, match="Database not found"):
            main(["related", "--id", "cache", "--db", str(tmp_path / "none.db")])


class TestValidateAndAdd:
    """Test validate and add commands."""

    def test_validate_valid(self, capsys, tmp_path, valid_post):
        path = tmp_path / "post.json"
        path.write_text(json.dumps(valid_post))
        main(["validate", "--input", str(path)])
        assert _lines(capsys) == ["Valid"]

    def test_validate_invalid(self, capsys, tmp_path):
        path = tmp_path / "post.json"
        path.write_text(json.dumps({"title": "No id"}))
        with pytest.raises(SystemExit) as exc:
            main(["validate", "--input", str(path)])
        assert exc.value.code == 2
        assert "Invalid:" in capsys.readouterr().out

    def test_validate_strict_unknown_field(self, capsys, tmp_path, valid_post):
        valid_post["color"] = "red"
        path = tmp_path / "post.json"
        path.write_text(json.dumps(valid_post))
        with pytest.raises(SystemExit):
            main(["validate", "--strict", "--input", str(path)])
        assert "Unknown field: color" in capsys.readouterr().out

    def test_add_new_then_unchanged(self, capsys, tmp_path, valid_post):
        post_path = tmp_path / "post.json"
        post_path.write_text(json.dumps(valid_post))
        store = tmp_path / "posts.json"

        main(["add", "--input", str(post_path), "--store", str(store)])
        assert "Status: new" in capsys.readouterr().out

        main(["add", "--input", str(post_path), "--store", str(store)])
        assert "Status: no-change" in capsys.readouterr().out

        valid_post["title"] = "Building a Better Cache"
        post_path.write_text(json.dumps(valid_post))
        main(["add", "--input", str(post_path), "--store", str(store)])
        assert "Status: updated" in capsys.readouterr().out

        saved = json.loads(store.read_text())
        assert [p["title"] for p in saved["posts"]] == ["Building a Better Cache"]

    def test_missing_input(self, tmp_path):
        with pytest.raises(SystemExit, match="Input file not found"):
            main(["add", "--input", str(tmp_path / "none.json"), "--store", str(tmp_path / "s.json")])


class TestListings:
    """Test list, neighbors, tags and categories."""

    def test_list(self, capsys, corpus_file):
        main(["list", "--store", str(corpus_file)])
        out = capsys.readouterr().out
        assert "Found 5 posts" in out
        assert "pinned-notice  Site Notice [pinned]" in out
        assert "[restricted]" in out
        assert "wip" not in out

    def test_list_drafts(self, capsys, corpus_file):
        main(["list", "--drafts", "--store", str(corpus_file)])
        assert "Rust Draft [draft]" in capsys.readouterr().out

    def test_neighbors(self, capsys, corpus_file):
        main(["neighbors", "--id", "cache", "--store", str(corpus_file)])
        prev_line, next_line = _lines(capsys)
        assert prev_line.startswith("Prev: queue")
        assert next_line.startswith("Next: diary")

    def test_tags(self, capsys, corpus_file):
        main(["tags", "--store", str(corpus_file)])
        assert _lines(capsys) == ["go\t3", "life\t1", "rust\t2"]

    def test_categories(self, capsys, corpus_file):
        main(["categories", "--store", str(corpus_file)])
        assert _lines(capsys) == ["systems\t3", "life\t1", "Uncategorized\t1"]


class TestFeedCommands:
    def test_export_feed(self, capsys, corpus_file, tmp_path):
        out = tmp_path / "feed.json"
        main(["export-feed", "--store", str(corpus_file), "--output", str(out)])

        entries = json.loads(out.read_text(encoding="utf-8"))
        assert [e["id"] for e in entries][0] == "secret"
        assert f"Wrote {out}" in capsys.readouterr().out

    def test_fetch_feed_error(self, monkeypatch):
        from relatedposts import app

        def failing(url):
            raise ValueError("Feed URL not found (404)")

        monkeypatch.setattr(app, "fetch_feed", failing)
        with pytest.raises(SystemExit, match="404"):
            main(["fetch-feed", "--url", "https://blog.example.com/feed.json"])


class TestSiteCommands:
    def test_friends(self, capsys, tmp_path):
        config = tmp_path / "site.json"
        config.write_text(json.dumps({
            "profile": {"avatar": "a.png", "name": "Me"},
            "friends": [
                {"title": "Low", "imgurl": "i", "desc": "d", "siteurl": "https://low.example", "weight": 1},
                {"title": "Off", "imgurl": "i", "desc": "d", "siteurl": "https://off.example", "enabled": False},
                {"title": "High", "imgurl": "i", "desc": "d", "siteurl": "https://high.example", "weight": 9,
                 "tags": ["Docs"]},
            ],
        }))
        main(["friends", "--config", str(config)])
        assert _lines(capsys) == [
            "  9  High  https://high.example, Docs",
            "  1  Low  https://low.example",
        ]

    def test_friends_bad_config(self, tmp_path):
        config = tmp_path / "site.json"
        config.write_text(json.dumps({"profile": {"avatar": "a", "name": "b"}, "theme": "dark"}))
        with pytest.raises(SystemExit, match="theme"):
            main(["friends", "--config", str(config)])

    def test_figure(self, capsys, tmp_path):
        page = tmp_path / "page.html"
        page.write_text('<img src="/a.png" alt="Caption">', encoding="utf-8")
        main(["figure", "--input", str(page)])
        assert "<figcaption>Caption</figcaption>" in capsys.readouterr().out


class TestMain:
    def test_version(self, capsys):
        main(["--version"])
        assert _lines(capsys) == [__version__]

    def test_no_command_prints_help(self, capsys):
        main([])
        assert "usage: relatedposts" in capsys.readouterr().out
