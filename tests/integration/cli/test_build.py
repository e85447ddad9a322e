"""Integration test for the build command (extract -> publish -> commit -> export pipeline)"""

import pytest
from typer.testing import CliRunner

from blockpress.cli.cli import app


HOME_HTML = """<!DOCTYPE html>
<html>
<head>
  <title>Acme</title>
  <link rel="stylesheet" href="styles.css">
</head>
<body>
  <!-- BLOCK:hero:draggable -->
  <section><h1 data-editable>Welcome</h1><img data-editable="logo" src="assets/logo.png"></section>
  <!-- /BLOCK:hero -->
  <footer><a data-editable="contact_link" href="/contact">Contact</a></footer>
</body>
</html>
"""


@pytest.fixture(name="site")
def site_fixture(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("BLOCKPRESS_DB_URL", f"sqlite:///{tmp_path}/test.db")
    site = tmp_path / "site"
    (site / "assets").mkdir(parents=True)
    (site / "assets" / "logo.png").write_bytes(b"png")
    (site / "styles.css").write_text("body { background: url(assets/bg.jpg); }", encoding="utf-8")
    (site / "acme.html").write_text(HOME_HTML, encoding="utf-8")
    return site


def test_build_cmd_runs_full_pipeline(site, tmp_path):
    """build writes a rendered page plus the page's published css and assets."""
    runner = CliRunner()
    result = runner.invoke(app, ["build", "site", "--out-dir", str(tmp_path / "dist")])

    assert result.exit_code == 0, result.output
    assert "1 created" in result.output

    page = (tmp_path / "dist" / "acme.html").read_text(encoding="utf-8")
    assert page.startswith("<!DOCTYPE html>")
    assert '<link rel="stylesheet" href="/css/acme.css">' in page
    assert '<img data-editable="logo" src="/assets/acme/logo.png">' in page
    assert '<a data-editable="contact_link" href="/contact">Contact</a>' in page

    assert (tmp_path / "public" / "css" / "acme.css").read_text(encoding="utf-8") == (
        "body { background: url(/assets/acme/bg.jpg); }"
    )
    assert (tmp_path / "public" / "assets" / "acme" / "logo.png").read_bytes() == b"png"


def test_build_cmd_second_run_is_unchanged(site, tmp_path):
    runner = CliRunner()
    assert runner.invoke(app, ["build", "site"]).exit_code == 0
    result = runner.invoke(app, ["build", "site"])
    assert result.exit_code == 0, result.output
    assert "0 created, 0 updated, 1 unchanged" in result.output
    assert (tmp_path / "dist" / "acme.html").exists()


def test_build_cmd_fragment(site, tmp_path):
    runner = CliRunner()
    result = runner.invoke(app, ["build", "site", "--fragment"])
    assert result.exit_code == 0, result.output
    page = (tmp_path / "dist" / "acme.html").read_text(encoding="utf-8")
    assert page.startswith("<section>")
    assert "<head>" not in page


def test_build_cmd_no_extractable_page(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("BLOCKPRESS_DB_URL", f"sqlite:///{tmp_path}/test.db")
    (tmp_path / "broken.html").write_text("<p>no body</p>", encoding="utf-8")
    result = CliRunner().invoke(app, ["build", "broken.html"])
    assert result.exit_code == 1


def test_step_commands(site, tmp_path):
    """init, extract, commit and export run the same pipeline one step at a time."""
    runner = CliRunner()
    assert runner.invoke(app, ["init"]).exit_code == 0

    result = runner.invoke(app, ["commit"])
    assert result.exit_code == 1
    assert "Nothing staged" in result.output

    result = runner.invoke(app, ["extract", "site"])
    assert result.exit_code == 0, result.output
    assert (tmp_path / ".blockpress" / "staging" / "acme.json").exists()

    result = runner.invoke(app, ["commit"])
    assert result.exit_code == 0, result.output
    assert "created: acme" in result.output

    result = runner.invoke(app, ["export", "--all", "--fragment", "--out-dir", "out"])
    assert result.exit_code == 0, result.output
    assert (tmp_path / "out" / "acme.html").read_text(encoding="utf-8").startswith("<section>")

    result = runner.invoke(app, ["export", "--slug", "missing"])
    assert result.exit_code == 1

    assert runner.invoke(app, ["init", "--reset"]).exit_code == 0
    assert runner.invoke(app, ["list"]).exit_code == 1
