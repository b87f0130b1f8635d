"""Tests for the command line interface."""

import json

from click.testing import CliRunner

from aeo_rules.cli import cli


class TestCli:
    def test_check_url_json(self):
        runner = CliRunner()

        result = runner.invoke(cli, ["check-url", "http://example.com/Some_Page/With Spaces", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["ruleId"] == "url_structure"
        assert data["score"] == 40
        assert {issue["id"] for issue in data["issues"]} == {
            "NO_HTTPS", "CONTAINS_UPPERCASE", "USES_UNDERSCORES", "UNENCODED_SPACES",
        }

    def test_check_url_report(self):
        runner = CliRunner()

        result = runner.invoke(cli, ["check-url", "https://example.com/a/b/c/d/e/f"])

        assert result.exit_code == 0
        assert "6 levels" in result.output

    def test_check_url_invalid(self):
        runner = CliRunner()

        result = runner.invoke(cli, ["check-url", "not a url", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output)["score"] == 0

    def test_rules(self):
        runner = CliRunner()

        result = runner.invoke(cli, ["rules"])

        assert result.exit_code == 0
        assert "url_structure" in result.output
        assert "meta_description" in result.output
