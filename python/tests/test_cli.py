"""Tests for the pombump command line."""

import json
import textwrap

import pytest
import yaml
from pombump.__main__ import build_parser, main

POM = textwrap.dedent("""\
    <project xmlns="http://maven.apache.org/POM/4.0.0">
      <groupId>com.example</groupId>
      <artifactId>demo</artifactId>
      <version>1.0.0</version>
      <properties>
        <jackson.version>2.15.2</jackson.version>
      </properties>
      <dependencyManagement>
        <dependencies>
          <dependency>
            <groupId>io.netty</groupId>
            <artifactId>netty-bom</artifactId>
            <version>4.1.94.Final</version>
            <type>pom</type>
            <scope>import</scope>
          </dependency>
        </dependencies>
      </dependencyManagement>
      <dependencies>
        <dependency>
          <groupId>com.fasterxml.jackson.core</groupId>
          <artifactId>jackson-databind</artifactId>
          <version>${jackson.version}</version>
        </dependency>
        <dependency>
          <groupId>io.netty</groupId>
          <artifactId>netty-handler</artifactId>
        </dependency>
        <dependency>
          <groupId>io.netty</groupId>
          <artifactId>netty-codec-http</artifactId>
        </dependency>
        <dependency>
          <groupId>junit</groupId>
          <artifactId>junit</artifactId>
          <version>4.13.2</version>
        </dependency>
      </dependencies>
    </project>
""")

PATCHES = ("com.fasterxml.jackson.core@jackson-databind@2.15.3 "
           "io.netty@netty-handler@4.1.100.Final io.netty@netty-codec-http@4.1.118.Final "
           "junit@junit@4.13.3")


@pytest.fixture
def pom_file(tmp_path):
    path = tmp_path / "pom.xml"
    path.write_text(POM)
    return str(path)


class TestArgumentParsing:
    """Tests for the argument parser."""

    def test_analyze_defaults(self):
        args = build_parser().parse_args(["analyze", "pom.xml"])

        assert args.command == "analyze"
        assert args.pom_file == "pom.xml"
        assert args.output_format == "human"
        assert args.search_properties is False
        assert args.remote_parents is False
        assert args.maven_repo == "https://repo1.maven.org/maven2"

    def test_invalid_output_format(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["analyze", "pom.xml", "--output", "xml"])

    def test_no_command(self, capsys):
        assert main([]) == 1
        assert "analyze" in capsys.readouterr().out


class TestAnalyzeCommand:
    """End-to-end tests for 'pombump analyze'."""

    def test_human_report(self, pom_file, capsys):
        assert main(["analyze", pom_file]) == 0

        out = capsys.readouterr().out
        assert f"POM Analysis: {pom_file}" in out
        assert "BOMs Detected: 1" in out
        assert "jackson.version = 2.15.2" in out

    def test_json_report_with_patches(self, pom_file, capsys):
        assert main(["analyze", pom_file, "--output", "json", "--patches", PATCHES]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["dependencies"]["total"] == 5
        assert data["dependencies"]["using_properties"] == 1
        assert [(p["artifactId"], p["version"]) for p in data["patches"]] == [
            ("netty-bom", "4.1.118.Final"),
            ("junit", "4.13.3"),
        ]
        assert data["patches"][0]["scope"] == "import"
        assert data["property_updates"] == {"jackson.version": "2.15.3"}
        assert data["conflicts"][0]["groupId"] == "io.netty"
        assert data["conflicts"][0]["recommendedAction"] == "update_bom"

    def test_write_patch_files(self, pom_file, tmp_path, capsys):
        deps = tmp_path / "pombump-deps.yaml"
        props = tmp_path / "pombump-properties.yaml"

        exit_code = main([
            "analyze", pom_file, "--patches", PATCHES,
            "--output-deps", str(deps), "--output-properties", str(props),
        ])

        assert exit_code == 0
        out = capsys.readouterr().out
        assert f"Wrote 2 patches to {deps} (2 total)" in out
        assert f"Wrote 1 properties to {props} (1 total)" in out
        assert [p["artifactId"] for p in yaml.safe_load(deps.read_text())["patches"]] == ["netty-bom", "junit"]
        assert yaml.safe_load(props.read_text()) == {
            "properties": [{"property": "jackson.version", "value": "2.15.3"}]
        }

    def test_structured_output_has_no_trailing_messages(self, pom_file, tmp_path, capsys):
        deps = tmp_path / "deps.yaml"

        assert main(["analyze", pom_file, "--output", "yaml", "--patches", "junit@junit@4.13.3",
                     "--output-deps", str(deps)]) == 0

        data = yaml.safe_load(capsys.readouterr().out)
        assert data["patches"][0]["artifactId"] == "junit"
        assert deps.exists()

    def test_patch_file_input(self, pom_file, tmp_path, capsys):
        patch_file = tmp_path / "patches.yaml"
        patch_file.write_text("patches:\n  - groupId: junit\n    artifactId: junit\n    version: 4.13.3\n")

        assert main(["analyze", pom_file, "--output", "json", "--patch-file", str(patch_file)]) == 0

        assert json.loads(capsys.readouterr().out)["patches"][0]["version"] == "4.13.3"

    def test_search_properties(self, tmp_path, capsys):
        (tmp_path / "pom.xml").write_text(textwrap.dedent("""\
            <project>
              <groupId>com.example</groupId>
              <artifactId>parent</artifactId>
              <version>1.0.0</version>
              <properties><assertj.version>3.24.2</assertj.version></properties>
            </project>
        """))
        (tmp_path / "app").mkdir()
        app = tmp_path / "app" / "pom.xml"
        app.write_text(textwrap.dedent("""\
            <project>
              <parent>
                <groupId>com.example</groupId>
                <artifactId>parent</artifactId>
                <version>1.0.0</version>
              </parent>
              <artifactId>app</artifactId>
              <dependencies>
                <dependency>
                  <groupId>org.assertj</groupId>
                  <artifactId>assertj-core</artifactId>
                  <version>${assertj.version}</version>
                </dependency>
              </dependencies>
            </project>
        """))

        assert main(["analyze", str(app), "--output", "json", "--search-properties"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["properties"]["defined"]["assertj.version"] == "3.24.2"
        assert "warnings" not in data

    def test_missing_pom(self, tmp_path, capsys):
        assert main(["analyze", str(tmp_path / "missing.xml")]) == 1

        assert "Error: failed to analyze project" in capsys.readouterr().err

    def test_invalid_patch(self, pom_file, capsys):
        assert main(["analyze", pom_file, "--patches", "junit:junit:4.13.3"]) == 1

        assert "invalid patch specification" in capsys.readouterr().err

    def test_missing_patch_file(self, pom_file, tmp_path, capsys):
        assert main(["analyze", pom_file, "--patch-file", str(tmp_path / "missing.yaml")]) == 1

        assert "Error:" in capsys.readouterr().err
