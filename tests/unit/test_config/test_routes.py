"""Tests for route file loading and the read-only route table."""

from __future__ import annotations

from pathlib import Path

import pytest

from cmdgate.config.routes import RouteTable, RouteTableError, load_route_table
from cmdgate.domain.models import CommandSpec, ParamField

ROUTES_YAML = """\
/hello:
  command: echo
  args: [hello, world]
/env:
  command: env
  envs: [FOO=BAR]
  allow: [envs, callback]
/diff:
  command: diff
  dir: /tmp
  stdin: foo
  args:
    - expected.txt
    - "-"
  allow: [stdin]
"""


@pytest.fixture
def routes_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.yml"
    path.write_text(ROUTES_YAML)
    return path


class TestLoadRouteTable:
    def test_loads_all_routes(self, routes_file: Path) -> None:
        table = load_route_table(routes_file)
        assert sorted(table) == ["/diff", "/env", "/hello"]

        hello = table["/hello"]
        assert hello.command == "echo"
        assert hello.args == ("hello", "world")
        assert hello.allow == frozenset()

        env = table["/env"]
        assert env.envs == ("FOO=BAR",)
        assert env.is_allowed(ParamField.ENVS)
        assert env.is_allowed(ParamField.CALLBACK)
        assert not env.is_allowed(ParamField.ARGS)

        diff = table["/diff"]
        assert diff.dir == "/tmp"
        assert diff.stdin == "foo"
        assert diff.args == ("expected.txt", "-")

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(RouteTableError, match="Failed to read config file"):
            load_route_table(tmp_path / "nonexistent.yml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yml"
        path.write_text("/hello: [unclosed\n")
        with pytest.raises(RouteTableError, match="Failed to parse config"):
            load_route_table(path)

    def test_empty_file_is_empty_table(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yml"
        path.write_text("")
        assert len(load_route_table(path)) == 0

    def test_top_level_must_be_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yml"
        path.write_text("- /hello\n")
        with pytest.raises(RouteTableError, match="mapping"):
            load_route_table(path)

    def test_unknown_allow_name_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "allow.yml"
        path.write_text("/x:\n  command: echo\n  allow: [shell]\n")
        with pytest.raises(RouteTableError, match="/x"):
            load_route_table(path)

    def test_missing_command_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "nocmd.yml"
        path.write_text("/x:\n  args: [a]\n")
        with pytest.raises(RouteTableError):
            load_route_table(path)

    def test_unknown_key_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "typo.yml"
        path.write_text("/x:\n  command: echo\n  arg: [a]\n")
        with pytest.raises(RouteTableError):
            load_route_table(path)

    def test_path_must_start_with_slash(self, tmp_path: Path) -> None:
        path = tmp_path / "relative.yml"
        path.write_text("hello:\n  command: echo\n")
        with pytest.raises(RouteTableError, match="must start with '/'"):
            load_route_table(path)

    def test_null_fields_use_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "nulls.yml"
        path.write_text("/x:\n  command: echo\n  args:\n  allow:\n")
        spec = load_route_table(path)["/x"]
        assert spec.args == ()
        assert spec.allow == frozenset()


class TestRouteTable:
    def test_read_only(self) -> None:
        table = RouteTable({"/a": CommandSpec(command="true")})
        with pytest.raises(TypeError):
            table["/b"] = CommandSpec(command="true")  # type: ignore[index]

    def test_source_mapping_changes_not_visible(self) -> None:
        source = {"/a": CommandSpec(command="true")}
        table = RouteTable(source)
        source["/b"] = CommandSpec(command="false")
        assert "/b" not in table
        assert table.get("/b") is None

    def test_from_dict_accepts_specs(self) -> None:
        spec = CommandSpec(command="true")
        table = RouteTable.from_dict({"/a": spec, "/b": {"command": "false"}})
        assert table["/a"] is spec
        assert table["/b"].command == "false"
