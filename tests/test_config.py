"""Tests for portgen.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from portgen.assembler import DeclarationNames
from portgen.config import ExtractorConfig, NamesConfig, PortgenConfig, load_config
from portgen.errors import ConfigError
from portgen.models import ModuleDescriptor


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, PortgenConfig)
    assert config.root == tmp_path.resolve()
    assert config.source_root == Path("src")
    assert config.module is None
    assert config.output_name == "index.d.ts"
    assert config.descriptor is None
    assert config.extractor == ExtractorConfig()
    assert config.names.to_declaration_names() == DeclarationNames()
    assert config.templates_dir is None


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".portgen.yml"
    config_file.write_text(
        """
source_root: "frontend/src"
module: "Main"
descriptor: "build/ports.json"
templates_dir: "templates"
extractor:
  command: ["node", "scripts/extract.js", "--module", "Main"]
  cwd: "elm"
  timeout: 30
names:
  message: "Outgoing"
  app: "MainApp"
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.source_root == Path("frontend/src")
    assert config.module == "Main"
    assert config.descriptor == tmp_path.resolve() / "build" / "ports.json"
    assert config.templates_dir == tmp_path.resolve() / "templates"
    assert config.extractor.command == ["node", "scripts/extract.js", "--module", "Main"]
    assert config.extractor.cwd == tmp_path.resolve() / "elm"
    assert config.extractor.timeout == pytest.approx(30.0)
    names = config.names.to_declaration_names()
    assert names == DeclarationNames(message="Outgoing", flags="Flags", app="MainApp", root="Elm")


def test_extractor_command_string_is_split_like_a_shell(tmp_path: Path) -> None:
    (tmp_path / ".portgen.yml").write_text(
        "extractor:\n  command: \"elm make src/CodeGenTarget.elm --output 'build/gen.js'\"\n",
        encoding="utf-8",
    )
    config = load_config(tmp_path)
    assert config.extractor.command == ["elm", "make", "src/CodeGenTarget.elm", "--output", "build/gen.js"]


def test_output_path_nests_dotted_module_names(tmp_path: Path) -> None:
    config = PortgenConfig(root=tmp_path)
    main = ModuleDescriptor(module_name="Main")
    home = ModuleDescriptor(module_name="Page.Home")
    assert config.output_path(main.module_path) == tmp_path / "src" / "Main" / "index.d.ts"
    assert config.output_path(home.module_path) == tmp_path / "src" / "Page" / "Home" / "index.d.ts"


def test_invalid_names_fail_at_load_time(tmp_path: Path) -> None:
    (tmp_path / ".portgen.yml").write_text("names:\n  flags: \"my flags\"\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_invalid_yaml_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".portgen.yml").write_text("extractor: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_non_mapping_root_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".portgen.yml").write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_bad_extractor_settings_raise_config_error(tmp_path: Path) -> None:
    (tmp_path / ".portgen.yml").write_text("extractor:\n  command: {node: 1}\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)
    (tmp_path / ".portgen.yml").write_text("extractor:\n  timeout: 0\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_names_config_falls_back_to_defaults() -> None:
    assert NamesConfig(root="App").to_declaration_names() == DeclarationNames(root="App")
