"""Common functionality for the run scripts."""

import sys
from argparse import ArgumentParser
from pathlib import Path
from types import UnionType
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, CliApp, SettingsError
from rich import print as rich_print
from rich.panel import Panel

from buildkeeper.utils.log import get_logger


def _shorten_strings(data, *, max_length=30):
    """
    Recursively shortens all strings in a nested data structure to a maximum length.

    Args:
        data: The nested data structure (dicts, lists, and strings).
        max_length: The maximum length for strings.

    Returns:
        The modified data structure with shortened strings.
    """
    if isinstance(data, str):
        data = data.replace("\n", "\\n")
        if len(data) <= max_length:
            return data
        return data[: max_length - 3] + "..."
    elif isinstance(data, list):
        return [_shorten_strings(item, max_length=max_length) for item in data]
    elif isinstance(data, dict):
        return {key: _shorten_strings(value, max_length=max_length) for key, value in data.items()}
    else:
        return data


_VALIDATION_ERROR_HELP_TEXT = """
The following errors are raised by Pydantic, trying to instantiate the configuration based on
the merged configuration dictionary [bold](see above)[/bold].

Every new indented block corresponds to a different error from Pydantic.
The first line of each block is the attribute that failed validation, the following lines are the error messages.
"""

_SETTING_ERROR_HINTS = """
[red][bold]Hints:[/bold][/red]
Run `buildkeeper <subcommand> --help` for usage examples.

[red][bold]Common mistakes:[/bold][/red]
- You used dashes instead of underscores (wrong: `--jobs-dir`, correct: `--jobs_dir`).
- You passed `s3://bucket/prefix` as bucket (use `--bucket bucket --prefix prefix/`).
"""


class ConfigHelper:
    """Produce easy-to-read help text from pydantic setting objects."""

    def _get_type_name(self, item: Any, full: bool = False):
        """Given a config type, return a string that is either the full name or just the class name."""
        full_name = str(item).removeprefix("<class '").removesuffix("'>")
        if full:
            return full_name
        return full_name.split(".")[-1]

    def _get_value_help_string(self, item: Any, description: str | None):
        """Given an item, document it"""
        if isinstance(item, UnionType):
            out = ""
            if description:
                out += f"    {description}\n"
            out += "    This config item can be one of the following things:\n"
            things = str(item).split("|")
            for thing in things:
                out += f"    {thing.strip()}\n"
            return out.strip()
        out = self._get_type_name(item)
        if description:
            out += f"\n    {description}"
        return out

    def get_help(self, config_type: type[BaseSettings]) -> str:
        lines = []
        for name, field_info in config_type.model_fields.items():
            line = name
            if field_info.is_required():
                line += " (required)"
            line += ": "
            line += self._get_value_help_string(field_info.annotation, field_info.description)
            lines.append(line)
        return "\n\n".join(lines)


class BasicCLI:
    def __init__(
        self,
        config_type: type[BaseSettings],
        *,
        default_config_file: Path | None = None,
        help_text: str | None = None,
    ):
        """This class implements a basic CLI for buildkeeper. It is based on pydantic-settings, i.e., takes
        a `BaseSettings` object. In principle you could just initialize these via `pydantic-settings`'s `CliApp.run`,
        however, we also want to add a `--config` option to load additional config files and some other things.
        We also try to improve a bit on the pydantic error messages in here.

        Args:
            config_type: The type of the configuration object to instantiate.
            default_config_file: Config file that is loaded if no `--config` is given.
            help_text: If given, this will override the default help text that would usually be shown
                by argparse.
        """
        self.arg_type = config_type
        self.default_config_file = default_config_file
        self.logger = get_logger("bk-cli", emoji="🔧")
        self.help_text = help_text

    def get_config(self, args: list[str] | None = None) -> BaseSettings:
        """Get the configuration object from defaults and command arguments."""

        # >>> Step 1: Use argparse to add a --config option to load whole config files

        parser = ArgumentParser(description=__doc__, add_help=False)
        parser.add_argument(
            "--config",
            type=Path,
            action="append",
            default=[],
            help=(
                "Load additional config files. Use this option multiple times to load "
                "multiple files, e.g., --config config1.yaml --config config2.yaml"
            ),
        )
        parser.add_argument(
            "-h",
            "--help",
            help="Show help text and exit",
            action="store_true",
        )
        parser.add_argument(
            "--help_option",
            help="Show help text for a specific option",
        )
        if self.default_config_file is not None:
            parser.add_argument(
                "--no_config_file",
                action="store_true",
                help="Do not load default config file when no config file is provided",
            )
        parser.add_argument(
            "--print_config",
            action="store_true",
            help="Print the final config and exit",
        )

        # >>> Step 2: Parse argparse arguments but keep all the remaining arguments.
        # Explicitly handle --help and --help_option

        cli_args, remaining_args = parser.parse_known_args(args)

        if cli_args.help:
            if self.help_text:
                rich_print(self.help_text)
            else:
                parser.print_help()
            sys.exit(0)
        if cli_args.help_option:
            module, _, name = cli_args.help_option.rpartition(".")
            if module not in sys.modules:
                __import__(module)
            type_ = getattr(sys.modules[module], name)
            print(ConfigHelper().get_help(type_))
            sys.exit(0)

        # >>> Step 3: Load config files and merge them in a big nested data structure

        config_merged = {}
        if cli_args.config:
            for _f in cli_args.config:
                txt = Path(_f).read_text()
                if not txt.strip():
                    self.logger.warning(f"Config file {_f} is empty")
                    continue
                _loaded = yaml.safe_load(txt)
                config_merged.update(_loaded)
        elif self.default_config_file is not None and not cli_args.no_config_file:
            if self.default_config_file.is_file():
                self.logger.debug(f"Loading default config from {self.default_config_file}")
                txt = self.default_config_file.read_text()
                config_merged = yaml.safe_load(txt) or {}
            else:
                self.logger.debug(f"Default config file {self.default_config_file} not found")

        # >>> Step 4: Bring together remaining arguments and the merged config to initialize the config object
        # This is done by CliApp.run from pydantic-settings

        try:
            config: BaseSettings = CliApp.run(self.arg_type, remaining_args, **config_merged, cli_exit_on_error=False)  # type: ignore
        except ValidationError as e:
            rich_print(
                Panel.fit(
                    "[red][bold]Merged configuration dictionary\n[/bold]"
                    "This is all the configuration that was provided from defaults and --config[/red]\n\n"
                    + yaml.dump(_shorten_strings(config_merged))
                )
            )
            rich_print(
                Panel.fit(
                    "[red][bold]Validation error[/bold]\n" + _VALIDATION_ERROR_HELP_TEXT + "[/red]\n" + str(e),
                )
            )
            msg = "Invalid configuration. Please check the above output."
            raise RuntimeError(msg) from None
        except SettingsError as e:
            rich_print(Panel.fit("[red][bold]SettingsError[/bold][/red]\n\n" + str(e) + "\n\n" + _SETTING_ERROR_HINTS))
            msg = "Invalid command line arguments. Please check the above output in the box."
            raise RuntimeError(msg) from None

        if cli_args.print_config:  # type: ignore
            print(yaml.dump(config.model_dump(mode="json")))
            sys.exit(0)

        return config
