"""[cyan][bold]Main command line interface for buildkeeper.[/bold][/cyan]

[cyan][bold]=== USAGE ===[/bold][/cyan]

[green]buildkeeper <command> [options][/green]

Display usage instructions for a specific command:

[green]buildkeeper <command> [bold]--help[/bold][/green]

[cyan][bold]=== SUBCOMMANDS ===[/bold][/cyan]

[bold][green]upload-logs[/green][/bold] or [bold][green]u[/green][/bold]: Upload the build logs written today to object storage
    and delete the local copies that were uploaded.
[bold][green]list-readers[/green][/bold] or [bold][green]c[/green][/bold]: List the collaborators of a GitHub repository
    that have read access.
"""

import argparse
import sys

import rich


def get_cli():
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument(
        "command",
        choices=[
            "upload-logs",
            "list-readers",
            "u",
            "c",
        ],
        nargs="?",
    )
    parser.add_argument("-h", "--help", action="store_true", help="Show this help message and exit")
    return parser


def main(args: list[str] | None = None):
    if args is None:
        args = sys.argv[1:]
    cli = get_cli()
    parsed_args, remaining_args = cli.parse_known_args(args)  # type: ignore
    command = parsed_args.command
    show_help = parsed_args.help
    if show_help:
        if not command:
            # Show main help
            rich.print(__doc__)
            sys.exit(0)
        else:
            # Add to remaining_args
            remaining_args.append("--help")
    elif not command:
        cli.print_help()
        sys.exit(2)
    # Defer imports to avoid unnecessary long loading times
    if command in ["upload-logs", "u"]:
        from buildkeeper.run.run_upload import run_from_cli as run_upload_main

        run_upload_main(remaining_args)
    elif command in ["list-readers", "c"]:
        from buildkeeper.run.run_collaborators import run_from_cli as run_collaborators_main

        run_collaborators_main(remaining_args)
    else:
        msg = f"Unknown command: {command}"
        raise ValueError(msg)


if __name__ == "__main__":
    sys.exit(main())
