"""List the collaborators of a GitHub repository that have read access."""

import argparse
import getpass
import os
import sys
from pathlib import Path

from buildkeeper.exceptions import GithubAPIError, InvalidGithubURL
from buildkeeper.utils.config import load_environment_variables
from buildkeeper.utils.github import list_collaborators_with_permission, parse_gh_repo_url
from buildkeeper.utils.log import get_logger

logger = get_logger("bk-github", emoji="🐙")


def parse_repository(repository: list[str]) -> tuple[str, str]:
    """Accepts `OWNER REPO`, `OWNER/REPO` or a GitHub URL."""
    if len(repository) == 2:
        return repository[0], repository[1]
    if len(repository) != 1:
        msg = f"Expected OWNER REPO, OWNER/REPO or a repository URL, got {' '.join(repository)!r}"
        raise InvalidGithubURL(msg)
    (value,) = repository
    if "github.com" in value:
        return parse_gh_repo_url(value)
    owner, _, repo = value.partition("/")
    if not owner or not repo or "/" in repo:
        msg = f"Expected OWNER/REPO, got {value!r}"
        raise InvalidGithubURL(msg)
    return owner, repo


def get_token(user: str) -> str:
    """Token from `GITHUB_TOKEN`, otherwise ask for it without echoing."""
    token = os.environ.get("GITHUB_TOKEN", "")
    if token:
        return token
    prompt = f"GitHub token or password for {user}: " if user else "GitHub token: "
    return getpass.getpass(prompt)


def get_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="buildkeeper list-readers", description=__doc__)
    parser.add_argument("repository", nargs="+", help="OWNER REPO, OWNER/REPO or https://github.com/OWNER/REPO")
    parser.add_argument(
        "--user",
        default=os.environ.get("GITHUB_USER", ""),
        help="Account to authenticate as (default: $GITHUB_USER). The secret is read from $GITHUB_TOKEN or prompted.",
    )
    parser.add_argument(
        "--permission",
        choices=["pull", "triage", "push", "maintain", "admin"],
        default="pull",
        help="Permission flag that collaborators must have (default: pull, i.e., read access)",
    )
    parser.add_argument("--env_var_path", type=Path, help="Path to a .env file to load environment variables from")
    return parser


def run_from_cli(args: list[str] | None = None) -> None:
    cli_parser = get_cli_parser()
    cli_args = cli_parser.parse_args(args)
    try:
        owner, repo = parse_repository(cli_args.repository)
    except InvalidGithubURL as e:
        cli_parser.error(str(e))
    load_environment_variables(cli_args.env_var_path)
    user = cli_args.user or os.environ.get("GITHUB_USER", "")
    try:
        logins = list_collaborators_with_permission(
            owner, repo, permission=cli_args.permission, user=user, token=get_token(user)
        )
    except GithubAPIError as e:
        logger.error("Error: %s", e.message)
        sys.exit(1)
    for login in logins:
        print(login)


if __name__ == "__main__":
    run_from_cli()
