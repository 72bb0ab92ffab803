"""[cyan][bold]Upload today's build logs to object storage.[/bold][/cyan]

[cyan][bold]=== BASIC OPTIONS ===[/bold][/cyan]

  -h --help           Show help text and exit
  --help_option       Print specific help text and exit
  --config CONFIG     Load additional config files. Use this option multiple times to load
                      multiple files, e.g., --config config1.yaml --config config2.yaml

[cyan][bold]=== EXAMPLES ===[/bold][/cyan]

Upload all Jenkins logs written today, gzip-compressed, to infrequent access storage:

[green]buildkeeper upload-logs --jobs_dir /var/lib/jenkins/jobs --bucket my-build-logs
[/green]

Keep logs uncompressed, archive them and put them below a prefix:

[green]buildkeeper upload-logs --jobs_dir /var/lib/jenkins/jobs --bucket my-build-logs \\
    --prefix jenkins/ --storage_tier archive --compress false
[/green]

Requires the [bold]aws[/bold] command line tool. Uploaded logs are deleted locally.
"""

import sys

from buildkeeper import CONFIG_DIR
from buildkeeper.exceptions import EXIT_MISSING_CAPABILITY, MissingCapabilityError
from buildkeeper.run.common import BasicCLI, ConfigHelper
from buildkeeper.types import UploadOutcome
from buildkeeper.uploader.config import UploadLogsConfig
from buildkeeper.uploader.pipeline import LogUploader
from buildkeeper.utils.config import load_environment_variables
from buildkeeper.utils.log import get_logger, log_to_file

logger = get_logger("bk-upload", emoji="📤")


def run_from_config(config: UploadLogsConfig) -> list[UploadOutcome]:
    load_environment_variables(config.env_var_path)
    uploader = LogUploader.from_config(config)
    # Before anything is written, including the transcript
    uploader.store.check_available()
    if config.log_file is None:
        return uploader.run(check_store=False)
    config.log_file.parent.mkdir(parents=True, exist_ok=True)
    with log_to_file(config.log_file):
        return uploader.run(check_store=False)


def run_from_cli(args: list[str] | None = None):
    if args is None:
        args = sys.argv[1:]
    help_text = (  # type: ignore
        __doc__ + "\n[cyan][bold]=== ALL THE OPTIONS ===[/bold][/cyan]\n\n" + ConfigHelper().get_help(UploadLogsConfig)
    )
    cli = BasicCLI(UploadLogsConfig, default_config_file=CONFIG_DIR / "upload_logs.yaml", help_text=help_text)
    config: UploadLogsConfig = cli.get_config(args)  # type: ignore
    try:
        outcomes = run_from_config(config)
    except MissingCapabilityError as e:
        logger.error(str(e))
        sys.exit(EXIT_MISSING_CAPABILITY)
    if config.fail_on_error and any(not outcome.ok for outcome in outcomes):
        sys.exit(1)


if __name__ == "__main__":
    run_from_cli()
