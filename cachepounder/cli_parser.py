"""
CLI argument parsing for the cache pounder.

Two commands are provided: ``run`` executes the warmup and measured rounds
against the configured cache, ``configview`` prints the validated
configuration and exits.
"""

import argparse
import sys

import yaml

from cachepounder import VERSION
from cachepounder.config import DEFAULT_CONFIG_FILE, DEFAULT_RESULTS_DIR, EXIT_CODE, OUTPUT_FORMATS
from cachepounder.errors import ConfigurationError, ErrorCode

HELP_MESSAGES = {
    'run': "Run the pounder against the configured cache.",
    'configview': "View the final config based on the specified options.",
    'config_file': "Path to the YAML workload configuration (storeType, threadCount, entryCount, ...).",
    'params': (
        "Override a configuration option. Values are parsed as YAML scalars. "
        "\nMay be given multiple times: --param threadCount=8 --param rounds=5"
    ),
    'adapter': (
        "Cache collaborator to pound, as 'package.module:ClassName'. The class must derive from "
        "cachepounder.interfaces.CacheAdapter and is constructed with the workload configuration. "
        "Defaults to the reference adapter for the configured storeType."
    ),
    'results_dir': "Directory where the benchmark results will be saved.",
    'csv_file': "Path of the streamed per-batch CSV log. Defaults to results.csv in the run directory.",
    'no_csv': "Do not write the per-batch CSV log.",
    'output_format': "Additional report files to write into the run directory.",
    'seed': "Base seed for the per-worker random generators. Overrides 'seed' in the config file.",
    'no_progress': "Disable the progress bar.",
    'debug': "Enable debug mode",
    'verbose': "Enable verbose mode (adds per-worker read, write and miss counts after each round)",
    'stream_log_level': "Log level for the console stream",
}

# These are used to know if logging needs to be updated.
logging_options = ['debug', 'verbose', 'stream_log_level']


def add_universal_arguments(parser):
    standard_args = parser.add_argument_group("Standard Arguments")
    standard_args.add_argument('--results-dir', '-rd', type=str, default=DEFAULT_RESULTS_DIR,
                               help=HELP_MESSAGES['results_dir'])

    output_control = parser.add_argument_group("Output Control")
    output_control.add_argument("--debug", action="store_true", help=HELP_MESSAGES['debug'])
    output_control.add_argument("--verbose", action="store_true", help=HELP_MESSAGES['verbose'])
    output_control.add_argument("--stream-log-level", type=str, help=HELP_MESSAGES['stream_log_level'])


def add_config_arguments(parser):
    parser.add_argument('--config-file', '-c', type=str, default=DEFAULT_CONFIG_FILE,
                        help=HELP_MESSAGES['config_file'])
    parser.add_argument('--param', '-p', dest='params', action='append', default=[], metavar='KEY=VALUE',
                        help=HELP_MESSAGES['params'])
    parser.add_argument('--seed', type=int, default=None, help=HELP_MESSAGES['seed'])


def add_run_arguments(parser):
    add_config_arguments(parser)
    parser.add_argument('--adapter', '-a', type=str, default=None, help=HELP_MESSAGES['adapter'])

    output_args = parser.add_argument_group("Result Files")
    output_args.add_argument('--csv-file', type=str, default=None, help=HELP_MESSAGES['csv_file'])
    output_args.add_argument('--no-csv', action='store_true', help=HELP_MESSAGES['no_csv'])
    output_args.add_argument('--output-format', '-f', nargs='+', default=[],
                             choices=[f.value for f in OUTPUT_FORMATS], help=HELP_MESSAGES['output_format'])
    output_args.add_argument('--no-progress', action='store_true', help=HELP_MESSAGES['no_progress'])

    add_universal_arguments(parser)


def add_configview_arguments(parser):
    add_config_arguments(parser)
    add_universal_arguments(parser)


def build_parser():
    parser = argparse.ArgumentParser(prog="cachepounder",
                                     description="Multi-threaded load generator and validator for caches")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    commands = parser.add_subparsers(dest="command", required=True)

    run_parser = commands.add_parser("run", description=HELP_MESSAGES['run'], help=HELP_MESSAGES['run'])
    configview_parser = commands.add_parser("configview", description=HELP_MESSAGES['configview'],
                                            help=HELP_MESSAGES['configview'])

    add_run_arguments(run_parser)
    add_configview_arguments(configview_parser)
    return parser


def parse_arguments(argv=None):
    """Parse command-line arguments.

    Returns:
        argparse.Namespace: Parsed and validated arguments.
    """
    parser = build_parser()
    if argv is None and len(sys.argv) == 1:
        parser.print_help(sys.stderr)
        sys.exit(EXIT_CODE.INVALID_ARGUMENTS)

    parsed_args = parser.parse_args(argv)
    validate_args(parsed_args)
    parsed_args.params = parse_params(parsed_args.params)
    return parsed_args


def parse_params(params):
    """
    Turn ["key=value", ...] into a dict, parsing values as YAML scalars so
    that "8" becomes 8 and "true" becomes True.
    """
    parsed = {}
    for param in params or []:
        key, _, value = param.partition('=')
        if not value.strip():
            parsed[key.strip()] = None
            continue
        try:
            parsed[key.strip()] = yaml.safe_load(value)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Cannot parse --param value for {key.strip()}: {value!r}",
                parameter=key.strip(),
                actual=value,
                suggestion="Quote the value or use a plain YAML scalar such as 8, true or 1G",
                code=ErrorCode.CONFIG_PARSE_ERROR,
            ) from e
    return parsed


def validate_args(args):
    error_messages = []
    for param in getattr(args, 'params', None) or []:
        key, sep, _ = param.partition('=')
        if not sep or not key.strip():
            error_messages.append(f"Invalid --param '{param}'. Expected the form key=value")

    if getattr(args, 'no_csv', False) and getattr(args, 'csv_file', None):
        error_messages.append("--csv-file and --no-csv cannot be used together")

    if error_messages:
        for msg in error_messages:
            print(msg)

        sys.exit(EXIT_CODE.INVALID_ARGUMENTS)
