"""
Help Text Constants

Help strings for the rollup-stream commands and their options, plus the exit
codes the commands return.
"""

# Exit codes for different error types
class ExitCodes:
    SUCCESS = 0
    GENERAL_ERROR = 1
    MISSING_REQUIRED_OPTION = 2


# Command help texts
BUNDLE_HELP = "Bundle an entry module (or a configuration file) and write the output."
BACKENDS_HELP = "List the registered bundling backends."
ENV_HELP = "Show the environment variables rollup-stream reads and validate them."

# Option help texts - Bundle command
BUNDLE_ENTRY_HELP = "Entry module to bundle. Omit when --config provides the entry."

BUNDLE_CONFIG_HELP = (
    "Path to a configuration file (.py, .yaml, .yml or .json). "
    "Defaults to $ROLLUP_STREAM_CONFIG when no entry is given."
)

BUNDLE_OUTPUT_HELP = "File to write the bundle to ('-' for stdout)."

BUNDLE_SOURCE_MAP_HELP = "Append an inline source map to the bundle."

BUNDLE_CACHE_HELP = (
    "JSON file holding the transform cache. It is read before bundling and "
    "rewritten afterwards, so unchanged modules are not transformed again."
)

BUNDLE_BACKEND_HELP = "Registered backend to bundle with (default: $ROLLUP_STREAM_BACKEND or builtin)."
