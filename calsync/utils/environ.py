# ╔════════════════════════════════════════════════════════════════════════════╗
# ║                       ENVIRONMENT CONFIGURATION                            ║
# ║    Centralized access and type conversion for environment variables       ║
# ║              and GitHub Actions style workflow inputs.                     ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# Standard library imports
import os
from typing import Optional

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ HELPER FUNCTIONS                                                           ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# --- get_bool_env ---
# Retrieves an environment variable and interprets it as a boolean.
# Considers '1', 'true', 'yes' (case-insensitive) as True.
# Args:
#     var_name: The name of the environment variable.
#     default: The default boolean value if the variable is not set.
# Returns: The boolean value of the environment variable or the default.
def get_bool_env(var_name: str, default: bool = False) -> bool:
    val = os.getenv(var_name, str(default)).lower()
    return val in ("1", "true", "yes")

# --- get_str_env ---
# Retrieves an environment variable as a string.
# Args:
#     var_name: The name of the environment variable.
#     default: The default string value if the variable is not set.
# Returns: The string value of the environment variable or the default.
def get_str_env(var_name: str, default: Optional[str] = "") -> Optional[str]:
    return os.getenv(var_name, default)

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ WORKFLOW INPUTS                                                            ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# --- input_env_names ---
# Lists the environment variable names an action input may arrive under.
# The runner exports `INPUT_<NAME>` with spaces replaced by underscores and
# hyphens kept; composite actions and local runs usually use underscores.
# Args:
#     name: The input name as declared in action.yml (e.g. 'json-path').
# Returns: Candidate variable names, most specific first.
def input_env_names(name: str) -> list:
    primary = "INPUT_" + name.replace(" ", "_").upper()
    fallback = primary.replace("-", "_")
    return [primary] if fallback == primary else [primary, fallback]

# --- get_input ---
# Reads a workflow input, stripped of surrounding whitespace.
# Args:
#     name: The input name.
#     default: Value returned when the input is unset or blank.
# Returns: The input value or the default.
def get_input(name: str, default: str = "") -> str:
    for var_name in input_env_names(name):
        val = os.getenv(var_name)
        if val is not None and val.strip():
            return val.strip()
    return default

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ CORE CONFIGURATION VARIABLES                                               ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# Debug mode flag; RUNNER_DEBUG is set by GitHub when step debugging is enabled
DEBUG: bool = get_bool_env("DEBUG", False) or get_str_env("RUNNER_DEBUG", "") == "1"

# True when running inside a GitHub Actions job
GITHUB_ACTIONS: bool = get_bool_env("GITHUB_ACTIONS", False)

# Optional directory for rotating log files (console only when unset)
LOG_DIR: str = get_str_env("LOG_DIR", "")
