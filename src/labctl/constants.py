"""Application-wide constants for labctl.

Constants that define application behavior.
For user-configurable settings (install path, port, TLS, extension),
see config.py.
"""

import os

__all__ = [
    # Application identity
    "APP_NAME",
    "HOME_ENV_VAR",
    # Controller files (relative to the home directory)
    "CONFIG_FILENAME",
    "LOG_FILENAME",
    "PID_FILENAME",
    "CERT_FILENAME",
    "KEY_FILENAME",
    "CONTROLLER_LOG_FILENAME",
    # Configuration defaults
    "DEFAULT_INSTALL_DIRNAME",
    "DEFAULT_PORT",
    "DEFAULT_USE_TLS",
    "DEFAULT_USE_EXTENSION",
    "MIN_PORT",
    "MAX_PORT",
    # Process supervision
    "SETTLE_INTERVAL_SECONDS",
    "SERVER_BIND_ADDRESS",
    "TOKEN_URL_PATTERN",
    # Installer
    "SYSTEM_PACKAGES",
    "CORE_PACKAGES",
    "EXTENSION_PACKAGES",
    "TLS_CERT_DAYS",
    "TLS_KEY_BITS",
    # TLS certificate monitoring
    "CERT_EXPIRY_WARNING_DAYS",
    "CERT_EXPIRY_CRITICAL_DAYS",
    # Public address lookup
    "PUBLIC_IP_URL",
    "PUBLIC_IP_TIMEOUT_SECONDS",
    # Tokenizer trainer
    "SPM_TRAIN_BINARY",
    "DEFAULT_MAX_SENTENCES",
    "BOS_TOKEN",
    "EOS_TOKEN",
    "SPM_MODEL_TYPE",
]

# ============================================================================
# Application Identity
# ============================================================================

# Application name used for directory names, logger names, etc.
APP_NAME: str = "labctl"

# Overrides the home directory all controller files are derived from.
HOME_ENV_VAR: str = "LABCTL_HOME"

# ============================================================================
# Controller Files
# ============================================================================

# Stored directly in the controller home directory
CONFIG_FILENAME: str = ".jupyterlab-controller.conf"
LOG_FILENAME: str = "jupyterlab.log"
PID_FILENAME: str = "jupyterlab.pid"
CERT_FILENAME: str = "jupyter.crt"
KEY_FILENAME: str = "jupyter.key"

# Structured controller log, stored under the platform state directory
CONTROLLER_LOG_FILENAME: str = "controller.jsonl"

# ============================================================================
# Configuration Defaults
# ============================================================================

DEFAULT_INSTALL_DIRNAME: str = "jupyterlab_venv"
DEFAULT_PORT: int = 8888
DEFAULT_USE_TLS: bool = False
DEFAULT_USE_EXTENSION: bool = False

MIN_PORT: int = 1
MAX_PORT: int = 65535

# ============================================================================
# Process Supervision
# ============================================================================

# Pause after launching the server before checking it is still alive
SETTLE_INTERVAL_SECONDS: float = 3.0

SERVER_BIND_ADDRESS: str = "0.0.0.0"

# Access URL printed by JupyterLab, e.g. http://host:8888/lab?token=abc123
TOKEN_URL_PATTERN: str = r"https?://[^ ]*token=[0-9a-f]+"

# ============================================================================
# Installer
# ============================================================================

SYSTEM_PACKAGES: tuple[str, ...] = (
    "python3",
    "python3-venv",
    "python3-pip",
    "openssl",
    "software-properties-common",
    "curl",
)
CORE_PACKAGES: tuple[str, ...] = ("jupyterlab", "ipykernel")
EXTENSION_PACKAGES: tuple[str, ...] = ("jupyterlab-lsp",)

# Self-signed certificate parameters
TLS_CERT_DAYS: int = 365
TLS_KEY_BITS: int = 2048

CERT_EXPIRY_WARNING_DAYS: int = 14  # Warning if expires within 14 days
CERT_EXPIRY_CRITICAL_DAYS: int = 7  # Critical if expires within 7 days

# ============================================================================
# Public Address Lookup
# ============================================================================

PUBLIC_IP_URL: str = os.environ.get("LABCTL_PUBLIC_IP_URL", "https://ifconfig.co/ip")
PUBLIC_IP_TIMEOUT_SECONDS: float = 5.0

# ============================================================================
# Tokenizer Trainer
# ============================================================================

SPM_TRAIN_BINARY: str = "spm_train"
DEFAULT_MAX_SENTENCES: int = 50_000_000
BOS_TOKEN: str = "<BOS>"
EOS_TOKEN: str = "<EOS>"
SPM_MODEL_TYPE: str = "unigram"
