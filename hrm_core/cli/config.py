# hrm_core/cli/config.py
import os
from dotenv import load_dotenv
from pathlib import Path

# This file is at <project>/hrm_core/cli/config.py; three .parent calls reach the project root
project_root = Path(__file__).parent.parent.parent.resolve()

# Load environment variables from .env file, overriding system environment variables
load_dotenv(dotenv_path=project_root / '.env', override=True)

# API configuration for CLI client communication
HRM_CLI_API_BASE_URL = os.getenv("HRM_CLI_API_BASE_URL", "http://127.0.0.1:8000")

# Session token of a superadmin, as printed by `hrm login`
HRM_CLI_TOKEN = os.getenv("HRM_CLI_TOKEN")

HRM_CLI_TIMEOUT_SECONDS = float(os.getenv("HRM_CLI_TIMEOUT_SECONDS", "30"))
