import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Caller-context currency used when a request or CLI run does not pass one
DEFAULT_CURRENCY = os.getenv("FINANCE_DEFAULT_CURRENCY", "INR")
DEFAULT_CURRENCY_SYMBOL = os.getenv("FINANCE_DEFAULT_CURRENCY_SYMBOL", "₹")

# Optional JSON file that replaces the built-in bank/broker templates
TEMPLATES_PATH = os.getenv("FINANCE_TEMPLATES_PATH") or None

LOG_LEVEL = os.getenv("FINANCE_LOG_LEVEL", "INFO")

# Tool server
API_HOST = os.getenv("FINANCE_API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("FINANCE_API_PORT", "8001"))
