"""
Test environment.

Settings are read when `seva.config` is first imported, so the database
and environment must be configured before any test module imports seva.
"""

import os
import tempfile

TEST_DIR = tempfile.mkdtemp(prefix="seva-tests-")
TEST_DB_PATH = os.path.join(TEST_DIR, "seva-test.db")

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ["ENVIRONMENT"] = "development"
os.environ["DEBUG"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["QR_BASE_URL"] = "https://seva.test/q"
for key in ("GRAFANA_HOST", "GRAFANA_API_KEY", "GRAFANA_INSTANCE_ID"):
    os.environ.pop(key, None)
