# tests/conftest.py
# Settings and the engine are built at import time, so the environment is
# pointed at a throwaway SQLite database before anything from gameledger loads.
import os
import tempfile

_tmp_dir = tempfile.mkdtemp(prefix="gameledger-tests-")

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_tmp_dir, 'test.db')}"
os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["MEDIA_ROOT"] = os.path.join(_tmp_dir, "media")
os.environ["SENDGRID_API_KEY"] = ""
os.environ["ENVIRONMENT"] = "test"
# Google sign-in is switched on, GitHub stays off
os.environ["GOOGLE_CLIENT_ID"] = "test-google-client"
os.environ["GOOGLE_CLIENT_SECRET"] = "test-google-secret"
os.environ["GITHUB_CLIENT_ID"] = ""
