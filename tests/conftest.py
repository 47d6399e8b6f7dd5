from __future__ import annotations

import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Integration-only settings (API keys) may live in .env; unit tests never need them.
load_dotenv(dotenv_path=ROOT / ".env", override=False)
