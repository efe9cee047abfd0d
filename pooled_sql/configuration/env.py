from pathlib import Path

from dotenv import find_dotenv, load_dotenv

# Project root, one level above the package
BASE_DIR = Path(__file__).resolve().parents[2]

# Load .env once; the working directory wins over the project root
load_dotenv(find_dotenv(usecwd=True))
load_dotenv(BASE_DIR / ".env")
