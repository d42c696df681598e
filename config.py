"""Configuration settings for the PE Class Assistant."""

import json
import logging
import os

# --- API Key Loading ---
# Prefer the environment, fall back to a private keys.json file
# with the format: {"GEMINI_API_KEY": "YOUR_API_KEY"}
API_KEY_ENV_VAR = "GEMINI_API_KEY"
KEYS_FILE_PATH = "keys.json"

GEMINI_API_KEY = os.environ.get(API_KEY_ENV_VAR)
if not GEMINI_API_KEY:
    try:
        with open(KEYS_FILE_PATH, "r", encoding="utf-8") as f:
            keys = json.load(f)
            GEMINI_API_KEY = keys.get("GEMINI_API_KEY") or None
    except (FileNotFoundError, json.JSONDecodeError) as e:
        print(f"Warning: Could not load GEMINI_API_KEY from {KEYS_FILE_PATH}: {e}")
    else:
        if not GEMINI_API_KEY:
            print(f"Warning: GEMINI_API_KEY found in {KEYS_FILE_PATH} but its value is empty or missing.")


# LLM Configuration (for core/llm_engine.py)
MODEL_NAME = "gemini-2.5-flash"

# Logging Configuration (for web_app.py)
LOG_LEVEL = logging.INFO
LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"

# Web Server Configuration
WEB_HOST = "127.0.0.1"
WEB_PORT = 5001
